import unittest

from tapereader import CaptureMode, HandlerFailure
from tapereader.events import EventSource, RecordEmitter


class EventSourceTests(unittest.TestCase):

    def setUp(self):
        self.calls = []
        self.source = EventSource()

    def test_order(self):
        self.source.add_catch_all_listener(lambda event, *args: self.calls.append(('all', event) + args))
        self.source.add_listener('record', lambda *args: self.calls.append(('first',) + args))
        self.source.add_listener('record', lambda *args: self.calls.append(('second',) + args))
        self.source.fire('record', b'<<a>>')
        self.assertEqual(self.calls, [('first', b'<<a>>'), ('second', b'<<a>>'), ('all', 'record', b'<<a>>')])

    def test_failing_listener_stops_delivery(self):
        def _fail(*args):
            raise KeyError('boom')

        self.source.add_listener('scan_start', _fail)
        self.source.add_listener('scan_start', lambda: self.calls.append('later'))
        with self.assertRaises(KeyError):
            self.source.fire('scan_start')
        self.assertEqual(self.calls, [])

    def test_registration_during_delivery_applies_to_next_event(self):
        def _late():
            self.calls.append('late')

        def _register():
            self.calls.append('register')
            self.source.add_listener('tick', _late)

        self.source.add_listener('tick', _register)
        self.source.fire('tick')
        self.assertEqual(self.calls, ['register'])
        self.source.fire('tick')
        self.assertEqual(self.calls, ['register', 'register', 'late'])

    def test_remove_listener(self):
        listener = lambda *args: self.calls.append(args)
        self.source.add_listener('record', listener)
        self.source.add_catch_all_listener(listener)
        self.source.remove_listener(listener)
        self.source.fire('record', b'x')
        self.assertEqual(self.calls, [])


class RecordEmitterTests(unittest.TestCase):

    def test_emit_wraps_failure(self):
        emitter = RecordEmitter()
        emitter.set_callback(lambda data, mode: [][1])
        with self.assertRaises(HandlerFailure) as cm:
            emitter.emit(b'<<a>>', CaptureMode.IMMEDIATE)
        self.assertIsInstance(cm.exception.__cause__, IndexError)
        self.assertIn('immediate', str(cm.exception))

    def test_callback_must_be_callable(self):
        with self.assertRaises(TypeError):
            RecordEmitter().set_callback('not callable')


if __name__ == '__main__':
    unittest.main(verbosity=2)

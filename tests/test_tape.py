import io
import unittest

from tapereader.source import IterableSource, StreamSource
from tapereader.tape import TapeWindow


class TapeWindowTests(unittest.TestCase):

    def test_fill_to_size(self):
        w = TapeWindow(StreamSource(io.BytesIO(b'abcdefghij')), 4)
        self.assertEqual(w.ensure_data(), 4)
        self.assertEqual(bytes(w), b'abcd')
        self.assertFalse(w.exhausted)

    def test_short_reads_are_repeated(self):
        w = TapeWindow(IterableSource([b'ab', b'c', b'defgh']), 5)
        w.ensure_data()
        self.assertEqual(bytes(w), b'abcde')
        self.assertEqual(w.bytes_read, 5)

    def test_refill_loads_fresh_bytes_after_trim(self):
        w = TapeWindow(StreamSource(io.BytesIO(b'abcdefghij')), 4)
        w.ensure_data()
        w.trim(3)
        w.ensure_data()
        self.assertEqual(bytes(w), b'defgh')
        self.assertEqual(w.base, 3)

    def test_no_refill_without_trim(self):
        w = TapeWindow(StreamSource(io.BytesIO(b'abcdefghij')), 4)
        w.ensure_data()
        self.assertEqual(w.ensure_data(), 0)
        self.assertEqual(len(w), 4)

    def test_exhausted(self):
        w = TapeWindow(StreamSource(io.BytesIO(b'abc')), 8)
        self.assertEqual(w.ensure_data(), 3)
        self.assertTrue(w.exhausted)
        self.assertEqual(w.ensure_data(), 0)

    def test_trim_shifts_cursor(self):
        w = TapeWindow(StreamSource(io.BytesIO(b'abcdefgh')), 8)
        w.ensure_data()
        w.cursor = 6
        self.assertEqual(w.trim(4), 4)
        self.assertEqual(w.cursor, 2)
        self.assertEqual(bytes(w), b'efgh')

    def test_trim_clamps(self):
        w = TapeWindow(StreamSource(io.BytesIO(b'abcdefgh')), 8)
        w.ensure_data()
        w.cursor = 2
        w.trim(5)
        self.assertEqual(w.cursor, 0)
        self.assertEqual(w.trim(100), 3)
        self.assertEqual(len(w), 0)
        self.assertEqual(w.trim(-1), 0)
        self.assertEqual(w.base, 8)

    def test_positions(self):
        w = TapeWindow(StreamSource(io.BytesIO(b'0123456789')), 10)
        w.ensure_data()
        w.trim(4)
        self.assertEqual(w.absolute(1), 5)
        self.assertEqual(w.relative(7), 3)
        self.assertEqual(w.relative(2), 0)
        self.assertEqual(w.find(b'78'), 3)
        self.assertEqual(w.find(b'34'), -1)
        self.assertEqual(w.slice(1, 3), b'56')


if __name__ == '__main__':
    unittest.main(verbosity=2)

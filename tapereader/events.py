"""
Listener registration and record emission.
"""

from collections import defaultdict
from typing import Any, Callable, Dict, List, Optional, Tuple

from .errors import HandlerFailure


class EventSource:
    """Synchronous listener registry for the scan events.

    Every listener runs on the scanning thread, inside `fire`, before the scan
    moves on. A listener that raises stops the delivery of that event: the
    listeners after it are not called and the exception leaves `fire`.
    """

    def __init__(self):
        self._listeners: Dict[str, List[Callable]] = defaultdict(list)
        self._catch_all_listeners: List[Callable] = []

    def add_listener(self, event: str, listener: Callable) -> None:
        """Register `listener` for `event`; registering it twice has no effect"""
        if listener not in self._listeners[event]:
            self._listeners[event].append(listener)

    def remove_listener(self, listener: Callable) -> None:
        """Unregister `listener` from every event, catch-all included"""
        for event_listeners in self._listeners.values():
            if listener in event_listeners:
                event_listeners.remove(listener)
        self.remove_catch_all_listener(listener)

    def add_catch_all_listener(self, listener: Callable) -> None:
        """Register a listener called as ``listener(event, *args)`` for every event"""
        if listener not in self._catch_all_listeners:
            self._catch_all_listeners.append(listener)

    def remove_catch_all_listener(self, listener: Callable) -> None:
        if listener in self._catch_all_listeners:
            self._catch_all_listeners.remove(listener)

    def auto_listen(self, observer: Any, prefix: str = "_on_") -> None:
        """Register every callable attribute of `observer` named ``<prefix><event>``

        An observer with a ``_on_record`` method receives the ``record`` event,
        one with ``_on_scan_end`` receives the ScanSummary.
        """
        for attr_name in dir(observer):
            if attr_name.startswith(prefix):
                attr = getattr(observer, attr_name)
                if callable(attr):
                    self.add_listener(attr_name[len(prefix) :], attr)

    def _deliveries(self, event: str, args: Tuple[Any, ...]) -> List[Tuple[Callable, Tuple[Any, ...]]]:
        # snapshot taken before the first call, so listeners may (un)register while an event is delivered
        targeted = [(listener, args) for listener in self._listeners.get(event, ())]
        catch_all = [(listener, (event,) + args) for listener in self._catch_all_listeners]
        return targeted + catch_all

    def fire(self, event: str, *args: Any) -> None:
        """Deliver `event` to its listeners, then to the catch-all listeners.

        Within each group listeners are called in registration order. A listener
        added or removed during delivery takes effect from the next event.

        Raises:
            Whatever a listener raises, unchanged; the remaining listeners are skipped
        """
        for listener, call_args in self._deliveries(event, args):
            listener(*call_args)


class RecordEmitter(EventSource):
    """Hands finished records to the registered listeners.

    Events:
        RecordEmitter.RECORD_EVENT (str): Fired once per record with the captured bytes and
            the CaptureMode as *args
    """

    RECORD_EVENT = "record"

    def __init__(self):
        super().__init__()
        self._callback: Optional[Callable] = None

    def set_callback(self, callback: Callable[..., Any]):
        """Set the record handler, replacing the one set by a previous call.

        Listeners added through `add_listener` are kept.

        Args:
            callback: Called as ``callback(data, mode)`` for every record
        """
        if not callable(callback):
            raise TypeError(f"callback must be callable, got {type(callback).__name__}")
        if self._callback is not None:
            self.remove_listener(self._callback)
        self._callback = callback
        self.add_listener(RecordEmitter.RECORD_EVENT, callback)
        return self

    def emit(self, data: bytes, mode) -> None:
        """Deliver one record.

        Raises:
            HandlerFailure: If a listener raised; the listener's exception is the cause
        """
        try:
            self.fire(RecordEmitter.RECORD_EVENT, data, mode)
        except Exception as exc:
            raise HandlerFailure(f"Record handler failed on a {mode.name.lower()} record: {exc!r}") from exc

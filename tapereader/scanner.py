"""
Marker scanning over a TapeWindow.

The scanner is a two state machine. While SEARCHING it looks for a start
marker and, when the matching end marker is visible in the same window,
emits the record straight away. Otherwise it switches to COLLECTING and
accumulates bytes across refills until the end marker shows up.
"""

import logging
from collections import namedtuple
from enum import Enum
from typing import Callable, List, Optional, Union

from .errors import InvalidConfiguration
from .tape import TapeWindow

logger = logging.getLogger(__name__)

CaptureMode = Enum("CaptureMode", "IMMEDIATE ACCUMULATED")
ScanState = Enum("ScanState", "SEARCHING COLLECTING")

MarkerType = Union[str, bytes, bytearray]
EmitCallback = Callable[[bytes, CaptureMode], None]


def as_marker(value: Optional[MarkerType], which: str) -> bytes:
    if value is None:
        raise InvalidConfiguration(f"Invalid state: {which} string not set.")
    if isinstance(value, str):
        value = value.encode("utf-8")
    elif isinstance(value, (bytes, bytearray, memoryview)):
        value = bytes(value)
    else:
        raise InvalidConfiguration(f"{which.capitalize()} marker must be bytes or str, got {type(value).__name__}")
    if not value:
        raise InvalidConfiguration(f"Invalid state: {which} string is empty.")
    return value


class Markers(namedtuple("Markers", ["start", "end"])):
    """The literal start/end byte sequences delimiting a record."""

    __slots__ = ()

    @classmethod
    def create(cls, start: Optional[MarkerType], end: Optional[MarkerType]) -> "Markers":
        """Validate and normalize a marker pair; str markers are UTF-8 encoded.

        Raises:
            InvalidConfiguration: If a marker is missing, empty or not bytes/str
        """
        return cls(as_marker(start, "start"), as_marker(end, "end"))

    @property
    def start_len(self) -> int:
        return len(self.start)

    @property
    def end_len(self) -> int:
        return len(self.end)

    @property
    def carry(self) -> int:
        """Bytes a window must keep so that no marker is cut by a trim."""
        return max(self.start_len, self.end_len) - 1


class _Capture:
    """Bytes of an open record, gathered across window refills."""

    __slots__ = ("parts", "size", "end_floor")

    def __init__(self, head: bytes, end_floor: int) -> None:
        self.parts: List[bytes] = [head]
        self.size = len(head)
        # source position of the first byte after the start marker
        self.end_floor = end_floor

    def append(self, data: bytes) -> None:
        if data:
            self.parts.append(data)
            self.size += len(data)

    def join(self) -> bytes:
        return b"".join(self.parts)


class MarkerScanner:
    """Walks a TapeWindow from its cursor and emits every complete record.

    Args:
        markers: Start/end marker pair
        emit: Called as ``emit(data, mode)`` once per record, in source order
    """

    def __init__(self, markers: Markers, emit: EmitCallback) -> None:
        self._markers = markers
        self._emit = emit
        self._capture: Optional[_Capture] = None
        self.immediate = 0
        self.accumulated = 0

    @property
    def state(self) -> ScanState:
        return ScanState.SEARCHING if self._capture is None else ScanState.COLLECTING

    @property
    def pending(self) -> int:
        """Number of bytes held by the open capture."""
        return 0 if self._capture is None else self._capture.size

    def discard(self) -> Optional[bytes]:
        """Drop the open capture, returning its bytes (None when searching)."""
        capture, self._capture = self._capture, None
        return None if capture is None else capture.join()

    def scan(self, window: TapeWindow) -> int:
        """Run one pass over the window.

        Returns:
            The window offset up to which bytes are consumed; the caller may trim there
        """
        while True:
            if self._capture is None:
                consumed = self._search(window)
            else:
                consumed = self._collect(window)
            if consumed is not None:
                return consumed

    def _search(self, window: TapeWindow) -> Optional[int]:
        start, end = self._markers
        s = window.find(start, window.cursor)
        if s < 0:
            # keep a tail that may hold the head of a start marker
            return max(window.cursor, len(window) - (self._markers.start_len - 1))

        body = s + self._markers.start_len
        e = window.find(end, body)
        if e >= 0:
            stop = e + self._markers.end_len
            window.cursor = stop
            self.immediate += 1
            self._emit(window.slice(s, stop), CaptureMode.IMMEDIATE)
            return None

        self._capture = _Capture(window.slice(s), window.absolute(body))
        window.cursor = len(window)
        logger.debug("record opened at %d, collecting", window.absolute(s))
        return max(0, len(window) - (self._markers.end_len - 1))

    def _collect(self, window: TapeWindow) -> Optional[int]:
        capture = self._capture
        end_len = self._markers.end_len
        offset = max(window.relative(capture.end_floor), window.cursor - (end_len - 1))
        e = window.find(self._markers.end, offset)
        if e >= 0:
            stop = e + end_len
            capture.append(window.slice(window.cursor, stop))
            window.cursor = stop
            self._capture = None
            self.accumulated += 1
            self._emit(capture.join(), CaptureMode.ACCUMULATED)
            return None

        capture.append(window.slice(window.cursor))
        window.cursor = len(window)
        return max(0, len(window) - (end_len - 1))

"""
One scan of one source: markers, window and scanner bundled together.
"""

import logging
from collections import namedtuple
from typing import Callable, Optional

from .errors import TapeReaderException
from .scanner import EmitCallback, Markers, MarkerScanner
from .tape import TapeWindow

logger = logging.getLogger(__name__)

ScanSummary = namedtuple(
    "ScanSummary", ["records", "immediate", "accumulated", "bytes_read", "unterminated", "cancelled"]
)
ScanSummary.__doc__ = """Outcome of a finished scan.

records: number of emitted records (immediate + accumulated)
bytes_read: bytes pulled from the source
unterminated: bytes of a record left open at the end of the scan, or None
cancelled: the scan stopped on request before the source was exhausted
"""


class ScanSession:
    """Drives a MarkerScanner over a TapeWindow until the source is exhausted.

    A session is single use. Build a new one for every scan so that no buffer,
    cursor or open capture leaks from one scan into the next.
    """

    def __init__(self, markers: Markers, window: TapeWindow, emit: EmitCallback) -> None:
        self.markers = markers
        self.window = window
        self.scanner = MarkerScanner(markers, emit)
        self._finished = False

    def run(self, should_stop: Optional[Callable[[], bool]] = None) -> ScanSummary:
        """Scan the whole source.

        Args:
            should_stop: Polled between window passes; returning True ends the scan early

        Returns:
            A ScanSummary; a record still open when the scan ends is reported
            in `unterminated` and never emitted
        """
        if self._finished:
            raise TapeReaderException("Invalid state: scan session already used.")
        self._finished = True

        window = self.window
        cancelled = False
        passes = 0
        while True:
            if should_stop is not None and should_stop():
                cancelled = True
                logger.debug("scan cancelled after %d passes", passes)
                break
            window.ensure_data()
            consumed = self.scanner.scan(window)
            passes += 1
            if window.exhausted:
                break
            window.trim(consumed)

        unterminated = self.scanner.discard()
        logger.debug(
            "scan finished: %d passes, %d bytes, %d records",
            passes,
            window.bytes_read,
            self.scanner.immediate + self.scanner.accumulated,
        )
        return ScanSummary(
            records=self.scanner.immediate + self.scanner.accumulated,
            immediate=self.scanner.immediate,
            accumulated=self.scanner.accumulated,
            bytes_read=window.bytes_read,
            unterminated=unterminated,
            cancelled=cancelled,
        )

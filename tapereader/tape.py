"""
TapeWindow: a sliding window over a chunk source.

New chunks are appended to the end of the window while the processed
prefix is dropped from the beginning, so only a bounded part of the tape
is held in memory at any time.
"""

import logging
from typing import Optional

from .search import Finder, PythonFinder
from .source import ChunkSource

logger = logging.getLogger(__name__)


class TapeWindow:
    """
    Bounded in-memory buffer of not yet fully processed source bytes.

    Offsets handed out by the window (including `cursor`) are relative to the
    current start of the buffer. `base` counts the bytes that were dropped
    before it, so ``base + offset`` is the position in the source.
    """

    def __init__(self, source: ChunkSource, size: int, finder: Optional[Finder] = None) -> None:
        """Initialize the window.

        Args:
            source: Where chunks are read from
            size: Number of fresh bytes to load on each refill
            finder: Marker search backend (default: PythonFinder)
        """
        self._source = source
        self._size = size
        self._finder = finder or PythonFinder()
        self._buffer = bytearray()
        self._base = 0
        self._fresh = 0
        self._bytes_read = 0
        self._exhausted = False
        self.cursor = 0

    @property
    def size(self) -> int:
        return self._size

    @property
    def base(self) -> int:
        return self._base

    @property
    def exhausted(self) -> bool:
        """True once the source has reported end of input."""
        return self._exhausted

    @property
    def bytes_read(self) -> int:
        return self._bytes_read

    def ensure_data(self) -> int:
        """Refill the window from the source.

        Keeps reading until `size` fresh bytes were appended since the last
        trim or the source is exhausted; a single read may come back short.

        Returns:
            Number of bytes appended by this call
        """
        appended = 0
        while not self._exhausted and self._fresh < self._size:
            chunk = self._source.read_chunk(self._size - self._fresh)
            if not chunk:
                self._exhausted = True
                logger.debug("source exhausted after %d bytes", self._bytes_read)
                break
            self._buffer += chunk
            self._fresh += len(chunk)
            appended += len(chunk)
        self._bytes_read += appended
        return appended

    def trim(self, offset: int) -> int:
        """Drop the bytes strictly before `offset`.

        Args:
            offset: Window offset of the first byte to keep

        Returns:
            Number of bytes dropped. `cursor` is shifted by the same amount and
            never goes below zero.
        """
        offset = max(0, min(offset, len(self._buffer)))
        if offset:
            del self._buffer[:offset]
            self._base += offset
        self.cursor = max(0, self.cursor - offset)
        self._fresh = 0
        return offset

    def find(self, needle: bytes, start: int = 0) -> int:
        return self._finder.find(self._buffer, needle, start)

    def slice(self, start: int, stop: Optional[int] = None) -> bytes:
        return bytes(self._buffer[start:stop])

    def absolute(self, offset: int) -> int:
        return self._base + offset

    def relative(self, position: int) -> int:
        """Window offset of source `position`, clamped to the start of the window."""
        return max(0, position - self._base)

    def __len__(self) -> int:
        return len(self._buffer)

    def __bytes__(self) -> bytes:
        return bytes(self._buffer)

"""
Chunk sources: the collaborators a scan reads bytes from.

A source hands out successive chunks of at most the requested size and
signals end of input with an empty ``bytes``. It owns its handle and
releases it exactly once.
"""

import logging
import os
from abc import ABCMeta, abstractmethod
from typing import Any, BinaryIO, Iterable, Iterator, Optional

from .errors import SourceUnavailable

logger = logging.getLogger(__name__)


class ChunkSource(metaclass=ABCMeta):
    """Abstract byte source consumed by a scan."""

    @abstractmethod
    def read_chunk(self, size: int) -> bytes:
        """Read up to `size` bytes.

        Args:
            size: Maximum number of bytes to return

        Returns:
            The next bytes of the source; ``b""`` once the input is exhausted.
            A shorter, non-empty result does not mean end of input.

        Raises:
            SourceUnavailable: When the underlying handle cannot be read
        """

    @abstractmethod
    def release(self) -> None:
        """Release the underlying handle. Calling it again has no effect."""

    def __enter__(self):
        return self

    def __exit__(self, exc_type, exc_val, exc_tb):
        self.release()
        return False


class StreamSource(ChunkSource):
    """Reads from a binary file-like object.

    Args:
        stream: Object with a ``read(size)`` method returning bytes
        owns: Close the stream on release (default: True)
        name: Label used in error messages and logs
    """

    def __init__(self, stream: BinaryIO, owns: bool = True, name: Optional[str] = None) -> None:
        self._stream = stream
        self._owns = owns
        self._released = False
        self.name = name or getattr(stream, "name", None) or type(stream).__name__

    @property
    def released(self) -> bool:
        return self._released

    def read_chunk(self, size):
        if self._released:
            raise SourceUnavailable(f"Source `{self.name}` was already released.")
        try:
            data = self._stream.read(size)
        except OSError as exc:
            raise SourceUnavailable(f"Failed to read from `{self.name}`: {exc}") from exc
        if data is None:
            raise SourceUnavailable(f"Source `{self.name}` is non-blocking and has no data ready.")
        if isinstance(data, str):
            raise SourceUnavailable(f"Source `{self.name}` is not opened in binary mode.")
        return bytes(data)

    def release(self):
        if self._released:
            return
        self._released = True
        if self._owns:
            try:
                self._stream.close()
            except OSError as exc:
                raise SourceUnavailable(f"Failed to close `{self.name}`: {exc}") from exc
        logger.debug("released source %s", self.name)


class FileSource(StreamSource):
    """Opens a file from disk in binary mode.

    Raises:
        SourceUnavailable: If the path is not a readable regular file or cannot be opened
    """

    def __init__(self, path: "os.PathLike[str] | str") -> None:
        filename = os.fspath(path)
        if not os.path.isfile(filename) or not os.access(filename, os.R_OK):
            raise SourceUnavailable(f"File: `{filename}` is not readable.")
        try:
            stream = open(filename, "rb")
        except OSError as exc:
            raise SourceUnavailable(
                f"Failed to open file and acquire resource handle - file: `{filename}`."
            ) from exc
        super().__init__(stream, owns=True, name=filename)
        self.path = filename


class IterableSource(ChunkSource):
    """Feeds a scan from an iterable of byte chunks.

    Chunks larger than the requested size are split and the remainder is
    handed out on the next read, so chunk boundaries are decided by the
    iterable and never exceed what the window asked for.
    """

    def __init__(self, chunks: Iterable[bytes], name: str = "iterable") -> None:
        self._chunks: Optional[Iterator[bytes]] = iter(chunks)
        self._pending = b""
        self.name = name

    def read_chunk(self, size):
        if self._chunks is None:
            raise SourceUnavailable(f"Source `{self.name}` was already released.")
        while not self._pending:
            try:
                self._pending = bytes(next(self._chunks))
            except StopIteration:
                return b""
        result, self._pending = self._pending[:size], self._pending[size:]
        return result

    def release(self):
        chunks, self._chunks = self._chunks, None
        close = getattr(chunks, "close", None)
        if close is not None:
            close()


def as_source(obj: Any) -> ChunkSource:
    """Adapt `obj` into a ChunkSource.

    Args:
        obj: A ChunkSource, a filesystem path, a binary file-like object or an
            iterable of byte chunks

    Returns:
        A ChunkSource reading from `obj`
    """
    if isinstance(obj, ChunkSource):
        return obj
    if isinstance(obj, (str, os.PathLike)):
        return FileSource(obj)
    if hasattr(obj, "read"):
        return StreamSource(obj)
    if isinstance(obj, (bytes, bytearray, memoryview)):
        return IterableSource([bytes(obj)], name="bytes")
    try:
        return IterableSource(obj)
    except TypeError as exc:
        raise SourceUnavailable(f"Cannot read chunks from {type(obj).__name__}") from exc

"""tapereader extracts records delimited by a start and an end marker from tape files: byte sources written
once, in arrival order, and read sequentially. BufferedTapeReader keeps only a bounded window of the file in
memory and emits every record to the registered listeners as soon as it is complete.
"""

import logging
import sys
from enum import Enum
from typing import Any, Optional, Union

from .errors import InvalidConfiguration, TapeReaderException, UnterminatedCapture
from .events import RecordEmitter
from .scanner import Markers, MarkerType, as_marker
from .search import Finder, get_finder
from .session import ScanSession, ScanSummary
from .source import ChunkSource, StreamSource, as_source
from .tape import TapeWindow

logger = logging.getLogger(__name__)

UnterminatedPolicy = Enum("UnterminatedPolicy", "DROP WARN RAISE")

MIN_BUFFER_SIZE = 1
RECOMMENDED_BUFFER_SIZE = 1024


def _as_policy(value: Union[str, UnterminatedPolicy]) -> UnterminatedPolicy:
    if isinstance(value, UnterminatedPolicy):
        return value
    try:
        return UnterminatedPolicy[str(value).upper()]
    except KeyError:
        raise InvalidConfiguration(
            f"Unknown unterminated policy `{value}`; expected one of "
            f"{[p.name.lower() for p in UnterminatedPolicy]}"
        ) from None


class BufferedTapeReader(RecordEmitter):
    """Reads a tape file through a sliding window and emits the records found in it

    Apart from the public API of this class - an API for attaching events is inherited from events.EventSource
    which provides the following functionality

    self.add_listener(event, listener)
    self.remove_listener(listener)
    self.add_catch_all_listener(listener) - this listener receives ALL events
    self.remove_catch_all_listener(listener)
    self.auto_listen(observer, prefix="_on_") - this automatically finds and attaches methods in the `observer`
        object which are named as `_on_event` as listeners to the reader

    Events:
        Events are of the form (event, *args)

        BufferedTapeReader.SCAN_START_EVENT (str): Fired when `run` starts scanning, after the configuration
            was validated
        BufferedTapeReader.RECORD_EVENT (str): Fired once per record; delivers the record bytes (start marker
            through end marker) and a CaptureMode: IMMEDIATE when the record was found inside one window,
            ACCUMULATED when it was assembled across window refills
        BufferedTapeReader.UNTERMINATED_EVENT (str): Fired with the partial bytes when the input ends inside a
            record and the unterminated policy is WARN
        BufferedTapeReader.SCAN_END_EVENT (str): Fired with the ScanSummary when a scan completes

        Only failures of `record` listeners are wrapped in HandlerFailure. An exception raised by a
        `scan_start`, `unterminated` or `scan_end` listener propagates out of `run` unchanged; the source
        is still released.
    """

    SCAN_START_EVENT = "scan_start"
    SCAN_END_EVENT = "scan_end"
    UNTERMINATED_EVENT = "unterminated"

    def __init__(
        self,
        buffer_size: int = 65536,
        on_unterminated: Union[str, UnterminatedPolicy] = UnterminatedPolicy.DROP,
        search: Union[str, Finder, None] = "python",
    ):
        """Initialize the reader

        Args:
            buffer_size (int): Bytes loaded into the window on each refill (default: 65536)
            on_unterminated (str|UnterminatedPolicy): What to do with a record left open at end of input:
                `drop` it silently, `warn` about it or `raise` UnterminatedCapture (default: drop)
            search (str|Finder): Marker search backend, `python` or `native` (libc memmem) (default: python)
        """
        super().__init__()
        self._source: Optional[ChunkSource] = None
        self._capture_start: Optional[bytes] = None
        self._capture_end: Optional[bytes] = None
        self._cancelled = False
        self.buffer_size = buffer_size
        self.unterminated_policy = on_unterminated
        self.search = search

    @property
    def buffer_size(self) -> int:
        return self._buffer_size

    @buffer_size.setter
    def buffer_size(self, value: int) -> None:
        if isinstance(value, bool) or not isinstance(value, int):
            raise InvalidConfiguration(f"Buffersize should be an integer. Given: {value!r}")
        if value < MIN_BUFFER_SIZE:
            raise InvalidConfiguration(f"Buffersize should be at least {MIN_BUFFER_SIZE}B. Given: {value}")
        if value < RECOMMENDED_BUFFER_SIZE:
            logger.warning("buffer size of %d bytes is below the recommended %d", value, RECOMMENDED_BUFFER_SIZE)
        self._buffer_size = value

    @property
    def unterminated_policy(self) -> UnterminatedPolicy:
        return self._unterminated_policy

    @unterminated_policy.setter
    def unterminated_policy(self, value: Union[str, UnterminatedPolicy]) -> None:
        self._unterminated_policy = _as_policy(value)

    @property
    def search(self) -> Finder:
        return self._finder

    @search.setter
    def search(self, value: Union[str, Finder, None]) -> None:
        self._finder = get_finder(value)

    def set_capture_start(self, marker: MarkerType) -> "BufferedTapeReader":
        """Sets the marker which starts capturing of a record

        Bytes from the tape are collected from this marker on until the marker set with `set_capture_end` is
        found. A str is encoded as UTF-8.
        """
        self._capture_start = as_marker(marker, "start")
        return self

    def get_capture_start(self) -> Optional[bytes]:
        return self._capture_start

    def set_capture_end(self, marker: MarkerType) -> "BufferedTapeReader":
        """Sets the marker which finishes capturing of a record"""
        self._capture_end = as_marker(marker, "end")
        return self

    def get_capture_end(self) -> Optional[bytes]:
        return self._capture_end

    def open(self, source: Any, buffer_size: Optional[int] = None) -> "BufferedTapeReader":
        """Opens a source to scan. Releases any previously opened source

        Args:
            source: A file path, a binary file-like object, an iterable of byte chunks or a ChunkSource
            buffer_size (int, optional): Replaces the configured buffer size
        """
        self.close()
        if buffer_size is not None:
            self.buffer_size = buffer_size
        self._source = as_source(source)
        return self

    def close(self) -> None:
        """Releases the opened source, if any"""
        source, self._source = self._source, None
        if source is not None:
            source.release()

    def cancel(self) -> None:
        """Asks a running scan to stop at the next window boundary

        An open record is discarded, the scan ends with `cancelled` set in its summary.
        """
        self._cancelled = True

    def run(self, source: Any = None) -> ScanSummary:
        """Scans the opened source (or `source`) to its end, firing a `record` event per record

        Note:
            Attach all your listeners before calling this method. The source is released when this
            method returns or raises; call `open` again before the next run.

        Raises:
            InvalidConfiguration: When markers are missing or no source is opened
            SourceUnavailable: When the source cannot be read
            HandlerFailure: When a record listener raises
            UnterminatedCapture: When the input ends inside a record and the policy is RAISE
        """
        if source is not None:
            self.open(source)
        source, self._source = self._source, None
        if source is None:
            raise InvalidConfiguration("Invalid state: file not opened.")

        self._cancelled = False
        try:
            markers = Markers.create(self._capture_start, self._capture_end)
            window = TapeWindow(source, self._buffer_size, self._finder)
            session = ScanSession(markers, window, self.emit)
            self.fire(BufferedTapeReader.SCAN_START_EVENT)
            summary = session.run(should_stop=lambda: self._cancelled)
            if summary.unterminated is not None and not summary.cancelled:
                self._on_unterminated(summary.unterminated, window.bytes_read)
        except BaseException:
            # the scan error wins over a failure to close
            try:
                source.release()
            except Exception:
                logger.exception("failed to release source after an aborted scan")
            raise
        source.release()

        self.fire(BufferedTapeReader.SCAN_END_EVENT, summary)
        return summary

    def _on_unterminated(self, partial: bytes, bytes_read: int) -> None:
        policy = self._unterminated_policy
        msg = f"Input ended after {bytes_read} bytes inside a record; {len(partial)} bytes captured"
        if policy is UnterminatedPolicy.RAISE:
            raise UnterminatedCapture(msg, partial)
        if policy is UnterminatedPolicy.WARN:
            logger.warning(msg)
            self.fire(BufferedTapeReader.UNTERMINATED_EVENT, partial)
        else:
            logger.debug("%s; dropped", msg)

    def __enter__(self):
        """Context manager entry"""
        return self

    def __exit__(self, exc_type, exc_val, exc_tb):
        """Context manager exit - ensures close() is always called"""
        self.close()
        return False


def run(argv=None, data=None):
    """Prints every event of a scan of `data` (default: standard input)

    Usage: python -m tapereader.reader START END [BUFFER_SIZE]
    """
    argv = sys.argv[1:] if argv is None else argv
    if len(argv) not in (2, 3):
        print("usage: tapereader START END [BUFFER_SIZE]", file=sys.stderr)
        return 2
    data = sys.stdin.buffer if data is None else data

    def _catch_all(event_name, *args):
        print(f"\t{event_name} : {args}")

    try:
        buffer_size = int(argv[2]) if len(argv) == 3 else 65536
        reader = BufferedTapeReader(buffer_size=buffer_size, on_unterminated=UnterminatedPolicy.WARN)
        reader.set_capture_start(argv[0]).set_capture_end(argv[1])
    except (ValueError, TapeReaderException) as e:
        print(f"tapereader: {e}", file=sys.stderr)
        return 2
    reader.add_catch_all_listener(_catch_all)
    reader.run(StreamSource(data, owns=False))
    return 0


if __name__ == "__main__":
    sys.exit(run())

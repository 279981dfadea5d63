"""tapereader extracts records delimited by a start and an end marker from tape files via the
BufferedTapeReader class, holding only a bounded window of the file in memory.

Records are handed to listeners as soon as they are complete, together with a CaptureMode telling whether
the record was found inside one window or assembled across window refills.
"""

from tapereader.errors import (
    HandlerFailure,
    InvalidConfiguration,
    SourceUnavailable,
    TapeReaderException,
    UnterminatedCapture,
)
from tapereader.reader import BufferedTapeReader, UnterminatedPolicy
from tapereader.scanner import CaptureMode, Markers, ScanState
from tapereader.session import ScanSummary
from tapereader.source import ChunkSource, FileSource, IterableSource, StreamSource

__all__ = [
    "BufferedTapeReader",
    "CaptureMode",
    "ChunkSource",
    "FileSource",
    "HandlerFailure",
    "InvalidConfiguration",
    "IterableSource",
    "Markers",
    "ScanState",
    "ScanSummary",
    "SourceUnavailable",
    "StreamSource",
    "TapeReaderException",
    "UnterminatedCapture",
    "UnterminatedPolicy",
]

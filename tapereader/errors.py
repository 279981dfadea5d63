"""Exceptions raised by tapereader."""

from typing import Optional, Union


class TapeReaderException(Exception):
    """Base class for every error raised by the reader."""

    def __init__(self, msg: Union[str, bytes]) -> None:
        super().__init__(msg)
        self._msg: Union[str, bytes] = msg

    def __str__(self) -> str:
        if isinstance(self._msg, bytes):
            return self._msg.decode("utf-8", errors="replace")
        return str(self._msg)


class InvalidConfiguration(TapeReaderException):
    """Markers, buffer size or reader state do not allow a scan to start."""


class SourceUnavailable(TapeReaderException):
    """The chunk source could not be opened or read."""


class HandlerFailure(TapeReaderException):
    """A record listener raised; the original error is available as __cause__."""


class UnterminatedCapture(TapeReaderException):
    """Input ended while a record was still open."""

    def __init__(self, msg: Union[str, bytes], partial: Optional[bytes] = None) -> None:
        super().__init__(msg)
        self.partial: bytes = partial or b""

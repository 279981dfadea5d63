"""
Marker search backends used by the sliding window.
"""

from abc import ABCMeta, abstractmethod
from typing import Union

from ..errors import InvalidConfiguration

Haystack = Union[bytes, bytearray]


class Finder(metaclass=ABCMeta):
    """Locates a literal byte sequence inside a buffer."""

    name = "abstract"

    @abstractmethod
    def find(self, haystack: Haystack, needle: bytes, start: int = 0) -> int:
        """Return the lowest index >= `start` where `needle` begins, or -1."""

    def __repr__(self) -> str:
        return f"<{type(self).__name__} {self.name}>"


class PythonFinder(Finder):
    """Uses the builtin bytes search."""

    name = "python"

    def find(self, haystack, needle, start=0):
        return haystack.find(needle, start)


class NativeFinder(Finder):
    """Calls memmem from the C library on a zero-copy view of the buffer.

    The C library is loaded on first use; an OSError surfaces from there
    when the platform does not provide memmem.
    """

    name = "native"

    def __init__(self) -> None:
        from .libc_cffi import ffi, load_libc

        self._ffi = ffi
        self._lib = load_libc()

    def find(self, haystack, needle, start=0):
        if start < 0:
            start = 0
        remaining = len(haystack) - start
        if remaining < len(needle):
            return -1
        if not needle:
            return start
        ffi = self._ffi
        # the view must be released before the window resizes its bytearray
        with ffi.from_buffer(haystack) as view:
            base = ffi.cast("char *", view)
            found = self._lib.memmem(base + start, remaining, needle, len(needle))
            if found == ffi.NULL:
                return -1
            return found - base


_FINDERS = {
    PythonFinder.name: PythonFinder,
    NativeFinder.name: NativeFinder,
}


def get_finder(search: Union[str, Finder, None] = None) -> Finder:
    """Resolve a search backend by name.

    Args:
        search: ``"python"``, ``"native"``, a Finder instance, or None for the default

    Raises:
        InvalidConfiguration: For an unknown backend name
    """
    if search is None:
        return PythonFinder()
    if isinstance(search, Finder):
        return search
    try:
        factory = _FINDERS[str(search).lower()]
    except KeyError:
        raise InvalidConfiguration(
            f"Unknown search backend `{search}`; expected one of {sorted(_FINDERS)}"
        ) from None
    return factory()

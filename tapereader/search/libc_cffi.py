"""
CFFI bindings for the byte search routine of the C library.
The library is opened in ABI mode, nothing is compiled at install time.
"""

from cffi import FFI

ffi = FFI()

# memmem is a GNU extension, also provided by musl and the BSD libcs
ffi.cdef(
    """
    char * memmem(const char * haystack, size_t haystacklen,
                  const char * needle, size_t needlelen);
    """
)

_libc = None


def load_libc():
    """
    Load the C library exposing memmem.

    Tries the C library already linked into the interpreter first, then asks
    the dynamic loader for it by name.

    Returns:
        FFI library object with memmem

    Raises:
        OSError: If no candidate library provides memmem
    """
    global _libc
    if _libc is not None:
        return _libc

    candidates = [None, "c", "libc.so.6"]
    last_error = None
    for name in candidates:
        try:
            lib = ffi.dlopen(name)
            lib.memmem  # resolve now so a missing symbol fails here
        except (OSError, AttributeError) as e:
            last_error = e
            continue
        _libc = lib
        return lib

    raise OSError(
        "memmem could not be loaded from the C library. "
        f"Tried: {', '.join(repr(c) for c in candidates)}. Last error: {last_error}"
    )

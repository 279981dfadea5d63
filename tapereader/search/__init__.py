"""Marker search backends: pure Python and libc memmem through cffi."""

from .finder import Finder, NativeFinder, PythonFinder, get_finder

__all__ = ["Finder", "PythonFinder", "NativeFinder", "get_finder"]

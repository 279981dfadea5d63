import unittest

from tapereader import InvalidConfiguration
from tapereader.search import NativeFinder, PythonFinder, get_finder

try:
    NativeFinder()
    HAVE_MEMMEM = True
except OSError:
    HAVE_MEMMEM = False

CASES = [
    (b'xx<<AB>>yy', b'<<', 0),
    (b'xx<<AB>>yy', b'<<', 3),
    (b'xx<<AB>>yy', b'>>', 4),
    (b'xx<<AB>>yy', b'yy', 8),
    (b'xx<<AB>>yy', b'yyy', 0),
    (b'xx<<AB>>yy', b'x', 20),
    (b'aaaa', b'aa', 1),
    (b'', b'a', 0),
    (b'\x00\x01\x00\x02', b'\x00\x02', 0),
]


class PythonFinderTests(unittest.TestCase):

    def test_find(self):
        finder = PythonFinder()
        self.assertEqual(finder.find(bytearray(b'abcabc'), b'bc', 2), 4)
        self.assertEqual(finder.find(b'abc', b'd'), -1)


@unittest.skipUnless(HAVE_MEMMEM, 'memmem not available')
class NativeFinderTests(unittest.TestCase):

    def test_matches_python_finder(self):
        native = NativeFinder()
        python = PythonFinder()
        for haystack, needle, start in CASES:
            for buf in (haystack, bytearray(haystack)):
                self.assertEqual(native.find(buf, needle, start), python.find(buf, needle, start),
                                 (haystack, needle, start))

    def test_buffer_can_grow_after_search(self):
        buf = bytearray(b'abc')
        NativeFinder().find(buf, b'c')
        buf += b'def'
        del buf[:2]
        self.assertEqual(buf, bytearray(b'cdef'))


class GetFinderTests(unittest.TestCase):

    def test_default(self):
        self.assertIsInstance(get_finder(), PythonFinder)
        self.assertIsInstance(get_finder('PYTHON'), PythonFinder)

    def test_instance_passes_through(self):
        finder = PythonFinder()
        self.assertIs(get_finder(finder), finder)

    def test_unknown(self):
        with self.assertRaises(InvalidConfiguration):
            get_finder('boyer-moore')


if __name__ == '__main__':
    unittest.main(verbosity=2)

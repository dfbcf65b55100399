import math
import unittest
from concurrent.futures import ThreadPoolExecutor

import numpy as np

from twiddle_factors import Direction, complex_dtype, compute_twiddles, get_twiddles, normalize_precision


class TestPrecision(unittest.TestCase):

    def test_accepted_spellings(self):
        self.assertEqual(normalize_precision("float32"), "float32")
        self.assertEqual(normalize_precision(np.float32), "float32")
        self.assertEqual(normalize_precision("single"), "float32")
        self.assertEqual(normalize_precision(np.complex64), "float32")
        self.assertEqual(normalize_precision("float64"), "float64")
        self.assertEqual(normalize_precision("complex128"), "float64")
        self.assertEqual(complex_dtype("float32"), np.complex64)
        self.assertEqual(complex_dtype("float64"), np.complex128)

    def test_rejected(self):
        for precision in ("int32", "float16", "int8", "nonsense"):
            with self.assertRaises(ValueError):
                normalize_precision(precision)


class TestTwiddles(unittest.TestCase):

    def test_direction_sign(self):
        self.assertEqual(Direction.FORWARD.sign, -1)
        self.assertEqual(Direction.INVERSE.sign, 1)

    def test_shape_and_dtype(self):
        for precision, dtype in (("float32", np.complex64), ("float64", np.complex128)):
            twiddles = compute_twiddles(precision, 64, Direction.FORWARD)
            for t in twiddles:
                self.assertEqual(t.shape, (16,))
                self.assertEqual(t.dtype, dtype)

    def test_first_factor_is_one(self):
        for direction in Direction:
            for t in compute_twiddles("float32", 256, direction):
                self.assertEqual(t[0], 1 + 0j)

    def test_unit_magnitude(self):
        for t in compute_twiddles("float64", 1024, Direction.INVERSE):
            np.testing.assert_allclose(np.abs(t), 1.0, rtol=1e-15)

    def test_values_size_8(self):
        t1, t2, t3 = compute_twiddles("float64", 8, Direction.FORWARD)
        r = math.sqrt(0.5)
        np.testing.assert_allclose(t1, [1, r - r * 1j], atol=1e-15)
        np.testing.assert_allclose(t2, [1, -1j], atol=1e-15)
        np.testing.assert_allclose(t3, [1, -r - r * 1j], atol=1e-15)

    def test_harmonics(self):
        n = 128
        k = np.arange(n // 4)
        for direction in Direction:
            t1, t2, t3 = compute_twiddles("float64", n, direction)
            for h, t in ((1, t1), (2, t2), (3, t3)):
                expected = np.exp(direction.sign * 2j * np.pi * h * k / n)
                np.testing.assert_allclose(t, expected, atol=1e-14)

    def test_inverse_is_conjugate(self):
        forward = compute_twiddles("float64", 32, Direction.FORWARD)
        inverse = compute_twiddles("float64", 32, Direction.INVERSE)
        for f, i in zip(forward, inverse):
            np.testing.assert_allclose(i, np.conj(f), atol=1e-15)

    def test_size_2_is_empty(self):
        for t in compute_twiddles("float64", 2, Direction.FORWARD):
            self.assertEqual(t.size, 0)

    def test_cache(self):
        a = get_twiddles("float32", 64, Direction.FORWARD)
        self.assertIs(a, get_twiddles(np.complex64, 64, Direction.FORWARD))
        self.assertIsNot(a, get_twiddles("float64", 64, Direction.FORWARD))
        self.assertIsNot(a, get_twiddles("float32", 64, Direction.INVERSE))
        with self.assertRaises(ValueError):
            a.t1[1] = 0

    def test_cache_from_threads(self):
        with ThreadPoolExecutor(max_workers=8) as pool:
            tables = list(pool.map(lambda _: get_twiddles("float64", 1 << 14, Direction.INVERSE), range(32)))
        for t in tables:
            self.assertIs(t, tables[0])


if __name__ == '__main__':
    unittest.main()

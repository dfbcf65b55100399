import enum
import math
import threading
from collections import namedtuple
from logging import getLogger

import numpy as np

logger = getLogger(__name__)

DEFAULT_PRECISION = "float64"

_COMPLEX_DTYPES = {
    "float32": np.dtype(np.complex64),
    "float64": np.dtype(np.complex128),
}


class Direction(enum.Enum):
    """Transform direction; the value is the sign of the rotation angle."""
    FORWARD = -1
    INVERSE = 1

    @property
    def sign(self):
        return self.value


TwiddleSet = namedtuple("TwiddleSet", ["t1", "t2", "t3"])


def normalize_precision(precision):
    """Return "float32" or "float64" for any accepted precision spelling."""
    try:
        dtype = np.dtype(precision)
    except TypeError:
        raise ValueError(f"Unsupported precision: {precision!r}") from None
    if dtype.kind == "c":
        dtype = np.dtype(dtype.char.lower())
    if dtype.name not in _COMPLEX_DTYPES:
        raise ValueError(f"Unsupported precision: {precision!r}")
    return dtype.name


def complex_dtype(precision):
    return _COMPLEX_DTYPES[normalize_precision(precision)]


def compute_twiddles(precision, size, direction):
    # angles are evaluated in double precision and rounded once to the target
    dtype = complex_dtype(precision)
    theta = direction.sign * 2 * math.pi / size
    phi = np.arange(size // 4) * theta
    tables = []
    for harmonic in (1, 2, 3):
        t = np.empty(size // 4, dtype=dtype)
        t.real = np.cos(phi * harmonic)
        t.imag = np.sin(phi * harmonic)
        t.flags.writeable = False
        tables.append(t)
    return TwiddleSet(*tables)


_cache = {}
_cache_lock = threading.Lock()


def get_twiddles(precision, size, direction):
    """Shared, read-only twiddle set for (precision, size, direction).

    The first request for a key builds the table under a lock; every
    later request is a plain dictionary lookup.
    """
    key = (normalize_precision(precision), size, direction)
    twiddles = _cache.get(key)
    if twiddles is None:
        with _cache_lock:
            twiddles = _cache.get(key)
            if twiddles is None:
                twiddles = compute_twiddles(*key)
                _cache[key] = twiddles
                logger.debug(f"twiddle table built: precision={key[0]} size={size} direction={direction.name}")
    return twiddles

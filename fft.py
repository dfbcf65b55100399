import threading
from logging import getLogger

import numpy as np

from bit_reversal import get_bit_reversal, is_power_of_two
from butterfly import ButterflyEngine
from twiddle_factors import DEFAULT_PRECISION, Direction, complex_dtype, normalize_precision

logger = getLogger(__name__)


class FFT:
    """Mixed radix-4/radix-2 discrete Fourier transform of fixed length.

    Parameters
    ----------
    size : int
        Transform length N, a power of two greater than 1.
    precision : str or dtype
        ``"float32"`` or ``"float64"`` (complex64 / complex128 samples).

    The transform pair is unnormalised: ``inverse_transform`` after
    ``forward_transform`` returns the input scaled by N.
    """

    def __init__(self, size, precision=DEFAULT_PRECISION):
        if not isinstance(size, (int, np.integer)) or size < 2 or not is_power_of_two(size):
            raise ValueError(f"FFT size must be a power of 2 greater than 1. Given: {size}")
        self.N = int(size)
        self.precision = normalize_precision(precision)
        self.dtype = complex_dtype(self.precision)
        self.reindex = get_bit_reversal(self.N)
        self.mixers = {
            direction: ButterflyEngine(self.N, self.precision, direction)
            for direction in Direction
        }
        logger.debug(f"FFT plan ready: size={self.N} precision={self.precision}")

    def __repr__(self):
        return f"FFT(size={self.N}, precision={self.precision!r})"

    def forward_transform(self, data, output=None):
        """Forward DFT, ``X[k] = sum x[n] exp(-2j*pi*k*n/N)``.

        With ``output=None`` ``data`` is transformed in place and must be a
        writable 1-D ndarray of ``self.dtype``. Otherwise ``data`` is only
        read and the result goes to ``output``. The written array is
        returned.
        """
        return self._transform(data, output, Direction.FORWARD)

    def inverse_transform(self, data, output=None):
        """Inverse DFT without the 1/N factor; same buffer rules as
        :meth:`forward_transform`.
        """
        return self._transform(data, output, Direction.INVERSE)

    dft = forward_transform
    idft = inverse_transform

    def _transform(self, data, output, direction):
        mixer = self.mixers[direction]
        if output is None:
            self._check_buffer(data, "data")
            if data.flags.c_contiguous:
                self.reindex.permute(data)
                mixer.mix(data)
            else:
                work = np.ascontiguousarray(data)
                self.reindex.permute(work)
                data[...] = mixer.mix(work)
            return data

        self._check_buffer(output, "output")
        samples = np.asarray(data)
        if samples.shape != (self.N,):
            raise ValueError(f"Input must hold {self.N} samples. Given shape: {samples.shape}")
        if np.may_share_memory(samples, output):
            raise ValueError("Input and output buffers must not overlap")
        if output.flags.c_contiguous:
            self.reindex.permute_into(samples, output)
            mixer.mix(output)
        else:
            work = np.empty(self.N, dtype=self.dtype)
            self.reindex.permute_into(samples, work)
            output[...] = mixer.mix(work)
        return output

    def _check_buffer(self, buf, name):
        if not isinstance(buf, np.ndarray) or buf.dtype != self.dtype:
            raise TypeError(f"{name} must be a numpy array of {self.dtype}")
        if buf.shape != (self.N,):
            raise ValueError(f"{name} must hold {self.N} samples. Given shape: {buf.shape}")
        if not buf.flags.writeable:
            raise ValueError(f"{name} is read-only")


_plans = {}
_plans_lock = threading.Lock()


def get_plan(size, precision=DEFAULT_PRECISION):
    key = (size, normalize_precision(precision))
    plan = _plans.get(key)
    if plan is None:
        with _plans_lock:
            plan = _plans.get(key)
            if plan is None:
                plan = FFT(*key)
                _plans[key] = plan
    return plan


def precompute(sizes, precisions=("float32", "float64")):
    """Build every table the given sizes need, e.g. once at start-up
    before transforms are issued from several threads.
    """
    for size in sizes:
        for precision in precisions:
            get_plan(size, precision)


def _plan_for(data):
    samples = np.asarray(data)
    if samples.ndim != 1:
        raise ValueError(f"Expected a 1-D sequence. Given shape: {samples.shape}")
    precision = "float32" if samples.dtype == np.complex64 else "float64"
    return get_plan(samples.shape[0], precision), samples


def dft(data, output=None):
    """Forward DFT of a 1-D sequence; returns a new array unless ``output``
    is given. Precision follows the input: complex64 stays single, anything
    else is computed in double.
    """
    plan, samples = _plan_for(data)
    if output is None:
        output = np.empty(plan.N, dtype=plan.dtype)
    return plan.forward_transform(samples, output)


def idft(data, output=None):
    """Unnormalised inverse DFT; see :func:`dft`."""
    plan, samples = _plan_for(data)
    if output is None:
        output = np.empty(plan.N, dtype=plan.dtype)
    return plan.inverse_transform(samples, output)

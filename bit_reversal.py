import threading
from logging import getLogger

import numpy as np

logger = getLogger(__name__)


def is_power_of_two(n):
    return n > 0 and n & (n - 1) == 0


def is_power_of_four(n):
    return is_power_of_two(n) and (n.bit_length() - 1) % 2 == 0


def _double_pattern(size, span):
    # [0] -> [0, s/2] -> [0, s/2, s/4, 3s/4] -> ... until `size` entries
    pattern = [0]
    while len(pattern) < size:
        span >>= 1
        pattern += [e + span for e in pattern]
    return pattern


class BitReversalTable:
    """Digit-reversal permutation for a power-of-two length N.

    Only M offsets are stored: M = N/4 when N is a power of four, N/2
    otherwise. Sample ``k + q*M`` moves to ``pattern[k] + base[q]``, where
    ``base`` bit-reverses the leading digit q (a radix-4 digit when N is a
    power of four, a single bit otherwise).
    """

    def __init__(self, size):
        if not isinstance(size, (int, np.integer)) or size < 2 or not is_power_of_two(size):
            raise ValueError(f"FFT size must be a power of 2 greater than 1. Given: {size}")
        self.N = int(size)
        self.M = self.N // 4 if is_power_of_four(self.N) else self.N // 2
        pattern = np.array(_double_pattern(self.M, self.N), dtype=np.intp)
        pattern.flags.writeable = False
        self.pattern = pattern
        radix = self.N // self.M
        self.base = np.array(_double_pattern(radix, radix), dtype=np.intp)

        destination = (self.pattern[np.newaxis, :] + self.base[:, np.newaxis]).ravel()
        destination.flags.writeable = False
        self.destination = destination

        # every 2-cycle once; fixed points (the diagonal) need no swap
        source = np.flatnonzero(destination > np.arange(self.N))
        self._swap_a = source
        self._swap_b = destination[source]

    def __len__(self):
        return self.M

    def permute(self, data):
        """Reorder ``data`` in place by pairwise swaps."""
        held = data[self._swap_a]
        data[self._swap_a] = data[self._swap_b]
        data[self._swap_b] = held
        return data

    def permute_into(self, data, output):
        output[self.destination] = data
        return output


_cache = {}
_cache_lock = threading.Lock()


def get_bit_reversal(size):
    table = _cache.get(size)
    if table is None:
        with _cache_lock:
            table = _cache.get(size)
            if table is None:
                table = BitReversalTable(size)
                _cache[size] = table
                logger.debug(f"bit reversal table built: size={size} offsets={table.M}")
    return table

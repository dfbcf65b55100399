import numpy as np

from twiddle_factors import Direction, get_twiddles


def _result(z, w):
    z = np.asarray(z)
    w = np.asarray(w)
    dtype = np.result_type(z, w, np.complex64)
    return z, w, np.empty(np.broadcast(z, w).shape, dtype=dtype)


def fast_complex_multiply(z, w):
    """Limited-range complex product ``(ac - bd) + (ad + bc)i``.

    No special handling of infinities or NaNs: the inputs must be finite.
    """
    z, w, out = _result(z, w)
    a, b = z.real, z.imag
    c, d = w.real, w.imag
    out.real = a * c - b * d
    out.imag = a * d + b * c
    return out[()]


def fast_complex_divide(z, w):
    """Limited-range complex quotient ``((ac + bd) + (bc - ad)i) / (c*c + d*d)``.

    Public companion to :func:`fast_complex_multiply` for callers that
    post-process spectra; the transform itself never divides. There is
    no scaling against overflow in ``c*c + d*d``, so finite inputs and a
    non-zero divisor are required.
    """
    z, w, out = _result(z, w)
    a, b = z.real, z.imag
    c, d = w.real, w.imag
    denom = c * c + d * d
    out.real = (a * c + b * d) / denom
    out.imag = (b * c - a * d) / denom
    return out[()]


def rotate90(z, direction):
    # -i*z going forward, +i*z going back
    out = np.empty_like(z)
    if direction is Direction.FORWARD:
        out.real = z.imag
        out.imag = -z.real
    else:
        out.real = -z.imag
        out.imag = z.real
    return out


class ButterflyEngine:
    """Recursive radix-4 mixer with a radix-2 leaf.

    Works on a contiguous buffer that is already in digit-reversed order.
    Each level views its blocks as a (blocks, n) array so the four
    sub-transforms of every block at that level run as one
    (blocks * 4, n / 4) call.
    """

    def __init__(self, size, precision, direction):
        self.N = size
        self.direction = direction
        self.twiddles = {}
        n = size
        while n > 2:
            self.twiddles[n] = get_twiddles(precision, n, direction)
            n //= 4

    def mix(self, data):
        self._mix(data.reshape(1, self.N))
        return data

    def _mix(self, blocks):
        n = blocks.shape[1]
        if n == 1:
            return
        if n == 2:
            a0 = blocks[:, 0]
            a1 = blocks[:, 1]
            s = a0 + a1
            blocks[:, 1] = a0 - a1
            blocks[:, 0] = s
            return

        n4 = n // 4
        self._mix(blocks.reshape(-1, n4))

        t1, t2, t3 = self.twiddles[n]
        q0 = blocks[:, :n4]
        q1 = blocks[:, n4:2 * n4]
        q2 = blocks[:, 2 * n4:3 * n4]
        q3 = blocks[:, 3 * n4:]
        # after reversal q2 holds the 4m+1 samples and q1 the 4m+2 ones
        u1 = fast_complex_multiply(q2, t1)
        u2 = fast_complex_multiply(q1, t2)
        u3 = fast_complex_multiply(q3, t3)
        a = q0 + u2
        b = q0 - u2
        b0 = u1 + u3
        b1 = rotate90(u1 - u3, self.direction)
        q0[...] = a + b0
        q1[...] = b + b1
        q2[...] = a - b0
        q3[...] = b - b1

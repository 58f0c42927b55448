"""Pure-Python reference kernels.

These kernels walk plain Python float lists element by element.  They are
always importable, need nothing beyond the standard library at compute time,
and define the results the accelerated kernels are checked against.
Floating-point edge cases follow IEEE-754: division by zero and domain errors
produce infinities or NaN instead of raising.
"""

from __future__ import annotations

import math
import operator
from typing import Callable, List

import numpy as _np

from .backend import Backend, Operand

Number = float


def _ieee_div(x: float, y: float) -> float:
    try:
        return x / y
    except ZeroDivisionError:
        if x == 0.0 or math.isnan(x):
            return math.nan
        return math.copysign(math.inf, x) * math.copysign(1.0, y)


def _odd_integer(y: float) -> bool:
    return math.isfinite(y) and y.is_integer() and math.fmod(y, 2.0) != 0.0


def _ieee_pow(x: float, y: float) -> float:
    try:
        return math.pow(x, y)
    except OverflowError:
        return -math.inf if x < 0.0 and _odd_integer(y) else math.inf
    except ValueError:
        # zero raised to a negative power is a pole, anything else is a domain error
        if x == 0.0:
            return math.copysign(math.inf, x) if _odd_integer(y) else math.inf
        return math.nan


def _zip_map(a: _np.ndarray, b: Operand, func: Callable[[float, float], float]) -> List[Number]:
    xs = a.tolist()
    if isinstance(b, float):
        return [func(x, b) for x in xs]
    return [func(x, y) for x, y in zip(xs, b.tolist())]


def _fft_inplace(re: List[float], im: List[float]) -> None:
    n = len(re)
    j = 0
    for i in range(1, n):
        bit = n >> 1
        while j & bit:
            j ^= bit
            bit >>= 1
        j |= bit
        if i < j:
            re[i], re[j] = re[j], re[i]
            im[i], im[j] = im[j], im[i]
    size = 2
    while size <= n:
        half = size // 2
        step = -2.0 * math.pi / size
        for k in range(half):
            angle = step * k
            wr = math.cos(angle)
            wi = math.sin(angle)
            for start in range(0, n, size):
                p = start + k
                q = p + half
                tr = wr * re[q] - wi * im[q]
                ti = wr * im[q] + wi * re[q]
                re[q] = re[p] - tr
                im[q] = im[p] - ti
                re[p] = re[p] + tr
                im[p] = im[p] + ti
        size *= 2


def _split(a: _np.ndarray) -> tuple[List[float], List[float]]:
    values = a.tolist()
    return values[0::2], values[1::2]


def _interleave(re: List[float], im: List[float]) -> List[float]:
    out: List[float] = []
    for r, i in zip(re, im):
        out.append(r)
        out.append(i)
    return out


def _det2(m: List[float]) -> float:
    a, b, c, d = m
    return a * d - b * c


def _det3(m: List[float]) -> float:
    a, b, c, d, e, f, g, h, i = m
    return a * (e * i - f * h) - b * (d * i - f * g) + c * (d * h - e * g)


class ReferenceBackend(Backend):
    """Always available; the numerical source of truth."""

    name = "reference"

    # arithmetic --------------------------------------------------------
    def _add(self, a, b):
        return _zip_map(a, b, operator.add)

    def _sub(self, a, b):
        return _zip_map(a, b, operator.sub)

    def _mul(self, a, b):
        return _zip_map(a, b, operator.mul)

    def _div(self, a, b):
        return _zip_map(a, b, _ieee_div)

    def _pow(self, a, b):
        return _zip_map(a, b, _ieee_pow)

    # reductions --------------------------------------------------------
    def _sum(self, a):
        total = 0.0
        for value in a.tolist():
            total += value
        return total

    def _prod(self, a):
        product = 1.0
        for value in a.tolist():
            product *= value
        return product

    def _mean(self, a):
        return self._sum(a) / a.shape[0]

    def _max(self, a):
        values = a.tolist()
        best = values[0]
        for value in values:
            if math.isnan(value):
                return math.nan
            if value > best:
                best = value
        return best

    def _min(self, a):
        values = a.tolist()
        best = values[0]
        for value in values:
            if math.isnan(value):
                return math.nan
            if value < best:
                best = value
        return best

    def _variance(self, a):
        values = a.tolist()
        mean_val = self._mean(a)
        accum = 0.0
        for value in values:
            diff = value - mean_val
            accum += diff * diff
        return accum / len(values)

    # linear algebra ----------------------------------------------------
    def _matmul(self, a, b, m, k, n):
        A = a.tolist()
        B = b.tolist()
        out = [0.0] * (m * n)
        for i in range(m):
            for j in range(n):
                total = 0.0
                for idx in range(k):
                    total += A[i * k + idx] * B[idx * n + j]
                out[i * n + j] = total
        return out

    def _dot(self, a, b):
        total = 0.0
        for x, y in zip(a.tolist(), b.tolist()):
            total += x * y
        return total

    def _det(self, a, n):
        values = a.tolist()
        if n == 2:
            return _det2(values)
        return _det3(values)

    def _inv(self, a, n, det):
        if n == 2:
            p, q, r, s = a.tolist()
            return [s / det, -q / det, -r / det, p / det]
        a11, a12, a13, a21, a22, a23, a31, a32, a33 = a.tolist()
        adjugate = [
            a22 * a33 - a23 * a32,
            a13 * a32 - a12 * a33,
            a12 * a23 - a13 * a22,
            a23 * a31 - a21 * a33,
            a11 * a33 - a13 * a31,
            a13 * a21 - a11 * a23,
            a21 * a32 - a22 * a31,
            a12 * a31 - a11 * a32,
            a11 * a22 - a12 * a21,
        ]
        return [value / det for value in adjugate]

    # spectral ----------------------------------------------------------
    def _fft(self, a):
        re, im = _split(a)
        _fft_inplace(re, im)
        return _interleave(re, im)

    def _ifft(self, a):
        re, im = _split(a)
        n = len(re)
        im = [-value for value in im]
        _fft_inplace(re, im)
        return _interleave([value / n for value in re], [-value / n for value in im])


__all__ = ["ReferenceBackend"]

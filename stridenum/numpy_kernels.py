"""Vectorised kernels running on numpy's compiled ufuncs.

This module is one of the kernel providers the accelerated backend can load.
Every function takes contiguous float64 vectors and returns float64 results;
validation and dtype coercion stay in :class:`stridenum.backend.Backend`.
"""

from __future__ import annotations

import math

import numpy as np


def is_available() -> bool:
    return True


def add(a, b):
    return np.add(a, b)


def sub(a, b):
    return np.subtract(a, b)


def mul(a, b):
    with np.errstate(invalid="ignore", over="ignore"):
        return np.multiply(a, b)


def div(a, b):
    with np.errstate(divide="ignore", invalid="ignore", over="ignore"):
        return np.divide(a, b)


def pow(a, b):
    with np.errstate(divide="ignore", invalid="ignore", over="ignore", under="ignore"):
        return np.power(a, b)


def sum(a):
    return float(np.sum(a))


def prod(a):
    with np.errstate(over="ignore", invalid="ignore"):
        return float(np.prod(a))


def mean(a):
    return float(np.sum(a)) / a.shape[0]


def max(a):
    return float(np.max(a))


def min(a):
    return float(np.min(a))


def variance(a):
    centered = a - np.sum(a) / a.shape[0]
    return float(np.sum(centered * centered)) / a.shape[0]


def std(a):
    return math.sqrt(variance(a))


def matmul(a, b, m, k, n):
    return (a.reshape(m, k) @ b.reshape(k, n)).reshape(-1)


def dot(a, b):
    return float(np.dot(a, b))


def det(a, n):
    if n == 2:
        return float(a[0] * a[3] - a[1] * a[2])
    a11, a12, a13, a21, a22, a23, a31, a32, a33 = a
    return float(a11 * (a22 * a33 - a23 * a32) - a12 * (a21 * a33 - a23 * a31) + a13 * (a21 * a32 - a22 * a31))


def inv(a, n, det_value):
    if n == 2:
        adjugate = np.array([a[3], -a[1], -a[2], a[0]])
    else:
        a11, a12, a13, a21, a22, a23, a31, a32, a33 = a
        adjugate = np.array(
            [
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
        )
    return adjugate / det_value


def _bit_reversal(n: int) -> np.ndarray:
    bits = n.bit_length() - 1
    idx = np.arange(n, dtype=np.int64)
    rev = np.zeros(n, dtype=np.int64)
    for b in range(bits):
        rev |= ((idx >> b) & 1) << (bits - 1 - b)
    return rev


def _fft_core(re: np.ndarray, im: np.ndarray):
    n = re.shape[0]
    order = _bit_reversal(n)
    re = re[order]
    im = im[order]
    size = 2
    while size <= n:
        half = size // 2
        angles = (-2.0 * math.pi / size) * np.arange(half, dtype=np.float64)
        wr = np.cos(angles)
        wi = np.sin(angles)
        re_blocks = re.reshape(-1, size)
        im_blocks = im.reshape(-1, size)
        top_r, bottom_r = re_blocks[:, :half], re_blocks[:, half:]
        top_i, bottom_i = im_blocks[:, :half], im_blocks[:, half:]
        tr = wr * bottom_r - wi * bottom_i
        ti = wr * bottom_i + wi * bottom_r
        re = np.concatenate([top_r + tr, top_r - tr], axis=1).reshape(-1)
        im = np.concatenate([top_i + ti, top_i - ti], axis=1).reshape(-1)
        size *= 2
    return re, im


def _interleave(re: np.ndarray, im: np.ndarray) -> np.ndarray:
    out = np.empty(re.shape[0] * 2, dtype=np.float64)
    out[0::2] = re
    out[1::2] = im
    return out


def fft(a):
    with np.errstate(invalid="ignore", over="ignore"):
        re, im = _fft_core(a[0::2], a[1::2])
    return _interleave(re, im)


def ifft(a):
    n = a.shape[0] // 2
    with np.errstate(invalid="ignore", over="ignore"):
        re, im = _fft_core(a[0::2], -a[1::2])
    return _interleave(re / n, -im / n)

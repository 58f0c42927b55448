"""Discrete Fourier transforms over interleaved ``(real, imag)`` pairs.

Complex sequences of length ``n`` are float64 arrays of shape ``(n, 2)``.
Transform lengths must be powers of two.
"""

from __future__ import annotations

import numpy as _np

from .dtypes import DType, as_float64
from .errors import DimensionMismatch, _shape_to_text
from .manager import BackendContext, get_backend
from .ndarray import NDArray
from .shape import check_power_of_two


def _complex_pairs(a: NDArray, op: str) -> _np.ndarray:
    if a.ndim != 2 or a.shape[1] != 2:
        raise DimensionMismatch(
            "%s requires an (n, 2) array of (real, imag) pairs, got shape %s" % (op, _shape_to_text(a.shape))
        )
    return as_float64(a.contiguous_buffer())


def _wrap(values: _np.ndarray) -> NDArray:
    return NDArray(values, (values.shape[0] // 2, 2), None, DType.FLOAT64)


def fft(a: NDArray, ctx: BackendContext | None = None) -> NDArray:
    """Forward transform of a real ``(n,)`` or complex ``(n, 2)`` signal."""

    if a.ndim == 1:
        values = _np.zeros(a.shape[0] * 2, dtype=_np.float64)
        values[0::2] = as_float64(a.contiguous_buffer())
    else:
        values = _complex_pairs(a, "fft")
    return _wrap(get_backend(ctx).fft(values))


def ifft(a: NDArray, ctx: BackendContext | None = None) -> NDArray:
    """Inverse transform, scaled by ``1/n``."""

    return _wrap(get_backend(ctx).ifft(_complex_pairs(a, "ifft")))


def rfft(a: NDArray, ctx: BackendContext | None = None) -> NDArray:
    """Non-negative frequency bins (``n // 2 + 1`` of them) of a real signal."""

    if a.ndim != 1:
        raise DimensionMismatch("rfft requires a 1D array, got shape %s" % _shape_to_text(a.shape))
    spectrum = fft(a, ctx=ctx)
    bins = a.shape[0] // 2 + 1
    return NDArray(spectrum.buffer[: bins * 2].copy(), (bins, 2), None, DType.FLOAT64)


def irfft(a: NDArray, n: int | None = None, ctx: BackendContext | None = None) -> NDArray:
    """Real signal whose half spectrum is ``a``.

    ``n`` defaults to ``2 * (len(a) - 1)``.  The first ``n // 2 + 1`` bins are
    used, zero-padded when ``a`` is shorter, and the negative frequencies are
    their complex conjugates.
    """

    pairs = _complex_pairs(a, "irfft").reshape(-1, 2)
    bins = pairs.shape[0]
    size = 2 * (bins - 1) if n is None else int(n)
    check_power_of_two(size, "irfft")
    half = size // 2 + 1
    full = _np.zeros((size, 2), dtype=_np.float64)
    keep = min(bins, half)
    full[:keep] = pairs[:keep]
    mirrored = _np.arange(1, size - half + 1)
    full[size - mirrored, 0] = full[mirrored, 0]
    full[size - mirrored, 1] = -full[mirrored, 1]
    signal = get_backend(ctx).ifft(full.reshape(-1))
    return NDArray(_np.ascontiguousarray(signal[0::2]), (size,), None, DType.FLOAT64)


def _transform_grid(values: _np.ndarray, rows: int, cols: int, kernel) -> _np.ndarray:
    grid = values.reshape(rows, cols, 2)
    staged = _np.empty_like(grid)
    for i in range(rows):
        staged[i] = kernel(_np.ascontiguousarray(grid[i]).reshape(-1)).reshape(cols, 2)
    out = _np.empty_like(grid)
    for j in range(cols):
        out[:, j] = kernel(_np.ascontiguousarray(staged[:, j]).reshape(-1)).reshape(rows, 2)
    return out.reshape(-1)


def _grid_size(a: NDArray, op: str) -> tuple:
    rows, cols = a.shape[0], a.shape[1]
    check_power_of_two(rows, "%s rows" % op)
    check_power_of_two(cols, "%s columns" % op)
    return rows, cols


def fft2(a: NDArray, ctx: BackendContext | None = None) -> NDArray:
    """2D transform of a real ``(rows, cols)`` or complex ``(rows, cols, 2)`` grid.

    Rows are transformed first, then columns.  Both axes must be powers of two.
    """

    if a.ndim == 2:
        rows, cols = _grid_size(a, "fft2")
        values = _np.zeros(rows * cols * 2, dtype=_np.float64)
        values[0::2] = as_float64(a.contiguous_buffer())
    elif a.ndim == 3 and a.shape[2] == 2:
        rows, cols = _grid_size(a, "fft2")
        values = as_float64(a.contiguous_buffer())
    else:
        raise DimensionMismatch(
            "fft2 requires a (rows, cols) or (rows, cols, 2) array, got shape %s" % _shape_to_text(a.shape)
        )
    spectrum = _transform_grid(values, rows, cols, get_backend(ctx).fft)
    return NDArray(spectrum, (rows, cols, 2), None, DType.FLOAT64)


def ifft2(a: NDArray, ctx: BackendContext | None = None) -> NDArray:
    """Inverse of :func:`fft2`, scaled by ``1 / (rows * cols)``."""

    if a.ndim != 3 or a.shape[2] != 2:
        raise DimensionMismatch(
            "ifft2 requires a (rows, cols, 2) array of (real, imag) pairs, got shape %s" % _shape_to_text(a.shape)
        )
    rows, cols = _grid_size(a, "ifft2")
    values = _transform_grid(as_float64(a.contiguous_buffer()), rows, cols, get_backend(ctx).ifft)
    return NDArray(values, (rows, cols, 2), None, DType.FLOAT64)


__all__ = ["fft", "fft2", "ifft", "ifft2", "irfft", "rfft"]

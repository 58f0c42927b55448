"""Matrix products and closed-form 2x2/3x3 linear algebra."""

from __future__ import annotations

import math
from typing import Any

import numpy as _np

from .dtypes import DType, as_float64, promote_types, resolve_dtype
from .errors import DimensionMismatch, _shape_to_text
from .manager import BackendContext, get_backend
from .ndarray import NDArray
from .ops import mul, reshape


def _require_ndarray(value: Any, op: str) -> NDArray:
    if not isinstance(value, NDArray):
        raise TypeError("%s expects NDArray operands, got %s" % (op, type(value).__name__))
    return value


def _square_size(a: NDArray, op: str) -> int:
    if a.ndim != 2 or a.shape[0] != a.shape[1]:
        raise DimensionMismatch("%s requires a square 2D matrix, got shape %s" % (op, _shape_to_text(a.shape)))
    return a.shape[0]


def matmul(a: NDArray, b: NDArray, dtype: Any = None, ctx: BackendContext | None = None) -> NDArray:
    """``(m, k) @ (k, n) -> (m, n)``; both operands must be 2D."""

    _require_ndarray(a, "matmul")
    _require_ndarray(b, "matmul")
    out_dtype = promote_types(a.dtype, b.dtype) if dtype is None else resolve_dtype(dtype)
    values = get_backend(ctx).matmul(a.contiguous_buffer(), a.shape, b.contiguous_buffer(), b.shape, out_dtype)
    return NDArray(values, (a.shape[0], b.shape[1]), None, out_dtype)


def dot(a: NDArray, b: NDArray, ctx: BackendContext | None = None):
    """Inner product of vectors, or a matrix product when either side is 2D."""

    _require_ndarray(a, "dot")
    _require_ndarray(b, "dot")
    if a.ndim == 1 and b.ndim == 1:
        return get_backend(ctx).dot(a.contiguous_buffer(), b.contiguous_buffer())
    if a.ndim == 1 and b.ndim == 2:
        product = matmul(reshape(a, (1, a.shape[0])), b, ctx=ctx)
        return reshape(product, (b.shape[1],))
    if a.ndim == 2 and b.ndim == 1:
        product = matmul(a, reshape(b, (b.shape[0], 1)), ctx=ctx)
        return reshape(product, (a.shape[0],))
    if a.ndim == 2 and b.ndim == 2:
        return matmul(a, b, ctx=ctx)
    raise DimensionMismatch(
        "dot supports 1D and 2D operands, got shapes %s and %s" % (_shape_to_text(a.shape), _shape_to_text(b.shape))
    )


def det(a: NDArray, ctx: BackendContext | None = None) -> float:
    n = _square_size(_require_ndarray(a, "det"), "det")
    return get_backend(ctx).det(a.contiguous_buffer(), n)


def inv(a: NDArray, ctx: BackendContext | None = None) -> NDArray:
    """Inverse of a 2x2 or 3x3 matrix; float32 input stays float32.

    Raises :class:`~stridenum.errors.SingularMatrix` when the determinant is
    within tolerance of zero.
    """

    n = _square_size(_require_ndarray(a, "inv"), "inv")
    out_dtype = DType.FLOAT32 if a.dtype is DType.FLOAT32 else DType.FLOAT64
    values = get_backend(ctx).inv(a.contiguous_buffer(), n, out_dtype)
    return NDArray(values, (n, n), None, out_dtype)


def outer(a: NDArray, b: NDArray, ctx: BackendContext | None = None) -> NDArray:
    _require_ndarray(a, "outer")
    _require_ndarray(b, "outer")
    if a.ndim != 1 or b.ndim != 1:
        raise DimensionMismatch(
            "outer requires 1D arrays, got shapes %s and %s" % (_shape_to_text(a.shape), _shape_to_text(b.shape))
        )
    return mul(reshape(a, (a.shape[0], 1)), reshape(b, (1, b.shape[0])), ctx=ctx)


def trace(a: NDArray, ctx: BackendContext | None = None) -> float:
    _require_ndarray(a, "trace")
    if a.ndim != 2:
        raise DimensionMismatch("trace requires a 2D array, got shape %s" % _shape_to_text(a.shape))
    count = min(a.shape)
    offsets = _np.arange(count, dtype=_np.int64) * (a.strides[0] + a.strides[1])
    return get_backend(ctx).sum(a.buffer[offsets])


def inner(a: NDArray, b: NDArray, ctx: BackendContext | None = None) -> float:
    """Sum of elementwise products of two 1D arrays of equal length."""

    _require_ndarray(a, "inner")
    _require_ndarray(b, "inner")
    if a.ndim != 1 or b.ndim != 1:
        raise DimensionMismatch(
            "inner requires 1D arrays, got shapes %s and %s" % (_shape_to_text(a.shape), _shape_to_text(b.shape))
        )
    return get_backend(ctx).dot(a.contiguous_buffer(), b.contiguous_buffer())


def norm(a: NDArray, ord: Any = 2, ctx: BackendContext | None = None) -> float:
    """Element-wise norm over every entry of ``a``.

    ``ord`` is ``2`` (Euclidean), ``1`` (sum of magnitudes), ``inf`` (largest
    magnitude) or ``"fro"``, which equals ``2`` since matrices are flattened.
    """

    _require_ndarray(a, "norm")
    backend = get_backend(ctx)
    values = as_float64(a.contiguous_buffer())
    if isinstance(ord, str):
        if ord != "fro":
            raise ValueError("unsupported norm order %r" % (ord,))
        ord = 2
    if ord == 2:
        return math.sqrt(backend.dot(values, values))
    if ord == 1:
        return backend.sum(_np.abs(values))
    if ord == math.inf:
        return backend.max(_np.abs(values)) if values.size else 0.0
    raise ValueError("unsupported norm order %r" % (ord,))


__all__ = ["det", "dot", "inner", "inv", "matmul", "norm", "outer", "trace"]

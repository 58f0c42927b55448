"""Array-level operations dispatched through the active backend.

Every function accepts ``ctx=`` to run against a specific
:class:`~stridenum.manager.BackendContext`; the default is the process-wide
context.  Binary operations broadcast first, reductions accumulate in float64,
and ``reshape``/``flatten`` are the only functions that alias their input.
"""

from __future__ import annotations

import numbers
from typing import Any, Sequence

import numpy as _np

from .broadcasting import broadcast_shapes, broadcast_to
from .dtypes import DType, promote_types, resolve_dtype
from .errors import DimensionMismatch, _shape_to_text
from .manager import BackendContext, get_backend
from .ndarray import NDArray
from .shape import compute_size, gather_offsets, normalize_axis, resolve_reshape


def _scalar_value(value: Any) -> float:
    if isinstance(value, numbers.Real):
        return float(value)
    raise TypeError("unsupported operand type %s; expected NDArray or real scalar" % type(value).__name__)


def _binary(op: str, a: Any, b: Any, dtype: Any = None, ctx: BackendContext | None = None) -> NDArray:
    backend = get_backend(ctx)
    kernel = getattr(backend, op)
    if not isinstance(a, NDArray):
        if not isinstance(b, NDArray):
            raise TypeError("%s needs at least one NDArray operand" % op)
        # Scalar on the left: expand it so the kernel sees operands in order.
        out_dtype = b.dtype if dtype is None else resolve_dtype(dtype)
        left = _np.full(b.size, _scalar_value(a), dtype=_np.float64)
        return NDArray(kernel(left, b.contiguous_buffer(), out_dtype), b.shape, None, out_dtype)
    if not isinstance(b, NDArray):
        out_dtype = a.dtype if dtype is None else resolve_dtype(dtype)
        return NDArray(kernel(a.contiguous_buffer(), _scalar_value(b), out_dtype), a.shape, None, out_dtype)
    out_dtype = promote_types(a.dtype, b.dtype) if dtype is None else resolve_dtype(dtype)
    if a.shape == b.shape:
        shape = a.shape
        left, right = a.contiguous_buffer(), b.contiguous_buffer()
    else:
        shape = broadcast_shapes(a.shape, b.shape)
        left = broadcast_to(a, shape).contiguous_buffer()
        right = broadcast_to(b, shape).contiguous_buffer()
    return NDArray(kernel(left, right, out_dtype), shape, None, out_dtype)


def add(a: Any, b: Any, dtype: Any = None, ctx: BackendContext | None = None) -> NDArray:
    return _binary("add", a, b, dtype, ctx)


def sub(a: Any, b: Any, dtype: Any = None, ctx: BackendContext | None = None) -> NDArray:
    return _binary("sub", a, b, dtype, ctx)


def mul(a: Any, b: Any, dtype: Any = None, ctx: BackendContext | None = None) -> NDArray:
    return _binary("mul", a, b, dtype, ctx)


def div(a: Any, b: Any, dtype: Any = None, ctx: BackendContext | None = None) -> NDArray:
    """Elementwise division; division by zero yields ``inf``/``nan``."""

    return _binary("div", a, b, dtype, ctx)


def pow(a: Any, b: Any, dtype: Any = None, ctx: BackendContext | None = None) -> NDArray:
    return _binary("pow", a, b, dtype, ctx)


# reductions -----------------------------------------------------------------
def _reduce(op: str, a: NDArray, axis: int | None, keepdims: bool, ctx: BackendContext | None):
    if not isinstance(a, NDArray):
        raise TypeError("%s expects an NDArray, got %s" % (op, type(a).__name__))
    kernel = getattr(get_backend(ctx), op)
    if axis is None:
        value = kernel(a.contiguous_buffer())
        if keepdims:
            return NDArray(_np.array([value], dtype=_np.float64), (1,) * a.ndim, None, DType.FLOAT64)
        return value
    ax = normalize_axis(axis, a.ndim)
    kept = a.shape[:ax] + a.shape[ax + 1 :]
    lanes = _np.moveaxis(a.contiguous_buffer().reshape(a.shape), ax, -1).reshape(compute_size(kept), a.shape[ax])
    values = _np.array([kernel(lane) for lane in lanes], dtype=_np.float64)
    shape = a.shape[:ax] + (1,) + a.shape[ax + 1 :] if keepdims else kept
    return NDArray(values, shape, None, DType.FLOAT64)


def sum(a: NDArray, axis: int | None = None, keepdims: bool = False, ctx: BackendContext | None = None):
    return _reduce("sum", a, axis, keepdims, ctx)


def prod(a: NDArray, axis: int | None = None, keepdims: bool = False, ctx: BackendContext | None = None):
    return _reduce("prod", a, axis, keepdims, ctx)


def mean(a: NDArray, axis: int | None = None, keepdims: bool = False, ctx: BackendContext | None = None):
    return _reduce("mean", a, axis, keepdims, ctx)


def max(a: NDArray, axis: int | None = None, keepdims: bool = False, ctx: BackendContext | None = None):
    return _reduce("max", a, axis, keepdims, ctx)


def min(a: NDArray, axis: int | None = None, keepdims: bool = False, ctx: BackendContext | None = None):
    return _reduce("min", a, axis, keepdims, ctx)


def variance(a: NDArray, axis: int | None = None, keepdims: bool = False, ctx: BackendContext | None = None):
    """Population variance: the mean squared deviation, divided by N."""

    return _reduce("variance", a, axis, keepdims, ctx)


var = variance


def std(a: NDArray, axis: int | None = None, keepdims: bool = False, ctx: BackendContext | None = None):
    return _reduce("std", a, axis, keepdims, ctx)


# shape ----------------------------------------------------------------------
def ascontiguous(a: NDArray) -> NDArray:
    if a.is_contiguous:
        return a
    return a.copy()


def copy(a: NDArray) -> NDArray:
    return a.copy()


def reshape(a: NDArray, shape: Sequence[int]) -> NDArray:
    """Same elements under a new shape; shares ``a``'s buffer when ``a`` is contiguous."""

    resolved = resolve_reshape(shape, a.size)
    source = ascontiguous(a)
    return NDArray(source.buffer, resolved, None, source.dtype)


def flatten(a: NDArray) -> NDArray:
    return reshape(a, (a.size,))


def transpose(a: NDArray) -> NDArray:
    """Swap the axes of a 2D array into a new C-contiguous buffer."""

    if a.ndim != 2:
        raise DimensionMismatch("transpose requires a 2D array, got shape %s" % _shape_to_text(a.shape))
    rows, cols = a.shape
    offsets = gather_offsets((cols, rows), (a.strides[1], a.strides[0]))
    return NDArray(a.buffer[offsets], (cols, rows), None, a.dtype)


__all__ = [
    "add",
    "ascontiguous",
    "copy",
    "div",
    "flatten",
    "max",
    "mean",
    "min",
    "mul",
    "pow",
    "prod",
    "reshape",
    "std",
    "sub",
    "sum",
    "transpose",
    "var",
    "variance",
]

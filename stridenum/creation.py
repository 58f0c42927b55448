"""Constructors producing C-contiguous :class:`NDArray` values."""

from __future__ import annotations

import math
from typing import Any

import numpy as _np

from .dtypes import DType, cast_from_float64, resolve_dtype
from .errors import InvalidShape
from .ndarray import NDArray
from .shape import compute_size, validate_shape


def _shape_arg(shape: Any) -> tuple:
    if isinstance(shape, (int, _np.integer)) and not isinstance(shape, bool):
        return validate_shape((shape,))
    return validate_shape(shape)


def _infer_dtype(values: _np.ndarray) -> DType:
    if values.dtype.kind in "biu":
        return DType.INT32
    if values.dtype.kind == "f":
        return DType.FLOAT64
    raise TypeError("cannot build an array from elements of type %s" % values.dtype)


def array(obj: Any, dtype: Any = None) -> NDArray:
    """Build an array from a scalar or (nested) sequence of numbers.

    Integer input infers ``int32`` and anything with a float infers
    ``float64``; ragged nesting raises :class:`InvalidShape`.
    """

    if isinstance(obj, NDArray):
        return obj.copy() if dtype is None else obj.astype(dtype)
    try:
        values = _np.array(obj)
    except ValueError as exc:
        raise InvalidShape("array data must be rectangular: %s" % exc) from None
    if values.dtype == object:
        raise InvalidShape("array data must be rectangular numbers")
    target = _infer_dtype(values) if dtype is None else resolve_dtype(dtype)
    buffer = cast_from_float64(values.astype(_np.float64).reshape(-1), target)
    return NDArray(buffer, values.shape, None, target)


def from_numpy(values: _np.ndarray, dtype: Any = None) -> NDArray:
    """Wrap a numpy array; shares memory when it is contiguous and already of a supported storage."""

    arr = _np.asarray(values)
    if dtype is not None:
        target = resolve_dtype(dtype)
    else:
        try:
            target = DType.from_storage(arr.dtype)
        except TypeError:
            target = _infer_dtype(arr)
    if arr.dtype == target.storage and arr.flags.c_contiguous:
        return NDArray(arr.reshape(-1), arr.shape, None, target)
    buffer = cast_from_float64(arr.astype(_np.float64).reshape(-1), target)
    return NDArray(buffer, arr.shape, None, target)


def full(shape: Any, fill_value: float, dtype: Any = DType.FLOAT64) -> NDArray:
    dims = _shape_arg(shape)
    target = resolve_dtype(dtype)
    buffer = cast_from_float64(_np.full(compute_size(dims), float(fill_value)), target)
    return NDArray(buffer, dims, None, target)


def zeros(shape: Any, dtype: Any = DType.FLOAT64) -> NDArray:
    return full(shape, 0.0, dtype)


def ones(shape: Any, dtype: Any = DType.FLOAT64) -> NDArray:
    return full(shape, 1.0, dtype)


def arange(start: float, stop: float | None = None, step: float = 1, dtype: Any = None) -> NDArray:
    """Evenly spaced values in ``[start, stop)``; int32 unless an argument is a float."""

    if stop is None:
        start, stop = 0, start
    if step == 0:
        raise ValueError("arange step must be non-zero")
    count = max(0, math.ceil((stop - start) / step))
    values = start + step * _np.arange(count, dtype=_np.float64)
    if dtype is None:
        integral = all(isinstance(v, (int, _np.integer)) for v in (start, stop, step))
        target = DType.INT32 if integral else DType.FLOAT64
    else:
        target = resolve_dtype(dtype)
    return NDArray(cast_from_float64(values, target), (count,), None, target)


def eye(n: int, dtype: Any = DType.FLOAT64) -> NDArray:
    target = resolve_dtype(dtype)
    return NDArray(cast_from_float64(_np.eye(n).reshape(-1), target), (n, n), None, target)


__all__ = ["arange", "array", "eye", "from_numpy", "full", "ones", "zeros"]

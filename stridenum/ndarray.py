"""The strided array record: ``{buffer, shape, strides, dtype}``."""

from __future__ import annotations

import numbers
from typing import Any, Sequence, Tuple

import numpy as _np

from .dtypes import DType, as_float64, cast_from_float64, resolve_dtype
from .errors import InvalidShape, _shape_to_text
from .shape import (
    Shape,
    compute_size,
    compute_strides,
    gather_offsets,
    index_to_offset,
    is_contiguous,
    validate_shape,
)


def _ops():
    from . import ops

    return ops


def _linalg():
    from . import linalg

    return linalg


class NDArray:
    """An n-dimensional view over a flat, homogeneously typed numpy buffer.

    The constructor accepts a finished record and performs no inference:
    ``dtype`` is looked up from the buffer storage when omitted and must match
    it when given.  Without ``strides`` the array is C-contiguous and owns
    exactly ``compute_size(shape)`` elements.
    """

    __slots__ = ("_buffer", "_shape", "_strides", "_dtype")

    def __init__(
        self,
        buffer: _np.ndarray,
        shape: Sequence[int] | None = None,
        strides: Sequence[int] | None = None,
        dtype: Any | None = None,
    ) -> None:
        if not isinstance(buffer, _np.ndarray):
            raise TypeError("buffer must be a numpy.ndarray, got %s" % type(buffer).__name__)
        if buffer.ndim != 1:
            raise InvalidShape("buffer must be one-dimensional, got %d dimensions" % buffer.ndim)
        resolved = DType.from_storage(buffer.dtype) if dtype is None else resolve_dtype(dtype)
        if buffer.dtype != resolved.storage:
            raise TypeError("buffer storage %s does not match dtype %s" % (buffer.dtype, resolved))
        dims = (int(buffer.shape[0]),) if shape is None else validate_shape(shape)
        size = compute_size(dims)
        if strides is None:
            steps = compute_strides(dims)
        else:
            steps = tuple(int(step) for step in strides)
            if len(steps) != len(dims):
                raise InvalidShape(
                    "strides %r do not match shape %s" % (steps, _shape_to_text(dims))
                )
            if any(step < 0 for step in steps):
                raise InvalidShape("negative strides are not supported")
        if is_contiguous(dims, steps):
            if size != buffer.shape[0]:
                raise InvalidShape(
                    "buffer of length %d cannot hold shape %s (size %d)"
                    % (buffer.shape[0], _shape_to_text(dims), size)
                )
        elif size:
            last = index_to_offset([dim - 1 for dim in dims], steps)
            if last >= buffer.shape[0]:
                raise InvalidShape(
                    "strides %r address offset %d outside a buffer of length %d"
                    % (steps, last, buffer.shape[0])
                )
        self._buffer = buffer
        self._shape: Shape = dims
        self._strides: Shape = steps
        self._dtype = resolved

    # ------------------------------------------------------------------
    @property
    def buffer(self) -> _np.ndarray:
        return self._buffer

    @property
    def shape(self) -> Shape:
        return self._shape

    @property
    def strides(self) -> Shape:
        return self._strides

    @property
    def dtype(self) -> DType:
        return self._dtype

    @property
    def ndim(self) -> int:
        return len(self._shape)

    @property
    def size(self) -> int:
        return compute_size(self._shape)

    @property
    def is_contiguous(self) -> bool:
        return is_contiguous(self._shape, self._strides) and self.size == self._buffer.shape[0]

    @property
    def T(self) -> "NDArray":
        return _ops().transpose(self)

    def contiguous_buffer(self) -> _np.ndarray:
        """The elements in C order; the buffer itself when already contiguous."""

        if self.is_contiguous:
            return self._buffer
        return self._buffer[gather_offsets(self._shape, self._strides)]

    def copy(self) -> "NDArray":
        return NDArray(self.contiguous_buffer().copy(), self._shape, None, self._dtype)

    def astype(self, dtype: Any) -> "NDArray":
        target = resolve_dtype(dtype)
        values = cast_from_float64(as_float64(self.contiguous_buffer()), target)
        return NDArray(values, self._shape, None, target)

    def to_list(self) -> Any:
        return self.contiguous_buffer().reshape(self._shape).tolist()

    def tolist(self) -> Any:
        return self.to_list()

    def item(self, *indices: int) -> Any:
        if len(indices) == 1 and isinstance(indices[0], tuple):
            indices = indices[0]
        if not indices and self.size == 1:
            indices = (0,) * self.ndim
        if len(indices) != self.ndim:
            raise IndexError("expected %d indices, got %d" % (self.ndim, len(indices)))
        resolved = []
        for axis, (index, dim) in enumerate(zip(indices, self._shape)):
            if not isinstance(index, numbers.Integral):
                raise TypeError("indices must be integers, got %r" % (index,))
            if index < -dim or index >= dim:
                raise IndexError(
                    "index %d out of bounds for axis %d with size %d" % (index, axis, dim)
                )
            resolved.append(int(index) % dim)
        return self._buffer[index_to_offset(resolved, self._strides)].item()

    def __getitem__(self, idx):
        if isinstance(idx, tuple):
            return self.item(*idx)
        return self.item(idx)

    def __len__(self) -> int:
        if not self._shape:
            raise TypeError("len() of unsized array")
        return self._shape[0]

    def __array__(self, dtype=None, copy=None):
        arr = self.contiguous_buffer().reshape(self._shape)
        if dtype is not None:
            return arr.astype(dtype)
        return arr

    def __repr__(self) -> str:
        return "NDArray(%r, dtype=%s)" % (self.to_list(), self._dtype)

    # shape helpers ----------------------------------------------------
    def reshape(self, *shape: Any) -> "NDArray":
        if len(shape) == 1 and isinstance(shape[0], (tuple, list)):
            shape = tuple(shape[0])
        return _ops().reshape(self, shape)

    def flatten(self) -> "NDArray":
        return _ops().flatten(self)

    def transpose(self) -> "NDArray":
        return _ops().transpose(self)

    # reductions -------------------------------------------------------
    def sum(self, axis: int | None = None, keepdims: bool = False):
        return _ops().sum(self, axis=axis, keepdims=keepdims)

    def mean(self, axis: int | None = None, keepdims: bool = False):
        return _ops().mean(self, axis=axis, keepdims=keepdims)

    def max(self, axis: int | None = None, keepdims: bool = False):
        return _ops().max(self, axis=axis, keepdims=keepdims)

    def min(self, axis: int | None = None, keepdims: bool = False):
        return _ops().min(self, axis=axis, keepdims=keepdims)

    def var(self, axis: int | None = None, keepdims: bool = False):
        return _ops().variance(self, axis=axis, keepdims=keepdims)

    def std(self, axis: int | None = None, keepdims: bool = False):
        return _ops().std(self, axis=axis, keepdims=keepdims)

    # arithmetic ------------------------------------------------------
    def __add__(self, other: Any):
        return _ops().add(self, other)

    def __radd__(self, other: Any):
        return _ops().add(self, other)

    def __sub__(self, other: Any):
        return _ops().sub(self, other)

    def __rsub__(self, other: Any):
        return _ops().sub(other, self)

    def __mul__(self, other: Any):
        return _ops().mul(self, other)

    def __rmul__(self, other: Any):
        return _ops().mul(self, other)

    def __truediv__(self, other: Any):
        return _ops().div(self, other)

    def __rtruediv__(self, other: Any):
        return _ops().div(other, self)

    def __pow__(self, other: Any):
        return _ops().pow(self, other)

    def __rpow__(self, other: Any):
        return _ops().pow(other, self)

    def __neg__(self):
        return _ops().mul(self, -1.0)

    def __matmul__(self, other: "NDArray"):
        return _linalg().matmul(self, other)


__all__ = ["NDArray"]

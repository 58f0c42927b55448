"""Pure functions over shapes and element strides."""

from __future__ import annotations

import numbers
from typing import Sequence, Tuple

import numpy as _np

from .errors import InvalidShape, UnsupportedSize, _shape_to_text

Shape = Tuple[int, ...]


def compute_size(shape: Sequence[int]) -> int:
    size = 1
    for dim in shape:
        size *= int(dim)
    return size


def compute_strides(shape: Sequence[int]) -> Shape:
    """Row-major strides in elements: ``strides[-1] == 1``."""

    ndim = len(shape)
    if ndim == 0:
        return ()
    strides = [1] * ndim
    for i in range(ndim - 2, -1, -1):
        strides[i] = strides[i + 1] * int(shape[i + 1])
    return tuple(strides)


def index_to_offset(indices: Sequence[int], strides: Sequence[int]) -> int:
    offset = 0
    for index, stride in zip(indices, strides):
        offset += index * stride
    return offset


def validate_shape(shape: Sequence[int]) -> Shape:
    try:
        dims = tuple(shape)
    except TypeError:
        raise InvalidShape("shape must be a sequence of integers, got %r" % (shape,)) from None
    for dim in dims:
        if isinstance(dim, bool) or not isinstance(dim, numbers.Integral) or dim < 0:
            raise InvalidShape(
                "Invalid shape dimension: %r. Must be non-negative integer." % (dim,)
            )
    return tuple(int(dim) for dim in dims)


def is_contiguous(shape: Sequence[int], strides: Sequence[int]) -> bool:
    expected = compute_strides(shape)
    for dim, stride, want in zip(shape, strides, expected):
        if dim > 1 and stride != want:
            return False
    return True


def gather_offsets(shape: Sequence[int], strides: Sequence[int]) -> _np.ndarray:
    """Buffer offsets of every element of ``shape`` visited in C order."""

    offsets = _np.zeros((1,) * len(shape), dtype=_np.int64)
    for axis, (dim, stride) in enumerate(zip(shape, strides)):
        view = [1] * len(shape)
        view[axis] = int(dim)
        offsets = offsets + _np.arange(int(dim), dtype=_np.int64).reshape(view) * int(stride)
    return _np.broadcast_to(offsets, tuple(shape)).reshape(-1)


def normalize_axis(axis: int, ndim: int) -> int:
    if not isinstance(axis, numbers.Integral) or isinstance(axis, bool):
        raise InvalidShape("axis must be an integer, got %r" % (axis,))
    if axis < -ndim or axis >= ndim:
        raise InvalidShape("axis %d is out of bounds for array of dimension %d" % (axis, ndim))
    return int(axis) % ndim if ndim else 0


def resolve_reshape(shape: Sequence[int], size: int) -> Shape:
    """Fill in a single ``-1`` wildcard and check the element count."""

    dims = list(shape)
    wildcard = [idx for idx, dim in enumerate(dims) if dim == -1]
    if len(wildcard) > 1:
        raise InvalidShape("can only specify one unknown dimension")
    if wildcard:
        known = compute_size(validate_shape([dim for dim in dims if dim != -1]))
        if known == 0 or size % known:
            raise InvalidShape(
                "Cannot reshape array of size %d into shape %s" % (size, _shape_to_text(dims))
            )
        dims[wildcard[0]] = size // known
    resolved = validate_shape(dims)
    if compute_size(resolved) != size:
        raise InvalidShape(
            "Cannot reshape array of size %d into shape %s" % (size, _shape_to_text(resolved))
        )
    return resolved


def check_power_of_two(n: int, op: str) -> None:
    if n <= 0 or n & (n - 1):
        raise UnsupportedSize("%s requires a power-of-two length, got %d" % (op, n))


__all__ = [
    "Shape",
    "check_power_of_two",
    "compute_size",
    "compute_strides",
    "gather_offsets",
    "index_to_offset",
    "is_contiguous",
    "normalize_axis",
    "resolve_reshape",
    "validate_shape",
]

"""Broadcasting rules and eager materialization.

Broadcast results are always materialized into a fresh C-contiguous buffer,
so kernels never see a stride-0 view.  The only aliasing case is when the
source already has the requested shape.
"""

from __future__ import annotations

from typing import Sequence

from .errors import BroadcastError
from .ndarray import NDArray
from .shape import Shape, compute_strides, gather_offsets, validate_shape


def broadcast_shapes(shape_a: Sequence[int], shape_b: Sequence[int]) -> Shape:
    ndim_a = len(shape_a)
    ndim_b = len(shape_b)
    ndim = max(ndim_a, ndim_b)
    result = [0] * ndim
    for i in range(ndim):
        dim_a = shape_a[ndim_a - 1 - i] if i < ndim_a else 1
        dim_b = shape_b[ndim_b - 1 - i] if i < ndim_b else 1
        if dim_a == dim_b:
            result[ndim - 1 - i] = dim_a
        elif dim_a == 1:
            result[ndim - 1 - i] = dim_b
        elif dim_b == 1:
            result[ndim - 1 - i] = dim_a
        else:
            raise BroadcastError(shape_a, shape_b)
    return tuple(int(dim) for dim in result)


def can_broadcast(shape_a: Sequence[int], shape_b: Sequence[int]) -> bool:
    try:
        broadcast_shapes(shape_a, shape_b)
    except BroadcastError:
        return False
    return True


def broadcast_to(array: NDArray, shape: Sequence[int]) -> NDArray:
    target = validate_shape(shape)
    if broadcast_shapes(array.shape, target) != target:
        raise BroadcastError(
            array.shape,
            target,
            "cannot broadcast array of shape %s to shape %s" % (array.shape, target),
        )
    if array.shape == target:
        return array
    # Axes absent from the source or of length 1 contribute nothing to the offset.
    lead = len(target) - array.ndim
    strides = [0] * lead
    for dim, stride in zip(array.shape, array.strides):
        strides.append(0 if dim == 1 else stride)
    offsets = gather_offsets(target, strides)
    return NDArray(array.buffer[offsets], target, compute_strides(target), array.dtype)


__all__ = ["broadcast_shapes", "broadcast_to", "can_broadcast"]

from __future__ import annotations

import numpy as _np
import pytest

from stridenum.errors import InvalidShape, UnsupportedSize
from stridenum.shape import (
    check_power_of_two,
    compute_size,
    compute_strides,
    gather_offsets,
    index_to_offset,
    is_contiguous,
    normalize_axis,
    resolve_reshape,
    validate_shape,
)


def test_compute_size_handles_scalars_and_zero_dims():
    assert compute_size((2, 3, 4)) == 24
    assert compute_size(()) == 1
    assert compute_size((3, 0)) == 0


def test_compute_strides_is_row_major():
    assert compute_strides((2, 3, 4)) == (12, 4, 1)
    assert compute_strides((5,)) == (1,)
    assert compute_strides(()) == ()


def test_index_to_offset_is_dot_product():
    assert index_to_offset((1, 2, 3), (12, 4, 1)) == 23
    assert index_to_offset((), ()) == 0


@pytest.mark.parametrize("bad", [(2, -1), (2.5,), (True, 2), ("a",), 5])
def test_validate_shape_rejects_invalid_dimensions(bad):
    with pytest.raises(InvalidShape):
        validate_shape(bad)


def test_validate_shape_accepts_numpy_integers():
    assert validate_shape([_np.int64(3), 0]) == (3, 0)


def test_is_contiguous_ignores_unit_dimensions():
    assert is_contiguous((2, 3), (3, 1))
    assert not is_contiguous((2, 3), (1, 2))
    assert is_contiguous((1, 3), (99, 1))


def test_gather_offsets_walks_c_order():
    assert gather_offsets((2, 3), (1, 2)).tolist() == [0, 2, 4, 1, 3, 5]
    assert gather_offsets((), ()).tolist() == [0]
    assert gather_offsets((2, 0), (0, 1)).tolist() == []


def test_resolve_reshape_fills_wildcard():
    assert resolve_reshape((-1, 2), 6) == (3, 2)
    assert resolve_reshape((2, 3), 6) == (2, 3)


@pytest.mark.parametrize("shape", [(-1, -1), (4,), (-1, 4)])
def test_resolve_reshape_rejects_bad_targets(shape):
    with pytest.raises(InvalidShape, match="Cannot reshape|unknown dimension"):
        resolve_reshape(shape, 6)


def test_normalize_axis():
    assert normalize_axis(-1, 3) == 2
    assert normalize_axis(0, 1) == 0
    with pytest.raises(InvalidShape):
        normalize_axis(3, 3)


def test_check_power_of_two():
    check_power_of_two(1, "fft")
    check_power_of_two(8, "fft")
    for n in (0, 6, 12):
        with pytest.raises(UnsupportedSize):
            check_power_of_two(n, "fft")

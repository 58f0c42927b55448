from __future__ import annotations

import numpy as _np
import pytest

from stridenum import DType, array, matmul
from stridenum.errors import InvalidShape
from stridenum.ndarray import NDArray


def test_default_record_is_contiguous_vector():
    a = NDArray(_np.arange(4, dtype=_np.float64))
    assert a.shape == (4,)
    assert a.strides == (1,)
    assert a.dtype is DType.FLOAT64
    assert a.ndim == 1
    assert a.size == 4
    assert a.is_contiguous


def test_constructor_checks_record_consistency():
    with pytest.raises(InvalidShape):
        NDArray(_np.zeros(5), (2, 3))
    with pytest.raises(TypeError):
        NDArray([1.0, 2.0])
    with pytest.raises(InvalidShape):
        NDArray(_np.zeros((2, 2)))
    with pytest.raises(TypeError):
        NDArray(_np.zeros(4), (4,), None, DType.INT32)
    with pytest.raises(InvalidShape):
        NDArray(_np.zeros(4), (2, 2), (-2, 1))
    with pytest.raises(InvalidShape):
        NDArray(_np.zeros(4), (2, 2), (1, 3))
    with pytest.raises(TypeError):
        NDArray(_np.zeros(4, dtype=_np.int64))


def test_item_and_indexing():
    a = array([[1, 2], [3, 4]])
    assert a[1, 0] == 3
    assert a[-1, -1] == 4
    assert isinstance(a.item(0, 1), int)
    with pytest.raises(IndexError):
        a[2, 0]
    with pytest.raises(IndexError):
        a[0]
    with pytest.raises(TypeError):
        a[0, 0.5]
    assert array([7.5]).item() == 7.5


def test_len_and_repr():
    a = array([[1, 2], [3, 4]])
    assert len(a) == 2
    assert repr(a) == "NDArray([[1, 2], [3, 4]], dtype=int32)"
    with pytest.raises(TypeError):
        len(array(3))


def test_strided_view_reads_through_strides():
    view = NDArray(_np.arange(6.0), (3, 2), (1, 3))
    assert not view.is_contiguous
    assert view.to_list() == [[0.0, 3.0], [1.0, 4.0], [2.0, 5.0]]
    assert view.copy().is_contiguous
    _np.testing.assert_array_equal(_np.asarray(view), _np.arange(6.0).reshape(2, 3).T)


def test_astype_applies_write_coercion():
    a = array([-1.0, 256.5, 3.9])
    assert a.astype("uint8").to_list() == [255, 0, 3]
    assert a.astype(DType.FLOAT32).dtype is DType.FLOAT32


def test_arithmetic_operators():
    a = array([[1, 2], [3, 4]])
    assert (a + 1).to_list() == [[2, 3], [4, 5]]
    assert (1 + a).to_list() == [[2, 3], [4, 5]]
    assert (10 - a).to_list() == [[9, 8], [7, 6]]
    assert (a * 2).to_list() == [[2, 4], [6, 8]]
    assert (-a).to_list() == [[-1, -2], [-3, -4]]
    assert (1 / array([2.0, 4.0])).to_list() == [0.5, 0.25]
    assert (2 ** array([1, 2, 3])).to_list() == [2, 4, 8]
    assert (a**2).dtype is DType.INT32


def test_matmul_operator_and_transpose_property():
    a = array([[1.0, 2.0], [3.0, 4.0]])
    assert (a @ a.T).to_list() == matmul(a, a.T).to_list() == [[5.0, 11.0], [11.0, 25.0]]


def test_methods_delegate_to_operations():
    a = array([[1, 2, 3], [4, 5, 6]])
    assert a.sum() == 21.0
    assert a.mean(axis=0).to_list() == [2.5, 3.5, 4.5]
    assert a.max() == 6.0
    assert a.min() == 1.0
    assert a.var() == pytest.approx(35.0 / 12.0)
    assert a.std() == pytest.approx((35.0 / 12.0) ** 0.5)
    assert a.reshape(3, 2).shape == (3, 2)
    assert a.reshape((6,)).shape == (6,)
    assert a.flatten().to_list() == [1, 2, 3, 4, 5, 6]
    assert a.transpose().to_list() == [[1, 4], [2, 5], [3, 6]]

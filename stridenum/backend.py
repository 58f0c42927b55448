"""Backend capability contract.

Both the reference and the accelerated backend derive from :class:`Backend`.
The public methods here own input validation and the dtype write-back, so the
two implementations reject the same inputs and coerce results the same way;
subclasses only supply the float64 primitives (``_add``, ``_sum``, ``_fft``,
...).  Buffers crossing this interface are flat numpy vectors already laid out
in C order; broadcasting happens in the operation layer before dispatch.
"""

from __future__ import annotations

import abc
import math
from typing import Any, Sequence

import numpy as _np

from .dtypes import DType, as_float64, cast_from_float64, resolve_dtype
from .errors import DimensionMismatch, InvalidShape, SingularMatrix, UnsupportedSize, _shape_to_text
from .shape import check_power_of_two

Operand = Any  # flat numpy buffer or Python scalar

SINGULAR_TOL = 1e-10
SMALL_MATRIX_SIZES = (2, 3)


def check_small_square(length: int, n: int, op: str) -> None:
    if n not in SMALL_MATRIX_SIZES:
        raise UnsupportedSize("%s only supports 2x2 and 3x3 matrices, got %dx%d" % (op, n, n))
    if length != n * n:
        raise DimensionMismatch("%s expects %d elements for a %dx%d matrix, got %d" % (op, n * n, n, n, length))


def check_matmul_shapes(shape_a: Sequence[int], shape_b: Sequence[int]) -> tuple[int, int, int]:
    if len(shape_a) != 2 or len(shape_b) != 2:
        raise DimensionMismatch(
            "matmul requires 2D arrays; got %s and %s" % (_shape_to_text(shape_a), _shape_to_text(shape_b))
        )
    m, k = shape_a
    k2, n = shape_b
    if k != k2:
        raise DimensionMismatch(
            "Shape mismatch: %s and %s" % (_shape_to_text(shape_a), _shape_to_text(shape_b))
        )
    return int(m), int(k), int(n)


def _interleaved_length(values: _np.ndarray, op: str) -> int:
    if values.shape[0] % 2:
        raise InvalidShape(
            "%s expects interleaved (real, imag) pairs; got an odd buffer length %d" % (op, values.shape[0])
        )
    n = values.shape[0] // 2
    check_power_of_two(n, op)
    return n


class Backend(abc.ABC):
    """Operation contract shared by every kernel implementation."""

    name: str = "backend"

    @property
    def is_ready(self) -> bool:
        return True

    def __repr__(self) -> str:
        return "<%s name=%r ready=%s>" % (type(self).__name__, self.name, self.is_ready)

    # arithmetic --------------------------------------------------------
    def add(self, a: _np.ndarray, b: Operand, dtype: Any) -> _np.ndarray:
        return self._binary(self._add, a, b, dtype)

    def sub(self, a: _np.ndarray, b: Operand, dtype: Any) -> _np.ndarray:
        return self._binary(self._sub, a, b, dtype)

    def mul(self, a: _np.ndarray, b: Operand, dtype: Any) -> _np.ndarray:
        return self._binary(self._mul, a, b, dtype)

    def div(self, a: _np.ndarray, b: Operand, dtype: Any) -> _np.ndarray:
        return self._binary(self._div, a, b, dtype)

    def pow(self, a: _np.ndarray, b: Operand, dtype: Any) -> _np.ndarray:
        return self._binary(self._pow, a, b, dtype)

    def _binary(self, kernel, a: _np.ndarray, b: Operand, dtype: Any) -> _np.ndarray:
        left = as_float64(a)
        if isinstance(b, _np.ndarray):
            right = as_float64(b)
            if right.shape[0] != left.shape[0]:
                raise DimensionMismatch(
                    "elementwise operands must have equal length; got %d and %d"
                    % (left.shape[0], right.shape[0])
                )
        else:
            right = float(b)
        return cast_from_float64(kernel(left, right), resolve_dtype(dtype))

    # reductions --------------------------------------------------------
    def sum(self, a: _np.ndarray) -> float:
        values = as_float64(a)
        if not values.size:
            return 0.0
        return float(self._sum(values))

    def prod(self, a: _np.ndarray) -> float:
        values = as_float64(a)
        if not values.size:
            return 1.0
        return float(self._prod(values))

    def mean(self, a: _np.ndarray) -> float:
        values = as_float64(a)
        if not values.size:
            return math.nan
        return float(self._mean(values))

    def max(self, a: _np.ndarray) -> float:
        values = as_float64(a)
        if not values.size:
            return -math.inf
        return float(self._max(values))

    def min(self, a: _np.ndarray) -> float:
        values = as_float64(a)
        if not values.size:
            return math.inf
        return float(self._min(values))

    def variance(self, a: _np.ndarray) -> float:
        """Population variance (divides by N)."""

        values = as_float64(a)
        if not values.size:
            return math.nan
        return float(self._variance(values))

    def std(self, a: _np.ndarray) -> float:
        values = as_float64(a)
        if not values.size:
            return math.nan
        return float(self._std(values))

    # linear algebra ----------------------------------------------------
    def matmul(
        self,
        a: _np.ndarray,
        shape_a: Sequence[int],
        b: _np.ndarray,
        shape_b: Sequence[int],
        dtype: Any,
    ) -> _np.ndarray:
        m, k, n = check_matmul_shapes(shape_a, shape_b)
        left = as_float64(a)
        right = as_float64(b)
        if left.shape[0] != m * k or right.shape[0] != k * n:
            raise DimensionMismatch("matmul buffers do not match their shapes")
        return cast_from_float64(self._matmul(left, right, m, k, n), resolve_dtype(dtype))

    def dot(self, a: _np.ndarray, b: _np.ndarray) -> float:
        left = as_float64(a)
        right = as_float64(b)
        if left.shape[0] != right.shape[0]:
            raise DimensionMismatch(
                "Arrays must have same length for dot product; got %d and %d" % (left.shape[0], right.shape[0])
            )
        return float(self._dot(left, right))

    def det(self, a: _np.ndarray, n: int) -> float:
        values = as_float64(a)
        check_small_square(values.shape[0], n, "det")
        return float(self._det(values, n))

    def inv(self, a: _np.ndarray, n: int, dtype: Any = DType.FLOAT64) -> _np.ndarray:
        values = as_float64(a)
        check_small_square(values.shape[0], n, "inv")
        det = float(self._det(values, n))
        if not math.isfinite(det) or abs(det) < SINGULAR_TOL:
            raise SingularMatrix("Singular matrix: determinant %.3e is within tolerance of zero" % det)
        return cast_from_float64(self._inv(values, n, det), resolve_dtype(dtype))

    # spectral ----------------------------------------------------------
    def fft(self, a: _np.ndarray) -> _np.ndarray:
        """Forward transform of interleaved ``(re, im)`` pairs."""

        values = as_float64(a)
        _interleaved_length(values, "fft")
        return as_float64(self._fft(values))

    def ifft(self, a: _np.ndarray) -> _np.ndarray:
        """Inverse transform with ``1/n`` normalization."""

        values = as_float64(a)
        _interleaved_length(values, "ifft")
        return as_float64(self._ifft(values))

    # primitives --------------------------------------------------------
    @abc.abstractmethod
    def _add(self, a: _np.ndarray, b: Operand) -> Any: ...

    @abc.abstractmethod
    def _sub(self, a: _np.ndarray, b: Operand) -> Any: ...

    @abc.abstractmethod
    def _mul(self, a: _np.ndarray, b: Operand) -> Any: ...

    @abc.abstractmethod
    def _div(self, a: _np.ndarray, b: Operand) -> Any: ...

    @abc.abstractmethod
    def _pow(self, a: _np.ndarray, b: Operand) -> Any: ...

    @abc.abstractmethod
    def _sum(self, a: _np.ndarray) -> float: ...

    @abc.abstractmethod
    def _prod(self, a: _np.ndarray) -> float: ...

    @abc.abstractmethod
    def _mean(self, a: _np.ndarray) -> float: ...

    @abc.abstractmethod
    def _max(self, a: _np.ndarray) -> float: ...

    @abc.abstractmethod
    def _min(self, a: _np.ndarray) -> float: ...

    @abc.abstractmethod
    def _variance(self, a: _np.ndarray) -> float: ...

    def _std(self, a: _np.ndarray) -> float:
        return math.sqrt(self._variance(a))

    @abc.abstractmethod
    def _matmul(self, a: _np.ndarray, b: _np.ndarray, m: int, k: int, n: int) -> Any: ...

    @abc.abstractmethod
    def _dot(self, a: _np.ndarray, b: _np.ndarray) -> float: ...

    @abc.abstractmethod
    def _det(self, a: _np.ndarray, n: int) -> float: ...

    @abc.abstractmethod
    def _inv(self, a: _np.ndarray, n: int, det: float) -> Any: ...

    @abc.abstractmethod
    def _fft(self, a: _np.ndarray) -> Any: ...

    @abc.abstractmethod
    def _ifft(self, a: _np.ndarray) -> Any: ...


__all__ = [
    "Backend",
    "SINGULAR_TOL",
    "check_matmul_shapes",
    "check_small_square",
]

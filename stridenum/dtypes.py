"""Closed dtype enumeration with its static storage table.

Every dtype maps to a numpy storage type and a fixed byte width.  Kernels
compute in float64 and write results back through :func:`cast_from_float64`,
which applies typed-array coercion: integer targets truncate toward zero,
non-finite values store as zero and out-of-range values wrap modulo
``2**bits``.
"""

from __future__ import annotations

import enum
from dataclasses import dataclass
from typing import Any, Dict, Tuple

import numpy as _np


class DType(str, enum.Enum):
    FLOAT64 = "float64"
    FLOAT32 = "float32"
    INT32 = "int32"
    INT16 = "int16"
    INT8 = "int8"
    UINT32 = "uint32"
    UINT16 = "uint16"
    UINT8 = "uint8"

    def __str__(self) -> str:
        return self.value

    @property
    def info(self) -> "DTypeInfo":
        return DTYPE_TABLE[self]

    @property
    def itemsize(self) -> int:
        return DTYPE_TABLE[self].itemsize

    @property
    def storage(self) -> _np.dtype:
        return DTYPE_TABLE[self].storage

    @property
    def is_integer(self) -> bool:
        return DTYPE_TABLE[self].bits is not None

    @classmethod
    def from_storage(cls, storage: Any) -> "DType":
        key = _np.dtype(storage)
        try:
            return _STORAGE_LOOKUP[key]
        except KeyError:
            raise TypeError("unsupported buffer storage %s" % (key,)) from None


@dataclass(frozen=True)
class DTypeInfo:
    itemsize: int
    storage: _np.dtype
    bits: int | None = None
    signed: bool = True


DTYPE_TABLE: Dict[DType, DTypeInfo] = {
    DType.FLOAT64: DTypeInfo(8, _np.dtype(_np.float64)),
    DType.FLOAT32: DTypeInfo(4, _np.dtype(_np.float32)),
    DType.INT32: DTypeInfo(4, _np.dtype(_np.int32), 32, True),
    DType.INT16: DTypeInfo(2, _np.dtype(_np.int16), 16, True),
    DType.INT8: DTypeInfo(1, _np.dtype(_np.int8), 8, True),
    DType.UINT32: DTypeInfo(4, _np.dtype(_np.uint32), 32, False),
    DType.UINT16: DTypeInfo(2, _np.dtype(_np.uint16), 16, False),
    DType.UINT8: DTypeInfo(1, _np.dtype(_np.uint8), 8, False),
}

_STORAGE_LOOKUP: Dict[_np.dtype, DType] = {info.storage: dtype for dtype, info in DTYPE_TABLE.items()}

# Highest precedence first.
PRECEDENCE: Tuple[DType, ...] = (
    DType.FLOAT64,
    DType.FLOAT32,
    DType.INT32,
    DType.INT16,
    DType.INT8,
    DType.UINT32,
    DType.UINT16,
    DType.UINT8,
)
_RANK = {dtype: len(PRECEDENCE) - idx for idx, dtype in enumerate(PRECEDENCE)}


def resolve_dtype(dtype: Any) -> DType:
    """Normalise ``dtype`` (enum member, name, numpy dtype or ``float``/``int``)."""

    if isinstance(dtype, DType):
        return dtype
    if dtype is float:
        return DType.FLOAT64
    if dtype is int:
        return DType.INT32
    if isinstance(dtype, str):
        try:
            return DType(dtype.strip().lower())
        except ValueError:
            raise TypeError("unknown dtype %r" % (dtype,)) from None
    return DType.from_storage(dtype)


def promote_types(a: DType, b: DType) -> DType:
    return a if _RANK[a] >= _RANK[b] else b


def as_float64(buffer: Any) -> _np.ndarray:
    """Return ``buffer`` as a contiguous float64 vector, copying only when needed."""

    return _np.ascontiguousarray(buffer, dtype=_np.float64).reshape(-1)


def cast_from_float64(values: Any, dtype: DType) -> _np.ndarray:
    """Write float64 results into fresh storage of ``dtype``."""

    arr = _np.asarray(values, dtype=_np.float64).reshape(-1)
    info = DTYPE_TABLE[dtype]
    if info.bits is None:
        with _np.errstate(over="ignore"):
            return arr.astype(info.storage)
    with _np.errstate(invalid="ignore"):
        truncated = _np.where(_np.isfinite(arr), _np.trunc(arr), 0.0)
        wrapped = _np.mod(truncated, float(2 ** info.bits))
    return wrapped.astype(_np.int64).astype(info.storage)


__all__ = [
    "DType",
    "DTYPE_TABLE",
    "DTypeInfo",
    "PRECEDENCE",
    "as_float64",
    "cast_from_float64",
    "promote_types",
    "resolve_dtype",
]

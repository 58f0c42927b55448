"""Exception taxonomy shared by every backend.

Shape, broadcast and dimension errors are raised synchronously by the
operation that detects them.  Failures while loading the accelerated kernels
are reported as :class:`~stridenum.manager.BackendInit` status values instead
of being raised, with the exception of :func:`stridenum.create_backend` which
surfaces :class:`ModuleUnavailable` directly.
"""

from __future__ import annotations

from typing import Sequence

import numpy as _np


def _shape_to_text(shape: Sequence[int]) -> str:
    return "(" + ", ".join(str(dim) for dim in shape) + ("," if len(shape) == 1 else "") + ")"


class NumericError(Exception):
    """Base class for errors raised by stridenum."""


class InvalidShape(NumericError, ValueError):
    pass


class BroadcastError(NumericError, ValueError):
    def __init__(self, shape_a: Sequence[int], shape_b: Sequence[int], message: str | None = None):
        self.shapes = (tuple(shape_a), tuple(shape_b))
        if message is None:
            message = "shapes %s and %s cannot be broadcast together" % (
                _shape_to_text(shape_a),
                _shape_to_text(shape_b),
            )
        super().__init__(message)


class DimensionMismatch(NumericError, ValueError):
    pass


class SingularMatrix(NumericError, _np.linalg.LinAlgError):
    pass


class UnsupportedSize(NumericError, ValueError):
    pass


class ModuleUnavailable(NumericError, ImportError):
    pass


__all__ = [
    "BroadcastError",
    "DimensionMismatch",
    "InvalidShape",
    "ModuleUnavailable",
    "NumericError",
    "SingularMatrix",
    "UnsupportedSize",
]

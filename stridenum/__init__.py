"""Strided n-dimensional arrays with interchangeable reference and accelerated kernels."""

from importlib.metadata import PackageNotFoundError, version

from . import fft, linalg
from .broadcasting import broadcast_shapes, broadcast_to, can_broadcast
from .config import BackendSettings
from .creation import arange, array, eye, from_numpy, full, ones, zeros
from .dtypes import DType, promote_types
from .errors import (
    BroadcastError,
    DimensionMismatch,
    InvalidShape,
    ModuleUnavailable,
    NumericError,
    SingularMatrix,
    UnsupportedSize,
)
from .linalg import det, dot, inner, inv, matmul, norm, outer, trace
from .manager import (
    BackendContext,
    BackendInfo,
    BackendInit,
    BackendState,
    create_backend,
    current_backend_info,
    default_context,
    get_backend,
    initialize_accelerated,
    set_default_context,
    use_reference,
)
from .ndarray import NDArray
from .ops import (
    add,
    div,
    flatten,
    max,
    mean,
    min,
    mul,
    pow,
    prod,
    reshape,
    std,
    sub,
    sum,
    transpose,
    var,
    variance,
)

try:  # pragma: no cover - metadata is provided at build time
    __version__ = version("stridenum")
except PackageNotFoundError:  # pragma: no cover - fallback during development
    __version__ = "0.0.0.dev0"


__all__ = [
    "BackendContext",
    "BackendInfo",
    "BackendInit",
    "BackendSettings",
    "BackendState",
    "BroadcastError",
    "DType",
    "DimensionMismatch",
    "InvalidShape",
    "ModuleUnavailable",
    "NDArray",
    "NumericError",
    "SingularMatrix",
    "UnsupportedSize",
    "__version__",
    "add",
    "arange",
    "array",
    "broadcast_shapes",
    "broadcast_to",
    "can_broadcast",
    "create_backend",
    "current_backend_info",
    "default_context",
    "det",
    "div",
    "dot",
    "eye",
    "fft",
    "flatten",
    "from_numpy",
    "full",
    "get_backend",
    "initialize_accelerated",
    "inner",
    "inv",
    "linalg",
    "matmul",
    "max",
    "mean",
    "min",
    "mul",
    "norm",
    "ones",
    "outer",
    "pow",
    "prod",
    "promote_types",
    "reshape",
    "set_default_context",
    "std",
    "sub",
    "sum",
    "trace",
    "transpose",
    "use_reference",
    "var",
    "variance",
    "zeros",
]

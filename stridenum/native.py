"""Bridge to the compiled ``stridenum_native`` kernels."""

from __future__ import annotations

import contextlib
from typing import Any, Callable, Iterator

import numpy as np

from .errors import ModuleUnavailable

try:
    import stridenum_native as _native_api
except ImportError as exc:  # pragma: no cover - import-time failure should surface early
    raise ModuleUnavailable(
        "The stridenum_native extension is missing. Build it via "
        "`python native/cpp/setup_stridenum_native.py build_ext --inplace` before importing."
    ) from exc


def is_available() -> bool:
    return True


def version() -> str:
    """Version baked into the compiled module at build time."""

    return str(getattr(_native_api, "__version__", "dev"))


@contextlib.contextmanager
def _borrowed(result: Any) -> Iterator[np.ndarray]:
    """Expose a ``ResultBuffer`` as float64 and release it on every exit path."""

    try:
        yield np.frombuffer(result, dtype=np.float64)
    finally:
        result.release()


def _delegate(name: str, *args: Any) -> Any:
    func: Callable[..., Any] = getattr(_native_api, name)
    return func(*args)


def _delegate_buffer(name: str, *args: Any) -> np.ndarray:
    with _borrowed(_delegate(name, *args)) as view:
        return view.copy()


def add(a, b):
    return _delegate_buffer("add", a, b)


def sub(a, b):
    return _delegate_buffer("sub", a, b)


def mul(a, b):
    return _delegate_buffer("mul", a, b)


def div(a, b):
    return _delegate_buffer("div", a, b)


def pow(a, b):
    return _delegate_buffer("pow", a, b)


def sum(a):
    return _delegate("sum", a)


def prod(a):
    return _delegate("prod", a)


def mean(a):
    return _delegate("mean", a)


def max(a):
    return _delegate("max", a)


def min(a):
    return _delegate("min", a)


def variance(a):
    return _delegate("variance", a)


def std(a):
    return _delegate("std", a)


def matmul(a, b, m, k, n):
    return _delegate_buffer("matmul", a, b, m, k, n)


def dot(a, b):
    return _delegate("dot", a, b)


def det(a, n):
    return _delegate("det", a, n)


def inv(a, n, det_value):
    return _delegate_buffer("inv", a, n, det_value)


def fft(a):
    return _delegate_buffer("fft", a)


def ifft(a):
    return _delegate_buffer("ifft", a)

"""Accelerated backend dispatching to a compiled kernel provider.

A provider is a module exposing ``is_available()`` plus one function per
primitive (``add``, ``sum``, ``matmul``, ``fft``, ...) over contiguous float64
vectors.  Two ship with the package: :mod:`stridenum.native` wraps the
pybind11 extension and :mod:`stridenum.numpy_kernels` runs on numpy's ufuncs.
"""

from __future__ import annotations

import importlib
import logging
import types
from typing import Any, List, Tuple

from .backend import Backend
from .config import ACCEL_MODULES
from .errors import ModuleUnavailable, NumericError
from .reference import ReferenceBackend

LOGGER = logging.getLogger(__name__)

_PROVIDERS = {
    "cpp": "stridenum.native",
    "numpy": "stridenum.numpy_kernels",
}

# Providers whose failures propagate unless strict mode is configured explicitly.
_STRICT_BY_DEFAULT = frozenset({"cpp"})


def _provider_order(preference: str) -> Tuple[str, ...]:
    preference = (preference or "auto").strip().lower()
    if preference == "auto":
        return ("cpp", "numpy")
    if preference not in ACCEL_MODULES:
        raise ModuleUnavailable(
            "unknown accelerated module %r; expected one of %s" % (preference, ", ".join(ACCEL_MODULES))
        )
    return (preference,)


def _import_provider(name: str) -> types.ModuleType:
    module = importlib.import_module(_PROVIDERS[name])
    if not module.is_available():
        raise ModuleUnavailable("%s kernels report themselves unavailable" % name)
    return module


def load_accelerated_backend(preference: str = "auto", strict: bool | None = None) -> "AcceleratedBackend":
    """Import the first usable provider and wrap it in an :class:`AcceleratedBackend`.

    Raises :class:`ModuleUnavailable` listing every provider that was tried
    when none of them can be imported.
    """

    failures: List[str] = []
    for name in _provider_order(preference):
        try:
            module = _import_provider(name)
        except Exception as exc:
            LOGGER.warning("Accelerated provider %s unavailable: %s", name, exc)
            failures.append("%s: %s" % (name, exc))
            continue
        effective_strict = strict if strict is not None else name in _STRICT_BY_DEFAULT
        build = module.version() if hasattr(module, "version") else None
        LOGGER.info(
            "Using accelerated provider %s (%s, build=%s, strict=%s)", name, module.__name__, build, effective_strict
        )
        return AcceleratedBackend(module, provider=name, strict=effective_strict)
    raise ModuleUnavailable("no accelerated kernels could be loaded (%s)" % "; ".join(failures))


class AcceleratedBackend(Backend):
    name = "accelerated"

    def __init__(self, kernels: Any, provider: str, strict: bool = False) -> None:
        self._kernels = kernels
        self.provider = provider
        self.strict = strict
        self._fallback = ReferenceBackend()

    def __repr__(self) -> str:
        return "<AcceleratedBackend provider=%r strict=%s>" % (self.provider, self.strict)

    def _dispatch(self, name: str, *args: Any) -> Any:
        func = getattr(self._kernels, name, None)
        if func is None:
            return getattr(self._fallback, "_" + name)(*args)
        try:
            return func(*args)
        except NumericError:
            raise
        except Exception:
            if self.strict:
                raise
            LOGGER.debug(
                "Accelerated %s kernel failed on provider %s; using the reference kernel",
                name,
                self.provider,
                exc_info=True,
            )
            return getattr(self._fallback, "_" + name)(*args)

    def _add(self, a, b):
        return self._dispatch("add", a, b)

    def _sub(self, a, b):
        return self._dispatch("sub", a, b)

    def _mul(self, a, b):
        return self._dispatch("mul", a, b)

    def _div(self, a, b):
        return self._dispatch("div", a, b)

    def _pow(self, a, b):
        return self._dispatch("pow", a, b)

    def _sum(self, a):
        return self._dispatch("sum", a)

    def _prod(self, a):
        return self._dispatch("prod", a)

    def _mean(self, a):
        return self._dispatch("mean", a)

    def _max(self, a):
        return self._dispatch("max", a)

    def _min(self, a):
        return self._dispatch("min", a)

    def _variance(self, a):
        return self._dispatch("variance", a)

    def _std(self, a):
        return self._dispatch("std", a)

    def _matmul(self, a, b, m, k, n):
        return self._dispatch("matmul", a, b, m, k, n)

    def _dot(self, a, b):
        return self._dispatch("dot", a, b)

    def _det(self, a, n):
        return self._dispatch("det", a, n)

    def _inv(self, a, n, det):
        return self._dispatch("inv", a, n, det)

    def _fft(self, a):
        return self._dispatch("fft", a)

    def _ifft(self, a):
        return self._dispatch("ifft", a)


__all__ = ["AcceleratedBackend", "load_accelerated_backend"]

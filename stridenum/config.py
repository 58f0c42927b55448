"""Environment driven settings for backend selection."""

from __future__ import annotations

import os
from dataclasses import dataclass
from typing import Mapping

ENV_ACCEL_MODULE = "STRIDENUM_ACCEL_MODULE"
ENV_FORCE_REFERENCE = "STRIDENUM_FORCE_REFERENCE"
ENV_STRICT = "STRIDENUM_STRICT"

ACCEL_MODULES = ("auto", "cpp", "numpy")


def parse_bool_env(value: str) -> bool | None:
    lowered = value.strip().lower()
    if lowered in {"1", "true", "yes", "on"}:
        return True
    if lowered in {"0", "false", "no", "off"}:
        return False
    return None


@dataclass(frozen=True)
class BackendSettings:
    """How a :class:`~stridenum.manager.BackendContext` picks its kernels.

    ``accel_module`` names the compiled kernel provider tried on upgrade
    (``auto`` tries ``cpp`` then ``numpy``).  ``force_reference`` turns every
    upgrade request into a reported failure.  ``strict`` controls whether a
    runtime failure inside an accelerated kernel propagates (``True``) or is
    retried on the reference kernels (``False``); ``None`` defers to the
    provider.
    """

    accel_module: str = "auto"
    force_reference: bool = False
    strict: bool | None = None

    @classmethod
    def from_env(cls, environ: Mapping[str, str] | None = None) -> "BackendSettings":
        env = os.environ if environ is None else environ
        accel = (env.get(ENV_ACCEL_MODULE, "auto") or "auto").strip().lower()
        force = parse_bool_env(env.get(ENV_FORCE_REFERENCE, "0")) or False
        strict = parse_bool_env(env.get(ENV_STRICT, "auto"))
        return cls(accel_module=accel, force_reference=force, strict=strict)


__all__ = [
    "ACCEL_MODULES",
    "BackendSettings",
    "ENV_ACCEL_MODULE",
    "ENV_FORCE_REFERENCE",
    "ENV_STRICT",
    "parse_bool_env",
]

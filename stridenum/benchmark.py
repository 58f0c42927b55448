"""Timing and parity comparison between the reference and accelerated backends."""

from __future__ import annotations

import json
import logging
import os
import statistics
import time
from typing import Any, Callable, Dict, List, Mapping, Tuple

import numpy as np

from . import fft as _fft
from . import linalg, ops
from .config import BackendSettings
from .creation import from_numpy
from .manager import BackendContext

LOGGER = logging.getLogger(__name__)

Case = Tuple[str, Callable[[BackendContext], Any]]


def _build_cases(size: int, matrix: int, fft_size: int, seed: int) -> List[Case]:
    rng = np.random.default_rng(seed)
    vec_a = from_numpy(rng.standard_normal(size))
    vec_b = from_numpy(rng.standard_normal(size))
    ints = from_numpy(rng.integers(-1000, 1000, size=size).astype(np.int32))
    grid = from_numpy(rng.standard_normal((matrix, matrix)))
    row = from_numpy(rng.standard_normal(matrix))
    small = from_numpy(rng.standard_normal((3, 3)) + 3.0 * np.eye(3))
    signal = from_numpy(rng.standard_normal(fft_size))
    return [
        ("add", lambda ctx: ops.add(vec_a, vec_b, ctx=ctx)),
        ("mul_scalar", lambda ctx: ops.mul(vec_a, 2.5, ctx=ctx)),
        ("add_int32", lambda ctx: ops.add(ints, ints, ctx=ctx)),
        ("add_broadcast", lambda ctx: ops.add(grid, row, ctx=ctx)),
        ("div", lambda ctx: ops.div(vec_a, vec_b, ctx=ctx)),
        ("sum", lambda ctx: ops.sum(vec_a, ctx=ctx)),
        ("mean", lambda ctx: ops.mean(vec_a, ctx=ctx)),
        ("variance", lambda ctx: ops.variance(vec_a, ctx=ctx)),
        ("sum_axis0", lambda ctx: ops.sum(grid, axis=0, ctx=ctx)),
        ("transpose", lambda ctx: ops.transpose(grid)),
        ("matmul", lambda ctx: linalg.matmul(grid, grid, ctx=ctx)),
        ("inv3", lambda ctx: linalg.inv(small, ctx=ctx)),
        ("fft", lambda ctx: _fft.fft(signal, ctx=ctx)),
    ]


def _time_case(func: Callable[[BackendContext], Any], ctx: BackendContext, repeats: int) -> Tuple[float, Any]:
    timings: List[float] = []
    result = None
    for _ in range(max(1, repeats)):
        start = time.perf_counter()
        result = func(ctx)
        timings.append((time.perf_counter() - start) * 1000.0)
    return float(statistics.median(timings)), result


def _linf(a: Any, b: Any) -> float:
    diff = np.asarray(a, dtype=np.float64) - np.asarray(b, dtype=np.float64)
    return float(np.max(np.abs(diff))) if diff.size else 0.0


def run_benchmark(
    *,
    size: int = 4096,
    matrix: int = 32,
    fft_size: int = 1024,
    repeats: int = 5,
    seed: int = 0,
    settings: BackendSettings | None = None,
    output_dir: str | None = None,
) -> Dict[str, object]:
    """Time every case on both backends and record the largest absolute difference."""

    settings = settings if settings is not None else BackendSettings.from_env()
    reference_ctx = BackendContext(settings)
    accelerated_ctx = BackendContext(settings)
    init = accelerated_ctx.initialize_accelerated_sync()
    accelerated_info: Dict[str, object] = {
        "available": init.success,
        "provider": getattr(init.backend, "provider", None),
        "error": init.error,
    }
    if not init.success:
        LOGGER.warning("Benchmarking the reference backend only: %s", init.error)

    operations: Dict[str, Dict[str, float | None]] = {}
    for name, func in _build_cases(size, matrix, fft_size, seed):
        ref_ms, ref_result = _time_case(func, reference_ctx, repeats)
        entry: Dict[str, float | None] = {"reference_ms": ref_ms, "accelerated_ms": None, "speedup": None, "linf": None}
        if init.success:
            acc_ms, acc_result = _time_case(func, accelerated_ctx, repeats)
            entry["accelerated_ms"] = acc_ms
            entry["speedup"] = ref_ms / acc_ms if acc_ms > 0 else None
            entry["linf"] = _linf(ref_result, acc_result)
        operations[name] = entry

    metrics: Dict[str, object] = {
        "config": {"size": size, "matrix": matrix, "fft_size": fft_size, "repeats": repeats, "seed": seed},
        "accelerated": accelerated_info,
        "operations": operations,
    }

    if output_dir is not None:
        os.makedirs(output_dir, exist_ok=True)
        with open(os.path.join(output_dir, "benchmark_report.json"), "w", encoding="utf-8") as fh:
            json.dump(metrics, fh, indent=2)
        _write_markdown_report(metrics, os.path.join(output_dir, "benchmark_report.md"))

    return metrics


def _fmt(value: Any, spec: str) -> str:
    return "n/a" if value is None else format(value, spec)


def _write_markdown_report(metrics: Mapping[str, object], path: str) -> None:
    accelerated = metrics.get("accelerated", {})
    operations = metrics.get("operations", {})

    lines = ["# stridenum backend benchmark", ""]
    if isinstance(accelerated, Mapping):
        if accelerated.get("available"):
            lines.append(f"- Accelerated provider: {accelerated.get('provider')}")
        else:
            lines.append(f"- Accelerated backend unavailable: {accelerated.get('error')}")
    lines.append("")
    lines.append("| Operation | Reference (ms) | Accelerated (ms) | Speedup | L_inf |")
    lines.append("| --- | --- | --- | --- | --- |")
    if isinstance(operations, Mapping):
        for name, info in operations.items():
            lines.append(
                "| {} | {} | {} | {} | {} |".format(
                    name,
                    _fmt(info.get("reference_ms"), ".3f"),
                    _fmt(info.get("accelerated_ms"), ".3f"),
                    _fmt(info.get("speedup"), ".2f"),
                    _fmt(info.get("linf"), ".3e"),
                )
            )
    lines.append("")

    with open(path, "w", encoding="utf-8") as handle:
        handle.write("\n".join(lines))


__all__ = ["run_benchmark"]

#!/usr/bin/env python3
"""Compare reference and accelerated stridenum kernels for speed and numerical parity."""

from __future__ import annotations

import argparse
import json
import logging
import sys
from pathlib import Path


REPO_ROOT = Path(__file__).resolve().parent.parent
if str(REPO_ROOT) not in sys.path:
    sys.path.insert(0, str(REPO_ROOT))

from stridenum.benchmark import run_benchmark
from stridenum.config import ACCEL_MODULES, BackendSettings


def main() -> None:
    parser = argparse.ArgumentParser(description=__doc__)
    parser.add_argument("--output", type=Path, default=None, help="Directory for the JSON and Markdown reports.")
    parser.add_argument("--size", type=int, default=4096, help="Length of the vectors used by elementwise cases.")
    parser.add_argument("--matrix", type=int, default=32, help="Side of the square matrices used by matmul.")
    parser.add_argument("--fft-size", type=int, default=1024, help="Transform length; must be a power of two.")
    parser.add_argument("--repeats", type=int, default=5, help="Timed runs per case; the median is reported.")
    parser.add_argument("--seed", type=int, default=0, help="Random seed for the generated inputs.")
    parser.add_argument(
        "--accel-module",
        choices=ACCEL_MODULES,
        default=None,
        help="Accelerated provider to load (defaults to STRIDENUM_ACCEL_MODULE or auto).",
    )
    parser.add_argument("--verbose", action="store_true", help="Log provider selection and fallbacks.")
    args = parser.parse_args()

    logging.basicConfig(level=logging.DEBUG if args.verbose else logging.WARNING)
    settings = BackendSettings.from_env()
    if args.accel_module is not None:
        settings = BackendSettings(args.accel_module, settings.force_reference, settings.strict)

    metrics = run_benchmark(
        size=args.size,
        matrix=args.matrix,
        fft_size=args.fft_size,
        repeats=args.repeats,
        seed=args.seed,
        settings=settings,
        output_dir=str(args.output) if args.output is not None else None,
    )
    print(json.dumps(metrics, indent=2))


if __name__ == "__main__":
    main()

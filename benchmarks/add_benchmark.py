#!/usr/bin/env python3
"""
Elementwise add benchmark across physical layouts.

Times ``namedarray.add`` on operands that share a logical shape but differ in
layout: dense row-major, column-major (transposed strides), and a row vector
broadcast over the column axis.
"""

from __future__ import annotations

import argparse
import sys
import time
from dataclasses import dataclass
from typing import Callable, Dict, Iterable, List

import numpy as np

from namedarray import AxisIndex, NamedArray, NamedArrayView, TrackingAllocator, add, axis_enum

IJ = axis_enum("i", "j")


@dataclass
class BenchmarkResult:
    layout: str
    elements: int
    min_s: float
    mean_s: float
    iterations: int
    elements_per_s: float


def build_operands(rows: int, cols: int, seed: int) -> Dict[str, NamedArrayView]:
    rng = np.random.default_rng(seed)
    n = rows * cols
    row_idx = AxisIndex.contiguous(IJ, i=rows, j=cols)
    col_idx = AxisIndex(IJ, (rows, cols), (1, rows))
    broad_idx = AxisIndex.contiguous(IJ, i=rows, j=1).broadcast_axis("j", cols)
    return {
        "row_major": NamedArrayView(row_idx, rng.normal(size=n)),
        "col_major": NamedArrayView(col_idx, rng.normal(size=n)),
        "broadcast": NamedArrayView(broad_idx, rng.normal(size=rows)),
    }


def bench(fn: Callable[[], object], *, iterations: int, warmup: int) -> Iterable[float]:
    timings = []
    for step in range(iterations + warmup):
        start = time.perf_counter()
        fn()
        elapsed = time.perf_counter() - start
        if step >= warmup:
            timings.append(elapsed)
    return timings


def run(rows: int, cols: int, *, iterations: int, warmup: int, seed: int) -> List[BenchmarkResult]:
    allocator = TrackingAllocator()
    operands = build_operands(rows, cols, seed)
    base = operands["row_major"]
    out = NamedArray.alloc(allocator, IJ, i=rows, j=cols, dtype=np.float64)
    results: List[BenchmarkResult] = []
    try:
        for layout, other in operands.items():
            timings = list(
                bench(lambda: add(base, other, out), iterations=iterations, warmup=warmup)
            )
            min_s = min(timings)
            results.append(
                BenchmarkResult(
                    layout=layout,
                    elements=rows * cols,
                    min_s=min_s,
                    mean_s=sum(timings) / len(timings),
                    iterations=iterations,
                    elements_per_s=(rows * cols) / min_s if min_s > 0 else float("inf"),
                )
            )
    finally:
        out.release(allocator)
    allocator.assert_no_leaks()
    return results


def _build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(description=__doc__.strip().splitlines()[0])
    parser.add_argument("--rows", type=int, default=512)
    parser.add_argument("--cols", type=int, default=512)
    parser.add_argument("--iterations", type=int, default=20)
    parser.add_argument("--warmup", type=int, default=3)
    parser.add_argument("--seed", type=int, default=0)
    return parser


def main(argv: List[str]) -> int:
    args = _build_parser().parse_args(argv)
    results = run(
        args.rows,
        args.cols,
        iterations=args.iterations,
        warmup=args.warmup,
        seed=args.seed,
    )
    for result in results:
        print(
            f"{result.layout:>10}: min {result.min_s * 1e3:8.3f} ms  "
            f"mean {result.mean_s * 1e3:8.3f} ms  "
            f"{result.elements_per_s / 1e6:8.2f} Melem/s"
        )
    return 0


if __name__ == "__main__":  # pragma: no cover
    sys.exit(main(sys.argv[1:]))

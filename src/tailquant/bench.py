"""Simple benchmarking harness for tailquant.

Measures insertion throughput, the slowest single insert (the one that
triggers a flush) and approximate memory while feeding a synthetic stream.
Keeps dependencies minimal; for deeper profiling use py-spy or scalene.
"""
from __future__ import annotations

import time
import tracemalloc
from dataclasses import dataclass
from typing import Any, Sequence

from .estimator import CKMSQuantiles


@dataclass
class BenchResult:
    values: int
    elapsed: float
    worst_insert: float
    snapshot_time: float
    peak_bytes: int
    samples: int

    @property
    def per_second(self) -> float:
        return self.values / self.elapsed if self.elapsed else float("inf")


def run(est: CKMSQuantiles, values: Sequence[Any]) -> BenchResult:
    tracemalloc.start()
    try:
        worst = 0.0
        start = time.perf_counter()
        for v in values:
            t0 = time.perf_counter()
            est.insert(v)
            dt = time.perf_counter() - t0
            if dt > worst:
                worst = dt
        elapsed = time.perf_counter() - start
        t0 = time.perf_counter()
        est.snapshot()
        snap_time = time.perf_counter() - t0
        _, peak = tracemalloc.get_traced_memory()
    finally:
        tracemalloc.stop()
    return BenchResult(len(values), elapsed, worst, snap_time, peak, est.get_sample_count())


def report(res: BenchResult) -> str:
    return "\n".join([
        f"Inserted {res.values} values in {res.elapsed:.3f}s -> {res.per_second:,.0f} values/sec",
        f"Slowest insert {res.worst_insert * 1e3:.3f} ms; snapshot {res.snapshot_time * 1e3:.3f} ms",
        f"Peak mem ~{res.peak_bytes / 1024 / 1024:.2f} MB; summary samples: {res.samples}",
    ])


__all__ = ["BenchResult", "run", "report"]

"""Rank-error checks against an exact sort.

Used by ``tailquant check`` and the test-suite to confirm that every estimate
lands within ``error * N`` ranks of ``target * N``. The exact side keeps the
whole stream in memory, so this is for verification runs only.
"""
from __future__ import annotations

from dataclasses import asdict, dataclass
from typing import Any, Dict, List, Mapping, Sequence

import numpy as np

from .quantile import Quantile

STREAM_KINDS = ("uniform", "normal", "lognormal", "sorted", "reversed")


@dataclass
class RankCheck:
    quantile: Quantile
    estimate: Any
    desired_rank: float
    rank_low: int  # 1-based rank of the first occurrence of estimate
    rank_high: int  # 1-based rank of the last occurrence
    rank_error: float
    allowed: float

    @property
    def ok(self) -> bool:
        return self.rank_error <= self.allowed

    def to_dict(self) -> Dict[str, Any]:
        data = asdict(self)
        data["quantile"] = {"target": self.quantile.target, "error": self.quantile.error}
        data["ok"] = self.ok
        return data


def synthetic_stream(kind: str, n: int, seed: int = 0) -> List[Any]:
    rng = np.random.default_rng(seed)
    if kind == "uniform":
        return rng.integers(0, 1_000_000, size=n).tolist()
    if kind == "normal":
        return rng.normal(0.0, 1.0, size=n).tolist()
    if kind == "lognormal":
        return rng.lognormal(0.0, 1.0, size=n).tolist()
    if kind == "sorted":
        return list(range(1, n + 1))
    if kind == "reversed":
        return list(range(n, 0, -1))
    raise ValueError(f"unknown stream kind {kind!r}; expected one of {', '.join(STREAM_KINDS)}")


def rank_errors(values: Sequence[Any], snapshot: Mapping[Quantile, Any]) -> List[RankCheck]:
    """Compare each snapshot estimate with the exact rank of that value in ``values``.

    With duplicates an estimate covers a range of ranks; the error is the
    distance from the desired rank to the nearest rank in that range.
    """
    data = np.sort(np.asarray(values))
    n = len(data)
    checks: List[RankCheck] = []
    for q in sorted(snapshot):
        est = snapshot[q]
        low = int(np.searchsorted(data, est, side="left")) + 1
        high = int(np.searchsorted(data, est, side="right"))
        desired = q.target * n
        if low <= desired <= high:
            err = 0.0
        else:
            err = float(min(abs(low - desired), abs(high - desired)))
        checks.append(RankCheck(q, est, desired, low, high, err, q.error * n))
    return checks


__all__ = ["RankCheck", "STREAM_KINDS", "synthetic_stream", "rank_errors"]

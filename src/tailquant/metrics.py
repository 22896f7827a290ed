"""Metrics helpers for CKMSQuantiles.

``estimator_metrics`` is a plain-dict view of an estimator suitable for HTTP
or logging. ``IntervalQuantiles`` is the reporting side: values are inserted
as they are observed and ``rollover()`` publishes the current estimates as a
gauge set keyed by quantile label before starting a fresh interval.
"""
from __future__ import annotations

import threading
import time
from typing import Any, Dict, Optional

from .config import EstimatorConfig
from .estimator import CKMSQuantiles
from .logutil import get_logger


def estimator_metrics(est: CKMSQuantiles) -> Dict[str, Any]:
    snap = est.snapshot() or {}
    return {
        "count": est.get_count(),
        "samples": est.get_sample_count(),
        "buffered": est.get_buffered_count(),
        "quantiles": {q.label: snap.get(q) for q in sorted(est.quantiles)},
        "config": {
            "buffer_size": est.buffer_size,
            "quantiles": [{"target": q.target, "error": q.error} for q in sorted(est.quantiles)],
        },
    }


class IntervalQuantiles:
    """Quantile gauges computed over successive intervals.

    Each ``rollover()`` replaces the published gauges with the estimates for
    the values added since the previous rollover. An interval without values
    publishes no gauges (an empty dict) rather than zeros.
    """

    def __init__(self, cfg: Optional[EstimatorConfig] = None) -> None:
        self.cfg = cfg or EstimatorConfig()
        self.estimator = self.cfg.build_estimator()
        self._lock = threading.Lock()
        self._gauges: Dict[str, Any] = {}
        self._last_count = 0
        self._rollovers = 0
        self._last_rollover: Optional[float] = None

    def add(self, value: Any) -> None:
        # rollover snapshots, counts and clears as one step; inserts wait for it
        with self._lock:
            self.estimator.insert(value)

    def rollover(self) -> Dict[str, Any]:
        with self._lock:
            snap = self.estimator.snapshot()
            count = self.estimator.get_count()
            self.estimator.clear()
            self._gauges = {q.label: v for q, v in snap.items()} if snap else {}
            self._last_count = count
            self._rollovers += 1
            self._last_rollover = time.time()
            get_logger().info("rollover %d published %d gauges over %d values", self._rollovers, len(self._gauges), count)
            return dict(self._gauges)

    def reset(self) -> None:
        """Drop the current interval and the published gauges."""
        with self._lock:
            self.estimator.clear()
            self._gauges = {}
            self._last_count = 0

    def gauges(self) -> Dict[str, Any]:
        with self._lock:
            return dict(self._gauges)

    def stats(self) -> Dict[str, Any]:
        with self._lock:
            return {
                "interval_count": self._last_count,
                "rollovers": self._rollovers,
                "last_rollover": self._last_rollover,
                "gauges": dict(self._gauges),
            }


__all__ = ["estimator_metrics", "IntervalQuantiles"]

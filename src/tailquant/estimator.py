"""Streaming targeted quantiles using the CKMS algorithm.

Cormode, Korn, Muthukrishnan & Srivastava, "Effective Computation of Biased
Quantiles over Data Streams" (ICDE 2005). This generalizes Greenwald & Khanna
("Space-efficient online computation of quantile summaries", SIGMOD 2001) by
allowing a different error bound per targeted quantile, which makes high
percentiles far cheaper to track than one uniform error would.

Values are staged in a fixed-size buffer. When the buffer fills, it is sorted,
merged into the compressed summary and the summary is compressed, all inside
the ``insert()`` call that filled it. That call costs
O(buffer log buffer + summary) while every other insert is O(1), so callers
measuring latency should expect a periodic spike.
"""

from __future__ import annotations

import logging
import math
import threading
from dataclasses import dataclass
from typing import Any, Dict, Iterable, List, Optional, Tuple

from .errors import EmptyEstimatorError, InvalidConfigurationError
from .logutil import get_logger
from .quantile import Quantile

DEFAULT_BUFFER_SIZE = 500


@dataclass
class SampleItem:
    value: Any  # observed data point
    g: int  # r_min(this item) - r_min(previous item)
    delta: int  # r_max - r_min for this item


class CKMSQuantiles:
    """Thread-safe estimator for a fixed set of targeted quantiles.

    Every public method takes the instance lock; buffer, summary and count
    are only ever touched together.
    """

    def __init__(self, quantiles: Iterable[Quantile], buffer_size: int = DEFAULT_BUFFER_SIZE) -> None:
        qs = tuple(quantiles)
        if not qs:
            raise InvalidConfigurationError("at least one quantile is required")
        for q in qs:
            if not isinstance(q, Quantile):
                raise InvalidConfigurationError(f"expected Quantile, got {q!r}")
        if isinstance(buffer_size, bool) or not isinstance(buffer_size, int) or buffer_size < 1:
            raise InvalidConfigurationError(f"buffer_size must be a positive integer, got {buffer_size!r}")
        self._quantiles: Tuple[Quantile, ...] = qs
        self._buffer_size = buffer_size
        self._buffer: List[Any] = []
        self._samples: List[SampleItem] = []
        self._count = 0
        self._lock = threading.Lock()

    @property
    def quantiles(self) -> Tuple[Quantile, ...]:
        return self._quantiles

    @property
    def buffer_size(self) -> int:
        return self._buffer_size

    def _allowable_error(self, rank: int, size: int) -> float:
        """f(r_i, n) from the CKMS paper: how wide the rank range at ``rank`` may be.

        ``rank`` is an index into a summary of ``size`` items; the tightest
        configured quantile wins.
        """
        min_error = float(size + 1)
        for q in self._quantiles:
            if rank <= q.target * size:
                error = 2.0 * q.error * (size - rank) / (1.0 - q.target)
            else:
                error = 2.0 * q.error * rank / q.target
            if error < min_error:
                min_error = error
        return min_error

    def insert(self, value: Any) -> None:
        """Add one observation. The call that fills the buffer also flushes and compresses."""
        with self._lock:
            self._buffer.append(value)
            self._count += 1
            if len(self._buffer) >= self._buffer_size:
                self._flush()

    def _flush(self) -> None:
        if not self._buffer:
            return
        batch = self._buffer
        self._buffer = []
        batch.sort()
        self._merge(batch)
        self._compress()
        log = get_logger()
        if log.isEnabledFor(logging.DEBUG):
            log.debug("flushed %d values; summary holds %d samples for %d observations", len(batch), len(self._samples), self._count)

    def _merge(self, batch: List[Any]) -> None:
        """Merge a sorted batch into the summary in a single forward pass."""
        samples = self._samples
        start = 0
        if not samples:
            # First value ever seen has an exact rank.
            samples = [SampleItem(batch[0], 1, 0)]
            start = 1
        merged: List[SampleItem] = []
        cursor = 0
        for i in range(start, len(batch)):
            v = batch[i]
            while cursor < len(samples) and samples[cursor].value < v:
                merged.append(samples[cursor])
                cursor += 1
            # Summary at this moment is merged + samples[cursor:]; insert between them.
            position = len(merged)
            size = position + len(samples) - cursor
            if position == 0 or position == size:
                delta = 0  # new minimum or maximum
            else:
                delta = max(0, int(math.floor(self._allowable_error(position, size))) - 1)
            merged.append(SampleItem(v, 1, delta))
        merged.extend(samples[cursor:])
        self._samples = merged

    def _compress(self) -> None:
        """One forward sweep folding items whose rank range a neighbour already covers.

        The first and last items are never removed so min and max stay exact.
        """
        samples = self._samples
        if len(samples) < 3:
            return
        kept = [samples[0], samples[1]]
        for i in range(2, len(samples)):
            nxt = samples[i]
            prev = kept[-1]
            rank = len(kept)
            size = rank + len(samples) - i
            if prev.g + nxt.g + nxt.delta <= self._allowable_error(rank, size):
                nxt.g += prev.g
                kept.pop()
            kept.append(nxt)
        self._samples = kept

    def _query(self, target: float) -> Any:
        samples = self._samples
        if not samples:
            raise EmptyEstimatorError()
        desired = target * self._count
        if desired < 1:
            return samples[0].value
        if desired > self._count - 1:
            return samples[-1].value
        size = len(samples)
        rank_min = 0
        for i in range(1, size):
            prev = samples[i - 1]
            cur = samples[i]
            rank_min += prev.g
            if rank_min + cur.g + cur.delta > desired + self._allowable_error(i, size) / 2.0:
                return prev.value
        # edge case of wanting the max value
        return samples[-1].value

    def query(self, target: float) -> Any:
        """Estimate the value at rank fraction ``target``.

        Raises EmptyEstimatorError when nothing has been inserted and
        InvalidConfigurationError for a target outside (0,1).
        """
        if isinstance(target, bool) or not isinstance(target, (int, float)) or not (0.0 < target < 1.0):
            raise InvalidConfigurationError(f"target must be in (0,1), got {target!r}")
        with self._lock:
            self._flush()
            return self._query(target)

    def _snapshot(self) -> Optional[Dict[Quantile, Any]]:
        self._flush()
        if not self._samples:
            return None
        return {q: self._query(q.target) for q in sorted(self._quantiles)}

    def snapshot(self) -> Optional[Dict[Quantile, Any]]:
        """Current estimate for every tracked quantile, ordered by quantile.

        Pending buffered values are merged first. Returns None if no value
        has been inserted since construction or the last clear().
        """
        with self._lock:
            return self._snapshot()

    def get_count(self) -> int:
        with self._lock:
            return self._count

    def get_sample_count(self) -> int:
        """Number of items in the compressed summary (diagnostics only)."""
        with self._lock:
            return len(self._samples)

    def get_buffered_count(self) -> int:
        with self._lock:
            return len(self._buffer)

    def clear(self) -> None:
        """Forget every inserted value."""
        with self._lock:
            self._count = 0
            self._buffer = []
            self._samples = []

    def __str__(self) -> str:
        with self._lock:
            data = self._snapshot()
        if data is None:
            return "[no samples]"
        return "\n".join(f"{q}: {v}" for q, v in data.items())


__all__ = ["CKMSQuantiles", "SampleItem", "DEFAULT_BUFFER_SIZE"]

from __future__ import annotations

from dataclasses import dataclass, field
from typing import List

from .estimator import DEFAULT_BUFFER_SIZE, CKMSQuantiles
from .quantile import DEFAULT_QUANTILES, Quantile


@dataclass
class EstimatorConfig:
    # Targeted quantiles, each with its own rank error
    quantiles: List[Quantile] = field(default_factory=lambda: list(DEFAULT_QUANTILES))
    # Values staged before a sort+merge+compress; larger amortizes better but
    # makes the insert that fills it slower
    buffer_size: int = DEFAULT_BUFFER_SIZE
    # Seconds between gauge rollovers when publishing interval quantiles
    rollover_interval: float = 60.0

    def build_estimator(self) -> CKMSQuantiles:
        return CKMSQuantiles(self.quantiles, buffer_size=self.buffer_size)


__all__ = ["EstimatorConfig"]

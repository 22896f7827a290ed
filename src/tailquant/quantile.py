"""Targeted quantile specifications.

A :class:`Quantile` pairs a target rank fraction (e.g. 0.99) with the rank
error the estimator may make at that target (e.g. 0.001, i.e. +/- 0.1% of the
stream length). Quantiles are immutable, compare by value and sort by target
then error, so they can key snapshot dictionaries with a stable order.
"""
from __future__ import annotations

from dataclasses import dataclass
from typing import Tuple

from .errors import InvalidConfigurationError


@dataclass(frozen=True, order=True)
class Quantile:
    target: float  # rank fraction in (0,1)
    error: float  # allowed rank error as a fraction of the stream, in (0,1)

    def __post_init__(self) -> None:
        for name in ("target", "error"):
            value = getattr(self, name)
            if isinstance(value, bool) or not isinstance(value, (int, float)):
                raise InvalidConfigurationError(f"quantile {name} must be a number, got {value!r}")
            if not (0.0 < value < 1.0):
                raise InvalidConfigurationError(f"quantile {name} must be in (0,1), got {value!r}")
        object.__setattr__(self, "target", float(self.target))
        object.__setattr__(self, "error", float(self.error))

    @classmethod
    def parse(cls, text: str) -> "Quantile":
        """Build a quantile from ``"target:error"`` (e.g. ``"0.99:0.001"``)."""
        parts = text.strip().split(":")
        if len(parts) != 2:
            raise InvalidConfigurationError(f"expected TARGET:ERROR, got {text!r}")
        try:
            target, error = float(parts[0]), float(parts[1])
        except ValueError as exc:
            raise InvalidConfigurationError(f"non-numeric quantile {text!r}") from exc
        return cls(target, error)

    @property
    def label(self) -> str:
        """Short gauge name: ``p50``, ``p99``, ``p99.9``."""
        return f"p{round(self.target * 100.0, 6):g}"

    def __str__(self) -> str:
        return f"{self.target * 100.0:.2f} %ile +/- {self.error * 100.0:.2f}%"


DEFAULT_QUANTILES: Tuple[Quantile, ...] = (
    Quantile(0.50, 0.050),
    Quantile(0.75, 0.025),
    Quantile(0.90, 0.010),
    Quantile(0.95, 0.005),
    Quantile(0.99, 0.001),
)

__all__ = ["Quantile", "DEFAULT_QUANTILES"]

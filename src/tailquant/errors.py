"""Exception types raised by tailquant.

Only two things can go wrong: building an estimator with a bad quantile list,
and asking for an estimate before anything was inserted.
"""
from __future__ import annotations


class TailquantError(Exception):
    """Base class for all tailquant errors."""


class InvalidConfigurationError(TailquantError, ValueError):
    """Raised at construction time for an unusable quantile specification."""


class EmptyEstimatorError(TailquantError, RuntimeError):
    """Raised when querying an estimator that has never seen a value."""

    def __init__(self, message: str = "no data in estimator") -> None:
        super().__init__(message)


__all__ = ["TailquantError", "InvalidConfigurationError", "EmptyEstimatorError"]

"""Package metadata for tailquant.

Expose a single source of truth for the version. Prefer reading from
importlib.metadata so that an editable install or wheel always reports
the version declared in pyproject.toml. Fallback to a hardcoded string
when metadata is unavailable (direct source usage without installation).
"""

from __future__ import annotations

from importlib import metadata as _metadata

from .errors import EmptyEstimatorError, InvalidConfigurationError, TailquantError
from .estimator import CKMSQuantiles, SampleItem
from .quantile import DEFAULT_QUANTILES, Quantile

__all__ = [
	"__version__",
	"CKMSQuantiles",
	"SampleItem",
	"Quantile",
	"DEFAULT_QUANTILES",
	"TailquantError",
	"InvalidConfigurationError",
	"EmptyEstimatorError",
]

_FALLBACK_VERSION = "0.1.0"  # MUST match pyproject.toml [project].version

try:  # pragma: no cover - success path covered indirectly via CLI test
	__version__ = _metadata.version("tailquant")  # type: ignore[assignment]
except _metadata.PackageNotFoundError:  # pragma: no cover - running from a source checkout
	__version__ = _FALLBACK_VERSION

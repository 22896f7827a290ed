"""Optional FastAPI service exposing a quantile estimator over HTTP.

Install with `pip install tailquant[server]` to enable.
This keeps the core library dependency-light.
"""
from __future__ import annotations

from typing import Any, Dict, List, Optional, Union

try:  # pragma: no cover - optional dependency
    from fastapi import FastAPI, HTTPException
    from pydantic import BaseModel, ConfigDict
except ImportError as exc:
    raise RuntimeError(
        "FastAPI not installed. Install with `pip install tailquant[server]` to use the service."  # noqa: E501
    ) from exc

from . import __version__
from .config import EstimatorConfig
from .errors import EmptyEstimatorError
from .estimator import CKMSQuantiles
from .metrics import IntervalQuantiles, estimator_metrics

Number = Union[int, float]


class ObserveRequest(BaseModel):
    # NaN and infinities have no place in an ordered summary
    model_config = ConfigDict(allow_inf_nan=False)

    value: Optional[Number] = None
    values: Optional[List[Number]] = None


class SnapshotResponse(BaseModel):
    empty: bool
    count: int
    quantiles: Dict[str, Number]


class StatsResponse(BaseModel):
    count: int
    samples: int
    buffered: int


def build_app(
    estimator: Optional[CKMSQuantiles] = None,
    intervals: Optional[IntervalQuantiles] = None,
) -> FastAPI:
    """Build the app around ``estimator`` (cumulative) and optional ``intervals`` gauges.

    The estimator locks internally, so handlers need no extra locking.
    """
    estimator = estimator or EstimatorConfig().build_estimator()
    app = FastAPI(title="tailquant service", version=__version__)

    @app.get("/healthz")
    def health() -> dict[str, str]:  # pragma: no cover - trivial
        return {"status": "ok"}

    @app.post("/observe")
    def observe(req: ObserveRequest) -> dict[str, Any]:
        batch: List[Number] = list(req.values or [])
        if req.value is not None:
            batch.append(req.value)
        if not batch:
            raise HTTPException(status_code=422, detail="provide 'value' or 'values'")
        for v in batch:
            estimator.insert(v)
            if intervals is not None:
                intervals.add(v)
        return {"status": "observed", "accepted": len(batch)}

    @app.get("/snapshot", response_model=SnapshotResponse)
    def snapshot() -> SnapshotResponse:
        snap = estimator.snapshot()
        return SnapshotResponse(
            empty=snap is None,
            count=estimator.get_count(),
            quantiles={q.label: v for q, v in (snap or {}).items()},
        )

    @app.get("/query")
    def query(target: float) -> dict[str, Any]:
        if not (0.0 < target < 1.0):
            raise HTTPException(status_code=422, detail="target must be in (0,1)")
        try:
            return {"target": target, "value": estimator.query(target)}
        except EmptyEstimatorError as exc:
            raise HTTPException(status_code=404, detail=str(exc)) from exc

    @app.get("/stats", response_model=StatsResponse)
    def stats() -> StatsResponse:
        return StatsResponse(
            count=estimator.get_count(),
            samples=estimator.get_sample_count(),
            buffered=estimator.get_buffered_count(),
        )

    @app.get("/metrics")
    def metrics() -> dict[str, Any]:
        data = estimator_metrics(estimator)
        if intervals is not None:
            data["interval"] = intervals.stats()
        return data

    @app.post("/reset")
    def reset() -> dict[str, str]:
        estimator.clear()
        if intervals is not None:
            intervals.reset()
        return {"status": "cleared"}

    return app


__all__ = ["build_app"]

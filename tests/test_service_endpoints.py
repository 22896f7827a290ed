import pytest

pytest.importorskip("fastapi")
pytest.importorskip("httpx")

from fastapi.testclient import TestClient  # noqa: E402

from tailquant import CKMSQuantiles, Quantile  # noqa: E402
from tailquant.config import EstimatorConfig  # noqa: E402
from tailquant.metrics import IntervalQuantiles  # noqa: E402
from tailquant.service import build_app  # noqa: E402


def _client(intervals=None):
    est = CKMSQuantiles([Quantile(0.5, 0.05), Quantile(0.99, 0.001)], buffer_size=50)
    return TestClient(build_app(est, intervals)), est


def test_snapshot_empty_then_populated():
    client, _ = _client()
    r = client.get("/snapshot")
    assert r.status_code == 200
    assert r.json() == {"empty": True, "count": 0, "quantiles": {}}

    r = client.post("/observe", json={"values": list(range(1, 101))})
    assert r.status_code == 200
    assert r.json()["accepted"] == 100
    client.post("/observe", json={"value": 101})

    data = client.get("/snapshot").json()
    assert data["empty"] is False
    assert data["count"] == 101
    assert set(data["quantiles"]) == {"p50", "p99"}
    assert 45 <= data["quantiles"]["p50"] <= 56


def test_observe_requires_a_value():
    client, _ = _client()
    r = client.post("/observe", json={})
    assert r.status_code == 422


def test_query_endpoint():
    client, _ = _client()
    assert client.get("/query", params={"target": 0.5}).status_code == 404
    client.post("/observe", json={"value": 7})
    r = client.get("/query", params={"target": 0.5})
    assert r.status_code == 200
    assert r.json()["value"] == 7
    assert client.get("/query", params={"target": 1.5}).status_code == 422


def test_stats_metrics_and_reset():
    intervals = IntervalQuantiles(EstimatorConfig(quantiles=[Quantile(0.5, 0.05)]))
    client, est = _client(intervals)
    client.post("/observe", json={"values": list(range(75))})
    stats = client.get("/stats").json()
    assert stats["count"] == 75
    assert stats["buffered"] == 25
    metrics = client.get("/metrics").json()
    assert metrics["count"] == 75
    assert "interval" in metrics
    assert intervals.estimator.get_count() == 75

    r = client.post("/reset")
    assert r.status_code == 200
    assert est.get_count() == 0
    assert intervals.estimator.get_count() == 0
    assert intervals.gauges() == {}
    assert client.get("/snapshot").json()["empty"] is True


def test_healthz():
    client, _ = _client()
    r = client.get("/healthz")
    assert r.status_code == 200
    assert r.json()["status"] == "ok"


@pytest.mark.parametrize("body", ['{"value": NaN}', '{"value": Infinity}', '{"values": [5, NaN, 1]}', '{"values": [-Infinity]}'])
def test_observe_rejects_non_finite_values(body):
    client, est = _client()
    r = client.post("/observe", content=body, headers={"Content-Type": "application/json"})
    assert r.status_code == 422
    assert est.get_count() == 0
    assert client.get("/snapshot").json()["empty"] is True

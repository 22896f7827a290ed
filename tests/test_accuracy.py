import numpy as np
import pytest

from tailquant import CKMSQuantiles, DEFAULT_QUANTILES, Quantile
from tailquant.accuracy import STREAM_KINDS, rank_errors, synthetic_stream


@pytest.mark.parametrize("kind", ["uniform", "normal", "lognormal"])
def test_default_quantiles_within_rank_error(kind):
    values = synthetic_stream(kind, 10_000, seed=7)
    est = CKMSQuantiles(DEFAULT_QUANTILES)
    for v in values:
        est.insert(v)
    checks = rank_errors(values, est.snapshot())
    assert [c.quantile for c in checks] == sorted(DEFAULT_QUANTILES)
    for c in checks:
        assert c.ok, c.to_dict()


def test_estimates_track_numpy_percentile():
    values = synthetic_stream("lognormal", 20_000, seed=1)
    q = Quantile(0.95, 0.005)
    est = CKMSQuantiles([q])
    for v in values:
        est.insert(v)
    estimate = est.snapshot()[q]
    lo = np.percentile(values, 94.4)
    hi = np.percentile(values, 95.6)
    assert lo <= estimate <= hi


def test_rank_errors_with_duplicates():
    values = [1, 2, 2, 2, 3]
    q = Quantile(0.5, 0.1)
    (check,) = rank_errors(values, {q: 2})
    assert (check.rank_low, check.rank_high) == (2, 4)
    assert check.rank_error == 0.0
    assert check.ok
    (bad,) = rank_errors(values, {q: 3})
    assert bad.rank_error == pytest.approx(2.5)
    assert not bad.ok


def test_synthetic_stream_kinds():
    assert set(STREAM_KINDS) == {"uniform", "normal", "lognormal", "sorted", "reversed"}
    assert synthetic_stream("sorted", 5) == [1, 2, 3, 4, 5]
    assert synthetic_stream("uniform", 3, seed=2) == synthetic_stream("uniform", 3, seed=2)
    with pytest.raises(ValueError):
        synthetic_stream("zipf", 3)

import pytest

from availboard.analytics import StatusBand, compute_benchmarks, status_band
from availboard.normalizers import normalize


def _rows(*days, prefix="Link"):
    return normalize([{"Name": f"{prefix} {i}", "Days Out": d} for i, d in enumerate(days)])


def test_rank_ascending_nulls_last():
    out = compute_benchmarks(_rows("5", "", "3", "8"))
    assert [b.metric for b in out] == [3, 5, 8, None]
    assert [b.rank for b in out] == [1, 2, 3, 4]
    assert all(b.category_size == 4 for b in out)

def test_mean_and_deviation():
    out = compute_benchmarks(_rows("10", "20", ""))
    assert out[0].category_mean == 15
    assert out[0].percent_deviation == pytest.approx(-100 / 3)
    assert out[1].percent_deviation == pytest.approx(100 / 3)
    assert out[2].percent_deviation is None

def test_all_null_metrics():
    out = compute_benchmarks(_rows("", ""))
    assert all(b.category_mean is None and b.percent_deviation is None for b in out)
    assert all(b.status_band == StatusBand.AVERAGE for b in out)

def test_status_bands():
    assert status_band(7) == StatusBand.EXCELLENT
    assert status_band(14) == StatusBand.GOOD
    assert status_band(30) == StatusBand.AVERAGE
    assert status_band(60) == StatusBand.POOR
    assert status_band(61) == StatusBand.CRITICAL
    assert status_band(None) == StatusBand.AVERAGE

def test_ties_broken_by_identity():
    recs = normalize([
        {"Name": "Zeta", "Days Out": "5"},
        {"Name": "Alpha", "Days Out": "5"},
    ])
    assert [b.identity for b in compute_benchmarks(recs)] == ["Alpha", "Zeta"]

def test_category_filter(sample_rows):
    recs = normalize(sample_rows)
    out = compute_benchmarks(recs, "HRT")
    assert [b.identity for b in out] == ["HRT Clinic A"]
    assert out[0].category_size == 1
    assert len(compute_benchmarks(recs, "all")) == len(recs)

def test_unknown_category_raises():
    with pytest.raises(ValueError):
        compute_benchmarks(_rows("1"), "Dentist")

def test_identity_falls_back_to_row_index():
    out = compute_benchmarks(normalize([{"Days Out": "3"}]))
    assert out[0].identity == "Row 0"

def test_score_metric_ranks_highest_first():
    recs = normalize([
        {"Name": "A", "Score": "60"},
        {"Name": "B", "Score": "90"},
        {"Name": "C", "Score": ""},
    ])
    out = compute_benchmarks(recs, metric="score")
    assert [b.identity for b in out] == ["B", "A", "C"]
    assert [b.rank for b in out] == [1, 2, 3]
    assert out[0].category_mean == 75
    assert out[0].status_band == StatusBand.EXCELLENT
    assert out[1].status_band == StatusBand.GOOD

def test_score_bands():
    assert status_band(80, "score") == StatusBand.EXCELLENT
    assert status_band(60, "score") == StatusBand.GOOD
    assert status_band(40, "score") == StatusBand.AVERAGE
    assert status_band(20, "score") == StatusBand.POOR
    assert status_band(19.9, "score") == StatusBand.CRITICAL
    assert status_band(None, "score") == StatusBand.AVERAGE

"""Per-category peer benchmarks."""
from dataclasses import asdict, dataclass
from enum import Enum
from typing import Any, Dict, List, Literal, Optional, Sequence, Union

from availboard.normalizers.types import CategoryType, NormalizedRecord

Metric = Literal["wait_days", "score"]


class StatusBand(str, Enum):
    EXCELLENT = "excellent"
    GOOD = "good"
    AVERAGE = "average"
    POOR = "poor"
    CRITICAL = "critical"


# days out: (upper bound inclusive, band); anything above the last bound is critical
BAND_THRESHOLDS = [
    (7, StatusBand.EXCELLENT),
    (14, StatusBand.GOOD),
    (30, StatusBand.AVERAGE),
    (60, StatusBand.POOR),
]

# availability score: (lower bound inclusive, band); anything below is critical
SCORE_BAND_THRESHOLDS = [
    (80, StatusBand.EXCELLENT),
    (60, StatusBand.GOOD),
    (40, StatusBand.AVERAGE),
    (20, StatusBand.POOR),
]


@dataclass
class Benchmark:
    identity: str
    url: str
    metric: Optional[float]
    category_mean: Optional[float]
    percent_deviation: Optional[float]
    rank: int
    category_size: int
    status_band: StatusBand

    def to_dict(self) -> Dict[str, Any]:
        d = asdict(self)
        d["status_band"] = self.status_band.value
        return d


def status_band(value: Optional[float], metric: Metric = "wait_days") -> StatusBand:
    # A missing metric is reported as average; see DESIGN.md
    if value is None:
        return StatusBand.AVERAGE
    if metric == "score":
        for bound, band in SCORE_BAND_THRESHOLDS:
            if value >= bound:
                return band
        return StatusBand.CRITICAL
    for bound, band in BAND_THRESHOLDS:
        if value <= bound:
            return band
    return StatusBand.CRITICAL


def filter_category(
    records: Sequence[NormalizedRecord],
    category: Union[CategoryType, str, None],
) -> List[NormalizedRecord]:
    if category is None or category == "all":
        return list(records)
    wanted = CategoryType(category)
    return [r for r in records if r.category == wanted]


def compute_benchmarks(
    records: Sequence[NormalizedRecord],
    category: Union[CategoryType, str, None] = None,
    metric: Metric = "wait_days",
) -> List[Benchmark]:
    """
    Rank records against the mean of their peers, best first: fewest days
    out for `wait_days`, highest score for `score`. Missing values rank last;
    equal metrics are ordered by identity, then input order.
    """
    filtered = filter_category(records, category)
    values = [getattr(r, metric) for r in filtered]
    defined = [v for v in values if v is not None]
    mean = sum(defined) / len(defined) if defined else None

    rows = []
    for pos, (rec, value) in enumerate(zip(filtered, values)):
        deviation = None
        if value is not None and mean is not None and mean > 0:
            deviation = (value - mean) / mean * 100
        identity = rec.identity or f"Row {rec.index}"
        rows.append((value, identity, pos, Benchmark(
            identity=identity,
            url=rec.url,
            metric=value,
            category_mean=mean,
            percent_deviation=deviation,
            rank=0,
            category_size=len(filtered),
            status_band=status_band(value, metric),
        )))

    sign = -1 if metric == "score" else 1
    rows.sort(key=lambda t: (t[0] is None, sign * t[0] if t[0] is not None else 0.0, t[1], t[2]))
    out = []
    for i, (_, _, _, bench) in enumerate(rows, start=1):
        bench.rank = i
        out.append(bench)
    return out

from dataclasses import asdict, dataclass
import math
from typing import Any, Dict, Optional, Sequence

from availboard.normalizers.types import CategoryType, NormalizedRecord


@dataclass
class SnapshotSummary:
    total_rows: int = 0
    hrt_count: int = 0
    trt_count: int = 0
    provider_count: int = 0
    error_count: int = 0
    avg_wait_days: Optional[float] = None

    def to_dict(self) -> Dict[str, Any]:
        return asdict(self)


def _round1(v: float) -> float:
    # round half up
    return math.floor(v * 10 + 0.5) / 10


def summarize(records: Sequence[NormalizedRecord]) -> SnapshotSummary:
    waits = [r.wait_days for r in records if r.wait_days is not None]
    return SnapshotSummary(
        total_rows=len(records),
        hrt_count=sum(r.category == CategoryType.HRT for r in records),
        trt_count=sum(r.category == CategoryType.TRT for r in records),
        provider_count=sum(r.category == CategoryType.PROVIDER for r in records),
        error_count=sum(r.has_error for r in records),
        avg_wait_days=_round1(sum(waits) / len(waits)) if waits else None,
    )


def error_rate(summary: SnapshotSummary) -> float:
    """Percentage of rows carrying an error (0 for an empty snapshot)."""
    if summary.total_rows <= 0:
        return 0.0
    return summary.error_count / summary.total_rows * 100


def compare_summaries(current: SnapshotSummary, previous: SnapshotSummary) -> Dict[str, Any]:
    """Differences current - previous, rounded to one decimal where fractional."""
    rows_pct = None
    if previous.total_rows > 0:
        rows_pct = _round1((current.total_rows - previous.total_rows) / previous.total_rows * 100)
    avg = None
    if current.avg_wait_days is not None and previous.avg_wait_days is not None:
        avg = _round1(current.avg_wait_days - previous.avg_wait_days)
    return {
        "total_rows": current.total_rows - previous.total_rows,
        "total_rows_percent": rows_pct,
        "hrt_count": current.hrt_count - previous.hrt_count,
        "trt_count": current.trt_count - previous.trt_count,
        "provider_count": current.provider_count - previous.provider_count,
        "error_count": current.error_count - previous.error_count,
        "avg_wait_days": avg,
        "error_rate": _round1(error_rate(current) - error_rate(previous)),
    }

from .alerts import Alert, AlertKind, Severity, detect_anomalies
from .benchmarks import Benchmark, StatusBand, compute_benchmarks, status_band
from .summary import SnapshotSummary, compare_summaries, error_rate, summarize

__all__ = [
    "Alert",
    "AlertKind",
    "Severity",
    "detect_anomalies",
    "Benchmark",
    "StatusBand",
    "compute_benchmarks",
    "status_band",
    "SnapshotSummary",
    "compare_summaries",
    "error_rate",
    "summarize",
]

"""Snapshot-to-snapshot anomaly detection."""
from dataclasses import dataclass
from datetime import datetime, timezone
from enum import Enum
from typing import Any, Dict, List, Optional, Sequence

from availboard.normalizers.types import NormalizedRecord

SPIKE_PCT = 50.0
SPIKE_CRITICAL_PCT = 100.0
SCORE_DROP = 20.0
SCORE_DROP_CRITICAL = 40.0


class AlertKind(str, Enum):
    SPIKE = "days_out_spike"
    NEW_ERROR = "new_error"
    ERROR_RESOLVED = "error_resolved"
    SCORE_DROP = "availability_drop"


class Severity(str, Enum):
    CRITICAL = "critical"
    WARNING = "warning"
    INFO = "info"


SEVERITY_ORDER = {Severity.CRITICAL: 0, Severity.WARNING: 1, Severity.INFO: 2}


@dataclass
class Alert:
    id: str
    kind: AlertKind
    severity: Severity
    title: str
    message: str
    identity: str
    url: str
    timestamp: datetime
    current_value: Optional[float] = None
    previous_value: Optional[float] = None

    def to_dict(self) -> Dict[str, Any]:
        return {
            "id": self.id,
            "kind": self.kind.value,
            "severity": self.severity.value,
            "title": self.title,
            "message": self.message,
            "identity": self.identity,
            "url": self.url,
            "current_value": self.current_value,
            "previous_value": self.previous_value,
            "timestamp": self.timestamp.isoformat(),
        }


def _fmt(v: float) -> str:
    return f"{v:g}"


def detect_anomalies(
    current: Sequence[NormalizedRecord],
    previous: Optional[Sequence[NormalizedRecord]] = None,
    now: Optional[datetime] = None,
) -> List[Alert]:
    """
    Compare two snapshots record by record (matched on identity).
    No baseline means no alerts; records missing from `previous` are skipped.
    """
    if not previous:
        return []
    now = now or datetime.now(timezone.utc)
    stamp = int(now.timestamp() * 1000)

    previous_by_name: Dict[str, NormalizedRecord] = {}
    for row in previous:
        if row.identity:
            previous_by_name[row.identity] = row

    alerts: List[Alert] = []

    def _add(kind, severity, title, message, row, prefix, value=None, prev_value=None):
        alerts.append(Alert(
            id=f"{prefix}-{row.identity}-{stamp}",
            kind=kind,
            severity=severity,
            title=title,
            message=message,
            identity=row.identity,
            url=row.url,
            timestamp=now,
            current_value=value,
            previous_value=prev_value,
        ))

    for row in current:
        name = row.identity
        prev = previous_by_name.get(name)
        if prev is None:
            continue

        # wait-days spike
        if row.wait_days is not None and prev.wait_days is not None and prev.wait_days > 0:
            pct = (row.wait_days - prev.wait_days) / prev.wait_days * 100
            if pct >= SPIKE_PCT:
                _add(
                    AlertKind.SPIKE,
                    Severity.CRITICAL if pct >= SPIKE_CRITICAL_PCT else Severity.WARNING,
                    "Days Out Spike Detected",
                    f"{name} days out increased by {pct:.0f}% ({_fmt(prev.wait_days)} -> {_fmt(row.wait_days)})",
                    row, "days-spike", row.wait_days, prev.wait_days,
                )

        if row.has_error and not prev.has_error:
            _add(AlertKind.NEW_ERROR, Severity.CRITICAL, "New Error Detected",
                 f"{name} is now showing an error", row, "new-error")

        if not row.has_error and prev.has_error:
            _add(AlertKind.ERROR_RESOLVED, Severity.INFO, "Error Resolved",
                 f"{name} error has been resolved", row, "error-resolved")

        if row.score is not None and prev.score is not None:
            drop = prev.score - row.score
            if drop >= SCORE_DROP:
                _add(
                    AlertKind.SCORE_DROP,
                    Severity.CRITICAL if drop >= SCORE_DROP_CRITICAL else Severity.WARNING,
                    "Availability Score Drop",
                    f"{name} score dropped by {_fmt(drop)} points ({_fmt(prev.score)} -> {_fmt(row.score)})",
                    row, "score-drop", row.score, prev.score,
                )

    # sorted() is stable, so equal severities keep detection order
    return sorted(alerts, key=lambda a: SEVERITY_ORDER[a.severity])

import logging
from datetime import date, datetime, timedelta, timezone
from typing import List, Optional, Sequence, Tuple

from sqlalchemy import delete, select
from sqlalchemy.exc import IntegrityError, StatementError
from sqlalchemy.orm import Session

from availboard.analytics.summary import SnapshotSummary, summarize
from availboard.models import Snapshot
from availboard.normalizers.types import NormalizedRecord

log = logging.getLogger(__name__)

PERIOD_DAYS = {"day": 1, "week": 7, "month": 30}


def save_snapshot(
    db: Session,
    day: date,
    headers: Sequence[str],
    records: Sequence[NormalizedRecord],
    taken_at: Optional[datetime] = None,
    keep: Optional[int] = None,
) -> Snapshot:
    """
    Insert or replace the snapshot for `day`.
    With `keep`, only the newest `keep` dates survive afterwards.
    """
    key = day.isoformat()
    summary = summarize(records)
    try:
        # savepoint so a failed write leaves the outer transaction usable
        with db.begin_nested():
            row = db.get(Snapshot, key)
            if row is None:
                row = Snapshot(date=key)
            row.taken_at       = taken_at or datetime.now(timezone.utc)
            row.headers        = list(headers)
            row.records        = [r.to_dict() for r in records]
            row.row_count      = summary.total_rows
            row.hrt_count      = summary.hrt_count
            row.trt_count      = summary.trt_count
            row.provider_count = summary.provider_count
            row.error_count    = summary.error_count
            row.avg_wait_days  = summary.avg_wait_days
            row = db.merge(row)
    except (IntegrityError, StatementError) as e:
        log.exception("snapshot write failed: date=%s", key)
        raise ValueError(f"Could not store snapshot for {key}: {e}") from e

    if keep:
        prune_snapshots(db, keep)
    return row


def prune_snapshots(db: Session, keep: int) -> int:
    """Delete all but the newest `keep` snapshots; returns how many were removed."""
    dates = list_snapshot_dates(db)
    stale = dates[:-keep] if keep > 0 else dates
    if not stale:
        return 0
    db.execute(delete(Snapshot).where(Snapshot.date.in_(stale)))
    log.info("pruned %d snapshot(s) older than %s", len(stale), stale[-1])
    return len(stale)


def list_snapshot_dates(db: Session) -> List[str]:
    """All stored snapshot dates, oldest first."""
    return list(db.execute(select(Snapshot.date).order_by(Snapshot.date)).scalars())


def get_snapshot(db: Session, day: str) -> Optional[Snapshot]:
    return db.get(Snapshot, day)


SUMMARY_COLUMNS = (
    Snapshot.date,
    Snapshot.row_count,
    Snapshot.hrt_count,
    Snapshot.trt_count,
    Snapshot.provider_count,
    Snapshot.error_count,
    Snapshot.avg_wait_days,
)


def list_snapshot_summaries(
    db: Session, since: Optional[str] = None, until: Optional[str] = None
) -> List[Tuple[str, SnapshotSummary]]:
    """
    (date, summary) pairs oldest first, optionally bounded by inclusive
    ISO dates. Reads only the summary columns, never the stored records.
    """
    stmt = select(*SUMMARY_COLUMNS).order_by(Snapshot.date)
    if since is not None:
        stmt = stmt.where(Snapshot.date >= since)
    if until is not None:
        stmt = stmt.where(Snapshot.date <= until)
    return [(row.date, snapshot_summary(row)) for row in db.execute(stmt)]


def snapshot_summary(row) -> SnapshotSummary:
    """Summary from a Snapshot, or any row carrying its summary columns."""
    return SnapshotSummary(
        total_rows=row.row_count,
        hrt_count=row.hrt_count,
        trt_count=row.trt_count,
        provider_count=row.provider_count,
        error_count=row.error_count,
        avg_wait_days=row.avg_wait_days,
    )


def snapshot_records(row: Snapshot) -> List[NormalizedRecord]:
    return [NormalizedRecord.from_dict(d) for d in (row.records or [])]


def find_comparison_snapshot(
    db: Session, latest: Snapshot, period: str
) -> Optional[Snapshot]:
    """
    The snapshot `period` before `latest`; if that date is missing,
    the most recent snapshot older than `latest`.
    """
    days = PERIOD_DAYS.get(period)
    if days is None:
        return None
    target = (date.fromisoformat(latest.date) - timedelta(days=days)).isoformat()
    exact = db.get(Snapshot, target)
    if exact is not None:
        return exact
    earlier = db.execute(
        select(Snapshot).where(Snapshot.date < latest.date).order_by(Snapshot.date.desc()).limit(1)
    ).scalar_one_or_none()
    return earlier


def latest_pair(db: Session) -> Tuple[Optional[Snapshot], Optional[Snapshot]]:
    """(newest, second newest) snapshots, either may be None."""
    rows = list(db.execute(select(Snapshot).order_by(Snapshot.date.desc()).limit(2)).scalars())
    latest = rows[0] if rows else None
    previous = rows[1] if len(rows) > 1 else None
    return latest, previous

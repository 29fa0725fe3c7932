import logging
from datetime import date, datetime, timedelta, timezone
from typing import Any, Dict, Optional

from fastapi import APIRouter, Depends, Header, HTTPException, Path, Query
from fastapi.responses import JSONResponse
from sqlalchemy.orm import Session

from availboard import settings
from availboard.analytics import compare_summaries, detect_anomalies
from availboard.db import get_db
from availboard.models import Snapshot
from availboard.normalizers import normalize
from availboard.repositories import (
    find_comparison_snapshot,
    get_snapshot,
    latest_pair,
    list_snapshot_dates,
    list_snapshot_summaries,
    save_snapshot,
    snapshot_records,
    snapshot_summary,
)
from availboard.sheets import fetch_sheet_data

log = logging.getLogger(__name__)

# --------------------------------------------------------------------
# Router setup
# --------------------------------------------------------------------
router = APIRouter(prefix="/history", tags=["history"])

RANGE_DAYS = {"week": 7, "month": 30}


def _today() -> date:
    return datetime.now(timezone.utc).date()


def _snapshot_to_dict(row: Snapshot) -> Dict[str, Any]:
    return {
        "date": row.date,
        "taken_at": row.taken_at.isoformat() if row.taken_at else None,
        "headers": row.headers,
        "row_count": row.row_count,
        "summary": snapshot_summary(row).to_dict(),
        "data": row.records,
    }


@router.post("/snapshot")
def take_snapshot(
    authorization: Optional[str] = Header(None),
    db: Session = Depends(get_db),
):
    """
    Fetch the sheet and store today's normalized snapshot.
    Meant for a daily scheduler; when CRON_SECRET is set the caller
    must send `Authorization: Bearer <CRON_SECRET>`.
    """
    if settings.CRON_SECRET and authorization != f"Bearer {settings.CRON_SECRET}":
        raise HTTPException(401, "Unauthorized")

    result = fetch_sheet_data()
    if not result.success:
        return JSONResponse(
            status_code=500,
            content={
                "error": "Failed to fetch sheet data",
                "details": result.error,
                "troubleshooting": result.troubleshooting,
            },
        )

    records = normalize(result.rows)
    today = _today()
    try:
        row = save_snapshot(
            db, today, result.headers, records,
            keep=settings.SNAPSHOT_RETENTION_DAYS,
        )
        db.commit()
    except ValueError as e:
        db.rollback()
        raise HTTPException(500, f"Failed to create snapshot: {e}")

    log.info("stored snapshot %s (%d rows)", row.date, row.row_count)
    return {
        "success": True,
        "date": row.date,
        "row_count": row.row_count,
        "summary": snapshot_summary(row).to_dict(),
    }


@router.get("")
def history(
    range_: str = Query("week", alias="range", pattern="^(week|month|all)$"),
    db: Session = Depends(get_db),
) -> Dict[str, Any]:
    """
    `range=all` lists every stored date; `week`/`month` return the
    summaries of the last 7/30 days that have a snapshot.
    """
    all_dates = list_snapshot_dates(db)
    if range_ == "all":
        return {"dates": all_dates}

    today = _today()
    since = today - timedelta(days=RANGE_DAYS[range_] - 1)
    summaries = [
        {"date": d, "summary": s.to_dict()}
        for d, s in list_snapshot_summaries(db, since.isoformat(), today.isoformat())
    ]
    return {"range": range_, "available_dates": all_dates, "summaries": summaries}


@router.get("/compare")
def compare(
    period: str = Query("day", pattern="^(day|week|month)$"),
    db: Session = Depends(get_db),
) -> Dict[str, Any]:
    """Latest snapshot summary against the one a day/week/month earlier."""
    dates = list_snapshot_dates(db)
    latest, _ = latest_pair(db)
    if latest is None:
        return {
            "has_history": False,
            "message": "No historical data available yet. Snapshots are taken daily.",
        }

    previous = find_comparison_snapshot(db, latest, period)
    current = snapshot_summary(latest)
    prev_summary = snapshot_summary(previous) if previous is not None else None
    return {
        "has_history": True,
        "period": period,
        "current": {"date": latest.date, "summary": current.to_dict()},
        "previous": (
            {"date": previous.date, "summary": prev_summary.to_dict()}
            if previous is not None else None
        ),
        "changes": compare_summaries(current, prev_summary) if prev_summary else None,
        "available_dates": len(dates),
        "oldest_date": dates[0],
        "newest_date": dates[-1],
    }


@router.get("/alerts")
def history_alerts(db: Session = Depends(get_db)) -> Dict[str, Any]:
    """Anomalies between the two most recent snapshots."""
    latest, previous = latest_pair(db)
    if latest is None:
        return {"alerts": [], "count": 0, "current_date": None, "previous_date": None}
    alerts = detect_anomalies(
        snapshot_records(latest),
        snapshot_records(previous) if previous is not None else None,
    )
    return {
        "alerts": [a.to_dict() for a in alerts],
        "count": len(alerts),
        "current_date": latest.date,
        "previous_date": previous.date if previous is not None else None,
    }


@router.get("/{day}")
def snapshot_for_date(
    day: str = Path(..., pattern=r"^\d{4}-\d{2}-\d{2}$"),
    db: Session = Depends(get_db),
) -> Dict[str, Any]:
    row = get_snapshot(db, day)
    if row is None:
        raise HTTPException(404, "Snapshot not found for this date")
    return _snapshot_to_dict(row)

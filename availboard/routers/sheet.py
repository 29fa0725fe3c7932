import logging
import time
from datetime import datetime, timezone
from typing import Any, Dict, Optional

from fastapi import APIRouter, Query
from fastapi.responses import JSONResponse

from availboard import settings
from availboard.normalizers import normalize
from availboard.sheets import fetch_sheet_data

log = logging.getLogger(__name__)

# --------------------------------------------------------------------
# Router setup
# --------------------------------------------------------------------
router = APIRouter(prefix="/sheet", tags=["sheet"])

# Last successful /sheet payload and when it was built (monotonic seconds)
_cache: Dict[str, Any] = {"payload": None, "at": 0.0}


def clear_cache():
    _cache["payload"] = None
    _cache["at"] = 0.0


def _failure_response(result) -> JSONResponse:
    return JSONResponse(
        status_code=500,
        content={
            "success": False,
            "data": [],
            "headers": [],
            "fetched_at": datetime.now(timezone.utc).isoformat(),
            "source": result.source,
            "error": result.error,
            "troubleshooting": result.troubleshooting,
        },
    )


@router.get("")
def get_sheet(refresh: bool = Query(False, description="Bypass the short-lived cache")):
    """
    Fetch the sheet, normalize every row and return it.

    Successful payloads are reused for SHEET_CACHE_TTL seconds unless
    `refresh=true`. On failure the body carries `error` and the
    `troubleshooting` hints from every fetch attempt.
    """
    now = time.monotonic()
    cached: Optional[Dict[str, Any]] = _cache["payload"]
    if not refresh and cached is not None and now - _cache["at"] < settings.SHEET_CACHE_TTL:
        return cached

    result = fetch_sheet_data()
    if not result.success:
        return _failure_response(result)

    records = normalize(result.rows)
    payload = {
        "success": True,
        "data": [r.to_dict() for r in records],
        "headers": result.headers,
        "fetched_at": datetime.now(timezone.utc).isoformat(),
        "source": result.source,
    }
    _cache["payload"], _cache["at"] = payload, now
    log.info("sheet fetched via %s: %d rows", result.source, len(records))
    return payload


@router.get("/debug")
def debug_sheet():
    """Raw view of the sheet: headers, the first three rows and the row count."""
    result = fetch_sheet_data()
    if not result.success:
        return _failure_response(result)
    return {
        "headers": result.headers,
        "sample_rows": result.rows[:3],
        "total_rows": len(result.rows),
        "source": result.source,
    }

from typing import Any, Dict, List, Literal, Optional

from fastapi import APIRouter, HTTPException
from pydantic import BaseModel

from availboard.analytics import compute_benchmarks, detect_anomalies, summarize
from availboard.normalizers import RawRecord, normalize

# --------------------------------------------------------------------
# Router setup
# --------------------------------------------------------------------
router = APIRouter(prefix="", tags=["analytics"])

Row = Dict[str, Any]


# Request schemas: snapshots are sent as raw sheet rows (header -> cell)
class NormalizeRequest(BaseModel):
    rows: List[Row]


class AnomaliesRequest(BaseModel):
    current: List[Row]
    previous: Optional[List[Row]] = None


class BenchmarksRequest(BaseModel):
    rows: List[Row]
    category: Optional[str] = None            # HRT | TRT | Provider | none | all
    metric: Literal["wait_days", "score"] = "wait_days"


def _as_raw(rows: List[Row]) -> List[RawRecord]:
    """JSON cells may be numbers/null; the pipeline works on strings."""
    return [{str(k): "" if v is None else str(v) for k, v in r.items()} for r in rows]


@router.post("/normalize")
def normalize_rows(req: NormalizeRequest) -> Dict[str, Any]:
    """Normalize raw rows and return the typed records plus a summary."""
    records = normalize(_as_raw(req.rows))
    return {
        "records": [r.to_dict() for r in records],
        "summary": summarize(records).to_dict(),
    }


@router.post("/anomalies")
def anomalies(req: AnomaliesRequest) -> Dict[str, Any]:
    """
    Diff two snapshots.

    Request body:
      {"current": [{...row...}], "previous": [{...row...}]}

    Response JSON:
      {"alerts": [...], "count": <n>}  (critical first)
    """
    current = normalize(_as_raw(req.current))
    previous = normalize(_as_raw(req.previous)) if req.previous else None
    alerts = detect_anomalies(current, previous)
    return {"alerts": [a.to_dict() for a in alerts], "count": len(alerts)}


@router.post("/benchmarks")
def benchmarks(req: BenchmarksRequest) -> Dict[str, Any]:
    """Rank rows against their category peers."""
    records = normalize(_as_raw(req.rows))
    try:
        out = compute_benchmarks(records, req.category, metric=req.metric)
    except ValueError:
        raise HTTPException(400, f"Unknown category: {req.category}")
    return {"benchmarks": [b.to_dict() for b in out], "category": req.category or "all"}

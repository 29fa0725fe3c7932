# availboard/normalizers/types.py
from dataclasses import dataclass
from datetime import datetime
from enum import Enum
from typing import Any, Dict, List, Optional, Tuple

# One spreadsheet row: header -> raw cell text, in header order
RawRecord = Dict[str, str]

# -----------------------------
# Column aliases (first non-empty match wins, exact key comparison)
# -----------------------------
WAIT_DAYS_COLUMNS = ["Days Out", "DaysOut", "days_out", "Days_Out"]
SCORE_COLUMNS = ["Availability Score", "AvailabilityScore", "availability_score", "Score"]
CAPTURED_AT_COLUMNS = ["Scraped At", "ScrapedAt", "scraped_at", "Scraped_At", "Timestamp"]
ERROR_CODE_COLUMNS = ["Error Code", "ErrorCode", "error_code", "Error_Code"]
ERROR_DETAILS_COLUMNS = ["Error Details", "ErrorDetails", "error_details", "Error_Details", "Error"]
IDENTITY_COLUMNS = ["Name", "name"]
CATEGORY_COLUMNS = ["Category", "category"]
URL_COLUMNS = ["URL", "url"]

CANONICAL_COLUMNS = frozenset(
    WAIT_DAYS_COLUMNS + SCORE_COLUMNS + CAPTURED_AT_COLUMNS
    + ERROR_CODE_COLUMNS + ERROR_DETAILS_COLUMNS
    + IDENTITY_COLUMNS + CATEGORY_COLUMNS + URL_COLUMNS
)


class CategoryType(str, Enum):
    NONE = "none"
    HRT = "HRT"
    TRT = "TRT"
    PROVIDER = "Provider"


def find_column_value(row: RawRecord, names: List[str]) -> Optional[str]:
    """Return the value of the first alias present with a non-empty value."""
    for name in names:
        value = row.get(name)
        if value is not None and value != "":
            return value
    return None


@dataclass
class NormalizedRecord:
    raw: RawRecord
    wait_days: Optional[float] = None
    score: Optional[float] = None
    captured_at: Optional[datetime] = None
    has_error: bool = False
    category: CategoryType = CategoryType.NONE
    index: int = 0

    @property
    def identity(self) -> str:
        return find_column_value(self.raw, IDENTITY_COLUMNS) or ""

    @property
    def url(self) -> str:
        return find_column_value(self.raw, URL_COLUMNS) or ""

    def passthrough(self) -> List[Tuple[str, str]]:
        """Columns no canonical alias knows about, in original header order."""
        return [(k, v) for k, v in self.raw.items() if k not in CANONICAL_COLUMNS]

    def to_dict(self) -> Dict[str, Any]:
        return {
            "raw": dict(self.raw),
            "wait_days": self.wait_days,
            "score": self.score,
            "captured_at": self.captured_at.isoformat() if self.captured_at else None,
            "has_error": self.has_error,
            "category": self.category.value,
            "index": self.index,
        }

    @classmethod
    def from_dict(cls, d: Dict[str, Any]) -> "NormalizedRecord":
        """Rebuild a record stored with to_dict(); unknown values degrade to defaults."""
        captured = d.get("captured_at")
        try:
            captured_at = datetime.fromisoformat(captured) if captured else None
        except (TypeError, ValueError):
            captured_at = None
        try:
            category = CategoryType(d.get("category") or CategoryType.NONE.value)
        except ValueError:
            category = CategoryType.NONE
        return cls(
            raw={str(k): "" if v is None else str(v) for k, v in (d.get("raw") or {}).items()},
            wait_days=d.get("wait_days"),
            score=d.get("score"),
            captured_at=captured_at,
            has_error=bool(d.get("has_error")),
            category=category,
            index=int(d.get("index") or 0),
        )


from datetime import datetime, timezone
import re
from typing import Optional

from .base import Normalizer
from .classify import classify_record
from .types import (
    CAPTURED_AT_COLUMNS,
    ERROR_CODE_COLUMNS,
    ERROR_DETAILS_COLUMNS,
    SCORE_COLUMNS,
    WAIT_DAYS_COLUMNS,
    NormalizedRecord,
    RawRecord,
    find_column_value,
)

class RuleNormalizer(Normalizer):
    """
    Rule-based normalizer:
    resolves the canonical fields of a sheet row through the alias lists,
    coerces them to numbers/datetimes and tags the row with a category.
    Nothing here raises; a cell that cannot be coerced becomes None.
    """
    def normalize_record(self, rec: RawRecord, index: int) -> NormalizedRecord:
        return NormalizedRecord(
            raw=dict(rec),  # keep every original column for passthrough display
            wait_days=parse_number(find_column_value(rec, WAIT_DAYS_COLUMNS)),
            score=parse_number(find_column_value(rec, SCORE_COLUMNS)),
            captured_at=parse_dt(find_column_value(rec, CAPTURED_AT_COLUMNS)),
            has_error=has_error(rec),
            category=classify_record(rec),
            index=index,
        )


# --- Individual field helpers ---

_FORMATTING = re.compile(r"[,$€£¥%]")
# Leading float literal, the way a browser's parseFloat reads "7 days" as 7
_LEADING_FLOAT = re.compile(r"^[+-]?(?:\d+\.?\d*|\.\d+)(?:[eE][+-]?\d+)?")

# Formats tried after ISO-8601, most common spreadsheet renderings first
_DATETIME_FORMATS = (
    "%m/%d/%Y %H:%M:%S",
    "%m/%d/%Y %H:%M",
    "%m/%d/%Y %I:%M:%S %p",
    "%m/%d/%Y %I:%M %p",
    "%m/%d/%Y",
    "%Y/%m/%d %H:%M:%S",
    "%Y/%m/%d",
    "%b %d, %Y",
    "%B %d, %Y",
    "%b %d %Y",
    "%d %b %Y",
    "%a, %d %b %Y %H:%M:%S GMT",
    "%a %b %d %Y %H:%M:%S",
)

def parse_number(value: Optional[str]) -> Optional[float]:
    """Strip separators, currency and percent signs; return the leading number or None."""
    if value is None or value == "":
        return None
    cleaned = _FORMATTING.sub("", value).strip()
    m = _LEADING_FLOAT.match(cleaned)
    if not m:
        return None
    return float(m.group(0))

def _to_naive_utc(dt: datetime) -> datetime:
    if dt.tzinfo is not None:
        dt = dt.astimezone(timezone.utc).replace(tzinfo=None)
    return dt

def parse_dt(value: Optional[str]) -> Optional[datetime]:
    """
    Parse a timestamp cell into a naive UTC datetime.
    Tries ISO-8601, then common locale formats, then a three-part
    date split on '/' or '-' as month-day-year and finally day-month-year.
    """
    if value is None or value == "":
        return None
    z = value.strip()
    try:
        return _to_naive_utc(datetime.fromisoformat(z.replace("Z", "+00:00")))
    except (ValueError, OverflowError):
        pass
    for fmt in _DATETIME_FORMATS:
        try:
            return datetime.strptime(z, fmt)
        except ValueError:
            continue

    parts = re.split(r"[/-]", z)
    if len(parts) != 3:
        return None
    try:
        a, b, year = (int(p.strip()) for p in parts)
    except ValueError:
        return None
    for month, day in ((a, b), (b, a)):
        try:
            return datetime(year, month, day)
        except (ValueError, OverflowError):
            continue
    return None

def has_error(row: RawRecord) -> bool:
    """True when the row carries a non-blank error code or error details."""
    code = find_column_value(row, ERROR_CODE_COLUMNS)
    details = find_column_value(row, ERROR_DETAILS_COLUMNS)
    return bool((code and code.strip()) or (details and details.strip()))

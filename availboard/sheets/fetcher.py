"""
Fetch header + rows from the availability spreadsheet.

Two strategies, tried in order:
  1. Google Sheets API v4 (only when an API key is configured)
  2. the public CSV export of the sheet

Failures are returned as FetchFailure values carrying troubleshooting
hints for display; nothing in here raises to the caller. There is no
retry, caching or timeout policy unless the caller passes one in.
"""
import logging
from dataclasses import dataclass, field
from typing import List, Literal, Optional, Sequence, Union
from urllib.parse import quote

import requests

from availboard import settings
from availboard.normalizers.types import RawRecord
from .csv_parser import parse_csv

log = logging.getLogger(__name__)

SHEETS_API_BASE = "https://sheets.googleapis.com/v4/spreadsheets"
CSV_EXPORT_URL = "https://docs.google.com/spreadsheets/d/{sheet_id}/export?format=csv&gid={gid}"

Source = Literal["api", "csv"]

API_TROUBLESHOOTING = [
    "Verify your GOOGLE_SHEETS_API_KEY is valid",
    "Ensure the Google Sheets API is enabled in your Google Cloud Console",
    "Check that the sheet ID is correct",
]
CSV_TROUBLESHOOTING = [
    'Ensure the Google Sheet is shared as "Anyone with the link can view"',
    "Verify the Sheet ID and GID are correct",
    "Try accessing the CSV URL directly in a browser to test",
]
API_FAILED_HINT = "API fetch failed - check your API key configuration"
NO_API_KEY_HINT = "No API key configured - add GOOGLE_SHEETS_API_KEY for private sheet access"


@dataclass
class SheetConfig:
    sheet_id: str
    gid: str
    api_key: Optional[str] = None
    timeout: Optional[float] = None  # seconds; None waits indefinitely


def get_sheet_config() -> SheetConfig:
    """Sheet configuration from settings (environment / .env)."""
    return SheetConfig(
        sheet_id=settings.SHEET_ID,
        gid=settings.SHEET_GID,
        api_key=settings.GOOGLE_SHEETS_API_KEY,
    )


@dataclass
class FetchSuccess:
    headers: List[str]
    rows: List[RawRecord]
    source: Source
    success: Literal[True] = True


@dataclass
class FetchFailure:
    error: str
    source: Source
    troubleshooting: List[str] = field(default_factory=list)
    success: Literal[False] = False


FetchResult = Union[FetchSuccess, FetchFailure]


class SheetFetchError(Exception):
    """Raised inside a strategy; always converted to FetchFailure before returning."""


def rows_to_records(values: Sequence[Sequence[object]], source: Source) -> FetchSuccess:
    """First row is the header row; missing trailing cells become ''."""
    if not values:
        return FetchSuccess(headers=[], rows=[], source=source)
    headers = [str(h if h is not None else "").strip() for h in values[0]]
    rows: List[RawRecord] = []
    for row in values[1:]:
        rec: RawRecord = {}
        for idx, header in enumerate(headers):
            cell = row[idx] if idx < len(row) else None
            rec[header] = "" if cell is None else str(cell)
        rows.append(rec)
    return FetchSuccess(headers=headers, rows=rows, source=source)


def _get(session: requests.Session, url: str, config: SheetConfig, **kwargs) -> requests.Response:
    return session.get(url, timeout=config.timeout, **kwargs)


def fetch_via_api(config: SheetConfig, session: requests.Session) -> FetchResult:
    """Resolve the GID to a sheet title, then read that sheet's values."""
    if not config.api_key:
        return FetchFailure(error="No API key provided", source="api")

    try:
        key = {"key": config.api_key}
        meta_res = _get(session, f"{SHEETS_API_BASE}/{config.sheet_id}", config, params=key)
        if not meta_res.ok:
            raise SheetFetchError(f"Metadata fetch failed: {meta_res.status_code} - {meta_res.text}")
        metadata = meta_res.json()

        sheet_name = "Sheet1"
        for sheet in metadata.get("sheets") or []:
            props = sheet.get("properties") or {}
            if str(props.get("sheetId")) == str(int(config.gid)):
                sheet_name = props.get("title") or sheet_name
                break

        data_url = f"{SHEETS_API_BASE}/{config.sheet_id}/values/{quote(sheet_name, safe='')}"
        data_res = _get(session, data_url, config, params=key)
        if not data_res.ok:
            raise SheetFetchError(f"Data fetch failed: {data_res.status_code} - {data_res.text}")
        values = data_res.json().get("values") or []
        if not isinstance(values, list):
            raise SheetFetchError(f"Unexpected values payload: {type(values).__name__}")
        return rows_to_records(values, "api")

    except (SheetFetchError, requests.RequestException,
            ValueError, AttributeError, TypeError, KeyError, IndexError) as e:
        return FetchFailure(
            error=str(e) or "API fetch failed",
            source="api",
            troubleshooting=list(API_TROUBLESHOOTING),
        )


def _looks_like_html(text: str) -> bool:
    return "<!DOCTYPE html>" in text or "<html" in text


def fetch_via_csv(config: SheetConfig, session: requests.Session) -> FetchResult:
    """Download the public CSV export (works only for link-shared sheets)."""
    url = CSV_EXPORT_URL.format(sheet_id=config.sheet_id, gid=config.gid)
    try:
        res = _get(session, url, config, headers={"Accept": "text/csv"})
        if not res.ok:
            raise SheetFetchError(f"CSV fetch failed: {res.status_code}")
        text = res.text
        if _looks_like_html(text):
            raise SheetFetchError("Received HTML instead of CSV - sheet may not be publicly accessible")
        return rows_to_records(parse_csv(text), "csv")

    except (SheetFetchError, requests.RequestException) as e:
        return FetchFailure(
            error=str(e) or "CSV fetch failed",
            source="csv",
            troubleshooting=list(CSV_TROUBLESHOOTING),
        )


def _merge_hints(*groups: Sequence[str]) -> List[str]:
    out: List[str] = []
    for group in groups:
        for hint in group:
            if hint not in out:
                out.append(hint)
    return out


def fetch_sheet_data(
    config: Optional[SheetConfig] = None,
    session: Optional[requests.Session] = None,
) -> FetchResult:
    """
    Try the Sheets API first if a key exists, fall back to the CSV export.
    When both fail the returned hints cover both attempts.
    """
    config = config or get_sheet_config()
    session = session or requests.Session()

    api_result: Optional[FetchResult] = None
    if config.api_key:
        api_result = fetch_via_api(config, session)
        if api_result.success:
            return api_result
        log.warning("API fetch failed, trying CSV fallback: %s", api_result.error)

    csv_result = fetch_via_csv(config, session)
    if csv_result.success:
        return csv_result

    log.warning("CSV fetch failed: %s", csv_result.error)
    if api_result is not None:
        api_hints = [API_FAILED_HINT, *api_result.troubleshooting]
    else:
        api_hints = [NO_API_KEY_HINT]
    return FetchFailure(
        error=csv_result.error,
        source="csv",
        troubleshooting=_merge_hints(api_hints, csv_result.troubleshooting),
    )

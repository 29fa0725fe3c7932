from .csv_parser import parse_csv, to_csv
from .fetcher import (
    FetchFailure,
    FetchResult,
    FetchSuccess,
    SheetConfig,
    fetch_sheet_data,
    get_sheet_config,
)

__all__ = [
    "parse_csv",
    "to_csv",
    "FetchFailure",
    "FetchResult",
    "FetchSuccess",
    "SheetConfig",
    "fetch_sheet_data",
    "get_sheet_config",
]

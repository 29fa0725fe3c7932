# availboard/settings.py
import os
from pathlib import Path

from dotenv import load_dotenv

PROJECT_ROOT = Path(__file__).resolve().parents[1]
load_dotenv(PROJECT_ROOT / ".env")

# Spreadsheet source
SHEET_ID = os.getenv("SHEET_ID", "1vOXJEegJHJizatcXErv_dOLuWCiz_z8fGZasSDde2tc")
SHEET_GID = os.getenv("SHEET_GID", "766458838")
GOOGLE_SHEETS_API_KEY = os.getenv("GOOGLE_SHEETS_API_KEY") or None

DATABASE_URL = os.getenv("DATABASE_URL", "sqlite:///./availboard.sqlite3")
LOG_LEVEL = os.getenv("LOG_LEVEL", "INFO")

# Seconds a fetched sheet is served from memory by GET /sheet
SHEET_CACHE_TTL = int(os.getenv("SHEET_CACHE_TTL", "60"))

# Number of daily snapshots kept in the history table
SNAPSHOT_RETENTION_DAYS = int(os.getenv("SNAPSHOT_RETENTION_DAYS", "90"))

# When set, POST /history/snapshot requires "Authorization: Bearer <secret>"
CRON_SECRET = os.getenv("CRON_SECRET") or None

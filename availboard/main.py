from fastapi import FastAPI

from availboard import __version__, settings
from .db import engine, Base
from .routers.sheet import router as sheet_router
from .routers.analytics import router as analytics_router
from .routers.history import router as history_router
from availboard.setup_logging import setup_logging

# --------------------------------------------------------------------
# App bootstrap
# --------------------------------------------------------------------
setup_logging(settings.LOG_LEVEL) # Init Logging

# Create the snapshot table if it doesn't exist.
Base.metadata.create_all(bind=engine)

app = FastAPI(title="Availability Sheet Service", version=__version__)

# --------------------------------------------------------------------
# Routes
# --------------------------------------------------------------------
@app.get("/healthz")
def health():
    """
    Simple health probe for monitoring.
    Returns:
      - ok: static True if the app is alive
      - api_key_configured: whether the Sheets API path will be tried first
    """
    return {
        "ok": True,
        "service": "availboard",
        "version": __version__,
        "api_key_configured": bool(settings.GOOGLE_SHEETS_API_KEY),
    }

# Register API routers:
app.include_router(sheet_router)
app.include_router(analytics_router)
app.include_router(history_router)

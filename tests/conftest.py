# tests/conftest.py
import os
import tempfile
from datetime import datetime, timedelta, timezone

import pytest
from fastapi.testclient import TestClient
from sqlalchemy import create_engine, text
from sqlalchemy.orm import sessionmaker

from availboard.main import app
from availboard.db import Base, get_db
from availboard.normalizers import normalize
from availboard.repositories import save_snapshot
from availboard.routers import sheet as sheet_router


# --- Temporary SQLite DB file for the whole test session ---
@pytest.fixture(scope="session")
def tmp_db_url():
    fd, path = tempfile.mkstemp(suffix=".db")
    os.close(fd)
    url = f"sqlite:///{path}"
    yield url
    try:
        os.remove(path)
    except OSError:
        pass


@pytest.fixture(scope="session")
def engine(tmp_db_url):
    eng = create_engine(tmp_db_url, connect_args={"check_same_thread": False}, future=True)
    Base.metadata.create_all(bind=eng)
    return eng


@pytest.fixture(scope="function")
def db_session(engine):
    TestingSession = sessionmaker(bind=engine, autocommit=False, autoflush=False, future=True)
    db = TestingSession()
    try:
        yield db
    finally:
        db.rollback()
        db.execute(text("DELETE FROM snapshots"))
        db.commit()
        db.close()


# --- Override FastAPI's DB dependency to use our test session ---
@pytest.fixture(autouse=True)
def override_get_db(db_session):
    def _get_db():
        try:
            yield db_session
        finally:
            pass
    app.dependency_overrides[get_db] = _get_db
    yield
    app.dependency_overrides.clear()


@pytest.fixture(autouse=True)
def fresh_sheet_cache():
    sheet_router.clear_cache()
    yield
    sheet_router.clear_cache()


@pytest.fixture
def client():
    with TestClient(app) as c:
        yield c


# --- Fake HTTP layer for the fetcher ---
class FakeResponse:
    def __init__(self, status_code=200, text="", json_data=None):
        self.status_code = status_code
        self.text = text
        self._json = json_data

    @property
    def ok(self):
        return 200 <= self.status_code < 400

    def json(self):
        if self._json is None:
            raise ValueError("No JSON object could be decoded")
        return self._json


class FakeSession:
    """Answers GETs from a list of (url substring, response or exception)."""
    def __init__(self, routes):
        self.routes = list(routes)
        self.calls = []

    def get(self, url, **kwargs):
        self.calls.append((url, kwargs))
        for needle, answer in self.routes:
            if needle in url:
                if isinstance(answer, Exception):
                    raise answer
                return answer
        return FakeResponse(404, "Not Found")


@pytest.fixture
def fake_session():
    return FakeSession


@pytest.fixture
def fake_response():
    return FakeResponse


# --- Sample sheet rows ---
SAMPLE_ROWS = [
    {"Name": "HRT Clinic A", "Category": "Clinic", "URL": "https://a.example/book",
     "Days Out": "7", "Availability Score": "90", "Error Code": "", "Location": "Austin"},
    {"Name": "TRT Downtown", "Category": "Clinic", "URL": "https://b.example/book",
     "Days Out": "20", "Availability Score": "70", "Error Code": "", "Location": "Dallas"},
    {"Name": "Dr. Smith", "Category": "Provider", "URL": "https://c.example/book",
     "Days Out": "45", "Availability Score": "50", "Error Code": "", "Location": "Austin"},
    {"Name": "Wellness Hub", "Category": "Clinic", "URL": "https://d.example/book",
     "Days Out": "", "Availability Score": "", "Error Code": "TIMEOUT", "Location": "Houston"},
]


@pytest.fixture
def sample_rows():
    return [dict(r) for r in SAMPLE_ROWS]


@pytest.fixture
def seed_snapshots(db_session):
    """
    Two daily snapshots: yesterday (baseline) and today.
    Between them TRT Downtown doubles its wait, Dr. Smith starts erroring
    and Wellness Hub's error clears.
    """
    today = datetime.now(timezone.utc).date()
    yesterday = today - timedelta(days=1)

    previous = [dict(r) for r in SAMPLE_ROWS]
    previous[1]["Days Out"] = "10"

    current = [dict(r) for r in SAMPLE_ROWS]
    current[2]["Error Code"] = "HTTP_500"
    current[3]["Error Code"] = ""
    current[3]["Days Out"] = "12"

    headers = list(SAMPLE_ROWS[0].keys())
    save_snapshot(db_session, yesterday, headers, normalize(previous))
    save_snapshot(db_session, today, headers, normalize(current))
    db_session.commit()
    return {"today": today.isoformat(), "yesterday": yesterday.isoformat()}

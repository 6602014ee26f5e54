import os
import sys
from pathlib import Path
from typing import List, Optional

import pytest
from fastapi.testclient import TestClient

# Гарантируем, что корень проекта (с пакетом shortlink) в sys.path,
# независимо от того, откуда запущен pytest.
ROOT_DIR = Path(__file__).resolve().parents[1]
if str(ROOT_DIR) not in sys.path:
    sys.path.insert(0, str(ROOT_DIR))

os.environ["BASE_URL"] = "http://0.0.0.0:8000"

from shortlink.db import init_db  # noqa: E402
from shortlink.errors import LinkConflictError  # noqa: E402
from shortlink.main import app  # noqa: E402
from shortlink.repository import LinkRecord  # noqa: E402


class FakeLinkStore:
    """LinkStore в памяти: запоминает вызовы и держит уникальность short_code."""

    def __init__(self, records: Optional[List[LinkRecord]] = None) -> None:
        self.records: List[LinkRecord] = list(records or [])
        self.calls: List[tuple] = []
        self.lookup_error: Optional[Exception] = None
        self.insert_error: Optional[Exception] = None

    def find_by_code(self, code: str) -> Optional[LinkRecord]:
        self.calls.append(("find_by_code", code))
        if self.lookup_error is not None:
            raise self.lookup_error
        return next((r for r in self.records if r.short_code == code), None)

    def find_by_url(self, url: str) -> Optional[LinkRecord]:
        self.calls.append(("find_by_url", url))
        return next((r for r in self.records if r.original_url == url), None)

    def find_by_code_and_url(self, code: str, url: str) -> Optional[LinkRecord]:
        self.calls.append(("find_by_code_and_url", code, url))
        return next(
            (r for r in self.records if r.short_code == code and r.original_url == url),
            None,
        )

    def insert(self, record: LinkRecord) -> LinkRecord:
        self.calls.append(("insert", record.short_code, record.original_url))
        if self.insert_error is not None:
            raise self.insert_error
        if any(r.short_code == record.short_code for r in self.records):
            raise LinkConflictError(f"UNIQUE constraint failed: {record.short_code}")
        stored = LinkRecord(
            short_code=record.short_code,
            original_url=record.original_url,
            id=len(self.records) + 1,
        )
        self.records.append(stored)
        return stored

    @property
    def inserts(self) -> List[tuple]:
        return [c for c in self.calls if c[0] == "insert"]


@pytest.fixture
def store() -> FakeLinkStore:
    return FakeLinkStore()


@pytest.fixture
def db_path(tmp_path, monkeypatch) -> Path:
    path = tmp_path / "shortener.db"
    monkeypatch.setenv("SHORTENER_DB_PATH", str(path))
    init_db(path)
    return path


@pytest.fixture
def client(db_path):
    yield TestClient(app)
    app.dependency_overrides.clear()

"""Shared helpers for tests.

Intended usage:
- spin up a temporary SQLite database with all tables
- build a Flask app wired to it (no real Cloudinary, fixed clock)
- in-memory fakes for collaborators that would otherwise hit the network

These utilities keep tests small and consistent.
"""

from __future__ import annotations

from datetime import datetime, timedelta, timezone
from pathlib import Path
from typing import Any

from sqlalchemy import create_engine
from sqlalchemy.engine import Engine
from sqlalchemy.orm import Session, sessionmaker

from api.services.blob_store import StoredBlob
from api.services.exceptions import BlobStoreError, StorageError
from models import Base

__all__ = [
    "make_sqlite_engine",
    "create_empty_sqlite_db",
    "StepClock",
    "FakeBlobStore",
    "FailingStore",
    "sample_fields",
    "sample_form",
]


def make_sqlite_engine(db_path: Path | str) -> Engine:
    """Create a SQLite engine suitable for tests."""

    if isinstance(db_path, Path):
        db_path = str(db_path)
    return create_engine(f"sqlite:///{db_path}")


def create_empty_sqlite_db(db_path: Path) -> tuple[Session, Engine]:
    """Create an empty SQLite DB file and initialize all models.

    Returns (session, engine).
    """

    engine = make_sqlite_engine(db_path)
    Base.metadata.create_all(engine)
    SessionLocal = sessionmaker(bind=engine)
    return SessionLocal(), engine


class StepClock:
    """Deterministic clock: each call advances by one second."""

    def __init__(self, start: datetime | None = None):
        self.current = start or datetime(2025, 1, 26, 9, 30, 0, tzinfo=timezone.utc)

    def __call__(self) -> datetime:
        now = self.current
        self.current = now + timedelta(seconds=1)
        return now


class FakeBlobStore:
    """In-memory blob store; optionally fails uploads or deletes."""

    def __init__(self, *, fail_upload: bool = False, fail_delete: bool = False):
        self.blobs: dict[str, tuple[bytes, str]] = {}
        self.deleted: list[str] = []
        self.fail_upload = fail_upload
        self.fail_delete = fail_delete

    def upload(self, data: bytes, mime_type: str, name: str) -> StoredBlob:
        if self.fail_upload:
            raise BlobStoreError("upload refused")
        self.blobs[name] = (data, mime_type)
        return StoredBlob(url=f"https://blobs.test/{name}", public_id=name)

    def delete(self, public_id: str) -> None:
        if self.fail_delete:
            raise BlobStoreError("delete refused")
        self.deleted.append(public_id)
        self.blobs.pop(public_id, None)


class FailingStore:
    """QRCodeStore whose writes (and optionally reads) always fail."""

    def __init__(self, *, fail_reads: bool = False):
        self.fail_reads = fail_reads

    def save(self, record):
        raise StorageError("database is down")

    def _read(self):
        if self.fail_reads:
            raise StorageError("database is down")
        return []

    def find_by_identifier(self, identifier):
        self._read()
        return None

    def list_by_identifier(self, identifier):
        return self._read()

    def list_by_owner(self, owner_email):
        return self._read()


def sample_fields(**overrides: Any) -> dict[str, Any]:
    """Valid submission fields (JSON / QRCodeSubmission names)."""

    fields = {
        "company_name": "FreshFarms",
        "founded_year": "1998",
        "contact_email": "ops@freshfarms.test",
        "website": "https://freshfarms.test",
        "description": "Family farm growing vine tomatoes.",
        "product_name": "Tomatoes",
        "product_description": "Vine ripened, picked daily.",
        "facebook": "",
        "twitter": "",
        "instagram": "",
    }
    fields.update(overrides)
    return fields


def sample_form(**overrides: Any) -> dict[str, Any]:
    """The same fields as the dashboard form posts them."""

    fields = sample_fields(**overrides)
    form = {}
    for name, value in fields.items():
        form_name = "company_founded" if name == "founded_year" else name
        form["qrcode_" + form_name] = value
    return form

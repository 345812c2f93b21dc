from __future__ import annotations

from dataclasses import dataclass
from typing import Generator

import pytest
from flask import Flask
from flask.testing import FlaskClient

from app import create_app
from api.extensions import get_qrcode_service
from api.services.qrcode_service import QRCodeService
from pytests.common import FakeBlobStore, StepClock


@dataclass
class AppHarness:
    app: Flask
    client: FlaskClient
    blob_store: FakeBlobStore
    clock: StepClock

    @property
    def service(self) -> QRCodeService:
        with self.app.app_context():
            return get_qrcode_service()


@pytest.fixture()
def harness(tmp_path, monkeypatch) -> Generator[AppHarness, None, None]:
    """Flask app backed by a temp SQLite DB and an in-memory blob store.

    APP_ENV is "production", so lookup URLs are always https.
    """

    monkeypatch.setenv("SLOW_REQUEST_MS", "0")

    blob_store = FakeBlobStore()
    clock = StepClock()
    app = create_app(
        {
            "TESTING": True,
            "SECRET_KEY": "test-secret",
            "APP_ENV": "production",
            "DATABASE_URL": f"sqlite:///{tmp_path / 'foodprint.sqlite'}",
            "INIT_DB_ON_STARTUP": True,
        },
        blob_store=blob_store,
        clock=clock,
    )

    with app.test_client() as c:
        yield AppHarness(app=app, client=c, blob_store=blob_store, clock=clock)

    app.extensions["db_engine"].dispose()


@pytest.fixture()
def client(harness) -> FlaskClient:
    return harness.client

from __future__ import annotations

import hashlib
from typing import Any

from api.services.exceptions import StorageError
from app import create_app
from pytests.common import FailingStore, FakeBlobStore, sample_fields

FRESHFARMS_ID = hashlib.sha256(b"FreshFarms-Tomatoes-ops@freshfarms.test").hexdigest()


def _assert_envelope(payload: Any) -> None:
    assert isinstance(payload, dict)
    assert set(payload.keys()) == {"ok", "data", "error", "meta"}
    assert "request_id" in payload["meta"]

    # ok -> error must be null, fail -> error must be object
    if payload["ok"] is True:
        assert payload["error"] is None
    else:
        assert isinstance(payload["error"], dict)
        assert "code" in payload["error"]
        assert "message" in payload["error"]


def test_create_returns_201_with_record_and_qr(client):
    resp = client.post("/api/v1/qrcodes", json=sample_fields())
    assert resp.status_code == 201
    payload = resp.get_json()
    _assert_envelope(payload)

    data = payload["data"]
    assert data["identifier"] == FRESHFARMS_ID
    assert data["lookup_url"] == f"https://localhost/app/qrcode/static/{FRESHFARMS_ID}"
    assert data["qr_image"].startswith("data:image/png;base64,")
    assert data["duplicate"] is False
    assert data["facebook"] is None


def test_create_twice_flags_duplicate(client):
    first = client.post("/api/v1/qrcodes", json=sample_fields()).get_json()["data"]
    second = client.post("/api/v1/qrcodes", json=sample_fields()).get_json()["data"]
    assert second["duplicate"] is True
    assert second["lookup_url"] == first["lookup_url"]
    assert second["record_key"] != first["record_key"]


def test_create_validation_error(client):
    resp = client.post("/api/v1/qrcodes", json=sample_fields(company_name=""))
    assert resp.status_code == 400
    payload = resp.get_json()
    _assert_envelope(payload)
    assert payload["error"]["code"] == "validation_error"
    assert payload["error"]["details"]["errors"][0]["field"] == "company_name"


def test_create_rejects_non_object_body(client):
    resp = client.post("/api/v1/qrcodes", data="[]", content_type="application/json")
    assert resp.status_code == 400
    _assert_envelope(resp.get_json())


def test_get_resolves_identifier(client):
    created = client.post("/api/v1/qrcodes", json=sample_fields()).get_json()["data"]
    resp = client.get(f"/api/v1/qrcodes/{FRESHFARMS_ID}")
    assert resp.status_code == 200
    payload = resp.get_json()
    _assert_envelope(payload)
    assert payload["data"]["record_key"] == created["record_key"]


def test_get_unknown_is_not_found_envelope(client):
    resp = client.get(f"/api/v1/qrcodes/{'0' * 64}")
    assert resp.status_code == 404
    payload = resp.get_json()
    _assert_envelope(payload)
    assert payload["error"]["code"] == "not_found"


def test_history_lists_all_rows_newest_first(client):
    keys = [
        client.post("/api/v1/qrcodes", json=sample_fields()).get_json()["data"]["record_key"]
        for _ in range(3)
    ]
    resp = client.get(f"/api/v1/qrcodes/{FRESHFARMS_ID}/history")
    assert resp.status_code == 200
    records = resp.get_json()["data"]["records"]
    assert [r["record_key"] for r in records] == list(reversed(keys))


def test_history_unknown_is_404(client):
    assert client.get(f"/api/v1/qrcodes/{'0' * 64}/history").status_code == 404


def test_list_by_owner(client):
    with client.session_transaction() as sess:
        sess["user_email"] = "owner@freshfarms.test"
    client.post("/api/v1/qrcodes", json=sample_fields())
    client.post("/api/v1/qrcodes", json=sample_fields(product_name="Basil"))

    data = client.get("/api/v1/qrcodes").get_json()["data"]
    assert data["owner"] == "owner@freshfarms.test"
    assert data["count"] == 2
    assert [r["product_name"] for r in data["records"]] == ["Basil", "Tomatoes"]

    other = client.get("/api/v1/qrcodes?owner=nobody@x.test").get_json()["data"]
    assert other["count"] == 0


def test_storage_failure_is_retryable_503(tmp_path, monkeypatch):
    monkeypatch.setenv("SLOW_REQUEST_MS", "0")
    app = create_app(
        {"TESTING": True, "SECRET_KEY": "t", "APP_ENV": "production"},
        store=FailingStore(fail_reads=True),
        blob_store=FakeBlobStore(),
    )
    c = app.test_client()

    resp = c.post("/api/v1/qrcodes", json=sample_fields())
    assert resp.status_code == 503
    payload = resp.get_json()
    _assert_envelope(payload)
    assert payload["error"]["code"] == "storage_error"
    assert payload["error"]["details"] == {"retryable": True}

    assert c.get(f"/api/v1/qrcodes/{FRESHFARMS_ID}").status_code == 503
    # HTML scan page maps the same failure to the 503 page.
    resp = c.get(f"/app/qrcode/static/{FRESHFARMS_ID}")
    assert resp.status_code == 503
    assert "Temporarily unavailable" in resp.get_data(as_text=True)


class _DriverErrorStore(FailingStore):
    """Fails like SqlQRCodeStore does when the driver reports a raw SQL error."""

    detail = (
        "Could not save QR record: (sqlite3.OperationalError) unable to open "
        "/var/lib/db/foodprint.db [SQL: INSERT INTO qrcode_records (record_key) VALUES (?)]"
    )

    def save(self, record):
        raise StorageError(self.detail)

    def find_by_identifier(self, identifier):
        raise StorageError(self.detail)


def test_storage_failure_hides_driver_detail(monkeypatch):
    monkeypatch.setenv("SLOW_REQUEST_MS", "0")
    app = create_app(
        {"TESTING": True, "SECRET_KEY": "t", "APP_ENV": "production"},
        store=_DriverErrorStore(),
        blob_store=FakeBlobStore(),
    )
    c = app.test_client()

    for resp in (
        c.post("/api/v1/qrcodes", json=sample_fields()),
        c.get(f"/api/v1/qrcodes/{FRESHFARMS_ID}"),
    ):
        assert resp.status_code == 503
        payload = resp.get_json()
        _assert_envelope(payload)
        assert payload["error"]["message"] == "Storage temporarily unavailable"
        body = resp.get_data(as_text=True)
        assert "SQL" not in body
        assert "/var/lib/db" not in body


def test_default_config_issues_https_lookup_urls(tmp_path, monkeypatch):
    monkeypatch.setenv("SLOW_REQUEST_MS", "0")
    monkeypatch.delenv("APP_ENV", raising=False)
    app = create_app(
        {
            "TESTING": True,
            "SECRET_KEY": "t",
            "DATABASE_URL": f"sqlite:///{tmp_path / 'foodprint.sqlite'}",
        },
        blob_store=FakeBlobStore(),
    )
    assert app.config["APP_ENV"] == "production"

    resp = app.test_client().post(
        "/api/v1/qrcodes", json=sample_fields(), base_url="http://shop.example"
    )
    assert resp.status_code == 201
    assert resp.get_json()["data"]["lookup_url"] == (
        f"https://shop.example/app/qrcode/static/{FRESHFARMS_ID}"
    )
    app.extensions["db_engine"].dispose()

from __future__ import annotations

from sqlalchemy.exc import OperationalError


def test_home_page_renders_html(client):
    resp = client.get("/")
    assert resp.status_code == 200
    assert resp.content_type.startswith("text/html")

    html = resp.get_data(as_text=True)
    # Basic marker that should stay stable for the frontend.
    assert "<!doctype html" in html.lower()
    assert "/app/qrcode" in html


def test_health_checks_database(client):
    resp = client.get("/health")
    assert resp.status_code == 200
    payload = resp.get_json()
    assert payload["ok"] is True
    assert payload["data"] == {"status": "ok", "database": "ok"}


def test_unknown_route_uses_404_template(client):
    resp = client.get("/does-not-exist")
    assert resp.status_code == 404
    assert "Page not found" in resp.get_data(as_text=True)


class _UnreachableEngine:
    def connect(self):
        raise OperationalError(
            "SELECT 1", {}, Exception("unable to open database file /var/lib/db/foodprint.db")
        )


def test_health_failure_hides_driver_detail(harness):
    engine = harness.app.extensions["db_engine"]
    harness.app.extensions["db_engine"] = _UnreachableEngine()
    try:
        resp = harness.client.get("/health")
    finally:
        harness.app.extensions["db_engine"] = engine

    assert resp.status_code == 503
    payload = resp.get_json()
    assert payload["ok"] is False
    assert payload["error"]["code"] == "database_unavailable"
    assert payload["error"]["message"] == "Database unavailable"
    body = resp.get_data(as_text=True)
    assert "SELECT 1" not in body
    assert "/var/lib/db" not in body

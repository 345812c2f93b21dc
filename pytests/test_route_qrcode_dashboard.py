from __future__ import annotations

import hashlib
import io

from pytests.common import sample_form

FRESHFARMS_ID = hashlib.sha256(b"FreshFarms-Tomatoes-ops@freshfarms.test").hexdigest()


def test_dashboard_renders_empty_state(client):
    resp = client.get("/app/qrcode")
    assert resp.status_code == 200
    assert resp.content_type.startswith("text/html")
    body = resp.get_data(as_text=True)
    assert "QR Code Dashboard" in body
    assert "No QR codes configured yet." in body


def test_save_redirects_and_lists_record_with_inline_qr(client):
    resp = client.post("/app/qrcode/save", data=sample_form(), follow_redirects=False)
    assert resp.status_code in (302, 303)
    assert resp.headers["Location"].endswith("/app/qrcode")

    body = client.get("/app/qrcode").get_data(as_text=True)
    assert "New QR Code Configuration added successfully! QR Code company name = FreshFarms" in body
    # Test client host is "localhost"; production env forces https.
    assert f"https://localhost/app/qrcode/static/{FRESHFARMS_ID}" in body
    assert 'src="data:image/png;base64,' in body


def test_validation_failure_rerenders_with_errors(harness):
    resp = harness.client.post(
        "/app/qrcode/save", data=sample_form(product_name="", contact_email="nope")
    )
    assert resp.status_code == 400
    body = resp.get_data(as_text=True)
    assert "Your Product Name is not valid" in body
    assert "Your contact email is not valid" in body
    # Entered values are kept in the form.
    assert 'value="FreshFarms"' in body
    assert harness.service.history(FRESHFARMS_ID) == []


def test_logo_upload_goes_through_blob_store(harness):
    form = sample_form()
    form["qrcode_company_logo_uploaded_file"] = (io.BytesIO(b"\x89PNG logo"), "logo.png", "image/png")
    resp = harness.client.post(
        "/app/qrcode/save", data=form, content_type="multipart/form-data"
    )
    assert resp.status_code in (302, 303)

    assert list(harness.blob_store.blobs) == ["freshfarms-20250126093000"]
    record = harness.service.resolve(FRESHFARMS_ID)
    assert record.logo_url == "https://blobs.test/freshfarms-20250126093000"


def test_non_image_logo_rejected(harness):
    form = sample_form()
    form["qrcode_company_logo_uploaded_file"] = (io.BytesIO(b"%PDF"), "logo.pdf", "application/pdf")
    resp = harness.client.post(
        "/app/qrcode/save", data=form, content_type="multipart/form-data"
    )
    assert resp.status_code == 400
    assert "Your company logo must be an image" in resp.get_data(as_text=True)
    assert harness.blob_store.blobs == {}


def test_blob_failure_flashes_error(harness):
    harness.blob_store.fail_upload = True
    form = sample_form()
    form["qrcode_company_logo_uploaded_file"] = (io.BytesIO(b"img"), "logo.png", "image/png")
    resp = harness.client.post(
        "/app/qrcode/save", data=form, content_type="multipart/form-data", follow_redirects=True
    )
    assert resp.status_code == 200
    assert "Your logo could not be uploaded" in resp.get_data(as_text=True)
    assert harness.service.history(FRESHFARMS_ID) == []


def test_records_are_scoped_to_session_owner(client):
    with client.session_transaction() as sess:
        sess["user_email"] = "owner@freshfarms.test"
    client.post("/app/qrcode/save", data=sample_form())

    body = client.get("/app/qrcode").get_data(as_text=True)
    assert "Signed in as owner@freshfarms.test" in body
    assert FRESHFARMS_ID in body

    with client.session_transaction() as sess:
        sess.pop("user_email")
    body = client.get("/app/qrcode").get_data(as_text=True)
    assert "Signed in as system" in body
    assert FRESHFARMS_ID not in body


def test_double_submission_lists_two_rows(harness):
    harness.client.post("/app/qrcode/save", data=sample_form())
    harness.client.post("/app/qrcode/save", data=sample_form())

    body = harness.client.get("/app/qrcode").get_data(as_text=True)
    assert body.count("data-record-key=") == 2
    assert len(harness.service.history(FRESHFARMS_ID)) == 2

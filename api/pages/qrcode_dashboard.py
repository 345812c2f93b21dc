from __future__ import annotations

from flask import (
    Blueprint,
    abort,
    flash,
    redirect,
    render_template,
    request,
    send_from_directory,
    url_for,
)

from api.extensions import current_owner_email, get_qrcode_service
from api.schemas.qrcode_forms import LOGO_FIELD, parse_submission_form
from api.services.blob_store import LocalBlobStore
from api.services.exceptions import (
    BlobStoreError,
    EncodingError,
    StorageError,
    SubmissionValidationError,
)
from api.services.qrcode_service import LogoUpload
from logging_utils import get_logger

logger = get_logger(__name__)

qrcode_dashboard_bp = Blueprint("qrcode_dashboard", __name__)


def _dashboard_rows(owner_email: str):
    """(record, data-URI QR image) pairs for the owner's records, newest first."""
    service = get_qrcode_service()
    return [(r, service.qr_data_uri(r)) for r in service.list_for_owner(owner_email)]


def _render_dashboard(*, errors=None, form=None, status: int = 200):
    owner = current_owner_email()
    try:
        rows = _dashboard_rows(owner)
    except StorageError:
        flash("QR codes could not be loaded right now. Please try again.", "error")
        rows = []
    return (
        render_template(
            "pages/qrcode_dashboard.html",
            rows=rows,
            owner_email=owner,
            errors=errors or [],
            form=form or {},
        ),
        status,
    )


def _logo_from_request() -> LogoUpload | None:
    f = request.files.get(LOGO_FIELD)
    if f is None or not f.filename:
        return None
    mime = f.mimetype or "application/octet-stream"
    if not mime.startswith("image/"):
        raise SubmissionValidationError(
            [{"field": "company_logo", "message": "Your company logo must be an image"}]
        )
    return LogoUpload(data=f.read(), mime_type=mime, filename=f.filename)


@qrcode_dashboard_bp.route("/app/qrcode", methods=["GET"])
def dashboard_page():
    """QR configuration dashboard: the owner's records with inline QR images."""
    return _render_dashboard()


@qrcode_dashboard_bp.route("/app/qrcode/save", methods=["POST"])
def save_qrcode():
    """Validate the form, upload the optional logo and store a new QR record."""
    try:
        submission = parse_submission_form(request.form)
        logo = _logo_from_request()
    except SubmissionValidationError as exc:
        return _render_dashboard(errors=exc.errors, form=request.form, status=400)

    service = get_qrcode_service()
    try:
        result = service.submit(
            submission,
            host=request.host,
            scheme=request.scheme,
            owner_email=current_owner_email(),
            logo=logo,
        )
    except EncodingError:
        logger.exception("Lookup URL could not be encoded host=%s", request.host)
        flash("The QR code could not be generated for this submission.", "error")
        return redirect(url_for("api.qrcode_dashboard.dashboard_page"))
    except BlobStoreError as exc:
        logger.warning("Logo upload failed: %s", exc)
        flash("Your logo could not be uploaded. Please try again.", "error")
        return redirect(url_for("api.qrcode_dashboard.dashboard_page"))
    except StorageError:
        flash("Your QR code could not be saved. Please try again.", "error")
        return redirect(url_for("api.qrcode_dashboard.dashboard_page"))

    flash(
        "New QR Code Configuration added successfully! QR Code company name = "
        + result.record.company_name,
        "success",
    )
    return redirect(url_for("api.qrcode_dashboard.dashboard_page"))


@qrcode_dashboard_bp.route("/uploads/<path:name>", methods=["GET"])
def uploaded_file(name: str):
    """Serve logos written by the local blob store."""
    blob_store = get_qrcode_service().blob_store
    if not isinstance(blob_store, LocalBlobStore):
        abort(404)
    return send_from_directory(blob_store.root_dir, name)

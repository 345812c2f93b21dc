from __future__ import annotations

from flask import Blueprint, jsonify, request

from api.extensions import current_owner_email, get_qrcode_service
from api.schemas.api_responses import QRCodeRecordOut, fail, ok, serialize_records
from api.schemas.qrcode_forms import parse_submission
from api.services.exceptions import (
    BlobStoreError,
    EncodingError,
    StorageError,
    SubmissionValidationError,
)
from logging_utils import get_logger

logger = get_logger(__name__)

qrcodes_v1_bp = Blueprint("qrcodes_v1", __name__, url_prefix="/qrcodes")


STORAGE_UNAVAILABLE = "Storage temporarily unavailable"


def _storage_failure(exc: StorageError):
    # Driver detail stays in the log.
    logger.warning("Storage failure path=%s: %s", request.path, exc)
    return (
        jsonify(fail(STORAGE_UNAVAILABLE, code=exc.code, details={"retryable": True})),
        503,
    )


@qrcodes_v1_bp.get("/<identifier>")
def get_qrcode(identifier: str):
    """Resolve an identifier to its current record."""
    try:
        record = get_qrcode_service().resolve(identifier)
    except StorageError as exc:
        return _storage_failure(exc)
    if record is None:
        return jsonify(fail(f"No QR code for '{identifier}'", code="not_found")), 404
    return jsonify(ok(QRCodeRecordOut.from_record(record).model_dump(mode="json")))


@qrcodes_v1_bp.get("/<identifier>/history")
def get_qrcode_history(identifier: str):
    """Every stored row sharing the identifier, newest first."""
    try:
        records = get_qrcode_service().history(identifier)
    except StorageError as exc:
        return _storage_failure(exc)
    if not records:
        return jsonify(fail(f"No QR code for '{identifier}'", code="not_found")), 404
    return jsonify(ok({"identifier": identifier, "records": serialize_records(records)}))


@qrcodes_v1_bp.get("")
def list_qrcodes():
    """Records owned by ?owner=<email> (defaults to the current owner)."""
    owner = (request.args.get("owner") or "").strip() or current_owner_email()
    try:
        records = get_qrcode_service().list_for_owner(owner)
    except StorageError as exc:
        return _storage_failure(exc)
    return jsonify(ok({"owner": owner, "count": len(records), "records": serialize_records(records)}))


@qrcodes_v1_bp.post("")
def create_qrcode():
    """JSON submission. Same validation as the dashboard form, no logo upload."""
    payload = request.get_json(silent=True)
    if not isinstance(payload, dict):
        return jsonify(fail("Expected a JSON object", code="validation_error")), 400

    try:
        submission = parse_submission(payload)
    except SubmissionValidationError as exc:
        return (
            jsonify(fail(str(exc), code=exc.code, details={"errors": exc.errors})),
            400,
        )

    try:
        result = get_qrcode_service().submit(
            submission,
            host=request.host,
            scheme=request.scheme,
            owner_email=current_owner_email(),
        )
    except EncodingError as exc:
        logger.exception("Lookup URL could not be encoded host=%s", request.host)
        return jsonify(fail(str(exc), code=exc.code)), 500
    except BlobStoreError as exc:
        return jsonify(fail(str(exc), code=exc.code)), 502
    except StorageError as exc:
        return _storage_failure(exc)

    data = QRCodeRecordOut.from_record(result.record).model_dump(mode="json")
    data["qr_image"] = result.qr_image
    data["duplicate"] = result.is_duplicate
    return jsonify(ok(data)), 201

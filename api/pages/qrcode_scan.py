from __future__ import annotations

from flask import Blueprint, Response, abort, render_template

from api.extensions import get_qrcode_service

qrcode_scan_bp = Blueprint("qrcode_scan", __name__)


@qrcode_scan_bp.route("/app/qrcode/static/<identifier>", methods=["GET"])
def scan_page(identifier: str):
    """Public page a QR code points at.

    The identifier is the only durable key: the record is found by it no
    matter which host or protocol originally built the URL.
    """
    record = get_qrcode_service().resolve(identifier)
    if record is None:
        return render_template("pages/qrcode_not_found.html", identifier=identifier), 404
    return render_template("pages/qrcode_scan.html", record=record), 200


@qrcode_scan_bp.route("/app/qrcode/image/<identifier>.png", methods=["GET"])
def qrcode_png(identifier: str):
    """Printable PNG of the stored lookup URL."""
    service = get_qrcode_service()
    record = service.resolve(identifier)
    if record is None:
        abort(404)
    return Response(
        service.qr_png(record),
        mimetype="image/png",
        headers={"Content-Disposition": f'inline; filename="{identifier}.png"'},
    )

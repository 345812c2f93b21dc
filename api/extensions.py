from __future__ import annotations

from flask import current_app, session

from api.services.qrcode_service import SYSTEM_OWNER, QRCodeService

# Key under app.extensions where create_app() stores the wired service.
QRCODE_SERVICE_KEY = "qrcodes"


def get_qrcode_service() -> QRCodeService:
    return current_app.extensions[QRCODE_SERVICE_KEY]


def current_owner_email() -> str:
    """Email of the signed-in user (set by the auth layer), else "system"."""
    return (session.get("user_email") or "").strip() or SYSTEM_OWNER

from flask import Blueprint

from api.pages.home import home_bp
from api.pages.qrcode_dashboard import qrcode_dashboard_bp
from api.pages.qrcode_scan import qrcode_scan_bp
from api.api_v1.blueprint import create_api_v1_blueprint


def create_api_blueprint() -> Blueprint:
    """Create the main blueprint and register page blueprints.

    Keep this as the single registration point to avoid double-registering routes.
    """
    api_bp = Blueprint("api", __name__)

    api_bp.register_blueprint(home_bp)
    api_bp.register_blueprint(qrcode_dashboard_bp)
    api_bp.register_blueprint(qrcode_scan_bp)

    # Versioned API
    api_bp.register_blueprint(create_api_v1_blueprint())

    return api_bp

from flask import Blueprint, current_app, jsonify, render_template
from sqlalchemy import text
from sqlalchemy.exc import SQLAlchemyError

from api.schemas.api_responses import fail, ok
from logging_utils import get_logger

logger = get_logger(__name__)

home_bp = Blueprint("home", __name__)


@home_bp.route("/", methods=["GET"])
def home_page():
    """Landing page: links to the QR dashboard."""
    return render_template("pages/home.html"), 200


@home_bp.route("/health", methods=["GET"])
def health():
    """Liveness plus a trivial DB round-trip when the app owns an engine."""
    engine = current_app.extensions.get("db_engine")
    if engine is None:
        return jsonify(ok({"status": "ok", "database": "external"})), 200

    try:
        with engine.connect() as conn:
            conn.execute(text("SELECT 1"))
    except SQLAlchemyError:
        logger.exception("Health check database round-trip failed")
        return jsonify(fail("Database unavailable", code="database_unavailable")), 503
    return jsonify(ok({"status": "ok", "database": "ok"})), 200

import os
import time
from datetime import datetime
from typing import Any, Callable, Mapping, Optional

from flask import Flask, render_template, request
from sqlalchemy.engine import Engine

from api.blueprint import create_api_blueprint
from api.extensions import QRCODE_SERVICE_KEY
from api.services.blob_store import BlobStore, build_blob_store
from api.services.exceptions import StorageError
from api.services.qrcode_service import QRCodeService
from api.services.record_store import QRCodeStore, SqlQRCodeStore
from config import load_env_config
from db import Base, make_engine, make_session_factory
from logging_utils import configure_app_logging, get_logger
from utils.time_utils import utcnow


def init_db(engine: Engine) -> None:
    """Create missing tables. Schema changes are out of scope (no migrations)."""

    import models  # noqa: F401  (registers tables on Base.metadata)

    Base.metadata.create_all(bind=engine)


def create_app(
    overrides: Optional[Mapping[str, Any]] = None,
    *,
    store: Optional[QRCodeStore] = None,
    blob_store: Optional[BlobStore] = None,
    clock: Optional[Callable[[], datetime]] = None,
) -> Flask:
    """Build the Flask app.

    Config precedence: settings.py < environment < `overrides`.
    `store`, `blob_store` and `clock` replace the production collaborators
    (tests pass fakes here instead of patching module globals).
    """
    app = Flask(__name__)

    app.config.from_pyfile("settings.py")
    app.config.update(load_env_config())
    if overrides:
        app.config.update(overrides)

    configure_app_logging(app.config.get("LOG_LEVEL", "INFO"))
    logger = get_logger(__name__)

    # --- slow request logging (default 250ms; "0" disables) ---
    slow_ms = int(os.getenv("SLOW_REQUEST_MS", "250") or "250")

    @app.before_request
    def _start_timer():
        if slow_ms > 0:
            request.environ["_req_start_ns"] = time.perf_counter_ns()

    @app.after_request
    def _log_slow_requests(resp):
        if slow_ms <= 0:
            return resp

        start_ns = request.environ.get("_req_start_ns")
        if not start_ns:
            return resp

        elapsed_ms = (time.perf_counter_ns() - int(start_ns)) / 1_000_000.0
        if elapsed_ms >= slow_ms:
            # Keep it compact and stable for grepping.
            logger.warning(
                "SLOW_REQUEST ms=%.1f status=%s method=%s path=%s",
                elapsed_ms,
                getattr(resp, "status_code", "?"),
                request.method,
                request.path,
            )
        return resp

    if store is None:
        engine = make_engine(app.config.get("DATABASE_URL"))
        if app.config.get("INIT_DB_ON_STARTUP", True):
            logger.info("Initializing database schema")
            init_db(engine)
        app.extensions["db_engine"] = engine
        store = SqlQRCodeStore(make_session_factory(engine))

    if blob_store is None:
        blob_store = build_blob_store(app.config, instance_path=app.instance_path)

    app.extensions[QRCODE_SERVICE_KEY] = QRCodeService(
        store,
        blob_store,
        clock=clock or utcnow,
        app_env=app.config.get("APP_ENV") or "production",
        default_logo_url=app.config.get("DEFAULT_QR_LOGO_URL"),
    )
    logger.info(
        "QR service ready app_env=%s blob_store=%s",
        app.config.get("APP_ENV"),
        type(blob_store).__name__,
    )

    app.register_blueprint(create_api_blueprint())

    # Error handlers
    @app.errorhandler(404)
    def not_found(_err):
        return render_template("errors/404.html"), 404

    @app.errorhandler(413)
    def too_large(_err):
        return render_template("errors/413.html"), 413

    @app.errorhandler(StorageError)
    def storage_unavailable(_err):
        return render_template("errors/503.html"), 503

    @app.errorhandler(500)
    def server_error(_err):
        logger.exception("Unhandled server error")
        return render_template("errors/500.html"), 500

    return app


# NOTE: Do not instantiate the Flask app at import time.
# Tests build their own app with a temp database via create_app(overrides).
app: Flask | None = None


if __name__ == "__main__":
    app = create_app()
    get_logger(__name__).info("Starting Flask app")
    app.run(debug=True, use_reloader=False)

"""App settings.

Flask loads this module on startup via ``app.config.from_pyfile(...)``.
Values here are defaults; ``config.load_env_config()`` returns the
environment overrides that ``create_app`` applies on top of them.
"""

# Single source of truth for default app configuration.
SETTINGS: dict[str, object] = {
    # Flask
    "SECRET_KEY": "dev-not-secret",
    # Lookup URLs are always https unless APP_ENV=development is set in the environment,
    # which switches to the request's own scheme.
    "APP_ENV": "production",
    # Logging
    "LOG_LEVEL": "INFO",
    # Database (None -> data/foodprint.db)
    "DATABASE_URL": None,
    # Blob store for uploaded logos: "local", "cloudinary", or None (Cloudinary when
    # credentials are configured, local otherwise).
    "BLOB_STORE": None,
    "UPLOAD_DIR": None,
    "CLOUDINARY_FOLDER": "foodprint/qrcodes",
    # Stored as the logo reference when a submission has no logo file.
    "DEFAULT_QR_LOGO_URL": "",
    # Uploads larger than this are rejected by Werkzeug with 413.
    "MAX_CONTENT_LENGTH": 5 * 1024 * 1024,
}

# Flask only picks up upper-case module attributes.
SECRET_KEY = SETTINGS["SECRET_KEY"]
APP_ENV = SETTINGS["APP_ENV"]
LOG_LEVEL = SETTINGS["LOG_LEVEL"]
DATABASE_URL = SETTINGS["DATABASE_URL"]
BLOB_STORE = SETTINGS["BLOB_STORE"]
UPLOAD_DIR = SETTINGS["UPLOAD_DIR"]
CLOUDINARY_FOLDER = SETTINGS["CLOUDINARY_FOLDER"]
DEFAULT_QR_LOGO_URL = SETTINGS["DEFAULT_QR_LOGO_URL"]
MAX_CONTENT_LENGTH = SETTINGS["MAX_CONTENT_LENGTH"]

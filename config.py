import os

# Variables copied verbatim from the environment when set.
_ENV_KEYS = (
    "SECRET_KEY",
    "APP_ENV",
    "DATABASE_URL",
    "BLOB_STORE",
    "UPLOAD_DIR",
    "DEFAULT_QR_LOGO_URL",
    "CLOUDINARY_URL",
    "CLOUDINARY_CLOUD_NAME",
    "CLOUDINARY_API_KEY",
    "CLOUDINARY_API_SECRET",
    "CLOUDINARY_FOLDER",
)


def _env_bool(name: str, default: bool) -> bool:
    v = os.getenv(name)
    if v is None:
        return default
    return v.strip().lower() in {"1", "true", "yes", "y", "on"}


def load_env_config() -> dict[str, object]:
    """Configuration overrides loaded from environment variables.

    Only variables that are set (and non-empty) are returned, so applying the
    result with ``app.config.update(...)`` never clobbers a default from
    ``settings.py`` with ``None``.
    """

    out: dict[str, object] = {}
    for name in _ENV_KEYS:
        v = os.getenv(name)
        if v is not None and v.strip() != "":
            out[name] = v.strip()

    if os.getenv("LOG_LEVEL"):
        out["LOG_LEVEL"] = os.getenv("LOG_LEVEL", "INFO").strip().upper()

    # Feature flags
    out["INIT_DB_ON_STARTUP"] = _env_bool("INIT_DB_ON_STARTUP", True)
    return out


def cloudinary_configured(config) -> bool:
    """True when Cloudinary credentials are present in a Flask config mapping."""
    if config.get("CLOUDINARY_URL"):
        return True
    return bool(
        config.get("CLOUDINARY_CLOUD_NAME")
        and config.get("CLOUDINARY_API_KEY")
        and config.get("CLOUDINARY_API_SECRET")
    )

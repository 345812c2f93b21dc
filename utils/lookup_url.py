"""Canonical helpers for public QR lookup URLs.

Format: {protocol}://{host}/app/qrcode/static/{identifier}
"""

from __future__ import annotations

LOOKUP_PATH_PREFIX = "app/qrcode/static"

# The only environment where the request's own scheme is trusted.
NON_PRODUCTION_ENV = "development"


def request_protocol(request_scheme: str, app_env: str | None) -> str:
    """Pick the protocol for a new lookup URL.

    Production deployments sit behind TLS-terminating proxies, so the scheme
    Flask sees is often ``http``; lookup URLs are forced to ``https`` there.
    """

    if (app_env or "").strip().lower() == NON_PRODUCTION_ENV:
        return request_scheme or "http"
    return "https"


def compose_lookup_url(protocol: str, host: str, identifier: str) -> str:
    """Build the public lookup URL for ``identifier``.

    ``host`` is used verbatim (it may carry a port, e.g. ``localhost:5000``).
    """

    if not identifier:
        raise ValueError("identifier is required for a lookup URL")
    if not host:
        raise ValueError("host is required for a lookup URL")

    return f"{protocol}://{host}/{LOOKUP_PATH_PREFIX}/{identifier}"

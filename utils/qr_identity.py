"""Content identity for QR records.

The identifier is the SHA-256 hex digest of a canonical key built from the
supplier's company name, product name and contact email. Identifiers are
embedded in QR codes that are already printed on packaging, so this algorithm
must never change for existing data.
"""

from __future__ import annotations

import hashlib
import re

CANONICAL_SEPARATOR = "-"
IDENTIFIER_LENGTH = 64

_WHITESPACE_RE = re.compile(r"\s+")
_IDENTIFIER_RE = re.compile(r"^[0-9a-f]{64}$")


def canonical_key(company_name: str, product_name: str, contact_email: str) -> str:
    """Join the three identity fields with ``-`` and drop all whitespace.

    Whitespace is removed everywhere, not just trimmed, so "Acme Co" and
    "AcmeCo" produce the same key:

        >>> canonical_key("Acme Co", "Widget", "a@b.com")
        'AcmeCo-Widget-a@b.com'

    Optional fields (website, social handles, descriptions) are deliberately
    not part of the key.
    """

    joined = CANONICAL_SEPARATOR.join([company_name, product_name, contact_email])
    return _WHITESPACE_RE.sub("", joined)


def derive_identifier(canonical: str) -> str:
    """Return the lowercase hex SHA-256 digest of ``canonical`` (UTF-8).

    An empty key is not rejected; it hashes like any other string.
    """

    return hashlib.sha256(canonical.encode("utf-8")).hexdigest()


def identifier_for(company_name: str, product_name: str, contact_email: str) -> str:
    return derive_identifier(canonical_key(company_name, product_name, contact_email))


def is_identifier(value: str | None) -> bool:
    """True if ``value`` has the shape of an identifier (64 lowercase hex chars)."""

    return bool(value) and _IDENTIFIER_RE.match(value) is not None

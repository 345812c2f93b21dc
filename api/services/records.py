from __future__ import annotations

from dataclasses import asdict, dataclass
from datetime import datetime
from typing import Any, Dict, Optional


@dataclass(frozen=True)
class QRCodeRecord:
    """A persisted QR configuration.

    ``record_key`` is a random per-row key; ``identifier`` is the content hash
    that appears in ``lookup_url``. Several rows may share one identifier when
    the same product is submitted more than once.
    """

    record_key: str
    company_name: str
    founded_year: str
    contact_email: str
    website: str
    description: str
    product_name: str
    product_description: str
    identifier: str
    lookup_url: str
    canonical_key: str
    created_at: datetime
    owner_email: str
    facebook: Optional[str] = None
    twitter: Optional[str] = None
    instagram: Optional[str] = None
    logo_url: Optional[str] = None

    def to_dict(self) -> Dict[str, Any]:
        data = asdict(self)
        data["created_at"] = self.created_at.isoformat()
        return data

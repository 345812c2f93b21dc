from __future__ import annotations

from sqlalchemy import Column, DateTime, Index, Integer, String, Text

from models import Base
from utils.time_utils import utcnow_sa_default


class QRCodeRow(Base):
    """Stored QR configuration.

    `identifier` and `lookup_url` are load-bearing for QR codes that are
    already printed: they are written once and never recomputed.

    Uniqueness:
    - `record_key` is unique (random uuid4 per row).
    - `identifier` is NOT unique; resubmitting the same company/product/email
      adds a row that shares the identifier and lookup URL.
    """

    __tablename__ = "qrcode_records"
    __table_args__ = (
        Index("ix_qrcode_records_identifier_created", "identifier", "created_at"),
    )

    # Storage-assigned; not part of the record's identity.
    id = Column(Integer, primary_key=True, autoincrement=True)

    record_key = Column(String(36), unique=True, nullable=False)

    company_name = Column(String(255), nullable=False)
    founded_year = Column(String(32), nullable=False)
    contact_email = Column(String(255), nullable=False)
    website = Column(String(255), nullable=False)
    facebook = Column(String(255), nullable=True)
    twitter = Column(String(255), nullable=True)
    instagram = Column(String(255), nullable=True)
    description = Column(Text, nullable=False)
    product_name = Column(String(255), nullable=False)
    product_description = Column(Text, nullable=False)

    # Opaque blob-store reference.
    logo_url = Column(String(1024), nullable=True)

    identifier = Column(String(64), nullable=False)
    lookup_url = Column(String(1024), nullable=False)
    canonical_key = Column(Text, nullable=False)

    created_at = Column(DateTime, nullable=False, default=utcnow_sa_default)
    owner_email = Column(String(255), nullable=False, index=True)

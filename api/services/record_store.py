from __future__ import annotations

from typing import Callable, List, Optional, Protocol

from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import Session

from api.services.exceptions import StorageError
from api.services.records import QRCodeRecord
from logging_utils import get_logger
from models.qrcode_records import QRCodeRow
from utils.time_utils import ensure_utc

logger = get_logger(__name__)


class QRCodeStore(Protocol):
    """Persistence contract used by QRCodeService."""

    def save(self, record: QRCodeRecord) -> str: ...

    def find_by_identifier(self, identifier: str) -> Optional[QRCodeRecord]: ...

    def list_by_owner(self, owner_email: str) -> List[QRCodeRecord]: ...

    def list_by_identifier(self, identifier: str) -> List[QRCodeRecord]: ...


def _row_from_record(record: QRCodeRecord) -> QRCodeRow:
    return QRCodeRow(
        record_key=record.record_key,
        company_name=record.company_name,
        founded_year=record.founded_year,
        contact_email=record.contact_email,
        website=record.website,
        facebook=record.facebook,
        twitter=record.twitter,
        instagram=record.instagram,
        description=record.description,
        product_name=record.product_name,
        product_description=record.product_description,
        logo_url=record.logo_url,
        identifier=record.identifier,
        lookup_url=record.lookup_url,
        canonical_key=record.canonical_key,
        # Stored as naive UTC; SQLite has no timezone support.
        created_at=ensure_utc(record.created_at).replace(tzinfo=None),
        owner_email=record.owner_email,
    )


def _record_from_row(row: QRCodeRow) -> QRCodeRecord:
    return QRCodeRecord(
        record_key=row.record_key,
        company_name=row.company_name,
        founded_year=row.founded_year,
        contact_email=row.contact_email,
        website=row.website,
        facebook=row.facebook,
        twitter=row.twitter,
        instagram=row.instagram,
        description=row.description,
        product_name=row.product_name,
        product_description=row.product_description,
        logo_url=row.logo_url,
        identifier=row.identifier,
        lookup_url=row.lookup_url,
        canonical_key=row.canonical_key,
        created_at=ensure_utc(row.created_at),
        owner_email=row.owner_email,
    )


class SqlQRCodeStore:
    """QRCodeStore backed by SQLAlchemy.

    Every call opens its own short-lived session from `session_factory`.
    """

    def __init__(self, session_factory: Callable[[], Session]):
        self._session_factory = session_factory

    def save(self, record: QRCodeRecord) -> str:
        session = self._session_factory()
        try:
            session.add(_row_from_record(record))
            session.commit()
        except SQLAlchemyError as exc:
            session.rollback()
            logger.exception("Failed to save QR record record_key=%s", record.record_key)
            raise StorageError(f"Could not save QR record: {exc}") from exc
        finally:
            session.close()
        return record.record_key

    def find_by_identifier(self, identifier: str) -> Optional[QRCodeRecord]:
        """Return the newest record for `identifier`, or None."""
        rows = self._query(
            lambda s: s.query(QRCodeRow)
            .filter(QRCodeRow.identifier == identifier)
            .order_by(QRCodeRow.created_at.desc(), QRCodeRow.id.desc())
            .limit(1)
            .all()
        )
        return rows[0] if rows else None

    def list_by_identifier(self, identifier: str) -> List[QRCodeRecord]:
        return self._query(
            lambda s: s.query(QRCodeRow)
            .filter(QRCodeRow.identifier == identifier)
            .order_by(QRCodeRow.created_at.desc(), QRCodeRow.id.desc())
            .all()
        )

    def list_by_owner(self, owner_email: str) -> List[QRCodeRecord]:
        return self._query(
            lambda s: s.query(QRCodeRow)
            .filter(QRCodeRow.owner_email == owner_email)
            .order_by(QRCodeRow.id.desc())
            .all()
        )

    def _query(self, fn: Callable[[Session], List[QRCodeRow]]) -> List[QRCodeRecord]:
        session = self._session_factory()
        try:
            return [_record_from_row(r) for r in fn(session)]
        except SQLAlchemyError as exc:
            logger.exception("QR record lookup failed")
            raise StorageError(f"Could not read QR records: {exc}") from exc
        finally:
            session.close()

"""QR record submission and resolution.

Submission path:
    fields -> canonical key -> identifier -> lookup URL -> (QR image, record) -> store

Scan path:
    identifier -> store.find_by_identifier -> newest record (or None)

Collaborators (record store, blob store, clock) are passed in explicitly;
`create_app()` wires the production ones.
"""

from __future__ import annotations

import re
import uuid
from dataclasses import dataclass
from datetime import datetime
from typing import Callable, List, Optional

from api.schemas.qrcode_forms import QRCodeSubmission
from api.services.blob_store import BlobStore
from api.services.exceptions import BlobStoreError, StorageError
from api.services.record_store import QRCodeStore
from api.services.records import QRCodeRecord
from logging_utils import get_logger
from utils.lookup_url import compose_lookup_url, request_protocol
from utils.qr_encoding import encode_data_uri, encode_png
from utils.qr_identity import canonical_key, derive_identifier, is_identifier
from utils.time_utils import compact_timestamp, utcnow

logger = get_logger(__name__)

# Owner recorded when no signed-in user is known.
SYSTEM_OWNER = "system"


@dataclass(frozen=True)
class LogoUpload:
    data: bytes
    mime_type: str
    filename: Optional[str] = None


@dataclass(frozen=True)
class SubmissionResult:
    record: QRCodeRecord
    qr_image: str
    # Rows that already shared this identifier before the save.
    previous_count: int = 0

    @property
    def is_duplicate(self) -> bool:
        return self.previous_count > 0


def logo_public_id(company_name: str, now: datetime) -> str:
    """e.g. "Fresh Farms" -> "fresh_farms-20250126093000"."""
    base = re.sub(r"\s+", "_", company_name or "file").lower()
    return f"{base}-{compact_timestamp(now)}"


def assemble_record(
    submission: QRCodeSubmission,
    *,
    identifier: str,
    lookup_url: str,
    canonical: str,
    logo_url: Optional[str],
    owner_email: str,
    now: datetime,
) -> QRCodeRecord:
    """Build a new record with a fresh random record key. No I/O."""

    return QRCodeRecord(
        record_key=str(uuid.uuid4()),
        company_name=submission.company_name,
        founded_year=submission.founded_year,
        contact_email=submission.contact_email,
        website=submission.website,
        facebook=submission.facebook,
        twitter=submission.twitter,
        instagram=submission.instagram,
        description=submission.description,
        product_name=submission.product_name,
        product_description=submission.product_description,
        logo_url=logo_url,
        identifier=identifier,
        lookup_url=lookup_url,
        canonical_key=canonical,
        created_at=now,
        owner_email=owner_email or SYSTEM_OWNER,
    )


class QRCodeService:
    def __init__(
        self,
        store: QRCodeStore,
        blob_store: BlobStore,
        *,
        clock: Callable[[], datetime] = utcnow,
        app_env: str = "production",
        default_logo_url: Optional[str] = None,
    ):
        self.store = store
        self.blob_store = blob_store
        self.clock = clock
        self.app_env = app_env
        self.default_logo_url = default_logo_url or None

    def lookup_url_for(self, submission: QRCodeSubmission, *, host: str, scheme: str):
        """Return (canonical key, identifier, lookup URL) for a submission."""
        canonical = canonical_key(
            submission.company_name, submission.product_name, submission.contact_email
        )
        identifier = derive_identifier(canonical)
        protocol = request_protocol(scheme, self.app_env)
        return canonical, identifier, compose_lookup_url(protocol, host, identifier)

    def submit(
        self,
        submission: QRCodeSubmission,
        *,
        host: str,
        scheme: str,
        owner_email: Optional[str] = None,
        logo: Optional[LogoUpload] = None,
    ) -> SubmissionResult:
        """Create and persist a new QR record.

        Identical company/product/email resubmissions are stored as additional
        rows that share the identifier and lookup URL.

        Raises:
            EncodingError: lookup URL does not fit in a QR code (nothing stored).
            BlobStoreError: logo upload failed (nothing stored).
            StorageError: save failed (an uploaded logo is removed again).
        """

        now = self.clock()
        canonical, identifier, lookup_url = self.lookup_url_for(
            submission, host=host, scheme=scheme
        )

        # Render first so an unencodable URL never reaches storage.
        qr_image = encode_data_uri(lookup_url)

        previous = self.store.list_by_identifier(identifier)
        if previous:
            logger.info(
                "Duplicate submission identifier=%s existing_rows=%d",
                identifier,
                len(previous),
            )

        uploaded = None
        logo_url = self.default_logo_url
        if logo is not None and logo.data:
            uploaded = self.blob_store.upload(
                logo.data, logo.mime_type, logo_public_id(submission.company_name, now)
            )
            logo_url = uploaded.url

        record = assemble_record(
            submission,
            identifier=identifier,
            lookup_url=lookup_url,
            canonical=canonical,
            logo_url=logo_url,
            owner_email=owner_email or SYSTEM_OWNER,
            now=now,
        )

        try:
            self.store.save(record)
        except StorageError:
            if uploaded is not None:
                self._discard_blob(uploaded.public_id)
            raise

        logger.info(
            "Saved QR record record_key=%s identifier=%s owner=%s",
            record.record_key,
            identifier,
            record.owner_email,
        )
        return SubmissionResult(record=record, qr_image=qr_image, previous_count=len(previous))

    def _discard_blob(self, public_id: str) -> None:
        try:
            self.blob_store.delete(public_id)
        except BlobStoreError:
            logger.exception("Could not remove orphaned logo public_id=%s", public_id)

    def resolve(self, identifier: str) -> Optional[QRCodeRecord]:
        """Return the newest record for a scanned identifier, or None."""
        if not is_identifier(identifier):
            logger.info("Rejected malformed identifier %r", identifier[:80])
            return None
        record = self.store.find_by_identifier(identifier)
        if record is None:
            logger.info("No QR record for identifier=%s", identifier)
        return record

    def history(self, identifier: str) -> List[QRCodeRecord]:
        if not is_identifier(identifier):
            return []
        return self.store.list_by_identifier(identifier)

    def list_for_owner(self, owner_email: str) -> List[QRCodeRecord]:
        return self.store.list_by_owner(owner_email)

    @staticmethod
    def qr_data_uri(record: QRCodeRecord) -> str:
        # Always the stored URL; never rebuilt from the current host.
        return encode_data_uri(record.lookup_url)

    @staticmethod
    def qr_png(record: QRCodeRecord) -> bytes:
        return encode_png(record.lookup_url)

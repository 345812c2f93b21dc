from __future__ import annotations


class QRCodeError(Exception):
    """Base class for QR record errors."""

    code = "error"
    retryable = False


class SubmissionValidationError(QRCodeError):
    """Submitted fields are missing or malformed; nothing was stored."""

    code = "validation_error"

    def __init__(self, errors: list[dict[str, str]]):
        self.errors = errors
        fields = ", ".join(e["field"] for e in errors) or "submission"
        super().__init__(f"Invalid fields: {fields}")


class EncodingError(QRCodeError):
    """Payload does not fit in a QR symbol."""

    code = "encoding_error"


class StorageError(QRCodeError):
    """Persistence or lookup failed. Safe to retry reads; writes may duplicate."""

    code = "storage_error"
    retryable = True


class BlobStoreError(QRCodeError):
    """Logo upload or delete failed."""

    code = "blob_store_error"
    retryable = True

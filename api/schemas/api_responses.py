from __future__ import annotations

from typing import Any, Dict, Generic, List, Optional, TypeVar

from pydantic import BaseModel, ConfigDict, Field

from api.services.records import QRCodeRecord

T = TypeVar("T")


class ApiError(BaseModel):
    """Standard error payload for API responses."""

    code: str = Field(default="error")
    message: str
    details: Optional[Dict[str, Any]] = None

    model_config = ConfigDict(extra="ignore")


class ApiMeta(BaseModel):
    """Optional metadata attached to responses."""

    request_id: Optional[str] = None

    model_config = ConfigDict(extra="ignore")


class ApiResponse(BaseModel, Generic[T]):
    """Standard envelope for all API responses."""

    ok: bool
    data: Optional[T] = None
    error: Optional[ApiError] = None
    meta: ApiMeta = Field(default_factory=ApiMeta)

    model_config = ConfigDict(extra="ignore")


class QRCodeRecordOut(BaseModel):
    """Public JSON shape of a QR record."""

    record_key: str
    identifier: str
    lookup_url: str
    company_name: str
    founded_year: str
    contact_email: str
    website: str
    facebook: Optional[str] = None
    twitter: Optional[str] = None
    instagram: Optional[str] = None
    description: str
    product_name: str
    product_description: str
    logo_url: Optional[str] = None
    created_at: str
    owner_email: str

    @classmethod
    def from_record(cls, record: QRCodeRecord) -> "QRCodeRecordOut":
        return cls(**record.to_dict())


def serialize_records(records: List[QRCodeRecord]) -> List[Dict[str, Any]]:
    return [QRCodeRecordOut.from_record(r).model_dump(mode="json") for r in records]


def ok(data: T = None, *, meta: Optional[ApiMeta] = None) -> Dict[str, Any]:
    """Create a success envelope as a JSON-serializable dict."""

    payload = ApiResponse[Any](ok=True, data=data, error=None, meta=meta or ApiMeta())
    return payload.model_dump(mode="json")


def fail(
    message: str,
    *,
    code: str = "error",
    details: Optional[Dict[str, Any]] = None,
    meta: Optional[ApiMeta] = None,
) -> Dict[str, Any]:
    """Create an error envelope as a JSON-serializable dict."""

    payload = ApiResponse[None](
        ok=False,
        data=None,
        error=ApiError(code=code, message=message, details=details),
        meta=meta or ApiMeta(),
    )
    return payload.model_dump(mode="json")

from __future__ import annotations

import re
from typing import Any, Dict, List, Mapping, Optional

from pydantic import BaseModel, ConfigDict, Field, ValidationError, field_validator

from api.services.exceptions import SubmissionValidationError

# Form inputs on the dashboard are prefixed, e.g. "qrcode_company_name".
FORM_PREFIX = "qrcode_"
LOGO_FIELD = "qrcode_company_logo_uploaded_file"

_EMAIL_RE = re.compile(r"^[^@\s]+@[^@\s]+\.[^@\s]+$")
_YEAR_RE = re.compile(r"^\d{4}$")

# Field names as the dashboard form calls them (company_founded, not founded_year).
_FORM_ALIASES = {"founded_year": "company_founded"}

_MESSAGES = {
    "company_name": "Your company name is not valid",
    "founded_year": "Your founded year is not valid",
    "contact_email": "Your contact email is not valid",
    "website": "Your website is not valid",
    "description": "Your QR Code description is not valid",
    "product_name": "Your Product Name is not valid",
    "product_description": "Your Product description is not valid",
}


class QRCodeSubmission(BaseModel):
    """Validated supplier/product fields for a new QR record."""

    company_name: str = Field(min_length=1, max_length=255)
    founded_year: str = Field(min_length=1, max_length=32)
    contact_email: str = Field(min_length=1, max_length=255)
    website: str = Field(min_length=1, max_length=255)
    description: str = Field(min_length=1)
    product_name: str = Field(min_length=1, max_length=255)
    product_description: str = Field(min_length=1)

    facebook: Optional[str] = Field(default=None, max_length=255)
    twitter: Optional[str] = Field(default=None, max_length=255)
    instagram: Optional[str] = Field(default=None, max_length=255)

    model_config = ConfigDict(extra="ignore", str_strip_whitespace=True, frozen=True)

    @field_validator("contact_email")
    @classmethod
    def _check_email(cls, v: str) -> str:
        if not _EMAIL_RE.match(v):
            raise ValueError("not an email address")
        return v

    @field_validator("founded_year")
    @classmethod
    def _check_year(cls, v: str) -> str:
        if not _YEAR_RE.match(v):
            raise ValueError("expected a four digit year")
        return v

    @field_validator("facebook", "twitter", "instagram", mode="before")
    @classmethod
    def _blank_to_none(cls, v: Any) -> Any:
        if isinstance(v, str) and not v.strip():
            return None
        return v


def _errors_from(exc: ValidationError) -> List[Dict[str, str]]:
    out = []
    for err in exc.errors():
        field = str(err["loc"][0]) if err.get("loc") else "submission"
        out.append({"field": field, "message": _MESSAGES.get(field, err["msg"])})
    return out


def parse_submission(data: Mapping[str, Any]) -> QRCodeSubmission:
    """Validate a plain mapping (JSON body) into a submission.

    Raises:
        SubmissionValidationError: with one `{field, message}` per bad field.
    """

    fields = {name: data.get(name) for name in QRCodeSubmission.model_fields}
    # Missing keys should read as empty strings so min_length reports them.
    fields = {k: ("" if v is None else v) for k, v in fields.items()}
    try:
        return QRCodeSubmission(**fields)
    except ValidationError as exc:
        raise SubmissionValidationError(_errors_from(exc)) from exc


def parse_submission_form(form: Mapping[str, Any]) -> QRCodeSubmission:
    """Validate the dashboard form (``qrcode_``-prefixed field names)."""

    data = {}
    for name in QRCodeSubmission.model_fields:
        form_name = FORM_PREFIX + _FORM_ALIASES.get(name, name)
        data[name] = form.get(form_name)
    return parse_submission(data)

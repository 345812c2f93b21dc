"""Blob storage for uploaded company logos.

The QR core only sees the returned URL; it is stored as an opaque reference.

- `LocalBlobStore` writes under a directory served by the `/uploads/<name>` route.
- `CloudinaryBlobStore` uploads to Cloudinary (production).
"""

from __future__ import annotations

import base64
import mimetypes
import os
import re
from dataclasses import dataclass
from typing import Protocol

import cloudinary
import cloudinary.uploader
from cloudinary.exceptions import Error as CloudinaryError

from api.services.exceptions import BlobStoreError
from config import cloudinary_configured
from logging_utils import get_logger

logger = get_logger(__name__)

_SAFE_NAME_RE = re.compile(r"[^A-Za-z0-9._-]+")


@dataclass(frozen=True)
class StoredBlob:
    url: str
    public_id: str


class BlobStore(Protocol):
    def upload(self, data: bytes, mime_type: str, name: str) -> StoredBlob: ...

    def delete(self, public_id: str) -> None: ...


def _extension_for(mime_type: str) -> str:
    ext = mimetypes.guess_extension(mime_type or "") or ""
    if ext == ".jpe":
        ext = ".jpg"
    if not ext:
        # "image/x-foo" -> ".x-foo"; fall back to .png like the upload form expects.
        tail = (mime_type or "").split("/")[-1].strip()
        ext = f".{tail}" if tail else ".png"
    return ext


class LocalBlobStore:
    """Filesystem blob store for development and tests."""

    def __init__(self, root_dir: str, base_url: str = "/uploads"):
        self.root_dir = root_dir
        self.base_url = base_url.rstrip("/")

    def upload(self, data: bytes, mime_type: str, name: str) -> StoredBlob:
        safe = _SAFE_NAME_RE.sub("_", name).strip("._") or "file"
        file_name = safe + _extension_for(mime_type)
        path = os.path.join(self.root_dir, file_name)
        try:
            os.makedirs(self.root_dir, exist_ok=True)
            # Same name overwrites, matching Cloudinary's overwrite=True.
            with open(path, "wb") as f:
                f.write(data)
        except OSError as exc:
            raise BlobStoreError(f"Could not write {file_name}: {exc}") from exc

        logger.info("Stored blob locally name=%s bytes=%d", file_name, len(data))
        return StoredBlob(url=f"{self.base_url}/{file_name}", public_id=file_name)

    def delete(self, public_id: str) -> None:
        path = os.path.join(self.root_dir, os.path.basename(public_id))
        try:
            os.remove(path)
        except FileNotFoundError:
            return
        except OSError as exc:
            raise BlobStoreError(f"Could not delete {public_id}: {exc}") from exc


class CloudinaryBlobStore:
    """Cloudinary-backed blob store.

    Credentials come from CLOUDINARY_URL or the CLOUDINARY_CLOUD_NAME /
    CLOUDINARY_API_KEY / CLOUDINARY_API_SECRET triple.
    """

    def __init__(
        self,
        *,
        folder: str = "foodprint/qrcodes",
        cloud_name: str | None = None,
        api_key: str | None = None,
        api_secret: str | None = None,
    ):
        self.folder = folder
        if cloud_name and api_key and api_secret:
            cloudinary.config(
                cloud_name=cloud_name,
                api_key=api_key,
                api_secret=api_secret,
                secure=True,
            )

    def upload(self, data: bytes, mime_type: str, name: str) -> StoredBlob:
        mime = mime_type or "application/octet-stream"
        data_uri = f"data:{mime};base64,{base64.b64encode(data).decode('ascii')}"
        try:
            result = cloudinary.uploader.upload(
                data_uri,
                folder=self.folder,
                public_id=name,
                overwrite=True,
                resource_type="image",
            )
        except CloudinaryError as exc:
            raise BlobStoreError(f"Cloudinary upload failed: {exc}") from exc

        logger.info("Uploaded blob to Cloudinary public_id=%s", result.get("public_id"))
        return StoredBlob(url=result["secure_url"], public_id=result["public_id"])

    def delete(self, public_id: str) -> None:
        try:
            result = cloudinary.uploader.destroy(public_id, resource_type="image")
        except CloudinaryError as exc:
            raise BlobStoreError(f"Cloudinary delete failed: {exc}") from exc
        if result.get("result") not in {"ok", "not found"}:
            raise BlobStoreError(f"Cloudinary delete failed: {result!r}")


def build_blob_store(config, *, instance_path: str) -> BlobStore:
    """Pick the blob store for a Flask config mapping."""

    kind = (config.get("BLOB_STORE") or "").strip().lower()
    if kind == "cloudinary" or (not kind and cloudinary_configured(config)):
        if not cloudinary_configured(config):
            raise RuntimeError("BLOB_STORE=cloudinary but Cloudinary credentials are missing")
        return CloudinaryBlobStore(
            folder=config.get("CLOUDINARY_FOLDER") or "foodprint/qrcodes",
            cloud_name=config.get("CLOUDINARY_CLOUD_NAME"),
            api_key=config.get("CLOUDINARY_API_KEY"),
            api_secret=config.get("CLOUDINARY_API_SECRET"),
        )

    root = config.get("UPLOAD_DIR") or os.path.join(instance_path, "uploads")
    return LocalBlobStore(root)

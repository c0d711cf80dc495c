"""File uploads on local disk or S3."""
from __future__ import annotations

import re
import uuid
from dataclasses import dataclass
from pathlib import Path
from typing import Optional, Protocol

from botocore.exceptions import ClientError

from ..core.constants import MAX_UPLOAD_BYTES
from ..core.exceptions import ResourceNotFoundError, ValidationError
from ..logging_config import get_logger
from .circuit_breaker import create_circuit_breaker

logger = get_logger(__name__)

ALLOWED_CONTENT_TYPES = {
    "image/png",
    "image/jpeg",
    "image/gif",
    "image/webp",
    "application/pdf",
    "text/csv",
    "text/plain",
    "application/vnd.openxmlformats-officedocument.spreadsheetml.sheet",
}

_UNSAFE_CHARS = re.compile(r"[^A-Za-z0-9._-]+")
_FOLDER_RE = re.compile(r"^[a-z0-9][a-z0-9/_-]{0,63}$")


@dataclass(frozen=True)
class StoredFile:
    key: str
    url: str
    size: int
    content_type: str


class FileStorage(Protocol):
    def upload(self, key: str, data: bytes, content_type: str) -> StoredFile:
        raise NotImplementedError

    def download(self, key: str) -> bytes:
        raise NotImplementedError

    def delete(self, key: str) -> None:
        raise NotImplementedError

    def exists(self, key: str) -> bool:
        raise NotImplementedError


def sanitize_filename(filename: str) -> str:
    name = Path(filename or "").name
    name = _UNSAFE_CHARS.sub("-", name).strip("-.")
    return name[:100] or "file"


def build_key(tenant_id: str, folder: str, filename: str) -> str:
    if not _FOLDER_RE.match(folder or "") or ".." in folder:
        raise ValidationError("Folder is invalid")
    return f"{tenant_id}/{folder.strip('/')}/{uuid.uuid4()}-{sanitize_filename(filename)}"


def validate_upload(content_type: str, size: int) -> None:
    if size <= 0:
        raise ValidationError("File is empty")
    if size > MAX_UPLOAD_BYTES:
        raise ValidationError(f"File exceeds the {MAX_UPLOAD_BYTES // (1024 * 1024)} MB limit")
    if (content_type or "").split(";")[0].strip().lower() not in ALLOWED_CONTENT_TYPES:
        raise ValidationError(f"Content type {content_type!r} is not allowed")


class LocalFileStorage:
    def __init__(self, root_dir: str, base_url: str = "/files"):
        self._root = Path(root_dir).resolve()
        self._base_url = base_url.rstrip("/")

    def _path(self, key: str) -> Path:
        path = (self._root / key).resolve()
        if self._root not in path.parents:
            raise ValidationError("Invalid file key")
        return path

    def upload(self, key: str, data: bytes, content_type: str) -> StoredFile:
        path = self._path(key)
        path.parent.mkdir(parents=True, exist_ok=True)
        path.write_bytes(data)
        return StoredFile(key=key, url=f"{self._base_url}/{key}", size=len(data), content_type=content_type)

    def download(self, key: str) -> bytes:
        path = self._path(key)
        if not path.is_file():
            raise ResourceNotFoundError("File not found")
        return path.read_bytes()

    def delete(self, key: str) -> None:
        path = self._path(key)
        if path.is_file():
            path.unlink()

    def exists(self, key: str) -> bool:
        return self._path(key).is_file()


class S3FileStorage:
    def __init__(self, *, bucket: str, client, public_base_url: Optional[str] = None):
        self._bucket = bucket
        self._client = client
        self._public_base_url = (public_base_url or f"https://{bucket}.s3.amazonaws.com").rstrip("/")
        self._breaker = create_circuit_breaker("s3", "storage", exclude=[ClientError])

    def upload(self, key: str, data: bytes, content_type: str) -> StoredFile:
        self._breaker.call(
            self._client.put_object, Bucket=self._bucket, Key=key, Body=data, ContentType=content_type
        )
        logger.info("Uploaded s3://%s/%s (%d bytes)", self._bucket, key, len(data))
        return StoredFile(key=key, url=f"{self._public_base_url}/{key}", size=len(data), content_type=content_type)

    def download(self, key: str) -> bytes:
        try:
            response = self._breaker.call(self._client.get_object, Bucket=self._bucket, Key=key)
        except ClientError as exc:
            if exc.response.get("Error", {}).get("Code") in {"NoSuchKey", "404"}:
                raise ResourceNotFoundError("File not found")
            raise
        return response["Body"].read()

    def delete(self, key: str) -> None:
        self._breaker.call(self._client.delete_object, Bucket=self._bucket, Key=key)

    def exists(self, key: str) -> bool:
        try:
            self._breaker.call(self._client.head_object, Bucket=self._bucket, Key=key)
        except ClientError as exc:
            if exc.response.get("Error", {}).get("Code") in {"404", "NoSuchKey", "NotFound"}:
                return False
            raise
        return True


class FileUploadService:
    """Use case: validate and store uploaded files under a tenant prefix."""

    def __init__(self, storage: FileStorage):
        self._storage = storage

    def upload(self, *, tenant_id: str, folder: str, filename: str, content_type: str, data: bytes) -> StoredFile:
        validate_upload(content_type, len(data))
        key = build_key(tenant_id, folder, filename)
        return self._storage.upload(key, data, content_type)

    def download(self, *, tenant_id: str, key: str) -> bytes:
        if not key.startswith(f"{tenant_id}/"):
            raise ResourceNotFoundError("File not found")
        return self._storage.download(key)

    def delete(self, *, tenant_id: str, key: str) -> None:
        if not key.startswith(f"{tenant_id}/"):
            raise ResourceNotFoundError("File not found")
        self._storage.delete(key)

from __future__ import annotations

import io

import pytest
from botocore.exceptions import ClientError

from erp_system.core.exceptions import ResourceNotFoundError, ValidationError
from erp_system.infrastructure.storage import (
    FileUploadService,
    LocalFileStorage,
    S3FileStorage,
    build_key,
    sanitize_filename,
)


def client_error(code, operation):
    return ClientError({"Error": {"Code": code, "Message": code}}, operation)


class StubS3:
    def __init__(self):
        self.objects = {}

    def put_object(self, *, Bucket, Key, Body, ContentType):
        self.objects[(Bucket, Key)] = Body

    def get_object(self, *, Bucket, Key):
        if (Bucket, Key) not in self.objects:
            raise client_error("NoSuchKey", "GetObject")
        return {"Body": io.BytesIO(self.objects[(Bucket, Key)])}

    def head_object(self, *, Bucket, Key):
        if (Bucket, Key) not in self.objects:
            raise client_error("404", "HeadObject")
        return {}

    def delete_object(self, *, Bucket, Key):
        self.objects.pop((Bucket, Key), None)


def test_sanitize_filename():
    assert sanitize_filename("../../etc/passwd") == "passwd"
    assert sanitize_filename("relatório final (1).pdf") == "relat-rio-final-1-.pdf"
    assert sanitize_filename("...") == "file"


def test_build_key_rejects_bad_folders():
    assert build_key("t1", "receipts/2024", "a.pdf").startswith("t1/receipts/2024/")
    for folder in ("", "../secrets", "Upper", "/abs"):
        with pytest.raises(ValidationError):
            build_key("t1", folder, "a.pdf")


def test_local_storage_round_trip(tmp_path):
    storage = LocalFileStorage(str(tmp_path))
    stored = storage.upload("t1/docs/a.txt", b"hello", "text/plain")
    assert stored.url == "/files/t1/docs/a.txt"
    assert storage.exists("t1/docs/a.txt")
    assert storage.download("t1/docs/a.txt") == b"hello"

    storage.delete("t1/docs/a.txt")
    assert not storage.exists("t1/docs/a.txt")
    with pytest.raises(ResourceNotFoundError):
        storage.download("t1/docs/a.txt")
    with pytest.raises(ValidationError):
        storage.upload("../outside.txt", b"x", "text/plain")


def test_s3_storage_maps_missing_keys():
    client = StubS3()
    storage = S3FileStorage(bucket="erp-files", client=client)
    stored = storage.upload("t1/a.csv", b"a;b", "text/csv")
    assert stored.url == "https://erp-files.s3.amazonaws.com/t1/a.csv"
    assert storage.download("t1/a.csv") == b"a;b"
    assert storage.exists("t1/a.csv")

    storage.delete("t1/a.csv")
    assert not storage.exists("t1/a.csv")
    with pytest.raises(ResourceNotFoundError):
        storage.download("t1/a.csv")


def test_upload_service_validates_and_scopes_by_tenant(tmp_path):
    service = FileUploadService(LocalFileStorage(str(tmp_path)))
    with pytest.raises(ValidationError):
        service.upload(tenant_id="t1", folder="docs", filename="a.exe", content_type="application/x-msdownload",
                       data=b"MZ")
    with pytest.raises(ValidationError):
        service.upload(tenant_id="t1", folder="docs", filename="empty.txt", content_type="text/plain", data=b"")

    stored = service.upload(
        tenant_id="t1", folder="docs", filename="notes.txt", content_type="text/plain; charset=utf-8", data=b"hi"
    )
    assert service.download(tenant_id="t1", key=stored.key) == b"hi"
    with pytest.raises(ResourceNotFoundError):
        service.download(tenant_id="t2", key=stored.key)
    service.delete(tenant_id="t1", key=stored.key)
    with pytest.raises(ResourceNotFoundError):
        service.download(tenant_id="t1", key=stored.key)

from __future__ import annotations

import io


def test_upload_file(client, admin, admin_headers):
    response = client.post(
        "/v1/storage/files",
        data={"folder": "receipts", "file": (io.BytesIO(b"a;b\n1;2\n"), "march.csv", "text/csv")},
        headers=admin_headers,
        content_type="multipart/form-data",
    )
    assert response.status_code == 201, response.get_json()
    body = response.get_json()
    assert body["key"].startswith(f"{admin.tenant_id}/receipts/")
    assert body["key"].endswith("-march.csv")
    assert body["size"] == 8


def test_upload_requires_a_file(client, admin_headers):
    response = client.post(
        "/v1/storage/files", data={"folder": "receipts"}, headers=admin_headers, content_type="multipart/form-data"
    )
    assert response.status_code == 400
    assert response.get_json()["message"] == "File is required"


def test_upload_rejects_executables(client, admin_headers):
    response = client.post(
        "/v1/storage/files",
        data={"file": (io.BytesIO(b"MZ"), "setup.exe", "application/x-msdownload")},
        headers=admin_headers,
        content_type="multipart/form-data",
    )
    assert response.status_code == 400

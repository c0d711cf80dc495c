from __future__ import annotations

from flask import Flask, request

from ..common.serialization import to_dto
from ..container import Container
from ..core.exceptions import ValidationError
from ..rbac import permission_codes as perms
from .auth import current_principal


def register(app: Flask, container: Container) -> None:
    guards = container.guards
    uploads = container.file_upload_service

    @app.route("/v1/storage/files", methods=["POST"], endpoint="upload_file")
    @guards.permission(perms.STORAGE_FILES_UPLOAD)
    def upload_file():
        file = request.files.get("file")
        if file is None or not file.filename:
            raise ValidationError("File is required")
        stored = uploads.upload(
            tenant_id=current_principal().tenant_id,
            folder=request.form.get("folder", "uploads"),
            filename=file.filename,
            content_type=file.mimetype or "application/octet-stream",
            data=file.read(),
        )
        return to_dto(stored), 201

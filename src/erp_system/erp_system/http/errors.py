from __future__ import annotations

from flask import Flask, jsonify
from pydantic import ValidationError as SchemaValidationError
from werkzeug.exceptions import HTTPException

from ..common.serialization import to_jsonable
from ..core.exceptions import (
    BadRequestError,
    ConflictError,
    DomainError,
    ForbiddenError,
    PasswordResetRequiredError,
    ResourceNotFoundError,
    UnauthorizedError,
    UserBlockedError,
)
from ..logging_config import get_logger

logger = get_logger(__name__)

STATUS_BY_ERROR = (
    (BadRequestError, 400),
    (UnauthorizedError, 401),
    (ForbiddenError, 403),
    (ResourceNotFoundError, 404),
    (ConflictError, 409),
)


def status_for(error: DomainError) -> int:
    for error_cls, status in STATUS_BY_ERROR:
        if isinstance(error, error_cls):
            return status
    return 400


def _schema_errors(error: SchemaValidationError) -> list:
    return [
        {"field": ".".join(str(p) for p in e.get("loc", ())), "message": e.get("msg", "")}
        for e in error.errors()
    ]


def register_error_handlers(app: Flask) -> None:
    @app.errorhandler(DomainError)
    def handle_domain_error(error: DomainError):
        body = {"message": str(error)}
        if isinstance(error, UserBlockedError):
            body["blockedUntil"] = to_jsonable(error.blocked_until)
        if isinstance(error, PasswordResetRequiredError) and error.reset_token:
            body["resetToken"] = error.reset_token
        return jsonify(body), status_for(error)

    @app.errorhandler(SchemaValidationError)
    def handle_schema_error(error: SchemaValidationError):
        return jsonify({"message": "Validation failed", "errors": _schema_errors(error)}), 400

    @app.errorhandler(HTTPException)
    def handle_http_error(error: HTTPException):
        return jsonify({"message": error.description or error.name}), error.code

    @app.errorhandler(Exception)
    def handle_unexpected(error: Exception):
        logger.exception("Unhandled error: %s", error)
        return jsonify({"message": "Internal server error"}), 500

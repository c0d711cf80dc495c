from __future__ import annotations

from flask import Flask, request

from ..common.datetime_utils import parse_iso_datetime
from ..common.validators import parse_enum
from ..container import Container
from ..http.auth import current_principal
from ..http.payload import listed, page_params, paged
from ..rbac import permission_codes as perms
from .model import AuditAction, AuditEntity, AuditLogFilter, AuditModule


def _filters() -> AuditLogFilter:
    args = request.args

    def enum_arg(name, enum_cls):
        raw = args.get(name)
        return parse_enum(enum_cls, raw, name) if raw else None

    def datetime_arg(name):
        raw = args.get(name)
        return parse_iso_datetime(raw) if raw else None

    return AuditLogFilter(
        user_id=args.get("userId") or None,
        entity=enum_arg("entity", AuditEntity),
        entity_id=args.get("entityId") or None,
        module=enum_arg("module", AuditModule),
        action=enum_arg("action", AuditAction),
        date_from=datetime_arg("dateFrom"),
        date_to=datetime_arg("dateTo"),
    )


def register(app: Flask, container: Container) -> None:
    guards = container.guards
    service = container.audit_service

    @app.route("/v1/audit/logs", methods=["GET"], endpoint="list_audit_logs")
    @guards.permission(perms.AUDIT_LOGS_READ)
    def list_audit_logs():
        page = service.list_logs(tenant_id=current_principal().tenant_id, filters=_filters(), params=page_params())
        return paged(page)

    @app.route("/v1/audit/logs/verify", methods=["GET"], endpoint="verify_audit_logs")
    @guards.permission(perms.AUDIT_LOGS_READ)
    def verify_audit_logs():
        result = service.verify_integrity(tenant_id=current_principal().tenant_id, filters=_filters())
        return result.to_dict()

    @app.route("/v1/audit/entities/<entity>/<entity_id>", methods=["GET"], endpoint="audit_entity_history")
    @guards.permission(perms.AUDIT_LOGS_READ)
    def audit_entity_history(entity: str, entity_id: str):
        history = service.get_entity_history(
            tenant_id=current_principal().tenant_id,
            entity=parse_enum(AuditEntity, entity, "Entity"),
            entity_id=entity_id,
        )
        return listed(history)

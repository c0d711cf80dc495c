from __future__ import annotations

from typing import Optional

from flask import Flask
from pydantic import Field

from ..container import Container
from ..http.payload import ok, page_params, paged, parse_body
from ..http.schema import RequestSchema
from ..rbac import permission_codes as perms


class CreateTenantBody(RequestSchema):
    name: str = Field(..., min_length=1, max_length=128)
    slug: Optional[str] = Field(None, max_length=128)
    settings: Optional[dict] = None


class TenantStatusBody(RequestSchema):
    status: str


def register(app: Flask, container: Container) -> None:
    guards = container.guards
    service = container.tenant_service

    @app.route("/v1/admin/tenants", methods=["POST"], endpoint="create_tenant")
    @guards.permission(perms.ADMIN_TENANTS_MANAGE)
    def create_tenant():
        body = parse_body(CreateTenantBody)
        return ok(service.create_tenant(**body.model_dump()), status=201)

    @app.route("/v1/admin/tenants", methods=["GET"], endpoint="list_tenants")
    @guards.permission(perms.ADMIN_TENANTS_MANAGE)
    def list_tenants():
        return paged(service.list_tenants(params=page_params()))

    @app.route("/v1/admin/tenants/<tenant_id>", methods=["GET"], endpoint="get_tenant")
    @guards.permission(perms.ADMIN_TENANTS_MANAGE)
    def get_tenant(tenant_id: str):
        return ok(service.get_tenant(tenant_id=tenant_id))

    @app.route("/v1/admin/tenants/<tenant_id>/status", methods=["PATCH"], endpoint="change_tenant_status")
    @guards.permission(perms.ADMIN_TENANTS_MANAGE)
    def change_tenant_status(tenant_id: str):
        body = parse_body(TenantStatusBody)
        return ok(service.change_status(tenant_id=tenant_id, status=body.status))

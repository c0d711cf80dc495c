from __future__ import annotations

from flask import Flask, request

from ..container import Container
from ..http.auth import current_principal
from ..http.payload import ok, page_params, paged, parse_body
from ..rbac import permission_codes as perms
from .schemas import CreateEmployeeBody, TerminateEmployeeBody, UpdateEmployeeBody
from .service import NewEmployee


def register(app: Flask, container: Container) -> None:
    guards = container.guards
    service = container.employee_service

    @app.route("/v1/hr/employees", methods=["POST"], endpoint="create_employee")
    @guards.permission(perms.HR_EMPLOYEES_MANAGE)
    def create_employee():
        body = parse_body(CreateEmployeeBody)
        principal = current_principal()
        employee = service.create_employee(
            tenant_id=principal.tenant_id,
            data=NewEmployee(**body.model_dump()),
            actor_id=principal.user_id,
        )
        return ok(employee, status=201)

    @app.route("/v1/hr/employees", methods=["GET"], endpoint="list_employees")
    @guards.permission(perms.HR_EMPLOYEES_READ)
    def list_employees():
        page = service.list_employees(
            tenant_id=current_principal().tenant_id,
            params=page_params(),
            status=request.args.get("status"),
            department=request.args.get("department"),
            search=request.args.get("search"),
        )
        return paged(page)

    @app.route("/v1/hr/employees/<employee_id>", methods=["GET"], endpoint="get_employee")
    @guards.permission(perms.HR_EMPLOYEES_READ)
    def get_employee(employee_id: str):
        return ok(service.get_employee(tenant_id=current_principal().tenant_id, employee_id=employee_id))

    @app.route("/v1/hr/employees/<employee_id>", methods=["PATCH"], endpoint="update_employee")
    @guards.permission(perms.HR_EMPLOYEES_MANAGE)
    def update_employee(employee_id: str):
        body = parse_body(UpdateEmployeeBody)
        principal = current_principal()
        employee = service.update_employee(
            tenant_id=principal.tenant_id,
            employee_id=employee_id,
            changes=body.changes(),
            actor_id=principal.user_id,
        )
        return ok(employee)

    @app.route("/v1/hr/employees/<employee_id>/terminate", methods=["POST"], endpoint="terminate_employee")
    @guards.permission(perms.HR_EMPLOYEES_MANAGE)
    def terminate_employee(employee_id: str):
        body = parse_body(TerminateEmployeeBody)
        principal = current_principal()
        employee = service.terminate_employee(
            tenant_id=principal.tenant_id,
            employee_id=employee_id,
            termination_date=body.termination_date,
            actor_id=principal.user_id,
        )
        return ok(employee)

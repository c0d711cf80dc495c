from __future__ import annotations

from flask import Flask, jsonify, request

from ..common.serialization import to_dto
from ..container import Container
from ..http.auth import current_principal
from ..http.payload import listed, ok, page_params, paged, parse_body, query_date
from ..rbac import permission_codes as perms
from .schemas import (
    AbsenceRequestBody,
    CompleteVacationBody,
    CreateVacationPeriodBody,
    RejectAbsenceBody,
    SellDaysBody,
    SickLeaveBody,
    VacationRequestBody,
)


def vacation_period_dto(period) -> dict:
    return to_dto(period, extra={"remaining_days": period.remaining_days})


def register(app: Flask, container: Container) -> None:
    guards = container.guards
    service = container.absence_service

    @app.route("/v1/hr/absences/vacation", methods=["POST"], endpoint="request_vacation")
    @guards.permission(perms.HR_ABSENCES_REQUEST)
    def request_vacation():
        body = parse_body(VacationRequestBody)
        principal = current_principal()
        absence = service.request_vacation(
            tenant_id=principal.tenant_id, requested_by=principal.user_id, **body.model_dump()
        )
        return ok(absence, status=201)

    @app.route("/v1/hr/absences/sick-leave", methods=["POST"], endpoint="request_sick_leave")
    @guards.permission(perms.HR_ABSENCES_REQUEST)
    def request_sick_leave():
        body = parse_body(SickLeaveBody)
        principal = current_principal()
        absence = service.request_sick_leave(
            tenant_id=principal.tenant_id, requested_by=principal.user_id, **body.model_dump()
        )
        return ok(absence, status=201)

    @app.route("/v1/hr/absences", methods=["POST"], endpoint="request_absence")
    @guards.permission(perms.HR_ABSENCES_REQUEST)
    def request_absence():
        body = parse_body(AbsenceRequestBody)
        principal = current_principal()
        absence = service.request_absence(
            tenant_id=principal.tenant_id, requested_by=principal.user_id, **body.model_dump()
        )
        return ok(absence, status=201)

    @app.route("/v1/hr/absences", methods=["GET"], endpoint="list_absences")
    @guards.permission(perms.HR_ABSENCES_READ)
    def list_absences():
        page = service.list_absences(
            tenant_id=current_principal().tenant_id,
            params=page_params(),
            employee_id=request.args.get("employeeId"),
            type=request.args.get("type"),
            status=request.args.get("status"),
            date_from=query_date("startDate"),
            date_to=query_date("endDate"),
        )
        return paged(page)

    @app.route("/v1/hr/absences/<absence_id>", methods=["GET"], endpoint="get_absence")
    @guards.permission(perms.HR_ABSENCES_READ)
    def get_absence(absence_id: str):
        return ok(service.get_absence(tenant_id=current_principal().tenant_id, absence_id=absence_id))

    @app.route("/v1/hr/absences/<absence_id>/approve", methods=["PATCH"], endpoint="approve_absence")
    @guards.permission(perms.HR_ABSENCES_APPROVE)
    def approve_absence(absence_id: str):
        principal = current_principal()
        absence = service.approve_absence(
            tenant_id=principal.tenant_id, absence_id=absence_id, approver_id=principal.user_id
        )
        return ok(absence)

    @app.route("/v1/hr/absences/<absence_id>/reject", methods=["PATCH"], endpoint="reject_absence")
    @guards.permission(perms.HR_ABSENCES_APPROVE)
    def reject_absence(absence_id: str):
        body = parse_body(RejectAbsenceBody)
        principal = current_principal()
        absence = service.reject_absence(
            tenant_id=principal.tenant_id,
            absence_id=absence_id,
            rejected_by=principal.user_id,
            reason=body.reason,
        )
        return ok(absence)

    @app.route("/v1/hr/absences/<absence_id>/cancel", methods=["PATCH"], endpoint="cancel_absence")
    @guards.permission(perms.HR_ABSENCES_REQUEST)
    def cancel_absence(absence_id: str):
        principal = current_principal()
        absence = service.cancel_absence(
            tenant_id=principal.tenant_id, absence_id=absence_id, cancelled_by=principal.user_id
        )
        return ok(absence)

    @app.route("/v1/hr/vacation-periods", methods=["POST"], endpoint="create_vacation_period")
    @guards.permission(perms.HR_VACATIONS_MANAGE)
    def create_vacation_period():
        body = parse_body(CreateVacationPeriodBody)
        period = service.create_vacation_period(tenant_id=current_principal().tenant_id, **body.model_dump())
        return ok(period, vacation_period_dto, status=201)

    @app.route("/v1/hr/vacation-periods", methods=["GET"], endpoint="list_vacation_periods")
    @guards.permission(perms.HR_ABSENCES_READ)
    def list_vacation_periods():
        employee_id = request.args.get("employeeId") or ""
        periods = service.list_vacation_periods(tenant_id=current_principal().tenant_id, employee_id=employee_id)
        return listed(periods, vacation_period_dto)

    @app.route("/v1/hr/vacation-periods/<period_id>", methods=["GET"], endpoint="get_vacation_period")
    @guards.permission(perms.HR_ABSENCES_READ)
    def get_vacation_period(period_id: str):
        period = service.get_vacation_period(tenant_id=current_principal().tenant_id, period_id=period_id)
        return ok(period, vacation_period_dto)

    @app.route("/v1/hr/vacation-periods/<period_id>/sell", methods=["POST"], endpoint="sell_vacation_days")
    @guards.permission(perms.HR_VACATIONS_MANAGE)
    def sell_vacation_days(period_id: str):
        body = parse_body(SellDaysBody)
        period = service.sell_vacation_days(
            tenant_id=current_principal().tenant_id, period_id=period_id, days=body.days
        )
        return ok(period, vacation_period_dto)

    @app.route("/v1/hr/vacation-periods/<period_id>/complete", methods=["POST"], endpoint="complete_vacation")
    @guards.permission(perms.HR_VACATIONS_MANAGE)
    def complete_vacation(period_id: str):
        body = parse_body(CompleteVacationBody)
        period = service.complete_vacation(
            tenant_id=current_principal().tenant_id, period_id=period_id, days_used=body.days_used
        )
        return ok(period, vacation_period_dto)

    @app.route("/v1/hr/vacation-periods/expire", methods=["POST"], endpoint="expire_vacation_periods")
    @guards.permission(perms.HR_VACATIONS_MANAGE)
    def expire_vacation_periods():
        count = service.expire_vacation_periods(tenant_id=current_principal().tenant_id)
        return jsonify({"expired": count})

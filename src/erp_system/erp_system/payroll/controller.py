from __future__ import annotations

from flask import Flask, request

from ..common.serialization import to_dto
from ..container import Container
from ..http.auth import current_principal
from ..http.payload import listed, ok, page_params, paged, parse_body, query_bool, query_date
from ..rbac import permission_codes as perms
from .schemas import CreateBonusBody, CreateDeductionBody, CreatePayrollBody, RegisterOvertimeBody


def payroll_dto(payroll) -> dict:
    return to_dto(payroll, extra={"reference_period": payroll.reference_period})


def payroll_details_dto(details) -> dict:
    out = payroll_dto(details.payroll)
    out["items"] = [to_dto(item) for item in details.items]
    out["employeeCount"] = details.employee_count
    return out


def deduction_dto(deduction) -> dict:
    return to_dto(
        deduction,
        extra={
            "installment_amount": deduction.installment_amount,
            "remaining_installments": deduction.remaining_installments,
        },
    )


def register(app: Flask, container: Container) -> None:
    guards = container.guards
    service = container.payroll_service

    @app.route("/v1/hr/payrolls", methods=["POST"], endpoint="create_payroll")
    @guards.permission(perms.HR_PAYROLLS_MANAGE)
    def create_payroll():
        body = parse_body(CreatePayrollBody)
        principal = current_principal()
        payroll = service.create_payroll(
            tenant_id=principal.tenant_id, month=body.month, year=body.year, actor_id=principal.user_id
        )
        return ok(payroll, payroll_dto, status=201)

    @app.route("/v1/hr/payrolls", methods=["GET"], endpoint="list_payrolls")
    @guards.permission(perms.HR_PAYROLLS_READ)
    def list_payrolls():
        page = service.list_payrolls(
            tenant_id=current_principal().tenant_id,
            params=page_params(),
            year=request.args.get("year", type=int),
            status=request.args.get("status"),
        )
        return paged(page, payroll_dto)

    @app.route("/v1/hr/payrolls/<payroll_id>", methods=["GET"], endpoint="get_payroll")
    @guards.permission(perms.HR_PAYROLLS_READ)
    def get_payroll(payroll_id: str):
        details = service.get_payroll(tenant_id=current_principal().tenant_id, payroll_id=payroll_id)
        return ok(details, payroll_details_dto)

    @app.route("/v1/hr/payrolls/<payroll_id>/calculate", methods=["POST"], endpoint="calculate_payroll")
    @guards.permission(perms.HR_PAYROLLS_MANAGE)
    def calculate_payroll(payroll_id: str):
        principal = current_principal()
        details = service.calculate_payroll(
            tenant_id=principal.tenant_id, payroll_id=payroll_id, processed_by=principal.user_id
        )
        return ok(details, payroll_details_dto)

    @app.route("/v1/hr/payrolls/<payroll_id>/approve", methods=["POST"], endpoint="approve_payroll")
    @guards.permission(perms.HR_PAYROLLS_APPROVE)
    def approve_payroll(payroll_id: str):
        principal = current_principal()
        payroll = service.approve_payroll(
            tenant_id=principal.tenant_id, payroll_id=payroll_id, approved_by=principal.user_id
        )
        return ok(payroll, payroll_dto)

    @app.route("/v1/hr/payrolls/<payroll_id>/pay", methods=["POST"], endpoint="pay_payroll")
    @guards.permission(perms.HR_PAYROLLS_APPROVE)
    def pay_payroll(payroll_id: str):
        principal = current_principal()
        payroll = service.pay_payroll(tenant_id=principal.tenant_id, payroll_id=payroll_id, paid_by=principal.user_id)
        return ok(payroll, payroll_dto)

    @app.route("/v1/hr/payrolls/<payroll_id>/cancel", methods=["POST"], endpoint="cancel_payroll")
    @guards.permission(perms.HR_PAYROLLS_APPROVE)
    def cancel_payroll(payroll_id: str):
        principal = current_principal()
        payroll = service.cancel_payroll(
            tenant_id=principal.tenant_id, payroll_id=payroll_id, cancelled_by=principal.user_id
        )
        return ok(payroll, payroll_dto)

    @app.route("/v1/hr/deductions", methods=["POST"], endpoint="create_deduction")
    @guards.permission(perms.HR_DEDUCTIONS_MANAGE)
    def create_deduction():
        body = parse_body(CreateDeductionBody)
        principal = current_principal()
        deduction = service.create_deduction(
            tenant_id=principal.tenant_id, actor_id=principal.user_id, **body.model_dump()
        )
        return ok(deduction, deduction_dto, status=201)

    @app.route("/v1/hr/deductions", methods=["GET"], endpoint="list_deductions")
    @guards.permission(perms.HR_PAYROLLS_READ)
    def list_deductions():
        deductions = service.list_deductions(
            tenant_id=current_principal().tenant_id,
            employee_id=request.args.get("employeeId"),
            pending_only=query_bool("pendingOnly"),
        )
        return listed(deductions, deduction_dto)

    @app.route("/v1/hr/deductions/<deduction_id>", methods=["DELETE"], endpoint="delete_deduction")
    @guards.permission(perms.HR_DEDUCTIONS_MANAGE)
    def delete_deduction(deduction_id: str):
        principal = current_principal()
        service.delete_deduction(tenant_id=principal.tenant_id, deduction_id=deduction_id, actor_id=principal.user_id)
        return "", 204

    @app.route("/v1/hr/bonuses", methods=["POST"], endpoint="create_bonus")
    @guards.permission(perms.HR_DEDUCTIONS_MANAGE)
    def create_bonus():
        body = parse_body(CreateBonusBody)
        bonus = service.create_bonus(tenant_id=current_principal().tenant_id, **body.model_dump())
        return ok(bonus, status=201)

    @app.route("/v1/hr/bonuses", methods=["GET"], endpoint="list_bonuses")
    @guards.permission(perms.HR_PAYROLLS_READ)
    def list_bonuses():
        bonuses = service.list_bonuses(
            tenant_id=current_principal().tenant_id,
            employee_id=request.args.get("employeeId") or "",
            unpaid_only=query_bool("unpaidOnly"),
        )
        return listed(bonuses)

    @app.route("/v1/hr/overtime", methods=["POST"], endpoint="register_overtime")
    @guards.permission(perms.HR_DEDUCTIONS_MANAGE)
    def register_overtime():
        body = parse_body(RegisterOvertimeBody)
        overtime = service.register_overtime(tenant_id=current_principal().tenant_id, **body.model_dump())
        return ok(overtime, status=201)

    @app.route("/v1/hr/overtime", methods=["GET"], endpoint="list_overtime")
    @guards.permission(perms.HR_PAYROLLS_READ)
    def list_overtime():
        overtime = service.list_overtime(
            tenant_id=current_principal().tenant_id,
            employee_id=request.args.get("employeeId") or "",
            start=query_date("startDate"),
            end=query_date("endDate"),
        )
        return listed(overtime)

    @app.route("/v1/hr/overtime/<overtime_id>/approve", methods=["PATCH"], endpoint="approve_overtime")
    @guards.permission(perms.HR_PAYROLLS_APPROVE)
    def approve_overtime(overtime_id: str):
        principal = current_principal()
        overtime = service.approve_overtime(
            tenant_id=principal.tenant_id, overtime_id=overtime_id, approved_by=principal.user_id
        )
        return ok(overtime)

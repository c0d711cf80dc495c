from __future__ import annotations

import io

from flask import Flask, request, send_file

from ..common.datetime_utils import today
from ..common.serialization import to_dto
from ..container import Container
from ..core.exceptions import ValidationError
from ..http.auth import current_principal
from ..http.payload import listed, ok, page_params, paged, parse_body, query_date
from ..rbac import permission_codes as perms
from .schemas import (
    CheckOverdueBody,
    CreateBankAccountBody,
    CreateCategoryBody,
    CreateCostCenterBody,
    CreateFinanceEntryBody,
    CreateLoanBody,
    LoanPaymentBody,
    RegisterPaymentBody,
    UpdateFinanceEntryBody,
)
from .service import NewFinanceEntry


def entry_dto(entry) -> dict:
    return to_dto(
        entry,
        extra={
            "total_due": entry.total_due,
            "remaining_balance": entry.remaining_balance,
            "is_overdue": entry.is_overdue(today()),
        },
    )


def loan_dto(loan) -> dict:
    return to_dto(
        loan,
        extra={
            "progress_percentage": loan.progress_percentage,
            "remaining_installments": loan.remaining_installments,
        },
    )


def loan_details_dto(details) -> dict:
    out = loan_dto(details.loan)
    out["installments"] = [to_dto(i, extra={"is_paid": i.is_paid}) for i in details.installments]
    return out


def register(app: Flask, container: Container) -> None:
    guards = container.guards
    setup = container.finance_setup_service
    entries = container.finance_entry_service
    payroll_import = container.payroll_finance_service
    loans = container.loan_service
    exports = container.accounting_export_service

    # lookups
    @app.route("/v1/finance/categories", methods=["POST"], endpoint="create_finance_category")
    @guards.permission(perms.FINANCE_SETUP_MANAGE)
    def create_finance_category():
        body = parse_body(CreateCategoryBody)
        category = setup.create_category(tenant_id=current_principal().tenant_id, **body.model_dump())
        return ok(category, status=201)

    @app.route("/v1/finance/categories", methods=["GET"], endpoint="list_finance_categories")
    @guards.permission(perms.FINANCE_ENTRIES_READ)
    def list_finance_categories():
        return listed(setup.list_categories(tenant_id=current_principal().tenant_id))

    @app.route("/v1/finance/cost-centers", methods=["POST"], endpoint="create_cost_center")
    @guards.permission(perms.FINANCE_SETUP_MANAGE)
    def create_cost_center():
        body = parse_body(CreateCostCenterBody)
        cost_center = setup.create_cost_center(tenant_id=current_principal().tenant_id, **body.model_dump())
        return ok(cost_center, status=201)

    @app.route("/v1/finance/cost-centers", methods=["GET"], endpoint="list_cost_centers")
    @guards.permission(perms.FINANCE_ENTRIES_READ)
    def list_cost_centers():
        return listed(setup.list_cost_centers(tenant_id=current_principal().tenant_id))

    @app.route("/v1/finance/bank-accounts", methods=["POST"], endpoint="create_bank_account")
    @guards.permission(perms.FINANCE_SETUP_MANAGE)
    def create_bank_account():
        body = parse_body(CreateBankAccountBody)
        account = setup.create_bank_account(tenant_id=current_principal().tenant_id, **body.model_dump())
        return ok(account, status=201)

    @app.route("/v1/finance/bank-accounts", methods=["GET"], endpoint="list_bank_accounts")
    @guards.permission(perms.FINANCE_ENTRIES_READ)
    def list_bank_accounts():
        return listed(setup.list_bank_accounts(tenant_id=current_principal().tenant_id))

    # entries
    @app.route("/v1/finance/entries", methods=["POST"], endpoint="create_finance_entry")
    @guards.permission(perms.FINANCE_ENTRIES_MANAGE)
    def create_finance_entry():
        body = parse_body(CreateFinanceEntryBody)
        principal = current_principal()
        entry = entries.create_finance_entry(
            tenant_id=principal.tenant_id,
            data=NewFinanceEntry(**body.model_dump()),
            created_by=principal.user_id,
        )
        return ok(entry, entry_dto, status=201)

    @app.route("/v1/finance/entries", methods=["GET"], endpoint="list_finance_entries")
    @guards.permission(perms.FINANCE_ENTRIES_READ)
    def list_finance_entries():
        page = entries.list_entries(
            tenant_id=current_principal().tenant_id,
            params=page_params(),
            type=request.args.get("type"),
            status=request.args.get("status"),
            category_id=request.args.get("categoryId"),
            cost_center_id=request.args.get("costCenterId"),
            due_from=query_date("dueDateFrom"),
            due_to=query_date("dueDateTo"),
            search=request.args.get("search"),
        )
        return paged(page, entry_dto)

    @app.route("/v1/finance/entries/<entry_id>", methods=["GET"], endpoint="get_finance_entry")
    @guards.permission(perms.FINANCE_ENTRIES_READ)
    def get_finance_entry(entry_id: str):
        tenant_id = current_principal().tenant_id
        entry = entries.get_entry(tenant_id=tenant_id, entry_id=entry_id)
        out = entry_dto(entry)
        if entry.total_installments:
            out["installments"] = [
                entry_dto(child) for child in entries.list_installments(tenant_id=tenant_id, entry_id=entry.id)
            ]
        return out

    @app.route("/v1/finance/entries/<entry_id>", methods=["PATCH"], endpoint="update_finance_entry")
    @guards.permission(perms.FINANCE_ENTRIES_MANAGE)
    def update_finance_entry(entry_id: str):
        body = parse_body(UpdateFinanceEntryBody)
        principal = current_principal()
        entry = entries.update_entry(
            tenant_id=principal.tenant_id,
            entry_id=entry_id,
            changes=body.changes(),
            updated_by=principal.user_id,
        )
        return ok(entry, entry_dto)

    @app.route("/v1/finance/entries/<entry_id>/cancel", methods=["PATCH"], endpoint="cancel_finance_entry")
    @guards.permission(perms.FINANCE_ENTRIES_MANAGE)
    def cancel_finance_entry(entry_id: str):
        principal = current_principal()
        entry = entries.cancel_entry(tenant_id=principal.tenant_id, entry_id=entry_id, cancelled_by=principal.user_id)
        return ok(entry, entry_dto)

    @app.route("/v1/finance/entries/<entry_id>/payments", methods=["POST"], endpoint="register_finance_payment")
    @guards.permission(perms.FINANCE_ENTRIES_PAY)
    def register_finance_payment(entry_id: str):
        body = parse_body(RegisterPaymentBody)
        principal = current_principal()
        entry = entries.register_payment(
            tenant_id=principal.tenant_id, entry_id=entry_id, paid_by=principal.user_id, **body.model_dump()
        )
        return ok(entry, entry_dto)

    @app.route("/v1/finance/entries/check-overdue", methods=["POST"], endpoint="check_overdue_entries")
    @guards.permission(perms.FINANCE_ENTRIES_MANAGE)
    def check_overdue_entries():
        body = parse_body(CheckOverdueBody)
        principal = current_principal()
        return entries.check_overdue_entries(
            tenant_id=principal.tenant_id,
            due_soon_days=body.due_soon_days,
            notify_user_id=body.notify_user_id or principal.user_id,
        )

    @app.route("/v1/finance/payrolls/<payroll_id>/import", methods=["POST"], endpoint="payroll_to_finance")
    @guards.permission(perms.FINANCE_ENTRIES_MANAGE)
    def payroll_to_finance(payroll_id: str):
        principal = current_principal()
        result = payroll_import.payroll_to_finance(
            tenant_id=principal.tenant_id, payroll_id=payroll_id, created_by=principal.user_id
        )
        return result, 201

    @app.route("/v1/finance/export", methods=["GET"], endpoint="export_accounting_data")
    @guards.permission(perms.FINANCE_EXPORT)
    def export_accounting_data():
        start, end = query_date("startDate"), query_date("endDate")
        if not start or not end:
            raise ValidationError("startDate and endDate are required")
        principal = current_principal()
        export = exports.export_accounting_data(
            tenant_id=principal.tenant_id,
            report_type=request.args.get("reportType", "ENTRIES"),
            start_date=start,
            end_date=end,
            format=request.args.get("format", "CSV"),
            type=request.args.get("type"),
            category_id=request.args.get("categoryId"),
            cost_center_id=request.args.get("costCenterId"),
            exported_by=principal.user_id,
        )
        return send_file(
            io.BytesIO(export.content),
            mimetype=export.mimetype,
            as_attachment=True,
            download_name=export.filename,
        )

    # loans
    @app.route("/v1/finance/loans", methods=["POST"], endpoint="create_loan")
    @guards.permission(perms.FINANCE_LOANS_MANAGE)
    def create_loan():
        body = parse_body(CreateLoanBody)
        principal = current_principal()
        details = loans.create_loan(tenant_id=principal.tenant_id, created_by=principal.user_id, **body.model_dump())
        return ok(details, loan_details_dto, status=201)

    @app.route("/v1/finance/loans", methods=["GET"], endpoint="list_loans")
    @guards.permission(perms.FINANCE_ENTRIES_READ)
    def list_loans():
        page = loans.list_loans(
            tenant_id=current_principal().tenant_id, params=page_params(), status=request.args.get("status")
        )
        return paged(page, loan_dto)

    @app.route("/v1/finance/loans/<loan_id>", methods=["GET"], endpoint="get_loan")
    @guards.permission(perms.FINANCE_ENTRIES_READ)
    def get_loan(loan_id: str):
        return ok(loans.get_loan(tenant_id=current_principal().tenant_id, loan_id=loan_id), loan_details_dto)

    @app.route("/v1/finance/loans/<loan_id>/payments", methods=["POST"], endpoint="register_loan_payment")
    @guards.permission(perms.FINANCE_LOANS_MANAGE)
    def register_loan_payment(loan_id: str):
        body = parse_body(LoanPaymentBody)
        principal = current_principal()
        details = loans.register_loan_payment(
            tenant_id=principal.tenant_id, loan_id=loan_id, paid_by=principal.user_id, **body.model_dump()
        )
        return ok(details, loan_details_dto)

    @app.route("/v1/finance/loans/<loan_id>", methods=["DELETE"], endpoint="delete_loan")
    @guards.permission(perms.FINANCE_LOANS_MANAGE)
    def delete_loan(loan_id: str):
        principal = current_principal()
        loans.delete_loan(tenant_id=principal.tenant_id, loan_id=loan_id, deleted_by=principal.user_id)
        return "", 204

from __future__ import annotations

from datetime import date

import pytest

from erp_system.core.exceptions import ValidationError
from erp_system.finance.export import XLSX_MIMETYPE
from erp_system.finance.service import NewFinanceEntry


@pytest.fixture
def ledger(container, finance_setup):
    entries = container.finance_entry_service
    tenant_id = finance_setup["tenant_id"]
    rent = entries.create_finance_entry(
        tenant_id=tenant_id,
        data=NewFinanceEntry(
            type="PAYABLE",
            description="Rent",
            category_id=finance_setup["category"].id,
            cost_center_id=finance_setup["cost_center"].id,
            expected_amount=300.5,
            due_date=date(2024, 1, 10),
            supplier_name="Landlord",
        ),
    )
    sale = entries.create_finance_entry(
        tenant_id=tenant_id,
        data=NewFinanceEntry(
            type="RECEIVABLE",
            description="Consulting",
            category_id=finance_setup["income"].id,
            expected_amount=1000,
            due_date=date(2024, 1, 20),
            customer_name="Client",
        ),
    )
    entries.create_finance_entry(
        tenant_id=tenant_id,
        data=NewFinanceEntry(
            type="PAYABLE",
            description="Next year",
            category_id=finance_setup["category"].id,
            expected_amount=10,
            due_date=date(2025, 1, 1),
        ),
    )
    entries.register_payment(tenant_id=tenant_id, entry_id=rent.id, amount=300.5, payment_date=date(2024, 1, 10))
    entries.register_payment(tenant_id=tenant_id, entry_id=sale.id, amount=1000, payment_date=date(2024, 2, 5))
    return tenant_id


def test_entries_report_filters_by_due_date(container, ledger):
    frame = container.accounting_export_service.build_report(
        tenant_id=ledger, report_type="entries", start_date=date(2024, 1, 1), end_date=date(2024, 12, 31)
    )
    assert list(frame["Description"]) == ["Rent", "Consulting"]
    assert frame.iloc[0]["Cost center"] == "Administration"
    assert frame.iloc[0]["Due date"] == "10/01/2024"
    assert frame.iloc[1]["Supplier/Customer"] == "Client"


def test_dre_report_totals(container, ledger):
    frame = container.accounting_export_service.build_report(
        tenant_id=ledger, report_type="DRE", start_date=date(2024, 1, 1), end_date=date(2024, 12, 31)
    )
    totals = frame[frame["Group"] == "Total"].set_index("Category")["Amount"]
    assert totals["Income"] == 1000.0
    assert totals["Expense"] == 300.5
    assert totals["Result"] == 699.5


def test_cashflow_groups_by_payment_month(container, ledger):
    frame = container.accounting_export_service.build_report(
        tenant_id=ledger, report_type="CASHFLOW", start_date=date(2024, 1, 1), end_date=date(2024, 12, 31)
    )
    assert list(frame["Month"]) == ["2024-01", "2024-02"]
    assert list(frame["Net"]) == [-300.5, 1000.0]


def test_csv_export_uses_brazilian_separators(container, ledger):
    exported = container.accounting_export_service.export_accounting_data(
        tenant_id=ledger, report_type="entries", start_date=date(2024, 1, 1), end_date=date(2024, 1, 31)
    )
    assert exported.filename == "entries_20240101_20240131.csv"
    text = exported.content.decode("utf-8-sig")
    assert text.splitlines()[0].startswith("Code;Type;Description")
    assert "300,5" in text


def test_xlsx_export(container, ledger):
    exported = container.accounting_export_service.export_accounting_data(
        tenant_id=ledger,
        report_type="DRE",
        start_date=date(2024, 1, 1),
        end_date=date(2024, 12, 31),
        format="xlsx",
    )
    assert exported.mimetype == XLSX_MIMETYPE
    assert exported.content[:2] == b"PK"


def test_invalid_period_is_rejected(container, ledger):
    with pytest.raises(ValidationError):
        container.accounting_export_service.build_report(
            tenant_id=ledger, report_type="DRE", start_date=date(2024, 2, 1), end_date=date(2024, 1, 1)
        )

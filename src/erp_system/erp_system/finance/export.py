from __future__ import annotations

import io
from dataclasses import dataclass
from datetime import date
from enum import Enum
from typing import Dict, List, Optional, Tuple

import pandas as pd

from ..audit.model import AuditAction, AuditEntity
from ..audit.service import AuditService
from ..common.validators import parse_enum
from ..core.exceptions import ValidationError
from ..logging_config import get_logger
from .model import SETTLED_STATUSES, FinanceEntry, FinanceEntryType
from .repository import CostCenterRepository, FinanceCategoryRepository, FinanceEntryFilter, FinanceEntryRepository

logger = get_logger(__name__)

DATE_FORMAT = "%d/%m/%Y"
XLSX_MIMETYPE = "application/vnd.openxmlformats-officedocument.spreadsheetml.sheet"


class ReportType(str, Enum):
    ENTRIES = "ENTRIES"
    DRE = "DRE"
    CASHFLOW = "CASHFLOW"


class ExportFormat(str, Enum):
    CSV = "CSV"
    XLSX = "XLSX"


@dataclass(frozen=True)
class ExportFile:
    filename: str
    content: bytes
    mimetype: str


def _fmt(value: Optional[date]) -> str:
    return value.strftime(DATE_FORMAT) if value else ""


class AccountingExportService:
    """Use case: accounting reports as CSV (Brazilian locale) or Excel."""

    def __init__(
        self,
        entries: FinanceEntryRepository,
        categories: FinanceCategoryRepository,
        cost_centers: CostCenterRepository,
        audit: Optional[AuditService] = None,
    ):
        self._entries = entries
        self._categories = categories
        self._cost_centers = cost_centers
        self._audit = audit

    def _names(self, tenant_id: str) -> Tuple[Dict[str, str], Dict[str, str]]:
        categories = {c.id: c.name for c in self._categories.list_all(tenant_id=tenant_id)}
        cost_centers = {c.id: c.name for c in self._cost_centers.list_all(tenant_id=tenant_id)}
        return categories, cost_centers

    def _entries_frame(self, entries: List[FinanceEntry], categories, cost_centers) -> pd.DataFrame:
        rows = [
            {
                "Code": e.code,
                "Type": e.type.value,
                "Description": e.description,
                "Category": categories.get(e.category_id, ""),
                "Cost center": cost_centers.get(e.cost_center_id, ""),
                "Supplier/Customer": e.supplier_name or e.customer_name or "",
                "Issue date": _fmt(e.issue_date),
                "Due date": _fmt(e.due_date),
                "Payment date": _fmt(e.payment_date),
                "Expected amount": e.expected_amount,
                "Paid amount": e.paid_amount,
                "Status": e.status.value,
            }
            for e in sorted(entries, key=lambda e: (e.due_date, e.code))
        ]
        columns = [
            "Code",
            "Type",
            "Description",
            "Category",
            "Cost center",
            "Supplier/Customer",
            "Issue date",
            "Due date",
            "Payment date",
            "Expected amount",
            "Paid amount",
            "Status",
        ]
        return pd.DataFrame(rows, columns=columns)

    def _dre_frame(self, entries: List[FinanceEntry], categories) -> pd.DataFrame:
        settled = [e for e in entries if e.status in SETTLED_STATUSES]
        frame = pd.DataFrame(
            [
                {
                    "Group": "Income" if e.type == FinanceEntryType.RECEIVABLE else "Expense",
                    "Category": categories.get(e.category_id, ""),
                    "Amount": e.paid_amount,
                }
                for e in settled
            ],
            columns=["Group", "Category", "Amount"],
        )
        grouped = frame.groupby(["Group", "Category"], as_index=False)["Amount"].sum()
        income = round(float(frame.loc[frame["Group"] == "Income", "Amount"].sum()), 2)
        expense = round(float(frame.loc[frame["Group"] == "Expense", "Amount"].sum()), 2)
        totals = pd.DataFrame(
            [
                {"Group": "Total", "Category": "Income", "Amount": income},
                {"Group": "Total", "Category": "Expense", "Amount": expense},
                {"Group": "Total", "Category": "Result", "Amount": round(income - expense, 2)},
            ]
        )
        return pd.concat([grouped, totals], ignore_index=True)

    def _cashflow_frame(self, entries: List[FinanceEntry]) -> pd.DataFrame:
        settled = [e for e in entries if e.status in SETTLED_STATUSES and e.payment_date]
        frame = pd.DataFrame(
            [
                {
                    "Month": e.payment_date.strftime("%Y-%m"),
                    "Inflow": e.paid_amount if e.type == FinanceEntryType.RECEIVABLE else 0.0,
                    "Outflow": e.paid_amount if e.type == FinanceEntryType.PAYABLE else 0.0,
                }
                for e in settled
            ],
            columns=["Month", "Inflow", "Outflow"],
        )
        grouped = frame.groupby("Month", as_index=False)[["Inflow", "Outflow"]].sum().sort_values("Month")
        grouped["Net"] = (grouped["Inflow"] - grouped["Outflow"]).round(2)
        return grouped.reset_index(drop=True)

    def build_report(
        self,
        *,
        tenant_id: str,
        report_type: str,
        start_date: date,
        end_date: date,
        type: Optional[str] = None,
        category_id: Optional[str] = None,
        cost_center_id: Optional[str] = None,
    ) -> pd.DataFrame:
        report = parse_enum(ReportType, report_type, "Report type")
        if start_date > end_date:
            raise ValidationError("Start date must be before end date")
        entry_type = parse_enum(FinanceEntryType, type, "Type") if type else None
        categories, cost_centers = self._names(tenant_id)

        if report == ReportType.ENTRIES:
            filters = FinanceEntryFilter(
                type=entry_type,
                category_id=category_id,
                cost_center_id=cost_center_id,
                due_from=start_date,
                due_to=end_date,
            )
            entries = self._entries.list_all(tenant_id=tenant_id, filters=filters)
            return self._entries_frame(entries, categories, cost_centers)

        filters = FinanceEntryFilter(
            type=entry_type,
            statuses=SETTLED_STATUSES,
            category_id=category_id,
            cost_center_id=cost_center_id,
            payment_from=start_date,
            payment_to=end_date,
        )
        entries = self._entries.list_all(tenant_id=tenant_id, filters=filters)
        if report == ReportType.DRE:
            return self._dre_frame(entries, categories)
        return self._cashflow_frame(entries)

    def export_accounting_data(
        self,
        *,
        tenant_id: str,
        report_type: str,
        start_date: date,
        end_date: date,
        format: str = "CSV",
        type: Optional[str] = None,
        category_id: Optional[str] = None,
        cost_center_id: Optional[str] = None,
        exported_by: Optional[str] = None,
    ) -> ExportFile:
        output_format = parse_enum(ExportFormat, format, "Format")
        frame = self.build_report(
            tenant_id=tenant_id,
            report_type=report_type,
            start_date=start_date,
            end_date=end_date,
            type=type,
            category_id=category_id,
            cost_center_id=cost_center_id,
        )
        basename = f"{str(report_type).lower()}_{start_date:%Y%m%d}_{end_date:%Y%m%d}"

        if output_format == ExportFormat.CSV:
            text = frame.to_csv(sep=";", decimal=",", index=False)
            result = ExportFile(
                filename=f"{basename}.csv",
                content=text.encode("utf-8-sig"),
                mimetype="text/csv; charset=utf-8",
            )
        else:
            buf = io.BytesIO()
            with pd.ExcelWriter(buf, engine="openpyxl") as writer:
                frame.to_excel(writer, index=False, sheet_name=str(report_type).upper()[:31])
            result = ExportFile(filename=f"{basename}.xlsx", content=buf.getvalue(), mimetype=XLSX_MIMETYPE)

        if self._audit:
            self._audit.log(
                tenant_id=tenant_id,
                user_id=exported_by,
                action=AuditAction.EXPORT,
                entity=AuditEntity.FINANCE_ENTRY,
                entity_id=basename,
                metadata={"reportType": str(report_type).upper(), "rows": int(len(frame))},
            )
        logger.info("Exported %s report with %d rows", report_type, len(frame))
        return result

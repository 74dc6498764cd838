# Overview: Service-layer operations for reporting; tabular exports as CSV or Excel.

from __future__ import annotations

import csv
import io
from dataclasses import dataclass

from openpyxl import Workbook

from ..core.stock import derive_balances, stock_key
from .catalog_service import CATALOG_TYPES, catalog_records
from .trader_service import list_traders
from .transaction_service import MODE_TO_TYPE, TransactionFilters, list_transactions, all_transaction_records

REPORT_FORMATS = ("csv", "xlsx")


class ReportError(Exception):
    """Raised when report generation fails."""
    pass


@dataclass
class Report:
    name: str
    header: list[str]
    rows: list[list]

    def filename(self, fmt: str) -> str:
        return f"{self.name}.{fmt}"


def _check_mode(mode: str) -> None:
    if mode not in CATALOG_TYPES:
        raise ReportError("mode must be sales or buy")


def sales_report(mode: str = "sales") -> Report:
    _check_mode(mode)
    rows = [
        [tx.date.isoformat(), tx.type, tx.name, tx.product, tx.size, tx.qty, tx.amount, tx.status]
        for tx in list_transactions(TransactionFilters(mode=mode))
    ]
    return Report(
        name="Sales_Report",
        header=["Date", "Type", "Customer", "Product", "Size", "Qty", "Amount", "Status"],
        rows=rows,
    )


def inventory_report(mode: str = "sales") -> Report:
    _check_mode(mode)
    balances = derive_balances(all_transaction_records())
    rows = [
        [item["product"], item["size"], balances.get(stock_key(item["product"], item["size"]), 0)]
        for item in catalog_records(mode)
    ]
    return Report(name="Inventory_Report", header=["Product", "Size", "Current Stock"], rows=rows)


def customers_report() -> Report:
    rows = [[t.name, t.contact or "", t.type] for t in list_traders()]
    return Report(name="Customers", header=["Name", "Contact", "Type"], rows=rows)


def build_report(kind: str, mode: str = "sales") -> Report:
    if kind == "sales":
        return sales_report(mode)
    if kind == "inventory":
        return inventory_report(mode)
    if kind == "customers":
        return customers_report()
    raise ReportError("report must be sales, inventory or customers")


def render_csv(report: Report) -> str:
    buf = io.StringIO()
    writer = csv.writer(buf, lineterminator="\n")
    writer.writerow(report.header)
    writer.writerows(report.rows)
    return buf.getvalue()


def render_xlsx(report: Report) -> bytes:
    wb = Workbook()
    sheet = wb.active
    sheet.title = report.name[:31]
    sheet.append(report.header)
    for row in report.rows:
        sheet.append(row)
    buf = io.BytesIO()
    wb.save(buf)
    return buf.getvalue()


def render(report: Report, fmt: str) -> bytes:
    if fmt == "csv":
        return render_csv(report).encode("utf-8")
    if fmt == "xlsx":
        return render_xlsx(report)
    raise ReportError("format must be csv or xlsx")

# Overview: Stock views over the ledger; every call re-derives balances from the full history.

from __future__ import annotations

from flask import current_app

from ..core.stock import derive_balances, running_balance, stock_levels
from ..validation import ValidationError
from .catalog_service import CATALOG_TYPES, catalog_records
from .transaction_service import all_transaction_records


def current_balances() -> dict:
    return derive_balances(all_transaction_records())


def stock_report(mode: str = "sales") -> list[dict]:
    """Balance, limit and warning flags for every catalog entry on one side."""
    if mode not in CATALOG_TYPES:
        raise ValidationError("mode must be sales or buy")
    default_limit = current_app.config.get("DEFAULT_STOCK_LIMIT", 50)
    balances = current_balances()
    report = []
    for level in stock_levels(catalog_records(mode), balances):
        row = level.to_dict()
        row["suggested_limit"] = level.limit if level.limit is not None else default_limit
        report.append(row)
    return report


def item_ledger(product: str, size: str) -> dict:
    if not product or not size:
        raise ValidationError("product and size are required")
    rows = running_balance(all_transaction_records(), product, size)
    return {
        "product": product,
        "size": size,
        "rows": [row.to_dict() for row in rows],
        "balance": rows[-1].balance if rows else 0,
    }

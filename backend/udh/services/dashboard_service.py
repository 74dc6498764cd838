# Overview: Dashboard summary for one side (sales or purchases) of the business.

from __future__ import annotations

from collections import defaultdict

from ..core.stock import derive_balances, stock_levels, stock_value
from ..validation import ValidationError
from .catalog_service import catalog_records
from .transaction_service import MODE_TO_TYPE, all_transaction_records

RECENT_COUNT = 5


def _newest_first(records: list[dict]) -> list[dict]:
    return sorted(records, key=lambda r: (r["date"], r["id"]), reverse=True)


def summary(mode: str = "sales") -> dict:
    if mode not in MODE_TO_TYPE:
        raise ValidationError("mode must be sales or buy")

    records = all_transaction_records()
    balances = derive_balances(records)
    catalog = catalog_records(mode)
    side = [r for r in records if r["type"] == MODE_TO_TYPE[mode]]

    by_date: dict[str, float] = defaultdict(float)
    by_product: dict[str, float] = defaultdict(float)
    for r in side:
        by_date[r["date"]] += r["amount"] or 0
        by_product[r["product"]] += r["amount"] or 0

    reminders = [r for r in side if r["status"] == "booked" and r["promise_date"]]
    reminders.sort(key=lambda r: r["promise_date"])

    return {
        "mode": mode,
        "total_transactions": len(records),
        "stock_value": stock_value(catalog, balances),
        "inventory": [level.to_dict() for level in stock_levels(catalog, balances)],
        "recent": _newest_first(side)[:RECENT_COUNT],
        "reminders": reminders,
        "amount_by_date": [{"date": d, "amount": by_date[d]} for d in sorted(by_date)],
        "amount_by_product": [{"product": p, "amount": a} for p, a in by_product.items()],
    }

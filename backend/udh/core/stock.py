# Overview: Stock ledger derivation; balances are folded from transaction history.

"""
UDH stock rules

- Stock is ledger-derived: never stored, always folded from the full list of
  transaction records (plain mappings as served by the API).
- Balance for key "<product>-<size>" is SUM(+qty for buy, -qty for sell).
- `returned` status does NOT invert direction; a returned row counts the same
  as its `type` says. Kept as observed until the business rule is settled.
- Negative balances are valid (oversold) and reported, never rejected.
- No validation here: a non-numeric qty corrupts that key's balance
  (NaN in, NaN out). Payload validation happens before records are stored.
"""

from __future__ import annotations

from dataclasses import dataclass
from datetime import date
from typing import Any, Iterable, Mapping

from ..time_utils import parse_iso_date

BUY = "buy"
SELL = "sell"


@dataclass(frozen=True)
class LedgerRow:
    """One step of a product/size history: the record, its signed delta and the balance after it."""
    transaction: Mapping[str, Any]
    delta: Any
    balance: Any

    def to_dict(self) -> dict:
        tx = self.transaction
        return {
            "id": tx.get("id"),
            "date": tx.get("date"),
            "type": tx.get("type"),
            "name": tx.get("name"),
            "status": tx.get("status"),
            "qty": self.delta,
            "balance": self.balance,
        }


@dataclass(frozen=True)
class StockLevel:
    product: str
    size: str
    quantity: Any
    limit: int | None

    @property
    def is_low(self) -> bool:
        return self.limit is not None and self.quantity < self.limit

    @property
    def is_oversold(self) -> bool:
        return self.quantity <= 0

    def to_dict(self) -> dict:
        return {
            "product": self.product,
            "size": self.size,
            "quantity": self.quantity,
            "limit": self.limit,
            "low": self.is_low,
            "oversold": self.is_oversold,
        }


def stock_key(product: str, size: str) -> str:
    return f"{product}-{size}"


def signed_qty(tx: Mapping[str, Any]):
    """+qty for a buy, -qty for anything else."""
    qty = tx["qty"]
    return qty if tx["type"] == BUY else -qty


def derive_balances(transactions: Iterable[Mapping[str, Any]]) -> dict[str, Any]:
    """Fold the full history into a "<product>-<size>" -> balance mapping."""
    balances: dict[str, Any] = {}
    for tx in transactions:
        key = stock_key(tx["product"], tx["size"])
        balances[key] = balances.get(key, 0) + signed_qty(tx)
    return balances


def _date_key(tx: Mapping[str, Any]) -> tuple[bool, date]:
    day = parse_iso_date(tx.get("date"))
    return (day is not None, day or date.min)


def running_balance(
    transactions: Iterable[Mapping[str, Any]],
    product: str,
    size: str,
) -> list[LedgerRow]:
    """
    Chronological history for one product/size with the balance after each row.

    Sorted by date ascending, undated rows first; sorted() is stable so
    same-day rows keep their input order.
    """
    history = [tx for tx in transactions if tx["product"] == product and tx["size"] == size]
    history = sorted(history, key=_date_key)

    rows: list[LedgerRow] = []
    running = 0
    for tx in history:
        delta = signed_qty(tx)
        running = running + delta
        rows.append(LedgerRow(transaction=tx, delta=delta, balance=running))
    return rows


def stock_levels(
    catalog: Iterable[Mapping[str, Any]],
    balances: Mapping[str, Any],
) -> list[StockLevel]:
    """Balance per catalog entry; items with no history sit at 0."""
    levels = []
    for item in catalog:
        key = stock_key(item["product"], item["size"])
        levels.append(StockLevel(
            product=item["product"],
            size=item["size"],
            quantity=balances.get(key, 0),
            limit=item.get("limit"),
        ))
    return levels


def stock_value(
    catalog: Iterable[Mapping[str, Any]],
    balances: Mapping[str, Any],
) -> float:
    """Estimated value of stock on hand: price x balance over positive balances only."""
    prices = {stock_key(item["product"], item["size"]): item.get("price") or 0 for item in catalog}
    total = 0
    for key, qty in balances.items():
        if qty > 0:
            total += prices.get(key, 0) * qty
    return total

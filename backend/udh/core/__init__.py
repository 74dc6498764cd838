# Overview: Pure business logic shared by the backend services and the client store.

from .stock import (
    LedgerRow,
    StockLevel,
    derive_balances,
    running_balance,
    signed_qty,
    stock_key,
    stock_levels,
    stock_value,
)

__all__ = [
    "LedgerRow",
    "StockLevel",
    "derive_balances",
    "running_balance",
    "signed_qty",
    "stock_key",
    "stock_levels",
    "stock_value",
]

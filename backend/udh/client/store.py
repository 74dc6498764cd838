# Overview: Client-side cache of backend snapshots, refreshed wholesale after each mutation.

"""
Dashboard store

Holds the signed-in user and read-mostly copies of transactions, traders and
the catalog. Consumers receive the store explicitly; there is no module-level
instance.

Refresh semantics:
- refresh_all() refetches every collection and replaces the cached lists
- mutations go through the API, then call refresh_all(); no optimistic update
- a failed request raises ApiError and leaves the cache as it was
"""

from __future__ import annotations

import logging
from typing import Any, Dict, List, Optional

from ..core.stock import derive_balances, running_balance, stock_levels, stock_value
from ..permissions import TECHNICAL_TEAM, can
from .api import ApiClient, ApiError

logger = logging.getLogger(__name__)


class DashboardStore:
    def __init__(self, api: ApiClient):
        self.api = api
        self.user: Optional[Dict[str, Any]] = None
        self.transactions: List[Dict[str, Any]] = []
        self.traders: List[Dict[str, Any]] = []
        self.catalog: List[Dict[str, Any]] = []
        self.signup_requests: List[Dict[str, Any]] = []
        self.pass_requests: List[Dict[str, Any]] = []

    # -- session --

    def boot(self) -> Optional[Dict[str, Any]]:
        """Resolve the current user from a stored token; None when it is missing or no longer valid."""
        if not self.api.token:
            return None
        try:
            self.user = self.api.get("/api/auth/me")["user"]
        except ApiError as e:
            if e.status_code != 401:
                raise
            logger.info("Stored token rejected, signing out")
            self.api.set_token(None)
            self.clear()
            return None
        return self.user

    def login(self, username: str, password: str) -> Dict[str, Any]:
        data = self.api.post("/api/auth/login", {"username": username, "password": password})
        self.api.set_token(data["token"])
        self.user = data["user"]
        logger.info("Signed in as %s (%s)", self.user["username"], self.user["role"])
        self.refresh_all()
        return self.user

    def logout(self) -> None:
        if self.api.token:
            self.api.post("/api/auth/logout")
        self.api.set_token(None)
        self.clear()

    def clear(self) -> None:
        self.user = None
        self.transactions = []
        self.traders = []
        self.catalog = []
        self.signup_requests = []
        self.pass_requests = []

    # -- refresh --

    def refresh_all(self) -> None:
        """Refetch everything, then swap the snapshot in one step."""
        transactions = self.api.get("/api/transactions")["transactions"]
        traders = self.api.get("/api/traders")["traders"]
        catalog = self.api.get("/api/catalog")["items"]

        signup_requests: List[Dict[str, Any]] = []
        pass_requests: List[Dict[str, Any]] = []
        if self.user and self.user.get("role") == TECHNICAL_TEAM:
            signup_requests = self.api.get("/api/auth/signup-requests")["requests"]
            pass_requests = self.api.get("/api/auth/pass-requests")["requests"]

        self.transactions = transactions
        self.traders = traders
        self.catalog = catalog
        self.signup_requests = signup_requests
        self.pass_requests = pass_requests
        logger.debug(
            "Refreshed %d transactions, %d traders, %d catalog items",
            len(transactions), len(traders), len(catalog),
        )

    # -- mutations --

    def add_transaction(self, payload: Dict[str, Any]) -> Dict[str, Any]:
        tx = self.api.post("/api/transactions", payload)["transaction"]
        self.refresh_all()
        return tx

    def update_transaction(self, transaction_id: int, payload: Dict[str, Any]) -> Dict[str, Any]:
        tx = self.api.put(f"/api/transactions/{transaction_id}", payload)["transaction"]
        self.refresh_all()
        return tx

    def delete_transaction(self, transaction_id: int) -> None:
        self.api.delete(f"/api/transactions/{transaction_id}")
        self.refresh_all()

    def add_catalog_item(self, payload: Dict[str, Any]) -> Dict[str, Any]:
        item = self.api.post("/api/catalog", payload)["item"]
        self.refresh_all()
        return item

    def update_catalog_item(self, item_id: int, payload: Dict[str, Any]) -> Dict[str, Any]:
        item = self.api.put(f"/api/catalog/{item_id}", payload)["item"]
        self.refresh_all()
        return item

    def delete_catalog_item(self, item_id: int) -> None:
        self.api.delete(f"/api/catalog/{item_id}")
        self.refresh_all()

    def set_limit(self, item_id: int, limit: Optional[int]) -> Dict[str, Any]:
        item = self.api.put(f"/api/catalog/{item_id}", {"limit": limit})["item"]
        self.refresh_all()
        return item

    def add_trader(self, payload: Dict[str, Any]) -> Dict[str, Any]:
        trader = self.api.post("/api/traders", payload)["trader"]
        self.refresh_all()
        return trader

    def update_trader(self, trader_id: int, payload: Dict[str, Any]) -> Dict[str, Any]:
        trader = self.api.put(f"/api/traders/{trader_id}", payload)["trader"]
        self.refresh_all()
        return trader

    def delete_trader(self, trader_id: int) -> None:
        self.api.delete(f"/api/traders/{trader_id}")
        self.refresh_all()

    # -- derived views (recomputed from the cached snapshot on every call) --

    def can(self, capability: str) -> bool:
        return can(self.user, capability)

    def balances(self) -> Dict[str, Any]:
        return derive_balances(self.transactions)

    def running_balance(self, product: str, size: str):
        return running_balance(self.transactions, product, size)

    def catalog_for(self, mode: str) -> List[Dict[str, Any]]:
        return [item for item in self.catalog if item.get("type") == mode]

    def stock_levels(self, mode: str = "sales"):
        return stock_levels(self.catalog_for(mode), self.balances())

    def low_stock(self, mode: str = "sales"):
        return [level for level in self.stock_levels(mode) if level.is_low or level.is_oversold]

    def stock_value(self, mode: str = "sales") -> float:
        return stock_value(self.catalog_for(mode), self.balances())

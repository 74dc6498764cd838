# Overview: Service-layer operations for transactions; validation, trader auto-creation and persistence.

from __future__ import annotations

import logging
from dataclasses import dataclass

from ..extensions import db
from ..models import CatalogItem, Trader, Transaction
from ..validation import (
    ModelValidationPolicy,
    NotFoundError,
    ValidationError,
    enforce_rules_transaction,
    validate_payload,
)
from udh.time_utils import parse_iso_date, today
from . import activity_service

logger = logging.getLogger(__name__)

TRANSACTION_POLICY = ModelValidationPolicy(
    writable_fields={
        "date", "name", "type", "product", "size", "qty", "amount", "status",
        "payment_method", "upi_id", "paid_amount", "promise_date",
    },
    required_on_create={"name", "type", "product", "size", "qty"},
)

# Dashboard side -> transaction direction / catalog side
MODE_TO_TYPE = {"sales": "sell", "buy": "buy"}
TYPE_TO_CATALOG = {"sell": "sales", "buy": "buy"}
TYPE_TO_TRADER = {"sell": "Customer", "buy": "Dealer"}


@dataclass
class TransactionFilters:
    mode: str | None = None
    date: str | None = None
    name: str | None = None
    product: str | None = None
    size: str | None = None
    status: str | None = None
    limit: int | None = None

    @classmethod
    def from_args(cls, args) -> "TransactionFilters":
        return cls(
            mode=args.get("mode"),
            date=args.get("date"),
            name=args.get("name"),
            product=args.get("product"),
            size=args.get("size"),
            status=args.get("status"),
            limit=args.get("limit", type=int),
        )


def _escape_like(value: str) -> str:
    return value.replace("\\", "\\\\").replace("%", "\\%").replace("_", "\\_")


def list_transactions(filters: TransactionFilters | None = None) -> list[Transaction]:
    """Newest day first; same-day rows newest id first. "all" means no filter."""
    filters = filters or TransactionFilters()
    q = db.session.query(Transaction)

    if filters.mode:
        if filters.mode not in MODE_TO_TYPE:
            raise ValidationError("mode must be sales or buy")
        q = q.filter(Transaction.type == MODE_TO_TYPE[filters.mode])

    if filters.date:
        try:
            day = parse_iso_date(filters.date)
        except ValueError:
            raise ValidationError("date must be an ISO-8601 date")
        q = q.filter(Transaction.date == day)

    if filters.name:
        q = q.filter(Transaction.name.ilike(f"%{_escape_like(filters.name)}%", escape="\\"))

    if filters.product and filters.product != "all":
        q = q.filter(Transaction.product == filters.product)

    if filters.size:
        q = q.filter(Transaction.size.ilike(f"%{_escape_like(filters.size)}%", escape="\\"))

    if filters.status and filters.status != "all":
        q = q.filter(Transaction.status == filters.status)

    q = q.order_by(Transaction.date.desc(), Transaction.id.desc())

    if filters.limit is not None:
        q = q.limit(max(1, filters.limit))

    return q.all()


def get_transaction(transaction_id: int) -> Transaction:
    tx = db.session.get(Transaction, transaction_id)
    if not tx:
        raise NotFoundError("Transaction not found")
    return tx


def find_trader_by_name(name: str) -> Trader | None:
    return (
        db.session.query(Trader)
        .filter(db.func.lower(Trader.name) == name.lower())
        .first()
    )


def catalog_price(tx_type: str, product: str, size: str) -> float | None:
    item = db.session.query(CatalogItem).filter_by(
        type=TYPE_TO_CATALOG[tx_type],
        product=product,
        size=size,
    ).first()
    return item.price if item else None


def _ensure_trader(name: str, tx_type: str, contact: str | None) -> None:
    if find_trader_by_name(name):
        return
    contact = (contact or "").strip()
    if not contact:
        raise ValidationError("Contact number is required for new customers.")
    trader = Trader(name=name, contact=contact, type=TYPE_TO_TRADER[tx_type])
    db.session.add(trader)
    db.session.flush()
    activity_service.record("trader.create", trader.to_dict())


def _settle(tx: Transaction) -> None:
    if tx.status == "purchased":
        tx.paid_amount = tx.amount


def create_transaction(payload: dict, contact: str | None = None) -> Transaction:
    """
    Record a transaction.

    - date defaults to today, status to purchased
    - an unknown trader name needs `contact` and creates the trader
    - a missing amount is catalog price x qty (0 when the item is not listed)
    """
    patch = validate_payload(model=Transaction, payload=payload, policy=TRANSACTION_POLICY, partial=False)
    enforce_rules_transaction(patch)

    patch.setdefault("status", "purchased")
    if patch.get("date") is None:
        patch["date"] = today()

    if patch.get("amount") is None:
        price = catalog_price(patch["type"], patch["product"], patch["size"])
        patch["amount"] = (price or 0) * patch["qty"]

    _ensure_trader(patch["name"], patch["type"], contact)

    tx = Transaction(**patch)
    _settle(tx)
    db.session.add(tx)
    db.session.flush()
    activity_service.record("transaction.create", tx.to_dict())
    db.session.commit()
    logger.info("Recorded %s of %s x %s %s", tx.type, tx.qty, tx.product, tx.size)
    return tx


def update_transaction(transaction_id: int, payload: dict, contact: str | None = None) -> Transaction:
    """Renaming to an unknown trader follows the same contact rule as create."""
    tx = get_transaction(transaction_id)
    patch = validate_payload(model=Transaction, payload=payload, policy=TRANSACTION_POLICY, partial=True)
    enforce_rules_transaction(patch)

    if "name" in patch:
        _ensure_trader(patch["name"], patch.get("type", tx.type), contact)

    for k, v in patch.items():
        setattr(tx, k, v)
    _settle(tx)

    activity_service.record("transaction.update", {"id": tx.id, "fields": sorted(patch)})
    db.session.commit()
    return tx


def delete_transaction(transaction_id: int) -> None:
    tx = get_transaction(transaction_id)
    activity_service.record("transaction.delete", tx.to_dict())
    db.session.delete(tx)
    db.session.commit()


def transactions_for_trader(name: str) -> list[Transaction]:
    return (
        db.session.query(Transaction)
        .filter(Transaction.name == name)
        .order_by(Transaction.date.desc(), Transaction.id.desc())
        .all()
    )


def all_transaction_records() -> list[dict]:
    """Full history as plain records, the input shape of udh.core.stock."""
    return [tx.to_dict() for tx in db.session.query(Transaction).order_by(Transaction.id.asc()).all()]

# Overview: Service-layer operations for customers and dealers.

from __future__ import annotations

from ..extensions import db
from ..models import Trader
from ..validation import (
    ModelValidationPolicy,
    NotFoundError,
    ValidationError,
    enforce_rules_trader,
    validate_payload,
)
from . import activity_service

TRADER_POLICY = ModelValidationPolicy(
    writable_fields={"name", "contact", "type"},
    required_on_create={"name"},
)

TRADER_TYPES = ("Customer", "Dealer")

# Dashboard side -> trader category
MODE_TO_TRADER = {"sales": "Customer", "buy": "Dealer"}


def list_traders(trader_type: str | None = None) -> list[Trader]:
    q = db.session.query(Trader)
    if trader_type:
        if trader_type not in TRADER_TYPES:
            raise ValidationError("type must be Customer or Dealer")
        q = q.filter(Trader.type == trader_type)
    return q.order_by(Trader.name.asc(), Trader.id.asc()).all()


def get_trader(trader_id: int) -> Trader:
    trader = db.session.get(Trader, trader_id)
    if not trader:
        raise NotFoundError("Trader not found")
    return trader


def create_trader(payload: dict) -> Trader:
    patch = validate_payload(model=Trader, payload=payload, policy=TRADER_POLICY, partial=False)
    enforce_rules_trader(patch)
    patch.setdefault("type", "Customer")

    trader = Trader(**patch)
    db.session.add(trader)
    db.session.flush()
    activity_service.record("trader.create", trader.to_dict())
    db.session.commit()
    return trader


def update_trader(trader_id: int, payload: dict) -> Trader:
    trader = get_trader(trader_id)
    patch = validate_payload(model=Trader, payload=payload, policy=TRADER_POLICY, partial=True)
    enforce_rules_trader(patch)

    for k, v in patch.items():
        setattr(trader, k, v)

    activity_service.record("trader.update", {"id": trader.id, **patch})
    db.session.commit()
    return trader


def delete_trader(trader_id: int) -> None:
    """Transactions keep the name as free text; they are not touched."""
    trader = get_trader(trader_id)
    activity_service.record("trader.delete", trader.to_dict())
    db.session.delete(trader)
    db.session.commit()

# Overview: JSON backup export and wholesale restore of transactions, traders and catalog.

from __future__ import annotations

import logging
from dataclasses import replace

from ..extensions import db
from ..models import CatalogItem, Trader, Transaction
from ..validation import (
    ValidationError,
    enforce_rules_catalog,
    enforce_rules_trader,
    enforce_rules_transaction,
    validate_payload,
)
from udh.time_utils import to_utc_z, utcnow
from . import activity_service
from .catalog_service import CATALOG_POLICY
from .trader_service import TRADER_POLICY
from .transaction_service import TRANSACTION_POLICY

logger = logging.getLogger(__name__)

# Restored rows must be complete; nothing is defaulted from the catalog
RESTORE_TRANSACTION_POLICY = replace(
    TRANSACTION_POLICY,
    required_on_create=TRANSACTION_POLICY.required_on_create | {"date", "amount"},
)

SECTIONS = (
    ("transactions", Transaction, RESTORE_TRANSACTION_POLICY, enforce_rules_transaction),
    ("traders", Trader, TRADER_POLICY, enforce_rules_trader),
    ("catalog", CatalogItem, CATALOG_POLICY, enforce_rules_catalog),
)


def export_backup() -> dict:
    return {
        "exported_at": to_utc_z(utcnow()),
        "transactions": [t.to_dict() for t in db.session.query(Transaction).order_by(Transaction.id).all()],
        "traders": [t.to_dict() for t in db.session.query(Trader).order_by(Trader.id).all()],
        "catalog": [c.to_dict() for c in db.session.query(CatalogItem).order_by(CatalogItem.id).all()],
    }


def _build_section(name: str, model, policy, rules, records) -> list:
    if not isinstance(records, list):
        raise ValidationError(f"{name} must be a list")

    built = []
    for index, record in enumerate(records):
        try:
            patch = validate_payload(model=model, payload=record, policy=policy, partial=False)
            rules(patch)
        except ValidationError as e:
            raise ValidationError(f"{name}[{index}]: {e}") from e
        built.append(model(**patch))
    return built


def restore_backup(document: dict) -> dict:
    """
    Replace transactions, traders and catalog with the backup's content.

    Every record is validated before anything is deleted; one bad record
    aborts the restore and leaves the data untouched. Sections missing
    from the document are restored as empty.
    """
    if not isinstance(document, dict):
        raise ValidationError("Backup must be a JSON object")

    rebuilt = {
        name: _build_section(name, model, policy, rules, document.get(name, []))
        for name, model, policy, rules in SECTIONS
    }

    seen = set()
    for item in rebuilt["catalog"]:
        key = (item.type, item.product, item.size)
        if key in seen:
            raise ValidationError(f"catalog: duplicate entry {item.product} ({item.size}) in {item.type}")
        seen.add(key)

    for tx in rebuilt["transactions"]:
        if tx.status == "purchased":
            tx.paid_amount = tx.amount

    for _, model, _, _ in SECTIONS:
        db.session.query(model).delete()

    counts = {}
    for name, rows in rebuilt.items():
        db.session.add_all(rows)
        counts[name] = len(rows)

    activity_service.record("backup.restore", counts)
    db.session.commit()
    logger.info("Restored backup: %s", counts)
    return counts

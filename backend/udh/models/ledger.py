from __future__ import annotations

from ..extensions import db
from ..time_utils import to_iso_date, to_utc_z


class Transaction(db.Model):
    """
    One buy or sell entry.

    Stock is never stored: balances are derived from these rows
    (see udh.core.stock). name is free text and is not a foreign key
    to traders.
    """
    __tablename__ = "transactions"
    __table_args__ = (
        db.CheckConstraint("qty >= 1", name="ck_transactions_qty_positive"),
        db.CheckConstraint("type IN ('buy', 'sell')", name="ck_transactions_type"),
        db.CheckConstraint(
            "status IN ('purchased', 'booked', 'returned')",
            name="ck_transactions_status",
        ),
        db.Index("ix_transactions_product_size", "product", "size"),
        db.Index("ix_transactions_date", "date"),
        {"sqlite_autoincrement": True},
    )

    id = db.Column(db.Integer, primary_key=True)
    date = db.Column(db.Date, nullable=False)
    name = db.Column(db.String(128), nullable=False)
    type = db.Column(db.String(8), nullable=False)
    product = db.Column(db.String(128), nullable=False)
    size = db.Column(db.String(64), nullable=False)
    qty = db.Column(db.Integer, nullable=False)
    amount = db.Column(db.Float, nullable=False, default=0)
    status = db.Column(db.String(16), nullable=False, default="purchased")

    payment_method = db.Column(db.String(32), nullable=True)
    upi_id = db.Column(db.String(128), nullable=True)
    paid_amount = db.Column(db.Float, nullable=True)
    promise_date = db.Column(db.Date, nullable=True)

    created_at = db.Column(db.DateTime(timezone=True), nullable=False, server_default=db.func.now())
    updated_at = db.Column(db.DateTime(timezone=True), nullable=True, onupdate=db.func.now())

    def to_dict(self) -> dict:
        return {
            "id": self.id,
            "date": to_iso_date(self.date),
            "name": self.name,
            "type": self.type,
            "product": self.product,
            "size": self.size,
            "qty": self.qty,
            "amount": self.amount,
            "status": self.status,
            "payment_method": self.payment_method,
            "upi_id": self.upi_id,
            "paid_amount": self.paid_amount,
            "promise_date": to_iso_date(self.promise_date),
            "created_at": to_utc_z(self.created_at),
        }


class CatalogItem(db.Model):
    """
    Price list entry. The sales side and the purchase side keep separate
    entries for the same product/size.
    """
    __tablename__ = "catalog_items"
    __table_args__ = (
        db.UniqueConstraint("type", "product", "size", name="uq_catalog_type_product_size"),
        db.CheckConstraint("type IN ('sales', 'buy')", name="ck_catalog_type"),
        {"sqlite_autoincrement": True},
    )

    id = db.Column(db.Integer, primary_key=True)
    type = db.Column(db.String(8), nullable=False)
    product = db.Column(db.String(128), nullable=False)
    size = db.Column(db.String(64), nullable=False)
    price = db.Column(db.Float, nullable=False, default=0)
    # Low-stock threshold, None = no warning
    limit = db.Column(db.Integer, nullable=True)

    def to_dict(self) -> dict:
        return {
            "id": self.id,
            "type": self.type,
            "product": self.product,
            "size": self.size,
            "price": self.price,
            "limit": self.limit,
        }


class Trader(db.Model):
    """Customer or dealer contact card."""
    __tablename__ = "traders"
    __table_args__ = (
        db.CheckConstraint("type IN ('Customer', 'Dealer')", name="ck_traders_type"),
        {"sqlite_autoincrement": True},
    )

    id = db.Column(db.Integer, primary_key=True)
    name = db.Column(db.String(128), nullable=False, index=True)
    contact = db.Column(db.String(64), nullable=True)
    type = db.Column(db.String(16), nullable=False, default="Customer")

    def to_dict(self) -> dict:
        return {
            "id": self.id,
            "name": self.name,
            "contact": self.contact or "",
            "type": self.type,
        }

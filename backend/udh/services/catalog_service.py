# Overview: Service-layer operations for the catalog (price list and low-stock limits).

from __future__ import annotations

from ..extensions import db
from ..models import CatalogItem
from ..validation import (
    ConflictError,
    ModelValidationPolicy,
    NotFoundError,
    ValidationError,
    enforce_rules_catalog,
    validate_payload,
)
from . import activity_service

CATALOG_POLICY = ModelValidationPolicy(
    writable_fields={"type", "product", "size", "price", "limit"},
    required_on_create={"type", "product", "size"},
)

CATALOG_TYPES = ("sales", "buy")


def list_catalog(catalog_type: str | None = None) -> list[CatalogItem]:
    q = db.session.query(CatalogItem)
    if catalog_type:
        if catalog_type not in CATALOG_TYPES:
            raise ValidationError("type must be sales or buy")
        q = q.filter(CatalogItem.type == catalog_type)
    return q.order_by(CatalogItem.product.asc(), CatalogItem.size.asc(), CatalogItem.id.asc()).all()


def get_item(item_id: int) -> CatalogItem:
    item = db.session.get(CatalogItem, item_id)
    if not item:
        raise NotFoundError("Catalog item not found")
    return item


def _require_unique(catalog_type: str, product: str, size: str, exclude_id: int | None = None) -> None:
    q = db.session.query(CatalogItem).filter_by(type=catalog_type, product=product, size=size)
    if exclude_id is not None:
        q = q.filter(CatalogItem.id != exclude_id)
    if q.first():
        raise ConflictError(f"{product} ({size}) is already in the {catalog_type} catalog")


def create_item(payload: dict) -> CatalogItem:
    patch = validate_payload(model=CatalogItem, payload=payload, policy=CATALOG_POLICY, partial=False)
    enforce_rules_catalog(patch)
    patch.setdefault("price", 0)
    if patch["price"] is None:
        patch["price"] = 0

    _require_unique(patch["type"], patch["product"], patch["size"])

    item = CatalogItem(**patch)
    db.session.add(item)
    db.session.flush()
    activity_service.record("catalog.create", item.to_dict())
    db.session.commit()
    return item


def update_item(item_id: int, payload: dict) -> CatalogItem:
    item = get_item(item_id)
    patch = validate_payload(model=CatalogItem, payload=payload, policy=CATALOG_POLICY, partial=True)
    enforce_rules_catalog(patch)
    if "price" in patch and patch["price"] is None:
        raise ValidationError("price cannot be null")

    _require_unique(
        patch.get("type", item.type),
        patch.get("product", item.product),
        patch.get("size", item.size),
        exclude_id=item.id,
    )

    for k, v in patch.items():
        setattr(item, k, v)

    activity_service.record("catalog.update", {"id": item.id, **patch})
    db.session.commit()
    return item


def delete_item(item_id: int) -> None:
    item = get_item(item_id)
    activity_service.record("catalog.delete", item.to_dict())
    db.session.delete(item)
    db.session.commit()


def catalog_records(catalog_type: str | None = None) -> list[dict]:
    return [item.to_dict() for item in list_catalog(catalog_type)]

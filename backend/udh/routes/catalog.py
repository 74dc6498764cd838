# Overview: Flask API routes for the catalog and stock views; parses input and returns JSON responses.

from flask import Blueprint, request, jsonify

from ..services import catalog_service, stock_service
from ..validation import ConflictError, NotFoundError, ValidationError
from ..decorators import require_auth, require_capability
from ..permissions import LIMITS

catalog_bp = Blueprint("catalog", __name__, url_prefix="/api/catalog")
stock_bp = Blueprint("stock", __name__, url_prefix="/api/stock")


@catalog_bp.get("")
@require_auth
def list_catalog_route():
    try:
        items = catalog_service.list_catalog(request.args.get("type"))
    except ValidationError as e:
        return jsonify({"error": str(e)}), 400
    return jsonify({"items": [i.to_dict() for i in items], "count": len(items)}), 200


@catalog_bp.post("")
@require_auth
@require_capability(LIMITS)
def create_catalog_item_route():
    payload = request.get_json(silent=True) or {}
    try:
        item = catalog_service.create_item(payload)
    except ValidationError as e:
        return jsonify({"error": str(e)}), 400
    except ConflictError as e:
        return jsonify({"error": str(e)}), 409
    return jsonify({"item": item.to_dict()}), 201


@catalog_bp.put("/<int:item_id>")
@require_auth
@require_capability(LIMITS)
def update_catalog_item_route(item_id: int):
    """Update price, limit or naming of a catalog entry."""
    payload = request.get_json(silent=True) or {}
    try:
        item = catalog_service.update_item(item_id, payload)
    except ValidationError as e:
        return jsonify({"error": str(e)}), 400
    except ConflictError as e:
        return jsonify({"error": str(e)}), 409
    except NotFoundError as e:
        return jsonify({"error": str(e)}), 404
    return jsonify({"item": item.to_dict()}), 200


@catalog_bp.delete("/<int:item_id>")
@require_auth
@require_capability(LIMITS)
def delete_catalog_item_route(item_id: int):
    try:
        catalog_service.delete_item(item_id)
    except NotFoundError as e:
        return jsonify({"error": str(e)}), 404
    return jsonify({"ok": True}), 200


@stock_bp.get("")
@require_auth
def stock_levels_route():
    """Current stock per catalog entry of one side (mode=sales|buy)."""
    mode = request.args.get("mode", "sales")
    try:
        levels = stock_service.stock_report(mode)
    except ValidationError as e:
        return jsonify({"error": str(e)}), 400
    return jsonify({"mode": mode, "items": levels}), 200


@stock_bp.get("/ledger")
@require_auth
def stock_ledger_route():
    """Chronological history of one product/size with the running balance."""
    try:
        ledger = stock_service.item_ledger(request.args.get("product", ""), request.args.get("size", ""))
    except ValidationError as e:
        return jsonify({"error": str(e)}), 400
    return jsonify(ledger), 200

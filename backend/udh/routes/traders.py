# Overview: Flask API routes for customers and dealers; parses input and returns JSON responses.

from flask import Blueprint, request, jsonify

from ..services import trader_service, transaction_service
from ..validation import NotFoundError, ValidationError
from ..decorators import require_auth, require_capability
from ..permissions import ADD, DELETE, EDIT

traders_bp = Blueprint("traders", __name__, url_prefix="/api/traders")


@traders_bp.get("")
@require_auth
def list_traders_route():
    try:
        traders = trader_service.list_traders(request.args.get("type"))
    except ValidationError as e:
        return jsonify({"error": str(e)}), 400
    return jsonify({"traders": [t.to_dict() for t in traders], "count": len(traders)}), 200


@traders_bp.get("/<int:trader_id>/history")
@require_auth
def trader_history_route(trader_id: int):
    try:
        trader = trader_service.get_trader(trader_id)
    except NotFoundError as e:
        return jsonify({"error": str(e)}), 404
    rows = transaction_service.transactions_for_trader(trader.name)
    return jsonify({
        "trader": trader.to_dict(),
        "transactions": [t.to_dict() for t in rows],
    }), 200


@traders_bp.post("")
@require_auth
@require_capability(ADD)
def create_trader_route():
    payload = request.get_json(silent=True) or {}
    try:
        trader = trader_service.create_trader(payload)
    except ValidationError as e:
        return jsonify({"error": str(e)}), 400
    return jsonify({"trader": trader.to_dict()}), 201


@traders_bp.put("/<int:trader_id>")
@require_auth
@require_capability(EDIT)
def update_trader_route(trader_id: int):
    payload = request.get_json(silent=True) or {}
    try:
        trader = trader_service.update_trader(trader_id, payload)
    except ValidationError as e:
        return jsonify({"error": str(e)}), 400
    except NotFoundError as e:
        return jsonify({"error": str(e)}), 404
    return jsonify({"trader": trader.to_dict()}), 200


@traders_bp.delete("/<int:trader_id>")
@require_auth
@require_capability(DELETE)
def delete_trader_route(trader_id: int):
    try:
        trader_service.delete_trader(trader_id)
    except NotFoundError as e:
        return jsonify({"error": str(e)}), 404
    return jsonify({"ok": True}), 200

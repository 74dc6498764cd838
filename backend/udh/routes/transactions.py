# Overview: Flask API routes for transactions; parses input and returns JSON responses.

from flask import Blueprint, request, jsonify, current_app

from ..services import transaction_service
from ..services.transaction_service import TransactionFilters
from ..validation import NotFoundError, ValidationError
from ..decorators import require_auth, require_capability
from ..permissions import ADD, DELETE, EDIT

transactions_bp = Blueprint("transactions", __name__, url_prefix="/api/transactions")


@transactions_bp.get("")
@require_auth
def list_transactions_route():
    """
    List transactions, newest first.

    Query params (all optional):
    - mode: sales | buy
    - date: YYYY-MM-DD
    - name: case-insensitive substring of the trader name
    - product: exact product ("all" = any)
    - size: case-insensitive substring
    - status: purchased | booked | returned ("all" = any)
    - limit: int
    """
    try:
        rows = transaction_service.list_transactions(TransactionFilters.from_args(request.args))
    except ValidationError as e:
        return jsonify({"error": str(e)}), 400
    return jsonify({"transactions": [t.to_dict() for t in rows], "count": len(rows)}), 200


@transactions_bp.get("/<int:transaction_id>")
@require_auth
def get_transaction_route(transaction_id: int):
    try:
        tx = transaction_service.get_transaction(transaction_id)
    except NotFoundError as e:
        return jsonify({"error": str(e)}), 404
    return jsonify({"transaction": tx.to_dict()}), 200


@transactions_bp.post("")
@require_auth
@require_capability(ADD)
def create_transaction_route():
    """
    Record a transaction.

    `contact` is not a transaction field: it is used to create the trader
    when the name is not known yet.
    """
    payload = request.get_json(silent=True) or {}
    contact = payload.pop("contact", None) if isinstance(payload, dict) else None

    try:
        tx = transaction_service.create_transaction(payload, contact=contact)
    except ValidationError as e:
        return jsonify({"error": str(e)}), 400
    except Exception:
        current_app.logger.exception("Failed to create transaction")
        return jsonify({"error": "Internal server error"}), 500

    return jsonify({"transaction": tx.to_dict()}), 201


@transactions_bp.put("/<int:transaction_id>")
@require_auth
@require_capability(EDIT)
def update_transaction_route(transaction_id: int):
    payload = request.get_json(silent=True) or {}
    contact = payload.pop("contact", None) if isinstance(payload, dict) else None

    try:
        tx = transaction_service.update_transaction(transaction_id, payload, contact=contact)
    except ValidationError as e:
        return jsonify({"error": str(e)}), 400
    except NotFoundError as e:
        return jsonify({"error": str(e)}), 404

    return jsonify({"transaction": tx.to_dict()}), 200


@transactions_bp.delete("/<int:transaction_id>")
@require_auth
@require_capability(DELETE)
def delete_transaction_route(transaction_id: int):
    try:
        transaction_service.delete_transaction(transaction_id)
    except NotFoundError as e:
        return jsonify({"error": str(e)}), 404
    return jsonify({"ok": True}), 200

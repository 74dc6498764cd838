from flask import Blueprint, jsonify, request

from udh.decorators import require_auth
from udh.services import dashboard_service
from udh.validation import ValidationError

dashboard_bp = Blueprint("dashboard", __name__, url_prefix="/api/dashboard")


@dashboard_bp.get("")
@require_auth
def dashboard_summary():
    mode = request.args.get("mode", "sales")
    try:
        return jsonify(dashboard_service.summary(mode)), 200
    except ValidationError as exc:
        return jsonify({"error": str(exc)}), 400

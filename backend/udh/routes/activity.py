from flask import Blueprint, jsonify, request

from udh.decorators import require_auth, require_role
from udh.permissions import TECHNICAL_TEAM
from udh.services import activity_service

activity_bp = Blueprint("activity", __name__, url_prefix="/api/activity")


@activity_bp.get("")
@require_auth
@require_role(TECHNICAL_TEAM)
def list_activity():
    limit = request.args.get("limit", default=100, type=int)
    logs = activity_service.list_activity(limit)
    return jsonify({"logs": [entry.to_dict() for entry in logs]}), 200

# Overview: Flask API routes for user administration; parses input and returns JSON responses.

"""
User management routes.

- Technical Team and Owner manage every account
- holders of the addNew capability may create Staff/Worker accounts
- only the Technical Team touches Technical Team accounts
"""

from flask import Blueprint, request, jsonify, g, current_app

from ..extensions import db
from ..models import User
from ..services import auth_service
from ..services.auth_service import PasswordValidationError
from ..validation import ConflictError, NotFoundError, ValidationError
from ..decorators import require_auth, require_role
from ..permissions import ADD_NEW, STAFF, TECHNICAL_TEAM, USER_ADMIN_ROLES, WORKER, can

users_bp = Blueprint("users", __name__, url_prefix="/api/users")


def _is_user_admin() -> bool:
    return g.current_user.role in USER_ADMIN_ROLES


def _touches_technical_team(*roles) -> bool:
    return g.current_user.role != TECHNICAL_TEAM and TECHNICAL_TEAM in roles


@users_bp.get("")
@require_auth
@require_role(*USER_ADMIN_ROLES)
def list_users_route():
    users = auth_service.list_users()
    return jsonify({"users": [u.to_dict() for u in users], "count": len(users)})


@users_bp.post("")
@require_auth
def create_user_route():
    """
    Create a user.

    Request body:
    - username: str (required)
    - password: str (required)
    - role: str (default Staff)
    - permissions: dict (optional, defaults to the role's defaults)
    """
    if not (_is_user_admin() or can(g.current_user, ADD_NEW)):
        return jsonify({"error": "Permission denied", "required_permission": ADD_NEW}), 403

    data = request.get_json(silent=True) or {}
    role = data.get("role") or STAFF

    if _touches_technical_team(role):
        return jsonify({"error": "Only the Technical Team can create Technical Team accounts"}), 403
    if not _is_user_admin() and role not in (STAFF, WORKER):
        return jsonify({"error": f"You can only create {STAFF} or {WORKER} accounts"}), 403

    try:
        user = auth_service.create_user(
            data.get("username"),
            data.get("password") or "",
            role=role,
            permissions=data.get("permissions"),
        )
    except (ValidationError, PasswordValidationError) as e:
        return jsonify({"error": str(e)}), 400
    except ConflictError as e:
        return jsonify({"error": str(e)}), 409
    except Exception:
        current_app.logger.exception("Failed to create user")
        return jsonify({"error": "Internal server error"}), 500

    return jsonify({"user": user.to_dict()}), 201


@users_bp.put("/<int:user_id>")
@require_auth
@require_role(*USER_ADMIN_ROLES)
def update_user_route(user_id: int):
    data = request.get_json(silent=True) or {}

    target = db.session.get(User, user_id)
    if not target:
        return jsonify({"error": "User not found"}), 404
    if _touches_technical_team(target.role, data.get("role")):
        return jsonify({"error": "Only the Technical Team can change Technical Team accounts"}), 403

    try:
        user = auth_service.update_user(
            user_id,
            password=data.get("password") or None,
            role=data.get("role"),
            permissions=data.get("permissions"),
        )
    except (ValidationError, PasswordValidationError) as e:
        return jsonify({"error": str(e)}), 400
    except NotFoundError as e:
        return jsonify({"error": str(e)}), 404

    return jsonify({"user": user.to_dict()}), 200


@users_bp.delete("/<int:user_id>")
@require_auth
@require_role(*USER_ADMIN_ROLES)
def delete_user_route(user_id: int):
    target = db.session.get(User, user_id)
    if not target:
        return jsonify({"error": "User not found"}), 404
    if _touches_technical_team(target.role):
        return jsonify({"error": "Only the Technical Team can delete Technical Team accounts"}), 403

    try:
        auth_service.delete_user(user_id, acting_user_id=g.current_user.id)
    except ValidationError as e:
        return jsonify({"error": str(e)}), 400
    except NotFoundError as e:
        return jsonify({"error": str(e)}), 404

    return jsonify({"ok": True}), 200

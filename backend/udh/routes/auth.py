# Overview: Flask API routes for auth operations; parses input and returns JSON responses.

# backend/udh/routes/auth.py
"""
Authentication API routes

- Token login/logout and the "who am I" lookup used at client boot
- Self-service signup and password reset requests (public)
- Approval/denial of those requests (Technical Team only)
"""

from flask import Blueprint, request, jsonify, current_app, g

from ..services import auth_service
from ..services import session_service
from ..services.auth_service import PasswordValidationError
from ..validation import ConflictError, NotFoundError, ValidationError
from ..decorators import bearer_token, require_auth, require_role
from ..permissions import TECHNICAL_TEAM, WORKER


auth_bp = Blueprint("auth", __name__, url_prefix="/api/auth")


@auth_bp.post("/login")
def login_route():
    """
    Authenticate user and create session token.

    Token must be included in Authorization header for protected routes.
    """
    try:
        data = request.get_json(silent=True) or {}
        username = (data.get("username") or "").strip()
        password = data.get("password")

        if not all([username, password]):
            return jsonify({"error": "username and password required"}), 400

        user = auth_service.authenticate(username, password)
        if not user:
            current_app.logger.info("Failed login for %s from %s", username, request.remote_addr)
            return jsonify({"error": "Invalid credentials"}), 401

        session, token = session_service.create_session(
            user_id=user.id,
            user_agent=request.headers.get("User-Agent"),
            ip_address=request.remote_addr,
        )

        return jsonify({
            "user": user.to_dict(),
            "token": token,
            "session": session.to_dict(),
        }), 200

    except Exception:
        current_app.logger.exception("Failed to login user")
        return jsonify({"error": "Internal server error"}), 500


@auth_bp.get("/me")
@require_auth
def me_route():
    return jsonify({"user": g.current_user.to_dict()}), 200


@auth_bp.post("/logout")
def logout_route():
    """Revoke the bearer token."""
    token = bearer_token()
    if not token:
        return jsonify({"error": "Authorization header required"}), 401

    if not session_service.revoke_session(token, reason="User logout"):
        return jsonify({"error": "Invalid or expired token"}), 401

    return jsonify({"message": "Logout successful"}), 200


@auth_bp.post("/change-tech-pass")
@require_auth
@require_role(TECHNICAL_TEAM)
def change_tech_pass_route():
    data = request.get_json(silent=True) or {}
    try:
        auth_service.change_password(g.current_user, data.get("new_password") or "")
    except PasswordValidationError as e:
        return jsonify({"error": str(e)}), 400
    return jsonify({"message": "Password updated"}), 200


# =============================================================================
# SIGNUP REQUESTS
# =============================================================================

@auth_bp.post("/signup-request")
def signup_request_route():
    data = request.get_json(silent=True) or {}
    try:
        req = auth_service.create_signup_request(data.get("username"), data.get("password") or "")
    except (ValidationError, PasswordValidationError) as e:
        return jsonify({"error": str(e)}), 400
    except ConflictError as e:
        return jsonify({"error": str(e)}), 409
    return jsonify({"request": req.to_dict()}), 201


@auth_bp.get("/signup-requests")
@require_auth
@require_role(TECHNICAL_TEAM)
def list_signup_requests_route():
    requests_ = auth_service.list_signup_requests()
    return jsonify({"requests": [r.to_dict() for r in requests_]}), 200


@auth_bp.post("/approve-signup")
@require_auth
@require_role(TECHNICAL_TEAM)
def approve_signup_route():
    data = request.get_json(silent=True) or {}
    try:
        user = auth_service.approve_signup(data.get("username") or "", role=data.get("role") or WORKER)
    except NotFoundError as e:
        return jsonify({"error": str(e)}), 404
    except ValidationError as e:
        return jsonify({"error": str(e)}), 400
    except ConflictError as e:
        return jsonify({"error": str(e)}), 409
    return jsonify({"user": user.to_dict()}), 201


@auth_bp.post("/deny-signup")
@require_auth
@require_role(TECHNICAL_TEAM)
def deny_signup_route():
    data = request.get_json(silent=True) or {}
    try:
        auth_service.deny_signup(data.get("username") or "")
    except NotFoundError as e:
        return jsonify({"error": str(e)}), 404
    return jsonify({"ok": True}), 200


# =============================================================================
# PASSWORD RESET REQUESTS
# =============================================================================

@auth_bp.post("/request-reset")
def request_reset_route():
    data = request.get_json(silent=True) or {}
    try:
        auth_service.create_pass_request(data.get("username") or "")
    except NotFoundError as e:
        return jsonify({"error": str(e)}), 404
    return jsonify({"ok": True}), 201


@auth_bp.get("/pass-requests")
@require_auth
@require_role(TECHNICAL_TEAM)
def list_pass_requests_route():
    requests_ = auth_service.list_pass_requests()
    return jsonify({"requests": [r.to_dict() for r in requests_]}), 200


@auth_bp.post("/approve-reset")
@require_auth
@require_role(TECHNICAL_TEAM)
def approve_reset_route():
    data = request.get_json(silent=True) or {}
    try:
        new_pass = auth_service.approve_reset(data.get("username") or "")
    except NotFoundError as e:
        return jsonify({"error": str(e)}), 404
    return jsonify({"new_pass": new_pass}), 200


@auth_bp.post("/deny-reset")
@require_auth
@require_role(TECHNICAL_TEAM)
def deny_reset_route():
    data = request.get_json(silent=True) or {}
    try:
        auth_service.deny_reset(data.get("username") or "")
    except NotFoundError as e:
        return jsonify({"error": str(e)}), 404
    return jsonify({"ok": True}), 200

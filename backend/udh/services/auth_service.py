# Overview: Service-layer operations for auth; accounts, passwords and pending requests.

"""
Authentication Service

Uses bcrypt for password hashing. Accounts are created by the Technical Team
or an Owner, or through a signup request the Technical Team approves.

SECURITY NOTES:
- Passwords hashed with bcrypt (cost factor from BCRYPT_ROUNDS, default 12)
- Minimum 6 characters required
- Signup requests store only the bcrypt hash of the requested password
- Session tokens managed separately (see session_service.py)
"""

import logging
import secrets

import bcrypt
from flask import current_app

from ..extensions import db
from ..models import User, SignupRequest, PassRequest
from ..permissions import ROLES, TECHNICAL_TEAM, WORKER, default_permissions_for, normalize_permission_set
from ..validation import ConflictError, NotFoundError, ValidationError
from udh.time_utils import utcnow
from . import activity_service, session_service

logger = logging.getLogger(__name__)

MIN_PASSWORD_LENGTH = 6


class PasswordValidationError(Exception):
    """Raised when password doesn't meet strength requirements."""
    pass


def validate_password_strength(password: str) -> None:
    if not password or len(password) < MIN_PASSWORD_LENGTH:
        raise PasswordValidationError(
            f"Password must be at least {MIN_PASSWORD_LENGTH} characters long"
        )


def _rounds() -> int:
    return int(current_app.config.get("BCRYPT_ROUNDS", 12))


def hash_password(password: str) -> str:
    """Hash password using bcrypt. Password is validated for strength before hashing."""
    validate_password_strength(password)
    salt = bcrypt.gensalt(rounds=_rounds())
    hashed = bcrypt.hashpw(password.encode('utf-8'), salt)
    return hashed.decode('utf-8')  # Store as string in database


def verify_password(password: str, password_hash: str) -> bool:
    """Verify password against bcrypt hash. Malformed hashes never match."""
    try:
        return bcrypt.checkpw(password.encode('utf-8'), password_hash.encode('utf-8'))
    except ValueError:
        return False


def generate_password() -> str:
    """Temporary password handed out when a reset is approved."""
    return secrets.token_urlsafe(6)


def _validate_role(role: str) -> str:
    if role not in ROLES:
        raise ValidationError(f"role must be one of: {', '.join(ROLES)}")
    return role


def _validate_permissions(permissions) -> None:
    if permissions is not None and not isinstance(permissions, dict):
        raise ValidationError("permissions must be an object")


def _require_unique_username(username: str, exclude_id: int | None = None) -> None:
    q = db.session.query(User).filter(db.func.lower(User.username) == username.lower())
    if exclude_id is not None:
        q = q.filter(User.id != exclude_id)
    if q.first():
        raise ConflictError(f"Username {username} already exists")


def authenticate(username: str, password: str) -> User | None:
    """Return the active user matching the credentials, or None."""
    user = db.session.query(User).filter_by(username=username).first()
    if not user or not user.is_active:
        return None
    if not verify_password(password, user.password_hash):
        return None

    user.last_login_at = utcnow()
    db.session.commit()
    return user


def create_user(
    username: str,
    password: str,
    role: str = WORKER,
    permissions: dict | None = None,
    *,
    password_hash: str | None = None,
) -> User:
    """
    Create a user account.

    permissions default to the role's defaults. A precomputed password_hash
    (approved signup requests) skips hashing.

    Raises:
        ValidationError: blank username or unknown role
        ConflictError: username taken
        PasswordValidationError: weak password
    """
    username = (username or "").strip()
    if not username:
        raise ValidationError("username is required")
    _validate_role(role)
    _validate_permissions(permissions)
    _require_unique_username(username)

    if password_hash is None:
        password_hash = hash_password(password)

    if permissions is None:
        permissions = default_permissions_for(role)

    user = User(
        username=username,
        password_hash=password_hash,
        role=role,
        permissions=normalize_permission_set(permissions),
        is_active=True,
    )
    db.session.add(user)
    db.session.flush()
    activity_service.record("user.create", {"username": username, "role": role})
    db.session.commit()
    logger.info("Created user %s (%s)", username, role)
    return user


def update_user(
    user_id: int,
    *,
    password: str | None = None,
    role: str | None = None,
    permissions: dict | None = None,
) -> User:
    user = db.session.get(User, user_id)
    if not user:
        raise NotFoundError("User not found")
    _validate_permissions(permissions)

    changed = []
    if role is not None:
        user.role = _validate_role(role)
        changed.append("role")
    if permissions is not None:
        # Reassign so the JSON column is flagged dirty
        user.permissions = normalize_permission_set(permissions)
        changed.append("permissions")
    if password:
        user.password_hash = hash_password(password)
        session_service.revoke_user_sessions(user.id, reason="Password changed")
        changed.append("password")

    activity_service.record("user.update", {"username": user.username, "fields": changed})
    db.session.commit()
    return user


def delete_user(user_id: int, *, acting_user_id: int | None = None) -> None:
    if acting_user_id is not None and user_id == acting_user_id:
        raise ValidationError("You cannot delete your own account")

    user = db.session.get(User, user_id)
    if not user:
        raise NotFoundError("User not found")

    activity_service.record("user.delete", {"username": user.username})
    db.session.delete(user)
    db.session.commit()


def list_users() -> list[User]:
    return db.session.query(User).order_by(User.username.asc()).all()


def change_password(user: User, new_password: str) -> None:
    user.password_hash = hash_password(new_password)
    activity_service.record("auth.change_password", {"username": user.username})
    db.session.commit()


# -- Signup requests --

def create_signup_request(username: str, password: str) -> SignupRequest:
    username = (username or "").strip()
    if not username:
        raise ValidationError("username is required")
    _require_unique_username(username)
    if db.session.query(SignupRequest).filter_by(username=username).first():
        raise ConflictError("A signup request for this username is already pending")

    req = SignupRequest(
        username=username,
        password_hash=hash_password(password),
        requested_at=utcnow(),
    )
    db.session.add(req)
    db.session.commit()
    logger.info("Signup requested for %s", username)
    return req


def list_signup_requests() -> list[SignupRequest]:
    return db.session.query(SignupRequest).order_by(SignupRequest.requested_at.asc()).all()


def _pending_signup(username: str) -> SignupRequest:
    req = db.session.query(SignupRequest).filter_by(username=username).first()
    if not req:
        raise NotFoundError("Signup request not found")
    return req


def approve_signup(username: str, role: str = WORKER) -> User:
    req = _pending_signup(username)
    if role == TECHNICAL_TEAM:
        raise ValidationError("Signup requests cannot be approved as Technical Team")
    password_hash = req.password_hash
    db.session.delete(req)
    return create_user(username, "", role=role, password_hash=password_hash)


def deny_signup(username: str) -> None:
    req = _pending_signup(username)
    db.session.delete(req)
    activity_service.record("auth.deny_signup", {"username": username})
    db.session.commit()


# -- Password reset requests --

def create_pass_request(username: str) -> PassRequest:
    username = (username or "").strip()
    user = db.session.query(User).filter_by(username=username).first()
    if not user:
        raise NotFoundError("User not found")

    req = db.session.query(PassRequest).filter_by(username=username).first()
    if req:
        req.requested_at = utcnow()
    else:
        req = PassRequest(username=username, requested_at=utcnow())
        db.session.add(req)
    db.session.commit()
    return req


def list_pass_requests() -> list[PassRequest]:
    return db.session.query(PassRequest).order_by(PassRequest.requested_at.asc()).all()


def _pending_reset(username: str) -> PassRequest:
    req = db.session.query(PassRequest).filter_by(username=username).first()
    if not req:
        raise NotFoundError("Reset request not found")
    return req


def approve_reset(username: str) -> str:
    """Reset the password to a generated one and return it in plaintext."""
    req = _pending_reset(username)
    user = db.session.query(User).filter_by(username=username).first()
    if not user:
        raise NotFoundError("User not found")

    new_pass = generate_password()
    user.password_hash = hash_password(new_pass)
    session_service.revoke_user_sessions(user.id, reason="Password reset")
    db.session.delete(req)
    activity_service.record("auth.approve_reset", {"username": username})
    db.session.commit()
    return new_pass


def deny_reset(username: str) -> None:
    req = _pending_reset(username)
    db.session.delete(req)
    activity_service.record("auth.deny_reset", {"username": username})
    db.session.commit()

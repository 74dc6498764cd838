# Overview: Append-only activity log written alongside every mutation.

from __future__ import annotations

from typing import Any

from flask import g, has_request_context, request

from ..extensions import db
from ..models import ActivityLog
from udh.time_utils import utcnow

MAX_LIST_LIMIT = 500


def record(action: str, details: Any = None) -> ActivityLog:
    """
    Append an activity entry inside the caller's DB transaction.

    The actor and client IP come from the request context when there is one
    (CLI commands log with no actor).
    """
    user = None
    ip_address = None
    if has_request_context():
        user = getattr(g, "current_user", None)
        ip_address = request.remote_addr

    entry = ActivityLog(
        user_id=user.id if user else None,
        username=user.username if user else None,
        role=user.role if user else None,
        action=action,
        details=details,
        ip_address=ip_address,
        timestamp=utcnow(),
    )
    db.session.add(entry)
    return entry


def list_activity(limit: int = 100) -> list[ActivityLog]:
    limit = max(1, min(limit, MAX_LIST_LIMIT))
    return (
        db.session.query(ActivityLog)
        .order_by(ActivityLog.timestamp.desc(), ActivityLog.id.desc())
        .limit(limit)
        .all()
    )

# Overview: Role names, default capability sets and the role union used by the evaluator.

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Any, Mapping, Union

from .definitions import ADD, ADD_NEW, BACKUP, DELETE, EDIT, LIMITS, PRINT, REPORTS
from .helpers import normalize_permission_set

TECHNICAL_TEAM = "Technical Team"
OWNER = "Owner"
STAFF = "Staff"
WORKER = "Worker"

ROLES = (TECHNICAL_TEAM, OWNER, STAFF, WORKER)

# Roles allowed to manage user accounts outright
USER_ADMIN_ROLES = (TECHNICAL_TEAM, OWNER)

# Flags given to a fresh account of each role. Technical Team ignores flags.
DEFAULT_ROLE_PERMISSIONS = {
    TECHNICAL_TEAM: [ADD, EDIT, DELETE, REPORTS, LIMITS, BACKUP, PRINT, ADD_NEW],
    OWNER: [ADD, EDIT, DELETE, REPORTS, LIMITS, BACKUP, PRINT, ADD_NEW],
    STAFF: [ADD, EDIT, REPORTS, PRINT],
    WORKER: [ADD, PRINT],
}


@dataclass(frozen=True)
class SuperuserRole:
    """Every capability is granted."""
    name: str = TECHNICAL_TEAM


@dataclass(frozen=True)
class FlaggedRole:
    """Capabilities come from the explicit permission set."""
    name: str
    permissions: Mapping[str, bool] = field(default_factory=dict)


Role = Union[SuperuserRole, FlaggedRole]


def default_permissions_for(role: str) -> dict[str, bool]:
    granted = DEFAULT_ROLE_PERMISSIONS.get(role, [])
    return normalize_permission_set({code: True for code in granted})


def _attr(user: Any, name: str):
    if isinstance(user, Mapping):
        return user.get(name)
    return getattr(user, name, None)


def resolve_role(user: Any) -> Role | None:
    """
    Turn a user (model instance or API dict) into its role variant.

    Returns None when there is no user.
    """
    if user is None:
        return None
    role_name = _attr(user, "role")
    if role_name == TECHNICAL_TEAM:
        return SuperuserRole()
    perms = _attr(user, "permissions")
    if not isinstance(perms, Mapping):
        perms = {}
    return FlaggedRole(name=role_name or "", permissions=perms)

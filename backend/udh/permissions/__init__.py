# Overview: Permission system package.
# Re-exports the public API used by routes, services and the client store.

from .definitions import (
    ADD,
    ADD_NEW,
    BACKUP,
    CAPABILITY_DEFINITIONS,
    DELETE,
    EDIT,
    LIMITS,
    PRINT,
    REPORTS,
)
from .roles import (
    DEFAULT_ROLE_PERMISSIONS,
    OWNER,
    ROLES,
    STAFF,
    TECHNICAL_TEAM,
    USER_ADMIN_ROLES,
    WORKER,
    FlaggedRole,
    SuperuserRole,
    default_permissions_for,
    resolve_role,
)
from .helpers import (
    empty_permission_set,
    get_all_capability_codes,
    get_capability_definition,
    normalize_permission_set,
    validate_capability_code,
)
from .evaluator import can

__all__ = [
    "ADD",
    "ADD_NEW",
    "BACKUP",
    "CAPABILITY_DEFINITIONS",
    "DELETE",
    "EDIT",
    "LIMITS",
    "PRINT",
    "REPORTS",
    "DEFAULT_ROLE_PERMISSIONS",
    "OWNER",
    "ROLES",
    "STAFF",
    "TECHNICAL_TEAM",
    "USER_ADMIN_ROLES",
    "WORKER",
    "FlaggedRole",
    "SuperuserRole",
    "default_permissions_for",
    "resolve_role",
    "empty_permission_set",
    "get_all_capability_codes",
    "get_capability_definition",
    "normalize_permission_set",
    "validate_capability_code",
    "can",
]

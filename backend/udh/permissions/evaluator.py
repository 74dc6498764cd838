# Overview: Single dispatch point answering "may this user do that".

from typing import Any

from .roles import FlaggedRole, SuperuserRole, resolve_role


def can(user: Any, capability: str) -> bool:
    """
    Whether `user` holds `capability`.

    - no user -> False
    - Technical Team -> True, whatever the flags say
    - otherwise the flag on the user's permission set, False when absent
    """
    role = resolve_role(user)
    if role is None:
        return False
    if isinstance(role, SuperuserRole):
        return True
    if isinstance(role, FlaggedRole):
        return bool(role.permissions.get(capability, False))
    return False

# Overview: Utility functions for capability lookups and validation.

from typing import Any, Mapping

from .definitions import CAPABILITY_DEFINITIONS


def get_all_capability_codes():
    """Get list of all capability codes."""
    return [cap[0] for cap in CAPABILITY_DEFINITIONS]


def get_capability_definition(code):
    """Get full definition for a capability code."""
    for cap in CAPABILITY_DEFINITIONS:
        if cap[0] == code:
            return {
                "code": cap[0],
                "name": cap[1],
                "description": cap[2],
            }
    return None


def validate_capability_code(code):
    """Check if a capability code is valid."""
    return code in get_all_capability_codes()


def empty_permission_set() -> dict[str, bool]:
    return {code: False for code in get_all_capability_codes()}


def normalize_permission_set(raw: Mapping[str, Any] | None) -> dict[str, bool]:
    """Every known capability as a strict bool; unknown keys are dropped."""
    perms = empty_permission_set()
    if raw:
        for code in perms:
            perms[code] = bool(raw.get(code, False))
    return perms

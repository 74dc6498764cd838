from __future__ import annotations
from datetime import date, datetime
from udh.time_utils import parse_iso_date

from dataclasses import dataclass, field
from typing import Any

from sqlalchemy import Boolean, Date, Float, Integer, String, Text


# Upper bound for any money field (rupees)
MAX_AMOUNT = 999_999_999


class ValidationError(ValueError):
    """400-level input problem."""


class ConflictError(ValueError):
    """409-level business rule conflict (e.g., duplicate catalog entry)."""


class NotFoundError(LookupError):
    """404-level missing record."""


@dataclass(frozen=True)
class ModelValidationPolicy:
    """
    Central policy layer:
    - writable_fields: what clients are allowed to set (security boundary)
    - required_on_create: fields required for POST
    - read_only_fields: echoed back by clients (edit forms, backups); silently dropped
    """
    writable_fields: set[str]
    required_on_create: set[str] = field(default_factory=set)
    read_only_fields: set[str] = field(default_factory=lambda: {"id", "created_at", "updated_at"})


def _columns_by_key(model) -> dict[str, Any]:
    mapper = model.__mapper__
    return {c.key: c for c in mapper.columns}


def _coerce_int(col, value: Any) -> int:
    # Already an int (but not bool which is a subclass of int)
    if isinstance(value, int) and not isinstance(value, bool):
        return value
    # Whole floats come from JS number inputs
    if isinstance(value, float):
        if value.is_integer():
            return int(value)
        raise ValidationError(f"{col.key} must be an integer, not a decimal")
    if isinstance(value, str):
        stripped = value.strip()
        if not stripped:
            raise ValidationError(f"{col.key} must be an integer")
        if 'e' in stripped.lower():
            raise ValidationError(f"{col.key} must be a plain integer (scientific notation not allowed)")
        if '.' in stripped:
            raise ValidationError(f"{col.key} must be an integer (no decimals)")
        try:
            return int(stripped)
        except ValueError:
            raise ValidationError(f"{col.key} must be an integer")
    raise ValidationError(f"{col.key} must be an integer")


def _coerce_float(col, value: Any) -> float:
    if isinstance(value, bool):
        raise ValidationError(f"{col.key} must be a number")
    if isinstance(value, (int, float)):
        result = float(value)
    elif isinstance(value, str):
        try:
            result = float(value.strip())
        except ValueError:
            raise ValidationError(f"{col.key} must be a number")
    else:
        raise ValidationError(f"{col.key} must be a number")
    # Rejects NaN and infinities
    if result != result or result in (float("inf"), float("-inf")):
        raise ValidationError(f"{col.key} must be a finite number")
    return result


def _coerce_value(col, value: Any):
    coltype = col.type

    if value is None:
        return None

    if isinstance(coltype, Integer):
        return _coerce_int(col, value)

    if isinstance(coltype, Float):
        return _coerce_float(col, value)

    if isinstance(coltype, Boolean):
        if isinstance(value, bool):
            return value
        # fallback: truthiness
        return bool(value)

    # Calendar days (accept "YYYY-MM-DD" or full ISO-8601 datetimes)
    if isinstance(coltype, Date):
        if isinstance(value, (date, datetime)):
            return parse_iso_date(value)
        if isinstance(value, str):
            try:
                d = parse_iso_date(value)
            except ValueError:
                raise ValidationError(f"{col.key} must be an ISO-8601 date")
            return d
        raise ValidationError(f"{col.key} must be a date")

    if isinstance(coltype, (String, Text)):
        return str(value).strip()

    # Default: leave as-is
    return value


def validate_payload(
    *,
    model,
    payload: dict,
    policy: ModelValidationPolicy,
    partial: bool,
) -> dict:
    """
    Validates + normalizes incoming JSON against:
    - SQLAlchemy column metadata (nullable, type, String length)
    - a policy allowlist (writable_fields)
    - required_on_create (if partial=False)
    Returns a cleaned patch dict with only writable fields.

    partial=False: create semantics (enforce required_on_create)
    partial=True: patch semantics (validate only provided keys)
    """
    if payload is None:
        payload = {}
    if not isinstance(payload, dict):
        raise ValidationError("Invalid JSON payload")

    payload = {k: v for k, v in payload.items() if k not in policy.read_only_fields}

    if not partial:
        missing = sorted(f for f in policy.required_on_create if payload.get(f) in (None, ""))
        if missing:
            raise ValidationError(f"Missing required fields: {', '.join(missing)}")

    cols = _columns_by_key(model)

    # Reject unknown / non-writable fields
    for k in payload.keys():
        if k not in policy.writable_fields:
            raise ValidationError(f"Field not allowed: {k}")
        if k not in cols:
            raise ValidationError(f"Unknown field: {k}")

    patch: dict = {}

    for k, raw in payload.items():
        col = cols[k]

        # Blank optional inputs from HTML forms mean "not set"
        if isinstance(raw, str) and raw.strip() == "" and col.nullable:
            raw = None

        if raw is None:
            if not col.nullable:
                raise ValidationError(f"{k} cannot be null")
            patch[k] = None
            continue

        val = _coerce_value(col, raw)

        # Blank string check for non-nullable text fields
        if isinstance(col.type, (String, Text)) and not col.nullable:
            if isinstance(val, str) and val == "":
                raise ValidationError(f"{k} cannot be blank")

        # Max length check for String(n)
        if isinstance(col.type, String) and col.type.length and isinstance(val, str):
            if len(val) > col.type.length:
                raise ValidationError(f"{k} exceeds max length {col.type.length}")

        patch[k] = val

    return patch


def _check_amount(patch: dict, key: str) -> None:
    value = patch.get(key)
    if value is None:
        return
    if value < 0:
        raise ValidationError(f"{key} must be >= 0")
    if value > MAX_AMOUNT:
        raise ValidationError(f"{key} cannot exceed {MAX_AMOUNT:,}")


def enforce_rules_transaction(patch: dict) -> None:
    """
    Business rules that are not captured by SQLAlchemy metadata alone.
    Keep these small and centralized.
    """
    if "type" in patch and patch["type"] not in ("buy", "sell"):
        raise ValidationError("type must be buy or sell")

    if "status" in patch and patch["status"] not in ("purchased", "booked", "returned"):
        raise ValidationError("status must be purchased, booked or returned")

    if "qty" in patch and (patch["qty"] is None or patch["qty"] < 1):
        raise ValidationError("Quantity must be at least 1.")

    _check_amount(patch, "amount")
    _check_amount(patch, "paid_amount")

    # Fully settled means everything was paid
    if patch.get("status") == "purchased" and patch.get("amount") is not None:
        patch["paid_amount"] = patch["amount"]


def enforce_rules_catalog(patch: dict) -> None:
    if "type" in patch and patch["type"] not in ("sales", "buy"):
        raise ValidationError("type must be sales or buy")

    _check_amount(patch, "price")

    if patch.get("limit") is not None and patch["limit"] < 0:
        raise ValidationError("limit must be >= 0")


def enforce_rules_trader(patch: dict) -> None:
    if "type" in patch and patch["type"] not in ("Customer", "Dealer"):
        raise ValidationError("type must be Customer or Dealer")

from __future__ import annotations
from datetime import date, datetime
from textrack.time_utils import parse_iso_date

from dataclasses import dataclass
from typing import Any

from sqlalchemy import Date, Integer, String, Text
from sqlalchemy.orm import DeclarativeMeta


# Maximum price: $9,999,999.99 (999,999,999 cents)
# This prevents database overflow issues and nonsensical prices
MAX_PRICE_CENTS = 999_999_999

# Upper bound for a single order; keeps price_cents * quantity inside 64-bit range
MAX_QUANTITY = 1_000_000

# Statuses a client may set directly. "completed" is only reached through progress.
EDITABLE_STATUSES = {"pending", "priority"}


class ValidationError(ValueError):
    """400-level input problem."""


class ConflictError(ValueError):
    """409-level business rule conflict (e.g., stale product version)."""


@dataclass(frozen=True)
class ModelValidationPolicy:
    """
    Central policy layer:
    - writable_fields: what clients are allowed to set (security boundary)
    - required_on_create: fields required for POST
    """
    writable_fields: set[str]
    required_on_create: set[str] = None  # type: ignore


def _columns_by_key(model: DeclarativeMeta) -> dict[str, Any]:
    mapper = model.__mapper__
    return {c.key: c for c in mapper.columns}


def _coerce_value(col, value: Any):
    coltype = col.type

    if value is None:
        return None

    # Integers - strict validation to reject floats and scientific notation
    if isinstance(coltype, Integer):
        # Already an int (but not bool which is a subclass of int)
        if isinstance(value, int) and not isinstance(value, bool):
            return value
        # String input - must be plain digits (with optional leading minus)
        if isinstance(value, str):
            stripped = value.strip()
            if not stripped:
                raise ValidationError(f"{col.key} must be an integer")
            # Reject scientific notation (e.g., "1e15", "1E10")
            if 'e' in stripped.lower():
                raise ValidationError(f"{col.key} must be a plain integer (scientific notation not allowed)")
            # Reject decimal points (e.g., "12.5")
            if '.' in stripped:
                raise ValidationError(f"{col.key} must be an integer (no decimals)")
            try:
                return int(stripped)
            except ValueError:
                raise ValidationError(f"{col.key} must be an integer")
        # Reject floats explicitly
        if isinstance(value, float):
            raise ValidationError(f"{col.key} must be an integer, not a decimal")
        # Other types
        raise ValidationError(f"{col.key} must be an integer")

    # Calendar dates ("YYYY-MM-DD")
    if isinstance(coltype, Date):
        if isinstance(value, datetime):
            return value.date()
        if isinstance(value, date):
            return value
        if isinstance(value, str):
            try:
                d = parse_iso_date(value)
            except ValueError:
                raise ValidationError(f"{col.key} must be an ISO-8601 date (YYYY-MM-DD)")
            if d is None:
                raise ValidationError(f"{col.key} must be an ISO-8601 date (YYYY-MM-DD)")
            return d
        raise ValidationError(f"{col.key} must be a date")

    # Strings / Text
    if isinstance(coltype, (String, Text)):
        return str(value).strip()

    # Default: leave as-is
    return value


def validate_payload(
    *,
    model: DeclarativeMeta,
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

    required = policy.required_on_create or set()
    if not partial:
        missing = sorted(f for f in required if f not in payload)
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

        # NULL handling
        if raw is None:
            if not col.nullable:
                raise ValidationError(f"{k} cannot be null")
            patch[k] = None
            continue

        val = _coerce_value(col, raw)

        # Blank string check for required text fields
        if isinstance(col.type, (String, Text)) and k in required:
            if isinstance(val, str) and val == "":
                raise ValidationError(f"{k} cannot be blank")

        # Max length check for String(n)
        if isinstance(col.type, String) and col.type.length and isinstance(val, str):
            if len(val) > col.type.length:
                raise ValidationError(f"{k} exceeds max length {col.type.length}")

        patch[k] = val

    return patch


def enforce_rules_product(patch: dict) -> None:
    """
    Business rules that are not captured by SQLAlchemy metadata alone.
    Keep these small and centralized.
    """
    if "quantity" in patch:
        qty = patch["quantity"]
        if qty is None or qty <= 0:
            raise ValidationError("quantity must be > 0")
        if qty > MAX_QUANTITY:
            raise ValidationError(f"quantity cannot exceed {MAX_QUANTITY}")

    if "price_cents" in patch and patch["price_cents"] is not None:
        price = patch["price_cents"]
        if not isinstance(price, int):
            raise ValidationError("price_cents must be an integer")
        # Range checks
        if price < 0:
            raise ValidationError("price_cents must be >= 0")
        if price > MAX_PRICE_CENTS:
            raise ValidationError(f"price_cents cannot exceed {MAX_PRICE_CENTS} (${MAX_PRICE_CENTS / 100:,.2f})")

    if "status" in patch and patch["status"] is not None:
        if patch["status"] not in EDITABLE_STATUSES:
            raise ValidationError(f"status must be one of: {', '.join(sorted(EDITABLE_STATUSES))}")


def enforce_rules_progress(quantity: Any, *, remaining: int) -> int:
    """
    Progress quantity must be a positive integer no larger than what is left.
    Returns the normalized integer.
    """
    if isinstance(quantity, bool):
        raise ValidationError("Enter a valid quantity")
    if isinstance(quantity, str):
        stripped = quantity.strip()
        if not stripped.isdigit():
            raise ValidationError("Enter a valid quantity")
        quantity = int(stripped)
    if not isinstance(quantity, int):
        raise ValidationError("Enter a valid quantity")
    if quantity <= 0:
        raise ValidationError("Enter a valid quantity")
    if quantity > remaining:
        raise ValidationError(f"You can only add up to {remaining} units")
    return quantity


def parse_year_month(args, *, default: date) -> tuple[int, int]:
    """
    Read "year" and "month" query params, falling back to default's.

    Malformed values raise ValidationError; the month range itself is
    checked by the history reads.
    """
    out = []
    for key, fallback in (("year", default.year), ("month", default.month)):
        raw = args.get(key)
        if raw is None or raw.strip() == "":
            out.append(fallback)
            continue
        stripped = raw.strip()
        if not stripped.isdigit():
            raise ValidationError(f"{key} must be an integer")
        out.append(int(stripped))
    return out[0], out[1]

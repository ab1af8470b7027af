from __future__ import annotations

import re
from dataclasses import dataclass
from datetime import date, datetime
from decimal import Decimal, InvalidOperation
from typing import Any

from sqlalchemy import Boolean, Date, DateTime, Integer, Numeric, String, Text
from sqlalchemy.orm import DeclarativeMeta

from .errors import ValidationError, ConflictError  # noqa: F401  (re-exported)
from .time_utils import parse_iso_datetime, parse_iso_date, utcnow


# Maximum money value that fits NUMERIC(13, 4)
MAX_MONEY = Decimal("999999999.9999")

UPC_RE = re.compile(r"^\d{12}$")
CHECK_NUMBER_RE = re.compile(r"^CHECK\d{3}$")
EMPLOYEE_ID_RE = re.compile(r"^E\d{3}$")
CARD_NUMBER_RE = re.compile(r"^\d{12}$")
PHONE_RE = re.compile(r"^\+380\d{9}$")
EMAIL_RE = re.compile(r"^[^\s@]+@[^\s@]+\.[^\s@]+$")

MIN_EMPLOYEE_AGE_YEARS = 18
MIN_PASSWORD_LENGTH = 8


@dataclass(frozen=True)
class ModelValidationPolicy:
    """
    Central policy layer:
    - writable_fields: what clients are allowed to set (security boundary)
    - required_on_create: fields required for POST
    - extra_fields: accepted keys that are not model columns (e.g. password)
    """
    writable_fields: set[str]
    required_on_create: set[str] = None  # type: ignore
    extra_fields: set[str] | None = None


def _columns_by_key(model: DeclarativeMeta) -> dict[str, Any]:
    mapper = model.__mapper__
    return {c.key: c for c in mapper.columns}


def coerce_int(key: str, value: Any) -> int:
    # Already an int (but not bool which is a subclass of int)
    if isinstance(value, int) and not isinstance(value, bool):
        return value
    # String input - must be plain digits (with optional leading minus)
    if isinstance(value, str):
        stripped = value.strip()
        if not stripped:
            raise ValidationError(f"{key} must be an integer")
        if 'e' in stripped.lower():
            raise ValidationError(f"{key} must be a plain integer (scientific notation not allowed)")
        if '.' in stripped:
            raise ValidationError(f"{key} must be an integer (no decimals)")
        try:
            return int(stripped)
        except ValueError:
            raise ValidationError(f"{key} must be an integer")
    if isinstance(value, float):
        raise ValidationError(f"{key} must be an integer, not a decimal")
    raise ValidationError(f"{key} must be an integer")


def coerce_decimal(key: str, value: Any) -> Decimal:
    if isinstance(value, bool):
        raise ValidationError(f"{key} must be a number")
    if isinstance(value, Decimal):
        result = value
    elif isinstance(value, (int, float, str)):
        try:
            # str() keeps floats like 12.1 from turning into 12.0999999...
            result = Decimal(str(value).strip())
        except InvalidOperation:
            raise ValidationError(f"{key} must be a number")
    else:
        raise ValidationError(f"{key} must be a number")
    if not result.is_finite():
        raise ValidationError(f"{key} must be a finite number")
    if abs(result) > MAX_MONEY:
        raise ValidationError(f"{key} cannot exceed {MAX_MONEY}")
    return result


def _coerce_value(col, value: Any):
    coltype = col.type

    if value is None:
        return None

    if isinstance(coltype, Integer):
        return coerce_int(col.key, value)

    if isinstance(coltype, Numeric):
        return coerce_decimal(col.key, value)

    # Booleans
    if isinstance(coltype, Boolean):
        if isinstance(value, bool):
            return value
        if isinstance(value, str) and value.strip().lower() in {"true", "false"}:
            return value.strip().lower() == "true"
        raise ValidationError(f"{col.key} must be a boolean")

    # Datetimes (accept ISO-8601 strings; normalize to UTC)
    if isinstance(coltype, DateTime):
        if isinstance(value, datetime):
            return value
        if isinstance(value, str):
            try:
                dt = parse_iso_datetime(value)
            except ValueError:
                raise ValidationError(f"{col.key} must be an ISO-8601 datetime")
            if dt is None:
                raise ValidationError(f"{col.key} must be an ISO-8601 datetime")
            return dt
        raise ValidationError(f"{col.key} must be a datetime")

    if isinstance(coltype, Date):
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

    Keys in policy.extra_fields are passed through untouched; the caller
    validates them.
    """
    if payload is None:
        payload = {}
    if not isinstance(payload, dict):
        raise ValidationError("Invalid JSON payload")

    required = policy.required_on_create or set()
    extra = policy.extra_fields or set()
    if not partial:
        missing = sorted(f for f in required if payload.get(f) in (None, ""))
        if missing:
            raise ValidationError(f"Missing required fields: {', '.join(missing)}")

    cols = _columns_by_key(model)

    # Reject unknown / non-writable fields
    for k in payload.keys():
        if k not in policy.writable_fields and k not in extra:
            raise ValidationError(f"Field not allowed: {k}")
        if k not in cols and k not in extra:
            raise ValidationError(f"Unknown field: {k}")

    patch: dict = {}

    for k, raw in payload.items():
        if k in extra:
            patch[k] = raw
            continue

        col = cols[k]

        # NULL handling
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


# -- Format rules --

def require_format(key: str, value: Any, pattern: re.Pattern, description: str) -> str:
    if not isinstance(value, str) or not pattern.match(value):
        raise ValidationError(f"{key} must be {description}")
    return value


def validate_upc(value: Any, key: str = "upc") -> str:
    return require_format(key, value, UPC_RE, "12 digits")


def validate_check_number(value: Any, key: str = "check_number") -> str:
    return require_format(key, value, CHECK_NUMBER_RE, "in format CHECK followed by 3 digits")


def validate_employee_id(value: Any, key: str = "id_employee") -> str:
    return require_format(key, value, EMPLOYEE_ID_RE, "in format E followed by 3 digits")


def validate_card_number(value: Any, key: str = "card_number") -> str:
    return require_format(key, value, CARD_NUMBER_RE, "12 digits")


def _require_non_negative(patch: dict, key: str) -> None:
    if key in patch and patch[key] is not None and patch[key] < 0:
        raise ValidationError(f"{key} must be >= 0")


def enforce_rules_employee(patch: dict, *, partial: bool) -> None:
    """
    Business rules that are not captured by SQLAlchemy metadata alone.
    Keep these small and centralized.
    """
    if "id_employee" in patch:
        validate_employee_id(patch["id_employee"])
    if "role" in patch and patch["role"] not in {"manager", "cashier"}:
        raise ValidationError("role must be one of: manager, cashier")
    if "salary" in patch and patch["salary"] is not None and patch["salary"] <= 0:
        raise ValidationError("salary must be > 0")
    if "phone_number" in patch:
        require_format("phone_number", patch["phone_number"], PHONE_RE, "in format +380XXXXXXXXX")
    if "email" in patch:
        require_format("email", patch["email"], EMAIL_RE, "a valid email address")

    today = utcnow().date()
    birth = patch.get("date_of_birth")
    if birth is not None:
        if birth > today:
            raise ValidationError("date_of_birth cannot be in the future")
        age = today.year - birth.year - ((today.month, today.day) < (birth.month, birth.day))
        if age < MIN_EMPLOYEE_AGE_YEARS:
            raise ValidationError(f"Employee must be at least {MIN_EMPLOYEE_AGE_YEARS} years old")
    start = patch.get("date_of_start")
    if start is not None and start > today:
        raise ValidationError("date_of_start cannot be in the future")

    if patch.get("password") is not None:
        password = patch["password"]
        if not isinstance(password, str) or len(password) < MIN_PASSWORD_LENGTH:
            raise ValidationError(f"password must be at least {MIN_PASSWORD_LENGTH} characters long")

    # Staff records may exist without a login; a login needs both halves
    if not partial and bool(patch.get("email")) != bool(patch.get("password")):
        raise ValidationError("email and password must be provided together")


def enforce_rules_store_product(patch: dict) -> None:
    if "upc" in patch:
        validate_upc(patch["upc"])
    if patch.get("upc_prom") is not None:
        validate_upc(patch["upc_prom"], key="upc_prom")
    _require_non_negative(patch, "selling_price")
    _require_non_negative(patch, "quantity")


def enforce_rules_customer_card(patch: dict) -> None:
    if "card_number" in patch:
        validate_card_number(patch["card_number"])
    if "phone_number" in patch:
        require_format("phone_number", patch["phone_number"], PHONE_RE, "in format +380XXXXXXXXX")
    if "percent" in patch and patch["percent"] is not None:
        if not 0 <= patch["percent"] <= 100:
            raise ValidationError("percent must be between 0 and 100")

from __future__ import annotations

from ..core.exceptions import InvalidAmountError, ValidationError


def require_non_empty(value: str, field_name: str) -> str:
    if not value or not str(value).strip():
        raise ValidationError(f"{field_name} is required")
    return str(value).strip()


def require_amount(value: object, field_name: str = "amount") -> int:
    """Whole minor units; booleans and fractional values are rejected."""
    if isinstance(value, bool) or not isinstance(value, int):
        raise InvalidAmountError(f"{field_name} must be an integer amount in minor units")
    return value


def require_positive_amount(value: object, field_name: str = "amount") -> int:
    amount = require_amount(value, field_name)
    if amount <= 0:
        raise InvalidAmountError(f"{field_name} must be greater than zero")
    return amount


def require_non_zero_amount(value: object, field_name: str = "amount") -> int:
    amount = require_amount(value, field_name)
    if amount == 0:
        raise InvalidAmountError(f"{field_name} must not be zero")
    return amount

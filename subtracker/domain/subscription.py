"""
Subscription input validation.

SubscriptionInput carries the fields of a new subscription.
SubscriptionUpdate carries a partial update: every field defaults to UNSET,
so "not provided" and "explicitly cleared" stay distinct (notes=None clears
the notes, leaving notes at UNSET keeps them).
"""
from dataclasses import dataclass, fields
from datetime import date
from decimal import Decimal, InvalidOperation
from typing import Any

from subtracker.domain.billing_cycle import BILLING_CYCLES
from subtracker.domain.errors import ValidationError

MAX_NAME_LENGTH = 255
MAX_AMOUNT_DECIMAL_PLACES = 2
# Numeric(12, 2) column
MAX_AMOUNT = Decimal("9999999999.99")


class _Unset:
    def __repr__(self) -> str:
        return "UNSET"

    def __bool__(self) -> bool:
        return False


UNSET: Any = _Unset()


@dataclass
class SubscriptionInput:
    name: str
    amount: Decimal
    billing_cycle: str
    next_billing_date: date
    start_date: date | None = None
    currency: str | None = None  # None -> settings default
    category_id: str | None = None  # None -> "other"
    notes: str | None = None
    is_active: bool = True
    reminder_days: list[int] | None = None  # None -> settings default


@dataclass
class SubscriptionUpdate:
    name: str = UNSET
    amount: Decimal = UNSET
    currency: str = UNSET
    billing_cycle: str = UNSET
    next_billing_date: date = UNSET
    start_date: date = UNSET
    category_id: str = UNSET
    notes: str | None = UNSET
    is_active: bool = UNSET
    reminder_days: list[int] = UNSET

    def provided(self) -> dict[str, Any]:
        """Only the fields that were explicitly set."""
        return {
            f.name: getattr(self, f.name)
            for f in fields(self)
            if getattr(self, f.name) is not UNSET
        }


def validate_name(name: str) -> str:
    name = (name or "").strip()
    if not name:
        raise ValidationError("Name must not be empty")
    if len(name) > MAX_NAME_LENGTH:
        raise ValidationError(f"Name must be at most {MAX_NAME_LENGTH} characters")
    return name


def validate_amount(value) -> Decimal:
    """
    Parse and check a money amount.

    Accepts Decimal, int or str ("9,99" is read as 9.99). The amount must be
    positive with at most two decimal places.
    """
    if isinstance(value, float):
        value = repr(value)
    raw = str(value).strip().replace(",", ".")
    try:
        amount = Decimal(raw)
    except (InvalidOperation, ValueError):
        raise ValidationError(f"Invalid amount: {value!r}")
    if not amount.is_finite():
        raise ValidationError(f"Invalid amount: {value!r}")
    if amount <= 0:
        raise ValidationError("Amount must be greater than zero")
    if amount > MAX_AMOUNT:
        raise ValidationError(f"Amount must be at most {MAX_AMOUNT}")
    if amount.normalize().as_tuple().exponent < -MAX_AMOUNT_DECIMAL_PLACES:
        raise ValidationError(f"At most {MAX_AMOUNT_DECIMAL_PLACES} decimal places allowed")
    return amount.quantize(Decimal("0.01"))


def validate_billing_cycle(cycle: str) -> str:
    if cycle not in BILLING_CYCLES:
        raise ValidationError(
            f"billing_cycle must be one of {', '.join(BILLING_CYCLES)}, got: {cycle!r}"
        )
    return cycle


def validate_currency(currency: str) -> str:
    currency = (currency or "").strip().upper()
    if not currency:
        raise ValidationError("Currency must not be empty")
    if len(currency) > 8:
        raise ValidationError(f"Currency code too long: {currency!r}")
    return currency


def validate_reminder_days(days) -> list[int]:
    """Non-negative whole days, duplicates dropped, order kept."""
    out: list[int] = []
    for d in days:
        if isinstance(d, bool) or not isinstance(d, int):
            raise ValidationError(f"Reminder offset must be an integer, got: {d!r}")
        if d < 0:
            raise ValidationError(f"Reminder offset must not be negative, got: {d}")
        if d not in out:
            out.append(d)
    return out


def normalize_notes(notes: str | None) -> str | None:
    if notes is None:
        return None
    notes = notes.strip()
    return notes or None

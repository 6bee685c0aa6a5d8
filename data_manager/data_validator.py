import math
from datetime import date
from numbers import Integral, Real
from typing import Optional, Tuple

from config.constants import Frequency, PaymentStatus


def _amount_error(amount, label: str) -> Optional[str]:
    if amount is not None and (isinstance(amount, bool) or not isinstance(amount, Real)):
        return f"{label} must be a number, got {amount!r}"
    if amount is None or not math.isfinite(amount) or amount <= 0:
        return f"{label} must be greater than 0"
    return None


def validate_rent_schedule(
    amount: float,
    frequency: str,
    anchor_date: Optional[date],
    day_of_month: Optional[int],
) -> Tuple[bool, str]:
    """Validate rent schedule input before save; returns (ok, error message)."""
    error = _amount_error(amount, "Rent amount")
    if error:
        return False, error

    if frequency not in [e.value for e in Frequency]:
        return False, f"Invalid payment frequency: {frequency}"

    if anchor_date is None:
        return False, "First payment date is required"
    if not isinstance(anchor_date, date):
        return False, f"First payment date must be a date, got {anchor_date!r}"

    if frequency == Frequency.MONTHLY.value:
        if day_of_month is None:
            return False, "Day of month is required"
        if isinstance(day_of_month, bool) or not isinstance(day_of_month, Integral):
            return False, f"Day of month must be a whole number, got {day_of_month!r}"
        if not 1 <= day_of_month <= 31:
            return False, "Day of month must be between 1 and 31"

    return True, ""


def validate_payment(
    amount: float,
    status: str,
    due_date: Optional[date],
    paid_date: Optional[date] = None,
) -> Tuple[bool, str]:
    """Validate a manually logged rent payment."""
    error = _amount_error(amount, "Payment amount")
    if error:
        return False, error

    if status not in [e.value for e in PaymentStatus]:
        return False, f"Invalid payment status: {status}"

    if due_date is None:
        return False, "Due date is required"

    if status in (PaymentStatus.PAID.value, PaymentStatus.LATE.value) and paid_date is None:
        return False, "Paid date is required for a paid payment"

    if status == PaymentStatus.PENDING.value and paid_date is not None:
        return False, "A pending payment cannot have a paid date"

    return True, ""

"""Rent schedule records -> schedules and pending payment rows"""
import math
import re
from datetime import date
from numbers import Integral, Real
from typing import Mapping, Optional

import pandas as pd

from config.constants import Frequency, PaymentMethod, PaymentStatus, RENT_PAYMENTS_COLUMNS
from core.exceptions import InvalidAmount, InvalidDayOfMonth, ScheduleError
from core.projector import (
    check_schedule, compute_next_payment_date, parse_anchor_date, parse_frequency, upcoming_due_dates,
)
from data_manager.schema import RentSchedule
from utils.date_utils import parse_date
from utils.id_generator import generate_payment_id


def _is_blank(value) -> bool:
    if value is None:
        return True
    if isinstance(value, str):
        return not value.strip()
    try:
        return bool(pd.isna(value))
    except (TypeError, ValueError):
        return False


def _parse_amount(value) -> float:
    if _is_blank(value) or isinstance(value, bool):
        raise InvalidAmount("Rent amount is required")
    try:
        amount = float(value)
    except (TypeError, ValueError):
        raise InvalidAmount(f"Rent amount is not a number: {value!r}") from None
    if not math.isfinite(amount) or amount <= 0:
        raise InvalidAmount(f"Rent amount must be greater than 0, got {value!r}")
    return amount


def _parse_day_of_month(value) -> Optional[int]:
    """Spreadsheet integers come back as floats (15.0); anything fractional is rejected."""
    if _is_blank(value):
        return None
    if isinstance(value, bool):
        raise InvalidDayOfMonth(f"Day of month must be a whole number, got {value!r}")
    if isinstance(value, Integral):
        return int(value)
    if isinstance(value, Real) and float(value).is_integer():
        return int(value)
    if isinstance(value, str) and re.fullmatch(r"\d+", value.strip(), re.ASCII):
        return int(value.strip())
    raise InvalidDayOfMonth(f"Day of month must be a whole number, got {value!r}")


def _parse_flag(value, default: bool = True) -> bool:
    if _is_blank(value):
        return default
    if isinstance(value, str):
        return value.strip().lower() in ("1", "true", "yes", "y")
    return bool(value)


def _parse_end_date(value):
    if _is_blank(value):
        return None
    try:
        return parse_date(value)
    except (ValueError, TypeError, OverflowError):
        raise ScheduleError(f"Unparsable tenancy end date: {value!r}") from None


def schedule_from_record(record: Mapping) -> RentSchedule:
    """
    Build a RentSchedule from a persisted row.

    Accepts `first_payment_date` (the stored column) or `anchor_date`.
    Raises the ScheduleError subclasses for missing or malformed fields,
    including the checks the projector itself applies.
    """
    frequency = parse_frequency(record.get("frequency"))
    anchor_value = record.get("first_payment_date")
    if _is_blank(anchor_value):
        anchor_value = record.get("anchor_date")
    anchor = parse_anchor_date(None if _is_blank(anchor_value) else anchor_value)
    day_of_month = _parse_day_of_month(record.get("day_of_month"))
    if day_of_month is None:
        if frequency is Frequency.MONTHLY:
            raise InvalidDayOfMonth("Day of month is required for monthly rent")
        day_of_month = anchor.day

    end_value = record.get("end_date")
    tenant = record.get("tenant_name")
    schedule_id = record.get("schedule_id")
    schedule = RentSchedule(
        amount=_parse_amount(record.get("amount")),
        frequency=frequency.value,
        anchor_date=anchor,
        day_of_month=day_of_month,
        schedule_id="" if _is_blank(schedule_id) else str(schedule_id),
        tenant_name="" if _is_blank(tenant) else str(tenant),
        payment_reminders=_parse_flag(record.get("payment_reminders")),
        end_date=_parse_end_date(end_value),
    )
    check_schedule(schedule)
    return schedule


def next_due_within_tenancy(schedule: RentSchedule, now=None) -> Optional[date]:
    """Next due date, or None once the series has run past the tenancy end date."""
    next_due = compute_next_payment_date(schedule, now)
    if schedule.end_date is not None and next_due > schedule.end_date:
        return None
    return next_due


def schedule_to_record(schedule: RentSchedule, now=None, notes: str = "") -> dict:
    """Row for the rent_schedules sheet; next_payment_date is blank once the tenancy has ended."""
    next_due = next_due_within_tenancy(schedule, now)
    return {
        "schedule_id": schedule.schedule_id,
        "tenant_name": schedule.tenant_name,
        "amount": round(schedule.amount, 2),
        "frequency": parse_frequency(schedule.frequency).value,
        "first_payment_date": schedule.anchor_date.isoformat(),
        "day_of_month": schedule.day_of_month,
        "next_payment_date": next_due.isoformat() if next_due else None,
        "payment_reminders": schedule.payment_reminders,
        "end_date": schedule.end_date.isoformat() if schedule.end_date else None,
        "notes": notes,
    }


def generate_pending_payments(schedule: RentSchedule, count: int, now=None) -> pd.DataFrame:
    """Pending payment rows for the next `count` due dates."""
    records = []
    for due in upcoming_due_dates(schedule, count, now):
        if schedule.end_date is not None and due > schedule.end_date:
            break
        records.append({
            "payment_id": generate_payment_id(schedule.schedule_id, due),
            "schedule_id": schedule.schedule_id,
            "amount": round(schedule.amount, 2),
            "due_date": due.isoformat(),
            "paid_date": None,
            "status": PaymentStatus.PENDING.value,
            "payment_method": PaymentMethod.SCHEDULE.value,
            "is_verified": False,
        })
    return pd.DataFrame(records, columns=RENT_PAYMENTS_COLUMNS)

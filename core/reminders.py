"""Rent reminders and overdue payment checks"""
import logging
from datetime import date, timedelta

import pandas as pd

from config.constants import PaymentStatus
from config.settings import DEFAULT_OVERDUE_GRACE_DAYS, DEFAULT_REMINDER_DAYS_AHEAD
from core.exceptions import ScheduleError
from core.schedule_generator import next_due_within_tenancy, schedule_from_record
from utils.date_utils import parse_date
from utils.formatters import fmt_amount, fmt_due_date

logger = logging.getLogger(__name__)

REMINDER_COLUMNS = ["schedule_id", "tenant_name", "amount", "due_date", "message"]


def reminder_message(amount: float, due_date: date) -> str:
    return f"Your rent payment of {fmt_amount(amount)} is due on {fmt_due_date(due_date)}"


def find_due_reminders(
    schedules: pd.DataFrame,
    today: date,
    days_ahead: int = DEFAULT_REMINDER_DAYS_AHEAD,
) -> pd.DataFrame:
    """
    Schedules whose next payment falls exactly `days_ahead` days after `today`.

    Only schedules with payment_reminders enabled and a due date inside the
    tenancy are considered. Rows that cannot be turned into a valid
    schedule are logged and left out.
    """
    target = today + timedelta(days=days_ahead)
    rows = []
    for _, record in schedules.iterrows():
        try:
            schedule = schedule_from_record(record)
            next_due = next_due_within_tenancy(schedule, today)
        except ScheduleError as exc:
            logger.warning("Skipping reminder for schedule %s: %s", record.get("schedule_id"), exc)
            continue
        if not schedule.payment_reminders or next_due != target:
            continue
        rows.append({
            "schedule_id": schedule.schedule_id,
            "tenant_name": schedule.tenant_name,
            "amount": schedule.amount,
            "due_date": next_due.isoformat(),
            "message": reminder_message(schedule.amount, next_due),
        })
        logger.info("Rent reminder due for schedule %s (%s)", schedule.schedule_id, next_due)

    return pd.DataFrame(rows, columns=REMINDER_COLUMNS)


def find_overdue_payments(
    payments: pd.DataFrame,
    today: date,
    grace_days: int = DEFAULT_OVERDUE_GRACE_DAYS,
) -> pd.DataFrame:
    """Pending payments more than `grace_days` past their due date."""
    if payments.empty:
        return payments.copy()
    cutoff = today - timedelta(days=grace_days)
    due = payments["due_date"].map(parse_date)
    pending = payments["status"] == PaymentStatus.PENDING.value
    overdue = payments[pending & due.map(lambda d: d is not None and d < cutoff)].copy()
    overdue["days_overdue"] = [(today - parse_date(d)).days for d in overdue["due_date"]]
    if not overdue.empty:
        logger.info("%d pending payments overdue as of %s", len(overdue), today)
    return overdue.reset_index(drop=True)

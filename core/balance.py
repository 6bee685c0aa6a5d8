"""Outstanding rent balance: rent fallen due so far minus rent paid"""
import logging
from datetime import date
from typing import Dict, Optional

import pandas as pd

from config.constants import PaymentStatus
from core.projector import count_due_dates
from data_manager.schema import RentSchedule
from utils.date_utils import parse_date, to_calendar_date

logger = logging.getLogger(__name__)

PAID_STATUSES = (PaymentStatus.PAID.value, PaymentStatus.LATE.value)


def _balance_cutoff(schedule: RentSchedule, now: date) -> date:
    if schedule.end_date is not None and now > schedule.end_date:
        return schedule.end_date
    return now


def calc_total_due(schedule: RentSchedule, now: Optional[date] = None) -> float:
    """Due dates reached up to `now` (capped at the tenancy end) times the rent."""
    today = date.today() if now is None else to_calendar_date(now)
    periods = count_due_dates(schedule, _balance_cutoff(schedule, today))
    return round(periods * schedule.amount, 2)


def calc_total_paid(schedule: RentSchedule, payments: pd.DataFrame) -> float:
    """Paid payments for this schedule due within the tenancy."""
    if payments.empty:
        return 0.0
    df = payments
    if "schedule_id" in df.columns and schedule.schedule_id:
        df = df[df["schedule_id"] == schedule.schedule_id]
    df = df[df["status"].isin(PAID_STATUSES)]

    total = 0.0
    for _, p in df.iterrows():
        due = parse_date(p["due_date"])
        if due is None or due < schedule.anchor_date:
            continue
        if schedule.end_date is not None and due > schedule.end_date:
            continue
        total += float(p["amount"])
    return round(total, 2)


def calc_outstanding_balance(
    schedule: RentSchedule,
    payments: pd.DataFrame,
    now: Optional[date] = None,
) -> Dict[str, float]:
    """Returns total_due, total_paid and outstanding (negative when in credit)."""
    total_due = calc_total_due(schedule, now)
    total_paid = calc_total_paid(schedule, payments)
    outstanding = round(total_due - total_paid, 2)
    logger.info(
        "Schedule %s: due %.2f, paid %.2f, balance %.2f",
        schedule.schedule_id, total_due, total_paid, outstanding,
    )
    return {
        "total_due": total_due,
        "total_paid": total_paid,
        "outstanding": outstanding,
    }

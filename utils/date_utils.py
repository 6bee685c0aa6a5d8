import calendar
from datetime import date, datetime
from typing import Optional

import pandas as pd
from dateutil import parser as date_parser
from dateutil.relativedelta import relativedelta


def add_months(d: date, months: int) -> date:
    """Add N months to a date."""
    return d + relativedelta(months=months)


def days_in_month(year: int, month: int) -> int:
    return calendar.monthrange(year, month)[1]


def clamp_day(year: int, month: int, day: int) -> date:
    """Date for `day` in the given month, clamped to the month's last day."""
    return date(year, month, min(day, days_in_month(year, month)))


def to_calendar_date(value) -> date:
    """Normalise a date/datetime/Timestamp to a plain calendar date."""
    if isinstance(value, pd.Timestamp):
        return value.date()
    if isinstance(value, datetime):
        return value.date()
    if isinstance(value, date):
        return value
    raise TypeError(f"Unsupported type for date: {type(value)}")


def parse_date(d) -> Optional[date]:
    """Parse a date from a string or date-like object; None for blanks."""
    if d is None:
        return None
    if isinstance(d, (pd.Timestamp, datetime, date)):
        if pd.isna(d):
            return None
        return to_calendar_date(d)
    if isinstance(d, float) and pd.isna(d):
        return None
    if isinstance(d, str):
        text = d.strip()
        if not text:
            return None
        return date_parser.isoparse(text).date()
    raise TypeError(f"Unsupported type for date: {type(d)}")

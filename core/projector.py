"""Rent due-date projection for monthly, weekly and fortnightly schedules"""
from datetime import date, timedelta
from numbers import Integral
from typing import Iterator, List, Optional, Tuple

from config.constants import Frequency
from core.exceptions import InvalidAnchorDate, InvalidDayOfMonth, InvalidFrequency
from data_manager.schema import RentSchedule
from utils.date_utils import add_months, clamp_day, parse_date, to_calendar_date


def parse_frequency(value) -> Frequency:
    try:
        return Frequency(value)
    except (ValueError, TypeError):
        raise InvalidFrequency(f"Unrecognised rent frequency: {value!r}") from None


def parse_anchor_date(value) -> date:
    try:
        anchor = parse_date(value)
    except (ValueError, TypeError, OverflowError):
        raise InvalidAnchorDate(f"Unparsable first payment date: {value!r}") from None
    if anchor is None:
        raise InvalidAnchorDate("First payment date is required")
    return anchor


def _check_day_of_month(value) -> int:
    if isinstance(value, bool) or not isinstance(value, Integral):
        raise InvalidDayOfMonth(f"Day of month must be a whole number, got {value!r}")
    if not 1 <= value <= 31:
        raise InvalidDayOfMonth(f"Day of month must be between 1 and 31, got {value}")
    return int(value)


def _validated(schedule: RentSchedule) -> Tuple[Frequency, date, int]:
    """Check the cadence fields; day_of_month is only checked for monthly."""
    frequency = parse_frequency(schedule.frequency)
    anchor = parse_anchor_date(schedule.anchor_date)
    day_of_month = 0
    if frequency is Frequency.MONTHLY:
        day_of_month = _check_day_of_month(schedule.day_of_month)
    return frequency, anchor, day_of_month


def check_schedule(schedule: RentSchedule):
    """Raise the matching ScheduleError if the schedule cannot be projected."""
    _validated(schedule)


def _resolve_now(now) -> date:
    if now is None:
        return date.today()
    return to_calendar_date(now)


def _following(frequency: Frequency, anchor: date, day_of_month: int, after: date) -> date:
    if after < anchor:
        return anchor

    if frequency is Frequency.MONTHLY:
        candidate = clamp_day(after.year, after.month, day_of_month)
        if candidate <= after:
            next_month = add_months(date(after.year, after.month, 1), 1)
            candidate = clamp_day(next_month.year, next_month.month, day_of_month)
        return candidate

    if frequency in (Frequency.WEEKLY, Frequency.FORTNIGHTLY):
        step = frequency.step_days
        cycles = (after - anchor).days // step + 1
        return anchor + timedelta(days=cycles * step)

    raise InvalidFrequency(f"Unrecognised rent frequency: {frequency!r}")


def compute_next_payment_date(schedule: RentSchedule, now=None) -> date:
    """
    Next due date of a rent schedule relative to `now`.

    Returns the anchor date while the series has not started (`now` on or
    before the anchor); otherwise the earliest due date strictly after `now`.
    `now` defaults to today and datetimes are reduced to their calendar date.

    Raises:
        InvalidFrequency, InvalidDayOfMonth, InvalidAnchorDate
    """
    frequency, anchor, day_of_month = _validated(schedule)
    today = _resolve_now(now)
    if today <= anchor:
        return anchor
    return _following(frequency, anchor, day_of_month, today)


def following_due_date(schedule: RentSchedule, after: date) -> date:
    """Earliest due date strictly after `after` (the anchor if `after` precedes it)."""
    frequency, anchor, day_of_month = _validated(schedule)
    return _following(frequency, anchor, day_of_month, to_calendar_date(after))


def iter_due_dates(schedule: RentSchedule, until: Optional[date] = None) -> Iterator[date]:
    """Due dates from the anchor onwards, stopping after `until` when given."""
    frequency, anchor, day_of_month = _validated(schedule)
    limit = to_calendar_date(until) if until is not None else None
    current = anchor
    while limit is None or current <= limit:
        yield current
        current = _following(frequency, anchor, day_of_month, current)


def upcoming_due_dates(schedule: RentSchedule, count: int, now=None) -> List[date]:
    """The next `count` due dates, starting with compute_next_payment_date."""
    if count < 0:
        raise ValueError("count must not be negative")
    frequency, anchor, day_of_month = _validated(schedule)
    dates = []
    if count == 0:
        return dates
    current = compute_next_payment_date(schedule, now)
    dates.append(current)
    while len(dates) < count:
        current = _following(frequency, anchor, day_of_month, current)
        dates.append(current)
    return dates


def count_due_dates(schedule: RentSchedule, until: date) -> int:
    """Number of due dates falling on or between the anchor and `until`."""
    return sum(1 for _ in iter_due_dates(schedule, until))

"""Errors raised for rent schedules the projector cannot work with."""


class ScheduleError(ValueError):
    """Base class for malformed rent schedule input."""


class InvalidFrequency(ScheduleError):
    """Raised when the cadence is not monthly, weekly or fortnightly."""


class InvalidDayOfMonth(ScheduleError):
    """Raised when a monthly schedule's day of month is outside 1-31."""


class InvalidAnchorDate(ScheduleError):
    """Raised when the first payment date is missing or unparsable."""


class InvalidAmount(ScheduleError):
    """Raised when a persisted schedule has no positive rent amount."""

from enum import Enum


class Frequency(str, Enum):
    MONTHLY = "monthly"
    WEEKLY = "weekly"
    FORTNIGHTLY = "fortnightly"

    @property
    def label(self) -> str:
        return {
            "monthly": "Monthly",
            "weekly": "Weekly",
            "fortnightly": "Fortnightly",
        }[self.value]

    @property
    def period_label(self) -> str:
        return {
            "monthly": "month",
            "weekly": "week",
            "fortnightly": "fortnight",
        }[self.value]

    @property
    def step_days(self) -> int:
        """Fixed step for day-based cadences; monthly has none."""
        return {
            "monthly": 0,
            "weekly": 7,
            "fortnightly": 14,
        }[self.value]


class PaymentStatus(str, Enum):
    PENDING = "pending"
    PAID = "paid"
    LATE = "late"
    MISSED = "missed"

    @property
    def label(self) -> str:
        return {
            "pending": "Pending",
            "paid": "Paid",
            "late": "Paid late",
            "missed": "Missed",
        }[self.value]


class PaymentMethod(str, Enum):
    MANUAL = "manual"
    OPEN_BANKING = "open_banking"
    SCHEDULE = "schedule"


class VerificationStatus(str, Enum):
    VERIFIED = "verified"
    PARTIALLY_VERIFIED = "partially_verified"
    UNVERIFIED = "unverified"


# Sheet names
SHEET_RENT_SCHEDULES = "rent_schedules"
SHEET_RENT_PAYMENTS = "rent_payments"
SHEET_CONFIG = "config"

# Column definitions
RENT_SCHEDULES_COLUMNS = [
    "schedule_id", "tenant_name", "amount", "frequency",
    "first_payment_date", "day_of_month", "next_payment_date",
    "payment_reminders", "end_date", "notes",
]

RENT_PAYMENTS_COLUMNS = [
    "payment_id", "schedule_id", "amount", "due_date", "paid_date",
    "status", "payment_method", "is_verified",
]

CONFIG_COLUMNS = ["key", "value", "description", "updated_at"]

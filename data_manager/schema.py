from dataclasses import dataclass
from datetime import date
from typing import Optional


@dataclass(frozen=True)
class RentSchedule:
    amount: float
    frequency: str  # monthly / weekly / fortnightly
    anchor_date: date  # first payment in the series
    day_of_month: Optional[int] = None  # required for monthly
    schedule_id: str = ""
    tenant_name: str = ""
    payment_reminders: bool = True
    end_date: Optional[date] = None


@dataclass
class RentPayment:
    payment_id: str
    schedule_id: str
    amount: float
    due_date: date
    status: str = "pending"  # pending / paid / late / missed
    paid_date: Optional[date] = None
    payment_method: str = "manual"
    is_verified: bool = False

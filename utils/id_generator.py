import uuid
from datetime import date, datetime


def generate_schedule_id() -> str:
    return f"RS-{datetime.now().strftime('%Y%m%d%H%M%S')}-{uuid.uuid4().hex[:4]}"


def generate_payment_id(schedule_id: str, due_date: date) -> str:
    """One id per (schedule, due date)."""
    return f"RP-{schedule_id}-{due_date.strftime('%Y%m%d')}"


def generate_manual_payment_id() -> str:
    return f"MP-{datetime.now().strftime('%Y%m%d%H%M%S')}-{uuid.uuid4().hex[:4]}"

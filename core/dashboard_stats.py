"""Tenant dashboard statistics: streak, totals and the rent credit score"""
import math
from datetime import date
from typing import Dict, Optional

import pandas as pd

from config.constants import PaymentStatus, VerificationStatus
from config.settings import (
    ON_TIME_SCORE_MAX, VERIFICATION_SCORE_MAX, CONSISTENCY_SCORE_MAX,
    CONSISTENCY_TARGET_PAYMENTS,
)
from utils.date_utils import add_months, parse_date, to_calendar_date

PAID_STATUSES = (PaymentStatus.PAID.value, PaymentStatus.LATE.value)
STREAK_BREAKING_STATUSES = PAID_STATUSES + (PaymentStatus.MISSED.value,)


def _round_half_up(value: float) -> int:
    return int(math.floor(value + 0.5))


def _is_on_time(p: pd.Series) -> bool:
    return isinstance(p["paid"], date) and isinstance(p["due"], date) and p["paid"] <= p["due"]


def _prepare(payments: pd.DataFrame) -> pd.DataFrame:
    df = payments.copy()
    df["due"] = df["due_date"].map(parse_date)
    df["paid"] = df["paid_date"].map(parse_date)
    df["is_verified"] = df["is_verified"].fillna(False).astype(bool)
    df["amount"] = pd.to_numeric(df["amount"], errors="coerce").fillna(0.0)
    # latest first for the streak walk
    return df.sort_values("due", ascending=False, kind="stable").reset_index(drop=True)


def _calc_streak(df: pd.DataFrame) -> int:
    """Consecutive on-time payments counted back from the latest due date."""
    streak = 0
    for _, p in df.iterrows():
        if p["status"] in PAID_STATUSES and _is_on_time(p):
            streak += 1
            continue
        if p["status"] in STREAK_BREAKING_STATUSES:
            break
    return streak


def compute_dashboard_stats(payments: pd.DataFrame, now: Optional[date] = None) -> Dict:
    """
    Dashboard figures for one tenant's payment history.

    Args:
        payments: rows with amount, due_date, paid_date, status, is_verified
        now: reference day for the month-based figures, defaults to today

    Returns:
        dict of streak, totals, next pending due date, credit score and its
        components, verification summary and growth since last month
    """
    today = date.today() if now is None else to_calendar_date(now)
    if payments.empty:
        df = pd.DataFrame(columns=["amount", "due", "paid", "status", "is_verified"])
    else:
        df = _prepare(payments)

    paid = df[df["status"].isin(PAID_STATUSES)]
    on_time = paid[paid.apply(_is_on_time, axis=1)] if not paid.empty else paid
    verified = paid[paid["is_verified"]] if not paid.empty else paid

    total_paid = round(float(paid["amount"].sum()), 2) if not paid.empty else 0.0
    on_time_pct = len(on_time) / len(paid) * 100 if len(paid) else 0.0
    streak = _calc_streak(df)

    pending = df[df["status"] == PaymentStatus.PENDING.value]
    next_due = pending["due"].dropna().min() if not pending.empty else None
    next_payment_due = next_due.isoformat() if isinstance(next_due, date) else None

    on_time_score = on_time_pct / 100 * ON_TIME_SCORE_MAX
    verification_rate = len(verified) / len(paid) if len(paid) else 0.0
    verification_score = verification_rate * VERIFICATION_SCORE_MAX
    consistency = min(len(paid) / CONSISTENCY_TARGET_PAYMENTS, 1) if len(paid) else 0.0
    streak_bonus = min(streak / CONSISTENCY_TARGET_PAYMENTS, 0.5)
    consistency_score = (consistency * 0.5 + streak_bonus) * CONSISTENCY_SCORE_MAX
    credit_score = _round_half_up(on_time_score + verification_score + consistency_score)

    month_start = date(today.year, today.month, 1)
    next_month_start = add_months(month_start, 1)
    monthly_rent_paid = 0.0
    if not paid.empty:
        this_month = paid["paid"].map(lambda d: isinstance(d, date) and month_start <= d < next_month_start)
        monthly_rent_paid = round(float(paid[this_month]["amount"].sum()), 2)

    if paid.empty or verified.empty:
        verification_status = VerificationStatus.UNVERIFIED.value
    elif len(verified) == len(paid):
        verification_status = VerificationStatus.VERIFIED.value
    else:
        verification_status = VerificationStatus.PARTIALLY_VERIFIED.value

    pending_verification_count = int((~pending["is_verified"]).sum()) if not pending.empty else 0

    # score as it stood at the end of last month
    previous = payments.iloc[0:0]
    if not df.empty:
        previous = df[df["due"].map(lambda d: isinstance(d, date) and d < month_start)]
    previous_score = 0
    if not previous.empty:
        previous_score = compute_dashboard_stats(
            previous.drop(columns=["due", "paid"]),
            add_months(month_start, -1),
        )["credit_score"]

    return {
        "payment_streak": streak,
        "total_paid": total_paid,
        "on_time_percentage": round(on_time_pct, 2),
        "next_payment_due": next_payment_due,
        "credit_score": credit_score,
        "on_time_score": _round_half_up(on_time_score),
        "verification_score": _round_half_up(verification_score),
        "consistency_score": _round_half_up(consistency_score),
        "monthly_rent_paid": monthly_rent_paid,
        "verification_status": verification_status,
        "verified": len(verified),
        "pending_verification_count": pending_verification_count,
        "credit_growth": credit_score - previous_score,
    }

"""Input validation tests"""
import sys
from pathlib import Path
sys.path.insert(0, str(Path(__file__).parent.parent))

from datetime import date

import pytest

from data_manager.data_validator import validate_payment, validate_rent_schedule


class TestValidateRentSchedule:

    def test_valid_monthly(self):
        assert validate_rent_schedule(950, "monthly", date(2024, 1, 1), 1) == (True, "")

    def test_weekly_ignores_day_of_month(self):
        ok, _ = validate_rent_schedule(200, "weekly", date(2024, 1, 1), None)
        assert ok

    @pytest.mark.parametrize("amount,frequency,anchor,day,fragment", [
        (0, "monthly", date(2024, 1, 1), 1, "amount"),
        (None, "monthly", date(2024, 1, 1), 1, "amount"),
        (950, "yearly", date(2024, 1, 1), 1, "frequency"),
        (950, "monthly", None, 1, "First payment date"),
        (950, "monthly", date(2024, 1, 1), None, "Day of month"),
        (950, "monthly", date(2024, 1, 1), 32, "between 1 and 31"),
        (950, "monthly", date(2024, 1, 1), 0, "between 1 and 31"),
        (950, "monthly", date(2024, 1, 1), 15.5, "whole number"),
        (950, "monthly", date(2024, 1, 1), True, "whole number"),
        (950, "monthly", date(2024, 1, 1), "15", "whole number"),
        (950, "weekly", "not-a-date", None, "must be a date"),
        (950, "monthly", "2024-01-01", 1, "must be a date"),
        ("950", "monthly", date(2024, 1, 1), 1, "must be a number"),
        (True, "monthly", date(2024, 1, 1), 1, "must be a number"),
        (float("nan"), "monthly", date(2024, 1, 1), 1, "greater than 0"),
    ])
    def test_rejected(self, amount, frequency, anchor, day, fragment):
        ok, message = validate_rent_schedule(amount, frequency, anchor, day)
        assert not ok
        assert fragment in message


class TestValidatePayment:

    def test_valid_paid(self):
        assert validate_payment(950, "paid", date(2024, 1, 1), date(2024, 1, 1))[0]

    def test_valid_pending(self):
        assert validate_payment(950, "pending", date(2024, 1, 1))[0]

    def test_paid_needs_paid_date(self):
        ok, message = validate_payment(950, "late", date(2024, 1, 1))
        assert not ok
        assert "Paid date" in message

    def test_pending_with_paid_date(self):
        assert not validate_payment(950, "pending", date(2024, 1, 1), date(2024, 1, 2))[0]

    def test_bad_status(self):
        assert not validate_payment(950, "refunded", date(2024, 1, 1))[0]

    def test_bad_amount(self):
        assert not validate_payment(-5, "pending", date(2024, 1, 1))[0]

    def test_missing_due_date(self):
        assert not validate_payment(950, "pending", None)[0]

    def test_non_numeric_amount(self):
        ok, message = validate_payment("950", "pending", date(2024, 1, 1))
        assert not ok
        assert "must be a number" in message

"""Command line tests"""
import sys
from pathlib import Path
sys.path.insert(0, str(Path(__file__).parent.parent))

import pytest
from click.testing import CliRunner

from cli import cli
from data_manager.excel_handler import get_payments, get_schedule_by_id


@pytest.fixture
def runner():
    return CliRunner()


def invoke(runner, temp_excel, *args):
    return runner.invoke(cli, ["--data-file", str(temp_excel), *args])


class TestNextDue:

    def test_weekly(self, runner, temp_excel):
        result = invoke(runner, temp_excel, "next-due", "--frequency", "weekly",
                        "--anchor-date", "2024-03-01", "--now", "2024-03-10")
        assert result.exit_code == 0
        assert "2024-03-15 (March 15th, 2024)" in result.output

    def test_monthly_clamped(self, runner, temp_excel):
        result = invoke(runner, temp_excel, "next-due", "--frequency", "monthly",
                        "--anchor-date", "2024-01-31", "--day-of-month", "31", "--now", "2024-02-01")
        assert result.exit_code == 0
        assert "2024-02-29" in result.output

    def test_monthly_defaults_to_anchor_day(self, runner, temp_excel):
        result = invoke(runner, temp_excel, "next-due", "--frequency", "monthly",
                        "--anchor-date", "2024-01-15", "--now", "2024-03-20")
        assert result.exit_code == 0
        assert "2024-04-15" in result.output

    def test_bad_day_of_month(self, runner, temp_excel):
        result = invoke(runner, temp_excel, "next-due", "--frequency", "monthly",
                        "--anchor-date", "2024-01-31", "--day-of-month", "40", "--now", "2024-02-01")
        assert result.exit_code != 0
        assert "between 1 and 31" in result.output

    def test_unknown_frequency_rejected(self, runner, temp_excel):
        result = invoke(runner, temp_excel, "next-due", "--frequency", "yearly",
                        "--anchor-date", "2024-01-31")
        assert result.exit_code != 0


class TestScheduleCommands:

    def add(self, runner, temp_excel, *extra):
        return invoke(runner, temp_excel, "add-schedule", "--schedule-id", "RS-1",
                      "--tenant-name", "Sam", "--amount", "950",
                      "--first-payment-date", "2024-01-01", "--day-of-month", "1", *extra)

    def test_add_and_show(self, runner, temp_excel):
        result = self.add(runner, temp_excel)
        assert result.exit_code == 0, result.output
        assert get_schedule_by_id("RS-1", temp_excel) is not None

        result = invoke(runner, temp_excel, "get-schedule", "--schedule-id", "RS-1", "--now", "2024-01-15")
        assert result.exit_code == 0
        assert "£950.00/month - Due 1st" in result.output
        assert "February 1st, 2024" in result.output

    def test_add_rejects_invalid(self, runner, temp_excel):
        result = invoke(runner, temp_excel, "add-schedule", "--amount", "0",
                        "--first-payment-date", "2024-01-01")
        assert result.exit_code != 0
        assert "greater than 0" in result.output

    def test_upcoming(self, runner, temp_excel):
        self.add(runner, temp_excel)
        result = invoke(runner, temp_excel, "upcoming", "--schedule-id", "RS-1",
                        "--count", "2", "--now", "2024-01-15")
        assert result.exit_code == 0
        assert "2024-02-01" in result.output
        assert "2024-03-01" in result.output

    def test_missing_schedule(self, runner, temp_excel):
        result = invoke(runner, temp_excel, "upcoming", "--schedule-id", "nope")
        assert result.exit_code != 0
        assert "not found" in result.output

    def test_refresh(self, runner, temp_excel):
        self.add(runner, temp_excel)
        result = invoke(runner, temp_excel, "refresh", "--now", "2020-01-01")
        assert result.exit_code == 0
        assert get_schedule_by_id("RS-1", temp_excel)["next_payment_date"] == "2024-01-01"

    def test_delete(self, runner, temp_excel):
        self.add(runner, temp_excel)
        result = invoke(runner, temp_excel, "delete-schedule", "--schedule-id", "RS-1")
        assert result.exit_code == 0
        assert get_schedule_by_id("RS-1", temp_excel) is None


class TestPaymentCommands:

    @pytest.fixture
    def with_payments(self, runner, temp_excel):
        invoke(runner, temp_excel, "add-schedule", "--schedule-id", "RS-1", "--amount", "1000",
               "--first-payment-date", "2024-01-01", "--day-of-month", "1")
        invoke(runner, temp_excel, "generate-payments", "--schedule-id", "RS-1",
               "--count", "3", "--now", "2023-12-01")
        return temp_excel

    def test_generate(self, with_payments):
        payments = get_payments("RS-1", filepath=with_payments)
        assert payments["due_date"].tolist() == ["2024-01-01", "2024-02-01", "2024-03-01"]

    def test_mark_paid_and_balance(self, runner, with_payments):
        result = invoke(runner, with_payments, "mark-paid", "--payment-id", "RP-RS-1-20240101",
                        "--paid-date", "2024-01-01")
        assert result.exit_code == 0
        assert "marked paid" in result.output

        result = invoke(runner, with_payments, "balance", "--schedule-id", "RS-1", "--now", "2024-02-10")
        assert result.exit_code == 0
        assert "Total due:   £2,000.00" in result.output
        assert "Outstanding: £1,000.00" in result.output

    def test_mark_unknown_payment(self, runner, with_payments):
        result = invoke(runner, with_payments, "mark-paid", "--payment-id", "RP-none")
        assert result.exit_code != 0

    def test_log_payment(self, runner, with_payments):
        result = invoke(runner, with_payments, "log-payment", "--schedule-id", "RS-1", "--amount", "1000",
                        "--due-date", "2024-04-01", "--paid-date", "2024-03-30")
        assert result.exit_code == 0, result.output
        assert len(get_payments("RS-1", filepath=with_payments)) == 4

    def test_generate_after_logged_payment(self, runner, with_payments):
        invoke(runner, with_payments, "log-payment", "--schedule-id", "RS-1", "--amount", "1000",
               "--due-date", "2024-04-01", "--paid-date", "2024-03-18")
        result = invoke(runner, with_payments, "generate-payments", "--schedule-id", "RS-1",
                        "--count", "2", "--now", "2024-03-20")
        assert "1 pending payment(s) added" in result.output

        payments = get_payments("RS-1", filepath=with_payments)
        april = payments[payments["due_date"] == "2024-04-01"]
        assert april["status"].tolist() == ["paid"]

        result = invoke(runner, with_payments, "overdue", "--today", "2024-04-20")
        assert "RP-RS-1-20240401" not in result.output

    def test_log_payment_for_recorded_due_date(self, runner, with_payments):
        result = invoke(runner, with_payments, "log-payment", "--schedule-id", "RS-1", "--amount", "1000",
                        "--due-date", "2024-02-01", "--paid-date", "2024-02-01")
        assert result.exit_code != 0
        assert "mark-paid" in result.output
        assert len(get_payments("RS-1", filepath=with_payments)) == 3

    def test_log_payment_needs_paid_date(self, runner, with_payments):
        result = invoke(runner, with_payments, "log-payment", "--schedule-id", "RS-1", "--amount", "1000",
                        "--due-date", "2024-04-01")
        assert result.exit_code != 0

    def test_overdue(self, runner, with_payments):
        result = invoke(runner, with_payments, "overdue", "--today", "2024-02-20")
        assert result.exit_code == 0
        assert "RP-RS-1-20240101" in result.output
        assert "RP-RS-1-20240201" in result.output
        assert "RP-RS-1-20240301" not in result.output

    def test_stats(self, runner, with_payments):
        invoke(runner, with_payments, "mark-paid", "--payment-id", "RP-RS-1-20240101",
               "--paid-date", "2024-01-01")
        invoke(runner, with_payments, "verify-payment", "--payment-id", "RP-RS-1-20240101")
        result = invoke(runner, with_payments, "stats", "--schedule-id", "RS-1", "--now", "2024-01-15")
        assert result.exit_code == 0, result.output
        assert "Verification:        verified" in result.output
        assert "Next payment due:    2024-02-01" in result.output


class TestReminderAndConfigCommands:

    def test_reminders(self, runner, temp_excel):
        invoke(runner, temp_excel, "add-schedule", "--schedule-id", "RS-1", "--amount", "950",
               "--first-payment-date", "2024-01-15", "--day-of-month", "15")
        result = invoke(runner, temp_excel, "reminders", "--today", "2024-03-12")
        assert result.exit_code == 0
        assert "RS-1: Your rent payment of £950.00 is due on March 15th, 2024" in result.output

    def test_reminders_use_config(self, runner, temp_excel):
        invoke(runner, temp_excel, "add-schedule", "--schedule-id", "RS-1", "--amount", "950",
               "--first-payment-date", "2024-01-15", "--day-of-month", "15")
        invoke(runner, temp_excel, "set-config", "--key", "reminder_days_ahead", "--value", "5")
        result = invoke(runner, temp_excel, "reminders", "--today", "2024-03-10")
        assert "RS-1" in result.output

    def test_config_round_trip(self, runner, temp_excel):
        invoke(runner, temp_excel, "set-config", "--key", "currency_symbol", "--value", "€")
        result = invoke(runner, temp_excel, "get-config", "--key", "currency_symbol")
        assert result.exit_code == 0
        assert "€" in result.output

    def test_unknown_config(self, runner, temp_excel):
        result = invoke(runner, temp_excel, "get-config", "--key", "missing")
        assert result.exit_code != 0

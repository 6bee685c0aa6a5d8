import logging
from dataclasses import asdict
from datetime import date

import click
import pandas as pd

from config.constants import Frequency, PaymentMethod, PaymentStatus, RENT_PAYMENTS_COLUMNS
from config.settings import (
    EXCEL_FILE, LOG_FORMAT, LOG_LEVEL, DEFAULT_UPCOMING_COUNT,
    DEFAULT_REMINDER_DAYS_AHEAD, DEFAULT_OVERDUE_GRACE_DAYS,
)
from core.balance import calc_outstanding_balance
from core.dashboard_stats import compute_dashboard_stats
from core.exceptions import ScheduleError
from core.projector import compute_next_payment_date, upcoming_due_dates
from core.reminders import find_due_reminders, find_overdue_payments
from core.schedule_generator import (
    generate_pending_payments, next_due_within_tenancy, schedule_from_record, schedule_to_record,
)
from data_manager.data_validator import validate_payment, validate_rent_schedule
from data_manager.excel_handler import (
    get_all_schedules,
    get_schedule_by_id,
    save_schedule,
    delete_schedule,
    refresh_next_payment_dates,
    get_payments,
    add_payments,
    mark_payment_paid,
    verify_payment,
    get_all_config,
    get_config,
    set_config,
)
from data_manager.schema import RentPayment, RentSchedule
from utils.formatters import fmt_amount, fmt_due_date, fmt_percent, fmt_rent_summary
from utils.id_generator import generate_manual_payment_id, generate_schedule_id

FREQUENCY_CHOICE = click.Choice([e.value for e in Frequency])
DATE_TYPE = click.DateTime(formats=["%Y-%m-%d"])


def _as_date(value):
    return value.date() if value is not None else None


def _load_schedule(ctx, schedule_id) -> RentSchedule:
    record = get_schedule_by_id(schedule_id, ctx.obj["data_file"])
    if record is None:
        raise click.ClickException(f"Schedule '{schedule_id}' not found.")
    try:
        return schedule_from_record(record)
    except ScheduleError as exc:
        raise click.ClickException(f"Schedule '{schedule_id}' is invalid: {exc}")


def _int_config(ctx, key, default) -> int:
    value = get_config(key, ctx.obj["data_file"])
    if value is None:
        return default
    try:
        return int(float(value))
    except ValueError:
        raise click.ClickException(f"Config '{key}' is not a number: {value}")


@click.group()
@click.option('--data-file', type=click.Path(dir_okay=False), default=str(EXCEL_FILE), show_default=True,
              help='Workbook holding schedules, payments and config')
@click.option('-v', '--verbose', is_flag=True, help='Debug logging')
@click.pass_context
def cli(ctx, data_file, verbose):
    """Rent schedule tracker: due dates, payments, reminders and balances."""
    logging.basicConfig(level=logging.DEBUG if verbose else LOG_LEVEL, format=LOG_FORMAT)
    ctx.ensure_object(dict)
    ctx.obj["data_file"] = data_file


@cli.command('next-due')
@click.option('--frequency', type=FREQUENCY_CHOICE, required=True, help='Rent frequency')
@click.option('--anchor-date', type=DATE_TYPE, required=True, help='First payment date (YYYY-MM-DD)')
@click.option('--day-of-month', type=int, help='Due day for monthly rent (1-31), defaults to the anchor day')
@click.option('--now', 'now', type=DATE_TYPE, help='Reference date (YYYY-MM-DD), defaults to today')
def next_due(frequency, anchor_date, day_of_month, now):
    """Prints the next rent due date for an ad-hoc schedule."""
    anchor = _as_date(anchor_date)
    schedule = RentSchedule(
        amount=1.0, frequency=frequency, anchor_date=anchor,
        day_of_month=anchor.day if day_of_month is None else day_of_month,
    )
    try:
        due = compute_next_payment_date(schedule, _as_date(now))
    except ScheduleError as exc:
        raise click.ClickException(str(exc))
    click.echo(f"{due.isoformat()} ({fmt_due_date(due)})")


@cli.command('upcoming')
@click.option('--schedule-id', type=str, required=True, help='Schedule ID')
@click.option('--count', type=click.IntRange(min=1), default=DEFAULT_UPCOMING_COUNT, show_default=True,
              help='Number of due dates')
@click.option('--now', 'now', type=DATE_TYPE, help='Reference date (YYYY-MM-DD), defaults to today')
@click.pass_context
def upcoming(ctx, schedule_id, count, now):
    """Lists the next due dates of a stored schedule."""
    schedule = _load_schedule(ctx, schedule_id)
    for due in upcoming_due_dates(schedule, count, _as_date(now)):
        click.echo(f"{due.isoformat()}  {fmt_amount(schedule.amount)}")


@cli.command('add-schedule')
@click.option('--schedule-id', type=str, help='Schedule ID, generated when omitted')
@click.option('--tenant-name', type=str, default='', help='Tenant name')
@click.option('--amount', type=float, required=True, help='Rent amount')
@click.option('--frequency', type=FREQUENCY_CHOICE, default=Frequency.MONTHLY.value, show_default=True,
              help='Rent frequency')
@click.option('--first-payment-date', type=DATE_TYPE, required=True, help='First payment date (YYYY-MM-DD)')
@click.option('--day-of-month', type=int, help='Due day for monthly rent (1-31), defaults to the first payment day')
@click.option('--end-date', type=DATE_TYPE, help='Tenancy end date (YYYY-MM-DD)')
@click.option('--reminders/--no-reminders', default=True, help='Send payment reminders')
@click.option('--notes', type=str, default='', help='Notes')
@click.pass_context
def add_schedule(ctx, schedule_id, tenant_name, amount, frequency, first_payment_date, day_of_month,
                 end_date, reminders, notes):
    """Adds or replaces a rent schedule."""
    anchor = _as_date(first_payment_date)
    if day_of_month is None:
        day_of_month = anchor.day
    ok, message = validate_rent_schedule(amount, frequency, anchor, day_of_month)
    if not ok:
        raise click.BadParameter(message)

    schedule = RentSchedule(
        amount=amount,
        frequency=frequency,
        anchor_date=anchor,
        day_of_month=day_of_month,
        schedule_id=schedule_id or generate_schedule_id(),
        tenant_name=tenant_name,
        payment_reminders=reminders,
        end_date=_as_date(end_date),
    )
    record = schedule_to_record(schedule, notes=notes)
    save_schedule(record, ctx.obj["data_file"])
    next_due = record["next_payment_date"] or "none (tenancy ended)"
    click.echo(f"Schedule '{schedule.schedule_id}' saved. Next payment due {next_due}.")


@cli.command('list-schedules')
@click.pass_context
def list_schedules(ctx):
    """Lists all rent schedules."""
    schedules = get_all_schedules(ctx.obj["data_file"])
    if schedules.empty:
        click.echo("No rent schedules.")
        return
    click.echo(schedules.to_string(index=False))


@cli.command('get-schedule')
@click.option('--schedule-id', type=str, required=True, help='Schedule ID')
@click.option('--now', 'now', type=DATE_TYPE, help='Reference date (YYYY-MM-DD), defaults to today')
@click.pass_context
def get_schedule(ctx, schedule_id, now):
    """Shows a rent schedule with its next due date."""
    schedule = _load_schedule(ctx, schedule_id)
    due = next_due_within_tenancy(schedule, _as_date(now))
    click.echo(f"Schedule:  {schedule.schedule_id} {schedule.tenant_name}".rstrip())
    click.echo(f"Rent:      {fmt_rent_summary(schedule.amount, schedule.frequency, schedule.day_of_month)}")
    click.echo(f"First due: {schedule.anchor_date.isoformat()}")
    click.echo(f"Next due:  {fmt_due_date(due) if due else 'none (tenancy ended)'}")


@cli.command('delete-schedule')
@click.option('--schedule-id', type=str, required=True, help='Schedule ID')
@click.pass_context
def delete_schedule_command(ctx, schedule_id):
    """Deletes a rent schedule and its payments."""
    if get_schedule_by_id(schedule_id, ctx.obj["data_file"]) is None:
        raise click.ClickException(f"Schedule '{schedule_id}' not found.")
    delete_schedule(schedule_id, ctx.obj["data_file"])
    click.echo(f"Schedule '{schedule_id}' deleted.")


@cli.command('refresh')
@click.option('--now', 'now', type=DATE_TYPE, help='Reference date (YYYY-MM-DD), defaults to today')
@click.pass_context
def refresh(ctx, now):
    """Recomputes the stored next payment date of every schedule."""
    changed = refresh_next_payment_dates(_as_date(now), ctx.obj["data_file"])
    click.echo(f"{changed} schedule(s) updated.")


@cli.command('generate-payments')
@click.option('--schedule-id', type=str, required=True, help='Schedule ID')
@click.option('--count', type=click.IntRange(min=1), default=DEFAULT_UPCOMING_COUNT, show_default=True,
              help='Number of upcoming payments')
@click.option('--now', 'now', type=DATE_TYPE, help='Reference date (YYYY-MM-DD), defaults to today')
@click.pass_context
def generate_payments(ctx, schedule_id, count, now):
    """Creates pending payment records for the next due dates."""
    schedule = _load_schedule(ctx, schedule_id)
    records = generate_pending_payments(schedule, count, _as_date(now))
    added = add_payments(records, ctx.obj["data_file"])
    click.echo(f"{added} pending payment(s) added.")


@cli.command('log-payment')
@click.option('--schedule-id', type=str, required=True, help='Schedule ID')
@click.option('--amount', type=float, required=True, help='Amount paid')
@click.option('--due-date', type=DATE_TYPE, required=True, help='Due date covered (YYYY-MM-DD)')
@click.option('--paid-date', type=DATE_TYPE, help='Date paid (YYYY-MM-DD)')
@click.option('--status', type=click.Choice([e.value for e in PaymentStatus]), default=PaymentStatus.PAID.value,
              show_default=True, help='Payment status')
@click.pass_context
def log_payment(ctx, schedule_id, amount, due_date, paid_date, status):
    """Logs a manual rent payment."""
    _load_schedule(ctx, schedule_id)
    due, paid = _as_date(due_date), _as_date(paid_date)
    ok, message = validate_payment(amount, status, due, paid)
    if not ok:
        raise click.BadParameter(message)
    payment = RentPayment(
        payment_id=generate_manual_payment_id(),
        schedule_id=schedule_id,
        amount=round(amount, 2),
        due_date=due,
        status=status,
        paid_date=paid,
        payment_method=PaymentMethod.MANUAL.value,
    )
    row = asdict(payment)
    row["due_date"] = due.isoformat()
    row["paid_date"] = paid.isoformat() if paid else None
    record = pd.DataFrame([row], columns=RENT_PAYMENTS_COLUMNS)
    if not add_payments(record, ctx.obj["data_file"]):
        raise click.ClickException(
            f"A payment due {due.isoformat()} is already recorded for '{schedule_id}'; use mark-paid.")
    click.echo(f"Payment '{payment.payment_id}' logged.")


@cli.command('list-payments')
@click.option('--schedule-id', type=str, help='Schedule ID, all schedules when omitted')
@click.pass_context
def list_payments(ctx, schedule_id):
    """Lists rent payments."""
    payments = get_payments(schedule_id, ctx.obj["data_file"])
    if payments.empty:
        click.echo("No rent payments.")
        return
    click.echo(payments.to_string(index=False))


@cli.command('mark-paid')
@click.option('--payment-id', type=str, required=True, help='Payment ID')
@click.option('--paid-date', type=DATE_TYPE, help='Date paid (YYYY-MM-DD), defaults to today')
@click.pass_context
def mark_paid(ctx, payment_id, paid_date):
    """Marks a pending payment as paid."""
    try:
        status = mark_payment_paid(payment_id, _as_date(paid_date), ctx.obj["data_file"])
    except KeyError:
        raise click.ClickException(f"Payment '{payment_id}' not found.")
    click.echo(f"Payment '{payment_id}' marked {status}.")


@cli.command('verify-payment')
@click.option('--payment-id', type=str, required=True, help='Payment ID')
@click.pass_context
def verify_payment_command(ctx, payment_id):
    """Records landlord verification of a payment."""
    try:
        verify_payment(payment_id, ctx.obj["data_file"])
    except KeyError:
        raise click.ClickException(f"Payment '{payment_id}' not found.")
    click.echo(f"Payment '{payment_id}' verified.")


@cli.command('balance')
@click.option('--schedule-id', type=str, required=True, help='Schedule ID')
@click.option('--now', 'now', type=DATE_TYPE, help='Reference date (YYYY-MM-DD), defaults to today')
@click.pass_context
def balance(ctx, schedule_id, now):
    """Shows rent due, rent paid and the outstanding balance."""
    schedule = _load_schedule(ctx, schedule_id)
    payments = get_payments(schedule_id, ctx.obj["data_file"])
    result = calc_outstanding_balance(schedule, payments, _as_date(now))
    click.echo(f"Total due:   {fmt_amount(result['total_due'])}")
    click.echo(f"Total paid:  {fmt_amount(result['total_paid'])}")
    click.echo(f"Outstanding: {fmt_amount(result['outstanding'])}")


@cli.command('reminders')
@click.option('--today', type=DATE_TYPE, help='Reference date (YYYY-MM-DD), defaults to today')
@click.option('--days-ahead', type=int, help='Days before the due date, defaults to the stored config')
@click.pass_context
def reminders(ctx, today, days_ahead):
    """Lists the rent reminders due today."""
    if days_ahead is None:
        days_ahead = _int_config(ctx, "reminder_days_ahead", DEFAULT_REMINDER_DAYS_AHEAD)
    schedules = get_all_schedules(ctx.obj["data_file"])
    due = find_due_reminders(schedules, _as_date(today) or date.today(), days_ahead)
    if due.empty:
        click.echo("No reminders due.")
        return
    for _, row in due.iterrows():
        click.echo(f"{row['schedule_id']}: {row['message']}")


@cli.command('overdue')
@click.option('--today', type=DATE_TYPE, help='Reference date (YYYY-MM-DD), defaults to today')
@click.option('--grace-days', type=int, help='Days past due, defaults to the stored config')
@click.pass_context
def overdue(ctx, today, grace_days):
    """Lists pending payments past their grace period."""
    if grace_days is None:
        grace_days = _int_config(ctx, "overdue_grace_days", DEFAULT_OVERDUE_GRACE_DAYS)
    payments = get_payments(None, ctx.obj["data_file"])
    late = find_overdue_payments(payments, _as_date(today) or date.today(), grace_days)
    if late.empty:
        click.echo("No overdue payments.")
        return
    click.echo(late[["payment_id", "schedule_id", "amount", "due_date", "days_overdue"]].to_string(index=False))


@cli.command('stats')
@click.option('--schedule-id', type=str, required=True, help='Schedule ID')
@click.option('--now', 'now', type=DATE_TYPE, help='Reference date (YYYY-MM-DD), defaults to today')
@click.pass_context
def stats(ctx, schedule_id, now):
    """Shows dashboard statistics and the rent credit score."""
    _load_schedule(ctx, schedule_id)
    payments = get_payments(schedule_id, ctx.obj["data_file"])
    result = compute_dashboard_stats(payments, _as_date(now))
    click.echo(f"Credit score:        {result['credit_score']} ({result['credit_growth']:+d} this month)")
    click.echo(f"Payment streak:      {result['payment_streak']}")
    click.echo(f"On time:             {fmt_percent(result['on_time_percentage'])}")
    click.echo(f"Total paid:          {fmt_amount(result['total_paid'])}")
    click.echo(f"Paid this month:     {fmt_amount(result['monthly_rent_paid'])}")
    click.echo(f"Verification:        {result['verification_status']}")
    click.echo(f"Next payment due:    {result['next_payment_due'] or '-'}")


@cli.command('list-configs')
@click.pass_context
def list_configs(ctx):
    """Lists all configuration entries."""
    click.echo(get_all_config(ctx.obj["data_file"]).to_string(index=False))


@cli.command('get-config')
@click.option('--key', type=str, required=True, help='Config key')
@click.pass_context
def get_config_command(ctx, key):
    """Gets a configuration value by key."""
    value = get_config(key, ctx.obj["data_file"])
    if value is None:
        raise click.ClickException(f"Config with key '{key}' not found.")
    click.echo(value)


@cli.command('set-config')
@click.option('--key', type=str, required=True, help='Config key')
@click.option('--value', type=str, required=True, help='Config value')
@click.option('--description', type=str, default='', help='Description')
@click.pass_context
def set_config_command(ctx, key, value, description):
    """Sets a configuration value."""
    set_config(key, value, description, ctx.obj["data_file"])
    click.echo(f"Config with key '{key}' set.")


if __name__ == "__main__":
    cli()

import logging
import shutil
from datetime import date, datetime
from pathlib import Path
from typing import Iterable, List, Optional

import pandas as pd

from config.constants import (
    SHEET_RENT_SCHEDULES, SHEET_RENT_PAYMENTS, SHEET_CONFIG,
    RENT_SCHEDULES_COLUMNS, RENT_PAYMENTS_COLUMNS, CONFIG_COLUMNS,
    PaymentStatus,
)
from config.settings import (
    EXCEL_FILE, BACKUP_KEEP, CURRENCY_SYMBOL,
    DEFAULT_REMINDER_DAYS_AHEAD, DEFAULT_OVERDUE_GRACE_DAYS,
)
from core.exceptions import ScheduleError
from core.schedule_generator import next_due_within_tenancy, schedule_from_record
from utils.date_utils import parse_date

logger = logging.getLogger(__name__)


def _ensure_data_dir(filepath: Path):
    filepath.parent.mkdir(parents=True, exist_ok=True)


def _default_config_rows() -> List[dict]:
    now = datetime.now().isoformat()
    return [
        {"key": "reminder_days_ahead", "value": str(DEFAULT_REMINDER_DAYS_AHEAD),
         "description": "Days before the due date to send a rent reminder", "updated_at": now},
        {"key": "overdue_grace_days", "value": str(DEFAULT_OVERDUE_GRACE_DAYS),
         "description": "Days past due before a pending payment is overdue", "updated_at": now},
        {"key": "currency_symbol", "value": CURRENCY_SYMBOL,
         "description": "Currency symbol for display", "updated_at": now},
    ]


def _as_object(df: pd.DataFrame, columns: Iterable[str]) -> pd.DataFrame:
    """Blank sheet columns load as float NaN; widen before writing text into them."""
    for col in columns:
        if col in df.columns:
            df[col] = df[col].astype(object)
    return df


def init_excel(filepath: Path = EXCEL_FILE):
    """Create the workbook with every sheet and header row."""
    filepath = Path(filepath)
    _ensure_data_dir(filepath)
    if filepath.exists():
        return

    logger.info("Creating rent workbook at %s", filepath)
    with pd.ExcelWriter(filepath, engine="openpyxl") as writer:
        pd.DataFrame(columns=RENT_SCHEDULES_COLUMNS).to_excel(
            writer, sheet_name=SHEET_RENT_SCHEDULES, index=False)
        pd.DataFrame(columns=RENT_PAYMENTS_COLUMNS).to_excel(
            writer, sheet_name=SHEET_RENT_PAYMENTS, index=False)
        config_df = pd.DataFrame(_default_config_rows(), columns=CONFIG_COLUMNS)
        config_df.to_excel(writer, sheet_name=SHEET_CONFIG, index=False)


def backup_excel(filepath: Path = EXCEL_FILE):
    """Back up the workbook before a write."""
    filepath = Path(filepath)
    if filepath.exists():
        ts = datetime.now().strftime("%Y%m%d_%H%M%S_%f")
        backup_path = filepath.with_suffix(f".xlsx.bak_{ts}")
        shutil.copy2(filepath, backup_path)
        logger.debug("Backed up %s to %s", filepath, backup_path)
        # keep the newest BACKUP_KEEP copies
        backups = sorted(filepath.parent.glob(f"{filepath.stem}.xlsx.bak_*"))
        for old in backups[:-BACKUP_KEEP]:
            old.unlink()


def read_sheet(sheet_name: str, filepath: Path = EXCEL_FILE) -> pd.DataFrame:
    init_excel(filepath)
    try:
        df = pd.read_excel(filepath, sheet_name=sheet_name, engine="openpyxl")
    except ValueError:
        logger.warning("Sheet %s missing from %s", sheet_name, filepath)
        df = pd.DataFrame()
    return df


def write_sheet(df: pd.DataFrame, sheet_name: str, filepath: Path = EXCEL_FILE):
    """Replace one sheet, keeping the others."""
    init_excel(filepath)
    backup_excel(filepath)

    with pd.ExcelWriter(filepath, engine="openpyxl", mode="a", if_sheet_exists="replace") as writer:
        df.to_excel(writer, sheet_name=sheet_name, index=False)
    logger.debug("Wrote %d rows to sheet %s", len(df), sheet_name)


# ---- Rent schedules ----

def get_all_schedules(filepath: Path = EXCEL_FILE) -> pd.DataFrame:
    return read_sheet(SHEET_RENT_SCHEDULES, filepath)


def get_schedule_by_id(schedule_id: str, filepath: Path = EXCEL_FILE) -> Optional[pd.Series]:
    df = get_all_schedules(filepath)
    match = df[df["schedule_id"] == schedule_id]
    if match.empty:
        return None
    return match.iloc[0]


def save_schedule(record: dict, filepath: Path = EXCEL_FILE):
    """Insert or fully overwrite a schedule row."""
    df = get_all_schedules(filepath)
    existing = df[df["schedule_id"] == record["schedule_id"]]
    if not existing.empty:
        df = df.astype(object)
        for col in RENT_SCHEDULES_COLUMNS:
            df.loc[df["schedule_id"] == record["schedule_id"], col] = record.get(col)
        logger.info("Updated rent schedule %s", record["schedule_id"])
    else:
        new_row = pd.DataFrame([record], columns=RENT_SCHEDULES_COLUMNS)
        df = new_row if df.empty else pd.concat([df, new_row], ignore_index=True)
        logger.info("Added rent schedule %s", record["schedule_id"])
    write_sheet(df, SHEET_RENT_SCHEDULES, filepath)


def delete_schedule(schedule_id: str, filepath: Path = EXCEL_FILE):
    df = get_all_schedules(filepath)
    df = df[df["schedule_id"] != schedule_id]
    write_sheet(df, SHEET_RENT_SCHEDULES, filepath)
    # payments go with their schedule
    pdf = read_sheet(SHEET_RENT_PAYMENTS, filepath)
    if "schedule_id" in pdf.columns:
        pdf = pdf[pdf["schedule_id"] != schedule_id]
        write_sheet(pdf, SHEET_RENT_PAYMENTS, filepath)
    logger.info("Deleted rent schedule %s", schedule_id)


def refresh_next_payment_dates(now: Optional[date] = None, filepath: Path = EXCEL_FILE) -> int:
    """
    Recompute next_payment_date for every stored schedule; returns rows changed.

    Schedules whose tenancy has ended get a blank next_payment_date.
    """
    df = get_all_schedules(filepath)
    if df.empty:
        return 0

    df = _as_object(df, ["next_payment_date"])
    changed = 0
    for idx, row in df.iterrows():
        try:
            next_due = next_due_within_tenancy(schedule_from_record(row), now)
        except ScheduleError as exc:
            logger.warning("Skipping schedule %s: %s", row.get("schedule_id"), exc)
            continue
        next_due = next_due.isoformat() if next_due else None
        current = row.get("next_payment_date")
        if pd.isna(current):
            current = None
        if current != next_due:
            df.at[idx, "next_payment_date"] = next_due
            changed += 1

    if changed:
        write_sheet(df, SHEET_RENT_SCHEDULES, filepath)
    logger.info("Refreshed next payment dates: %d of %d schedules changed", changed, len(df))
    return changed


# ---- Rent payments ----

def get_payments(schedule_id: Optional[str] = None, filepath: Path = EXCEL_FILE) -> pd.DataFrame:
    df = read_sheet(SHEET_RENT_PAYMENTS, filepath)
    if schedule_id is None:
        return df
    return df[df["schedule_id"] == schedule_id].reset_index(drop=True)


def add_payments(records: pd.DataFrame, filepath: Path = EXCEL_FILE) -> int:
    """
    Append payment rows not stored yet; returns rows added.

    A row is skipped when its payment_id exists or when its schedule already
    has a payment for the same due date.
    """
    df = read_sheet(SHEET_RENT_PAYMENTS, filepath)
    stored = set(zip(df["schedule_id"].astype(str), df["due_date"].map(parse_date)))
    keys = list(zip(records["schedule_id"].astype(str), records["due_date"].map(parse_date)))
    is_new = pd.Series([key not in stored for key in keys], index=records.index, dtype=bool)
    new_rows = records[~records["payment_id"].isin(df["payment_id"]) & is_new]
    if new_rows.empty:
        return 0
    df = new_rows.reset_index(drop=True) if df.empty else pd.concat([df, new_rows], ignore_index=True)
    write_sheet(df, SHEET_RENT_PAYMENTS, filepath)
    logger.info("Added %d rent payments", len(new_rows))
    return len(new_rows)


def mark_payment_paid(payment_id: str, paid_date: Optional[date] = None, filepath: Path = EXCEL_FILE) -> str:
    """Record a payment as paid (or late when paid after its due date); returns the new status."""
    df = read_sheet(SHEET_RENT_PAYMENTS, filepath)
    mask = df["payment_id"] == payment_id
    if not mask.any():
        raise KeyError(f"Payment '{payment_id}' not found")

    paid_on = paid_date or date.today()
    due = parse_date(df.loc[mask, "due_date"].iloc[0])
    status = PaymentStatus.LATE.value if due is not None and paid_on > due else PaymentStatus.PAID.value

    df = _as_object(df, ["paid_date", "status"])
    df.loc[mask, "paid_date"] = paid_on.isoformat()
    df.loc[mask, "status"] = status
    write_sheet(df, SHEET_RENT_PAYMENTS, filepath)
    logger.info("Payment %s marked %s on %s", payment_id, status, paid_on)
    return status


def verify_payment(payment_id: str, filepath: Path = EXCEL_FILE):
    """Landlord confirmation of a payment."""
    df = read_sheet(SHEET_RENT_PAYMENTS, filepath)
    mask = df["payment_id"] == payment_id
    if not mask.any():
        raise KeyError(f"Payment '{payment_id}' not found")
    df = _as_object(df, ["is_verified"])
    df.loc[mask, "is_verified"] = True
    write_sheet(df, SHEET_RENT_PAYMENTS, filepath)
    logger.info("Payment %s verified", payment_id)


# ---- Config ----

def get_config(key: str, filepath: Path = EXCEL_FILE) -> Optional[str]:
    df = read_sheet(SHEET_CONFIG, filepath)
    match = df[df["key"] == key]
    if match.empty:
        return None
    return str(match.iloc[0]["value"])


def get_all_config(filepath: Path = EXCEL_FILE) -> pd.DataFrame:
    return read_sheet(SHEET_CONFIG, filepath)


def set_config(key: str, value: str, description: str = "", filepath: Path = EXCEL_FILE):
    df = _as_object(read_sheet(SHEET_CONFIG, filepath), CONFIG_COLUMNS)
    now = datetime.now().isoformat()
    if key in df["key"].values:
        df.loc[df["key"] == key, "value"] = value
        df.loc[df["key"] == key, "updated_at"] = now
        if description:
            df.loc[df["key"] == key, "description"] = description
    else:
        new_row = pd.DataFrame([{
            "key": key, "value": value,
            "description": description, "updated_at": now,
        }])
        df = pd.concat([df, new_row], ignore_index=True)
    write_sheet(df, SHEET_CONFIG, filepath)

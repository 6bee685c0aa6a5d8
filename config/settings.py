import os
from pathlib import Path

# Project root
PROJECT_ROOT = Path(__file__).parent.parent

# Data file paths
DATA_DIR = Path(os.environ.get("RENT_TRACKER_DATA_DIR", PROJECT_ROOT / "data"))
EXCEL_FILE = DATA_DIR / "rent_data.xlsx"
BACKUP_DIR = DATA_DIR
BACKUP_KEEP = 5

# Reminder defaults (days)
DEFAULT_REMINDER_DAYS_AHEAD = 3
DEFAULT_OVERDUE_GRACE_DAYS = 5

# Display
CURRENCY_SYMBOL = "£"
DATE_FMT = "%Y-%m-%d"
DEFAULT_UPCOMING_COUNT = 6

# Credit score weighting (max points per component)
ON_TIME_SCORE_MAX = 600
VERIFICATION_SCORE_MAX = 200
CONSISTENCY_SCORE_MAX = 200
CONSISTENCY_TARGET_PAYMENTS = 12

# Logging
LOG_LEVEL = os.environ.get("RENT_TRACKER_LOG_LEVEL", "INFO")
LOG_FORMAT = "%(asctime)s %(levelname)s %(name)s: %(message)s"

# Amount precision
AMOUNT_PRECISION = 2

"""Configuration settings for the recurring payment scheduler."""
from pathlib import Path

# Paths
DATA_DIR = Path.home() / ".budget_recurrence"
DB_PATH = DATA_DIR / "payments.db"

# Date formats (ISO calendar dates, no time component)
DATE_FORMAT = "%Y-%m-%d"
MONTH_FORMAT = "%Y-%m"

# Schedule generation
MAX_OCCURRENCE_SCAN = 2000  # Consecutive non-advancing steps before a schedule counts as exhausted
BUSINESS_DAY_SHIFT = "forward"  # forward (Sat/Sun -> Mon), backward (-> Fri), nearest (Sat -> Fri, Sun -> Mon)

# Queries
DEFAULT_UPCOMING_DAYS = 30
DUE_SOON_DAYS = 3


def ensure_data_dir() -> Path:
    """Ensure the data directory exists."""
    DATA_DIR.mkdir(parents=True, exist_ok=True)
    return DATA_DIR

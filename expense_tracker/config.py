"""Configuration for the expense tracker.

Paths and defaults live here; each can be overridden with an environment
variable.
"""

import logging
import os
from pathlib import Path

# Project root - this file is in expense_tracker/
_PROJECT_ROOT = Path(__file__).parent.parent.resolve()

DATA_DIR = Path(os.getenv("EXPENSE_TRACKER_DATA_DIR", _PROJECT_ROOT / "data"))

STORE_PATH = Path(
    os.getenv("EXPENSE_TRACKER_STORE_PATH", DATA_DIR / "expenses.json")
).resolve()

PREFERENCES_PATH = Path(
    os.getenv("EXPENSE_TRACKER_PREFERENCES_PATH", DATA_DIR / "preferences.json")
).resolve()

EXPORT_DIR = Path(os.getenv("EXPENSE_TRACKER_EXPORT_DIR", DATA_DIR / "exports")).resolve()

LOG_LEVEL = os.getenv("EXPENSE_TRACKER_LOG_LEVEL", "INFO").upper()

# 0 = Monday ... 6 = Sunday
FIRST_WEEKDAY = int(os.getenv("EXPENSE_TRACKER_FIRST_WEEKDAY", "0")) % 7

LOG_FORMAT = "%(asctime)s %(levelname)s %(name)s: %(message)s"


def ensure_data_directories() -> None:
    """Create all required data directories if they don't exist."""
    for directory in [DATA_DIR, STORE_PATH.parent, PREFERENCES_PATH.parent, EXPORT_DIR]:
        directory.mkdir(parents=True, exist_ok=True)


def configure_logging(level: str = LOG_LEVEL) -> None:
    logging.basicConfig(level=getattr(logging, level, logging.INFO), format=LOG_FORMAT)

"""CSV and JSON export of expense lists.

Formatting is pure and returns an ``Either``; writing to disk goes through a
temporary file in the target directory so a failed export never leaves a
half-written file behind.
"""
import json
import logging
import os
import tempfile
from datetime import date, datetime
from enum import Enum
from pathlib import Path
from typing import Iterable, Optional

import pandas as pd

from expense_tracker.domain import Expense
from expense_tracker.functional import Either, Left, Right

logger = logging.getLogger(__name__)

CSV_COLUMNS = ["ID", "Name", "Date", "Amount", "Category"]
CSV_HEADER = ",".join(CSV_COLUMNS)


class ExportFormat(Enum):
    CSV = "csv"
    JSON = "json"


def medium_date(d: datetime) -> str:
    """Medium-style date, e.g. ``Jan 5, 2025``."""
    return f"{d:%b} {d.day}, {d.year}"


def to_records(expenses: Iterable[Expense]) -> list[dict]:
    return [
        {
            "id": str(e.id),
            "name": e.name,
            "date": medium_date(e.date),
            "amount": e.value,
            "category": e.category.label,
        }
        for e in expenses
    ]


def to_csv(expenses: Iterable[Expense]) -> str:
    rows = [
        dict(zip(CSV_COLUMNS, (r["id"], r["name"], r["date"], float(r["amount"]), r["category"])))
        for r in to_records(expenses)
    ]
    df = pd.DataFrame(rows, columns=CSV_COLUMNS)
    # "\r\n" makes the writer quote fields holding either line break character
    return df.to_csv(index=False, lineterminator="\r\n")


def to_json(expenses: Iterable[Expense]) -> str:
    return json.dumps(to_records(expenses), indent=2, ensure_ascii=False, allow_nan=False)


def format_expenses(expenses: Iterable[Expense], kind: ExportFormat) -> Either[dict, str]:
    expenses = tuple(expenses)
    try:
        text = to_csv(expenses) if kind is ExportFormat.CSV else to_json(expenses)
        # content must survive being written as UTF-8
        text.encode("utf-8")
    except (TypeError, ValueError) as exc:
        # UnicodeEncodeError is a ValueError
        logger.warning("Could not serialise %d expenses as %s: %s", len(expenses), kind.value, exc)
        return Left({
            "error": "serialization_failed",
            "message": str(exc),
            "format": kind.value,
        })
    return Right(text)


def export_filename(kind: ExportFormat, today: date) -> str:
    return f"ExpenseTracker_{today:%Y-%m-%d}.{kind.value}"


def write_atomically(content: str, target: Path) -> Either[dict, Path]:
    target = Path(target)
    tmp_name = None
    try:
        target.parent.mkdir(parents=True, exist_ok=True)
        fd, tmp_name = tempfile.mkstemp(dir=target.parent, prefix=".write-", suffix=".tmp")
        with os.fdopen(fd, "w", encoding="utf-8", newline="") as handle:
            handle.write(content)
        os.replace(tmp_name, target)
    except OSError as exc:
        logger.error("Failed to write %s: %s", target, exc)
        if tmp_name and os.path.exists(tmp_name):
            os.unlink(tmp_name)
        return Left({
            "error": "write_failed",
            "message": str(exc),
            "path": str(target),
        })
    return Right(target)


def export_expenses(
    expenses: Iterable[Expense],
    kind: ExportFormat,
    directory: Path,
    today: Optional[date] = None,
) -> Either[dict, Path]:
    today = today or date.today()
    target = Path(directory) / export_filename(kind, today)
    result = format_expenses(expenses, kind).bind(lambda text: write_atomically(text, target))
    if result.is_right():
        logger.info("Exported expenses to %s", target)
    return result

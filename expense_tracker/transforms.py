import json
import logging
from dataclasses import replace
from datetime import datetime
from pathlib import Path
from typing import Tuple, Union

from expense_tracker.domain import Budget, Expense, parse_category, parse_period
from expense_tracker.export import write_atomically
from expense_tracker.functional import Either, Left

logger = logging.getLogger(__name__)

Snapshot = Tuple[Tuple[Expense, ...], Tuple[Budget, ...]]


def expense_from_dict(d: dict) -> Expense:
    return Expense(
        id=str(d["id"]),
        name=d["name"],
        date=datetime.fromisoformat(d["date"]),
        value=float(d["value"]),
        category=parse_category(d.get("category")),
    )


def budget_from_dict(d: dict) -> Budget:
    return Budget(
        id=str(d["id"]),
        category=parse_category(d.get("category")),
        amount=float(d["amount"]),
        period=parse_period(d["period"]),
        start_date=datetime.fromisoformat(d["start_date"]),
    )


def expense_to_dict(e: Expense) -> dict:
    return {
        "id": e.id,
        "name": e.name,
        "date": e.date.isoformat(),
        "value": e.value,
        "category": e.category.label,
    }


def budget_to_dict(b: Budget) -> dict:
    return {
        "id": b.id,
        "category": b.category.label,
        "amount": b.amount,
        "period": b.period.value,
        "start_date": b.start_date.isoformat(),
    }


def _parse_records(raw, parse, kind: str, path: Path) -> tuple:
    if not isinstance(raw, list):
        logger.warning("Ignoring %s in %s: expected a list, got %s", kind, path, type(raw).__name__)
        return ()
    parsed = []
    for i, item in enumerate(raw):
        try:
            parsed.append(parse(item))
        except (KeyError, TypeError, ValueError, AttributeError) as exc:
            logger.warning("Skipping malformed %s record #%d in %s: %r", kind, i, path, exc)
    return tuple(parsed)


def load_seed(path: Union[str, Path]) -> Snapshot:
    path = Path(path)
    if not path.exists():
        return (), ()
    try:
        with path.open("r", encoding="utf-8") as f:
            data = json.load(f)
    except (json.JSONDecodeError, OSError) as exc:
        logger.warning("Ignoring unreadable snapshot %s: %s", path, exc)
        return (), ()
    if not isinstance(data, dict):
        logger.warning("Ignoring snapshot %s: top level is %s, not an object", path, type(data).__name__)
        return (), ()

    expenses = _parse_records(data.get("expenses", []), expense_from_dict, "expense", path)
    budgets = _parse_records(data.get("budgets", []), budget_from_dict, "budget", path)
    logger.info("Loaded %d expenses and %d budgets from %s", len(expenses), len(budgets), path)
    return expenses, budgets


def save_seed(
    path: Union[str, Path], expenses: Tuple[Expense, ...], budgets: Tuple[Budget, ...]
) -> Either[dict, Path]:
    payload = {
        "expenses": [expense_to_dict(e) for e in expenses],
        "budgets": [budget_to_dict(b) for b in budgets],
    }
    try:
        text = json.dumps(payload, indent=2, ensure_ascii=False, allow_nan=False)
    except ValueError as exc:
        logger.error("Refusing to save snapshot %s: %s", path, exc)
        return Left({
            "error": "serialization_failed",
            "message": str(exc),
            "path": str(path),
        })
    return write_atomically(text, Path(path))


def add_expense(expenses: Tuple[Expense, ...], e: Expense) -> Tuple[Expense, ...]:
    return expenses + (e,)


def replace_expense(expenses: Tuple[Expense, ...], e: Expense) -> Tuple[Expense, ...]:
    return tuple(e if x.id == e.id else x for x in expenses)


def remove_expense(expenses: Tuple[Expense, ...], expense_id: str) -> Tuple[Expense, ...]:
    return tuple(filter(lambda x: x.id != expense_id, expenses))


def replace_budget(budgets: Tuple[Budget, ...], b: Budget) -> Tuple[Budget, ...]:
    return tuple(b if x.id == b.id else x for x in budgets)


def remove_budget(budgets: Tuple[Budget, ...], budget_id: str) -> Tuple[Budget, ...]:
    return tuple(filter(lambda x: x.id != budget_id, budgets))


def update_budget_amount(budgets: Tuple[Budget, ...], bid: str, new_amount: float) -> Tuple[Budget, ...]:
    return tuple(
        replace(b, amount=new_amount) if b.id == bid else b
        for b in budgets
    )

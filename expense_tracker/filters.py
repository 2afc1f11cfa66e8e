from datetime import datetime
from typing import Callable, Iterable, Optional

from expense_tracker.domain import Category, Expense, FilterSpec, parse_category

Predicate = Callable[[Expense], bool]


def by_search_text(text: str) -> Predicate:
    needle = text.lower()

    def _filter(e: Expense) -> bool:
        return not needle or needle in e.name.lower()

    return _filter


def by_date_range(start: datetime, end: datetime) -> Predicate:
    def _filter(e: Expense) -> bool:
        return start <= e.date <= end

    return _filter


def by_amount_range(min: float, max: Optional[float]) -> Predicate:
    def _filter(e: Expense) -> bool:
        if e.value < min:
            return False
        return max is None or e.value <= max

    return _filter


def by_categories(categories: Iterable[Category]) -> Predicate:
    allowed = frozenset(categories)

    def _filter(e: Expense) -> bool:
        return parse_category(e.category) in allowed

    return _filter


def by_category(category: Category) -> Predicate:
    return by_categories((category,))


def predicates_for(spec: FilterSpec) -> tuple[Predicate, ...]:
    """Predicates an expense must satisfy under ``spec``; inactive ranges add none."""
    preds: list[Predicate] = [by_search_text(spec.search_text)]
    if spec.date_filter_active and spec.start_date is not None and spec.end_date is not None:
        preds.append(by_date_range(spec.start_date, spec.end_date))
    if spec.amount_filter_active:
        preds.append(by_amount_range(spec.min_amount, spec.max_amount))
    preds.append(by_categories(spec.categories))
    return tuple(preds)


def apply_filters(expenses: Iterable[Expense], spec: FilterSpec) -> tuple[Expense, ...]:
    preds = predicates_for(spec)
    return tuple(e for e in expenses if all(p(e) for p in preds))

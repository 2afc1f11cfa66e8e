from typing import Iterable

from expense_tracker.domain import Expense, SortKey

_FIELDS = {
    SortKey.DATE_ASC: (lambda e: e.date, False),
    SortKey.DATE_DESC: (lambda e: e.date, True),
    SortKey.AMOUNT_ASC: (lambda e: e.value, False),
    SortKey.AMOUNT_DESC: (lambda e: e.value, True),
}


def sort_expenses(expenses: Iterable[Expense], key: SortKey = SortKey.DATE_DESC) -> tuple[Expense, ...]:
    # sorted() keeps equal items in input order, reverse=True included
    field_of, descending = _FIELDS[key]
    return tuple(sorted(expenses, key=field_of, reverse=descending))

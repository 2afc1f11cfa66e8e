from dataclasses import dataclass, field, replace
from datetime import datetime
from enum import Enum
from typing import FrozenSet, Optional, Union
from uuid import uuid4

from dateutil.relativedelta import relativedelta


class Category(Enum):
    FOOD = "Food"
    TRANSPORTATION = "Transportation"
    HOUSING = "Housing"
    UTILITIES = "Utilities"
    ENTERTAINMENT = "Entertainment"
    HEALTH = "Health"
    EDUCATION = "Education"
    SHOPPING = "Shopping"
    TRAVEL = "Travel"
    OTHER = "Other"

    @property
    def label(self) -> str:
        return self.value


ALL_CATEGORIES: FrozenSet[Category] = frozenset(Category)


def parse_category(raw: Union[Category, str, None]) -> Category:
    """Map a stored label to a Category; anything unknown becomes OTHER."""
    if isinstance(raw, Category):
        return raw
    if not isinstance(raw, str):
        return Category.OTHER
    key = raw.strip().lower()
    for cat in Category:
        if key == cat.value.lower() or key == cat.name.lower():
            return cat
    return Category.OTHER


class BudgetPeriod(Enum):
    WEEKLY = "Weekly"
    MONTHLY = "Monthly"
    YEARLY = "Yearly"


def parse_period(raw: Union[BudgetPeriod, str, None]) -> Optional[BudgetPeriod]:
    if isinstance(raw, BudgetPeriod):
        return raw
    if not isinstance(raw, str):
        return None
    key = raw.strip().lower()
    for p in BudgetPeriod:
        if key == p.value.lower() or key == p.name.lower():
            return p
    return None


class SortKey(Enum):
    DATE_ASC = "Oldest"
    DATE_DESC = "Newest"
    AMOUNT_ASC = "Low to High"
    AMOUNT_DESC = "High to Low"


class TimeRange(Enum):
    WEEK = "Week"
    MONTH = "Month"
    YEAR = "Year"
    ALL = "All Time"


def _new_id() -> str:
    return uuid4().hex


@dataclass(frozen=True)
class Expense:
    name: str
    date: datetime
    value: float
    category: Category = Category.OTHER
    id: str = field(default_factory=_new_id)

    def __post_init__(self):
        # stored labels may be stale or free text
        object.__setattr__(self, "category", parse_category(self.category))


@dataclass(frozen=True)
class Budget:
    category: Category
    amount: float
    period: BudgetPeriod
    start_date: datetime
    id: str = field(default_factory=_new_id)

    def __post_init__(self):
        object.__setattr__(self, "category", parse_category(self.category))


# Filters shown in the search sheet. Bounds are kept even when a range is
# switched off so that toggling it back on restores them.
@dataclass(frozen=True)
class FilterSpec:
    search_text: str = ""
    date_filter_active: bool = False
    start_date: Optional[datetime] = None
    end_date: Optional[datetime] = None
    amount_filter_active: bool = False
    min_amount: float = 0.0
    max_amount: Optional[float] = None  # None: no upper bound
    categories: FrozenSet[Category] = ALL_CATEGORIES

    @classmethod
    def default(cls, now: datetime) -> "FilterSpec":
        return cls(start_date=now - relativedelta(months=1), end_date=now)

    def clear_date_filter(self, now: datetime) -> "FilterSpec":
        return replace(
            self,
            date_filter_active=False,
            start_date=now - relativedelta(months=1),
            end_date=now,
        )

    def clear_amount_filter(self) -> "FilterSpec":
        return replace(self, amount_filter_active=False, min_amount=0.0, max_amount=None)

    def toggle_category(self, category: Category) -> "FilterSpec":
        if category in self.categories:
            return replace(self, categories=self.categories - {category})
        return replace(self, categories=self.categories | {category})

    def select_all_categories(self) -> "FilterSpec":
        return replace(self, categories=ALL_CATEGORIES)

    def clear_categories(self) -> "FilterSpec":
        return replace(self, categories=frozenset())

    def reset(self, now: datetime) -> "FilterSpec":
        return FilterSpec.default(now)

    @property
    def is_any_filter_active(self) -> bool:
        return (
            bool(self.search_text)
            or self.date_filter_active
            or self.amount_filter_active
            or self.categories != ALL_CATEGORIES
        )

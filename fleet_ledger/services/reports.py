"""
Derived expense and toll views.

Everything here is a pure function of (collection, filters). The data context
wraps them in Selectors so a view is only recomputed when the collection tuple
or the filter value it depends on changes.
"""

from collections import OrderedDict
from dataclasses import dataclass
from datetime import date
from typing import Any, Callable, Dict, Iterable, List, Optional, Tuple

from fleet_ledger.entities import Expense, ExpenseCategory, Toll, TollRecord

CATEGORIES = tuple(c.value for c in ExpenseCategory)

ALL = "all"


@dataclass(frozen=True)
class ExpenseFilters:
    """Active filter values. None (or "all") means the filter is off."""
    search_term: str = ""
    vehicle_id: Optional[str] = None
    trip_id: Optional[str] = None
    category: Optional[str] = None
    date_from: Optional[date] = None
    date_to: Optional[date] = None


@dataclass(frozen=True)
class ExpenseReport:
    expenses: Tuple[Expense, ...]
    total: float
    by_category: Dict[str, float]


def _active(value) -> bool:
    return value is not None and value != ALL


def matches(expense: Expense, filters: ExpenseFilters) -> bool:
    term = (filters.search_term or "").strip().lower()
    if term and term not in (expense.description or "").lower() and term not in expense.category.lower():
        return False
    if _active(filters.vehicle_id) and expense.vehicle_id != filters.vehicle_id:
        return False
    if _active(filters.trip_id) and expense.trip_id != filters.trip_id:
        return False
    if _active(filters.category) and expense.category != filters.category:
        return False
    if filters.date_from and expense.date < filters.date_from:
        return False
    if filters.date_to and expense.date > filters.date_to:
        return False
    return True


def filtered_expenses(expenses: Iterable[Expense], filters: Optional[ExpenseFilters] = None) -> Tuple[Expense, ...]:
    filters = filters or ExpenseFilters()
    return tuple(e for e in expenses if matches(e, filters))


def expenses_by_category(expenses: Iterable[Expense],
                         filters: Optional[ExpenseFilters] = None) -> Dict[str, Tuple[Expense, ...]]:
    """Every category is present, even when empty."""
    selected = filtered_expenses(expenses, filters)
    return OrderedDict((category, tuple(e for e in selected if e.category == category)) for category in CATEGORIES)


def category_totals(expenses: Iterable[Expense]) -> Dict[str, float]:
    totals = OrderedDict((category, 0.0) for category in CATEGORIES)
    for expense in expenses:
        if expense.category in totals:
            totals[expense.category] += expense.amount
    return totals


def expense_report(expenses: Iterable[Expense], filters: Optional[ExpenseFilters] = None) -> ExpenseReport:
    selected = filtered_expenses(expenses, filters)
    return ExpenseReport(
        expenses=selected,
        total=sum(e.amount for e in selected),
        by_category=category_totals(selected),
    )


def monthly_expense_totals(expenses: Iterable[Expense],
                           filters: Optional[ExpenseFilters] = None) -> Dict[str, float]:
    """Totals per "YYYY-MM", oldest month first."""
    totals: Dict[str, float] = {}
    for expense in filtered_expenses(expenses, filters):
        month = expense.date.strftime("%Y-%m")
        totals[month] = totals.get(month, 0.0) + expense.amount
    return OrderedDict(sorted(totals.items()))


def toll_spending_by_toll(records: Iterable[TollRecord], tolls: Iterable[Toll]) -> List[Dict[str, Any]]:
    """Passages and amount paid per toll, highest spending first."""
    names = {toll.id: toll.name for toll in tolls}
    rows: Dict[str, Dict[str, Any]] = {}
    for record in records:
        row = rows.setdefault(record.toll_id, {
            "toll_id": record.toll_id,
            "name": names.get(record.toll_id, ""),
            "count": 0,
            "total": 0.0,
        })
        row["count"] += 1
        row["total"] += record.price
    return sorted(rows.values(), key=lambda r: (-r["total"], r["name"]))


class Selector:
    """
    Memoises `compute(*deps)` on its last arguments.

    A dependency is unchanged when it is the same object or compares equal,
    so repository tuples (replaced on every change) and frozen filter values
    both work as cache keys.
    """

    def __init__(self, compute: Callable):
        self._compute = compute
        self._deps: Optional[tuple] = None
        self._value = None
        self.computations = 0

    def __call__(self, *deps):
        if self._deps is None or not self._same(deps):
            self._value = self._compute(*deps)
            self._deps = deps
            self.computations += 1
        return self._value

    def _same(self, deps: tuple) -> bool:
        if len(deps) != len(self._deps):
            return False
        return all(new is old or new == old for new, old in zip(deps, self._deps))

    def invalidate(self):
        self._deps = None
        self._value = None

"""Storage capability set and the in-memory backend used by default."""
from __future__ import annotations

import threading
from abc import ABC, abstractmethod
from collections.abc import Iterable
from datetime import UTC, datetime
from typing import Callable, Dict, List, Optional

from .logging import get_logger
from .models import Expense, NewExpense

logger = get_logger(__name__)

Clock = Callable[[], datetime]


def utc_now() -> datetime:
    return datetime.now(tz=UTC)


def newest_first(expenses: Iterable[Expense]) -> List[Expense]:
    """Order by ``created_at`` descending, breaking ties by id descending."""

    return sorted(expenses, key=lambda expense: (expense.created_at, expense.id), reverse=True)


class ExpenseStore(ABC):
    """Operations every expense backend provides to the API layer.

    Lookups and deletes never raise for unknown ids: they return ``None`` or
    ``False`` instead.
    """

    @abstractmethod
    def list(self) -> List[Expense]:
        """Return every expense, most recent first."""

    @abstractmethod
    def get(self, expense_id: int) -> Optional[Expense]:
        """Return the expense with ``expense_id`` or ``None``."""

    @abstractmethod
    def create(self, new_expense: NewExpense) -> Expense:
        """Store ``new_expense`` with a fresh id and timestamp."""

    @abstractmethod
    def delete(self, expense_id: int) -> bool:
        """Remove the expense and report whether anything was removed."""

    @abstractmethod
    def list_by_category(self, category: str) -> List[Expense]:
        """Return expenses whose category equals ``category``, most recent first."""


class MemoryExpenseStore(ExpenseStore):
    """Dictionary-backed store living for the lifetime of the process."""

    def __init__(self, clock: Clock = utc_now) -> None:
        self._expenses: Dict[int, Expense] = {}
        self._next_id = 1
        self._clock = clock
        # Sync endpoints run in a thread pool.
        self._lock = threading.Lock()

    def list(self) -> List[Expense]:
        with self._lock:
            snapshot = list(self._expenses.values())
        return newest_first(snapshot)

    def get(self, expense_id: int) -> Optional[Expense]:
        return self._expenses.get(expense_id)

    def create(self, new_expense: NewExpense) -> Expense:
        with self._lock:
            expense = Expense(
                id=self._next_id,
                amount=new_expense.amount,
                description=new_expense.description,
                category=new_expense.category,
                created_at=self._clock(),
            )
            self._expenses[expense.id] = expense
            self._next_id += 1
        logger.info("Created expense %s", expense.id, extra={"expense_id": expense.id})
        return expense

    def delete(self, expense_id: int) -> bool:
        with self._lock:
            removed = self._expenses.pop(expense_id, None)
        if removed is None:
            logger.debug("Delete requested for unknown expense %s", expense_id)
            return False
        logger.info("Deleted expense %s", expense_id, extra={"expense_id": expense_id})
        return True

    def list_by_category(self, category: str) -> List[Expense]:
        with self._lock:
            matches = [expense for expense in self._expenses.values() if expense.category == category]
        return newest_first(matches)


__all__ = ["ExpenseStore", "MemoryExpenseStore", "newest_first", "utc_now"]

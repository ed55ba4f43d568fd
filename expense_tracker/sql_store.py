"""Relational :class:`ExpenseStore` backed by SQLAlchemy."""
from __future__ import annotations

from datetime import UTC
from typing import List, Optional

from sqlalchemy import select
from sqlalchemy.orm import Session, sessionmaker

from .database import ExpenseRecord, session_scope
from .logging import get_logger
from .models import MAX_EXPENSE_ID, MIN_EXPENSE_ID, Category, Expense, NewExpense, quantize_amount
from .store import Clock, ExpenseStore, utc_now

logger = get_logger(__name__)


def _to_expense(record: ExpenseRecord) -> Expense:
    created_at = record.created_at
    # SQLite hands back naive datetimes; values are always written in UTC.
    if created_at.tzinfo is None:
        created_at = created_at.replace(tzinfo=UTC)
    return Expense(
        id=record.id,
        amount=quantize_amount(record.amount),
        description=record.description,
        category=Category(record.category),
        created_at=created_at,
    )


class SqlExpenseStore(ExpenseStore):
    def __init__(self, session_factory: sessionmaker[Session], clock: Clock = utc_now) -> None:
        self._session_factory = session_factory
        self._clock = clock

    def _ordered(self):
        return select(ExpenseRecord).order_by(ExpenseRecord.created_at.desc(), ExpenseRecord.id.desc())

    def list(self) -> List[Expense]:
        with session_scope(self._session_factory) as session:
            return [_to_expense(record) for record in session.scalars(self._ordered())]

    def get(self, expense_id: int) -> Optional[Expense]:
        if not MIN_EXPENSE_ID <= expense_id <= MAX_EXPENSE_ID:
            return None
        with session_scope(self._session_factory) as session:
            record = session.get(ExpenseRecord, expense_id)
            return _to_expense(record) if record is not None else None

    def create(self, new_expense: NewExpense) -> Expense:
        with session_scope(self._session_factory) as session:
            record = ExpenseRecord(
                amount=new_expense.amount,
                description=new_expense.description,
                category=new_expense.category.value,
                created_at=self._clock(),
            )
            session.add(record)
            session.flush()
            expense = _to_expense(record)
        logger.info("Created expense %s", expense.id, extra={"expense_id": expense.id})
        return expense

    def delete(self, expense_id: int) -> bool:
        if not MIN_EXPENSE_ID <= expense_id <= MAX_EXPENSE_ID:
            logger.debug("Delete requested for out-of-range expense id %s", expense_id)
            return False
        with session_scope(self._session_factory) as session:
            record = session.get(ExpenseRecord, expense_id)
            if record is None:
                logger.debug("Delete requested for unknown expense %s", expense_id)
                return False
            session.delete(record)
        logger.info("Deleted expense %s", expense_id, extra={"expense_id": expense_id})
        return True

    def list_by_category(self, category: str) -> List[Expense]:
        stmt = self._ordered().where(ExpenseRecord.category == category)
        with session_scope(self._session_factory) as session:
            return [_to_expense(record) for record in session.scalars(stmt)]


__all__ = ["SqlExpenseStore"]

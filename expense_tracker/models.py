"""Domain types for the expense tracker."""
from __future__ import annotations

from dataclasses import dataclass
from datetime import datetime
from decimal import ROUND_HALF_UP, Decimal
from enum import Enum
from typing import Final

AMOUNT_QUANTUM: Final[Decimal] = Decimal("0.01")
MAX_AMOUNT: Final[Decimal] = Decimal("99999999.99")
MAX_DESCRIPTION_LENGTH: Final[int] = 100
# Signed 64-bit range of an SQL INTEGER primary key.
MIN_EXPENSE_ID: Final[int] = -(2**63)
MAX_EXPENSE_ID: Final[int] = 2**63 - 1


class Category(str, Enum):
    FOOD = "food"
    TRANSPORT = "transport"
    SHOPPING = "shopping"
    ENTERTAINMENT = "entertainment"
    UTILITIES = "utilities"
    HEALTHCARE = "healthcare"
    EDUCATION = "education"
    OTHERS = "others"

    @property
    def label(self) -> str:
        return CATEGORY_LABELS[self]


CATEGORY_LABELS: Final[dict[Category, str]] = {
    Category.FOOD: "Food & Dining",
    Category.TRANSPORT: "Transportation",
    Category.SHOPPING: "Shopping",
    Category.ENTERTAINMENT: "Entertainment",
    Category.UTILITIES: "Utilities",
    Category.HEALTHCARE: "Healthcare",
    Category.EDUCATION: "Education",
    Category.OTHERS: "Others",
}


def quantize_amount(value: Decimal) -> Decimal:
    """Round ``value`` to cents using half-up rounding."""

    return value.quantize(AMOUNT_QUANTUM, rounding=ROUND_HALF_UP)


@dataclass(frozen=True)
class NewExpense:
    """Validated payload accepted by :meth:`ExpenseStore.create`."""

    amount: Decimal
    description: str
    category: Category


@dataclass(frozen=True)
class Expense:
    """Stored expense; ``id`` and ``created_at`` are assigned by the store."""

    id: int
    amount: Decimal
    description: str
    category: Category
    created_at: datetime

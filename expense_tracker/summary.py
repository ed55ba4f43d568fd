"""Client-side aggregation over a fetched list of expenses."""
from __future__ import annotations

from collections.abc import Iterable, Sequence
from dataclasses import dataclass
from datetime import date, datetime
from decimal import Decimal
from typing import Optional, Protocol

ALL_CATEGORIES = "all"


class ExpenseLike(Protocol):
    amount: Decimal
    description: str
    category: str
    created_at: datetime


@dataclass(frozen=True)
class ExpenseSummary:
    total: Decimal
    monthly_total: Decimal
    count: int


def filter_expenses(
    expenses: Iterable[ExpenseLike],
    search: str = "",
    category: Optional[str] = None,
) -> list[ExpenseLike]:
    """Keep expenses whose description contains ``search`` (case-insensitive)
    and whose category matches ``category`` unless it is ``None`` or ``"all"``."""

    needle = search.lower()
    return [
        expense
        for expense in expenses
        if needle in expense.description.lower()
        and (category in (None, ALL_CATEGORIES) or expense.category == category)
    ]


def summarise(expenses: Sequence[ExpenseLike], today: Optional[date] = None) -> ExpenseSummary:
    """Compute the total, the current-month total and the transaction count.

    The month is taken from ``today`` (defaults to the local date) and compared
    against each expense's ``created_at`` in its own timezone.
    """

    reference = today or date.today()
    total = sum((expense.amount for expense in expenses), Decimal("0"))
    monthly_total = sum(
        (
            expense.amount
            for expense in expenses
            if expense.created_at.year == reference.year and expense.created_at.month == reference.month
        ),
        Decimal("0"),
    )
    return ExpenseSummary(total=total, monthly_total=monthly_total, count=len(expenses))


def format_currency(amount: Decimal) -> str:
    """Format ``amount`` as Indian rupees with up to two fraction digits."""

    sign = "-" if amount < 0 else ""
    whole, _, fraction = f"{abs(amount):.2f}".partition(".")
    fraction = fraction.rstrip("0")
    grouped = _group_indian(whole)
    return f"{sign}₹{grouped}" + (f".{fraction}" if fraction else "")


def _group_indian(digits: str) -> str:
    # en-IN groups the last three digits, then pairs: 12,34,567
    if len(digits) <= 3:
        return digits
    head, tail = digits[:-3], digits[-3:]
    pairs = []
    while len(head) > 2:
        pairs.insert(0, head[-2:])
        head = head[:-2]
    if head:
        pairs.insert(0, head)
    return ",".join(pairs + [tail])


__all__ = ["ExpenseSummary", "filter_expenses", "format_currency", "summarise"]

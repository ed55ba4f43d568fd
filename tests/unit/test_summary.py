from __future__ import annotations

from datetime import UTC, date, datetime
from decimal import Decimal

import pytest

from expense_tracker.models import Category, Expense
from expense_tracker.summary import ExpenseSummary, filter_expenses, format_currency, summarise


def _expense(expense_id: int, amount: str, description: str, category: Category, created_at: datetime) -> Expense:
    return Expense(
        id=expense_id,
        amount=Decimal(amount),
        description=description,
        category=category,
        created_at=created_at,
    )


@pytest.fixture()
def expenses() -> list[Expense]:
    return [
        _expense(3, "120.00", "Movie night", Category.ENTERTAINMENT, datetime(2024, 3, 10, tzinfo=UTC)),
        _expense(2, "250.50", "Lunch with team", Category.FOOD, datetime(2024, 3, 2, tzinfo=UTC)),
        _expense(1, "80.25", "Groceries", Category.FOOD, datetime(2024, 2, 27, tzinfo=UTC)),
    ]


def test_filter_by_search_is_case_insensitive(expenses: list[Expense]) -> None:
    assert [expense.id for expense in filter_expenses(expenses, search="LUNCH")] == [2]


def test_filter_by_category_and_all(expenses: list[Expense]) -> None:
    assert [expense.id for expense in filter_expenses(expenses, category="food")] == [2, 1]
    assert len(filter_expenses(expenses, category="all")) == 3
    assert filter_expenses(expenses, search="night", category="food") == []


def test_summarise_totals(expenses: list[Expense]) -> None:
    stats = summarise(expenses, today=date(2024, 3, 15))

    assert stats == ExpenseSummary(total=Decimal("450.75"), monthly_total=Decimal("370.50"), count=3)


def test_summarise_empty_list() -> None:
    assert summarise([], today=date(2024, 3, 15)) == ExpenseSummary(Decimal("0"), Decimal("0"), 0)


@pytest.mark.parametrize(
    ("amount", "expected"),
    [
        ("0", "₹0"),
        ("250.50", "₹250.5"),
        ("1234.56", "₹1,234.56"),
        ("1234567", "₹12,34,567"),
        ("-99.99", "-₹99.99"),
    ],
)
def test_format_currency(amount: str, expected: str) -> None:
    assert format_currency(Decimal(amount)) == expected

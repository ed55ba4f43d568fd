from __future__ import annotations

from datetime import UTC, datetime
from decimal import Decimal

import pytest
from pydantic import ValidationError

from expense_tracker.models import Category, Expense
from expense_tracker.schemas import ExpenseCreate, ExpenseRead


def _errors(payload: dict) -> list[dict]:
    with pytest.raises(ValidationError) as excinfo:
        ExpenseCreate.model_validate(payload)
    return excinfo.value.errors()


def test_float_amount_keeps_its_decimal_text() -> None:
    expense = ExpenseCreate.model_validate({"amount": 250.1, "description": "Lunch", "category": "food"})

    assert expense.amount == Decimal("250.10")
    assert expense.category is Category.FOOD


def test_amount_is_rounded_half_up_to_cents() -> None:
    expense = ExpenseCreate.model_validate({"amount": 10.005, "description": "Tea", "category": "food"})

    assert expense.amount == Decimal("10.01")


@pytest.mark.parametrize("amount", [0, -5, 0.001])
def test_non_positive_amount_is_rejected(amount: float) -> None:
    errors = _errors({"amount": amount, "description": "Lunch", "category": "food"})

    assert errors[0]["loc"] == ("amount",)
    assert errors[0]["msg"] == "Amount must be positive"


@pytest.mark.parametrize("amount", ["12.50", True, None])
def test_amount_must_be_a_json_number(amount: object) -> None:
    errors = _errors({"amount": amount, "description": "Lunch", "category": "food"})

    assert errors[0]["loc"] == ("amount",)
    assert errors[0]["type"] == "amount_type"


def test_amount_above_maximum_is_rejected() -> None:
    errors = _errors({"amount": 100_000_000, "description": "Yacht", "category": "others"})

    assert errors[0]["type"] == "amount_too_large"


def test_description_must_not_be_blank() -> None:
    assert _errors({"amount": 1, "description": "   ", "category": "food"})[0]["msg"] == "Description is required"


def test_description_is_kept_as_sent() -> None:
    expense = ExpenseCreate.model_validate({"amount": 1, "description": "  Bus  ", "category": "transport"})

    assert expense.description == "  Bus  "


def test_padding_counts_towards_description_length() -> None:
    errors = _errors({"amount": 1, "description": " " + "x" * 100 + " ", "category": "food"})

    assert errors[0]["msg"] == "Description too long"


def test_description_longer_than_100_characters_is_rejected() -> None:
    ExpenseCreate.model_validate({"amount": 1, "description": "x" * 100, "category": "food"})

    errors = _errors({"amount": 1, "description": "x" * 101, "category": "food"})
    assert errors[0]["msg"] == "Description too long"


def test_unknown_category_is_rejected() -> None:
    errors = _errors({"amount": 1, "description": "Flight", "category": "travel"})

    assert errors[0]["loc"] == ("category",)


def test_missing_fields_are_all_reported() -> None:
    errors = _errors({})

    assert {error["loc"][0] for error in errors} == {"amount", "description", "category"}


def test_expense_read_serialises_wire_shape() -> None:
    expense = Expense(
        id=1,
        amount=Decimal("250.5"),
        description="Lunch",
        category=Category.FOOD,
        created_at=datetime(2024, 3, 1, 9, 0, tzinfo=UTC),
    )

    payload = ExpenseRead.model_validate(expense).model_dump(mode="json", by_alias=True)

    assert payload == {
        "id": 1,
        "amount": "250.50",
        "description": "Lunch",
        "category": "food",
        "createdAt": "2024-03-01T09:00:00Z",
    }


def test_expense_read_accepts_camel_case_payload() -> None:
    read = ExpenseRead.model_validate(
        {"id": 3, "amount": "4.20", "description": "Tea", "category": "food", "createdAt": "2024-03-01T09:00:00Z"}
    )

    assert read.amount == Decimal("4.20")
    assert read.created_at == datetime(2024, 3, 1, 9, 0, tzinfo=UTC)

"""Pydantic schemas for serialising expense tracking data."""
from __future__ import annotations

from datetime import datetime
from decimal import Decimal
from typing import Any, List, Union

from pydantic import (
    AliasChoices,
    BaseModel,
    ConfigDict,
    Field,
    field_serializer,
    field_validator,
)
from pydantic_core import PydanticCustomError

from .models import MAX_AMOUNT, MAX_DESCRIPTION_LENGTH, Category, NewExpense, quantize_amount


class ORMModel(BaseModel):
    model_config = ConfigDict(from_attributes=True)


class ExpenseCreate(BaseModel):
    """Body of ``POST /api/expenses``.

    ``amount`` must arrive as a JSON number. It is converted through its
    decimal text so ``250.1`` is stored as ``250.10`` rather than the nearest
    binary float, then rounded to cents.
    """

    amount: Decimal
    description: str
    category: Category

    @field_validator("amount", mode="before")
    @classmethod
    def _amount_is_number(cls, value: Any) -> Any:
        if isinstance(value, bool) or not isinstance(value, (int, float, Decimal)):
            raise PydanticCustomError("amount_type", "Amount must be a number")
        if isinstance(value, float):
            return Decimal(repr(value))
        return value

    @field_validator("amount")
    @classmethod
    def _amount_in_range(cls, value: Decimal) -> Decimal:
        if not value.is_finite():
            raise PydanticCustomError("amount_type", "Amount must be a number")
        amount = quantize_amount(value)
        if amount <= 0:
            raise PydanticCustomError("amount_not_positive", "Amount must be positive")
        if amount > MAX_AMOUNT:
            raise PydanticCustomError(
                "amount_too_large",
                "Amount must not exceed {maximum}",
                {"maximum": str(MAX_AMOUNT)},
            )
        return amount

    @field_validator("description")
    @classmethod
    def _description_length(cls, value: str) -> str:
        if not value.strip():
            raise PydanticCustomError("description_required", "Description is required")
        if len(value) > MAX_DESCRIPTION_LENGTH:
            raise PydanticCustomError("description_too_long", "Description too long")
        return value

    def to_new_expense(self) -> NewExpense:
        return NewExpense(amount=self.amount, description=self.description, category=self.category)


class ExpenseRead(ORMModel):
    id: int
    amount: Decimal
    description: str
    category: Category
    created_at: datetime = Field(
        validation_alias=AliasChoices("created_at", "createdAt"),
        serialization_alias="createdAt",
    )

    @field_serializer("amount")
    def _amount_as_string(self, value: Decimal) -> str:
        return f"{value:.2f}"


class MessageResponse(BaseModel):
    message: str


class FieldError(BaseModel):
    path: List[Union[str, int]]
    message: str
    code: str


class ValidationErrorResponse(MessageResponse):
    errors: List[FieldError]


class HealthRead(BaseModel):
    status: str

"""HTTP client for talking with the expense API."""
from __future__ import annotations

from decimal import Decimal
from typing import Any, List, Optional

import requests

from .logging import get_logger
from .schemas import ExpenseRead

logger = get_logger(__name__)

DEFAULT_API_URL = "http://127.0.0.1:8000/api"


class ExpenseApiError(RuntimeError):
    """Raised when the API answers with a non-success status."""

    def __init__(self, status_code: int, message: str, errors: Optional[List[dict]] = None) -> None:
        super().__init__(f"{status_code}: {message}")
        self.status_code = status_code
        self.message = message
        self.errors = errors or []


class ExpenseClient:
    """Thin wrapper over the REST endpoints returning parsed expenses.

    ``session`` may be any object exposing ``get``/``post``/``delete`` with
    requests-compatible keywords; a :class:`requests.Session` is created when
    omitted.
    """

    def __init__(self, base_url: str = DEFAULT_API_URL, session: Any = None, timeout: float = 5) -> None:
        self.base_url = base_url.rstrip("/")
        self.session = session if session is not None else requests.Session()
        self.timeout = timeout

    def _url(self, suffix: str = "") -> str:
        return f"{self.base_url}/expenses{suffix}"

    @staticmethod
    def _payload(response: Any) -> Any:
        try:
            body = response.json()
        except ValueError:
            body = None
        if response.status_code >= 400:
            message = body.get("message") if isinstance(body, dict) else None
            errors = body.get("errors") if isinstance(body, dict) else None
            logger.debug("API error %s: %s", response.status_code, message)
            raise ExpenseApiError(response.status_code, message or "Request failed", errors)
        return body

    def list_expenses(self, category: Optional[str] = None) -> List[ExpenseRead]:
        params = {"category": category} if category else None
        response = self.session.get(self._url(), params=params, timeout=self.timeout)
        return [ExpenseRead.model_validate(item) for item in self._payload(response)]

    def get_expense(self, expense_id: int) -> ExpenseRead:
        response = self.session.get(self._url(f"/{expense_id}"), timeout=self.timeout)
        return ExpenseRead.model_validate(self._payload(response))

    def create_expense(self, amount: Decimal | float, description: str, category: str) -> ExpenseRead:
        # JSON has no decimal type: the API expects a number.
        payload = {"amount": float(amount), "description": description, "category": category}
        response = self.session.post(self._url(), json=payload, timeout=self.timeout)
        return ExpenseRead.model_validate(self._payload(response))

    def delete_expense(self, expense_id: int) -> str:
        response = self.session.delete(self._url(f"/{expense_id}"), timeout=self.timeout)
        return self._payload(response)["message"]


__all__ = ["DEFAULT_API_URL", "ExpenseApiError", "ExpenseClient"]

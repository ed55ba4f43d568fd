"""Shared pytest configuration for the expense tracker test-suite."""

from __future__ import annotations

import os
import sys
from collections.abc import Iterable, Iterator
from datetime import UTC, datetime, timedelta
from pathlib import Path

import pytest
from fastapi.testclient import TestClient


def _insert_repo_root() -> None:
    """Make sure the repository root is importable without installation."""

    repo_root = Path(__file__).resolve().parents[1]
    if str(repo_root) not in sys.path:
        sys.path.insert(0, str(repo_root))


_insert_repo_root()

from expense_tracker.config import Settings  # noqa: E402
from expense_tracker.database import create_session_factory  # noqa: E402
from expense_tracker.server import create_app  # noqa: E402
from expense_tracker.sql_store import SqlExpenseStore  # noqa: E402
from expense_tracker.store import ExpenseStore, MemoryExpenseStore  # noqa: E402


def pytest_report_header(config: pytest.Config) -> Iterable[str]:  # pragma: no cover - pytest hook
    log_level = os.environ.get("EXPENSE_TRACKER_LOG_LEVEL", "INFO")
    return [f"expense-tracker repo: {Path.cwd()}", f"EXPENSE_TRACKER_LOG_LEVEL={log_level}"]


@pytest.fixture(autouse=True)
def _isolate_environment(monkeypatch: pytest.MonkeyPatch) -> None:
    """Keep developer environment variables out of the tests."""

    for key in list(os.environ):
        if key.startswith("EXPENSE_TRACKER_"):
            monkeypatch.delenv(key, raising=False)


class StepClock:
    """Deterministic clock advancing one second per call."""

    def __init__(self, start: datetime | None = None) -> None:
        self.current = start or datetime(2024, 3, 1, 9, 0, tzinfo=UTC)

    def __call__(self) -> datetime:
        value = self.current
        self.current += timedelta(seconds=1)
        return value


@pytest.fixture()
def clock() -> StepClock:
    return StepClock()


@pytest.fixture(params=["memory", "sql"])
def store(request: pytest.FixtureRequest, clock: StepClock) -> ExpenseStore:
    """Every storage backend, so contract tests run against each of them."""

    if request.param == "sql":
        return SqlExpenseStore(create_session_factory("sqlite://"), clock=clock)
    return MemoryExpenseStore(clock=clock)


@pytest.fixture()
def memory_store(clock: StepClock) -> MemoryExpenseStore:
    return MemoryExpenseStore(clock=clock)


@pytest.fixture()
def settings() -> Settings:
    return Settings(log_level="WARNING")


@pytest.fixture()
def client(memory_store: MemoryExpenseStore, settings: Settings) -> Iterator[TestClient]:
    app = create_app(store=memory_store, settings=settings)
    with TestClient(app) as test_client:
        yield test_client

"""Command-line interface for serving and using the expense API."""

from __future__ import annotations

import argparse
from collections.abc import Sequence
from dataclasses import replace
from decimal import Decimal, InvalidOperation

import requests

from .client import DEFAULT_API_URL, ExpenseApiError, ExpenseClient
from .config import LOG_LEVELS, STORE_BACKENDS, load_settings
from .logging import setup_logger
from .models import Category
from .summary import filter_expenses, format_currency, summarise

DESCRIPTION = "Expense Tracker"


def _parse_amount(value: str) -> Decimal:
    try:
        amount = Decimal(value)
    except InvalidOperation as exc:
        raise argparse.ArgumentTypeError("Amount must be a number") from exc
    if not amount.is_finite():
        raise argparse.ArgumentTypeError("Amount must be a finite number")
    return amount


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(prog="expense-tracker", description=DESCRIPTION)
    parser.add_argument(
        "--log-level",
        type=str.upper,
        choices=LOG_LEVELS,
        default=None,
        help="Logging level (default from environment)",
    )
    parser.add_argument("--json-logs", action="store_true", help="Emit JSON log lines")
    parser.add_argument("--api-url", default=DEFAULT_API_URL, help="Base URL of the expense API")
    subparsers = parser.add_subparsers(dest="command", required=True)

    serve = subparsers.add_parser("serve", help="Run the HTTP API")
    serve.add_argument("--host", default=None)
    serve.add_argument("--port", type=int, default=None)
    serve.add_argument("--store", choices=STORE_BACKENDS, default=None)

    add = subparsers.add_parser("add", help="Record a new expense")
    add.add_argument("amount", type=_parse_amount)
    add.add_argument("description")
    add.add_argument("--category", choices=[category.value for category in Category], default=Category.OTHERS.value)

    listing = subparsers.add_parser("list", help="List recorded expenses")
    listing.add_argument("--category", default=None)
    listing.add_argument("--search", default="")

    delete = subparsers.add_parser("delete", help="Delete an expense")
    delete.add_argument("expense_id", type=int)

    summary = subparsers.add_parser("summary", help="Show totals for the recorded expenses")
    summary.add_argument("--category", default=None)
    summary.add_argument("--search", default="")
    return parser


def _serve(args: argparse.Namespace) -> int:
    import uvicorn

    from .server import create_app

    settings = load_settings()
    overrides = {
        key: value
        for key, value in {"host": args.host, "port": args.port, "store_backend": args.store}.items()
        if value is not None
    }
    if args.log_level:
        overrides["log_level"] = args.log_level
    if args.json_logs:
        overrides["json_logs"] = True
    settings = replace(settings, **overrides)
    app = create_app(settings=settings)
    uvicorn.run(app, host=settings.host, port=settings.port, log_level=settings.log_level.lower())
    return 0


def _print_expenses(expenses) -> None:
    for expense in expenses:
        print(
            f"#{expense.id:<4} {expense.created_at:%Y-%m-%d %H:%M}  "
            f"{expense.category.label:<15} {format_currency(expense.amount):>14}  {expense.description}"
        )


def main(argv: Sequence[str] | None = None, client: ExpenseClient | None = None) -> int:
    parser = build_parser()
    args = parser.parse_args(argv)
    logger = setup_logger(level=args.log_level, json_format=args.json_logs)

    if args.command == "serve":
        return _serve(args)

    client = client or ExpenseClient(args.api_url)
    try:
        if args.command == "add":
            expense = client.create_expense(args.amount, args.description, args.category)
            print(f"Added expense #{expense.id}: {format_currency(expense.amount)} {expense.description}")
        elif args.command == "list":
            expenses = filter_expenses(client.list_expenses(args.category), args.search)
            if not expenses:
                print("No expenses found")
            _print_expenses(expenses)
        elif args.command == "delete":
            print(client.delete_expense(args.expense_id))
        elif args.command == "summary":
            expenses = filter_expenses(client.list_expenses(args.category), args.search)
            stats = summarise(expenses)
            print(f"Total: {format_currency(stats.total)}")
            print(f"This month: {format_currency(stats.monthly_total)}")
            print(f"Transactions: {stats.count}")
    except ExpenseApiError as exc:
        logger.error("Request failed: %s", exc.message)
        for error in exc.errors:
            logger.error("  %s: %s", ".".join(str(part) for part in error.get("path", [])), error.get("message"))
        return 1
    except requests.RequestException as exc:
        logger.error("Could not reach the expense API at %s: %s", args.api_url, exc)
        return 1
    return 0


if __name__ == "__main__":  # pragma: no cover
    raise SystemExit(main())

"""FastAPI application exposing expense tracking endpoints."""
from __future__ import annotations

import re
import time
from typing import Any, List, Optional

from fastapi import APIRouter, Depends, FastAPI, HTTPException, Request, status
from fastapi.exceptions import RequestValidationError
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse
from starlette.exceptions import HTTPException as StarletteHTTPException

from . import __version__, schemas
from .config import Settings, load_settings
from .database import create_session_factory
from .logging import get_logger, setup_logger
from .sql_store import SqlExpenseStore
from .store import ExpenseStore, MemoryExpenseStore

logger = get_logger(__name__)

INVALID_ID_MESSAGE = "Invalid expense ID"
NOT_FOUND_MESSAGE = "Expense not found"
EXPENSE_ID_PATTERN = re.compile(r"-?[0-9]+")

router = APIRouter(prefix="/api", tags=["expenses"])


def build_store(settings: Settings) -> ExpenseStore:
    """Instantiate the storage backend selected by ``settings``."""

    if settings.store_backend == "sql":
        return SqlExpenseStore(create_session_factory(settings.database_url))
    return MemoryExpenseStore()


def get_store(request: Request) -> ExpenseStore:
    """FastAPI dependency returning the store owned by the application."""
    return request.app.state.store


def parse_expense_id(raw_id: str) -> int:
    """Parse a path id made of ASCII digits with an optional leading minus."""
    if EXPENSE_ID_PATTERN.fullmatch(raw_id) is None:
        raise HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail=INVALID_ID_MESSAGE)
    return int(raw_id)


def _server_error(message: str) -> HTTPException:
    logger.exception(message)
    return HTTPException(status_code=status.HTTP_500_INTERNAL_SERVER_ERROR, detail=message)


@router.get("/expenses", response_model=List[schemas.ExpenseRead])
def list_expenses(
    category: Optional[str] = None,
    store: ExpenseStore = Depends(get_store),
) -> Any:
    try:
        if category:
            return store.list_by_category(category)
        return store.list()
    except Exception as exc:
        raise _server_error("Failed to fetch expenses") from exc


@router.post(
    "/expenses",
    response_model=schemas.ExpenseRead,
    status_code=status.HTTP_201_CREATED,
    responses={status.HTTP_400_BAD_REQUEST: {"model": schemas.ValidationErrorResponse}},
)
def create_expense(expense_in: schemas.ExpenseCreate, store: ExpenseStore = Depends(get_store)) -> Any:
    try:
        return store.create(expense_in.to_new_expense())
    except Exception as exc:
        raise _server_error("Failed to create expense") from exc


@router.get(
    "/expenses/{expense_id}",
    response_model=schemas.ExpenseRead,
    responses={
        status.HTTP_400_BAD_REQUEST: {"model": schemas.MessageResponse},
        status.HTTP_404_NOT_FOUND: {"model": schemas.MessageResponse},
    },
)
def get_expense(expense_id: str, store: ExpenseStore = Depends(get_store)) -> Any:
    identifier = parse_expense_id(expense_id)
    try:
        expense = store.get(identifier)
    except Exception as exc:
        raise _server_error("Failed to fetch expense") from exc
    if expense is None:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail=NOT_FOUND_MESSAGE)
    return expense


@router.delete(
    "/expenses/{expense_id}",
    response_model=schemas.MessageResponse,
    responses={
        status.HTTP_400_BAD_REQUEST: {"model": schemas.MessageResponse},
        status.HTTP_404_NOT_FOUND: {"model": schemas.MessageResponse},
    },
)
def delete_expense(expense_id: str, store: ExpenseStore = Depends(get_store)) -> schemas.MessageResponse:
    identifier = parse_expense_id(expense_id)
    try:
        deleted = store.delete(identifier)
    except Exception as exc:
        raise _server_error("Failed to delete expense") from exc
    if not deleted:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail=NOT_FOUND_MESSAGE)
    return schemas.MessageResponse(message="Expense deleted successfully")


def _field_errors(exc: RequestValidationError) -> List[schemas.FieldError]:
    errors = []
    for error in exc.errors():
        location = list(error.get("loc", ()))
        if location and location[0] == "body":
            location = location[1:]
        errors.append(
            schemas.FieldError(path=location, message=error.get("msg", ""), code=error.get("type", "invalid"))
        )
    return errors


async def validation_exception_handler(_: Request, exc: RequestValidationError) -> JSONResponse:
    body = schemas.ValidationErrorResponse(message="Validation error", errors=_field_errors(exc))
    return JSONResponse(status_code=status.HTTP_400_BAD_REQUEST, content=body.model_dump(mode="json"))


async def http_exception_handler(_: Request, exc: StarletteHTTPException) -> JSONResponse:
    body = schemas.MessageResponse(message=str(exc.detail))
    return JSONResponse(status_code=exc.status_code, content=body.model_dump(), headers=exc.headers)


async def unhandled_exception_handler(request: Request, exc: Exception) -> JSONResponse:
    logger.error("Unhandled error on %s %s", request.method, request.url.path, exc_info=exc)
    body = schemas.MessageResponse(message="Internal server error")
    return JSONResponse(status_code=status.HTTP_500_INTERNAL_SERVER_ERROR, content=body.model_dump())


def create_app(store: Optional[ExpenseStore] = None, settings: Optional[Settings] = None) -> FastAPI:
    """Assemble the API around an explicitly owned store.

    When ``store`` is omitted the backend named by ``settings`` is built once
    here and lives as long as the returned application.
    """

    settings = settings or load_settings()
    setup_logger(level=settings.log_level, json_format=settings.json_logs)

    app = FastAPI(title="Expense Tracker API", version=__version__)
    app.state.store = store if store is not None else build_store(settings)
    app.add_middleware(
        CORSMiddleware,
        allow_origins=list(settings.cors_origins),
        allow_credentials=True,
        allow_methods=["*"],
        allow_headers=["*"],
    )
    app.add_exception_handler(RequestValidationError, validation_exception_handler)
    app.add_exception_handler(StarletteHTTPException, http_exception_handler)
    app.add_exception_handler(Exception, unhandled_exception_handler)

    @app.middleware("http")
    async def log_requests(request: Request, call_next):
        started = time.perf_counter()
        response = await call_next(request)
        duration_ms = round((time.perf_counter() - started) * 1000, 2)
        logger.info(
            "%s %s -> %s (%.2f ms)",
            request.method,
            request.url.path,
            response.status_code,
            duration_ms,
            extra={
                "method": request.method,
                "path": request.url.path,
                "status_code": response.status_code,
                "duration_ms": duration_ms,
            },
        )
        return response

    @app.get("/health", tags=["system"], response_model=schemas.HealthRead)
    def healthcheck() -> dict[str, str]:
        return {"status": "ok"}

    app.include_router(router)
    logger.info("Expense API ready with %s store", type(app.state.store).__name__)
    return app


__all__ = ["build_store", "create_app", "get_store", "parse_expense_id"]

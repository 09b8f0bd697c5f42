"""Map data-layer errors onto HTTP responses."""
from typing import Dict, Type

import asyncpg
from fastapi import FastAPI, Request, status
from fastapi.exceptions import RequestValidationError
from fastapi.responses import JSONResponse

from shared.database.errors import (
    ConflictError,
    ConnectivityError,
    InvalidArgumentError,
    NoUpdatableFieldsError,
    NotFoundError,
    NotInitializedError,
    PoolExhaustedError,
    StoreError,
    TransactionFailure,
)
from shared.observability.logger import get_logger
from .responses import failure

logger = get_logger("pawpal.api.errors")

ERROR_STATUS: Dict[Type[StoreError], int] = {
    ConnectivityError: status.HTTP_500_INTERNAL_SERVER_ERROR,
    NotInitializedError: status.HTTP_500_INTERNAL_SERVER_ERROR,
    PoolExhaustedError: status.HTTP_500_INTERNAL_SERVER_ERROR,
    InvalidArgumentError: status.HTTP_400_BAD_REQUEST,
    NoUpdatableFieldsError: status.HTTP_400_BAD_REQUEST,
    NotFoundError: status.HTTP_404_NOT_FOUND,
    ConflictError: status.HTTP_409_CONFLICT,
    TransactionFailure: status.HTTP_500_INTERNAL_SERVER_ERROR,
    StoreError: status.HTTP_500_INTERNAL_SERVER_ERROR,
}


def status_for(exc: StoreError) -> int:
    """HTTP status for a StoreError, resolved through its class hierarchy."""
    if isinstance(exc, TransactionFailure) and isinstance(
        exc.__cause__, asyncpg.IntegrityConstraintViolationError
    ):
        return status.HTTP_409_CONFLICT
    for cls in type(exc).__mro__:
        if cls in ERROR_STATUS:
            return ERROR_STATUS[cls]
    return status.HTTP_500_INTERNAL_SERVER_ERROR


def public_message(exc: StoreError) -> str:
    # Driver text stays in the logs
    if isinstance(exc, TransactionFailure):
        return "Transaction failed and was rolled back"
    if type(exc) is StoreError:
        return "Database operation failed"
    return exc.message


async def store_error_handler(request: Request, exc: StoreError) -> JSONResponse:
    status_code = status_for(exc)
    ctx = getattr(request.state, "context", None)
    log = logger.error if status_code >= 500 else logger.warning
    log("Request failed", ctx, data={
        "status_code": status_code,
        **exc.to_dict(),
    })
    return JSONResponse(
        status_code=status_code,
        content=failure(public_message(exc), exc.code, exc.details)
    )


async def validation_error_handler(request: Request, exc: RequestValidationError) -> JSONResponse:
    errors = [
        {
            "field": ".".join(str(part) for part in error.get("loc", ())),
            "message": error.get("msg", "Invalid value"),
        }
        for error in exc.errors()
    ]
    logger.warning("Request validation failed", getattr(request.state, "context", None), data={
        "errors": errors
    })
    return JSONResponse(
        status_code=status.HTTP_400_BAD_REQUEST,
        content=failure("Validation failed", "VALIDATION_ERROR", {"errors": errors})
    )


async def unhandled_error_handler(request: Request, exc: Exception) -> JSONResponse:
    logger.error("Unhandled error", getattr(request.state, "context", None), data={
        "error_type": type(exc).__name__,
        "error": str(exc),
    })
    return JSONResponse(
        status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
        content=failure("Internal server error", "INTERNAL_ERROR")
    )


def register_error_handlers(app: FastAPI) -> None:
    app.add_exception_handler(StoreError, store_error_handler)
    app.add_exception_handler(RequestValidationError, validation_error_handler)
    app.add_exception_handler(Exception, unhandled_error_handler)

"""Translate domain exceptions into HTTP responses.

    ValidationError / request validation  → 400 {"error": {field: [messages]}}
    NotAuthorizedError, missing identity   → 403 / 401 {"error": message}
    ObjectNotFoundError                   → 404 {"error": message}
    stock, coupon and transition conflicts → 409 {"error": message}
"""

import structlog
from fastapi import FastAPI, HTTPException, Request
from fastapi.exceptions import RequestValidationError
from fastapi.responses import JSONResponse
from protean.exceptions import InvalidOperationError, ObjectNotFoundError, ValidationError

from commerce.exceptions import CouponRejectedError, InsufficientStockError, NotAuthorizedError

logger = structlog.get_logger(__name__)


def _message(exc, default):
    """The payload an exception was raised with, whichever way it was stored."""
    messages = getattr(exc, "messages", None)
    if messages is None:
        messages = exc.args[0] if exc.args else default
    return _first_message(messages)


def _first_message(messages):
    """Flatten a Protean error payload into one human-readable line."""
    if isinstance(messages, dict):
        for value in messages.values():
            return _first_message(value)
        return ""
    if isinstance(messages, (list, tuple)):
        return _first_message(messages[0]) if messages else ""
    return str(messages)


async def validation_error_handler(request: Request, exc: ValidationError) -> JSONResponse:
    return JSONResponse(status_code=400, content={"error": exc.messages})


async def request_validation_error_handler(request: Request, exc: RequestValidationError) -> JSONResponse:
    errors = {}
    for error in exc.errors():
        field = ".".join(str(part) for part in error["loc"] if part != "body") or "body"
        errors.setdefault(field, []).append(error["msg"])
    return JSONResponse(status_code=400, content={"error": errors})


async def not_found_handler(request: Request, exc: ObjectNotFoundError) -> JSONResponse:
    return JSONResponse(status_code=404, content={"error": _message(exc, "Not found")})


async def insufficient_stock_handler(request: Request, exc: InsufficientStockError) -> JSONResponse:
    return JSONResponse(
        status_code=409,
        content={
            "error": _message(exc, "Insufficient stock"),
            "product_id": exc.product_id,
            "requested": exc.requested,
            "available": exc.available,
        },
    )


async def coupon_rejected_handler(request: Request, exc: CouponRejectedError) -> JSONResponse:
    return JSONResponse(status_code=409, content={"error": exc.reason, "code": exc.code})


async def conflict_handler(request: Request, exc: InvalidOperationError) -> JSONResponse:
    return JSONResponse(status_code=409, content={"error": _message(exc, "Conflict")})


async def http_error_handler(request: Request, exc: HTTPException) -> JSONResponse:
    return JSONResponse(status_code=exc.status_code, content={"error": exc.detail}, headers=exc.headers)


async def not_authorized_handler(request: Request, exc: NotAuthorizedError) -> JSONResponse:
    logger.warning("access denied", path=request.url.path, reason=str(exc))
    return JSONResponse(status_code=403, content={"error": str(exc)})


def register_exception_handlers(app: FastAPI) -> None:
    """Install the commerce error mapping on ``app``."""
    app.add_exception_handler(ValidationError, validation_error_handler)
    app.add_exception_handler(RequestValidationError, request_validation_error_handler)
    app.add_exception_handler(ObjectNotFoundError, not_found_handler)
    app.add_exception_handler(InsufficientStockError, insufficient_stock_handler)
    app.add_exception_handler(CouponRejectedError, coupon_rejected_handler)
    app.add_exception_handler(InvalidOperationError, conflict_handler)
    app.add_exception_handler(NotAuthorizedError, not_authorized_handler)
    app.add_exception_handler(HTTPException, http_error_handler)

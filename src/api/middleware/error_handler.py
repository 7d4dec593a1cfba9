"""
Error handling middleware.

Standardizes all API error responses to include:
- error_code: machine-readable identifier
- message: human-readable description
- hint: suggested recovery action
"""

import traceback
from collections.abc import Awaitable, Callable

from fastapi import FastAPI, Request, status
from fastapi.responses import JSONResponse
from starlette.middleware.base import BaseHTTPMiddleware
from starlette.responses import Response

from src.application.dto.responses import ErrorResponse
from src.config import get_logger
from src.core.exceptions import (
    ChannelError,
    ConfigurationError,
    CredentialError,
    NotFoundError,
    StateError,
    StockEngineError,
    StorageError,
    ValidationError,
)

logger = get_logger(__name__)


# Map exceptions to HTTP status codes
EXCEPTION_STATUS_MAP: dict[type[Exception], int] = {
    ValidationError: status.HTTP_400_BAD_REQUEST,
    NotFoundError: status.HTTP_404_NOT_FOUND,
    StateError: status.HTTP_409_CONFLICT,
    CredentialError: status.HTTP_401_UNAUTHORIZED,
    ChannelError: status.HTTP_502_BAD_GATEWAY,
    StorageError: status.HTTP_500_INTERNAL_SERVER_ERROR,
    ConfigurationError: status.HTTP_500_INTERNAL_SERVER_ERROR,
}

# Hint messages per error code
HINT_MAP: dict[str, str] = {
    "ORDER_NOT_FOUND": "Check the order ID and try GET /api/orders to list orders.",
    "PRODUCT_NOT_FOUND": "Check the product ID and try GET /api/inventory/products.",
    "PRODUCT_LEAD_NOT_FOUND": "Create the product lead first with POST /api/orders/leads.",
    "LISTING_NOT_FOUND": "Check the listing ID and try GET /api/listings.",
    "INVALID_ORDER_STATE": "Advance the order to 'received' before finalizing it.",
    "ORDER_ALREADY_PROCESSED": "The order is already in stock; nothing to do.",
    "INVALID_STATUS_TRANSITION": "Orders move one step forward at a time or are cancelled.",
    "LISTING_ALREADY_IMPORTED": "The listing is already tracked; use its existing ID.",
    "NOT_CONNECTED": "Connect the marketplace account via GET /api/channel/auth-url.",
    "CHANNEL_RECOVERABLE": "The marketplace refused the change for now. Retry later.",
    "CHANNEL_ERROR": "The marketplace call failed. Check the listing on the marketplace.",
    "CHANNEL_TIMEOUT": "The marketplace did not answer in time. Retry later.",
    "VALIDATION_ERROR": "Check the request body against the API schema.",
    "DATABASE_ERROR": "A database operation failed. Check server logs.",
}

# Default hints by HTTP status code
STATUS_HINTS: dict[int, str] = {
    400: "Check the request parameters and body.",
    401: "Reconnect the marketplace account.",
    404: "The requested resource was not found. Verify the ID.",
    409: "The resource is not in a state that allows this operation.",
    422: "The request could not be processed. Check the input format.",
    500: "An internal error occurred. Check server logs.",
    502: "An upstream marketplace call failed. Retry later.",
}


def _get_hint(error_code: str, status_code: int) -> str:
    """Resolve hint from error code, falling back to status-based hint."""
    return HINT_MAP.get(error_code) or STATUS_HINTS.get(status_code, "")


def _status_for(exc: Exception) -> int:
    for exc_type, code in EXCEPTION_STATUS_MAP.items():
        if isinstance(exc, exc_type):
            return code
    return status.HTTP_500_INTERNAL_SERVER_ERROR


def build_error_response(request: Request, exc: Exception) -> JSONResponse:
    """Convert an exception to a standardized JSON response."""
    status_code = _status_for(exc)

    if isinstance(exc, StockEngineError):
        error_code = exc.code
        message = exc.message
        detail = ", ".join(f"{k}={v}" for k, v in exc.details.items()) or None
    else:
        error_code = exc.__class__.__name__
        message = str(exc) or "Internal server error"
        detail = None

    request_id = getattr(request.state, "request_id", None)
    log = logger.error if status_code >= 500 else logger.warning
    log(
        "request_error",
        request_id=request_id,
        path=request.url.path,
        error_type=error_code,
        error=message,
        traceback=traceback.format_exc() if status_code >= 500 else None,
    )

    error_response = ErrorResponse(
        error_code=error_code,
        message=message,
        hint=_get_hint(error_code, status_code),
        detail=detail,
        path=request.url.path,
    )
    return JSONResponse(
        status_code=status_code,
        content=error_response.model_dump(mode="json"),
    )


class ErrorHandlerMiddleware(BaseHTTPMiddleware):
    """
    Global error handling middleware.

    Converts exceptions that escape the route handlers to standardized
    JSON error responses.
    """

    async def dispatch(
        self,
        request: Request,
        call_next: Callable[[Request], Awaitable[Response]],
    ) -> Response:
        """Handle request with error catching."""
        try:
            return await call_next(request)
        except Exception as e:
            return build_error_response(request, e)


def setup_exception_handlers(app: FastAPI) -> None:
    """Set up FastAPI exception handlers."""
    from fastapi.exceptions import RequestValidationError
    from starlette.exceptions import HTTPException

    @app.exception_handler(StockEngineError)
    async def engine_exception_handler(
        request: Request,
        exc: StockEngineError,
    ) -> JSONResponse:
        """Handle domain errors raised by use cases."""
        return build_error_response(request, exc)

    @app.exception_handler(RequestValidationError)
    async def validation_exception_handler(
        request: Request,
        exc: RequestValidationError,
    ) -> JSONResponse:
        """Handle Pydantic validation errors."""
        errors = []
        for error in exc.errors():
            loc = " -> ".join(str(part) for part in error["loc"])
            errors.append(f"{loc}: {error['msg']}")

        return JSONResponse(
            status_code=422,
            content=ErrorResponse(
                error_code="VALIDATION_ERROR",
                message="Request validation failed",
                hint="Check the request body fields and types.",
                detail="; ".join(errors),
                path=request.url.path,
            ).model_dump(mode="json"),
        )

    @app.exception_handler(HTTPException)
    async def http_exception_handler(
        request: Request,
        exc: HTTPException,
    ) -> JSONResponse:
        """Handle HTTP exceptions with standardized format."""
        error_code = "NOT_FOUND" if exc.status_code == 404 else "HTTP_ERROR"
        return JSONResponse(
            status_code=exc.status_code,
            content=ErrorResponse(
                error_code=error_code,
                message=str(exc.detail or "An error occurred"),
                hint=_get_hint(error_code, exc.status_code),
                path=request.url.path,
            ).model_dump(mode="json"),
        )

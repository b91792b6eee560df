"""FastAPI exception handlers producing the standard error envelope."""

import logging
from datetime import datetime, timezone

from fastapi import FastAPI, Request
from fastapi.exceptions import RequestValidationError
from fastapi.responses import JSONResponse

from coinforge.errors.exceptions import CoinforgeError
from coinforge.models.common import ErrorDetail, ErrorResponse

logger = logging.getLogger(__name__)


def _render(request: Request, status_code: int, code: str, message: str, details=None) -> JSONResponse:
    trace_id = getattr(request.state, "trace_id", "unknown")
    error_response = ErrorResponse(
        error=ErrorDetail(
            code=code,
            message=message,
            details=details,
            trace_id=trace_id,
            timestamp=datetime.now(timezone.utc),
        ),
    )
    return JSONResponse(
        status_code=status_code,
        content=error_response.model_dump(mode="json", exclude_none=True),
    )


def register_exception_handlers(app: FastAPI) -> None:
    """Register all custom exception handlers on the FastAPI app."""

    @app.exception_handler(CoinforgeError)
    async def coinforge_error_handler(request: Request, exc: CoinforgeError):
        if exc.status_code >= 500:
            logger.error(
                "request_failed",
                extra={
                    "path": request.url.path,
                    "method": request.method,
                    "code": exc.code,
                    "reason": exc.message,
                },
            )
        return _render(request, exc.status_code, exc.code, exc.message, exc.details)

    @app.exception_handler(RequestValidationError)
    async def request_validation_handler(request: Request, exc: RequestValidationError):
        details = [
            {"loc": list(err.get("loc", ())), "msg": err.get("msg", "")}
            for err in exc.errors()
        ]
        return _render(request, 400, "VALIDATION_ERROR", "Request body failed validation", details)

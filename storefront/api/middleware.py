"""Request middleware for the storefront API.

One middleware wraps every request. It assigns the correlation ID, logs the
completed request, and renders unhandled exceptions as the standard 500 body.
"""

import time
from typing import Callable
from uuid import uuid4

import structlog
from fastapi import FastAPI, Request, Response, status
from fastapi.responses import JSONResponse
from starlette.middleware.base import BaseHTTPMiddleware

logger = structlog.get_logger()

REQUEST_ID_HEADER = "X-Request-ID"
INTERNAL_ERROR_MESSAGE = "An internal error occurred"


def internal_error_response() -> JSONResponse:
    """Build the body returned for any unhandled failure."""
    return JSONResponse(
        status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
        content={"success": False, "message": INTERNAL_ERROR_MESSAGE},
    )


class RequestContextMiddleware(BaseHTTPMiddleware):
    """Correlates, times and guards each request.

    The request ID comes from the ``X-Request-ID`` header or is generated.
    It is stored on ``request.state``, bound into the structlog context while
    the request runs, and echoed on every response, the 500 included.
    Exception details are logged, never returned to the client.
    """

    async def dispatch(self, request: Request, call_next: Callable) -> Response:
        request_id = request.headers.get(REQUEST_ID_HEADER) or str(uuid4())
        request.state.request_id = request_id

        with structlog.contextvars.bound_contextvars(request_id=request_id):
            started = time.perf_counter()
            try:
                response = await call_next(request)
            except Exception:
                logger.exception(
                    "Unhandled exception",
                    method=request.method,
                    path=request.url.path,
                )
                response = internal_error_response()

            logger.info(
                "Request completed",
                method=request.method,
                path=request.url.path,
                status_code=response.status_code,
                duration_ms=round((time.perf_counter() - started) * 1000, 2),
            )

        response.headers[REQUEST_ID_HEADER] = request_id
        return response


def setup_middleware(app: FastAPI) -> None:
    """Install the request middleware.

    Call after any other ``add_middleware`` so it wraps them all.

    Args:
        app: FastAPI application instance.
    """
    app.add_middleware(RequestContextMiddleware)

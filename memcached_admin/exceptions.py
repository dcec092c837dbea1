# ─────────────────────────────────────────────────────────────────────────────
# Custom Exceptions + FastAPI Exception Handlers
# ─────────────────────────────────────────────────────────────────────────────


import structlog
from fastapi import FastAPI, Request
from fastapi.responses import JSONResponse

logger = structlog.get_logger(__name__)


# ── Exception hierarchy ──────────────────────────────────────────────────────


class MemcachedAdminError(Exception):
    """Base exception for all memcached administration errors."""

    def __init__(self, message: str, status_code: int = 500):
        self.message = message
        self.status_code = status_code
        super().__init__(message)


class ClientNotConfiguredError(MemcachedAdminError):
    """Raised when an admin operation runs without a bound memcached client."""

    def __init__(self) -> None:
        super().__init__("The memcached client is not configured.", status_code=500)


class OperationFailedError(MemcachedAdminError):
    """Raised when the memcached client reports a non-success result code.

    ``code`` is the client's result code, ``message`` its result message
    (e.g. "SERVER ERROR"). Never retried.
    """

    def __init__(self, code: int, message: str):
        self.code = int(code)
        super().__init__(message, status_code=500)


class ClientFaultError(MemcachedAdminError):
    """Raised at the adapter boundary when the client itself blew up."""

    def __init__(self, message: str):
        super().__init__(message, status_code=500)


# ── Handler registration ────────────────────────────────────────────────────


def register_exception_handlers(app: FastAPI) -> None:
    """Register all custom exception handlers on the FastAPI app.

    Routes raise MemcachedAdminError subclasses; these handlers turn them
    into the error envelope; routes do no inline try/except rendering.
    """

    @app.exception_handler(OperationFailedError)
    async def operation_failed_handler(
        request: Request, exc: OperationFailedError
    ) -> JSONResponse:
        logger.error("memcached_operation_failed", error=exc.message, code=exc.code)
        return JSONResponse(
            status_code=exc.status_code,
            content={
                "status": "error",
                "error": exc.message,
                "type": type(exc).__name__,
                "code": exc.code,
            },
        )

    @app.exception_handler(MemcachedAdminError)
    async def admin_error_handler(request: Request, exc: MemcachedAdminError) -> JSONResponse:
        logger.error(
            "memcached_admin_error",
            error=exc.message,
            error_type=type(exc).__name__,
            exc_info=exc,
        )
        return JSONResponse(
            status_code=exc.status_code,
            content={"status": "error", "error": exc.message, "type": type(exc).__name__},
        )

    @app.exception_handler(Exception)
    async def unhandled_error_handler(request: Request, exc: Exception) -> JSONResponse:
        logger.error("unhandled_error", error=str(exc), exc_info=True)
        return JSONResponse(
            status_code=500,
            content={"status": "error", "error": "Internal server error", "type": "UnhandledError"},
        )

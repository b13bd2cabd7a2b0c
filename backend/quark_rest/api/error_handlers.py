"""Error Handlers — map exceptions raised while serving a Task to the REST error envelope.

Invariants:
    - QuarkRestError → its own http_status and to_response() body
      (decode errors are 400, store/transport errors 5xx, contract violations 500)
    - Anything else → 500 INTERNAL_ERROR in the same envelope, details stay in the log
    - Failure results produced by the dispatcher never reach these handlers:
      they are ordinary TaskResults encoded by the route

Design Decisions:
    - Request context (method, path) is folded into the error's ErrorContext so
      the envelope says which verb failed even when the raiser did not know
"""

import logging

from fastapi import FastAPI, Request
from fastapi.responses import JSONResponse

from quark_rest.core.errors import ContractViolationError, ErrorContext, QuarkRestError

logger = logging.getLogger(__name__)


def register_error_handlers(app: FastAPI) -> None:
    app.add_exception_handler(QuarkRestError, _quark_error_handler)
    app.add_exception_handler(Exception, _unhandled_error_handler)


async def _quark_error_handler(request: Request, exc: QuarkRestError) -> JSONResponse:
    if exc.context.method is None:
        exc.context.method = request.method
    log = logger.warning if exc.http_status < 500 else logger.error
    log(
        f"{request.method} {request.url.path} failed: {exc.message}",
        extra={
            "error_code": exc.code,
            "path": request.url.path,
            "method": request.method,
            "resource_type": exc.context.resource_type,
            "user": exc.context.user,
        },
    )
    return JSONResponse(status_code=exc.http_status, content=exc.to_response())


async def _unhandled_error_handler(request: Request, exc: Exception) -> JSONResponse:
    """Catch-all — never leaks internal details."""
    logger.error(
        f"Unhandled exception on {request.method} {request.url.path}: {exc}",
        exc_info=True,
        extra={"path": request.url.path, "method": request.method},
    )
    error = ContractViolationError(
        "An unexpected error occurred", ErrorContext(method=request.method),
    )
    body = error.to_response()
    body["error"]["code"] = "INTERNAL_ERROR"
    return JSONResponse(status_code=500, content=body)

"""HTTP mapping for dispatch failures.

Protean's handlers cover validation (400) and missing records (404).
Dispatch business failures carry their own status code and a
``retryable`` flag so clients can offer a retry only for dependency
failures.
"""

from fastapi import FastAPI, Request
from fastapi.responses import JSONResponse
from protean.integrations.fastapi import register_exception_handlers

from dispatch.errors import DispatchError
from dispatch.utils.logging import get_logger

logger = get_logger(__name__)


async def _dispatch_error_handler(request: Request, exc: DispatchError) -> JSONResponse:
    logger.info(
        "Request rejected",
        path=request.url.path,
        error=type(exc).__name__,
        status_code=exc.status_code,
        message=exc.message,
    )
    return JSONResponse(status_code=exc.status_code, content=exc.to_dict())


def register_error_handlers(app: FastAPI) -> None:
    register_exception_handlers(app)
    app.add_exception_handler(DispatchError, _dispatch_error_handler)

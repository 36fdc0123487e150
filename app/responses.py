"""
Translation of service results into HTTP responses.

This is the only place that maps ``app.results`` variants to status
codes.  A ``Failure`` is logged here with its traceback and answered with
the configured generic message; the fault itself never reaches the client.
"""
import logging
from typing import Any, Callable

from fastapi import Response
from fastapi.responses import JSONResponse, PlainTextResponse

from app.config import settings
from app.results import Absent, Failure, Invalid, Present

logger = logging.getLogger(__name__)


def not_found() -> Response:
    return Response(status_code=404)


def bad_request(errors: list[dict]) -> JSONResponse:
    return JSONResponse(status_code=400, content={"detail": errors})


def server_error() -> PlainTextResponse:
    return PlainTextResponse(settings.SERVER_ERROR_MESSAGE, status_code=500)


def log_fault(error: BaseException, context: str) -> None:
    logger.error("Unhandled fault during %s", context, exc_info=error)


def render(
    result: Any,
    *,
    context: str,
    status_code: int = 200,
    body: Callable[[Any], Any] | None = None,
) -> Response:
    """
    Turn *result* into a response.

    ``Present`` -> *status_code* with ``body(value)`` as JSON (204 sends no
    body); ``Absent`` -> 404; ``Invalid`` -> 400; ``Failure`` -> 500.
    *context* names the operation in the log line for a ``Failure``.
    """
    if isinstance(result, Present):
        if status_code == 204:
            return Response(status_code=204)
        content = body(result.value) if body else result.value
        return JSONResponse(status_code=status_code, content=content)
    if isinstance(result, Absent):
        return not_found()
    if isinstance(result, Invalid):
        return bad_request(result.errors)
    if isinstance(result, Failure):
        log_fault(result.error, context)
        return server_error()
    raise TypeError(f"Unexpected service result: {result!r}")

"""Per-request log context and access logging for the search API."""
import time
import uuid
from collections.abc import Awaitable, Callable

import structlog
from starlette.middleware.base import BaseHTTPMiddleware
from starlette.requests import Request
from starlette.responses import Response

from chatsearch.search.filters import PARAM_TYPE, get_multi_value_param
from chatsearch.search.params import Params

logger = structlog.get_logger()

REQUEST_ID_HEADER = "X-Request-ID"

UNLOGGED_PATHS = frozenset({"/api/v1/health/live"})

# endpoints whose ``type`` parameter selects document categories
CATEGORY_PATHS = frozenset({"/api/v1/search", "/api/v1/suggest"})


def requested_categories(request: Request) -> list[str] | None:
    """Category keys named by the query string, None when all are wanted."""
    if request.url.path not in CATEGORY_PATHS:
        return None
    params = Params.from_items(request.query_params.multi_items())
    keys = [k for k in get_multi_value_param(PARAM_TYPE, params) or [] if k.strip()]
    return keys or None


class RequestLoggingMiddleware(BaseHTTPMiddleware):
    """Binds a request id into the log context and logs each API call.

    The id is taken from the ``X-Request-ID`` header or generated, is
    echoed on the response, and is carried by every event logged while
    the request runs, report records included.
    """

    async def dispatch(
        self,
        request: Request,
        call_next: Callable[[Request], Awaitable[Response]],
    ) -> Response:
        if request.url.path in UNLOGGED_PATHS:
            return await call_next(request)

        request_id = request.headers.get(REQUEST_ID_HEADER) or uuid.uuid4().hex
        structlog.contextvars.clear_contextvars()
        structlog.contextvars.bind_contextvars(
            request_id=request_id, path=request.url.path
        )

        start = time.perf_counter()
        response = await call_next(request)
        response.headers[REQUEST_ID_HEADER] = request_id

        logger.info(
            "http_request",
            method=request.method,
            status=response.status_code,
            categories=requested_categories(request),
            duration_ms=round((time.perf_counter() - start) * 1000, 2),
        )
        structlog.contextvars.clear_contextvars()
        return response

"""Shared-key check for backends calling the search API."""

import secrets
from collections.abc import Awaitable, Callable

import structlog
from starlette.middleware.base import BaseHTTPMiddleware
from starlette.requests import Request
from starlette.responses import JSONResponse, Response

logger = structlog.get_logger()

API_KEY_HEADER = "X-API-Key"

PUBLIC_PATHS = frozenset({"/api/v1/health/live"})


class APIKeyMiddleware(BaseHTTPMiddleware):
    """Requires the configured key on every path except the liveness probe.

    The key identifies the chat backend, not its users: per-user access
    is still expressed through the ``acl`` parameter of each request.
    """

    def __init__(self, app: Callable[..., Awaitable[Response]], api_key: str) -> None:
        super().__init__(app)  # type: ignore[arg-type]
        self._api_key = api_key

    def _rejection(self, provided: str) -> str | None:
        if not provided:
            return f"Missing {API_KEY_HEADER} header"
        if not secrets.compare_digest(provided, self._api_key):
            return "Invalid API key"
        return None

    async def dispatch(
        self,
        request: Request,
        call_next: Callable[[Request], Awaitable[Response]],
    ) -> Response:
        if request.url.path in PUBLIC_PATHS:
            return await call_next(request)

        error = self._rejection(request.headers.get(API_KEY_HEADER, ""))
        if error is not None:
            logger.warning("api_key_rejected", path=request.url.path, reason=error)
            return JSONResponse(status_code=401, content={"error": error})

        return await call_next(request)

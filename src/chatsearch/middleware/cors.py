"""CORS middleware configuration."""
from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware

from chatsearch.middleware.logging import REQUEST_ID_HEADER


def configure_cors(app: FastAPI, allowed_origins: list[str]) -> None:
    """Allow browser clients of the configured origins to search.

    Nothing is added when no origin is configured, which leaves the API
    to server-side callers only.
    """
    if not allowed_origins:
        return
    app.add_middleware(
        CORSMiddleware,
        allow_origins=allowed_origins,
        allow_credentials=True,
        allow_methods=["GET", "POST", "OPTIONS"],
        allow_headers=["X-API-Key", REQUEST_ID_HEADER, "Content-Type"],
        expose_headers=[REQUEST_ID_HEADER],
    )

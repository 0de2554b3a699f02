"""Pytest configuration and fixtures."""

import sys
from collections.abc import Iterator
from pathlib import Path
from typing import Any

# Add src to path for imports
sys.path.insert(0, str(Path(__file__).parent.parent / "src"))

import pytest
from fastapi.testclient import TestClient

from chatsearch.app import create_app
from chatsearch.config import Settings
from chatsearch.search.defaults import QueryDefaults, load_query_defaults
from fake_engine import FakeEngine


def _suggestion_docs() -> list[dict[str, Any]]:
    docs = []
    for i in range(5):
        docs.append({"id": f"s-chat-{i}", "type": "msg", "rid": "room1",
                     "suggestion": ["rocket", "chat"]})
    for i in range(2):
        docs.append({"id": f"s-channel-{i}", "type": "msg", "rid": "room1",
                     "suggestion": ["rocket", "channel"]})
    docs.append({"id": "s-hidden", "type": "msg", "rid": "room9",
                 "suggestion": ["rocket", "chaos"]})
    return docs


@pytest.fixture
def indexed_docs() -> list[dict[str, Any]]:
    """Documents of every category spread over two rooms."""
    return [
        {"id": "m1", "type": "msg", "rid": "room1", "user": "u1",
         "text_en": "status update for the team", "updated": "2024-05-01T10:00:00Z"},
        {"id": "m2", "type": "msg", "rid": "room2", "user": "u2",
         "text_en": "status update nobody else may read"},
        {"id": "m3", "type": "msg", "rid": "room1", "user": "u1",
         "text_en": "lunch at noon"},
        {"id": "m4", "type": "msg", "rid": "room1", "user": "u3",
         "text_en": "another status update"},
        {"id": "r1", "type": "room", "rid": "room1", "room_name": "status room"},
        {"id": "r2", "type": "room", "rid": "room2", "room_name": "status private"},
        {"id": "u1", "type": "user", "rid": "room1", "user_username": "status-bot"},
        {"id": "u2", "type": "user", "rid": "room2", "user_username": "status-spy"},
        {"id": "f1", "type": "file", "rid": "room1", "file_name": "status update.pdf"},
        *_suggestion_docs(),
    ]


@pytest.fixture
def engine(indexed_docs: list[dict[str, Any]]) -> FakeEngine:
    """In-memory engine over the indexed documents."""
    return FakeEngine(indexed_docs)


@pytest.fixture
def defaults() -> QueryDefaults:
    """Built-in default parameter layers."""
    return load_query_defaults(None)


@pytest.fixture
def settings() -> Settings:
    """Create test settings."""
    return Settings(
        host="127.0.0.1",
        port=8000,
        debug=True,
        file_search_enabled=False,
    )


@pytest.fixture
def client(settings: Settings, engine: FakeEngine) -> Iterator[TestClient]:
    """Create test client with configured app and running lifespan."""
    app = create_app(settings, engine=engine)
    with TestClient(app) as test_client:
        yield test_client

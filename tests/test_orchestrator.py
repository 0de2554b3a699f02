"""Search orchestration tests."""

import asyncio

import pytest

from chatsearch.reporting import QueryLog, ReportingLogger
from chatsearch.search.defaults import QueryDefaults
from chatsearch.search.engine import EngineResult
from chatsearch.search.errors import EngineError
from chatsearch.search.orchestrator import SearchOrchestrator
from chatsearch.search.params import Params
from fake_engine import FakeEngine


class RecordingReporter(ReportingLogger):
    """Collects query records instead of logging them."""

    def __init__(self) -> None:
        super().__init__()
        self.queries: list[QueryLog] = []

    def log_query(self, log: QueryLog) -> None:
        self.queries.append(log)


def _orchestrator(
    engine: FakeEngine, defaults: QueryDefaults, **kwargs: object
) -> tuple[SearchOrchestrator, RecordingReporter]:
    reporter = RecordingReporter()
    orchestrator = SearchOrchestrator(
        engine, defaults, client_name="chatpal", reporting=reporter, **kwargs
    )
    return orchestrator, reporter


async def test_all_enabled_categories_in_order(engine: FakeEngine, defaults: QueryDefaults) -> None:
    """Without a type filter message, room and user are queried."""
    orchestrator, _ = _orchestrator(engine, defaults)
    response = await orchestrator.search(Params({"text": ["status"], "acl": ["room1"]}))
    assert list(response) == ["message", "room", "user"]


async def test_file_category_requires_configuration(
    engine: FakeEngine, defaults: QueryDefaults
) -> None:
    """Files are only searched when file search is enabled."""
    orchestrator, _ = _orchestrator(engine, defaults, file_search_enabled=True)
    response = await orchestrator.search(Params({"text": ["status"], "acl": ["room1"]}))
    assert list(response) == ["message", "room", "user", "file"]
    assert response["file"]["numFound"] == 1


async def test_file_type_needs_file_search(engine: FakeEngine, defaults: QueryDefaults) -> None:
    """Asking for files while file search is off queries nothing."""
    orchestrator, _ = _orchestrator(engine, defaults)
    response = await orchestrator.search(
        Params({"text": ["status"], "acl": ["room1"], "type": ["file"]})
    )
    assert response == {}
    assert engine.queries == []


async def test_type_filter_limits_categories(engine: FakeEngine, defaults: QueryDefaults) -> None:
    """Only requested categories are queried."""
    orchestrator, _ = _orchestrator(engine, defaults)
    response = await orchestrator.search(
        Params({"text": ["status"], "acl": ["room1"], "type": ["room"]})
    )
    assert list(response) == ["room"]
    assert len(engine.queries) == 1


async def test_acl_restricts_results(engine: FakeEngine, defaults: QueryDefaults) -> None:
    """Documents of rooms outside the ACL are not returned."""
    orchestrator, _ = _orchestrator(engine, defaults)
    response = await orchestrator.search(Params({"text": ["status"], "acl": ["room1"]}))
    assert response["message"]["numFound"] == 2
    assert {d["rid"] for d in response["message"]["docs"]} == {"room1"}
    assert response["room"]["numFound"] == 1


async def test_no_acl_returns_nothing(engine: FakeEngine, defaults: QueryDefaults) -> None:
    """A caller without ACL tokens sees no restricted documents."""
    orchestrator, _ = _orchestrator(engine, defaults)
    response = await orchestrator.search(Params({"text": ["status"]}))
    assert all(envelope["numFound"] == 0 for envelope in response.values())


async def test_room_exclusion(engine: FakeEngine, defaults: QueryDefaults) -> None:
    """Excluded rooms drop out of message and room results."""
    orchestrator, _ = _orchestrator(engine, defaults)
    response = await orchestrator.search(
        Params({"text": ["status"], "acl": ["room1,room2"], "excl.room": ["room2"]})
    )
    assert response["message"]["numFound"] == 2
    assert response["room"]["numFound"] == 1
    assert response["user"]["numFound"] == 2


async def test_one_report_per_request(engine: FakeEngine, defaults: QueryDefaults) -> None:
    """A single query record summarizes all categories."""
    orchestrator, reporter = _orchestrator(engine, defaults)
    await orchestrator.search(Params({"text": ["status"], "acl": ["room1"]}))

    assert len(reporter.queries) == 1
    record = reporter.queries[0].to_record()
    assert record["type"] == "query"
    assert record["client"] == {"collection": "chatpal"}
    assert record["query"]["searchterm"] == "status"
    assert record["query"]["resultsize"] == {"message": 2, "room": 1, "user": 1}
    assert record["query"]["querytime"] >= 0


async def test_failure_propagates(engine: FakeEngine, defaults: QueryDefaults) -> None:
    """A failing category fails the whole request and nothing is reported."""
    engine.fail_types.add("room")
    orchestrator, reporter = _orchestrator(engine, defaults)
    with pytest.raises(EngineError):
        await orchestrator.search(Params({"text": ["status"], "acl": ["room1"]}))
    assert reporter.queries == []


async def test_sub_queries_run_concurrently(defaults: QueryDefaults) -> None:
    """Category sub-queries overlap, bounded by the worker limit."""

    class SlowEngine:
        def __init__(self) -> None:
            self.running = 0
            self.peak = 0

        async def execute(self, params: Params) -> EngineResult:
            self.running += 1
            self.peak = max(self.peak, self.running)
            await asyncio.sleep(0.01)
            self.running -= 1
            return EngineResult()

    slow = SlowEngine()
    orchestrator = SearchOrchestrator(
        slow, defaults, file_search_enabled=True, max_workers=2, reporting=RecordingReporter()
    )
    await orchestrator.search(Params({"text": ["x"]}))
    assert slow.peak == 2

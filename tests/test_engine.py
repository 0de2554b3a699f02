"""HTTP engine client tests."""

from urllib.parse import parse_qs

import httpx
import pytest

from chatsearch.search.engine import SolrEngine
from chatsearch.search.errors import EngineError
from chatsearch.search.params import Params

SELECT_RESPONSE = {
    "responseHeader": {"status": 0, "QTime": 1},
    "response": {
        "numFound": 12,
        "start": 10,
        "maxScore": 3.5,
        "docs": [{"id": "m1", "text": "hello"}],
    },
    "highlighting": {"m1": {"text_en": ["<em>hello</em>"]}},
    "facet_counts": {"facet_fields": {"suggestion": ["chat", 5]}},
}


def _engine(handler: object) -> SolrEngine:
    return SolrEngine(
        "http://solr.test/solr/chatpal/",
        transport=httpx.MockTransport(handler),  # type: ignore[arg-type]
    )


async def test_execute_posts_form_and_parses_response() -> None:
    """Parameters are posted to /select and the JSON response is parsed."""
    seen: dict[str, list[str]] = {}

    def handler(request: httpx.Request) -> httpx.Response:
        assert request.url.path == "/solr/chatpal/select"
        seen.update(parse_qs(request.content.decode()))
        return httpx.Response(200, json=SELECT_RESPONSE)

    engine = _engine(handler)
    result = await engine.execute(Params({"q": ["hello"], "fq": ["type:msg", "-rid:*"]}))
    await engine.close()

    assert seen["q"] == ["hello"]
    assert seen["fq"] == ["type:msg", "-rid:*"]
    assert seen["wt"] == ["json"]
    assert result.num_found == 12
    assert result.start == 10
    assert result.max_score == 3.5
    assert result.docs == [{"id": "m1", "text": "hello"}]
    assert result.highlighting == {"m1": {"text_en": ["<em>hello</em>"]}}
    assert result.facet_field("suggestion") == [("chat", 5)]


async def test_error_status_raises() -> None:
    """Error statuses become EngineError with the status code."""
    engine = _engine(lambda request: httpx.Response(400, text="undefined field"))
    with pytest.raises(EngineError) as excinfo:
        await engine.execute(Params({"q": ["x"]}))
    assert excinfo.value.status_code == 400


async def test_transport_failure_raises() -> None:
    """Connection problems become EngineError."""

    def handler(request: httpx.Request) -> httpx.Response:
        raise httpx.ConnectError("refused", request=request)

    with pytest.raises(EngineError):
        await _engine(handler).execute(Params({"q": ["x"]}))


async def test_invalid_json_raises() -> None:
    """A non-JSON body becomes EngineError."""
    engine = _engine(lambda request: httpx.Response(200, text="<html>"))
    with pytest.raises(EngineError):
        await engine.execute(Params({"q": ["x"]}))

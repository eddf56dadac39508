import httpx
import pytest

from tripwise.core.llm_provider import GenerationFailure, LLMProvider, _has_model

BASE_URL = "http://ollama.test"
TAGS = {"models": [{"name": "llama3.2:3b", "size": 2019393189}]}


def _provider(handler, model="llama3.2:3b"):
    client = httpx.AsyncClient(transport=httpx.MockTransport(handler))
    return LLMProvider(BASE_URL, model, probe_timeout=1.0, client=client)


def _handler(generate_response=None, tags=TAGS, generate_error=None):
    def handler(request: httpx.Request) -> httpx.Response:
        if request.url.path == "/api/tags":
            return httpx.Response(200, json=tags)
        if request.url.path == "/api/show":
            return httpx.Response(200, json={"modelfile": ""})
        if request.url.path == "/api/generate":
            if generate_error is not None:
                raise generate_error(request)
            return generate_response
        return httpx.Response(404)

    return handler


@pytest.mark.asyncio
async def test_generate_returns_text():
    provider = _provider(_handler(httpx.Response(200, json={"response": '{"days": []}'})))
    assert await provider.generate("prompt") == '{"days": []}'


@pytest.mark.asyncio
async def test_generate_sends_options_and_no_stream():
    seen = {}

    def handler(request: httpx.Request) -> httpx.Response:
        if request.url.path == "/api/tags":
            return httpx.Response(200, json=TAGS)
        seen["body"] = request.read()
        return httpx.Response(200, json={"response": "ok text"})

    await _provider(handler).generate("hello")
    assert b'"stream":false' in seen["body"].replace(b" ", b"")
    assert b'"num_predict":2000' in seen["body"].replace(b" ", b"")


@pytest.mark.asyncio
async def test_unreachable_server_is_unavailable():
    def handler(request: httpx.Request) -> httpx.Response:
        raise httpx.ConnectError("connection refused", request=request)

    result = await _provider(handler).generate("prompt")
    assert isinstance(result, GenerationFailure)
    assert result.kind == "unavailable"


@pytest.mark.asyncio
async def test_missing_model_is_unavailable_without_generating():
    calls = []

    def handler(request: httpx.Request) -> httpx.Response:
        calls.append(request.url.path)
        return httpx.Response(200, json={"models": [{"name": "mistral:7b"}]})

    result = await _provider(handler).generate("prompt")
    assert result.kind == "unavailable"
    assert calls == ["/api/tags"]


@pytest.mark.asyncio
async def test_generation_timeout():
    provider = _provider(
        _handler(generate_error=lambda req: httpx.ReadTimeout("slow", request=req))
    )
    result = await provider.generate("prompt", timeout=1.0)
    assert result.kind == "timeout"


@pytest.mark.asyncio
async def test_http_error_status():
    provider = _provider(_handler(httpx.Response(500, text="model crashed")))
    result = await provider.generate("prompt")
    assert result.kind == "http-error"
    assert "500" in result.detail


@pytest.mark.asyncio
async def test_empty_response():
    provider = _provider(_handler(httpx.Response(200, json={"response": "   "})))
    result = await provider.generate("prompt")
    assert result.kind == "empty"


def test_has_model_matches_latest_tag():
    assert _has_model(["llama3.2:latest"], "llama3.2")
    assert _has_model(["llama3.2"], "llama3.2:latest")
    assert not _has_model(["llama3.2:1b"], "llama3.2:3b")


@pytest.mark.asyncio
async def test_diagnose_skips_generation_by_default():
    results = await _provider(_handler()).diagnose()
    statuses = {t["name"]: t["status"] for t in results["tests"]}
    assert statuses == {
        "Basic Connectivity": "PASS",
        "Model Availability": "PASS",
        "Simple Generation": "SKIPPED",
        "JSON Generation": "SKIPPED",
    }
    assert results["summary"]["overall"] == "PARTIAL"


@pytest.mark.asyncio
async def test_diagnose_full_runs_json_check():
    provider = _provider(
        _handler(httpx.Response(200, json={"response": '{"destination": "Paris"}'}))
    )
    results = await provider.diagnose(include_generation=True)
    assert results["summary"]["overall"] == "ALL_PASS"
    assert results["tests"][-1]["parsedResponse"] == {"destination": "Paris"}


@pytest.mark.asyncio
async def test_diagnose_reports_non_json_bodies_as_failures():
    def handler(request: httpx.Request) -> httpx.Response:
        if request.url.path == "/api/show":
            return httpx.Response(200, json={"modelfile": ""})
        return httpx.Response(200, text="<html>proxy login</html>")

    results = await _provider(handler).diagnose(include_generation=True)
    statuses = {t["name"]: t["status"] for t in results["tests"]}
    assert statuses["Basic Connectivity"] == "FAIL"
    assert statuses["Simple Generation"] == "SKIPPED"
    assert results["summary"]["overall"] == "PARTIAL"


@pytest.mark.asyncio
async def test_generation_check_with_non_json_body_fails():
    provider = _provider(_handler(httpx.Response(200, text="not json")))
    results = await provider.diagnose(include_generation=True)
    statuses = {t["name"]: t["status"] for t in results["tests"]}
    assert statuses["Simple Generation"] == "FAIL"
    assert statuses["JSON Generation"] == "SKIPPED"

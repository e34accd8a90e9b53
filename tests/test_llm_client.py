import json

import httpx
import pytest

from tastebox.app.core.config import get_settings
from tastebox.app.core.errors import LLMError
from tastebox.app.services import llm_client

RealAsyncClient = httpx.AsyncClient


def use_transport(monkeypatch, handler):
    transport = httpx.MockTransport(handler)

    def client_factory(*args, **kwargs):
        kwargs["transport"] = transport
        return RealAsyncClient(*args, **kwargs)

    monkeypatch.setattr(httpx, "AsyncClient", client_factory)


def completion_body(content):
    return {"choices": [{"message": {"role": "assistant", "content": content}}]}


@pytest.mark.asyncio
async def test_chat_completion_sends_json_mode_request(monkeypatch):
    seen = {}

    async def handler(request: httpx.Request) -> httpx.Response:
        seen["url"] = str(request.url)
        seen["auth"] = request.headers.get("authorization")
        seen["payload"] = json.loads(request.content)
        return httpx.Response(200, json=completion_body('{"title": "Locro"}'))

    monkeypatch.setattr(get_settings(), "llm_api_key", "test-key")
    use_transport(monkeypatch, handler)
    content = await llm_client.chat_completion("system", "user", temperature=0.2, max_tokens=4000)

    assert content == '{"title": "Locro"}'
    assert seen["url"].endswith("/chat/completions")
    assert seen["auth"] == "Bearer test-key"
    assert seen["payload"]["response_format"] == {"type": "json_object"}
    assert seen["payload"]["max_tokens"] == 4000
    assert [m["role"] for m in seen["payload"]["messages"]] == ["system", "user"]


@pytest.mark.asyncio
async def test_empty_completion_raises(monkeypatch):
    async def handler(request: httpx.Request) -> httpx.Response:
        return httpx.Response(200, json=completion_body("   "))

    use_transport(monkeypatch, handler)
    with pytest.raises(LLMError) as excinfo:
        await llm_client.chat_completion("system", "user")
    assert excinfo.value.message == "No response from the language model"


@pytest.mark.asyncio
async def test_missing_choices_raises(monkeypatch):
    async def handler(request: httpx.Request) -> httpx.Response:
        return httpx.Response(200, json={"choices": []})

    use_transport(monkeypatch, handler)
    with pytest.raises(LLMError):
        await llm_client.chat_completion("system", "user")


@pytest.mark.asyncio
async def test_provider_error_status_raises(monkeypatch):
    async def handler(request: httpx.Request) -> httpx.Response:
        return httpx.Response(429, json={"error": {"message": "Rate limit reached"}})

    use_transport(monkeypatch, handler)
    with pytest.raises(LLMError) as excinfo:
        await llm_client.chat_completion("system", "user")
    assert "429" in excinfo.value.message


@pytest.mark.asyncio
async def test_error_payload_raises(monkeypatch):
    async def handler(request: httpx.Request) -> httpx.Response:
        return httpx.Response(200, json={"error": {"message": "model overloaded"}})

    use_transport(monkeypatch, handler)
    with pytest.raises(LLMError) as excinfo:
        await llm_client.chat_completion("system", "user")
    assert "model overloaded" in excinfo.value.message


@pytest.mark.asyncio
async def test_timeout_raises(monkeypatch):
    async def handler(request: httpx.Request) -> httpx.Response:
        raise httpx.ReadTimeout("slow", request=request)

    use_transport(monkeypatch, handler)
    with pytest.raises(LLMError):
        await llm_client.chat_completion("system", "user")


@pytest.mark.asyncio
async def test_missing_api_key_raises(monkeypatch):
    monkeypatch.setattr(get_settings(), "llm_api_key", None)
    with pytest.raises(LLMError):
        await llm_client.chat_completion("system", "user")

import asyncio

import httpx
import pytest

from visa_core.domain.exceptions import ApiError, NetworkError, RateLimitError, ValidationError
from visa_core.domain.models import ChatMessage, ChatRequest
from visa_core.providers.glm_client import GlmClient
from visa_core.providers.kimi_client import KimiClient


class SettingsStub:
    kimi_api_key = "k"
    glm_api_key = "g"
    http_timeout = 1.0
    kimi_base_url = "https://api.moonshot.cn/v1"
    glm_base_url = "https://open.bigmodel.cn/api/paas/v4"


def make_request():
    return ChatRequest(
        provider="kimi",
        model="visa-chat",
        messages=[
            ChatMessage(role="system", content="sys"),
            ChatMessage(role="user", content="France visa?"),
        ],
    )


def fake_async_client(status_code=200, lines=(), body=b"", captured=None, raise_on_stream=None):
    class FakeResponse:
        def __init__(self):
            self.status_code = status_code

        async def aiter_lines(self):
            for line in lines:
                yield line

        async def aread(self):
            return body

        async def __aenter__(self):
            return self

        async def __aexit__(self, *a):
            return False

    class FakeClient:
        def __init__(self, *a, **kw):
            if captured is not None:
                captured["client_kwargs"] = kw

        async def __aenter__(self):
            return self

        async def __aexit__(self, *a):
            return False

        def stream(self, method, url, json=None, headers=None):
            if raise_on_stream is not None:
                raise raise_on_stream
            if captured is not None:
                captured.update(method=method, url=url, payload=json, headers=headers)
            return FakeResponse()

    return FakeClient


def collect(client, req):
    async def run():
        return [chunk async for chunk in client.chat_stream(req)]

    return asyncio.run(run())


def test_kimi_client_chat_stream(monkeypatch):
    stream_lines = [
        'data: {"choices": [{"index": 0, "delta": {"role": "assistant", "content": "hel"}}]}',
        "",
        ": keep-alive",
        'data: {"choices": [{"index": 0, "delta": {"content": "lo"}, "finish_reason": "stop"}], "usage": {"prompt_tokens": 1, "completion_tokens": 2, "total_tokens": 3}}',
        "data: [DONE]",
    ]
    captured = {}
    monkeypatch.setattr("httpx.AsyncClient", fake_async_client(lines=stream_lines, captured=captured))

    chunks = collect(KimiClient(SettingsStub()), make_request())

    assert [c.text for c in chunks] == ["hel", "lo"]
    assert chunks[-1].choices[0].finish_reason == "stop"
    assert chunks[-1].usage.total_tokens == 3
    assert chunks[0].provider == "kimi"
    assert captured["url"] == "https://api.moonshot.cn/v1/chat/completions"
    assert captured["headers"]["Authorization"] == "Bearer k"
    payload = captured["payload"]
    assert payload["model"] == "kimi-k2-turbo-preview"
    assert payload["stream"] is True
    assert payload["messages"] == [
        {"role": "system", "content": "sys"},
        {"role": "user", "content": "France visa?"},
    ]


def test_glm_client_uses_its_own_model(monkeypatch):
    captured = {}
    monkeypatch.setattr("httpx.AsyncClient", fake_async_client(lines=["data: [DONE]"], captured=captured))
    assert collect(GlmClient(SettingsStub()), make_request()) == []
    assert captured["payload"]["model"] == "glm-4.6"
    assert captured["url"].startswith("https://open.bigmodel.cn/api/paas/v4")


def test_missing_api_key():
    class NoKey(SettingsStub):
        kimi_api_key = None

    with pytest.raises(ValidationError) as exc:
        collect(KimiClient(NoKey()), make_request())
    assert exc.value.code == "MISSING_API_KEY"


def test_rate_limit(monkeypatch):
    monkeypatch.setattr("httpx.AsyncClient", fake_async_client(status_code=429))
    with pytest.raises(RateLimitError):
        collect(KimiClient(SettingsStub()), make_request())


def test_api_error(monkeypatch):
    monkeypatch.setattr("httpx.AsyncClient", fake_async_client(status_code=500, body=b"upstream down"))
    with pytest.raises(ApiError) as exc:
        collect(KimiClient(SettingsStub()), make_request())
    assert exc.value.http_status == 500
    assert exc.value.message == "upstream down"


def test_network_error(monkeypatch):
    err = httpx.ConnectError("dns failure")
    monkeypatch.setattr("httpx.AsyncClient", fake_async_client(raise_on_stream=err))
    with pytest.raises(NetworkError):
        collect(KimiClient(SettingsStub()), make_request())

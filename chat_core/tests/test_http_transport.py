import asyncio

import httpx
import pytest

from chat_core.domain.exceptions import ApiError, MalformedResponseError, NetworkError
from chat_core.transport.http_client import HttpChatTransport


class SettingsStub:
    chatbot_api_url = "https://chat.example.test/api/"
    http_timeout = 1.0


def _install_client(monkeypatch, handler, captured=None):
    """用返回固定 Response 的假客户端替换 httpx.AsyncClient。"""

    class Client:
        def __init__(self, *a, **kw):
            if captured is not None:
                captured["client_kwargs"] = kw

        async def __aenter__(self):
            return self

        async def __aexit__(self, *a):
            return False

        async def post(self, url, **kw):
            if captured is not None:
                captured["url"] = url
                captured.update(kw)
            return handler("POST", url)

        async def head(self, url, **kw):
            return handler("HEAD", url)

    monkeypatch.setattr("httpx.AsyncClient", Client)


def _response(status, **kw):
    return httpx.Response(status, request=httpx.Request("POST", SettingsStub.chatbot_api_url), **kw)


def test_send_posts_form_and_returns_answer(monkeypatch):
    captured = {}
    _install_client(monkeypatch, lambda m, u: _response(200, json={"answer": "You get 15 days.", "session_id": "s"}), captured)
    answer = asyncio.run(HttpChatTransport(SettingsStub()).send("alice", "s1", "What is the PTO policy?"))

    assert answer == "You get 15 days."
    assert captured["url"] == SettingsStub.chatbot_api_url
    assert captured["data"] == {"question": "What is the PTO policy?", "session_id": "s1", "user_id": "alice"}
    assert captured["headers"]["accept"] == "application/json"
    assert captured["client_kwargs"]["timeout"] == 1.0


def test_send_network_error(monkeypatch):
    def handler(method, url):
        raise httpx.ConnectError("connection refused")

    _install_client(monkeypatch, handler)
    with pytest.raises(NetworkError) as exc:
        asyncio.run(HttpChatTransport(SettingsStub()).send("alice", "s1", "hi"))
    assert exc.value.kind == "network"
    assert "connection refused" in exc.value.detail


def test_send_timeout_is_network_error(monkeypatch):
    def handler(method, url):
        raise httpx.ReadTimeout("timed out")

    _install_client(monkeypatch, handler)
    with pytest.raises(NetworkError):
        asyncio.run(HttpChatTransport(SettingsStub()).send("alice", "s1", "hi"))


def test_send_protocol_error(monkeypatch):
    _install_client(monkeypatch, lambda m, u: _response(500, text="internal failure"))
    with pytest.raises(ApiError) as exc:
        asyncio.run(HttpChatTransport(SettingsStub()).send("alice", "s1", "hi"))
    assert exc.value.kind == "protocol"
    assert exc.value.http_status == 500
    assert "500" in exc.value.detail
    assert "internal failure" in exc.value.detail


@pytest.mark.parametrize(
    "kwargs",
    [
        {"json": {"session_id": "s1"}},
        {"json": {"answer": ""}},
        {"json": {"answer": "   "}},
        {"json": {"answer": 42}},
        {"json": ["answer"]},
        {"text": "<html>not json</html>"},
    ],
)
def test_send_malformed_response(monkeypatch, kwargs):
    _install_client(monkeypatch, lambda m, u: _response(200, **kwargs))
    with pytest.raises(MalformedResponseError) as exc:
        asyncio.run(HttpChatTransport(SettingsStub()).send("alice", "s1", "hi"))
    assert exc.value.kind == "malformed"


def test_check_health(monkeypatch):
    _install_client(monkeypatch, lambda m, u: _response(200))
    assert asyncio.run(HttpChatTransport(SettingsStub()).check_health()) is True

    _install_client(monkeypatch, lambda m, u: _response(503))
    assert asyncio.run(HttpChatTransport(SettingsStub()).check_health()) is False

    def handler(method, url):
        raise httpx.ConnectError("down")

    _install_client(monkeypatch, handler)
    assert asyncio.run(HttpChatTransport(SettingsStub()).check_health()) is False

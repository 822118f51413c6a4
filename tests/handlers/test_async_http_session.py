from __future__ import annotations

import logging
from types import SimpleNamespace
from typing import Any

import aiohttp
import pytest

from handlers.async_comm import AsyncCommError, AsyncCommInvalidContentTypeError, AsyncCommTimeoutError, AsyncHttp


class FakeResponse:
    def __init__(self, body: bytes, content_type: str = "application/json") -> None:
        self.headers: dict[str, str] = {"Content-Type": content_type}
        self._body: bytes = body

    async def read(self) -> bytes:
        return self._body


class FakeRequestContext:
    def __init__(self, outcome: FakeResponse | BaseException) -> None:
        self.outcome: FakeResponse | BaseException = outcome

    async def __aenter__(self) -> FakeResponse:
        if isinstance(self.outcome, BaseException):
            raise self.outcome
        return self.outcome

    async def __aexit__(self, exc_type, exc_val, exc_tb) -> None:
        _ = exc_type, exc_val, exc_tb


class FakeSession:
    def __init__(self, outcome: FakeResponse | BaseException) -> None:
        self.outcome: FakeResponse | BaseException = outcome
        self.calls: list[dict[str, Any]] = []

    def request(self, **kwargs: Any) -> FakeRequestContext:
        self.calls.append(kwargs)
        return FakeRequestContext(self.outcome)


def _use_session(monkeypatch: pytest.MonkeyPatch, outcome: FakeResponse | BaseException) -> FakeSession:
    session = FakeSession(outcome)
    monkeypatch.setattr(AsyncHttp, "session", property(lambda self: session))
    return session


@pytest.mark.asyncio
async def test_session_is_created_lazily(caplog: pytest.LogCaptureFixture) -> None:
    caplog.set_level(logging.DEBUG, logger="TransGateway")

    http = AsyncHttp()
    assert http.is_open is False
    assert not any("AsyncHttp session initialized" in rec.message for rec in caplog.records)

    _ = http.session
    assert http.is_open is True
    assert any("AsyncHttp session initialized" in rec.message for rec in caplog.records)

    await http.close()
    assert http.is_open is False


@pytest.mark.asyncio
async def test_reenter_after_close_logs_session_initialized(caplog: pytest.LogCaptureFixture) -> None:
    caplog.set_level(logging.DEBUG, logger="TransGateway")

    http = AsyncHttp()
    async with http:
        pass

    caplog.clear()

    async with http:
        assert http.is_open is True

    assert any("AsyncHttp session initialized" in rec.message for rec in caplog.records)


@pytest.mark.asyncio
async def test_post_sends_json_and_decodes(monkeypatch: pytest.MonkeyPatch) -> None:
    session = _use_session(monkeypatch, FakeResponse(b'[{"translations": [{"text": "hola"}]}]'))
    http = AsyncHttp()

    body = await http.post(url="https://example.invalid", params={"to": "es"}, data=[{"Text": "hello"}])

    assert body == [{"translations": [{"text": "hola"}]}]
    assert session.calls[0]["method"] == "POST"
    assert session.calls[0]["json"] == [{"Text": "hello"}]
    assert session.calls[0]["params"] == {"to": "es"}


@pytest.mark.asyncio
async def test_text_body_is_decoded(monkeypatch: pytest.MonkeyPatch) -> None:
    _use_session(monkeypatch, FakeResponse(b"plain", "text/plain; charset=utf-8"))

    assert await AsyncHttp().post(url="https://example.invalid") == "plain"


@pytest.mark.asyncio
async def test_empty_body_decodes_to_none(monkeypatch: pytest.MonkeyPatch) -> None:
    _use_session(monkeypatch, FakeResponse(b""))

    assert await AsyncHttp().post(url="https://example.invalid") is None


@pytest.mark.asyncio
async def test_unknown_content_type(monkeypatch: pytest.MonkeyPatch) -> None:
    _use_session(monkeypatch, FakeResponse(b"<html/>", "text/html"))

    with pytest.raises(AsyncCommInvalidContentTypeError):
        await AsyncHttp().post(url="https://example.invalid")


@pytest.mark.asyncio
async def test_invalid_json(monkeypatch: pytest.MonkeyPatch) -> None:
    _use_session(monkeypatch, FakeResponse(b"{not json"))

    with pytest.raises(AsyncCommInvalidContentTypeError):
        await AsyncHttp().post(url="https://example.invalid")


@pytest.mark.asyncio
async def test_timeout_is_mapped(monkeypatch: pytest.MonkeyPatch) -> None:
    _use_session(monkeypatch, TimeoutError())

    with pytest.raises(AsyncCommTimeoutError):
        await AsyncHttp().post(url="https://example.invalid")


@pytest.mark.asyncio
async def test_error_status_is_kept(monkeypatch: pytest.MonkeyPatch) -> None:
    _use_session(
        monkeypatch,
        aiohttp.ClientResponseError(
            request_info=SimpleNamespace(real_url="https://example.invalid"),  # type: ignore[arg-type]
            history=(),
            status=429,
        ),
    )

    with pytest.raises(AsyncCommError) as exc_info:
        await AsyncHttp().post(url="https://example.invalid")

    assert exc_info.value.status == 429


@pytest.mark.asyncio
async def test_connection_errors_are_mapped(monkeypatch: pytest.MonkeyPatch) -> None:
    _use_session(monkeypatch, ConnectionResetError())

    with pytest.raises(AsyncCommError) as exc_info:
        await AsyncHttp().post(url="https://example.invalid")

    assert exc_info.value.status is None


def test_build_timeout() -> None:
    assert AsyncHttp._build_timeout(0).total is None
    assert AsyncHttp._build_timeout(1.0).connect is None
    timeout: aiohttp.ClientTimeout = AsyncHttp._build_timeout(10.0)
    assert timeout.total == 10.0
    assert timeout.connect == 3.0


def test_add_handler_replaces_existing(caplog: pytest.LogCaptureFixture) -> None:
    http = AsyncHttp()

    http.add_handler("text/plain", lambda raw: raw.upper())

    assert http.content_handlers["text/plain"](b"x") == b"X"
    assert any("already exists" in rec.message for rec in caplog.records)

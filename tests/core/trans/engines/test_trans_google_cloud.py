from __future__ import annotations

from types import SimpleNamespace
from typing import Any, ClassVar

import pytest
from google.api_core.exceptions import BadRequest, Forbidden, GoogleAPIError, TooManyRequests, Unauthorized

from core.trans.engines import trans_google_cloud as trans_google_cloud_module
from core.trans.interface import (
    NotSupportedLanguagesError,
    ProviderError,
    ProviderNotConfiguredError,
    ProviderResponseError,
    TranslateExceptionError,
    TranslationQuotaExceededError,
    TranslationRateLimitError,
)


class DummyClient:
    translate_result: ClassVar[Any] = {"translatedText": "ok", "detectedSourceLanguage": "EN"}
    translate_error: ClassVar[Exception | None] = None
    instances: ClassVar[list[DummyClient]] = []

    def __init__(self, *args, **kwargs) -> None:
        self.args = args
        self.kwargs = kwargs
        self.calls: list[tuple[str, str, str | None]] = []
        DummyClient.instances.append(self)

    def translate(self, content: str, target_language: str, source_language: str | None = None) -> Any:
        self.calls.append((content, target_language, source_language))
        err = type(self).translate_error
        if err is not None:
            raise err
        return type(self).translate_result


class DummySession:
    def __init__(self, api_key: str) -> None:
        self.api_key: str = api_key


@pytest.fixture(autouse=True)
def setup_google_cloud_module(monkeypatch: pytest.MonkeyPatch) -> None:
    DummyClient.translate_result = {"translatedText": "ok", "detectedSourceLanguage": "EN"}
    DummyClient.translate_error = None
    DummyClient.instances = []
    monkeypatch.setattr(trans_google_cloud_module.translate, "Client", DummyClient)
    monkeypatch.setattr(trans_google_cloud_module, "APIKeySession", DummySession)
    monkeypatch.delenv("GOOGLE_CLOUD_API_OAUTH", raising=False)
    monkeypatch.delenv("GOOGLE_APPLICATION_CREDENTIALS", raising=False)


@pytest.fixture
def config() -> Any:
    return SimpleNamespace(TRANSLATION=SimpleNamespace(TIMEOUT=5.0))


@pytest.fixture
def engine(monkeypatch: pytest.MonkeyPatch, config: Any) -> trans_google_cloud_module.GoogleCloudTranslation:
    monkeypatch.setenv("GOOGLE_CLOUD_API_OAUTH", "token")
    engine = trans_google_cloud_module.GoogleCloudTranslation()
    engine.initialize(config)
    return engine


def test_not_configured_without_credentials(config: Any) -> None:
    engine = trans_google_cloud_module.GoogleCloudTranslation()
    engine.initialize(config)

    assert engine.is_configured is False
    with pytest.raises(ProviderNotConfiguredError):
        _ = engine._inst


def test_api_key_client(engine: trans_google_cloud_module.GoogleCloudTranslation) -> None:
    client = engine._inst

    assert engine.engine_attributes.name == "Google Cloud Translation"
    assert engine.timeout == 5.0
    assert isinstance(client, DummyClient)
    assert client.kwargs["_http"].api_key == "token"


def test_service_account_client(monkeypatch: pytest.MonkeyPatch, config: Any) -> None:
    monkeypatch.setenv("GOOGLE_APPLICATION_CREDENTIALS", "/path/to/key.json")
    engine = trans_google_cloud_module.GoogleCloudTranslation()
    engine.initialize(config)

    assert engine.is_configured is True
    assert engine._inst.kwargs == {}


@pytest.mark.asyncio
async def test_translation_returns_result(engine: trans_google_cloud_module.GoogleCloudTranslation) -> None:
    DummyClient.translate_result = {"translatedText": "hola", "detectedSourceLanguage": "EN"}

    result = await engine.translation("hello", "es")

    assert result.text == "hola"
    assert result.detected_source_lang == "en"
    assert DummyClient.instances[0].calls == [("hello", "es", None)]


@pytest.mark.asyncio
async def test_translation_keeps_given_source(engine: trans_google_cloud_module.GoogleCloudTranslation) -> None:
    DummyClient.translate_result = {"translatedText": "hola"}

    result = await engine.translation("hello", "es", "en")

    assert result.detected_source_lang == "en"
    assert DummyClient.instances[0].calls == [("hello", "es", "en")]


@pytest.mark.asyncio
async def test_translation_rejects_malformed_response(
    engine: trans_google_cloud_module.GoogleCloudTranslation,
) -> None:
    DummyClient.translate_result = {"unexpected": True}

    with pytest.raises(ProviderResponseError):
        await engine.translation("hello", "es")


@pytest.mark.asyncio
@pytest.mark.parametrize(
    ("raised", "expected"),
    [
        (BadRequest("bad language"), NotSupportedLanguagesError),
        (TooManyRequests("slow down"), TranslationRateLimitError),
        (Forbidden("quota"), TranslationQuotaExceededError),
        (Unauthorized("bad key"), TranslateExceptionError),
        (GoogleAPIError("boom"), TranslateExceptionError),
        (OSError("network"), TranslateExceptionError),
    ],
)
async def test_translation_maps_errors(
    engine: trans_google_cloud_module.GoogleCloudTranslation, raised: Exception, expected: type[Exception]
) -> None:
    DummyClient.translate_error = raised

    with pytest.raises(expected):
        await engine.translation("hello", "es")


@pytest.mark.asyncio
async def test_translate_wraps_errors(engine: trans_google_cloud_module.GoogleCloudTranslation) -> None:
    DummyClient.translate_error = TooManyRequests("slow down")

    with pytest.raises(ProviderError) as exc_info:
        await engine.translate("hello", "es")

    assert exc_info.value.provider_id == "google_cloud"


@pytest.mark.asyncio
async def test_close_resets_client(engine: trans_google_cloud_module.GoogleCloudTranslation) -> None:
    _ = engine._inst

    await engine.close()
    _ = engine._inst

    assert len(DummyClient.instances) == 2

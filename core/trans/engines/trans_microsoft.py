"""Microsoft Translator (Azure AI Translator) v3 implementations.

Two providers share the same REST API and differ only in how the resource is addressed:

- ``microsoft``: a global Translator resource, authenticated by key alone.
- ``azure``: a regional resource, which additionally requires the region header.
"""

from __future__ import annotations

import os
import uuid
from typing import TYPE_CHECKING, Any, ClassVar, Final

from core.trans.interface import (
    EngineAttributes,
    NotSupportedLanguagesError,
    ProviderNotConfiguredError,
    ProviderResponseError,
    Result,
    TransInterface,
    TranslateExceptionError,
    TranslationQuotaExceededError,
    TranslationRateLimitError,
)
from handlers.async_comm import AsyncCommError, AsyncCommInvalidContentTypeError, AsyncCommTimeoutError, AsyncHttp
from utils.logger_utils import LoggerUtils

if TYPE_CHECKING:
    import logging

    from models.config_models import Config

__all__: list[str] = ["AzureTranslation", "MicrosoftTranslation"]

logger: logging.Logger = LoggerUtils.get_logger(__name__)

TRANSLATOR_ENDPOINT: Final[str] = "https://api.cognitive.microsofttranslator.com/translate"
TRANSLATOR_API_VERSION: Final[str] = "3.0"

# HTTP status codes returned by the Translator API.
_STATUS_BAD_REQUEST: Final[int] = 400
_STATUS_UNAUTHORIZED: Final[int] = 401
_STATUS_FORBIDDEN: Final[int] = 403
_STATUS_TOO_MANY_REQUESTS: Final[int] = 429


class _TranslatorTextBase(TransInterface):
    """Shared request/response handling for the Translator v3 ``/translate`` endpoint."""

    display_name: ClassVar[str] = ""

    def __init__(self) -> None:
        super().__init__()
        self._http: AsyncHttp | None = None

    @staticmethod
    def fetch_engine_name() -> str:
        return ""

    @property
    def is_configured(self) -> bool:
        return bool(self.get_authentication_key())

    def initialize(self, config: Config) -> None:
        logger.debug("'%s' Initialization start", self.__class__.__name__)
        self.engine_attributes = EngineAttributes(name=self.display_name)
        self.timeout = config.TRANSLATION.TIMEOUT
        self._http = AsyncHttp()

    def _build_headers(self) -> dict[str, str]:
        return {
            "Ocp-Apim-Subscription-Key": self.get_authentication_key(),
            "Content-Type": "application/json",
            "X-ClientTraceId": str(uuid.uuid4()),
        }

    @property
    def _client(self) -> AsyncHttp:
        if self._http is None:
            msg = f"The {self.display_name} client is not initialised"
            raise TranslateExceptionError(msg)
        return self._http

    async def translation(self, content: str, tgt_lang: str, src_lang: str | None = None) -> Result:
        """Translate text with a single ``/translate`` request.

        Raises:
            ProviderNotConfiguredError: If the credentials are missing.
            NotSupportedLanguagesError: If the API rejects the language pair.
            TranslationQuotaExceededError: If the subscription quota is used up.
            TranslationRateLimitError: If the API throttles the request.
            ProviderResponseError: If the response cannot be parsed.
            TranslateExceptionError: For any other transport failure.
        """
        if not self.is_configured:
            msg: str = f"{self.display_name} credentials not configured"
            raise ProviderNotConfiguredError(msg)

        logger.debug("'content': '%s', 'src_lang': '%s', 'tgt_lang': '%s'", content, src_lang, tgt_lang)
        params: dict[str, str] = {"api-version": TRANSLATOR_API_VERSION, "to": tgt_lang}
        if src_lang:
            params["from"] = src_lang

        try:
            response: Any = await self._client.post(
                url=TRANSLATOR_ENDPOINT,
                params=params,
                headers=self._build_headers(),
                data=[{"Text": content}],
                total_timeout=self.timeout,
            )
        except AsyncCommTimeoutError as err:
            msg = f"{self.display_name} did not respond in time"
            raise TranslateExceptionError(msg) from err
        except AsyncCommInvalidContentTypeError as err:
            msg = f"Unreadable response from {self.display_name}: {err}"
            raise ProviderResponseError(msg) from err
        except AsyncCommError as err:
            raise self._classify_error(err, src_lang, tgt_lang) from err

        result: Result = self._build_result(response)
        logger.info("translation completed (%s > %s)", src_lang or result.detected_source_lang, tgt_lang)
        return result

    def _classify_error(self, err: AsyncCommError, src_lang: str | None, tgt_lang: str) -> TranslateExceptionError:
        """Map an HTTP failure onto the engine error hierarchy."""
        if err.status == _STATUS_BAD_REQUEST:
            msg: str = f"Unsupported language pair (src: '{src_lang}', tgt: '{tgt_lang}'): {err}"
            return NotSupportedLanguagesError(msg)
        if err.status == _STATUS_UNAUTHORIZED:
            return TranslateExceptionError("Authorisation failed. Please check your authentication key")
        if err.status == _STATUS_FORBIDDEN:
            return TranslationQuotaExceededError(f"{self.display_name} quota exceeded: {err}")
        if err.status == _STATUS_TOO_MANY_REQUESTS:
            return TranslationRateLimitError(f"{self.display_name} rate limit reached")
        return TranslateExceptionError(f"An error occurred when connecting to {self.display_name}: {err}")

    def _build_result(self, response: Any) -> Result:
        """Extract the first translation from a ``/translate`` response body.

        Expected shape: ``[{"detectedLanguage": {...}, "translations": [{"text": ..., "to": ...}]}]``.

        Raises:
            ProviderResponseError: If the body does not have the expected shape.
        """
        try:
            item: dict[str, Any] = response[0]
            text: str = item["translations"][0]["text"]
        except (IndexError, KeyError, TypeError) as err:
            msg: str = f"Malformed response from {self.display_name}: {response!r}"
            raise ProviderResponseError(msg) from err

        if not isinstance(text, str):
            msg = f"Malformed response from {self.display_name}: translation is not a string"
            raise ProviderResponseError(msg)

        detected: Any = item.get("detectedLanguage") or {}
        detected_lang: str | None = detected.get("language") if isinstance(detected, dict) else None
        return Result(
            text=text,
            detected_source_lang=detected_lang.lower() if detected_lang else None,
        )

    async def close(self) -> None:
        if self._http is not None:
            await self._http.close()
        logger.debug("'%s' process termination", self.__class__.__name__)


class MicrosoftTranslation(_TranslatorTextBase):
    """Microsoft Translator using a global resource key (``MICROSOFT_API_OAUTH``)."""

    display_name: ClassVar[str] = "Microsoft Translator"

    @staticmethod
    def fetch_engine_name() -> str:
        return "microsoft"


class AzureTranslation(_TranslatorTextBase):
    """Azure AI Translator using a regional resource.

    Requires ``AZURE_API_OAUTH`` and a region, taken from ``AZURE_REGION`` or ``[AZURE] REGION``.
    """

    display_name: ClassVar[str] = "Azure Translator"

    def __init__(self) -> None:
        super().__init__()
        self._configured_region: str = ""

    @staticmethod
    def fetch_engine_name() -> str:
        return "azure"

    @property
    def region(self) -> str:
        return os.getenv("AZURE_REGION", "") or self._configured_region

    @property
    def is_configured(self) -> bool:
        return bool(self.get_authentication_key()) and bool(self.region)

    def initialize(self, config: Config) -> None:
        self._configured_region = config.AZURE.REGION
        super().initialize(config)

    def _build_headers(self) -> dict[str, str]:
        headers: dict[str, str] = super()._build_headers()
        headers["Ocp-Apim-Subscription-Region"] = self.region
        return headers

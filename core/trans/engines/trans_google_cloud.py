"""Google Cloud Translation API Basic (v2) implementation.

This module provides the primary provider of the default chain, backed by the
google-cloud-translate library.
"""

from __future__ import annotations

import asyncio
import os
from typing import TYPE_CHECKING, Any

from google.api_core.exceptions import BadRequest, Forbidden, GoogleAPIError, TooManyRequests, Unauthorized
from google.auth.credentials import AnonymousCredentials
from google.auth.exceptions import GoogleAuthError
from google.auth.transport.requests import AuthorizedSession
from google.cloud import translate_v2 as translate

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
from utils.logger_utils import LoggerUtils

if TYPE_CHECKING:
    import logging

    from models.config_models import Config

__all__: list[str] = ["GoogleCloudTranslation"]

logger: logging.Logger = LoggerUtils.get_logger(__name__)


class APIKeySession:
    """HTTP session that appends the API key to every request URL."""

    def __init__(self, api_key: str) -> None:
        self.api_key: str = api_key
        self._session: AuthorizedSession = AuthorizedSession(AnonymousCredentials())

    def request(self, method: str, url: str, **kwargs):
        separator = "&" if "?" in url else "?"
        url_with_key: str = f"{url}{separator}key={self.api_key}"
        return self._session.request(method, url_with_key, **kwargs)


class GoogleCloudTranslation(TransInterface):
    """Google Cloud Translation API Basic (v2) provider.

    Authentication can be done via:
    1. API key (``GOOGLE_CLOUD_API_OAUTH`` env var)
    2. Service account JSON key file (``GOOGLE_APPLICATION_CREDENTIALS`` env var)

    The client is created on first use, so credentials added after startup are picked
    up without restarting the gateway.
    """

    def __init__(self) -> None:
        super().__init__()
        self.__inst: translate.Client | None = None

    @property
    def _inst(self) -> translate.Client:
        """Google Cloud Translate client, created from the current credentials when needed.

        Raises:
            ProviderNotConfiguredError: If neither an API key nor a service account is configured.
            TranslateExceptionError: If the client cannot be created.
        """
        if self.__inst is None:
            self.__inst = self._create_client()
            logger.debug("'%s': 'set instance'", self.__class__.__name__)
        return self.__inst

    def _create_client(self) -> translate.Client:
        api_key: str = self.get_authentication_key()
        try:
            if api_key:
                logger.debug("Using API key authentication")
                return translate.Client(credentials=AnonymousCredentials(), _http=APIKeySession(api_key))
            if os.getenv("GOOGLE_APPLICATION_CREDENTIALS"):
                logger.debug("Using default credentials (GOOGLE_APPLICATION_CREDENTIALS)")
                return translate.Client()
        except GoogleAuthError as err:
            msg: str = f"Failed to initialize Google Cloud Translation client: {err}"
            raise TranslateExceptionError(msg) from err

        msg = "Google Cloud Translation credentials not configured"
        raise ProviderNotConfiguredError(msg)

    @staticmethod
    def fetch_engine_name() -> str:
        return "google_cloud"

    @property
    def is_configured(self) -> bool:
        return bool(self.get_authentication_key()) or bool(os.getenv("GOOGLE_APPLICATION_CREDENTIALS"))

    def initialize(self, config: Config) -> None:
        """Set up the provider from configuration.

        No connection test is made here; health is established by the first translation.
        """
        logger.debug("'%s' Initialization start", self.__class__.__name__)
        self.engine_attributes = EngineAttributes(name="Google Cloud Translation")
        self.timeout = config.TRANSLATION.TIMEOUT

    async def translation(self, content: str, tgt_lang: str, src_lang: str | None = None) -> Result:
        """Translate input text to the target language.

        Raises:
            ProviderNotConfiguredError: If credentials are absent.
            NotSupportedLanguagesError: If the specified language is not supported.
            TranslationQuotaExceededError: If the project quota is exhausted.
            TranslationRateLimitError: If the API throttles the request.
            ProviderResponseError: If the response lacks a translation.
            TranslateExceptionError: If translation fails for any other reason.
        """
        logger.debug("'content': '%s', 'src_lang': '%s', 'tgt_lang': '%s'", content, src_lang, tgt_lang)
        client: translate.Client = self._inst

        try:
            translation_result: Any = await asyncio.to_thread(
                client.translate, content, target_language=tgt_lang, source_language=src_lang
            )
        except BadRequest as err:
            msg: str = f"Unsupported language pair (src: '{src_lang}', tgt: '{tgt_lang}'): {err}"
            raise NotSupportedLanguagesError(msg) from err
        except TooManyRequests as err:
            msg = f"Translation rate limited: {err}"
            raise TranslationRateLimitError(msg) from err
        except Forbidden as err:
            msg = f"Translation quota exceeded or API disabled: {err}"
            raise TranslationQuotaExceededError(msg) from err
        except Unauthorized as err:
            msg = "Authentication failed. Please check GOOGLE_CLOUD_API_OAUTH or GOOGLE_APPLICATION_CREDENTIALS"
            raise TranslateExceptionError(msg) from err
        except GoogleAPIError as err:
            msg = f"Translation failed: {err}"
            raise TranslateExceptionError(msg) from err
        except (OSError, ValueError) as err:
            msg = f"Translation failed: {err}"
            raise TranslateExceptionError(msg) from err

        result: Result = self._build_result(translation_result, src_lang)
        logger.info("translation completed (%s > %s)", src_lang or result.detected_source_lang, tgt_lang)
        return result

    def _build_result(self, translation_result: Any, src_lang: str | None) -> Result:
        try:
            translated_text: str = translation_result["translatedText"]
        except (KeyError, TypeError) as err:
            msg: str = f"Malformed response from Google Cloud Translation: {translation_result!r}"
            raise ProviderResponseError(msg) from err

        detected_lang: str | None = translation_result.get("detectedSourceLanguage", src_lang)
        return Result(
            text=translated_text,
            detected_source_lang=detected_lang.lower() if detected_lang else None,
        )

    async def close(self) -> None:
        """Reset the client; the library holds no resources needing explicit cleanup."""
        self.__inst = None
        logger.debug("'%s' process termination", self.__class__.__name__)

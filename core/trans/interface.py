"""This module defines the abstract base class for translation providers and the gateway's error taxonomy.

Every provider adapter derives from ``TransInterface`` and implements ``translation``. Callers
go through the uniform ``translate`` entry point, which bounds the call with a timeout and
converts every failure into a ``ProviderError``.
"""

from __future__ import annotations

import asyncio
import os
from abc import ABC, abstractmethod
from dataclasses import dataclass
from typing import TYPE_CHECKING, ClassVar, Final

from utils.logger_utils import LoggerUtils

if TYPE_CHECKING:
    import logging

    from models.config_models import Config

__all__: list[str] = [
    "DEFAULT_PROVIDER_TIMEOUT_SEC",
    "AllProvidersExhaustedError",
    "EngineAttributes",
    "InvalidRequestError",
    "NotSupportedLanguagesError",
    "ProviderError",
    "ProviderNotConfiguredError",
    "ProviderResponseError",
    "RateLimitedError",
    "Result",
    "TransInterface",
    "TranslateExceptionError",
    "TranslationQuotaExceededError",
    "TranslationRateLimitError",
]

logger: logging.Logger = LoggerUtils.get_logger(__name__)

DEFAULT_PROVIDER_TIMEOUT_SEC: Final[float] = 10.0


@dataclass
class EngineAttributes:
    """Engine-specific descriptive attributes.

    Attributes:
        name (str): Human readable name of the provider, used in logs only.
    """

    name: str


@dataclass
class Result:
    """Data class for translation results.

    Attributes:
        text (str | None): Translated text. None if the provider returned nothing usable.
        detected_source_lang (str | None): Detected source language code, if reported.
    """

    text: str | None = None
    detected_source_lang: str | None = None

    def __str__(self) -> str:
        if self.text is None:
            return ""
        return self.text


class TranslateExceptionError(Exception):
    """An error occurred during the translation process."""


class InvalidRequestError(TranslateExceptionError):
    """The request is missing its text or target language."""


class RateLimitedError(TranslateExceptionError):
    """The gateway's request-rate ceiling has been reached."""


class NotSupportedLanguagesError(TranslateExceptionError):
    """An unsupported language code was specified."""


class TranslationQuotaExceededError(TranslateExceptionError):
    """The translatable character quota has been exceeded."""


class TranslationRateLimitError(TranslateExceptionError):
    """The translation request was rate-limited by the provider's API."""


class ProviderNotConfiguredError(TranslateExceptionError):
    """The provider's credentials are absent."""


class ProviderResponseError(TranslateExceptionError):
    """The provider's response could not be parsed into a translation."""


class ProviderError(TranslateExceptionError):
    """A single provider attempt failed.

    Attributes:
        provider_id (str): Registered name of the failing provider.
        cause (BaseException): The underlying error.
    """

    def __init__(self, provider_id: str, cause: BaseException) -> None:
        self.provider_id: str = provider_id
        self.cause: BaseException = cause
        super().__init__(f"{provider_id}: {cause}")


class AllProvidersExhaustedError(TranslateExceptionError):
    """Every provider in the chain failed or was skipped."""

    def __init__(self, errors: list[ProviderError]) -> None:
        self.errors: list[ProviderError] = errors
        attempted: str = ", ".join(err.provider_id for err in errors) or "none"
        super().__init__(f"All translation providers failed (attempted: {attempted})")


class TransInterface(ABC):
    """Abstract base class for translation providers.

    Subclasses are registered automatically under the name returned by
    ``fetch_engine_name()``, which is also the provider id used in configuration,
    health records and credential lookup.

    Attributes:
        registered (ClassVar[dict[str, type[TransInterface]]]): Registered provider classes keyed by name.
    """

    registered: ClassVar[dict[str, type[TransInterface]]] = {}

    def __init_subclass__(cls, **kwargs) -> None:
        super().__init_subclass__(**kwargs)
        if not hasattr(cls, "fetch_engine_name") or not callable(cls.fetch_engine_name):
            msg = "Subclasses of TransInterface must implement the static method fetch_engine_name()."
            raise TypeError(msg)

        if not isinstance(cls.fetch_engine_name(), str) or cls.fetch_engine_name() == "":
            return  # Nameless engines are allowed but never registered.

        if cls.fetch_engine_name() in cls.registered:
            msg: str = f"A translation engine with the name '{cls.fetch_engine_name()}' is already registered."
            raise ValueError(msg)

        cls.registered[cls.fetch_engine_name()] = cls

    def __init__(self) -> None:
        self._engine_attributes: EngineAttributes | None = None
        self.timeout: float = DEFAULT_PROVIDER_TIMEOUT_SEC

    @property
    def engine_attributes(self) -> EngineAttributes:
        if self._engine_attributes is None:
            msg = "Engine attributes have not been set."
            raise RuntimeError(msg)
        return self._engine_attributes

    @engine_attributes.setter
    def engine_attributes(self, attributes: EngineAttributes) -> None:
        if self._engine_attributes is not None:
            msg = "Engine attributes can only be set once during initialization."
            raise RuntimeError(msg)
        self._engine_attributes = attributes

    @property
    def provider_id(self) -> str:
        return self.fetch_engine_name()

    @staticmethod
    @abstractmethod
    def fetch_engine_name() -> str:
        """Fetch the distinguished name of the provider.

        Called from ``__init_subclass__``, so it must work at class definition time.
        """
        raise NotImplementedError

    @property
    @abstractmethod
    def is_configured(self) -> bool:
        """Whether the credentials required by the provider are present.

        Implementations must only inspect local configuration, never the network.
        """
        raise NotImplementedError

    @abstractmethod
    def initialize(self, config: Config) -> None:
        """Prepare the provider from configuration.

        Must not raise for missing credentials; ``is_configured`` reports that case.

        Raises:
            RuntimeError: If the client library cannot be set up.
        """
        raise NotImplementedError

    @abstractmethod
    async def translation(self, content: str, tgt_lang: str, src_lang: str | None = None) -> Result:
        """Translate input text to the target language with a single network call.

        Args:
            content (str): Text to be translated.
            tgt_lang (str): Target language code.
            src_lang (str | None): Source language code. If None, auto-detect.

        Returns:
            Result: Translation result with translated text.

        Raises:
            ProviderNotConfiguredError: If credentials are absent.
            NotSupportedLanguagesError: If the specified language is not supported.
            TranslationQuotaExceededError: If the character quota has been exceeded.
            TranslationRateLimitError: If the request is rate-limited by the API.
            ProviderResponseError: If the response cannot be parsed.
            TranslateExceptionError: For any other provider failure.
        """
        raise NotImplementedError

    @abstractmethod
    async def close(self) -> None:
        """Release client resources held by the provider."""
        raise NotImplementedError

    async def translate(self, content: str, tgt_lang: str, src_lang: str | None = None) -> str:
        """Translate text with the provider under its fixed per-call timeout.

        There are no retries here; the gateway decides what to try next.

        Args:
            content (str): Text to be translated.
            tgt_lang (str): Target language code.
            src_lang (str | None): Source language code. If None, auto-detect.

        Returns:
            str: The translated text.

        Raises:
            ProviderError: For every failure, wrapping the underlying cause.
        """
        if not self.is_configured:
            raise ProviderError(self.provider_id, ProviderNotConfiguredError("credentials are not configured"))

        try:
            result: Result = await asyncio.wait_for(
                self.translation(content, tgt_lang=tgt_lang, src_lang=src_lang), timeout=self.timeout
            )
        except TimeoutError as err:
            msg: str = f"no response within {self.timeout:g} seconds"
            raise ProviderError(self.provider_id, TimeoutError(msg)) from err
        except TranslateExceptionError as err:
            raise ProviderError(self.provider_id, err) from err

        if not result.text:
            raise ProviderError(self.provider_id, ProviderResponseError("empty translation returned"))
        if src_lang is None and result.detected_source_lang:
            logger.debug("'%s' detected source language: %s", self.provider_id, result.detected_source_lang)
        return result.text

    def get_authentication_key(self) -> str:
        """Retrieve the authentication key from environment variables.

        The variable is named after the provider with the suffix ``_API_OAUTH``, for
        example ``DEEPL_API_OAUTH`` for the ``deepl`` provider.

        Returns:
            str: The authentication key, or an empty string if the variable is not set.
        """
        return os.getenv(f"{self.fetch_engine_name().upper()}_API_OAUTH", "")

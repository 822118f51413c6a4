from __future__ import annotations

from typing import TYPE_CHECKING, Final, Self

from core.cache.manager import TranslationCacheManager
from core.trans import engines  # noqa: F401  # registers the built-in providers
from core.trans.health import HealthTracker
from core.trans.interface import (
    AllProvidersExhaustedError,
    InvalidRequestError,
    ProviderError,
    ProviderNotConfiguredError,
    RateLimitedError,
    TransInterface,
    TranslateExceptionError,
)
from core.trans.rate_limiter import SlidingWindowRateLimiter
from models.translation_models import HealthStatus, ProviderTestResult, TranslationRequest
from utils.logger_utils import LoggerUtils

if TYPE_CHECKING:
    import logging

    from models.config_models import Config
    from models.translation_models import ProviderHealth, RequestStats


__all__: list[str] = ["SUPPORTED_LANGUAGES", "TransManager"]

logger: logging.Logger = LoggerUtils.get_logger(__name__)

PROVIDER_TEST_TEXT: Final[str] = "Hello world"
PROVIDER_TEST_SRC_LANG: Final[str] = "en"
PROVIDER_TEST_TGT_LANG: Final[str] = "es"

SUPPORTED_LANGUAGES: Final[dict[str, str]] = {
    "en": "English",
    "es": "Spanish",
    "fr": "French",
    "de": "German",
    "it": "Italian",
    "pt": "Portuguese",
    "ru": "Russian",
    "ja": "Japanese",
    "ko": "Korean",
    "zh": "Chinese (Simplified)",
    "ar": "Arabic",
    "hi": "Hindi",
    "nl": "Dutch",
    "sv": "Swedish",
    "no": "Norwegian",
    "da": "Danish",
    "fi": "Finnish",
    "pl": "Polish",
    "tr": "Turkish",
    "he": "Hebrew",
}


class TransManager:
    """Translation gateway.

    Resolves a request from the cache when possible, otherwise admits it through the rate
    limiter and walks the provider chain (primary first, then the fallbacks in configuration
    order) until one provider succeeds. When every provider fails the caller receives a tagged
    passthrough of the original text instead of an exception.

    Only ``InvalidRequestError`` and ``RateLimitedError`` ever escape ``translate``.
    """

    def __init__(
        self,
        config: Config,
        cache_manager: TranslationCacheManager | None = None,
        rate_limiter: SlidingWindowRateLimiter | None = None,
        health_tracker: HealthTracker | None = None,
    ) -> None:
        """Initialize the gateway with the given configuration.

        Args:
            config (Config): Gateway configuration; fixes the provider chain.
            cache_manager (TranslationCacheManager | None): Result cache. Built from config if None.
            rate_limiter (SlidingWindowRateLimiter | None): Admission control. Built from config if None.
            health_tracker (HealthTracker | None): Provider status map. Built for the chain if None.
        """
        self.config: Config = config
        self._provider_chain: list[str] = list(dict.fromkeys(config.provider_chain))
        self.cache_manager: TranslationCacheManager = (
            cache_manager if cache_manager is not None else TranslationCacheManager(config.CACHE.TTL)
        )
        self.rate_limiter: SlidingWindowRateLimiter = (
            rate_limiter
            if rate_limiter is not None
            else SlidingWindowRateLimiter(config.RATE_LIMIT.WINDOW, config.RATE_LIMIT.MAX_REQUESTS)
        )
        self.health: HealthTracker = (
            health_tracker if health_tracker is not None else HealthTracker(self._provider_chain)
        )
        self._trans_instance: dict[str, TransInterface] = {}
        logger.debug("Registered translation engines: %s", list(TransInterface.registered))

    async def __aenter__(self) -> Self:
        await self.initialize()
        return self

    async def __aexit__(self, exc_type, exc_val, exc_tb) -> None:
        _ = exc_type, exc_val, exc_tb
        await self.shutdown()

    @property
    def provider_chain(self) -> list[str]:
        """Provider ids in attempt order: the primary followed by the fallbacks."""
        return list(self._provider_chain)

    async def initialize(self, *, start_monitoring: bool = True) -> None:
        """Instantiate the providers of the chain and record their configuration state.

        Args:
            start_monitoring (bool): Start the periodic configuration re-check task.
        """
        logger.info("TransManager initialization started")

        for _name in self._provider_chain:
            _cls: type[TransInterface] | None = TransInterface.registered.get(_name)
            if _cls is None:
                logger.critical("Translation class not found: '%s'", _name)
                self.health.record_config_state(_name, configured=False)
                continue
            _instance: TransInterface = _cls()
            try:
                _instance.initialize(self.config)
            except (RuntimeError, TranslateExceptionError) as err:
                logger.critical("Error in '%s' translation setup: %s", _name, err)
                self.health.record_failure(_name, err)
                continue

            self._trans_instance[_name] = _instance
            configured: bool = _instance.is_configured
            self.health.record_config_state(_name, configured=configured)
            if configured:
                logger.info("Translation engine initialized: '%s'", _name)
            else:
                logger.warning("Translation engine '%s' has no credentials and will be skipped", _name)

        if start_monitoring:
            self.health.start_monitoring(self._probe_configuration, self.config.HEALTH.CHECK_INTERVAL)

    def _probe_configuration(self, provider_id: str) -> bool:
        instance: TransInterface | None = self._trans_instance.get(provider_id)
        return instance is not None and instance.is_configured

    def refresh_configuration(self) -> None:
        """Run one pass of the periodic configuration re-check immediately."""
        self.health.recheck_configuration(self._probe_configuration)

    def _record_provider_error(self, provider_id: str, cause: BaseException) -> bool:
        """Record a failed provider call in the health map.

        Missing credentials mark the provider ``unconfigured`` rather than ``error``.

        Returns:
            bool: True if the call counted as a provider failure.
        """
        if isinstance(cause, ProviderNotConfiguredError):
            logger.info("Translation engine '%s' lost its credentials and will be skipped", provider_id)
            self.health.record_config_state(provider_id, configured=False)
            return False
        self.health.record_failure(provider_id, cause)
        return True

    async def translate(self, content: str | None, tgt_lang: str | None = None, src_lang: str | None = None) -> str:
        """Translate text through the provider chain.

        Args:
            content (str | None): Text to translate.
            tgt_lang (str | None): Target language code. Required.
            src_lang (str | None): Source language code. None means auto-detect.

        Returns:
            str: The translation, or the degraded passthrough if every provider failed.

        Raises:
            InvalidRequestError: If the text or the target language is missing.
            RateLimitedError: If the request-rate ceiling has been reached.
        """
        return await self.translate_request(TranslationRequest.create(content, tgt_lang, src_lang))

    async def translate_request(self, request: TranslationRequest) -> str:
        """Translate a prepared request. See ``translate``."""
        cached: str | None = self.cache_manager.get(request.cache_key)
        if cached is not None:
            logger.debug("Translation cache hit: '%s'", cached[:50])
            return cached

        if not request.is_valid():
            msg = "Text and target language are required"
            raise InvalidRequestError(msg)

        if not self.rate_limiter.try_acquire():
            msg = "Rate limit exceeded. Please try again later."
            raise RateLimitedError(msg)

        try:
            return await self._translate_with_chain(request)
        except AllProvidersExhaustedError as err:
            logger.error("%s; returning untranslated text", err)
            return self.degraded_fallback(request)

    async def _translate_with_chain(self, request: TranslationRequest) -> str:
        """Attempt each provider in order and cache the first success.

        Raises:
            AllProvidersExhaustedError: If no provider produced a translation.
        """
        errors: list[ProviderError] = []
        for provider_id in self._provider_chain:
            instance: TransInterface | None = self._trans_instance.get(provider_id)
            if instance is None or self.health.status_of(provider_id) == HealthStatus.UNCONFIGURED:
                logger.debug("Skipping unconfigured provider '%s'", provider_id)
                continue

            try:
                result: str = await instance.translate(
                    request.content, tgt_lang=request.tgt_lang, src_lang=request.provider_src_lang
                )
            except ProviderError as err:
                if self._record_provider_error(provider_id, err.cause):
                    errors.append(err)
                    logger.warning("Translation with '%s' failed: %s", provider_id, err.cause)
                continue
            except Exception as err:
                logger.exception("Translation with '%s' failed with unexpected error.", provider_id)
                errors.append(ProviderError(provider_id, err))
                self.health.record_failure(provider_id, err)
                continue

            self.health.record_success(provider_id)
            self.cache_manager.put(request.cache_key, result)
            logger.debug(
                "Final translation result (provider: '%s', src: '%s', tgt: '%s'): %s",
                provider_id,
                request.src_lang,
                request.tgt_lang,
                result[:50],
            )
            return result

        raise AllProvidersExhaustedError(errors)

    @staticmethod
    def degraded_fallback(request: TranslationRequest) -> str:
        """Build the visibly tagged passthrough returned when no provider succeeded."""
        return f"[{request.tgt_lang.upper()}] {request.content}"

    def service_status(self) -> dict[str, str]:
        """Status string of every known provider."""
        return {provider_id: str(record.status) for provider_id, record in self.health.snapshot().items()}

    def detailed_service_status(self) -> dict[str, ProviderHealth]:
        """Full health record of every known provider."""
        return self.health.snapshot()

    def request_stats(self) -> RequestStats:
        return self.rate_limiter.stats()

    def clear_cache(self) -> None:
        self.cache_manager.clear()

    @staticmethod
    def supported_languages() -> dict[str, str]:
        """Language codes offered to callers, mapped to their English names."""
        return dict(SUPPORTED_LANGUAGES)

    async def test_provider(self, provider_id: str) -> ProviderTestResult:
        """Translate a fixed phrase with one provider for diagnostics.

        Bypasses the cache and the rate limiter, but records the outcome in the health map.

        Args:
            provider_id (str): Provider to test.

        Returns:
            ProviderTestResult: The translation on success, the error message otherwise.
        """
        instance: TransInterface | None = self._trans_instance.get(provider_id)
        if instance is None:
            return ProviderTestResult(success=False, error=f"Unknown provider: '{provider_id}'")

        try:
            result: str = await instance.translate(
                PROVIDER_TEST_TEXT, tgt_lang=PROVIDER_TEST_TGT_LANG, src_lang=PROVIDER_TEST_SRC_LANG
            )
        except ProviderError as err:
            self._record_provider_error(provider_id, err.cause)
            logger.warning("Provider test for '%s' failed: %s", provider_id, err.cause)
            return ProviderTestResult(success=False, error=str(err.cause))
        except Exception as err:
            logger.exception("Provider test for '%s' failed with unexpected error.", provider_id)
            self.health.record_failure(provider_id, err)
            return ProviderTestResult(success=False, error=str(err))

        self.health.record_success(provider_id)
        logger.info("Provider test for '%s' succeeded", provider_id)
        return ProviderTestResult(success=True, result=result)

    async def shutdown(self) -> None:
        """Stop the health monitor and shut down all provider instances."""
        logger.info("Class '%s' termination process started.", self.__class__.__name__)
        await self.health.stop_monitoring()
        for _name, _inst in self._trans_instance.items():
            try:
                await _inst.close()
            except Exception:
                logger.exception("Error while closing translation engine '%s'", _name)
        self._trans_instance.clear()
        logger.info("Class '%s' termination process completed.", self.__class__.__name__)

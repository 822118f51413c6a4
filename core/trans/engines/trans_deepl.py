from __future__ import annotations

import asyncio
from typing import TYPE_CHECKING, ClassVar

from deepl import DeepLClient, Language, TextResult
from deepl.exceptions import (
    AuthorizationException,
    ConnectionException,
    DeepLException,
    QuotaExceededException,
    TooManyRequestsException,
)

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


__all__: list[str] = ["DeeplTranslation"]

logger: logging.Logger = LoggerUtils.get_logger(__name__)


class DeeplTranslation(TransInterface):
    _source_codes: ClassVar[dict[str, str]] = {}  # lowercase code -> DeepL source code
    _target_codes: ClassVar[dict[str, str]] = {}  # lowercase code -> DeepL target code

    def __init__(self) -> None:
        super().__init__()
        self.__inst: DeepLClient | None = None
        self._generate_langcode_mappings()

    def _generate_langcode_mappings(self) -> None:
        """Generate language code mappings from the DeepL ``Language`` constants.

        Base codes (``en``) map to DeepL's upper-case source code (``EN``) and to the
        most specific target code the library lists (``EN-US``). Regional codes such as
        ``en-gb`` are accepted as targets as-is.
        """
        language_constants: dict[str, str] = self._get_language_constants(Language)

        for code in language_constants.values():
            base_code: str = code.split("-")[0].lower()
            DeeplTranslation._source_codes[base_code] = base_code.upper()
            DeeplTranslation._target_codes[base_code] = code.upper()
            DeeplTranslation._target_codes[code.lower()] = code.upper()

        # DeepL uses a unified 'ZH' for both Chinese scripts.
        for zh_variant in ("zh-cn", "zh-tw"):
            DeeplTranslation._source_codes[zh_variant] = "ZH"
            DeeplTranslation._target_codes.setdefault(zh_variant, "ZH")

        logger.debug("Language code mapping generated for DeepL.")

    def _get_language_constants(self, cls) -> dict[str, str]:
        """Return the upper-case string constants defined on ``cls``."""
        return {name: value for name, value in vars(cls).items() if isinstance(value, str) and name.isupper()}

    @property
    def _inst(self) -> DeepLClient:
        """DeepL client, created on first use from the current authentication key."""
        if self.__inst is None:
            auth_key: str = self.get_authentication_key()
            if not auth_key:
                msg = "DeepL API key not configured"
                raise ProviderNotConfiguredError(msg)
            try:
                self.__inst = DeepLClient(auth_key)
            except (AttributeError, ValueError) as err:
                msg = "An error occurred while creating the DeepL client instance"
                raise TranslateExceptionError(msg) from err
            logger.debug("'%s': 'set instance'", self.__class__.__name__)
        return self.__inst

    @staticmethod
    def fetch_engine_name() -> str:
        return "deepl"

    @property
    def is_configured(self) -> bool:
        return bool(self.get_authentication_key())

    def initialize(self, config: Config) -> None:
        """Set up the DeepL adapter.

        Authentication occurs when the API is used rather than when the client is created,
        so the key is only validated by the first translation.
        """
        logger.debug("'%s' Initialization start", self.__class__.__name__)
        self.engine_attributes = EngineAttributes(name="DeepL")
        self.timeout = config.TRANSLATION.TIMEOUT

    def _resolve_codes(self, tgt_lang: str, src_lang: str | None) -> tuple[str, str | None]:
        try:
            _src_lang: str | None = DeeplTranslation._source_codes[src_lang.lower()] if src_lang else None
            _tgt_lang: str = DeeplTranslation._target_codes[tgt_lang.lower()]
        except KeyError:
            msg: str = (
                f"Languages not supported by DeepL. Source language: '{src_lang}'. Target language: '{tgt_lang}'."
            )
            raise NotSupportedLanguagesError(msg) from None
        return _tgt_lang, _src_lang

    async def translation(self, content: str, tgt_lang: str, src_lang: str | None = None) -> Result:
        """Translates the given content using DeepL.

        Args:
            content (str): The text content to be translated.
            tgt_lang (str): The target language code.
            src_lang (str | None): The source language code. If None, DeepL detects it.

        Returns:
            Result: The translated text and detected source language.

        Raises:
            ProviderNotConfiguredError: If the API key is missing.
            NotSupportedLanguagesError: If the specified languages are not supported by DeepL.
            TranslationQuotaExceededError: If the translation quota has been exceeded.
            TranslationRateLimitError: If DeepL throttles the request.
            TranslateExceptionError: If an error occurs during the translation process.
        """
        logger.debug("'content': '%s', 'src_lang': '%s', 'tgt_lang': '%s'", content, src_lang, tgt_lang)
        _tgt_lang, _src_lang = self._resolve_codes(tgt_lang, src_lang)
        client: DeepLClient = self._inst

        try:
            results: TextResult | list[TextResult] = await asyncio.to_thread(
                client.translate_text,
                content,
                source_lang=_src_lang,
                target_lang=_tgt_lang,
            )
        except QuotaExceededException as err:
            raise TranslationQuotaExceededError(err) from None
        except AuthorizationException:
            msg = "Authorisation failed. Please check your authentication key"
            raise TranslateExceptionError(msg) from None
        except TooManyRequestsException as err:
            msg = "DeepL rate limit reached"
            raise TranslationRateLimitError(msg) from err
        except ConnectionException:
            msg = "An error occurred when connecting to the DeepL server"
            raise TranslateExceptionError(msg) from None
        except DeepLException:
            msg = "An anomaly occurred during the translation process at DeepL"
            raise TranslateExceptionError(msg) from None
        except (ValueError, TypeError):
            msg = "An anomaly occurred during the translation process at DeepL"
            raise TranslateExceptionError(msg) from None

        logger.info("translation completed (%s > %s)", _src_lang, _tgt_lang)
        return self._build_result(results)

    def _build_result(self, results: TextResult | list[TextResult]) -> Result:
        """Build a Result from a single TextResult or a list of them.

        Raises:
            ProviderResponseError: If the results are not in the expected format.
        """
        if isinstance(results, list) and results:
            result: TextResult = results[0]
        elif isinstance(results, TextResult):
            result = results
        else:
            msg = "An anomaly occurred during the translation process at DeepL"
            raise ProviderResponseError(msg)

        detected: str | None = getattr(result, "detected_source_lang", None)
        _result = Result(
            text=result.text,
            detected_source_lang=detected.lower() if detected else None,
        )
        logger.debug("'return': '%s'", _result)
        return _result

    async def close(self) -> None:
        """Drop the client so that the next use re-reads the authentication key."""
        client: DeepLClient | None = self.__inst
        self.__inst = None
        if client is not None and hasattr(client, "close"):
            await asyncio.to_thread(client.close)
        logger.debug("'%s' process termination", self.__class__.__name__)

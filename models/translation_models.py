"""Models for translation-related data.

Defines the request handed to the gateway, the per-provider health record, and the small
result types returned by the gateway's diagnostic surfaces.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from datetime import datetime
from enum import StrEnum
from typing import Final

from dataclasses_json import DataClassJsonMixin, config, dataclass_json

__all__: list[str] = [
    "AUTO_DETECT",
    "HealthStatus",
    "ProviderHealth",
    "ProviderTestResult",
    "RequestStats",
    "TranslationRequest",
]

AUTO_DETECT: Final[str] = "auto"


@dataclass(frozen=True)
class TranslationRequest:
    """An immutable translation request.

    The target language is required for the request to be translated, but an empty
    value is accepted here so that the gateway can reject it after its cache lookup.

    Attributes:
        content (str): Text to translate.
        tgt_lang (str): Target language code.
        src_lang (str): Source language code, or ``AUTO_DETECT``.
    """

    content: str
    tgt_lang: str = ""
    src_lang: str = AUTO_DETECT

    @classmethod
    def create(cls, content: str | None, tgt_lang: str | None = None, src_lang: str | None = None) -> TranslationRequest:
        """Build a request from loosely typed caller input.

        None values become empty strings, and a missing source language becomes the
        auto-detect sentinel.
        """
        return cls(content=content or "", tgt_lang=tgt_lang or "", src_lang=src_lang or AUTO_DETECT)

    @property
    def cache_key(self) -> tuple[str, str, str]:
        return (self.content, self.src_lang, self.tgt_lang)

    @property
    def provider_src_lang(self) -> str | None:
        """Source language as passed to providers; None requests auto-detection."""
        if self.src_lang.lower() == AUTO_DETECT:
            return None
        return self.src_lang

    def is_valid(self) -> bool:
        return bool(self.content) and bool(self.tgt_lang)


class HealthStatus(StrEnum):
    """Provider health states.

    ``unconfigured`` providers are skipped by the gateway; every other state is attempted.
    """

    UNCONFIGURED = "unconfigured"
    CONFIGURED = "configured"
    HEALTHY = "healthy"
    ERROR = "error"


@dataclass_json
@dataclass
class ProviderHealth(DataClassJsonMixin):
    """Health record for a single provider.

    Records are replaced as a whole on every check, never merged.

    Attributes:
        provider_id (str): Registered provider name.
        status (HealthStatus): Current status.
        last_checked_at (datetime): Time of the last update.
        last_error (str | None): Message of the last failure, only set while ``status`` is ``error``.
    """

    provider_id: str
    status: HealthStatus
    last_checked_at: datetime = field(
        metadata=config(encoder=datetime.isoformat, decoder=datetime.fromisoformat),
    )
    last_error: str | None = None


@dataclass_json
@dataclass
class RequestStats(DataClassJsonMixin):
    """Snapshot of the gateway's admission window.

    Attributes:
        total_requests_in_window (int): Admissions still inside the trailing window.
        window_seconds (float): Width of the window.
        max_requests (int): Ceiling of admissions per window.
        is_rate_limited (bool): Whether the next request would be rejected.
    """

    total_requests_in_window: int
    window_seconds: float
    max_requests: int
    is_rate_limited: bool


@dataclass_json
@dataclass
class ProviderTestResult(DataClassJsonMixin):
    """Outcome of a diagnostic provider test."""

    success: bool
    result: str | None = None
    error: str | None = None

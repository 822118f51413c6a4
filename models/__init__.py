"""Data models for the translation gateway.

This package contains dataclass definitions for configuration, translation requests,
provider health records and cache entries.
"""

from __future__ import annotations

from models.cache_models import CacheEntry, CacheKey
from models.config_models import Config
from models.translation_models import (
    AUTO_DETECT,
    HealthStatus,
    ProviderHealth,
    ProviderTestResult,
    RequestStats,
    TranslationRequest,
)

__all__: list[str] = [
    "AUTO_DETECT",
    "CacheEntry",
    "CacheKey",
    "Config",
    "HealthStatus",
    "ProviderHealth",
    "ProviderTestResult",
    "RequestStats",
    "TranslationRequest",
]

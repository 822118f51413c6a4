"""Translation gateway: provider interface, orchestration, health and admission control.

The gateway tries a primary provider and a fixed chain of fallbacks, caching successful
results, tracking provider health and bounding the outbound request rate.
"""

from core.trans.health import HealthTracker
from core.trans.interface import (
    InvalidRequestError,
    NotSupportedLanguagesError,
    ProviderError,
    RateLimitedError,
    Result,
    TransInterface,
    TranslateExceptionError,
    TranslationQuotaExceededError,
)
from core.trans.manager import TransManager
from core.trans.rate_limiter import SlidingWindowRateLimiter

__all__: list[str] = [
    "HealthTracker",
    "InvalidRequestError",
    "NotSupportedLanguagesError",
    "ProviderError",
    "RateLimitedError",
    "Result",
    "SlidingWindowRateLimiter",
    "TransInterface",
    "TransManager",
    "TranslateExceptionError",
    "TranslationQuotaExceededError",
]

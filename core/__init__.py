"""Core components of the translation gateway.

This package contains the gateway orchestrator, the provider adapters, provider health
tracking, admission control and the translation result cache.
"""

from core.cache.manager import TranslationCacheManager
from core.trans.manager import TransManager
from core.version import VERSION

__all__: list[str] = [
    "VERSION",
    "TransManager",
    "TranslationCacheManager",
]

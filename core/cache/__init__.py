"""Translation result caching."""

from core.cache.manager import TranslationCacheManager

__all__: list[str] = ["TranslationCacheManager"]

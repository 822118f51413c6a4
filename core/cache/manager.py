"""Translation result cache.

Keeps successful translations in memory keyed by (text, source, target), each entry living for
the deployment-wide TTL. Expired entries are removed lazily when they are looked up, and a
full sweep runs from ``put`` at most once per TTL so that entries never looked up again are
released too.
"""

from __future__ import annotations

import threading
import time
from typing import TYPE_CHECKING, ClassVar

from models.cache_models import CacheEntry
from utils.logger_utils import LoggerUtils
from utils.string_utils import StringUtils

if TYPE_CHECKING:
    import logging
    from collections.abc import Callable

    from models.cache_models import CacheKey

__all__: list[str] = ["TranslationCacheManager"]

logger: logging.Logger = LoggerUtils.get_logger(__name__)


class TranslationCacheManager:
    """In-memory TTL cache for translation results.

    All access goes through a single lock, so a read racing a write sees either the old
    or the new entry, never a partial one.

    Attributes:
        DEFAULT_TTL_SEC (ClassVar[float]): TTL used when none is configured.
    """

    DEFAULT_TTL_SEC: ClassVar[float] = 3600.0

    def __init__(self, ttl: float = DEFAULT_TTL_SEC, *, clock: Callable[[], float] = time.monotonic) -> None:
        """Initialize the cache.

        Args:
            ttl (float): Lifetime of every entry in seconds. Must be positive.
            clock (Callable[[], float]): Monotonic time source.

        Raises:
            ValueError: If ``ttl`` is not positive.
        """
        if ttl <= 0:
            msg: str = f"Cache TTL must be positive: {ttl}"
            raise ValueError(msg)
        self._ttl: float = ttl
        self._clock: Callable[[], float] = clock
        self._entries: dict[str, CacheEntry] = {}
        self._lock: threading.Lock = threading.Lock()
        self._next_purge_at: float = clock() + ttl
        logger.debug("TranslationCacheManager instance created (ttl=%ss)", ttl)

    @property
    def ttl(self) -> float:
        return self._ttl

    def __len__(self) -> int:
        with self._lock:
            return len(self._entries)

    @staticmethod
    def _hash_key(key: CacheKey) -> str:
        text, source_lang, target_lang = key
        return StringUtils.generate_translation_hash_key(text, source_lang, target_lang)

    def get(self, key: CacheKey) -> str | None:
        """Look up a cached translation.

        An expired entry is removed and reported as a miss.

        Args:
            key (CacheKey): The (text, source, target) triple.

        Returns:
            str | None: The cached translation, or None on a miss.
        """
        hash_key: str = self._hash_key(key)
        with self._lock:
            entry: CacheEntry | None = self._entries.get(hash_key)
            if entry is None:
                return None
            if entry.is_expired(self._clock()):
                del self._entries[hash_key]
                logger.debug("Cache entry expired for key: %s", hash_key[:16])
                return None
            return entry.value

    def put(self, key: CacheKey, value: str) -> None:
        """Store a translation, replacing any existing entry for the same key.

        Sweeps expired entries first when a TTL has passed since the previous sweep.
        """
        hash_key: str = self._hash_key(key)
        with self._lock:
            now: float = self._clock()
            expired: list[str] = self._purge_expired_locked(now) if now >= self._next_purge_at else []
            self._entries[hash_key] = CacheEntry(key=key, value=value, expires_at=now + self._ttl)
        if expired:
            logger.info("Deleted %d expired translation cache entries", len(expired))
        logger.debug("Cache entry stored for key: %s", hash_key[:16])

    def clear(self) -> None:
        """Remove every entry immediately."""
        with self._lock:
            count: int = len(self._entries)
            self._entries.clear()
        logger.info("Translation cache cleared (%d entries removed)", count)

    def _purge_expired_locked(self, now: float) -> list[str]:
        expired: list[str] = [k for k, entry in self._entries.items() if entry.is_expired(now)]
        for hash_key in expired:
            del self._entries[hash_key]
        self._next_purge_at = now + self._ttl
        return expired

    def purge_expired(self) -> int:
        """Remove all expired entries.

        Returns:
            int: Number of entries removed.
        """
        with self._lock:
            expired: list[str] = self._purge_expired_locked(self._clock())
        if expired:
            logger.info("Deleted %d expired translation cache entries", len(expired))
        return len(expired)

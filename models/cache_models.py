"""Models for translation cache data."""

from __future__ import annotations

from dataclasses import dataclass
from typing import TypeAlias

__all__: list[str] = ["CacheEntry", "CacheKey"]

CacheKey: TypeAlias = tuple[str, str, str]
"""(text, source language, target language)."""


@dataclass
class CacheEntry:
    """Translation cache entry.

    Attributes:
        key (CacheKey): The (text, source, target) triple the entry was stored under.
        value (str): Translated text, returned verbatim on a hit.
        expires_at (float): Monotonic clock time after which the entry is treated as a miss.
    """

    key: CacheKey
    value: str
    expires_at: float

    def is_expired(self, now: float) -> bool:
        return now >= self.expires_at

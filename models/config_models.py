"""Configuration data models for the translation gateway.

Each dataclass mirrors one section of ``gateway.ini``. Defaults are usable as-is, so a
section that is missing from the file simply keeps the values defined here.
"""

from __future__ import annotations

from dataclasses import dataclass, field

__all__: list[str] = ["Config"]


@dataclass
class General:
    DEBUG: bool = False
    LOG_FILE: str = ""
    SCRIPT_NAME: str = ""


@dataclass
class Translation:
    PRIMARY: str = "google_cloud"
    FALLBACK: list[str] = field(default_factory=lambda: ["azure", "deepl", "microsoft"])
    TIMEOUT: float = 10.0


@dataclass
class Cache:
    TTL: float = 3600.0


@dataclass
class RateLimit:
    WINDOW: float = 60.0
    MAX_REQUESTS: int = 100


@dataclass
class Health:
    CHECK_INTERVAL: float = 300.0


@dataclass
class Azure:
    REGION: str = ""


@dataclass
class Config:
    GENERAL: General = field(default_factory=General)
    TRANSLATION: Translation = field(default_factory=Translation)
    CACHE: Cache = field(default_factory=Cache)
    RATE_LIMIT: RateLimit = field(default_factory=RateLimit)
    HEALTH: Health = field(default_factory=Health)
    AZURE: Azure = field(default_factory=Azure)

    @property
    def provider_chain(self) -> list[str]:
        """Primary provider followed by the fallbacks, in configuration order."""
        return [self.TRANSLATION.PRIMARY, *self.TRANSLATION.FALLBACK]

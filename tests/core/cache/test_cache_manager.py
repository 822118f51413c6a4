"""Tests for TranslationCacheManager.

Tests lookup, storage, TTL expiry, clearing and key normalization.
"""

from __future__ import annotations

import threading

import pytest

from core.cache.manager import TranslationCacheManager


class FakeClock:
    def __init__(self) -> None:
        self.now: float = 100.0

    def __call__(self) -> float:
        return self.now


@pytest.fixture
def clock() -> FakeClock:
    return FakeClock()


@pytest.fixture
def cache_manager(clock: FakeClock) -> TranslationCacheManager:
    return TranslationCacheManager(60.0, clock=clock)


@pytest.mark.parametrize("ttl", [0, -5.0])
def test_rejects_non_positive_ttl(ttl: float) -> None:
    with pytest.raises(ValueError, match="must be positive"):
        TranslationCacheManager(ttl)


def test_get_returns_none_on_miss(cache_manager: TranslationCacheManager) -> None:
    assert cache_manager.get(("hello", "en", "es")) is None


def test_put_then_get_returns_value_verbatim(cache_manager: TranslationCacheManager) -> None:
    cache_manager.put(("hello", "en", "es"), "  hola  ")

    assert cache_manager.get(("hello", "en", "es")) == "  hola  "
    assert len(cache_manager) == 1


def test_keys_differ_by_language(cache_manager: TranslationCacheManager) -> None:
    cache_manager.put(("hello", "en", "es"), "hola")

    assert cache_manager.get(("hello", "en", "fr")) is None
    assert cache_manager.get(("hello", "auto", "es")) is None


def test_put_overwrites_existing_entry(cache_manager: TranslationCacheManager) -> None:
    cache_manager.put(("hello", "en", "es"), "hola")
    cache_manager.put(("hello", "en", "es"), "buenas")

    assert cache_manager.get(("hello", "en", "es")) == "buenas"
    assert len(cache_manager) == 1


def test_equivalent_unicode_forms_share_entry(cache_manager: TranslationCacheManager) -> None:
    composed: str = "caf\u00e9"
    decomposed: str = "cafe\u0301"
    cache_manager.put((composed, "fr", "en"), "coffee")

    assert cache_manager.get((decomposed, "fr", "en")) == "coffee"


def test_entry_expires_after_ttl(cache_manager: TranslationCacheManager, clock: FakeClock) -> None:
    cache_manager.put(("hello", "en", "es"), "hola")

    clock.now += 59.9
    assert cache_manager.get(("hello", "en", "es")) == "hola"

    clock.now += 0.1
    assert cache_manager.get(("hello", "en", "es")) is None
    assert len(cache_manager) == 0


def test_clear_removes_everything(cache_manager: TranslationCacheManager, caplog: pytest.LogCaptureFixture) -> None:
    caplog.set_level("INFO", logger="TransGateway")
    cache_manager.put(("a", "en", "es"), "1")
    cache_manager.put(("b", "en", "es"), "2")

    cache_manager.clear()

    assert len(cache_manager) == 0
    assert cache_manager.get(("a", "en", "es")) is None
    assert any("2 entries removed" in rec.message for rec in caplog.records)


def test_purge_expired_counts_removed_entries(cache_manager: TranslationCacheManager, clock: FakeClock) -> None:
    cache_manager.put(("old", "en", "es"), "viejo")
    clock.now += 30
    cache_manager.put(("new", "en", "es"), "nuevo")
    clock.now += 40

    assert cache_manager.purge_expired() == 1
    assert cache_manager.get(("new", "en", "es")) == "nuevo"
    assert cache_manager.purge_expired() == 0


def test_put_sweeps_entries_never_looked_up_again(cache_manager: TranslationCacheManager, clock: FakeClock) -> None:
    for i in range(5):
        cache_manager.put((f"one-off {i}", "en", "es"), f"unico {i}")
    clock.now += 30
    cache_manager.put(("fresh", "en", "es"), "fresco")
    assert len(cache_manager) == 6

    clock.now += 31
    cache_manager.put(("later", "en", "es"), "despues")

    assert len(cache_manager) == 2
    assert cache_manager.get(("fresh", "en", "es")) == "fresco"


def test_concurrent_put_and_get() -> None:
    cache_manager = TranslationCacheManager(60.0)
    errors: list[str] = []

    def writer(index: int) -> None:
        for i in range(200):
            cache_manager.put((f"text{i}", "en", "es"), f"value{index}")

    def reader() -> None:
        for i in range(200):
            value: str | None = cache_manager.get((f"text{i}", "en", "es"))
            if value is not None and not value.startswith("value"):
                errors.append(value)

    threads: list[threading.Thread] = [threading.Thread(target=writer, args=(n,)) for n in range(4)]
    threads += [threading.Thread(target=reader) for _ in range(4)]
    for thread in threads:
        thread.start()
    for thread in threads:
        thread.join()

    assert errors == []
    assert len(cache_manager) == 200

"""Provider health bookkeeping.

Keeps one ``ProviderHealth`` record per known provider. Records are replaced on every update
and never removed. A background task periodically re-evaluates configuration presence for
providers that have not been exercised yet, without touching the network.
"""

from __future__ import annotations

import asyncio
import contextlib
import threading
from datetime import datetime
from typing import TYPE_CHECKING, ClassVar

from models.translation_models import HealthStatus, ProviderHealth
from utils.logger_utils import LoggerUtils

if TYPE_CHECKING:
    import logging
    from collections.abc import Callable, Iterable

__all__: list[str] = ["HealthTracker"]

logger: logging.Logger = LoggerUtils.get_logger(__name__)


class HealthTracker:
    """Thread-safe status map of translation providers.

    Transitions:
        - ``record_config_state``: ``configured`` or ``unconfigured``.
        - ``record_success``: ``healthy``.
        - ``record_failure``: ``error`` with the failure message.

    Attributes:
        DEFAULT_CHECK_INTERVAL_SEC (ClassVar[float]): Default period of the configuration re-check.
    """

    DEFAULT_CHECK_INTERVAL_SEC: ClassVar[float] = 300.0

    def __init__(self, provider_ids: Iterable[str] = (), *, now: Callable[[], datetime] | None = None) -> None:
        """Create a tracker with an ``unconfigured`` record for every known provider."""
        self._now: Callable[[], datetime] = now or (lambda: datetime.now().astimezone())
        self._lock: threading.Lock = threading.Lock()
        self._records: dict[str, ProviderHealth] = {}
        self._monitor_task: asyncio.Task[None] | None = None
        for provider_id in provider_ids:
            self._records[provider_id] = ProviderHealth(
                provider_id=provider_id, status=HealthStatus.UNCONFIGURED, last_checked_at=self._now()
            )

    def _set(self, provider_id: str, status: HealthStatus, error: str | None = None) -> None:
        record = ProviderHealth(provider_id=provider_id, status=status, last_checked_at=self._now(), last_error=error)
        with self._lock:
            self._records[provider_id] = record

    def record_success(self, provider_id: str) -> None:
        self._set(provider_id, HealthStatus.HEALTHY)
        logger.debug("Provider '%s' marked healthy", provider_id)

    def record_failure(self, provider_id: str, error: BaseException | str) -> None:
        """Mark a provider as failed, keeping the error message.

        Failures are transient; an ``error`` provider is still attempted by the gateway.
        """
        message: str = str(error)
        self._set(provider_id, HealthStatus.ERROR, message)
        logger.debug("Provider '%s' marked error: %s", provider_id, message)

    def record_config_state(self, provider_id: str, *, configured: bool) -> None:
        status: HealthStatus = HealthStatus.CONFIGURED if configured else HealthStatus.UNCONFIGURED
        self._set(provider_id, status)
        logger.debug("Provider '%s' configuration state: %s", provider_id, status)

    def status_of(self, provider_id: str) -> HealthStatus:
        """Current status of a provider; unknown providers count as ``unconfigured``."""
        with self._lock:
            record: ProviderHealth | None = self._records.get(provider_id)
        return record.status if record is not None else HealthStatus.UNCONFIGURED

    def snapshot(self) -> dict[str, ProviderHealth]:
        """Return a copy of all records keyed by provider id."""
        with self._lock:
            return dict(self._records)

    def recheck_configuration(self, probe: Callable[[str], bool]) -> None:
        """Re-evaluate configuration presence for providers not yet exercised.

        Providers in ``healthy`` or ``error`` keep their state; their next call updates it.

        Args:
            probe (Callable[[str], bool]): Returns whether the given provider has credentials.
        """
        for provider_id, record in self.snapshot().items():
            if record.status not in (HealthStatus.CONFIGURED, HealthStatus.UNCONFIGURED):
                continue
            configured: bool = probe(provider_id)
            with self._lock:
                current: ProviderHealth | None = self._records.get(provider_id)
                # A call may have completed while probing; its result wins.
                if current is not record:
                    continue
                self._records[provider_id] = ProviderHealth(
                    provider_id=provider_id,
                    status=HealthStatus.CONFIGURED if configured else HealthStatus.UNCONFIGURED,
                    last_checked_at=self._now(),
                )

    @property
    def is_monitoring(self) -> bool:
        return self._monitor_task is not None and not self._monitor_task.done()

    def start_monitoring(self, probe: Callable[[str], bool], interval: float = DEFAULT_CHECK_INTERVAL_SEC) -> None:
        """Start the periodic configuration re-check on the running event loop.

        Raises:
            ValueError: If ``interval`` is not positive.
        """
        if interval <= 0:
            msg: str = f"Health check interval must be positive: {interval}"
            raise ValueError(msg)
        if self.is_monitoring:
            logger.warning("Health monitoring is already running.")
            return
        self._monitor_task = asyncio.create_task(self._monitor_loop(probe, interval), name="health-monitor")
        logger.info("Health monitoring started (every %.0f seconds)", interval)

    async def stop_monitoring(self) -> None:
        if self._monitor_task is None:
            return
        self._monitor_task.cancel()
        with contextlib.suppress(asyncio.CancelledError):
            await self._monitor_task
        self._monitor_task = None
        logger.info("Health monitoring stopped")

    async def _monitor_loop(self, probe: Callable[[str], bool], interval: float) -> None:
        while True:
            await asyncio.sleep(interval)
            try:
                self.recheck_configuration(probe)
            except Exception:
                logger.exception("Periodic health check failed.")

"""Scheduled cache maintenance."""

from __future__ import annotations

from apscheduler.schedulers.asyncio import AsyncIOScheduler

from topwallets_bot.cache import MemoryCacheStore
from topwallets_bot.utils.logging import get_logger

logger = get_logger(__name__)

JOB_ID = "expire_cache_entries"


class CacheMaintenanceService:
    """Periodically evicts expired trending-token entries."""

    def __init__(
        self,
        cache: MemoryCacheStore,
        scheduler: AsyncIOScheduler,
        interval_seconds: int = 60,
    ) -> None:
        self.cache = cache
        self.scheduler = scheduler
        self.interval_seconds = interval_seconds

    def start(self) -> None:
        """Register the eviction job with the scheduler."""
        self.scheduler.add_job(
            self._expire_entries,
            trigger="interval",
            seconds=self.interval_seconds,
            id=JOB_ID,
            replace_existing=True,
        )
        logger.info("cache_maintenance_started", interval=self.interval_seconds)

    async def _expire_entries(self) -> None:
        try:
            removed = self.cache.expire()
        except Exception as exc:
            logger.error("cache_expire_failed", error=str(exc))
            return
        logger.debug("cache_expire_success", removed=removed, remaining=len(self.cache))

"""Scheduler service - fires the keep-alive pings on their cron cadences.

Three independent jobs run on the event loop:
- keep-alive: the primary cadence that keeps the target awake
- anti-cold-start: a slower second cadence hitting the same target
- self-check: pings this service's own /health endpoint

Jobs are fire-and-forget. If a ping from one cadence is still in flight when
another fires, both run concurrently.
"""
import logging
from datetime import datetime, timedelta, timezone
from typing import Callable, Optional

import httpx
from apscheduler.schedulers.asyncio import AsyncIOScheduler
from apscheduler.triggers.cron import CronTrigger
from apscheduler.triggers.date import DateTrigger

from ..config import Settings
from .pinger import Pinger, default_client_factory
from .stats_log import Severity, StatsLog

logger = logging.getLogger(__name__)

# Overlapping runs of the same job are allowed up to this many
MAX_JOB_INSTANCES = 3

# A job that fires late by up to this many seconds still runs
MISFIRE_GRACE_SECONDS = 60


class SchedulerService:
    """Service for scheduling the periodic keep-alive pings."""

    def __init__(
        self,
        stats: StatsLog,
        pinger: Pinger,
        config: Settings,
        self_check_url: str,
        client_factory: Callable[[], httpx.AsyncClient] = default_client_factory,
    ):
        self.stats = stats
        self.pinger = pinger
        self.config = config
        self.self_check_url = self_check_url
        self._client_factory = client_factory
        self.scheduler: Optional[AsyncIOScheduler] = None
        self._running = False

    @property
    def running(self) -> bool:
        return self._running

    def start(self):
        """Start the scheduler. Must be called with the event loop running."""
        if self._running:
            return

        self.scheduler = AsyncIOScheduler(timezone=timezone.utc)

        self.scheduler.add_job(
            self.keepalive_ping,
            trigger=CronTrigger.from_crontab(self.config.keepalive_cron, timezone=timezone.utc),
            id="keepalive_ping",
            replace_existing=True,
            max_instances=MAX_JOB_INSTANCES,
            misfire_grace_time=MISFIRE_GRACE_SECONDS,
        )
        self.scheduler.add_job(
            self.anti_cold_start_ping,
            trigger=CronTrigger.from_crontab(self.config.anti_cold_start_cron, timezone=timezone.utc),
            id="anti_cold_start_ping",
            replace_existing=True,
            max_instances=MAX_JOB_INSTANCES,
            misfire_grace_time=MISFIRE_GRACE_SECONDS,
        )
        self.scheduler.add_job(
            self.self_check,
            trigger=CronTrigger.from_crontab(self.config.self_check_cron, timezone=timezone.utc),
            id="self_check",
            replace_existing=True,
            max_instances=1,
            misfire_grace_time=MISFIRE_GRACE_SECONDS,
        )

        # One-off ping shortly after startup
        run_at = datetime.now(timezone.utc) + timedelta(seconds=self.config.initial_ping_delay_seconds)
        self.scheduler.add_job(
            self.pinger.run,
            trigger=DateTrigger(run_date=run_at),
            id="initial_ping",
            replace_existing=True,
        )

        self.scheduler.start()
        self._running = True
        logger.info(
            f"Scheduler started (keepalive='{self.config.keepalive_cron}', "
            f"anti_cold_start='{self.config.anti_cold_start_cron}', "
            f"self_check='{self.config.self_check_cron}')"
        )

    def stop(self):
        """Stop the scheduler."""
        if self.scheduler and self._running:
            self.scheduler.shutdown(wait=False)
            self._running = False
            logger.info("Scheduler stopped")

    async def keepalive_ping(self):
        self.stats.record("Scheduled ping initiated.", Severity.INFO)
        await self.pinger.run()

    async def anti_cold_start_ping(self):
        self.stats.record("Anti-cold-start ping initiated.", Severity.INFO)
        await self.pinger.run()

    async def self_check(self):
        """Ping our own health endpoint. Failures are logged, never raised."""
        try:
            async with self._client_factory() as client:
                response = await client.get(
                    self.self_check_url,
                    timeout=self.config.self_check_timeout_seconds,
                )
                response.raise_for_status()
            self.stats.record("Self-ping successful.", Severity.INFO)
        except Exception as e:
            self.stats.record(f"Self-ping failed: {str(e) or type(e).__name__}", Severity.WARNING)

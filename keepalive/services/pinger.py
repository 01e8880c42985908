"""Pinger service - probes the keep-alive target with a single cold-start retry."""
import asyncio
import logging
import time
from dataclasses import dataclass
from typing import Callable, Optional

import httpx

from .stats_log import Severity, StatsLog

logger = logging.getLogger(__name__)

# Timeout for the first attempt, in seconds
INITIAL_TIMEOUT_SECONDS = 45.0

# The retry gets longer to ride out a cold start
RETRY_TIMEOUT_SECONDS = 60.0

# Pause between a timed-out first attempt and the retry
RETRY_COOLDOWN_SECONDS = 2.0

PING_HEADERS = {
    "User-Agent": "Keep-Alive-Service/1.0",
    "Accept": "application/json, text/plain, */*",
    "Connection": "keep-alive",
}


@dataclass
class PingOutcome:
    """Result of one logical ping."""
    succeeded: bool
    duration_ms: int
    http_status: Optional[int] = None
    error: Optional[str] = None


class _AttemptTimeout(Exception):
    """An attempt ran out of time."""


def default_client_factory() -> httpx.AsyncClient:
    return httpx.AsyncClient(follow_redirects=True)


class Pinger:
    """Performs logical pings against the target and records them in a StatsLog.

    A logical ping is at most two attempts: the first with a 45s timeout and,
    only if that one times out, a second with a 60s timeout after a 2s pause.
    It is counted once in the totals whatever happens in between.
    """

    def __init__(
        self,
        stats: StatsLog,
        target_url: str,
        client_factory: Callable[[], httpx.AsyncClient] = default_client_factory,
        clock: Callable[[], float] = time.monotonic,
    ):
        self.stats = stats
        self.target_url = target_url
        self._client_factory = client_factory
        self._clock = clock

    async def run(self) -> PingOutcome:
        """Run one logical ping. Failures are returned, never raised.

        A cancelled ping is still settled as a failure before the
        cancellation propagates, so the counters stay balanced.
        """
        self.stats.begin_ping()
        start = self._clock()
        try:
            return await self._attempts()
        except asyncio.CancelledError:
            self._failed(self._elapsed_ms(start), "Ping cancelled")
            raise

    async def _attempts(self) -> PingOutcome:
        timeouts = (INITIAL_TIMEOUT_SECONDS, RETRY_TIMEOUT_SECONDS)
        for attempt, timeout in enumerate(timeouts, start=1):
            start = self._clock()
            try:
                response = await self._get(timeout)
            except _AttemptTimeout:
                duration_ms = self._elapsed_ms(start)
                if attempt < len(timeouts):
                    self.stats.record(
                        f"Ping timed out ({duration_ms}ms), retrying for cold start...",
                        Severity.WARNING,
                    )
                    await asyncio.sleep(RETRY_COOLDOWN_SECONDS)
                    continue
                return self._failed(duration_ms, f"Request timeout ({round(duration_ms / 1000)}s)")
            except Exception as e:
                return self._failed(self._elapsed_ms(start), str(e) or type(e).__name__)

            duration_ms = self._elapsed_ms(start)
            if not response.is_success:
                return self._failed(
                    duration_ms,
                    f"HTTP {response.status_code}: {response.reason_phrase}",
                    http_status=response.status_code,
                )
            return self._succeeded(duration_ms, response.status_code)

    async def _get(self, timeout: float) -> httpx.Response:
        logger.debug(f"GET {self.target_url} (timeout={timeout}s)")
        try:
            async with self._client_factory() as client:
                return await asyncio.wait_for(
                    client.get(self.target_url, headers=PING_HEADERS, timeout=timeout),
                    timeout=timeout,
                )
        except (httpx.TimeoutException, asyncio.TimeoutError) as e:
            raise _AttemptTimeout() from e

    def _elapsed_ms(self, start: float) -> int:
        return max(int(round((self._clock() - start) * 1000)), 0)

    def _succeeded(self, duration_ms: int, status_code: int) -> PingOutcome:
        self.stats.ping_succeeded(duration_ms)
        self.stats.record(
            f"Ping successful! Status: {status_code}, Duration: {duration_ms}ms",
            Severity.SUCCESS,
        )
        return PingOutcome(succeeded=True, duration_ms=duration_ms, http_status=status_code)

    def _failed(self, duration_ms: int, error: str, http_status: Optional[int] = None) -> PingOutcome:
        self.stats.ping_failed(duration_ms)
        self.stats.record(f"Ping failed: {error}", Severity.ERROR)
        return PingOutcome(
            succeeded=False,
            duration_ms=duration_ms,
            http_status=http_status,
            error=error,
        )

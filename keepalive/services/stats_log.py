"""Stats log service - in-memory ping counters and recent activity log."""
import logging
import threading
from dataclasses import dataclass, field, replace
from datetime import datetime, timezone
from enum import Enum
from typing import Callable, List, Optional

logger = logging.getLogger(__name__)

# Number of log entries kept in memory
LOG_CAPACITY = 50


class Severity(str, Enum):
    """Severity tier of a log entry, as shown on the dashboard."""
    INFO = "info"
    SUCCESS = "success"
    WARNING = "warning"
    ERROR = "error"


class PingStatus(str, Enum):
    """Outcome of the most recent logical ping."""
    SUCCESS = "success"
    FAILED = "failed"


_LOG_LEVELS = {
    Severity.INFO: logging.INFO,
    Severity.SUCCESS: logging.INFO,
    Severity.WARNING: logging.WARNING,
    Severity.ERROR: logging.ERROR,
}


def utcnow() -> datetime:
    return datetime.now(timezone.utc)


@dataclass(frozen=True)
class LogEntry:
    """A single activity log line."""
    timestamp: datetime
    message: str
    severity: Severity


@dataclass
class StatsAggregate:
    """Point-in-time view of the ping statistics."""
    start_time: datetime
    total_pings: int = 0
    successful_pings: int = 0
    failed_pings: int = 0
    last_ping_time: Optional[datetime] = None
    last_ping_status: Optional[PingStatus] = None
    last_ping_duration_ms: Optional[int] = None
    uptime_seconds: int = 0
    recent_logs: List[LogEntry] = field(default_factory=list)


class StatsLog:
    """Owner of the process-wide ping statistics and the recent log.

    One instance is created at startup and handed to the pinger, the
    scheduler and the API. Every mutation happens under a single lock, so the
    log append-and-truncate and the counter increments are atomic with
    respect to each other.
    """

    def __init__(self, capacity: int = LOG_CAPACITY, now: Callable[[], datetime] = utcnow):
        self.capacity = capacity
        self._now = now
        self._lock = threading.Lock()
        self._stats = StatsAggregate(start_time=now())

    @property
    def start_time(self) -> datetime:
        return self._stats.start_time

    def record(self, message: str, severity: Severity = Severity.INFO) -> LogEntry:
        """Prepend a log entry, dropping the oldest beyond capacity."""
        entry = LogEntry(timestamp=self._now(), message=message, severity=Severity(severity))
        with self._lock:
            logs = self._stats.recent_logs
            logs.insert(0, entry)
            del logs[self.capacity:]
        logger.log(_LOG_LEVELS[entry.severity], f"[{entry.timestamp.isoformat()}] {message}")
        return entry

    def begin_ping(self):
        """Count a new logical ping before its result is known."""
        with self._lock:
            self._stats.total_pings += 1

    def ping_succeeded(self, duration_ms: int):
        with self._lock:
            self._stats.successful_pings += 1
            self._set_last_ping(PingStatus.SUCCESS, duration_ms)

    def ping_failed(self, duration_ms: int):
        with self._lock:
            self._stats.failed_pings += 1
            self._set_last_ping(PingStatus.FAILED, duration_ms)

    def _set_last_ping(self, status: PingStatus, duration_ms: int):
        self._stats.last_ping_status = status
        self._stats.last_ping_time = self._now()
        self._stats.last_ping_duration_ms = duration_ms

    def snapshot(self) -> StatsAggregate:
        """Return a consistent copy of the current statistics."""
        with self._lock:
            uptime = int((self._now() - self._stats.start_time).total_seconds())
            return replace(
                self._stats,
                uptime_seconds=max(uptime, 0),
                recent_logs=list(self._stats.recent_logs),
            )

"""Services for pinging, statistics, and scheduling."""
from .stats_log import StatsLog, StatsAggregate, LogEntry, Severity, PingStatus
from .pinger import Pinger, PingOutcome
from .scheduler import SchedulerService

__all__ = [
    "StatsLog",
    "StatsAggregate",
    "LogEntry",
    "Severity",
    "PingStatus",
    "Pinger",
    "PingOutcome",
    "SchedulerService",
]

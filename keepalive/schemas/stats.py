"""Stats and ping schemas for the dashboard API."""
from datetime import datetime
from typing import List, Optional
from pydantic import BaseModel, Field

from ..services.pinger import PingOutcome
from ..services.stats_log import StatsAggregate


class LogEntryResponse(BaseModel):
    """A single activity log line."""
    timestamp: datetime
    message: str
    status: str  # info, success, warning, error


class StatsResponse(BaseModel):
    """Current ping statistics, in the shape the dashboard consumes."""
    total_pings: int = Field(..., alias="totalPings")
    successful_pings: int = Field(..., alias="successfulPings")
    failed_pings: int = Field(..., alias="failedPings")
    last_ping_time: Optional[datetime] = Field(None, alias="lastPingTime")
    last_ping_status: Optional[str] = Field(None, alias="lastPingStatus")  # success, failed
    last_ping_duration: Optional[int] = Field(None, alias="lastPingDuration")  # ms
    uptime: int  # seconds since start
    start_time: datetime = Field(..., alias="startTime")
    recent_logs: List[LogEntryResponse] = Field(default_factory=list, alias="recentLogs")
    target_url: str = Field(..., alias="targetUrl")  # service being kept awake
    
    class Config:
        populate_by_name = True
    
    @classmethod
    def from_aggregate(cls, stats: StatsAggregate, target_url: str) -> "StatsResponse":
        return cls(
            target_url=target_url,
            total_pings=stats.total_pings,
            successful_pings=stats.successful_pings,
            failed_pings=stats.failed_pings,
            last_ping_time=stats.last_ping_time,
            last_ping_status=stats.last_ping_status.value if stats.last_ping_status else None,
            last_ping_duration=stats.last_ping_duration_ms,
            uptime=stats.uptime_seconds,
            start_time=stats.start_time,
            recent_logs=[
                LogEntryResponse(
                    timestamp=entry.timestamp,
                    message=entry.message,
                    status=entry.severity.value,
                )
                for entry in stats.recent_logs
            ],
        )


class PingResponse(BaseModel):
    """Outcome of a manually triggered ping."""
    success: bool
    status: Optional[int] = None  # HTTP status code
    duration: int  # ms
    error: Optional[str] = None
    
    @classmethod
    def from_outcome(cls, outcome: PingOutcome) -> "PingResponse":
        return cls(
            success=outcome.succeeded,
            status=outcome.http_status,
            duration=outcome.duration_ms,
            error=outcome.error,
        )


class HealthResponse(BaseModel):
    """Liveness payload."""
    status: str
    timestamp: datetime

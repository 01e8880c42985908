"""Pydantic schemas for API responses."""
from .stats import (
    LogEntryResponse,
    StatsResponse,
    PingResponse,
    HealthResponse,
)

__all__ = [
    "LogEntryResponse",
    "StatsResponse",
    "PingResponse",
    "HealthResponse",
]

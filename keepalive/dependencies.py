"""FastAPI dependencies exposing the application-owned services."""
from fastapi import Request

from .config import Settings
from .services.pinger import Pinger
from .services.stats_log import StatsLog


def get_stats_log(request: Request) -> StatsLog:
    """Dependency to get the shared stats log."""
    return request.app.state.stats


def get_pinger(request: Request) -> Pinger:
    """Dependency to get the target pinger."""
    return request.app.state.pinger


def get_config(request: Request) -> Settings:
    """Dependency to get the application settings."""
    return request.app.state.config

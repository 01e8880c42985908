"""Stats and manual ping API for the dashboard."""
from fastapi import APIRouter, Depends

from ..config import Settings
from ..dependencies import get_config, get_pinger, get_stats_log
from ..schemas.stats import PingResponse, StatsResponse
from ..services.pinger import Pinger
from ..services.stats_log import Severity, StatsLog

router = APIRouter(prefix="/api", tags=["stats"])


@router.get("/stats", response_model=StatsResponse)
async def get_stats(
    stats: StatsLog = Depends(get_stats_log),
    config: Settings = Depends(get_config),
):
    """Get current ping statistics and recent logs."""
    return StatsResponse.from_aggregate(stats.snapshot(), config.target_url)


@router.post("/ping", response_model=PingResponse, response_model_exclude_none=True)
async def trigger_ping(
    stats: StatsLog = Depends(get_stats_log),
    pinger: Pinger = Depends(get_pinger),
):
    """Ping the target now and return the outcome."""
    stats.record("Manual ping triggered via API", Severity.INFO)
    outcome = await pinger.run()
    return PingResponse.from_outcome(outcome)

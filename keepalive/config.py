"""Application configuration from environment variables."""
from pydantic_settings import BaseSettings


class Settings(BaseSettings):
    """Application settings loaded from environment variables."""
    
    # URL of the service to keep awake
    target_url: str = "https://endpoint-wxtt.onrender.com/health"
    
    # Web server bind address and port
    host: str = "0.0.0.0"
    port: int = 3000
    
    # Crontab expressions for the scheduled jobs
    keepalive_cron: str = "*/3 * * * *"
    anti_cold_start_cron: str = "*/12 * * * *"
    self_check_cron: str = "*/10 * * * *"
    
    # Timeout for the self health check against our own /health
    self_check_timeout_seconds: float = 5.0
    
    # Delay before the first ping after startup
    initial_ping_delay_seconds: float = 5.0
    
    log_level: str = "INFO"
    
    class Config:
        env_prefix = ""
        case_sensitive = False


settings = Settings()


def get_self_check_url(config: Settings = settings) -> str:
    """URL of this service's own health endpoint."""
    return f"http://localhost:{config.port}/health"

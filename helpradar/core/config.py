from pydantic_settings import BaseSettings
from typing import List

class Settings(BaseSettings):
    database_url: str = "sqlite:///./helpradar.db"
    log_level: str = "INFO"

    # Priority scoring
    low_urgency_base: int = 20
    recency_window_base: float = 50.0
    recency_decay_per_hour: float = 1.04  # reaches zero after ~48 hours

    # Feed
    feed_default_page_size: int = 12
    feed_max_page_size: int = 50

    # Posts lifecycle
    post_expiry_days: int = 7
    report_auto_hide_threshold: int = 5
    suggestion_apply_threshold: int = 50

    # Rate limits (requests per window)
    create_rate_limit: int = 5
    report_rate_limit: int = 3
    rate_limit_window_ms: int = 60000

    cors_allow_origins: List[str] = ["*"]

    class Config:
        env_file = ".env"
        env_prefix = "HELPRADAR_"

settings = Settings()

"""Application configuration via environment variables."""

from functools import lru_cache

from pydantic_settings import BaseSettings


class Settings(BaseSettings):
    """Application settings loaded from environment."""

    # App
    environment: str = "development"
    log_level: str = "INFO"
    trust_proxy: bool = True

    # Telegram Bot API
    telegram_bot_token: str = ""
    telegram_chat_id: str = ""
    telegram_api_base: str = "https://api.telegram.org"
    telegram_timeout_ms: int = 5000
    telegram_retry_attempts: int = 1
    telegram_retry_delay_ms: int = 500

    # Where 5-star guests are sent after submitting
    google_review_url: str = ""

    # Self-alerting to the same chat (production only, opt-in)
    error_alerts_enabled: bool = False
    error_alert_min_ms: int = 5 * 60 * 1000

    # Master-click dedup window
    master_click_dedup_ms: int = 30_000

    # Per-address rate limits
    rate_limit_window_seconds: int = 60
    review_rate_limit_max: int = 10
    click_rate_limit_max: int = 30

    model_config = {"env_file": ".env", "extra": "ignore"}

    @property
    def is_production(self) -> bool:
        return self.environment.lower() == "production"

    @property
    def alerts_enabled(self) -> bool:
        return self.is_production and self.error_alerts_enabled


@lru_cache
def get_settings() -> Settings:
    return Settings()

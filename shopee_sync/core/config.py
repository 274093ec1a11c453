from typing import List, Literal

from pydantic_settings import BaseSettings


class Settings(BaseSettings):
    shopee_partner_id: str = ""
    shopee_partner_key: str = ""
    shopee_api_url: str = "https://partner.test-stable.shopeemobile.com"
    shopee_request_timeout: float = 30.0

    # OAuth: Shopee redirects the seller to {public_url}/api/v1/auth/callback,
    # which then sends them back to the dashboard.
    public_url: str = "http://localhost:5010"
    dashboard_url: str = "http://localhost:3000"
    cookie_secure: bool = False
    access_token_max_age: int = 60 * 60 * 4
    refresh_token_max_age: int = 60 * 60 * 24 * 30

    # Shopee applies update_tier_variation asynchronously; add_model against
    # a freshly appended option can fail until the new index propagates.
    tier_settle_delay: float = 1.0
    add_model_retry_delay: float = 1.0
    add_model_max_attempts: int = 3
    add_model_retry_backoff: Literal["fixed", "exponential"] = "fixed"

    log_level: str = "INFO"
    cors_origins: List[str] = [
        "http://localhost",
        "http://localhost:3000",
    ]

    class Config:
        env_file = ".env"


settings = Settings()


def get_settings() -> Settings:
    """Settings dependency, overridable in tests."""
    return settings

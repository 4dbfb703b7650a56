from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    """Application settings loaded from environment."""

    model_config = SettingsConfigDict(env_file=".env")

    app_name: str = "PocketTrader"
    debug: bool = False
    log_level: str = "INFO"

    database_url: str = "postgresql+asyncpg://localhost:5432/pockettrader"

    # Static card catalog feed (fetched once per process, then memoized)
    catalog_url: str = (
        "https://raw.githubusercontent.com/chase-manning/"
        "pokemon-tcg-pocket-cards/refs/heads/main/v4.json"
    )
    catalog_timeout: float = 10.0

    image_proxy_user_agent: str = "Mozilla/5.0 (compatible; Pokemon TCG Tracker)"
    image_proxy_timeout: float = 15.0

    # Access tokens are short-lived; refresh tokens allow a one-shot renewal
    session_ttl_seconds: int = 3600
    refresh_ttl_seconds: int = 30 * 24 * 3600


settings = Settings()


# =============================================================================
# PROFILE CONSTRAINTS
# =============================================================================

MIN_PASSWORD_LENGTH = 6

MIN_USERNAME_LENGTH = 3
MAX_USERNAME_LENGTH = 32

# Attempts at drawing a random friend code that nobody holds yet
FRIEND_CODE_ATTEMPTS = 5

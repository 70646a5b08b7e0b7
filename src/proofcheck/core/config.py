"""
Anchor Proof Verifier - Configuration
"""

from functools import lru_cache

from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    """Application settings."""

    model_config = SettingsConfigDict(
        env_file=".env",
        case_sensitive=True,
    )

    # Application
    APP_NAME: str = "Anchor Proof Verifier"
    VERSION: str = "1.0.0"
    ENV: str = "development"
    DEBUG: bool = False

    # Server
    HOST: str = "0.0.0.0"
    PORT: int = 8083
    WORKERS: int = 2
    LOG_LEVEL: str = "INFO"

    # Data location inferred from the first leaf when a proof carries none
    DATA_BASE_URL: str = "https://api.binded.com/v1/registrations/sha1"

    # Transaction lookup
    BLOCKCHAIN_API_URL: str = "https://blockchain.info"

    # HTTP collaborators
    REQUEST_TIMEOUT: float = 30.0
    FETCH_RETRY_COUNT: int = 3
    FETCH_RETRY_DELAY: float = 0.5
    FETCH_RETRY_MAX_DELAY: float = 5.0

    # Metrics
    METRICS_ENABLED: bool = True


@lru_cache
def get_settings() -> Settings:
    return Settings()


settings = get_settings()

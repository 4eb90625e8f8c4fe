from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    APP_NAME: str = "HTS Duty Resolver"
    APP_VERSION: str = "1.0.0"
    DEBUG: bool = False
    LOG_LEVEL: str = "INFO"

    # USITC HTS RestStop API
    USITC_BASE_URL: str = "https://hts.usitc.gov/reststop"
    # e.g. "/api/hts-proxy?path=" when calls must go through a same-origin proxy
    USITC_PROXY_BASE_URL: str | None = None

    # Fetch policy
    REQUEST_TIMEOUT_S: float = 6.5
    MAX_RETRIES: int = 2
    BACKOFF_BASE_S: float = 0.25

    # Circuit breaker
    BREAKER_FAILURE_THRESHOLD: int = 3
    BREAKER_COOL_DOWN_S: float = 20.0

    # Cache
    CACHE_MAX_ENTRIES: int = 120

    # Pagination
    DEFAULT_PAGE_SIZE: int = 50
    MAX_PAGE_SIZE: int = 200

    # CORS (comma separated)
    CORS_ORIGINS: str = "*"

    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        extra="ignore",
    )


settings = Settings()

"""Application configuration."""

from pathlib import Path
from typing import Annotated, Any, Literal

from pydantic import AnyUrl, BeforeValidator, EmailStr, computed_field
from pydantic_settings import BaseSettings, SettingsConfigDict


def parse_cors(v: Any) -> list[str] | str:
    if isinstance(v, str) and not v.startswith("["):
        return [i.strip() for i in v.split(",")]
    elif isinstance(v, list | str):
        return v
    raise ValueError(v)


class Settings(BaseSettings):
    model_config = SettingsConfigDict(
        env_file=".env",
        env_ignore_empty=True,
        extra="ignore",
    )

    # Application
    PROJECT_NAME: str = "Sadak Sathi"
    SERVER_HOST: str = "0.0.0.0"
    SERVER_PORT: int = 3000
    ENVIRONMENT: Literal["local", "staging", "production"] = "local"
    LOG_LEVEL: str = "INFO"
    FRONTEND_HOST: str = "http://localhost:5173"

    BACKEND_CORS_ORIGINS: Annotated[
        list[AnyUrl] | str, BeforeValidator(parse_cors)
    ] = []

    @computed_field
    @property
    def all_cors_origins(self) -> list[str]:
        return [str(origin).rstrip("/") for origin in self.BACKEND_CORS_ORIGINS] + [
            self.FRONTEND_HOST
        ]

    # Paths
    PIPELINE_CONFIG_PATH: Path = Path("config/script-properties.json")
    MERGED_OUTPUT_PATH: Path = Path("public/data/merged.json")
    STATIC_DIR: Path = Path("public")
    STATE_DIR: Path = Path("var")
    CACHE_DIR: Path = Path("var/cache")
    LOGS_DIR: Path = Path("var/logs")

    @computed_field
    @property
    def rotation_state_path(self) -> Path:
        return self.STATE_DIR / "fallback-index.json"

    @computed_field
    @property
    def failure_streak_path(self) -> Path:
        return self.STATE_DIR / "source-health.json"

    # Logging
    LOG_RETENTION_DAYS: int = 14
    LOG_TO_FILE: bool = True

    # Fetching
    FETCH_MAX_ATTEMPTS: int = 3
    FETCH_RETRY_DELAY_SEC: float = 1.0
    FETCHER_TIMEOUT_SEC: float = 30.0
    FETCHER_USER_AGENT: str = (
        "Mozilla/5.0 (compatible; SadakSathi/1.0; +https://sadaksathi.app)"
    )
    MERGE_INTERVAL_SEC: int = 30

    # Snapshot server
    LIVE_OVERLAY_ENABLED: bool = True
    LIVE_OVERLAY_TIMEOUT_SEC: float = 10.0

    # SMTP
    SMTP_TLS: bool = True
    SMTP_SSL: bool = False
    SMTP_PORT: int = 587
    SMTP_HOST: str | None = "smtp.gmail.com"
    SMTP_USER: str | None = None
    SMTP_PASSWORD: str | None = None
    EMAILS_FROM_EMAIL: EmailStr | None = None
    EMAILS_FROM_NAME: str | None = None

    # Alerts
    EMAIL_ENABLED: bool = True  # off: alerts are only logged
    ALERT_FAILURE_STREAK: int = 5


settings = Settings()

from __future__ import annotations

from functools import lru_cache
from typing import Literal

from pydantic import BaseModel, Field, SecretStr
from pydantic_settings import BaseSettings, SettingsConfigDict

from .. import __version__


class ConfigurationError(RuntimeError):
    """Raised when the process configuration cannot serve requests."""


class ServerSettings(BaseModel):
    host: str = Field("127.0.0.1", description="Interface the HTTP API binds to.")
    port: int = Field(3000, ge=1, le=65535)
    cors_origins: list[str] = Field(
        default_factory=lambda: ["*"],
        description="Origins permitted to access the API via CORS.",
    )


class FrontappSettings(BaseModel):
    api_key: SecretStr = Field(SecretStr(""), description="Frontapp API token used as a bearer credential.")
    base_url: str = Field("https://api2.frontapp.com", description="Base URL of the Frontapp core API.")
    timeout_seconds: float = Field(30.0, ge=0.1)
    max_retries: int = Field(3, ge=0, description="Retry attempts for network failures and 5xx responses.")
    retry_backoff_seconds: float = Field(1.0, ge=0.0, description="Initial backoff delay between retries.")
    cache_ttl_seconds: int = Field(3600, ge=0, description="TTL for cached reads of slow-changing resources.")
    cache_max_entries: int = Field(
        100,
        ge=1,
        description="Upper bound on cached reads; the oldest entry is evicted first.",
    )


class ApiSettings(BaseModel):
    api_key: SecretStr | None = Field(
        default=None,
        description="When set, callers of /tools must present it in the X-API-Key header.",
    )


class ObservabilitySettings(BaseModel):
    prometheus_enabled: bool = Field(True)
    log_level: Literal["DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL"] = "INFO"
    metrics_log_interval_seconds: int = Field(60, ge=0, description="Interval for metrics log lines; 0 disables.")
    response_time_window: int = Field(1000, ge=1, description="Number of recent response times kept for statistics.")
    request_id_header: str = Field("X-Request-ID", min_length=1)


class Settings(BaseSettings):
    environment: Literal["local", "test", "production"] = Field("local")
    version: str = Field(__version__)

    server: ServerSettings = Field(default_factory=ServerSettings)  # type: ignore[arg-type]
    frontapp: FrontappSettings = Field(default_factory=FrontappSettings)  # type: ignore[arg-type]
    api: ApiSettings = Field(default_factory=ApiSettings)  # type: ignore[arg-type]
    observability: ObservabilitySettings = Field(default_factory=ObservabilitySettings)  # type: ignore[arg-type]

    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        env_nested_delimiter="__",
        extra="ignore",
    )

    @property
    def is_production(self) -> bool:
        return self.environment == "production"


@lru_cache(maxsize=1)
def get_settings() -> Settings:
    return Settings()  # type: ignore[call-arg]


def validate_settings(settings: Settings) -> list[str]:
    """Raise when required configuration is missing; return warnings for optional gaps."""
    if not settings.frontapp.api_key.get_secret_value():
        raise ConfigurationError("Missing required environment variables: FRONTAPP__API_KEY")
    warnings: list[str] = []
    if settings.api.api_key is None or not settings.api.api_key.get_secret_value():
        warnings.append("API__API_KEY is not set; /tools is reachable without an API key")
    return warnings


__all__ = [
    "ApiSettings",
    "ConfigurationError",
    "FrontappSettings",
    "ObservabilitySettings",
    "ServerSettings",
    "Settings",
    "get_settings",
    "validate_settings",
]

"""Pydantic v2 configuration schema with strict validation."""

from pydantic import BaseModel, Field

from weatherhub.config.defaults import (
    DEFAULT_USER_AGENT,
    FORECAST_TTL_SECONDS,
    NWS_BASE_URL,
    ZONES_TTL_SECONDS,
)


class UpstreamConfig(BaseModel):
    model_config = {"extra": "forbid"}

    base_url: str = NWS_BASE_URL
    user_agent: str = DEFAULT_USER_AGENT
    timeout_seconds: float = Field(default=30.0, gt=0.0)
    max_retries: int = Field(default=2, ge=0)
    retry_base_delay_seconds: float = Field(default=1.0, ge=0.0)


class CacheConfig(BaseModel):
    model_config = {"extra": "forbid"}

    zones_ttl_seconds: float = Field(default=ZONES_TTL_SECONDS, gt=0.0)
    forecast_ttl_seconds: float = Field(default=FORECAST_TTL_SECONDS, gt=0.0)


class AssetConfig(BaseModel):
    model_config = {"extra": "forbid"}

    # None means the zone feed bundled with the package
    directory: str | None = None


class FaultConfig(BaseModel):
    model_config = {"extra": "forbid"}

    enabled: bool = False
    every_n: int = Field(default=5, ge=1)


class ServerConfig(BaseModel):
    model_config = {"extra": "forbid"}

    host: str = "127.0.0.1"
    port: int = Field(default=8000, ge=1, le=65535)


class LoggingConfig(BaseModel):
    model_config = {"extra": "forbid"}

    level: str = "INFO"


class HubConfig(BaseModel):
    model_config = {"extra": "forbid"}

    upstream: UpstreamConfig = UpstreamConfig()
    cache: CacheConfig = CacheConfig()
    assets: AssetConfig = AssetConfig()
    faults: FaultConfig = FaultConfig()
    server: ServerConfig = ServerConfig()
    logging: LoggingConfig = LoggingConfig()

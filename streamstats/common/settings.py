# streamstats/common/settings.py
from __future__ import annotations

from functools import lru_cache
from typing import List, Optional
from pydantic import BaseModel, Field, AliasChoices, field_validator, computed_field
from pydantic_settings import BaseSettings, SettingsConfigDict


def _to_bool(v: str | bool | int | None, default: bool = False) -> bool:
    if isinstance(v, bool):
        return v
    if v is None:
        return default
    s = str(v).strip().lower()
    return s in {"1", "true", "yes", "y", "on"}


class APIConfig(BaseModel):
    prefix: str = "/api"

    cors_allow_origins: List[str] = Field(default_factory=lambda: ["http://localhost:5173"])
    cors_allow_methods: List[str] = Field(default_factory=lambda: ["GET", "POST", "DELETE", "OPTIONS"])
    cors_allow_headers: List[str] = Field(default_factory=lambda: ["*"])
    cors_allow_credentials: bool = False


class ConcurrencyConfig(BaseModel):
    probe_workers: int = Field(4, ge=1, le=64, description="Threads available for concurrent ffprobe runs")


class FFProbeConfig(BaseModel):
    # Upper bound on a single run; RTMP probes can stall while waiting for keyframes
    timeout_sec: int = Field(30, ge=1)
    log_level: str = "error"  # quiet|panic|fatal|error|warning|info|verbose|debug|trace
    bin: str = Field(default="ffprobe", validation_alias=AliasChoices("bin", "FFPROBE_BIN"))


class StorageConfig(BaseModel):
    bucket: str = ""
    region: str = "us-west-1"
    endpoint_url: Optional[str] = None
    access_key_id: Optional[str] = None
    secret_access_key: Optional[str] = None
    key_prefix: str = "replay/"
    content_type: str = "video/mp4"
    acl: str = "public-read"
    gzip: bool = True

    @field_validator("gzip", mode="before")
    @classmethod
    def _boolify(cls, v):
        return _to_bool(v, default=True)


class Settings(BaseSettings):
    # -------- App / Env --------
    app_name: str = "streamstats"
    app_env: str = "development"  # development|test|staging|production
    log_level: str = "INFO"

    # -------- Ingest --------
    # Streamers publish to <rtmp_origin>/<identity>
    rtmp_origin: str = "rtmp://nginx-server/live"

    # -------- Sub-configs --------
    api: APIConfig = APIConfig()
    concurrency: ConcurrencyConfig = ConcurrencyConfig()
    ffprobe: FFProbeConfig = FFProbeConfig()
    storage: StorageConfig = StorageConfig()

    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        env_nested_delimiter="__",
        case_sensitive=False,
        extra="ignore",
    )

    @field_validator("rtmp_origin")
    @classmethod
    def _strip_trailing_slash(cls, v: str) -> str:
        return v.rstrip("/")

    @computed_field  # type: ignore[misc]
    @property
    def is_dev(self) -> bool:
        return self.app_env.lower() == "development"


@lru_cache(maxsize=1)
def get_settings() -> Settings:
    """
    Global settings accessor (cached). Use this everywhere you need config:
        from streamstats.common.settings import get_settings
        cfg = get_settings()
    """
    return Settings()  # pydantic_settings will read from .env automatically

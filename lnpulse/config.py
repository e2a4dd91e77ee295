"""Application Configuration — environment-driven settings via pydantic-settings.

Invariants:
    - Credentials are read from files named in the environment (never hardcoded)
    - get_settings() is cached (lru_cache) — single instance per process
    - routing_log_capacity >= 1

Design Decisions:
    - pydantic-settings over raw os.environ: validation, type coercion, .env file support
    - LNPULSE_ prefix: avoids clashing with lnd's own LND_* variables
    - Defaults match a local lnd with its default REST port
"""

from functools import lru_cache

from pydantic import Field, field_validator
from pydantic_settings import BaseSettings, SettingsConfigDict

from lnpulse.core.domain_types import MAX_ROUTING_EVENTS


class Settings(BaseSettings):
    """lnpulse settings from environment variables."""

    model_config = SettingsConfigDict(
        env_prefix="LNPULSE_", env_file=".env", case_sensitive=False,
    )

    # Node connection
    lnd_rest_url: str = "https://127.0.0.1:8080"
    macaroon_path: str | None = None
    tls_cert_path: str | None = None
    request_timeout_seconds: float = Field(15.0, gt=0)

    @field_validator("lnd_rest_url", mode="before")
    @classmethod
    def normalize_rest_url(cls, v: str) -> str:
        """lnd prints host:port; httpx needs a scheme and no trailing slash."""
        if isinstance(v, str):
            v = v.strip().rstrip("/")
            if "://" not in v:
                v = f"https://{v}"
            if not v.startswith(("http://", "https://")):
                raise ValueError("lnd_rest_url must use http or https")
        return v

    # Refresh schedule
    refresh_interval_seconds: float = Field(3.0, gt=0)
    routing_resubscribe_seconds: float = Field(5.0, gt=0)

    # View models
    routing_log_capacity: int = Field(MAX_ROUTING_EVENTS, ge=1)

    # Observability
    log_level: str = "INFO"
    log_format: str = "json"


@lru_cache
def get_settings() -> Settings:
    return Settings()

from pathlib import Path
from typing import Literal, Optional

from pydantic import Field, field_validator
from pydantic_settings import BaseSettings, SettingsConfigDict

ENVIRONMENT_URLS = {
    "sandbox": "https://api-sandbox.enclave.market",
    "prod": "https://api.enclave.market",
}


class Settings(BaseSettings):
    model_config = SettingsConfigDict(
        env_prefix="ENCLAVE_",
        env_file=".env",
        env_file_encoding="utf-8",
        case_sensitive=False,
        extra="ignore",
    )

    # Venue
    env: Literal["sandbox", "prod"] = Field(default="sandbox", description="Enclave environment")
    api_url: Optional[str] = Field(default=None, description="Override the environment base URL")

    # API key credentials (ENCLAVE_KEY / ENCLAVE_SECRET)
    key: str = Field(default="", description="API key id")
    secret: str = Field(default="", description="API key secret")

    # Rate limiting, disabled when the refill rate is 0
    rate_limit_capacity: int = Field(default=10, ge=1)
    rate_limit_refill_per_second: float = Field(default=0.0, ge=0)
    rate_limit_timeout: Optional[float] = Field(default=None, gt=0)

    # Connectivity probe
    probe_interval_seconds: float = Field(default=2.0, ge=0)

    # Logging
    log_level: Literal["DEBUG", "INFO", "WARNING", "ERROR"] = Field(default="INFO")
    log_file: Optional[Path] = Field(default=None)

    @field_validator("env", mode="before")
    @classmethod
    def normalize_env(cls, v):
        if isinstance(v, str):
            return v.lower()
        return v

    @field_validator("api_url")
    @classmethod
    def strip_trailing_slash(cls, v: Optional[str]) -> Optional[str]:
        if v:
            return v.rstrip("/")
        return v

    @property
    def base_url(self) -> str:
        if self.api_url:
            return self.api_url
        return ENVIRONMENT_URLS[self.env]

    @property
    def has_credentials(self) -> bool:
        return bool(self.key and self.secret)

    @property
    def rate_limit_enabled(self) -> bool:
        return self.rate_limit_refill_per_second > 0


settings = Settings()

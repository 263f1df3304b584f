"""Application-wide configuration loading and validation."""

from __future__ import annotations

from functools import lru_cache
from pathlib import Path

from pydantic import Field, field_validator
from pydantic_settings import BaseSettings, SettingsConfigDict

from bridge.errors import ConfigurationError


class Settings(BaseSettings):
    """Centralized environment configuration."""

    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        case_sensitive=False,
        extra="ignore",
    )

    host: str = Field(default="0.0.0.0")
    port: int = Field(default=5000)
    log_level: str = Field(default="INFO")

    # Bandwidth account
    bw_account_id: str | None = Field(default=None)
    bw_username: str | None = Field(default=None)
    bw_password: str | None = Field(default=None)

    # Bandwidth Voice
    bw_number: str | None = Field(
        default=None,
        description="Phone number of the voice application, E.164.",
    )
    bw_voice_application_id: str | None = Field(default=None)
    base_callback_url: str | None = Field(
        default=None,
        description="Public base URL the Voice API calls back into (e.g. https://<ngrok>.ngrok.io).",
    )
    user_number: str | None = Field(
        default=None,
        description="Outbound phone number dialed by /callPhone. Outbound calling is disabled when unset.",
    )

    # Vendor endpoints
    webrtc_api_url: str = Field(default="https://api.webrtc.bandwidth.com/v1")
    voice_api_url: str = Field(default="https://voice.bandwidth.com/api/v2")
    webrtc_sip_uri: str = Field(
        default="sip:sipx.webrtc.bandwidth.com:5060",
        description="SIP URI calls are transferred to when joining a WebRTC session.",
    )

    # Vendor HTTP behaviour
    vendor_http_timeout: float = Field(default=30.0, gt=0)
    vendor_retry_attempts: int = Field(
        default=3,
        ge=1,
        description="Attempts for idempotent vendor requests failing with a transient error.",
    )
    vendor_retry_max_wait: float = Field(default=4.0, ge=0)

    # Static browser client
    frontend_build_dir: Path = Field(default=Path("./frontend/build"))

    @field_validator("base_callback_url", "webrtc_api_url", "voice_api_url")
    @classmethod
    def strip_trailing_slash(cls, value: str | None) -> str | None:
        if value is None:
            return value
        return value.rstrip("/")

    @field_validator("user_number", "bw_number")
    @classmethod
    def blank_number_is_unset(cls, value: str | None) -> str | None:
        if value is not None and not value.strip():
            return None
        return value

    def require_credentials(self) -> None:
        """Raise if the Bandwidth account or API credentials are missing."""

        missing = [
            name
            for name, value in (
                ("BW_ACCOUNT_ID", self.bw_account_id),
                ("BW_USERNAME", self.bw_username),
                ("BW_PASSWORD", self.bw_password),
            )
            if not value
        ]
        if missing:
            raise ConfigurationError(
                f"Please set the {', '.join(missing)} environment variables before running this app"
            )


@lru_cache(maxsize=1)
def get_settings() -> Settings:
    """Return a cached Settings instance."""

    return Settings()

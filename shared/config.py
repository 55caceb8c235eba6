"""
Shared configuration management for the Gitea probe exporter.
"""

from typing import Tuple

from pydantic import Field, field_validator
from pydantic_settings import BaseSettings, SettingsConfigDict

LOG_LEVELS = ("debug", "info", "warning", "error", "critical")


class BaseConfig(BaseSettings):
    """Base configuration class with common settings."""

    model_config = SettingsConfigDict(
        env_prefix="EXPORTER_",
        env_file=".env",
        case_sensitive=False,
        extra="ignore"
    )

    # Environment
    env: str = Field(default="local")
    log_level: str = Field(default="info")

    # Listener
    host: str = Field(default="0.0.0.0")
    port: int = Field(default=9115)

    # Probe
    config_file: str = Field(default="config.yaml")
    probe_path: str = Field(default="/probe")

    # Outbound Gitea API calls
    http_timeout_seconds: float = Field(default=10.0)
    user_agent: str = Field(default="gitea-probe-exporter/1.0")

    @field_validator("log_level")
    @classmethod
    def validate_log_level(cls, value: str) -> str:
        level = value.lower()
        if level not in LOG_LEVELS:
            raise ValueError(f"log_level must be one of: {', '.join(LOG_LEVELS)}")
        return level


class ServiceConfig(BaseConfig):
    """Service-specific configuration."""

    service_name: str

    def __init__(self, service_name: str, **kwargs):
        super().__init__(service_name=service_name, **kwargs)


def get_config(service_name: str, **overrides) -> ServiceConfig:
    """Get configuration for a specific service.

    Keyword overrides whose value is ``None`` are ignored so that unset
    command-line flags fall back to the environment.
    """
    values = {key: value for key, value in overrides.items() if value is not None}
    return ServiceConfig(service_name=service_name, **values)


def parse_listen_address(address: str, default_host: str = "0.0.0.0") -> Tuple[str, int]:
    """Split a ``host:port`` (or ``:port``) listen address."""
    host, sep, port = address.rpartition(":")
    if not sep:
        raise ValueError(f"Invalid listen address: {address!r}")
    try:
        port_number = int(port)
    except ValueError:
        raise ValueError(f"Invalid listen port in address: {address!r}")
    return (host or default_host, port_number)

"""Configuration data models."""

from dataclasses import dataclass


@dataclass(frozen=True)
class AppConfig:
    """Application configuration settings."""
    client_id: str = ""
    client_secret: str = ""
    redirect_url: str = ""
    release: str = "RETAIL"
    sandbox: str = "UNUSED"
    request_timeout: float = 30.0
    log_level: str = "INFO"

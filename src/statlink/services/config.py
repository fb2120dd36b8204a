"""Configuration service for managing application settings."""

import json
from pathlib import Path
from typing import Any

import structlog

from ..models import AppConfig

log = structlog.stdlib.get_logger()

VALID_LOG_LEVELS = {"DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL"}


class ValidationResult:
    """Result of configuration validation."""

    def __init__(self, is_valid: bool, errors: list[str] | None = None) -> None:
        self.is_valid: bool = is_valid
        self.errors: list[str] = errors or []


class ConfigurationService:
    """Service for managing application configuration."""

    def __init__(self, config_path: Path | None = None) -> None:
        self.config_path: Path = config_path or Path.home() / ".config" / "statlink" / "config.json"
        log.debug("Configuration service initialized", config_path=str(self.config_path))

    def load_config(self) -> AppConfig:
        """Load configuration from file or return default configuration."""
        if not self.config_path.exists():
            log.info("Configuration file not found, using defaults", config_path=str(self.config_path))
            return self._get_default_config()

        try:
            with open(self.config_path, 'r', encoding='utf-8') as f:
                data: dict[str, Any] = json.load(f)

            if not isinstance(data, dict):
                raise TypeError(f"Expected a JSON object, got {type(data).__name__}")

            config = self._dict_to_config(data)
            validation_result = self.validate_config(config)

            if not validation_result.is_valid:
                log.warning("Invalid configuration loaded, using defaults", errors=validation_result.errors)
                return self._get_default_config()

            log.info("Configuration loaded successfully")
            return config

        except (json.JSONDecodeError, KeyError, TypeError, ValueError) as e:
            log.error("Failed to load configuration, using defaults", error=str(e))
            return self._get_default_config()

    def save_config(self, config: AppConfig) -> None:
        """Save configuration to file."""
        validation_result = self.validate_config(config)
        if not validation_result.is_valid:
            raise ValueError(f"Invalid configuration: {', '.join(validation_result.errors)}")

        self.config_path.parent.mkdir(parents=True, exist_ok=True)

        try:
            with open(self.config_path, 'w', encoding='utf-8') as f:
                json.dump(self._config_to_dict(config), f, indent=2, ensure_ascii=False)

            log.info("Configuration saved successfully")

        except OSError as e:
            log.error("Failed to save configuration", error=str(e))
            raise

    def validate_config(self, config: AppConfig) -> ValidationResult:
        """Validate configuration settings."""
        errors = []

        for name in ("client_id", "client_secret", "redirect_url"):
            if not isinstance(getattr(config, name), str):
                errors.append(f"{name} must be a string")

        if config.redirect_url and not config.redirect_url.startswith(("http://", "https://")):
            errors.append("redirect_url must be an http(s) URL")

        if not isinstance(config.release, str) or not config.release:
            errors.append("release cannot be empty")

        if not isinstance(config.sandbox, str) or not config.sandbox:
            errors.append("sandbox cannot be empty")

        if not isinstance(config.request_timeout, (int, float)) or config.request_timeout <= 0:
            errors.append("request_timeout must be a positive number")
        elif config.request_timeout > 300:
            errors.append("request_timeout should not exceed 300 seconds")

        if config.log_level not in VALID_LOG_LEVELS:
            errors.append(f"log_level must be one of: {', '.join(sorted(VALID_LOG_LEVELS))}")

        return ValidationResult(len(errors) == 0, errors)

    def _get_default_config(self) -> AppConfig:
        """Get default configuration."""
        return AppConfig()

    def _config_to_dict(self, config: AppConfig) -> dict[str, str | float]:
        """Convert AppConfig to dictionary for JSON serialization."""
        return {
            "client_id": config.client_id,
            "client_secret": config.client_secret,
            "redirect_url": config.redirect_url,
            "release": config.release,
            "sandbox": config.sandbox,
            "request_timeout": config.request_timeout,
            "log_level": config.log_level,
        }

    def _dict_to_config(self, data: dict[str, Any]) -> AppConfig:
        """Convert dictionary to AppConfig."""
        defaults = AppConfig()

        timeout_raw = data.get("request_timeout", defaults.request_timeout)
        request_timeout = float(timeout_raw) if isinstance(timeout_raw, (int, float)) else defaults.request_timeout

        def text(key: str, default: str) -> str:
            value = data.get(key, default)
            return value if isinstance(value, str) else default

        return AppConfig(
            client_id=text("client_id", defaults.client_id),
            client_secret=text("client_secret", defaults.client_secret),
            redirect_url=text("redirect_url", defaults.redirect_url),
            release=text("release", defaults.release),
            sandbox=text("sandbox", defaults.sandbox),
            request_timeout=request_timeout,
            log_level=text("log_level", defaults.log_level),
        )

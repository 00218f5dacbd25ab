"""
Copyright (c) 2025 Eric C. Mumford (@heymumford)
This file is part of RPREPORT, licensed under the MIT License.
See LICENSE file for details.
"""

"""
Configuration management for RPREPORT.

This module provides a central location for all configuration settings in RPREPORT.
It handles environment variables, default values, and normalization of the
ReportPortal connection parameters.
"""

import logging
import os
from typing import Any, ClassVar

from pydantic import BaseModel, Field, field_validator, model_validator

logger = logging.getLogger(__name__)

API_PATH_MARKER = "/api/v"


class BaseConfig(BaseModel):
    """Base configuration class with common functionality."""

    ENV_PREFIX: ClassVar[str] = "RPREPORT_"

    @classmethod
    def from_env(cls, **overrides) -> "BaseConfig":
        """
        Create a configuration instance from environment variables.

        Args:
        ----
            **overrides: Key-value pairs that override environment variables

        Returns:
        -------
            An instance of the configuration class

        """
        raise NotImplementedError("Subclasses must implement from_env method")

    @classmethod
    def get_env_var(cls, key: str, default: Any = None) -> Any:
        """
        Get an environment variable with the class prefix.

        Args:
        ----
            key: Key name without prefix
            default: Default value if environment variable is not found

        Returns:
        -------
            The environment variable value or default

        """
        env_key = f"{cls.ENV_PREFIX}{key.upper()}"
        return os.environ.get(env_key, default)


class LoggingConfig(BaseConfig):
    """Configuration for logging settings."""

    level: str = Field(
        default_factory=lambda: os.environ.get("RPREPORT_LOG_LEVEL", "INFO"),
        description="Logging level (DEBUG, INFO, WARNING, ERROR, CRITICAL)",
    )
    format: str = Field(
        default="%(message)s",
        description="Logging format string",
    )
    date_format: str = Field(
        default="[%X]",
        description="Date format for logging timestamps",
    )
    use_rich: bool = Field(
        default=True,
        description="Whether to use rich for console formatting",
    )
    log_file: str | None = Field(
        default=None,
        description="Path to the log file (None for console-only logging)",
    )
    json_format: bool = Field(
        default=False,
        description="Whether to use JSON format for logs",
    )
    include_correlation_id: bool = Field(
        default=True,
        description="Whether to include correlation IDs in logs",
    )

    @field_validator("level")
    @classmethod
    def validate_level(cls, value):
        """Validate that the log level is valid."""
        valid_levels = ["DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL"]
        value = value.upper()
        if value not in valid_levels:
            logger.warning(f"Invalid log level '{value}', defaulting to INFO")
            return "INFO"
        return value

    @classmethod
    def from_env(cls, **overrides) -> "LoggingConfig":
        """Create a logging configuration from environment variables."""
        config = {
            "level": cls.get_env_var("LOG_LEVEL", "INFO"),
            "format": cls.get_env_var("LOG_FORMAT", "%(message)s"),
            "date_format": cls.get_env_var("LOG_DATE_FORMAT", "[%X]"),
            "use_rich": cls.get_env_var("LOG_USE_RICH", "true").lower() == "true",
            "log_file": cls.get_env_var("LOG_FILE", None),
            "json_format": cls.get_env_var("LOG_JSON", "false").lower() == "true",
            "include_correlation_id": cls.get_env_var("LOG_CORRELATION_ID", "true").lower()
            == "true",
        }
        config.update(overrides)
        return cls(**config)

    def get_log_level_int(self) -> int:
        """Get the numeric logging level."""
        return getattr(logging, self.level)

    def configure_logging(self, debug: bool = False) -> None:
        """
        Configure logging based on the settings.

        Args:
        ----
            debug: Whether to force debug mode

        """
        from rpreport.core.logging import configure_logging as configure_contextual_logging

        configure_contextual_logging(
            level=logging.DEBUG if debug else self.get_log_level_int(),
            log_file=self.log_file,
            json_format=self.json_format,
            include_timestamp=True,
            use_rich=self.use_rich,
            debug=debug,
            include_correlation_id=self.include_correlation_id,
            fmt=self.format,
            date_format=self.date_format,
        )


class ReportPortalConfig(BaseConfig):
    """
    Connection settings for a ReportPortal instance.

    The endpoint is normalized once at construction: trailing slashes are
    trimmed, ``https://`` is prepended when no scheme is given and
    ``/api/v{api_version}`` is appended unless the endpoint already names an API
    version. Malformed endpoints are not rejected here; the transport reports
    them when the first request is sent.
    """

    endpoint: str = Field(
        default="",
        description="ReportPortal endpoint, e.g. https://rp.example.com or rp.example.com/api/v1",
    )
    project: str = Field(
        default="",
        description="ReportPortal project name",
    )
    token: str = Field(
        default="",
        description="Access token sent as a bearer credential",
    )
    api_version: int = Field(
        default=1,
        description="API version used when the endpoint does not carry one",
    )
    timeout: float = Field(
        default=30.0,
        description="API request timeout in seconds",
        gt=0,
    )
    pool_size: int = Field(
        default=10,
        description="Maximum number of pooled HTTP connections",
        gt=0,
    )

    @field_validator("api_version")
    @classmethod
    def validate_api_version(cls, value):
        """Coerce versions below 1 to 1."""
        return max(value, 1)

    @model_validator(mode="after")
    def normalize_endpoint(self):
        """Normalize the endpoint into {scheme}://{host}/api/v{N}."""
        self.endpoint = normalize_endpoint(self.endpoint, self.api_version)
        return self

    @classmethod
    def from_env(cls, **overrides) -> "ReportPortalConfig":
        """Create a ReportPortal configuration from environment variables."""
        config = {
            "endpoint": cls.get_env_var("ENDPOINT", ""),
            "project": cls.get_env_var("PROJECT", ""),
            "token": cls.get_env_var("TOKEN", ""),
            "api_version": cls.get_env_var("API_VERSION", "1"),
            "timeout": cls.get_env_var("TIMEOUT", "30.0"),
            "pool_size": cls.get_env_var("POOL_SIZE", "10"),
        }
        config.update(overrides)
        return cls(**config)


def normalize_endpoint(endpoint: str, api_version: int = 1) -> str:
    """
    Normalize a raw ReportPortal endpoint.

    Args:
        endpoint: Raw endpoint as given by the user
        api_version: API version to append when the endpoint has none

    Returns:
        The endpoint with scheme and versioned API path, without trailing slash

    """
    endpoint = endpoint.rstrip("/")
    api_version = max(api_version, 1)

    normalized = endpoint
    if not endpoint.startswith(("https://", "http://")):
        normalized = f"https://{endpoint}"

    if API_PATH_MARKER not in endpoint:
        normalized = f"{normalized}{API_PATH_MARKER}{api_version}"

    return normalized


class AppConfig(BaseConfig):
    """Main application configuration that aggregates all other configurations."""

    logging: LoggingConfig = Field(
        default_factory=LoggingConfig,
        description="Logging configuration",
    )
    debug: bool = Field(
        default=False,
        description="Debug mode flag",
    )
    app_name: str = Field(
        default="RPREPORT",
        description="Application name",
    )
    app_version: str = Field(
        default="0.0.0",
        description="Application version",
    )

    @classmethod
    def from_env(cls, **overrides) -> "AppConfig":
        """Create an application configuration from environment variables."""
        config = {
            "logging": LoggingConfig.from_env(),
            "debug": cls.get_env_var("DEBUG", "false").lower() == "true",
            "app_name": cls.get_env_var("APP_NAME", "RPREPORT"),
            "app_version": cls.get_env_var("APP_VERSION", "0.0.0"),
        }

        for key, value in overrides.items():
            if key == "logging" and isinstance(value, dict):
                config[key] = LoggingConfig(**value)
            else:
                config[key] = value

        return cls(**config)

    def configure_logging(self) -> None:
        """Configure logging based on the settings."""
        self.logging.configure_logging(debug=self.debug)


def init_app_config(config: AppConfig = None, **kwargs) -> AppConfig:
    """
    Initialize the application configuration.

    Args:
    ----
        config: An existing AppConfig instance
        **kwargs: Key-value pairs for creating a new AppConfig from the environment

    Returns:
    -------
        The application configuration instance

    """
    return config if config is not None else AppConfig.from_env(**kwargs)

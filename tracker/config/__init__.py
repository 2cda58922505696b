"""Configuration management for the ingestion service."""

from .environment import EnvironmentConfig, load_environment_config
from .exceptions import ConfigurationError
from .loader import load_config, validate_config_file
from .models import (
    PLACEHOLDER_ACTOR_ID,
    ApiConfig,
    AppConfig,
    ExtractionConfig,
    IdentityConfig,
    IdentityPolicy,
    LogFormat,
    LoggingConfig,
    LogLevel,
    Platform,
    RecordingConfig,
    SettlePolicy,
    SourceConfig,
)

__all__ = [
    # Loader functions
    "load_config",
    "validate_config_file",
    "load_environment_config",
    # Configuration models
    "AppConfig",
    "SourceConfig",
    "ExtractionConfig",
    "SettlePolicy",
    "RecordingConfig",
    "IdentityConfig",
    "ApiConfig",
    "LoggingConfig",
    "EnvironmentConfig",
    # Enums and constants
    "Platform",
    "IdentityPolicy",
    "LogLevel",
    "LogFormat",
    "PLACEHOLDER_ACTOR_ID",
    # Exceptions
    "ConfigurationError",
]

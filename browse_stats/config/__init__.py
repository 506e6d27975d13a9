"""Configuration management module for the browse stats service."""

from .duration import DurationParseError, parse_duration
from .environment import EnvironmentConfig, load_environment_config
from .exceptions import ConfigurationError
from .loader import load_config, parse_app_config
from .models import (
    ApiConfig,
    AppConfig,
    FacetsConfig,
    LogFormat,
    LogLevel,
    LoggingConfig,
)

__all__ = [
    # Main loader functions
    "load_config",
    "parse_app_config",
    "load_environment_config",
    "parse_duration",
    # Configuration models
    "AppConfig",
    "FacetsConfig",
    "LoggingConfig",
    "ApiConfig",
    "EnvironmentConfig",
    # Enums
    "LogLevel",
    "LogFormat",
    # Exceptions
    "ConfigurationError",
    "DurationParseError",
]

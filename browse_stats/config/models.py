"""Configuration schema models using Pydantic."""

from enum import Enum
from typing import Optional

from pydantic import BaseModel, Field, field_validator, model_validator

from .duration import DurationParseError, parse_duration, validate_duration_range

MIN_QUERY_TIMEOUT_SECONDS = 1
MAX_QUERY_TIMEOUT_SECONDS = 300


class LogLevel(str, Enum):
    """Logging levels."""

    DEBUG = "DEBUG"
    INFO = "INFO"
    WARNING = "WARNING"
    ERROR = "ERROR"
    CRITICAL = "CRITICAL"


class LogFormat(str, Enum):
    """Log output formats."""

    JSON = "json"
    KEY_VALUE = "key-value"


class FacetsConfig(BaseModel):
    """Facet aggregation settings."""

    employer_limit: int = Field(
        20, ge=1, le=100, description="Number of top employers returned in the employer facet"
    )
    query_timeout: str = Field(
        "10s", description="Deadline for all listing store calls of one request"
    )

    # Computed field
    query_timeout_seconds: Optional[int] = None

    @field_validator("query_timeout", mode="before")
    @classmethod
    def validate_query_timeout(cls, v) -> str:
        """Validate and parse query timeout; a bare number means seconds."""
        if isinstance(v, int) and not isinstance(v, bool):
            v = f"{v}s"
        if not isinstance(v, str):
            raise ValueError(f"query_timeout must be a duration string, got {v!r}")
        try:
            seconds = parse_duration(v)
            validate_duration_range(
                seconds,
                min_seconds=MIN_QUERY_TIMEOUT_SECONDS,
                max_seconds=MAX_QUERY_TIMEOUT_SECONDS,
                label="Query timeout",
            )
            return v
        except DurationParseError as e:
            raise ValueError(str(e)) from e

    @model_validator(mode="after")
    def compute_timeout_seconds(self):
        """Compute query timeout in seconds."""
        self.query_timeout_seconds = parse_duration(self.query_timeout)
        return self


class LoggingConfig(BaseModel):
    """Logging configuration."""

    level: LogLevel = Field(LogLevel.INFO, description="Log level")
    format: LogFormat = Field(
        LogFormat.KEY_VALUE, description="Log output format (json or key-value)"
    )

    model_config = {"use_enum_values": True, "validate_default": True}


class ApiConfig(BaseModel):
    """HTTP API bind settings."""

    host: str = Field("127.0.0.1", min_length=1, description="Interface the API binds to")
    port: int = Field(8000, ge=1, le=65535, description="Port the API listens on")

    @field_validator("host")
    @classmethod
    def strip_host(cls, v: str) -> str:
        """Strip whitespace from host."""
        stripped = v.strip()
        if not stripped:
            raise ValueError("host cannot be empty")
        return stripped


class AppConfig(BaseModel):
    """Root configuration object for the browse stats service.

    Every section is optional; an empty or missing config file yields the
    defaults.
    """

    facets: FacetsConfig = Field(default_factory=FacetsConfig, description="Facet settings")
    logging: LoggingConfig = Field(
        default_factory=LoggingConfig, description="Logging configuration"
    )
    api: ApiConfig = Field(default_factory=ApiConfig, description="HTTP API settings")

import logging
from typing import Optional

from pydantic import AliasChoices, Field, field_validator

from .base import TracerBaseSettings

_LOG_LEVELS = ("DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL")


class TracerSettings(TracerBaseSettings):
    """Configuration consumed by the tracer factory.

    The instrumentation key is opaque to optracer: it is resolved here and
    handed unchanged to the backend sink.
    """

    instrumentation_key: Optional[str] = Field(
        default=None,
        validation_alias=AliasChoices("APPINSIGHTS_INSTRUMENTATIONKEY", "TRACER_INSTRUMENTATION_KEY"),
        description="Backend instrumentation identifier handed to the backend sink"
    )
    service_name: str = Field(
        default="optracer",
        description="Service name used for the OpenTelemetry tracer and meter"
    )
    session_id: Optional[str] = Field(
        default=None,
        description="Session identifier attached by the backend sink. A random one is generated when unset."
    )
    flush_timeout_seconds: float = Field(
        default=5.0,
        gt=0,
        le=120.0,
        description="Maximum time flush() waits for a sink's flush-completion signal"
    )
    flush_grace_period_seconds: float = Field(
        default=1.0,
        ge=0,
        le=30.0,
        description=(
            "Fixed pause applied after flushing sinks that deliver asynchronously "
            "but expose no flush-completion signal"
        )
    )
    console_sink_enabled: bool = Field(
        default=False,
        description="Add a ConsoleSink to tracers built by the factory"
    )
    log_level: str = Field(
        default="INFO",
        description="Log level used by setup_logging()"
    )

    @field_validator("log_level")
    @classmethod
    def validate_log_level(cls, v: str) -> str:
        level = v.strip().upper()
        if level not in _LOG_LEVELS:
            raise ValueError(f"Invalid log level '{v}'. Expected one of {', '.join(_LOG_LEVELS)}")
        return level

    @property
    def is_configured(self) -> bool:
        """True when an instrumentation key was resolved."""
        return bool(self.instrumentation_key)

    def model_post_init(self, __context) -> None:
        super().model_post_init(__context)
        if not self.is_configured:
            logging.getLogger(__name__).debug("No instrumentation key configured")


# Singleton instance
_settings: Optional[TracerSettings] = None


def get_settings(force_reload: bool = False) -> TracerSettings:
    """Get the singleton settings instance.

    Settings are loaded from the environment on first access and cached.

    Args:
        force_reload: If True, creates a new instance even if one exists.
            Useful for testing or when environment variables have changed.

    Returns:
        The singleton TracerSettings instance

    Note:
        This function is thread-safe for reading but not for the initial
        creation. Load settings at startup before threading begins.
    """
    global _settings

    if _settings is None or force_reload:
        _settings = TracerSettings()

    return _settings


def _reload_settings() -> TracerSettings:
    """Force reload of settings (testing helper)."""
    global _settings
    _settings = None
    return get_settings(force_reload=True)

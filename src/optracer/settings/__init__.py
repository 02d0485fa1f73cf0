"""Settings for optracer, built on Pydantic Settings.

Configuration Sources (precedence order):
    1. Environment Variables (highest priority)
    2. ``.env`` file
    3. Default Values in code (lowest priority)

Environment Variable Naming:
    - Format: TRACER_SETTING_NAME (UPPER_SNAKE_CASE)
    - The instrumentation key is also read from APPINSIGHTS_INSTRUMENTATIONKEY

Quick Start:
    >>> from optracer.settings import get_settings
    >>> settings = get_settings()
    >>> settings.flush_timeout_seconds
    5.0
"""

from .base import TracerBaseSettings
from .main import TracerSettings, get_settings, _reload_settings

__all__ = [
    "TracerBaseSettings",
    "TracerSettings",
    "get_settings",
]

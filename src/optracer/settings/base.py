from typing import Any

from pydantic_settings import BaseSettings, SettingsConfigDict


class TracerBaseSettings(BaseSettings):
    """Base class for optracer settings.

    Values are read from environment variables (prefixed ``TRACER_``) and an
    optional ``.env`` file, falling back to the defaults declared in code.
    """
    model_config = SettingsConfigDict(
        env_prefix="TRACER_",
        env_file=".env",
        env_file_encoding="utf-8",
        case_sensitive=False,
        extra="ignore",
        populate_by_name=True,
        env_nested_delimiter="__"
    )

    def model_post_init(self, __context: Any) -> None:
        """Post initialization hook for additional setup.

        Subclasses should override this method and call super().
        """
        super().model_post_init(__context)

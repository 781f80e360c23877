"""Library configuration using Pydantic Settings.

Values can be provided via environment variables or fall back to the
defaults below. No dotenv file is read. A ``Settings`` instance is intended to be retrieved via
``get_settings`` which caches the object for reuse across the process.

Environment variable prefix: ``SCOPEWIRE_`` (e.g. ``SCOPEWIRE_MAX_LISTENERS``).
"""

from functools import lru_cache
from typing import Literal

from pydantic import Field, field_validator
from pydantic_settings import BaseSettings, SettingsConfigDict

from .constants import DEFAULT_DELIMITER, DEFAULT_MAX_LISTENERS


class Settings(BaseSettings):
    """Runtime library settings.

    Attributes map directly to environment variables using the ``SCOPEWIRE_``
    prefix (case-insensitive). For example, ``use_setter`` <- ``SCOPEWIRE_USE_SETTER``.
    """

    log_level: Literal["TRACE", "DEBUG", "INFO", "WARNING", "ERROR"] = Field(
        default="INFO",
        description="Log level used by setup_logging",
    )

    # Registry options seeded into every root node
    use_getter: bool = Field(
        default=True,
        description="Expose registered names as readable attributes",
    )  # fmt: skip
    use_setter: bool = Field(
        default=False,
        description="Allow registered names to be assigned as attributes",
    )  # fmt: skip

    # Event bus defaults
    max_listeners: int = Field(
        default=DEFAULT_MAX_LISTENERS,
        ge=0,
        description="Listener count per event above which a warning is logged (0 disables)",
    )
    delimiter: str = Field(
        default=DEFAULT_DELIMITER,
        min_length=1,
        description="Separator of namespaced event names",
    )
    wildcard: bool = Field(
        default=False,
        description="Enable '*' and '**' matching on event names",
    )  # fmt: skip

    @field_validator("log_level", mode="before")
    @classmethod
    def validate_log_level(cls, v: str | None) -> str:
        """Normalize and validate log level."""
        if v is None:
            return "INFO"

        v_upper = str(v).upper()

        allowed = {"TRACE", "DEBUG", "INFO", "WARNING", "ERROR"}
        if v_upper not in allowed:
            raise ValueError(f"Invalid log level: {v}. Must be one of: {', '.join(sorted(allowed))}")

        return v_upper

    model_config = SettingsConfigDict(
        env_prefix="SCOPEWIRE_",
        case_sensitive=False,
        extra="ignore",
    )


@lru_cache
def get_settings() -> Settings:
    """Return the cached ``Settings`` instance.

    The first invocation reads environment variables; subsequent
    calls reuse the same object to ensure consistent config.
    """

    return Settings()


__all__ = ["Settings", "get_settings"]

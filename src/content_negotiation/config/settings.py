"""Configuration settings for content negotiation.

Settings decide which wire formats are enabled and which one is used
when a request carries no ``Accept``/``Content-Type`` header or asks for
``*/*``. They are read once at startup from environment variables and
``.env`` files and are never mutated afterwards.
"""

from functools import lru_cache
from typing import Annotated, List, Literal

from pydantic import Field, field_validator
from pydantic_settings import BaseSettings, NoDecode, SettingsConfigDict


class NegotiationSettings(BaseSettings):
    """Application settings loaded from environment variables.

    :param formats: Media types to register, in priority order
    :type formats: List[str]
    :param default_media_type: Fallback media type for absent headers and ``*/*``
    :type default_media_type: str
    :param log_level: Logging level for the application
    :type log_level: Literal["DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL"]
    """

    model_config = SettingsConfigDict(
        env_prefix="CONTENT_NEGOTIATION_",
        env_file=".env",
        env_file_encoding="utf-8",
        case_sensitive=False,
        extra="ignore",
    )

    formats: Annotated[List[str], NoDecode] = Field(
        default_factory=lambda: ["application/json", "application/cbor"],
        description="Enabled media types",
    )
    default_media_type: str = Field(
        "application/json", description="Fallback media type"
    )

    log_level: Literal["DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL"] = Field(
        "INFO", description="Logging level"
    )

    @field_validator("formats", mode="before")
    @classmethod
    def split_formats(cls, v):
        """Accept a comma-separated string as well as a list.

        :param v: Raw value from the environment or constructor
        :type v: Any
        :return: List of trimmed, lower-cased media types
        :rtype: List[str]
        """
        if isinstance(v, str):
            v = v.split(",")
        return [item.strip().lower() for item in v if item and item.strip()]

    @field_validator("default_media_type")
    @classmethod
    def normalize_default(cls, v: str) -> str:
        """Normalize the default media type token."""
        return v.strip().lower()


@lru_cache(maxsize=1)
def get_settings() -> NegotiationSettings:
    """Return the process-wide settings instance.

    :return: Settings loaded from the environment
    :rtype: NegotiationSettings
    """
    return NegotiationSettings()

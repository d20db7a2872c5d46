"""
Engine configuration.

All parameters can be overridden through environment variables with the
CASEREASON_ prefix, or through a local .env file.

Example:
    CASEREASON_LOG_LEVEL=DEBUG
    CASEREASON_MIN_TEXT_CHARS=1200
"""

from __future__ import annotations

from pydantic import Field
from pydantic_settings import BaseSettings, SettingsConfigDict


class EngineSettings(BaseSettings):
    """
    Thresholds and ambient settings for the calling layer.

    Engine functions never read this object themselves; the pipeline,
    CLI and API pass the values down as explicit arguments.
    """

    model_config = SettingsConfigDict(
        env_prefix="CASEREASON_",
        env_file=".env",
        env_file_encoding="utf-8",
        extra="ignore",
    )

    # -------------------------------------------------------------------------
    # Logging
    # -------------------------------------------------------------------------

    log_level: str = Field(
        default="WARNING",
        description="Console log level used by the CLI and API",
    )

    # -------------------------------------------------------------------------
    # Readiness and parsing thresholds
    # -------------------------------------------------------------------------

    min_text_chars: int = Field(
        default=800,
        description="Minimum extracted characters before strategy may be committed",
    )
    min_review_chars: int = Field(
        default=500,
        description="Minimum characters for a case review document to be parsed",
    )
    max_outstanding_items: int = Field(
        default=20,
        description="Maximum bullets kept per outstanding-material list",
    )
    max_evidence_rows: int = Field(
        default=50,
        description="Maximum evidence-map rows kept from a case review",
    )
    scanned_chars_per_doc: int = Field(
        default=50,
        description="Text characters per document below which JSON-only sets look scanned",
    )

    # -------------------------------------------------------------------------
    # HTTP API
    # -------------------------------------------------------------------------

    api_title: str = Field(
        default="Case Reasoning Engine",
        description="Title reported by the HTTP API",
    )


def get_settings() -> EngineSettings:
    """Return a fresh settings instance (environment is re-read every call)."""
    return EngineSettings()

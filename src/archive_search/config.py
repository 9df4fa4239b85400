"""Centralized configuration for archive-search using Pydantic Settings."""

from pathlib import Path

from pydantic import Field
from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    """Strictly typed configuration loaded from environment variables.

    All environment variables are validated at startup with proper types.
    """

    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        case_sensitive=False,
        validate_default=True,
        extra="ignore",  # Ignore extra env vars not defined in model
    )

    # Index sources
    archive_listing_path: Path | None = Field(
        default=None,
        description="Newline-delimited JSON archive listing used to (re)build the index",
    )
    snapshot_path: Path = Field(
        default=Path("index.snapshot"),
        description="Binary index snapshot restored at startup and rewritten after every rebuild",
    )
    record_limit: int | None = Field(
        default=None,
        ge=0,
        description="Stop ingesting after this many archive records (unset means no limit)",
    )
    force_rebuild: bool = Field(
        default=False,
        description="Ignore an existing snapshot and rebuild from the archive listing",
    )

    # Startup probe
    warmup_terms: str = Field(
        default="lombok,AUTHORS,README.md",
        description="Comma-separated terms queried once after the index is loaded",
    )

    # Logging
    log_level: str = Field(default="info", description="Logging level")
    log_json: bool = Field(default=True, description="Emit structured JSON logs")

    # Observability
    metrics_textfile: Path | None = Field(
        default=None,
        description="Write Prometheus metrics here after startup (node_exporter textfile collector format)",
    )

    def get_warmup_terms(self) -> list[str]:
        """Get list of warm-up query terms (comma-separated)."""
        if not self.warmup_terms:
            return []
        return [term.strip() for term in self.warmup_terms.split(",") if term.strip()]

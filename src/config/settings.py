# src/config/settings.py — v1
"""Typed configuration loaded from .env via pydantic-settings.

Single source of truth for the tabular format tokens (delimiter, file
prefixes, reserved column names), export defaults, logging and the graph
store connection.
"""

from __future__ import annotations

from pathlib import Path
from typing import Literal

from pydantic import field_validator, model_validator
from pydantic_settings import BaseSettings, SettingsConfigDict


class ConfigurationError(Exception):
    """Raised when configuration is internally inconsistent."""


class Settings(BaseSettings):
    """Application settings loaded from .env file."""

    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        extra="ignore",
    )

    # === Tabular format ===
    csv_delimiter: str = ";"
    csv_extension: str = ".csv"
    index_column: str = "id"
    source_column: str = "source"
    destination_column: str = "destination"
    node_file_prefix: str = "node_"
    relationship_file_prefix: str = "relationship_"
    archive_extension: str = ".zip"

    # === Export defaults ===
    default_archive_name: str = "export"
    save_relationships: bool = True
    consider_neighbors: bool = False
    trim_values: bool = False

    # === Logging ===
    log_level: Literal["DEBUG", "INFO", "WARNING", "ERROR"] = "INFO"
    log_format: Literal["json", "text"] = "text"
    log_file: Path | None = None
    log_rotation: str = "10MB"
    log_retention: int = 5

    # === Graph database ===
    graph_db_type: Literal["memory", "neo4j"] = "neo4j"
    graph_db_uri: str = "bolt://localhost:7687"
    graph_db_database: str = "neo4j"
    graph_db_user: str = ""
    graph_db_password: str = ""

    # --- Validators ---

    @field_validator("csv_delimiter")
    @classmethod
    def validate_delimiter(cls, v: str) -> str:
        """The delimiter is a single character that cannot start a quoted field."""
        if len(v) != 1:
            raise ConfigurationError(
                f"csv_delimiter must be exactly one character, got {v!r}"
            )
        if v in ('"', "\r", "\n"):
            raise ConfigurationError(f"csv_delimiter cannot be {v!r}")
        return v

    @model_validator(mode="after")
    def validate_config_consistency(self) -> Settings:
        """Validate that file tokens and reserved columns cannot be confused."""
        errors: list[str] = []

        for name in ("csv_extension", "node_file_prefix", "relationship_file_prefix"):
            if not getattr(self, name):
                errors.append(f"{name.upper()} must not be empty")

        if self.node_file_prefix == self.relationship_file_prefix:
            errors.append("NODE_FILE_PREFIX and RELATIONSHIP_FILE_PREFIX must differ")

        reserved = self.reserved_columns
        if any(not col for col in reserved):
            errors.append("Reserved column names must not be empty")
        elif len(set(reserved)) != len(reserved):
            errors.append(
                "INDEX_COLUMN, SOURCE_COLUMN and DESTINATION_COLUMN must be distinct"
            )

        if errors:
            raise ConfigurationError("; ".join(errors))

        return self

    # --- Helpers ---

    @property
    def reserved_columns(self) -> tuple[str, str, str]:
        """Column names that never carry a property."""
        return (self.index_column, self.source_column, self.destination_column)

    def archive_filename(self, name: str) -> str:
        """Append the archive extension to *name* unless it is already there."""
        if name.endswith(self.archive_extension):
            return name
        return f"{name}{self.archive_extension}"


def load_settings(**overrides: object) -> Settings:
    """Load settings from .env with optional overrides.

    Args:
        **overrides: Field-level overrides (for testing or per-run config).

    Returns:
        Validated Settings instance.

    Raises:
        ConfigurationError: If configuration is internally inconsistent.
    """
    return Settings(**overrides)  # type: ignore[arg-type]

"""Shared settings loaded from environment / .env file."""

from __future__ import annotations

from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    """Configuration for the stringfrom generator.

    Values are read from environment variables and from a ``.env`` file
    in the working directory.
    """

    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        env_prefix="STRINGFROM_",
        extra="ignore",
    )

    log_level: str = "INFO"

    # Field types accepted as plain text by stringfrom(SomeType) variants
    text_types: list[str] = ["str", "builtins.str"]

    emit_docstrings: bool = True

    # Declarations are independent; >1 generates them on a thread pool
    max_workers: int = 1

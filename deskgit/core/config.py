"""Unified configuration via pydantic-settings."""

import logging
from pathlib import Path
from typing import Annotated

from pydantic import field_validator
from pydantic_settings import BaseSettings, NoDecode, SettingsConfigDict

_DEFAULT_CONTEXT_PREFIXES = ["remote: Counting objects"]


class DeskgitConfig(BaseSettings):
    model_config = SettingsConfigDict(
        env_prefix="DESKGIT_",
        env_file=".env",
        env_file_encoding="utf-8",
    )

    # Reconciliation
    clear_partial_selection_on_refresh: bool = False

    # Progress
    track_lfs_progress: bool = True
    progress_context_prefixes: Annotated[list[str], NoDecode] = list(
        _DEFAULT_CONTEXT_PREFIXES
    )

    # Logging
    log_level: str = "INFO"
    log_dir: Path | None = None
    log_max_bytes: int = 10_485_760
    log_backup_count: int = 5

    @field_validator("log_level")
    @classmethod
    def validate_log_level(cls, v: str) -> str:
        level = v.strip().upper()
        if level not in logging.getLevelNamesMapping():
            raise ValueError(f"unknown log level: {v}")
        return level

    @field_validator("progress_context_prefixes", mode="before")
    @classmethod
    def parse_progress_context_prefixes(cls, v: list[str] | str) -> list[str]:
        if isinstance(v, str):
            return [p.strip() for p in v.split(",") if p.strip()]
        return v

    @field_validator("log_dir")
    @classmethod
    def expand_log_dir(cls, v: Path | None) -> Path | None:
        if v is None:
            return None
        return v.expanduser()

# stockrecon/config.py

from typing import Literal

from pydantic_settings import BaseSettings, SettingsConfigDict
from functools import lru_cache


class Settings(BaseSettings):
    """Application settings loaded from environment variables."""

    model_config = SettingsConfigDict(
        env_prefix="RECON_",
        env_file=".env",
        env_file_encoding="utf-8",
        extra="ignore",
    )

    # App
    app_name: str = "Stock Reconciliation API"
    app_env: str = "development"
    debug: bool = True
    log_level: str = "INFO"

    # Deduplication
    dedup_keep: Literal["first", "last"] = "first"

    # Classification
    # When both sides exist but no designated field could be compared, the
    # record is Indeterminate unless this is switched on.
    uncomparable_as_match: bool = False

    # Output
    sort_output: bool = True
    left_label: str = "Left"
    right_label: str = "Right"
    # Null tokens for typed columns. Text columns (key codes such as "NA")
    # only treat text_null_values as missing.
    null_values: list[str] = ["", "NULL", "null", "None", "N/A", "NA"]
    text_null_values: list[str] = [""]

    # Execution
    max_workers: int = 1
    max_diagnostics_logged: int = 20


@lru_cache()
def get_settings() -> Settings:
    """Cached settings instance."""
    return Settings()

"""Configuration models."""

from pathlib import Path
from typing import Optional

from pydantic import Field
from pydantic_settings import BaseSettings, SettingsConfigDict


class DetectorSettings(BaseSettings):
    """Weights and thresholds for orphan detection.

    Settings can be loaded from environment variables or .env file.
    All settings are prefixed with BEADLINK_ (e.g., BEADLINK_TIMING_WEIGHT).
    """

    model_config = SettingsConfigDict(
        env_prefix="BEADLINK_",
        env_file=".env",
        env_file_encoding="utf-8",
        extra="ignore",
    )

    timing_weight: int = Field(30, description="Weight when a commit falls inside an issue's active window")
    files_weight_per_file: int = Field(15, description="Weight per file shared with the issue's history")
    files_weight_cap: int = Field(40, description="Maximum weight of the files signal")
    message_weight: int = Field(25, description="Weight when the message mentions the issue")
    author_weight: int = Field(20, description="Weight when the author has worked on the issue before")
    corroboration_bonus: int = Field(
        5, description="Suspicion bonus per extra signal kind seen on other issues"
    )
    min_suspicion: int = Field(40, description="Minimum suspicion score for a commit to be reported")
    max_probable_beads: int = Field(5, description="Probable issues kept per candidate")
    min_keyword_length: int = Field(4, description="Shortest title word used for message matching")


class Settings(BaseSettings):
    """Application settings loaded from environment variables."""

    model_config = SettingsConfigDict(
        env_prefix="BEADLINK_",
        env_file=".env",
        env_file_encoding="utf-8",
        case_sensitive=False,
        extra="ignore",
    )

    # Beads tooling
    bd_path: Optional[Path] = None
    bv_path: Optional[Path] = None
    command_timeout: int = 30

    # Logging
    log_level: str = "INFO"

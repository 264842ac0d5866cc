"""
Pydantic configuration schema for Stepwise.

Application settings shared by the CLI: where progress is stored, how
submissions are sent and how much is logged.
"""

from typing import Literal

from pydantic import BaseModel, ConfigDict, Field

from stepwise.storage.stores import StorageType

# =============================================================================
# Storage Configuration
# =============================================================================


class StorageConfig(BaseModel):
    """Where wizard progress and form drafts are kept."""

    model_config = ConfigDict(extra="forbid")

    state_dir: str | None = None  # Defaults to ~/.stepwise/state
    default_type: StorageType = StorageType.LOCAL


# =============================================================================
# Submit Configuration
# =============================================================================


class SubmitConfig(BaseModel):
    """HTTP submission settings."""

    model_config = ConfigDict(extra="forbid")

    base_url: str | None = None
    timeout_seconds: float = Field(default=30.0, gt=0)
    headers: dict[str, str] = Field(default_factory=dict)


# =============================================================================
# Logging Configuration
# =============================================================================


class LoggingConfig(BaseModel):
    """Log output settings."""

    model_config = ConfigDict(extra="forbid")

    level: Literal["DEBUG", "INFO", "WARNING", "ERROR"] = "WARNING"


# =============================================================================
# Root Configuration
# =============================================================================


class Config(BaseModel):
    """Root Stepwise configuration."""

    model_config = ConfigDict(extra="forbid")

    storage: StorageConfig = Field(default_factory=StorageConfig)
    submit: SubmitConfig = Field(default_factory=SubmitConfig)
    logging: LoggingConfig = Field(default_factory=LoggingConfig)

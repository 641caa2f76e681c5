"""
Configuration models for the archive relay.
"""

import re
from pathlib import Path
from typing import Optional

from pydantic import BaseModel, Field, field_validator, model_validator

DEFAULT_MAX_ENTRIES = 10_000
DEFAULT_MAX_ENTRY_SIZE = 10 * 1024 * 1024
DEFAULT_MAX_TOTAL_SIZE = 200 * 1024 * 1024


class SourceConfig(BaseModel):
    """Watched directory and archive routing locations."""

    source_dir: Path = Field(description="Directory the producer deposits archives into")
    archive_dir: Path = Field(description="Destination for successfully processed archives")
    failed_dir: Path = Field(description="Destination for archives that failed processing")
    min_file_age_ms: int = Field(
        default=30_000,
        ge=0,
        description="Minimum age before an archive is considered complete (0 disables)",
    )
    delete_on_success: bool = Field(
        default=False, description="Delete successful archives instead of archiving them"
    )
    max_files_per_invocation: int = Field(
        default=1000, gt=0, description="Maximum archives considered per invocation"
    )


class DestinationConfig(BaseModel):
    """Destination object store settings."""

    bucket: str = Field(min_length=3, max_length=63, description="Destination bucket")
    prefix_base: str = Field(default="", description="Key prefix shared by all batches")
    endpoint_url: Optional[str] = Field(
        default=None, description="Custom S3-compatible endpoint (path-style addressing)"
    )
    region: Optional[str] = Field(default=None, min_length=1)
    max_attempts: int = Field(
        default=3, ge=1, le=10, description="Client-level retry attempts per request"
    )
    content_type: str = Field(default="application/xml")

    @field_validator("endpoint_url")
    @classmethod
    def validate_endpoint_url(cls, v: Optional[str]) -> Optional[str]:
        if v is not None and not v.startswith(("http://", "https://")):
            raise ValueError("endpoint_url must be an http(s) URL")
        return v


class ProcessingConfig(BaseModel):
    """Batching, classification and extraction limits."""

    batch_size: int = Field(default=100, gt=0, le=1000)
    upload_concurrency: int = Field(default=10, ge=1, le=64)
    timeout_buffer_ms: int = Field(default=60_000, ge=5000)
    filename_pattern: Optional[str] = Field(
        default=None, description="Regex whose first capture group names the output file"
    )
    filter_pattern: Optional[str] = Field(
        default=None, description="Regex; entries whose content matches are skipped"
    )
    max_entries: int = Field(default=DEFAULT_MAX_ENTRIES, gt=0)
    max_entry_size: int = Field(default=DEFAULT_MAX_ENTRY_SIZE, gt=0)
    max_total_size: int = Field(default=DEFAULT_MAX_TOTAL_SIZE, gt=0)
    upload_retry_attempts: int = Field(default=2, ge=1, le=10)
    retry_wait_seconds: float = Field(default=1.0, ge=0.0)

    @field_validator("filename_pattern", "filter_pattern")
    @classmethod
    def validate_pattern(cls, v: Optional[str]) -> Optional[str]:
        if v is None or v == "":
            return None
        try:
            re.compile(v)
        except re.error as e:
            raise ValueError(f"Invalid regex: {e}") from e
        return v

    @model_validator(mode="after")
    def validate_size_limits(self) -> "ProcessingConfig":
        if self.max_entry_size > self.max_total_size:
            raise ValueError("max_entry_size cannot exceed max_total_size")
        return self


class LoggingConfig(BaseModel):
    """Logging configuration."""

    level: str = Field(default="INFO")
    format: str = Field(default="%(asctime)s - %(name)s - %(levelname)s - %(message)s")
    file_path: Optional[str] = Field(default=None)

    @field_validator("level")
    @classmethod
    def validate_level(cls, v: str) -> str:
        level = v.upper()
        if level not in ("DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL"):
            raise ValueError(f"Invalid logging level: {v}")
        return level


class RelayConfig(BaseModel):
    """Complete archive relay configuration."""

    source: SourceConfig
    destination: DestinationConfig
    processing: ProcessingConfig = Field(default_factory=ProcessingConfig)
    logging: LoggingConfig = Field(default_factory=LoggingConfig)
    config_version: str = Field(default="1.0")

"""
Configuration data models for pathfinder.

This module defines the settings that may be tuned per user: where diagnostic
logs go and how many threads the directory walker uses. Depth bounds, the
skip-list and the result cap are fixed and deliberately absent here.
"""

import logging
import os
from pathlib import Path
from typing import Any, Dict, Optional
from pydantic import BaseModel, Field, field_validator


DEFAULT_WALKER_THREADS = 4
DEFAULT_LOG_FORMAT = "%(asctime)s %(levelname)s [%(name)s] %(message)s"


class LoggingConfig(BaseModel):
    """
    Configuration for diagnostic logging.

    Stdout carries the response, so logs only ever go to a file.

    Attributes:
        level: Logging level name (DEBUG, INFO, WARNING, ERROR, CRITICAL)
        file: Optional log file path; logging is disabled when unset
        format: Log record format string
    """

    level: str = Field("WARNING", description="Logging level name")
    file: Optional[str] = Field(None, description="Log file path")
    format: str = Field(DEFAULT_LOG_FORMAT, description="Log record format")

    @field_validator('level')
    @classmethod
    def validate_level(cls, v: str) -> str:
        """Normalize and validate the level name."""
        level = v.strip().upper()
        if not isinstance(logging.getLevelName(level), int):
            raise ValueError(f"Invalid logging level: {v}")
        return level

    @field_validator('file')
    @classmethod
    def validate_file(cls, v: Optional[str]) -> Optional[str]:
        """Expand the user directory in the log file path."""
        if v is None or not v.strip():
            return None
        return str(Path(v.strip()).expanduser())

    def get_level(self) -> int:
        """Get the numeric logging level."""
        return logging.getLevelName(self.level)


class WalkerConfig(BaseModel):
    """
    Configuration for the directory walker.

    Attributes:
        threads: Worker thread count; defaults to the detected CPU count
    """

    threads: Optional[int] = Field(None, gt=0, description="Worker thread count")

    def get_threads(self) -> int:
        """Get the effective worker count, falling back to hardware parallelism."""
        if self.threads is not None:
            return self.threads
        return os.cpu_count() or DEFAULT_WALKER_THREADS


class PathfinderConfig(BaseModel):
    """
    Main configuration class for pathfinder.

    Attributes:
        logging: Diagnostic logging configuration
        walker: Directory walker tuning
    """

    logging: LoggingConfig = Field(default_factory=LoggingConfig, description="Logging configuration")
    walker: WalkerConfig = Field(default_factory=WalkerConfig, description="Walker configuration")

    def to_dict(self) -> Dict[str, Any]:
        """Convert to dictionary representation."""
        return self.model_dump()

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> 'PathfinderConfig':
        """Create a configuration from a dictionary."""
        return cls.model_validate(data)

    def __str__(self) -> str:
        """String representation of the configuration."""
        log_target = self.logging.file or "disabled"
        return f"Logging: {self.logging.level} -> {log_target} | Walker threads: {self.walker.get_threads()}"

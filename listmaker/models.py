"""
listmaker - Pydantic Models

Configuration and performance reporting models for the fluent sequence library.
"""

import logging
import os
from typing import Optional
from pydantic import BaseModel, Field, field_validator


DEFAULT_LOG_FORMAT = '%(asctime)s - %(name)s - %(levelname)s - [%(funcName)s:%(lineno)d] - %(message)s'

ENV_PREFIX = "LISTMAKER_"

_TRUE_VALUES = {"1", "true", "yes", "on"}


class FluentSettings(BaseModel):
    """Library-wide settings"""
    log_level: str = Field(
        "INFO",
        description="Level used by setup_logging()"
    )
    log_format: str = Field(
        DEFAULT_LOG_FORMAT,
        description="Format string used by setup_logging()"
    )
    strict_single_pass: bool = Field(
        False,
        description="Raise instead of warning when a single-pass source is iterated twice"
    )

    @field_validator('log_level')
    @classmethod
    def validate_log_level(cls, v):
        """Validate log level is a known logging level name"""
        level = v.strip().upper()
        if not isinstance(logging.getLevelName(level), int):
            raise ValueError(f"Unknown log level: {v}")
        return level

    @classmethod
    def from_env(cls, environ=None) -> "FluentSettings":
        """Build settings from LISTMAKER_* environment variables"""
        environ = os.environ if environ is None else environ
        values = {}

        level = environ.get(f"{ENV_PREFIX}LOG_LEVEL")
        if level:
            values["log_level"] = level

        log_format = environ.get(f"{ENV_PREFIX}LOG_FORMAT")
        if log_format:
            values["log_format"] = log_format

        strict = environ.get(f"{ENV_PREFIX}STRICT_SINGLE_PASS")
        if strict is not None:
            values["strict_single_pass"] = strict.strip().lower() in _TRUE_VALUES

        return cls(**values)


class PerformanceInfo(BaseModel):
    """Timing and memory figures for one measured operation"""
    operation: str = Field(..., description="Name of the measured operation")
    execution_time_ms: float = Field(..., ge=0, description="Wall clock time in milliseconds")
    memory_usage_mb: float = Field(..., ge=0, description="Peak traced memory in megabytes")
    success: bool = Field(..., description="Whether the operation completed")
    result_size: Optional[int] = Field(None, description="len() of the result when it has one")
    error: Optional[str] = Field(None, description="Error message for failed operations")
    timestamp: float = Field(..., description="Unix time when the measurement finished")


class PerformanceSummary(BaseModel):
    """Aggregate of all recorded measurements"""
    total_operations: int = 0
    total_time_ms: float = 0.0
    total_memory_mb: float = 0.0
    avg_time_ms: float = 0.0
    avg_memory_mb: float = 0.0

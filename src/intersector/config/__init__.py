"""Configuration management for intersector.

This module provides configuration management using Pydantic models.
Tolerances are passed explicitly to the engine, never read from globals.

Key classes:
- ToleranceConfig: Numerical tolerances shared by every engine layer
- BatchConfig: Batch processing settings
- LoggingConfig: Logging settings
- IntersectorSettings: Main application settings
"""

from intersector.config.settings import (
    ACCURACY,
    DEFAULT_TOLERANCES,
    EPSILON,
    MAX_DEPTH,
    SQUARED_SNAP_DISTANCE,
    TOLERANCE,
    BatchConfig,
    IntersectorSettings,
    LoggingConfig,
    ToleranceConfig,
    get_default_settings,
)

__all__ = [
    "ACCURACY",
    "DEFAULT_TOLERANCES",
    "EPSILON",
    "MAX_DEPTH",
    "SQUARED_SNAP_DISTANCE",
    "TOLERANCE",
    "BatchConfig",
    "IntersectorSettings",
    "LoggingConfig",
    "ToleranceConfig",
    "get_default_settings",
]

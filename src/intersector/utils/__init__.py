"""Utility functions for intersector.

This module provides utility functions including:

- Logging setup and configuration
- Batch statistics tracking
"""

from intersector.utils.logging import (
    BatchLogger,
    BatchStats,
    configure_logging,
)

__all__ = [
    "BatchLogger",
    "BatchStats",
    "configure_logging",
]

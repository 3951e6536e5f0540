"""
Core Utilities Package

This package contains utility functions and helpers used throughout the connector.

Modules:
    - time: Timestamp conversion and normalization utilities
    - safe: Optional-field readers for loosely typed exchange payloads
"""

from core.utils.time import to_utc_datetime, seconds_to_milliseconds, current_utc_timestamp
from core.utils.safe import safe_float, safe_string

__all__ = [
    "to_utc_datetime",
    "seconds_to_milliseconds",
    "current_utc_timestamp",
    "safe_float",
    "safe_string",
]

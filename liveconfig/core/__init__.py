"""
liveconfig core module

This module contains the error hierarchy, synchronization primitives and
logging helpers shared by the configuration manager.
"""

from .error_handling import (
    ErrorSeverity,
    ErrorContext,
    LiveConfigError,
    ConfigurationError,
    ConfigNotInitializedError,
    ConfigFileNotFoundError,
    ConfigParseError,
    ConfigTypeMismatchError,
    ConfigIOError,
    severity_to_log_level
)
from .locking import ReadWriteLock

__all__ = [
    'ErrorSeverity',
    'ErrorContext',
    'LiveConfigError',
    'ConfigurationError',
    'ConfigNotInitializedError',
    'ConfigFileNotFoundError',
    'ConfigParseError',
    'ConfigTypeMismatchError',
    'ConfigIOError',
    'severity_to_log_level',
    'ReadWriteLock'
]

"""
liveconfig - thread-safe, hot-reloadable typed configuration.

A ConfigManager holds a dataclass configuration loaded from a YAML/JSON
file, hands out deep-copied snapshots and reloads the value when the file
changes on disk.
"""

from .config import (
    ChangeContext,
    ChangeOperation,
    Cloneable,
    ConfigChangeEvent,
    ConfigManager,
    ConfigOption,
    ConfigSource,
    HookContext,
    HookPattern,
    HookRegistry,
    LoggingConfig,
    compare_structures,
    deep_copy,
    diff_config,
)
from .core import (
    ConfigFileNotFoundError,
    ConfigIOError,
    ConfigNotInitializedError,
    ConfigParseError,
    ConfigTypeMismatchError,
    ConfigurationError,
    LiveConfigError,
)
from .core.logging_manager import attach_logging_hooks, setup_logging

__version__ = "0.1.0"

__all__ = [
    'ChangeContext',
    'ChangeOperation',
    'Cloneable',
    'ConfigChangeEvent',
    'ConfigManager',
    'ConfigOption',
    'ConfigSource',
    'HookContext',
    'HookPattern',
    'HookRegistry',
    'LoggingConfig',
    'compare_structures',
    'deep_copy',
    'diff_config',
    'ConfigFileNotFoundError',
    'ConfigIOError',
    'ConfigNotInitializedError',
    'ConfigParseError',
    'ConfigTypeMismatchError',
    'ConfigurationError',
    'LiveConfigError',
    'attach_logging_hooks',
    'setup_logging',
]

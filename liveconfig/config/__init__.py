"""
liveconfig configuration management

This module provides the live configuration manager with typed loading,
debounced hot-reload, structural validation and severity hooks.
"""

from .config_models import (
    ChangeOperation,
    ConfigChangeEvent,
    ConfigOption,
    LoggingConfig,
    LogLevel,
    LogFormat,
)
from .hooks import HookContext, HookPattern, HookRegistry
from .validation import ChangeRecord, compare_structures, diff_config
from .cloning import Cloneable, deep_copy
from .config_source import ConfigSource
from .config_manager import ChangeContext, ConfigFileWatcher, ConfigManager, DebounceGate

__all__ = [
    'ChangeOperation',
    'ConfigChangeEvent',
    'ConfigOption',
    'LoggingConfig',
    'LogLevel',
    'LogFormat',
    'HookContext',
    'HookPattern',
    'HookRegistry',
    'ChangeRecord',
    'compare_structures',
    'diff_config',
    'Cloneable',
    'deep_copy',
    'ConfigSource',
    'ChangeContext',
    'ConfigFileWatcher',
    'ConfigManager',
    'DebounceGate',
]

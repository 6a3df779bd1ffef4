"""
Configuration data models for liveconfig.

This module defines the option descriptor that locates a configuration
file, the change-event types consumed by the reload pipeline, and the
logging configuration used by the logging helpers.
"""

import os
from dataclasses import dataclass, field, fields
from enum import Enum
from pathlib import Path
from typing import Any, Callable, List, Mapping, Optional, Union
import logging

logger = logging.getLogger(__name__)


# Option defaults
DEFAULT_FILENAME = "config.yaml"
DEFAULT_PATH = "./configs"
DEFAULT_FILE_TYPE = "yaml"
DEFAULT_ENV = ""
DEFAULT_DEBOUNCE = 0.8  # seconds
DEFAULT_ENV_PREFIX = ""

SUPPORTED_FORMATS = ("yaml", "yml", "json")

EnvKeyReplacer = Union[Mapping[str, str], Callable[[str], str]]


class ChangeOperation(Enum):
    """Kind of filesystem change reported for the watched file."""
    WRITE = "write"
    CREATE = "create"
    RENAME = "rename"
    REMOVE = "remove"
    CHMOD = "chmod"


@dataclass(frozen=True)
class ConfigChangeEvent:
    """A single change notification for the watched configuration file."""
    path: str
    operation: ChangeOperation


@dataclass
class ConfigOption:
    """
    Location and behaviour settings for a ConfigManager.

    Every field starts unset (``None``). ``set`` only fills a field that is
    still unset unless ``override=True`` is passed, and ``set_defaults`` only
    touches unset fields, so explicit user settings survive a later
    defaulting pass regardless of call order.

    Example:
        opts = ConfigOption(filename="app.yaml", path="./conf")
        opts.set("debounce", 0.5)
        opts.set("filename", "other.yaml")                 # ignored, already set
        opts.set("filename", "other.yaml", override=True)  # forced
    """
    filename: Optional[str] = None
    path: Optional[str] = None
    file_type: Optional[str] = None
    env: Optional[str] = None
    debounce: Optional[float] = None
    env_prefix: Optional[str] = None
    automatic_env: Optional[bool] = None
    allow_empty_env: Optional[bool] = None
    env_key_replacer: Optional[EnvKeyReplacer] = None
    _file: Optional[str] = field(default=None, init=False, repr=False, compare=False)

    _LOCATION_FIELDS = ("filename", "path", "env")

    def __post_init__(self):
        """Validate option values after initialization."""
        self._validate()

    def _validate(self) -> None:
        if self.debounce is not None and self.debounce < 0:
            raise ValueError("debounce must be non-negative")
        if self.file_type is not None and self.file_type.lower() not in SUPPORTED_FORMATS:
            raise ValueError(
                f"Invalid file_type '{self.file_type}'. Must be one of: {SUPPORTED_FORMATS}"
            )

    @classmethod
    def option_names(cls) -> List[str]:
        return [f.name for f in fields(cls) if not f.name.startswith("_")]

    def is_set(self, name: str) -> bool:
        """Return True if the named option has been given a value."""
        return getattr(self, name) is not None

    def set(self, name: str, value: Any, override: bool = False) -> "ConfigOption":
        """
        Set an option value.

        Args:
            name: Option field name
            value: New value
            override: Replace a value that is already set

        Returns:
            This ConfigOption, for chaining
        """
        if name not in self.option_names():
            raise ValueError(f"Unknown option '{name}'. Must be one of: {self.option_names()}")

        current = getattr(self, name)
        if current is not None and not override:
            logger.debug(f"Option '{name}' already set to {current!r}, ignoring {value!r}")
            return self

        previous = current
        setattr(self, name, value)
        try:
            self._validate()
        except ValueError:
            setattr(self, name, previous)
            raise

        if name in self._LOCATION_FIELDS:
            self._file = None
        return self

    def set_defaults(self) -> "ConfigOption":
        """Fill every unset field with its default value."""
        self.set("filename", DEFAULT_FILENAME)
        self.set("path", DEFAULT_PATH)
        self.set("env", DEFAULT_ENV)
        self.set("debounce", DEFAULT_DEBOUNCE)
        self.set("env_prefix", DEFAULT_ENV_PREFIX)
        self.set("automatic_env", False)
        self.set("allow_empty_env", False)
        return self

    @property
    def file(self) -> str:
        """Absolute path of the configuration file, computed once and cached."""
        if self._file is None:
            filename = self.filename or DEFAULT_FILENAME
            if self.env:
                name = Path(filename)
                filename = f"{name.stem}.{self.env}{name.suffix}"
            directory = self.path or DEFAULT_PATH
            self._file = os.path.abspath(os.path.join(directory, filename))
        return self._file

    @property
    def config_format(self) -> str:
        """Declared file format, falling back to the file extension."""
        if self.file_type:
            return self.file_type.lower()
        suffix = Path(self.file).suffix.lstrip(".").lower()
        return suffix or DEFAULT_FILE_TYPE


class LogLevel(Enum):
    """Logging levels."""
    DEBUG = "DEBUG"
    INFO = "INFO"
    WARNING = "WARNING"
    ERROR = "ERROR"
    CRITICAL = "CRITICAL"


class LogFormat(Enum):
    """Log output formats."""
    STRUCTURED = "structured"
    SIMPLE = "simple"


@dataclass
class LoggingConfig:
    """Logging system configuration."""
    level: LogLevel = LogLevel.INFO
    format: LogFormat = LogFormat.SIMPLE
    output: List[str] = field(default_factory=lambda: ["console"])
    rotation: str = "size"
    max_file_size_mb: int = 10
    backup_count: int = 5
    log_dir: str = "logs"

    def __post_init__(self):
        """Validate logging configuration after initialization."""
        if isinstance(self.level, str):
            self.level = LogLevel(self.level)
        if isinstance(self.format, str):
            self.format = LogFormat(self.format)

        valid_outputs = {"console", "file"}
        for output in self.output:
            if output not in valid_outputs:
                raise ValueError(f"Invalid log output '{output}'. Must be one of: {valid_outputs}")

        valid_rotations = {"daily", "size"}
        if self.rotation not in valid_rotations:
            raise ValueError(f"Invalid rotation '{self.rotation}'. Must be one of: {valid_rotations}")

        if self.max_file_size_mb <= 0:
            raise ValueError("max_file_size_mb must be positive")
        if self.backup_count < 0:
            raise ValueError("backup_count must be non-negative")

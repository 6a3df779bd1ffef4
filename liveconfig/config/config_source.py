"""
OmegaConf-backed configuration source.

Reads a YAML or JSON file into memory, overlays environment variables and
unmarshals the result into a typed dataclass instance using OmegaConf
structured configs.
"""

import dataclasses
import json
import logging
import os
import threading
from dataclasses import is_dataclass
from enum import Enum
from pathlib import Path
from typing import (
    Any, Dict, Iterator, Optional, Type, TypeVar, Union,
    get_args, get_origin, get_type_hints
)

import yaml
from omegaconf import DictConfig, OmegaConf, SCMode
from omegaconf.errors import OmegaConfBaseException

from .config_models import DEFAULT_FILE_TYPE, SUPPORTED_FORMATS, EnvKeyReplacer
from liveconfig.core.error_handling import (
    ConfigFileNotFoundError,
    ConfigIOError,
    ConfigNotInitializedError,
    ConfigParseError,
)

logger = logging.getLogger(__name__)

T = TypeVar("T")


def _leaf_keys(container: Dict[str, Any], prefix: str = "") -> Iterator[str]:
    """Yield dotted paths of every non-mapping value in a nested dict."""
    for key, value in container.items():
        path = f"{prefix}{key}"
        if isinstance(value, dict):
            yield from _leaf_keys(value, path + ".")
        else:
            yield path


def _build_value(hint: Any, value: Any) -> Any:
    if value is None or hint is Any:
        return value

    origin = get_origin(hint)
    if origin is Union:
        members = [arg for arg in get_args(hint) if arg is not type(None)]
        return _build_value(members[0], value) if len(members) == 1 else value

    if isinstance(hint, type) and is_dataclass(hint) and isinstance(value, dict):
        return _build_dataclass(hint, value)

    args = get_args(hint)
    if origin is list and isinstance(value, list):
        item = args[0] if args else Any
        return [_build_value(item, v) for v in value]
    if origin is dict and isinstance(value, dict):
        item = args[1] if len(args) == 2 else Any
        return {k: _build_value(item, v) for k, v in value.items()}

    # Typed nodes are already converted; only interpolation text reaches here as str
    scalar = hint in (int, float, bool) or (isinstance(hint, type) and issubclass(hint, Enum))
    if scalar and isinstance(value, str):
        raise ValueError(f"Value '{value}' is not a valid {hint.__name__}")
    return value


def _build_dataclass(cls: type, data: Dict[str, Any]) -> Any:
    hints = get_type_hints(cls)
    init_values = {}
    late_values = {}
    for f in dataclasses.fields(cls):
        if f.name not in data:
            continue
        value = _build_value(hints.get(f.name, Any), data[f.name])
        if f.init:
            init_values[f.name] = value
        else:
            late_values[f.name] = value

    instance = cls(**init_values)
    for name, value in late_values.items():
        setattr(instance, name, value)
    return instance


def to_dataclass(config_type: Type[T], cfg: DictConfig) -> T:
    """
    Convert a structured DictConfig into a ``config_type`` instance.

    Unlike ``OmegaConf.to_object`` this does not resolve interpolations:
    string values containing ``${...}`` are kept as literal text.

    Raises:
        OmegaConfBaseException: If a mandatory value is missing
        ValueError: If a non-string field holds text or the dataclass
            rejects a value
    """
    container = OmegaConf.to_container(
        cfg,
        resolve=False,
        throw_on_missing=True,
        structured_config_mode=SCMode.DICT
    )
    return _build_dataclass(config_type, container)


class ConfigSource:
    """
    Parsing and environment-overlay collaborator of a ConfigManager.

    The last file read is kept in memory so ``unmarshal`` can be called
    separately from ``read_in_config``; both also accept or return the raw
    DictConfig so a caller can keep a read and its unmarshal consistent.
    """

    def __init__(self):
        self._lock = threading.RLock()
        self._config_file: Optional[str] = None
        self._config_type: Optional[str] = None
        self._env_prefix = ""
        self._automatic_env = False
        self._allow_empty_env = False
        self._env_key_replacer: Optional[EnvKeyReplacer] = None
        self._env_bindings: Dict[str, Optional[str]] = {}
        self._raw: Optional[DictConfig] = None

    # Setup

    def set_config_file(self, path: str) -> None:
        with self._lock:
            self._config_file = str(path)

    def set_config_type(self, config_type: Optional[str]) -> None:
        if config_type is not None and config_type.lower() not in SUPPORTED_FORMATS:
            raise ConfigParseError(
                f"Unsupported configuration format '{config_type}'. "
                f"Must be one of: {SUPPORTED_FORMATS}"
            )
        with self._lock:
            self._config_type = config_type.lower() if config_type else None

    def set_env_prefix(self, prefix: str) -> None:
        with self._lock:
            self._env_prefix = prefix or ""

    def automatic_env(self) -> None:
        """Let every configuration key be overridden by its derived environment variable."""
        with self._lock:
            self._automatic_env = True

    def allow_empty_env(self, allow: bool) -> None:
        """Treat set-but-empty environment variables as values."""
        with self._lock:
            self._allow_empty_env = bool(allow)

    def set_env_key_replacer(self, replacer: Optional[EnvKeyReplacer]) -> None:
        with self._lock:
            self._env_key_replacer = replacer

    def bind_env(self, key: str, env_var: Optional[str] = None) -> None:
        """
        Bind a configuration key to an environment variable.

        Args:
            key: Dotted configuration key, e.g. ``database.host``
            env_var: Environment variable name; when omitted it is derived
                from ``key`` and the env prefix in effect at lookup time
        """
        if not key:
            raise ValueError("bind_env requires a non-empty key")
        with self._lock:
            self._env_bindings[key] = env_var or None
        logger.debug(f"Bound config key '{key}' to environment variable '{env_var or self._derive_env_name(key)}'")

    @property
    def config_file_used(self) -> Optional[str]:
        return self._config_file

    @property
    def config_format(self) -> str:
        if self._config_type:
            return self._config_type
        if self._config_file:
            suffix = Path(self._config_file).suffix.lstrip(".").lower()
            if suffix:
                return suffix
        return DEFAULT_FILE_TYPE

    # Environment

    def _derive_env_name(self, key: str) -> str:
        name = f"{self._env_prefix}_{key}" if self._env_prefix else key
        return name.upper()

    def _replace_env_key(self, name: str) -> str:
        replacer = self._env_key_replacer
        if replacer is None:
            return name
        if callable(replacer):
            return replacer(name)
        for old, new in replacer.items():
            name = name.replace(old, new)
        return name

    def _lookup_env(self, name: str) -> Optional[str]:
        value = os.environ.get(self._replace_env_key(name))
        if value is None:
            return None
        if value == "" and not self._allow_empty_env:
            return None
        return value

    def _env_overrides(self, schema: DictConfig) -> Dict[str, str]:
        """Collect ``key -> value`` pairs to apply on top of the file contents."""
        overrides = {}
        with self._lock:
            if self._automatic_env:
                container = OmegaConf.to_container(schema, resolve=False)
                for key in _leaf_keys(container):
                    value = self._lookup_env(self._derive_env_name(key))
                    if value is not None:
                        overrides[key] = value
            # Explicit bindings win over automatic ones
            for key, env_var in self._env_bindings.items():
                value = self._lookup_env(env_var or self._derive_env_name(key))
                if value is not None:
                    overrides[key] = value
        return overrides

    # Reading

    def read_in_config(self) -> DictConfig:
        """
        Read the configuration file into memory.

        Returns:
            The parsed file contents

        Raises:
            ConfigFileNotFoundError: If no file is set or it does not exist
            ConfigParseError: If the file is not valid YAML/JSON or not a mapping
            ConfigIOError: If the file exists but cannot be read
        """
        config_file = self._config_file
        if not config_file:
            raise ConfigFileNotFoundError("No configuration file has been set")
        if not os.path.isfile(config_file):
            raise ConfigFileNotFoundError(
                f"Configuration file not found: {config_file}",
                config_file=config_file
            )

        config_format = self.config_format
        if config_format not in SUPPORTED_FORMATS:
            raise ConfigParseError(
                f"Unsupported configuration format '{config_format}'",
                config_file=config_file
            )

        try:
            with open(config_file, "r", encoding="utf-8") as f:
                text = f.read()
        except OSError as e:
            raise ConfigIOError(
                f"Failed to read configuration file: {e}",
                config_file=config_file,
                cause=e
            )

        try:
            if not text.strip():
                raw = OmegaConf.create({})
            elif config_format == "json":
                data = json.loads(text)
                if not isinstance(data, dict):
                    raise ConfigParseError(
                        "Top level of a configuration file must be a mapping",
                        config_file=config_file
                    )
                raw = OmegaConf.create(data)
            else:
                raw = OmegaConf.create(text)
        except (ValueError, yaml.YAMLError, OmegaConfBaseException) as e:
            raise ConfigParseError(
                f"Failed to parse configuration file {config_file}: {e}",
                config_file=config_file,
                cause=e
            )

        if not isinstance(raw, DictConfig):
            raise ConfigParseError(
                "Top level of a configuration file must be a mapping",
                config_file=config_file
            )

        with self._lock:
            self._raw = raw
        logger.debug(f"Read configuration file: {config_file}")
        return raw

    def unmarshal(self, config_type: Type[T], raw: Optional[DictConfig] = None) -> T:
        """
        Build a typed configuration value from file contents and environment.

        Args:
            config_type: Dataclass type describing the configuration
            raw: Contents returned by ``read_in_config``; defaults to the last read

        Returns:
            A new ``config_type`` instance

        Raises:
            ConfigNotInitializedError: If nothing has been read yet
            ConfigParseError: If the contents do not fit ``config_type``
        """
        if not (isinstance(config_type, type) and is_dataclass(config_type)):
            raise TypeError(f"config_type must be a dataclass type, got {config_type!r}")

        if raw is None:
            with self._lock:
                raw = self._raw
        if raw is None:
            raise ConfigNotInitializedError(
                "No configuration has been read",
                config_file=self._config_file
            )

        try:
            schema = OmegaConf.structured(config_type)
            merged = OmegaConf.merge(schema, raw)
            for key, value in self._env_overrides(schema).items():
                OmegaConf.update(merged, key, value, merge=True)
            return to_dataclass(config_type, merged)
        except (OmegaConfBaseException, ValueError, TypeError) as e:
            raise ConfigParseError(
                f"Failed to unmarshal configuration into {config_type.__name__}: {e}",
                config_file=self._config_file,
                cause=e
            )

    # Writing

    def serialize(self, value: Any, config_format: Optional[str] = None) -> str:
        """Render a configuration value as YAML or JSON text."""
        config_format = (config_format or self.config_format).lower()
        try:
            cfg = OmegaConf.structured(value)
            if config_format == "json":
                container = OmegaConf.to_container(cfg, resolve=False, enum_to_str=True)
                return json.dumps(container, indent=2) + "\n"
            return OmegaConf.to_yaml(cfg)
        except (OmegaConfBaseException, ValueError, TypeError) as e:
            raise ConfigParseError(
                f"Failed to serialize configuration {type(value).__name__}: {e}",
                cause=e
            )

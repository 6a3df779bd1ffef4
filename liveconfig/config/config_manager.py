"""
Live configuration manager.

This module provides a generic, thread-safe configuration store that loads
a typed dataclass from a YAML/JSON file, hands out deep-copied snapshots to
readers and hot-reloads the value when the file changes on disk.
"""

import logging
import os
import threading
import time
from dataclasses import dataclass, is_dataclass
from pathlib import Path
from typing import Any, Callable, Generic, List, Optional, Type, TypeVar

from watchdog.events import FileSystemEvent, FileSystemEventHandler
from watchdog.observers import Observer

from .cloning import deep_copy
from .config_models import (
    DEFAULT_DEBOUNCE,
    ChangeOperation,
    ConfigChangeEvent,
    ConfigOption,
)
from .config_source import ConfigSource
from .hooks import HookHandler, HookPattern, HookRegistry
from .validation import ChangeRecord, compare_structures
from liveconfig.core.error_handling import (
    ConfigIOError,
    ConfigNotInitializedError,
    ConfigTypeMismatchError,
    ConfigurationError,
    ErrorContext,
    severity_to_log_level,
)
from liveconfig.core.locking import ReadWriteLock

logger = logging.getLogger(__name__)

T = TypeVar("T")


@dataclass
class ChangeContext:
    """Context handed to reload callbacks after a successful hot-reload."""
    event: ConfigChangeEvent
    manager: "ConfigManager"

    def get_manager(self) -> "ConfigManager":
        return self.manager


ChangeCallback = Callable[[ChangeContext], None]


class DebounceGate:
    """
    Suppresses change events arriving within ``window`` seconds of the last
    accepted one.

    The check and the timestamp update happen in one critical section, so two
    overlapping events can never both pass.
    """

    def __init__(self, window: float = DEFAULT_DEBOUNCE, clock: Callable[[], float] = time.monotonic):
        self.window = window
        self.clock = clock
        self._last_accepted: Optional[float] = None
        self._lock = threading.Lock()

    @property
    def last_accepted(self) -> Optional[float]:
        return self._last_accepted

    def allow(self) -> bool:
        """Return True and record the current time if the window has elapsed."""
        with self._lock:
            now = self.clock()
            if self._last_accepted is not None and now - self._last_accepted < self.window:
                return False
            self._last_accepted = now
            return True


class ConfigFileWatcher(FileSystemEventHandler):
    """File system event handler forwarding changes of one file to a ConfigManager."""

    def __init__(self, config_manager: "ConfigManager", config_file: str):
        self.config_manager = config_manager
        self.config_file = os.path.abspath(config_file)

    def _matches(self, path: Any) -> bool:
        return bool(path) and os.path.abspath(os.fsdecode(path)) == self.config_file

    def _dispatch_change(self, operation: ChangeOperation) -> None:
        event = ConfigChangeEvent(path=self.config_file, operation=operation)
        try:
            self.config_manager._on_config_change(event)
        except Exception as e:
            # Nothing may escape into the observer thread
            logger.exception(f"Unexpected failure while handling {operation.value} event")
            self.config_manager._hooks.exec(
                HookPattern.ERROR, f"[config] unexpected reload failure: {e}"
            )

    def on_modified(self, event: FileSystemEvent):
        """Handle file modification events."""
        if not event.is_directory and self._matches(event.src_path):
            self._dispatch_change(ChangeOperation.WRITE)

    def on_created(self, event: FileSystemEvent):
        if not event.is_directory and self._matches(event.src_path):
            self._dispatch_change(ChangeOperation.CREATE)

    def on_deleted(self, event: FileSystemEvent):
        if not event.is_directory and self._matches(event.src_path):
            self._dispatch_change(ChangeOperation.REMOVE)

    def on_moved(self, event: FileSystemEvent):
        if event.is_directory:
            return
        if self._matches(event.src_path) or self._matches(getattr(event, "dest_path", None)):
            self._dispatch_change(ChangeOperation.RENAME)


class ConfigManager(Generic[T]):
    """
    Thread-safe, hot-reloadable store for a typed configuration value.

    Features:
    - Typed loading of YAML/JSON files into a dataclass via OmegaConf
    - Deep-copied snapshots for readers (``get_config``)
    - Debounced hot-reload with structural validation and rollback
    - Severity hooks for lifecycle and error events
    - Environment variable overrides

    Example:
        manager = ConfigManager(AppConfig)
        manager.set_option(ConfigOption(path="./conf", filename="app.yaml"))
        manager.set_hook(HookPattern.ERROR, lambda ctx: print(ctx.message))
        manager.init(lambda ctx: print(ctx.get_manager().get_config()))
        config = manager.get_config()
        ...
        manager.close()
    """

    def __init__(
        self,
        config_type: Type[T],
        default_config: Optional[T] = None,
        source: Optional[ConfigSource] = None
    ):
        """
        Initialize the configuration manager.

        Args:
            config_type: Dataclass type of the configuration
            default_config: Value written to a missing configuration file and
                used as the template for initial validation; defaults to
                ``config_type()``
            source: Parsing collaborator, a fresh ConfigSource by default
        """
        if not (isinstance(config_type, type) and is_dataclass(config_type)):
            raise TypeError(f"config_type must be a dataclass type, got {config_type!r}")

        self.config_type = config_type
        self.default_config = default_config if default_config is not None else config_type()
        self._config: Optional[T] = None
        self._config_lock = ReadWriteLock()
        self._hooks = HookRegistry()
        self._options: Optional[ConfigOption] = None
        self._options_lock = threading.Lock()
        self._source = source or ConfigSource()
        self._debounce = DebounceGate(DEFAULT_DEBOUNCE)
        self._reload_callbacks: List[ChangeCallback] = []
        self._observer: Optional[Observer] = None
        self._watch_lock = threading.Lock()
        self._init_lock = threading.Lock()
        self._init_done = False

    # Options

    def set_option(self, options: Optional[ConfigOption] = None) -> "ConfigManager[T]":
        """
        Install the option descriptor. Only the first call has any effect.

        Args:
            options: Options to use; unset fields are filled with defaults

        Returns:
            This manager, for chaining
        """
        with self._options_lock:
            if self._options is not None:
                logger.debug("Options already initialized, ignoring set_option call")
                return self
            options = options if options is not None else ConfigOption()
            options.set_defaults()
            self._options = options
            self._debounce.window = options.debounce
        return self

    @property
    def options(self) -> ConfigOption:
        if self._options is None:
            self.set_option()
        return self._options

    @property
    def config_file(self) -> str:
        """Resolved absolute path of the configuration file."""
        return self.options.file

    @property
    def is_initialized(self) -> bool:
        """True once a configuration value has been loaded."""
        with self._config_lock.read_locked():
            return self._config is not None

    @property
    def is_watching(self) -> bool:
        return self._observer is not None

    def _setup_source(self) -> None:
        """Push the option descriptor into the parsing source."""
        options = self.options
        with self._options_lock:
            self._source.set_config_file(options.file)
            self._source.set_config_type(options.config_format)
            if options.automatic_env:
                self._source.automatic_env()
            if options.env_prefix:
                self._source.set_env_prefix(options.env_prefix)
            if options.env_key_replacer is not None:
                self._source.set_env_key_replacer(options.env_key_replacer)
            self._source.allow_empty_env(options.allow_empty_env)

    # Hooks and environment

    def set_hook(self, pattern: HookPattern, handler: Optional[HookHandler]) -> "ConfigManager[T]":
        """
        Set the handler for a hook severity, replacing any previous one.

        Returns:
            This manager, for chaining
        """
        self._hooks.set_hook(pattern, handler)
        return self

    def bind_env(self, key: str, env_var: Optional[str] = None) -> None:
        """
        Bind a configuration key to an environment variable.

        Example:
            manager.bind_env("api.key", "API_KEY")
            manager.bind_env("database.password")  # DATABASE.PASSWORD

        With ``env_key_replacer={".": "_"}`` the derived name above becomes
        DATABASE_PASSWORD. Derived names use the env prefix in effect when the
        file is read, so the call may come before or after ``set_option``.
        """
        self._source.bind_env(key, env_var)

    def set_env_prefix(self, prefix: str) -> "ConfigManager[T]":
        """Shortcut for setting the environment variable prefix on the source."""
        self._source.set_env_prefix(prefix)
        return self

    def automatic_env(self) -> "ConfigManager[T]":
        """Shortcut enabling automatic environment overrides for every key."""
        self._source.automatic_env()
        return self

    def add_reload_callback(self, callback: ChangeCallback) -> None:
        """
        Add a callback function to be called after a successful hot-reload.

        Args:
            callback: Function that takes a ChangeContext parameter
        """
        self._reload_callbacks.append(callback)

    def remove_reload_callback(self, callback: ChangeCallback) -> None:
        if callback in self._reload_callbacks:
            self._reload_callbacks.remove(callback)

    # Loading and reading

    def load_config(self) -> None:
        """
        Load the configuration file, replacing the current value.

        This is the explicit, caller-driven path: the new value is stored
        without structural validation against the old one.

        Raises:
            ConfigFileNotFoundError: If the resolved file does not exist
            ConfigParseError: If the file cannot be parsed into ``config_type``
        """
        with self._config_lock.write_locked():
            try:
                self._setup_source()
                raw = self._source.read_in_config()
                new_config = self._source.unmarshal(self.config_type, raw)
            except ConfigurationError as e:
                logger.error(f"Failed to load configuration '{self._source.config_file_used}': {e}")
                raise

            if self._config is not None and logger.isEnabledFor(logging.DEBUG):
                changes: ChangeRecord = {}
                compare_structures(self._config, new_config, "", changes)
                logger.debug(f"Configuration fields changed by load: {sorted(changes)}")

            self._config = new_config

        logger.info(f"Configuration loaded successfully: {self._source.config_file_used}")

    def get_config(self) -> T:
        """
        Get an independent copy of the current configuration.

        Raises:
            ConfigNotInitializedError: If no configuration has been loaded
        """
        with self._config_lock.read_locked():
            if self._config is None:
                raise ConfigNotInitializedError("Configuration not initialized")
            return deep_copy(self._config, self.config_type)

    def update_config(self, update_func: Callable[[T], Optional[T]]) -> ChangeRecord:
        """
        Apply a change to the configuration and persist it to the file.

        ``update_func`` receives a copy of the current value and either
        mutates it in place or returns a replacement.

        Returns:
            The changed fields as ``path -> (old, new)``

        Raises:
            ConfigNotInitializedError: If no configuration has been loaded
            ConfigTypeMismatchError: If the update changes the structure
            ConfigIOError: If the file cannot be written
        """
        with self._config_lock.write_locked():
            if self._config is None:
                raise ConfigNotInitializedError("Configuration not initialized")

            candidate = deep_copy(self._config, self.config_type)
            result = update_func(candidate)
            if result is not None:
                candidate = result

            changes: ChangeRecord = {}
            if not compare_structures(self._config, candidate, "", changes):
                raise ConfigTypeMismatchError(
                    "Updated configuration does not match the current structure",
                    changes=changes,
                    config_file=self.config_file
                )

            if not changes:
                return changes

            text = self._source.serialize(candidate, self.options.config_format)
            try:
                Path(self.config_file).write_text(text, encoding="utf-8")
            except OSError as e:
                raise ConfigIOError(
                    f"Failed to write configuration file: {e}",
                    config_file=self.config_file,
                    context=ErrorContext(operation="update_config", component="ConfigManager"),
                    cause=e
                )

            self._config = candidate

        logger.info(f"Configuration updated: {sorted(changes)}")
        return changes

    # Initialization

    def init(self, *callbacks: ChangeCallback) -> None:
        """
        Set up the manager in one step.

        Applies default options, creates the configuration file from
        ``default_config`` if it is missing, loads it, starts watching it for
        changes and validates the loaded value against ``default_config``.
        Any failure aborts initialization and is raised.

        Args:
            *callbacks: Functions called with a ChangeContext after each
                successful hot-reload
        """
        with self._init_lock:
            if self._init_done:
                raise ConfigurationError("ConfigManager.init() has already been called")
            self._run_init(callbacks)
            self._init_done = True

        self._hooks.exec(HookPattern.INFO, "[config] initialization complete")

    def _run_init(self, callbacks) -> None:
        self._hooks.exec(HookPattern.INIT, "[config] initialization started")

        with self._config_lock.read_locked():
            previous = self._config

        try:
            self.set_option()
            self._ensure_config_file()
            self.load_config()
            self._hooks.exec(HookPattern.DEBUG, f"[config] loaded configuration file: {self.config_file}")
            self._reload_callbacks.extend(callbacks)
            self.start_watching()
            self._validate_config()
        except ConfigurationError as e:
            self._hooks.exec(HookPattern.ERROR, f"[config] initialization failed: {e.message}")
            self.stop_watching()
            for callback in callbacks:
                self.remove_reload_callback(callback)
            with self._config_lock.write_locked():
                self._config = previous
            raise

    def _ensure_config_file(self) -> bool:
        """Write ``default_config`` to the configuration file if it does not exist."""
        path = Path(self.config_file)
        if path.exists():
            return False

        text = self._source.serialize(self.default_config, self.options.config_format)
        try:
            path.parent.mkdir(parents=True, exist_ok=True)
            path.write_text(text, encoding="utf-8")
        except OSError as e:
            raise ConfigIOError(
                f"Failed to create default configuration file: {e}",
                config_file=str(path),
                context=ErrorContext(operation="init", component="ConfigManager"),
                cause=e
            )

        logger.info(f"Default configuration file created: {path}")
        self._hooks.exec(HookPattern.INFO, f"[config] default configuration file created: {path}")
        return True

    def _validate_config(self) -> None:
        """Check that the loaded value has the structure of ``default_config``."""
        with self._config_lock.read_locked():
            current = self._config

        changes: ChangeRecord = {}
        if not compare_structures(self.default_config, current, "", changes):
            raise ConfigTypeMismatchError(
                f"Loaded configuration does not match the structure of {self.config_type.__name__}",
                changes=changes,
                config_file=self.config_file
            )
        self._hooks.exec(
            HookPattern.DEBUG,
            f"[config] configuration validated, {len(changes)} field(s) differ from defaults"
        )

    # Hot-reload

    def start_watching(self) -> None:
        """
        Watch the configuration file and reload it when it is written.

        Raises:
            ConfigIOError: If the watcher cannot be started
        """
        with self._watch_lock:
            if self._observer is not None:
                logger.warning("Hot-reload is already enabled")
                return

            config_file = self.config_file
            try:
                observer = Observer()
                observer.schedule(
                    ConfigFileWatcher(self, config_file),
                    os.path.dirname(config_file),
                    recursive=False
                )
                observer.start()
            except OSError as e:
                raise ConfigIOError(
                    f"Hot-reload setup failed: {e}",
                    config_file=config_file,
                    context=ErrorContext(operation="start_watching", component="ConfigManager"),
                    cause=e
                )
            self._observer = observer

        logger.info(f"Hot-reload enabled for configuration file: {config_file}")

    def stop_watching(self) -> None:
        """Stop watching the configuration file."""
        with self._watch_lock:
            observer, self._observer = self._observer, None

        if observer is None:
            return

        observer.stop()
        # A reload callback may stop the watcher from the observer thread itself
        if observer is not threading.current_thread():
            observer.join()
        logger.info("Hot-reload disabled")

    def close(self) -> None:
        """Release the file watcher."""
        self.stop_watching()

    def _report_reload_failure(self, message: str, error: Optional[ConfigurationError] = None) -> None:
        level = severity_to_log_level(error.severity) if error is not None else logging.ERROR
        logger.log(level, message)
        self._hooks.exec(HookPattern.ERROR, message)

    def _on_config_change(self, event: ConfigChangeEvent) -> None:
        """Reload pipeline run for every change event of the watched file."""
        if event.operation is not ChangeOperation.WRITE:
            logger.debug(f"Ignoring {event.operation.value} event for {event.path}")
            return

        if not self._debounce.allow():
            logger.debug(f"Change event for {event.path} within debounce window, skipped")
            return

        self._hooks.exec(HookPattern.DEBUG, f"[config] change detected: {event.path}")

        try:
            raw = self._source.read_in_config()
        except ConfigurationError as e:
            self._report_reload_failure(f"[config] failed to re-read configuration file: {e.message}", e)
            return

        try:
            candidate = self._source.unmarshal(self.config_type, raw)
        except ConfigurationError as e:
            self._report_reload_failure(
                f"[config] failed to parse configuration, keeping previous value: {e.message}", e
            )
            return

        changes: ChangeRecord = {}
        with self._config_lock.write_locked():
            previous = self._config
            compatible = previous is None or compare_structures(previous, candidate, "", changes)
            self._config = candidate if compatible else previous

        if not compatible:
            mismatch = ConfigTypeMismatchError(
                "Reloaded configuration does not match the current structure",
                changes=changes,
                config_file=event.path,
                context=ErrorContext(operation="reload", component="ConfigManager")
            )
            self._report_reload_failure("[config] configuration type mismatch, change blocked", mismatch)
            return

        logger.info(f"Configuration reloaded from {event.path}: {sorted(changes)}")
        self._hooks.exec(
            HookPattern.INFO,
            f"[config] configuration reloaded, changed fields: {sorted(changes)}"
        )

        context = ChangeContext(event=event, manager=self)
        for callback in list(self._reload_callbacks):
            try:
                callback(context)
            except Exception as e:
                logger.exception(f"Reload callback failed: {e}")
                self._hooks.exec(HookPattern.ERROR, f"[config] reload callback failed: {e}")

    def __enter__(self):
        """Context manager entry."""
        return self

    def __exit__(self, exc_type, exc_val, exc_tb):
        """Context manager exit - stop watching the file."""
        self.close()

"""
Logging setup for liveconfig.

This module provides JSON and plain-text formatters, handler setup driven
by a LoggingConfig, and a bridge that routes ConfigManager hooks into a
standard ``logging.Logger``.
"""

import logging
import logging.handlers
import json
import sys
from typing import Any, Dict, Optional
from datetime import datetime
from pathlib import Path
from dataclasses import dataclass, asdict

from liveconfig.config.config_models import LoggingConfig, LogFormat
from liveconfig.config.hooks import HookContext, HookPattern

# Attributes every LogRecord carries; anything else was passed via ``extra``
_RECORD_ATTRIBUTES = frozenset(vars(logging.LogRecord("", 0, "", 0, "", (), None))) | {"message", "asctime"}


@dataclass
class LogEntry:
    """Structured log entry with metadata."""
    timestamp: str
    level: str
    message: str
    logger_name: str
    extra: Dict[str, Any]
    thread_id: Optional[int] = None
    process_id: Optional[int] = None

    def to_dict(self) -> Dict[str, Any]:
        """Convert log entry to dictionary for JSON serialization."""
        return asdict(self)


class JSONFormatter(logging.Formatter):
    """Custom JSON formatter for structured logging."""

    def format(self, record: logging.LogRecord) -> str:
        """Format log record as JSON."""
        extra = {k: v for k, v in record.__dict__.items() if k not in _RECORD_ATTRIBUTES}
        if record.exc_info:
            extra['exception'] = self.formatException(record.exc_info)

        log_entry = LogEntry(
            timestamp=datetime.fromtimestamp(record.created).isoformat(),
            level=record.levelname,
            message=record.getMessage(),
            logger_name=record.name,
            extra=extra,
            thread_id=record.thread,
            process_id=record.process
        )

        return json.dumps(log_entry.to_dict(), default=str)


class SimpleFormatter(logging.Formatter):
    """Simple text formatter for human-readable logs."""

    def __init__(self):
        super().__init__(
            fmt='%(asctime)s - %(name)s - %(levelname)s - %(message)s',
            datefmt='%Y-%m-%d %H:%M:%S'
        )


def _create_handler(name: str, output: str, config: LoggingConfig) -> Optional[logging.Handler]:
    """Create appropriate handler for output type."""
    if output == "console":
        handler = logging.StreamHandler(sys.stdout)
    elif output == "file":
        log_file = Path(config.log_dir) / f"{name}.log"
        if config.rotation == "size":
            handler = logging.handlers.RotatingFileHandler(
                log_file,
                maxBytes=config.max_file_size_mb * 1024 * 1024,
                backupCount=config.backup_count
            )
        else:
            handler = logging.handlers.TimedRotatingFileHandler(
                log_file,
                when='midnight',
                interval=1,
                backupCount=config.backup_count
            )
    else:
        return None

    if config.format == LogFormat.STRUCTURED:
        handler.setFormatter(JSONFormatter())
    else:
        handler.setFormatter(SimpleFormatter())
    return handler


def setup_logging(name: str = "liveconfig", config: Optional[LoggingConfig] = None) -> logging.Logger:
    """
    Configure a named logger from a LoggingConfig.

    Existing handlers on the logger are closed and replaced.

    Args:
        name: Logger name
        config: Logging configuration (defaults to LoggingConfig())

    Returns:
        The configured logger
    """
    config = config or LoggingConfig()
    logger = logging.getLogger(name)

    for handler in list(logger.handlers):
        handler.close()
    logger.handlers.clear()

    logger.setLevel(getattr(logging, config.level.value))

    if "file" in config.output:
        Path(config.log_dir).mkdir(parents=True, exist_ok=True)

    for output in config.output:
        handler = _create_handler(name, output, config)
        if handler:
            logger.addHandler(handler)

    # Prevent propagation to root logger
    logger.propagate = False
    return logger


class LoggingHooks:
    """Hook handlers that forward hook messages to a logger at the matching level."""

    LEVELS = {
        HookPattern.INIT: logging.INFO,
        HookPattern.DEBUG: logging.DEBUG,
        HookPattern.INFO: logging.INFO,
        HookPattern.WARN: logging.WARNING,
        HookPattern.ERROR: logging.ERROR,
    }

    def __init__(self, logger: logging.Logger):
        self.logger = logger

    def __call__(self, ctx: HookContext) -> None:
        self.logger.log(self.LEVELS[ctx.pattern], ctx.message, extra={'hook': ctx.pattern.name.lower()})


def attach_logging_hooks(manager, logger: Optional[logging.Logger] = None):
    """
    Route every hook severity of ``manager`` to ``logger``.

    Returns:
        The manager, for chaining
    """
    handler = LoggingHooks(logger or logging.getLogger("liveconfig.hooks"))
    for pattern in HookPattern:
        manager.set_hook(pattern, handler)
    return manager

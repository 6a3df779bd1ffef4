"""
liveconfig error hierarchy

This module provides structured errors with severity levels and context
tracking for the live configuration manager.
"""

import logging
import traceback
from typing import Any, Dict, Optional, Union
from enum import Enum
from datetime import datetime
from dataclasses import dataclass, field


class ErrorSeverity(Enum):
    """Error severity levels for categorizing and handling different types of errors."""
    LOW = "low"
    MEDIUM = "medium"
    HIGH = "high"
    CRITICAL = "critical"


@dataclass
class ErrorContext:
    """Structured error context information."""
    timestamp: datetime = field(default_factory=datetime.now)
    operation: Optional[str] = None
    component: Optional[str] = None
    user_data: Dict[str, Any] = field(default_factory=dict)
    stack_trace: Optional[str] = None

    def to_dict(self) -> Dict[str, Any]:
        """Convert error context to dictionary for logging."""
        return {
            'timestamp': self.timestamp.isoformat(),
            'operation': self.operation,
            'component': self.component,
            'user_data': self.user_data,
            'stack_trace': self.stack_trace
        }


class LiveConfigError(Exception):
    """
    Base exception class for all liveconfig errors.

    Provides structured error information with severity levels and context tracking.
    """

    def __init__(
        self,
        message: str,
        severity: ErrorSeverity = ErrorSeverity.MEDIUM,
        context: Optional[Union[Dict[str, Any], ErrorContext]] = None,
        cause: Optional[Exception] = None
    ):
        super().__init__(message)
        self.message = message
        self.severity = severity
        self.cause = cause

        # Context can be a plain dict or a prepared ErrorContext
        if isinstance(context, ErrorContext):
            self.context = context
        elif isinstance(context, dict):
            self.context = ErrorContext(
                user_data=context,
                stack_trace=traceback.format_exc() if cause else None
            )
        else:
            self.context = ErrorContext(
                stack_trace=traceback.format_exc() if cause else None
            )

    def __str__(self) -> str:
        """String representation including severity and context."""
        base_msg = f"[{self.severity.value.upper()}] {self.message}"
        if self.context.operation:
            base_msg += f" (Operation: {self.context.operation})"
        if self.context.component:
            base_msg += f" (Component: {self.context.component})"
        return base_msg

    def get_structured_info(self) -> Dict[str, Any]:
        """Get structured error information for logging and debugging."""
        return {
            'error_type': self.__class__.__name__,
            'message': self.message,
            'severity': self.severity.value,
            'context': self.context.to_dict(),
            'cause': str(self.cause) if self.cause else None
        }


class ConfigurationError(LiveConfigError):
    """
    Configuration-related errors including invalid config values, missing files,
    and type mismatches between reloads.
    """

    default_severity = ErrorSeverity.MEDIUM

    def __init__(
        self,
        message: str,
        config_key: Optional[str] = None,
        config_file: Optional[str] = None,
        severity: Optional[ErrorSeverity] = None,
        context: Optional[Union[Dict[str, Any], ErrorContext]] = None,
        cause: Optional[Exception] = None
    ):
        # Add configuration-specific context
        config_context = context or {}
        if isinstance(config_context, dict):
            config_context.update({
                'config_key': config_key,
                'config_file': config_file
            })
        elif isinstance(config_context, ErrorContext):
            config_context.user_data.update({
                'config_key': config_key,
                'config_file': config_file
            })

        super().__init__(message, severity or self.default_severity, config_context, cause)
        self.config_key = config_key
        self.config_file = config_file


class ConfigNotInitializedError(ConfigurationError):
    """Raised when the configuration is read before any successful load."""


class ConfigFileNotFoundError(ConfigurationError):
    """Raised when the resolved configuration file does not exist."""

    default_severity = ErrorSeverity.HIGH


class ConfigParseError(ConfigurationError):
    """Raised when a configuration file cannot be parsed or unmarshalled."""

    default_severity = ErrorSeverity.HIGH


class ConfigTypeMismatchError(ConfigurationError):
    """
    Raised when a candidate configuration does not have the same structure
    as the one it would replace.
    """

    default_severity = ErrorSeverity.HIGH

    def __init__(self, message: str, changes: Optional[Dict[str, Any]] = None, **kwargs):
        super().__init__(message, **kwargs)
        self.changes = changes or {}


class ConfigIOError(ConfigurationError):
    """Raised when creating or writing the configuration file fails."""

    default_severity = ErrorSeverity.HIGH


def severity_to_log_level(severity: ErrorSeverity) -> int:
    """Convert error severity to logging level."""
    severity_map = {
        ErrorSeverity.LOW: logging.INFO,
        ErrorSeverity.MEDIUM: logging.WARNING,
        ErrorSeverity.HIGH: logging.ERROR,
        ErrorSeverity.CRITICAL: logging.CRITICAL
    }
    return severity_map.get(severity, logging.ERROR)

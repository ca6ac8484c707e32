"""
Basic exception classes for locale-sync.

This module contains fundamental exception classes that are used throughout
the codebase without creating import cycles.
"""

from __future__ import annotations

from enum import Enum


class ErrorSeverity(Enum):
    """Error severity levels for classification and handling."""

    LOW = "low"
    MEDIUM = "medium"
    HIGH = "high"
    CRITICAL = "critical"


class ErrorCategory(Enum):
    """Categories of errors for appropriate handling strategies."""

    FILESYSTEM = "filesystem"
    RESOURCE = "resource"
    VALIDATION = "validation"
    CONFIGURATION = "configuration"
    WATCH = "watch"
    UNKNOWN = "unknown"


class LocaleSyncError(Exception):
    """Base exception class for locale-sync specific errors."""

    def __init__(
        self,
        message: str,
        category: ErrorCategory = ErrorCategory.UNKNOWN,
        severity: ErrorSeverity = ErrorSeverity.MEDIUM,
        context: object | None = None,
        recoverable: bool = True,
    ) -> None:
        super().__init__(message)
        self.category: ErrorCategory = category
        self.severity: ErrorSeverity = severity
        self.context: object | None = context
        self.recoverable: bool = recoverable


class ResourceStoreError(LocaleSyncError):
    """Errors raised while reading or writing a namespace resource file."""

    def __init__(
        self,
        message: str,
        category: ErrorCategory = ErrorCategory.FILESYSTEM,
        severity: ErrorSeverity = ErrorSeverity.MEDIUM,
        context: object | None = None,
        recoverable: bool = False,
    ) -> None:
        super().__init__(
            message,
            category=category,
            severity=severity,
            context=context,
            recoverable=recoverable,
        )


class ResourceBusyError(ResourceStoreError):
    """The resource file is temporarily locked; the write can be retried."""

    def __init__(self, message: str, context: object | None = None) -> None:
        super().__init__(
            message,
            category=ErrorCategory.RESOURCE,
            severity=ErrorSeverity.LOW,
            context=context,
            recoverable=True,
        )


class MalformedResourceError(ResourceStoreError):
    """The existing resource file is not a JSON object."""

    def __init__(self, message: str, context: object | None = None) -> None:
        super().__init__(
            message,
            category=ErrorCategory.VALIDATION,
            severity=ErrorSeverity.MEDIUM,
            context=context,
        )


class ResourceIOError(ResourceStoreError):
    """Any other I/O failure while reading or writing a resource file."""


class InvalidNamespaceError(ResourceStoreError):
    """The namespace cannot be mapped to a file inside the language directory."""

    def __init__(self, message: str, context: object | None = None) -> None:
        super().__init__(
            message,
            category=ErrorCategory.VALIDATION,
            severity=ErrorSeverity.HIGH,
            context=context,
        )


class WatchUnavailableError(LocaleSyncError):
    """The language has no directory to watch."""

    def __init__(self, message: str, context: object | None = None) -> None:
        super().__init__(
            message,
            category=ErrorCategory.WATCH,
            severity=ErrorSeverity.LOW,
            context=context,
            recoverable=False,
        )


class LanguageError(LocaleSyncError):
    """Invalid language code."""

    def __init__(self, message: str, context: object | None = None) -> None:
        super().__init__(
            message,
            category=ErrorCategory.VALIDATION,
            severity=ErrorSeverity.LOW,
            context=context,
            recoverable=False,
        )


class ConfigurationError(LocaleSyncError):
    """Configuration-related errors."""

    def __init__(self, message: str, context: object | None = None) -> None:
        super().__init__(
            message,
            category=ErrorCategory.CONFIGURATION,
            severity=ErrorSeverity.HIGH,
            context=context,
            recoverable=False,
        )

"""
Basic exception classes for the NLS resolver.

This module contains the exception hierarchy raised inside the resolution
stages. None of these escape ``resolve_configuration``; the stages convert
them into diagnostics that collapse to the default configuration.
"""

from __future__ import annotations

from enum import Enum


class ErrorSeverity(Enum):
    """Error severity levels for classification and handling."""

    LOW = "low"
    MEDIUM = "medium"
    HIGH = "high"


class ErrorCategory(Enum):
    """Categories of errors for appropriate handling strategies."""

    ABSENT_INPUT = "absent_input"
    MALFORMED_INPUT = "malformed_input"
    IO_FAILURE = "io_failure"
    CORRUPTION = "corruption"
    CONFIGURATION = "configuration"


class NLSResolverError(Exception):
    """Base exception class for NLS resolver errors."""

    def __init__(
        self,
        message: str,
        category: ErrorCategory = ErrorCategory.MALFORMED_INPUT,
        severity: ErrorSeverity = ErrorSeverity.MEDIUM,
        context: object | None = None,
    ) -> None:
        super().__init__(message)
        self.category: ErrorCategory = category
        self.severity: ErrorSeverity = severity
        self.context: object | None = context


class ManifestError(NLSResolverError):
    """The language pack manifest could not be used."""

    def __init__(self, message: str, context: object | None = None) -> None:
        super().__init__(
            message,
            category=ErrorCategory.MALFORMED_INPUT,
            severity=ErrorSeverity.LOW,
            context=context,
        )


class PackValidationError(NLSResolverError):
    """A matched language pack entry is missing required fields or files."""

    def __init__(self, message: str, context: object | None = None) -> None:
        super().__init__(
            message,
            category=ErrorCategory.MALFORMED_INPUT,
            severity=ErrorSeverity.LOW,
            context=context,
        )


class CacheError(NLSResolverError):
    """Filesystem failures while inspecting or cleaning the cache."""

    def __init__(self, message: str, context: object | None = None) -> None:
        super().__init__(
            message,
            category=ErrorCategory.IO_FAILURE,
            severity=ErrorSeverity.HIGH,
            context=context,
        )


class MaterializationError(NLSResolverError):
    """The default catalog or pack translations could not be combined."""

    def __init__(
        self,
        message: str,
        category: ErrorCategory = ErrorCategory.MALFORMED_INPUT,
        context: object | None = None,
    ) -> None:
        super().__init__(
            message,
            category=category,
            severity=ErrorSeverity.MEDIUM,
            context=context,
        )


class ConfigurationError(NLSResolverError):
    """Configuration-related errors."""

    def __init__(self, message: str, context: object | None = None) -> None:
        super().__init__(
            message,
            category=ErrorCategory.CONFIGURATION,
            severity=ErrorSeverity.HIGH,
            context=context,
        )

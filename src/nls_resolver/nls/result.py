"""
Result types for the resolution pipeline.

Each stage returns either ``Ok(value)`` or ``Err(diagnostic)``. Diagnostics are
logged once by the resolver and always collapse to the default configuration.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass
from enum import Enum
from typing import Generic, TypeVar

from ..utils.core.exceptions import ErrorCategory, NLSResolverError

T = TypeVar("T")


class DiagnosticKind(Enum):
    """Why a stage could not produce a value."""

    ABSENT_INPUT = "absent_input"  # Expected, silent
    MALFORMED_INPUT = "malformed_input"  # Bad JSON, missing pack fields
    IO_FAILURE = "io_failure"  # Permissions, disk
    CORRUPTION = "corruption"  # Explicit sentinel

    @property
    def log_level(self) -> int:
        """Logging level used when a diagnostic of this kind is reported."""
        match self:
            case DiagnosticKind.ABSENT_INPUT:
                return logging.DEBUG
            case DiagnosticKind.MALFORMED_INPUT | DiagnosticKind.CORRUPTION:
                return logging.WARNING
            case DiagnosticKind.IO_FAILURE:
                return logging.ERROR


_CATEGORY_TO_KIND: dict[ErrorCategory, DiagnosticKind] = {
    ErrorCategory.ABSENT_INPUT: DiagnosticKind.ABSENT_INPUT,
    ErrorCategory.MALFORMED_INPUT: DiagnosticKind.MALFORMED_INPUT,
    ErrorCategory.IO_FAILURE: DiagnosticKind.IO_FAILURE,
    ErrorCategory.CORRUPTION: DiagnosticKind.CORRUPTION,
    ErrorCategory.CONFIGURATION: DiagnosticKind.MALFORMED_INPUT,
}


@dataclass(frozen=True)
class Diagnostic:
    """A tagged, loggable reason for falling back to the default configuration."""

    kind: DiagnosticKind
    message: str
    error: BaseException | None = None

    @classmethod
    def from_exception(cls, error: BaseException, message: str | None = None) -> Diagnostic:
        """
        Classify an exception raised inside a stage.

        Args:
            error: The exception to classify
            message: Optional summary; defaults to ``str(error)``

        Returns:
            Diagnostic tagged by the exception's category
        """
        if isinstance(error, NLSResolverError):
            kind = _CATEGORY_TO_KIND[error.category]
        elif isinstance(error, (FileNotFoundError, NotADirectoryError)):
            kind = DiagnosticKind.MALFORMED_INPUT
        elif isinstance(error, OSError):
            kind = DiagnosticKind.IO_FAILURE
        else:
            kind = DiagnosticKind.MALFORMED_INPUT
        return cls(kind=kind, message=message or str(error), error=error)

    def log(self, logger: logging.Logger) -> None:
        """Report the diagnostic at the level matching its kind."""
        if self.error is not None and self.kind is not DiagnosticKind.ABSENT_INPUT:
            logger.log(self.kind.log_level, f"{self.message}: {self.error}")
        else:
            logger.log(self.kind.log_level, self.message)


@dataclass(frozen=True)
class Ok(Generic[T]):
    """Successful stage output."""

    value: T


@dataclass(frozen=True)
class Err:
    """Failed stage output."""

    diagnostic: Diagnostic


Result = Ok[T] | Err

"""
Error handling for the document compiler.

This module provides the exception hierarchy raised while turning a
Markdown document into a test suite. Every error carries a category, a
severity, structured context and optional suggestions so that the CLI and
the pytest plugin can render actionable messages.
"""

from __future__ import annotations

from datetime import datetime, timezone
from enum import Enum
from typing import Any, Dict, List, Optional, Union


class ErrorSeverity(Enum):
    """Severity levels for errors."""

    LOW = "low"
    MEDIUM = "medium"
    HIGH = "high"
    CRITICAL = "critical"


class ErrorCategory(Enum):
    """Categories of errors."""

    CONFIGURATION = "configuration"
    PARSE = "parse"
    ANNOTATION = "annotation"
    RESOLUTION = "resolution"


# Type definitions for error context
ErrorContextValue = Union[str, int, float, bool, List[str], Dict[str, str], None]
ErrorContext = Dict[str, ErrorContextValue]
ErrorSuggestions = List[str]


class MdDoctestError(Exception):
    """
    Base exception for all compiler errors.

    This is the root exception class that all other compiler exceptions
    inherit from, providing consistent error handling patterns and rich context.
    """

    def __init__(
        self,
        message: str,
        *,
        error_code: str | None = None,
        category: ErrorCategory | None = None,
        severity: ErrorSeverity = ErrorSeverity.MEDIUM,
        context: ErrorContext | None = None,
        suggestions: ErrorSuggestions | None = None,
        timestamp: datetime | None = None,
        cause: Exception | None = None,
    ):
        """
        Initialize a compiler error.

        Args:
            message: Human-readable error message
            error_code: Optional error code for programmatic handling
            category: Error category for classification
            severity: Error severity level
            context: Additional context information
            suggestions: Suggested actions to resolve the error
            timestamp: When the error occurred (defaults to now)
            cause: The underlying exception that caused this error
        """
        super().__init__(message)
        self.message = message
        self.error_code = error_code
        self.category = category
        self.severity = severity
        self.context = context or {}
        self.suggestions = suggestions or []
        self.timestamp = timestamp or datetime.now(timezone.utc)
        self.cause = cause

    def __str__(self) -> str:
        """Return string representation of the error."""
        parts = [self.message]

        if self.error_code:
            parts.append(f"[{self.error_code}]")

        if self.context:
            context_str = ", ".join(f"{k}={v}" for k, v in self.context.items())
            parts.append(f"Context: {context_str}")

        if self.suggestions:
            parts.append(f"Suggestions: {'; '.join(self.suggestions)}")

        return " | ".join(parts)

    def to_dict(self) -> Dict[str, Any]:
        """Convert error to dictionary for serialization."""
        return {
            "message": self.message,
            "error_code": self.error_code,
            "category": self.category.value if self.category else None,
            "severity": self.severity.value if self.severity else None,
            "context": self.context,
            "suggestions": self.suggestions,
            "timestamp": self.timestamp.isoformat() if self.timestamp else None,
            "cause": str(self.cause) if self.cause else None,
        }


class ConfigurationError(MdDoctestError):
    """Raised when compile options are invalid."""

    def __init__(self, message: str, **kwargs: Any):
        if "severity" not in kwargs:
            kwargs["severity"] = ErrorSeverity.MEDIUM
        super().__init__(
            message,
            category=ErrorCategory.CONFIGURATION,
            **kwargs,
        )


class SampleParseError(MdDoctestError):
    """Raised when a code sample is not valid Python.

    A broken sample aborts the whole compilation; no partial suite is
    produced.
    """

    def __init__(
        self,
        message: str,
        *,
        title: Optional[str] = None,
        line: Optional[int] = None,
        **kwargs: Any,
    ):
        super().__init__(
            message,
            error_code="E100",
            category=ErrorCategory.PARSE,
            severity=ErrorSeverity.HIGH,
            **kwargs,
        )
        self.title = title
        self.line = line
        if title:
            self.context["sample"] = title
        if line is not None:
            self.context["line"] = line


class AnnotationError(MdDoctestError):
    """Raised when a detected annotation cannot be parsed.

    Detection and parsing share the same patterns, so this signals a broken
    invariant rather than a malformed document.
    """

    def __init__(self, message: str, *, comment: Optional[str] = None, **kwargs: Any):
        super().__init__(
            message,
            error_code="E200",
            category=ErrorCategory.ANNOTATION,
            severity=ErrorSeverity.CRITICAL,
            **kwargs,
        )
        self.comment = comment
        if comment is not None:
            self.context["comment"] = comment


class ManifestError(MdDoctestError):
    """Raised when a package manifest exists but cannot be read."""

    def __init__(self, message: str, *, path: Optional[str] = None, **kwargs: Any):
        super().__init__(
            message,
            error_code="E300",
            category=ErrorCategory.RESOLUTION,
            severity=ErrorSeverity.HIGH,
            **kwargs,
        )
        self.path = path
        if path:
            self.context["manifest"] = path


def build_sample_context(sample: Any, index: Optional[int] = None) -> ErrorContext:
    """
    Build error context describing a code sample.

    Args:
        sample: Sample object (anything with title/language/line attributes)
        index: Optional position of the sample within its document

    Returns:
        Error context dictionary
    """
    context: ErrorContext = {
        "language": getattr(sample, "language", None),
    }

    title = getattr(sample, "title", None)
    if title:
        context["sample"] = title

    line = getattr(sample, "line", None)
    if line is not None:
        context["line"] = line

    if index is not None:
        context["index"] = index

    return context

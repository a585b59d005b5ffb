"""Error codes and error handling utilities for FormTheme."""

from __future__ import annotations

import json
from dataclasses import dataclass, field
from enum import Enum, auto
from typing import Any


class ErrorCode(Enum):
    """Standardized error codes for theme engine operations."""

    # Validation errors
    VALIDATION_FAILED = auto()
    VALIDATION_SHAPE = auto()

    # Font errors
    FONT_LOAD_FAILED = auto()
    FONT_TIMEOUT = auto()
    FONT_NOT_AVAILABLE = auto()
    NETWORK_UNAVAILABLE = auto()

    # Storage errors
    STORAGE_UNAVAILABLE = auto()
    STORAGE_WRITE_FAILED = auto()
    SERIALIZATION_FAILED = auto()

    # Import errors
    IMPORT_MALFORMED = auto()
    IMPORT_UNSUPPORTED_VERSION = auto()

    # Operation errors
    OPERATION_FAILED = auto()


ERROR_MESSAGES: dict[ErrorCode, str] = {
    ErrorCode.VALIDATION_FAILED: "The theme configuration is invalid. Review the listed fields.",
    ErrorCode.VALIDATION_SHAPE: "The theme data has an unexpected structure.",

    ErrorCode.FONT_LOAD_FAILED: "A font could not be loaded. The fallback font stack is used instead.",
    ErrorCode.FONT_TIMEOUT: "A font took too long to load. The fallback font stack is used instead.",
    ErrorCode.FONT_NOT_AVAILABLE: "The requested font is not installed on this system.",
    ErrorCode.NETWORK_UNAVAILABLE: "Network unavailable. Check your internet connection.",

    ErrorCode.STORAGE_UNAVAILABLE: "Theme storage is unavailable. Changes are kept in memory only.",
    ErrorCode.STORAGE_WRITE_FAILED: "The theme could not be saved. Check folder permissions.",
    ErrorCode.SERIALIZATION_FAILED: "The theme could not be serialized.",

    ErrorCode.IMPORT_MALFORMED: "The imported theme file is not a valid theme document.",
    ErrorCode.IMPORT_UNSUPPORTED_VERSION: "The imported theme was created by an unsupported version.",

    ErrorCode.OPERATION_FAILED: "Operation failed. See details for more information.",
}


class ThemeValidationError(ValueError):
    """Raised when theme data has a malformed shape."""


@dataclass
class FormThemeError(Exception):
    """Base exception for FormTheme with error code and context."""

    code: ErrorCode
    message: str = ""
    details: dict[str, Any] = field(default_factory=dict)
    suggestion: str = ""

    def __post_init__(self) -> None:
        if not self.message:
            self.message = ERROR_MESSAGES.get(self.code, "An unexpected error occurred.")
        if not self.suggestion and self.code in ERROR_MESSAGES:
            self.suggestion = ERROR_MESSAGES[self.code]

    def __str__(self) -> str:
        parts = [self.message]
        if self.details:
            details_str = " | ".join(f"{k}={v}" for k, v in self.details.items())
            parts.append(f"\nDetails: {details_str}")
        return "".join(parts)

    def to_dict(self) -> dict[str, Any]:
        """Convert to dictionary for logging or UI display."""
        return {
            "code": self.code.name,
            "message": self.message,
            "details": self.details,
            "suggestion": self.suggestion,
        }


class FontLoadError(FormThemeError):
    """Raised by font loading strategies when a family cannot be loaded."""


def classify_exception(exc: Exception) -> FormThemeError:
    """Classify a generic exception into a FormThemeError with appropriate code."""
    if isinstance(exc, FormThemeError):
        return exc
    exc_name = type(exc).__name__
    exc_str = str(exc).lower()

    if isinstance(exc, ThemeValidationError):
        return FormThemeError(ErrorCode.VALIDATION_SHAPE, message=str(exc), details={"original": exc_str})
    if isinstance(exc, json.JSONDecodeError):
        return FormThemeError(ErrorCode.IMPORT_MALFORMED, details={"original": exc_str})

    # Network errors
    if "timeout" in exc_str or "timed out" in exc_str or "TimeoutError" in exc_name:
        return FormThemeError(ErrorCode.FONT_TIMEOUT, details={"original": exc_str})
    if "network" in exc_str or "connection" in exc_str or "unreachable" in exc_str:
        return FormThemeError(ErrorCode.NETWORK_UNAVAILABLE, details={"original": exc_str})

    # Storage errors
    if "PermissionError" in exc_name or "permission denied" in exc_str or "read-only" in exc_str:
        return FormThemeError(ErrorCode.STORAGE_WRITE_FAILED, details={"original": exc_str})
    if "quota" in exc_str or "no space left" in exc_str:
        return FormThemeError(ErrorCode.STORAGE_UNAVAILABLE, details={"original": exc_str})
    if "serializ" in exc_str or "not json" in exc_str:
        return FormThemeError(ErrorCode.SERIALIZATION_FAILED, details={"original": exc_str})

    return FormThemeError(
        ErrorCode.OPERATION_FAILED,
        message=f"{exc_name}: {exc}",
        details={"original": exc_str},
    )


def format_error_for_user(error: FormThemeError | Exception) -> str:
    """Format an error for display to the user with actionable suggestions."""
    if isinstance(error, FormThemeError):
        parts = [error.message]
        if error.suggestion and error.suggestion != error.message:
            parts.append(f"\n\n{error.suggestion}")
        return "".join(parts)

    classified = classify_exception(error)
    return format_error_for_user(classified)

"""Structured error taxonomy for XHTML conversion.

Every fatal condition the engine reports is a :class:`ConversionError` tagged
with an :class:`ErrorKind`. Library-level failures are kept as the error's
cause, both on ``error.cause`` and on the standard ``__cause__`` chain.
"""

from enum import Enum
from typing import Any, Dict, Optional, Type


class ErrorKind(Enum):
    """Exhaustive set of error categories."""

    PARSE_FAILED = "parse_failed"              # Delegate parser rejected the input
    VALIDATION_FAILED = "validation_failed"    # XHTML-strict rule violated
    CONVERSION_FAILED = "conversion_failed"    # Output sink could not be written
    TIMEOUT = "timeout"                        # Cancellation deadline expired
    CANCELED = "canceled"                      # Cancellation explicitly triggered
    INVALID_INPUT = "invalid_input"            # Malformed call arguments


class ConversionError(Exception):
    """Base error carrying a kind, a message and an optional wrapped cause."""

    kind: ErrorKind = ErrorKind.CONVERSION_FAILED

    def __init__(
        self,
        message: str,
        cause: Optional[BaseException] = None,
        context: Optional[Dict[str, Any]] = None,
        kind: Optional[ErrorKind] = None,
    ) -> None:
        super().__init__(message)
        if kind is not None:
            self.kind = kind
        self.message = message
        self.cause = cause
        self.field: Optional[str] = None
        self.context: Dict[str, Any] = dict(context or {})
        if cause is not None:
            self.__cause__ = cause

    def __str__(self) -> str:
        if self.cause is not None:
            return f"[{self.kind.value}] {self.message}: {self.cause}"
        return f"[{self.kind.value}] {self.message}"

    def with_field(self, field_name: str) -> "ConversionError":
        """Attach the name of the offending field and return self."""
        self.field = field_name
        return self

    def with_context(self, key: str, value: Any) -> "ConversionError":
        """Attach a free-form context entry and return self."""
        self.context[key] = value
        return self


class ParseFailedError(ConversionError):
    kind = ErrorKind.PARSE_FAILED


class ValidationFailedError(ConversionError):
    kind = ErrorKind.VALIDATION_FAILED


class ConversionFailedError(ConversionError):
    kind = ErrorKind.CONVERSION_FAILED


class ConversionTimeoutError(ConversionError):
    kind = ErrorKind.TIMEOUT


class ConversionCanceledError(ConversionError):
    kind = ErrorKind.CANCELED


class InvalidInputError(ConversionError):
    kind = ErrorKind.INVALID_INPUT


_ERROR_CLASSES: Dict[ErrorKind, Type[ConversionError]] = {
    ErrorKind.PARSE_FAILED: ParseFailedError,
    ErrorKind.VALIDATION_FAILED: ValidationFailedError,
    ErrorKind.CONVERSION_FAILED: ConversionFailedError,
    ErrorKind.TIMEOUT: ConversionTimeoutError,
    ErrorKind.CANCELED: ConversionCanceledError,
    ErrorKind.INVALID_INPUT: InvalidInputError,
}


def error_for_kind(
    kind: ErrorKind,
    message: str,
    cause: Optional[BaseException] = None,
    context: Optional[Dict[str, Any]] = None,
) -> ConversionError:
    """Build the ConversionError subclass matching ``kind``."""
    return _ERROR_CLASSES[kind](message, cause=cause, context=context)

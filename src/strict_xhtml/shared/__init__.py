"""Shared utilities for XHTML conversion.

This module provides shared data structures, configuration objects, result
types, errors and cancellation tokens used across all processing layers.
"""

from .errors import (
    ConversionCanceledError,
    ConversionError,
    ConversionFailedError,
    ConversionTimeoutError,
    ErrorKind,
    InvalidInputError,
    ParseFailedError,
    ValidationFailedError,
    error_for_kind,
)
from .result import (
    Change,
    ChangeKind,
    ConversionResult,
)
from .config import (
    ConfigError,
    ConfigValidationError,
    ConversionOptions,
    EngineConfig,
    ParserConfig,
)
from .cancellation import CancellationToken
from .logging import (
    CorrelationLogger,
    configure_logging,
    get_logger,
)

__all__ = [
    "ConversionCanceledError",
    "ConversionError",
    "ConversionFailedError",
    "ConversionTimeoutError",
    "ErrorKind",
    "InvalidInputError",
    "ParseFailedError",
    "ValidationFailedError",
    "error_for_kind",
    "Change",
    "ChangeKind",
    "ConversionResult",
    "ConfigError",
    "ConfigValidationError",
    "ConversionOptions",
    "EngineConfig",
    "ParserConfig",
    "CancellationToken",
    "CorrelationLogger",
    "configure_logging",
    "get_logger",
]

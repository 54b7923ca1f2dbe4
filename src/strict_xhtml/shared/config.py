"""Configuration classes for XHTML conversion.

This module provides configuration objects for the conversion engine:
per-call conversion policy, delegate parser settings, and engine-wide
settings such as logging level and input limits.
"""

import json
from dataclasses import dataclass, field, replace
from typing import Any, Dict, List, Optional

VALID_TREE_BACKENDS = ("etree", "lxml")
VALID_LOGGING_LEVELS = ("DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL")


class ConfigError(Exception):
    """Base exception for configuration errors."""


class ConfigValidationError(ConfigError):
    """Exception raised when configuration validation fails."""

    def __init__(self, message: str, field_name: Optional[str] = None,
                 suggestions: Optional[List[str]] = None):
        super().__init__(message)
        self.field_name = field_name
        self.suggestions = suggestions or []


@dataclass(frozen=True)
class ConversionOptions:
    """Policy for a single conversion.

    Attributes:
        strict_mode: Fail fast on any defect; never produce partial output
        auto_fix: Rewrite the document instead of merely checking it
        verbose: Log every applied change at INFO level
        preserve_formatting: Reserved; has no effect on serialization
        validate_only: Caller-level switch honoured by ``process()``
    """

    strict_mode: bool = False
    auto_fix: bool = False
    verbose: bool = False
    preserve_formatting: bool = False
    validate_only: bool = False

    @classmethod
    def strict(cls) -> "ConversionOptions":
        """Fail on the first XHTML-strict violation."""
        return cls(strict_mode=True)

    @classmethod
    def lenient(cls) -> "ConversionOptions":
        """Check without fixing, recording problems instead of failing."""
        return cls()

    @classmethod
    def fixing(cls) -> "ConversionOptions":
        """Rewrite the document into conformant form."""
        return cls(auto_fix=True)

    def override(self, **kwargs: Any) -> "ConversionOptions":
        """Create new options with specific fields replaced."""
        return replace(self, **kwargs)

    def to_dict(self) -> Dict[str, Any]:
        return {
            "strict_mode": self.strict_mode,
            "auto_fix": self.auto_fix,
            "verbose": self.verbose,
            "preserve_formatting": self.preserve_formatting,
            "validate_only": self.validate_only,
        }


@dataclass(frozen=True)
class ParserConfig:
    """Configuration for the delegate HTML parser."""

    tree_backend: str = "etree"        # html5lib tree builder: etree or lxml
    input_encoding: str = "utf-8"      # Used to decode bytes input
    fail_on_parse_errors: bool = False  # html5lib strict parsing
    keep_parse_warnings: bool = True   # Surface html5lib errors as warnings

    def __post_init__(self) -> None:
        """Validate parser configuration."""
        if self.tree_backend not in VALID_TREE_BACKENDS:
            raise ValueError(
                f"tree_backend must be one of {list(VALID_TREE_BACKENDS)}"
            )
        if not self.input_encoding:
            raise ValueError("input_encoding cannot be empty")


@dataclass(frozen=True)
class EngineConfig:
    """Engine-wide configuration.

    Immutable, so one instance can be shared by converters running in
    several threads.
    """

    parser: ParserConfig = field(default_factory=ParserConfig)
    logging_level: str = "WARNING"
    max_input_size_bytes: Optional[int] = None
    enable_metrics: bool = True
    correlation_id: Optional[str] = None

    # Metadata
    name: Optional[str] = None
    description: Optional[str] = None

    def __post_init__(self) -> None:
        """Validate the complete engine configuration."""
        try:
            self.parser.__post_init__()

            if self.logging_level not in VALID_LOGGING_LEVELS:
                raise ValueError(
                    f"logging_level must be one of {list(VALID_LOGGING_LEVELS)}"
                )
            if self.max_input_size_bytes is not None and self.max_input_size_bytes <= 0:
                raise ValueError("max_input_size_bytes must be > 0 or None")

        except ValueError as e:
            raise ConfigValidationError(str(e)) from e

    def override(self, **kwargs: Any) -> "EngineConfig":
        """Create a new configuration with specific overrides.

        Args:
            **kwargs: Fields to override; ``parser__<field>`` targets the
                nested parser configuration

        Returns:
            New EngineConfig instance with overrides applied

        Example:
            >>> config = EngineConfig()
            >>> new_config = config.override(
            ...     parser__tree_backend="lxml",
            ...     max_input_size_bytes=1_000_000
            ... )
        """
        parser_overrides: Dict[str, Any] = {}
        top_level: Dict[str, Any] = {}
        for key, value in kwargs.items():
            if "__" in key:
                component, field_name = key.split("__", 1)
                if component != "parser":
                    raise ConfigValidationError(
                        f"Unknown configuration component: {component}",
                        field_name=key,
                        suggestions=["Use parser__<field> for parser settings"],
                    )
                parser_overrides[field_name] = value
            else:
                top_level[key] = value

        try:
            if parser_overrides:
                top_level["parser"] = replace(self.parser, **parser_overrides)
        except (TypeError, ValueError) as e:
            raise ConfigValidationError(str(e), field_name="parser") from e

        try:
            return replace(self, **top_level)
        except TypeError as e:
            raise ConfigValidationError(str(e)) from e

    def to_dict(self) -> Dict[str, Any]:
        """Convert configuration to dictionary format."""
        return {
            "parser": {
                "tree_backend": self.parser.tree_backend,
                "input_encoding": self.parser.input_encoding,
                "fail_on_parse_errors": self.parser.fail_on_parse_errors,
                "keep_parse_warnings": self.parser.keep_parse_warnings,
            },
            "logging_level": self.logging_level,
            "max_input_size_bytes": self.max_input_size_bytes,
            "enable_metrics": self.enable_metrics,
            "correlation_id": self.correlation_id,
            "name": self.name,
            "description": self.description,
        }

    def to_json(self, indent: int = 2) -> str:
        """Convert configuration to JSON string."""
        return json.dumps(self.to_dict(), indent=indent)

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> "EngineConfig":
        """Create configuration from dictionary.

        Unknown keys are rejected rather than silently ignored.
        """
        known = set(cls.__dataclass_fields__)
        unknown = set(data) - known
        if unknown:
            raise ConfigValidationError(
                f"Unknown configuration fields: {sorted(unknown)}",
                suggestions=[f"Valid fields: {sorted(known)}"],
            )

        values = dict(data)
        parser_data = values.pop("parser", None)
        try:
            if parser_data is not None:
                values["parser"] = ParserConfig(**parser_data)
        except (TypeError, ValueError) as e:
            raise ConfigValidationError(str(e), field_name="parser") from e

        return cls(**values)

    @classmethod
    def from_json(cls, json_str: str) -> "EngineConfig":
        """Create configuration from JSON string."""
        return cls.from_dict(json.loads(json_str))

    # Preset factory methods
    @classmethod
    def default(cls) -> "EngineConfig":
        return cls(name="default")

    @classmethod
    def hardened(cls) -> "EngineConfig":
        """Preset for untrusted input: bounded size, parser errors are fatal."""
        return cls(
            parser=ParserConfig(fail_on_parse_errors=True),
            max_input_size_bytes=10 * 1024 * 1024,
            name="hardened",
            description="Bounded input size and fail-fast delegate parsing",
        )

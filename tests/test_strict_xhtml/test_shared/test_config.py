"""Tests for the configuration system."""

import json

import pytest

from strict_xhtml.shared.config import (
    ConfigError,
    ConfigValidationError,
    ConversionOptions,
    EngineConfig,
    ParserConfig,
)


class TestConversionOptions:
    """Test suite for ConversionOptions."""

    def test_default_options(self):
        """Test default options are lenient with no auto-fix."""
        options = ConversionOptions()

        assert options.strict_mode is False
        assert options.auto_fix is False
        assert options.verbose is False
        assert options.preserve_formatting is False
        assert options.validate_only is False

    def test_presets(self):
        """Test preset factory methods."""
        assert ConversionOptions.strict().strict_mode is True
        assert ConversionOptions.strict().auto_fix is False
        assert ConversionOptions.fixing().auto_fix is True
        assert ConversionOptions.fixing().strict_mode is False
        assert ConversionOptions.lenient() == ConversionOptions()

    def test_override_returns_new_instance(self):
        """Test override leaves the original untouched."""
        options = ConversionOptions.strict()
        verbose = options.override(verbose=True)

        assert verbose.verbose is True
        assert verbose.strict_mode is True
        assert options.verbose is False

    def test_options_are_immutable(self):
        """Test options cannot be mutated after creation."""
        options = ConversionOptions()
        with pytest.raises(AttributeError):
            options.strict_mode = True

    def test_to_dict(self):
        """Test dictionary conversion."""
        data = ConversionOptions.fixing().to_dict()
        assert data == {
            "strict_mode": False,
            "auto_fix": True,
            "verbose": False,
            "preserve_formatting": False,
            "validate_only": False,
        }


class TestParserConfig:
    """Test suite for ParserConfig."""

    def test_default_configuration(self):
        """Test default parser configuration values."""
        config = ParserConfig()

        assert config.tree_backend == "etree"
        assert config.input_encoding == "utf-8"
        assert config.fail_on_parse_errors is False
        assert config.keep_parse_warnings is True

    def test_invalid_tree_backend(self):
        """Test unknown tree backends are rejected."""
        with pytest.raises(ValueError, match="tree_backend must be one of"):
            ParserConfig(tree_backend="minidom")

    def test_empty_encoding(self):
        """Test an empty input encoding is rejected."""
        with pytest.raises(ValueError, match="input_encoding cannot be empty"):
            ParserConfig(input_encoding="")


class TestEngineConfig:
    """Test suite for EngineConfig."""

    def test_default_configuration(self):
        """Test default engine configuration values."""
        config = EngineConfig()

        assert config.parser == ParserConfig()
        assert config.logging_level == "WARNING"
        assert config.max_input_size_bytes is None
        assert config.enable_metrics is True
        assert config.correlation_id is None

    def test_invalid_logging_level(self):
        """Test invalid logging levels raise ConfigValidationError."""
        with pytest.raises(ConfigValidationError, match="logging_level must be one of"):
            EngineConfig(logging_level="VERBOSE")

    def test_invalid_size_limit(self):
        """Test non-positive size limits are rejected."""
        with pytest.raises(ConfigValidationError, match="max_input_size_bytes"):
            EngineConfig(max_input_size_bytes=0)

    def test_validation_error_is_config_error(self):
        """Test the exception hierarchy."""
        assert issubclass(ConfigValidationError, ConfigError)

    def test_override_nested_parser_field(self):
        """Test component__field notation targets the parser config."""
        config = EngineConfig().override(
            parser__tree_backend="lxml",
            max_input_size_bytes=1024,
        )

        assert config.parser.tree_backend == "lxml"
        assert config.max_input_size_bytes == 1024

    def test_override_unknown_component(self):
        """Test unknown components are reported with a suggestion."""
        with pytest.raises(ConfigValidationError) as exc_info:
            EngineConfig().override(tokenizer__mode="fast")

        assert exc_info.value.field_name == "tokenizer__mode"
        assert exc_info.value.suggestions

    def test_override_invalid_parser_value(self):
        """Test invalid nested values surface as ConfigValidationError."""
        with pytest.raises(ConfigValidationError, match="tree_backend"):
            EngineConfig().override(parser__tree_backend="dom")

    def test_override_unknown_parser_field(self):
        """Test unknown nested fields surface as ConfigValidationError."""
        with pytest.raises(ConfigValidationError) as exc_info:
            EngineConfig().override(parser__bogus=1)

        assert exc_info.value.field_name == "parser"
        assert isinstance(exc_info.value.__cause__, TypeError)

    def test_override_unknown_field(self):
        """Test unknown top-level fields surface as ConfigValidationError."""
        with pytest.raises(ConfigValidationError, match="bogus"):
            EngineConfig().override(bogus=1)

    def test_dict_round_trip(self):
        """Test to_dict/from_dict preserve every field."""
        config = EngineConfig.hardened().override(correlation_id="abc")
        restored = EngineConfig.from_dict(config.to_dict())

        assert restored == config

    def test_json_round_trip(self):
        """Test to_json/from_json preserve every field."""
        config = EngineConfig(logging_level="DEBUG", enable_metrics=False)
        payload = config.to_json()

        assert json.loads(payload)["logging_level"] == "DEBUG"
        assert EngineConfig.from_json(payload) == config

    def test_from_dict_rejects_unknown_fields(self):
        """Test unknown keys are not silently ignored."""
        with pytest.raises(ConfigValidationError, match="Unknown configuration fields"):
            EngineConfig.from_dict({"logging_level": "INFO", "retries": 3})

    def test_from_dict_invalid_parser(self):
        """Test invalid parser sections are wrapped."""
        with pytest.raises(ConfigValidationError) as exc_info:
            EngineConfig.from_dict({"parser": {"tree_backend": "dom"}})

        assert exc_info.value.field_name == "parser"

    def test_presets(self):
        """Test preset factory methods."""
        assert EngineConfig.default().name == "default"

        hardened = EngineConfig.hardened()
        assert hardened.parser.fail_on_parse_errors is True
        assert hardened.max_input_size_bytes == 10 * 1024 * 1024

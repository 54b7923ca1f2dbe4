"""Tests for change records and conversion results."""

import pytest

from strict_xhtml.shared import (
    Change,
    ChangeKind,
    ConversionResult,
    ValidationFailedError,
)


class TestChange:
    """Test suite for Change."""

    def test_empty_message_rejected(self):
        """Test a change must describe itself."""
        with pytest.raises(ValueError, match="Change message cannot be empty"):
            Change(ChangeKind.UPPERCASE_TAG, "", "DIV", "div")

    def test_to_dict_without_location(self):
        """Test location is omitted when unknown."""
        change = Change(ChangeKind.UNCLOSED_TAG, "Void element must be self-closing",
                        "<br>", "<br />")
        assert change.to_dict() == {
            "kind": "UNCLOSED_TAG",
            "message": "Void element must be self-closing",
            "original": "<br>",
            "fixed": "<br />",
        }

    def test_to_dict_with_location(self):
        """Test location is included when known."""
        change = Change(ChangeKind.UPPERCASE_TAG, "Converted tag to lowercase",
                        "DIV", "div", location="html>body>div")
        assert change.to_dict()["location"] == "html>body>div"


class TestConversionResult:
    """Test suite for ConversionResult."""

    def test_defaults(self):
        """Test an empty result is successful with zero sizes."""
        result = ConversionResult()

        assert result.success is True
        assert result.output_size == 0
        assert result.change_count == 0

    def test_output_size_tracks_output(self):
        """Test output_size is always the output length."""
        result = ConversionResult(output=b"<p>x</p>")
        assert result.output_size == 8

        result.output = b""
        assert result.output_size == 0

    def test_success_depends_on_errors(self):
        """Test recorded errors make the result unsuccessful."""
        result = ConversionResult()
        result.errors.append(ValidationFailedError("tag must be lowercase: DIV"))

        assert result.success is False

    def test_changes_by_kind(self):
        """Test change tallies per kind."""
        result = ConversionResult(changes=[
            Change(ChangeKind.UNQUOTED_ATTRIBUTE, "Attribute value must be quoted", "a=1", 'a="1"'),
            Change(ChangeKind.UNQUOTED_ATTRIBUTE, "Attribute value must be quoted", "b=2", 'b="2"'),
            Change(ChangeKind.UNCLOSED_TAG, "Void element must be self-closing", "<br>", "<br />"),
        ])

        assert result.changes_by_kind() == {
            ChangeKind.UNQUOTED_ATTRIBUTE: 2,
            ChangeKind.UNCLOSED_TAG: 1,
        }

    def test_to_dict(self):
        """Test dictionary conversion decodes the output."""
        result = ConversionResult(output=b"<p>\xc3\xa9</p>", input_size=9)
        result.warnings.append("line 1, column 4: Unexpected start tag (p). Expected DOCTYPE.")
        data = result.to_dict()

        assert data["output"] == "<p>é</p>"
        assert data["input_size"] == 9
        assert data["output_size"] == 9
        assert data["warning_count"] == 1
        assert data["errors"] == []
        assert data["success"] is True

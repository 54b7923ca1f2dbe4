"""Tests for cooperative cancellation of conversions."""

from typing import Optional

import pytest

from strict_xhtml.api import XHTMLConverter
from strict_xhtml.metrics import ConversionMetrics
from strict_xhtml.shared import (
    CancellationToken,
    ConversionCanceledError,
    ConversionOptions,
    ConversionTimeoutError,
    ErrorKind,
    ValidationFailedError,
)

CONVERSION_CHECKPOINTS = ["before_scanning", "after_parsing", "after_validation", "before_result"]


class FiringToken(CancellationToken):
    """Token that fires from its ``fire_on``-th poll onwards."""

    def __init__(self, fire_on: Optional[int], kind: ErrorKind = ErrorKind.CANCELED) -> None:
        super().__init__()
        self.fire_on = fire_on
        self.kind = kind
        self.polls = 0

    def poll(self) -> Optional[ErrorKind]:
        self.polls += 1
        if self.fire_on is not None and self.polls >= self.fire_on:
            return self.kind
        return None


@pytest.fixture
def metrics() -> ConversionMetrics:
    return ConversionMetrics()


@pytest.fixture
def converter(metrics) -> XHTMLConverter:
    return XHTMLConverter(metrics=metrics)


class TestConvertWithCancellation:
    """Test suite for convert_with_cancellation."""

    def test_untriggered_token_completes(self, converter):
        """Test a quiet token is polled at all four checkpoints."""
        token = FiringToken(fire_on=None)
        result = converter.convert_with_cancellation(token, b"<br>", ConversionOptions.fixing())

        assert result.output == b"<html><head></head><body><br /></body></html>"
        assert token.polls == 4

    def test_pre_cancelled_token(self, converter, metrics):
        """Test a cancelled token aborts before any work."""
        token = CancellationToken()
        token.cancel()

        with pytest.raises(ConversionCanceledError) as exc_info:
            converter.convert_with_cancellation(token, b"<p>x</p>")

        assert exc_info.value.context["checkpoint"] == "before_scanning"
        stats = metrics.snapshot()
        assert stats.failed_conversions == 1
        assert stats.errors_by_kind == {ErrorKind.CANCELED: 1}

    def test_expired_deadline(self, converter, metrics):
        """Test an expired deadline aborts with a timeout."""
        token = CancellationToken.with_timeout(0)

        with pytest.raises(ConversionTimeoutError):
            converter.convert_with_cancellation(token, b"<p>x</p>")

        assert metrics.snapshot().errors_by_kind == {ErrorKind.TIMEOUT: 1}

    @pytest.mark.parametrize("fire_on,checkpoint", list(enumerate(CONVERSION_CHECKPOINTS, start=1)))
    def test_each_checkpoint(self, converter, metrics, fire_on, checkpoint):
        """Test cancellation observed at each checkpoint aborts without a result."""
        token = FiringToken(fire_on=fire_on)

        with pytest.raises(ConversionCanceledError) as exc_info:
            converter.convert_with_cancellation(
                token, b"<IMG src=a.png>", ConversionOptions.fixing()
            )

        assert exc_info.value.context["checkpoint"] == checkpoint
        assert token.polls == fire_on
        stats = metrics.snapshot()
        assert stats.total_conversions == 1
        assert stats.failed_conversions == 1
        assert stats.changes_applied == {}

    @pytest.mark.parametrize("fire_on", [1, 2, 3, 4])
    def test_timeout_at_each_checkpoint(self, converter, fire_on):
        """Test time-based tokens report a timeout at every checkpoint."""
        token = FiringToken(fire_on=fire_on, kind=ErrorKind.TIMEOUT)

        with pytest.raises(ConversionTimeoutError):
            converter.convert_with_cancellation(token, b"<p>x</p>")

    def test_strict_failure_precedes_later_checkpoints(self, converter):
        """Test a defect raised in a phase is reported before the next poll."""
        token = FiringToken(fire_on=2)

        with pytest.raises(ValidationFailedError):
            converter.convert_with_cancellation(token, b"<P>x</P>", ConversionOptions.strict())

        assert token.polls == 1


class TestValidateWithCancellation:
    """Test suite for validate_with_cancellation."""

    def test_untriggered_token(self, converter):
        """Test validation polls three checkpoints and passes."""
        token = FiringToken(fire_on=None)
        converter.validate_with_cancellation(token, b"<p>ok</p>")

        assert token.polls == 3

    @pytest.mark.parametrize("fire_on,checkpoint", list(enumerate(CONVERSION_CHECKPOINTS[:3], start=1)))
    def test_each_checkpoint(self, converter, metrics, fire_on, checkpoint):
        """Test cancellation aborts validation without touching metrics."""
        token = FiringToken(fire_on=fire_on)

        with pytest.raises(ConversionCanceledError) as exc_info:
            converter.validate_with_cancellation(token, b"<p>ok</p>")

        assert exc_info.value.context["checkpoint"] == checkpoint
        assert metrics.snapshot().total_conversions == 0

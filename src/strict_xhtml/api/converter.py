"""Conversion orchestrator and module-level convenience functions.

A conversion moves through Scanning, Parsing, Validating-or-Fixing and
Serializing to Done. Any fatal condition aborts it with a raised
:class:`~strict_xhtml.shared.ConversionError`; recoverable problems in
lenient mode are recorded on the returned result instead.
"""

import io
import logging
import time
from typing import Optional, Union

from strict_xhtml.metrics import ConversionMetrics, MetricsCollector, NoOpMetrics
from strict_xhtml.scanning import DefectScanner
from strict_xhtml.shared import (
    CancellationToken,
    ConversionError,
    ConversionFailedError,
    ConversionOptions,
    ConversionResult,
    EngineConfig,
    InvalidInputError,
    ParseFailedError,
    ValidationFailedError,
    configure_logging,
    error_for_kind,
    get_logger,
)
from strict_xhtml.tree import (
    CanonicalSerializer,
    Document,
    HTMLTreeParser,
    ParsedDocument,
    TreeBuildError,
    TreeNormalizer,
    TreeValidator,
    TreeViolation,
)

# Type definitions for input data
InputType = Union[str, bytes, bytearray]


class XHTMLConverter:
    """Convert HTML into XHTML-strict markup.

    The converter holds no per-conversion state, so one instance may serve
    several threads at once. The only shared state is the metrics collector.

    Examples:
        Auto-fix a sloppy document:
        >>> converter = XHTMLConverter()
        >>> result = converter.convert(b"<img src=pic.jpg>", ConversionOptions.fixing())
        >>> result.output
        b'<html><head></head><body><img src="pic.jpg" /></body></html>'

        Strict checking:
        >>> converter.convert(b"<HTML></HTML>", ConversionOptions.strict())
        Traceback (most recent call last):
        ...
        strict_xhtml.shared.errors.ValidationFailedError: [validation_failed] Tag must be lowercase: HTML
    """

    def __init__(
        self,
        config: Optional[EngineConfig] = None,
        metrics: Optional[MetricsCollector] = None,
        parser: Optional[HTMLTreeParser] = None,
        serializer: Optional[CanonicalSerializer] = None,
        correlation_id: Optional[str] = None
    ) -> None:
        """Initialize converter.

        Args:
            config: Engine configuration (defaults to ``EngineConfig()``); an
                explicitly supplied config also applies its logging level
            metrics: Collector to report to; a private ``ConversionMetrics``
                is created when omitted. Ignored when metrics are disabled.
            parser: Delegate parser override
            serializer: Serializer override
            correlation_id: Optional correlation ID for conversion tracking
        """
        if config is not None:
            configure_logging(config.logging_level)
        self.config = config or EngineConfig()
        self.correlation_id = correlation_id or self.config.correlation_id
        self.logger = get_logger(__name__, self.correlation_id, "xhtml_converter")

        if not self.config.enable_metrics:
            self._metrics: MetricsCollector = NoOpMetrics()
        else:
            self._metrics = metrics if metrics is not None else ConversionMetrics(
                correlation_id=self.correlation_id
            )

        self._scanner = DefectScanner(correlation_id=self.correlation_id)
        self._parser = parser or HTMLTreeParser(
            config=self.config.parser, correlation_id=self.correlation_id
        )
        self._validator = TreeValidator(correlation_id=self.correlation_id)
        self._normalizer = TreeNormalizer(correlation_id=self.correlation_id)
        self._serializer = serializer or CanonicalSerializer(
            correlation_id=self.correlation_id
        )

    @property
    def metrics(self) -> MetricsCollector:
        return self._metrics

    def convert(
        self,
        data: InputType,
        options: Optional[ConversionOptions] = None
    ) -> ConversionResult:
        """Convert ``data`` to XHTML-strict.

        Args:
            data: HTML as bytes (decoded with the configured input encoding)
                or text
            options: Conversion policy (defaults to lenient, no auto-fix)

        Returns:
            ConversionResult with the UTF-8 output and applied changes

        Raises:
            ConversionError: Subclass matching the kind of fatal condition
        """
        return self._execute(data, options or ConversionOptions(), None)

    def convert_with_cancellation(
        self,
        token: CancellationToken,
        data: InputType,
        options: Optional[ConversionOptions] = None
    ) -> ConversionResult:
        """Convert like :meth:`convert`, polling ``token`` between phases.

        Raises:
            ConversionCanceledError: If the token was cancelled
            ConversionTimeoutError: If the token's deadline passed
        """
        return self._execute(data, options or ConversionOptions(), token)

    def validate(self, data: InputType) -> None:
        """Check ``data`` without converting it; returns only if it conforms.

        Raises:
            ValidationFailedError: On the first textual or structural violation
            ParseFailedError: If the delegate parser rejects the input
        """
        self._validate(data, None)

    def validate_with_cancellation(self, token: CancellationToken, data: InputType) -> None:
        """Validate like :meth:`validate`, polling ``token`` between phases."""
        self._validate(data, token)

    def process(
        self,
        data: InputType,
        options: Optional[ConversionOptions] = None
    ) -> Optional[ConversionResult]:
        """Validate or convert depending on ``options.validate_only``.

        Returns None after a successful validation, otherwise the conversion
        result.
        """
        options = options or ConversionOptions()
        if options.validate_only:
            self.validate(data)
            return None
        return self.convert(data, options)

    def _execute(
        self,
        data: InputType,
        options: ConversionOptions,
        token: Optional[CancellationToken]
    ) -> ConversionResult:
        """Run one conversion and report its outcome to the metrics collector."""
        start_time = time.time()

        try:
            result = self._run_pipeline(data, options, token)
        except ConversionError as e:
            self._metrics.record_failure(e.kind)
            self.logger.warning(
                "Conversion aborted",
                extra={
                    "error_kind": e.kind.value,
                    "error": str(e),
                    "processing_time_ms": (time.time() - start_time) * 1000,
                }
            )
            raise

        duration = time.time() - start_time
        self._metrics.record_success(duration, result.input_size, result.output_size)
        for change in result.changes:
            self._metrics.record_change(change.kind)

        self.logger.info(
            "Conversion completed",
            extra={
                "success": result.success,
                "input_size": result.input_size,
                "output_size": result.output_size,
                "change_count": result.change_count,
                "error_count": len(result.errors),
                "processing_time_ms": duration * 1000,
            }
        )
        return result

    def _run_pipeline(
        self,
        data: InputType,
        options: ConversionOptions,
        token: Optional[CancellationToken]
    ) -> ConversionResult:
        raw, text = self._decode(data)
        result = ConversionResult(input_size=len(raw))
        self._checkpoint(token, "before_scanning")

        # Scanning
        if options.strict_mode or options.auto_fix:
            defects = self._scanner.scan(text)
            if options.strict_mode and defects:
                raise ValidationFailedError(
                    defects[0].describe(),
                    context={"defect_count": len(defects)},
                )
            if options.auto_fix:
                result.changes.extend(defect.to_change() for defect in defects)

        # Parsing
        try:
            parsed = self._parse(text)
        except ParseFailedError as e:
            if options.strict_mode:
                raise
            result.errors.append(e)
            parsed = ParsedDocument(document=Document())
        result.warnings.extend(parsed.parse_errors)
        document = parsed.document
        self._checkpoint(token, "after_parsing")

        # Validating or fixing
        if options.auto_fix:
            result.changes.extend(self._normalizer.normalize(document))
        else:
            violation = self._validator.validate(document)
            if violation is not None:
                error = _violation_error(violation)
                if options.strict_mode:
                    raise error
                result.errors.append(error)
        self._checkpoint(token, "after_validation")

        # Serializing
        buffer = io.BytesIO()
        try:
            self._serializer.write(document, buffer)
        except (OSError, ValueError) as e:
            self.logger.error("Serialization failed", extra={"error": str(e)})
            raise ConversionFailedError("failed to render XHTML", cause=e) from e
        result.output = buffer.getvalue()

        self._log_changes(result, options)
        self._checkpoint(token, "before_result")
        return result

    def _validate(self, data: InputType, token: Optional[CancellationToken]) -> None:
        _, text = self._decode(data)
        self._checkpoint(token, "before_scanning")

        defects = self._scanner.scan(text)
        if defects:
            raise ValidationFailedError(
                defects[0].describe(),
                context={"defect_count": len(defects)},
            )

        document = self._parse(text).document
        self._checkpoint(token, "after_parsing")

        violation = self._validator.validate(document)
        if violation is not None:
            raise _violation_error(violation)
        self._checkpoint(token, "after_validation")

        self.logger.debug("Validation passed", extra={"content_length": len(text)})

    def _decode(self, data: InputType):
        """Return ``(raw_bytes, text)`` for supported input, enforcing the size limit."""
        if isinstance(data, (bytes, bytearray)):
            raw = bytes(data)
            text = raw.decode(self.config.parser.input_encoding, errors="replace")
        elif isinstance(data, str):
            text = data
            try:
                raw = data.encode("utf-8")
            except UnicodeEncodeError as e:
                raise InvalidInputError(
                    "text input is not encodable as UTF-8", cause=e
                ).with_field("data") from e
        else:
            raise InvalidInputError(
                f"input must be bytes or str, not {type(data).__name__}"
            ).with_field("data")

        limit = self.config.max_input_size_bytes
        if limit is not None and len(raw) > limit:
            raise InvalidInputError(
                f"input of {len(raw)} bytes exceeds limit of {limit} bytes",
                context={"input_size": len(raw), "max_input_size_bytes": limit},
            ).with_field("data")

        return raw, text

    def _parse(self, text: str) -> ParsedDocument:
        try:
            return self._parser.parse(text)
        except TreeBuildError as e:
            raise ParseFailedError("failed to parse HTML", cause=e) from e

    def _checkpoint(self, token: Optional[CancellationToken], checkpoint: str) -> None:
        """Raise the matching error if ``token`` has fired."""
        if token is None:
            return
        kind = token.poll()
        if kind is None:
            return
        raise error_for_kind(
            kind,
            f"conversion {kind.value}",
            context={"checkpoint": checkpoint},
        )

    def _log_changes(self, result: ConversionResult, options: ConversionOptions) -> None:
        log = self.logger.info if options.verbose else self.logger.debug
        if not self.logger.is_enabled_for(logging.INFO if options.verbose else logging.DEBUG):
            return
        for change in result.changes:
            log(
                "Applied change",
                extra={
                    "change_kind": change.kind.name,
                    "description": change.message,
                    "original": change.original,
                    "fixed": change.fixed,
                    "location": change.location,
                }
            )


def _violation_error(violation: TreeViolation) -> ValidationFailedError:
    return ValidationFailedError(
        violation.message,
        context={"rule": violation.rule.value, "location": violation.location},
    )


def convert(
    data: InputType,
    options: Optional[ConversionOptions] = None,
    correlation_id: Optional[str] = None
) -> ConversionResult:
    """Convert ``data`` with a default converter.

    Examples:
        >>> convert("<p>A & B</p>").output
        b'<html><head></head><body><p>A &amp; B</p></body></html>'
    """
    return XHTMLConverter(correlation_id=correlation_id).convert(data, options)


def validate(data: InputType, correlation_id: Optional[str] = None) -> None:
    """Validate ``data`` with a default converter."""
    XHTMLConverter(correlation_id=correlation_id).validate(data)


def process(
    data: InputType,
    options: Optional[ConversionOptions] = None,
    correlation_id: Optional[str] = None
) -> Optional[ConversionResult]:
    """Validate or convert ``data`` with a default converter, per ``options``."""
    return XHTMLConverter(correlation_id=correlation_id).process(data, options)

"""Strict XHTML.

An HTML to XHTML-strict conformance engine: it checks markup against the
XHTML-strict rules, optionally rewrites it into conformant form, and renders
a canonical UTF-8 serialization suitable for hashing or signing.

Progressive API Disclosure:
- Level 1: Simple functions - convert(), validate(), process()
- Level 2: Configured converter - XHTMLConverter class
- Level 3: Cancellation and shared metrics - CancellationToken, ConversionMetrics
"""

__version__ = "0.1.0"
__author__ = "Strict XHTML Team"

# Progressive API disclosure - Level 1: Simple functions
# Progressive API disclosure - Level 2: Configured converter
from .api import XHTMLConverter, convert, process, validate

# Level 3: Metrics and cancellation
from .metrics import ConversionMetrics, ConversionStatistics, MetricsCollector, NoOpMetrics
from .shared.cancellation import CancellationToken

# Configuration classes for advanced usage
from .shared.config import ConversionOptions, EngineConfig, ParserConfig

# Core result and error objects for all API levels
from .shared.errors import ConversionError, ErrorKind
from .shared.result import Change, ChangeKind, ConversionResult

__all__ = [
    # Version and metadata
    "__author__",
    "__version__",

    # Level 1: Simple conversion functions
    "convert",
    "validate",
    "process",

    # Level 2: Configured converter
    "XHTMLConverter",

    # Level 3: Metrics and cancellation
    "CancellationToken",
    "ConversionMetrics",
    "ConversionStatistics",
    "MetricsCollector",
    "NoOpMetrics",

    # Configuration classes
    "ConversionOptions",
    "EngineConfig",
    "ParserConfig",

    # Result and error objects
    "Change",
    "ChangeKind",
    "ConversionError",
    "ConversionResult",
    "ErrorKind",
]

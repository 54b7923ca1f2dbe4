"""Public conversion API.

Key Components:
    XHTMLConverter: Reusable converter with strict, lenient and auto-fix policies
    convert / validate / process: One-shot helpers using a default converter
"""

from .converter import XHTMLConverter, convert, process, validate

__all__ = [
    "XHTMLConverter",
    "convert",
    "process",
    "validate",
]

"""Raw-text defect scanning for XHTML-strict conformance.

Key Components:
    DefectScanner: Regex pre-pass run before the document is parsed
    Defect: Immutable record of one textual violation
    DefectKind: Categories of textual violations, in scan order
"""

from .scanner import (
    FOREIGN_CASED_NAMES,
    VOID_ELEMENTS,
    Defect,
    DefectKind,
    DefectScanner,
    count_defects_by_kind,
    is_void_element,
)

__all__ = [
    "FOREIGN_CASED_NAMES",
    "VOID_ELEMENTS",
    "Defect",
    "DefectKind",
    "DefectScanner",
    "count_defects_by_kind",
    "is_void_element",
]

"""Result objects for XHTML conversion.

This module defines the change records produced by auto-fix and the
conversion result handed back to callers.
"""

from dataclasses import dataclass, field
from enum import Enum, auto
from typing import Any, Dict, List, Optional

from strict_xhtml.shared.errors import ConversionError


class ChangeKind(Enum):
    """Categories of mutations applied during auto-fix."""

    UNCLOSED_TAG = auto()         # Void element rewritten as self-closing
    UNQUOTED_ATTRIBUTE = auto()   # Attribute value quoted or name lowercased
    UPPERCASE_TAG = auto()        # Tag name lowercased
    INVALID_NESTING = auto()      # Reserved: nesting repaired
    MISSING_NAMESPACE = auto()    # Reserved: namespace declaration added


@dataclass(frozen=True)
class Change:
    """One mutation actually applied to the document."""

    kind: ChangeKind
    message: str
    original: str
    fixed: str
    location: Optional[str] = None  # DOM path, e.g. html>body>div[1]>p

    def __post_init__(self) -> None:
        """Validate change record."""
        if not self.message:
            raise ValueError("Change message cannot be empty")

    def to_dict(self) -> Dict[str, Any]:
        """Convert change to dictionary representation."""
        result: Dict[str, Any] = {
            "kind": self.kind.name,
            "message": self.message,
            "original": self.original,
            "fixed": self.fixed,
        }
        if self.location is not None:
            result["location"] = self.location
        return result


@dataclass
class ConversionResult:
    """Outcome of a completed conversion.

    ``errors`` only ever holds recovered, non-fatal problems from lenient
    mode; fatal problems are raised instead of being returned.
    """

    output: bytes = b""
    input_size: int = 0
    changes: List[Change] = field(default_factory=list)
    errors: List[ConversionError] = field(default_factory=list)
    warnings: List[str] = field(default_factory=list)

    @property
    def output_size(self) -> int:
        """Size of the serialized output in bytes."""
        return len(self.output)

    @property
    def success(self) -> bool:
        """True when no errors had to be recovered from."""
        return not self.errors

    @property
    def change_count(self) -> int:
        return len(self.changes)

    def changes_by_kind(self) -> Dict[ChangeKind, int]:
        """Count recorded changes per kind."""
        counts: Dict[ChangeKind, int] = {}
        for change in self.changes:
            counts[change.kind] = counts.get(change.kind, 0) + 1
        return counts

    def summary(self) -> Dict[str, Any]:
        """Get a compact summary of the conversion."""
        return {
            "success": self.success,
            "input_size": self.input_size,
            "output_size": self.output_size,
            "change_count": self.change_count,
            "error_count": len(self.errors),
            "warning_count": len(self.warnings),
            "changes_by_kind": {
                kind.name: count for kind, count in self.changes_by_kind().items()
            },
        }

    def to_dict(self) -> Dict[str, Any]:
        """Convert result to dictionary representation (output decoded as UTF-8)."""
        result = self.summary()
        result["output"] = self.output.decode("utf-8")
        result["changes"] = [change.to_dict() for change in self.changes]
        result["errors"] = [str(error) for error in self.errors]
        result["warnings"] = list(self.warnings)
        return result

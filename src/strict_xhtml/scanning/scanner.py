"""Pattern-based defect scanning over raw markup.

The delegate HTML parser silently repairs much of what makes a document
non-conformant (it lowercases names, drops quoting information and closes
void elements). This scanner looks at the text *before* parsing so those
defects can still be reported.
"""

import re
from dataclasses import dataclass
from enum import Enum, auto
from typing import Callable, Dict, List, Optional, Set, Tuple

from html5lib.constants import adjustMathMLAttributes, adjustSVGAttributes

from strict_xhtml.shared import Change, ChangeKind, get_logger

# Elements that can never have children and must be written self-closing
VOID_ELEMENTS = frozenset({
    "area", "base", "br", "col", "embed", "hr", "img", "input",
    "link", "meta", "param", "source", "track", "wbr",
})

# Mixed-case SVG element names the HTML parser gives foreign content
SVG_CASED_ELEMENTS = frozenset({
    "altGlyph", "altGlyphDef", "altGlyphItem", "animateColor", "animateMotion",
    "animateTransform", "clipPath", "feBlend", "feColorMatrix",
    "feComponentTransfer", "feComposite", "feConvolveMatrix",
    "feDiffuseLighting", "feDisplacementMap", "feDistantLight", "feFlood",
    "feFuncA", "feFuncB", "feFuncG", "feFuncR", "feGaussianBlur", "feImage",
    "feMerge", "feMergeNode", "feMorphology", "feOffset", "fePointLight",
    "feSpecularLighting", "feSpotLight", "feTile", "feTurbulence",
    "foreignObject", "glyphRef", "linearGradient", "radialGradient", "textPath",
})

# Names written in their canonical mixed case are not casing defects
FOREIGN_CASED_NAMES = (
    SVG_CASED_ELEMENTS
    | frozenset(adjustSVGAttributes.values())
    | frozenset(adjustMathMLAttributes.values())
)

_TAG_NAME_RE = re.compile(r"</?([A-Za-z][A-Za-z0-9]*)")
_ATTRIBUTE_NAME_RE = re.compile(r"\s([A-Za-z][A-Za-z0-9_:-]*)=")
_UNQUOTED_ATTRIBUTE_RE = re.compile(r"\s([\w:-]+)=([^\s\"'>][^\s>]*)")
_UNCLOSED_VOID_RE = re.compile(
    r"<(" + "|".join(sorted(VOID_ELEMENTS)) + r")(\s[^>]*)?>",
    re.IGNORECASE,
)


class DefectKind(Enum):
    """Text-level XHTML-strict violations, in scan order."""

    UPPERCASE_TAG = auto()
    UPPERCASE_ATTRIBUTE = auto()
    UNQUOTED_ATTRIBUTE = auto()
    UNCLOSED_VOID_ELEMENT = auto()


_CHANGE_KINDS: Dict[DefectKind, ChangeKind] = {
    DefectKind.UPPERCASE_TAG: ChangeKind.UPPERCASE_TAG,
    DefectKind.UPPERCASE_ATTRIBUTE: ChangeKind.UNQUOTED_ATTRIBUTE,
    DefectKind.UNQUOTED_ATTRIBUTE: ChangeKind.UNQUOTED_ATTRIBUTE,
    DefectKind.UNCLOSED_VOID_ELEMENT: ChangeKind.UNCLOSED_TAG,
}


@dataclass(frozen=True)
class Defect:
    """One textual violation found by the scanner."""

    kind: DefectKind
    message: str
    original: str
    fixed: str
    line: int = 1
    column: int = 1

    def describe(self) -> str:
        """Human-readable form used for strict-mode errors."""
        return f"{self.message}: {self.original}"

    def to_change(self) -> Change:
        """Map this defect to the change auto-fix will apply for it."""
        return Change(
            kind=_CHANGE_KINDS[self.kind],
            message=self.message,
            original=self.original,
            fixed=self.fixed,
            location=f"line {self.line}, column {self.column}",
        )


# Extractors return the (original, fixed) pair for a match, or None when the
# match is not a defect.
_Extractor = Callable[[re.Match], Optional[Tuple[str, str]]]


def _uppercase_name(match: re.Match) -> Optional[Tuple[str, str]]:
    name = match.group(1)
    if name == name.lower() or name in FOREIGN_CASED_NAMES:
        return None
    return name, name.lower()


def _unquoted_value(match: re.Match) -> Optional[Tuple[str, str]]:
    name, value = match.group(1), match.group(2)
    return f"{name}={value}", f'{name}="{value}"'


def _unclosed_void(match: re.Match) -> Optional[Tuple[str, str]]:
    attributes = match.group(2) or ""
    if attributes.rstrip().endswith("/"):
        return None
    name = match.group(1)
    return f"<{name}>", f"<{name.lower()} />"


_PATTERN_CLASSES: List[Tuple[DefectKind, str, re.Pattern, _Extractor]] = [
    (DefectKind.UPPERCASE_TAG, "Tag must be lowercase",
     _TAG_NAME_RE, _uppercase_name),
    (DefectKind.UPPERCASE_ATTRIBUTE, "Attribute must be lowercase",
     _ATTRIBUTE_NAME_RE, _uppercase_name),
    (DefectKind.UNQUOTED_ATTRIBUTE, "Attribute value must be quoted",
     _UNQUOTED_ATTRIBUTE_RE, _unquoted_value),
    (DefectKind.UNCLOSED_VOID_ELEMENT, "Void element must be self-closing",
     _UNCLOSED_VOID_RE, _unclosed_void),
]


def is_void_element(name: str) -> bool:
    """Check whether ``name`` is one of the fixed void element names."""
    return name in VOID_ELEMENTS


class DefectScanner:
    """Scan raw markup for XHTML-strict defects.

    Scanning is a pure function of the input text. Defects come back grouped
    by pattern class in a fixed order (tag casing, attribute casing, unquoted
    values, unclosed void elements) and, within a class, in order of first
    appearance, each distinct text reported once.

    Examples:
        >>> scanner = DefectScanner()
        >>> defects = scanner.scan("<HTML><BR></HTML>")
        >>> defects[0].describe()
        'Tag must be lowercase: HTML'
        >>> [d.original for d in defects]
        ['HTML', 'BR', '<BR>']
    """

    def __init__(self, correlation_id: Optional[str] = None) -> None:
        self.correlation_id = correlation_id
        self.logger = get_logger(__name__, correlation_id, "defect_scanner")

    def scan(self, text: str) -> List[Defect]:
        """Return every defect found in ``text``."""
        defects: List[Defect] = []

        for kind, message, pattern, extract in _PATTERN_CLASSES:
            seen: Set[str] = set()
            for match in pattern.finditer(text):
                extracted = extract(match)
                if extracted is None:
                    continue
                original, fixed = extracted
                if original in seen:
                    continue
                seen.add(original)

                line, column = _position(text, match.start(1))
                defects.append(Defect(
                    kind=kind,
                    message=message,
                    original=original,
                    fixed=fixed,
                    line=line,
                    column=column,
                ))

        self.logger.debug(
            "Defect scan completed",
            extra={
                "content_length": len(text),
                "defect_count": len(defects),
            }
        )
        return defects


def _position(text: str, offset: int) -> Tuple[int, int]:
    """Translate a character offset into a 1-based (line, column) pair."""
    line = text.count("\n", 0, offset) + 1
    line_start = text.rfind("\n", 0, offset) + 1
    return line, offset - line_start + 1


def count_defects_by_kind(defects: List[Defect]) -> Dict[DefectKind, int]:
    """Count defects per kind."""
    counts: Dict[DefectKind, int] = {}
    for defect in defects:
        counts[defect.kind] = counts.get(defect.kind, 0) + 1
    return counts

"""Structural validation and normalization of parsed documents.

Both walkers visit nodes depth-first in document order, parent before
children. The validator stops at the first violation; the normalizer rewrites
names in place and reports what it changed.

Foreign content (SVG and MathML) is exempt from the casing rules: html5lib
gives names such as ``viewBox`` and ``clipPath`` their mixed-case spelling,
and lowercasing them would change what they mean.
"""

import time
from dataclasses import dataclass
from enum import Enum
from typing import Callable, List, Optional, Tuple

from strict_xhtml.scanning import is_void_element
from strict_xhtml.shared import Change, ChangeKind, get_logger
from strict_xhtml.tree.nodes import (
    Document,
    Element,
    Node,
    NodeKind,
    child_path_segments,
)

# Location of a node as a linked list of path steps, innermost first:
# (step, trail of the parent) or None at the document
_Trail = Optional[tuple]

# (node, trail) entries of the depth-first work stack
_StackEntry = Tuple[Node, _Trail]


class StructureRule(Enum):
    """Tree-level XHTML-strict rules, in the order they are checked per element."""

    LOWERCASE_TAG = "lowercase_tag"
    VOID_WITHOUT_CHILDREN = "void_without_children"
    LOWERCASE_ATTRIBUTE = "lowercase_attribute"


@dataclass(frozen=True)
class TreeViolation:
    """First structural violation found in a document."""

    rule: StructureRule
    message: str
    location: str

    def __post_init__(self) -> None:
        if not self.message:
            raise ValueError("Violation message cannot be empty")


def _push_children(
    stack: List[_StackEntry],
    node: Node,
    trail: _Trail,
    name_of: Callable[[Element], str]
) -> None:
    """Schedule the children of ``node`` so they pop in document order."""
    if node.kind is NodeKind.DOCUMENT or node.kind is NodeKind.ELEMENT:
        segments = child_path_segments(node, name_of)
        for child, segment in zip(reversed(node.children), reversed(segments)):
            stack.append((child, trail if segment is None else (segment, trail)))
    elif node.kind is NodeKind.TEXT or node.kind is NodeKind.COMMENT:
        return
    else:
        raise TypeError(f"Unhandled node kind: {node.kind!r}")


def _location(trail: _Trail) -> str:
    steps: List[str] = []
    while trail is not None:
        step, trail = trail
        steps.append(step)
    return ">".join(reversed(steps))


def _current_name(element: Element) -> str:
    return element.name


def _normalized_name(element: Element) -> str:
    return element.name if element.is_foreign else element.name.lower()


class TreeValidator:
    """Check a parsed document against the tree-level XHTML-strict rules.

    For each element, in document order: the tag name must be lowercase, a
    void element must have no children, and every attribute name must be
    lowercase. Validation stops at the first violation.
    """

    def __init__(self, correlation_id: Optional[str] = None) -> None:
        self.correlation_id = correlation_id
        self.logger = get_logger(__name__, correlation_id, "tree_validator")

    def validate(self, document: Document) -> Optional[TreeViolation]:
        """Return the first violation in ``document``, or None if it conforms."""
        start_time = time.time()
        elements_checked = 0
        violation: Optional[TreeViolation] = None

        stack: List[_StackEntry] = [(document, None)]
        while stack and violation is None:
            node, trail = stack.pop()
            if node.kind is NodeKind.ELEMENT:
                elements_checked += 1
                violation = self._check_element(node, trail)
            _push_children(stack, node, trail, _current_name)

        self.logger.debug(
            "Tree validation completed",
            extra={
                "conforms": violation is None,
                "elements_checked": elements_checked,
                "processing_time_ms": (time.time() - start_time) * 1000,
            }
        )
        return violation

    def _check_element(self, element: Element, trail: _Trail) -> Optional[TreeViolation]:
        if not element.is_foreign and element.name != element.name.lower():
            return TreeViolation(
                StructureRule.LOWERCASE_TAG,
                f"tag must be lowercase: {element.name}",
                _location(trail),
            )

        if is_void_element(element.name) and element.children:
            return TreeViolation(
                StructureRule.VOID_WITHOUT_CHILDREN,
                f"void element cannot have children: {element.name}",
                _location(trail),
            )

        if element.is_foreign:
            return None
        for attribute in element.attributes:
            if attribute.name != attribute.name.lower():
                return TreeViolation(
                    StructureRule.LOWERCASE_ATTRIBUTE,
                    f"attribute must be lowercase: {attribute.name}",
                    _location(trail),
                )

        return None


class TreeNormalizer:
    """Rewrite element and attribute names to lowercase, in place.

    Only tag renames are reported as changes. Attribute names are lowered
    silently: attribute casing is already reported once by the raw-text
    scan, and reporting it again here would count the same fix twice.
    """

    def __init__(self, correlation_id: Optional[str] = None) -> None:
        self.correlation_id = correlation_id
        self.logger = get_logger(__name__, correlation_id, "tree_normalizer")

    def normalize(self, document: Document) -> List[Change]:
        """Normalize ``document`` and return the tag changes applied."""
        changes: List[Change] = []
        attributes_renamed = 0

        stack: List[_StackEntry] = [(document, None)]
        while stack:
            node, trail = stack.pop()
            if node.kind is NodeKind.ELEMENT and not node.is_foreign:
                original = node.name
                node.name = original.lower()
                if node.name != original:
                    changes.append(Change(
                        kind=ChangeKind.UPPERCASE_TAG,
                        message="Converted tag to lowercase",
                        original=original,
                        fixed=node.name,
                        location=_location(trail),
                    ))

                for attribute in node.attributes:
                    if attribute.name != attribute.name.lower():
                        attribute.name = attribute.name.lower()
                        attributes_renamed += 1

            _push_children(stack, node, trail, _normalized_name)

        self.logger.debug(
            "Tree normalization completed",
            extra={
                "tags_renamed": len(changes),
                "attributes_renamed": attributes_renamed,
            }
        )
        return changes

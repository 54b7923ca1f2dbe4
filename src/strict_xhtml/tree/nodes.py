"""Document tree model used by validation, normalization and serialization.

Every node carries a :class:`NodeKind` tag. Tree walkers dispatch on that tag
and treat an unknown kind as a programming error, so adding a node kind shows
up as a failure in each walker instead of being silently skipped.
"""

from collections import Counter
from dataclasses import dataclass, field
from enum import Enum, auto
from operator import attrgetter
from typing import Callable, Iterator, List, Optional, Union


class NodeKind(Enum):
    """Kinds of nodes a document tree may contain."""

    DOCUMENT = auto()
    ELEMENT = auto()
    TEXT = auto()
    COMMENT = auto()


@dataclass
class Attribute:
    """Single attribute; ``name`` is case-preserved until normalized."""

    name: str
    value: str = ""
    namespace: Optional[str] = None

    def __post_init__(self) -> None:
        if not self.name:
            raise ValueError("Attribute name cannot be empty")


@dataclass(eq=False)
class Text:
    data: str
    kind: NodeKind = field(default=NodeKind.TEXT, init=False, repr=False)


@dataclass(eq=False)
class Comment:
    data: str
    kind: NodeKind = field(default=NodeKind.COMMENT, init=False, repr=False)


@dataclass(eq=False)
class Element:
    """Element node with ordered attributes and children."""

    name: str
    attributes: List[Attribute] = field(default_factory=list)
    children: List["Node"] = field(default_factory=list)
    namespace: Optional[str] = None
    kind: NodeKind = field(default=NodeKind.ELEMENT, init=False, repr=False)

    def __post_init__(self) -> None:
        """Validate element values."""
        if not self.name:
            raise ValueError("Element name cannot be empty")

    def append(self, child: "Node") -> "Node":
        """Append ``child`` and return it."""
        self.children.append(child)
        return child

    def get_attribute(self, name: str, default: Optional[str] = None) -> Optional[str]:
        """Get attribute value with optional default."""
        for attribute in self.attributes:
            if attribute.name == name:
                return attribute.value
        return default

    @property
    def is_foreign(self) -> bool:
        """SVG or MathML element; its names keep the parser's mixed-case spelling."""
        return self.namespace is not None


@dataclass(eq=False)
class Document:
    """Root of a parsed document.

    ``doctype`` records the doctype name reported by the parser; it is kept
    for inspection only and never serialized.
    """

    children: List["Node"] = field(default_factory=list)
    doctype: Optional[str] = None
    kind: NodeKind = field(default=NodeKind.DOCUMENT, init=False, repr=False)

    def append(self, child: "Node") -> "Node":
        """Append ``child`` and return it."""
        self.children.append(child)
        return child

    def iter_elements(self) -> Iterator[Element]:
        """Iterate over all elements depth-first, in document order."""
        stack: List[Node] = list(reversed(self.children))
        while stack:
            node = stack.pop()
            if node.kind is NodeKind.ELEMENT:
                yield node
                stack.extend(reversed(node.children))

    def find_all(self, name: str) -> List[Element]:
        """Find all elements with matching name."""
        return [element for element in self.iter_elements() if element.name == name]


Node = Union[Document, Element, Text, Comment]
ParentNode = Union[Document, Element]


def child_path_segments(
    parent: ParentNode,
    name_of: Callable[[Element], str] = attrgetter("name")
) -> List[Optional[str]]:
    """Location step for each child of ``parent``, in order.

    Steps join with ``>`` into ``html>body>div[1]>p`` style locations.
    Non-element children get None. A zero-based index is appended only when
    ``parent`` has more than one element child with the same name, as given
    by ``name_of``.
    """
    names = [
        name_of(child) if child.kind is NodeKind.ELEMENT else None
        for child in parent.children
    ]
    totals = Counter(name for name in names if name is not None)
    seen: Counter = Counter()

    segments: List[Optional[str]] = []
    for name in names:
        if name is None or totals[name] == 1:
            segments.append(name)
        else:
            segments.append(f"{name}[{seen[name]}]")
            seen[name] += 1
    return segments

"""Document tree layer: model, delegate parsing, validation and serialization.

Key Components:
    HTMLTreeParser: html5lib-backed construction of :class:`Document` trees
    TreeValidator: First-violation check of tree-level XHTML-strict rules
    TreeNormalizer: In-place lowercasing of element and attribute names
    CanonicalSerializer: UTF-8 XHTML rendering of a tree
"""

from .nodes import (
    Attribute,
    Comment,
    Document,
    Element,
    Node,
    NodeKind,
    ParentNode,
    Text,
    child_path_segments,
)
from .builder import (
    HTMLTreeParser,
    ParsedDocument,
    TreeBuildError,
)
from .validation import (
    StructureRule,
    TreeNormalizer,
    TreeValidator,
    TreeViolation,
)
from .serializer import (
    OUTPUT_ENCODING,
    CanonicalSerializer,
)

__all__ = [
    "Attribute",
    "Comment",
    "Document",
    "Element",
    "Node",
    "NodeKind",
    "ParentNode",
    "Text",
    "child_path_segments",
    "HTMLTreeParser",
    "ParsedDocument",
    "TreeBuildError",
    "StructureRule",
    "TreeNormalizer",
    "TreeValidator",
    "TreeViolation",
    "OUTPUT_ENCODING",
    "CanonicalSerializer",
]

"""Delegate HTML parsing and tree construction.

Tokenization and tree construction are left entirely to html5lib, which
implements the HTML5 parsing algorithm including its error recovery (implied
``head``/``body``, implicit end tags, and so on). This module only walks the
parser's tree and copies it into the engine's own node model.
"""

import time
from dataclasses import dataclass, field
from typing import Any, Dict, List, Optional, Tuple

import html5lib
from html5lib.constants import E, namespaces
from html5lib.html5parser import ParseError

from strict_xhtml.shared import ConfigError, ParserConfig, get_logger
from strict_xhtml.tree.nodes import (
    Attribute,
    Comment,
    Document,
    Element,
    NodeKind,
    ParentNode,
    Text,
)

# Conventional prefixes for namespaced attributes on foreign (SVG/MathML) content
_ATTRIBUTE_PREFIXES = {
    namespaces["xlink"]: "xlink",
    namespaces["xml"]: "xml",
    namespaces["xmlns"]: "xmlns",
}


class TreeBuildError(Exception):
    """Raised when the delegate parser rejects its input."""


@dataclass
class ParsedDocument:
    """Tree produced by the delegate parser plus its recoverable diagnostics."""

    document: Document
    parse_errors: List[str] = field(default_factory=list)
    processing_time_ms: float = 0.0


class HTMLTreeParser:
    """html5lib-backed parser producing :class:`Document` trees.

    Examples:
        >>> parsed = HTMLTreeParser().parse("<p>hi")
        >>> [element.name for element in parsed.document.iter_elements()]
        ['html', 'head', 'body', 'p']
    """

    def __init__(
        self,
        config: Optional[ParserConfig] = None,
        correlation_id: Optional[str] = None
    ) -> None:
        """Initialize the parser.

        Args:
            config: Delegate parser configuration
            correlation_id: Optional correlation ID for conversion tracking

        Raises:
            ConfigError: If the configured tree backend is not installed
        """
        self.config = config or ParserConfig()
        self.logger = get_logger(__name__, correlation_id, "tree_builder")

        try:
            self._tree_builder = html5lib.getTreeBuilder(self.config.tree_backend)
            self._tree_walker = html5lib.getTreeWalker(self.config.tree_backend)
        except ImportError as e:
            raise ConfigError(
                f"tree_backend '{self.config.tree_backend}' is not available: {e}"
            ) from e

    def parse(self, text: str) -> ParsedDocument:
        """Parse ``text`` into a document tree.

        Raises:
            TreeBuildError: If the delegate parser gives up on the input; only
                possible when ``fail_on_parse_errors`` is enabled or the tree
                backend rejects the content
        """
        start_time = time.time()
        parser = html5lib.HTMLParser(
            tree=self._tree_builder,
            strict=self.config.fail_on_parse_errors,
            namespaceHTMLElements=False,
        )

        try:
            tree = parser.parse(text)
        except (ParseError, ValueError) as e:
            self.logger.warning(
                "Delegate parser rejected input",
                extra={"error": str(e), "content_length": len(text)}
            )
            raise TreeBuildError(str(e)) from e

        parsed = ParsedDocument(document=self._build(tree))
        if self.config.keep_parse_warnings:
            parsed.parse_errors = [_describe_parse_error(*entry) for entry in parser.errors]
        parsed.processing_time_ms = (time.time() - start_time) * 1000

        self.logger.debug(
            "Document tree built",
            extra={
                "tree_backend": self.config.tree_backend,
                "parse_error_count": len(parser.errors),
                "processing_time_ms": parsed.processing_time_ms,
            }
        )
        return parsed

    def _build(self, tree: Any) -> Document:
        """Copy the html5lib tree into engine nodes via its tree walker."""
        document = Document()
        stack: List[ParentNode] = [document]

        for token in self._tree_walker(tree):
            token_type = token["type"]

            if token_type == "StartTag":
                element = _element_from_token(token)
                stack[-1].append(element)
                stack.append(element)
            elif token_type == "EndTag":
                if len(stack) > 1:
                    stack.pop()
            elif token_type == "EmptyTag":
                stack[-1].append(_element_from_token(token))
            elif token_type in ("Characters", "SpaceCharacters"):
                _append_text(stack[-1], token["data"])
            elif token_type == "Comment":
                stack[-1].append(Comment(token["data"]))
            elif token_type == "Doctype":
                document.doctype = token["name"]
            else:
                # Entity and SerializeError tokens carry nothing we render
                self.logger.debug(
                    "Skipped tree walker token",
                    extra={"token_type": token_type}
                )

        return document


def _element_from_token(token: Dict[str, Any]) -> Element:
    attributes = [
        Attribute(name=_attribute_name(namespace, name), value=value, namespace=namespace)
        for (namespace, name), value in token["data"].items()
    ]
    namespace = token.get("namespace")
    if namespace == namespaces["html"]:
        namespace = None
    return Element(name=token["name"], attributes=attributes, namespace=namespace)


def _attribute_name(namespace: Optional[str], name: str) -> str:
    prefix = _ATTRIBUTE_PREFIXES.get(namespace) if namespace else None
    if prefix is None or (prefix == "xmlns" and name == "xmlns"):
        return name
    return f"{prefix}:{name}"


def _append_text(parent: ParentNode, data: str) -> None:
    """Append text, merging with a directly preceding text node."""
    if parent.children and parent.children[-1].kind is NodeKind.TEXT:
        parent.children[-1].data += data
    else:
        parent.append(Text(data))


def _describe_parse_error(
    position: Tuple[int, int], code: str, datavars: Optional[Dict[str, Any]]
) -> str:
    line, column = position
    message = E.get(code, code)
    if datavars:
        message = message % datavars
    return f"line {line}, column {column}: {message}"

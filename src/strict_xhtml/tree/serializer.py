"""Canonical XHTML serialization of document trees.

The serializer renders exactly what the tree holds. It never changes names,
never reorders attributes and never pretty-prints; normalization is the job
of :class:`~strict_xhtml.tree.validation.TreeNormalizer`.
"""

import io
import time
from typing import BinaryIO, Iterator, List, Optional, Union

from strict_xhtml.scanning import is_void_element
from strict_xhtml.shared import get_logger
from strict_xhtml.tree.nodes import Document, Element, Node, NodeKind

OUTPUT_ENCODING = "utf-8"


class CanonicalSerializer:
    """Render document trees as XHTML-strict markup, UTF-8 encoded.

    Examples:
        >>> from strict_xhtml.tree.nodes import Element, Text
        >>> paragraph = Element("p", children=[Text("a < b")])
        >>> CanonicalSerializer().serialize_node(paragraph)
        b'<p>a &lt; b</p>'
    """

    def __init__(self, correlation_id: Optional[str] = None) -> None:
        self.correlation_id = correlation_id
        self.logger = get_logger(__name__, correlation_id, "canonical_serializer")

    def serialize(self, document: Document) -> bytes:
        """Serialize a whole document to bytes."""
        return self.serialize_node(document)

    def serialize_node(self, node: Node) -> bytes:
        """Serialize any node (and its subtree) to bytes."""
        buffer = io.BytesIO()
        self.write(node, buffer)
        return buffer.getvalue()

    def write(self, node: Node, sink: BinaryIO) -> int:
        """Write ``node`` to a binary sink and return the number of bytes written.

        Errors raised by the sink (``OSError``, or ``ValueError`` for a closed
        file) propagate unchanged.
        """
        start_time = time.time()
        data = "".join(self._render(node)).encode(OUTPUT_ENCODING)
        sink.write(data)

        self.logger.debug(
            "Serialization completed",
            extra={
                "output_size_bytes": len(data),
                "processing_time_ms": (time.time() - start_time) * 1000,
            }
        )
        return len(data)

    def _render(self, node: Node) -> Iterator[str]:
        """Yield markup fragments for ``node`` in document order.

        The work stack holds pending nodes and the closing tags of open elements.
        """
        stack: List[Union[Node, str]] = [node]
        while stack:
            item = stack.pop()
            if isinstance(item, str):
                yield item
            elif item.kind is NodeKind.DOCUMENT:
                stack.extend(reversed(item.children))
            elif item.kind is NodeKind.ELEMENT:
                yield _start_tag(item)
                if is_void_element(item.name):
                    yield " />"
                    continue
                yield ">"
                stack.append(f"</{item.name}>")
                stack.extend(reversed(item.children))
            elif item.kind is NodeKind.TEXT:
                yield _escape_text(item.data)
            elif item.kind is NodeKind.COMMENT:
                yield f"<!--{item.data}-->"
            else:
                raise TypeError(f"Unhandled node kind: {item.kind!r}")


def _start_tag(element: Element) -> str:
    attributes = "".join(
        f' {attribute.name}="{_escape_attribute(attribute.value)}"'
        for attribute in element.attributes
    )
    return f"<{element.name}{attributes}"


def _escape_text(text: str) -> str:
    return (text
            .replace("&", "&amp;")
            .replace("<", "&lt;")
            .replace(">", "&gt;"))


def _escape_attribute(value: str) -> str:
    return (value
            .replace("&", "&amp;")
            .replace("<", "&lt;")
            .replace(">", "&gt;")
            .replace('"', "&quot;")
            .replace("'", "&#39;"))

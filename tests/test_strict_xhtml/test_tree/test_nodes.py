"""Tests for the document tree model."""

import pytest

from strict_xhtml.tree import (
    Attribute,
    Comment,
    Document,
    Element,
    NodeKind,
    Text,
    child_path_segments,
)


class TestNodes:
    """Test suite for node construction."""

    def test_kinds(self):
        """Test every node carries its kind tag."""
        assert Document().kind is NodeKind.DOCUMENT
        assert Element("p").kind is NodeKind.ELEMENT
        assert Text("x").kind is NodeKind.TEXT
        assert Comment("x").kind is NodeKind.COMMENT

    def test_empty_names_rejected(self):
        """Test elements and attributes need a name."""
        with pytest.raises(ValueError, match="Element name cannot be empty"):
            Element("")
        with pytest.raises(ValueError, match="Attribute name cannot be empty"):
            Attribute("")

    def test_get_attribute(self):
        """Test attribute lookup with default."""
        element = Element("a", attributes=[Attribute("href", "/x")])

        assert element.get_attribute("href") == "/x"
        assert element.get_attribute("title", "none") == "none"


class TestDocument:
    """Test suite for Document."""

    def test_iter_elements_document_order(self):
        """Test depth-first, parent-before-children iteration."""
        document = Document(children=[Element("html", children=[
            Element("head", children=[Element("title")]),
            Element("body", children=[Text("x"), Element("p")]),
        ])])

        names = [element.name for element in document.iter_elements()]
        assert names == ["html", "head", "title", "body", "p"]

    def test_find_all(self):
        """Test name search."""
        document = Document(children=[Element("div", children=[
            Element("p"), Element("div", children=[Element("p")]),
        ])])

        assert len(document.find_all("p")) == 2
        assert len(document.find_all("div")) == 2


class TestChildPathSegments:
    """Test suite for child_path_segments."""

    def test_unique_name_has_no_index(self):
        """Test a lone name is rendered bare."""
        body = Element("body", children=[Element("div"), Element("p")])
        assert child_path_segments(body) == ["div", "p"]

    def test_repeated_name_is_indexed(self):
        """Test same-name siblings get zero-based indices."""
        body = Element("body", children=[Element("p"), Text(" "), Element("div"), Element("p")])
        assert child_path_segments(body) == ["p[0]", None, "div", "p[1]"]

    def test_name_function(self):
        """Test siblings are counted under the names the caller supplies."""
        body = Element("body", children=[Element("P"), Element("p")])

        assert child_path_segments(body) == ["P", "p"]
        assert child_path_segments(body, lambda e: e.name.lower()) == ["p[0]", "p[1]"]

    def test_no_children(self):
        """Test an empty parent has no segments."""
        assert child_path_segments(Document()) == []


class TestElement:
    """Test suite for Element helpers."""

    def test_foreign_when_namespaced(self):
        """Test SVG and MathML elements are recognised by their namespace."""
        assert not Element("div").is_foreign
        assert Element("clipPath", namespace="http://www.w3.org/2000/svg").is_foreign

"""Tests for the XPath helper functions and node helpers."""

import pytest

from xml_row_extractor.dom import (
    evaluate,
    evaluate_many,
    find_nodes,
    find_nodes_many,
    inner_xml,
    parse_namespaces,
)
from xml_row_extractor.dom.loading import load_string
from xml_row_extractor.shared.errors import ConfigurationError, MalformedXmlError

XML = '<r><a id="x">1</a><a id="y"><b>2</b></a><c>3 &amp; 4</c></r>'


class TestFindNodes:
    """Test inner XML of matched nodes."""

    def test_elements(self):
        """Test element matches."""
        assert find_nodes(XML, "a") == ["1", "<b>2</b>"]

    def test_attributes_and_text(self):
        """Test attribute and text matches."""
        assert find_nodes(XML, "a/@id") == ["x", "y"]
        assert find_nodes(XML, "c/text()") == ["3 &amp; 4"]

    def test_no_match(self):
        """Test a query with no result."""
        assert find_nodes(XML, "z") == []

    def test_empty_input(self):
        """Test empty and missing documents."""
        assert find_nodes(None, "a") == []
        assert find_nodes("", "a") == []

    def test_many(self):
        """Test several queries against one document."""
        assert find_nodes_many(XML, "a/@id", "c") == [["x", "y"], ["3 &amp; 4"]]
        assert find_nodes_many(None, "a") == []
        assert find_nodes_many(XML) == []

    def test_str_with_declared_encoding(self):
        """Test that a str declaration does not change how its text is read."""
        xml = '<?xml version="1.0" encoding="ISO-8859-1"?>\n<r><a>ü</a></r>'

        assert find_nodes(xml, "a") == ["ü"]
        assert evaluate(xml, "string(a)") == ["ü"]

    def test_cdata_is_kept(self):
        """Test that CDATA sections come back as written."""
        assert find_nodes("<r><a><![CDATA[<x>]]><b/></a></r>", "a") == ["<![CDATA[<x>]]><b/>"]


class TestEvaluate:
    """Test text evaluation of XPath queries."""

    def test_text_results(self):
        """Test attribute and text node results."""
        assert evaluate(XML, "a/@id") == ["x", "y"]
        assert evaluate(XML, "c/text()") == ["3 & 4"]

    def test_element_results_are_empty(self):
        """Test that element matches produce no text values."""
        assert evaluate(XML, "a") == []

    def test_scalar_results(self):
        """Test numbers, booleans and strings."""
        assert evaluate(XML, "count(a)") == ["2"]
        assert evaluate(XML, "count(a) div 4") == ["0.5"]
        assert evaluate(XML, "count(a) > 1") == ["true"]
        assert evaluate(XML, "boolean(z)") == ["false"]
        assert evaluate(XML, "string(a[1])") == ["1"]

    def test_namespaces(self):
        """Test namespace prefixes in queries."""
        xml = '<r xmlns:p="urn:p"><p:v>1</p:v></r>'

        assert evaluate(xml, "p:v/text()", namespaces="p=urn:p") == ["1"]

    def test_many(self):
        """Test several queries against one document."""
        assert evaluate_many(XML, "a/@id", "count(a)") == [["x", "y"], ["2"]]
        assert evaluate_many("", "a") == []

    def test_errors(self):
        """Test malformed documents and queries."""
        with pytest.raises(MalformedXmlError):
            evaluate("<r>", "a")
        with pytest.raises(ConfigurationError, match="Invalid XPath expression"):
            evaluate(XML, "a[")


class TestParseNamespaces:
    """Test namespace declaration parsing."""

    def test_declaration_string(self):
        """Test xmlns-style and bare declarations."""
        result = parse_namespaces("xmlns:a=\"urn:a\" b='urn:b' c=urn:c")

        assert result == {"a": "urn:a", "b": "urn:b", "c": "urn:c"}

    def test_mapping_and_none(self):
        """Test the other accepted forms."""
        assert parse_namespaces({"a": "urn:a"}) == {"a": "urn:a"}
        assert parse_namespaces(None) == {}
        assert parse_namespaces("  ") == {}

    def test_unparseable(self):
        """Test a declaration string without any prefix."""
        with pytest.raises(ConfigurationError, match="Cannot parse namespace declarations"):
            parse_namespaces("urn:a")


class TestInnerXml:
    """Test node serialization."""

    def test_element_with_children_and_tails(self):
        """Test text, children and tail text."""
        root = load_string("<a>x<b>y</b>z<c/></a>")

        assert inner_xml(root) == "x<b>y</b>z<c/>"

    def test_empty_element(self):
        """Test an element without content."""
        assert inner_xml(load_string("<a/>")) == ""

    def test_cdata_section(self):
        """Test an element holding only a CDATA section."""
        assert inner_xml(load_string("<a><![CDATA[1 < 2]]></a>")) == "<![CDATA[1 < 2]]>"

    def test_attribute_with_angle_bracket(self):
        """Test that attribute values do not end the start tag early."""
        root = load_string('<a x="1 &gt; 0">v</a>')

        assert inner_xml(root) == "v"

    def test_comment_node(self):
        """Test a comment selected by XPath."""
        assert find_nodes("<r><!-- a & b --></r>", "comment()") == [" a &amp; b "]

    def test_string_result(self):
        """Test that string results are escaped."""
        assert inner_xml("1 < 2") == "1 &lt; 2"

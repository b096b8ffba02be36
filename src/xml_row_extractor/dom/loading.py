"""Document loading and node helpers shared by the DOM-based components.

All XPath expressions are evaluated with lxml, relative to the document
element.
"""

import re
from typing import Any, BinaryIO, Dict, List, Mapping, Optional, Union
from xml.sax.saxutils import escape

from lxml import etree

from xml_row_extractor.extraction.encoding import strip_xml_declaration
from xml_row_extractor.shared.errors import ConfigurationError, MalformedXmlError

NamespacesLike = Union[str, Mapping[str, str], None]

# prefix=uri pairs, optionally written as xmlns:prefix="uri"
_XMLNS_DECLARATION = re.compile(r"(?:xmlns:)?(\S+?)\s*=\s*([\"']?)(\S+?)\2(?=\s|$)")


def _parser() -> etree.XMLParser:
    # a new parser per document; lxml parsers are not shared between calls
    return etree.XMLParser(
        resolve_entities=False, no_network=True, huge_tree=True, strip_cdata=False
    )


def parse_namespaces(namespaces: NamespacesLike) -> Dict[str, str]:
    """Build a prefix -> URI mapping.

    Args:
        namespaces: A mapping, or declarations such as
            ``'xmlns:a="urn:a" b=urn:b'``

    Returns:
        Dictionary usable as lxml's ``namespaces`` argument
    """
    if namespaces is None:
        return {}
    if isinstance(namespaces, Mapping):
        return dict(namespaces)

    result: Dict[str, str] = {}
    for match in _XMLNS_DECLARATION.finditer(namespaces):
        result[match.group(1)] = match.group(3)
    if namespaces.strip() and not result:
        raise ConfigurationError(f"Cannot parse namespace declarations: {namespaces!r}")
    return result


def load_stream(stream: BinaryIO) -> etree._Element:
    """Load a whole document from a binary stream and return its root."""
    try:
        return etree.parse(stream, _parser()).getroot()
    except etree.XMLSyntaxError as e:
        raise _malformed(e) from e


def load_string(xml: Union[str, bytes]) -> etree._Element:
    """Load a whole document from a string and return its root."""
    try:
        if isinstance(xml, str):
            # already decoded, so a declared encoding no longer applies
            declaration, text = strip_xml_declaration(xml)
            xml = "\n" * declaration.count("\n") + text
        return etree.fromstring(xml, _parser())
    except etree.XMLSyntaxError as e:
        raise _malformed(e) from e


def _malformed(error: etree.XMLSyntaxError) -> MalformedXmlError:
    line, column = error.position if error.position else (None, None)
    return MalformedXmlError(error.msg or str(error), line, column)


def select(node: etree._Element, xpath: str, namespaces: Optional[Dict[str, str]] = None) -> Any:
    """Evaluate an XPath expression, turning XPath errors into configuration errors."""
    try:
        return node.xpath(xpath, namespaces=namespaces or None)
    except etree.XPathError as e:
        raise ConfigurationError(f"Invalid XPath expression '{xpath}': {e}") from e


def select_nodes(node: etree._Element, xpath: str, namespaces: Optional[Dict[str, str]] = None) -> List[Any]:
    """Evaluate an XPath expression that must select a node set."""
    result = select(node, xpath, namespaces)
    if not isinstance(result, list):
        raise ConfigurationError(f"XPath expression '{xpath}' does not select nodes")
    return result


def select_single_node(node: etree._Element, xpath: str, namespaces: Optional[Dict[str, str]] = None) -> Any:
    """Return the first node selected by ``xpath``, or None."""
    result = select_nodes(node, xpath, namespaces)
    return result[0] if result else None


def inner_xml(node: Any) -> str:
    """Serialize the content of a node, excluding its own tags.

    Attribute and text results (strings in lxml) are returned as escaped
    text, the way a DOM reports their inner XML. CDATA sections inside
    elements are kept as written.
    """
    if isinstance(node, str):
        return escape(str(node))
    if not isinstance(node.tag, str):
        # comments and processing instructions
        return escape(node.text or "")
    if node.text is None and len(node) == 0:
        return ""
    # lxml escapes ">" in attribute values, so the first one closes the start tag
    serialized = etree.tostring(node, encoding="unicode", with_tail=False)
    return serialized[serialized.index(">") + 1:serialized.rindex("</")]

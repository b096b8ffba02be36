"""XPath 1.0 querying on XML strings.

Each call loads its input; nothing is cached between calls. Paths are
evaluated relative to the document element, absolute paths work as usual.
"""

from typing import Any, List, Optional, Union

from .loading import NamespacesLike, inner_xml, load_string, parse_namespaces, select

XmlInput = Optional[Union[str, bytes]]


def find_nodes(xml: XmlInput, xpath: str, namespaces: NamespacesLike = None) -> List[str]:
    """Return the inner XML of every node matching the XPath query.

    Attribute and text matches are returned as their (escaped) text.

    Examples:
        >>> find_nodes('<r><a>1</a><a><b>2</b></a></r>', 'a')
        ['1', '<b>2</b>']
    """
    if not xml:
        return []
    return _find_nodes(load_string(xml), xpath, parse_namespaces(namespaces))


def find_nodes_many(xml: XmlInput, *xpaths: str, namespaces: NamespacesLike = None) -> List[List[str]]:
    """Run several ``find_nodes`` queries against one loaded document."""
    if not xml or not xpaths:
        return []
    root = load_string(xml)
    ns = parse_namespaces(namespaces)
    return [_find_nodes(root, xpath, ns) for xpath in xpaths]


def evaluate(xml: XmlInput, xpath: str, namespaces: NamespacesLike = None) -> List[str]:
    """Return the text of every text or attribute node matching the query.

    If the query matches any element, the result is empty. Queries that
    produce a number, string or boolean return that single value.

    Examples:
        >>> evaluate('<r><a id="x">1</a></r>', 'a/@id')
        ['x']
        >>> evaluate('<r><a>1</a><a>2</a></r>', 'count(a)')
        ['2']
    """
    if not xml:
        return []
    return _evaluate(load_string(xml), xpath, parse_namespaces(namespaces))


def evaluate_many(xml: XmlInput, *xpaths: str, namespaces: NamespacesLike = None) -> List[List[str]]:
    """Run several ``evaluate`` queries against one loaded document."""
    if not xml or not xpaths:
        return []
    root = load_string(xml)
    ns = parse_namespaces(namespaces)
    return [_evaluate(root, xpath, ns) for xpath in xpaths]


def _find_nodes(root: Any, xpath: str, namespaces: dict) -> List[str]:
    result = select(root, xpath, namespaces)
    if not isinstance(result, list):
        return [_format_scalar(result)]
    return [inner_xml(node) for node in result]


def _evaluate(root: Any, xpath: str, namespaces: dict) -> List[str]:
    result = select(root, xpath, namespaces)
    if not isinstance(result, list):
        return [_format_scalar(result)]
    if all(isinstance(node, str) for node in result):
        return [str(node) for node in result]
    return []


def _format_scalar(value: Any) -> str:
    if isinstance(value, bool):
        return "true" if value else "false"
    if isinstance(value, float) and value.is_integer():
        return str(int(value))
    return str(value)

"""DOM-based extraction and XPath helpers (lxml).

These components load the whole document; the streaming engine lives in
``xml_row_extractor.extraction``.
"""

from .extractor import XmlApplier, XmlDomExtractor
from .loading import inner_xml, parse_namespaces
from .xpath import evaluate, evaluate_many, find_nodes, find_nodes_many

__all__ = [
    "XmlApplier",
    "XmlDomExtractor",
    "evaluate",
    "evaluate_many",
    "find_nodes",
    "find_nodes_many",
    "inner_xml",
    "parse_namespaces",
]

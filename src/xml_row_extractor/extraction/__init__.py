"""Streaming extraction engine.

Key Components:
    XmlEventReader: Forward-only XML events from a byte stream
    ColumnPathTable: Mapping between XML element names and output columns
    FragmentRecomposer: Inner-XML re-serialization of column content
    XmlExtractor: The row state machine producing a lazy row sequence
"""

from .encoding import EncodingResult, detect_encoding
from .events import EventPosition, EventType, XmlEvent, XmlEventReader
from .extractor import ParseLocation, ParseState, XmlExtractor
from .paths import ColumnPathTable
from .recomposer import FragmentRecomposer

__all__ = [
    "ColumnPathTable",
    "EncodingResult",
    "EventPosition",
    "EventType",
    "FragmentRecomposer",
    "ParseLocation",
    "ParseState",
    "XmlEvent",
    "XmlEventReader",
    "XmlExtractor",
    "detect_encoding",
]

"""Encoding detection for XML byte streams.

The streaming reader decodes bytes itself so that a sequence of row
fragments can be parsed without a single root element. The encoding is
taken from a byte order mark, then from the XML declaration, then defaults
to UTF-8.
"""

import codecs
import re
from dataclasses import dataclass
from enum import Enum
from typing import ClassVar, Dict, Optional, Tuple

from xml_row_extractor.shared.errors import MalformedXmlError

DEFAULT_ENCODING = "utf-8"


class DetectionMethod(Enum):
    """Enumeration of encoding detection methods."""
    BOM = "bom"
    XML_DECLARATION = "xml_declaration"
    FALLBACK = "fallback"


@dataclass
class EncodingResult:
    """Result of encoding detection.

    Attributes:
        encoding: Python codec name
        method: Detection method used
        bom_length: Number of leading bytes that belong to the BOM
    """
    encoding: str
    method: DetectionMethod
    bom_length: int = 0


class BOMDetector:
    """Byte Order Mark (BOM) detection for all major encodings."""

    BOM_PATTERNS: ClassVar[Dict[bytes, str]] = {
        b"\xef\xbb\xbf": "utf-8",
        b"\xff\xfe": "utf-16-le",
        b"\xfe\xff": "utf-16-be",
        b"\xff\xfe\x00\x00": "utf-32-le",
        b"\x00\x00\xfe\xff": "utf-32-be",
    }

    def detect(self, data: bytes) -> Optional[EncodingResult]:
        """Detect encoding based on BOM."""
        if not data:
            return None

        # UTF-32 BOMs first: the UTF-16-LE BOM is a prefix of the UTF-32-LE one
        for bom_bytes, encoding in sorted(
            self.BOM_PATTERNS.items(), key=lambda x: len(x[0]), reverse=True
        ):
            if data.startswith(bom_bytes):
                return EncodingResult(encoding, DetectionMethod.BOM, len(bom_bytes))

        return None


class XMLDeclarationParser:
    """Parser for XML encoding declarations."""

    XML_DECLARATION_PATTERN = re.compile(
        rb'^\s*<\?xml\s[^>]*?encoding\s*=\s*["\']([^"\']+)["\']',
        re.IGNORECASE
    )

    def parse_declaration(self, data: bytes) -> Optional[EncodingResult]:
        """Parse encoding from the XML declaration at the start of ``data``.

        Raises:
            MalformedXmlError: if the declared encoding is unknown to Python
        """
        match = self.XML_DECLARATION_PATTERN.match(data)
        if not match:
            return None

        declared = match.group(1).decode("ascii", errors="replace").strip()
        try:
            name = codecs.lookup(declared).name
        except LookupError:
            raise MalformedXmlError(f"Unsupported encoding declared: '{declared}'") from None
        return EncodingResult(name, DetectionMethod.XML_DECLARATION)


def detect_encoding(head: bytes) -> EncodingResult:
    """Detect the encoding of a stream from its first bytes."""
    return (
        BOMDetector().detect(head)
        or XMLDeclarationParser().parse_declaration(head)
        or EncodingResult(DEFAULT_ENCODING, DetectionMethod.FALLBACK)
    )


_TEXT_DECLARATION = re.compile(r"^\s*<\?xml\s.*?\?>", re.DOTALL)


def strip_xml_declaration(text: str) -> Tuple[str, str]:
    """Split a leading XML declaration off decoded text.

    Returns:
        ``(declaration, remainder)``; the declaration is ``""`` when absent

    Raises:
        MalformedXmlError: if a declaration starts but does not end
    """
    stripped = text.lstrip()
    if not (stripped.startswith("<?xml") and stripped[5:6].isspace()):
        return "", text
    match = _TEXT_DECLARATION.match(text)
    if not match:
        raise MalformedXmlError("XML declaration is not terminated")
    return match.group(0), text[match.end():]

"""Level 1 API: one-call extraction and output.

These functions accept the common input and output types and wire up the
extractor and outputter with their defaults.
"""

import io
from pathlib import Path
from typing import IO, BinaryIO, Iterable, Iterator, Optional, Union

from xml_row_extractor.extraction import XmlExtractor
from xml_row_extractor.extraction.encoding import strip_xml_declaration
from xml_row_extractor.extraction.paths import PathsLike
from xml_row_extractor.output import XmlOutputter
from xml_row_extractor.rows import Row, UpdatableRow
from xml_row_extractor.rows.schema import SchemaLike
from xml_row_extractor.shared.config import ExtractorConfig
from xml_row_extractor.shared.errors import ConfigurationError
from xml_row_extractor.shared.logging import get_logger

# Type definitions for input data
SourceType = Union[bytes, str, Path, BinaryIO]


def extract_rows(
    source: SourceType,
    row_element: Optional[str],
    schema: Union[SchemaLike, UpdatableRow],
    column_paths: PathsLike = None,
    config: Optional[ExtractorConfig] = None,
) -> Iterator[Row]:
    """Extract rows from XML held in memory, in a file, or in a binary stream.

    Args:
        source: XML as bytes, str, a ``Path`` to open, or a readable binary
            stream. A ``str`` is XML text, not a file name.
        row_element: Name of the row element; ``None`` uses ``config``
        schema: Output schema, e.g. ``"a string, b string"``
        column_paths: Map from XML element name to column name
        config: Optional extractor configuration

    Returns:
        Lazy iterator of rows. A file opened from a ``Path`` is closed when
        the iterator is exhausted, fails or is closed.

    Raises:
        ConfigurationError: immediately, for an invalid schema or mapping

    Examples:
        >>> [r.as_tuple() for r in extract_rows(b'<row><a>foo</a></row>', 'row', 'a string, b string')]
        [('foo', None)]
    """
    extractor = XmlExtractor(row_element, column_paths, config)
    output = schema if isinstance(schema, UpdatableRow) else UpdatableRow(schema)

    if isinstance(source, Path):
        if not source.is_file():
            raise ConfigurationError(f"File not found: {source}", "source")
        # validate now, before the file is opened
        extractor.validate_output(output)
        return _extract_from_path(extractor, source, output)
    if isinstance(source, str):
        declaration, text = strip_xml_declaration(source)
        source = ("\n" * declaration.count("\n") + text).encode("utf-8")
    if isinstance(source, (bytes, bytearray)):
        return extractor.extract(io.BytesIO(source), output)
    if hasattr(source, "read"):
        return extractor.extract(source, output)
    raise ConfigurationError(f"Unsupported source type: {type(source).__name__}", "source")


def _extract_from_path(extractor: XmlExtractor, path: Path, output: UpdatableRow) -> Iterator[Row]:
    logger = get_logger(__name__, extractor.config.correlation_id, "extract_rows")
    logger.debug("Opening input file", extra={"file_path": str(path)})
    with path.open("rb") as stream:
        yield from extractor.extract(stream, output)


def write_rows(
    rows: Iterable[Row],
    stream: Union[IO[str], IO[bytes]],
    row_element: str,
    column_paths: PathsLike = None,
    *,
    escape_values: bool = False,
) -> int:
    """Write each row as one XML fragment.

    Args:
        rows: Rows to write, e.g. the result of ``extract_rows``
        stream: Text or binary stream; it is not closed
        row_element: Name of the element wrapping each row
        column_paths: Map from XML element name to column name
        escape_values: Write values as escaped text instead of inner XML

    Returns:
        Number of rows written
    """
    outputter = XmlOutputter(row_element, column_paths, escape_values=escape_values)
    count = 0
    for row in rows:
        outputter.output(row, stream)
        count += 1
    return count

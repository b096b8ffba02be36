"""Row to XML fragment writer.

Rows are written one at a time, so the output is a sequence of fragments,
one ``<row>...</row>`` per row, without an XML declaration or a common root.
The streaming extractor reads such a sequence back.
"""

import io
from typing import IO, Union

from lxml import etree

from xml_row_extractor.extraction.paths import ColumnPathTable, PathsLike
from xml_row_extractor.extraction.recomposer import FragmentWriter
from xml_row_extractor.rows import Row, require_text_schema
from xml_row_extractor.shared.errors import ConfigurationError, MalformedXmlError
from xml_row_extractor.shared.logging import get_logger

OUTPUT_ENCODING = "utf-8"


class XmlOutputter:
    """Writes rows as XML fragments.

    For example, the row ``("foo", "")`` with schema ``(a string, b string)``
    and row element ``row`` is written as ``<row><a>foo</a><b/></row>``.
    ``None`` columns are omitted so they stay distinct from empty strings.
    """

    def __init__(
        self,
        row_element: str,
        column_paths: PathsLike = None,
        *,
        escape_values: bool = False,
    ) -> None:
        """Initialize the outputter.

        Args:
            row_element: Name of the element wrapping the columns of one row
            column_paths: Map from XML element name to column name, as given
                to the extractor; unmapped columns use their own name
            escape_values: Write values as escaped text instead of inner XML
        """
        if not row_element:
            raise ConfigurationError("row_element must be a non-empty string", "row_element")
        self.row_element = row_element
        self.column_paths = ColumnPathTable.coerce(column_paths)
        self.escape_values = escape_values
        self.logger = get_logger(__name__, None, "xml_outputter")

    def render(self, row: Row) -> str:
        """Build the fragment for one row.

        Raises:
            ConfigurationError: for a non-text column
            MalformedXmlError: for a value that is not a well-formed fragment
                when values are written as inner XML
        """
        require_text_schema(row.schema)

        buffer = io.StringIO()
        writer = FragmentWriter(buffer)
        writer.startElement(self.row_element, {})
        for column, value in zip(row.schema, row.values):
            if value is None:
                continue
            element = self.column_paths.resolve_source_path(column.name)
            writer.startElement(element, {})
            if self.escape_values:
                writer.characters(value)
            elif value:
                _check_fragment(column.name, value)
                writer.ignorableWhitespace(value)
            writer.endElement(element)
        writer.endElement(self.row_element)
        return buffer.getvalue()

    def output(self, row: Row, stream: Union[IO[str], IO[bytes]]) -> None:
        """Write one row to a text or binary stream (UTF-8 for bytes)."""
        fragment = self.render(row)
        if isinstance(stream, io.TextIOBase):
            stream.write(fragment)
        else:
            stream.write(fragment.encode(OUTPUT_ENCODING))


def _check_fragment(column_name: str, value: str) -> None:
    try:
        etree.fromstring(f"<fragment>{value}</fragment>")
    except etree.XMLSyntaxError as e:
        raise MalformedXmlError(
            f"Value of column '{column_name}' is not a well-formed XML fragment: {e.msg}"
        ) from e

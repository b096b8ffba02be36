"""DOM-based XML extraction with XPath row and column paths.

These extractors load the whole document with lxml, so they support XPath
and namespaces for rows and columns at the cost of holding the document in
memory. Use ``XmlExtractor`` for large inputs.
"""

from typing import Any, BinaryIO, Iterator, Mapping, Optional, Union

from lxml import etree

from xml_row_extractor.extraction.paths import ColumnPathTable, PathsLike
from xml_row_extractor.rows import Row, UpdatableRow, require_text_schema
from xml_row_extractor.rows.schema import SchemaLike
from xml_row_extractor.shared.errors import ConfigurationError
from xml_row_extractor.shared.logging import get_logger

from .loading import (
    NamespacesLike,
    inner_xml,
    load_stream,
    load_string,
    parse_namespaces,
    select_nodes,
    select_single_node,
)


class XmlDomExtractor:
    """DOM-based XML extractor.

    For example, given ``<rows><row><a>foo</a><b>3</b></row><row><a/></row></rows>``,
    the row path ``row`` and the schema ``(a string, b string)``, the extractor
    produces ``("foo", "3")`` and ``("", None)``.
    """

    def __init__(
        self,
        row_path: str,
        column_paths: PathsLike = None,
        namespaces: NamespacesLike = None,
        correlation_id: Optional[str] = None,
    ) -> None:
        """Initialize the extractor.

        Args:
            row_path: XPath of the row elements, relative to the document element
            column_paths: For each column, map from the XPath (relative to the
                row element) to the column name
            namespaces: Prefix declarations usable in both kinds of path
            correlation_id: Optional correlation ID for logging
        """
        if not row_path:
            raise ConfigurationError("row_path must be a non-empty string", "row_path")
        self.row_path = row_path
        self.column_paths = ColumnPathTable.coerce(column_paths)
        self.namespaces = parse_namespaces(namespaces)
        self.logger = get_logger(__name__, correlation_id, "xml_dom_extractor")

    def extract(self, stream: BinaryIO, output: Union[UpdatableRow, SchemaLike]) -> Iterator[Row]:
        """Extract rows from a binary stream holding one XML document.

        Raises:
            ConfigurationError: immediately, for a non-text column
            MalformedXmlError: while iterating, if the document cannot be loaded
        """
        output = _as_updatable(output)
        require_text_schema(output.schema)
        return self._iter_rows(lambda: load_stream(stream), output)

    def extract_string(self, xml: Union[str, bytes], output: Union[UpdatableRow, SchemaLike]) -> Iterator[Row]:
        """Extract rows from an XML document held in a string."""
        output = _as_updatable(output)
        require_text_schema(output.schema)
        return self._iter_rows(lambda: load_string(xml), output)

    def _iter_rows(self, load: Any, output: UpdatableRow) -> Iterator[Row]:
        root = load()
        count = 0
        for row_node in select_nodes(root, self.row_path, self.namespaces):
            if not isinstance(row_node, etree._Element):
                continue
            yield self.build_row(row_node, output)
            count += 1
        self.logger.debug("DOM extraction finished", extra={"rows_emitted": count})

    def build_row(self, row_node: etree._Element, output: UpdatableRow) -> Row:
        """Fill ``output`` from one row node and snapshot it."""
        for column in output.schema:
            path = self.column_paths.resolve_source_path(column.name)
            node = select_single_node(row_node, path, self.namespaces)
            output.set(column.name, None if node is None else inner_xml(node))
        return output.as_read_only()


class XmlApplier:
    """Runs DOM extraction over XML held in one column of an input row.

    One input row becomes a sequence of output rows. For example, given an
    input row whose ``xml`` column is
    ``<rows><row><a>foo</a><b>3</b></row><row><a/></row></rows>`` and the
    schema ``(a string, b string)``, it produces ``("foo", "3")`` and
    ``("", None)``.
    """

    def __init__(
        self,
        xml_column_name: str,
        row_path: str,
        column_paths: PathsLike = None,
        namespaces: NamespacesLike = None,
        correlation_id: Optional[str] = None,
    ) -> None:
        """Initialize the applier.

        Args:
            xml_column_name: Column of the input row containing the XML string
            row_path: XPath of the row elements
            column_paths: For each column, map from the XPath to the column name
            namespaces: Prefix declarations usable in the paths
            correlation_id: Optional correlation ID for logging
        """
        if not xml_column_name:
            raise ConfigurationError("xml_column_name must be a non-empty string", "xml_column_name")
        self.xml_column_name = xml_column_name
        self._extractor = XmlDomExtractor(row_path, column_paths, namespaces, correlation_id)

    def apply(
        self,
        input_row: Union[Row, Mapping[str, Any]],
        output: Union[UpdatableRow, SchemaLike],
    ) -> Iterator[Row]:
        """Extract rows from the XML column of ``input_row``.

        A missing or empty XML value produces no rows.

        Raises:
            ConfigurationError: for a non-text output column, or when the
                input row has no column named ``xml_column_name``
        """
        output = _as_updatable(output)
        require_text_schema(output.schema)

        if isinstance(input_row, Row):
            if self.xml_column_name not in input_row.schema:
                raise ConfigurationError(f"Input row has no column '{self.xml_column_name}'")
        elif self.xml_column_name not in input_row:
            raise ConfigurationError(f"Input row has no column '{self.xml_column_name}'")

        xml = input_row[self.xml_column_name]
        if not xml:
            return iter(())
        if not isinstance(xml, (str, bytes)):
            raise ConfigurationError(
                f"Column '{self.xml_column_name}' must hold a string, not {type(xml).__name__}"
            )
        return self._extractor._iter_rows(lambda: load_string(xml), output)


def _as_updatable(output: Union[UpdatableRow, SchemaLike]) -> UpdatableRow:
    return output if isinstance(output, UpdatableRow) else UpdatableRow(output)

"""Streaming XML-to-row extractor.

A finite-state machine reads XML events in a single forward pass and emits
one row per row element, without loading the document:

- ``ROW``: looking for the start of a row element.
- ``COLUMN``: inside a row, looking for column elements or the row's end.
- ``DATA``: inside a column, re-serializing its content as inner XML.

For example, given ``<row><a>foo</a><b>3</b></row><row><a/></row>`` and the
schema ``(a string, b string)`` the extractor produces ``("foo", "3")`` and
``("", None)``: an empty element produces an empty string and a missing
element produces ``None``.
"""

import time
from dataclasses import dataclass, field
from enum import Enum, auto
from typing import BinaryIO, FrozenSet, Iterator, Optional, Union

from xml_row_extractor.rows import Row, UpdatableRow, require_text_schema
from xml_row_extractor.rows.schema import SchemaLike
from xml_row_extractor.shared.config import ExtractorConfig
from xml_row_extractor.shared.errors import (
    ConfigurationError,
    MalformedXmlError,
    StructuralError,
)
from xml_row_extractor.shared.logging import get_logger
from xml_row_extractor.shared.result import ExtractionMetrics

from .events import EventType, XmlEvent, XmlEventReader
from .paths import ColumnPathTable, PathsLike
from .recomposer import FragmentRecomposer

MS_PER_SECOND = 1000


class ParseLocation(Enum):
    """The state names in the extractor's finite-state machine."""

    ROW = auto()
    COLUMN = auto()
    DATA = auto()


@dataclass
class ParseState:
    """The current state of one extraction call."""

    location: ParseLocation = ParseLocation.ROW
    element_name: Optional[str] = None   # column being captured, COLUMN/DATA only
    depth: int = 0                       # same-named elements open inside the column
    recomposer: FragmentRecomposer = field(default_factory=FragmentRecomposer)

    def clear_and_jump(self, location: ParseLocation) -> None:
        """Jump to a different location and drop the current element buffer."""
        self.location = location
        self.element_name = None
        self.depth = 0
        self.recomposer.close()

    def begin_data(self, element_name: str) -> None:
        """Start capturing the inner XML of a column element."""
        self.location = ParseLocation.DATA
        self.element_name = element_name
        self.depth = 0
        self.recomposer.begin()


class XmlExtractor:
    """Streaming XML extractor.

    Converts a byte stream into a lazy sequence of rows. XML is read
    incrementally, so only one row and one column fragment are held at a
    time; in exchange rows and columns are found by element name, not XPath
    (see ``XmlDomExtractor`` for that).
    """

    def __init__(
        self,
        row_element: Optional[str] = None,
        column_paths: PathsLike = None,
        config: Optional[ExtractorConfig] = None,
    ) -> None:
        """Initialize the extractor.

        Args:
            row_element: Name of the XML element that contains rows
            column_paths: For each column, map from the XML element name to
                the column name; unmapped columns use their own name
            config: Full configuration; explicit arguments take precedence

        Raises:
            ConfigurationError: on an empty row element or ambiguous mapping
        """
        self.config = config or ExtractorConfig()
        self.row_element = row_element if row_element is not None else self.config.row_element
        if not self.row_element:
            raise ConfigurationError("row_element must be a non-empty string", "row_element")
        self.column_paths = ColumnPathTable.coerce(
            column_paths if column_paths is not None else self.config.column_paths
        )
        self.logger = get_logger(
            __name__, self.config.correlation_id, "xml_extractor"
        ).bind(row_element=self.row_element)
        self.last_metrics: Optional[ExtractionMetrics] = None

    def extract(
        self,
        stream: BinaryIO,
        output: Union[UpdatableRow, SchemaLike],
    ) -> Iterator[Row]:
        """Extract rows from a binary stream.

        The configuration is checked before this returns; the rows are then
        produced lazily as the returned iterator is advanced.

        Args:
            stream: Readable binary stream; it is not closed
            output: Row builder, or the output schema to build one for

        Returns:
            Iterator of immutable rows, one per row element

        Raises:
            ConfigurationError: immediately, for a non-text column or a
                mapping to a column that is not in the schema
            StructuralError: while iterating, if the stream ends inside a row
            MalformedXmlError: while iterating, if the XML is not well-formed
        """
        if not isinstance(output, UpdatableRow):
            output = UpdatableRow(output)
        self.validate_output(output)
        return self._extract_rows(stream, output)

    def validate_output(self, output: UpdatableRow) -> None:
        """Check that the row builder can hold every mapped text column."""
        require_text_schema(output.schema)
        for column in self.column_paths.output_columns():
            if column not in output.schema:
                raise ConfigurationError(
                    f"Column '{column}' is mapped from '{self.column_paths.resolve_source_path(column)}' "
                    f"but is not in the output schema",
                    field_name=column,
                )

    def _extract_rows(self, stream: BinaryIO, output: UpdatableRow) -> Iterator[Row]:
        metrics = ExtractionMetrics()
        self.last_metrics = metrics
        state = ParseState()
        schema_names = frozenset(output.schema.names)
        start_time = time.perf_counter()

        self.logger.info(
            "Starting row extraction",
            extra={"columns": list(output.schema.names)}
        )

        reader = XmlEventReader(stream, self.config.streaming, self.config.correlation_id)
        try:
            for event in reader:
                metrics.events_processed += 1
                row = self._process_event(event, state, output, schema_names, metrics)
                if row is not None:
                    metrics.rows_emitted += 1
                    if self.config.log_rows:
                        self.logger.debug("Row emitted", extra={"row": row.to_dict()})
                    yield row

            if state.location is not ParseLocation.ROW or not reader.at_top_level:
                raise StructuralError(
                    "XML document ended without proper closing tags",
                    location=state.location.name,
                    open_elements=list(reader.open_elements),
                )
            metrics.completed = True

        except (StructuralError, MalformedXmlError) as e:
            self.logger.error(
                "Row extraction failed",
                extra={"error": str(e), "rows_emitted": metrics.rows_emitted}
            )
            raise

        finally:
            state.recomposer.close()
            reader.close()
            metrics.bytes_read = reader.bytes_read
            metrics.processing_time_ms = (time.perf_counter() - start_time) * MS_PER_SECOND
            self.logger.info("Row extraction finished", extra=metrics.summary())

    def _process_event(
        self,
        event: XmlEvent,
        state: ParseState,
        output: UpdatableRow,
        schema_names: FrozenSet[str],
        metrics: ExtractionMetrics,
    ) -> Optional[Row]:
        """Advance the state machine by one event; return a completed row."""
        if state.location is ParseLocation.ROW:
            return self._process_row_event(event, state, output)
        if state.location is ParseLocation.COLUMN:
            return self._process_column_event(event, state, output, schema_names, metrics)
        if state.location is ParseLocation.DATA:
            self._process_data_event(event, state, output, metrics)
            return None
        raise NotImplementedError(f"Unhandled parse location {state.location}")

    def _process_row_event(
        self, event: XmlEvent, state: ParseState, output: UpdatableRow
    ) -> Optional[Row]:
        # only elements named like the row element are interesting here
        if event.type is not EventType.START_ELEMENT or event.name != self.row_element:
            return None

        output.clear()
        if event.is_empty:
            return output.as_read_only()
        state.clear_and_jump(ParseLocation.COLUMN)
        return None

    def _process_column_event(
        self,
        event: XmlEvent,
        state: ParseState,
        output: UpdatableRow,
        schema_names: FrozenSet[str],
        metrics: ExtractionMetrics,
    ) -> Optional[Row]:
        if event.type is EventType.START_ELEMENT and self._is_column(event.name, schema_names):
            if event.is_empty:
                output.set(self.column_paths.resolve_output_column(event.name), "")
                metrics.columns_captured += 1
                state.clear_and_jump(ParseLocation.COLUMN)
            else:
                state.begin_data(event.name)
            return None

        if event.type is EventType.END_ELEMENT and event.name == self.row_element:
            row = output.as_read_only()
            state.clear_and_jump(ParseLocation.ROW)
            return row

        return None

    def _process_data_event(
        self,
        event: XmlEvent,
        state: ParseState,
        output: UpdatableRow,
        metrics: ExtractionMetrics,
    ) -> None:
        if event.name == state.element_name:
            if event.type is EventType.END_ELEMENT:
                if state.depth == 0:
                    column = self.column_paths.resolve_output_column(event.name)
                    output.set(column, state.recomposer.read_and_clear())
                    metrics.columns_captured += 1
                    state.clear_and_jump(ParseLocation.COLUMN)
                    return
                state.depth -= 1
            elif event.type is EventType.START_ELEMENT and not event.is_empty:
                state.depth += 1

        state.recomposer.accumulate(event)

    def _is_column(self, name: str, schema_names: FrozenSet[str]) -> bool:
        return self.column_paths.is_source(name) or name in schema_names

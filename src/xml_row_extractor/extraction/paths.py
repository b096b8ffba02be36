"""Column path table: mapping between XML element names and output columns.

The table is read-only after construction. Names that are not mapped fall
back to themselves, so an empty table means "element name == column name".
"""

from typing import Dict, Iterable, Iterator, List, Mapping, Optional, Tuple, Union

from xml_row_extractor.shared.errors import AmbiguousColumnMappingError, ConfigurationError

PathsLike = Union["ColumnPathTable", Mapping[str, str], Iterable[Tuple[str, str]], None]


class ColumnPathTable:
    """Bidirectional lookup between source element names and column names."""

    def __init__(self, column_paths: Optional[Mapping[str, str]] = None) -> None:
        """Initialize the table.

        Args:
            column_paths: Mapping from source element name (or XPath for the
                DOM extractor) to output column name

        Raises:
            AmbiguousColumnMappingError: if two sources map to one column
        """
        self._by_source: Dict[str, str] = {}
        self._by_column: Dict[str, str] = {}

        claimed: Dict[str, List[str]] = {}
        for source, column in (column_paths or {}).items():
            if not source or not column:
                raise ConfigurationError(
                    f"Column path entries must be non-empty, got {source!r} -> {column!r}"
                )
            claimed.setdefault(column, []).append(source)
            self._by_source[source] = column
            self._by_column.setdefault(column, source)

        for column, sources in claimed.items():
            if len(sources) > 1:
                raise AmbiguousColumnMappingError(column, sources)

    @classmethod
    def coerce(cls, column_paths: PathsLike) -> "ColumnPathTable":
        """Build a table from a table, a mapping, pairs or ``None``."""
        if isinstance(column_paths, ColumnPathTable):
            return column_paths
        if column_paths is None:
            return cls()
        if isinstance(column_paths, Mapping):
            return cls(column_paths)
        pairs = list(column_paths)
        sources = [source for source, _ in pairs]
        duplicates = sorted({s for s in sources if sources.count(s) > 1})
        if duplicates:
            raise ConfigurationError(f"Source names mapped more than once: {duplicates}")
        return cls(dict(pairs))

    @classmethod
    def from_pairs(cls, pairs: Iterable[str]) -> "ColumnPathTable":
        """Build a table from ``"source=column"`` strings.

        The column name follows the last ``=``, so an XPath source may itself
        contain ``=``.
        """
        parsed = []
        for pair in pairs:
            source, sep, column = pair.rpartition("=")
            if not sep:
                raise ConfigurationError(f"Column mapping '{pair}' must look like source=column")
            parsed.append((source.strip(), column.strip()))
        return cls.coerce(parsed)

    def resolve_output_column(self, source_name: str) -> str:
        """Map a source element name to its output column name."""
        return self._by_source.get(source_name, source_name)

    def resolve_source_path(self, column_name: str) -> str:
        """Map an output column name back to its source element name."""
        return self._by_column.get(column_name, column_name)

    def is_source(self, name: str) -> bool:
        """Check whether ``name`` is an explicitly mapped source."""
        return name in self._by_source

    def output_columns(self) -> List[str]:
        return list(self._by_column)

    def items(self) -> Iterator[Tuple[str, str]]:
        return iter(self._by_source.items())

    def __iter__(self) -> Iterator[str]:
        return iter(self._by_source)

    def __len__(self) -> int:
        return len(self._by_source)

    def __repr__(self) -> str:
        return f"ColumnPathTable({self._by_source!r})"

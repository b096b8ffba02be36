"""Row builder and immutable row snapshots.

``UpdatableRow`` is the write side used by the extractors: set individual
columns, then call ``as_read_only`` to build an immutable ``Row``. The
builder is reused for every row of one extraction, the snapshots are not
tied to it.
"""

from dataclasses import dataclass
from typing import Any, Dict, Iterator, List, Optional, Tuple, Union

from .schema import RowSchema, SchemaLike

ColumnKey = Union[str, int]


@dataclass(frozen=True)
class Row:
    """Immutable row: one ``str`` or ``None`` value per schema column."""

    schema: RowSchema
    values: Tuple[Optional[str], ...]

    def __post_init__(self) -> None:
        """Validate row width."""
        if len(self.values) != len(self.schema):
            raise ValueError(
                f"Row has {len(self.values)} values for {len(self.schema)} columns"
            )

    def __getitem__(self, key: ColumnKey) -> Optional[str]:
        if isinstance(key, int):
            return self.values[key]
        return self.values[self.schema.index_of(key)]

    def get(self, name: str, default: Any = None) -> Any:
        """Get a column value by name, or ``default`` for unknown columns."""
        if name not in self.schema:
            return default
        return self[name]

    def __iter__(self) -> Iterator[Optional[str]]:
        return iter(self.values)

    def __len__(self) -> int:
        return len(self.values)

    def as_tuple(self) -> Tuple[Optional[str], ...]:
        return self.values

    def to_dict(self) -> Dict[str, Optional[str]]:
        """Convert row to an ordered column name -> value dictionary."""
        return dict(zip(self.schema.names, self.values))


class UpdatableRow:
    """Mutable builder for the row currently being assembled.

    Values are ``str`` or ``None``; ``None`` (missing) is distinct from
    ``""`` (present but empty).
    """

    def __init__(self, schema: SchemaLike) -> None:
        """Initialize the builder with every column set to ``None``.

        Args:
            schema: Output schema, or anything ``RowSchema.coerce`` accepts
        """
        self.schema = RowSchema.coerce(schema)
        self._values: List[Optional[str]] = [None] * len(self.schema)

    def _index(self, key: ColumnKey) -> int:
        if isinstance(key, int):
            if not 0 <= key < len(self._values):
                raise IndexError(f"Column index {key} out of range")
            return key
        try:
            return self.schema.index_of(key)
        except KeyError:
            raise KeyError(f"Column '{key}' is not in the output schema") from None

    def set(self, key: ColumnKey, value: Optional[str]) -> None:
        """Set a column by name or position."""
        self._values[self._index(key)] = value

    def get(self, key: ColumnKey) -> Optional[str]:
        """Get the current value of a column."""
        return self._values[self._index(key)]

    def clear(self) -> None:
        """Reset every column to ``None``."""
        for i in range(len(self._values)):
            self._values[i] = None

    def as_read_only(self) -> Row:
        """Build an immutable snapshot of the current values."""
        return Row(self.schema, tuple(self._values))

"""Output schema declarations.

A schema is an ordered list of named columns with a declared type. The
extractors only produce text, so every other declared type is rejected by
``require_text_schema`` before parsing begins.
"""

from dataclasses import dataclass
from datetime import datetime
from decimal import Decimal
from typing import Dict, FrozenSet, Iterator, Sequence, Tuple, Union

from xml_row_extractor.shared.errors import ConfigurationError

TEXT_TYPE_NAME = "string"

# Declared type names, U-SQL style
TYPE_NAMES: FrozenSet[str] = frozenset({
    "string", "int", "long", "short", "byte", "float", "double",
    "decimal", "bool", "datetime", "byte[]",
})

_PYTHON_TYPE_NAMES: Dict[type, str] = {
    str: "string",
    int: "long",
    float: "double",
    Decimal: "decimal",
    bool: "bool",
    datetime: "datetime",
    bytes: "byte[]",
}


@dataclass(frozen=True)
class ColumnSpec:
    """A single named, typed output column."""

    name: str
    type_name: str = TEXT_TYPE_NAME

    def __post_init__(self) -> None:
        """Validate column declaration."""
        if not self.name:
            raise ConfigurationError("Column name cannot be empty")
        if self.type_name not in TYPE_NAMES:
            raise ConfigurationError(
                f"Column '{self.name}' has unknown type '{self.type_name}'",
                field_name=self.name,
            )

    @property
    def is_text(self) -> bool:
        return self.type_name == TEXT_TYPE_NAME


ColumnLike = Union[ColumnSpec, str, Tuple[str, Union[str, type]]]
SchemaLike = Union["RowSchema", str, Sequence[ColumnLike]]


@dataclass(frozen=True)
class RowSchema:
    """Ordered collection of output columns."""

    columns: Tuple[ColumnSpec, ...]

    def __post_init__(self) -> None:
        """Reject duplicate column names."""
        seen = set()
        for column in self.columns:
            if column.name in seen:
                raise ConfigurationError(
                    f"Column '{column.name}' is declared more than once",
                    field_name=column.name,
                )
            seen.add(column.name)

    @classmethod
    def parse(cls, declaration: str) -> "RowSchema":
        """Parse a declaration such as ``"a string, b string"``.

        A column without a type is text. A trailing ``?`` (nullable marker)
        on the type is accepted and ignored.

        Args:
            declaration: Comma separated ``name [type]`` pairs

        Returns:
            RowSchema with the declared columns
        """
        columns = []
        for part in declaration.split(","):
            part = part.strip()
            if not part:
                continue
            pieces = part.split()
            if len(pieces) > 2:
                raise ConfigurationError(f"Cannot parse column declaration '{part}'")
            type_name = pieces[1].lower().rstrip("?") if len(pieces) == 2 else TEXT_TYPE_NAME
            columns.append(ColumnSpec(pieces[0], type_name))
        if not columns:
            raise ConfigurationError("Schema declaration has no columns")
        return cls(tuple(columns))

    @classmethod
    def of(cls, *names: str) -> "RowSchema":
        """Create an all-text schema from column names."""
        return cls(tuple(ColumnSpec(name) for name in names))

    @classmethod
    def coerce(cls, schema: SchemaLike) -> "RowSchema":
        """Build a schema from a declaration string, names, specs or pairs."""
        if isinstance(schema, RowSchema):
            return schema
        if isinstance(schema, str):
            return cls.parse(schema)

        columns = []
        for item in schema:
            if isinstance(item, ColumnSpec):
                columns.append(item)
            elif isinstance(item, str):
                columns.append(ColumnSpec(item))
            else:
                name, declared = item
                if isinstance(declared, type):
                    if declared not in _PYTHON_TYPE_NAMES:
                        raise ConfigurationError(
                            f"Column '{name}' has unsupported type '{declared.__name__}'",
                            field_name=name,
                        )
                    declared = _PYTHON_TYPE_NAMES[declared]
                columns.append(ColumnSpec(name, declared))
        return cls(tuple(columns))

    @property
    def names(self) -> Tuple[str, ...]:
        return tuple(column.name for column in self.columns)

    def index_of(self, name: str) -> int:
        """Get the position of a column, raising KeyError when absent."""
        for i, column in enumerate(self.columns):
            if column.name == name:
                return i
        raise KeyError(name)

    def __contains__(self, name: object) -> bool:
        return any(column.name == name for column in self.columns)

    def __iter__(self) -> Iterator[ColumnSpec]:
        return iter(self.columns)

    def __len__(self) -> int:
        return len(self.columns)

    def __str__(self) -> str:
        return ", ".join(f"{c.name} {c.type_name}" for c in self.columns)


def require_text_schema(schema: RowSchema) -> None:
    """Make sure that all requested columns are of type string.

    Raises:
        ConfigurationError: for the first column with a non-text type
    """
    for column in schema.columns:
        if not column.is_text:
            raise ConfigurationError(
                f"Column '{column.name}' must be of type '{TEXT_TYPE_NAME}', "
                f"not '{column.type_name}'",
                field_name=column.name,
            )

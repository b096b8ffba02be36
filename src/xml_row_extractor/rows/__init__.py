"""Row sink: output schemas, the updatable row builder and immutable rows."""

from .row import Row, UpdatableRow
from .schema import (
    TEXT_TYPE_NAME,
    ColumnSpec,
    RowSchema,
    require_text_schema,
)

__all__ = [
    "TEXT_TYPE_NAME",
    "ColumnSpec",
    "Row",
    "RowSchema",
    "UpdatableRow",
    "require_text_schema",
]

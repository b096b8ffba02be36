"""Integration adapters for third-party data libraries.

pandas is an optional dependency: it is imported when an adapter is used,
not when this module is imported.
"""

from typing import Any, Iterable, List, Optional

from xml_row_extractor.rows import Row, RowSchema
from xml_row_extractor.rows.schema import SchemaLike
from xml_row_extractor.shared.logging import get_logger


def is_pandas_available() -> bool:
    """Check if pandas is available."""
    try:
        import pandas  # noqa: F401
    except ImportError:
        return False
    return True


def rows_to_dataframe(rows: Iterable[Row], schema: Optional[SchemaLike] = None) -> Any:
    """Collect rows into a pandas DataFrame.

    Missing values become ``None`` and the columns use pandas' ``object``
    dtype, so empty strings stay distinct from missing values.

    Args:
        rows: Rows sharing one schema
        schema: Column order to use; required when ``rows`` may be empty,
            otherwise taken from the first row

    Returns:
        pandas.DataFrame with one column per schema column

    Raises:
        ImportError: if pandas is not installed
    """
    try:
        import pandas as pd
    except ImportError as e:
        raise ImportError(
            "rows_to_dataframe requires pandas; install it with "
            "'pip install xml-row-extractor[pandas]'"
        ) from e

    logger = get_logger(__name__, None, "pandas_adapter")
    columns: Optional[List[str]] = list(RowSchema.coerce(schema).names) if schema is not None else None

    records = []
    for row in rows:
        if columns is None:
            columns = list(row.schema.names)
        records.append(row.as_tuple())

    df = pd.DataFrame(records, columns=columns or [], dtype=object)
    logger.debug("Built DataFrame", extra={"row_count": len(df), "columns": list(df.columns)})
    return df

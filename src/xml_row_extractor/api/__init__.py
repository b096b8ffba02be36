"""Public convenience API: one-call functions and data library adapters."""

from .adapters import is_pandas_available, rows_to_dataframe
from .functions import extract_rows, write_rows

__all__ = [
    "extract_rows",
    "is_pandas_available",
    "rows_to_dataframe",
    "write_rows",
]

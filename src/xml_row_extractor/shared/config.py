"""Configuration classes for XML row extraction.

This module provides configuration objects for the streaming extractor. A
configuration is fixed for the lifetime of one extraction call.
"""

import json
from dataclasses import dataclass, field, fields
from pathlib import Path
from typing import Any, Dict, Optional, Union

from .errors import ConfigurationError

DEFAULT_CHUNK_SIZE = 64 * 1024
DEFAULT_SNIFF_SIZE = 1024


@dataclass
class StreamingConfig:
    """Configuration for reading the input byte stream."""

    chunk_size: int = DEFAULT_CHUNK_SIZE   # bytes handed to the XML parser per read
    sniff_size: int = DEFAULT_SNIFF_SIZE   # bytes inspected for BOM / XML declaration

    def __post_init__(self) -> None:
        """Validate streaming configuration."""
        if self.chunk_size <= 0:
            raise ConfigurationError("chunk_size must be > 0", "chunk_size")
        if self.sniff_size <= 0:
            raise ConfigurationError("sniff_size must be > 0", "sniff_size")


@dataclass
class ExtractorConfig:
    """Complete configuration for one extraction call."""

    row_element: str = "row"
    column_paths: Dict[str, str] = field(default_factory=dict)
    streaming: StreamingConfig = field(default_factory=StreamingConfig)

    correlation_id: Optional[str] = None
    log_rows: bool = False

    def __post_init__(self) -> None:
        """Validate extractor configuration."""
        if not isinstance(self.row_element, str) or not self.row_element.strip():
            raise ConfigurationError("row_element must be a non-empty string", "row_element")
        for source, column in self.column_paths.items():
            if not source or not column:
                raise ConfigurationError(
                    f"column_paths entries must be non-empty, got {source!r} -> {column!r}",
                    "column_paths",
                )

    @classmethod
    def low_memory(cls, row_element: str = "row") -> "ExtractorConfig":
        """Create configuration that keeps parser buffers small."""
        return cls(
            row_element=row_element,
            streaming=StreamingConfig(chunk_size=4096, sniff_size=DEFAULT_SNIFF_SIZE),
        )

    @classmethod
    def high_throughput(cls, row_element: str = "row") -> "ExtractorConfig":
        """Create configuration that reads large chunks per parser call."""
        return cls(
            row_element=row_element,
            streaming=StreamingConfig(chunk_size=1024 * 1024),
        )

    def to_dict(self) -> Dict[str, Any]:
        """Convert configuration to dictionary format."""
        return {
            "row_element": self.row_element,
            "column_paths": dict(self.column_paths),
            "streaming": {
                "chunk_size": self.streaming.chunk_size,
                "sniff_size": self.streaming.sniff_size,
            },
            "correlation_id": self.correlation_id,
            "log_rows": self.log_rows,
        }

    def to_json(self, indent: int = 2) -> str:
        """Convert configuration to JSON string."""
        return json.dumps(self.to_dict(), indent=indent)

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> "ExtractorConfig":
        """Create configuration from dictionary.

        Unknown keys are rejected so that typos in job files surface early.

        Args:
            data: Dictionary containing configuration data

        Returns:
            ExtractorConfig instance created from dictionary
        """
        known = {f.name for f in fields(cls)}
        unknown = sorted(set(data) - known)
        if unknown:
            raise ConfigurationError(f"Unknown configuration keys: {unknown}")

        values = dict(data)
        streaming = values.pop("streaming", None)
        if streaming is not None:
            if not isinstance(streaming, dict):
                raise ConfigurationError("streaming must be an object", "streaming")
            try:
                values["streaming"] = StreamingConfig(**streaming)
            except TypeError as e:
                raise ConfigurationError(f"Invalid streaming configuration: {e}", "streaming") from e
        if "column_paths" in values and not isinstance(values["column_paths"], dict):
            raise ConfigurationError("column_paths must be an object", "column_paths")
        return cls(**values)

    @classmethod
    def from_json(cls, json_str: str) -> "ExtractorConfig":
        """Create configuration from JSON string."""
        try:
            data = json.loads(json_str)
        except json.JSONDecodeError as e:
            raise ConfigurationError(f"Configuration is not valid JSON: {e}") from e
        if not isinstance(data, dict):
            raise ConfigurationError("Configuration must be a JSON object")
        return cls.from_dict(data)

    @classmethod
    def from_file(cls, path: Union[str, Path]) -> "ExtractorConfig":
        """Load configuration from a JSON file."""
        return cls.from_json(Path(path).read_text(encoding="utf-8"))

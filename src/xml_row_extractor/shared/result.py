"""Metrics collected while extracting rows."""

from dataclasses import dataclass
from typing import Any, Dict


@dataclass
class ExtractionMetrics:
    """Counters for a single extraction call."""

    rows_emitted: int = 0
    columns_captured: int = 0
    events_processed: int = 0
    bytes_read: int = 0
    processing_time_ms: float = 0.0
    completed: bool = False

    @property
    def rows_per_second(self) -> float:
        """Calculate rows emitted per second."""
        if self.processing_time_ms <= 0:
            return 0.0
        return (self.rows_emitted * 1000.0) / self.processing_time_ms

    def summary(self) -> Dict[str, Any]:
        """Get summary statistics for logging."""
        return {
            "rows_emitted": self.rows_emitted,
            "columns_captured": self.columns_captured,
            "events_processed": self.events_processed,
            "bytes_read": self.bytes_read,
            "processing_time_ms": round(self.processing_time_ms, 3),
            "completed": self.completed,
        }

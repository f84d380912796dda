"""Result objects and diagnostic types for byte stream filtering.

This module defines the diagnostics and metrics attached to every operation
of the convenience API.
"""

import time
from dataclasses import dataclass, field
from enum import Enum, auto
from typing import Any, Dict, Optional


class DiagnosticSeverity(Enum):
    """Severity levels for diagnostic entries."""

    DEBUG = auto()      # Debug-level information
    INFO = auto()       # Informational messages
    WARNING = auto()    # Input was passed through in a degraded way
    ERROR = auto()      # Operation could not complete


@dataclass
class DiagnosticEntry:
    """Single diagnostic entry with context information."""

    severity: DiagnosticSeverity
    message: str
    component: str
    position: Optional[int] = None
    details: Optional[Dict[str, Any]] = None
    timestamp: float = field(default_factory=time.time)
    correlation_id: Optional[str] = None

    def __post_init__(self) -> None:
        """Validate diagnostic entry."""
        if not self.message:
            raise ValueError("Diagnostic message cannot be empty")
        if not self.component:
            raise ValueError("Diagnostic component cannot be empty")


@dataclass
class FilterMetrics:
    """Performance metrics for one filtering operation."""

    processing_time_ms: float = 0.0
    bytes_read: int = 0
    bytes_written: int = 0
    match_count: int = 0

    @property
    def bytes_per_second(self) -> float:
        """Calculate input bytes processed per second."""
        if self.processing_time_ms <= 0:
            return 0.0
        return (self.bytes_read * 1000.0) / self.processing_time_ms

    @property
    def size_ratio(self) -> float:
        """Ratio of output size to input size (1.0 for empty input)."""
        if self.bytes_read == 0:
            return 1.0
        return self.bytes_written / self.bytes_read

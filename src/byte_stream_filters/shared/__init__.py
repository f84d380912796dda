"""Shared utilities for byte stream filtering.

This module provides configuration objects, result types and logging helpers
used across the stream components, the API and the CLI.
"""

from .result import (
    DiagnosticEntry,
    DiagnosticSeverity,
    FilterMetrics,
)
from .config import (
    ConfigError,
    ConfigValidationError,
    FilterConfig,
    GlobalConfig,
    PatternConfig,
    StreamingConfig,
)
from .logging import (
    CorrelationLogger,
    get_logger,
)

__all__ = [
    "DiagnosticEntry",
    "DiagnosticSeverity",
    "FilterMetrics",
    "ConfigError",
    "ConfigValidationError",
    "FilterConfig",
    "GlobalConfig",
    "PatternConfig",
    "StreamingConfig",
    "CorrelationLogger",
    "get_logger",
]

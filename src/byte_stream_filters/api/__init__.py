"""Convenience API for byte stream filtering.

Level 1 functions filter whole inputs in one call; ``StreamFilterEngine``
keeps a configuration and usage statistics across calls.
"""

from .filters import (
    FilterResult,
    InputType,
    PatternPair,
    RecordsResult,
    SplitResult,
    StreamFilterEngine,
    find_replace,
    find_replace_all,
    replace_block,
    split,
    split_records,
    trim,
)

__all__ = [
    "FilterResult",
    "InputType",
    "PatternPair",
    "RecordsResult",
    "SplitResult",
    "StreamFilterEngine",
    "find_replace",
    "find_replace_all",
    "replace_block",
    "split",
    "split_records",
    "trim",
]

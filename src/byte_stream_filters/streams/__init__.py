"""Streaming byte-pattern filters.

This package provides single-pass, bounded-memory filters that look for a
fixed byte pattern in a stream and act on it.

Key Components:
    Matcher: Incremental single-pattern matcher shared by every filter
    FindReplace: Replaces each occurrence of a pattern
    Splitter: Routes bytes before/after the first occurrence to two sinks
    DelimitedSource: Presents end of data at a separator, leaving the source open
    BlockReplace: Replaces whole begin/end delimited blocks
    Trim: Keeps only the bytes between a begin and an end marker
"""

from .base import (
    ByteFilter,
    ByteSink,
    ByteSource,
    BytesSink,
    FileSink,
    IllegalStateError,
    InvalidPatternError,
    NullSink,
    PatternLike,
    StreamFilterError,
    has_unique_first_byte,
    pump,
    to_pattern,
    validate_pattern,
)
from .block import BlockReplace, RegionState
from .delimited import DelimitedSource, RecordReader, iter_delimited
from .matcher import Matcher, MatchResult, MatchStatus
from .replace import FindReplace
from .split import Splitter
from .trim import Trim

__all__ = [
    "BlockReplace",
    "ByteFilter",
    "ByteSink",
    "ByteSource",
    "BytesSink",
    "DelimitedSource",
    "FileSink",
    "FindReplace",
    "IllegalStateError",
    "InvalidPatternError",
    "MatchResult",
    "MatchStatus",
    "Matcher",
    "NullSink",
    "PatternLike",
    "RecordReader",
    "RegionState",
    "Splitter",
    "StreamFilterError",
    "Trim",
    "has_unique_first_byte",
    "iter_delimited",
    "pump",
    "to_pattern",
    "validate_pattern",
]

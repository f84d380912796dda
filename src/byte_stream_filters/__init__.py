"""Byte Stream Filters.

Single-pass, bounded-memory filters that find a fixed byte pattern in a
stream and replace it, split on it, trim around it, or stop reading at it.

Progressive API Disclosure:
- Level 1: Simple functions - find_replace(), replace_block(), split(), trim()
- Level 2: Configured engine - StreamFilterEngine class
- Level 3: Stream components - FindReplace, BlockReplace, Splitter, Trim,
  DelimitedSource, wrapping any sink or source
"""

__version__ = "0.1.0"
__author__ = "Byte Stream Filters Team"

# Progressive API disclosure - Level 1: Simple functions
# Progressive API disclosure - Level 2: Configured engine
from .api import (
    FilterResult,
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

# Configuration classes for advanced usage
from .shared.config import ConfigError, ConfigValidationError, FilterConfig

# Level 3: Stream components
from .streams import (
    BlockReplace,
    BytesSink,
    DelimitedSource,
    FindReplace,
    IllegalStateError,
    InvalidPatternError,
    Matcher,
    Splitter,
    StreamFilterError,
    Trim,
)

__all__ = [
    # Version and metadata
    "__author__",
    "__version__",

    # Level 1: Simple filtering functions
    "find_replace",
    "find_replace_all",
    "replace_block",
    "split",
    "split_records",
    "trim",

    # Level 2: Configured engine
    "StreamFilterEngine",

    # Level 3: Stream components
    "BlockReplace",
    "BytesSink",
    "DelimitedSource",
    "FindReplace",
    "Matcher",
    "Splitter",
    "Trim",

    # Result objects
    "FilterResult",
    "RecordsResult",
    "SplitResult",

    # Configuration and errors
    "FilterConfig",
    "ConfigError",
    "ConfigValidationError",
    "StreamFilterError",
    "InvalidPatternError",
    "IllegalStateError",
]

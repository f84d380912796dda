"""Replace whole delimited blocks of a byte stream.

A block starts at an occurrence of ``begin`` and ends at the next occurrence
of ``end``; the block, both markers included, is replaced by ``replace``.
Bytes of an open block are held back until ``end`` shows up. If the stream
closes first, they are written back verbatim behind ``begin``, so an
unterminated block is never lost. Blocks do not nest: while a block is open
only ``end`` is looked for.
"""

from enum import Enum, auto
from typing import Optional

from ..shared.config import DEFAULT_ENCODING
from ..shared.logging import get_logger
from .base import (
    ByteFilter,
    ByteSink,
    PatternLike,
    to_pattern,
    validate_pattern,
)
from .matcher import Matcher


class RegionState(Enum):
    """Position of the filter relative to a block."""

    OUTSIDE = auto()    # Looking for begin
    INSIDE = auto()     # Begin found, buffering until end


class BlockReplace(ByteFilter):
    """Sink wrapper replacing ``begin ... end`` blocks by ``replace``."""

    def __init__(
        self,
        sink: ByteSink,
        begin: PatternLike,
        end: PatternLike,
        replace: PatternLike,
        *,
        max_region_bytes: Optional[int] = None,
        encoding: str = DEFAULT_ENCODING,
        strict: bool = False,
        correlation_id: Optional[str] = None
    ) -> None:
        """Initialize the filter.

        Args:
            sink: Destination of the filtered bytes
            begin: Non-empty marker opening a block
            end: Non-empty marker closing a block
            replace: Bytes written in place of each complete block
            max_region_bytes: Optional cap on buffered block content. A block
                growing beyond it is abandoned and written back verbatim
            encoding: Codec used for string arguments
            strict: Also reject markers whose first byte recurs
            correlation_id: Optional correlation ID for logging

        Raises:
            InvalidPatternError: If ``begin`` or ``end`` is empty
        """
        super().__init__()
        if max_region_bytes is not None and max_region_bytes <= 0:
            raise ValueError("max_region_bytes must be > 0 or None")

        self._sink = sink
        self._begin = validate_pattern(
            to_pattern(begin, encoding), "begin", require_unique_first=strict
        )
        self._end = validate_pattern(
            to_pattern(end, encoding), "end", require_unique_first=strict
        )
        self._replace = to_pattern(replace, encoding)
        self._max_region_bytes = max_region_bytes

        self._begin_matcher = Matcher(self._begin)
        self._end_matcher = Matcher(self._end)
        self._state = RegionState.OUTSIDE
        self._region = bytearray()

        self.match_count = 0
        self.abandoned_count = 0
        self.logger = get_logger(__name__, correlation_id, "block_replace").bind(
            begin_length=len(self._begin), end_length=len(self._end)
        )

    @property
    def state(self) -> RegionState:
        return self._state

    @property
    def inside_region(self) -> bool:
        """Whether a block has been opened and not yet closed."""
        return self._state is RegionState.INSIDE

    @property
    def region_size(self) -> int:
        """Number of bytes currently buffered for the open block."""
        return len(self._region)

    def _process(self, data: bytes) -> None:
        out = bytearray()
        begin_feed = self._begin_matcher.feed
        end_feed = self._end_matcher.feed

        for byte in data:
            if self._state is RegionState.OUTSIDE:
                result = begin_feed(byte)
                out += result.released
                if result.matched:
                    self._state = RegionState.INSIDE
                continue

            result = end_feed(byte)
            self._region += result.released
            if result.matched:
                self._region.clear()
                out += self._replace
                self._state = RegionState.OUTSIDE
                self.match_count += 1
            elif (
                self._max_region_bytes is not None
                and len(self._region) > self._max_region_bytes
            ):
                out += self._abandon_region()

        if out:
            self._sink.write(bytes(out))

    def _abandon_region(self) -> bytes:
        """Leave the open block, returning its bytes for verbatim output."""
        restored = self._begin + bytes(self._region) + self._end_matcher.flush()
        self.logger.debug(
            "Open block abandoned",
            extra={"region_size": len(self._region), "limit": self._max_region_bytes}
        )
        self._region.clear()
        self._state = RegionState.OUTSIDE
        self.abandoned_count += 1
        return restored

    def _flush_sinks(self) -> None:
        self._sink.flush()

    def _finish(self) -> None:
        if self._state is RegionState.INSIDE:
            self.logger.debug(
                "Stream closed inside a block, restoring it",
                extra={"region_size": len(self._region)}
            )
            tail = self._abandon_region()
        else:
            tail = self._begin_matcher.flush()
        if tail:
            self._sink.write(tail)
        self._sink.close()

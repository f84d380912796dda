"""Split a byte stream in two around the first occurrence of a pattern."""

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


class Splitter(ByteFilter):
    """Route bytes to ``before`` until ``pattern`` is found, then to ``after``.

    The pattern itself is written nowhere. Once found, the splitter is a pure
    passthrough to ``after``: later occurrences are not matched. If the
    pattern never occurs, ``before`` receives the whole stream.
    """

    def __init__(
        self,
        pattern: PatternLike,
        before: ByteSink,
        after: ByteSink,
        *,
        encoding: str = DEFAULT_ENCODING,
        strict: bool = False,
        correlation_id: Optional[str] = None
    ) -> None:
        """Initialize the splitter.

        Args:
            pattern: Non-empty pattern to split on
            before: Sink receiving bytes preceding the first occurrence
            after: Sink receiving bytes following the first occurrence
            encoding: Codec used when ``pattern`` is a string
            strict: Also reject patterns whose first byte recurs
            correlation_id: Optional correlation ID for logging

        Raises:
            InvalidPatternError: If the pattern is empty
        """
        super().__init__()
        self._pattern = validate_pattern(
            to_pattern(pattern, encoding), "pattern", require_unique_first=strict
        )
        self._matcher = Matcher(self._pattern)
        self._before = before
        self._after = after
        self._found = False
        self.logger = get_logger(__name__, correlation_id, "splitter").bind(
            pattern_length=len(self._pattern)
        )

    @property
    def pattern(self) -> bytes:
        return self._pattern

    @property
    def found(self) -> bool:
        """Whether the pattern has been found."""
        return self._found

    def _process(self, data: bytes) -> None:
        if self._found:
            self._after.write(data)
            return

        feed = self._matcher.feed
        out = bytearray()
        for position, byte in enumerate(data):
            result = feed(byte)
            out += result.released
            if result.matched:
                self._found = True
                if out:
                    self._before.write(bytes(out))
                self.logger.debug("Split pattern found")
                rest = data[position + 1:]
                if rest:
                    self._after.write(rest)
                return
        if out:
            self._before.write(bytes(out))

    def _flush_sinks(self) -> None:
        self._before.flush()
        if self._after is not self._before:
            self._after.flush()

    def _finish(self) -> None:
        pending = self._matcher.flush()
        if pending:
            self._before.write(pending)
        self._before.close()
        if self._after is not self._before:
            self._after.close()

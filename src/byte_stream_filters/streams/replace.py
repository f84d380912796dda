"""Find-and-replace filter for byte streams.

Every occurrence of a fixed pattern written to the filter reaches the wrapped
sink as the replacement instead. Bytes that only looked like the beginning of
the pattern are passed through unchanged once the match breaks, or on close.
See ``matcher`` for the first-byte uniqueness limitation.
"""

from typing import Optional, Sequence

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


class FindReplace(ByteFilter):
    """Sink wrapper replacing each occurrence of ``find`` by ``replace``.

    Examples:
        >>> sink = BytesSink()
        >>> with FindReplace(sink, "dc", "zyz") as stream:
        ...     stream.write(b"abdcdeazyx")
        >>> sink.getvalue()
        b'abzyzdeazyx'
    """

    def __init__(
        self,
        sink: ByteSink,
        find: PatternLike,
        replace: PatternLike,
        *,
        encoding: str = DEFAULT_ENCODING,
        strict: bool = False,
        allow_empty: bool = True,
        correlation_id: Optional[str] = None
    ) -> None:
        """Initialize the filter.

        Args:
            sink: Destination of the filtered bytes
            find: Pattern to find. An empty pattern never matches, so
                everything passes through unchanged
            replace: Replacement written for each occurrence (may be empty)
            encoding: Codec used when ``find``/``replace`` are strings
            strict: Reject empty patterns and patterns whose first byte recurs
            allow_empty: Accept an empty ``find`` (ignored when ``strict``)
            correlation_id: Optional correlation ID for logging
        """
        super().__init__()
        self._sink = sink
        self._find = validate_pattern(
            to_pattern(find, encoding),
            "find",
            allow_empty=allow_empty and not strict,
            require_unique_first=strict
        )
        self._replace = to_pattern(replace, encoding)
        self._matcher = Matcher(self._find)
        self.match_count = 0

        self.logger = get_logger(__name__, correlation_id, "find_replace").bind(
            find_length=len(self._find)
        )
        self.logger.debug(
            "FindReplace initialized", extra={"replace_length": len(self._replace)}
        )

    @classmethod
    def chain(
        cls,
        sink: ByteSink,
        finds: Sequence[PatternLike],
        replaces: Sequence[PatternLike],
        **kwargs
    ) -> "FindReplace":
        """Build a chain applying several find/replace operations in one pass.

        Instance ``i`` performs ``finds[i] -> replaces[i]`` and feeds instance
        ``i + 1``; the last instance feeds ``sink``. Closing the returned head
        closes the whole chain.

        Args:
            sink: Destination of the fully filtered bytes
            finds: Patterns to find, applied in order
            replaces: Replacement for each pattern
            **kwargs: Keyword arguments passed to every instance

        Returns:
            The head of the chain

        Raises:
            ValueError: If ``finds`` is empty or the sequences differ in length
        """
        if len(finds) == 0:
            raise ValueError("finds must contain at least one pattern")
        if len(finds) != len(replaces):
            raise ValueError("finds and replaces must have the same length")

        stream: ByteSink = sink
        for find, replace in reversed(list(zip(finds, replaces))):
            stream = cls(stream, find, replace, **kwargs)
        return stream

    @property
    def find(self) -> bytes:
        return self._find

    @property
    def replace(self) -> bytes:
        return self._replace

    @property
    def sink(self) -> ByteSink:
        return self._sink

    def _process(self, data: bytes) -> None:
        feed = self._matcher.feed
        out = bytearray()
        for byte in data:
            result = feed(byte)
            out += result.released
            if result.matched:
                out += self._replace
                self.match_count += 1
        if out:
            self._sink.write(bytes(out))

    def _flush_sinks(self) -> None:
        self._sink.flush()

    def _finish(self) -> None:
        pending = self._matcher.flush()
        if pending:
            self._sink.write(pending)
        self.logger.debug(
            "FindReplace closed",
            extra={"match_count": self.match_count, "flushed_partial": len(pending)}
        )
        self._sink.close()

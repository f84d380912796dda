"""Read one logical record out of a multi-record byte stream.

A ``DelimitedSource`` reports end of data as soon as a separator is read from
the underlying source, while leaving the source open and positioned right
after the separator, so the next record can be read by a new instance. This
is how the parts of a multipart body are carved out one after the other:

    --boundary CRLF part CRLF --boundary CRLF part CRLF --boundary -- CRLF

With ``multipart_trailer`` enabled, the two bytes following the separator
are consumed as well, plus the CRLF after them when they are ``--`` (the
end-of-multipart marker, reported through ``last_part``).
"""

from collections import deque
from typing import Deque, Iterator, Optional

from ..shared.config import DEFAULT_ENCODING
from ..shared.logging import get_logger
from .base import (
    ByteSource,
    IllegalStateError,
    PatternLike,
    to_pattern,
    validate_pattern,
)
from .matcher import Matcher

LAST_PART_MARKER = b"--"
TRAILER_LENGTH = 2  # CRLF, or the "--" marker itself


class DelimitedSource:
    """Lazy, non-restartable view of a source up to the next separator."""

    def __init__(
        self,
        source: ByteSource,
        separator: PatternLike,
        *,
        multipart_trailer: bool = True,
        encoding: str = DEFAULT_ENCODING,
        correlation_id: Optional[str] = None
    ) -> None:
        """Initialize the delimited view.

        Args:
            source: Underlying source, read one byte at a time and never closed
            separator: Bytes marking the end of the record
            multipart_trailer: Consume the multipart trailer after the separator
            encoding: Codec used when ``separator`` is a string
            correlation_id: Optional correlation ID for logging

        Raises:
            InvalidPatternError: If the separator is empty or its first byte
                occurs again later in it
        """
        self._source = source
        self._separator = validate_pattern(
            to_pattern(separator, encoding),
            "separator",
            require_unique_first=True
        )
        self._matcher = Matcher(self._separator)
        self._multipart_trailer = multipart_trailer

        # Bytes resolved as record content but not yet returned to the caller.
        self._ready: Deque[int] = deque()
        self._separator_found = False
        self._source_exhausted = False
        self._last_part = False
        self._closed = False
        self.bytes_consumed = 0
        self.logger = get_logger(__name__, correlation_id, "delimited_source").bind(
            separator_length=len(self._separator)
        )

    @property
    def separator(self) -> bytes:
        return self._separator

    @property
    def separator_found(self) -> bool:
        """Whether the separator ended this record."""
        return self._separator_found

    @property
    def last_part(self) -> bool:
        """Whether the end-of-multipart marker followed the separator."""
        return self._last_part

    @property
    def exhausted(self) -> bool:
        """Whether the underlying source reached its end."""
        return self._source_exhausted

    @property
    def closed(self) -> bool:
        return self._closed

    def _next_source_byte(self) -> Optional[int]:
        if self._source_exhausted:
            return None
        chunk = self._source.read(1)
        if not chunk:
            self._source_exhausted = True
            return None
        self.bytes_consumed += 1
        return chunk[0]

    def _consume_trailer(self) -> None:
        trailer = bytearray()
        for _ in range(TRAILER_LENGTH):
            byte = self._next_source_byte()
            if byte is None:
                break
            trailer.append(byte)

        if trailer == LAST_PART_MARKER:
            self._last_part = True
            for _ in range(TRAILER_LENGTH):
                if self._next_source_byte() is None:
                    break

        self.logger.debug(
            "Separator met",
            extra={"last_part": self._last_part, "trailer": bytes(trailer)}
        )

    def read_byte(self) -> Optional[int]:
        """Return the next byte of the record, or None at its end.

        Raises:
            IllegalStateError: If the source has been closed
        """
        if self._closed:
            raise IllegalStateError("DelimitedSource is closed")

        while True:
            if self._ready:
                return self._ready.popleft()
            if self._separator_found:
                return None

            byte = self._next_source_byte()
            if byte is None:
                # Real end of data: a dangling partial separator is content.
                pending = self._matcher.flush()
                if not pending:
                    return None
                self._ready.extend(pending)
                continue

            result = self._matcher.feed(byte)
            self._ready.extend(result.released)
            if result.matched:
                self._separator_found = True
                if self._multipart_trailer:
                    self._consume_trailer()

    def read(self, size: int = -1) -> bytes:
        """Read up to ``size`` bytes of the record (all remaining if negative).

        Returns:
            The bytes read, ``b""`` once the record has ended
        """
        out = bytearray()
        while size < 0 or len(out) < size:
            byte = self.read_byte()
            if byte is None:
                break
            out.append(byte)
        return bytes(out)

    def __iter__(self) -> Iterator[int]:
        while True:
            byte = self.read_byte()
            if byte is None:
                return
            yield byte

    def close(self) -> None:
        """Stop reading. The underlying source is left open."""
        self._closed = True

    def __enter__(self) -> "DelimitedSource":
        return self

    def __exit__(self, *exc_info) -> None:
        self.close()


class RecordReader:
    """Iterate over the successive records of a source.

    Each record is read through a fresh ``DelimitedSource``. Iteration stops
    when the source is exhausted or, with ``multipart_trailer``, when the
    end-of-multipart marker is met. A source ending right after a separator
    yields no trailing empty record.
    """

    def __init__(
        self,
        source: ByteSource,
        separator: PatternLike,
        *,
        multipart_trailer: bool = True,
        encoding: str = DEFAULT_ENCODING,
        correlation_id: Optional[str] = None
    ) -> None:
        self._source = source
        self._separator = to_pattern(separator, encoding)
        self._multipart_trailer = multipart_trailer
        self._correlation_id = correlation_id
        validate_pattern(self._separator, "separator", require_unique_first=True)

        self.separators_found = 0
        self.last_part = False
        self.bytes_consumed = 0

    def __iter__(self) -> Iterator[bytes]:
        while True:
            with DelimitedSource(
                self._source,
                self._separator,
                multipart_trailer=self._multipart_trailer,
                correlation_id=self._correlation_id
            ) as part:
                record = part.read()
            self.bytes_consumed += part.bytes_consumed

            if part.separator_found:
                self.separators_found += 1
                self.last_part = part.last_part
                yield record
                if part.last_part or part.exhausted:
                    return
                continue

            if record:
                yield record
            return


def iter_delimited(
    source: ByteSource,
    separator: PatternLike,
    *,
    multipart_trailer: bool = True,
    encoding: str = DEFAULT_ENCODING,
    correlation_id: Optional[str] = None
) -> Iterator[bytes]:
    """Yield successive records of ``source`` separated by ``separator``.

    Args:
        source: Underlying source; left open
        separator: Record separator
        multipart_trailer: Consume the multipart trailer after each separator
        encoding: Codec used when ``separator`` is a string
        correlation_id: Optional correlation ID for logging

    Returns:
        Iterator over the content of each record
    """
    return iter(
        RecordReader(
            source,
            separator,
            multipart_trailer=multipart_trailer,
            encoding=encoding,
            correlation_id=correlation_id
        )
    )

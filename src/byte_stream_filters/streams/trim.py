"""Keep only the bytes found between a begin marker and an end marker."""

from typing import Optional

from ..shared.config import DEFAULT_ENCODING
from .base import ByteFilter, ByteSink, NullSink, PatternLike
from .split import Splitter


class Trim(ByteFilter):
    """Discard everything up to ``begin`` and from ``end`` onwards.

    Built from two splitters: the first one, on ``begin``, drops what comes
    before it and forwards the rest to the second one, on ``end``, which
    writes what comes before ``end`` to the sink and drops the remainder.
    Because ``end`` is only looked for after ``begin``, an ``end`` occurring
    first is ignored. Both markers are removed.
    """

    def __init__(
        self,
        sink: ByteSink,
        begin: PatternLike,
        end: PatternLike,
        *,
        encoding: str = DEFAULT_ENCODING,
        strict: bool = False,
        correlation_id: Optional[str] = None
    ) -> None:
        super().__init__()
        self._head_discard = NullSink()
        self._tail_discard = NullSink()
        self._end_splitter = Splitter(
            end, sink, self._tail_discard,
            encoding=encoding, strict=strict, correlation_id=correlation_id
        )
        self._begin_splitter = Splitter(
            begin, self._head_discard, self._end_splitter,
            encoding=encoding, strict=strict, correlation_id=correlation_id
        )

    @property
    def begin_found(self) -> bool:
        return self._begin_splitter.found

    @property
    def end_found(self) -> bool:
        return self._end_splitter.found

    @property
    def discarded(self) -> int:
        """Bytes dropped so far, markers excluded."""
        return self._head_discard.discarded + self._tail_discard.discarded

    def _process(self, data: bytes) -> None:
        self._begin_splitter.write(data)

    def _flush_sinks(self) -> None:
        self._begin_splitter.flush()

    def _finish(self) -> None:
        self._begin_splitter.close()

"""Incremental fixed-pattern matching over a byte stream.

The matcher consumes one byte at a time and keeps a single cursor: the number
of leading pattern bytes matched by the most recent input. It never looks
back further than that cursor, which keeps memory bounded by the pattern
length.

Known limitation: when a partial match breaks, the matched prefix is handed
back as plain bytes and matching restarts at the current byte only. A match
starting inside the abandoned prefix is therefore missed whenever the first
pattern byte recurs in the pattern, e.g. ``b"abac"`` is not found in
``b"ababac"``:

- ``aba`` is matched, then ``b`` breaks the match and ``aba`` is released,
- matching restarts at ``b`` and ``bac`` never matches.

Callers that need a guarantee must use patterns whose first byte is unique.
"""

from dataclasses import dataclass
from enum import Enum, auto


class MatchStatus(Enum):
    """Outcome of feeding one byte to a matcher."""

    PENDING = auto()    # No full match yet (partial or none)
    MATCHED = auto()    # The whole pattern has just been matched


@dataclass(frozen=True)
class MatchResult:
    """Result of ``Matcher.feed``.

    Attributes:
        status: Whether the pattern has just been fully matched
        released: Bytes now known to be ordinary (unmatched) output, in
            stream order: an abandoned prefix followed, when it starts no
            match, by the byte just fed
    """

    status: MatchStatus
    released: bytes = b""

    @property
    def matched(self) -> bool:
        """Whether the pattern has just been fully matched."""
        return self.status is MatchStatus.MATCHED


# Results carrying no released bytes are shared.
_PENDING = MatchResult(MatchStatus.PENDING)
_MATCHED = MatchResult(MatchStatus.MATCHED)


class Matcher:
    """Single-pattern incremental matcher with restart-on-mismatch semantics.

    An empty pattern never matches; every byte fed is released unchanged.
    """

    def __init__(self, pattern: bytes) -> None:
        """Initialize the matcher.

        Args:
            pattern: Byte sequence to find
        """
        self._pattern = bytes(pattern)
        self._length = len(self._pattern)
        self._first = self._pattern[0] if self._pattern else -1
        self._index = 0

    @property
    def pattern(self) -> bytes:
        """The pattern being searched for."""
        return self._pattern

    @property
    def index(self) -> int:
        """Number of pattern bytes matched so far (0 when nothing is pending)."""
        return self._index

    @property
    def pending(self) -> bytes:
        """Bytes held back as a partial match."""
        return self._pattern[:self._index]

    def feed(self, byte: int) -> MatchResult:
        """Consume one byte.

        Args:
            byte: Byte value in ``range(256)``

        Returns:
            MatchResult describing the match state and released bytes
        """
        if not self._length:
            return MatchResult(MatchStatus.PENDING, bytes((byte,)))

        index = self._index
        if byte == self._pattern[index]:
            index += 1
            if index == self._length:
                self._index = 0
                return _MATCHED
            self._index = index
            return _PENDING

        # Mismatch: the prefix matched so far is plain output. Matching
        # restarts at this byte only, never inside the released prefix.
        released = self._pattern[:index]
        self._index = 0

        if byte == self._first:
            # Only reachable after a broken prefix, so the pattern is at
            # least two bytes long and this cannot complete a match.
            self._index = 1
            return MatchResult(MatchStatus.PENDING, released)

        return MatchResult(MatchStatus.PENDING, released + bytes((byte,)))

    def flush(self) -> bytes:
        """Abandon any partial match.

        Returns:
            The pending prefix, which callers must emit as plain bytes
        """
        pending = self.pending
        self._index = 0
        return pending

    def reset(self) -> None:
        """Forget any partial match without returning it."""
        self._index = 0

    def __repr__(self) -> str:
        return f"Matcher(pattern={self._pattern!r}, index={self._index})"

"""Byte sink/source interfaces and helpers shared by all stream filters.

Sinks accept bytes (``write``/``flush``/``close``) and sources yield them
(``read(size)`` returning ``b""`` at end of data). Binary file objects satisfy
both protocols, and every filter in this package is itself a sink, so filters
chain by wrapping one another.
"""

from types import TracebackType
from typing import BinaryIO, Optional, Protocol, Type, Union, runtime_checkable

from ..shared.config import DEFAULT_BUFFER_SIZE, DEFAULT_ENCODING

# Type definitions for pattern arguments
PatternLike = Union[bytes, bytearray, memoryview, str]


class StreamFilterError(Exception):
    """Base exception for stream filter errors."""


class InvalidPatternError(StreamFilterError, ValueError):
    """Raised at construction when a pattern cannot be used."""

    def __init__(self, message: str, pattern: Optional[bytes] = None) -> None:
        super().__init__(message)
        self.pattern = pattern


class IllegalStateError(StreamFilterError, RuntimeError):
    """Raised when an operation is attempted on a closed filter or source."""


@runtime_checkable
class ByteSink(Protocol):
    """Anything bytes can be pushed into."""

    def write(self, data: bytes) -> int: ...

    def flush(self) -> None: ...

    def close(self) -> None: ...


@runtime_checkable
class ByteSource(Protocol):
    """Anything bytes can be pulled from."""

    def read(self, size: int = -1) -> bytes: ...


def to_pattern(value: PatternLike, encoding: str = DEFAULT_ENCODING) -> bytes:
    """Convert a pattern or replacement argument to immutable bytes.

    Args:
        value: Bytes-like value, or a string to encode
        encoding: Codec used for string values

    Returns:
        The pattern as ``bytes``
    """
    if isinstance(value, str):
        return value.encode(encoding)
    if isinstance(value, (bytes, bytearray, memoryview)):
        return bytes(value)
    raise TypeError(
        f"pattern must be bytes-like or str, got {type(value).__name__}"
    )


def has_unique_first_byte(pattern: bytes) -> bool:
    """Check that ``pattern[0]`` does not occur again later in the pattern."""
    return not pattern or pattern[0] not in pattern[1:]


def validate_pattern(
    pattern: bytes,
    name: str = "pattern",
    allow_empty: bool = False,
    require_unique_first: bool = False
) -> bytes:
    """Validate a pattern and return it unchanged.

    Args:
        pattern: Pattern to validate
        name: Argument name used in error messages
        allow_empty: Accept an empty pattern
        require_unique_first: Reject patterns whose first byte recurs

    Returns:
        The validated pattern

    Raises:
        InvalidPatternError: If a requested check fails
    """
    if not pattern and not allow_empty:
        raise InvalidPatternError(f"{name} must not be empty", pattern)
    if require_unique_first and not has_unique_first_byte(pattern):
        raise InvalidPatternError(
            f"byte ({pattern[0]}) at index 0 must be unique in {name}", pattern
        )
    return pattern


class ByteFilter:
    """Base class for filters that consume bytes and push results to sinks.

    Subclasses implement ``_process`` (handle one chunk) and ``_finish``
    (flush pending state and close wrapped sinks). ``close`` is idempotent
    and any write after it raises ``IllegalStateError``.
    """

    def __init__(self) -> None:
        self._closed = False

    @property
    def closed(self) -> bool:
        """Whether ``close`` has been called."""
        return self._closed

    def _ensure_open(self) -> None:
        if self._closed:
            raise IllegalStateError(f"{type(self).__name__} is closed")

    def write(self, data: bytes) -> int:
        """Push a chunk of bytes through the filter.

        Args:
            data: Bytes to filter

        Returns:
            Number of input bytes consumed (always ``len(data)``)
        """
        self._ensure_open()
        if data:
            self._process(bytes(data))
        return len(data)

    def write_byte(self, value: int) -> None:
        """Push a single byte through the filter (only the low 8 bits are used)."""
        self.write(bytes((value & 0xFF,)))

    def flush(self) -> None:
        """Flush wrapped sinks. Pending partial matches stay pending."""
        self._ensure_open()
        self._flush_sinks()

    def close(self) -> None:
        """Flush pending bytes and close wrapped sinks, exactly once."""
        if self._closed:
            return
        self._closed = True
        self._finish()

    def _process(self, data: bytes) -> None:
        raise NotImplementedError

    def _finish(self) -> None:
        raise NotImplementedError

    def _flush_sinks(self) -> None:
        raise NotImplementedError

    def __enter__(self) -> "ByteFilter":
        return self

    def __exit__(
        self,
        exc_type: Optional[Type[BaseException]],
        exc_value: Optional[BaseException],
        traceback: Optional[TracebackType],
    ) -> None:
        self.close()


class BytesSink:
    """In-memory sink whose content remains available after ``close``."""

    def __init__(self) -> None:
        self._buffer = bytearray()
        self.closed = False

    def write(self, data: bytes) -> int:
        if self.closed:
            raise IllegalStateError("BytesSink is closed")
        self._buffer += data
        return len(data)

    def flush(self) -> None:
        pass

    def close(self) -> None:
        self.closed = True

    def getvalue(self) -> bytes:
        """Return everything written so far."""
        return bytes(self._buffer)

    def __len__(self) -> int:
        return len(self._buffer)


class NullSink:
    """Sink that discards everything, counting the discarded bytes."""

    def __init__(self) -> None:
        self.discarded = 0
        self.closed = False

    def write(self, data: bytes) -> int:
        self.discarded += len(data)
        return len(data)

    def flush(self) -> None:
        pass

    def close(self) -> None:
        self.closed = True


class FileSink:
    """Adapter over a binary file object.

    The file is closed on ``close`` only when the sink owns it, so that
    ``sys.stdout.buffer`` and caller-managed files survive a filter chain.
    """

    def __init__(self, file_obj: BinaryIO, owns: bool = True) -> None:
        self._file = file_obj
        self._owns = owns
        self.closed = False

    def write(self, data: bytes) -> int:
        if self.closed:
            raise IllegalStateError("FileSink is closed")
        self._file.write(data)
        return len(data)

    def flush(self) -> None:
        if not self.closed:
            self._file.flush()

    def close(self) -> None:
        if self.closed:
            return
        self.closed = True
        if self._owns:
            self._file.close()
        else:
            self._file.flush()


def pump(source: ByteSource, sink: ByteSink, buffer_size: int = DEFAULT_BUFFER_SIZE) -> int:
    """Copy everything from ``source`` into ``sink``. Neither is closed.

    Args:
        source: Object with ``read(size)``
        sink: Object with ``write(data)``
        buffer_size: Size of each read

    Returns:
        Number of bytes copied
    """
    if buffer_size <= 0:
        raise ValueError("buffer_size must be > 0")

    total = 0
    while True:
        chunk = source.read(buffer_size)
        if not chunk:
            return total
        sink.write(chunk)
        total += len(chunk)

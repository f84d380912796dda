"""Filtering API with progressive disclosure.

Level 1 is a set of module-level functions taking whole inputs and returning
result objects; level 2 is ``StreamFilterEngine``, which keeps one
configuration and usage statistics across calls. Both run the stream
components of ``byte_stream_filters.streams`` under the hood; for true
streaming use those components directly.
"""

import io
import time
from dataclasses import dataclass, field
from pathlib import Path
from typing import (
    Any,
    BinaryIO,
    Callable,
    Dict,
    List,
    Optional,
    Sequence,
    Tuple,
    Union,
)

from byte_stream_filters.shared import (
    DiagnosticEntry,
    DiagnosticSeverity,
    FilterConfig,
    FilterMetrics,
    get_logger,
)
from byte_stream_filters.streams import (
    BlockReplace,
    ByteFilter,
    BytesSink,
    FindReplace,
    PatternLike,
    RecordReader,
    Splitter,
    Trim,
    pump,
)

# Type definitions for input data
InputType = Union[bytes, bytearray, memoryview, str, BinaryIO, Path]
PatternPair = Tuple[PatternLike, PatternLike]

MS_PER_SECOND = 1000


@dataclass
class FilterResult:
    """Result of a filtering operation producing a single output.

    Attributes:
        data: Filtered bytes
        match_count: Number of replacements (or blocks) applied
        metrics: Size and timing metrics
        diagnostics: Notes about degraded or notable conditions
        correlation_id: Correlation ID of the operation
    """

    data: bytes
    match_count: int = 0
    metrics: FilterMetrics = field(default_factory=FilterMetrics)
    diagnostics: List[DiagnosticEntry] = field(default_factory=list)
    correlation_id: Optional[str] = None

    def text(self, encoding: str = "utf-8", errors: str = "strict") -> str:
        """Decode the filtered bytes."""
        return self.data.decode(encoding, errors)


@dataclass
class SplitResult:
    """Result of splitting an input around the first occurrence of a pattern."""

    before: bytes
    after: bytes
    found: bool
    metrics: FilterMetrics = field(default_factory=FilterMetrics)
    diagnostics: List[DiagnosticEntry] = field(default_factory=list)
    correlation_id: Optional[str] = None


@dataclass
class RecordsResult:
    """Result of carving an input into separator-delimited records."""

    records: List[bytes]
    last_part: bool = False
    metrics: FilterMetrics = field(default_factory=FilterMetrics)
    diagnostics: List[DiagnosticEntry] = field(default_factory=list)
    correlation_id: Optional[str] = None

    @property
    def record_count(self) -> int:
        return len(self.records)


def _open_input(input_data: InputType, encoding: str) -> Tuple[BinaryIO, bool]:
    """Turn any supported input into a binary source.

    Returns:
        Tuple of (source, whether the caller must close it)
    """
    if isinstance(input_data, (bytes, bytearray, memoryview)):
        return io.BytesIO(bytes(input_data)), True
    if isinstance(input_data, str):
        return io.BytesIO(input_data.encode(encoding)), True
    if isinstance(input_data, Path):
        return input_data.open("rb"), True
    if hasattr(input_data, "read"):
        return input_data, False
    raise TypeError(
        f"Unsupported input type: {type(input_data).__name__}"
    )


class StreamFilterEngine:
    """Configured filtering front-end with reuse and usage statistics.

    Examples:
        >>> engine = StreamFilterEngine(FilterConfig.strict())
        >>> engine.find_replace(b"abdcde", "dc", "zyz").data
        b'abzyzde'
        >>> engine.statistics["total_operations"]
        1
    """

    def __init__(
        self,
        config: Optional[FilterConfig] = None,
        correlation_id: Optional[str] = None
    ) -> None:
        """Initialize the engine.

        Args:
            config: Filter configuration (defaults to ``FilterConfig.default()``)
            correlation_id: Optional correlation ID for request tracking
        """
        self.config = config or FilterConfig.default()
        if self.config.global_.enable_correlation_tracking:
            self.correlation_id = correlation_id or self.config.correlation_id
        else:
            self.correlation_id = None
        self.logger = get_logger(__name__, self.correlation_id, "filter_engine")

        self._operation_count = 0
        self._total_processing_time = 0.0
        self._bytes_processed = 0

    # -- configuration -----------------------------------------------------

    @property
    def _component_options(self) -> Dict[str, Any]:
        return {
            "encoding": self.config.pattern.encoding,
            "strict": self.config.pattern.strict_validation,
            "correlation_id": self.correlation_id,
        }

    def reconfigure(self, config: FilterConfig) -> None:
        """Replace the configuration used by subsequent operations."""
        self.config = config
        self.logger.info(
            "Engine reconfigured",
            extra={"config_name": config.name}
        )

    @property
    def statistics(self) -> Dict[str, Any]:
        """Get engine usage statistics."""
        return {
            "total_operations": self._operation_count,
            "total_processing_time_ms": self._total_processing_time,
            "total_bytes_processed": self._bytes_processed,
            "average_processing_time_ms": (
                self._total_processing_time / self._operation_count
                if self._operation_count > 0 else 0.0
            ),
            "correlation_id": self.correlation_id,
        }

    def reset_statistics(self) -> None:
        """Reset engine usage statistics."""
        self._operation_count = 0
        self._total_processing_time = 0.0
        self._bytes_processed = 0
        self.logger.info("Engine statistics reset")

    # -- plumbing ----------------------------------------------------------

    def _diagnostic(
        self,
        diagnostics: List[DiagnosticEntry],
        severity: DiagnosticSeverity,
        message: str,
        component: str,
        **details: Any
    ) -> None:
        if not self.config.global_.collect_diagnostics:
            return
        diagnostics.append(
            DiagnosticEntry(
                severity=severity,
                message=message,
                component=component,
                details=details or None,
                correlation_id=self.correlation_id,
            )
        )

    def _run(
        self,
        operation: str,
        input_data: InputType,
        stream: ByteFilter,
        before_close: Optional[Callable[[], None]] = None
    ) -> FilterMetrics:
        """Pump the input through ``stream`` and close it.

        Args:
            operation: Operation name for logging
            input_data: Input to filter
            stream: Head of the filter chain
            before_close: Hook inspecting the chain just before it is closed

        Returns:
            Metrics with ``bytes_read`` and ``processing_time_ms`` filled in
        """
        start_time = time.time()
        self.logger.info(
            f"Starting {operation}",
            extra={"input_type": type(input_data).__name__}
        )

        source, owns_source = _open_input(input_data, self.config.pattern.encoding)
        try:
            bytes_read = pump(source, stream, self.config.streaming.buffer_size)
            if before_close is not None:
                before_close()
            stream.close()
        except Exception:
            self.logger.exception(f"{operation} failed")
            raise
        finally:
            if owns_source:
                source.close()

        processing_time = (time.time() - start_time) * MS_PER_SECOND
        self._operation_count += 1
        self._total_processing_time += processing_time
        self._bytes_processed += bytes_read

        return FilterMetrics(
            processing_time_ms=processing_time,
            bytes_read=bytes_read,
        )

    def _finish_metrics(
        self,
        operation: str,
        metrics: FilterMetrics,
        bytes_written: int,
        match_count: int
    ) -> FilterMetrics:
        metrics.bytes_written = bytes_written
        metrics.match_count = match_count
        self.logger.info(
            f"{operation} completed",
            extra={
                "bytes_read": metrics.bytes_read,
                "bytes_written": bytes_written,
                "match_count": match_count,
                "processing_time_ms": metrics.processing_time_ms,
            }
        )
        return metrics

    # -- operations --------------------------------------------------------

    def find_replace(
        self,
        input_data: InputType,
        find: PatternLike,
        replace: PatternLike
    ) -> FilterResult:
        """Replace every occurrence of ``find`` by ``replace``.

        Args:
            input_data: Bytes, string, binary file object or path
            find: Pattern to find
            replace: Replacement bytes

        Returns:
            FilterResult with the filtered bytes

        Raises:
            InvalidPatternError: If the configuration rejects the pattern
        """
        return self.find_replace_all(input_data, [(find, replace)])

    def find_replace_all(
        self,
        input_data: InputType,
        pairs: Sequence[PatternPair]
    ) -> FilterResult:
        """Apply several find/replace operations in a single pass.

        Replacements are applied in order: the output of pair ``i`` is the
        input of pair ``i + 1``.

        Args:
            input_data: Bytes, string, binary file object or path
            pairs: ``(find, replace)`` pairs

        Returns:
            FilterResult with the filtered bytes
        """
        if not pairs:
            raise ValueError("pairs must contain at least one (find, replace) pair")

        sink = BytesSink()
        head = FindReplace.chain(
            sink,
            [find for find, _ in pairs],
            [replace for _, replace in pairs],
            allow_empty=self.config.pattern.allow_empty_find,
            **self._component_options
        )

        stages: List[FindReplace] = []
        stage = head
        while isinstance(stage, FindReplace):
            stages.append(stage)
            stage = stage.sink

        metrics = self._run("find_replace", input_data, head)
        match_count = sum(stage.match_count for stage in stages)

        diagnostics: List[DiagnosticEntry] = []
        for position, stage in enumerate(stages):
            if not stage.find:
                self._diagnostic(
                    diagnostics, DiagnosticSeverity.WARNING,
                    "Empty find pattern, input passed through unchanged",
                    "find_replace", pair_index=position
                )
            elif stage.match_count == 0:
                self._diagnostic(
                    diagnostics, DiagnosticSeverity.INFO,
                    "Pattern not found", "find_replace",
                    pair_index=position, find=stage.find
                )

        data = sink.getvalue()
        return FilterResult(
            data=data,
            match_count=match_count,
            metrics=self._finish_metrics("find_replace", metrics, len(data), match_count),
            diagnostics=diagnostics,
            correlation_id=self.correlation_id,
        )

    def replace_block(
        self,
        input_data: InputType,
        begin: PatternLike,
        end: PatternLike,
        replace: PatternLike
    ) -> FilterResult:
        """Replace every ``begin ... end`` block, markers included, by ``replace``.

        Args:
            input_data: Bytes, string, binary file object or path
            begin: Marker opening a block
            end: Marker closing a block
            replace: Replacement for each complete block

        Returns:
            FilterResult with the filtered bytes
        """
        sink = BytesSink()
        stream = BlockReplace(
            sink, begin, end, replace,
            max_region_bytes=self.config.streaming.max_region_bytes,
            **self._component_options
        )

        unterminated: List[int] = []

        def _check_open_region() -> None:
            if stream.inside_region:
                unterminated.append(stream.region_size)

        metrics = self._run("replace_block", input_data, stream, _check_open_region)

        diagnostics: List[DiagnosticEntry] = []
        if unterminated:
            self._diagnostic(
                diagnostics, DiagnosticSeverity.WARNING,
                "End marker never found, open block restored unchanged",
                "block_replace", region_size=unterminated[0]
            )
        limit_abandoned = stream.abandoned_count - len(unterminated)
        if limit_abandoned > 0:
            self._diagnostic(
                diagnostics, DiagnosticSeverity.WARNING,
                "Blocks exceeding max_region_bytes were left unchanged",
                "block_replace", count=limit_abandoned,
                limit=self.config.streaming.max_region_bytes
            )

        data = sink.getvalue()
        return FilterResult(
            data=data,
            match_count=stream.match_count,
            metrics=self._finish_metrics(
                "replace_block", metrics, len(data), stream.match_count
            ),
            diagnostics=diagnostics,
            correlation_id=self.correlation_id,
        )

    def split(self, input_data: InputType, pattern: PatternLike) -> SplitResult:
        """Split the input around the first occurrence of ``pattern``.

        Args:
            input_data: Bytes, string, binary file object or path
            pattern: Non-empty pattern to split on

        Returns:
            SplitResult with the bytes before and after the pattern
        """
        before = BytesSink()
        after = BytesSink()
        stream = Splitter(pattern, before, after, **self._component_options)

        metrics = self._run("split", input_data, stream)

        diagnostics: List[DiagnosticEntry] = []
        if not stream.found:
            self._diagnostic(
                diagnostics, DiagnosticSeverity.INFO,
                "Pattern not found, whole input routed before it", "splitter"
            )

        written = len(before) + len(after)
        return SplitResult(
            before=before.getvalue(),
            after=after.getvalue(),
            found=stream.found,
            metrics=self._finish_metrics("split", metrics, written, int(stream.found)),
            diagnostics=diagnostics,
            correlation_id=self.correlation_id,
        )

    def trim(
        self,
        input_data: InputType,
        begin: PatternLike,
        end: PatternLike
    ) -> FilterResult:
        """Keep only the bytes between the first ``begin`` and the next ``end``.

        Args:
            input_data: Bytes, string, binary file object or path
            begin: Marker after which bytes are kept
            end: Marker before which bytes are kept

        Returns:
            FilterResult with the kept bytes
        """
        sink = BytesSink()
        stream = Trim(sink, begin, end, **self._component_options)

        metrics = self._run("trim", input_data, stream)

        diagnostics: List[DiagnosticEntry] = []
        if not stream.begin_found:
            self._diagnostic(
                diagnostics, DiagnosticSeverity.WARNING,
                "Begin marker not found, nothing kept", "trim"
            )
        elif not stream.end_found:
            self._diagnostic(
                diagnostics, DiagnosticSeverity.INFO,
                "End marker not found, kept everything after begin", "trim"
            )

        data = sink.getvalue()
        markers = int(stream.begin_found) + int(stream.end_found)
        return FilterResult(
            data=data,
            match_count=markers,
            metrics=self._finish_metrics("trim", metrics, len(data), markers),
            diagnostics=diagnostics,
            correlation_id=self.correlation_id,
        )

    def split_records(
        self,
        input_data: InputType,
        separator: PatternLike
    ) -> RecordsResult:
        """Carve the input into records ending at each ``separator``.

        Args:
            input_data: Bytes, string, binary file object or path
            separator: Record separator, whose first byte must be unique

        Returns:
            RecordsResult with the records in order
        """
        start_time = time.time()
        self.logger.info(
            "Starting split_records",
            extra={"input_type": type(input_data).__name__}
        )

        source, owns_source = _open_input(input_data, self.config.pattern.encoding)
        try:
            reader = RecordReader(
                source,
                separator,
                multipart_trailer=self.config.streaming.multipart_trailer,
                encoding=self.config.pattern.encoding,
                correlation_id=self.correlation_id
            )
            records = list(reader)
        finally:
            if owns_source:
                source.close()
        separators = reader.separators_found

        processing_time = (time.time() - start_time) * MS_PER_SECOND
        bytes_written = sum(len(record) for record in records)
        self._operation_count += 1
        self._total_processing_time += processing_time
        self._bytes_processed += reader.bytes_consumed

        diagnostics: List[DiagnosticEntry] = []
        if separators == 0:
            self._diagnostic(
                diagnostics, DiagnosticSeverity.INFO,
                "Separator not found, input is a single record", "delimited_source"
            )

        metrics = FilterMetrics(
            processing_time_ms=processing_time,
            bytes_read=reader.bytes_consumed,
        )
        return RecordsResult(
            records=records,
            last_part=reader.last_part,
            metrics=self._finish_metrics(
                "split_records", metrics, bytes_written, separators
            ),
            diagnostics=diagnostics,
            correlation_id=self.correlation_id,
        )


def find_replace(
    input_data: InputType,
    find: PatternLike,
    replace: PatternLike,
    config: Optional[FilterConfig] = None,
    correlation_id: Optional[str] = None
) -> FilterResult:
    """Replace every occurrence of ``find`` by ``replace``.

    Examples:
        >>> find_replace(b"abdcdedcazyx", b"dc", b"zyz").data
        b'abzyzdezyzazyx'
    """
    return StreamFilterEngine(config, correlation_id).find_replace(
        input_data, find, replace
    )


def find_replace_all(
    input_data: InputType,
    pairs: Sequence[PatternPair],
    config: Optional[FilterConfig] = None,
    correlation_id: Optional[str] = None
) -> FilterResult:
    """Apply several find/replace pairs, in order, in a single pass."""
    return StreamFilterEngine(config, correlation_id).find_replace_all(
        input_data, pairs
    )


def replace_block(
    input_data: InputType,
    begin: PatternLike,
    end: PatternLike,
    replace: PatternLike,
    config: Optional[FilterConfig] = None,
    correlation_id: Optional[str] = None
) -> FilterResult:
    """Replace each ``begin ... end`` block by ``replace``.

    Examples:
        >>> replace_block(b"abdcdeazyx", "dc", "zy", "---").data
        b'ab---x'
    """
    return StreamFilterEngine(config, correlation_id).replace_block(
        input_data, begin, end, replace
    )


def split(
    input_data: InputType,
    pattern: PatternLike,
    config: Optional[FilterConfig] = None,
    correlation_id: Optional[str] = None
) -> SplitResult:
    """Split the input around the first occurrence of ``pattern``."""
    return StreamFilterEngine(config, correlation_id).split(input_data, pattern)


def trim(
    input_data: InputType,
    begin: PatternLike,
    end: PatternLike,
    config: Optional[FilterConfig] = None,
    correlation_id: Optional[str] = None
) -> FilterResult:
    """Keep only the bytes between ``begin`` and the following ``end``."""
    return StreamFilterEngine(config, correlation_id).trim(input_data, begin, end)


def split_records(
    input_data: InputType,
    separator: PatternLike,
    config: Optional[FilterConfig] = None,
    correlation_id: Optional[str] = None
) -> RecordsResult:
    """Carve the input into records ending at each ``separator``."""
    return StreamFilterEngine(config, correlation_id).split_records(
        input_data, separator
    )

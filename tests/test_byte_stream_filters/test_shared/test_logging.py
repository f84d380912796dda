"""Tests for correlation-aware logging."""

import io
import logging

from byte_stream_filters.shared.logging import CorrelationLogger, get_logger
from byte_stream_filters.streams import (
    BlockReplace,
    BytesSink,
    DelimitedSource,
    FindReplace,
    Splitter,
)


class TestCorrelationLogger:
    """Test the correlation logger wrapper."""

    def test_get_logger(self):
        """Test logger creation."""
        logger = get_logger("byte_stream_filters.streams.replace", "req-1", "find_replace")

        assert isinstance(logger, CorrelationLogger)
        assert logger.correlation_id == "req-1"
        assert logger.component == "find_replace"

    def test_default_component(self):
        """Test that the component defaults to the last name segment."""
        logger = get_logger("byte_stream_filters.streams.split")

        assert logger.component == "split"
        assert logger.correlation_id is None

    def test_extra_fields_attached(self, caplog):
        """Test that records carry the component and correlation ID."""
        logger = get_logger("byte_stream_filters.test", "req-2", "tester")

        with caplog.at_level(logging.INFO, logger="byte_stream_filters.test"):
            logger.info("Operation done", extra={"match_count": 3})

        record = caplog.records[-1]
        assert record.getMessage() == "Operation done"
        assert record.component == "tester"
        assert record.correlation_id == "req-2"
        assert record.match_count == 3

    def test_exception_logging(self, caplog):
        """Test that exception records include the traceback."""
        logger = get_logger("byte_stream_filters.test")

        with caplog.at_level(logging.ERROR, logger="byte_stream_filters.test"):
            try:
                raise ValueError("bad")
            except ValueError:
                logger.exception("Operation failed")

        record = caplog.records[-1]
        assert record.levelno == logging.ERROR
        assert record.exc_info is not None

    def test_bind_adds_fields_to_every_record(self, caplog):
        """Test that bound fields appear on records and call extras win."""
        logger = get_logger("byte_stream_filters.test", "req-3", "tester")
        bound = logger.bind(find_length=2, mode="lenient")

        with caplog.at_level(logging.DEBUG, logger="byte_stream_filters.test"):
            bound.debug("First")
            bound.debug("Second", extra={"mode": "strict"})

        first, second = caplog.records[-2:]
        assert first.find_length == 2
        assert first.mode == "lenient"
        assert second.mode == "strict"
        assert second.component == "tester"
        assert second.correlation_id == "req-3"

    def test_bind_leaves_parent_unchanged(self):
        """Test that binding returns a new logger."""
        logger = get_logger("byte_stream_filters.test", component="tester")
        bound = logger.bind(a=1).bind(b=2)

        assert logger.context == {}
        assert bound.context == {"a": 1, "b": 2}
        assert bound.component == "tester"
        assert bound.logger is logger.logger


class TestFilterLoggers:
    """Test the loggers each filter creates."""

    def test_component_names(self):
        """Test that each filter logs under its own component name."""
        before, after = BytesSink(), BytesSink()

        assert FindReplace(BytesSink(), "ab", "x").logger.component == "find_replace"
        assert Splitter("ab", before, after).logger.component == "splitter"
        assert BlockReplace(BytesSink(), "<", ">", "").logger.component == "block_replace"
        source = DelimitedSource(io.BytesIO(b"a|b"), "|")
        assert source.logger.component == "delimited_source"

    def test_pattern_sizes_bound(self):
        """Test that filters bind their pattern sizes."""
        assert FindReplace(BytesSink(), "abc", "x").logger.context == {"find_length": 3}
        assert Splitter("ab", BytesSink(), BytesSink()).logger.context == {
            "pattern_length": 2
        }
        block = BlockReplace(BytesSink(), "<<", ">", "")
        assert block.logger.context == {"begin_length": 2, "end_length": 1}

    def test_correlation_id_propagated(self, caplog):
        """Test that a filter's records carry the correlation ID it was given."""
        sink = BytesSink()
        stream = FindReplace(sink, "ab", "x", correlation_id="req-9")

        with caplog.at_level(logging.DEBUG, logger="byte_stream_filters.streams.replace"):
            stream.write(b"zabz")
            stream.close()

        records = [r for r in caplog.records if r.name == "byte_stream_filters.streams.replace"]
        assert records
        assert all(r.correlation_id == "req-9" for r in records)
        assert all(r.find_length == 2 for r in records)
        assert sink.getvalue() == b"zxz"

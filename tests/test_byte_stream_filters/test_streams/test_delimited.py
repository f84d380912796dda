"""Tests for delimited sources and record readers."""

import io

import pytest

from byte_stream_filters.streams import (
    DelimitedSource,
    IllegalStateError,
    InvalidPatternError,
    RecordReader,
    iter_delimited,
)

BOUNDARY = b"\r\n--XyZ"
MULTIPART = (
    b"first part\r\n--XyZ\r\n"
    b"second part\r\n--XyZ--\r\n"
    b"epilogue"
)


class TestDelimitedSource:
    """Test reading up to a separator."""

    def test_reads_up_to_separator(self):
        """Test that end of data is reported at the separator."""
        source = io.BytesIO(b"abc|def")

        with DelimitedSource(source, b"|", multipart_trailer=False) as part:
            data = part.read()

        assert data == b"abc"
        assert part.separator_found

    def test_remainder_left_readable(self):
        """Test that the underlying source is positioned after the separator."""
        source = io.BytesIO(b"abc|def")
        part = DelimitedSource(source, b"|", multipart_trailer=False)

        part.read()
        part.close()

        assert not source.closed
        assert source.read() == b"def"

    def test_no_separator(self):
        """Test that the whole source is returned without a separator."""
        part = DelimitedSource(io.BytesIO(b"abc"), b"|")

        assert part.read() == b"abc"
        assert not part.separator_found
        assert part.exhausted

    def test_partial_separator_at_end_is_content(self):
        """Test that a dangling separator prefix is returned as data."""
        part = DelimitedSource(io.BytesIO(b"abc\r\n-"), BOUNDARY)

        assert part.read() == b"abc\r\n-"

    def test_broken_prefix_returned(self):
        """Test that bytes of a broken separator prefix are content."""
        part = DelimitedSource(io.BytesIO(b"ab\r\n-x|"), BOUNDARY, multipart_trailer=False)

        assert part.read() == b"ab\r\n-x|"

    def test_mismatching_byte_starts_new_match(self):
        """Test that the byte breaking a match may begin the separator."""
        source = io.BytesIO(b"xaabrest")
        part = DelimitedSource(source, b"ab", multipart_trailer=False)

        assert part.read() == b"xa"
        assert source.read() == b"rest"

    def test_read_after_end_returns_nothing(self):
        """Test that the record stays ended."""
        part = DelimitedSource(io.BytesIO(b"a|b"), b"|", multipart_trailer=False)
        part.read()

        assert part.read() == b""
        assert part.read_byte() is None

    def test_read_with_size(self):
        """Test reading in bounded pieces."""
        part = DelimitedSource(io.BytesIO(b"abcd|e"), b"|", multipart_trailer=False)

        assert part.read(3) == b"abc"
        assert part.read(3) == b"d"
        assert part.read(3) == b""

    def test_read_byte_full_range(self):
        """Test that byte values above 127 are returned as non-negative ints."""
        content = bytes(range(128, 256))
        part = DelimitedSource(io.BytesIO(content + b"\x00\x01"), b"\x00\x01")

        values = [part.read_byte() for _ in range(128)]

        assert values == list(range(128, 256))
        assert part.read_byte() is None

    def test_iteration_yields_ints(self):
        """Test iterating over the record."""
        part = DelimitedSource(io.BytesIO(b"ab|c"), b"|", multipart_trailer=False)

        assert list(part) == [ord("a"), ord("b")]

    def test_bytes_consumed(self):
        """Test counting of bytes pulled from the source."""
        part = DelimitedSource(io.BytesIO(b"abc|def"), b"|", multipart_trailer=False)
        part.read()

        assert part.bytes_consumed == 4

    def test_read_after_close(self):
        """Test that reading a closed source raises."""
        part = DelimitedSource(io.BytesIO(b"abc"), b"|")
        part.close()

        assert part.closed
        with pytest.raises(IllegalStateError, match="DelimitedSource is closed"):
            part.read_byte()


class TestMultipartTrailer:
    """Test consumption of the bytes following a separator."""

    def test_line_break_consumed(self):
        """Test that the CRLF after a separator is consumed once."""
        source = io.BytesIO(MULTIPART)
        part = DelimitedSource(source, BOUNDARY)

        assert part.read() == b"first part"
        assert not part.last_part
        assert part.read() == b""
        assert source.read(6) == b"second"

    def test_last_part_marker(self):
        """Test that the end-of-multipart marker is detected and consumed."""
        source = io.BytesIO(b"last\r\n--XyZ--\r\nepilogue")
        part = DelimitedSource(source, BOUNDARY)

        assert part.read() == b"last"
        assert part.last_part
        assert source.read() == b"epilogue"

    def test_trailer_cut_short(self):
        """Test a source ending inside the trailer."""
        part = DelimitedSource(io.BytesIO(b"last\r\n--XyZ-"), BOUNDARY)

        assert part.read() == b"last"
        assert not part.last_part
        assert part.exhausted

    def test_trailer_disabled(self):
        """Test that nothing after the separator is consumed when disabled."""
        source = io.BytesIO(b"a\r\n--XyZ\r\nb")
        part = DelimitedSource(source, BOUNDARY, multipart_trailer=False)

        part.read()

        assert source.read() == b"\r\nb"


class TestDelimitedSourceValidation:
    """Test separator validation."""

    def test_empty_separator(self):
        """Test that an empty separator is refused."""
        with pytest.raises(InvalidPatternError, match="separator must not be empty"):
            DelimitedSource(io.BytesIO(b""), b"")

    def test_recurring_first_byte(self):
        """Test that first-byte uniqueness is always enforced."""
        with pytest.raises(
            InvalidPatternError,
            match=r"byte \(97\) at index 0 must be unique in separator"
        ):
            DelimitedSource(io.BytesIO(b""), b"abca")

    def test_string_separator(self):
        """Test that string separators are encoded."""
        part = DelimitedSource(io.BytesIO(b"a;b"), ";", multipart_trailer=False)

        assert part.separator == b";"
        assert part.read() == b"a"


class TestRecordReader:
    """Test iteration over successive records."""

    def test_multipart_records(self):
        """Test carving a multipart body into parts."""
        source = io.BytesIO(MULTIPART)
        reader = RecordReader(source, BOUNDARY)

        records = list(reader)

        assert records == [b"first part", b"second part"]
        assert reader.last_part
        assert reader.separators_found == 2
        assert source.read() == b"epilogue"

    def test_trailing_record_without_separator(self):
        """Test that data after the last separator forms a record."""
        records = list(RecordReader(io.BytesIO(b"a|b|c"), b"|", multipart_trailer=False))

        assert records == [b"a", b"b", b"c"]

    def test_source_ending_after_separator(self):
        """Test that no empty trailing record is produced."""
        records = list(RecordReader(io.BytesIO(b"a|b|"), b"|", multipart_trailer=False))

        assert records == [b"a", b"b"]

    def test_empty_records_kept(self):
        """Test that consecutive separators produce empty records."""
        records = list(RecordReader(io.BytesIO(b"a||b"), b"|", multipart_trailer=False))

        assert records == [b"a", b"", b"b"]

    def test_empty_source(self):
        """Test that an empty source has no records."""
        assert list(RecordReader(io.BytesIO(b""), b"|")) == []

    def test_bytes_consumed(self):
        """Test that consumed bytes are summed over records."""
        reader = RecordReader(io.BytesIO(b"ab|cd"), b"|", multipart_trailer=False)
        list(reader)

        assert reader.bytes_consumed == 5

    def test_eager_validation(self):
        """Test that the separator is validated at construction."""
        with pytest.raises(InvalidPatternError):
            RecordReader(io.BytesIO(b""), b"--boundary")

    def test_iter_delimited(self):
        """Test the functional form."""
        records = iter_delimited(io.BytesIO(b"x;y"), b";", multipart_trailer=False)

        assert list(records) == [b"x", b"y"]

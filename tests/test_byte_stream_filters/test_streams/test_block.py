"""Tests for the block replace filter."""

from unittest.mock import MagicMock

import pytest

from byte_stream_filters.streams import (
    BlockReplace,
    BytesSink,
    IllegalStateError,
    InvalidPatternError,
    RegionState,
)


def _replace_block(data: bytes, begin, end, replace, chunk_size: int = 0, **kwargs):
    sink = BytesSink()
    stream = BlockReplace(sink, begin, end, replace, **kwargs)
    if chunk_size:
        for start in range(0, len(data), chunk_size):
            stream.write(data[start:start + chunk_size])
    else:
        stream.write(data)
    stream.close()
    return sink.getvalue(), stream


BLOCK_CASES = [
    (b"abdcdeazyx", b"dc", b"zy", b"---", b"ab---x"),
    (b"abdcdeazyxdcazyb", b"dc", b"zy", b"---", b"ab---x---b"),
    (b"abdcdeazyxdcabzyb", b"ab", b"dea", b"---", b"---zyxdcabzyb"),
    (b"acdeazyxdcabzyb", b"ab", b"b", b"---", b"acdeazyxdc---"),
]


class TestBlockReplace:
    """Test replacement of delimited blocks."""

    @pytest.mark.parametrize("data,begin,end,replace,expected", BLOCK_CASES)
    def test_block_replacement(self, data, begin, end, replace, expected):
        """Test replacement of complete blocks."""
        output, _ = _replace_block(data, begin, end, replace)

        assert output == expected

    @pytest.mark.parametrize("data,begin,end,replace,expected", BLOCK_CASES)
    def test_block_replacement_byte_by_byte(self, data, begin, end, replace, expected):
        """Test that chunk boundaries do not change the output."""
        output, _ = _replace_block(data, begin, end, replace, chunk_size=1)

        assert output == expected

    def test_match_count(self):
        """Test the block counter."""
        _, stream = _replace_block(b"abdcdeazyxdcazyb", b"dc", b"zy", b"---")

        assert stream.match_count == 2
        assert stream.abandoned_count == 0

    def test_blocks_do_not_nest(self):
        """Test that begin is not looked for inside an open block."""
        output, _ = _replace_block(b"x<a<b>c>y", b"<", b">", b"#")

        assert output == b"x#c>y"

    def test_unterminated_block_restored(self):
        """Test that an open block is written back verbatim on close."""
        output, stream = _replace_block(b"abdcdeaz", b"dc", b"zy", b"---")

        assert output == b"abdcdeaz"
        assert stream.match_count == 0
        assert stream.state is RegionState.OUTSIDE

    def test_pending_begin_prefix_restored(self):
        """Test that a dangling begin prefix is written on close."""
        output, _ = _replace_block(b"xxA", b"AB", b"CD", b"-")

        assert output == b"xxA"

    def test_pending_end_prefix_restored(self):
        """Test that a dangling end prefix is restored with the open block."""
        output, _ = _replace_block(b"xxABcdE", b"AB", b"EF", b"-")

        assert output == b"xxABcdE"

    def test_empty_replacement_removes_block(self):
        """Test deleting blocks."""
        output, _ = _replace_block(b"keep<!-- drop -->keep", b"<!--", b"-->", b"")

        assert output == b"keepkeep"


class TestBlockReplaceState:
    """Test region state tracking."""

    def test_state_transitions(self):
        """Test that the state follows the markers."""
        sink = BytesSink()
        stream = BlockReplace(sink, b"<", b">", b"#")
        assert stream.state is RegionState.OUTSIDE

        stream.write(b"a<bc")
        assert stream.inside_region
        assert stream.region_size == 2

        stream.write(b">")
        assert not stream.inside_region
        assert stream.region_size == 0

        stream.close()
        assert sink.getvalue() == b"a#"

    def test_region_held_back(self):
        """Test that bytes of an open block are not written yet."""
        sink = BytesSink()
        stream = BlockReplace(sink, b"<", b">", b"#")

        stream.write(b"a<bc")

        assert sink.getvalue() == b"a"


class TestBlockReplaceLimits:
    """Test the bounded region size."""

    def test_oversized_block_abandoned(self):
        """Test that a block growing past the limit is written back verbatim."""
        output, stream = _replace_block(
            b"a<12345>b<1>c", b"<", b">", b"", max_region_bytes=3
        )

        assert output == b"a<12345>bc"
        assert stream.abandoned_count == 1
        assert stream.match_count == 1

    def test_block_within_limit_replaced(self):
        """Test that a block of exactly the limit is still replaced."""
        output, stream = _replace_block(b"a<123>b", b"<", b">", b"#", max_region_bytes=3)

        assert output == b"a#b"
        assert stream.abandoned_count == 0

    def test_invalid_limit(self):
        """Test that a non-positive limit is refused."""
        with pytest.raises(ValueError, match="max_region_bytes must be > 0"):
            BlockReplace(BytesSink(), b"<", b">", b"", max_region_bytes=0)


class TestBlockReplaceValidation:
    """Test construction and lifecycle."""

    @pytest.mark.parametrize("begin,end", [(b"", b">"), (b"<", b"")])
    def test_empty_markers_rejected(self, begin, end):
        """Test that both markers must be non-empty."""
        with pytest.raises(InvalidPatternError):
            BlockReplace(BytesSink(), begin, end, b"#")

    def test_strict_rejects_recurring_first_byte(self):
        """Test strict first-byte validation of the end marker."""
        with pytest.raises(InvalidPatternError, match="unique in end"):
            BlockReplace(BytesSink(), b"<", b"-->-", b"#", strict=True)

    def test_close_closes_sink_once(self):
        """Test that close propagates exactly once."""
        sink = MagicMock()
        stream = BlockReplace(sink, b"<", b">", b"#")

        stream.close()
        stream.close()

        sink.close.assert_called_once_with()

    def test_write_after_close(self):
        """Test that writing to a closed filter raises."""
        stream = BlockReplace(BytesSink(), b"<", b">", b"#")
        stream.close()

        with pytest.raises(IllegalStateError):
            stream.write(b"x")

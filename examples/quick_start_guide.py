#!/usr/bin/env python3
"""
Quick Start Guide for Byte Stream Filters.

This example walks through the three levels of the API: one-shot functions,
the configured engine, and the stream components wrapping your own sinks.
"""

import io
import sys
from pathlib import Path

# Add src to path for imports
sys.path.insert(0, str(Path(__file__).parent.parent / "src"))

from byte_stream_filters import (
    BlockReplace,
    BytesSink,
    DelimitedSource,
    FilterConfig,
    FindReplace,
    InvalidPatternError,
    StreamFilterEngine,
    find_replace,
    split_records,
    trim,
)


def level_one_functions():
    """One-shot functions over whole inputs."""

    print("\n📄 Level 1: Simple Functions")
    print("-" * 30)

    result = find_replace(b"abdcdedcazyx", "dc", "zyz")
    print(f"✅ find_replace: {result.data!r} ({result.match_count} replacements)")

    result = trim(b"<html><body>Hello</body></html>", "<body>", "</body>")
    print(f"✅ trim: {result.data!r}")

    body = b"one\r\n--XyZ\r\ntwo\r\n--XyZ--\r\n"
    records = split_records(body, b"\r\n--XyZ")
    print(f"✅ split_records: {records.records!r}, last part seen: {records.last_part}")


def level_two_engine():
    """A configured engine reused across operations."""

    print("\n⚙️  Level 2: Configured Engine")
    print("-" * 30)

    engine = StreamFilterEngine(FilterConfig.strict(), correlation_id="quick-start")

    result = engine.replace_block(b"keep<!-- drop -->keep", "<!--", "-->", "")
    print(f"✅ replace_block: {result.data!r}")

    try:
        engine.find_replace(b"ababac", "abac", "!")
    except InvalidPatternError as e:
        print(f"⚠️  strict mode rejected the pattern: {e}")

    stats = engine.statistics
    print(f"📊 {stats['total_operations']} operations, "
          f"{stats['total_bytes_processed']} bytes processed")


def level_three_streams():
    """Stream components chained over arbitrary sinks and sources."""

    print("\n🔗 Level 3: Stream Components")
    print("-" * 30)

    # Two replacements and a block removal in a single pass
    sink = BytesSink()
    blocks = BlockReplace(sink, "[", "]", "")
    head = FindReplace.chain(blocks, ["cat", "dog"], ["dog", "wolf"])
    for chunk in (b"the cat [and the] ", b"dog"):
        head.write(chunk)
    head.close()
    print(f"✅ chained filters: {sink.getvalue()!r}")

    # Read one record, then carry on with the rest of the source
    source = io.BytesIO(b"header|payload bytes")
    with DelimitedSource(source, b"|", multipart_trailer=False) as header:
        print(f"✅ header record: {header.read()!r}")
    print(f"✅ remainder: {source.read()!r}")


if __name__ == "__main__":
    print("🚀 QUICK START - Byte Stream Filters")
    print("=" * 40)

    level_one_functions()
    level_two_engine()
    level_three_streams()

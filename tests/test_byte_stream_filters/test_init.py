"""Test module for byte_stream_filters package initialization."""


def test_package_import() -> None:
    """Test that the package can be imported successfully."""
    # Arrange & Act
    import byte_stream_filters

    # Assert
    assert byte_stream_filters is not None


def test_package_has_version() -> None:
    """Test that the package has a version attribute."""
    # Arrange & Act
    import byte_stream_filters

    # Assert
    assert isinstance(byte_stream_filters.__version__, str)
    assert byte_stream_filters.__version__ == "0.1.0"


def test_package_has_author() -> None:
    """Test that the package has an author attribute."""
    # Arrange & Act
    import byte_stream_filters

    # Assert
    assert byte_stream_filters.__author__ == "Byte Stream Filters Team"


def test_package_all_exports() -> None:
    """Test that every name in __all__ is importable from the package."""
    # Arrange
    import byte_stream_filters

    # Act
    missing = [name for name in byte_stream_filters.__all__
               if not hasattr(byte_stream_filters, name)]

    # Assert
    assert missing == []
    assert "find_replace" in byte_stream_filters.__all__
    assert "StreamFilterEngine" in byte_stream_filters.__all__


def test_top_level_round_trip() -> None:
    """Test the level 1 API from the package root."""
    # Arrange
    from byte_stream_filters import find_replace

    # Act
    result = find_replace(b"abdcdeazyx", "dc", "zyz")

    # Assert
    assert result.data == b"abzyzdeazyx"


def test_streams_exports_pattern_type() -> None:
    """Test that the pattern type alias used by the API layer is exported."""
    # Arrange & Act
    from byte_stream_filters import streams
    from byte_stream_filters.streams import PatternLike
    from byte_stream_filters.streams.base import PatternLike as BasePatternLike

    # Assert
    assert PatternLike is BasePatternLike
    assert "PatternLike" in streams.__all__


def test_streams_all_exports() -> None:
    """Test that every name in the streams __all__ is importable."""
    # Arrange
    from byte_stream_filters import streams

    # Act
    missing = [name for name in streams.__all__ if not hasattr(streams, name)]

    # Assert
    assert missing == []

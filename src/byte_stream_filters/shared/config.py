"""Configuration classes for byte stream filtering.

This module provides configuration objects for the filter components and the
convenience API, enabling control over pattern handling, streaming behavior
and diagnostics.
"""

import codecs
import json
from dataclasses import dataclass, field, replace
from enum import Enum
from typing import Any, Dict, List, Optional

DEFAULT_BUFFER_SIZE = 8192
DEFAULT_ENCODING = "utf-8"

_COMPONENT_FIELDS = ["pattern", "streaming", "global_"]


@dataclass
class PatternConfig:
    """Configuration for how patterns are built and validated."""

    encoding: str = DEFAULT_ENCODING
    strict_validation: bool = False
    allow_empty_find: bool = True

    def __post_init__(self) -> None:
        """Validate pattern configuration."""
        if not self.encoding:
            raise ValueError("encoding must be a non-empty codec name")
        try:
            codecs.lookup(self.encoding)
        except LookupError as e:
            raise ValueError(f"encoding '{self.encoding}' is not a known codec") from e


@dataclass
class StreamingConfig:
    """Configuration for streaming operations."""

    buffer_size: int = DEFAULT_BUFFER_SIZE
    max_region_bytes: Optional[int] = None
    multipart_trailer: bool = True

    def __post_init__(self) -> None:
        """Validate streaming configuration."""
        if self.buffer_size <= 0:
            raise ValueError("buffer_size must be > 0")
        if self.max_region_bytes is not None and self.max_region_bytes <= 0:
            raise ValueError("max_region_bytes must be > 0 or None")


@dataclass
class GlobalConfig:
    """Global configuration settings that apply across all components."""

    logging_level: str = "INFO"  # DEBUG, INFO, WARNING, ERROR, CRITICAL
    enable_correlation_tracking: bool = True
    collect_diagnostics: bool = True

    def __post_init__(self) -> None:
        """Validate global configuration."""
        valid_levels = ["DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL"]
        if self.logging_level not in valid_levels:
            raise ValueError(f"logging_level must be one of {valid_levels}")


class ConfigError(Exception):
    """Base exception for configuration errors."""


class ConfigValidationError(ConfigError):
    """Exception raised when configuration validation fails."""

    def __init__(self, message: str, field_name: Optional[str] = None,
                 suggestions: Optional[List[str]] = None):
        super().__init__(message)
        self.field_name = field_name
        self.suggestions = suggestions or []


@dataclass(frozen=True)
class FilterConfig:
    """Complete configuration for the filter components and the API layer.

    Immutable at the top level; use ``override`` to derive variants.
    """

    pattern: PatternConfig = field(default_factory=PatternConfig)
    streaming: StreamingConfig = field(default_factory=StreamingConfig)
    global_: GlobalConfig = field(default_factory=GlobalConfig)

    # Metadata
    version: str = "1.0.0"
    name: Optional[str] = None
    description: Optional[str] = None
    correlation_id: Optional[str] = None

    def __post_init__(self) -> None:
        """Validate the complete filter configuration."""
        try:
            self.pattern.__post_init__()
            self.streaming.__post_init__()
            self.global_.__post_init__()
        except ValueError as e:
            raise ConfigValidationError(str(e)) from e

        self._validate_cross_component_dependencies()

    def _validate_cross_component_dependencies(self) -> None:
        if self.pattern.strict_validation and self.pattern.allow_empty_find:
            raise ConfigValidationError(
                "Strict pattern validation cannot allow an empty find pattern",
                field_name="pattern.allow_empty_find",
                suggestions=["Set pattern.allow_empty_find to False",
                             "Disable pattern.strict_validation"]
            )

    def override(self, **kwargs: Any) -> "FilterConfig":
        """Create a new configuration with specific overrides.

        Args:
            **kwargs: Keyword arguments for configuration fields to override

        Returns:
            New FilterConfig instance with overrides applied

        Example:
            >>> config = FilterConfig()
            >>> new_config = config.override(
            ...     streaming__buffer_size=16384,
            ...     pattern__encoding="latin-1"
            ... )
        """
        nested_overrides: Dict[str, Any] = {}
        for key, value in kwargs.items():
            for component in _COMPONENT_FIELDS:
                prefix = f"{component}__"
                if key.startswith(prefix):
                    nested_overrides.setdefault(component, {})[key[len(prefix):]] = value
                    break
            else:
                nested_overrides[key] = value

        new_fields = {}
        try:
            for field_name in _COMPONENT_FIELDS:
                current_config = getattr(self, field_name)
                if field_name in nested_overrides:
                    new_fields[field_name] = replace(
                        current_config, **nested_overrides[field_name]
                    )
                else:
                    new_fields[field_name] = current_config
        except ValueError as e:
            raise ConfigValidationError(str(e)) from e

        for key, value in nested_overrides.items():
            if key not in _COMPONENT_FIELDS:
                new_fields[key] = value

        return replace(self, **new_fields)

    def to_dict(self) -> Dict[str, Any]:
        """Convert configuration to dictionary format.

        Returns:
            Dictionary representation of the configuration
        """
        def _dataclass_to_dict(obj: Any) -> Any:
            if hasattr(obj, "__dataclass_fields__"):
                result: Dict[str, Any] = {}
                for name in obj.__dataclass_fields__:
                    result[name] = _dataclass_to_dict(getattr(obj, name))
                return result
            if isinstance(obj, Enum):
                return obj.name
            if isinstance(obj, (list, tuple, set)):
                return [_dataclass_to_dict(item) for item in obj]
            if isinstance(obj, dict):
                return {key: _dataclass_to_dict(value) for key, value in obj.items()}
            return obj

        result = _dataclass_to_dict(self)
        if not isinstance(result, dict):
            raise ConfigValidationError("Configuration serialization failed")
        return result

    def to_json(self, indent: int = 2) -> str:
        """Convert configuration to JSON string."""
        return json.dumps(self.to_dict(), indent=indent)

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> "FilterConfig":
        """Create configuration from dictionary.

        Unknown keys are ignored so that files written by newer versions
        still load.

        Args:
            data: Dictionary containing configuration data

        Returns:
            FilterConfig instance created from dictionary
        """
        def _dict_to_dataclass(data_dict: Dict[str, Any], target_class: type) -> Any:
            if not isinstance(data_dict, dict):
                raise ConfigValidationError(
                    f"Expected a mapping for {target_class.__name__}, "
                    f"got {type(data_dict).__name__}"
                )

            field_values: Dict[str, Any] = {}
            for field_name, field_info in target_class.__dataclass_fields__.items():
                if field_name not in data_dict:
                    continue
                value = data_dict[field_name]
                field_type = field_info.type
                if hasattr(field_type, "__dataclass_fields__"):
                    field_values[field_name] = _dict_to_dataclass(value, field_type)
                else:
                    field_values[field_name] = value

            return target_class(**field_values)

        try:
            result = _dict_to_dataclass(data, cls)
        except (TypeError, ValueError) as e:
            if isinstance(e, ConfigError):
                raise
            raise ConfigValidationError(f"Invalid configuration data: {e}") from e

        if not isinstance(result, cls):
            raise ConfigValidationError(f"Failed to deserialize to {cls.__name__}")
        return result

    @classmethod
    def from_json(cls, json_str: str) -> "FilterConfig":
        """Create configuration from JSON string."""
        try:
            data = json.loads(json_str)
        except json.JSONDecodeError as e:
            raise ConfigValidationError(f"Configuration is not valid JSON: {e}") from e
        return cls.from_dict(data)

    # Preset factory methods
    @classmethod
    def default(cls) -> "FilterConfig":
        """Create the default configuration (lenient pattern validation)."""
        return cls(name="default")

    @classmethod
    def strict(cls) -> "FilterConfig":
        """Create preset that rejects patterns the matcher cannot handle."""
        return cls(
            pattern=PatternConfig(strict_validation=True, allow_empty_find=False),
            name="strict",
            description=(
                "Rejects empty patterns and patterns whose first byte recurs"
            )
        )

    @classmethod
    def bounded_memory(cls, max_region_bytes: int = 1024 * 1024) -> "FilterConfig":
        """Create preset that caps the size of open block-replace regions."""
        return cls(
            streaming=StreamingConfig(max_region_bytes=max_region_bytes),
            name="bounded_memory",
            description=(
                "Abandons unterminated block-replace regions beyond a size limit"
            )
        )

    @classmethod
    def high_throughput(cls) -> "FilterConfig":
        """Create preset with larger I/O buffers and no diagnostics collection."""
        return cls(
            streaming=StreamingConfig(buffer_size=64 * 1024),
            global_=GlobalConfig(
                logging_level="WARNING",
                collect_diagnostics=False
            ),
            name="high_throughput",
            description="Large copy buffers, diagnostics collection disabled"
        )


PRESETS = {
    "default": FilterConfig.default,
    "strict": FilterConfig.strict,
    "bounded_memory": FilterConfig.bounded_memory,
    "high_throughput": FilterConfig.high_throughput,
}

"""Main CLI entry point for the byte-stream-filters command-line tool.

Every filtering command streams its input (a file or stdin) through the
stream components to its output (a file or stdout), so inputs of any size
are processed in bounded memory.
"""

import argparse
import json
import logging
import os
import shutil
import sys
import tempfile
import time
from pathlib import Path
from typing import Any, BinaryIO, Dict, Iterator, List, Optional, Tuple

from byte_stream_filters import __version__
from byte_stream_filters.shared.config import PRESETS, ConfigError, FilterConfig
from byte_stream_filters.shared.logging import get_logger
from byte_stream_filters.streams import (
    BlockReplace,
    ByteFilter,
    ByteSink,
    FileSink,
    FindReplace,
    NullSink,
    Splitter,
    StreamFilterError,
    Trim,
    pump,
)

EXIT_OK = 0
EXIT_IO_ERROR = 1
EXIT_USAGE_ERROR = 2
EXIT_INTERRUPTED = 130  # Standard exit code for SIGINT


class CLIConfig:
    """Configuration management for CLI operations."""

    def __init__(self, filter_config: Optional[FilterConfig] = None):
        self.filter_config = filter_config or FilterConfig.default()
        self.output_format = "text"
        self.verbose = False
        self.quiet = False

    @classmethod
    def from_file(cls, config_path: Path) -> "CLIConfig":
        """Load a JSON ``FilterConfig`` from file.

        Raises:
            OSError: If the file cannot be read
            ConfigValidationError: If the file does not hold a valid configuration
        """
        with config_path.open(encoding="utf-8") as f:
            return cls(FilterConfig.from_json(f.read()))

    @classmethod
    def from_args(cls, args: argparse.Namespace) -> "CLIConfig":
        """Resolve the configuration: preset, then config file, then flags."""
        if args.config:
            config = cls.from_file(args.config)
        else:
            config = cls(PRESETS[args.preset]())

        if args.strict:
            config.filter_config = config.filter_config.override(
                pattern__strict_validation=True,
                pattern__allow_empty_find=False
            )
        max_region_bytes = getattr(args, "max_region_bytes", None)
        if max_region_bytes is not None:
            config.filter_config = config.filter_config.override(
                streaming__max_region_bytes=max_region_bytes
            )

        config.output_format = getattr(args, "format", config.output_format)
        config.verbose = args.verbose
        config.quiet = args.quiet
        return config

    @property
    def component_options(self) -> Dict[str, Any]:
        """Keyword arguments shared by every stream component."""
        return {
            "encoding": self.filter_config.pattern.encoding,
            "strict": self.filter_config.pattern.strict_validation,
            "correlation_id": self.filter_config.correlation_id,
        }


class ProgressTracker:
    """Progress tracking for long-running operations."""

    def __init__(self, total: int, description: str = "Processing", enabled: bool = True):
        self.total = total
        self.completed = 0
        self.description = description
        self.enabled = enabled
        self.start_time = time.time()
        self.last_update = 0.0

    def update(self, increment: int = 1):
        """Update progress and display if needed."""
        self.completed += increment
        current_time = time.time()

        # Update every second or on completion
        if current_time - self.last_update >= 1.0 or self.completed >= self.total:
            self._display_progress()
            self.last_update = current_time

    def _display_progress(self):
        if not self.enabled or self.total == 0:
            return

        percentage = (self.completed / self.total) * 100
        elapsed = time.time() - self.start_time

        if self.completed > 0 and elapsed > 0:
            rate = self.completed / elapsed
            eta = (self.total - self.completed) / rate if rate > 0 else 0
            eta_str = f", ETA: {eta:.0f}s" if eta > 0 else ""
        else:
            eta_str = ""

        progress_bar = "=" * int(percentage // 2)
        progress_bar += " " * (50 - len(progress_bar))

        print(f"\r{self.description}: [{progress_bar}] "
              f"{percentage:.1f}% ({self.completed}/{self.total}){eta_str}",
              end="", file=sys.stderr)

        if self.completed >= self.total:
            print(file=sys.stderr)


def _open_input(path: Optional[Path]) -> Tuple[BinaryIO, bool]:
    """Return the input stream and whether it must be closed by the caller."""
    if path is None:
        return sys.stdin.buffer, False
    return path.open("rb"), True


def _open_output(path: Optional[Path]) -> FileSink:
    if path is None:
        return FileSink(sys.stdout.buffer, owns=False)
    return FileSink(path.open("wb"))


def _check_distinct(input_path: Optional[Path], *outputs: Optional[Path]) -> None:
    """Reject outputs that name the input file, which would be truncated unread."""
    if input_path is None or not input_path.exists():
        return
    for output in outputs:
        if output is not None and output.exists() and input_path.samefile(output):
            raise ValueError(f"Output {output} is the input file")


def _run_stream(path: Optional[Path], stream: ByteFilter, config: CLIConfig) -> int:
    """Pump the input into ``stream`` and close it, returning bytes read."""
    try:
        source, owns_source = _open_input(path)
    except OSError:
        stream.close()
        raise
    try:
        bytes_read = pump(source, stream, config.filter_config.streaming.buffer_size)
        stream.close()
    finally:
        if owns_source:
            source.close()
    return bytes_read


def _report(config: CLIConfig, message: str) -> None:
    if not config.quiet:
        print(message, file=sys.stderr)


def _build_replace_chain(
    sink: ByteSink,
    pairs: List[Tuple[str, str]],
    config: CLIConfig
) -> Tuple[FindReplace, List[FindReplace]]:
    """Build a find/replace chain, returning its head and every stage."""
    head = FindReplace.chain(
        sink,
        [find for find, _ in pairs],
        [replace for _, replace in pairs],
        allow_empty=config.filter_config.pattern.allow_empty_find,
        **config.component_options
    )
    stages: List[FindReplace] = []
    stage: ByteSink = head
    while isinstance(stage, FindReplace):
        stages.append(stage)
        stage = stage.sink
    return head, stages


PATTERN_EPILOG = (
    "Patterns and replacements starting with '-' must follow '--', "
    "after every option, e.g. -i in.txt -- --boundary X"
)


def create_argument_parser() -> argparse.ArgumentParser:
    """Create the main argument parser."""
    parser = argparse.ArgumentParser(
        prog="byte-stream-filters",
        description="Streaming find/replace, split and trim for byte streams"
    )

    parser.add_argument("--version", action="version", version=__version__)

    # Global options
    parser.add_argument(
        "--config", "-c",
        type=Path,
        help="JSON filter configuration file (takes precedence over --preset)"
    )
    parser.add_argument(
        "--preset",
        choices=sorted(PRESETS),
        default="default",
        help="Filter configuration preset (default: default)"
    )
    parser.add_argument(
        "--strict",
        action="store_true",
        help="Reject empty patterns and patterns whose first byte recurs"
    )
    parser.add_argument(
        "--verbose", "-v",
        action="store_true",
        help="Verbose output"
    )
    parser.add_argument(
        "--quiet", "-q",
        action="store_true",
        help="Quiet output"
    )

    subparsers = parser.add_subparsers(dest="command", help="Available commands")

    def add_io_arguments(sub: argparse.ArgumentParser) -> None:
        sub.add_argument(
            "--input", "-i",
            type=Path,
            help="Input file (default: stdin)"
        )
        sub.add_argument(
            "--output", "-o",
            type=Path,
            help="Output file (default: stdout)"
        )

    # Replace command
    replace_parser = subparsers.add_parser(
        "replace", help="Replace every occurrence of a pattern",
        epilog=PATTERN_EPILOG
    )
    replace_parser.add_argument("find", help="Pattern to find")
    replace_parser.add_argument("replace", help="Replacement (may be empty)")
    replace_parser.add_argument(
        "--pair",
        nargs=2,
        action="append",
        default=[],
        metavar=("FIND", "REPLACE"),
        help="Additional find/replace pair applied after the previous ones"
    )
    add_io_arguments(replace_parser)

    # Replace-block command
    block_parser = subparsers.add_parser(
        "replace-block", help="Replace every BEGIN ... END block",
        epilog=PATTERN_EPILOG
    )
    block_parser.add_argument("begin", help="Marker opening a block")
    block_parser.add_argument("end", help="Marker closing a block")
    block_parser.add_argument("replace", help="Replacement for each block")
    block_parser.add_argument(
        "--max-region-bytes",
        type=int,
        help="Leave blocks larger than this unchanged instead of buffering them"
    )
    add_io_arguments(block_parser)

    # Trim command
    trim_parser = subparsers.add_parser(
        "trim", help="Keep only the bytes between BEGIN and END",
        epilog=PATTERN_EPILOG
    )
    trim_parser.add_argument("begin", help="Marker after which bytes are kept")
    trim_parser.add_argument("end", help="Marker before which bytes are kept")
    add_io_arguments(trim_parser)

    # Split command
    split_parser = subparsers.add_parser(
        "split", help="Split the input around the first occurrence of a pattern",
        epilog=PATTERN_EPILOG
    )
    split_parser.add_argument("pattern", help="Pattern to split on")
    split_parser.add_argument(
        "--before",
        type=Path,
        required=True,
        help="File receiving the bytes before the pattern"
    )
    split_parser.add_argument(
        "--after",
        type=Path,
        required=True,
        help="File receiving the bytes after the pattern"
    )
    split_parser.add_argument(
        "--input", "-i",
        type=Path,
        help="Input file (default: stdin)"
    )

    # Replace-in-files command
    files_parser = subparsers.add_parser(
        "replace-in-files",
        help="Replace a pattern in every file of a directory tree",
        epilog=PATTERN_EPILOG
    )
    files_parser.add_argument("directory", type=Path, help="Root directory")
    files_parser.add_argument(
        "extension", help="File name suffix selecting the files, e.g. .txt"
    )
    files_parser.add_argument("find", help="Pattern to find")
    files_parser.add_argument("replace", help="Replacement (may be empty)")
    files_parser.add_argument(
        "--dry-run",
        action="store_true",
        help="Count occurrences without rewriting any file"
    )
    files_parser.add_argument(
        "--format", "-f",
        choices=["json", "text"],
        default="text",
        help="Summary format (default: text)"
    )

    return parser


def find_files(directory: Path, extension: str) -> Iterator[Path]:
    """Find files below ``directory`` whose name ends with ``extension``."""
    for path in sorted(directory.rglob("*")):
        if path.is_file() and path.name.endswith(extension):
            yield path


def format_results(results: List[Dict[str, Any]], format_type: str) -> str:
    """Format replace-in-files results for output."""
    if format_type == "json":
        return json.dumps(results, indent=2)

    if not results:
        return "No matching files."

    changed = sum(1 for r in results if r["matches"] > 0)
    occurrences = sum(r["matches"] for r in results)

    lines = [f"Found {occurrences} occurrences in {changed} of {len(results)} files"]
    lines.append("-" * 60)
    for result in results:
        if result["matches"] == 0:
            continue
        status = "rewritten" if result["rewritten"] else "unchanged"
        lines.append(f"{result['file']}: {result['matches']} occurrences ({status})")

    return "\n".join(lines)


def cmd_replace(args: argparse.Namespace, config: CLIConfig) -> int:
    """Handle replace command."""
    _check_distinct(args.input, args.output)
    pairs = [(args.find, args.replace)] + [tuple(pair) for pair in args.pair]
    sink = _open_output(args.output)
    try:
        head, stages = _build_replace_chain(sink, pairs, config)
    except ValueError:
        sink.close()
        raise

    bytes_read = _run_stream(args.input, head, config)

    matches = sum(stage.match_count for stage in stages)
    _report(config, f"Replaced {matches} occurrences in {bytes_read} bytes")
    return EXIT_OK


def cmd_replace_block(args: argparse.Namespace, config: CLIConfig) -> int:
    """Handle replace-block command."""
    _check_distinct(args.input, args.output)
    sink = _open_output(args.output)
    try:
        stream = BlockReplace(
            sink, args.begin, args.end, args.replace,
            max_region_bytes=config.filter_config.streaming.max_region_bytes,
            **config.component_options
        )
    except ValueError:
        sink.close()
        raise

    _run_stream(args.input, stream, config)

    _report(config, f"Replaced {stream.match_count} blocks")
    if stream.abandoned_count:
        _report(
            config,
            f"Warning: {stream.abandoned_count} unterminated or oversized "
            "blocks were left unchanged"
        )
    return EXIT_OK


def cmd_trim(args: argparse.Namespace, config: CLIConfig) -> int:
    """Handle trim command."""
    _check_distinct(args.input, args.output)
    sink = _open_output(args.output)
    try:
        stream = Trim(sink, args.begin, args.end, **config.component_options)
    except ValueError:
        sink.close()
        raise

    _run_stream(args.input, stream, config)

    if not stream.begin_found:
        _report(config, "Warning: begin marker not found, output is empty")
    elif not stream.end_found:
        _report(config, "Warning: end marker not found, kept everything after begin")
    return EXIT_OK


def cmd_split(args: argparse.Namespace, config: CLIConfig) -> int:
    """Handle split command."""
    _check_distinct(args.input, args.before, args.after)
    before = FileSink(args.before.open("wb"))
    after: Optional[FileSink] = None
    try:
        after = FileSink(args.after.open("wb"))
        stream = Splitter(args.pattern, before, after, **config.component_options)
    except (OSError, ValueError):
        before.close()
        if after is not None:
            after.close()
        raise

    _run_stream(args.input, stream, config)

    if not stream.found:
        _report(config, "Warning: pattern not found, whole input written before it")
    return EXIT_OK


def replace_in_file(
    path: Path,
    find: str,
    replace: str,
    config: CLIConfig,
    dry_run: bool = False
) -> Dict[str, Any]:
    """Run find/replace over one file, rewriting it through a temporary file.

    The file is only replaced when at least one occurrence was found.
    """
    result: Dict[str, Any] = {"file": str(path), "matches": 0, "rewritten": False}

    if dry_run:
        counter = FindReplace(
            NullSink(), find, replace,
            allow_empty=config.filter_config.pattern.allow_empty_find,
            **config.component_options
        )
        _run_stream(path, counter, config)
        result["matches"] = counter.match_count
        return result

    fd, temp_name = tempfile.mkstemp(
        prefix=f".{path.name}.", suffix=".tmp", dir=str(path.parent)
    )
    temp_path = Path(temp_name)
    try:
        stream = FindReplace(
            FileSink(os.fdopen(fd, "wb")), find, replace,
            allow_empty=config.filter_config.pattern.allow_empty_find,
            **config.component_options
        )
        _run_stream(path, stream, config)
        result["matches"] = stream.match_count
        if stream.match_count > 0:
            shutil.copymode(path, temp_path)
            os.replace(temp_path, path)
            result["rewritten"] = True
    finally:
        if temp_path.exists():
            temp_path.unlink()

    return result


def cmd_replace_in_files(args: argparse.Namespace, config: CLIConfig) -> int:
    """Handle replace-in-files command."""
    logger = get_logger(__name__, config.filter_config.correlation_id, "cli")

    if not args.directory.is_dir():
        print(f"Not a directory: {args.directory}", file=sys.stderr)
        return EXIT_IO_ERROR

    # Validate the pattern once before touching any file
    FindReplace(
        NullSink(), args.find, args.replace,
        allow_empty=config.filter_config.pattern.allow_empty_find,
        **config.component_options
    ).close()

    files = list(find_files(args.directory, args.extension))
    progress = ProgressTracker(
        len(files), "Replacing in files", enabled=not config.quiet
    )

    results = []
    failures = 0
    for path in files:
        try:
            results.append(
                replace_in_file(path, args.find, args.replace, config, args.dry_run)
            )
        except OSError as e:
            logger.exception("Failed to rewrite file", extra={"file": str(path)})
            results.append({
                "file": str(path), "matches": 0, "rewritten": False, "error": str(e)
            })
            failures += 1
        progress.update()

    print(format_results(results, config.output_format))
    return EXIT_IO_ERROR if failures else EXIT_OK


COMMANDS = {
    "replace": cmd_replace,
    "replace-block": cmd_replace_block,
    "trim": cmd_trim,
    "split": cmd_split,
    "replace-in-files": cmd_replace_in_files,
}


def main(argv: Optional[List[str]] = None) -> int:
    """Main CLI entry point."""
    parser = create_argument_parser()
    args = parser.parse_args(argv)

    if not args.command:
        parser.print_help()
        return EXIT_USAGE_ERROR

    try:
        config = CLIConfig.from_args(args)
    except ConfigError as e:
        print(f"Invalid configuration: {e}", file=sys.stderr)
        return EXIT_USAGE_ERROR
    except OSError as e:
        print(f"Could not read configuration: {e}", file=sys.stderr)
        return EXIT_IO_ERROR

    # Set up logging verbosity
    if config.verbose:
        level = logging.DEBUG
    elif config.quiet:
        level = logging.ERROR
    else:
        level = getattr(logging, config.filter_config.global_.logging_level)
    logging.basicConfig(level=level, stream=sys.stderr)

    try:
        return COMMANDS[args.command](args, config)
    except (StreamFilterError, ValueError) as e:
        print(f"Error: {e}", file=sys.stderr)
        return EXIT_USAGE_ERROR
    except OSError as e:
        print(f"I/O error: {e}", file=sys.stderr)
        return EXIT_IO_ERROR
    except KeyboardInterrupt:
        print("\nOperation interrupted by user", file=sys.stderr)
        return EXIT_INTERRUPTED


if __name__ == "__main__":
    sys.exit(main())

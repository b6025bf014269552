"""Colored console logging, size and timing helpers for glb-batch."""

import sys
import time
from collections.abc import Iterator
from contextlib import contextmanager
from dataclasses import dataclass


class Colors:
    """ANSI escape codes for terminal colors."""

    RESET = "\033[0m"
    BOLD = "\033[1m"
    DIM = "\033[2m"

    CYAN = "\033[36m"
    BRIGHT_RED = "\033[91m"
    BRIGHT_GREEN = "\033[92m"
    BRIGHT_YELLOW = "\033[93m"


def _supports_color() -> bool:
    """Check if stdout is a color-capable terminal."""
    isatty = getattr(sys.stdout, "isatty", None)
    return bool(isatty and isatty())


_USE_COLOR = _supports_color()
_QUIET = False


def set_quiet(quiet: bool) -> None:
    """Suppress info/detail output (warnings and errors are always shown)."""
    global _QUIET
    _QUIET = quiet


def _c(color: str, text: str) -> str:
    if not _USE_COLOR:
        return text
    return f"{color}{text}{Colors.RESET}"


def bold(text: str) -> str:
    return _c(Colors.BOLD, text)


def dim(text: str) -> str:
    return _c(Colors.DIM, text)


def cyan(text: str) -> str:
    return _c(Colors.CYAN, text)


def bright_green(text: str) -> str:
    return _c(Colors.BRIGHT_GREEN, text)


def bright_yellow(text: str) -> str:
    return _c(Colors.BRIGHT_YELLOW, text)


def bright_red(text: str) -> str:
    return _c(Colors.BRIGHT_RED, text)


# Log level formatting
def log_info(msg: str) -> None:
    """Print info message."""
    if not _QUIET:
        print(f"  {cyan('INFO')}  {msg}")


def log_ok(msg: str) -> None:
    """Print success message."""
    if not _QUIET:
        print(f"    {bright_green('OK')}  {msg}")


def log_warn(msg: str) -> None:
    """Print warning message."""
    print(f"  {bright_yellow('WARN')}  {msg}")


def log_error(msg: str) -> None:
    """Print error message."""
    print(f" {bright_red('ERROR')}  {msg}")


def log_detail(msg: str, indent: int = 6) -> None:
    """Print indented detail message."""
    if not _QUIET:
        print(f"{' ' * indent}{msg}")


def print_header(title: str, char: str = "=", width: int = 60) -> None:
    """Print a header with decorative borders."""
    if _QUIET:
        return
    border = char * width
    print(f"\n{cyan(border)}")
    print(f"  {bold(title)}")
    print(f"{cyan(border)}")


# Timing utilities
def format_duration(seconds: float) -> str:
    """Format seconds into human-readable duration."""
    if seconds < 0.001:
        return f"{seconds * 1000000:.0f}μs"
    elif seconds < 1:
        return f"{seconds * 1000:.1f}ms"
    elif seconds < 60:
        return f"{seconds:.2f}s"
    else:
        mins = int(seconds // 60)
        secs = seconds % 60
        return f"{mins}m {secs:.1f}s"


@dataclass
class TimingResult:
    """Result from a timed operation."""

    elapsed: float
    message: str


@contextmanager
def timed(description: str) -> Iterator[TimingResult]:
    """Context manager for timing operations.

    Usage:
        with timed("Transform model.glb") as t:
            run_steps()
        log_ok(f"Done in {format_duration(t.elapsed)}")
    """
    result = TimingResult(elapsed=0.0, message=description)
    start = time.perf_counter()
    try:
        yield result
    finally:
        result.elapsed = time.perf_counter() - start


# Result formatting
_BYTE_UNITS = ("Bytes", "KB", "MB", "GB")


def format_count(count: int, singular: str, plural: str | None = None) -> str:
    """Format count with proper singular/plural form."""
    if plural is None:
        plural = singular + "s"
    word = singular if count == 1 else plural
    return f"{count:,} {word}"


def format_bytes(size: int) -> str:
    """
    Format a byte count using the largest fitting unit up to GB.

    Scaled values get two decimals; a lone trailing zero after a nonzero
    tenths digit is dropped, so 1536 reads "1.5 KB" while exactly one
    gigabyte reads "1.00 GB".
    """
    if size == 0:
        return "0 Bytes"
    if size < 0:
        return f"-{format_bytes(-size)}"

    index = 0
    value = float(size)
    while value >= 1024 and index < len(_BYTE_UNITS) - 1:
        value /= 1024
        index += 1

    if index == 0:
        return f"{size} Bytes"

    text = f"{value:.2f}"
    if text.endswith("0") and not text.endswith(".00"):
        text = text[:-1]
    return f"{text} {_BYTE_UNITS[index]}"


def format_percent(value: float) -> str:
    """Format a percentage with one decimal place."""
    return f"{value:.1f}%"

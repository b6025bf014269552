"""Utility helpers: command runner, file naming, console logging."""

from glb_batch.utils.command import CommandRunner, default_search_dirs, resolve_tool
from glb_batch.utils.files import derive_output_path, file_size, is_glb
from glb_batch.utils.logging import format_bytes, format_percent

__all__ = [
    "CommandRunner",
    "default_search_dirs",
    "derive_output_path",
    "file_size",
    "format_bytes",
    "format_percent",
    "is_glb",
    "resolve_tool",
]

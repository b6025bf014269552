"""File size and output naming helpers."""

from __future__ import annotations

import os
from pathlib import Path

from glb_batch.utils.constants import GLB_EXTENSION


def file_size(path: str | Path) -> int:
    """Size of a file in bytes; raises OSError if missing or unreadable."""
    return os.stat(path).st_size


def is_glb(path: str | Path) -> bool:
    """Case-insensitive check for the .glb extension."""
    return str(path).lower().endswith(GLB_EXTENSION)


def derive_output_path(input_path: str | Path, suffix: str) -> Path:
    """
    Output path next to the input: <stem>_<suffix><ext>.

    The suffix is always appended, so the result can never equal the input
    and the original file is never overwritten.
    """
    if not suffix:
        raise ValueError("Output suffix must not be empty")
    input_path = Path(input_path)
    return input_path.with_name(f"{input_path.stem}_{suffix}{input_path.suffix}")

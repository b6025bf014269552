"""Resolve the set of files the user selected."""

from __future__ import annotations

import os
from collections.abc import Mapping, Sequence
from pathlib import Path

from glb_batch.errors import NoMatchingFilesError, SelectionUnavailableError
from glb_batch.utils.constants import SELECTION_ENV_VARS
from glb_batch.utils.files import is_glb


def _from_file_manager(env: Mapping[str, str]) -> list[Path]:
    for name in SELECTION_ENV_VARS:
        raw = env.get(name, "")
        paths = [Path(line) for line in raw.splitlines() if line.strip()]
        if paths:
            return paths
    return []


def get_selected_files(
    paths: Sequence[str | Path] | None = None,
    env: Mapping[str, str] | None = None,
) -> list[Path]:
    """
    Currently selected filesystem paths.

    Explicit paths win; otherwise the selection a file manager exported to
    its script environment (Nautilus, Nemo, Caja) is used.

    Raises:
        SelectionUnavailableError: if neither source yields any path.
    """
    if paths:
        return [Path(p) for p in paths]
    selected = _from_file_manager(os.environ if env is None else env)
    if not selected:
        raise SelectionUnavailableError(
            "No files selected. Select files in the file manager first."
        )
    return selected


def filter_glb_files(paths: Sequence[str | Path]) -> list[Path]:
    """Keep only .glb paths, preserving order."""
    return [Path(p) for p in paths if is_glb(p)]


def select_glb_files(
    paths: Sequence[str | Path] | None = None,
    env: Mapping[str, str] | None = None,
) -> list[Path]:
    """
    Selected .glb files.

    Raises:
        SelectionUnavailableError: nothing is selected.
        NoMatchingFilesError: a selection exists but contains no GLB file.
    """
    glb_files = filter_glb_files(get_selected_files(paths, env))
    if not glb_files:
        raise NoMatchingFilesError("No GLB files selected")
    return glb_files

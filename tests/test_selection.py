"""Tests for selection resolution."""

from __future__ import annotations

from pathlib import Path

import pytest

from glb_batch.errors import NoMatchingFilesError, SelectionUnavailableError
from glb_batch.selection import filter_glb_files, get_selected_files, select_glb_files


class TestGetSelectedFiles:
    """Tests for get_selected_files function."""

    def test_explicit_paths_win(self) -> None:
        env = {"NAUTILUS_SCRIPT_SELECTED_FILE_PATHS": "/x/other.glb\n"}
        assert get_selected_files(["a.glb"], env) == [Path("a.glb")]

    def test_reads_file_manager_selection(self) -> None:
        env = {"NAUTILUS_SCRIPT_SELECTED_FILE_PATHS": "/x/a.glb\n/x/b b.glb\n"}
        assert get_selected_files(None, env) == [Path("/x/a.glb"), Path("/x/b b.glb")]

    def test_falls_through_to_other_file_managers(self) -> None:
        env = {
            "NAUTILUS_SCRIPT_SELECTED_FILE_PATHS": "",
            "NEMO_SCRIPT_SELECTED_FILE_PATHS": "/y/c.glb",
        }
        assert get_selected_files(None, env) == [Path("/y/c.glb")]

    def test_no_selection_raises(self) -> None:
        with pytest.raises(SelectionUnavailableError):
            get_selected_files(None, {})


class TestFilterGlbFiles:
    def test_keeps_order_and_case_insensitive(self) -> None:
        paths = ["a.glb", "b.gltf", "C.GLB", "d.png"]
        assert filter_glb_files(paths) == [Path("a.glb"), Path("C.GLB")]


class TestSelectGlbFiles:
    """Selection missing vs. present-but-unmatched are distinct errors."""

    def test_no_matching_files(self) -> None:
        with pytest.raises(NoMatchingFilesError):
            select_glb_files(["a.obj", "b.fbx"], {})

    def test_selection_unavailable(self) -> None:
        with pytest.raises(SelectionUnavailableError):
            select_glb_files(None, {})

    def test_errors_are_distinct(self) -> None:
        assert not issubclass(NoMatchingFilesError, SelectionUnavailableError)
        assert not issubclass(SelectionUnavailableError, NoMatchingFilesError)

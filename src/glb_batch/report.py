"""Inspection reports from `gltf-transform inspect`, with cyclic navigation."""

from __future__ import annotations

import shlex
from collections.abc import Sequence
from concurrent.futures import ThreadPoolExecutor
from dataclasses import dataclass
from pathlib import Path

from glb_batch.errors import CommandError
from glb_batch.utils.command import CommandRunner
from glb_batch.utils.constants import DEFAULT_INSPECT_WORKERS, GLTF_TRANSFORM


@dataclass(frozen=True)
class InspectionReport:
    """Markdown report for one file, or the reason it could not be produced."""

    file: str
    markdown: str | None = None
    error: str | None = None

    @property
    def ok(self) -> bool:
        return self.error is None


def inspect_command(path: str | Path, tool: str = GLTF_TRANSFORM) -> str:
    return shlex.join([tool, "inspect", str(path), "--format", "md"])


def inspect_file(
    path: str | Path,
    runner: CommandRunner,
    tool: str = GLTF_TRANSFORM,
) -> InspectionReport:
    """Run the inspector on one file, capturing stdout verbatim."""
    path = Path(path)
    try:
        markdown = runner.run(inspect_command(path, tool))
    except CommandError as e:
        return InspectionReport(
            file=path.name, error=f"Failed to inspect file:\n\n{e}"
        )
    return InspectionReport(file=path.name, markdown=markdown)


def inspect_files(
    paths: Sequence[str | Path],
    runner: CommandRunner,
    tool: str = GLTF_TRANSFORM,
    max_workers: int = DEFAULT_INSPECT_WORKERS,
) -> list[InspectionReport]:
    """
    Inspect files concurrently; reports come back in input order.

    Inspection is read-only, so files do not depend on one another.
    """
    if not paths:
        return []
    workers = max(1, min(max_workers, len(paths)))
    with ThreadPoolExecutor(max_workers=workers) as pool:
        return list(pool.map(lambda p: inspect_file(p, runner, tool), paths))


def render_report(report: InspectionReport) -> str:
    """Markdown document titled with the file name."""
    if report.error is not None:
        return f"# Inspection Failed: {report.file}\n\n{report.error}"
    return f"# GLB Analysis: {report.file}\n\n{report.markdown}"


class ReportDeck:
    """
    A set of reports shown one at a time.

    next() and previous() wrap around, so stepping forward len(deck) times
    lands back on the starting report.
    """

    def __init__(self, reports: Sequence[InspectionReport]) -> None:
        if not reports:
            raise ValueError("ReportDeck needs at least one report")
        self._reports = list(reports)
        self.index = 0

    def __len__(self) -> int:
        return len(self._reports)

    @property
    def current(self) -> InspectionReport:
        return self._reports[self.index]

    def next(self) -> InspectionReport:
        self.index = (self.index + 1) % len(self._reports)
        return self.current

    def previous(self) -> InspectionReport:
        self.index = (self.index - 1) % len(self._reports)
        return self.current

    def render(self) -> str:
        return render_report(self.current)

    def position(self) -> str:
        return f"{self.index + 1}/{len(self._reports)}"

"""Batch orchestration: run a job over each selected file and summarize."""

from __future__ import annotations

import shutil
import tempfile
from collections.abc import Mapping, Sequence
from dataclasses import dataclass
from enum import Enum
from pathlib import Path
from typing import Protocol

from glb_batch.errors import (
    CommandError,
    NoMatchingFilesError,
    SelectionUnavailableError,
)
from glb_batch.notify import Notifier, ProgressHandle, Status
from glb_batch.pipeline import (
    CompressionMode,
    TransformOptions,
    build_profile_command,
    build_steps,
)
from glb_batch.selection import select_glb_files
from glb_batch.utils.command import CommandRunner
from glb_batch.utils.constants import GLTF_TRANSFORM, SUFFIX_OPTIMIZED
from glb_batch.utils.files import derive_output_path, file_size
from glb_batch.utils.logging import (
    dim,
    format_bytes,
    format_count,
    format_duration,
    format_percent,
    log_detail,
    log_error,
    log_ok,
    timed,
)


@dataclass(frozen=True)
class CompressionResult:
    """Outcome of processing a single file."""

    file: str
    success: bool
    error: str | None = None
    original_size: int | None = None
    compressed_size: int | None = None
    output_path: Path | None = None

    @property
    def saved_bytes(self) -> int:
        if self.original_size is None or self.compressed_size is None:
            return 0
        return self.original_size - self.compressed_size


class Outcome(str, Enum):
    ALL_SUCCEEDED = "all_succeeded"
    ALL_FAILED = "all_failed"
    MIXED = "mixed"


@dataclass(frozen=True)
class BatchSummary:
    """Aggregate over a batch; byte totals cover successful files only."""

    succeeded: int
    failed: int
    total_original: int
    total_compressed: int

    @property
    def saved_bytes(self) -> int:
        return self.total_original - self.total_compressed

    @property
    def saved_percent(self) -> float:
        if self.total_original <= 0:
            return 0.0
        return (self.saved_bytes / self.total_original) * 100.0

    @property
    def outcome(self) -> Outcome:
        if self.succeeded and not self.failed:
            return Outcome.ALL_SUCCEEDED
        if not self.succeeded:
            return Outcome.ALL_FAILED
        return Outcome.MIXED


def summarize(results: Sequence[CompressionResult]) -> BatchSummary:
    """Count outcomes and total the sizes of successful results."""
    successful = [r for r in results if r.success]
    return BatchSummary(
        succeeded=len(successful),
        failed=len(results) - len(successful),
        total_original=sum(r.original_size or 0 for r in successful),
        total_compressed=sum(r.compressed_size or 0 for r in successful),
    )


def summary_message(
    summary: BatchSummary,
    verb: str = "optimize",
    past: str = "optimized",
    label: str | None = None,
) -> str:
    """Single-line, human-readable batch summary."""
    prefix = f"{label}: " if label else ""
    savings = (
        f"Saved {format_bytes(summary.saved_bytes)} "
        f"({format_percent(summary.saved_percent)})"
    )
    if summary.outcome is Outcome.ALL_SUCCEEDED:
        return (
            f"{prefix}{past.capitalize()} "
            f"{format_count(summary.succeeded, 'file')} - {savings}"
        )
    if summary.outcome is Outcome.ALL_FAILED:
        return f"{prefix}Failed to {verb} {format_count(summary.failed, 'file')}"
    return f"{prefix}{summary.succeeded} {past}, {summary.failed} failed - {savings}"


def _failure(path: Path, error: Exception) -> CompressionResult:
    log_error(f"{path.name}: {error}")
    return CompressionResult(file=path.name, success=False, error=str(error))


def transform_file(
    path: str | Path,
    options: TransformOptions,
    runner: CommandRunner,
    tool: str = GLTF_TRANSFORM,
) -> CompressionResult:
    """
    Run the transform chain on one file.

    Stages write to a private working directory; only after the last stage
    succeeds is its output moved to <stem>_optimized.glb. The first failing
    stage ends the chain for this file.
    """
    path = Path(path)
    output_path = derive_output_path(path, SUFFIX_OPTIMIZED)
    try:
        original_size = file_size(path)
        with timed(f"Transform {path.name}") as t:
            with tempfile.TemporaryDirectory(prefix="glb-batch-") as work_dir:
                steps = build_steps(path, output_path, options, work_dir)
                for step in steps:
                    command = step.render(tool)
                    log_detail(dim(command))
                    runner.run(command)
                shutil.move(str(steps[-1].output_path), str(output_path))
        compressed_size = file_size(output_path)
    except (CommandError, OSError) as e:
        return _failure(path, e)

    log_ok(
        f"{path.name} -> {output_path.name} "
        f"({format_bytes(original_size)} -> {format_bytes(compressed_size)}, "
        f"{format_duration(t.elapsed)})"
    )
    return CompressionResult(
        file=path.name,
        success=True,
        original_size=original_size,
        compressed_size=compressed_size,
        output_path=output_path,
    )


def compress_file(
    path: str | Path,
    mode: CompressionMode,
    runner: CommandRunner,
    tool: str = GLTF_TRANSFORM,
) -> CompressionResult:
    """Run one fixed `optimize` profile on a file."""
    path = Path(path)
    output_path = derive_output_path(path, mode.suffix)
    try:
        original_size = file_size(path)
        command = build_profile_command(path, output_path, mode, tool)
        log_detail(dim(command))
        runner.run(command)
        compressed_size = file_size(output_path)
    except (CommandError, OSError) as e:
        return _failure(path, e)

    log_ok(
        f"{path.name} -> {output_path.name} "
        f"({format_bytes(original_size)} -> {format_bytes(compressed_size)})"
    )
    return CompressionResult(
        file=path.name,
        success=True,
        original_size=original_size,
        compressed_size=compressed_size,
        output_path=output_path,
    )


class Job(Protocol):
    tool: str
    title: str
    verb: str
    past: str
    label: str | None

    def process(self, path: Path, runner: CommandRunner) -> CompressionResult: ...


@dataclass(frozen=True)
class TransformJob:
    """Discrete-step transform chain built from options."""

    options: TransformOptions
    tool: str = GLTF_TRANSFORM
    title: str = "Transforming GLB files..."
    verb: str = "optimize"
    past: str = "optimized"
    label: str | None = None

    def process(self, path: Path, runner: CommandRunner) -> CompressionResult:
        return transform_file(path, self.options, runner, self.tool)


@dataclass(frozen=True)
class CompressionJob:
    """Fixed compression profile, one `optimize` call per file."""

    mode: CompressionMode
    tool: str = GLTF_TRANSFORM
    verb: str = "compress"
    past: str = "compressed"

    @property
    def title(self) -> str:
        return f"{self.mode.label} compression..."

    @property
    def label(self) -> str:
        return self.mode.label

    def process(self, path: Path, runner: CommandRunner) -> CompressionResult:
        return compress_file(path, self.mode, runner, self.tool)


def process_batch(
    files: Sequence[str | Path],
    job: Job,
    runner: CommandRunner,
    progress: ProgressHandle | None = None,
) -> list[CompressionResult]:
    """
    Process files strictly in order, one result per file.

    A failure only affects its own file; the rest of the batch still runs.
    """
    results: list[CompressionResult] = []
    total = len(files)
    for index, path in enumerate(files, start=1):
        path = Path(path)
        if progress is not None:
            progress.update(f"Processing {index}/{total}: {path.name}")
        results.append(job.process(path, runner))
    return results


@dataclass(frozen=True)
class BatchRun:
    results: list[CompressionResult]
    summary: BatchSummary


_OUTCOME_STATUS: dict[Outcome, Status] = {
    Outcome.ALL_SUCCEEDED: Status.SUCCESS,
    Outcome.ALL_FAILED: Status.FAILURE,
    Outcome.MIXED: Status.WARNING,
}


def run_batch(
    job: Job,
    runner: CommandRunner,
    notifier: Notifier,
    paths: Sequence[str | Path] | None = None,
    env: Mapping[str, str] | None = None,
) -> BatchRun:
    """
    Select, process and summarize a batch with notifications.

    Selection problems are reported with a single notice and re-raised
    before any command runs.

    Raises:
        SelectionUnavailableError: nothing selected.
        NoMatchingFilesError: no .glb file in the selection.
    """
    try:
        files = select_glb_files(paths, env)
    except SelectionUnavailableError:
        notifier.hud("Select files in the file manager first")
        raise
    except NoMatchingFilesError:
        notifier.hud("No GLB files selected")
        raise

    progress = notifier.start(
        job.title, f"Processing {format_count(len(files), 'file')}"
    )
    results = process_batch(files, job, runner, progress)

    summary = summarize(results)
    progress.finish(
        _OUTCOME_STATUS[summary.outcome],
        summary_message(summary, job.verb, job.past, job.label),
    )
    return BatchRun(results=results, summary=summary)

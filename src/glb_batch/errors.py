"""Exception types raised by glb-batch."""

from __future__ import annotations


class GlbBatchError(Exception):
    """Base class for all glb-batch errors."""


class SelectionUnavailableError(GlbBatchError):
    """No file selection could be obtained from the host."""


class NoMatchingFilesError(GlbBatchError):
    """A selection exists but none of it is a GLB file."""


class PipelineConfigError(GlbBatchError, ValueError):
    """Transform options failed validation."""


class CommandError(GlbBatchError):
    """An external command exited nonzero or could not be started."""

    def __init__(self, command: str, returncode: int | None, stderr: str) -> None:
        self.command = command
        self.returncode = returncode
        self.stderr = stderr
        super().__init__(self._describe())

    def _describe(self) -> str:
        detail = self.stderr.strip() or "Unknown error"
        if self.returncode is None:
            return f"Command could not be started: {detail}"
        return f"Command failed (exit {self.returncode}): {detail}"

"""Shell command runner with an augmented executable search path."""

from __future__ import annotations

import os
import shutil
import subprocess
from collections.abc import Mapping, Sequence

from glb_batch.errors import CommandError
from glb_batch.utils.constants import (
    DEFAULT_SEARCH_DIRS,
    ENV_GLTF_TRANSFORM,
    ENV_SEARCH_PATH,
    GLTF_TRANSFORM,
)


def default_search_dirs(env: Mapping[str, str] | None = None) -> list[str]:
    """
    Search directories to prepend to PATH.

    Directories listed in GLB_BATCH_SEARCH_PATH come first, then the
    common install locations.
    """
    env = os.environ if env is None else env
    extra = [d for d in env.get(ENV_SEARCH_PATH, "").split(os.pathsep) if d]
    dirs: list[str] = []
    for d in [*extra, *DEFAULT_SEARCH_DIRS]:
        if d not in dirs:
            dirs.append(d)
    return dirs


def resolve_tool(env: Mapping[str, str] | None = None) -> str:
    """Name or path of the gltf-transform executable."""
    env = os.environ if env is None else env
    return env.get(ENV_GLTF_TRANSFORM, "").strip() or GLTF_TRANSFORM


class CommandRunner:
    """
    Run shell command strings with extra directories on PATH.

    The search directories are injected rather than written into the
    process environment, so each runner carries its own lookup order.
    """

    def __init__(
        self,
        search_dirs: Sequence[str] | None = None,
        env: Mapping[str, str] | None = None,
    ) -> None:
        self.search_dirs = (
            list(search_dirs) if search_dirs is not None else default_search_dirs()
        )
        self._base_env = dict(os.environ if env is None else env)

    def build_env(self) -> dict[str, str]:
        """Copy of the base environment with search dirs ahead of PATH."""
        env = dict(self._base_env)
        inherited = [env["PATH"]] if env.get("PATH") else []
        env["PATH"] = os.pathsep.join([*self.search_dirs, *inherited])
        return env

    def which(self, tool: str) -> str | None:
        """Locate an executable on the augmented PATH."""
        return shutil.which(tool, path=self.build_env()["PATH"])

    def run(self, command: str) -> str:
        """
        Run a command through the shell and return its stdout.

        No timeout is applied; the call blocks until the process exits.

        Raises:
            CommandError: on nonzero exit (with its stderr) or spawn failure.
        """
        try:
            result = subprocess.run(
                command,
                shell=True,
                capture_output=True,
                text=True,
                errors="replace",
                env=self.build_env(),
            )
        except OSError as e:
            raise CommandError(command, None, str(e)) from e

        if result.returncode != 0:
            raise CommandError(
                command,
                result.returncode,
                result.stderr.strip() or result.stdout.strip(),
            )
        return result.stdout

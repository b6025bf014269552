"""
Pytest fixtures for glb-batch tests.

External tools are never executed: FakeRunner stands in for
CommandRunner and simulates gltf-transform by writing output files.
"""

from __future__ import annotations

import shlex
from collections.abc import Callable
from pathlib import Path

import pytest

from glb_batch.errors import CommandError
from glb_batch.utils.command import CommandRunner


class FakeRunner(CommandRunner):
    """
    Records commands and fakes their effect.

    Every transform/optimize command writes an output half the size of its
    input ("copy" keeps the size). "inspect" returns a markdown stub.
    """

    def __init__(self, fail_when: Callable[[str], bool] | None = None) -> None:
        super().__init__(search_dirs=["/fake/bin"], env={"PATH": "/usr/bin"})
        self.commands: list[str] = []
        self.fail_when = fail_when

    def run(self, command: str) -> str:
        self.commands.append(command)
        if self.fail_when is not None and self.fail_when(command):
            raise CommandError(command, 1, "simulated failure")

        argv = shlex.split(command)
        subcommand = argv[1]
        if subcommand == "inspect":
            return f"## OVERVIEW\n\n{Path(argv[2]).name}\n"

        source, target = Path(argv[2]), Path(argv[3])
        data = source.read_bytes()
        if subcommand != "copy":
            data = data[: max(1, len(data) // 2)]
        target.write_bytes(data)
        return ""

    def which(self, tool: str) -> str | None:
        return f"/fake/bin/{tool}"

    def subcommands(self) -> list[str]:
        return [shlex.split(c)[1] for c in self.commands]


@pytest.fixture
def fake_runner() -> FakeRunner:
    return FakeRunner()


@pytest.fixture
def make_runner() -> Callable[..., FakeRunner]:
    """Factory for FakeRunner instances that fail on chosen commands."""
    return FakeRunner


@pytest.fixture
def make_glb(tmp_path: Path) -> Callable[..., Path]:
    """Factory writing a dummy .glb file of a given size."""

    def _make(name: str = "model.glb", size: int = 1000) -> Path:
        path = tmp_path / name
        path.write_bytes(b"g" * size)
        return path

    return _make

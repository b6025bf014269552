"""
Transform pipeline builder for gltf-transform.

Turns a set of enabled optimization options into an ordered chain of
gltf-transform subcommand invocations. The order is fixed and does not
depend on the order options were given in:

    dedup -> instance -> palette -> flatten -> join -> weld -> simplify
    -> resample -> prune -> sparse -> texture codec -> resize
    -> geometry codec

Each step reads the previous step's output. Geometry compression is always
last since nothing can operate on Draco/Meshopt encoded meshes afterwards.
"""

from __future__ import annotations

import shlex
from collections.abc import Mapping
from dataclasses import dataclass, fields
from enum import Enum
from pathlib import Path
from typing import Any

from glb_batch.errors import PipelineConfigError
from glb_batch.utils.constants import (
    DEFAULT_CONFIG,
    DEFAULT_MIN_OCCURRENCES,
    DEFAULT_SIMPLIFY_RATIO,
    GLTF_TRANSFORM,
    TEXTURE_RESIZE_TARGETS,
)

NOOP_COMMAND = "copy"


class GeometryCodec(str, Enum):
    NONE = "none"
    DRACO = "draco"
    MESHOPT = "meshopt"


class TextureCodec(str, Enum):
    NONE = "none"
    KTX2 = "ktx2"
    WEBP = "webp"
    AVIF = "avif"
    PNG = "png"
    JPEG = "jpeg"


# KTX2 is produced by the Basis Universal ETC1S encoder subcommand
TEXTURE_SUBCOMMANDS: dict[TextureCodec, str] = {
    TextureCodec.KTX2: "etc1s",
    TextureCodec.WEBP: "webp",
    TextureCodec.AVIF: "avif",
    TextureCodec.PNG: "png",
    TextureCodec.JPEG: "jpeg",
}


class CompressionMode(str, Enum):
    """Fixed single-invocation profiles run through `gltf-transform optimize`."""

    DRACO = "draco"
    KTX = "ktx"
    FULL = "full"

    @property
    def suffix(self) -> str:
        return "compressed" if self is CompressionMode.FULL else self.value

    @property
    def label(self) -> str:
        return {
            CompressionMode.DRACO: "Draco",
            CompressionMode.KTX: "KTX2",
            CompressionMode.FULL: "Full",
        }[self]

    @property
    def flags(self) -> tuple[str, ...]:
        geometry = ("--compress", "draco")
        texture = ("--texture-compress", "ktx2")
        if self is CompressionMode.DRACO:
            return geometry
        if self is CompressionMode.KTX:
            return texture
        return geometry + texture


def _validate_min(name: str, value: Any) -> int:
    if isinstance(value, bool):
        raise PipelineConfigError(f"{name} must be an integer, bool provided")
    try:
        value = int(value)
    except (TypeError, ValueError):
        raise PipelineConfigError(
            f"{name} must be an integer, got {value!r}"
        ) from None
    if value < 1:
        raise PipelineConfigError(f"{name} must be >= 1, got {value}")
    return value


def _validate_ratio(value: Any) -> float:
    if isinstance(value, bool):
        raise PipelineConfigError("simplify_ratio must be a number, bool provided")
    try:
        value = float(value)
    except (TypeError, ValueError):
        raise PipelineConfigError(
            f"simplify_ratio must be a number, got {value!r}"
        ) from None
    if not (0.0 <= value <= 1.0):
        raise PipelineConfigError(f"simplify_ratio must be in [0.0, 1.0], got {value}")
    return value


def _validate_error(value: Any) -> float | None:
    if value is None:
        return None
    if isinstance(value, bool):
        raise PipelineConfigError("simplify_error must be a number, bool provided")
    try:
        value = float(value)
    except (TypeError, ValueError):
        raise PipelineConfigError(
            f"simplify_error must be a number, got {value!r}"
        ) from None
    if value < 0:
        raise PipelineConfigError(f"simplify_error must be >= 0, got {value}")
    return value


_FLAG_VALUES = {"true": True, "1": True, "false": False, "0": False}


def _validate_flag(name: str, value: Any) -> bool:
    if isinstance(value, bool):
        return value
    if isinstance(value, (str, int)):
        flag = _FLAG_VALUES.get(str(value).strip().lower())
        if flag is not None:
            return flag
    raise PipelineConfigError(f"{name} must be true or false, got {value!r}")


def _validate_resize(value: Any) -> int | None:
    if value is None or value == "none":
        return None
    try:
        value = int(value)
    except (TypeError, ValueError):
        raise PipelineConfigError(
            f"texture_resize must be one of {TEXTURE_RESIZE_TARGETS}, got {value!r}"
        ) from None
    if value not in TEXTURE_RESIZE_TARGETS:
        raise PipelineConfigError(
            f"texture_resize must be one of {TEXTURE_RESIZE_TARGETS}, got {value}"
        )
    return value


def _to_enum(enum_cls: type[Enum], name: str, value: Any) -> Any:
    try:
        return enum_cls(value)
    except ValueError:
        allowed = ", ".join(str(m.value) for m in enum_cls)
        raise PipelineConfigError(
            f"{name} must be one of: {allowed}; got {value!r}"
        ) from None


_FLAG_FIELDS = (
    "dedup",
    "flatten",
    "join",
    "weld",
    "prune",
    "resample",
    "sparse",
    "instance",
    "palette",
    "simplify",
)


@dataclass(frozen=True)
class TransformOptions:
    """Enabled transform steps and their parameters."""

    geometry_compression: GeometryCodec = GeometryCodec(
        DEFAULT_CONFIG["geometry_compression"]
    )
    texture_compression: TextureCodec = TextureCodec(
        DEFAULT_CONFIG["texture_compression"]
    )
    texture_resize: int | None = DEFAULT_CONFIG["texture_resize"]

    dedup: bool = DEFAULT_CONFIG["dedup"]
    flatten: bool = DEFAULT_CONFIG["flatten"]
    join: bool = DEFAULT_CONFIG["join"]
    weld: bool = DEFAULT_CONFIG["weld"]
    prune: bool = DEFAULT_CONFIG["prune"]
    resample: bool = DEFAULT_CONFIG["resample"]
    sparse: bool = DEFAULT_CONFIG["sparse"]

    instance: bool = DEFAULT_CONFIG["instance"]
    instance_min: int = DEFAULT_MIN_OCCURRENCES
    palette: bool = DEFAULT_CONFIG["palette"]
    palette_min: int = DEFAULT_MIN_OCCURRENCES

    simplify: bool = DEFAULT_CONFIG["simplify"]
    simplify_ratio: float = DEFAULT_SIMPLIFY_RATIO
    simplify_error: float | None = None

    def __post_init__(self) -> None:
        # Normalize on a frozen instance
        set_ = object.__setattr__
        set_(
            self,
            "geometry_compression",
            _to_enum(GeometryCodec, "geometry_compression", self.geometry_compression),
        )
        set_(
            self,
            "texture_compression",
            _to_enum(TextureCodec, "texture_compression", self.texture_compression),
        )
        set_(self, "texture_resize", _validate_resize(self.texture_resize))
        for name in _FLAG_FIELDS:
            set_(self, name, _validate_flag(name, getattr(self, name)))
        set_(self, "instance_min", _validate_min("instance_min", self.instance_min))
        set_(self, "palette_min", _validate_min("palette_min", self.palette_min))
        set_(self, "simplify_ratio", _validate_ratio(self.simplify_ratio))
        set_(self, "simplify_error", _validate_error(self.simplify_error))

    @classmethod
    def all_disabled(cls) -> TransformOptions:
        """Options with every step turned off."""
        return cls(
            geometry_compression=GeometryCodec.NONE,
            texture_compression=TextureCodec.NONE,
            texture_resize=None,
            dedup=False,
            flatten=False,
            join=False,
            weld=False,
            prune=False,
            resample=False,
            sparse=False,
            instance=False,
            palette=False,
            simplify=False,
        )

    @classmethod
    def from_form(cls, values: Mapping[str, Any]) -> TransformOptions:
        """
        Build options from loosely typed form values.

        Blank strings fall back to the field default, so an empty
        "instance_min" text field means 5. Step flags accept "true"/"false"
        and "1"/"0". Unknown keys are rejected.
        """
        known = {f.name for f in fields(cls)}
        unknown = sorted(set(values) - known)
        if unknown:
            raise PipelineConfigError(f"Unknown option(s): {', '.join(unknown)}")
        kwargs = {
            key: value
            for key, value in values.items()
            if not (isinstance(value, str) and not value.strip())
        }
        return cls(**kwargs)


@dataclass(frozen=True)
class TransformStep:
    """One gltf-transform invocation in a chain."""

    command: str
    args: tuple[str, ...]
    input_path: Path
    output_path: Path

    def render(self, tool: str = GLTF_TRANSFORM) -> str:
        """Shell command line for this step."""
        return shlex.join(
            [tool, self.command, str(self.input_path), str(self.output_path), *self.args]
        )


def plan_stages(options: TransformOptions) -> list[tuple[str, tuple[str, ...]]]:
    """
    Ordered (subcommand, args) pairs for the enabled options.

    Falls back to a single no-op copy when nothing is enabled so that an
    output file is always produced.
    """
    stages: list[tuple[str, tuple[str, ...]]] = []

    def add(command: str, *args: str) -> None:
        stages.append((command, args))

    if options.dedup:
        add("dedup")
    if options.instance:
        add("instance", "--min", str(options.instance_min))
    if options.palette:
        add("palette", "--min", str(options.palette_min))
    # join needs a flat hierarchy
    if options.flatten:
        add("flatten")
    if options.join:
        add("join")
    # simplify works on welded topology
    if options.weld:
        add("weld")
    if options.simplify:
        args = ["--ratio", str(options.simplify_ratio)]
        if options.simplify_error is not None:
            args += ["--error", str(options.simplify_error)]
        add("simplify", *args)
    if options.resample:
        add("resample")
    if options.prune:
        add("prune")
    if options.sparse:
        add("sparse")
    if options.texture_compression is not TextureCodec.NONE:
        add(TEXTURE_SUBCOMMANDS[options.texture_compression])
    if options.texture_resize is not None:
        size = str(options.texture_resize)
        add("resize", "--width", size, "--height", size)
    if options.geometry_compression is not GeometryCodec.NONE:
        add(options.geometry_compression.value)

    if not stages:
        add(NOOP_COMMAND)
    return stages


def build_steps(
    input_path: str | Path,
    output_path: str | Path,
    options: TransformOptions,
    work_dir: str | Path | None = None,
) -> list[TransformStep]:
    """
    Chain the planned stages from input_path towards output_path.

    With a work_dir every stage writes its own intermediate file there
    (NN-<command>.glb) and the caller moves the last one into place.
    Without one, every stage writes output_path directly and all stages
    after the first read it back.
    """
    input_path = Path(input_path)
    output_path = Path(output_path)
    steps: list[TransformStep] = []
    current = input_path
    for index, (command, args) in enumerate(plan_stages(options), start=1):
        if work_dir is None:
            target = output_path
        else:
            target = Path(work_dir) / f"{index:02d}-{command}{output_path.suffix}"
        steps.append(TransformStep(command, args, current, target))
        current = target
    return steps


def build_commands(
    input_path: str | Path,
    output_path: str | Path,
    options: TransformOptions,
    tool: str = GLTF_TRANSFORM,
    work_dir: str | Path | None = None,
) -> list[str]:
    """Rendered shell commands for build_steps()."""
    return [
        step.render(tool)
        for step in build_steps(input_path, output_path, options, work_dir)
    ]


def build_profile_command(
    input_path: str | Path,
    output_path: str | Path,
    mode: CompressionMode,
    tool: str = GLTF_TRANSFORM,
) -> str:
    """Single `optimize` invocation for a fixed compression profile."""
    return shlex.join(
        [tool, "optimize", str(input_path), str(output_path), *mode.flags]
    )

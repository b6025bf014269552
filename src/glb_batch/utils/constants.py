"""Constants and defaults for GLB batch processing."""

from typing import TypedDict

# External tool executable (resolved on the augmented PATH)
GLTF_TRANSFORM: str = "gltf-transform"

# Common install locations missing from a launcher's restricted environment
DEFAULT_SEARCH_DIRS: tuple[str, ...] = ("/usr/local/bin", "/opt/homebrew/bin")

# Environment variables to override tool location and search path
ENV_GLTF_TRANSFORM: str = "GLB_BATCH_GLTF_TRANSFORM"
ENV_SEARCH_PATH: str = "GLB_BATCH_SEARCH_PATH"

# File manager script variables holding the current selection (newline separated)
SELECTION_ENV_VARS: tuple[str, ...] = (
    "NAUTILUS_SCRIPT_SELECTED_FILE_PATHS",
    "NEMO_SCRIPT_SELECTED_FILE_PATHS",
    "CAJA_SCRIPT_SELECTED_FILE_PATHS",
)

GLB_EXTENSION: str = ".glb"

# Output suffixes, appended to the input stem
SUFFIX_OPTIMIZED: str = "optimized"
SUFFIX_INSPECT: str = "inspect"

# Pipeline parameter defaults
DEFAULT_MIN_OCCURRENCES: int = 5
DEFAULT_SIMPLIFY_RATIO: float = 0.75
TEXTURE_RESIZE_TARGETS: tuple[int, ...] = (4096, 2048, 1024, 512, 256)

# Concurrent inspect invocations
DEFAULT_INSPECT_WORKERS: int = 4


class BatchDefaults(TypedDict):
    """Default values for the transform form."""

    geometry_compression: str
    texture_compression: str
    texture_resize: int | None
    dedup: bool
    flatten: bool
    join: bool
    weld: bool
    prune: bool
    resample: bool
    sparse: bool
    instance: bool
    palette: bool
    simplify: bool
    quiet: bool


DEFAULT_CONFIG: BatchDefaults = {
    "geometry_compression": "draco",  # Terminal mesh codec
    "texture_compression": "none",  # Keep original images
    "texture_resize": None,  # None = keep original size
    "dedup": True,
    "flatten": False,
    "join": False,
    "weld": True,
    "prune": True,
    "resample": True,  # Lossless keyframe dedup
    "sparse": False,
    "instance": False,
    "palette": False,
    "simplify": False,  # Lossy, opt-in
    "quiet": False,
}

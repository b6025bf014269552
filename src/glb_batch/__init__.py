"""
glb-batch
=========
Batch-process GLB files selected in a file manager with gltf-transform.

Commands:
- transform: chain of discrete gltf-transform steps in a fixed order
  (dedup, instance, palette, flatten, join, weld, simplify, resample,
  prune, sparse, texture codec, resize, geometry codec)
- compress: one `gltf-transform optimize` call per file with a fixed
  Draco / KTX2 / full profile
- inspect: markdown inspection reports with next/previous navigation

Outputs are written next to each input as <name>_<suffix>.glb; the
original file is never overwritten.

Usage:
    CLI:
        glb-batch transform model.glb --simplify --texture webp
        glb-batch compress --mode draco a.glb b.glb
        glb-batch inspect model.glb -i

    File manager script (Nautilus, Nemo, Caja):
        glb-batch transform     # uses the exported selection

    Python:
        from glb_batch import main
        main()
"""

from importlib.metadata import PackageNotFoundError, version

from glb_batch.cli import main

try:
    __version__ = version("glb-batch")
except PackageNotFoundError:
    __version__ = "unknown"

__all__ = ["main"]

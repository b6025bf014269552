"""Command-line interface for glb-batch."""

import sys
from importlib.metadata import PackageNotFoundError, version
from pathlib import Path
from typing import Annotated

import typer
from rich.console import Console
from rich.markdown import Markdown
from rich.markup import escape
from rich.prompt import Prompt

try:
    __version__ = version("glb-batch")
except PackageNotFoundError:
    __version__ = "unknown"

from glb_batch.batch import (
    BatchRun,
    CompressionJob,
    Job,
    Outcome,
    TransformJob,
    run_batch,
)
from glb_batch.errors import (
    NoMatchingFilesError,
    PipelineConfigError,
    SelectionUnavailableError,
)
from glb_batch.notify import ConsoleNotifier, Status
from glb_batch.pipeline import (
    CompressionMode,
    GeometryCodec,
    TextureCodec,
    TransformOptions,
    build_commands,
)
from glb_batch.report import ReportDeck, inspect_files, render_report
from glb_batch.selection import select_glb_files
from glb_batch.utils.command import CommandRunner, resolve_tool
from glb_batch.utils.constants import (
    DEFAULT_CONFIG,
    DEFAULT_INSPECT_WORKERS,
    DEFAULT_MIN_OCCURRENCES,
    DEFAULT_SIMPLIFY_RATIO,
    SUFFIX_INSPECT,
    SUFFIX_OPTIMIZED,
)
from glb_batch.utils.files import derive_output_path
from glb_batch.utils.logging import (
    format_count,
    log_info,
    log_warn,
    print_header,
    set_quiet,
)

app = typer.Typer(
    name="glb-batch",
    help="Batch-optimize selected GLB files with gltf-transform",
    add_completion=False,
    rich_markup_mode="rich",
    no_args_is_help=True,
)
console = Console()

EXIT_CODES: dict[Outcome, int] = {
    Outcome.ALL_SUCCEEDED: 0,
    Outcome.ALL_FAILED: 1,
    Outcome.MIXED: 2,
}

PathsArgument = Annotated[
    list[Path] | None,
    typer.Argument(
        help="GLB files (default: the file manager's current selection)",
        metavar="[FILES]...",
        show_default=False,
    ),
]


def version_callback(value: bool) -> None:
    if value:
        print(f"glb-batch {__version__}")
        raise typer.Exit()


@app.callback()
def _root(
    version: Annotated[
        bool | None,
        typer.Option(
            "--version",
            "-v",
            callback=version_callback,
            is_eager=True,
            help="Show the version and exit.",
        ),
    ] = None,
) -> None:
    """Optimize, compress and inspect GLB files selected in a file manager."""


def _make_runner(tool: str) -> CommandRunner:
    """Runner with the tool verified to be on the augmented PATH."""
    runner = CommandRunner()
    if runner.which(tool) is None:
        console.print(
            f"[bold red][ERROR][/] {tool} not found. "
            "Install it with [bold]npm install -g @gltf-transform/cli[/]."
        )
        raise typer.Exit(code=1)
    return runner


def _run(job: Job, paths: list[Path] | None) -> None:
    runner = _make_runner(job.tool)
    try:
        batch: BatchRun = run_batch(job, runner, ConsoleNotifier(console), paths)
    except (SelectionUnavailableError, NoMatchingFilesError):
        raise typer.Exit(code=1) from None
    raise typer.Exit(code=EXIT_CODES[batch.summary.outcome])


@app.command()
def transform(
    paths: PathsArgument = None,
    geometry: Annotated[
        GeometryCodec,
        typer.Option(
            "--geometry",
            "-g",
            help="Geometry compression (runs last)",
            rich_help_panel="Geometry",
        ),
    ] = GeometryCodec(DEFAULT_CONFIG["geometry_compression"]),
    weld: Annotated[
        bool,
        typer.Option(help="Weld vertices", rich_help_panel="Geometry"),
    ] = DEFAULT_CONFIG["weld"],
    simplify: Annotated[
        bool,
        typer.Option(help="Simplify meshes", rich_help_panel="Geometry"),
    ] = DEFAULT_CONFIG["simplify"],
    simplify_ratio: Annotated[
        float,
        typer.Option(
            help="Target ratio of original vertices (0.0-1.0). Lower = more simplification",
            rich_help_panel="Geometry",
        ),
    ] = DEFAULT_SIMPLIFY_RATIO,
    simplify_error: Annotated[
        float | None,
        typer.Option(
            help="Simplification error limit, as a fraction of mesh radius",
            rich_help_panel="Geometry",
        ),
    ] = None,
    texture: Annotated[
        TextureCodec,
        typer.Option(
            "--texture",
            "-t",
            help="Texture compression ([bold]ktx2[/] = Basis Universal ETC1S)",
            rich_help_panel="Textures",
        ),
    ] = TextureCodec(DEFAULT_CONFIG["texture_compression"]),
    max_texture: Annotated[
        int | None,
        typer.Option(
            help="Resize textures to this max size (4096, 2048, 1024, 512, 256)",
            rich_help_panel="Textures",
        ),
    ] = DEFAULT_CONFIG["texture_resize"],
    dedup: Annotated[
        bool,
        typer.Option(
            help="Remove duplicate meshes, materials, textures",
            rich_help_panel="Scene",
        ),
    ] = DEFAULT_CONFIG["dedup"],
    flatten: Annotated[
        bool,
        typer.Option(help="Flatten scene graph hierarchy", rich_help_panel="Scene"),
    ] = DEFAULT_CONFIG["flatten"],
    join: Annotated[
        bool,
        typer.Option(
            help="Join compatible meshes to reduce draw calls",
            rich_help_panel="Scene",
        ),
    ] = DEFAULT_CONFIG["join"],
    prune: Annotated[
        bool,
        typer.Option(
            help="Remove unused nodes, textures, materials", rich_help_panel="Scene"
        ),
    ] = DEFAULT_CONFIG["prune"],
    resample: Annotated[
        bool,
        typer.Option(
            help="Resample animations, losslessly deduplicating keyframes",
            rich_help_panel="Animation",
        ),
    ] = DEFAULT_CONFIG["resample"],
    sparse: Annotated[
        bool,
        typer.Option(
            help="Create sparse accessors where >80% of values are zero",
            rich_help_panel="Animation",
        ),
    ] = DEFAULT_CONFIG["sparse"],
    instance: Annotated[
        bool,
        typer.Option(
            help="Create GPU instances from shared mesh references",
            rich_help_panel="Instancing & Palette",
        ),
    ] = DEFAULT_CONFIG["instance"],
    instance_min: Annotated[
        int,
        typer.Option(
            help="Minimum mesh occurrences for instancing",
            rich_help_panel="Instancing & Palette",
        ),
    ] = DEFAULT_MIN_OCCURRENCES,
    palette: Annotated[
        bool,
        typer.Option(
            help="Create palette textures for compatible material groups",
            rich_help_panel="Instancing & Palette",
        ),
    ] = DEFAULT_CONFIG["palette"],
    palette_min: Annotated[
        int,
        typer.Option(
            help="Minimum compatible materials for palette",
            rich_help_panel="Instancing & Palette",
        ),
    ] = DEFAULT_MIN_OCCURRENCES,
    dry_run: Annotated[
        bool,
        typer.Option("--dry-run", help="Print the commands without running them"),
    ] = False,
    quiet: Annotated[
        bool,
        typer.Option("--quiet", "-q", help="Only show warnings, errors and summary"),
    ] = DEFAULT_CONFIG["quiet"],
) -> None:
    """
    Run a chain of gltf-transform steps on each file, writing [italic]<name>_optimized.glb[/].
    """
    try:
        options = TransformOptions(
            geometry_compression=geometry,
            texture_compression=texture,
            texture_resize=max_texture,
            dedup=dedup,
            flatten=flatten,
            join=join,
            weld=weld,
            prune=prune,
            resample=resample,
            sparse=sparse,
            instance=instance,
            instance_min=instance_min,
            palette=palette,
            palette_min=palette_min,
            simplify=simplify,
            simplify_ratio=simplify_ratio,
            simplify_error=simplify_error,
        )
    except PipelineConfigError as e:
        raise typer.BadParameter(str(e)) from None

    tool = resolve_tool()
    if dry_run:
        _print_plan(paths, options, tool)
        return

    set_quiet(quiet)
    print_header("GLB TRANSFORM")
    _run(TransformJob(options=options, tool=tool), paths)


def _print_plan(
    paths: list[Path] | None, options: TransformOptions, tool: str
) -> None:
    try:
        files = select_glb_files(paths)
    except (SelectionUnavailableError, NoMatchingFilesError) as e:
        console.print(f"[bold red][ERROR][/] {e}")
        raise typer.Exit(code=1) from None
    for path in files:
        output = derive_output_path(path, SUFFIX_OPTIMIZED)
        console.print(f"[bold]{escape(path.name)}[/]")
        for command in build_commands(path, output, options, tool):
            console.print(
                f"  {command}", markup=False, highlight=False, soft_wrap=True
            )


@app.command()
def compress(
    paths: PathsArgument = None,
    mode: Annotated[
        CompressionMode,
        typer.Option(
            "--mode",
            "-m",
            help="draco = geometry, ktx = textures, full = both",
        ),
    ] = CompressionMode.FULL,
    quiet: Annotated[
        bool,
        typer.Option("--quiet", "-q", help="Only show warnings, errors and summary"),
    ] = DEFAULT_CONFIG["quiet"],
) -> None:
    """
    Compress each file with a fixed [bold]gltf-transform optimize[/] profile.
    """
    set_quiet(quiet)
    print_header(f"GLB {mode.label.upper()} COMPRESSION")
    _run(CompressionJob(mode=mode, tool=resolve_tool()), paths)


@app.command()
def inspect(
    paths: PathsArgument = None,
    output_dir: Annotated[
        Path | None,
        typer.Option(
            "--output",
            "-o",
            help="Also write each report to [italic]<name>_inspect.md[/] in this directory",
            file_okay=False,
        ),
    ] = None,
    interactive: Annotated[
        bool,
        typer.Option(
            "--interactive",
            "-i",
            help="Step through reports one at a time",
        ),
    ] = False,
    workers: Annotated[
        int,
        typer.Option(min=1, help="Files inspected concurrently"),
    ] = DEFAULT_INSPECT_WORKERS,
) -> None:
    """
    Show [bold]gltf-transform inspect[/] reports for each file.
    """
    notifier = ConsoleNotifier(console)
    try:
        files = select_glb_files(paths)
    except SelectionUnavailableError:
        notifier.hud("Select files in the file manager first")
        raise typer.Exit(code=1) from None
    except NoMatchingFilesError:
        notifier.hud("No GLB files selected")
        raise typer.Exit(code=1) from None

    tool = resolve_tool()
    runner = _make_runner(tool)
    progress = notifier.start(
        "Inspecting GLB files...",
        f"Processing {format_count(len(files), 'file')}",
    )
    reports = inspect_files(files, runner, tool, max_workers=workers)
    for report in reports:
        if not report.ok:
            log_warn(f"{report.file}: inspection failed")
    failed = sum(1 for r in reports if not r.ok)
    if failed == len(reports):
        progress.finish(
            Status.FAILURE, f"Inspection failed for {format_count(failed, 'file')}"
        )
    else:
        progress.finish(
            Status.SUCCESS if not failed else Status.WARNING,
            f"Analyzed {format_count(len(reports), 'file')}",
        )

    if output_dir is not None:
        output_dir.mkdir(parents=True, exist_ok=True)
        for report in reports:
            target = output_dir / f"{Path(report.file).stem}_{SUFFIX_INSPECT}.md"
            target.write_text(render_report(report), encoding="utf-8")
            log_info(f"Wrote {target}")

    deck = ReportDeck(reports)
    if interactive and sys.stdin.isatty():
        _browse(deck)
    else:
        for _ in range(len(deck)):
            console.print(Markdown(deck.render()))
            deck.next()

    raise typer.Exit(code=1 if failed == len(reports) else 0)


def _browse(deck: ReportDeck) -> None:
    """Page through reports: n = next, p = previous, q = quit."""
    while True:
        console.clear()
        console.print(Markdown(deck.render()))
        console.rule(f"[dim]{escape(deck.current.file)} ({deck.position()})[/]")
        choice = Prompt.ask(
            "Next (n), previous (p) or quit (q)",
            choices=["n", "p", "q"],
            default="n",
            console=console,
        )
        if choice == "q":
            return
        if choice == "n":
            deck.next()
        else:
            deck.previous()


def main() -> None:
    """Entry point for the glb-batch console script."""
    app()


if __name__ == "__main__":
    main()

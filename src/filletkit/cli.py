from __future__ import annotations

import importlib.util
import logging
import pathlib
import sys
import traceback
from types import ModuleType
from typing import Callable

import typer
from rich.console import Console
from rich.panel import Panel
from rich.table import Table

from filletkit._logging import setup_logging
from filletkit.io.stl import write_stl
from filletkit.mesh import analyze_mesh
from filletkit.preview import PreviewBackendError, PyVistaPreviewer, collect_meshes
from filletkit.tessellation import Tessellation, default_tessellation, resolution as resolve_segments
from filletkit.validation import ValidationError, diagnostics_of

console = Console()
app = typer.Typer(help="Build filleted profiles and solids, preview them and export STL.")


@app.callback()
def main(
    verbose: bool = typer.Option(False, "--verbose", "-v", help="Show debug logging from the geometry builders."),
) -> None:
    setup_logging(logging.DEBUG if verbose else logging.INFO, console=console)


def _log_active_units(previewer: PyVistaPreviewer) -> None:
    scale = previewer.unit_scale_to_mm
    units = previewer.unit_name
    label = previewer.unit_label
    if abs(scale - 1.0) < 1e-9:
        console.print(f"[magenta]Units: {units} ({label}).[/magenta]")
    else:
        console.print(
            f"[magenta]Units: {units} ({label}); 1 {label} = {scale:.4g} mm.[/magenta]"
        )


def _load_module(path: pathlib.Path) -> ModuleType:
    module_name = "filletkit_user_model"
    if module_name in sys.modules:
        del sys.modules[module_name]

    spec = importlib.util.spec_from_file_location(module_name, path)
    if spec is None or spec.loader is None:
        raise typer.BadParameter(f"Unable to import model at {path}")

    module = importlib.util.module_from_spec(spec)
    # Register module so features relying on sys.modules (e.g., dataclasses) work.
    sys.modules[module_name] = module
    spec.loader.exec_module(module)
    return module


class ModelBuildError(RuntimeError):
    """Raised when a model module cannot provide a usable scene."""


def _format_exception(exc: BaseException) -> str:
    return "".join(traceback.format_exception(exc))


def _scene_factory_from_module(model_path: pathlib.Path) -> Callable[[], object]:
    def factory() -> object:
        module = _load_module(model_path)
        builder = getattr(module, "build", None)
        if builder is None or not callable(builder):
            raise ModelBuildError(f"{model_path} must define a callable build() function.")
        return builder()

    return factory


def _build_scene(model: pathlib.Path) -> object:
    if not model.exists():
        raise typer.BadParameter(f"Model path {model} does not exist.")
    try:
        return _scene_factory_from_module(model)()
    except (ModelBuildError, ValidationError) as exc:
        raise typer.BadParameter(str(exc)) from exc


def _next_available_path(path: pathlib.Path) -> pathlib.Path:
    """Return a non-conflicting path by appending ' (n)' before the suffix."""

    if not path.exists():
        return path

    parent = path.parent
    stem = path.stem
    suffix = path.suffix
    n = 1
    while True:
        candidate = parent / f"{stem} ({n}){suffix}"
        if not candidate.exists():
            return candidate
        n += 1


@app.command()
def preview(
    model: pathlib.Path = typer.Argument(..., help="Path to a Python module that defines build()."),
    watch: bool = typer.Option(True, help="Watch the model file for changes and hot-reload."),
    screenshot: pathlib.Path | None = typer.Option(
        None, "--screenshot", help="Save a screenshot instead of opening a window."
    ),
    show_edges: bool = typer.Option(False, "--show-edges/--hide-edges", help="Toggle triangle edge rendering."),
) -> None:
    """
    Load a model module and open an interactive PyVista preview.
    """

    if not model.exists():
        raise typer.BadParameter(f"Model path {model} does not exist.")

    scene_factory = _scene_factory_from_module(model)
    try:
        initial_scene = scene_factory()
    except Exception as exc:
        if watch and screenshot is None:
            panel = Panel.fit(_format_exception(exc), title="Initial build failed, watching for changes", style="red")
            console.print(panel)
            initial_scene = None
        else:
            raise typer.BadParameter(f"Model execution failed: {exc}") from exc

    console.rule("filletkit preview")
    console.print(f"Using model [green]{model}[/green]")
    if watch and screenshot is None:
        console.print("[cyan]Watching for changes; save to hot reload, close the window to stop.[/cyan]")

    previewer = PyVistaPreviewer(console=console)
    _log_active_units(previewer)
    try:
        previewer.show(
            scene_factory=scene_factory,
            initial_scene=initial_scene,
            model_path=model,
            watch_files=watch,
            screenshot_path=screenshot,
            show_edges=show_edges,
        )
    except PreviewBackendError as exc:
        raise typer.BadParameter(str(exc)) from exc


@app.command()
def export(
    model: pathlib.Path = typer.Argument(..., help="Model module to export."),
    output: pathlib.Path = typer.Option(
        pathlib.Path("model.stl"),
        "--output",
        "-o",
        help="Path to the STL file that will be produced.",
    ),
    overwrite: bool = typer.Option(False, "--overwrite", help="Allow replacing an existing STL."),
    ascii: bool = typer.Option(False, "--ascii", help="Write ASCII STL instead of binary."),
) -> None:
    """
    Merge the solids a model builds and save them as one STL file.
    """

    scene = _build_scene(model)

    final_output = output
    if output.exists() and not overwrite:
        final_output = _next_available_path(output)
        console.print(f"[yellow]Output {output} exists; writing to {final_output} instead.[/yellow]")

    previewer = PyVistaPreviewer(console=console)
    _log_active_units(previewer)
    try:
        merged = previewer.combine_to_mesh(scene)
    except PreviewBackendError as exc:
        raise typer.BadParameter(str(exc)) from exc

    final_output.parent.mkdir(parents=True, exist_ok=True)
    write_stl(merged, final_output, ascii=ascii)

    mode = "ASCII" if ascii else "binary"
    console.print(
        Panel(
            f"Wrote {mode} STL ({merged.n_faces} triangles) to [green]{final_output}[/green].",
            title="Export complete",
            border_style="green",
        )
    )


@app.command()
def check(
    model: pathlib.Path = typer.Argument(..., help="Model module to inspect."),
) -> None:
    """
    Report watertightness, volume and diagnostics for every solid a model builds.
    """

    meshes = collect_meshes(_build_scene(model))
    if not meshes:
        raise typer.BadParameter(f"{model} did not build any solids.")

    table = Table(title=f"Mesh check: {model.name}")
    table.add_column("#", justify="right")
    table.add_column("Vertices", justify="right")
    table.add_column("Faces", justify="right")
    table.add_column("Volume", justify="right")
    table.add_column("Watertight")
    table.add_column("Notes")

    failures = 0
    for index, mesh in enumerate(meshes):
        analysis = analyze_mesh(mesh)
        notes = analysis.issues() + diagnostics_of(mesh)
        if not analysis.is_watertight:
            failures += 1
        table.add_row(
            str(index),
            str(analysis.n_vertices),
            str(analysis.n_faces),
            f"{mesh.volume:.4g}",
            "[green]yes[/green]" if analysis.is_watertight else "[red]no[/red]",
            "\n".join(notes) or "-",
        )
    console.print(table)
    if failures:
        raise typer.Exit(code=1)


@app.command()
def resolution(
    radius: float = typer.Argument(..., help="Arc radius."),
    sweep: float = typer.Option(360.0, "--sweep", help="Swept angle in degrees."),
    fa: float | None = typer.Option(None, "--fa", help="Angular tolerance in degrees (default from config)."),
    fs: float | None = typer.Option(None, "--fs", help="Linear tolerance (default from config)."),
    fn: int | None = typer.Option(None, "--fn", help="Explicit full-circle segment count."),
    multiple_of: int = typer.Option(1, "--multiple-of", help="Round the full-circle count up to this multiple."),
) -> None:
    """
    Print how many segments an arc of RADIUS gets.
    """

    base = default_tessellation()
    try:
        tessellation = Tessellation(
            angular_tolerance=fa if fa is not None else base.angular_tolerance,
            linear_tolerance=fs if fs is not None else base.linear_tolerance,
            segments=fn,
            max_segments=base.max_segments,
        )
        count = resolve_segments(radius, sweep, tessellation, multiple_of=multiple_of)
    except ValidationError as exc:
        raise typer.BadParameter(str(exc)) from exc
    console.print(f"{count}")


if __name__ == "__main__":  # pragma: no cover
    app()

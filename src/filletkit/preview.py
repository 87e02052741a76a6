from __future__ import annotations

import logging
import math
import queue
import threading
from pathlib import Path
from typing import Callable, Iterable, List, Optional, Tuple

import numpy as np
from rich.console import Console
from rich.panel import Panel
from watchfiles import Change, watch

from filletkit._config import UnitSettings, get_unit_settings
from filletkit.mesh import Mesh, combine_meshes, mesh_to_pyvista
from filletkit.modeling._color import RGBA
from filletkit.modeling.drafting import Measurement
from filletkit.modeling.drawing2d import Profile2D

logger = logging.getLogger(__name__)

SceneFactory = Callable[[], object]
SceneItem = Tuple[object, Optional[RGBA]]


class PreviewBackendError(RuntimeError):
    """Raised when a preview backend cannot run."""


def _profile_polyline(profile: Profile2D, pv_module):
    loops = [profile.outer.sample()] + [hole.sample() for hole in profile.holes]
    points = []
    lines = []
    offset = 0
    for loop in loops:
        count = loop.shape[0]
        points.append(np.column_stack([loop, np.zeros(count)]))
        lines.append(np.concatenate([[count], np.arange(offset, offset + count)]))
        offset += count
    return pv_module.PolyData(np.vstack(points), lines=np.concatenate(lines).astype(np.int64))


def _collect_datasets_from_scene(scene: object, pv_module) -> List[SceneItem]:
    datasets: List[SceneItem] = []

    def visit(item: object) -> None:
        if item is None:
            return

        if isinstance(item, Mesh):
            datasets.append((mesh_to_pyvista(item), item.color))
            return

        if isinstance(item, Measurement):
            datasets.extend(item.to_datasets())
            return

        if isinstance(item, Profile2D):
            datasets.append((_profile_polyline(item, pv_module), None))
            return

        if isinstance(item, pv_module.MultiBlock):
            for block in item:
                visit(block)
            return

        if isinstance(item, pv_module.DataSet):
            datasets.append((item, None))
            return

        if isinstance(item, (list, tuple, set)):
            for value in item:
                visit(value)
            return

        raise PreviewBackendError(
            "Model build() must return filletkit meshes, profiles, measurements or PyVista datasets "
            f"(or a list of them); got {type(item).__name__}."
        )

    visit(scene)
    if not datasets:
        raise PreviewBackendError("Scene did not produce anything to show.")
    return datasets


def collect_meshes(scene: object) -> List[Mesh]:
    """Closed solids in a scene: meshes and measurement rods. Profiles and PyVista datasets are skipped."""

    meshes: List[Mesh] = []

    def visit(item: object) -> None:
        if isinstance(item, Mesh):
            meshes.append(item)
        elif isinstance(item, Measurement):
            meshes.append(item.rod)
        elif isinstance(item, (list, tuple, set)):
            for value in item:
                visit(value)
        elif item is not None:
            logger.debug("skipping %s: not a solid", type(item).__name__)

    visit(scene)
    return meshes


class PyVistaPreviewer:
    """Render scenes using PyVista and provide optional hot reload support."""

    def __init__(self, console: Console, unit_settings: UnitSettings | None = None):
        self.console = console
        self._pv = None
        self._unit_settings = unit_settings or get_unit_settings()

    def show(
        self,
        scene_factory: SceneFactory,
        initial_scene: object,
        model_path: Path,
        watch_files: bool,
        screenshot_path: Path | None = None,
        show_edges: bool = False,
    ) -> None:
        pv = self._ensure_backend()
        datasets = self.collect_datasets(initial_scene) if initial_scene is not None else []
        plotter = pv.Plotter(window_size=(1280, 800), off_screen=screenshot_path is not None)
        self._configure_plotter(plotter)
        self._apply_scene(plotter, datasets, show_edges=show_edges, align_camera=True)

        if screenshot_path is not None:
            screenshot_path.parent.mkdir(parents=True, exist_ok=True)
            plotter.show(title="filletkit preview", auto_close=True, screenshot=str(screenshot_path))
            plotter.close()
            return

        if not watch_files:
            plotter.show(title="filletkit preview")
            plotter.close()
            return

        reload_queue: queue.Queue[float] = queue.Queue()
        stop_event = threading.Event()
        watcher_thread = threading.Thread(
            target=self._watch_model_file,
            args=(model_path, reload_queue, stop_event),
            name="filletkit-watch",
            daemon=True,
        )
        watcher_thread.start()

        def process_queue() -> None:
            reload_requested = False
            while True:
                try:
                    reload_queue.get_nowait()
                    reload_requested = True
                except queue.Empty:
                    break
            if not reload_requested:
                return

            self.console.print(f"[yellow]Reloading {model_path}…[/yellow]")
            datasets = self.collect_datasets(scene_factory())
            self._apply_scene(plotter, datasets, show_edges=show_edges, align_camera=False)
            plotter.render()
            self.console.print(f"[green]Reloaded {model_path}[/green]")

        def guarded_process_queue() -> None:
            try:
                process_queue()
            except Exception as exc:  # pragma: no cover - surfaced via console
                panel = Panel.fit(str(exc), title="Reload failed", style="red")
                self.console.print(panel)

        # interval is in milliseconds
        plotter.add_callback(guarded_process_queue, interval=100)
        try:
            plotter.show(title="filletkit preview", auto_close=False)
        finally:
            stop_event.set()
            plotter.close()

    # Internal helpers -----------------------------------------------------

    def _ensure_backend(self):
        if self._pv is None:
            try:
                import pyvista as pv
            except ImportError as exc:  # pragma: no cover - runtime dep
                raise PreviewBackendError(
                    "PyVista is required for previewing. Install filletkit with `pip install -e .`."
                ) from exc
            pv.set_plot_theme("document")
            self._pv = pv
        return self._pv

    def collect_datasets(self, scene: object) -> List[SceneItem]:
        """Return every (PyVista dataset, color) pair contained within a scene object."""

        pv = self._ensure_backend()
        return _collect_datasets_from_scene(scene, pv)

    @property
    def unit_name(self) -> str:
        return self._unit_settings.name

    @property
    def unit_label(self) -> str:
        return self._unit_settings.label

    @property
    def unit_scale_to_mm(self) -> float:
        return self._unit_settings.scale_to_mm

    def combine_to_mesh(self, scene: object) -> Mesh:
        """Concatenate every solid in a scene into one mesh (no boolean work)."""

        meshes = collect_meshes(scene)
        if not meshes:
            raise PreviewBackendError("Scene does not contain any solids to merge.")
        return combine_meshes(meshes)

    def _configure_plotter(self, plotter) -> None:
        plotter.set_background("#090c10", top="#1b2333")
        plotter.add_axes(interactive=True)
        self._show_bounds_with_units(plotter)

    def _apply_scene(
        self,
        plotter,
        datasets: Iterable[SceneItem],
        show_edges: bool,
        align_camera: bool = False,
    ) -> None:
        datasets = list(datasets)
        color_cycle = ["#6ab0ff", "#f58f7c", "#9cdcfe", "#fadb5f", "#9ae6b4", "#d4b5ff"]
        plotter.clear()
        self._show_bounds_with_units(plotter)
        plotter.add_axes(interactive=True)

        for index, (mesh, rgba) in enumerate(datasets):
            if rgba is not None:
                color = rgba[:3]
                opacity = rgba[3]
            else:
                color = color_cycle[index % len(color_cycle)]
                opacity = 1.0
            plotter.add_mesh(
                mesh,
                name=f"mesh-{index}",
                show_edges=show_edges,
                color=color,
                opacity=opacity,
                smooth_shading=True,
                specular=0.2,
            )

        if align_camera:
            self._reset_camera(plotter, [mesh for mesh, _ in datasets])

    def _reset_camera(self, plotter, datasets: Iterable[object]) -> None:
        bounds = None
        for mesh in datasets:
            mesh_bounds = mesh.bounds
            if bounds is None:
                bounds = list(mesh_bounds)
            else:
                bounds[0::2] = [min(a, b) for a, b in zip(bounds[0::2], mesh_bounds[0::2])]
                bounds[1::2] = [max(a, b) for a, b in zip(bounds[1::2], mesh_bounds[1::2])]

        if bounds is None:
            return

        x_center = (bounds[0] + bounds[1]) / 2.0
        y_center = (bounds[2] + bounds[3]) / 2.0
        z_center = (bounds[4] + bounds[5]) / 2.0

        diag = math.sqrt(
            (bounds[1] - bounds[0]) ** 2
            + (bounds[3] - bounds[2]) ** 2
            + (bounds[5] - bounds[4]) ** 2
        )
        distance = max(diag, 1.0) * 1.2

        camera_pos = (x_center, y_center - distance, z_center + distance * 0.5)
        focal_point = (x_center, y_center, z_center)
        view_up = (0.0, 0.0, 1.0)
        plotter.camera_position = [camera_pos, focal_point, view_up]

    def _show_bounds_with_units(self, plotter) -> None:
        label = self._unit_settings.label
        plotter.show_bounds(
            grid="front",
            color="#5a677d",
            xlabel=f"X ({label})",
            ylabel=f"Y ({label})",
            zlabel=f"Z ({label})",
        )

    def _watch_model_file(
        self,
        model_path: Path,
        reload_queue: "queue.Queue[float]",
        stop_event: threading.Event,
    ) -> None:
        resolved_model = model_path.resolve()
        watch_root = resolved_model if resolved_model.is_dir() else resolved_model.parent

        for changes in watch(str(watch_root), stop_event=stop_event, debounce=300):
            if stop_event.is_set():
                return

            for change, changed_path in changes:
                if Change.deleted == change and Path(changed_path) == resolved_model:
                    reload_queue.put_nowait(0.0)
                    break
                if Path(changed_path).resolve() == resolved_model:
                    reload_queue.put_nowait(0.0)
                    break

from __future__ import annotations

import pytest
import pyvista as pv
from rich.console import Console

from filletkit._config import UnitSettings
from filletkit.modeling import make_box, measure, rounded_rectangle
from filletkit.preview import PreviewBackendError, PyVistaPreviewer, collect_meshes

pytestmark = pytest.mark.preview


@pytest.fixture
def previewer():
    return PyVistaPreviewer(console=Console(quiet=True))


def test_collect_datasets_flattens_scene(previewer):
    box = make_box()
    ruler = measure((0, 0, 0), (4, 0, 0))
    outline = rounded_rectangle((4.0, 2.0), radii=0.5)
    datasets = previewer.collect_datasets([box, [ruler, outline], pv.Sphere()])
    # box, rod, label, outline polyline, sphere
    assert len(datasets) == 5
    assert all(isinstance(dataset, pv.DataSet) for dataset, _ in datasets)
    polyline = datasets[3][0]
    assert polyline.n_lines == 1
    # closed loop repeats its first point
    assert polyline.n_points == len(outline.points()) + 1


def test_unsupported_scene_items_are_rejected(previewer):
    with pytest.raises(PreviewBackendError):
        previewer.collect_datasets([make_box(), "not geometry"])
    with pytest.raises(PreviewBackendError):
        previewer.collect_datasets([])


def test_collect_meshes_keeps_only_solids():
    ruler = measure((0, 0, 0), (0, 3, 0))
    meshes = collect_meshes([make_box(), rounded_rectangle(2.0), ruler, None])
    assert len(meshes) == 2
    assert meshes[1] is ruler.rod


def test_combine_to_mesh(previewer):
    merged = previewer.combine_to_mesh([make_box(), make_box(center=(2, 0, 0))])
    assert merged.n_faces == 24
    with pytest.raises(PreviewBackendError):
        previewer.combine_to_mesh([rounded_rectangle(2.0)])


def test_unit_properties_follow_settings():
    previewer = PyVistaPreviewer(Console(quiet=True), unit_settings=UnitSettings("inches", "in", 25.4))
    assert previewer.unit_label == "in"
    assert previewer.unit_scale_to_mm == pytest.approx(25.4)


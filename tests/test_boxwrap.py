from __future__ import annotations

import json
import logging

import numpy as np
import pytest

from filletkit._config import config_file, ensure_user_config
from filletkit.mesh import analyze_mesh
from filletkit.modeling import box_extrude, make_circle, rounded_rectangle
from filletkit.tessellation import Tessellation
from filletkit.validation import InvalidGeometryWarning, InvalidParameterError
from tests.helpers import is_watertight

COARSE = Tessellation(segments=16)


def _area_and_centroid_x(points: np.ndarray) -> tuple[float, float]:
    x, y = points[:, 0], points[:, 1]
    xn, yn = np.roll(x, -1), np.roll(y, -1)
    cross = x * yn - xn * y
    area = cross.sum() / 2.0
    cx = ((x + xn) * cross).sum() / (6.0 * area)
    return abs(area), cx


def _expected_volume(profile, width: float, depth: float, corner_segments: int) -> float:
    """Straight sides by extrusion, corners as a faceted full turn."""
    area, cx = _area_and_centroid_x(profile.points(COARSE))
    sides = area * 2.0 * (width + depth)
    facets = 4 * corner_segments
    corners = facets * np.sin(2.0 * np.pi / facets) * cx * area
    return sides + corners


@pytest.fixture
def wall():
    return rounded_rectangle((2.0, 5.0), (0.0, 0.0, 1.0, 0.0), tessellation=COARSE)


def test_box_extrude_is_watertight(wall):
    solid = box_extrude((20.0, 30.0), wall, tessellation=COARSE)
    analysis = analyze_mesh(solid)
    assert analysis.is_watertight, analysis.issues()
    wt, open_edges = is_watertight(solid)
    assert wt and open_edges == 0


def test_box_extrude_volume_matches_sweep_geometry(wall):
    solid = box_extrude((20.0, 30.0), wall, tessellation=COARSE)
    assert solid.metadata["corner_segments"] == 4
    assert solid.volume == pytest.approx(_expected_volume(wall, 20.0, 30.0, 4), rel=1e-3)


def test_box_extrude_volume_is_stable_under_epsilon(wall):
    volumes = [box_extrude((20.0, 30.0), wall, epsilon=eps, tessellation=COARSE).volume for eps in (0.002, 0.01, 0.05)]
    assert volumes[1] == pytest.approx(volumes[0], rel=1e-4)
    assert volumes[2] == pytest.approx(volumes[0], rel=1e-4)


@pytest.mark.parametrize("epsilon", [0.01, 0.001])
def test_box_extrude_of_matching_rounded_rectangle(epsilon):
    profile = rounded_rectangle((10.0, 6.0), 2.0, tessellation=COARSE)
    solid = box_extrude((10.0, 6.0), profile, epsilon=epsilon, tessellation=COARSE)
    assert analyze_mesh(solid).is_watertight
    assert solid.volume > 0


def test_box_extrude_bounds(wall):
    solid = box_extrude((20.0, 30.0), wall, tessellation=COARSE)
    assert np.allclose(solid.bounds, (-2.0, 22.0, -2.0, 32.0, 0.0, 5.0), atol=1e-4)


def test_box_extrude_center_footprint_only(wall):
    solid = box_extrude((20.0, 30.0), wall, center=True, tessellation=COARSE)
    assert np.allclose(solid.bounds, (-12.0, 12.0, -17.0, 17.0, 0.0, 5.0), atol=1e-4)


def test_box_extrude_center_with_height(wall):
    solid = box_extrude((20.0, 30.0, 5.0), wall, center=True, tessellation=COARSE)
    assert np.allclose(solid.bounds, (-12.0, 12.0, -17.0, 17.0, -2.5, 2.5), atol=1e-4)


def test_box_extrude_fill_adds_the_core(wall):
    shell = box_extrude((20.0, 30.0), wall, tessellation=COARSE)
    filled = box_extrude((20.0, 30.0), wall, fill=True, tessellation=COARSE)
    assert analyze_mesh(filled).is_watertight
    assert filled.volume - shell.volume == pytest.approx(20.0 * 30.0 * 5.0, rel=1e-4)


def test_box_extrude_fill_bridges_offset_profile():
    offset = [(1.0, 0.0), (2.0, 0.0), (2.0, 3.0), (1.0, 3.0)]
    solid = box_extrude((10.0, 10.0), offset, fill=True, tessellation=COARSE)
    analysis = analyze_mesh(solid)
    assert analysis.is_watertight
    assert solid.bounds[0] == pytest.approx(-2.0, abs=1e-4)


def test_box_extrude_scalar_size(wall):
    solid = box_extrude(12.0, wall, tessellation=COARSE)
    assert np.allclose(solid.bounds[:4], (-2.0, 14.0, -2.0, 14.0), atol=1e-4)


def test_box_extrude_rejects_profile_inside_footprint():
    with pytest.raises(InvalidParameterError) as excinfo:
        box_extrude((10.0, 10.0), [(-1.0, 0.0), (1.0, 0.0), (1.0, 1.0), (-1.0, 1.0)])
    assert excinfo.value.parameter == "profile"


def test_box_extrude_rejects_negative_epsilon(wall):
    with pytest.raises(InvalidParameterError):
        box_extrude((10.0, 10.0), wall, epsilon=-0.1)


@pytest.mark.parametrize("size", [0.0, (10.0, -1.0), (1.0, 2.0, 3.0, 4.0)])
def test_box_extrude_rejects_bad_size(wall, size):
    with pytest.raises(InvalidParameterError):
        box_extrude(size, wall)


def test_box_extrude_epsilon_defaults_to_config(wall, caplog):
    ensure_user_config()
    data = json.loads(config_file().read_text())
    data["epsilon"] = 0.05
    config_file().write_text(json.dumps(data))

    caplog.set_level(logging.DEBUG, logger="filletkit")
    box_extrude((10.0, 10.0), wall, tessellation=COARSE)
    assert "epsilon=0.05" in caplog.text


def test_box_extrude_warns_on_seam_mismatch():
    ring = make_circle(1.0, center=(2.0, 2.0), tessellation=Tessellation(segments=18))
    with pytest.warns(InvalidGeometryWarning, match="multiple"):
        solid = box_extrude((10.0, 10.0), ring, tessellation=COARSE)
    assert any("multiple" in note for note in solid.metadata["diagnostics"])

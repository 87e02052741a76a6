from __future__ import annotations

import numpy as np
import pytest

from filletkit.mesh import analyze_mesh
from filletkit.modeling import linear_extrude, rotate_extrude
from filletkit.modeling.drawing2d import Arc2D, Path2D, Profile2D, make_polygon, make_rect
from filletkit.tessellation import Tessellation, resolution
from filletkit.validation import InvalidParameterError
from tests.helpers import is_watertight, mesh_volume


def _polygon_factor(segments: int) -> float:
    """Area of a regular n-gon relative to its circumscribed circle."""
    return segments / (2.0 * np.pi) * np.sin(2.0 * np.pi / segments)


def test_linear_extrude_positive():
    mesh = linear_extrude(make_rect(size=(2.0, 1.0)), height=3.0)
    analysis = analyze_mesh(mesh)
    assert analysis.is_watertight
    assert mesh.volume == pytest.approx(6.0)
    assert np.allclose(mesh.bounds, (-1.0, 1.0, -0.5, 0.5, 0.0, 3.0))


def test_linear_extrude_invalid_height():
    profile = make_rect(size=(1.0, 0.6))
    with pytest.raises(InvalidParameterError):
        linear_extrude(profile, height=0.0)


def test_linear_extrude_keeps_clockwise_order_and_outward_normals():
    clockwise = [(0.0, 0.0), (0.0, 1.0), (1.0, 1.0), (1.0, 0.0)]
    mesh = linear_extrude(clockwise, height=2.0)
    assert np.allclose(mesh.vertices[:4, :2], clockwise)
    assert mesh.volume == pytest.approx(2.0)
    wt, open_edges = is_watertight(mesh)
    assert wt and open_edges == 0


def test_linear_extrude_downward_direction():
    mesh = linear_extrude(make_rect(size=(1.0, 1.0)), height=2.0, direction=(0.0, 0.0, -1.0))
    assert mesh.volume == pytest.approx(2.0)
    assert mesh.bounds[4] == pytest.approx(-2.0)


def test_linear_extrude_with_hole():
    tess = Tessellation(segments=64)
    outer = Path2D([Arc2D(center=(0.0, 0.0), radius=1.0, start_angle_deg=360, end_angle_deg=0)], closed=True)
    inner = Path2D([Arc2D(center=(0.0, 0.0), radius=0.5, start_angle_deg=0, end_angle_deg=360)], closed=True)
    mesh = linear_extrude(Profile2D(outer=outer, holes=[inner]), height=1.0, tessellation=tess)
    expected = np.pi * (1.0 - 0.25) * _polygon_factor(64)
    assert mesh.volume == pytest.approx(expected, rel=1e-6)
    assert analyze_mesh(mesh).is_watertight
    assert mesh_volume(mesh) == pytest.approx(expected, rel=1e-3)


def test_rotate_extrude_annulus():
    mesh = rotate_extrude(make_polygon([(1.0, 0.0), (2.0, 0.0), (2.0, 1.0), (1.0, 1.0)]), segments=64)
    assert analyze_mesh(mesh).is_watertight
    assert mesh.volume == pytest.approx(np.pi * 3.0 * _polygon_factor(64), rel=1e-6)


def test_rotate_extrude_shares_axis_vertices():
    square = [(0.0, 0.0), (1.0, 0.0), (1.0, 1.0), (0.0, 1.0)]
    mesh = rotate_extrude(square, segments=32)
    assert mesh.n_vertices == 2 * 32 + 2
    assert analyze_mesh(mesh).is_watertight
    assert mesh.volume == pytest.approx(np.pi * _polygon_factor(32), rel=1e-6)


@pytest.mark.parametrize("angle", [90.0, 180.0, 270.0, -90.0])
def test_rotate_extrude_partial_sweep_is_closed(angle):
    square = [(0.0, 0.0), (1.0, 0.0), (1.0, 1.0), (0.0, 1.0)]
    mesh = rotate_extrude(square, angle_deg=angle, segments=24)
    analysis = analyze_mesh(mesh)
    assert analysis.is_watertight
    assert analysis.degenerate_faces == 0
    fraction = abs(angle) / 360.0
    segment_angle = np.deg2rad(abs(angle)) / 24
    expected = 24 * 0.5 * np.sin(segment_angle)
    assert mesh.volume == pytest.approx(expected, rel=1e-6)
    assert mesh.volume == pytest.approx(np.pi * fraction, rel=1e-2)


def test_rotate_extrude_quarter_lands_in_first_quadrant():
    mesh = rotate_extrude([(0.0, 0.0), (1.0, 0.0), (1.0, 1.0), (0.0, 1.0)], angle_deg=90.0, segments=8)
    xmin, xmax, ymin, ymax, zmin, zmax = mesh.bounds
    assert xmin == pytest.approx(0.0, abs=1e-12)
    assert ymin == pytest.approx(0.0, abs=1e-12)
    assert xmax == pytest.approx(1.0)
    assert ymax == pytest.approx(1.0)
    assert (zmin, zmax) == pytest.approx((0.0, 1.0))


def test_rotate_extrude_clockwise_profile_is_not_inside_out():
    clockwise = [(1.0, 0.0), (1.0, 1.0), (2.0, 1.0), (2.0, 0.0)]
    mesh = rotate_extrude(clockwise, angle_deg=180.0, segments=16)
    assert mesh.volume > 0
    assert analyze_mesh(mesh).is_watertight


def test_rotate_extrude_default_segments_follow_resolver():
    profile = make_polygon([(0.4, -0.6), (0.8, -0.2), (0.6, 0.4), (0.2, 0.2)])
    mesh = rotate_extrude(profile, angle_deg=180)
    assert mesh.metadata["sweep_segments"] == resolution(0.8, 180.0)


def test_rotate_extrude_profile_crossing_axis():
    with pytest.raises(InvalidParameterError):
        rotate_extrude([(-0.5, 0.0), (1.0, 0.0), (1.0, 1.0)])


def test_rotate_extrude_invalid_plane():
    profile = make_polygon([(0.4, -0.6), (0.8, -0.2), (0.6, 0.4)])
    with pytest.raises(ValueError):
        rotate_extrude(profile, axis_direction=(0, 0, 1), plane_normal=(0, 0, 1))


@pytest.mark.parametrize("angle", [0.0, 400.0])
def test_rotate_extrude_invalid_angle(angle):
    with pytest.raises(InvalidParameterError):
        rotate_extrude([(1.0, 0.0), (2.0, 0.0), (2.0, 1.0)], angle_deg=angle)


def test_duplicate_points_are_dropped():
    points = [(0.0, 0.0), (1.0, 0.0), (1.0, 0.0), (1.0, 1.0), (0.0, 1.0), (0.0, 0.0)]
    mesh = linear_extrude(points, height=1.0)
    assert mesh.n_vertices == 8
    assert analyze_mesh(mesh).is_watertight


def test_too_few_points():
    with pytest.raises(InvalidParameterError):
        linear_extrude([(0.0, 0.0), (1.0, 0.0)], height=1.0)

from __future__ import annotations

import logging

import numpy as np
import pytest

from filletkit.mesh import analyze_mesh
from filletkit.modeling import Measurement, measure
from filletkit.validation import InvalidParameterError


def test_measure_reports_distance_and_angles():
    result = measure((0.0, 0.0, 0.0), (3.0, 4.0, 0.0))
    assert isinstance(result, Measurement)
    assert result.distance == pytest.approx(5.0)
    assert result.inclination == pytest.approx(90.0)
    assert result.azimuth == pytest.approx(np.degrees(np.arctan2(4.0, 3.0)))
    assert result.label == "5.00"


def test_rod_runs_from_start_to_end():
    start = np.array([1.0, -2.0, 0.5])
    end = np.array([4.0, 2.0, 6.5])
    result = measure(start, end)
    rod = result.rod
    assert analyze_mesh(rod).is_watertight
    for point in (start, end):
        assert np.min(np.linalg.norm(rod.vertices - point, axis=1)) < 1e-9


def test_vertical_measurement_points_up():
    result = measure((0.0, 0.0, 0.0), (0.0, 0.0, 2.0))
    assert result.inclination == pytest.approx(0.0)
    assert result.azimuth == pytest.approx(0.0)
    assert result.rod.bounds[4:] == pytest.approx((0.0, 2.0))


@pytest.mark.parametrize(
    ("align", "direction"),
    [("top", 1.0), ("bottom", -1.0), ("center", 0.0)],
)
def test_label_alignment(align, direction):
    result = measure((0.0, 0.0, 0.0), (10.0, 0.0, 0.0), align=align)
    offset = result.label_anchor[2]
    assert np.sign(offset) == direction
    assert result.label_anchor[:2] == pytest.approx((5.0, 0.0))


def test_custom_label_color_and_thickness():
    result = measure((0, 0, 0), (0, 5, 0), label="gap", color=(255, 0, 0), opacity=0.5, thickness=0.4)
    assert result.label == "gap"
    assert result.color == pytest.approx((1.0, 0.0, 0.0, 0.5))
    assert result.rod.color == result.color
    off_axis = np.linalg.norm(result.rod.vertices[:, [0, 2]], axis=1)
    assert off_axis.max() == pytest.approx(0.2, rel=1e-6)


def test_measure_logs_distance(caplog):
    caplog.set_level(logging.INFO, logger="filletkit")
    measure((0, 0, 0), (0, 0, 7))
    assert any("7.0000" in record.getMessage() for record in caplog.records)


def test_to_datasets_returns_rod_and_label():
    result = measure((0, 0, 0), (6, 0, 0), label="six")
    datasets = result.to_datasets()
    assert len(datasets) == 2
    (rod, rod_color), (text, text_color) = datasets
    assert rod.n_cells == result.rod.n_faces
    assert rod_color == text_color == result.color
    assert text.n_points > 0
    assert text.center[0] == pytest.approx(result.label_anchor[0], abs=1e-3)


@pytest.mark.parametrize(
    "kwargs",
    [
        {"start": (1, 1, 1), "end": (1, 1, 1)},
        {"start": (0, 0, 0), "end": (1, 0, 0), "opacity": 1.5},
        {"start": (0, 0, 0), "end": (1, 0, 0), "thickness": -1.0},
    ],
)
def test_invalid_measurements(kwargs):
    with pytest.raises(InvalidParameterError):
        measure(**kwargs)

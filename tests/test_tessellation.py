from __future__ import annotations

import json

import pytest

from filletkit._config import config_file, ensure_user_config
from filletkit.tessellation import MIN_SEGMENTS, Tessellation, default_tessellation, resolution
from filletkit.validation import InvalidParameterError


def test_resolution_angular_bound_wins_for_small_radius():
    assert resolution(1.0) == 30


def test_resolution_linear_bound_wins_for_large_radius():
    # 2 * pi * 10 / 2 = 31.4 -> rounded up
    assert resolution(10.0) == 32


def test_resolution_scales_with_sweep_and_rounds_up():
    assert resolution(1.0, 90.0) == 8
    assert resolution(1.0, 180.0) == 15


def test_resolution_negative_sweep_uses_magnitude():
    assert resolution(1.0, -90.0) == resolution(1.0, 90.0)


def test_resolution_multiple_of_four_lands_on_quarter_turns():
    tess = Tessellation(angular_tolerance=360.0 / 30.0)
    assert resolution(1.0, 360.0, tess, multiple_of=4) == 32
    assert resolution(1.0, 90.0, tess, multiple_of=4) == 8


def test_resolution_minimum_full_circle():
    tess = Tessellation(angular_tolerance=180.0, linear_tolerance=100.0)
    assert resolution(0.5, tessellation=tess) == MIN_SEGMENTS


def test_resolution_positive_sweep_gets_at_least_one_segment():
    assert resolution(1.0, 0.001) == 1


@pytest.mark.parametrize("radius", [0.1, 1.0, 5.0, 50.0])
def test_resolution_monotone_in_tolerances(radius):
    previous = 0
    for tolerance in (30.0, 12.0, 6.0, 3.0, 1.0):
        count = resolution(radius, tessellation=Tessellation(angular_tolerance=tolerance))
        assert count >= previous
        previous = count
    previous = 0
    for tolerance in (10.0, 2.0, 0.5, 0.1):
        count = resolution(radius, tessellation=Tessellation(linear_tolerance=tolerance))
        assert count >= previous
        previous = count


def test_resolution_override_is_used_verbatim():
    tess = Tessellation(segments=7)
    assert resolution(100.0, tessellation=tess) == 7
    assert resolution(100.0, tessellation=tess, multiple_of=4) == 7


def test_resolution_clamps_to_max_segments():
    tess = Tessellation(linear_tolerance=0.001, max_segments=64)
    assert resolution(10.0, tessellation=tess) == 64


def test_preview_lod_is_coarser():
    final = resolution(1.0, tessellation=Tessellation())
    preview = resolution(1.0, tessellation=Tessellation(lod="preview"))
    assert preview < final


def test_preview_lod_keeps_explicit_segments():
    tess = Tessellation(segments=24, lod="preview")
    assert resolution(3.0, tessellation=tess) == 24
    assert resolution(3.0, 90.0, tessellation=tess) == 6


@pytest.mark.parametrize(
    "kwargs",
    [
        {"segments": 4},
        {"segments": 0},
        {"angular_tolerance": 0.0},
        {"linear_tolerance": -1.0},
        {"lod": "draft"},
    ],
)
def test_tessellation_rejects_bad_settings(kwargs):
    with pytest.raises(InvalidParameterError):
        Tessellation(**kwargs)


def test_resolution_rejects_negative_radius():
    with pytest.raises(InvalidParameterError) as excinfo:
        resolution(-1.0)
    assert excinfo.value.parameter == "radius"


def test_resolution_rejects_bad_multiple():
    with pytest.raises(InvalidParameterError):
        resolution(1.0, multiple_of=0)


def test_default_tessellation_reads_config():
    ensure_user_config()
    path = config_file()
    data = json.loads(path.read_text())
    data["angular_tolerance"] = 6.0
    path.write_text(json.dumps(data))

    assert default_tessellation().angular_tolerance == 6.0
    assert resolution(1.0) == 60

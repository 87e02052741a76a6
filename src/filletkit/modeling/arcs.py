from __future__ import annotations

from typing import Sequence

import numpy as np

from filletkit.validation import InvalidParameterError, require_count, require_finite, require_non_negative


def sample_arc(
    radius: float,
    a1: float,
    a2: float,
    segments: int,
    translate: Sequence[float] = (0.0, 0.0),
) -> np.ndarray:
    """Sample a circular arc into ``segments + 1`` evenly spaced points.

    Angles are bearings in degrees, measured clockwise from +Y, so angle ``a``
    maps to ``(r * sin(a), r * cos(a))``. The arc runs from ``a1`` to ``a2``
    exactly as given; ``a1 > a2`` walks the other way round.
    """

    radius = require_non_negative("radius", radius)
    a1 = require_finite("a1", a1)
    a2 = require_finite("a2", a2)
    segments = require_count("segments", segments)
    try:
        offset = np.asarray(translate, dtype=float).reshape(2)
    except ValueError as exc:
        raise InvalidParameterError("translate", translate, "must be a 2D offset") from exc

    angles = np.deg2rad(a1 + (a2 - a1) * np.arange(segments + 1) / segments)
    points = np.column_stack([radius * np.sin(angles), radius * np.cos(angles)])
    # pin the quarter-turn landmarks so tangent points sit exactly on their walls
    points[np.abs(points) < 1e-12 * max(radius, 1.0)] = 0.0
    return points + offset


__all__ = ["sample_arc"]

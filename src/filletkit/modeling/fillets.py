from __future__ import annotations

import numpy as np

from filletkit.tessellation import Tessellation, resolution
from filletkit.validation import require_finite

from .arcs import sample_arc


def fillet_segments(radius: float, tessellation: Tessellation | None = None) -> int:
    """Segments for a quarter-turn fillet arc; always lands on both tangent walls."""

    return resolution(abs(radius), 90.0, tessellation, multiple_of=4)


def fillet_profile(signed_radius: float, tessellation: Tessellation | None = None) -> np.ndarray:
    """Corner piece used to round a rectangle corner.

    A positive radius gives the convex quarter-disc: the origin followed by the
    arc from ``(0, r)`` to ``(r, 0)``. A negative radius gives the concave piece,
    the same slice reflected through the centre of its ``|r| x |r|`` square: the
    far corner ``(|r|, |r|)`` followed by the arc from ``(|r|, 0)`` to ``(0, |r|)``
    around it. Zero returns an empty ``(0, 2)`` array.
    """

    signed_radius = require_finite("signed_radius", signed_radius)
    if signed_radius == 0:
        return np.zeros((0, 2), dtype=float)

    radius = abs(signed_radius)
    segments = fillet_segments(radius, tessellation)
    if signed_radius > 0:
        corner = np.zeros(2)
        arc = sample_arc(radius, 0.0, 90.0, segments)
    else:
        corner = np.array([radius, radius])
        arc = sample_arc(radius, 180.0, 270.0, segments, translate=corner)
    return np.vstack([corner, arc])


__all__ = ["fillet_profile", "fillet_segments"]

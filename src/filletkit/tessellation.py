"""Segment counts for circles and arcs.

Counts are driven by two global tolerances (see :mod:`filletkit._config`): the
largest angle a single polygon edge may subtend, and the longest chord it may
have. Callers that need exact control pass an explicit full-circle ``segments``
count instead.
"""

from __future__ import annotations

import math
from dataclasses import dataclass, replace
from typing import Literal

from filletkit._config import get_tolerance_settings
from filletkit.validation import (
    InvalidParameterError,
    require_count,
    require_finite,
    require_non_negative,
    require_positive,
)

TessellationLOD = Literal["preview", "final"]

MIN_SEGMENTS = 5


@dataclass(frozen=True)
class Tessellation:
    """Controls how finely circles and arcs are approximated."""

    angular_tolerance: float = 12.0
    linear_tolerance: float = 2.0
    segments: int | None = None
    max_segments: int = 1024
    lod: TessellationLOD = "final"

    def __post_init__(self) -> None:
        require_positive("angular_tolerance", self.angular_tolerance)
        require_positive("linear_tolerance", self.linear_tolerance)
        require_count("max_segments", self.max_segments, minimum=MIN_SEGMENTS)
        if self.segments is not None:
            require_count("segments", self.segments, minimum=MIN_SEGMENTS)
        if self.lod not in ("preview", "final"):
            raise InvalidParameterError("lod", self.lod, "must be 'preview' or 'final'")


def default_tessellation() -> Tessellation:
    """Tessellation built from the user's configured tolerances."""

    settings = get_tolerance_settings()
    return Tessellation(
        angular_tolerance=settings.angular_tolerance,
        linear_tolerance=settings.linear_tolerance,
        max_segments=settings.max_segments,
    )


def apply_lod(tessellation: Tessellation) -> Tessellation:
    """Preview doubles both tolerances; an explicit segment count is left alone."""

    if tessellation.lod == "final":
        return tessellation
    return replace(
        tessellation,
        angular_tolerance=min(tessellation.angular_tolerance * 2.0, 360.0 / MIN_SEGMENTS),
        linear_tolerance=tessellation.linear_tolerance * 2.0,
    )


def resolution(
    radius: float,
    sweep_angle: float = 360.0,
    tessellation: Tessellation | None = None,
    *,
    multiple_of: int = 1,
) -> int:
    """Number of segments approximating an arc of ``radius`` spanning ``sweep_angle`` degrees.

    The full-circle count is the finer of the angular and chord-length
    constraints, never below five, clamped to ``max_segments`` and raised to a
    multiple of ``multiple_of``. It is then scaled to the sweep and rounded up,
    so any sweep gets at least one segment.

    Fillets that meet perpendicular walls pass ``multiple_of=4`` so that a
    quarter-turn lands exactly on a whole segment.
    """

    radius = require_non_negative("radius", radius)
    sweep = abs(require_finite("sweep_angle", sweep_angle))
    multiple_of = require_count("multiple_of", multiple_of)
    tess = apply_lod(tessellation or default_tessellation())

    if tess.segments is not None:
        full = int(tess.segments)
    else:
        angular = 360.0 / tess.angular_tolerance
        linear = radius * 2.0 * math.pi / tess.linear_tolerance
        full = max(math.ceil(max(angular, linear)), MIN_SEGMENTS)
        full = min(full, tess.max_segments)
        if multiple_of > 1:
            full = math.ceil(full / multiple_of) * multiple_of

    return max(math.ceil(full * sweep / 360.0 - 1e-9), 1)


__all__ = [
    "MIN_SEGMENTS",
    "Tessellation",
    "TessellationLOD",
    "apply_lod",
    "default_tessellation",
    "resolution",
]

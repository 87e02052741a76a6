"""Sweep a cross-section around the perimeter of a rectangle.

The perimeter is cut into eight pieces. Each corner is a quarter-turn
rotational sweep about a vertical axis through the footprint corner; each side
is a straight sweep along its edge. Sides run ``epsilon`` past both ends so
they overlap the corners instead of meeting them face to face, and the pieces
are then unioned into one solid.
"""

from __future__ import annotations

import logging
from typing import Sequence

import numpy as np

from filletkit._config import get_tolerance_settings
from filletkit.mesh import Mesh
from filletkit.tessellation import Tessellation, resolution
from filletkit.validation import InvalidParameterError, emit_diagnostic, require_non_negative, require_positive

from ._profile2d import ProfileLike, as_profile, profile_loops
from .csg import boolean_union
from .extrude import AXIS_TOLERANCE, linear_extrude, rotate_extrude
from .primitives import make_box

logger = logging.getLogger(__name__)

# (corner position as fractions of the footprint, quadrant angle)
_CORNERS = (((1.0, 1.0), 0.0), ((0.0, 1.0), 90.0), ((0.0, 0.0), 180.0), ((1.0, 0.0), 270.0))
# (edge midpoint as fractions of the footprint, outward angle, which size axis is the edge length)
_SIDES = (((1.0, 0.5), 0.0, 1), ((0.5, 1.0), 90.0, 0), ((0.0, 0.5), 180.0, 1), ((0.5, 0.0), 270.0, 0))


def _footprint(size: Sequence[float] | float) -> tuple[float, float, float | None]:
    if np.ndim(size) == 0:
        side = require_positive("size", size)  # type: ignore[arg-type]
        return side, side, None
    values = list(size)  # type: ignore[arg-type]
    if len(values) not in (2, 3):
        raise InvalidParameterError("size", size, "must be a scalar, (w, d) or (w, d, h)")
    width = require_positive("size[0]", values[0])
    depth = require_positive("size[1]", values[1])
    height = require_positive("size[2]", values[2]) if len(values) == 3 else None
    return width, depth, height


def _seam_check(profile_metadata: dict[str, object], metadata: dict[str, object]) -> None:
    counts = profile_metadata.get("resolution") or []
    uneven = [int(count) for count in counts if int(count) % 4]  # type: ignore[union-attr]
    if uneven:
        emit_diagnostic(
            metadata,
            f"profile was tessellated with {uneven} segments per circle; counts that are not a multiple "
            "of 4 leave seams that do not line up between corners and sides",
        )


def _side_piece(profile, length: float, epsilon: float, tessellation: Tessellation | None) -> Mesh:
    # extrude along z, then lay it down so profile x points along +X and the sweep runs along -Y
    piece = linear_extrude(profile, height=length + 2.0 * epsilon, tessellation=tessellation)
    piece.rotate_vector((1.0, 0.0, 0.0), 90.0)
    piece.translate((0.0, length / 2.0 + epsilon, 0.0))
    return piece


def box_extrude(
    size: Sequence[float] | float,
    profile: ProfileLike,
    fill: bool = False,
    center: bool = False,
    epsilon: float | None = None,
    tessellation: Tessellation | None = None,
) -> Mesh:
    """Wrap ``profile`` around a ``size[0] x size[1]`` rectangle.

    Profile x is the outward distance from the rectangle edge and must not be
    negative; profile y becomes z. ``fill`` adds a solid core under the
    footprint. ``center`` centres the footprint on the origin, and also centres
    z when ``size`` carries a third component.
    """

    width, depth, z_extent = _footprint(size)
    if epsilon is None:
        epsilon = get_tolerance_settings().epsilon
    epsilon = require_non_negative("epsilon", epsilon)
    profile = as_profile(profile)

    loops = profile_loops(profile, tessellation)
    points = np.vstack(loops)
    x_min = float(points[:, 0].min())
    if x_min < -AXIS_TOLERANCE:
        raise InvalidParameterError("profile", x_min, "x is the outward distance and must be >= 0")
    x_min = max(x_min, 0.0)
    x_max = float(points[:, 0].max())
    z_min, z_max = float(points[:, 1].min()), float(points[:, 1].max())
    if x_max <= 0:
        raise InvalidParameterError("profile", x_max, "must reach outward of the rectangle edge (max x > 0)")

    metadata: dict[str, object] = {}
    _seam_check(profile.metadata, metadata)

    corner_segments = resolution(x_max, 90.0, tessellation, multiple_of=4)
    footprint = np.array([width, depth])
    pieces: list[Mesh] = []
    for fraction, quadrant in _CORNERS:
        corner = rotate_extrude(profile, angle_deg=90.0, segments=corner_segments, tessellation=tessellation)
        corner.rotate_vector((0.0, 0.0, 1.0), quadrant)
        corner.translate((*(footprint * np.asarray(fraction)), 0.0))
        pieces.append(corner)
    for fraction, outward, axis in _SIDES:
        side = _side_piece(profile, float(footprint[axis]), epsilon, tessellation)
        side.rotate_vector((0.0, 0.0, 1.0), outward)
        side.translate((*(footprint * np.asarray(fraction)), 0.0))
        pieces.append(side)

    if fill:
        grow = x_min + epsilon
        core_height = z_max - z_min
        if core_height > 0:
            core = make_box(
                (width + 2.0 * grow, depth + 2.0 * grow, core_height),
                center=(width / 2.0, depth / 2.0, (z_min + z_max) / 2.0),
            )
            pieces.append(core)
        else:
            emit_diagnostic(metadata, "profile has no height; fill skipped")

    logger.debug(
        "box_extrude %gx%g: %d pieces, %d corner segments, epsilon=%g",
        width,
        depth,
        len(pieces),
        corner_segments,
        epsilon,
    )
    solid = boolean_union(pieces)
    if center:
        solid.translate((-width / 2.0, -depth / 2.0, -(z_extent or 0.0) / 2.0))

    notes = list(profile.metadata.get("diagnostics", [])) + list(solid.metadata.get("diagnostics", []))
    notes.extend(metadata.get("diagnostics", []))  # type: ignore[arg-type]
    if notes:
        solid.metadata["diagnostics"] = list(dict.fromkeys(notes))
    solid.metadata["corner_segments"] = corner_segments
    return solid


__all__ = ["box_extrude"]

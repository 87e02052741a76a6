from __future__ import annotations

import numpy as np

from filletkit.mesh import Mesh
from filletkit.tessellation import Tessellation
from filletkit.validation import emit_diagnostic, require_non_negative, require_positive

from .arcs import sample_arc
from .drawing2d import Profile2D
from .extrude import rotate_extrude
from .fillets import fillet_segments


def _fillet_arc(
    radius: float,
    center: tuple[float, float],
    a1: float,
    a2: float,
    tessellation: Tessellation | None,
) -> np.ndarray:
    if radius == 0:
        return np.array([center], dtype=float)
    return sample_arc(radius, a1, a2, fillet_segments(radius, tessellation), translate=center)


def rounded_cylinder_profile(
    radius: float,
    height: float,
    fillet_bottom: float = 0.0,
    fillet_top: float = 0.0,
    tessellation: Tessellation | None = None,
) -> Profile2D:
    """Half cross-section of a rounded cylinder in the (radius, z) plane.

    Runs up the axis, out along the top face, round the top fillet, down the
    wall and round the bottom fillet back to the axis. Oversized fillets are
    reported, then clamped to the radius and scaled down to fit the height.
    """

    radius = require_positive("radius", radius)
    height = require_positive("height", height)
    fillet_bottom = require_non_negative("fillet_bottom", fillet_bottom)
    fillet_top = require_non_negative("fillet_top", fillet_top)

    metadata: dict[str, object] = {}
    for name, fillet in (("fillet_bottom", fillet_bottom), ("fillet_top", fillet_top)):
        if fillet > radius:
            emit_diagnostic(metadata, f"{name} {fillet:g} is larger than the cylinder radius {radius:g}")
    if fillet_bottom + fillet_top > height:
        emit_diagnostic(
            metadata,
            f"fillets ({fillet_bottom:g} + {fillet_top:g}) are taller than the cylinder height {height:g}",
        )

    # best effort: arcs must stay on the positive side of the axis and must not cross each other
    fillet_top = min(fillet_top, radius)
    fillet_bottom = min(fillet_bottom, radius)
    total = fillet_top + fillet_bottom
    if total > height:
        fillet_top *= height / total
        fillet_bottom *= height / total

    top = _fillet_arc(fillet_top, (radius - fillet_top, height - fillet_top), 0.0, 90.0, tessellation)
    bottom = _fillet_arc(fillet_bottom, (radius - fillet_bottom, fillet_bottom), 90.0, 180.0, tessellation)
    points = np.vstack([[(0.0, 0.0), (0.0, height)], top, bottom])
    keep = np.concatenate([[True], np.linalg.norm(np.diff(points, axis=0), axis=1) > 1e-12])
    return Profile2D.from_points(points[keep], **metadata)


def rounded_cylinder(
    radius: float,
    height: float,
    fillet_bottom: float = 0.0,
    fillet_top: float = 0.0,
    center: bool = False,
    tessellation: Tessellation | None = None,
) -> Mesh:
    """Cylinder standing on the XY plane with independently rounded bottom and top edges.

    A zero fillet leaves that edge sharp. ``center`` puts the mid-height at z=0.
    """

    profile = rounded_cylinder_profile(radius, height, fillet_bottom, fillet_top, tessellation)
    mesh = rotate_extrude(profile, angle_deg=360.0, tessellation=tessellation)
    if center:
        mesh.translate((0.0, 0.0, -height / 2.0))
    return mesh


__all__ = ["rounded_cylinder", "rounded_cylinder_profile"]

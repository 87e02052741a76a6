from __future__ import annotations

from typing import Sequence

from filletkit.mesh import Mesh


def translate(mesh: Mesh, offset: Sequence[float]) -> Mesh:
    """Return a translated copy of the mesh."""
    return mesh.translate(offset, inplace=False)


def rotate(
    mesh: Mesh,
    axis: Sequence[float],
    angle_deg: float,
    origin: Sequence[float] = (0.0, 0.0, 0.0),
) -> Mesh:
    """Return a rotated copy of the mesh around an arbitrary axis."""
    return mesh.rotate_vector(axis, angle_deg, point=origin, inplace=False)

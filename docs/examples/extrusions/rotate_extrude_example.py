"""Three-quarter lathe of a profile that touches the axis."""

from __future__ import annotations

from filletkit.modeling import rotate_extrude
from filletkit.modeling.drawing2d import make_polygon


def build():
    profile = make_polygon([(0.0, -0.6), (0.8, -0.2), (0.7, 0.3), (0.4, 0.6), (0.0, 0.6)])
    return rotate_extrude(profile, angle_deg=270)

"""Linear extrude of a washer-shaped profile."""

from __future__ import annotations

from filletkit.modeling import linear_extrude
from filletkit.modeling.drawing2d import Arc2D, Path2D, Profile2D


def build():
    outer = Path2D([Arc2D(center=(0.0, 0.0), radius=1.0, start_angle_deg=360, end_angle_deg=0)], closed=True)
    inner = Path2D([Arc2D(center=(0.0, 0.0), radius=0.45, start_angle_deg=0, end_angle_deg=360)], closed=True)
    return linear_extrude(Profile2D(outer=outer, holes=[inner]), height=1.0)

"""Tray rim: a rounded-rectangle cross-section wrapped around a 40 x 25 footprint."""

from __future__ import annotations

from filletkit.modeling import box_extrude, rounded_rectangle, set_mesh_color


def build():
    # x is the wall thickness outward of the footprint, y the wall height
    wall = rounded_rectangle((2.0, 8.0), radii=(0.0, 0.0, 0.8, 0.0))
    tray = box_extrude((40.0, 25.0), wall, fill=True, center=True)
    return set_mesh_color(tray, "#6ab0ff")

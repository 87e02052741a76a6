"""Measure across the diagonal of a rounded box."""

from __future__ import annotations

from filletkit.modeling import box_extrude, measure, rounded_rectangle


def build():
    wall = rounded_rectangle((1.5, 5.0), radii=(0.0, 0.0, 1.0, 0.0))
    box = box_extrude((20.0, 12.0), wall, fill=True)
    ruler = measure((-1.5, -1.5, 5.0), (21.5, 13.5, 5.0), align="top", color="orange", opacity=0.8)
    return [box, ruler]

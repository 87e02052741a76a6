"""Smallest useful filletkit model: a rounded tray and a puck beside it."""

from __future__ import annotations

from filletkit.modeling import box_extrude, rounded_cylinder, rounded_rectangle, translate


def build():
    rim = box_extrude((12.0, 12.0), rounded_rectangle((1.0, 4.0), radii=(0.0, 0.0, 0.5, 0.0)), fill=True)
    puck = translate(rounded_cylinder(4.0, 3.0, fillet_bottom=0.5, fillet_top=1.0), (22.0, 6.0, 0.0))
    return [rim, puck]

"""Rounded rectangle with one sharp, two convex and one coved corner."""

from __future__ import annotations

from filletkit.modeling import linear_extrude, rounded_rectangle


def build():
    outline = rounded_rectangle((20.0, 30.0), radii=(0.0, 2.0, 4.0, -3.0))
    return [outline, linear_extrude(outline, height=2.0, center=(0.0, 0.0, -4.0))]

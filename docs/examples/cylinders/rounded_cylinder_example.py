"""Puck with a soft top edge and a small bottom chamfer-like fillet."""

from __future__ import annotations

from filletkit.modeling import rounded_cylinder


def build():
    return rounded_cylinder(radius=10.0, height=6.0, fillet_bottom=0.5, fillet_top=2.5, center=True)

"""Modeling utilities: profiles, fillets, sweeps and the solids built from them."""

from __future__ import annotations

from .transform import rotate, translate
from .arcs import sample_arc
from .drawing2d import Arc2D, Line2D, Path2D, Profile2D, make_circle, make_polygon, make_rect
from .fillets import fillet_profile
from .rectangles import RectangleSpec, rounded_rectangle
from .extrude import linear_extrude, rotate_extrude
from .boxwrap import box_extrude
from .cylinders import rounded_cylinder, rounded_cylinder_profile
from .primitives import make_box
from .csg import boolean_union, boolean_difference, boolean_intersection
from .drafting import Measurement, measure
from ._color import set_mesh_color

__all__ = [
    "Arc2D",
    "Line2D",
    "Path2D",
    "Profile2D",
    "RectangleSpec",
    "Measurement",
    "sample_arc",
    "fillet_profile",
    "rounded_rectangle",
    "rounded_cylinder",
    "rounded_cylinder_profile",
    "linear_extrude",
    "rotate_extrude",
    "box_extrude",
    "make_box",
    "make_circle",
    "make_polygon",
    "make_rect",
    "boolean_union",
    "boolean_difference",
    "boolean_intersection",
    "measure",
    "set_mesh_color",
    "rotate",
    "translate",
]

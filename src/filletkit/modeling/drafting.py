from __future__ import annotations

import logging
import math
from dataclasses import dataclass, field
from typing import Literal, Sequence

import numpy as np
import pyvista as pv

from filletkit.mesh import Mesh, mesh_to_pyvista
from filletkit.validation import InvalidParameterError, require_positive

from ._color import RGBA, normalize_color, set_mesh_color
from .cylinders import rounded_cylinder

logger = logging.getLogger(__name__)

Align = Literal["top", "bottom", "center"]


@dataclass
class Measurement:
    """A labelled rod between two points, for annotating previews."""

    start: np.ndarray
    end: np.ndarray
    distance: float
    inclination: float
    azimuth: float
    label: str
    label_anchor: np.ndarray
    rod: Mesh
    color: RGBA
    text_height: float = field(default=1.0)

    def to_datasets(self) -> list[tuple[pv.PolyData, RGBA]]:
        text = pv.Text3D(self.label, depth=0.0)
        if text.n_points:
            x0, x1, y0, y1, _, _ = text.bounds
            text.translate((-(x0 + x1) / 2.0, -(y0 + y1) / 2.0, 0.0), inplace=True)
            text.scale(self.text_height / max(y1 - y0, 1e-9), inplace=True)
            # stand the label up in the XZ plane so it reads from the default camera
            text.rotate_x(90.0, inplace=True)
            text.translate(self.label_anchor, inplace=True)
        return [(mesh_to_pyvista(self.rod), self.color), (text, self.color)]


def _angles(direction: np.ndarray, distance: float) -> tuple[float, float]:
    inclination = math.degrees(math.acos(max(-1.0, min(1.0, direction[2] / distance))))
    azimuth = math.degrees(math.atan2(direction[1], direction[0]))
    return inclination, azimuth


def measure(
    start: Sequence[float],
    end: Sequence[float],
    label: str | None = None,
    align: Align | str = "top",
    color: Sequence[float] | str = "orange",
    opacity: float = 1.0,
    thickness: float | None = None,
) -> Measurement:
    """Measure the distance between two points and build a rod to show it.

    Inclination is measured from +Z and azimuth from +X in the XY plane, both in
    degrees. ``align`` puts the label above (``"top"``), below (``"bottom"``) or
    on the rod's midpoint (anything else).
    """

    p0 = np.asarray(start, dtype=float).reshape(3)
    p1 = np.asarray(end, dtype=float).reshape(3)
    direction = p1 - p0
    distance = float(np.linalg.norm(direction))
    if distance == 0:
        raise InvalidParameterError("end", tuple(p1.tolist()), "must differ from start")
    if not 0.0 <= opacity <= 1.0:
        raise InvalidParameterError("opacity", opacity, "must be within [0, 1]")
    if thickness is None:
        thickness = distance / 50.0
    thickness = require_positive("thickness", thickness)

    inclination, azimuth = _angles(direction, distance)
    logger.info("distance %s -> %s: %.4f", tuple(p0.tolist()), tuple(p1.tolist()), distance)

    radius = thickness / 2.0
    rod = rounded_cylinder(radius, distance, fillet_bottom=radius / 2.0, fillet_top=radius / 2.0)
    rod.rotate_vector((0.0, 1.0, 0.0), inclination)
    rod.rotate_vector((0.0, 0.0, 1.0), azimuth)
    rod.translate(p0)
    rgba = normalize_color(color, opacity)
    set_mesh_color(rod, rgba)

    text_height = max(distance / 15.0, thickness * 2.0)
    midpoint = (p0 + p1) / 2.0
    lift = np.array([0.0, 0.0, text_height + thickness])
    if align == "top":
        anchor = midpoint + lift
    elif align == "bottom":
        anchor = midpoint - lift
    else:
        anchor = midpoint

    return Measurement(
        start=p0,
        end=p1,
        distance=distance,
        inclination=inclination,
        azimuth=azimuth,
        label=label if label is not None else f"{distance:.2f}",
        label_anchor=anchor,
        rod=rod,
        color=rgba,
        text_height=text_height,
    )


__all__ = ["Align", "Measurement", "measure"]

from __future__ import annotations

from typing import Sequence, Tuple

import numpy as np
import pyvista as pv

from filletkit.mesh import Mesh

RGBA = Tuple[float, float, float, float]


def normalize_color(color: Sequence[float] | str, opacity: float | None = None) -> RGBA:
    """Accept a color name/hex string, RGB or RGBA (0-1 or 0-255) and return RGBA."""

    if isinstance(color, str):
        rgb = tuple(float(c) for c in pv.Color(color).float_rgb)
        alpha = 1.0
    else:
        arr = np.asarray(color, dtype=float).flatten()
        if arr.size not in (3, 4):
            raise ValueError("Color must be RGB or RGBA.")
        if arr.max() > 1.0:
            arr = arr / 255.0
        rgb = tuple(float(c) for c in arr[:3])
        alpha = float(arr[3]) if arr.size == 4 else 1.0
    if opacity is not None:
        alpha = float(opacity)
    return (rgb[0], rgb[1], rgb[2], alpha)


def set_mesh_color(mesh: Mesh, color: Sequence[float] | str | None, opacity: float | None = None) -> Mesh:
    mesh.color = None if color is None else normalize_color(color, opacity)
    return mesh

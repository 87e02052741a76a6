from __future__ import annotations

from typing import Sequence

import numpy as np

from filletkit.mesh import Mesh
from filletkit.validation import InvalidParameterError, require_positive

_UNIT_CUBE = np.array(
    [
        (0.0, 0.0, 0.0),
        (1.0, 0.0, 0.0),
        (1.0, 1.0, 0.0),
        (0.0, 1.0, 0.0),
        (0.0, 0.0, 1.0),
        (1.0, 0.0, 1.0),
        (1.0, 1.0, 1.0),
        (0.0, 1.0, 1.0),
    ]
)

_CUBE_FACES = np.array(
    [
        (0, 2, 1), (0, 3, 2),  # bottom
        (4, 5, 6), (4, 6, 7),  # top
        (0, 1, 5), (0, 5, 4),  # front
        (3, 7, 6), (3, 6, 2),  # back
        (0, 4, 7), (0, 7, 3),  # left
        (1, 2, 6), (1, 6, 5),  # right
    ],
    dtype=int,
)


def make_box(
    size: Sequence[float] = (1.0, 1.0, 1.0),
    center: Sequence[float] = (0.0, 0.0, 0.0),
) -> Mesh:
    """Axis-aligned box specified by size (dx, dy, dz) and center."""

    if len(size) != 3:
        raise InvalidParameterError("size", size, "must be (dx, dy, dz)")
    dims = np.array([require_positive(f"size[{axis}]", value) for axis, value in zip("xyz", size)])
    origin = np.asarray(center, dtype=float).reshape(3) - dims / 2.0
    return Mesh(_UNIT_CUBE * dims + origin, _CUBE_FACES)


__all__ = ["make_box"]

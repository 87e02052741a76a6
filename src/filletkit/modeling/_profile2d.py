from __future__ import annotations

from typing import Sequence, Union

import numpy as np

from filletkit.tessellation import Tessellation
from filletkit.validation import InvalidParameterError

from .drawing2d import Path2D, Profile2D, signed_area

ProfileLike = Union[Profile2D, np.ndarray, Sequence[Sequence[float]]]

_DUPLICATE_TOLERANCE = 1e-9


def as_profile(profile: ProfileLike) -> Profile2D:
    if isinstance(profile, Profile2D):
        return profile
    try:
        pts = np.asarray(profile, dtype=float)
    except (TypeError, ValueError) as exc:
        raise InvalidParameterError("profile", profile, "must be a Profile2D or a sequence of 2D points") from exc
    if pts.ndim != 2 or pts.shape[1] != 2:
        raise InvalidParameterError("profile", pts.shape, "points must be an Nx2 array")
    return Profile2D.from_points(pts)


def dedupe_loop(points: np.ndarray) -> np.ndarray:
    """Drop consecutive duplicates, including a closing point equal to the first."""

    pts = np.asarray(points, dtype=float).reshape(-1, 2)
    if pts.shape[0] < 2:
        return pts
    step = np.linalg.norm(np.diff(pts, axis=0), axis=1)
    keep = np.concatenate([[True], step > _DUPLICATE_TOLERANCE])
    pts = pts[keep]
    while pts.shape[0] > 1 and np.linalg.norm(pts[0] - pts[-1]) <= _DUPLICATE_TOLERANCE:
        pts = pts[:-1]
    return pts


def _loop_points(path: Path2D, tessellation: Tessellation | None) -> np.ndarray:
    return dedupe_loop(path.sample(tessellation))


def profile_loops(profile: ProfileLike, tessellation: Tessellation | None = None) -> list[np.ndarray]:
    """Outer loop first, then holes, each in the caller's own winding."""

    profile = as_profile(profile)
    loops = [_loop_points(profile.outer, tessellation)]
    loops.extend(_loop_points(hole, tessellation) for hole in profile.holes)
    if loops[0].shape[0] < 3:
        raise InvalidParameterError("profile", loops[0].shape[0], "needs at least three distinct points")
    return loops


def loop_flips(loops: list[np.ndarray]) -> list[bool]:
    """Per loop, whether its winding is opposite to outer-CCW / holes-CW.

    Points are never reordered; sweeps flip triangles instead so the caller's
    traversal order survives into the solid.
    """

    flips = []
    for index, loop in enumerate(loops):
        ccw = signed_area(loop) > 0
        flips.append(ccw != (index == 0))
    return flips


def triangulate_loops(loops: list[np.ndarray]) -> tuple[np.ndarray, np.ndarray]:
    """Earcut the loops; returns stacked vertices and CCW-oriented triangles."""

    try:
        import mapbox_earcut as earcut
    except ImportError as exc:  # pragma: no cover - runtime dependency
        raise ImportError("mapbox_earcut is required for profile triangulation.") from exc

    if not loops:
        return np.zeros((0, 2), dtype=float), np.zeros((0, 3), dtype=int)

    vertices = np.vstack(loops).astype(float)
    ring_ends = np.cumsum([loop.shape[0] for loop in loops]).astype(np.uint32)
    indices = earcut.triangulate_float64(vertices, ring_ends)
    faces = np.asarray(indices, dtype=np.int64).reshape(-1, 3)
    if faces.size:
        a = vertices[faces[:, 0]]
        b = vertices[faces[:, 1]]
        c = vertices[faces[:, 2]]
        cross = (b[:, 0] - a[:, 0]) * (c[:, 1] - a[:, 1]) - (b[:, 1] - a[:, 1]) * (c[:, 0] - a[:, 0])
        cw = cross < 0
        faces[cw] = faces[cw][:, [0, 2, 1]]
    return vertices, faces


__all__ = ["ProfileLike", "as_profile", "dedupe_loop", "loop_flips", "profile_loops", "triangulate_loops"]

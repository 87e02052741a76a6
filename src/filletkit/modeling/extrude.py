from __future__ import annotations

from typing import Sequence

import numpy as np

from filletkit.mesh import Mesh
from filletkit.tessellation import Tessellation, resolution
from filletkit.validation import InvalidParameterError, require_count, require_finite, require_positive

from ._profile2d import ProfileLike, as_profile, loop_flips, profile_loops, triangulate_loops

AXIS_TOLERANCE = 1e-9


def _normalize(vector: Sequence[float]) -> np.ndarray:
    arr = np.asarray(vector, dtype=float).reshape(3)
    norm = np.linalg.norm(arr)
    if norm == 0:
        raise ValueError("Direction vector must be non-zero.")
    return arr / norm


def _cap_faces(
    vertices: np.ndarray,
    faces: np.ndarray,
    expected_normal: np.ndarray,
) -> np.ndarray:
    if faces.size == 0:
        return faces
    tri = faces.copy()
    v1 = vertices[tri[:, 1]] - vertices[tri[:, 0]]
    v2 = vertices[tri[:, 2]] - vertices[tri[:, 0]]
    normals = np.cross(v1, v2)
    dots = np.einsum("ij,j->i", normals, expected_normal)
    flip = dots < 0
    if np.any(flip):
        tri[flip] = tri[flip][:, [0, 2, 1]]
    return tri


def _side_faces(
    current: np.ndarray,
    following: np.ndarray,
    loops: list[np.ndarray],
    flips: list[bool],
    reverse: bool,
) -> list[np.ndarray]:
    """Quads between two copies of the profile, given as index rows."""

    faces = []
    offset = 0
    for loop, flip in zip(loops, flips):
        cols = np.arange(offset, offset + loop.shape[0])
        nxt = np.roll(cols, -1)
        b0, b1 = current[cols], current[nxt]
        t0, t1 = following[cols], following[nxt]
        quads = np.vstack([np.column_stack([b0, b1, t1]), np.column_stack([b0, t1, t0])])
        if flip != reverse:
            quads = quads[:, ::-1]
        faces.append(quads)
        offset += loop.shape[0]
    return faces


def linear_extrude(
    profile: ProfileLike,
    height: float = 1.0,
    direction: Sequence[float] = (0.0, 0.0, 1.0),
    center: Sequence[float] = (0.0, 0.0, 0.0),
    tessellation: Tessellation | None = None,
) -> Mesh:
    """Extrude a 2D profile along a straight direction."""

    height = require_positive("height", height)
    unit = _normalize(direction)
    center_vec = np.asarray(center, dtype=float).reshape(3)
    profile = as_profile(profile)

    loops = profile_loops(profile, tessellation)
    vertices_2d, faces_2d = triangulate_loops(loops)

    count = len(vertices_2d)
    base = np.column_stack([vertices_2d, np.zeros(count)]) + center_vec
    top = base + unit * height
    vertices = np.vstack([base, top])

    plane_normal = np.array([0.0, 0.0, 1.0])
    faces = [
        _cap_faces(vertices, faces_2d, expected_normal=-unit),
        _cap_faces(vertices, faces_2d + count, expected_normal=unit),
    ]
    rows = np.arange(count)
    reverse = float(np.dot(unit, plane_normal)) < 0
    faces.extend(_side_faces(rows, rows + count, loops, loop_flips(loops), reverse))

    mesh = Mesh(vertices, np.vstack(faces), metadata=dict(profile.metadata))
    return mesh


def rotate_extrude(
    profile: ProfileLike,
    angle_deg: float = 360.0,
    axis_origin: Sequence[float] = (0.0, 0.0, 0.0),
    axis_direction: Sequence[float] = (0.0, 0.0, 1.0),
    plane_normal: Sequence[float] = (0.0, 1.0, 0.0),
    segments: int | None = None,
    cap_ends: bool = True,
    tessellation: Tessellation | None = None,
) -> Mesh:
    """Rotate-extrude (lathe) a profile around an axis by any angle.

    Profile x is the distance from the axis and must not be negative; profile y
    runs along the axis. Profile points on the axis become a single vertex
    shared by every ring, so profiles touching the axis still give a closed
    solid.
    """

    angle_deg = require_finite("angle_deg", angle_deg)
    if angle_deg == 0 or abs(angle_deg) > 360.0 + 1e-9:
        raise InvalidParameterError("angle_deg", angle_deg, "must be non-zero and within [-360, 360]")
    axis_origin = np.asarray(axis_origin, dtype=float).reshape(3)
    axis_dir = _normalize(axis_direction)
    plane_norm = _normalize(plane_normal)
    if abs(float(np.dot(axis_dir, plane_norm))) > 1e-6:
        raise ValueError("plane_normal must be perpendicular to axis_direction.")
    u = np.cross(plane_norm, axis_dir)
    u = u / np.linalg.norm(u)
    profile = as_profile(profile)

    loops = profile_loops(profile, tessellation)
    vertices_2d, faces_2d = triangulate_loops(loops)
    if vertices_2d[:, 0].min() < -AXIS_TOLERANCE:
        raise InvalidParameterError(
            "profile", float(vertices_2d[:, 0].min()), "must stay on the non-negative side of the axis (x >= 0)"
        )
    on_axis = vertices_2d[:, 0] <= AXIS_TOLERANCE
    vertices_2d[on_axis, 0] = 0.0

    if segments is None:
        segments = resolution(float(vertices_2d[:, 0].max()), angle_deg, tessellation)
    segments = require_count("segments", segments)

    closed = bool(np.isclose(abs(angle_deg), 360.0))
    angle_rad = np.deg2rad(angle_deg)
    if closed:
        segments = max(segments, 3)
        angles = np.linspace(0.0, angle_rad, segments, endpoint=False)
    else:
        angles = np.linspace(0.0, angle_rad, segments + 1, endpoint=True)

    base_points = axis_origin + np.outer(vertices_2d[:, 0], u) + np.outer(vertices_2d[:, 1], axis_dir)
    vertices = np.vstack([_rotate_around_axis(base_points, axis_origin, axis_dir, angle) for angle in angles])

    ring_size = base_points.shape[0]
    ring_count = len(angles)
    index = np.arange(ring_count * ring_size).reshape(ring_count, ring_size)
    index[:, on_axis] = index[0, on_axis]

    flips = loop_flips(loops)
    faces = []
    for ring in range(ring_count - (0 if closed else 1)):
        following = (ring + 1) % ring_count
        # (u, axis, plane_normal) is a left-handed frame, so a positive sweep mirrors linear_extrude
        faces.extend(_side_faces(index[ring], index[following], loops, flips, reverse=angle_deg > 0))

    if not closed and cap_ends:
        end_normal = _rotate_vector(plane_norm, axis_dir, angle_rad)
        if angle_deg >= 0:
            start_normal = -plane_norm
            final_normal = end_normal
        else:
            start_normal = plane_norm
            final_normal = -end_normal
        faces.append(_cap_faces(vertices, index[0][faces_2d], expected_normal=start_normal))
        faces.append(_cap_faces(vertices, index[-1][faces_2d], expected_normal=final_normal))

    mesh = Mesh(vertices, np.vstack(faces), metadata=dict(profile.metadata))
    mesh.metadata["sweep_segments"] = int(segments)
    return mesh.compact()


def _rotate_around_axis(
    points: np.ndarray,
    origin: np.ndarray,
    axis: np.ndarray,
    angle: float,
) -> np.ndarray:
    axis = _normalize(axis)
    cos_a = np.cos(angle)
    sin_a = np.sin(angle)
    p = points - origin
    cross = np.cross(axis, p)
    dot = np.dot(p, axis)
    rotated = p * cos_a + cross * sin_a + axis * dot[:, None] * (1 - cos_a)
    return rotated + origin


def _rotate_vector(vec: np.ndarray, axis: np.ndarray, angle: float) -> np.ndarray:
    axis = _normalize(axis)
    vec = np.asarray(vec, dtype=float).reshape(3)
    cos_a = np.cos(angle)
    sin_a = np.sin(angle)
    cross = np.cross(axis, vec)
    dot = np.dot(axis, vec)
    return vec * cos_a + cross * sin_a + axis * dot * (1 - cos_a)


__all__ = ["linear_extrude", "rotate_extrude"]

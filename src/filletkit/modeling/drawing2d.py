from __future__ import annotations

from dataclasses import dataclass, field
from typing import Iterable, List, Sequence

import numpy as np

from filletkit.tessellation import Tessellation, resolution
from filletkit.validation import InvalidParameterError, require_positive

from .arcs import sample_arc


def _require_vec2(value: Sequence[float], label: str) -> np.ndarray:
    try:
        arr = np.asarray(value, dtype=float).reshape(2)
    except (TypeError, ValueError) as exc:
        raise InvalidParameterError(label, value, "must be a 2D coordinate") from exc
    if not np.all(np.isfinite(arr)):
        raise InvalidParameterError(label, value, "must be finite")
    return arr


def signed_area(points: np.ndarray) -> float:
    """Shoelace area; positive for counter-clockwise loops."""

    points = np.asarray(points, dtype=float)
    if points.shape[0] < 3:
        return 0.0
    x = points[:, 0]
    y = points[:, 1]
    return 0.5 * float(np.dot(x, np.roll(y, -1)) - np.dot(y, np.roll(x, -1)))


@dataclass(frozen=True)
class Line2D:
    start: np.ndarray
    end: np.ndarray

    def __post_init__(self) -> None:
        object.__setattr__(self, "start", _require_vec2(self.start, "start"))
        object.__setattr__(self, "end", _require_vec2(self.end, "end"))

    def sample(self, tessellation: Tessellation | None = None) -> np.ndarray:
        return np.vstack([self.start, self.end])


@dataclass(frozen=True)
class Arc2D:
    """Circular arc using the same bearing convention as :func:`sample_arc`."""

    center: np.ndarray
    radius: float
    start_angle_deg: float
    end_angle_deg: float

    def __post_init__(self) -> None:
        object.__setattr__(self, "center", _require_vec2(self.center, "center"))
        object.__setattr__(self, "radius", require_positive("radius", self.radius))

    def sample(self, tessellation: Tessellation | None = None) -> np.ndarray:
        sweep = self.end_angle_deg - self.start_angle_deg
        segments = resolution(self.radius, sweep, tessellation)
        return sample_arc(self.radius, self.start_angle_deg, self.end_angle_deg, segments, translate=self.center)


Segment2D = Line2D | Arc2D


@dataclass
class Path2D:
    segments: List[Segment2D] = field(default_factory=list)
    closed: bool = False

    @classmethod
    def from_points(cls, points: Iterable[Sequence[float]], closed: bool = True) -> "Path2D":
        pts = [_require_vec2(p, "point") for p in points]
        if len(pts) < 2:
            raise ValueError("Path2D requires at least two points.")
        segments = [Line2D(pts[i], pts[i + 1]) for i in range(len(pts) - 1)]
        if closed and not np.allclose(pts[0], pts[-1]):
            segments.append(Line2D(pts[-1], pts[0]))
        return cls(segments=segments, closed=closed)

    def sample(self, tessellation: Tessellation | None = None) -> np.ndarray:
        """Ordered points along the path; closed paths repeat their first point last."""

        if not self.segments:
            return np.zeros((0, 2), dtype=float)
        points = []
        for idx, segment in enumerate(self.segments):
            seg_points = segment.sample(tessellation)
            if idx > 0 and seg_points.shape[0] > 0:
                seg_points = seg_points[1:]
            points.append(seg_points)
        pts = np.vstack(points)
        if self.closed and pts.shape[0] > 0 and not np.allclose(pts[0], pts[-1]):
            pts = np.vstack([pts, pts[0]])
        return pts


@dataclass
class Profile2D:
    """Closed cross-section: one outer loop plus optional holes."""

    outer: Path2D
    holes: List[Path2D] = field(default_factory=list)
    metadata: dict[str, object] = field(default_factory=dict)

    def __post_init__(self) -> None:
        if not self.outer.closed:
            raise ValueError("Profile2D outer path must be closed.")
        for hole in self.holes:
            if not hole.closed:
                raise ValueError("Profile2D hole paths must be closed.")

    @classmethod
    def from_points(cls, points: Iterable[Sequence[float]], **metadata: object) -> "Profile2D":
        pts = list(points)
        if len(pts) < 3:
            raise InvalidParameterError("profile", pts, "needs at least three points")
        return cls(outer=Path2D.from_points(pts, closed=True), metadata=dict(metadata))

    def points(self, tessellation: Tessellation | None = None) -> np.ndarray:
        """Outer loop without the repeated closing point."""

        pts = self.outer.sample(tessellation)
        if pts.shape[0] > 1 and np.allclose(pts[0], pts[-1]):
            pts = pts[:-1]
        return pts

    def area(self, tessellation: Tessellation | None = None) -> float:
        total = abs(signed_area(self.points(tessellation)))
        for hole in self.holes:
            total -= abs(signed_area(hole.sample(tessellation)[:-1]))
        return total

    @property
    def bounds(self) -> tuple[float, float, float, float]:
        pts = self.points()
        return (float(pts[:, 0].min()), float(pts[:, 0].max()), float(pts[:, 1].min()), float(pts[:, 1].max()))


def make_rect(
    size: Sequence[float] = (1.0, 1.0),
    center: Sequence[float] = (0.0, 0.0),
) -> Profile2D:
    sx, sy = float(size[0]), float(size[1])
    if sx <= 0 or sy <= 0:
        raise InvalidParameterError("size", tuple(size), "must be positive")
    cx, cy = _require_vec2(center, "center")
    hx, hy = sx / 2.0, sy / 2.0
    return Profile2D.from_points(
        [
            (cx - hx, cy - hy),
            (cx + hx, cy - hy),
            (cx + hx, cy + hy),
            (cx - hx, cy + hy),
        ]
    )


def make_circle(
    radius: float = 0.5,
    center: Sequence[float] = (0.0, 0.0),
    tessellation: Tessellation | None = None,
) -> Profile2D:
    if radius <= 0:
        raise InvalidParameterError("radius", radius, "must be positive")
    segments = resolution(radius, 360.0, tessellation)
    # counter-clockwise: bearings decrease
    pts = sample_arc(radius, 360.0, 0.0, segments, translate=center)[:-1]
    return Profile2D.from_points(pts, resolution=[segments])


def make_polygon(points: Iterable[Sequence[float]]) -> Profile2D:
    return Profile2D.from_points(points)


__all__ = [
    "Arc2D",
    "Line2D",
    "Path2D",
    "Profile2D",
    "make_circle",
    "make_polygon",
    "make_rect",
    "signed_area",
]

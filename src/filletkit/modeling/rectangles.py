from __future__ import annotations

from dataclasses import dataclass
from typing import Sequence, Tuple, Union

import numpy as np

from filletkit.tessellation import Tessellation, resolution
from filletkit.validation import InvalidParameterError, emit_diagnostic, require_finite, require_positive

from .drawing2d import Profile2D, signed_area
from .fillets import fillet_profile

Scalar = Union[int, float]
SizeLike = Union[Scalar, Sequence[float]]
RadiiLike = Union[Scalar, Sequence[float]]

# lower-left, upper-left, upper-right, lower-right
CORNER_NAMES = ("lower-left", "upper-left", "upper-right", "lower-right")
_CORNER_ROTATIONS = (180.0, 90.0, 0.0, 270.0)


@dataclass(frozen=True)
class RectangleSpec:
    """Normalized rounded-rectangle parameters.

    ``radii`` are ordered clockwise from the lower-left corner. A negative
    radius asks for a concave (coved) corner.
    """

    width: float
    height: float
    radii: Tuple[float, float, float, float] = (0.0, 0.0, 0.0, 0.0)
    center: bool = False

    def __post_init__(self) -> None:
        require_positive("width", self.width)
        require_positive("height", self.height)
        if len(self.radii) != 4:
            raise InvalidParameterError("radii", self.radii, "must have exactly four corners")
        for name, radius in zip(CORNER_NAMES, self.radii):
            require_finite(f"radii[{name}]", radius)

    @classmethod
    def of(cls, size: SizeLike, radii: RadiiLike = 0.0, center: bool = False) -> "RectangleSpec":
        if np.ndim(size) == 0:
            width = height = float(size)  # type: ignore[arg-type]
        else:
            values = [float(v) for v in size]  # type: ignore[union-attr]
            if len(values) != 2:
                raise InvalidParameterError("size", size, "must be a scalar or (width, height)")
            width, height = values
        if np.ndim(radii) == 0:
            corners = (float(radii),) * 4  # type: ignore[arg-type]
        else:
            corners = tuple(float(r) for r in radii)  # type: ignore[union-attr]
        return cls(width=width, height=height, radii=corners, center=bool(center))  # type: ignore[arg-type]

    @property
    def size(self) -> tuple[float, float]:
        return (self.width, self.height)

    def anchors(self) -> np.ndarray:
        """Corner centres: each true corner inset by its own ``|radius|``."""

        w, h = self.width, self.height
        r0, r1, r2, r3 = (abs(r) for r in self.radii)
        return np.array([(r0, r0), (r1, h - r1), (w - r2, h - r2), (w - r3, r3)], dtype=float)

    def corners(self) -> np.ndarray:
        w, h = self.width, self.height
        return np.array([(0.0, 0.0), (0.0, h), (w, h), (w, 0.0)], dtype=float)


def _rotate2d(points: np.ndarray, angle_deg: float) -> np.ndarray:
    angle = np.deg2rad(angle_deg)
    c, s = np.cos(angle), np.sin(angle)
    rotated = points @ np.array([[c, s], [-s, c]])
    # quarter turns must stay exact so arc ends sit on the edges
    return np.round(rotated, 12)


def _load_cross_section():
    try:
        from manifold3d import CrossSection
    except ImportError as exc:  # pragma: no cover - runtime dependency
        raise ImportError("manifold3d is required for rounded rectangles.") from exc
    return CrossSection


def _check_radii(spec: RectangleSpec, metadata: dict[str, object]) -> None:
    smaller = min(spec.width, spec.height)
    for name, radius in zip(CORNER_NAMES, spec.radii):
        if 2.0 * abs(radius) > smaller:
            emit_diagnostic(
                metadata,
                f"{name} corner radius {abs(radius):g} is larger than half the smaller side ({smaller / 2.0:g}); "
                "the outline may self-intersect",
            )


def rounded_rectangle(
    size: SizeLike,
    radii: RadiiLike = 0.0,
    center: bool = False,
    tessellation: Tessellation | None = None,
) -> Profile2D:
    """Rectangle outline with per-corner fillets, as a closed counter-clockwise profile.

    The straight edges come from the convex hull of the four corner centres
    together with each corner's fillet piece, so edges meet the arcs
    tangentially. Negative radii are coved afterwards by cutting a disc out of
    the sharp corner.
    """

    CrossSection = _load_cross_section()

    spec = size if isinstance(size, RectangleSpec) else RectangleSpec.of(size, radii, center)
    metadata: dict[str, object] = {}
    _check_radii(spec, metadata)

    anchors = spec.anchors()
    points = [anchors]
    for anchor, radius, rotation in zip(anchors, spec.radii, _CORNER_ROTATIONS):
        piece = fillet_profile(radius, tessellation)
        if piece.size:
            points.append(_rotate2d(piece, rotation) + anchor)
    outline = CrossSection.hull_points(np.vstack(points).astype(np.float64))

    counts = []
    for corner, radius in zip(spec.corners(), spec.radii):
        if radius == 0:
            counts.append(0)
            continue
        segments = resolution(abs(radius), 360.0, tessellation, multiple_of=4)
        counts.append(segments)
        if radius < 0:
            cove = CrossSection.circle(abs(radius), segments).translate(tuple(corner))
            outline = outline - cove
    metadata["resolution"] = counts

    polygons = [np.asarray(poly, dtype=float) for poly in outline.to_polygons()]
    polygons = [poly for poly in polygons if poly.shape[0] >= 3]
    if not polygons:
        raise InvalidParameterError("radii", spec.radii, "leave nothing of the rectangle")
    polygons.sort(key=lambda poly: abs(signed_area(poly)), reverse=True)
    if len(polygons) > 1:
        emit_diagnostic(metadata, f"coved corners split the outline into {len(polygons)} pieces; keeping the largest")
    outer = polygons[0]
    if signed_area(outer) < 0:
        outer = outer[::-1]
    if spec.center:
        outer = outer - np.array(spec.size) / 2.0

    metadata["size"] = spec.size
    metadata["radii"] = spec.radii
    return Profile2D.from_points(outer, **metadata)


__all__ = ["CORNER_NAMES", "RectangleSpec", "rounded_rectangle"]

from __future__ import annotations

import logging
from typing import Iterable, Literal

import numpy as np

from filletkit.mesh import Mesh, combine_meshes
from filletkit.validation import DIAGNOSTICS_KEY, emit_diagnostic

logger = logging.getLogger(__name__)

BooleanBackend = Literal["manifold"]


class ManifoldRejectedError(ValueError):
    """manifold3d refused a mesh (open, non-manifold or self-intersecting)."""


def _load_manifold():
    try:
        from manifold3d import Manifold, Mesh as ManifoldMesh
    except ImportError as exc:  # pragma: no cover - runtime dependency
        raise ImportError("manifold3d is required for boolean operations.") from exc
    return Manifold, ManifoldMesh


def to_manifold(mesh: Mesh):
    """Convert a :class:`Mesh` to a ``manifold3d.Manifold``.

    Raises :class:`ManifoldRejectedError` when the mesh has faces but manifold3d
    cannot build a valid solid from them.
    """

    Manifold, ManifoldMesh = _load_manifold()
    vertices = np.asarray(mesh.vertices, dtype=np.float32)
    faces = np.asarray(mesh.faces, dtype=np.uint32)
    try:
        manifold_mesh = ManifoldMesh(vertices, faces)
    except TypeError:
        manifold_mesh = ManifoldMesh(vert_properties=vertices, tri_verts=faces)
    manifold = Manifold(manifold_mesh)
    if mesh.n_faces and manifold.is_empty():
        status = manifold.status() if hasattr(manifold, "status") else "unknown"
        raise ManifoldRejectedError(f"manifold3d rejected a mesh with {mesh.n_faces} faces ({status})")
    return manifold


def from_manifold(manifold, color: tuple[float, float, float, float] | None = None) -> Mesh:
    mesh = manifold.to_mesh() if hasattr(manifold, "to_mesh") else manifold.mesh
    vertices = np.asarray(getattr(mesh, "vert_properties", None), dtype=float)
    faces = np.asarray(getattr(mesh, "tri_verts", None), dtype=int)
    if vertices.ndim != 2 or vertices.shape[0] == 0:
        return Mesh.empty()
    return Mesh(vertices[:, :3], faces, color=color)


def _first_color(meshes: list[Mesh]):
    for mesh in meshes:
        if mesh.color is not None:
            return mesh.color
    return None


def _carry_diagnostics(result: Mesh, sources: list[Mesh]) -> Mesh:
    notes: list[str] = []
    for mesh in sources:
        notes.extend(mesh.metadata.get(DIAGNOSTICS_KEY, []))
    notes.extend(result.metadata.get(DIAGNOSTICS_KEY, []))
    if notes:
        result.metadata[DIAGNOSTICS_KEY] = notes
    return result


def _convert_all(meshes: list[Mesh], metadata: dict[str, object], operation: str) -> list:
    converted = []
    for index, mesh in enumerate(meshes):
        try:
            converted.append(to_manifold(mesh))
        except ManifoldRejectedError as exc:
            emit_diagnostic(metadata, f"{operation}: operand {index} skipped, {exc}")
            converted.append(None)
    return converted


def boolean_union(meshes: Iterable[Mesh], backend: BooleanBackend = "manifold") -> Mesh:
    """Union of closed meshes.

    If manifold3d rejects any operand, the result degrades to a plain
    concatenation of every input and a diagnostic is recorded.
    """

    _ensure_backend(backend)
    sources = list(meshes)
    if not sources:
        raise ValueError("boolean_union requires at least one mesh.")

    metadata: dict[str, object] = {}
    converted = _convert_all(sources, metadata, "union")
    if any(item is None for item in converted):
        emit_diagnostic(metadata, "union fell back to concatenation; the result may not be watertight")
        result = combine_meshes(sources)
        result.metadata.setdefault(DIAGNOSTICS_KEY, []).extend(metadata[DIAGNOSTICS_KEY])  # type: ignore[union-attr]
        return result

    solid = converted[0]
    for other in converted[1:]:
        solid = solid + other
    result = from_manifold(solid, color=_first_color(sources))
    logger.debug("union of %d meshes -> %d faces", len(sources), result.n_faces)
    return _carry_diagnostics(result, sources)


def boolean_difference(
    base: Mesh,
    cutters: Iterable[Mesh],
    backend: BooleanBackend = "manifold",
) -> Mesh:
    _ensure_backend(backend)
    cutter_list = list(cutters)
    metadata: dict[str, object] = {}
    converted = _convert_all([base] + cutter_list, metadata, "difference")
    if converted[0] is None:
        result = base.copy()
        result.metadata.setdefault(DIAGNOSTICS_KEY, []).extend(metadata[DIAGNOSTICS_KEY])  # type: ignore[union-attr]
        return result

    solid = converted[0]
    for other in converted[1:]:
        if other is not None:
            solid = solid - other
    result = from_manifold(solid, color=base.color)
    result.metadata.update(metadata)
    logger.debug("difference with %d cutters -> %d faces", len(cutter_list), result.n_faces)
    return _carry_diagnostics(result, [base] + cutter_list)


def boolean_intersection(meshes: Iterable[Mesh], backend: BooleanBackend = "manifold") -> Mesh:
    """Intersection of closed meshes; rejected operands are skipped with a diagnostic."""

    _ensure_backend(backend)
    sources = list(meshes)
    if not sources:
        raise ValueError("boolean_intersection requires at least one mesh.")

    metadata: dict[str, object] = {}
    usable = [item for item in _convert_all(sources, metadata, "intersection") if item is not None]
    if not usable:
        result = Mesh.empty()
        result.metadata.update(metadata)
        return result

    solid = usable[0]
    for other in usable[1:]:
        solid = solid ^ other
    result = from_manifold(solid, color=_first_color(sources))
    result.metadata.update(metadata)
    logger.debug("intersection of %d meshes -> %d faces", len(usable), result.n_faces)
    return _carry_diagnostics(result, sources)


def _ensure_backend(backend: BooleanBackend) -> None:
    if backend != "manifold":
        raise ValueError(f"Unsupported backend '{backend}'. Only 'manifold' is available at the moment.")


__all__ = [
    "BooleanBackend",
    "ManifoldRejectedError",
    "boolean_difference",
    "boolean_intersection",
    "boolean_union",
    "from_manifold",
    "to_manifold",
]

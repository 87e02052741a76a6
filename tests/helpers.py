from __future__ import annotations

import pyvista as pv

from filletkit.mesh import Mesh, mesh_to_pyvista


def _as_polydata(mesh: pv.DataSet | Mesh) -> pv.DataSet:
    return mesh_to_pyvista(mesh) if isinstance(mesh, Mesh) else mesh


def is_watertight(mesh: pv.DataSet | Mesh) -> tuple[bool, int]:
    edges = _as_polydata(mesh).extract_feature_edges(
        boundary_edges=True, feature_edges=False, non_manifold_edges=True, manifold_edges=False
    )
    open_edges = edges.n_cells
    return open_edges == 0, open_edges


def mesh_volume(mesh: pv.DataSet | Mesh) -> float | None:
    vol = getattr(_as_polydata(mesh), 'volume', None)
    try:
        return float(vol) if vol is not None else None
    except Exception:
        return None

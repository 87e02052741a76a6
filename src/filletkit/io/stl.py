from __future__ import annotations

from pathlib import Path

import numpy as np

from filletkit.mesh import Mesh

_HEADER = b"filletkit STL"

_BINARY_FACET = np.dtype(
    [
        ("normal", "<f4", (3,)),
        ("vertices", "<f4", (3, 3)),
        ("attributes", "<u2"),
    ]
)


def _face_normals(mesh: Mesh) -> np.ndarray:
    if mesh.n_faces == 0:
        return np.zeros((0, 3), dtype=float)
    v0 = mesh.vertices[mesh.faces[:, 0]]
    v1 = mesh.vertices[mesh.faces[:, 1]]
    v2 = mesh.vertices[mesh.faces[:, 2]]
    normals = np.cross(v1 - v0, v2 - v0)
    lengths = np.linalg.norm(normals, axis=1)
    with np.errstate(invalid="ignore", divide="ignore"):
        normals = np.divide(
            normals,
            lengths[:, np.newaxis],
            out=np.zeros_like(normals),
            where=lengths[:, np.newaxis] > 0,
        )
    normals[~np.isfinite(normals)] = 0.0
    return normals


def write_stl(mesh: Mesh, path: Path, ascii: bool = False) -> Path:
    """Write ``mesh`` as binary (default) or ASCII STL and return the path."""

    path = Path(path)
    normals = _face_normals(mesh)
    triangles = mesh.vertices[mesh.faces] if mesh.n_faces else np.zeros((0, 3, 3), dtype=float)

    if ascii:
        lines = ["solid filletkit"]
        for normal, tri in zip(normals, triangles):
            nx, ny, nz = normal
            lines.append(f"  facet normal {nx:.6e} {ny:.6e} {nz:.6e}")
            lines.append("    outer loop")
            for vx, vy, vz in tri:
                lines.append(f"      vertex {vx:.6e} {vy:.6e} {vz:.6e}")
            lines.append("    endloop")
            lines.append("  endfacet")
        lines.append("endsolid filletkit")
        path.write_text("\n".join(lines) + "\n")
        return path

    records = np.zeros(mesh.n_faces, dtype=_BINARY_FACET)
    records["normal"] = normals
    records["vertices"] = triangles
    with path.open("wb") as handle:
        handle.write(_HEADER.ljust(80, b"\0"))
        handle.write(np.uint32(mesh.n_faces).tobytes())
        handle.write(records.tobytes())
    return path


__all__ = ["write_stl"]

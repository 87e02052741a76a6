from __future__ import annotations

from dataclasses import dataclass, field
from typing import Iterable, Sequence

import numpy as np


@dataclass
class MeshAnalysis:
    n_vertices: int
    n_faces: int
    degenerate_faces: int
    boundary_edges: int
    nonmanifold_edges: int
    invalid_vertices: int

    @property
    def is_manifold(self) -> bool:
        return self.nonmanifold_edges == 0

    @property
    def is_watertight(self) -> bool:
        return self.boundary_edges == 0 and self.is_manifold

    @property
    def has_degenerate_faces(self) -> bool:
        return self.degenerate_faces > 0

    @property
    def has_invalid_vertices(self) -> bool:
        return self.invalid_vertices > 0

    def issues(self) -> list[str]:
        issues: list[str] = []
        if self.has_invalid_vertices:
            issues.append(f"{self.invalid_vertices} invalid vertices (NaN/inf)")
        if self.has_degenerate_faces:
            issues.append(f"{self.degenerate_faces} degenerate faces")
        if self.boundary_edges > 0:
            issues.append(f"{self.boundary_edges} boundary edges (not watertight)")
        if self.nonmanifold_edges > 0:
            issues.append(f"{self.nonmanifold_edges} non-manifold edges")
        return issues


@dataclass
class Mesh:
    """Triangle mesh: the solid every builder hands back."""

    vertices: np.ndarray
    faces: np.ndarray
    color: tuple[float, float, float, float] | None = None
    metadata: dict[str, object] = field(default_factory=dict)
    analysis: MeshAnalysis | None = None

    def __post_init__(self) -> None:
        self.vertices = np.asarray(self.vertices, dtype=float).reshape(-1, 3).copy()
        self.faces = np.asarray(self.faces, dtype=int).reshape(-1, 3).copy()
        if self.color is not None and len(self.color) == 3:
            self.color = (self.color[0], self.color[1], self.color[2], 1.0)

    @classmethod
    def empty(cls) -> "Mesh":
        return cls(np.zeros((0, 3), dtype=float), np.zeros((0, 3), dtype=int))

    def copy(self) -> "Mesh":
        return Mesh(
            vertices=self.vertices.copy(),
            faces=self.faces.copy(),
            color=self.color,
            metadata={key: (list(value) if isinstance(value, list) else value) for key, value in self.metadata.items()},
            analysis=self.analysis,
        )

    @property
    def n_vertices(self) -> int:
        return int(self.vertices.shape[0])

    @property
    def n_faces(self) -> int:
        return int(self.faces.shape[0])

    @property
    def bounds(self) -> tuple[float, float, float, float, float, float]:
        if self.n_vertices == 0:
            return (0.0, 0.0, 0.0, 0.0, 0.0, 0.0)
        used = self.vertices[np.unique(self.faces)] if self.n_faces else self.vertices
        mins = used.min(axis=0)
        maxs = used.max(axis=0)
        return (float(mins[0]), float(maxs[0]), float(mins[1]), float(maxs[1]), float(mins[2]), float(maxs[2]))

    @property
    def volume(self) -> float:
        """Signed enclosed volume; positive for a closed mesh with outward normals."""

        if self.n_faces == 0:
            return 0.0
        v0 = self.vertices[self.faces[:, 0]]
        v1 = self.vertices[self.faces[:, 1]]
        v2 = self.vertices[self.faces[:, 2]]
        return float(np.einsum("ij,ij->i", v0, np.cross(v1, v2)).sum() / 6.0)

    def transform(self, matrix: np.ndarray, inplace: bool = True) -> "Mesh":
        matrix = np.asarray(matrix, dtype=float).reshape(4, 4)
        verts = np.hstack([self.vertices, np.ones((self.n_vertices, 1), dtype=float)])
        transformed = (matrix @ verts.T).T[:, :3]
        mesh = self if inplace else self.copy()
        mesh.vertices = transformed
        if np.linalg.det(matrix[:3, :3]) < 0:
            # mirroring turns the surface inside out
            mesh.faces = mesh.faces[:, [0, 2, 1]]
        mesh.analysis = None
        return mesh

    def translate(self, offset: Sequence[float], inplace: bool = True) -> "Mesh":
        vec = np.asarray(offset, dtype=float).reshape(3)
        mesh = self if inplace else self.copy()
        mesh.vertices = mesh.vertices + vec
        return mesh

    def rotate_vector(
        self,
        axis: Sequence[float],
        angle_deg: float,
        point: Sequence[float] = (0.0, 0.0, 0.0),
        inplace: bool = True,
    ) -> "Mesh":
        rot = rotation_matrix(axis, angle_deg)
        origin = np.asarray(point, dtype=float).reshape(3)
        mesh = self if inplace else self.copy()
        mesh.vertices = (rot @ (mesh.vertices - origin).T).T + origin
        return mesh

    def compact(self, inplace: bool = True) -> "Mesh":
        """Drop collapsed triangles and vertices no triangle references."""

        mesh = self if inplace else self.copy()
        faces = mesh.faces
        if faces.size:
            keep = (faces[:, 0] != faces[:, 1]) & (faces[:, 1] != faces[:, 2]) & (faces[:, 2] != faces[:, 0])
            faces = faces[keep]
        used = np.unique(faces)
        remap = np.full(mesh.n_vertices, -1, dtype=int)
        remap[used] = np.arange(used.size)
        mesh.vertices = mesh.vertices[used]
        mesh.faces = remap[faces].reshape(-1, 3)
        mesh.analysis = None
        return mesh


def rotation_matrix(axis: Sequence[float], angle_deg: float) -> np.ndarray:
    """3x3 right-handed rotation about ``axis``."""

    axis_vec = np.asarray(axis, dtype=float).reshape(3)
    norm = np.linalg.norm(axis_vec)
    if norm == 0:
        raise ValueError("Rotation axis must be non-zero.")
    x, y, z = axis_vec / norm
    angle_rad = np.deg2rad(angle_deg)
    c = np.cos(angle_rad)
    s = np.sin(angle_rad)
    C = 1.0 - c
    return np.array(
        [
            [x * x * C + c, x * y * C - z * s, x * z * C + y * s],
            [y * x * C + z * s, y * y * C + c, y * z * C - x * s],
            [z * x * C - y * s, z * y * C + x * s, z * z * C + c],
        ],
        dtype=float,
    )


def combine_meshes(meshes: Iterable[Mesh]) -> Mesh:
    """Concatenate meshes without any boolean work."""

    meshes_list = list(meshes)
    if not meshes_list:
        raise ValueError("combine_meshes requires at least one mesh.")

    vertices = []
    faces = []
    color = None
    diagnostics: list[str] = []
    offset = 0
    for mesh in meshes_list:
        vertices.append(mesh.vertices)
        faces.append(mesh.faces + offset)
        offset += mesh.n_vertices
        if color is None and mesh.color is not None:
            color = mesh.color
        diagnostics.extend(mesh.metadata.get("diagnostics", []))

    combined = Mesh(vertices=np.vstack(vertices), faces=np.vstack(faces), color=color)
    if diagnostics:
        combined.metadata["diagnostics"] = diagnostics
    return combined


def analyze_mesh(mesh: Mesh, area_epsilon: float = 1e-12) -> MeshAnalysis:
    verts = mesh.vertices
    faces = mesh.faces
    invalid_vertices = int(np.count_nonzero(~np.isfinite(verts)))

    degenerate_faces = 0
    boundary_edges = 0
    nonmanifold_edges = 0
    if faces.size > 0:
        v0 = verts[faces[:, 0]]
        v1 = verts[faces[:, 1]]
        v2 = verts[faces[:, 2]]
        areas = np.linalg.norm(np.cross(v1 - v0, v2 - v0), axis=1) * 0.5
        degenerate_faces = int(np.count_nonzero(areas <= area_epsilon))

        edges = np.vstack([faces[:, [0, 1]], faces[:, [1, 2]], faces[:, [2, 0]]])
        edges = np.sort(edges, axis=1)
        _, counts = np.unique(edges, axis=0, return_counts=True)
        boundary_edges = int(np.count_nonzero(counts == 1))
        nonmanifold_edges = int(np.count_nonzero(counts > 2))

    analysis = MeshAnalysis(
        n_vertices=mesh.n_vertices,
        n_faces=mesh.n_faces,
        degenerate_faces=degenerate_faces,
        boundary_edges=boundary_edges,
        nonmanifold_edges=nonmanifold_edges,
        invalid_vertices=invalid_vertices,
    )
    mesh.analysis = analysis
    return analysis


def mesh_to_pyvista(mesh: Mesh):
    import pyvista as pv

    if mesh.n_faces == 0:
        return pv.PolyData(mesh.vertices, deep=True)
    faces = np.hstack([np.full((mesh.n_faces, 1), 3, dtype=np.int64), mesh.faces.astype(np.int64)]).ravel()
    return pv.PolyData(mesh.vertices, faces, deep=True)

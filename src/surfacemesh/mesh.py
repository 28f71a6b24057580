"""The renderable mesh value produced by every primitive builder."""

from __future__ import annotations

from dataclasses import dataclass
from math import isfinite
from typing import Iterator, Tuple

from surfacemesh.errors import MeshError
from surfacemesh.geom import cross, normalize, sub
from surfacemesh.xform import Matrix

Vec2 = Tuple[float, float]
Vec3 = Tuple[float, float, float]
Vec4 = Tuple[float, float, float, float]
Mat4 = Tuple[Vec4, Vec4, Vec4, Vec4]

IDENTITY: Mat4 = Matrix().as_tuple()


def _clamp01(x: float) -> float:
    return min(1.0, max(0.0, float(x)))


@dataclass(frozen=True)
class RenderableMesh:
    """Immutable triangle mesh handed to a graphics backend.

    ``vertices`` and ``normals`` are expressed in local mesh space and
    ``model`` maps that space to world space.  ``indices`` is a flat
    triangle list.  ``params`` carries four shape-specific values for the
    shading stage and is passed through untouched.
    """

    kind: str
    vertices: Tuple[Vec3, ...]
    indices: Tuple[int, ...]
    normals: Tuple[Vec3, ...] = ()
    uvs: Tuple[Vec2, ...] = ()
    model: Mat4 = IDENTITY
    params: Vec4 = (0.0, 0.0, 0.0, 0.0)
    color: Vec4 = (1.0, 1.0, 1.0, 1.0)
    convex: bool = True

    def __post_init__(self) -> None:
        object.__setattr__(self, "vertices", tuple(tuple(float(c) for c in v) for v in self.vertices))
        object.__setattr__(self, "normals", tuple(tuple(float(c) for c in n) for n in self.normals))
        object.__setattr__(self, "uvs", tuple(tuple(float(c) for c in uv) for uv in self.uvs))
        object.__setattr__(self, "indices", tuple(int(i) for i in self.indices))
        object.__setattr__(self, "params", tuple(float(p) for p in self.params))
        object.__setattr__(self, "color", tuple(_clamp01(c) for c in self.color))
        object.__setattr__(self, "model", Matrix(self.model).as_tuple())
        object.__setattr__(self, "convex", bool(self.convex))
        self._validate()

    def _validate(self) -> None:
        count = len(self.vertices)
        if any(len(v) != 3 for v in self.vertices):
            raise MeshError("vertices must be 3 component positions")
        if len(self.indices) % 3 != 0:
            raise MeshError(f"index count {len(self.indices)} is not a multiple of 3")
        for i in self.indices:
            if i < 0 or i >= count:
                raise MeshError(f"index {i} out of range for {count} vertices")
        if self.normals and len(self.normals) != count:
            raise MeshError("normals must match vertices one to one")
        if self.uvs and len(self.uvs) != count:
            raise MeshError("uvs must match vertices one to one")
        if len(self.params) != 4:
            raise MeshError("params must have four components")
        if len(self.color) != 4:
            raise MeshError("color must have four RGBA components")
        if not Matrix(self.model).is_invertible3():
            raise MeshError("model transform has a singular 3x3 block")
        if not all(isfinite(c) for v in self.vertices for c in v):
            raise MeshError("vertices must be finite")

    @property
    def element_count(self) -> int:
        """Number of indices to draw."""
        return len(self.indices)

    @property
    def vertex_count(self) -> int:
        return len(self.vertices)

    @property
    def triangle_count(self) -> int:
        return len(self.indices) // 3

    def model_matrix(self) -> Matrix:
        return Matrix(self.model)

    def world_vertices(self) -> Tuple[Vec3, ...]:
        """Vertex positions transformed by ``model``."""
        m = self.model_matrix()
        return tuple(m.mul(v) for v in self.vertices)

    def world_normals(self) -> Tuple[Vec3, ...]:
        """Normals rotated into world space.

        Builders emit rigid model transforms, so the 3x3 block rotates
        normals directly.  Results are renormalized.
        """
        m = self.model_matrix()
        return tuple(normalize(m.mul(n, direction=True)) for n in self.normals)

    def triangles(self) -> Iterator[Tuple[int, int, int]]:
        """Yield index triples."""
        idx = self.indices
        for k in range(0, len(idx), 3):
            yield idx[k], idx[k + 1], idx[k + 2]

    def triangle_normals(self) -> Iterator[Vec3]:
        """Yield the unit geometric normal of each triangle in local space.

        Degenerate triangles yield the zero vector.
        """
        verts = self.vertices
        for a, b, c in self.triangles():
            yield normalize(cross(sub(verts[b], verts[a]), sub(verts[c], verts[a])))

    def bbox(self) -> Tuple[Vec3, Vec3]:
        """World space axis-aligned bounding box ``(min, max)``."""
        pts = self.world_vertices()
        if not pts:
            return (0.0, 0.0, 0.0), (0.0, 0.0, 0.0)
        lo = tuple(min(p[i] for p in pts) for i in range(3))
        hi = tuple(max(p[i] for p in pts) for i in range(3))
        return lo, hi

    def as_arrays(self):
        """Return numpy buffers ``(vertices, indices)`` for a graphics backend.

        The vertex buffer is ``float32`` with one row per vertex laid out
        as ``x, y, z`` followed by ``u, v`` when texture coordinates are
        present.  The index buffer is ``uint32``.
        """
        import numpy as np

        verts = np.asarray(self.vertices, dtype=np.float32).reshape(-1, 3)
        if self.uvs:
            uvs = np.asarray(self.uvs, dtype=np.float32).reshape(-1, 2)
            verts = np.hstack([verts, uvs])
        indices = np.asarray(self.indices, dtype=np.uint32)
        return verts, indices


__all__ = [
    "Vec2",
    "Vec3",
    "Vec4",
    "Mat4",
    "IDENTITY",
    "RenderableMesh",
]

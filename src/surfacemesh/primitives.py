## parametric primitive tessellation for surfacemesh

"""
=============================
Primitive mesh builders
=============================

One pure function per shape family.  Each builder lays its surface out
in a local frame (origin and orthonormal axes from ``geom.frame``), emits
positions, unit normals, texture coordinates and a triangle list for the
convex-facing surface, wraps them in a ``RenderableMesh`` whose ``model``
is the rigid local-to-world transform, and passes the result through
``apply_convexity``.

Tessellation is fixed per ``MeshSettings``.  Vertex and index counts:

============  ======================  =====================
shape         vertices                indices
============  ======================  =====================
plane         4                       6
sphere        (S + 1) * (K + 1)       6 * S * (K - 1)
cone          (S + 1) * (H + 1)       6 * S * H
torus         (S + 1) * (K + 1)       6 * S * K
============  ======================  =====================

Degenerate parameters (non-positive radii, coincident points) collapse
the geometry but keep the topology; they are never reported as errors.
"""

from __future__ import annotations

import logging
from math import cos, isfinite, pi, sin
from typing import Callable, List, Optional, Tuple

from surfacemesh.convexity import apply_convexity
from surfacemesh.geom import (
    XAXIS,
    YAXIS,
    ZAXIS,
    cross,
    dist,
    epsilon,
    frame,
    iszero,
    mag,
    normalize,
    pi2,
    sub,
    to_local,
    vec3,
    vstr,
)
from surfacemesh.mesh import RenderableMesh, Vec2, Vec3
from surfacemesh.settings import DEFAULT_SETTINGS, MeshSettings
from surfacemesh.xform import Frame

logger = logging.getLogger(__name__)

GridPoint = Tuple[Vec3, Vec3]


def _resolve(settings: Optional[MeshSettings]) -> MeshSettings:
    return DEFAULT_SETTINGS if settings is None else settings


def _resolve_color(kind: str, color, settings: MeshSettings):
    if color is None:
        return settings.color_for(kind)
    if len(color) != 4:
        raise ValueError("color must have four RGBA components")
    return tuple(color)


def _nonnegative(name: str, value: float) -> float:
    value = float(value)
    if value < 0.0:
        logger.debug("negative %s %g clamped to 0", name, value)
        return 0.0
    return value


def _finish(kind, verts, normals, uvs, indices, fr, origin, params, color,
            settings, is_convex) -> RenderableMesh:
    tangent, bitangent, normal = fr
    mesh = RenderableMesh(
        kind=kind,
        vertices=verts,
        indices=indices,
        normals=normals,
        uvs=uvs,
        model=Frame(origin, tangent, bitangent, normal).as_tuple(),
        params=params,
        color=_resolve_color(kind, color, settings),
        convex=True,
    )
    return apply_convexity(mesh, is_convex)


## grid helpers
## ------------

def _sample_grid(cols: int, rows: int,
                 fn: Callable[[int, int], GridPoint]
                 ) -> Tuple[List[Vec3], List[Vec3], List[Vec2]]:
    """Evaluate ``fn(i, j)`` over a ``(cols + 1) x (rows + 1)`` grid.

    Vertex ``(i, j)`` is stored at ``j * (cols + 1) + i``.  The first and
    last column coincide on closed surfaces; both are kept so texture
    coordinates stay continuous across the seam.
    """
    verts: List[Vec3] = []
    normals: List[Vec3] = []
    uvs: List[Vec2] = []
    for j in range(rows + 1):
        for i in range(cols + 1):
            p, n = fn(i, j)
            verts.append(p)
            normals.append(n)
            uvs.append((i / cols, j / rows))
    return verts, normals, uvs


def _grid_indices(cols: int, rows: int, *, pole_rows: bool = False) -> List[int]:
    """Triangle list for a ``cols x rows`` quad grid.

    Triangles wind counter-clockwise around ``dP/du x dP/dv``.  With
    ``pole_rows`` the first row and last row are assumed to collapse onto
    a single point, and only the non-degenerate triangle of each quad in
    those rows is emitted.
    """
    stride = cols + 1
    indices: List[int] = []
    for j in range(rows):
        for i in range(cols):
            p00 = j * stride + i
            p10 = p00 + 1
            p01 = p00 + stride
            p11 = p01 + 1
            if not (pole_rows and j == 0):
                indices.extend((p00, p10, p11))
            if not (pole_rows and j == rows - 1):
                indices.extend((p00, p11, p01))
    return indices


## plane
## -----

def _span_normal(e1: Vec3, e2: Vec3) -> Optional[Vec3]:
    """Unit normal of the plane spanned by ``e1`` and ``e2``, or None.

    The edges count as parallel when the sine of their angle is below
    ``epsilon``, so the test does not depend on the size of the quad.
    """
    c = cross(e1, e2)
    area = mag(c)
    if area == 0.0 or area <= epsilon * mag(e1) * mag(e2):
        return None
    return (c[0] / area, c[1] / area, c[2] / area)


def build_plane(ll, lr, ur, ul, is_convex: bool = True, *,
                color=None, settings: Optional[MeshSettings] = None) -> RenderableMesh:
    """Build a quad from four corners given in order lower-left,
    lower-right, upper-right, upper-left.

    The front face is the side from which the corners run counter
    clockwise.  Coincident or collinear corners produce a zero-area
    quad.
    """
    settings = _resolve(settings)
    corners = [vec3(ll), vec3(lr), vec3(ur), vec3(ul)]
    p0, p1, p2, p3 = corners

    n = _span_normal(sub(p1, p0), sub(p3, p0))
    if n is None:
        # diagonals still span the plane when one edge collapses
        n = _span_normal(sub(p2, p0), sub(p3, p1))
    if n is None:
        logger.debug("degenerate plane corners %s", ", ".join(vstr(c) for c in corners))
        n = ZAXIS
    fr = frame(n, right=sub(p1, p0))

    verts = [to_local(c, p0, *fr) for c in corners]
    normals = [ZAXIS] * 4
    uvs = [(0.0, 0.0), (1.0, 0.0), (1.0, 1.0), (0.0, 1.0)]
    indices = [0, 1, 2, 0, 2, 3]
    params = (dist(p0, p1), dist(p0, p3), 0.0, 0.0)
    return _finish("plane", verts, normals, uvs, indices, fr, p0, params,
                   color, settings, is_convex)


## sphere
## ------

def build_sphere(center, radius: float, is_convex: bool = True, *,
                 color=None, settings: Optional[MeshSettings] = None) -> RenderableMesh:
    """
    Build a latitude/longitude sphere.
        ``center`` -- sphere center
        ``radius`` -- sphere radius; zero or negative collapses every
        vertex onto the center

    returns a ``RenderableMesh`` whose model is a pure translation
    """
    settings = _resolve(settings)
    c = vec3(center)
    r = _nonnegative("sphere radius", radius)
    slices = settings.sphere_slices
    stacks = settings.sphere_stacks

    def point(i, j):
        lon = pi2 * i / slices
        if j == 0:
            n = (0.0, 0.0, -1.0)
        elif j == stacks:
            n = (0.0, 0.0, 1.0)
        else:
            lat = -pi / 2.0 + pi * j / stacks
            n = (cos(lat) * cos(lon), cos(lat) * sin(lon), sin(lat))
        return (n[0] * r, n[1] * r, n[2] * r), n

    verts, normals, uvs = _sample_grid(slices, stacks, point)
    indices = _grid_indices(slices, stacks, pole_rows=True)
    fr = (XAXIS, YAXIS, ZAXIS)
    return _finish("sphere", verts, normals, uvs, indices, fr, c,
                   (r, 0.0, 0.0, 0.0), color, settings, is_convex)


## cylinder and cone
## -----------------

def _frustum(kind, top, bottom, top_radius, bottom_radius, is_convex,
             color, settings) -> RenderableMesh:
    settings = _resolve(settings)
    t = vec3(top)
    b = vec3(bottom)
    rt = _nonnegative("top radius", top_radius)
    rb = _nonnegative("bottom radius", bottom_radius)
    axis = sub(t, b)
    height = mag(axis)
    fr = frame(axis)
    if iszero(normalize(axis)):
        logger.debug("%s with coincident top and bottom at %s", kind, vstr(b))
        height = 0.0

    segments = settings.radial_segments
    rows = settings.height_segments
    dr = rb - rt

    def point(i, j):
        ang = pi2 * i / segments
        ca, sa = cos(ang), sin(ang)
        v = j / rows
        r = rb + (rt - rb) * v
        n = normalize((height * ca, height * sa, dr))
        if iszero(n):
            n = (ca, sa, 0.0)
        return (r * ca, r * sa, height * v), n

    verts, normals, uvs = _sample_grid(segments, rows, point)
    indices = _grid_indices(segments, rows)
    params = (rb, rt, height, 0.0)
    return _finish(kind, verts, normals, uvs, indices, fr, b, params,
                   color, settings, is_convex)


def build_cylinder(top, bottom, radius: float, is_convex: bool = True, *,
                   color=None, settings: Optional[MeshSettings] = None) -> RenderableMesh:
    """Build the open lateral surface of a cylinder.

    The local frame has its origin at ``bottom`` and +Z toward ``top``.
    When ``top == bottom`` the tube flattens into a ring in the world XY
    plane through ``bottom``.
    """
    return _frustum("cylinder", top, bottom, radius, radius, is_convex, color, settings)


def build_cone(top, bottom, top_radius: float, bottom_radius: float,
               is_convex: bool = True, *,
               color=None, settings: Optional[MeshSettings] = None) -> RenderableMesh:
    """Build the open lateral surface of a cone or frustum.

    Parameters
    ----------
    top, bottom : point
        Centers of the top and bottom circles.
    top_radius, bottom_radius : float
        Circle radii.  A zero ``top_radius`` gives a true cone with its
        apex at ``top``; both zero collapse the mesh onto the axis
        segment.
    is_convex : bool
        Orientation policy, see ``surfacemesh.convexity``.

    Returns
    -------
    RenderableMesh
        ``params`` is ``(bottom_radius, top_radius, height, 0)``.
    """
    return _frustum("cone", top, bottom, top_radius, bottom_radius, is_convex, color, settings)


## torus
## -----

def _ellipse_axes(mean_radius: float, ratio: float) -> Tuple[float, float]:
    # semi-axes whose average is the mean radius
    a = 2.0 * mean_radius / (1.0 + ratio)
    return a, a * ratio


def _torus(kind, center, axis, right, mean_radius, tube_radius, ratio,
           is_convex, color, settings) -> RenderableMesh:
    settings = _resolve(settings)
    c = vec3(center)
    big_r = _nonnegative("mean radius", mean_radius)
    small_r = _nonnegative("tube radius", tube_radius)
    a, b = _ellipse_axes(big_r, ratio)
    fr = frame(axis, right=right)

    major = settings.torus_major_segments
    minor = settings.torus_minor_segments

    def point(i, j):
        u = pi2 * i / major
        v = pi2 * j / minor
        cu, su = cos(u), sin(u)
        cv, sv = cos(v), sin(v)
        # outward in-plane normal of the ellipse (a cos u, b sin u)
        ring_n = normalize((b * cu, a * su, 0.0))
        if iszero(ring_n):
            ring_n = (cu, su, 0.0)
        n = (cv * ring_n[0], cv * ring_n[1], sv)
        p = (a * cu + small_r * n[0],
             b * su + small_r * n[1],
             small_r * n[2])
        return p, n

    verts, normals, uvs = _sample_grid(major, minor, point)
    indices = _grid_indices(major, minor)
    params = (big_r, small_r, ratio, 0.0)
    return _finish(kind, verts, normals, uvs, indices, fr, c, params,
                   color, settings, is_convex)


def build_torus(center, axis, mean_radius: float, tube_radius: float,
                is_convex: bool = True, *, right=None,
                color=None, settings: Optional[MeshSettings] = None) -> RenderableMesh:
    """Build a circular torus.

    ``axis`` is the rotation axis through ``center``.  The optional
    ``right`` vector fixes where the major angle starts; without it a
    deterministic direction perpendicular to the axis is used.
    """
    return _torus("torus", center, axis, right, mean_radius, tube_radius, 1.0,
                  is_convex, color, settings)


def build_elliptical_torus(center, axis, right, mean_radius: float, tube_radius: float,
                           ratio: float, is_convex: bool = True, *,
                           color=None, settings: Optional[MeshSettings] = None) -> RenderableMesh:
    """Build a torus whose tube follows an ellipse.

    The ellipse lies in the plane spanned by ``right`` and
    ``axis x right``, with its major axis along ``right``.  ``ratio`` is
    minor over major; the semi-axes are chosen so their average equals
    ``mean_radius``, which makes ``ratio == 1`` identical to
    ``build_torus``.  The tube cross-section stays a circle of radius
    ``tube_radius``.

    A non-finite or negative ``ratio`` is replaced by 1.
    """
    ratio = float(ratio)
    if not isfinite(ratio) or ratio < 0.0:
        logger.debug("unusable torus ratio %r replaced by 1", ratio)
        ratio = 1.0
    return _torus("elliptical_torus", center, axis, right, mean_radius, tube_radius, ratio,
                  is_convex, color, settings)


def expected_counts(kind: str, settings: Optional[MeshSettings] = None) -> Tuple[int, int]:
    """Return ``(vertex_count, index_count)`` for a shape kind."""
    settings = _resolve(settings)
    if kind == "plane":
        return 4, 6
    if kind == "sphere":
        s, k = settings.sphere_slices, settings.sphere_stacks
        return (s + 1) * (k + 1), 6 * s * (k - 1)
    if kind in ("cylinder", "cone"):
        s, h = settings.radial_segments, settings.height_segments
        return (s + 1) * (h + 1), 6 * s * h
    if kind in ("torus", "elliptical_torus"):
        s, k = settings.torus_major_segments, settings.torus_minor_segments
        return (s + 1) * (k + 1), 6 * s * k
    raise ValueError(f"unknown shape kind: {kind!r}")


__all__ = [
    "build_plane",
    "build_sphere",
    "build_cylinder",
    "build_cone",
    "build_torus",
    "build_elliptical_torus",
    "expected_counts",
]

"""Convexity policy shared by all primitive builders.

A surface is *convex* when the viewer sees its outside: triangles wind
counter-clockwise when viewed from outside and normals point away from
the solid.  A *concave* surface (the inside of a bowl or tube) uses the
mirror topology: every triangle reversed and every normal negated, over
identical vertex positions.

Builders always construct the convex-facing mesh and hand it to
``apply_convexity`` just before returning, so the winding and normal
rules are defined in exactly one place.
"""

from __future__ import annotations

import logging
from dataclasses import replace

from surfacemesh.geom import add, dot, lerp, mag, neg, normalize, scale3, sub, vec3
from surfacemesh.mesh import RenderableMesh

logger = logging.getLogger(__name__)


def apply_convexity(mesh: RenderableMesh, is_convex: bool = True) -> RenderableMesh:
    """Return ``mesh`` oriented for the requested convexity.

    ``mesh`` must be convex-facing.  With ``is_convex`` true it is
    returned unchanged; otherwise a new mesh is built with each triangle
    ``(a, b, c)`` rewritten as ``(c, b, a)``, all normals negated, and
    ``convex`` cleared.
    """

    if is_convex:
        return mesh

    idx = mesh.indices
    flipped = []
    for k in range(0, len(idx), 3):
        flipped.extend((idx[k + 2], idx[k + 1], idx[k]))

    return replace(
        mesh,
        indices=tuple(flipped),
        normals=tuple(neg(n) for n in mesh.normals),
        convex=False,
    )


## viewpoint tests
## ---------------

def _convex_test_sphere(feature, ray_pos, point):
    base = sub(vec3(feature.center), ray_pos)
    base_length = mag(base)
    if base_length == 0.0:
        return True
    return (feature.radius < base_length
            and dot(sub(point, ray_pos), scale3(base, 1.0 / base_length)) < base_length)


def _convex_test_cylinder(feature, ray_pos, point):
    top = vec3(feature.top)
    bottom = vec3(feature.bottom)
    axis = normalize(sub(top, bottom))
    if mag(axis) == 0.0:
        return True
    center = lerp(bottom, top, 0.5)

    # foot of the viewer on the axis-parallel line through the hit point
    o = add(ray_pos, scale3(axis, dot(sub(point, ray_pos), axis)))
    base = sub(add(center, scale3(axis, dot(sub(point, center), axis))), o)
    base_length = mag(base)
    if base_length == 0.0:
        return True
    return (feature.radius < base_length
            and dot(sub(point, o), scale3(base, 1.0 / base_length)) < base_length)


def convex_test(feature, ray_position, hit_point) -> bool:
    """Decide whether ``feature`` is seen from outside.

    ``ray_position`` is the viewer (camera) position and ``hit_point`` the
    point on the surface that was picked.  Spheres and cylinders are
    convex when the viewer is outside the surface and the hit point lies
    on the near side of the center; every other shape is treated as
    convex.
    """

    ray_pos = vec3(ray_position)
    point = vec3(hit_point)
    kind = getattr(feature, "kind", None)
    if kind == "sphere":
        result = _convex_test_sphere(feature, ray_pos, point)
    elif kind == "cylinder":
        result = _convex_test_cylinder(feature, ray_pos, point)
    else:
        result = True
    logger.debug("convex test for %s: %s", kind, result)
    return result


__all__ = ["apply_convexity", "convex_test"]

"""Surface descriptors and the single mesh dispatch point.

A surface detector reports one of five feature kinds.  Each kind is a
frozen dataclass carrying exactly the parameters its builder needs;
``build_mesh`` turns any of them into a ``RenderableMesh``.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass
from math import isinf
from typing import Optional, Sequence, Union

from surfacemesh.estimator import TorusEllipseParams
from surfacemesh.geom import add, frame, scale3, sub, vec3
from surfacemesh.mesh import RenderableMesh, Vec3
from surfacemesh.primitives import (
    build_cone,
    build_cylinder,
    build_elliptical_torus,
    build_plane,
    build_sphere,
    build_torus,
)
from surfacemesh.settings import MeshSettings

logger = logging.getLogger(__name__)

# largest finite float32, reported by detectors for an unbounded radius
FLT_MAX = 3.4028234663852886e38


@dataclass(frozen=True)
class PlaneFeature:
    ll: Vec3
    lr: Vec3
    ur: Vec3
    ul: Vec3
    kind = "plane"


@dataclass(frozen=True)
class SphereFeature:
    center: Vec3
    radius: float
    kind = "sphere"


@dataclass(frozen=True)
class CylinderFeature:
    top: Vec3
    bottom: Vec3
    radius: float
    kind = "cylinder"


@dataclass(frozen=True)
class ConeFeature:
    top: Vec3
    bottom: Vec3
    top_radius: float
    bottom_radius: float
    kind = "cone"


@dataclass(frozen=True)
class TorusFeature:
    center: Vec3
    axis: Vec3
    mean_radius: float
    tube_radius: float
    kind = "torus"


Feature = Union[PlaneFeature, SphereFeature, CylinderFeature, ConeFeature, TorusFeature]


def reinterpret(feature: Feature) -> Feature:
    """Replace a feature by the simpler kind it degenerates to.

    A cone with equal radii is a cylinder.  A torus with zero mean
    radius is a sphere of the tube radius, and a torus with an unbounded
    mean radius is a cylinder of the tube radius; the latter carries no
    length, so the cylinder spans one tube radius either side of the
    center along the axis.
    """

    if isinstance(feature, ConeFeature):
        if feature.top_radius == feature.bottom_radius:
            logger.debug("cone with equal radii reinterpreted as cylinder")
            return CylinderFeature(feature.top, feature.bottom, feature.top_radius)
    elif isinstance(feature, TorusFeature):
        if feature.mean_radius == 0.0:
            logger.debug("torus with zero mean radius reinterpreted as sphere")
            return SphereFeature(feature.center, feature.tube_radius)
        if isinf(feature.mean_radius) or feature.mean_radius >= FLT_MAX:
            logger.debug("torus with unbounded mean radius reinterpreted as cylinder")
            _t, _b, n = frame(feature.axis)
            c = vec3(feature.center)
            half = scale3(n, feature.tube_radius)
            return CylinderFeature(add(c, half), sub(c, half), feature.tube_radius)
    return feature


def _ellipse_vector(torus_params) -> Sequence[float]:
    if isinstance(torus_params, TorusEllipseParams):
        return torus_params.as_vector()
    if len(torus_params) != 4:
        raise ValueError("torus parameters must be (rx, ry, rz, ratio)")
    return torus_params


def build_mesh(feature: Feature, is_convex: bool = True, torus_params=None, *,
               color=None, settings: Optional[MeshSettings] = None) -> RenderableMesh:
    """Build the mesh for any surface feature.

    ``torus_params`` only applies to tori: either a
    ``TorusEllipseParams`` or its ``(rx, ry, rz, ratio)`` vector.  When
    given, an elliptical torus is built, otherwise a circular one.
    """

    opts = dict(color=color, settings=settings)
    if isinstance(feature, PlaneFeature):
        return build_plane(feature.ll, feature.lr, feature.ur, feature.ul, is_convex, **opts)
    elif isinstance(feature, SphereFeature):
        return build_sphere(feature.center, feature.radius, is_convex, **opts)
    elif isinstance(feature, CylinderFeature):
        return build_cylinder(feature.top, feature.bottom, feature.radius, is_convex, **opts)
    elif isinstance(feature, ConeFeature):
        return build_cone(feature.top, feature.bottom, feature.top_radius,
                          feature.bottom_radius, is_convex, **opts)
    elif isinstance(feature, TorusFeature):
        if torus_params is None:
            return build_torus(feature.center, feature.axis, feature.mean_radius,
                               feature.tube_radius, is_convex, **opts)
        rx, ry, rz, ratio = _ellipse_vector(torus_params)
        return build_elliptical_torus(feature.center, feature.axis, (rx, ry, rz),
                                      feature.mean_radius, feature.tube_radius, ratio,
                                      is_convex, **opts)

    raise ValueError(f"not a surface feature: {feature!r}")


__all__ = [
    "PlaneFeature",
    "SphereFeature",
    "CylinderFeature",
    "ConeFeature",
    "TorusFeature",
    "Feature",
    "reinterpret",
    "build_mesh",
]

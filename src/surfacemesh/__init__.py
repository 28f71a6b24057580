# -*- coding: utf-8 -*-
from importlib.metadata import PackageNotFoundError, version


try:
    __version__ = version("surfacemesh")
except PackageNotFoundError:  # pragma: no cover - handled when package not installed
    __version__ = "unknown"

from surfacemesh.convexity import apply_convexity, convex_test
from surfacemesh.errors import MeshError, SampleBufferError, SettingsError, SurfaceMeshError
from surfacemesh.estimator import TorusEllipseParams, estimate_torus_ellipse_params
from surfacemesh.features import (
    ConeFeature,
    CylinderFeature,
    PlaneFeature,
    SphereFeature,
    TorusFeature,
    build_mesh,
    reinterpret,
)
from surfacemesh.mesh import RenderableMesh
from surfacemesh.primitives import (
    build_cone,
    build_cylinder,
    build_elliptical_torus,
    build_plane,
    build_sphere,
    build_torus,
)
from surfacemesh.settings import DEFAULT_SETTINGS, MeshSettings, load_settings

__all__ = [
    "__version__",
    "RenderableMesh",
    "apply_convexity",
    "convex_test",
    "build_plane",
    "build_sphere",
    "build_cylinder",
    "build_cone",
    "build_torus",
    "build_elliptical_torus",
    "estimate_torus_ellipse_params",
    "TorusEllipseParams",
    "PlaneFeature",
    "SphereFeature",
    "CylinderFeature",
    "ConeFeature",
    "TorusFeature",
    "build_mesh",
    "reinterpret",
    "MeshSettings",
    "DEFAULT_SETTINGS",
    "load_settings",
    "SurfaceMeshError",
    "MeshError",
    "SampleBufferError",
    "SettingsError",
]

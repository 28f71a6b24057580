"""Exception types raised by surfacemesh.

Degenerate geometry never raises; these are reserved for callers that
break an API contract.
"""


class SurfaceMeshError(Exception):
    """Base class for surfacemesh errors."""


class MeshError(SurfaceMeshError):
    """A ``RenderableMesh`` was assembled from inconsistent buffers."""


class SampleBufferError(SurfaceMeshError, ValueError):
    """The sample buffer handed to the torus estimator is malformed."""


class SettingsError(SurfaceMeshError, ValueError):
    """Mesh settings failed validation."""


__all__ = [
    "SurfaceMeshError",
    "MeshError",
    "SampleBufferError",
    "SettingsError",
]

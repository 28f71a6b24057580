"""Estimate elliptical torus parameters from samples near a torus.

A surface fitter reports a circular torus (center, axis, mean and tube
radius).  Real objects are often slightly elongated; this module recovers
the shape of the ring the tube follows from the inlier samples.

Every sample is projected onto the plane through the center orthogonal
to the axis, giving in-plane coordinates ``(x, y)`` and a height ``z``
above that plane.  A ring that is an ellipse centered on the axis
satisfies::

    A x**2 + B x y + C y**2 = 1

and the eigen-decomposition of ``[[A, B/2], [B/2, C]]`` yields its
semi-axes and their directions.

Surface samples do not lie on the ring.  A sample on a tube of radius
``r`` sits at an in-plane distance ``d`` from the ring with
``d**2 + z**2 == r**2``, inside or outside the ring.  The fit therefore
alternates two steps, starting from the conic through the raw samples:

1. find the closest point on the current ellipse for every sample, and
   estimate ``r`` from the mean of ``offset**2 + z**2``;
2. move every sample back onto the ring by the in-plane distance
   ``sqrt(r**2 - z**2)`` along the ellipse normal, on the side of the
   ellipse it lies on, and refit the conic to the moved points.

Samples drawn from an exact elliptical torus are a fixed point of this
iteration, whatever the tube radius.

The estimate is best effort.  Too few usable samples or a fit that does
not describe an ellipse return a circular result instead of raising.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass
from math import sqrt
from typing import Optional, Tuple

import numpy as np

from surfacemesh.errors import SampleBufferError
from surfacemesh.geom import dot, epsilon, frame, normalize, vec3
from surfacemesh.mesh import Vec3, Vec4

logger = logging.getLogger(__name__)

MIN_SAMPLES = 3
DEFAULT_STRIDE = 3
MAX_REFINEMENTS = 100

_BISECTION_STEPS = 80


@dataclass(frozen=True)
class TorusEllipseParams:
    """Result of ``estimate_torus_ellipse_params``.

    ``right`` is the unit major-axis direction (perpendicular to the torus
    axis), ``ratio`` is minor over major semi-axis (1 for a circle).
    ``semi_major`` and ``semi_minor`` are the fitted ring semi-axes,
    ``tube_radius`` the tube radius seen by the fit and ``sample_count``
    the number of samples that took part in it.  ``fitted`` is false when
    the neutral default was returned.
    """

    right: Vec3
    ratio: float = 1.0
    semi_major: float = 0.0
    semi_minor: float = 0.0
    tube_radius: float = 0.0
    sample_count: int = 0
    fitted: bool = False

    def as_vector(self) -> Vec4:
        """Pack as ``(right.x, right.y, right.z, ratio)``."""
        return (self.right[0], self.right[1], self.right[2], self.ratio)


def _read_samples(samples, stride: int, count: Optional[int]) -> np.ndarray:
    """Copy ``count`` xyz samples out of ``samples`` into an ``(N, 3)`` array."""

    if isinstance(stride, bool) or not isinstance(stride, (int, np.integer)):
        raise SampleBufferError(f"stride must be an integer, got {stride!r}")
    if stride < 3:
        raise SampleBufferError(f"stride {stride} is smaller than one xyz sample")
    if count is not None:
        if isinstance(count, bool) or not isinstance(count, (int, np.integer)):
            raise SampleBufferError(f"count must be an integer, got {count!r}")
        if count < 0:
            raise SampleBufferError(f"count must not be negative, got {count}")

    if isinstance(samples, (bytes, bytearray, memoryview)):
        try:
            data = np.frombuffer(samples, dtype=np.float32)
        except ValueError as exc:
            raise SampleBufferError(f"buffer is not a whole number of float32 values: {exc}") from exc
    else:
        try:
            data = np.asarray(samples, dtype=float)
        except (TypeError, ValueError) as exc:
            raise SampleBufferError(f"samples are not numeric: {exc}") from exc

    if data.ndim == 2:
        if data.shape[1] < 3 and data.shape[0] > 0:
            raise SampleBufferError(f"samples need three components, got {data.shape[1]}")
        available = data.shape[0]
        n = available if count is None else count
        if n > available:
            raise SampleBufferError(f"count {n} exceeds the {available} samples supplied")
        return np.array(data[:n, :3], dtype=float)

    if data.ndim == 1:
        available = 0 if data.size < 3 else (data.size - 3) // stride + 1
        n = available if count is None else count
        if n > available:
            raise SampleBufferError(
                f"count {n} with stride {stride} exceeds a buffer of {data.size} values")
        idx = np.arange(n)[:, None] * stride + np.arange(3)[None, :]
        return np.array(data[idx], dtype=float).reshape(n, 3)

    raise SampleBufferError(f"samples must be a flat buffer or an (N, 3) array, got {data.ndim} dimensions")


def _fit_conic(x: np.ndarray, y: np.ndarray):
    """Least squares fit of ``A x^2 + B xy + C y^2 = 1``.

    Returns ``(coeffs, evals, evecs)`` with eigenvalues ascending, or
    None when the points do not determine an ellipse.
    """
    design = np.column_stack([x * x, x * y, y * y])
    coeffs, _res, rank, _sv = np.linalg.lstsq(design, np.ones(x.size), rcond=None)
    if rank < 3:
        logger.debug("torus ellipse fit: rank %d design matrix", rank)
        return None

    qa, qb, qc = (float(v) for v in coeffs)
    form = np.array([[qa, qb / 2.0], [qb / 2.0, qc]])
    evals, evecs = np.linalg.eigh(form)
    if not np.all(np.isfinite(evals)) or evals[0] <= 0.0:
        logger.debug("torus ellipse fit: form is not positive definite %s", evals)
        return None
    return coeffs, evals, evecs


def _closest_on_ellipse(u: np.ndarray, v: np.ndarray, e0: float, e1: float
                        ) -> Tuple[np.ndarray, np.ndarray]:
    """Closest points on ``(u/e0)**2 + (v/e1)**2 == 1`` with ``e0 >= e1 > 0``.

    Bisection on the Lagrange multiplier, after D. Eberly, "Distance
    from a Point to an Ellipse, an Ellipsoid, or a Hyperellipsoid".
    Points on the major axis inside the evolute have two mirror image
    solutions; the one with positive ``v`` is returned.
    """
    y0 = np.abs(u)
    y1 = np.abs(v)
    a2 = e0 * e0
    b2 = e1 * e1

    with np.errstate(divide="ignore", invalid="ignore"):
        lo = -b2 + e1 * y1
        hi = -b2 + np.sqrt(a2 * y0 * y0 + b2 * y1 * y1)
        for _ in range(_BISECTION_STEPS):
            t = 0.5 * (lo + hi)
            f = (e0 * y0 / (t + a2)) ** 2 + (e1 * y1 / (t + b2)) ** 2 - 1.0
            above = f > 0.0
            lo = np.where(above, t, lo)
            hi = np.where(above, hi, t)
        t = 0.5 * (lo + hi)
        x0 = a2 * y0 / (t + a2)
        x1 = b2 * y1 / (t + b2)

        # on the major axis the multiplier sits on a pole of the secular
        # equation; solve that case directly
        on_axis = y1 <= 1e-9 * e1
        inner = on_axis & (e0 * y0 < a2 - b2)
        x0_in = a2 * y0 / (a2 - b2)
        x1_in = e1 * np.sqrt(np.clip(1.0 - (x0_in / e0) ** 2, 0.0, None))
    x0 = np.where(inner, x0_in, np.where(on_axis, e0, x0))
    x1 = np.where(inner, x1_in, np.where(on_axis, 0.0, x1))
    return np.copysign(x0, u), np.copysign(x1, v)


def _ring_points(xs, ys, zs, fit):
    """Move samples onto the ring of the current ellipse estimate.

    Returns ``(gx, gy, tube)`` with the moved points and the tube radius
    estimate.
    """
    _coeffs, evals, evecs = fit
    e0 = 1.0 / sqrt(evals[0])
    e1 = 1.0 / sqrt(evals[1])
    major = evecs[:, 0]
    minor = evecs[:, 1]

    u = xs * major[0] + ys * major[1]
    v = xs * minor[0] + ys * minor[1]
    cu, cv = _closest_on_ellipse(u, v, e0, e1)
    offset = np.hypot(u - cu, v - cv)
    side = np.where((u / e0) ** 2 + (v / e1) ** 2 > 1.0, 1.0, -1.0)

    tube2 = float(np.mean(offset * offset + zs * zs))
    spread = np.sqrt(np.clip(tube2 - zs * zs, 0.0, None))

    nu = cu / (e0 * e0)
    nv = cv / (e1 * e1)
    nlen = np.hypot(nu, nv)
    shift = side * (offset - spread) / nlen
    gu = cu + shift * nu
    gv = cv + shift * nv
    gx = gu * major[0] + gv * minor[0]
    gy = gu * major[1] + gv * minor[1]
    return gx, gy, sqrt(tube2)


def estimate_torus_ellipse_params(center, axis, samples,
                                  stride: int = DEFAULT_STRIDE,
                                  count: Optional[int] = None) -> TorusEllipseParams:
    """Fit the elliptical ring of a torus to samples on its surface.

    Parameters
    ----------
    center : point
        Torus center.
    axis : vector
        Torus rotation axis; need not be unit length.
    samples : array-like or buffer
        Either an ``(N, 3)`` (or wider) array of points, or a flat
        sequence of floats in which sample ``k`` occupies
        ``samples[k * stride : k * stride + 3]``.  ``bytes`` and
        ``memoryview`` objects are read as packed float32 values.
    stride : int
        Distance in floats, not bytes, between consecutive samples of a
        flat buffer.  The default of 3 means tightly packed xyz triples.
        A 16 byte aligned float3 buffer, usually described by a byte
        stride of 16, uses ``stride=4``.  Ignored for two-dimensional
        input.
    count : int, optional
        Number of samples to read; all of them by default.

    Returns
    -------
    TorusEllipseParams
        ``ratio == 1`` and ``right`` set to the default tangent of the
        axis when the samples do not support a fit.

    Raises
    ------
    SampleBufferError
        ``stride`` below 3, negative ``count``, ``count`` reaching past
        the end of the buffer, or a byte buffer that does not hold whole
        float32 values.
    """

    pts = _read_samples(samples, stride, count)
    c = np.asarray(vec3(center), dtype=float)
    tangent, bitangent, normal = frame(axis)
    t = np.asarray(tangent)
    b = np.asarray(bitangent)

    offsets = pts - c
    x = offsets @ t
    y = offsets @ b
    z = offsets @ np.asarray(normal)
    rho = np.hypot(x, y)
    keep = np.isfinite(rho) & np.isfinite(z) & (rho > epsilon)
    x, y, z, rho = x[keep], y[keep], z[keep], rho[keep]
    n = int(rho.size)

    mean_rho = float(rho.mean()) if n else 0.0
    neutral = TorusEllipseParams(right=tangent, ratio=1.0, semi_major=mean_rho,
                                 semi_minor=mean_rho, sample_count=n)
    if n < MIN_SAMPLES:
        logger.debug("torus ellipse fit skipped: %d usable samples", n)
        return neutral

    # work in units of the mean radius to keep the system well scaled
    xs = x / mean_rho
    ys = y / mean_rho
    zs = z / mean_rho
    fit = _fit_conic(xs, ys)
    if fit is None:
        logger.debug("torus ellipse fit skipped: samples do not describe an ellipse")
        return neutral

    tube = 0.0
    for step in range(MAX_REFINEMENTS):
        gx, gy, tube = _ring_points(xs, ys, zs, fit)
        refit = _fit_conic(gx, gy)
        if refit is None:
            logger.debug("torus ellipse refinement stopped at step %d", step)
            break
        done = np.allclose(refit[0], fit[0], rtol=1e-12, atol=1e-14)
        fit = refit
        if done:
            break

    _coeffs, evals, evecs = fit
    semi_major = mean_rho / sqrt(evals[0])
    semi_minor = mean_rho / sqrt(evals[1])
    ratio = semi_minor / semi_major

    ex, ey = float(evecs[0, 0]), float(evecs[1, 0])
    right = normalize(tuple(float(v) for v in (t * ex + b * ey)))
    # an ellipse axis has no sign; prefer the one facing the tangent
    if dot(right, tangent) < -epsilon or (abs(dot(right, tangent)) <= epsilon
                                          and dot(right, bitangent) < 0.0):
        right = (-right[0], -right[1], -right[2])

    logger.debug("torus ellipse fit: ratio=%.4f major=%.4g minor=%.4g tube=%.4g from %d samples",
                 ratio, semi_major, semi_minor, tube * mean_rho, n)
    return TorusEllipseParams(right=right, ratio=ratio, semi_major=semi_major,
                              semi_minor=semi_minor, tube_radius=tube * mean_rho,
                              sample_count=n, fitted=True)


__all__ = [
    "MIN_SAMPLES",
    "DEFAULT_STRIDE",
    "TorusEllipseParams",
    "estimate_torus_ellipse_params",
]

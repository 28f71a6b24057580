"""Tests for the elliptical torus estimator."""

import math

import numpy as np
import pytest

from surfacemesh.errors import SampleBufferError
from surfacemesh.estimator import TorusEllipseParams, estimate_torus_ellipse_params
from surfacemesh.geom import close, dot, frame, mag, normalize, vclose
from surfacemesh.primitives import build_elliptical_torus, build_torus


def _ring(a, b, n=40, center=(0.0, 0.0, 0.0)):
    """points on an axis-aligned ellipse in the XY plane"""
    pts = []
    for k in range(n):
        t = 2.0 * math.pi * k / n
        pts.append((center[0] + a * math.cos(t), center[1] + b * math.sin(t), center[2]))
    return pts


class TestCircularSamples:
    def test_circle_gives_unit_ratio(self):
        est = estimate_torus_ellipse_params((0, 0, 0), (0, 0, 1), _ring(2.0, 2.0))
        assert est.fitted
        assert close(est.ratio, 1.0)
        assert close(est.semi_major, 2.0)
        assert close(est.semi_minor, 2.0)
        assert est.sample_count == 40

    def test_circular_torus_surface(self):
        mesh = build_torus((1, -1, 2), (0, 0, 1), 2.0, 0.25)
        est = estimate_torus_ellipse_params((1, -1, 2), (0, 0, 1), mesh.world_vertices())
        assert abs(est.ratio - 1.0) < 0.02
        assert close(mag(est.right), 1.0)
        assert close(dot(est.right, (0, 0, 1)), 0.0)


class TestEllipticalSamples:
    def test_axis_aligned_ellipse(self):
        est = estimate_torus_ellipse_params((0, 0, 0), (0, 0, 1), _ring(3.0, 1.5))
        assert est.fitted
        assert abs(est.ratio - 0.5) < 1e-6
        assert abs(est.semi_major - 3.0) < 1e-6
        assert abs(est.semi_minor - 1.5) < 1e-6
        assert abs(dot(est.right, (1, 0, 0))) > 0.999999

    def test_ring_of_elliptical_torus(self):
        right = normalize((1, 1, 0))
        mesh = build_elliptical_torus((0, 0, 0), (0, 0, 1), right, 2.0, 0.0, 0.5)
        est = estimate_torus_ellipse_params((0, 0, 0), (0, 0, 1), mesh.world_vertices())
        assert abs(est.ratio - 0.5) < 1e-6
        assert abs(dot(est.right, right)) > 0.999999
        # semi-axes average to the mean radius
        assert abs((est.semi_major + est.semi_minor) / 2.0 - 2.0) < 1e-6

    def test_thin_elliptical_torus_surface(self):
        right = normalize((1, -2, 0))
        mesh = build_elliptical_torus((0, 0, 5), (0, 0, 1), right, 1.0, 0.05, 0.5)
        est = estimate_torus_ellipse_params((0, 0, 5), (0, 0, 1), mesh.world_vertices())
        assert abs(est.ratio - 0.5) < 0.02
        assert abs(dot(est.right, right)) > 0.999

    @pytest.mark.parametrize("tube,ratio", [
        (0.25, 0.5),
        (0.5, 0.5),
        (0.6, 0.6),
        (0.8, 0.75),
    ])
    def test_thick_elliptical_torus_surface(self, tube, ratio):
        right = (1.0, 0.0, 0.0)
        mesh = build_elliptical_torus((0, 0, 0), (0, 0, 1), right, 2.0, tube, ratio)
        est = estimate_torus_ellipse_params((0, 0, 0), (0, 0, 1), mesh.world_vertices())
        assert est.fitted
        assert abs(est.ratio - ratio) < 0.02
        assert abs(dot(est.right, right)) > 0.999
        assert abs(est.tube_radius - tube) < 0.02
        assert abs((est.semi_major + est.semi_minor) / 2.0 - 2.0) < 0.02

    def test_thick_tube_off_center_and_tilted(self):
        center = (1.0, -2.0, 0.5)
        axis = normalize((0, 1, 1))
        right = normalize((1, 1, -1))
        mesh = build_elliptical_torus(center, axis, right, 3.0, 0.75, 0.5)
        est = estimate_torus_ellipse_params(center, axis, mesh.world_vertices())
        assert abs(est.ratio - 0.5) < 0.02
        assert abs(dot(est.right, right)) > 0.999
        assert abs(est.tube_radius - 0.75) < 0.02

    def test_tilted_axis(self):
        axis = normalize((1, 0, 1))
        right = normalize((1, 0, -1))
        mesh = build_elliptical_torus((2, 3, 4), axis, right, 1.5, 0.0, 0.7)
        est = estimate_torus_ellipse_params((2, 3, 4), axis, mesh.world_vertices())
        assert abs(est.ratio - 0.7) < 1e-6
        assert abs(dot(est.right, right)) > 0.999999
        assert close(dot(est.right, axis), 0.0)

    def test_right_sign_is_canonical(self):
        tangent = frame((0, 0, 1))[0]
        est = estimate_torus_ellipse_params((0, 0, 0), (0, 0, 1), _ring(1.0, 3.0))
        assert dot(est.right, tangent) >= 0.0
        assert vclose(est.right, (0, 1, 0))

    def test_as_vector(self):
        est = estimate_torus_ellipse_params((0, 0, 0), (0, 0, 1), _ring(3.0, 1.5))
        vec = est.as_vector()
        assert len(vec) == 4
        assert vec[:3] == est.right
        assert vec[3] == est.ratio


class TestSampleLayouts:
    def test_flat_list_default_stride(self):
        pts = _ring(3.0, 1.5)
        flat = [c for p in pts for c in p]
        est = estimate_torus_ellipse_params((0, 0, 0), (0, 0, 1), flat)
        assert est.sample_count == len(pts)
        assert abs(est.ratio - 0.5) < 1e-6

    def test_padded_stride(self):
        pts = _ring(3.0, 1.5)
        flat = [c for p in pts for c in (p[0], p[1], p[2], 99.0)]
        est = estimate_torus_ellipse_params((0, 0, 0), (0, 0, 1), flat, stride=4)
        assert est.sample_count == len(pts)
        assert abs(est.ratio - 0.5) < 1e-6

    def test_padding_without_trailing_slot(self):
        pts = _ring(3.0, 1.5, n=8)
        flat = [c for p in pts for c in (p[0], p[1], p[2], 0.0)][:-1]
        est = estimate_torus_ellipse_params((0, 0, 0), (0, 0, 1), flat, stride=4)
        assert est.sample_count == 8

    def test_float32_bytes(self):
        pts = np.array(_ring(3.0, 1.5), dtype=np.float32)
        est = estimate_torus_ellipse_params((0, 0, 0), (0, 0, 1), pts.tobytes())
        assert est.sample_count == len(pts)
        assert abs(est.ratio - 0.5) < 1e-4

    def test_memoryview_with_stride(self):
        padded = np.zeros((40, 4), dtype=np.float32)
        padded[:, :3] = _ring(3.0, 1.5)
        est = estimate_torus_ellipse_params((0, 0, 0), (0, 0, 1), memoryview(padded.tobytes()),
                                            stride=4)
        assert est.sample_count == 40
        assert abs(est.ratio - 0.5) < 1e-4

    def test_count_limits_samples(self):
        pts = _ring(3.0, 1.5) + [(100.0, 100.0, 0.0)] * 5
        est = estimate_torus_ellipse_params((0, 0, 0), (0, 0, 1), pts, count=40)
        assert est.sample_count == 40
        assert abs(est.ratio - 0.5) < 1e-6

    def test_wide_array(self):
        pts = np.zeros((40, 6))
        pts[:, :3] = _ring(3.0, 1.5)
        est = estimate_torus_ellipse_params((0, 0, 0), (0, 0, 1), pts)
        assert abs(est.ratio - 0.5) < 1e-6


class TestNeutralResults:
    def _assert_neutral(self, est, axis=(0, 0, 1)):
        assert isinstance(est, TorusEllipseParams)
        assert not est.fitted
        assert est.ratio == 1.0
        assert vclose(est.right, frame(axis)[0])

    def test_empty(self):
        self._assert_neutral(estimate_torus_ellipse_params((0, 0, 0), (0, 0, 1), []))

    def test_too_few_samples(self):
        est = estimate_torus_ellipse_params((0, 0, 0), (0, 0, 1), [(1, 0, 0), (0, 2, 0)])
        self._assert_neutral(est)
        assert est.sample_count == 2

    def test_samples_on_axis_are_ignored(self):
        pts = [(0, 0, z) for z in range(10)]
        est = estimate_torus_ellipse_params((0, 0, 0), (0, 0, 1), pts)
        self._assert_neutral(est)
        assert est.sample_count == 0

    def test_collinear_samples(self):
        pts = [(x, 0.0, 0.0) for x in (1.0, 2.0, 3.0, 4.0)]
        self._assert_neutral(estimate_torus_ellipse_params((0, 0, 0), (0, 0, 1), pts))

    def test_hyperbola_is_not_an_ellipse(self):
        pts = []
        for t in np.linspace(-1.0, 1.0, 9):
            pts.append((math.cosh(t), math.sinh(t), 0.0))
            pts.append((-math.cosh(t), math.sinh(t), 0.0))
        self._assert_neutral(estimate_torus_ellipse_params((0, 0, 0), (0, 0, 1), pts))

    def test_zero_count(self):
        est = estimate_torus_ellipse_params((0, 0, 0), (0, 0, 1), _ring(3.0, 1.5), count=0)
        self._assert_neutral(est)

    def test_other_axis_default_right(self):
        axis = (1, 0, 0)
        est = estimate_torus_ellipse_params((0, 0, 0), axis, [(0, 1, 0)])
        self._assert_neutral(est, axis)


class TestBufferErrors:
    @pytest.mark.parametrize("stride", [0, 1, 2, -3])
    def test_short_stride(self, stride):
        with pytest.raises(SampleBufferError):
            estimate_torus_ellipse_params((0, 0, 0), (0, 0, 1), [0.0] * 12, stride=stride)

    def test_non_integer_stride(self):
        with pytest.raises(SampleBufferError):
            estimate_torus_ellipse_params((0, 0, 0), (0, 0, 1), [0.0] * 12, stride=3.5)

    def test_negative_count(self):
        with pytest.raises(SampleBufferError):
            estimate_torus_ellipse_params((0, 0, 0), (0, 0, 1), [0.0] * 12, count=-1)

    def test_count_past_end(self):
        with pytest.raises(SampleBufferError):
            estimate_torus_ellipse_params((0, 0, 0), (0, 0, 1), [0.0] * 12, count=5)
        with pytest.raises(SampleBufferError):
            estimate_torus_ellipse_params((0, 0, 0), (0, 0, 1), [0.0] * 16, stride=4, count=5)

    def test_count_past_end_of_array(self):
        with pytest.raises(SampleBufferError):
            estimate_torus_ellipse_params((0, 0, 0), (0, 0, 1), _ring(1.0, 1.0, n=4), count=5)

    def test_partial_float32_bytes(self):
        with pytest.raises(SampleBufferError):
            estimate_torus_ellipse_params((0, 0, 0), (0, 0, 1), b"\x00" * 10)
        with pytest.raises(SampleBufferError):
            estimate_torus_ellipse_params((0, 0, 0), (0, 0, 1), memoryview(b"\x00" * 14), stride=4)

    def test_not_numeric(self):
        with pytest.raises(SampleBufferError):
            estimate_torus_ellipse_params((0, 0, 0), (0, 0, 1), ["a", "b", "c"])

    def test_is_value_error(self):
        with pytest.raises(ValueError):
            estimate_torus_ellipse_params((0, 0, 0), (0, 0, 1), [0.0] * 3, stride=1)

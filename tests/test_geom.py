import pytest
from math import sqrt

from surfacemesh.geom import *
## unit tests for surfacemesh geom.py


class TestScalars:
    """unit tests for scalar helpers"""

    def test_isgoodnum(self):
        assert isgoodnum(1)
        assert isgoodnum(-2.5)
        assert not isgoodnum(True)
        assert not isgoodnum(float('nan'))
        assert not isgoodnum(float('inf'))
        assert not isgoodnum('1')

    def test_close(self):
        assert close(1.0, 1.0 + epsilon / 2)
        assert not close(1.0, 1.0 + 2 * epsilon)


class TestOperations:
    def test_vect(self):
        a = (5.0, 0.0, 0.0)
        b = (0.0, 5.0, 0.0)
        c = (-3.0, -3.0, 0.0)
        d = (1.0, 1.0, 0.0)
        assert close(mag(a), 5.0)
        assert vclose(add(a, b), (5, 5, 0))
        assert vclose(sub(a, b), (5, -5, 0))
        assert close(dot(a, b), 0)
        assert close(dot(d, c), -6)
        assert vclose(cross(a, b), (0, 0, 25))
        assert vclose(cross(b, a), (0, 0, -25))
        assert close(dist(a, b), sqrt(50))
        assert vclose(scale3(d, 3), (3, 3, 0))
        assert vclose(lerp(a, b, 0.5), (2.5, 2.5, 0))
        assert neg(d) == (-1.0, -1.0, -0.0)

    def test_vec3_coerces(self):
        assert vec3([1, 2, 3, 1]) == (1.0, 2.0, 3.0)
        with pytest.raises(ValueError):
            vec3([1, 2])


class TestNormalize:
    def test_unit_length(self):
        n = normalize((3.0, 4.0, 0.0))
        assert vclose(n, (0.6, 0.8, 0.0))
        assert close(mag(n), 1.0)

    def test_zero_vector_returns_zero(self):
        assert normalize((0.0, 0.0, 0.0)) == ZERO
        assert normalize((epsilon / 10, 0.0, 0.0)) == ZERO
        assert iszero(normalize((0.0, 0.0, 0.0)))


class TestFrame:
    def _check_orthonormal(self, t, b, n):
        assert close(mag(t), 1.0)
        assert close(mag(b), 1.0)
        assert close(mag(n), 1.0)
        assert close(dot(t, b), 0.0)
        assert close(dot(t, n), 0.0)
        assert close(dot(b, n), 0.0)
        assert vclose(cross(t, b), n)

    @pytest.mark.parametrize("axis", [
        (0, 0, 1), (0, 0, -1), (1, 0, 0), (0, 1, 0), (1, 2, 3), (-0.2, 0.95, 0.1),
    ])
    def test_frame_without_right_is_orthonormal(self, axis):
        t, b, n = frame(axis)
        self._check_orthonormal(t, b, n)
        assert vclose(n, normalize(axis))

    def test_frame_is_deterministic(self):
        assert frame((1, 2, 3)) == frame((1, 2, 3))
        for u, v in zip(frame((2, 4, 6)), frame((1, 2, 3))):
            assert vclose(u, v)

    def test_fallback_tangent_near_world_up(self):
        t, b, n = frame((0, 0, 1))
        assert vclose(t, (0, 1, 0))
        t, b, n = frame((1, 0, 0))
        assert vclose(t, (0, -1, 0))

    def test_frame_uses_right(self):
        t, b, n = frame((0, 0, 2), right=(3, 0, 0))
        assert vclose(t, (1, 0, 0))
        assert vclose(b, (0, 1, 0))
        assert vclose(n, (0, 0, 1))

    def test_frame_projects_right_onto_plane(self):
        t, b, n = frame((0, 0, 1), right=(1, 0, 5))
        self._check_orthonormal(t, b, n)
        assert vclose(t, (1, 0, 0))

    def test_frame_right_parallel_to_axis_falls_back(self):
        assert frame((0, 0, 1), right=(0, 0, 4)) == frame((0, 0, 1))

    def test_frame_zero_axis_uses_world_z(self):
        t, b, n = frame((0, 0, 0))
        self._check_orthonormal(t, b, n)
        assert n == ZAXIS

    def test_to_local(self):
        fr = frame((0, 0, 1), right=(0, 1, 0))
        assert vclose(to_local((3.0, 5.0, 2.0), (1.0, 1.0, 1.0), *fr), (4.0, -2.0, 1.0))

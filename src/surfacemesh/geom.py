## basic vector operations and orthonormal frames for surfacemesh
## Copyright (c) 2020 Richard DeVaul

# Permission is hereby granted, free of charge, to any person
# obtaining a copy of this software and associated documentation files
# (the "Software"), to deal in the Software without restriction,
# including without limitation the rights to use, copy, modify, merge,
# publish, distribute, sublicense, and/or sell copies of the Software,
# and to permit persons to whom the Software is furnished to do so,
# subject to the following conditions:
#
# The above copyright notice and this permission notice shall be
# included in all copies or substantial portions of the Software.
#
# THE SOFTWARE IS PROVIDED "AS IS", WITHOUT WARRANTY OF ANY KIND,
# EXPRESS OR IMPLIED, INCLUDING BUT NOT LIMITED TO THE WARRANTIES OF
# MERCHANTABILITY, FITNESS FOR A PARTICULAR PURPOSE AND
# NONINFRINGEMENT. IN NO EVENT SHALL THE AUTHORS OR COPYRIGHT HOLDERS
# BE LIABLE FOR ANY CLAIM, DAMAGES OR OTHER LIABILITY, WHETHER IN AN
# ACTION OF CONTRACT, TORT OR OTHERWISE, ARISING FROM, OUT OF OR IN
# CONNECTION WITH THE SOFTWARE OR THE USE OR OTHER DEALINGS IN THE
# SOFTWARE.


"""
===========================================
Geometry kernel for surfacemesh primitives
===========================================

Vectors and points are plain ``(x, y, z)`` tuples of floats.  Every
function here is pure and returns a fresh tuple.

Degenerate input never raises: ``normalize`` of a (near) zero-length
vector yields the zero vector, and ``frame`` falls back to world +Z and a
deterministic tangent when the requested directions are unusable.
"""

from math import isfinite, pi, sqrt

## constants
epsilon = 0.000005
pi2 = 2.0 * pi

ZERO = (0.0, 0.0, 0.0)
XAXIS = (1.0, 0.0, 0.0)
YAXIS = (0.0, 1.0, 0.0)
ZAXIS = (0.0, 0.0, 1.0)


## operations on scalars
## -----------------------

def isgoodnum(n):
    """ determine if an argument is a finite scalar number, and not boolean
    """
    return (not isinstance(n, bool)) and isinstance(n, (int, float)) and isfinite(n)


def close(a, b, tol=epsilon):
    """ are two scalars the same within ``tol``
    """
    return abs(a - b) < tol


## operations on vectors
## ------------------------

def vec3(v):
    """Coerce any indexable with at least three numeric components into
    an ``(x, y, z)`` tuple of floats.
    """
    if len(v) < 3:
        raise ValueError("value must have at least three components: {}".format(v))
    return (float(v[0]), float(v[1]), float(v[2]))


def add(a, b):
    """ 3 vector, `a + b`"""
    return (a[0] + b[0], a[1] + b[1], a[2] + b[2])


def sub(a, b):
    """ 3 vector, `a - b`"""
    return (a[0] - b[0], a[1] - b[1], a[2] - b[2])


def scale3(a, c):
    """ 3 vector ``a`` times scalar ``c``"""
    return (a[0] * c, a[1] * c, a[2] * c)


def neg(a):
    return (-a[0], -a[1], -a[2])


def dot(a, b):
    """ 3 vector ``a`` dot ``b`` """
    return a[0] * b[0] + a[1] * b[1] + a[2] * b[2]


def cross(a, b):
    """ 3 vector ``a`` cross ``b`` """
    return (a[1] * b[2] - a[2] * b[1],
            a[2] * b[0] - a[0] * b[2],
            a[0] * b[1] - a[1] * b[0])


def mag(a):
    """ compute the magnitude of 3 vector ``a``"""
    return sqrt(a[0] * a[0] + a[1] * a[1] + a[2] * a[2])


def dist(a, b):
    """ euclidean distance between two points ``a`` and ``b``"""
    return mag(sub(a, b))


def lerp(a, b, u):
    """ point at parameter ``u`` on the segment from ``a`` to ``b``"""
    return (a[0] + (b[0] - a[0]) * u,
            a[1] + (b[1] - a[1]) * u,
            a[2] + (b[2] - a[2]) * u)


def vclose(a, b, tol=epsilon):
    """ are two 3 vectors the same within ``tol``"""
    return mag(sub(a, b)) < tol


def normalize(a):
    """Return ``a`` scaled to unit length.

    Vectors whose magnitude is at or below ``epsilon`` have no usable
    direction; the zero vector is returned for them rather than raising.
    Callers test for that with ``iszero``.
    """
    m = mag(a)
    if m <= epsilon:
        return ZERO
    return (a[0] / m, a[1] / m, a[2] / m)


def iszero(a):
    return a[0] == 0.0 and a[1] == 0.0 and a[2] == 0.0


## reject the component of ``v`` along unit vector ``n``
def reject(v, n):
    return sub(v, scale3(n, dot(v, n)))


## orthonormal frames
## ------------------

def fallback_tangent(axis):
    """Deterministic unit vector perpendicular to the unit vector ``axis``.

    Uses ``(y, -x, 0)`` unless the axis is within about 25 degrees of
    world Z, in which case ``(0, z, -y)`` is used instead.
    """
    if abs(axis[2]) < 0.9:
        ref = (axis[1], -axis[0], 0.0)
    else:
        ref = (0.0, axis[2], -axis[1])
    return normalize(ref)


def frame(axis, right=None):
    """Build a right-handed orthonormal frame around ``axis``.

    ``axis`` -- primary direction, becomes the frame normal.  A zero
    length axis is replaced by world +Z.

    ``right`` -- optional direction fixing the in-plane rotation.  It is
    projected onto the plane orthogonal to the axis; if it is missing or
    (anti)parallel to the axis, ``fallback_tangent`` is used.

    returns ``(tangent, bitangent, normal)`` with
    ``cross(tangent, bitangent) == normal``
    """
    normal = normalize(axis)
    if iszero(normal):
        normal = ZAXIS

    tangent = ZERO
    if right is not None:
        tangent = normalize(reject(vec3(right), normal))
    if iszero(tangent):
        tangent = fallback_tangent(normal)

    bitangent = cross(normal, tangent)
    return tangent, bitangent, normal


def to_local(p, origin, tangent, bitangent, normal):
    """Express point ``p`` in the frame anchored at ``origin``."""
    d = sub(p, origin)
    return (dot(d, tangent), dot(d, bitangent), dot(d, normal))


def vstr(a):
    """ compact string form of a 3 vector, for logging"""
    return "({:.6g}, {:.6g}, {:.6g})".format(a[0], a[1], a[2])


__all__ = [
    "epsilon",
    "pi2",
    "ZERO",
    "XAXIS",
    "YAXIS",
    "ZAXIS",
    "isgoodnum",
    "close",
    "vec3",
    "add",
    "sub",
    "scale3",
    "neg",
    "dot",
    "cross",
    "mag",
    "dist",
    "lerp",
    "vclose",
    "normalize",
    "iszero",
    "reject",
    "fallback_tangent",
    "frame",
    "to_local",
    "vstr",
]

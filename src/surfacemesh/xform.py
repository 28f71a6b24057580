## 4x4 matrix support for surfacemesh model transforms

## Copyright (c) 2020 Richard W. DeVaul
## Copyright (c) 2020 yapCAD contributors
## All rights reserved

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

from math import isfinite

import surfacemesh.geom as geom

## A matrix is stored as a list of four rows of four floats.  A mesh
## model matrix maps local mesh coordinates to world coordinates; its
## upper-left 3x3 block holds the frame axes as columns and its last
## column the frame origin.


class Matrix:
    """4x4 transformation matrix for homogeneous 3D coordinates"""

    def __init__(self, a=None):
        self.m = [[1.0, 0.0, 0.0, 0.0],
                  [0.0, 1.0, 0.0, 0.0],
                  [0.0, 0.0, 1.0, 0.0],
                  [0.0, 0.0, 0.0, 1.0]]

        if isinstance(a, Matrix):
            for i in range(4):
                self.setrow(i, a.getrow(i))
        elif isinstance(a, (tuple, list)):
            if len(a) != 4:
                raise ValueError('bad thing used in attempt to initialize matrix: {}'.format(a))
            for i in range(4):
                self.setrow(i, a[i])
        elif a is not None:
            raise ValueError('bad thing used in attempt to initialize matrix: {}'.format(a))

    def __repr__(self):
        return "Matrix({},{},{},{})".format(*self.m)

    def __eq__(self, other):
        if not isinstance(other, Matrix):
            return NotImplemented
        return self.as_tuple() == other.as_tuple()

    #return value indexed by i,j
    def get(self, i, j):
        if i < 0 or i > 3 or j < 0 or j > 3:
            raise ValueError('bad index passed to get: {},{}'.format(i, j))
        return self.m[i][j]

    #set value indexed by i,j
    def set(self, i, j, x):
        if i < 0 or i > 3 or j < 0 or j > 3:
            raise ValueError('bad index passed to set: {},{}'.format(i, j))
        if not geom.isgoodnum(x):
            raise ValueError('bad element in matrix: {}'.format(x))
        self.m[i][j] = float(x)

    def getrow(self, i):
        if i < 0 or i > 3:
            raise ValueError('bad row passed to getrow: {}'.format(i))
        return list(self.m[i])

    def setrow(self, i, x):
        if not isinstance(x, (tuple, list)) or len(x) != 4:
            raise ValueError('bad non-vector passed to setrow: {}'.format(x))
        for j in range(4):
            self.set(i, j, x[j])

    # apply the matrix to a 3 vector.  The vector is a point (w=1)
    # unless ``direction`` is true, in which case the translation
    # column is ignored.

    def mul(self, x, direction=False):
        if not isinstance(x, (tuple, list)) or len(x) != 3:
            raise ValueError('bad thing passed to mul(): {}'.format(x))
        w = 0.0 if direction else 1.0
        m = self.m
        return tuple(m[i][0] * x[0] + m[i][1] * x[1] + m[i][2] * x[2] + m[i][3] * w
                     for i in range(3))

    def det3(self):
        """determinant of the upper-left 3x3 block"""
        a = self.m
        return (a[0][0] * (a[1][1] * a[2][2] - a[1][2] * a[2][1])
                - a[0][1] * (a[1][0] * a[2][2] - a[1][2] * a[2][0])
                + a[0][2] * (a[1][0] * a[2][1] - a[1][1] * a[2][0]))

    def is_invertible3(self, tol=geom.epsilon):
        """True if the upper-left 3x3 block is finite and non-singular"""
        for i in range(3):
            for j in range(3):
                if not isfinite(self.m[i][j]):
                    return False
        return abs(self.det3()) > tol

    def as_tuple(self):
        """row-major tuple of four row tuples"""
        return tuple(tuple(row) for row in self.m)


# local-to-world matrix of a frame: columns are the frame axes, the
# last column is the origin
def Frame(origin, tangent, bitangent, normal):
    F = [[tangent[0], bitangent[0], normal[0], origin[0]],
         [tangent[1], bitangent[1], normal[1], origin[1]],
         [tangent[2], bitangent[2], normal[2], origin[2]],
         [0, 0, 0, 1]]
    return Matrix(F)

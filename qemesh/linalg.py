# Copyright 2024-25, m3shware
#
# Permission is hereby granted, free of charge, to any person obtaining a
# copy of this software and associated documentation files (the "Software"),
# to deal in the Software without restriction, including without limitation
# the rights to use, copy, modify, merge, publish, distribute, sublicense,
# and/or sell copies of the Software, and to permit persons to whom the
# Software is furnished to do so, subject to the following conditions:
#
# The above copyright notice and this permission notice shall be included in
# all copies or substantial portions of the Software.
#
# THE SOFTWARE IS PROVIDED "AS IS", WITHOUT WARRANTY OF ANY KIND, EXPRESS OR
# IMPLIED, INCLUDING BUT NOT LIMITED TO THE WARRANTIES OF MERCHANTABILITY,
# FITNESS FOR A PARTICULAR PURPOSE AND NONINFRINGEMENT. IN NO EVENT SHALL THE
# AUTHORS OR COPYRIGHT HOLDERS BE LIABLE FOR ANY CLAIM, DAMAGES OR OTHER
# LIABILITY, WHETHER IN AN ACTION OF CONTRACT, TORT OR OTHERWISE, ARISING
# FROM, OUT OF OR IN CONNECTION WITH THE SOFTWARE OR THE USE OR OTHER DEALINGS
# IN THE SOFTWARE.

""" Basic vector and matrix math.

Non-vectorized helpers for vectors in 3-space and the homogeneous 4x4
matrices used by quadric error metrics. Addition and scaling are plain
NumPy arithmetic and have no wrappers here.
"""

import math
import numpy as np


def angle(v, w, deg=False):
    r""" Angle between vectors.

    Angle between vectors :math:`\mathbf{v}` and :math:`\mathbf{w}` in
    radians. The cosine is clamped to :math:`[-1, 1]` before calling
    :func:`math.acos` to absorb floating-point overshoot.

    Parameters
    ----------
    v, w : ~numpy.ndarray, shape (3, )
        Vector in 3-space.
    deg : bool, optional
        Convert result from radians to degrees.

    Returns
    -------
    float
        Angle in degrees or radians.

    Note
    ----
    None of the vectors may be the zero vector.
    """
    # Yields a value between 0 and pi.
    angle = math.acos(clamp(v.dot(w) / (norm(v) * norm(w)), -1., 1.))

    if deg:
        angle = math.degrees(angle)

    return angle


def clamp(x, lo, hi):
    """ Clamp value to range.

    Clamp `x` to the closed interval [`lo`, `hi`].

    Parameters
    ----------
    x : float
        Value to clamp.
    lo : float
        Lower bound.
    hi : float
        Upper bound.

    Returns
    -------
    float
        Clamped value.

    Note
    ----
    To prevent data type changes arguments should not mix :class:`int` and
    :class:`float` values.
    """
    assert lo <= hi

    # The order of arguments guarantees that the data type does not change
    # if x is within bounds.
    return max(min(x, hi), lo)


def cross(u, v):
    r""" Cross product.

    Alternative to NumPy's vectorized :func:`~numpy.cross` function.

    Parameters
    ----------
    u, v : array_like, shape (3, )
        Vector in :math:`\mathbb{R}^3`.

    Returns
    -------
    ~numpy.ndarray, shape (3, )
        Cross product of vectors :math:`\mathbf{u}` and :math:`\mathbf{v}`.
    """
    # Unpack the arrays. This will also catch any problem with array shape.
    u0, u1, u2 = u
    v0, v1, v2 = v

    return np.array([u1*v2 - u2*v1,
                     u2*v0 - u0*v2,
                     u0*v1 - u1*v0])


def norm(u):
    r""" Length of vector.

    Alternative to NumPy's vectorized :func:`~numpy.linalg.norm` function.

    Parameters
    ----------
    u : array_like, shape (n, )
        Vector in :math:`\mathbb{R}^n`.

    Returns
    -------
    float
        Euclidean length of the vector :math:`\mathbf{u}`.
    """
    return math.sqrt(u.dot(u))


def dot(u, v):
    r""" Dot product.

    Parameters
    ----------
    u, v : array_like, shape (3, )
        Vector in :math:`\mathbb{R}^3`.

    Returns
    -------
    float
        Inner product of vectors `u` and `v`.
    """
    return u[0]*v[0] + u[1]*v[1] + u[2]*v[2]


def unit(u):
    r""" Vector normalization.

    Parameters
    ----------
    u : ~numpy.ndarray, shape (3, )
        Vector in :math:`\mathbb{R}^3`.

    Returns
    -------
    ~numpy.ndarray, shape (3, )
        Normalized copy of input vector.

    Note
    ----
    No error checking (division by zero, input vector shape) is performed.
    """
    return u / norm(u)


def homogeneous(p):
    r""" Homogeneous coordinates.

    Parameters
    ----------
    p : array_like, shape (3, )
        Point in :math:`\mathbb{R}^3`.

    Returns
    -------
    ~numpy.ndarray, shape (4, )
        The vector :math:`(x, y, z, 1)`.
    """
    x, y, z = p
    return np.array([x, y, z, 1.0])


def quadform(q, p):
    r""" Evaluate quadratic form.

    Computes :math:`\mathbf{v}^T Q \mathbf{v}` where :math:`\mathbf{v}`
    is the point `p` in homogeneous coordinates.

    Parameters
    ----------
    q : ~numpy.ndarray, shape (4, 4)
        Symmetric matrix.
    p : array_like, shape (3, )
        Point in :math:`\mathbb{R}^3`.

    Returns
    -------
    float
        Value of the quadratic form.
    """
    v = homogeneous(p)
    return float(v.dot(q.dot(v)))


def det(m):
    """ Determinant of a square matrix.

    Parameters
    ----------
    m : ~numpy.ndarray, shape (4, 4)
        Square matrix.

    Returns
    -------
    float
        Determinant of `m`.
    """
    return float(np.linalg.det(m))


def inv(m):
    """ Inverse of a square matrix.

    Parameters
    ----------
    m : ~numpy.ndarray, shape (4, 4)
        Square matrix.

    Raises
    ------
    ~numpy.linalg.LinAlgError
        If `m` is singular.

    Returns
    -------
    ~numpy.ndarray, shape (4, 4)
        Inverse of `m`.
    """
    return np.linalg.inv(m)

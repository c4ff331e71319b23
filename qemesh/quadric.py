# Copyright 2024, m3shware
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

r""" Quadric error metrics.

The squared distance of a point :math:`\mathbf{p}` to the plane
:math:`n^T x + d = 0` with unit normal :math:`n` is the quadratic form
:math:`\mathbf{v}^T K \mathbf{v}` where :math:`\mathbf{v} = (p, 1)` and
:math:`K = (n, d)(n, d)^T`. Summing these fundamental quadrics over the
faces incident to a vertex measures the squared distance to all of them.

See *Surface Simplification Using Quadric Error Metrics* by Michael
Garland and Paul S. Heckbert.

Note
----
Vertex quadrics and edge costs are cached on the mesh items. Cached
values are invalidated by :class:`~qemesh.decimate.Decimator` whenever
the neighborhood of an item changes.
"""

import numpy as np

import qemesh.linalg as linalg
import qemesh.traits as traits


SINGULAR_TOL = 1e-3                         # threshold on |det|
NUM_SAMPLES = 16                            # fallback search intervals


def plane(face):
    r""" Supporting plane.

    Parameters
    ----------
    face : Face
        Real face of a mesh.

    Returns
    -------
    ~numpy.ndarray, shape (4, )
        The vector :math:`(n_x, n_y, n_z, d)` with :math:`d = -n^T p` for
        the unit face normal :math:`n` and the tail :math:`p` of the
        face's halfedge. The zero vector for degenerate faces.
    """
    n = traits.face_normal(face)
    d = -linalg.dot(n, face.halfedge.vertex.point)

    return np.array([n[0], n[1], n[2], d])


def face_quadric(face):
    """ Fundamental error quadric.

    Parameters
    ----------
    face : Face
        Real face of a mesh.

    Returns
    -------
    ~numpy.ndarray, shape (4, 4)
        Outer product of the face's plane vector with itself.
    """
    p = plane(face)
    return np.outer(p, p)


def vertex_quadric(vertex):
    """ Vertex error quadric.

    Sum of fundamental quadrics of all real faces incident to `vertex`.
    The result is cached on the vertex.

    Parameters
    ----------
    vertex : Vertex
        Vertex of a mesh.

    Returns
    -------
    ~numpy.ndarray, shape (4, 4)
        Symmetric positive semi-definite matrix. Do not modify.
    """
    if vertex._quadric is None:
        q = np.zeros((4, 4))

        for f in vertex._fiter():
            q += face_quadric(f)

        vertex._quadric = q

    return vertex._quadric


def edge_quadric(edge):
    """ Edge error quadric.

    Parameters
    ----------
    edge : Edge
        Edge of a mesh.

    Returns
    -------
    ~numpy.ndarray, shape (4, 4)
        Sum of the quadrics of both endpoints.
    """
    a, b = edge.vertices
    return vertex_quadric(a) + vertex_quadric(b)


def error(q, point):
    """ Quadric error of a point.

    Parameters
    ----------
    q : ~numpy.ndarray, shape (4, 4)
        Error quadric.
    point : array_like, shape (3, )
        Point in 3-space.

    Returns
    -------
    float
        Value of the quadratic form, up to round-off non-negative.
    """
    return linalg.quadform(q, point)


def optimal_point(edge, q=None, tol=SINGULAR_TOL, samples=NUM_SAMPLES):
    r""" Optimal collapse location.

    The minimizer of the edge quadric is the solution of a linear
    system obtained by replacing the last row of the quadric by
    :math:`(0, 0, 0, 1)`. If the edge quadric itself is close to
    singular, i.e., its determinant does not exceed `tol` in absolute
    value, the edge segment is sampled at ``samples + 1`` equidistant
    positions instead.

    Parameters
    ----------
    edge : Edge
        Edge of a mesh.
    q : ~numpy.ndarray, shape (4, 4), optional
        Precomputed edge quadric.
    tol : float, optional
        Singularity threshold.
    samples : int, optional
        Number of intervals of the fallback search.

    Returns
    -------
    ~numpy.ndarray, shape (3, )
        Merge point.

    Note
    ----
    Samples run from the tail of ``edge.halfedge`` to its head. Among
    samples of equal error the first one is returned.
    """
    if q is None:
        q = edge_quadric(edge)

    if abs(linalg.det(q)) > tol:
        m = q.copy()
        m[3, ...] = (0.0, 0.0, 0.0, 1.0)

        # Solution of m x = (0, 0, 0, 1) is the last column of the inverse.
        return linalg.inv(m)[:3, 3].copy()

    h = edge.halfedge

    a = h.vertex.point
    d = h.next.vertex.point - a

    best, point = None, None

    for i in range(samples + 1):
        p = a + (i / samples) * d
        e = error(q, p)

        if best is None or e < best:
            best, point = e, p

    return point


def edge_cost(edge):
    """ Edge collapse cost.

    The cost is the quadric error of the optimal collapse location,
    clamped from below by zero. Both values are cached on the edge.

    Parameters
    ----------
    edge : Edge
        Edge of a mesh.

    Returns
    -------
    cost : float
        Collapse cost.
    point : ~numpy.ndarray, shape (3, )
        Collapse location.
    """
    if edge._cost is None:
        q = edge_quadric(edge)
        point = optimal_point(edge, q)

        edge._cost = max(error(q, point), 0.0)
        edge._point = point

    return edge._cost, edge._point

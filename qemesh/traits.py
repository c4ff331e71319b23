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

""" Geometric mesh traits.

Convenience functions to compute common and often used geometric mesh
traits like vertex and face normals, corner angles, etc. All functions
are pure queries, the mesh is never modified.
"""

import numpy as np

import qemesh.linalg as linalg

from qemesh.flags import NormalWeighting


def _unit_or_zero(vector):
    """ Normalized copy or the zero vector for degenerate input.
    """
    if linalg.norm(vector) > 0.0:
        return linalg.unit(vector)

    return np.zeros(3)


def bounds(points):
    r""" Bounding box vertices.

    Corner vertices of the axis-aligned bounding box.

    Parameters
    ----------
    points : array_like, shape (n, k)
        Coordinates of :math:`n` points in :math:`\mathbb{R}^k`,
        one point per row.

    Returns
    -------
    a : ~numpy.ndarray
        Holds the minimum value for each dimension.
    b : ~numpy.ndarray
        Holds the maximum value for each dimension.
    """
    return np.min(points, axis=0), np.max(points, axis=0)


def cotan(halfedge):
    """ Cotangent weight.

    Cotangent of the angle opposite `halfedge` in its face.

    Parameters
    ----------
    halfedge : Halfedge
        Halfedge of a triangle.

    Returns
    -------
    float
        Cotangent value, 0.0 for synthetic boundary halfedges.
    """
    if halfedge.boundary:
        return 0.0

    # Both vectors start at the opposite corner.
    u = -halfedge.next.vector
    v = halfedge.prev.vector

    return linalg.dot(u, v) / linalg.norm(linalg.cross(u, v))


def angle(halfedge):
    """ Corner angle.

    Interior angle of the halfedge's face at the tail vertex of the
    halfedge, i.e., the angle between the halfedge and the reversed
    predecessor.

    Parameters
    ----------
    halfedge : Halfedge
        Halfedge of a real face.

    Raises
    ------
    ValueError
        If called for a boundary halfedge.

    Returns
    -------
    float
        Angle in radians.
    """
    if halfedge.boundary:
        raise ValueError('attribute undefined for boundary halfedge')

    return linalg.angle(halfedge.vector, -halfedge.prev.vector)


def face_normal(face):
    """ Face normal.

    Compute face normal as cross product of edge vectors. For quads the
    normals of the two triangles split off at opposite corners are
    averaged.

    Parameters
    ----------
    face : Face
        Face of a mesh.

    Returns
    -------
    ~numpy.ndarray, shape (3, )
        Unit normal vector. The zero vector for virtual faces and for
        faces of vanishing area.
    """
    if face.virtual:
        return np.zeros(3)

    h = face.halfedge
    normal = linalg.cross(h.vector, -h.prev.vector)

    if len(face) == 4:
        g = h.next.next
        normal = (_unit_or_zero(normal) +
                  _unit_or_zero(linalg.cross(g.vector, -g.prev.vector)))

    return _unit_or_zero(normal)


def face_normals(mesh):
    """ Face normals.

    Parameters
    ----------
    mesh : Mesh
        Triangle or quad mesh.

    Returns
    -------
    ~numpy.ndarray, shape (f, 3)
        One row per live face, in face order.
    """
    return np.array([face_normal(f) for f in mesh]).reshape(-1, 3)


def face_area(face):
    """ Face area.

    Parameters
    ----------
    face : Face
        Triangular or quadrilateral face.

    Returns
    -------
    float
        Face area, a quad contributes the area of two triangles split
        off at opposite corners. 0.0 for virtual faces.
    """
    if face.virtual:
        return 0.0

    h = face.halfedge
    area = 0.5 * linalg.norm(linalg.cross(h.vector, -h.prev.vector))

    if len(face) == 4:
        g = h.next.next
        area += 0.5 * linalg.norm(linalg.cross(g.vector, -g.prev.vector))

    return area


def vertex_normal(vertex, weighting=NormalWeighting.UNIFORM):
    """ Vertex normal.

    Compute vertex normal as weighted sum of incident face normals.

    Parameters
    ----------
    vertex : Vertex
        Vertex of a mesh.
    weighting : NormalWeighting, optional
        Weight applied to each face normal.

    Raises
    ------
    TypeError
        If `weighting` is not a :class:`~qemesh.flags.NormalWeighting`.

    Returns
    -------
    ~numpy.ndarray, shape (3, )
        Unit normal vector.

    Note
    ----
    Vertex normals are not well defined for isolated vertices. The
    result consists of :obj:`np.nan` values in this case.
    """
    if not isinstance(weighting, NormalWeighting):
        raise TypeError(f'invalid weighting {weighting!r}')

    if vertex.isolated:
        return np.full(3, np.nan)

    normal = np.zeros(3)

    # The face of an outgoing halfedge has its corner at the vertex.
    for h in vertex._hiter():
        if h.boundary:
            continue

        n = face_normal(h.face)

        if weighting is NormalWeighting.AREA:
            n = n * face_area(h.face)
        elif weighting is NormalWeighting.ANGLE:
            n = n * angle(h)

        normal += n

    return _unit_or_zero(normal)


def vertex_normals(mesh, weighting=NormalWeighting.UNIFORM):
    """ Vertex normals.

    Parameters
    ----------
    mesh : Mesh
        A mesh.
    weighting : NormalWeighting, optional
        Weight applied to each face normal.

    Returns
    -------
    ~numpy.ndarray, shape (n, 3)
        One row per live vertex, in vertex order.
    """
    return np.array([vertex_normal(v, weighting) for v in mesh.vertices
                     if not v.deleted]).reshape(-1, 3)


def edge_length(mesh):
    """ Edge length statistics.

    Minimal, maximal, and average edge length of a mesh.

    Parameters
    ----------
    mesh : Mesh
        A mesh with at least one edge.

    Returns
    -------
    min : float
        Minimal edge length.
    max : float
        Maximal edge length.
    avg : float
        Average edge length.
    """
    min, max = np.inf, -np.inf
    avg, cnt = 0.0, 0

    for e in mesh.edges:
        if e.deleted:
            continue

        length = linalg.norm(e.halfedge.vector)

        avg += length
        cnt += 1

        min = length if length < min else min
        max = length if length > max else max

    return min, max, avg / cnt

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

""" Halfedge data structure.

An orientable 2-manifold triangle (or quad) mesh, with or without boundary,
is described by five flat containers:

    - a list of :class:`Vertex` objects,
    - a list of :class:`Halfedge` objects,
    - a list of :class:`Edge` objects,
    - a list of real :class:`Face` objects,
    - and a list of virtual :class:`Face` objects, one per boundary loop.

Mesh items refer to each other by integer index into these containers,
never by object reference. Properties like :attr:`Halfedge.next` resolve
an index to the corresponding item. Items removed by mesh modifications
are marked as deleted (tombstoned) and physically dropped by
:meth:`Mesh.clean`.

Note
----
To ease debugging, this module relies on assertions which can slow down
script execution. You can disable assertions by running in optimized mode
via the "-O" command line argument.
"""

import operator

from pathlib import Path
from time import time

import numpy as np

import qemesh.obj as obj

from qemesh.flags import QueueUpdate


CBOLD = '\33[1m'                            # bold text, white on black
CWHITERED = '\33[41m'                       # white on red background
CEND = '\33[0m'


class Mesh:
    """ Mesh kernel.

    The combinatorics of a mesh can be built by reading from a file or
    by converting a sequence of vertex coordinates and a sequence of face
    definitions to its halfedge representation.

    Parameters
    ----------
    points : array_like, optional
        Vertex coordinates, shape (n, 3). Always copied into a float
        array owned by the mesh.
    faces : array_like, optional
        Face definitions, triangles or quads.
    base : int, optional
        Index of the first vertex in `faces`, 1 for OBJ style indexing.
    name : str, optional
        Name tag.
    quiet : bool, optional
        Suppress console output.

    Raises
    ------
    ParseError
        If `points` or `faces` are malformed.
    NonManifoldError
        When trying to initialize a mesh from non-manifold data.

    Note
    ----
    Construction either succeeds completely or raises. Containers are
    assembled first and attached to the mesh only after all checks have
    passed.
    """

    def __init__(self, points=None, faces=None, *, base=0, name=None,
                 quiet=True):
        """ Initialize from vertex and face lists.
        """
        if points is None and faces is not None:
            msg = "face definitions require 'points' argument != None"
            raise ValueError(msg)

        start = time()

        points = np.zeros((0, 3)) if points is None else points
        faces = [] if faces is None else faces

        # Both calls may raise. Nothing is attached to the mesh before
        # they have completed.
        points, faces = _validate(points, faces, base)
        containers = _build(self, len(points), faces)

        self._points = points
        self._verts, self._halfs, self._edges, self._faces, self._loops = \
            containers

        # The corresponding property setter will strip any directory
        # prefix and type suffix from the name.
        self.name = name

        if not quiet:
            nv, ne, nf = self.size

            print(f'built mesh {CBOLD}{self._name}{CEND} ' +
                  f'({time()-start:.3f} sec)')
            print(f'\t├─ {nv} vertices')
            print(f'\t├─ {ne} edges')
            print(f'\t├─ {nf} faces')
            print(f'\t└─ {len(self._loops)} boundary loops')

            # Typically one does not expect isolated vertices in a mesh.
            if any(v._halfedge is None for v in self._verts):
                print(f'{CWHITERED}there are isolated vertices{CEND}')

    def __iter__(self):
        """ Face iterator.

        The returned iterator visits all real faces of a mesh that are
        **not** marked as deleted in order of ascending face indices.

        Yields
        ------
        Face
            Next face in insertion order traversal.
        """
        return (f for f in self._faces if not f._deleted)

    @property
    def points(self):
        """ Vertex coordinate array.

        Direct read and write access to vertex coordinates. Changing the
        size of the coordinate array is likely to break the halfedge data
        structure.

        :type: ~numpy.ndarray

        Note
        ----
        The vertex coordinate array contains coordinate entries of deleted
        vertices. Calling :meth:`clean` removes those entries.
        """
        return self._points

    @property
    def vertices(self):
        """ Vertex list.

        Read access to the vertex list. The list may contain deleted
        vertices.

        :type: list[Vertex]
        """
        return self._verts

    @property
    def halfedges(self):
        """ Halfedge list.

        Real halfedges come first, followed by the synthetic halfedges of
        all boundary loops. The list may contain deleted halfedges.

        :type: list[Halfedge]
        """
        return self._halfs

    @property
    def edges(self):
        """ Edge list.

        The list may contain deleted edges.

        :type: list[Edge]
        """
        return self._edges

    @property
    def faces(self):
        """ Face list.

        Real faces only, see :attr:`boundaries` for the virtual faces
        that close off holes. The list may contain deleted faces.

        :type: list[Face]

        This is **not** the list passed as argument `faces` during mesh
        construction, use :meth:`soup` to obtain face definitions.
        """
        return self._faces

    @property
    def boundaries(self):
        """ Boundary loop list.

        One virtual face per hole. Empty for closed meshes.

        :type: list[Face]
        """
        return self._loops

    @property
    def size(self):
        """ Mesh size.

        Mesh size **not** accounting for deleted items. The attribute value
        :math:`(v, e, f)` holds the number of vertices, the number of edges,
        and the number of real faces.

        :type: (int, int, int)
        """
        return (sum(1 for v in self._verts if not v._deleted),
                sum(1 for e in self._edges if not e._deleted),
                sum(1 for f in self._faces if not f._deleted))

    @property
    def euler_characteristic(self):
        r""" Euler characteristic.

        The value :math:`v - e + f`, equal to 2 for closed meshes of
        genus 0.

        :type: int
        """
        nv, ne, nf = self.size
        return nv - ne + nf

    @property
    def name(self):
        """ Name property.

        :type: str

        Note
        ----
        The returned string does not include a type suffix!
        """
        return self._name

    @name.setter
    def name(self, value):
        self._name = value if value is None else Path(value).stem

    @classmethod
    def read(cls, filename, *, quiet=True):
        """ Read mesh from file.

        Read mesh combinatorics (face definitions) and vertex coordinates
        from an OBJ file.

        Parameters
        ----------
        filename : str
            Name of an OBJ file.
        quiet : bool, optional
            Suppress console output.

        Raises
        ------
        ParseError
            If the file contents cannot be interpreted.
        NonManifoldError
            If the face definitions are non-manifold.

        Returns
        -------
        Mesh
            Mesh object.
        """
        if not quiet:
            start = time()
            print(f'reading {CBOLD}{Path(filename).name}{CEND}', end=' ...')

        try:
            verts, faces = obj.read(filename, 'v', 'f')
        except ValueError as error:
            msg = f'cannot parse {Path(filename).name}: {error}'
            raise ParseError(msg) from error

        if not quiet:
            print(f' done ({time()-start:.3f} sec)')

        if verts is None:
            verts = np.zeros((0, 3))

        return cls(verts, faces, name=filename, quiet=quiet)

    def write(self, filename, quiet=True):
        """ Write mesh to file.

        Live vertices and faces are written as an OBJ file, see
        :meth:`soup` for the indexing scheme.

        Parameters
        ----------
        filename : str
            Name of output file.
        quiet : bool, optional
            Suppress console output.
        """
        if not quiet:
            start = time()
            print(f'writing {CBOLD}{Path(filename).name}{CEND}', end=' ...')

        points, faces = self.soup()
        obj.write(filename, f=faces, name=self._name, v=points)

        if not quiet:
            print(f' done ({time()-start:.3} sec)')

    def soup(self):
        """ Indexed face set.

        Vertex coordinates and face definitions of all live items. Vertex
        indices are dense and preserve the relative order of vertices.

        Returns
        -------
        points : ~numpy.ndarray, shape (n, 3)
            Vertex coordinates.
        faces : list[list[int]]
            Face definitions, 0-based.
        """
        vidx = [i for i, v in enumerate(self._verts) if not v._deleted]
        vmap = {old: new for new, old in enumerate(vidx)}

        points = self._points[vidx, ...].copy()
        faces = [[vmap[int(v)] for v in f] for f in self]

        return points, faces

    def add_vertex(self, point):
        """ Create and add new vertex.

        Parameters
        ----------
        point : array_like, shape (3, )
            Vertex coordinates.

        Raises
        ------
        ValueError
            If `point` has the wrong shape.

        Returns
        -------
        Vertex
            The newly created, isolated :class:`Vertex` instance.
        """
        self._points = obj._array_append(self._points, point)

        v = Vertex(len(self._verts), parent=self)
        self._verts.append(v)

        return v

    def collapse_edge(self, edge, point, *, check=True):
        """ Perform edge collapse.

        Both endpoints of `edge` are replaced by a new vertex at `point`.
        Each real triangle incident to `edge` is removed and its two
        remaining edges are merged into one. A boundary edge has a single
        real triangle, its synthetic halfedge is unlinked from the
        boundary loop.

        Parameters
        ----------
        edge : Edge
            Edge to be contracted.
        point : array_like, shape (3, )
            Coordinates of the new vertex.
        check : bool, optional
            Pass :obj:`False` to skip the :attr:`~Edge.collapsible` test.

        Returns
        -------
        vertex : Vertex or None
            The new vertex or :obj:`None` if `edge` cannot be collapsed
            (requires ``check=True``).
        removed : int
            Number of removed real faces.

        Note
        ----
        Removed items are tombstoned, not dropped. Call :meth:`clean`
        once all modifications are done.
        """
        if edge._deleted or (check and not edge.collapsible):
            return None, 0

        halfs = self._halfs

        h = halfs[edge._halfedge]
        t = halfs[h._twin]

        a = self._verts[h._vertex]
        b = self._verts[t._vertex]

        # Collect the outgoing halfedges of both endpoints before any
        # pointer is modified. Rotation needs intact twin/next pointers.
        fan = list(self._rotate(a._idx)) + list(self._rotate(b._idx))

        v = self.add_vertex(point)

        for k in fan:
            halfs[k]._vertex = v._idx

        removed = 0

        for x in (h, t):
            if x._boundary:
                # Skip the synthetic halfedge in its boundary loop. The
                # loop stays closed and becomes one halfedge shorter.
                halfs[x._prev]._next = x._next
                halfs[x._next]._prev = x._prev

                loop = self._loops[x._face]

                if loop._halfedge == x._idx:
                    loop._halfedge = x._next

                continue

            #     c
            #    / ^
            # l / f \ r
            #  v     \
            #  a----->b
            #     x
            f = self._faces[x._face]
            l = halfs[x._prev]
            r = halfs[x._next]

            lt = halfs[l._twin]
            rt = halfs[r._twin]

            # The two remaining edges of f are merged into a new edge.
            # Prefer a real halfedge as representative.
            e = Edge(len(self._edges), parent=self)
            e._halfedge = rt._idx if lt._boundary else lt._idx
            self._edges.append(e)

            self._edges[l._edge]._deleted = True
            self._edges[r._edge]._deleted = True

            lt._twin = rt._idx
            rt._twin = lt._idx
            lt._edge = e._idx
            rt._edge = e._idx

            # Vertex opposite the collapsed edge. Its outgoing halfedge
            # l is about to be removed.
            self._verts[l._vertex]._halfedge = rt._idx

            l._deleted = True
            r._deleted = True
            f._deleted = True

            removed += 1

        h._deleted = True
        t._deleted = True
        a._deleted = True
        b._deleted = True
        edge._deleted = True

        # Any surviving outgoing halfedge will do. Link conditions ensure
        # there is at least one.
        v._halfedge = next(k for k in fan if not halfs[k]._deleted)

        return v, removed

    def clean(self):
        """ Garbage collection.

        Removes all deleted mesh items from the respective containers and
        assigns dense indices to the survivors, preserving their relative
        order. Previously obtained indices may become invalid.
        """
        assert len(self._points) == len(self._verts)

        def renumber(items):
            mapping = [None] * len(items)
            count = 0

            for i, item in enumerate(items):
                if not item._deleted:
                    mapping[i] = count
                    count += 1

            return mapping

        vmap = renumber(self._verts)
        hmap = renumber(self._halfs)
        emap = renumber(self._edges)
        fmap = renumber(self._faces)
        lmap = renumber(self._loops)

        # Update references held by live items. A reference to a deleted
        # item maps to None and trips the assertions below.
        for h in self._halfs:
            if h._deleted:
                continue

            h._vertex = vmap[h._vertex]
            h._edge = emap[h._edge]
            h._face = (lmap if h._boundary else fmap)[h._face]
            h._next = hmap[h._next]
            h._prev = hmap[h._prev]
            h._twin = hmap[h._twin]

            assert None not in (h._vertex, h._edge, h._face,
                                h._next, h._prev, h._twin)

        for v in self._verts:
            if not v._deleted and v._halfedge is not None:
                v._halfedge = hmap[v._halfedge]
                assert v._halfedge is not None

        for item in self._edges + self._faces + self._loops:
            if not item._deleted:
                item._halfedge = hmap[item._halfedge]
                assert item._halfedge is not None

        # Move the coordinates of live vertices to the front of the point
        # array, preserving their relative order. Then compress the array
        # by in-place resizing.
        vidx = [i for i, k in enumerate(vmap) if k is not None]

        shape = list(self._points.shape)
        shape[0] = len(vidx)

        self._points[:len(vidx), ...] = self._points[vidx, ...]
        self._points.resize(shape, refcheck=False)

        for items in (self._verts, self._halfs, self._edges,
                      self._faces, self._loops):
            # Invalidate removed items. This should make it easier to find
            # bugs originating from references held outside the mesh.
            for item in items:
                if item._deleted:
                    item._invalidate()

            items[:] = (item for item in items if not item._deleted)

            for i, item in enumerate(items):
                item._idx = i

    def simplify(self, ratio, *, update=QueueUpdate.LOCAL, quiet=True):
        """ Quadric error metric simplification.

        Repeatedly collapses the edge of least quadric error until the
        number of faces drops to ``ceil(f * (1 - ratio))`` where `f` is
        the current number of faces. Afterwards :meth:`clean` is called.

        Parameters
        ----------
        ratio : float
            Fraction of faces to remove. Values are clamped to [0, 1].
        update : QueueUpdate, optional
            Priority queue maintenance after each collapse.
        quiet : bool, optional
            Suppress console output.

        Warns
        -----
        IrreducibleMeshWarning
            If no collapsible edge remains before the target face count
            is reached.

        Note
        ----
        Equivalent to ``Decimator(mesh, ...).run(ratio)``, use a
        :class:`~qemesh.decimate.Decimator` directly to inspect the
        collapse history.
        """
        import qemesh.decimate as decimate

        decimator = decimate.Decimator(self, update=update, quiet=quiet)
        decimator.run(ratio, stacklevel=2)

    def check(self):
        """ Perform sanity checks.

        Verifies the halfedge invariants over all live items: twin
        symmetry, closed face cycles, at most two halfedges per vertex
        pair, live representatives, and well-formed boundary loops.

        Raises
        ------
        AssertionError
            If any invariant is violated.
        """
        halfs = self._halfs

        assert len(self._points) == len(self._verts)

        pairs = dict()

        for h in halfs:
            assert halfs[h._idx] is h

            if h._deleted:
                continue

            t = halfs[h._twin]

            assert not t._deleted
            assert t._twin == h._idx
            assert t._edge == h._edge
            assert not self._edges[h._edge]._deleted
            assert not self._verts[h._vertex]._deleted

            # The head of h is the tail of its twin.
            assert halfs[h._next]._vertex == t._vertex
            assert halfs[halfs[h._prev]._next] is h

            # Synthetic halfedges live on virtual faces and are paired
            # with real halfedges.
            face = (self._loops if h._boundary else self._faces)[h._face]

            assert not face._deleted
            assert face._virtual == h._boundary
            assert not (h._boundary and t._boundary)

            key = frozenset((h._vertex, t._vertex))
            pairs[key] = pairs.get(key, 0) + 1

            assert len(key) == 2
            assert pairs[key] <= 2

        for v in self._verts:
            assert self._verts[v._idx] is v

            if not v._deleted and v._halfedge is not None:
                assert not halfs[v._halfedge]._deleted
                assert halfs[v._halfedge]._vertex == v._idx

        for e in self._edges:
            assert self._edges[e._idx] is e

            if not e._deleted:
                assert not halfs[e._halfedge]._deleted
                assert halfs[e._halfedge]._edge == e._idx

        for f in self._faces + self._loops:
            if f._deleted:
                continue

            cycle = list(self._cycle(f._halfedge))

            for k in cycle:
                assert not halfs[k]._deleted
                assert halfs[k]._face == f._idx
                assert halfs[k]._boundary == f._virtual

            # Walking backwards visits the same halfedges in reverse.
            k = f._halfedge

            for expected in [cycle[0]] + cycle[:0:-1]:
                assert k == expected
                k = halfs[k]._prev

            assert k == f._halfedge

    def _rotate(self, v):
        """ Outgoing halfedge indices of vertex `v`.
        """
        start = self._verts[v]._halfedge

        if start is None:
            return

        h = start

        while True:
            yield h
            h = self._halfs[self._halfs[h]._twin]._next

            if h == start:
                return

    def _cycle(self, h):
        """ Halfedge indices of the loop starting at halfedge `h`.
        """
        start = h

        while True:
            yield h
            h = self._halfs[h]._next

            if h == start:
                return


class Vertex:
    """ Vertex base class.

    Vertices are considered as abstract topological entities. Vertex
    coordinates are stored in the parent mesh and accessed via the
    :attr:`point` property.

    Parameters
    ----------
    index : int
        Vertex index.
    parent : Mesh, optional
        The parent mesh object.

    Note
    ----
    In addition to :attr:`index`, implementations of the special functions
    :meth:`~object.__int__` and :meth:`~object.__index__` are provided.
    The latter makes it possible to use vertex instances as list indices.
    """

    def __init__(self, index, parent=None):
        self._idx = index
        self._mesh = parent
        self._halfedge = None

        self._deleted = False

        # Cached quadric, None if invalid.
        self._quadric = None

    def __repr__(self):
        return f'Vertex({self._idx})'

    def __index__(self):
        return self._idx

    def __int__(self):
        return self._idx

    def __bool__(self):
        return True

    @property
    def index(self):
        """ Vertex index.

        Position of the vertex in the list :attr:`~Mesh.vertices` of all
        mesh vertices. Same as ``int(self)``.

        :type: int
        """
        return self._idx

    @property
    def point(self):
        """ Vertex coordinates.

        View of the corresponding row of the parent mesh's coordinate
        array.

        :type: ~numpy.ndarray
        """
        return self._mesh._points[self._idx, ...]

    @point.setter
    def point(self, value):
        self._mesh._points[self._idx, ...] = value

    @property
    def halfedge(self):
        """ Outward pointing halfedge.

        A halfedge that starts at the vertex or :obj:`None` for isolated
        vertices.

        :type: Halfedge
        """
        assert not self._deleted

        if self._halfedge is None:
            return None

        return self._mesh._halfs[self._halfedge]

    @property
    def degree(self):
        """ Vertex degree.

        The number of incident edges.

        :type: int
        """
        assert not self._deleted
        return sum(1 for _ in self._mesh._rotate(self._idx))

    @property
    def deleted(self):
        """ Internal state.

        Edge collapses render vertices as deleted when they do no longer
        contribute to a mesh's combinatorics.

        :type: bool
        """
        return self._deleted

    @property
    def boundary(self):
        """ Topological state.

        A vertex is a boundary vertex if one of its outgoing halfedges
        is a synthetic boundary halfedge.

        :type: bool
        """
        assert not self._deleted
        return any(h._boundary for h in self._hiter())

    @property
    def isolated(self):
        """ Topological state.

        A vertex is isolated if it is not incident to any face.

        :type: bool
        """
        assert not self._deleted
        return self._halfedge is None

    def _invalidate(self):
        """ Reset all combinatorial attributes.
        """
        assert self._deleted

        self._idx = None
        self._mesh = None
        self._halfedge = None
        self._quadric = None

    def _viter(self):
        """ Adjacent vertex iterator.
        """
        return (h.twin.vertex for h in self._hiter())

    def _fiter(self):
        """ Incident real face iterator.
        """
        return (h.face for h in self._hiter() if not h._boundary)

    def _hiter(self):
        """ Outgoing halfedge iterator.
        """
        assert not self._deleted

        halfs = self._mesh._halfs
        return (halfs[h] for h in self._mesh._rotate(self._idx))


class Halfedge:
    """ Halfedge base class.

    A halfedge is bound to the vertex it points away from. It stores the
    indices of its successor, predecessor, and twin halfedge as well as
    the incident face and its edge. A closed loop of halfedges defines a
    face and its orientation.

    Parameters
    ----------
    index : int
        Halfedge index.
    parent : Mesh, optional
        The parent mesh object.

    Note
    ----
    Synthetic halfedges close off holes. Their :attr:`boundary` attribute
    is set and their face is a virtual face from :attr:`Mesh.boundaries`.
    """

    def __init__(self, index, parent=None):
        self._idx = index
        self._mesh = parent

        self._vertex = None
        self._edge = None
        self._face = None
        self._next = None
        self._prev = None
        self._twin = None

        self._boundary = False
        self._deleted = False

    def __repr__(self):
        return f'Halfedge({self._idx})'

    def __index__(self):
        return self._idx

    def __int__(self):
        return self._idx

    def __bool__(self):
        return True

    @property
    def index(self):
        """ Halfedge index.

        :type: int
        """
        return self._idx

    @property
    def vertex(self):
        """ Tail vertex.

        :type: Vertex
        """
        assert not self._deleted
        return self._mesh._verts[self._vertex]

    @property
    def vector(self):
        """ Halfedge direction vector.

        The displacement from the tail of the halfedge to the tail of its
        successor.

        :type: ~numpy.ndarray
        """
        assert not self._deleted
        return self.next.vertex.point - self.vertex.point

    @property
    def next(self):
        """ Successor halfedge.

        :type: Halfedge
        """
        assert not self._deleted
        return self._mesh._halfs[self._next]

    @property
    def prev(self):
        """ Predecessor halfedge.

        :type: Halfedge
        """
        assert not self._deleted
        return self._mesh._halfs[self._prev]

    @property
    def twin(self):
        """ Opposite halfedge.

        :type: Halfedge
        """
        assert not self._deleted
        return self._mesh._halfs[self._twin]

    @property
    def edge(self):
        """ Undirected edge.

        :type: Edge
        """
        assert not self._deleted
        return self._mesh._edges[self._edge]

    @property
    def face(self):
        """ Incident face.

        The face to the left of the halfedge. A virtual face in case of
        a boundary halfedge.

        :type: Face
        """
        assert not self._deleted

        if self._boundary:
            return self._mesh._loops[self._face]

        return self._mesh._faces[self._face]

    @property
    def boundary(self):
        """ Topological state.

        :obj:`True` for synthetic halfedges of a boundary loop.

        :type: bool
        """
        return self._boundary

    @property
    def deleted(self):
        """ Internal state.

        :type: bool
        """
        return self._deleted

    def _invalidate(self):
        """ Reset all combinatorial attributes.
        """
        assert self._deleted

        self._idx = None
        self._mesh = None
        self._vertex = self._edge = self._face = None
        self._next = self._prev = self._twin = None


class Edge:
    """ Edge base class.

    An unordered vertex pair represented by one of its two halfedges.
    Edges cache their collapse cost and optimal collapse location.

    Parameters
    ----------
    index : int
        Edge index.
    parent : Mesh, optional
        The parent mesh object.
    """

    def __init__(self, index, parent=None):
        self._idx = index
        self._mesh = parent
        self._halfedge = None

        self._deleted = False

        # Cached collapse cost and location, None if invalid.
        self._cost = None
        self._point = None

    def __repr__(self):
        return f'Edge({self._idx})'

    def __index__(self):
        return self._idx

    def __int__(self):
        return self._idx

    def __bool__(self):
        return True

    @property
    def index(self):
        """ Edge index.

        :type: int
        """
        return self._idx

    @property
    def halfedge(self):
        """ Representative halfedge.

        A real halfedge unless both halves are synthetic (which does not
        happen in a valid mesh).

        :type: Halfedge
        """
        assert not self._deleted
        return self._mesh._halfs[self._halfedge]

    @property
    def vertices(self):
        """ Edge endpoints.

        :type: (Vertex, Vertex)
        """
        h = self.halfedge
        return h.vertex, h.twin.vertex

    @property
    def deleted(self):
        """ Internal state.

        :type: bool
        """
        return self._deleted

    @property
    def boundary(self):
        """ Topological state.

        An edge is a boundary edge if one of its halfedges is synthetic.

        :type: bool
        """
        h = self.halfedge
        return h._boundary or h.twin._boundary

    @property
    def collapsible(self):
        """ Topological state.

        An edge of a triangle mesh is collapsible if contracting it keeps
        the mesh a 2-manifold with boundary:

            - all incident real faces are triangles,
            - the common neighbors of both endpoints are exactly the
              vertices opposite the edge in its incident triangles,
            - an interior edge does not join two boundary vertices,
            - no incident triangle has both other edges on the boundary.

        :type: bool
        """
        assert not self._deleted

        mesh = self._mesh
        halfs = mesh._halfs

        h = halfs[self._halfedge]
        t = halfs[h._twin]

        opposite = []

        for x in (h, t):
            if x._boundary:
                continue

            if sum(1 for _ in mesh._cycle(x._idx)) != 3:
                return False

            l = halfs[x._prev]
            r = halfs[x._next]

            if halfs[l._twin]._boundary and halfs[r._twin]._boundary:
                return False

            opposite.append(l._vertex)

        if len(set(opposite)) != len(opposite):
            return False

        a = mesh._verts[h._vertex]
        b = mesh._verts[t._vertex]

        if not (h._boundary or t._boundary) and a.boundary and b.boundary:
            return False

        # The head of an outgoing halfedge is the tail of its twin.
        ring_a = {halfs[halfs[k]._twin]._vertex for k in mesh._rotate(a._idx)}
        ring_b = {halfs[halfs[k]._twin]._vertex for k in mesh._rotate(b._idx)}

        return ring_a & ring_b == set(opposite)

    def _invalidate(self):
        """ Reset all combinatorial attributes.
        """
        assert self._deleted

        self._idx = None
        self._mesh = None
        self._halfedge = None
        self._cost = None
        self._point = None


class Face:
    """ Face base class.

    In a halfedge based mesh representation a face is defined by the
    closed loop of halfedges starting at the :attr:`halfedge` attribute.
    Virtual faces represent boundary loops (holes) rather than geometry.

    Parameters
    ----------
    index : int
        Face index.
    parent : Mesh, optional
        The parent mesh object.
    virtual : bool, optional
        Mark a boundary loop face.


    The vertices of a face can be visited by iterating over the face:

    .. code-block:: python
       :linenos:

        for v in f:
            print(v)
    """

    def __init__(self, index, parent=None, virtual=False):
        self._idx = index
        self._mesh = parent
        self._halfedge = None

        self._virtual = virtual
        self._deleted = False

    def __repr__(self):
        return f'Face({self._idx})'

    def __index__(self):
        return self._idx

    def __int__(self):
        return self._idx

    def __len__(self):
        """ Face valence.

        The number of incident vertices.

        Returns
        -------
        int
            Number of vertices.
        """
        assert not self._deleted
        return sum(1 for _ in self._mesh._cycle(self._halfedge))

    def __bool__(self):
        return True

    def __iter__(self):
        """ Vertex iterator.

        Yields
        ------
        Vertex
            Next vertex in counter-clockwise traversal, starting with
            ``self.halfedge.vertex``.
        """
        return (h.vertex for h in self._hiter())

    @property
    def index(self):
        """ Face index.

        Position of the face in :attr:`~Mesh.faces`, or in
        :attr:`~Mesh.boundaries` for virtual faces.

        :type: int
        """
        return self._idx

    @property
    def halfedge(self):
        """ Incident halfedge.

        :type: Halfedge
        """
        assert not self._deleted
        return self._mesh._halfs[self._halfedge]

    @property
    def virtual(self):
        """ Boundary loop state.

        :type: bool
        """
        return self._virtual

    @property
    def deleted(self):
        """ Internal state.

        :type: bool
        """
        return self._deleted

    def _invalidate(self):
        """ Reset all combinatorial attributes.
        """
        assert self._deleted

        self._idx = None
        self._mesh = None
        self._halfedge = None

    def _hiter(self):
        """ Incident halfedge iterator.
        """
        assert not self._deleted

        halfs = self._mesh._halfs
        return (halfs[h] for h in self._mesh._cycle(self._halfedge))


def _validate(points, faces, base):
    """ Check and normalize an indexed face set.

    Returns
    -------
    points : ~numpy.ndarray, shape (n, 3)
        Float copy of the vertex coordinates.
    faces : list[list[int]]
        Face definitions with 0-based indices.
    """
    try:
        points = np.array(points, dtype=float)
    except (TypeError, ValueError) as error:
        raise ParseError('vertex coordinates are not numeric') from error

    # The array has to own its data, it gets resized in place.
    if points.size == 0:
        points = np.zeros((0, 3))

    if points.ndim != 2 or points.shape[1] != 3:
        raise ParseError(f'expected points of shape (n, 3), '
                         f'got {points.shape}')

    n = len(points)
    soup = []

    for k, face in enumerate(faces):
        try:
            face = [operator.index(i) - base for i in face]
        except TypeError as error:
            msg = f'face #{k} contains non-integer vertex indices'
            raise ParseError(msg) from error

        if len(face) not in (3, 4):
            raise ParseError(f'face #{k} has {len(face)} vertices, ' +
                             'expected 3 or 4')

        if len(set(face)) != len(face):
            raise ParseError(f'face #{k} contains duplicate vertices')

        for i in face:
            if not 0 <= i < n:
                raise ParseError(f'face #{k} references vertex {i + base} ' +
                                 'out of range')

        soup.append(face)

    return points, soup


def _build(mesh, n, faces):
    """ Halfedge connectivity of a validated indexed face set.

    Parameters
    ----------
    mesh : Mesh
        Parent of all created items.
    n : int
        Number of vertices.
    faces : list[list[int]]
        Validated face definitions.

    Raises
    ------
    NonManifoldError
        If an undirected edge is claimed by more than two halfedges,
        halfedges of a shared edge have equal direction, or a vertex
        is non-manifold.

    Returns
    -------
    tuple(list, ...)
        Vertices, halfedges, edges, faces, and boundary loops.
    """
    verts = [Vertex(i, parent=mesh) for i in range(n)]
    halfs = []
    edges = []
    facs = []

    # Maps an undirected vertex pair (i, j), i < j, to the first halfedge
    # claiming it. The list twinned is aligned with halfs.
    claimed = dict()
    twinned = []

    for k, face in enumerate(faces):
        f = Face(k, parent=mesh)
        f._halfedge = len(halfs)
        facs.append(f)

        m = len(face)
        first = len(halfs)

        for j in range(m):
            v, w = face[j], face[(j + 1) % m]

            h = Halfedge(first + j, parent=mesh)
            h._vertex = v
            h._face = k
            h._next = first + (j + 1) % m
            h._prev = first + (j - 1) % m

            halfs.append(h)
            twinned.append(False)

            verts[v]._halfedge = h._idx

            key = (v, w) if v < w else (w, v)
            t = claimed.get(key)

            if t is None:
                e = Edge(len(edges), parent=mesh)
                e._halfedge = h._idx
                edges.append(e)

                h._edge = e._idx
                claimed[key] = h._idx
            elif twinned[t]:
                raise NonManifoldError(f'edge {key} is non-manifold')
            elif halfs[t]._vertex == v:
                msg = f'edge {key} has inconsistent orientation'
                raise NonManifoldError(msg)
            else:
                h._twin = t
                h._edge = halfs[t]._edge
                halfs[t]._twin = h._idx

                twinned[t] = True
                twinned[h._idx] = True

    # Halfedges without twin lie on the boundary. Walk each hole and close
    # it off with a loop of synthetic halfedges bound to a virtual face.
    loops = []
    nreal = len(halfs)

    for i in range(nreal):
        if twinned[i]:
            continue

        loop = Face(len(loops), parent=mesh, virtual=True)
        cycle = []
        current = i

        while True:
            # Rotate about the head of the current halfedge until the next
            # halfedge without twin is found.
            nxt = halfs[current]._next

            while twinned[nxt]:
                twin = halfs[nxt]._twin

                # Reaching a hole that has already been closed means the
                # vertex has more than one boundary gap.
                if twin >= nreal:
                    msg = f'vertex #{halfs[nxt]._vertex} is non-manifold'
                    raise NonManifoldError(msg)

                nxt = halfs[twin]._next

            b = Halfedge(len(halfs), parent=mesh)
            b._vertex = halfs[nxt]._vertex
            b._edge = halfs[current]._edge
            b._face = loop._idx
            b._twin = current
            b._boundary = True

            halfs[current]._twin = b._idx
            halfs.append(b)
            twinned.append(True)
            cycle.append(b)

            current = nxt

            if current == i:
                break

            if len(cycle) > nreal:
                msg = f'vertex #{halfs[i]._vertex} is non-manifold'
                raise NonManifoldError(msg)

        # Synthetic halfedges run against the direction of the real
        # boundary halfedges.
        size = len(cycle)

        for j, b in enumerate(cycle):
            b._next = cycle[(j - 1) % size]._idx
            b._prev = cycle[(j + 1) % size]._idx
            twinned[b._twin] = True

        loop._halfedge = cycle[0]._idx
        loops.append(loop)

    # A manifold vertex admits a single fan that visits all outgoing
    # halfedges when rotating about the vertex.
    outgoing = [0] * n

    for h in halfs:
        outgoing[h._vertex] += 1

    for v in verts:
        if v._halfedge is None:
            continue

        count = 0
        h = v._halfedge

        while count <= outgoing[v._idx]:
            count += 1
            h = halfs[halfs[h]._twin]._next

            if h == v._halfedge:
                break

        if count != outgoing[v._idx]:
            raise NonManifoldError(f'vertex #{v._idx} is non-manifold')

    return verts, halfs, edges, facs, loops


class ParseError(ValueError):
    """ Malformed input exception.

    Raised if an indexed face set or a mesh file cannot be interpreted,
    e.g., when a face references a vertex index out of range.
    """

    pass


class NonManifoldError(Exception):
    """ Manifold exception base class.

    Raised if an operation results in a topological configuration that
    violates the manifold condition.
    """

    pass


class IrreducibleMeshWarning(UserWarning):
    """ Decimation warning.

    Issued when no collapsible edge remains before the requested face
    count is reached. The mesh is still valid, only less reduced.
    """

    pass

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

""" Mesh decimation.

Greedy edge collapse driven by quadric error metrics. The driver keeps all
live edges in a priority queue ordered by collapse cost and repeatedly
contracts the cheapest collapsible edge until a target face count is
reached::

    IDLE -> INITIALIZING -> COLLAPSING -> COMPACTING

Typical use goes through :meth:`~qemesh.hds.Mesh.simplify`. Driving a
:class:`Decimator` step by step allows to inspect the mesh in between.
"""

import math
import warnings

from time import time

import qemesh.linalg as linalg
import qemesh.quadric as quadric

from qemesh.flags import DecimationState
from qemesh.flags import QueueUpdate
from qemesh.heap import MinHeap
from qemesh.hds import CBOLD, CEND
from qemesh.hds import IrreducibleMeshWarning


class Decimator:
    """ Edge collapse driver.

    Parameters
    ----------
    mesh : Mesh
        Triangle mesh, modified in place.
    update : QueueUpdate, optional
        Priority queue maintenance after each collapse.
    quiet : bool, optional
        Suppress console output.

    Raises
    ------
    TypeError
        If `update` is not a :class:`~qemesh.flags.QueueUpdate`.

    Attributes
    ----------
    target : int or None
        Face count at which collapsing stops.
    face_count : int or None
        Current number of live faces.
    history : list[(int, float)]
        Index and cost of each collapsed edge, in collapse order. Edge
        indices refer to the mesh before compaction.
    """

    def __init__(self, mesh, *, update=QueueUpdate.LOCAL, quiet=True):
        if not isinstance(update, QueueUpdate):
            raise TypeError(f'invalid queue update {update!r}')

        self._mesh = mesh
        self._update = update
        self._quiet = quiet

        self._heap = MinHeap()
        self._state = DecimationState.IDLE

        self.target = None
        self.face_count = None
        self.history = []

    @property
    def state(self):
        """ Driver state.

        :type: DecimationState
        """
        return self._state

    def initialize(self, ratio):
        """ Compute quadrics and costs, fill the queue.

        Parameters
        ----------
        ratio : float
            Fraction of faces to remove, clamped to [0, 1].

        Raises
        ------
        RuntimeError
            If the driver has already been initialized.
        """
        if self._state is not DecimationState.IDLE:
            raise RuntimeError(f'cannot initialize in state {self._state}')

        self._state = DecimationState.INITIALIZING

        ratio = linalg.clamp(float(ratio), 0.0, 1.0)

        self.face_count = sum(1 for _ in self._mesh)
        self.target = math.ceil(self.face_count * (1.0 - ratio))

        self._rebuild()

        self._state = DecimationState.COLLAPSING

    def step(self):
        """ Pop the cheapest edge and collapse it if possible.

        Entries of deleted edges are dropped. So are entries of edges
        that fail the :attr:`~qemesh.hds.Edge.collapsible` test, they
        are queued again once their neighborhood changes.

        Raises
        ------
        RuntimeError
            If called outside the collapsing state.

        Returns
        -------
        bool
            :obj:`False` once the target is reached or the queue is
            exhausted.
        """
        if self._state is not DecimationState.COLLAPSING:
            raise RuntimeError(f'cannot collapse in state {self._state}')

        if self.face_count <= self.target or not self._heap:
            return False

        index, (cost, _) = self._heap.pop()
        edge = self._mesh.edges[index]

        if edge.deleted or not edge.collapsible:
            return True

        vertex, removed = self._mesh.collapse_edge(edge, edge._point,
                                                   check=False)

        self.face_count -= removed
        self.history.append((index, cost))

        if self._update is QueueUpdate.FULL:
            self._rebuild()
        else:
            self._refresh(vertex)

        return True

    def compact(self):
        """ Drop deleted items, see :meth:`~qemesh.hds.Mesh.clean`.
        """
        if self._state is not DecimationState.COLLAPSING:
            raise RuntimeError(f'cannot compact in state {self._state}')

        self._state = DecimationState.COMPACTING
        self._heap.clear()
        self._mesh.clean()

    def run(self, ratio, stacklevel=1):
        """ Decimate mesh.

        Parameters
        ----------
        ratio : float
            Fraction of faces to remove, clamped to [0, 1].
        stacklevel : int, optional
            Frames above the caller of :meth:`run` that a warning is
            attributed to, as in :func:`warnings.warn`.

        Warns
        -----
        IrreducibleMeshWarning
            If the queue runs empty before the target is reached.
        """
        start = time()

        self.initialize(ratio)

        if not self._quiet:
            print(f'decimating {CBOLD}{self._mesh.name}{CEND}: ' +
                  f'{self.face_count} -> {self.target} faces')

        while self.step():
            pass

        if self.face_count > self.target:
            warnings.warn(f'no collapsible edge left at {self.face_count} '
                          f'faces, target was {self.target}',
                          IrreducibleMeshWarning, stacklevel=stacklevel+1)

        self.compact()

        if not self._quiet:
            print(f'\t├─ {len(self.history)} edge collapses')
            print(f'\t└─ {self.face_count} faces ({time()-start:.3f} sec)')

    def _rebuild(self):
        """ Recompute all quadrics and costs, refill the queue.
        """
        for v in self._mesh.vertices:
            v._quadric = None

        for e in self._mesh.edges:
            e._cost = None
            e._point = None

        self._heap.clear()

        for e in self._mesh.edges:
            if not e.deleted:
                self._enqueue(e)

    def _refresh(self, vertex):
        """ Recompute quadrics and costs around a new vertex.

        Faces incident to the new vertex and its neighbors are the only
        ones that changed. Quadrics of these vertices and the costs of
        all edges incident to them are recomputed.
        """
        mesh = self._mesh

        ring = [vertex] + list(vertex._viter())
        edges = set()

        for v in ring:
            v._quadric = None
            edges.update(h._edge for h in v._hiter())

        for k in sorted(edges):
            e = mesh.edges[k]
            e._cost = None
            e._point = None

        for k in sorted(edges):
            self._enqueue(mesh.edges[k])

    def _enqueue(self, edge):
        cost, _ = quadric.edge_cost(edge)
        self._heap.push(edge.index, (cost, edge.index))

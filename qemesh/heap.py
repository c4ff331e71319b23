# Copyright 2024, m3shware
#
# Permission is hereby granted, free of charge, to any person obtaining a copy
# of this software and associated documentation files (the "Software"), to deal
# in the Software without restriction, including without limitation the rights
# to use, copy, modify, merge, publish, distribute, sublicense, and/or sell
# copies of the Software, and to permit persons to whom the Software is
# furnished to do so, subject to the following conditions:
#
# The above copyright notice and this permission notice shall be included in
# all copies or substantial portions of the Software.
#
# THE SOFTWARE IS PROVIDED "AS IS", WITHOUT WARRANTY OF ANY KIND, EXPRESS OR
# IMPLIED, INCLUDING BUT NOT LIMITED TO THE WARRANTIES OF MERCHANTABILITY,
# FITNESS FOR A PARTICULAR PURPOSE AND NONINFRINGEMENT. IN NO EVENT SHALL THE
# AUTHORS OR COPYRIGHT HOLDERS BE LIABLE FOR ANY CLAIM, DAMAGES OR OTHER
# LIABILITY, WHETHER IN AN ACTION OF CONTRACT, TORT OR OTHERWISE, ARISING FROM,
# OUT OF OR IN CONNECTION WITH THE SOFTWARE OR THE USE OR OTHER DEALINGS IN THE
# SOFTWARE.

""" Heap based priority queue implementation.

See **Algorithms in C**, *Parts 1--4* by Robert Sedgewick for the array based
heap implementation used in this module. Queued objects are keyed, i.e., an
object is queued at most once and its priority can be changed without
scanning the heap.
"""


class MinHeap:
    """ Priority queue.

    Smaller priority values signify higher priority. Generically, a
    priority is a numeric data type or a tuple of such. Objects of equal
    priority leave the queue in the order they were first pushed.

    Note
    ----
    Only `hashable <https://docs.python.org/3/glossary.html#term-hashable>`_
    objects can be added to a heap.
    """

    def __init__(self):
        """ Initialize empty heap.
        """
        # The priority queue is modelled as a binary tree that is stored in
        # an array. _heap[0] is never used, it's only there to simplify
        # computing parent/child indices. Entries are (object, priority,
        # serial) triples, the serial number orders equal priorities.
        self._heap = [None]
        self._hpos = dict()
        self._serial = 0

    def __bool__(self):
        """ Implicit empty heap check.
        """
        return len(self._heap) > 1

    def __contains__(self, item):
        """ Containment check.
        """
        return item in self._hpos

    def __len__(self):
        """ Return number of queued items.
        """
        return len(self._heap)-1

    def pop(self):
        """ Remove item of highest priority.

        Returns
        -------
        data : object
            Object of highest priority.
        priority : object
            Object priority.

        Raises
        ------
        IndexError
            When trying to remove items from an empty queue.
        """
        if len(self._heap) == 1:
            raise IndexError('pop from empty heap')

        # Remove the top element by swapping it to the end. Then shorten
        # the list and dictionary and restore the heap property.
        self._swap(1, len(self._heap)-1)
        top = self._heap.pop()
        del self._hpos[top[0]]
        self._fixdown(1)

        return top[:2]

    def push(self, data, priority):
        """ Add data object.

        Re-adding an already queued object will update the queued object's
        priority instead of adding a duplicate with a different priority,
        see :meth:`update`.

        Parameters
        ----------
        data : object
            Object to be added to the priority queue.
        priority : object
            Priority of the data object. Priorities have to be mutually
            comparable.

        Raises
        ------
        TypeError
            If `data` is not hashable.
        """
        if data in self._hpos:
            self.update(data, priority)
        else:
            self._hpos[data] = len(self._heap)
            self._heap.append((data, priority, self._serial))
            self._serial += 1
            self._fixup(len(self._heap)-1)

    def update(self, data, priority):
        """ Update priority of a data object.

        The object keeps its position in the insertion order.

        Parameters
        ----------
        data : object
            Object whose priority should be updated.
        priority : object
            New priority value.

        Raises
        ------
        KeyError
            If `data` is not an element of the queue.
        """
        # This can raise a KeyError
        k = self._hpos[data]

        _, _, serial = self._heap[k]
        self._heap[k] = (data, priority, serial)

        # Restore heap property.
        self._fixup(k)
        self._fixdown(k)

    def clear(self):
        """ Remove all queued objects.
        """
        del self._heap[1:]
        self._hpos.clear()
        self._serial = 0

    def _less(self, i, j):
        """ Strict ordering of heap entries at positions `i` and `j`.
        """
        _, pi, si = self._heap[i]
        _, pj, sj = self._heap[j]

        if pi == pj:
            return si < sj

        return pi < pj

    def _swap(self, i, j):
        """ Swap position of heap items.

        Swapping two heap elements will invalidate the heap property. This has
        to be fixed by subsequent calls to :meth:`_fixup` and :meth:`_fixdown`.

        Parameters
        ----------
        i : int
            Position of a heap element
        j : int
            Position of a heap element
        """
        self._hpos[self._heap[i][0]] = j
        self._hpos[self._heap[j][0]] = i

        self._heap[i], self._heap[j] = self._heap[j], self._heap[i]

    def _fixup(self, k):
        """ Restore heap property upwards.

        Parameters
        ----------
        k : int
            Index of heap element that violates the heap property.
        """
        # Swap the item at position k with its parent as long as it's of
        # higher priority.
        while k > 1 and self._less(k, k//2):
            self._swap(k, k//2)
            k = k//2

    def _fixdown(self, k):
        """ Restore heap property downwards.

        Parameters
        ----------
        k : int
            Index of heap element that violates the heap property.
        """
        # The largest index of any valid heap item.
        n = len(self._heap)-1

        # Successors of the item with index k have index 2k and 2k+1.
        while 2*k <= n:
            j = 2*k

            # There are two successors if j < n. Pick the one of higher
            # priority.
            if j < n and self._less(j+1, j):
                j += 1

            # If no swap is indicated the heap property is restored.
            if not self._less(j, k):
                break

            self._swap(j, k)
            k = j

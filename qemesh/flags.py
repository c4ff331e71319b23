# Copyright 2022-2024, m3sh76
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

""" Option enumerations.

Closed sets of choices used by geometric queries and the decimation
driver. Choices are resolved by identity at the call site, never by
string comparison.
"""

from enum import Enum
from enum import auto


class NormalWeighting(Enum):
    """ Vertex normal weighting enumeration.
    """

    UNIFORM = auto()
    """ Unweighted sum of incident face normals. """

    AREA = auto()
    """ Face normals scaled by face area. """

    ANGLE = auto()
    """ Face normals scaled by the corner angle at the vertex. """


class QueueUpdate(Enum):
    """ Priority queue maintenance after an edge collapse.
    """

    FULL = auto()
    """ Recompute every quadric and edge cost, rebuild the queue.

    Quadratic overall running time. Kept as reference behavior."""

    LOCAL = auto()
    """ Recompute quadrics and costs near the collapsed edge only.

    Produces the same collapse sequence as :attr:`FULL`."""


class DecimationState(Enum):
    """ Decimation driver states.
    """

    IDLE = auto()
    """ Driver created, queue not yet initialized. """

    INITIALIZING = auto()
    """ Computing vertex quadrics and edge costs. """

    COLLAPSING = auto()
    """ Repeatedly collapsing the edge of least cost. """

    COMPACTING = auto()
    """ Terminal state, tombstoned items have been dropped. """

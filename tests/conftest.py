import math

import numpy as np
import pytest

from qemesh.hds import Mesh


def grid(n, height=None):
    """ Triangulated n x n vertex grid over the unit square.
    """
    points = []

    for j in range(n):
        for i in range(n):
            z = 0.0 if height is None else height(i, j)
            points.append([i, j, z])

    faces = []

    for j in range(n-1):
        for i in range(n-1):
            a = j*n + i
            faces.append([a, a+1, a+n+1])
            faces.append([a, a+n+1, a+n])

    return np.array(points, dtype=float), faces


CUBE_POINTS = np.array([[0, 0, 0], [1, 0, 0], [1, 1, 0], [0, 1, 0],
                        [0, 0, 1], [1, 0, 1], [1, 1, 1], [0, 1, 1]],
                       dtype=float)

CUBE_FACES = [[0, 2, 1], [0, 3, 2],
              [4, 5, 6], [4, 6, 7],
              [0, 1, 5], [0, 5, 4],
              [3, 7, 6], [3, 6, 2],
              [0, 4, 7], [0, 7, 3],
              [1, 2, 6], [1, 6, 5]]


@pytest.fixture
def cube():
    return Mesh(CUBE_POINTS, CUBE_FACES, name='cube.obj')


@pytest.fixture
def sheet():
    # 3 x 3 vertices, 8 triangles, one boundary loop of 8 edges.
    return Mesh(*grid(3))


@pytest.fixture
def terrain():
    def height(i, j):
        return 0.3 * math.sin(1.3*i) * math.cos(0.7*j) + 0.01 * i * j

    return Mesh(*grid(6, height))

import math

import numpy as np
import pytest

import qemesh.traits as traits

from qemesh.flags import NormalWeighting
from qemesh.hds import Mesh

from conftest import CUBE_FACES, CUBE_POINTS


def test_cube_face_normals(cube):
    normals = traits.face_normals(cube)

    assert normals.shape == (12, 3)
    np.testing.assert_allclose(normals[0], (0, 0, -1), atol=1e-12)
    np.testing.assert_allclose(normals[2], (0, 0, 1), atol=1e-12)
    np.testing.assert_allclose(np.linalg.norm(normals, axis=1), 1.0)


def test_cube_vertex_normals(cube):
    normals = traits.vertex_normals(cube, NormalWeighting.ANGLE)

    # Angle weighting yields the diagonal direction at every corner.
    expected = (CUBE_POINTS - 0.5) / np.linalg.norm(CUBE_POINTS - 0.5,
                                                    axis=1)[:, None]
    np.testing.assert_allclose(normals, expected, atol=1e-12)


def test_vertex_normal_weighting(sheet):
    center = sheet.vertices[4]

    for weighting in NormalWeighting:
        n = traits.vertex_normal(center, weighting)
        np.testing.assert_allclose(n, (0, 0, 1), atol=1e-12)

    with pytest.raises(TypeError):
        traits.vertex_normal(center, 'area')


def test_isolated_vertex_normal():
    points = np.vstack((CUBE_POINTS, [[5.0, 5.0, 5.0]]))
    mesh = Mesh(points, CUBE_FACES)

    assert np.all(np.isnan(traits.vertex_normal(mesh.vertices[8])))


def test_virtual_face(sheet):
    loop = sheet.boundaries[0]

    np.testing.assert_array_equal(traits.face_normal(loop), (0, 0, 0))
    assert traits.face_area(loop) == 0.0


def test_degenerate_face():
    mesh = Mesh([[0, 0, 0], [1, 0, 0], [2, 0, 0]], [[0, 1, 2]])
    face = mesh.faces[0]

    np.testing.assert_array_equal(traits.face_normal(face), (0, 0, 0))
    assert traits.face_area(face) == 0.0


def test_face_area(sheet, cube):
    assert all(traits.face_area(f) == pytest.approx(0.5) for f in sheet)
    assert sum(traits.face_area(f) for f in cube) == pytest.approx(6.0)


def test_quad_traits():
    points = [[0, 0, 0], [2, 0, 0], [2, 1, 0], [0, 1, 0]]
    mesh = Mesh(points, [[0, 1, 2, 3]])
    quad = mesh.faces[0]

    assert traits.face_area(quad) == pytest.approx(2.0)
    np.testing.assert_allclose(traits.face_normal(quad), (0, 0, 1))


def test_angles(sheet):
    center = sheet.vertices[4]
    total = sum(traits.angle(h) for h in center._hiter())

    assert total == pytest.approx(2.0 * math.pi)

    corner = sheet.halfedges[0]
    assert traits.angle(corner) == pytest.approx(0.25 * math.pi)

    synthetic = sheet.boundaries[0].halfedge

    with pytest.raises(ValueError):
        traits.angle(synthetic)


def test_cotan(sheet):
    # Halfedge 0 -> 1 of the right triangle (0, 1, 4). The opposite angle
    # at vertex 4 is 45 degrees.
    h = sheet.halfedges[0]

    assert traits.cotan(h) == pytest.approx(1.0)
    assert traits.cotan(sheet.boundaries[0].halfedge) == 0.0


def test_edge_length(sheet):
    lo, hi, avg = traits.edge_length(sheet)

    assert lo == pytest.approx(1.0)
    assert hi == pytest.approx(math.sqrt(2.0))
    assert avg == pytest.approx((12 + 4 * math.sqrt(2.0)) / 16)


def test_bounds(cube):
    a, b = traits.bounds(cube.points)

    np.testing.assert_array_equal(a, (0, 0, 0))
    np.testing.assert_array_equal(b, (1, 1, 1))

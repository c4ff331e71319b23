import numpy as np
import pytest

from qemesh.hds import Mesh
from qemesh.hds import NonManifoldError
from qemesh.hds import ParseError

from conftest import CUBE_FACES, CUBE_POINTS, grid


def test_cube_connectivity(cube):
    cube.check()

    assert cube.size == (8, 18, 12)
    assert cube.euler_characteristic == 2
    assert cube.boundaries == []
    assert cube.name == 'cube'

    for h in cube.halfedges:
        assert h.twin.twin is h
        assert h.edge is h.twin.edge
        assert not h.boundary

    # Twelve real triangles, each a closed cycle of three halfedges.
    for f in cube:
        assert len(f) == 3
        assert f.halfedge.next.next.next is f.halfedge


def test_vertex_rotation(cube):
    v = cube.vertices[0]

    assert v.degree == 6
    assert not v.boundary
    assert sorted(int(w) for w in v._viter()) == [1, 2, 3, 4, 5, 7]


def test_sheet_boundary_loop(sheet):
    sheet.check()

    assert sheet.size == (9, 16, 8)
    assert sheet.euler_characteristic == 1
    assert len(sheet.boundaries) == 1

    synthetic = [h for h in sheet.halfedges if h.boundary]
    loop = sheet.boundaries[0]

    assert len(synthetic) == 8
    assert len(loop) == 8
    assert loop.virtual

    for h in synthetic:
        # Synthetic halfedges are paired with real ones and chain from
        # head to tail around the hole.
        assert not h.twin.boundary
        assert h.next.vertex is h.twin.vertex
        assert h.face is loop

    # The center vertex is the only interior vertex.
    interior = [v.index for v in sheet.vertices if not v.boundary]
    assert interior == [4]


def test_real_halfedges_come_first(sheet):
    flags = [h.boundary for h in sheet.halfedges]
    assert flags == [False] * 24 + [True] * 8


def test_two_holes():
    # A 4 x 4 grid with the center quad removed has an outer and an
    # inner boundary loop.
    points, faces = grid(4)
    faces = faces[:8] + faces[10:]

    mesh = Mesh(points, faces)
    mesh.check()

    assert len(mesh.boundaries) == 2
    assert sorted(len(f) for f in mesh.boundaries) == [4, 12]
    assert mesh.euler_characteristic == 0


def test_quads():
    points = [[0, 0, 0], [1, 0, 0], [2, 0, 0],
              [0, 1, 0], [1, 1, 0], [2, 1, 0]]
    faces = [[0, 1, 4, 3], [1, 2, 5, 4]]

    mesh = Mesh(points, faces)
    mesh.check()

    assert mesh.size == (6, 7, 2)
    assert [len(f) for f in mesh] == [4, 4]
    assert len(mesh.boundaries[0]) == 6


def test_one_based_indices():
    faces = [[i + 1 for i in f] for f in CUBE_FACES]
    mesh = Mesh(CUBE_POINTS, faces, base=1)

    _, soup = mesh.soup()
    assert soup == CUBE_FACES


def test_isolated_vertex(capsys):
    points = np.vstack((CUBE_POINTS, [[5.0, 5.0, 5.0]]))
    mesh = Mesh(points, CUBE_FACES, quiet=False)
    mesh.check()

    assert mesh.vertices[8].isolated
    assert mesh.vertices[8].halfedge is None
    assert mesh.euler_characteristic == 3
    assert 'isolated vertices' in capsys.readouterr().out


def test_empty_mesh():
    mesh = Mesh()
    mesh.check()

    assert mesh.size == (0, 0, 0)
    assert mesh.points.shape == (0, 3)

    mesh.clean()
    assert mesh.points.shape == (0, 3)


def test_faces_require_points():
    with pytest.raises(ValueError):
        Mesh(None, [[0, 1, 2]])


@pytest.mark.parametrize('faces', [
    [[0, 1, 3]],                        # out of range
    [[0, 1]],                           # too few vertices
    [[0, 1, 2, 0, 1]],                  # too many vertices
    [[0, 1, 1]],                        # repeated vertex
    [[0, 1, 2.5]],                      # non-integer index
])
def test_malformed_faces(faces):
    points = [[0, 0, 0], [1, 0, 0], [0, 1, 0]]

    with pytest.raises(ParseError):
        Mesh(points, faces)


def test_malformed_points():
    with pytest.raises(ParseError):
        Mesh([[0, 0], [1, 0], [0, 1]], [[0, 1, 2]])

    with pytest.raises(ParseError):
        Mesh([['a', 0, 0], [1, 0, 0], [0, 1, 0]], [[0, 1, 2]])

    # ParseError is a ValueError.
    with pytest.raises(ValueError):
        Mesh([[0, 0, 0]], [[0, 1, 2]])


def test_non_manifold_edge():
    points = [[0, 0, 0], [1, 0, 0], [0, 1, 0], [0, -1, 0], [0, 0, 1]]
    faces = [[0, 1, 2], [1, 0, 3], [1, 0, 4]]

    with pytest.raises(NonManifoldError):
        Mesh(points, faces)


def test_inconsistent_orientation():
    points = [[0, 0, 0], [1, 0, 0], [0, 1, 0], [0, -1, 0]]
    faces = [[0, 1, 2], [0, 1, 3]]

    with pytest.raises(NonManifoldError):
        Mesh(points, faces)


def test_non_manifold_vertex():
    # Two triangles touching in vertex 0 only.
    points = [[0, 0, 0], [1, 0, 0], [0, 1, 0], [-1, 0, 0], [0, -1, 0]]
    faces = [[0, 1, 2], [0, 3, 4]]

    with pytest.raises(NonManifoldError):
        Mesh(points, faces)


def test_soup_idempotence(terrain):
    points, faces = terrain.soup()
    other = Mesh(points, faces)

    points2, faces2 = other.soup()

    np.testing.assert_array_equal(points, points2)
    assert faces == faces2


def test_points_are_copied():
    points = CUBE_POINTS.copy()
    mesh = Mesh(points, CUBE_FACES)

    mesh.points[0] = (9.0, 9.0, 9.0)
    assert points[0, 0] == 0.0


def test_edge_collapse(cube):
    edge = cube.vertices[0].halfedge.edge
    a, b = edge.vertices

    vertex, removed = cube.collapse_edge(edge, (0.5, 0.5, 0.5))
    cube.check()

    assert removed == 2
    assert a.deleted and b.deleted and edge.deleted
    np.testing.assert_allclose(vertex.point, (0.5, 0.5, 0.5))

    cube.clean()
    cube.check()

    assert cube.size == (7, 15, 10)
    assert cube.euler_characteristic == 2
    assert len(cube.points) == 7
    assert [v.index for v in cube.vertices] == list(range(7))
    assert [e.index for e in cube.edges] == list(range(15))


def test_boundary_edge_collapse(sheet):
    # Edge (0, 1) lies on the boundary of the sheet.
    edge = sheet.edges[0]
    assert edge.boundary

    vertex, removed = sheet.collapse_edge(edge, (0.5, 0.0, 0.0))
    sheet.check()

    assert removed == 1
    assert vertex.boundary
    assert len(sheet.boundaries[0]) == 7

    sheet.clean()
    sheet.check()

    assert sheet.size == (8, 14, 7)
    assert sheet.euler_characteristic == 1


def test_link_condition():
    # Closing off a single triangle is not possible.
    mesh = Mesh([[0, 0, 0], [1, 0, 0], [0, 1, 0]], [[0, 1, 2]])

    for e in mesh.edges:
        assert not e.collapsible

    assert mesh.collapse_edge(mesh.edges[0], (0, 0, 0)) == (None, 0)
    mesh.check()


def test_interior_edge_between_boundary_vertices():
    points, faces = grid(4)
    mesh = Mesh(points, faces)

    for e in mesh.edges:
        a, b = e.vertices

        if not e.boundary and a.boundary and b.boundary:
            assert not e.collapsible

    small = Mesh(*grid(2))
    diagonal = [e for e in small.edges if not e.boundary]

    assert len(diagonal) == 1
    assert not diagonal[0].collapsible


def test_quad_edges_are_not_collapsible():
    points = [[0, 0, 0], [1, 0, 0], [1, 1, 0], [0, 1, 0]]
    mesh = Mesh(points, [[0, 1, 2, 3]])

    assert not any(e.collapsible for e in mesh.edges)


def test_clean_invalidates_items(cube):
    edge = cube.edges[0]
    vertex, _ = cube.collapse_edge(edge, (0.0, 0.0, 0.0))

    removed = [v for v in cube.vertices if v.deleted]
    cube.clean()

    for v in removed:
        assert v.index is None

    assert cube.vertices[-1] is vertex
    assert vertex.index == 6


def test_add_vertex(cube):
    v = cube.add_vertex((2.0, 2.0, 2.0))

    assert v.index == 8
    assert v.isolated
    assert cube.points.shape == (9, 3)

    with pytest.raises(ValueError):
        cube.add_vertex((1.0, 2.0))

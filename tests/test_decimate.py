import warnings

import numpy as np
import pytest

from qemesh.decimate import Decimator
from qemesh.flags import DecimationState
from qemesh.flags import QueueUpdate
from qemesh.hds import IrreducibleMeshWarning
from qemesh.hds import Mesh

from conftest import grid


def test_cube_to_six_faces(cube):
    cube.simplify(0.5)
    cube.check()

    assert cube.size[2] == 6
    assert cube.euler_characteristic == 2
    assert cube.boundaries == []

    # Compaction leaves dense indices and no tombstones.
    assert len(cube.points) == len(cube.vertices)
    assert not any(v.deleted for v in cube.vertices)
    assert not any(h.deleted for h in cube.halfedges)
    assert [f.index for f in cube.faces] == list(range(6))


def test_zero_ratio_is_noop(terrain):
    before = terrain.soup()
    terrain.simplify(0.0)
    after = terrain.soup()

    np.testing.assert_array_equal(before[0], after[0])
    assert before[1] == after[1]


def test_ratio_is_clamped(cube):
    decimator = Decimator(cube)
    decimator.initialize(-0.5)

    assert decimator.target == 12


def test_target_rounds_up(terrain):
    decimator = Decimator(terrain)
    decimator.initialize(0.25)

    # 50 faces, 37.5 to keep.
    assert decimator.target == 38


def test_irreducible_mesh(cube):
    with pytest.warns(IrreducibleMeshWarning):
        cube.simplify(1.0)

    cube.check()

    # Two triangles glued along their boundary are all that is left of
    # a closed surface of genus 0.
    assert cube.size == (3, 3, 2)
    assert cube.euler_characteristic == 2


def test_single_triangle_is_irreducible():
    mesh = Mesh([[0, 0, 0], [1, 0, 0], [0, 1, 0]], [[0, 1, 2]])

    with pytest.warns(IrreducibleMeshWarning):
        mesh.simplify(1.0)

    mesh.check()
    assert mesh.size == (3, 3, 1)


def test_open_sheet(sheet):
    sheet.simplify(0.5)
    sheet.check()

    assert sheet.size[2] <= 4
    assert sheet.euler_characteristic == 1
    assert len(sheet.boundaries) == 1

    for h in sheet.halfedges:
        if h.boundary:
            assert h.next.vertex is h.twin.vertex

    # Flat input stays flat.
    np.testing.assert_array_equal(sheet.points[:, 2], 0.0)


def test_every_step_is_valid(terrain):
    decimator = Decimator(terrain)
    decimator.initialize(0.8)

    assert decimator.state is DecimationState.COLLAPSING

    count = decimator.face_count

    while decimator.step():
        terrain.check()

        assert decimator.face_count <= count
        assert decimator.face_count == terrain.size[2]
        assert terrain.euler_characteristic == 1

        count = decimator.face_count

    decimator.compact()
    terrain.check()

    assert decimator.state is DecimationState.COMPACTING
    assert terrain.size[2] <= decimator.target


def test_monotonicity(terrain):
    points, faces = terrain.soup()
    counts = []

    for ratio in (0.2, 0.4, 0.6, 0.8):
        mesh = Mesh(points, faces)
        mesh.simplify(ratio)
        counts.append(mesh.size[2])

    assert counts == sorted(counts, reverse=True)


def test_determinism(terrain):
    points, faces = terrain.soup()

    first = Mesh(points, faces)
    second = Mesh(points, faces)

    first.simplify(0.6)
    second.simplify(0.6)

    np.testing.assert_array_equal(first.points, second.points)
    assert first.soup()[1] == second.soup()[1]


@pytest.mark.parametrize('ratio', [0.3, 0.7])
def test_full_and_local_updates_agree(terrain, ratio):
    points, faces = terrain.soup()

    full = Decimator(Mesh(points, faces), update=QueueUpdate.FULL)
    local = Decimator(Mesh(points, faces), update=QueueUpdate.LOCAL)

    full.run(ratio)
    local.run(ratio)

    assert full.history == local.history
    assert full.face_count == local.face_count

    np.testing.assert_array_equal(full._mesh.points, local._mesh.points)
    assert full._mesh.soup()[1] == local._mesh.soup()[1]


def test_flat_input_has_zero_cost():
    mesh = Mesh(*grid(5))
    decimator = Decimator(mesh)
    decimator.run(0.5)

    assert all(cost == 0.0 for _, cost in decimator.history)


def test_driver_states(cube):
    decimator = Decimator(cube)

    assert decimator.state is DecimationState.IDLE

    with pytest.raises(RuntimeError):
        decimator.step()

    decimator.run(0.5)

    with pytest.raises(RuntimeError):
        decimator.initialize(0.5)

    with pytest.raises(RuntimeError):
        decimator.compact()


def test_invalid_update(cube):
    with pytest.raises(TypeError):
        Decimator(cube, update='full')


def test_quiet_output(cube, capsys):
    with warnings.catch_warnings():
        warnings.simplefilter('error')
        cube.simplify(0.5, quiet=False)

    out = capsys.readouterr().out

    assert 'decimating' in out
    assert '3 edge collapses' in out


def test_warning_points_at_caller(cube):
    with pytest.warns(IrreducibleMeshWarning) as record:
        Decimator(cube).run(1.0)

    assert record[0].filename == __file__

    mesh = Mesh(*grid(2))

    with pytest.warns(IrreducibleMeshWarning) as record:
        mesh.simplify(1.0)

    assert record[0].filename == __file__

import math

import numpy as np
import pytest

import qemesh.linalg as linalg


def test_angle():
    u = np.array([1.0, 0.0, 0.0])
    v = np.array([1.0, 1.0, 0.0])

    assert linalg.angle(u, v) == pytest.approx(0.25 * math.pi)
    assert linalg.angle(u, v, deg=True) == pytest.approx(45.0)

    # Parallel vectors must not fail because of round-off.
    assert linalg.angle(v, 3.0 * v) == pytest.approx(0.0, abs=1e-7)


def test_clamp():
    assert linalg.clamp(1.5, 0.0, 1.0) == 1.0
    assert linalg.clamp(-0.5, 0.0, 1.0) == 0.0
    assert linalg.clamp(0.25, 0.0, 1.0) == 0.25


def test_cross_and_norm():
    w = linalg.cross((1.0, 0.0, 0.0), (0.0, 1.0, 0.0))

    np.testing.assert_array_equal(w, (0.0, 0.0, 1.0))
    assert linalg.norm(np.array([3.0, 4.0, 0.0])) == 5.0


def test_quadform():
    q = np.diag([1.0, 2.0, 3.0, 4.0])

    np.testing.assert_array_equal(linalg.homogeneous((1, 2, 3)),
                                  (1, 2, 3, 1))
    assert linalg.quadform(q, (1.0, 1.0, 1.0)) == 10.0


def test_det_and_inv():
    m = np.diag([2.0, 4.0, 0.5, 1.0])

    assert linalg.det(m) == pytest.approx(4.0)
    np.testing.assert_allclose(linalg.inv(m) @ m, np.eye(4))


def test_dot_and_unit():
    u = np.array([3.0, 0.0, 4.0])

    assert linalg.dot(u, (1.0, 1.0, 1.0)) == 7.0
    np.testing.assert_allclose(linalg.unit(u), (0.6, 0.0, 0.8))

    # A copy is returned, the input is left untouched.
    assert u[0] == 3.0

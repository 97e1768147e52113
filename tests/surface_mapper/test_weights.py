"""Unit tests for edge weight policies."""

import numpy as np
import pytest
from numpy.testing import assert_allclose

from surface_mapper.edge_table import EdgeTable
from surface_mapper.weights import (
    CallableWeights,
    CotangentWeights,
    InverseDistanceWeights,
    UniformWeights,
    WeightPolicy,
)


def test_uniform_weights(grid_3x3):
    w = UniformWeights(2.5)
    w.prepare(grid_3x3, EdgeTable(grid_3x3))
    assert w(0, 1) == 2.5
    assert w(1, 0) == 2.5
    with pytest.raises(ValueError):
        UniformWeights(float("nan"))


def test_inverse_distance_weights(grid_3x3):
    w = InverseDistanceWeights()
    with pytest.raises(RuntimeError):
        w(0, 1)
    w.prepare(grid_3x3, EdgeTable(grid_3x3))
    assert_allclose(w(0, 1), 1.0)
    assert_allclose(w(0, 4), 1.0 / np.sqrt(2.0))
    assert w(4, 0) == w(0, 4)


def test_cotangent_weights_square(two_triangle_square):
    table = EdgeTable(two_triangle_square)
    w = CotangentWeights()
    w.prepare(two_triangle_square, table)

    # sides see a 45 degree angle, the diagonal two right angles
    assert_allclose(w(0, 1), 0.5, atol=1e-12)
    assert_allclose(w(1, 2), 0.5, atol=1e-12)
    assert_allclose(w(2, 3), 0.5, atol=1e-12)
    assert_allclose(w(0, 3), 0.5, atol=1e-12)
    assert_allclose(w(0, 2), 0.0, atol=1e-12)
    assert w(2, 1) == w(1, 2)

    with pytest.raises(KeyError):
        w(1, 3)


def test_cotangent_weights_clamp(two_triangle_square):
    w = CotangentWeights(clamp=0.1)
    w.prepare(two_triangle_square, EdgeTable(two_triangle_square))
    assert_allclose(w(0, 2), 0.1)
    assert_allclose(w(0, 1), 0.5, atol=1e-12)


def test_cotangent_weights_require_triangles(quad_strip):
    w = CotangentWeights()
    with pytest.raises(ValueError):
        w.prepare(quad_strip, EdgeTable(quad_strip))
    with pytest.raises(RuntimeError):
        w(0, 1)


def test_callable_weights():
    w = CallableWeights(lambda i, j: i + j)
    assert w(1, 2) == 3.0
    assert isinstance(w(1, 2), float)


def test_base_policy_is_abstract():
    with pytest.raises(NotImplementedError):
        WeightPolicy()(0, 1)

"""Tests for ReLU, Linear and Softmax."""
import numpy as np
import pytest

from mlpnet.activations import Linear, ReLU, Softmax
from mlpnet.matrix import Matrix


def test_linear_is_identity():
    x = Matrix([[1, -2], [0.5, 3]])
    act = Linear()
    assert act.forward(x) == x
    g = Matrix([[4, 5], [6, 7]])
    assert act.backward(g) == g


def test_relu_forward_is_elementwise_max():
    rng = np.random.default_rng(1)
    arr = rng.normal(size=(5, 4))
    out = ReLU().forward(Matrix.from_numpy(arr))
    assert out == Matrix.from_numpy(np.maximum(arr, 0.0))


def test_relu_backward_masks_non_positive_inputs():
    act = ReLU()
    act.forward(Matrix([[-1.0, 0.0, 2.0], [3.0, -0.5, 1e-9]]))
    grad = act.backward(Matrix([[5.0, 6.0, 7.0], [8.0, 9.0, 10.0]]))
    assert grad == Matrix([[0.0, 0.0, 7.0], [8.0, 0.0, 10.0]])


def test_relu_backward_before_forward():
    with pytest.raises(RuntimeError):
        ReLU().backward(Matrix(1, 1))


def test_softmax_rows_sum_to_one():
    rng = np.random.default_rng(2)
    out = Softmax().forward(Matrix.from_numpy(rng.normal(scale=5, size=(6, 4)))).to_numpy()
    np.testing.assert_allclose(out.sum(axis=1), np.ones(6), atol=1e-9)
    assert (out > 0).all()


def test_softmax_shift_invariant_and_stable():
    x = np.array([[1.0, 2.0, 3.0], [-1.0, 0.0, 1.0]])
    base = Softmax().forward(Matrix.from_numpy(x)).to_numpy()
    shifted = Softmax().forward(Matrix.from_numpy(x + 1000.0)).to_numpy()
    assert np.isfinite(shifted).all()
    np.testing.assert_allclose(base, shifted, atol=1e-9)


def test_softmax_backward_passes_through():
    g = Matrix([[0.1, -0.2]])
    assert Softmax().backward(g) == g

"""Tests for DenseLayer forward/backward."""
import numpy as np
import pytest

from mlpnet.activations import Linear, ReLU
from mlpnet.layers import DenseLayer, WeightInit
from mlpnet.losses import MeanSquaredError
from mlpnet.matrix import Matrix, ShapeError
from mlpnet.regularizers import L2, ElasticNet


def make_layer(activation=None, regularizer=None):
    layer = DenseLayer(2, 2, activation or Linear(), regularizer, rng=np.random.default_rng(0))
    layer.set_weights(Matrix([[1.0, -1.0], [2.0, 0.5]]))
    layer.set_biases(Matrix([[0.5, -3.0]]))
    return layer


def test_construction_shapes():
    layer = DenseLayer(4, 3, rng=np.random.default_rng(0))
    assert layer.get_weights().shape == (4, 3)
    assert layer.get_biases().shape == (1, 3)
    assert layer.get_weights_gradient() == Matrix(4, 3)
    assert layer.get_biases_gradient() == Matrix(1, 3)
    assert isinstance(layer.activation, Linear)
    assert layer.num_params() == 15


def test_random_init_in_unit_range():
    layer = DenseLayer(10, 10, init=WeightInit.RANDOM, rng=np.random.default_rng(0))
    w = layer.get_weights().to_numpy()
    assert w.min() >= -1.0 and w.max() < 1.0


def test_forward_adds_bias_to_every_row():
    layer = make_layer()
    out = layer.forward(Matrix([[1.0, 1.0], [0.0, 2.0]]))
    assert out.allclose(Matrix([[3.5, -3.5], [4.5, -2.0]]))


def test_forward_applies_activation():
    layer = make_layer(ReLU())
    out = layer.forward(Matrix([[1.0, 1.0]]))
    assert out.allclose(Matrix([[3.5, 0.0]]))


def test_forward_rejects_wrong_feature_count():
    with pytest.raises(ShapeError):
        make_layer().forward(Matrix(1, 3))


def test_backward_gradients():
    layer = make_layer()
    x = Matrix([[1.0, 2.0], [3.0, 4.0]])
    layer.forward(x)
    grad = Matrix([[1.0, 0.0], [0.5, -1.0]])
    d_input = layer.backward(grad)
    assert layer.get_weights_gradient().allclose(Matrix.multiply(x.transpose(), grad))
    assert layer.get_biases_gradient().allclose(Matrix([[1.5, -1.0]]))
    assert d_input.allclose(Matrix.multiply(grad, layer.get_weights().transpose()))


def test_backward_wrong_gradient_shape_keeps_caches():
    layer = DenseLayer(2, 3, Linear(), rng=np.random.default_rng(0))
    layer.forward(Matrix(4, 2))
    with pytest.raises(ShapeError):
        layer.backward(Matrix(4, 2))
    assert layer.get_weights_gradient().shape == layer.get_weights().shape
    assert layer.get_biases_gradient().shape == layer.get_biases().shape


def test_backward_matches_finite_differences():
    rng = np.random.default_rng(3)
    layer = DenseLayer(3, 2, Linear(), rng=rng)
    x = Matrix.from_numpy(rng.normal(size=(4, 3)))
    y = Matrix.from_numpy(rng.normal(size=(4, 2)))
    loss = MeanSquaredError()
    layer.backward(loss.backward(layer.forward(x), y))
    analytic = layer.get_weights_gradient().to_numpy()

    h = 1e-6
    base = layer.get_weights().to_numpy()
    numeric = np.zeros_like(base)
    for i in range(base.shape[0]):
        for j in range(base.shape[1]):
            plus, minus = base.copy(), base.copy()
            plus[i, j] += h
            minus[i, j] -= h
            layer.set_weights(Matrix.from_numpy(plus))
            lp = loss.calculate(layer.forward(x), y)
            layer.set_weights(Matrix.from_numpy(minus))
            lm = loss.calculate(layer.forward(x), y)
            numeric[i, j] = (lp - lm) / (2 * h)
    np.testing.assert_allclose(analytic, numeric, rtol=1e-5, atol=1e-7)


def test_regularizer_adds_to_weight_gradient_only():
    x = Matrix([[1.0, 2.0], [3.0, 4.0]])
    grad = Matrix([[1.0, 0.0], [0.5, -1.0]])
    plain = make_layer()
    reg = ElasticNet(0.01, 0.1)
    regularized = make_layer(regularizer=reg)
    for layer in (plain, regularized):
        layer.forward(x)
        layer.backward(grad)
    expected = plain.get_weights_gradient() + reg.gradient(plain.get_weights())
    assert regularized.get_weights_gradient().allclose(expected)
    assert regularized.get_biases_gradient() == plain.get_biases_gradient()
    assert regularized.regularization_loss() == pytest.approx(reg.loss(plain.get_weights()))
    assert plain.regularization_loss() == 0.0


def test_set_weights_shape_checked_and_copied():
    layer = make_layer(regularizer=L2(0.1))
    with pytest.raises(ShapeError):
        layer.set_weights(Matrix(3, 2))
    with pytest.raises(ShapeError):
        layer.set_biases(Matrix(2, 1))
    new_w = Matrix([[0.0, 0.0], [0.0, 0.0]])
    layer.set_weights(new_w)
    new_w[0, 0] = 9.0
    assert layer.get_weights()[0, 0] == 0.0


def test_forward_caches_copy_of_input():
    layer = make_layer()
    x = Matrix([[1.0, 1.0]])
    layer.forward(x)
    x[0, 0] = 50.0
    assert layer.input == Matrix([[1.0, 1.0]])


def test_config_round_trip():
    layer = DenseLayer(3, 2, ReLU(), ElasticNet(0.1, 0.2), init=WeightInit.RANDOM)
    cfg = layer.to_config()
    assert cfg['class'] == 'DenseLayer'
    rebuilt = DenseLayer.from_config(cfg['config'])
    assert (rebuilt.input_size, rebuilt.output_size) == (3, 2)
    assert isinstance(rebuilt.activation, ReLU)
    assert isinstance(rebuilt.regularizer, ElasticNet)
    assert (rebuilt.regularizer.lam1, rebuilt.regularizer.lam2) == (0.1, 0.2)
    assert rebuilt.init is WeightInit.RANDOM
    assert rebuilt.to_config() == cfg


def test_config_without_regularizer():
    cfg = DenseLayer(2, 2).to_config()['config']
    assert cfg['regularizer'] is None
    rebuilt = DenseLayer.from_config(cfg)
    assert rebuilt.regularizer is None
    assert isinstance(rebuilt.activation, Linear)

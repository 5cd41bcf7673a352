"""Tests for Model orchestration and persistence."""
import numpy as np
import pytest

from mlpnet.activations import Linear, ReLU, Softmax
from mlpnet.io import ModelFormatError
from mlpnet.layers import DenseLayer
from mlpnet.matrix import Matrix, ShapeError
from mlpnet.model import Model


def build(seed=0):
    rng = np.random.default_rng(seed)
    model = Model()
    model.add(DenseLayer(3, 4, ReLU(), rng=rng))
    model.add(DenseLayer(4, 2, Softmax(), rng=rng))
    return model


def test_predict_runs_layers_in_order():
    model = build()
    x = Matrix.from_numpy(np.random.default_rng(1).normal(size=(5, 3)))
    l1, l2 = model.get_layers()
    manual = l2.forward(l1.forward(x))
    assert model.predict(x).allclose(manual)
    assert model.predict(x).shape == (5, 2)


def test_predict_shape_error_propagates():
    with pytest.raises(ShapeError):
        build().predict(Matrix(2, 5))


def test_backward_populates_every_layer_in_reverse():
    model = build()
    x = Matrix.from_numpy(np.random.default_rng(1).normal(size=(5, 3)))
    y_pred = model.predict(x)
    d_input = model.backward(y_pred)
    assert d_input.shape == (5, 3)
    l1, l2 = model.get_layers()
    assert l2.get_weights_gradient().allclose(Matrix.multiply(l2.input.transpose(), y_pred))
    assert l1.get_weights_gradient().shape == (3, 4)
    assert l1.get_weights_gradient() != Matrix(3, 4)


def test_get_layers_is_live():
    model = build()
    model.get_layers()[0].set_biases(Matrix(1, 4))
    assert model.layers[0].get_biases() == Matrix(1, 4)


def test_add_stores_a_copy():
    layer = DenseLayer(2, 2, Linear(), rng=np.random.default_rng(0))
    model = Model()
    model.add(layer)
    before = model.get_layers()[0].get_weights().copy()
    layer.set_weights(Matrix([[9.0, 9.0], [9.0, 9.0]]))
    assert model.get_layers()[0] is not layer
    assert model.get_layers()[0].get_weights() == before


def test_constructor_stores_copies():
    layer = DenseLayer(2, 2, Linear(), rng=np.random.default_rng(0))
    model = Model([layer])
    layer.set_biases(Matrix([[5.0, 5.0]]))
    assert model.get_layers()[0].get_biases() != Matrix([[5.0, 5.0]])


def test_same_layer_added_twice_gives_independent_layers():
    layer = DenseLayer(2, 2, Linear(), rng=np.random.default_rng(0))
    model = Model()
    model.add(layer)
    model.add(layer)
    first, second = model.get_layers()
    assert first is not second
    assert first.activation is not second.activation
    first.set_weights(Matrix([[1.0, 0.0], [0.0, 1.0]]))
    assert second.get_weights() == layer.get_weights()


def test_snapshot_restore():
    model = build()
    snap = model.snapshot()
    model.get_layers()[1].get_weights().update(Matrix([[1.0, 1.0]] * 4), 0.5)
    assert model.get_layers()[1].get_weights() != snap[1][0]
    model.restore(snap)
    assert model.get_layers()[1].get_weights() == snap[1][0]


class TestPersistence:
    def test_text_round_trip_is_exact(self, tmp_path):
        src, dst = build(0), build(1)
        path = str(tmp_path / "model.txt")
        src.save(path)
        dst.load(path)
        for a, b in zip(src.get_layers(), dst.get_layers()):
            assert a.get_weights() == b.get_weights()
            assert a.get_biases() == b.get_biases()

    def test_text_layout(self, tmp_path):
        model = Model([DenseLayer(2, 1, Linear(), rng=np.random.default_rng(0))])
        model.get_layers()[0].set_weights(Matrix([[0.5], [-1.25]]))
        model.get_layers()[0].set_biases(Matrix([[2.0]]))
        path = tmp_path / "tiny.txt"
        model.save(str(path))
        assert path.read_text().splitlines() == [
            "WEIGHTS", "2,1", "0.5", "-1.25", "BIASES", "1,1", "2.0",
        ]

    def test_hdf5_round_trip(self, tmp_path):
        src, dst = build(0), build(1)
        path = str(tmp_path / "model.hdf5")
        src.save(path)
        dst.load(path)
        for a, b in zip(src.get_layers(), dst.get_layers()):
            assert a.get_weights() == b.get_weights()
            assert a.get_biases() == b.get_biases()

    def test_load_shape_mismatch(self, tmp_path):
        path = str(tmp_path / "model.txt")
        build().save(path)
        other = Model()
        other.add(DenseLayer(3, 5, ReLU()))
        other.add(DenseLayer(5, 2, Softmax()))
        with pytest.raises(ModelFormatError):
            other.load(path)

    def test_load_too_few_layers_in_file(self, tmp_path):
        path = str(tmp_path / "model.txt")
        Model([DenseLayer(3, 4, ReLU())]).save(path)
        with pytest.raises(ModelFormatError):
            build().load(path)

    @pytest.mark.parametrize("name", ["model.txt", "model.h5"])
    def test_load_too_many_layers_in_file(self, tmp_path, name):
        path = str(tmp_path / name)
        Model([DenseLayer(3, 4, ReLU()), DenseLayer(4, 4, ReLU())]).save(path)
        with pytest.raises(ModelFormatError):
            Model([DenseLayer(3, 4, ReLU())]).load(path)

    def test_load_missing_biases_marker(self, tmp_path):
        path = tmp_path / "bad.txt"
        path.write_text("WEIGHTS\n1,1\n0.5\nNOPE\n")
        with pytest.raises(ModelFormatError):
            Model([DenseLayer(1, 1)]).load(str(path))

    def test_load_missing_file(self, tmp_path):
        with pytest.raises(FileNotFoundError):
            build().load(str(tmp_path / "nope.txt"))


def test_summary_lists_layers(capsys):
    build().summary()
    out = capsys.readouterr().out
    assert "DenseLayer(3->4, ReLU): params=16" in out
    assert "DenseLayer(4->2, Softmax): params=10" in out
    assert "Total params: 26" in out

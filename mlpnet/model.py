"""Model class: an ordered stack of DenseLayers."""
from __future__ import annotations
import copy
from typing import List, Optional, Tuple
from .layers import DenseLayer
from .losses import Loss
from .matrix import Matrix
from . import io

Snapshot = List[Tuple[Matrix, Matrix]]


class Model:
    """Ordered stack of DenseLayers.

    The model owns its layers: ``add`` and the constructor store deep copies,
    so later changes to the caller's layer objects do not reach the model.
    Work on the stored layers through ``get_layers()``.
    """
    def __init__(self, layers: Optional[List[DenseLayer]] = None):
        self.layers: List[DenseLayer] = []
        for layer in layers or []:
            self.add(layer)

    def add(self, layer: DenseLayer):
        self.layers.append(copy.deepcopy(layer))

    def get_layers(self) -> List[DenseLayer]:
        """The model's own layer list; optimizers keep a reference to it."""
        return self.layers

    def predict(self, x: Matrix) -> Matrix:
        for layer in self.layers:
            x = layer.forward(x)
        return x

    def backward(self, grad: Matrix) -> Matrix:
        for layer in reversed(self.layers):
            grad = layer.backward(grad)
        return grad

    def train_step(self, x: Matrix, y_true: Matrix, loss: Loss, optimizer) -> float:
        """One full-batch iteration; returns the loss before the update."""
        y_pred = self.predict(x)
        loss_val = loss.calculate(y_pred, y_true)
        self.backward(loss.backward(y_pred, y_true))
        optimizer.step()
        return loss_val

    def regularization_loss(self) -> float:
        return sum(layer.regularization_loss() for layer in self.layers)

    def snapshot(self) -> Snapshot:
        return [(layer.get_weights().copy(), layer.get_biases().copy()) for layer in self.layers]

    def restore(self, snapshot: Snapshot):
        for layer, (weights, biases) in zip(self.layers, snapshot):
            layer.set_weights(weights)
            layer.set_biases(biases)

    def save(self, path: str):
        params = [(layer.get_weights(), layer.get_biases()) for layer in self.layers]
        if io.is_hdf5_path(path):
            io.save_weights_hdf5(path, params)
        else:
            io.save_weights_text(path, params)

    def load(self, path: str):
        """Load weights into this already-built model (same layer count and shapes)."""
        if io.is_hdf5_path(path):
            params = io.load_weights_hdf5(path, len(self.layers))
        else:
            params = io.load_weights_text(path, len(self.layers))
        for idx, (layer, (weights, biases)) in enumerate(zip(self.layers, params)):
            if weights.shape != layer.get_weights().shape or biases.shape != layer.get_biases().shape:
                raise io.ModelFormatError(
                    f"{path}: layer {idx} shape mismatch, model has "
                    f"{layer.get_weights().shape}/{layer.get_biases().shape}, "
                    f"file has {weights.shape}/{biases.shape}"
                )
        self.restore(params)

    def summary(self):
        print("Model summary:")
        total = 0
        for layer in self.layers:
            params = layer.num_params()
            total += params
            cfg = layer.to_config()
            reg = cfg['config']['regularizer']
            print(f"{cfg['class']}({layer.input_size}->{layer.output_size}, "
                  f"{cfg['config']['activation']['class']}"
                  f"{'' if reg is None else ', ' + reg['class']}): params={params}")
        print(f"Total params: {total}")

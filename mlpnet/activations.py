"""Activation functions applied at the output of a DenseLayer."""
from __future__ import annotations
import numpy as np
from typing import Dict, Any, Optional
from .matrix import Matrix


class Activation:
    """Abstract activation.

    ``forward`` maps the layer's pre-activation ``z`` to its output,
    ``backward`` maps the gradient w.r.t. the output to the gradient
    w.r.t. ``z``. An instance may hold state from its last forward call,
    so do not share one instance between two layers.
    """
    def forward(self, x: Matrix) -> Matrix:
        raise NotImplementedError

    def backward(self, grad: Matrix) -> Matrix:
        raise NotImplementedError

    def to_config(self) -> Dict[str, Any]:
        return {'class': self.__class__.__name__, 'config': {}}


class Linear(Activation):
    def forward(self, x):
        return x.copy()

    def backward(self, grad):
        return grad.copy()


class ReLU(Activation):
    def __init__(self):
        self.last_x: Optional[Matrix] = None

    def forward(self, x):
        self.last_x = x.copy()
        return Matrix.from_numpy(np.maximum(x.to_numpy(), 0.0))

    def backward(self, grad):
        if self.last_x is None:
            raise RuntimeError("ReLU.backward called before forward")
        mask = Matrix.from_numpy((self.last_x.to_numpy() > 0).astype(np.float64))
        return mask.element_multiply(grad)


class Softmax(Activation):
    """Row-wise softmax, stabilised by subtracting each row's max.

    ``backward`` is a pass-through. It is only correct when this layer
    feeds ``CategoricalCrossEntropy``, whose ``backward`` already returns the
    fused softmax + cross-entropy gradient ``y_pred - y_true``. Pairing
    Softmax with any other loss gives wrong gradients without warning.
    """
    def forward(self, x):
        z = x.to_numpy()
        if z.size == 0:
            return x.copy()
        e = np.exp(z - z.max(axis=1, keepdims=True))
        return Matrix.from_numpy(e / e.sum(axis=1, keepdims=True))

    def backward(self, grad):
        return grad.copy()


NAME2ACTIVATION = {
    'linear': Linear,
    'relu': ReLU,
    'softmax': Softmax,
}

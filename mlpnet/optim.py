"""Optimizers.

An optimizer holds a live reference to a model's layer list and applies the
gradients cached by the last ``Model.backward``. Call ``step()`` only after
``backward`` for the current batch. Adam snapshots one moment pair per layer
at construction, so the layer list must not change shape or length afterwards.
"""
from __future__ import annotations
from typing import List
from .layers import DenseLayer
from .matrix import Matrix


class Optimizer:
    def __init__(self, layers: List[DenseLayer], lr: float):
        self.layers = layers
        self.lr = lr

    def step(self):
        raise NotImplementedError


class SGD(Optimizer):
    def __init__(self, layers, lr=0.01):
        super().__init__(layers, lr)

    def step(self):
        for layer in self.layers:
            layer.get_weights().update(layer.get_weights_gradient(), self.lr)
            layer.get_biases().update(layer.get_biases_gradient(), self.lr)


class Adam(Optimizer):
    def __init__(self, layers, lr=0.001, beta1=0.9, beta2=0.999, eps=1e-8):
        super().__init__(layers, lr)
        self.beta1 = beta1
        self.beta2 = beta2
        self.eps = eps
        self.t = 0
        self.m = {'W': [], 'b': []}
        self.v = {'W': [], 'b': []}
        for layer in layers:
            for key, p in (('W', layer.get_weights()), ('b', layer.get_biases())):
                self.m[key].append(Matrix(p.rows, p.cols))
                self.v[key].append(Matrix(p.rows, p.cols))

    def _update(self, key: str, i: int, param: Matrix, g: Matrix):
        self.m[key][i] = self.m[key][i] * self.beta1 + g * (1 - self.beta1)
        g_sq = g.copy().element_multiply(g)
        self.v[key][i] = self.v[key][i] * self.beta2 + g_sq * (1 - self.beta2)
        m_hat = self.m[key][i] * (1.0 / (1 - self.beta1 ** self.t))
        v_hat = self.v[key][i] * (1.0 / (1 - self.beta2 ** self.t))
        eps = self.eps
        v_hat.element_sqrt().map(lambda x: x + eps)
        m_hat.element_divide(v_hat)
        param.update(m_hat, self.lr)

    def step(self):
        self.t += 1
        for i, layer in enumerate(self.layers):
            self._update('W', i, layer.get_weights(), layer.get_weights_gradient())
            self._update('b', i, layer.get_biases(), layer.get_biases_gradient())


NAME2OPT = {'sgd': SGD, 'adam': Adam}

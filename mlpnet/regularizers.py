"""Weight regularizers. Applied to weights only, never to biases."""
from __future__ import annotations
import numpy as np
from typing import Dict, Any
from .matrix import Matrix


class Regularizer:
    def loss(self, weights: Matrix) -> float:
        raise NotImplementedError

    def gradient(self, weights: Matrix) -> Matrix:
        raise NotImplementedError

    def to_config(self) -> Dict[str, Any]:
        return {'class': self.__class__.__name__, 'config': {}}


class L1(Regularizer):
    def __init__(self, lam: float):
        self.lam = lam

    def to_config(self):
        return {'class': 'L1', 'config': {'lam': self.lam}}

    def loss(self, weights):
        return float(self.lam * np.sum(np.abs(weights.to_numpy())))

    def gradient(self, weights):
        # sign(0) == 0
        return Matrix.from_numpy(self.lam * np.sign(weights.to_numpy()))


class L2(Regularizer):
    def __init__(self, lam: float):
        self.lam = lam

    def to_config(self):
        return {'class': 'L2', 'config': {'lam': self.lam}}

    def loss(self, weights):
        return float(0.5 * self.lam * np.sum(weights.to_numpy() ** 2))

    def gradient(self, weights):
        return weights * self.lam


class ElasticNet(Regularizer):
    def __init__(self, lam1: float, lam2: float):
        self.l1 = L1(lam1)
        self.l2 = L2(lam2)

    @property
    def lam1(self) -> float:
        return self.l1.lam

    @property
    def lam2(self) -> float:
        return self.l2.lam

    def to_config(self):
        return {'class': 'ElasticNet', 'config': {'lam1': self.lam1, 'lam2': self.lam2}}

    def loss(self, weights):
        return self.l1.loss(weights) + self.l2.loss(weights)

    def gradient(self, weights):
        return self.l1.gradient(weights) + self.l2.gradient(weights)


NAME2REGULARIZER = {
    'l1': L1,
    'l2': L2,
    'elasticnet': ElasticNet,
}

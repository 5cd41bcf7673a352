"""Fully-connected layer with a fused activation and optional regularizer."""
from __future__ import annotations
import enum
import numpy as np
from typing import Optional, Dict, Any
from .matrix import Matrix, ShapeError
from .activations import Activation, Linear, NAME2ACTIVATION
from .regularizers import Regularizer, NAME2REGULARIZER


class WeightInit(enum.Enum):
    HE = 'he'
    RANDOM = 'random'


class DenseLayer:
    """``y = activation(x @ W + b)``.

    Holds weights ``W`` (in x out), bias row ``b`` (1 x out), the last
    forward input and the gradients from the last backward call, keyed
    ``'W'``/``'b'`` in ``params`` and ``grads``. ``backward`` must follow a
    ``forward`` on the batch whose gradient is being passed in.
    """
    def __init__(self, input_size: int, output_size: int, activation: Optional[Activation] = None,
                 regularizer: Optional[Regularizer] = None, init: WeightInit = WeightInit.HE,
                 rng: Optional[np.random.Generator] = None):
        self.input_size = input_size
        self.output_size = output_size
        self.activation = activation if activation is not None else Linear()
        self.regularizer = regularizer
        self.init = WeightInit(init)
        rng = rng or np.random.default_rng()
        if self.init is WeightInit.HE:
            W = Matrix.he(input_size, output_size, rng)
        else:
            W = Matrix.random(input_size, output_size, rng)
        self.params: Dict[str, Matrix] = {'W': W, 'b': Matrix.random(1, output_size, rng)}
        self.grads: Dict[str, Matrix] = {
            'W': Matrix(input_size, output_size),
            'b': Matrix(1, output_size),
        }
        self.input = Matrix(0, 0)

    @property
    def weights(self) -> Matrix:
        return self.params['W']

    @property
    def biases(self) -> Matrix:
        return self.params['b']

    @property
    def d_weights(self) -> Matrix:
        return self.grads['W']

    @property
    def d_biases(self) -> Matrix:
        return self.grads['b']

    def get_weights(self) -> Matrix:
        return self.params['W']

    def get_biases(self) -> Matrix:
        return self.params['b']

    def get_weights_gradient(self) -> Matrix:
        return self.grads['W']

    def get_biases_gradient(self) -> Matrix:
        return self.grads['b']

    def _replace(self, key: str, value: Matrix, what: str):
        current = self.params[key]
        if value.shape != current.shape:
            raise ShapeError(
                f"New {what} matrix has incorrect dimensions, expected "
                f"{current.rows}x{current.cols}, got {value.rows}x{value.cols}"
            )
        self.params[key] = value.copy()

    def set_weights(self, weights: Matrix):
        self._replace('W', weights, 'weights')

    def set_biases(self, biases: Matrix):
        self._replace('b', biases, 'biases')

    def forward(self, x: Matrix) -> Matrix:
        if x.cols != self.input_size:
            raise ShapeError(
                f"DenseLayer expects {self.input_size} input features, got {x.cols}"
            )
        self.input = x.copy()
        z = Matrix.multiply(x, self.params['W'])
        z.add_row_vector(self.params['b'])
        return self.activation.forward(z)

    def backward(self, grad: Matrix) -> Matrix:
        d_linear = self.activation.backward(grad)
        d_w = Matrix.multiply(self.input.transpose(), d_linear)
        if self.regularizer is not None:
            d_w = d_w + self.regularizer.gradient(self.params['W'])
        d_b = d_linear.sum_rows()
        d_input = Matrix.multiply(d_linear, self.params['W'].transpose())
        # caches only change once every product has succeeded
        self.grads['W'] = d_w
        self.grads['b'] = d_b
        return d_input

    def regularization_loss(self) -> float:
        if self.regularizer is None:
            return 0.0
        return self.regularizer.loss(self.params['W'])

    def num_params(self) -> int:
        return sum(p.rows * p.cols for p in self.params.values())

    def to_config(self) -> Dict[str, Any]:
        return {'class': 'DenseLayer', 'config': {
            'input_size': self.input_size,
            'output_size': self.output_size,
            'activation': self.activation.to_config(),
            'regularizer': None if self.regularizer is None else self.regularizer.to_config(),
            'init': self.init.value,
        }}

    @classmethod
    def from_config(cls, config: Dict[str, Any], rng: Optional[np.random.Generator] = None) -> 'DenseLayer':
        """Rebuild a freshly initialised layer from ``to_config()['config']``."""
        act_cfg = config['activation']
        activation = NAME2ACTIVATION[act_cfg['class'].lower()](**act_cfg['config'])
        regularizer = None
        reg_cfg = config.get('regularizer')
        if reg_cfg is not None:
            regularizer = NAME2REGULARIZER[reg_cfg['class'].lower()](**reg_cfg['config'])
        return cls(config['input_size'], config['output_size'], activation,
                   regularizer=regularizer, init=config.get('init', 'he'), rng=rng)

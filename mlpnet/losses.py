"""Loss functions. Both losses average over batch rows."""
from __future__ import annotations
import sys
import numpy as np
from .matrix import Matrix, ShapeError


def _check_shapes(y_pred: Matrix, y_true: Matrix):
    if y_pred.shape != y_true.shape:
        raise ShapeError(
            "Prediction and true value matrices must have the same dimensions, "
            f"got {y_pred.rows}x{y_pred.cols} and {y_true.rows}x{y_true.cols}"
        )


class Loss:
    def calculate(self, y_pred: Matrix, y_true: Matrix) -> float:
        raise NotImplementedError

    def backward(self, y_pred: Matrix, y_true: Matrix) -> Matrix:
        raise NotImplementedError


class MeanSquaredError(Loss):
    """Squared error summed per sample, averaged over the batch.

    Divides by the number of rows, not by the element count.
    """
    def calculate(self, y_pred, y_true):
        _check_shapes(y_pred, y_true)
        diff = (y_pred - y_true).to_numpy()
        return float(np.sum(diff ** 2) / y_pred.rows)

    def backward(self, y_pred, y_true):
        _check_shapes(y_pred, y_true)
        return (y_pred - y_true) * (2.0 / y_pred.rows)


class CategoricalCrossEntropy(Loss):
    """Cross-entropy against one-hot targets.

    ``backward`` returns the fused softmax + cross-entropy gradient
    ``y_pred - y_true``, so the output layer must use ``Softmax``.
    """
    eps = sys.float_info.epsilon

    def calculate(self, y_pred, y_true):
        _check_shapes(y_pred, y_true)
        clipped = np.clip(y_pred.to_numpy(), self.eps, 1.0 - self.eps)
        total = np.sum(y_true.to_numpy() * np.log(clipped))
        return float(-total / y_pred.rows)

    def backward(self, y_pred, y_true):
        _check_shapes(y_pred, y_true)
        return y_pred - y_true


NAME2LOSS = {
    'categorical_crossentropy': CategoricalCrossEntropy,
    'cce': CategoricalCrossEntropy,
    'mse': MeanSquaredError,
}

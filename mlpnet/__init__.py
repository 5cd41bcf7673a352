"""mlpnet - Feed-forward neural networks from scratch on a small Matrix type.

Dense layers, ReLU / Linear / Softmax activations, MSE and categorical
cross-entropy losses, L1 / L2 / ElasticNet regularizers and SGD / Adam,
with hand-derived gradients.

Quick Start:
    from mlpnet import Model, DenseLayer, ReLU, Softmax, CategoricalCrossEntropy, Adam

    model = Model()
    model.add(DenseLayer(784, 128, ReLU()))
    model.add(DenseLayer(128, 10, Softmax()))
    loss = CategoricalCrossEntropy()
    opt = Adam(model.get_layers(), lr=0.002)
    for epoch in range(100):
        model.train_step(X, y_one_hot, loss, opt)
"""
from __future__ import annotations
import os as _os

__version__: str = "1.0.0"
__license__: str = "MIT"


def _auto_configure_threads() -> None:
    """Set BLAS / OpenMP thread counts to the CPU count unless already set.

    Only the BLAS kernels inside NumPy's matrix products use these threads;
    mlpnet itself runs training on the calling thread. Must run before NumPy
    loads its BLAS backend. Disable with MLPNET_DISABLE_AUTO_THREADS=1.
    """
    if _os.environ.get('MLPNET_DISABLE_AUTO_THREADS') == '1':
        return
    cores: int = _os.cpu_count() or 1
    for var in ['OMP_NUM_THREADS', 'OPENBLAS_NUM_THREADS', 'MKL_NUM_THREADS',
                'BLIS_NUM_THREADS', 'VECLIB_MAXIMUM_THREADS']:
        if var not in _os.environ:
            _os.environ[var] = str(cores)

_auto_configure_threads()

from .matrix import Matrix, ShapeError, IndexOutOfRangeError  # noqa: E402
from .activations import Activation, Linear, ReLU, Softmax  # noqa: E402
from .losses import Loss, MeanSquaredError, CategoricalCrossEntropy  # noqa: E402
from .regularizers import Regularizer, L1, L2, ElasticNet  # noqa: E402
from .layers import DenseLayer, WeightInit  # noqa: E402
from .model import Model  # noqa: E402
from .optim import Optimizer, SGD, Adam  # noqa: E402
from .io import ModelFormatError  # noqa: E402
from . import data, evaluation  # noqa: E402

__all__ = [
    'Matrix', 'ShapeError', 'IndexOutOfRangeError',
    'Activation', 'Linear', 'ReLU', 'Softmax',
    'Loss', 'MeanSquaredError', 'CategoricalCrossEntropy',
    'Regularizer', 'L1', 'L2', 'ElasticNet',
    'DenseLayer', 'WeightInit', 'Model',
    'Optimizer', 'SGD', 'Adam',
    'ModelFormatError',
    'data', 'evaluation',
]

"""Data loading and preprocessing for the CSV datasets.

Provides readers for the MNIST-style CSV (label in the first column) and the
Boston housing CSV (target in the last column), plus the scaling and label
encoding helpers the task drivers need before feeding a model.
"""
from __future__ import annotations
import os
import warnings
import numpy as np
from typing import Optional, Tuple
from .matrix import Matrix, ShapeError


def _load_csv(path: str, num_rows: int) -> np.ndarray:
    """Read a headed numeric CSV into an ``n x cols`` float64 array.

    "NA" and other non-numeric cells read as 0.
    """
    if not os.path.exists(path):
        raise FileNotFoundError(
            f"Dataset file not found: {path}\n"
            f"Please pass the CSV location with --dataset."
        )
    if num_rows == 0:
        return np.zeros((0, 0))
    kwargs = {} if num_rows == -1 else {'max_rows': num_rows}
    with warnings.catch_warnings():
        # header-only files
        warnings.simplefilter('ignore', UserWarning)
        try:
            arr = np.genfromtxt(path, delimiter=',', skip_header=1, dtype=np.float64,
                                filling_values=0.0, ndmin=2, **kwargs)
        except ValueError as e:
            raise ShapeError(f"{path}: rows have differing lengths ({e})") from None
    if arr.size == 0:
        return np.zeros((0, 0))
    return arr


def read_csv_mnist(path: str, num_rows: int = -1) -> Tuple[Matrix, Matrix]:
    """Read an MNIST CSV export.

    Args:
        path: CSV file with a header line, label first, then pixel values
        num_rows: Maximum number of data rows to read (-1 for all)

    Returns:
        Tuple of (features ``n x 784``, labels ``n x 1``)

    Raises:
        FileNotFoundError: If the file doesn't exist
        ShapeError: If rows have differing lengths
    """
    arr = _load_csv(path, num_rows)
    if arr.size == 0:
        return Matrix(0, 0), Matrix(0, 0)
    return Matrix.from_numpy(arr[:, 1:]), Matrix.from_numpy(arr[:, :1])


def read_csv_boston(path: str, num_rows: int = -1) -> Matrix:
    """Read the Boston housing CSV into one matrix; non-numeric cells become 0."""
    return Matrix.from_numpy(_load_csv(path, num_rows))


def separate_features_target(data: Matrix) -> Tuple[Matrix, Matrix]:
    """Split off the last column as the regression target."""
    arr = data.to_numpy()
    return Matrix.from_numpy(arr[:, :-1]), Matrix.from_numpy(arr[:, -1:])


def normalize_features(features: Matrix) -> Matrix:
    """Scale raw pixel intensities to [0, 1] in place."""
    features /= 255.0
    return features


def one_hot_encode(labels: Matrix, num_classes: int) -> Matrix:
    """Convert an ``n x 1`` label column into an ``n x num_classes`` one-hot matrix.

    Labels outside ``[0, num_classes)`` leave their row all zeros.
    """
    out = Matrix(labels.rows, num_classes)
    for i in range(labels.rows):
        label = int(labels[i, 0])
        if 0 <= label < num_classes:
            out[i, label] = 1.0
    return out


def train_val_split(features: Matrix, labels: Matrix, train_size: int) -> Tuple[Matrix, Matrix, Matrix, Matrix]:
    """Split rows ``[0, train_size)`` for training and the rest for validation.

    Either side may come back empty (0 x cols) when ``train_size`` is at a bound.
    """
    n = features.rows

    def part(m: Matrix, start: int, end: int) -> Matrix:
        if start >= end:
            return Matrix(0, m.cols)
        return m.slice(start, end)

    return (part(features, 0, train_size), part(labels, 0, train_size),
            part(features, train_size, n), part(labels, train_size, n))


class StandardScaler:
    """Per-column standardisation with population std; zero std is replaced by 1."""

    def __init__(self):
        self.mean: Optional[np.ndarray] = None
        self.std: Optional[np.ndarray] = None

    def fit(self, data: Matrix) -> 'StandardScaler':
        if data.rows == 0:
            return self
        arr = data.to_numpy()
        self.mean = arr.mean(axis=0, keepdims=True)
        std = arr.std(axis=0, keepdims=True)
        std[std == 0] = 1.0
        self.std = std
        return self

    def transform(self, data: Matrix) -> Matrix:
        if self.mean is None:
            raise ValueError("StandardScaler must be fitted before transform")
        if data.cols != self.mean.shape[1]:
            raise ValueError(
                f"Data has incorrect number of features for transform, "
                f"expected {self.mean.shape[1]}, got {data.cols}"
            )
        return Matrix.from_numpy((data.to_numpy() - self.mean) / self.std)

    def fit_transform(self, data: Matrix) -> Matrix:
        return self.fit(data).transform(data)

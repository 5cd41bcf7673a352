"""Saving and loading layer weights.

Two formats:

* plain text (default) -- for each layer a ``WEIGHTS`` marker, a ``rows,cols``
  line and one comma-joined line per row, then the same under ``BIASES``.
  Not self-describing: the reader must already hold a model of the same
  layer count and shapes.
* HDF5 via h5py -- datasets ``{idx}_weights`` / ``{idx}_biases``.
"""
from __future__ import annotations
import h5py
import numpy as np
from typing import List, Tuple, Iterator, TextIO
from .matrix import Matrix

WEIGHTS_MARKER = 'WEIGHTS'
BIASES_MARKER = 'BIASES'
HDF5_EXTENSIONS = ('.hdf5', '.h5')

LayerParams = Tuple[Matrix, Matrix]


class ModelFormatError(ValueError):
    """Raised when a weights file does not match the model it is loaded into."""


def _write_matrix(f: TextIO, marker: str, m: Matrix):
    f.write(f"{marker}\n")
    f.write(f"{m.rows},{m.cols}\n")
    for row in m.tolist():
        f.write(",".join(repr(float(v)) for v in row) + "\n")


def save_weights_text(path: str, params: List[LayerParams]):
    with open(path, 'w') as f:
        for weights, biases in params:
            _write_matrix(f, WEIGHTS_MARKER, weights)
            _write_matrix(f, BIASES_MARKER, biases)


def _next_line(lines: Iterator[str], path: str, expecting: str) -> str:
    try:
        return next(lines).rstrip('\r\n')
    except StopIteration:
        raise ModelFormatError(f"{path}: unexpected end of file, expected {expecting}") from None


def _read_matrix(lines: Iterator[str], path: str) -> Matrix:
    dims = _next_line(lines, path, 'a rows,cols line')
    try:
        rows, cols = (int(v) for v in dims.split(','))
    except ValueError:
        raise ModelFormatError(f"{path}: invalid shape line {dims!r}") from None
    values = []
    for i in range(rows):
        line = _next_line(lines, path, f'row {i} of a {rows}x{cols} matrix')
        try:
            row = [float(v) for v in line.split(',')]
        except ValueError:
            raise ModelFormatError(f"{path}: invalid values in line {line!r}") from None
        if len(row) != cols:
            raise ModelFormatError(f"{path}: expected {cols} values per row, got {len(row)}")
        values.append(row)
    if rows == 0 or cols == 0:
        return Matrix(rows, cols)
    return Matrix(values)


def load_weights_text(path: str, num_layers: int) -> List[LayerParams]:
    """Read every weight/bias pair in the file; the count must equal ``num_layers``.

    Lines outside a ``WEIGHTS`` / ``BIASES`` block are skipped.
    """
    out: List[LayerParams] = []
    with open(path, 'r') as f:
        lines = iter(f)
        for line in lines:
            if line.strip() != WEIGHTS_MARKER:
                continue
            weights = _read_matrix(lines, path)
            marker = _next_line(lines, path, BIASES_MARKER)
            if marker.strip() != BIASES_MARKER:
                raise ModelFormatError(f"{path}: expected {BIASES_MARKER}, got {marker!r}")
            biases = _read_matrix(lines, path)
            out.append((weights, biases))
    if len(out) != num_layers:
        raise ModelFormatError(f"{path}: model has {num_layers} layers, file has {len(out)}")
    return out


def save_weights_hdf5(path: str, params: List[LayerParams]):
    with h5py.File(path, 'w') as f:
        for idx, (weights, biases) in enumerate(params):
            f.create_dataset(f"{idx}_weights", data=weights.to_numpy())
            f.create_dataset(f"{idx}_biases", data=biases.to_numpy())


def load_weights_hdf5(path: str, num_layers: int) -> List[LayerParams]:
    out: List[LayerParams] = []
    with h5py.File(path, 'r') as f:
        file_layers = sum(1 for key in f.keys() if key.endswith('_weights'))
        if file_layers > num_layers:
            raise ModelFormatError(f"{path}: model has {num_layers} layers, file has {file_layers}")
        for idx in range(num_layers):
            w_key, b_key = f"{idx}_weights", f"{idx}_biases"
            if w_key not in f or b_key not in f:
                raise ModelFormatError(f"{path}: missing parameters for layer {idx}")
            out.append((Matrix.from_numpy(np.asarray(f[w_key][()])),
                        Matrix.from_numpy(np.asarray(f[b_key][()]))))
    return out


def is_hdf5_path(path: str) -> bool:
    return str(path).lower().endswith(HDF5_EXTENSIONS)

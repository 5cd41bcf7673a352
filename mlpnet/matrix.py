"""Dense 2-D matrix used by every layer, loss and optimizer.

Backed by a float64 NumPy array in row-major order. Shape is fixed at
construction; element-wise ops check shapes and raise ``ShapeError`` on
mismatch rather than broadcasting.
"""
from __future__ import annotations
import numpy as np
from typing import Callable, List, Optional, Tuple


class ShapeError(ValueError):
    """Raised when two matrices have incompatible shapes."""


class IndexOutOfRangeError(IndexError):
    """Raised on element access or slicing outside the matrix bounds."""


class Matrix:
    __slots__ = ('_data',)

    def __init__(self, rows_or_data, cols: Optional[int] = None):
        if cols is not None:
            rows = int(rows_or_data)
            if rows < 0 or cols < 0:
                raise ShapeError(f"Matrix dimensions must be non-negative, got {rows}x{cols}")
            self._data = np.zeros((rows, int(cols)), dtype=np.float64)
            return
        data = rows_or_data
        if isinstance(data, (int, np.integer)):
            raise TypeError("Matrix(rows, cols) needs both dimensions")
        width = len(data[0]) if len(data) else 0
        for i, row in enumerate(data):
            if len(row) != width:
                raise ShapeError(
                    f"Matrix rows must all have length {width}, row {i} has {len(row)}"
                )
        if width == 0:
            self._data = np.zeros((0, 0), dtype=np.float64)
            return
        self._data = np.array(data, dtype=np.float64).reshape(len(data), width)

    # -- factories ---------------------------------------------------------

    @classmethod
    def from_numpy(cls, arr) -> 'Matrix':
        arr = np.asarray(arr, dtype=np.float64)
        if arr.ndim != 2:
            raise ShapeError(f"Matrix needs a 2-D array, got {arr.ndim}-D")
        m = cls.__new__(cls)
        m._data = arr.copy()
        return m

    @classmethod
    def zeros(cls, rows: int, cols: int) -> 'Matrix':
        return cls(rows, cols)

    @classmethod
    def random(cls, rows: int, cols: int, rng: Optional[np.random.Generator] = None) -> 'Matrix':
        """Uniform i.i.d. values in [-1, 1)."""
        rng = rng or np.random.default_rng()
        return cls.from_numpy(rng.uniform(-1.0, 1.0, size=(rows, cols)))

    @classmethod
    def he(cls, rows: int, cols: int, rng: Optional[np.random.Generator] = None) -> 'Matrix':
        """He initialisation: N(0, sqrt(2 / fan_in)) with fan_in = rows."""
        rng = rng or np.random.default_rng()
        stddev = np.sqrt(2.0 / rows)
        return cls.from_numpy(rng.normal(0.0, stddev, size=(rows, cols)))

    # -- shape / access ----------------------------------------------------

    @property
    def rows(self) -> int:
        return self._data.shape[0]

    @property
    def cols(self) -> int:
        return self._data.shape[1]

    @property
    def shape(self) -> Tuple[int, int]:
        return self._data.shape

    def _check_index(self, key) -> Tuple[int, int]:
        r, c = key
        if r < 0 or c < 0 or r >= self.rows or c >= self.cols:
            raise IndexOutOfRangeError(
                f"Matrix index ({r}, {c}) out of range for shape {self.rows}x{self.cols}"
            )
        return r, c

    def __getitem__(self, key) -> float:
        return float(self._data[self._check_index(key)])

    def __setitem__(self, key, value: float):
        self._data[self._check_index(key)] = value

    def _check_same_shape(self, other: 'Matrix', op: str):
        if self.shape != other.shape:
            raise ShapeError(
                f"Matrices must have the same dimensions for {op}, "
                f"got {self.rows}x{self.cols} and {other.rows}x{other.cols}"
            )

    # -- arithmetic --------------------------------------------------------

    @staticmethod
    def multiply(a: 'Matrix', b: 'Matrix') -> 'Matrix':
        if a.cols != b.rows:
            raise ShapeError(
                f"Matrix dimensions are not compatible for multiplication, "
                f"got {a.rows}x{a.cols} and {b.rows}x{b.cols}"
            )
        return Matrix.from_numpy(a._data @ b._data)

    def __matmul__(self, other: 'Matrix') -> 'Matrix':
        return Matrix.multiply(self, other)

    def __add__(self, other: 'Matrix') -> 'Matrix':
        self._check_same_shape(other, 'addition')
        return Matrix.from_numpy(self._data + other._data)

    def __sub__(self, other: 'Matrix') -> 'Matrix':
        self._check_same_shape(other, 'subtraction')
        return Matrix.from_numpy(self._data - other._data)

    def __mul__(self, scalar: float) -> 'Matrix':
        if isinstance(scalar, Matrix):
            raise TypeError("use element_multiply or Matrix.multiply for matrix products")
        return Matrix.from_numpy(self._data * float(scalar))

    __rmul__ = __mul__

    def __itruediv__(self, scalar: float) -> 'Matrix':
        self._data /= float(scalar)
        return self

    def element_multiply(self, other: 'Matrix') -> 'Matrix':
        self._check_same_shape(other, 'element-wise multiplication')
        self._data *= other._data
        return self

    def element_divide(self, other: 'Matrix') -> 'Matrix':
        """In-place Hadamard division.

        A zero divisor yields 0 at that position instead of inf/nan. Adam
        relies on this together with its epsilon; note it also hides any
        accidental division by zero elsewhere.
        """
        self._check_same_shape(other, 'element-wise division')
        zero = other._data == 0
        np.divide(self._data, other._data, out=self._data, where=~zero)
        self._data[zero] = 0.0
        return self

    def element_sqrt(self) -> 'Matrix':
        # negative entries become nan, same as math on doubles
        with np.errstate(invalid='ignore'):
            np.sqrt(self._data, out=self._data)
        return self

    def transpose(self) -> 'Matrix':
        return Matrix.from_numpy(self._data.T)

    @property
    def T(self) -> 'Matrix':
        return self.transpose()

    def map(self, fn: Callable[[float], float]) -> 'Matrix':
        if self._data.size:
            self._data[...] = np.vectorize(fn, otypes=[np.float64])(self._data)
        return self

    def slice(self, start_row: int, end_row: int) -> 'Matrix':
        if start_row < 0 or end_row > self.rows or start_row >= end_row:
            raise IndexOutOfRangeError(
                f"Invalid row range [{start_row}, {end_row}) for slice of {self.rows} rows"
            )
        return Matrix.from_numpy(self._data[start_row:end_row])

    def update(self, gradient: 'Matrix', learning_rate: float) -> 'Matrix':
        """Gradient-descent step in place: ``self -= gradient * learning_rate``."""
        self._check_same_shape(gradient, 'update')
        self._data -= gradient._data * learning_rate
        return self

    # -- row helpers used by layers/evaluation -----------------------------

    def sum_rows(self) -> 'Matrix':
        """Column sums as a 1 x cols row vector."""
        return Matrix.from_numpy(self._data.sum(axis=0, keepdims=True))

    def add_row_vector(self, row: 'Matrix') -> 'Matrix':
        if row.rows != 1 or row.cols != self.cols:
            raise ShapeError(
                f"Row vector must be 1x{self.cols}, got {row.rows}x{row.cols}"
            )
        self._data += row._data
        return self

    def argmax(self, row: int) -> int:
        if row < 0 or row >= self.rows:
            raise IndexOutOfRangeError(f"Row {row} out of range for {self.rows} rows")
        return int(np.argmax(self._data[row]))

    # -- misc --------------------------------------------------------------

    def copy(self) -> 'Matrix':
        return Matrix.from_numpy(self._data)

    def to_numpy(self) -> np.ndarray:
        return self._data.copy()

    def tolist(self) -> List[List[float]]:
        return self._data.tolist()

    def allclose(self, other: 'Matrix', tol: float = 1e-9) -> bool:
        return self.shape == other.shape and bool(np.allclose(self._data, other._data, rtol=0.0, atol=tol))

    def __eq__(self, other) -> bool:
        if not isinstance(other, Matrix):
            return NotImplemented
        return self.shape == other.shape and bool(np.array_equal(self._data, other._data))

    __hash__ = None

    def __repr__(self) -> str:
        return f"Matrix({self.rows}x{self.cols}, {self._data.tolist()!r})"

    def print(self):
        for row in self._data:
            print("\t".join(str(v) for v in row))

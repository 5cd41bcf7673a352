"""Classification metrics: argmax predictions, accuracy and confusion matrix."""
from __future__ import annotations
import numpy as np
from .matrix import Matrix


def get_predictions(y_pred: Matrix) -> Matrix:
    """Index of the highest score in each row, as an ``n x 1`` column."""
    out = Matrix(y_pred.rows, 1)
    for i in range(y_pred.rows):
        out[i, 0] = y_pred.argmax(i)
    return out


def calculate_accuracy(y_pred: Matrix, y_true_raw: Matrix) -> float:
    if y_pred.rows == 0:
        return 0.0
    preds = get_predictions(y_pred).to_numpy()[:, 0]
    truth = y_true_raw.to_numpy()[:, 0]
    return float(np.mean(preds == truth))


class ConfusionMatrix:
    """Count grid, rows = true label, columns = predicted label."""

    def __init__(self, num_classes: int):
        self.num_classes = num_classes
        self.matrix = Matrix(num_classes, num_classes)

    def update(self, y_pred: Matrix, y_true_raw: Matrix):
        preds = get_predictions(y_pred)
        for i in range(preds.rows):
            true_label = int(y_true_raw[i, 0])
            pred_label = int(preds[i, 0])
            if 0 <= true_label < self.num_classes and 0 <= pred_label < self.num_classes:
                self.matrix[true_label, pred_label] += 1

    def format(self) -> str:
        lines = ["--- Confusion Matrix ---", "Pred ->",
                 "True V " + "".join(f"{j:5d}" for j in range(self.num_classes)),
                 "-" * 56]
        for i in range(self.num_classes):
            counts = "".join(f"{int(self.matrix[i, j]):5d}" for j in range(self.num_classes))
            lines.append(f"{i:5d} |{counts}")
        return "\n".join(lines)

    def print(self):
        print()
        print(self.format())

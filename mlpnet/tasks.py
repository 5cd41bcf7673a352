"""Task drivers for the two demo problems.

``run_mnist`` trains/evaluates a digit classifier on an MNIST CSV export,
``run_boston`` a house-price regressor on the Boston housing CSV. Both
return a process exit code. Early stopping lives here, on top of the
model's ``snapshot``/``restore`` seam.
"""
from __future__ import annotations
import math
import sys
import warnings
from typing import Dict, List, Optional, Tuple
from tqdm import tqdm

from .activations import Linear, ReLU, Softmax
from .config import Config
from .data import (
    StandardScaler, normalize_features, one_hot_encode, read_csv_boston,
    read_csv_mnist, separate_features_target, train_val_split,
)
from .evaluation import ConfusionMatrix, calculate_accuracy, get_predictions
from .layers import DenseLayer
from .losses import CategoricalCrossEntropy, Loss, MeanSquaredError
from .matrix import Matrix
from .model import Model
from .optim import Adam, Optimizer

MNIST_DEFAULT_PATH = 'data/mnist_train.csv'
BOSTON_DEFAULT_PATH = 'data/boston_housing.csv'
MNIST_CLASSES = 10
MNIST_FEATURES = 784
MNIST_LR = 0.002
BOSTON_LR = 0.01
BOSTON_TRAIN_ROWS = 400


def _error(msg: str):
    print(f"Error: {msg}", file=sys.stderr)


def _learning_rate(config: Config, default: float) -> float:
    """``--lr`` when given (0 included), else the task default."""
    return default if config.learning_rate is None else config.learning_rate


def fit(model: Model, X: Matrix, y: Matrix, loss: Loss, optimizer: Optimizer, epochs: int,
        val_data: Optional[Tuple[Matrix, Matrix]] = None, patience: Optional[int] = None,
        report_every: int = 1, verbose: bool = True) -> Dict[str, List[float]]:
    """Full-batch training loop.

    With ``val_data`` and ``patience`` set, stops once validation loss has
    not improved for ``patience`` epochs and restores the best weights seen.
    """
    history: Dict[str, List[float]] = {'loss': [], 'val_loss': []}
    best_val = math.inf
    best: Optional[list] = None
    epochs_no_improve = 0
    has_val = val_data is not None and val_data[0].rows > 0
    pbar = tqdm(range(epochs), desc="Training", disable=not verbose)
    for epoch in pbar:
        train_loss = model.train_step(X, y, loss, optimizer)
        history['loss'].append(train_loss)
        if not has_val:
            pbar.set_postfix(loss=train_loss)
            if verbose and epoch % report_every == 0:
                tqdm.write(f"Epoch: {epoch}, Training Loss: {train_loss:.6f}")
            continue

        X_val, y_val = val_data
        val_loss = loss.calculate(model.predict(X_val), y_val)
        history['val_loss'].append(val_loss)
        pbar.set_postfix(loss=train_loss, val_loss=val_loss)
        if verbose and epoch % report_every == 0:
            tqdm.write(f"Epoch: {epoch}, Validation Loss: {val_loss:.6f}")

        if patience is None:
            continue
        if val_loss < best_val:
            best_val = val_loss
            epochs_no_improve = 0
            best = model.snapshot()
        else:
            epochs_no_improve += 1
        if epochs_no_improve >= patience:
            if verbose:
                tqdm.write(f"Early stopping triggered at epoch {epoch}. Best validation loss={best_val:.6f}")
            break
    pbar.close()
    if best is not None:
        model.restore(best)
    return history


def _load_weights(model: Model, config: Config) -> bool:
    """Load ``config.load_model_path`` if given.

    In predict mode a failure is fatal (returns False); in train mode it is a
    warning and training starts from the fresh weights.
    """
    if not config.load_model_path:
        return True
    try:
        model.load(config.load_model_path)
    except (OSError, ValueError) as e:
        if config.predict:
            _error(f"Could not load model from {config.load_model_path}: {e}")
            return False
        warnings.warn(
            f"Could not load model from {config.load_model_path} ({e}); "
            f"starting from freshly initialised weights."
        )
        return True
    print(f"Loaded model from {config.load_model_path}")
    return True


def _save_weights(model: Model, config: Config) -> bool:
    if not config.save_model_path:
        return True
    try:
        model.save(config.save_model_path)
    except OSError as e:
        _error(f"Could not save model to {config.save_model_path}: {e}")
        return False
    print(f"Model saved to {config.save_model_path}")
    return True


def build_mnist_model() -> Model:
    model = Model()
    model.add(DenseLayer(MNIST_FEATURES, 128, ReLU()))
    model.add(DenseLayer(128, MNIST_CLASSES, Softmax()))
    return model


def build_boston_model(n_features: int) -> Model:
    model = Model()
    model.add(DenseLayer(n_features, 64, ReLU()))
    model.add(DenseLayer(64, 64, ReLU()))
    model.add(DenseLayer(64, 1, Linear()))
    return model


def run_mnist(config: Config, verbose: bool = True) -> int:
    print("--- MNIST " + ("Training" if config.train else "Prediction") + " Mode ---")
    path = config.dataset_path or MNIST_DEFAULT_PATH
    print(f"Loading data from: {path}")
    try:
        features, labels = read_csv_mnist(path)
    except (OSError, ValueError) as e:
        _error(f"Could not load dataset: {e}")
        return 1
    if features.rows == 0:
        _error(f"No data rows in {path}")
        return 1
    if features.cols != MNIST_FEATURES:
        _error(f"Expected {MNIST_FEATURES} pixel columns, got {features.cols}")
        return 1

    total = features.rows
    train_size = 0 if config.predict else int(total * 0.8)
    X_train, y_train_raw, X_val, y_val_raw = train_val_split(features, labels, train_size)
    normalize_features(X_train)
    normalize_features(X_val)
    y_train = one_hot_encode(y_train_raw, MNIST_CLASSES)
    y_val = one_hot_encode(y_val_raw, MNIST_CLASSES)

    model = build_mnist_model()
    loss_fn = CategoricalCrossEntropy()
    optimizer = Adam(model.get_layers(), _learning_rate(config, MNIST_LR))
    if not _load_weights(model, config):
        return 1

    if config.train:
        if X_train.rows == 0:
            _error("No training data available.")
            return 1
        print(f"Epochs: {config.epochs}")
        fit(model, X_train, y_train, loss_fn, optimizer, config.epochs,
            val_data=(X_val, y_val), patience=config.patience, report_every=5, verbose=verbose)
        print("Training Complete.")
        if not _save_weights(model, config):
            return 1
        X_eval, y_eval_raw, name = (X_val, y_val_raw, 'Validation') if X_val.rows else (X_train, y_train_raw, 'Training')
    else:
        X_eval, y_eval_raw, name = X_val, y_val_raw, 'Full'

    predictions = model.predict(X_eval)
    accuracy = calculate_accuracy(predictions, y_eval_raw)
    print(f"{name} Accuracy: {accuracy * 100.0:.2f}%")
    cm = ConfusionMatrix(MNIST_CLASSES)
    cm.update(predictions, y_eval_raw)
    cm.print()

    if config.predict:
        print("\nSample Predictions (Predicted vs True):")
        pred_labels = get_predictions(predictions)
        for i in range(min(5, predictions.rows)):
            print(f"Sample {i}: Predicted={int(pred_labels[i, 0])}, True={int(y_eval_raw[i, 0])}")
    return 0


def run_boston(config: Config, verbose: bool = True) -> int:
    print("--- Boston Housing Regression Task ---")
    path = config.dataset_path or BOSTON_DEFAULT_PATH
    print(f"Loading data from: {path}")
    try:
        raw = read_csv_boston(path)
    except (OSError, ValueError) as e:
        _error(f"Could not load dataset: {e}")
        return 1
    if raw.rows < 2 or raw.cols < 2:
        _error(f"Not enough data in {path}")
        return 1
    X_all, y_all = separate_features_target(raw)
    train_size = BOSTON_TRAIN_ROWS if X_all.rows > BOSTON_TRAIN_ROWS else int(X_all.rows * 0.8)
    X_train, y_train, X_val, y_val = train_val_split(X_all, y_all, train_size)

    scaler = StandardScaler()
    X_train = scaler.fit_transform(X_train)
    X_val = scaler.transform(X_val)

    model = build_boston_model(X_train.cols)
    loss_fn = MeanSquaredError()
    optimizer = Adam(model.get_layers(), _learning_rate(config, BOSTON_LR))
    if not _load_weights(model, config):
        return 1

    if config.train:
        print(f"Epochs: {config.epochs}")
        fit(model, X_train, y_train, loss_fn, optimizer, config.epochs,
            val_data=(X_val, y_val), report_every=10, verbose=verbose)
        print("Training Complete.")
        if X_val.rows:
            final = loss_fn.calculate(model.predict(X_val), y_val)
            print(f"Final Validation MSE after training: {final:.6f}")
        return 0 if _save_weights(model, config) else 1

    predictions = model.predict(X_val)
    print(f"Validation MSE: {loss_fn.calculate(predictions, y_val):.6f}")
    print("\nSample Predictions vs True Values (on validation set):")
    for i in range(min(10, predictions.rows)):
        print(f"Pred: {predictions[i, 0]:.4f}, True: {y_val[i, 0]:.4f}")
    return 0


TASKS = {'mnist': run_mnist, 'boston': run_boston}


def run_task(config: Config, verbose: bool = True) -> int:
    task = TASKS.get(config.task_mode)
    if task is None:
        _error(f"Unknown task mode: {config.task_mode}")
        return 1
    return task(config, verbose=verbose)

"""MNIST Training Script

Train a dense network on MNIST handwritten digits (0-9) from a CSV export.

Dataset: MNIST as CSV (label column followed by 784 pixel columns)
Classes: 10 (digits 0-9)

Place mnist_train.csv in the same directory as this script, or pass its path
as the first argument.
"""
import os
import sys

# Add parent directory to path
sys.path.insert(0, os.path.join(os.path.dirname(__file__), '../..'))

from mlpnet import Model, DenseLayer, ReLU, Softmax, CategoricalCrossEntropy, Adam, ElasticNet
from mlpnet.data import read_csv_mnist, normalize_features, one_hot_encode, train_val_split
from mlpnet.evaluation import calculate_accuracy, ConfusionMatrix
from mlpnet.tasks import fit


def build_model() -> Model:
    """Build the classifier.

    Architecture:
    - Dense(784 -> 128) -> ReLU, ElasticNet on the weights
    - Dense(128 -> 10) -> Softmax

    Returns:
        Configured model
    """
    model = Model()
    model.add(DenseLayer(784, 128, ReLU(), regularizer=ElasticNet(1e-5, 1e-4)))
    model.add(DenseLayer(128, 10, Softmax()))
    return model


def main():
    """Main training loop."""
    print("=" * 60)
    print("MNIST Digit Recognition Training")
    print("=" * 60)

    script_dir = os.path.dirname(os.path.abspath(__file__))
    path = sys.argv[1] if len(sys.argv) > 1 else os.path.join(script_dir, 'mnist_train.csv')

    print("Loading MNIST dataset...")
    features, labels = read_csv_mnist(path)
    split_idx = int(0.9 * features.rows)
    X_train, y_train_raw, X_val, y_val_raw = train_val_split(features, labels, split_idx)
    normalize_features(X_train)
    normalize_features(X_val)
    y_train = one_hot_encode(y_train_raw, 10)
    y_val = one_hot_encode(y_val_raw, 10)
    print(f"Training: {X_train.rows} samples")
    print(f"Validation: {X_val.rows} samples")
    print()

    model = build_model()
    loss = CategoricalCrossEntropy()
    optimizer = Adam(model.get_layers(), lr=0.002)
    model.summary()
    print()

    history = fit(model, X_train, y_train, loss, optimizer, epochs=50,
                  val_data=(X_val, y_val), patience=10, report_every=5)

    print()
    print("=" * 60)
    print("Training Complete")
    print("=" * 60)
    print(f"Best validation loss: {min(history['val_loss']):.4f}")
    print(f"Final training loss: {history['loss'][-1]:.4f}")

    preds = model.predict(X_val)
    print(f"Validation accuracy: {calculate_accuracy(preds, y_val_raw):.4f}")
    cm = ConfusionMatrix(10)
    cm.update(preds, y_val_raw)
    cm.print()

    model.save('mnist_model.txt')
    print("\nModel saved to mnist_model.txt")
    print("=" * 60)


if __name__ == '__main__':
    main()

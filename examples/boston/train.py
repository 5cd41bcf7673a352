"""Boston Housing Training Script

Regress median house value (last CSV column) on the other 13 features.

Place boston_housing.csv in the same directory as this script, or pass its
path as the first argument.
"""
import os
import sys

# Add parent directory to path
sys.path.insert(0, os.path.join(os.path.dirname(__file__), '../..'))

from mlpnet import Adam, MeanSquaredError
from mlpnet.data import read_csv_boston, separate_features_target, train_val_split, StandardScaler
from mlpnet.tasks import build_boston_model, fit


def main():
    script_dir = os.path.dirname(os.path.abspath(__file__))
    path = sys.argv[1] if len(sys.argv) > 1 else os.path.join(script_dir, 'boston_housing.csv')

    X_all, y_all = separate_features_target(read_csv_boston(path))
    X_train, y_train, X_val, y_val = train_val_split(X_all, y_all, 400)
    scaler = StandardScaler()
    X_train = scaler.fit_transform(X_train)
    X_val = scaler.transform(X_val)

    model = build_boston_model(X_train.cols)
    loss = MeanSquaredError()
    optimizer = Adam(model.get_layers(), lr=0.01)
    history = fit(model, X_train, y_train, loss, optimizer, epochs=500,
                  val_data=(X_val, y_val), report_every=50)

    print(f"Final training MSE: {history['loss'][-1]:.4f}")
    print(f"Final validation MSE: {history['val_loss'][-1]:.4f}")
    model.save('boston_model.txt')


if __name__ == '__main__':
    main()

"""Example usage of mlpnet: fit y = x1 + x2 with a tiny ReLU network.

Builds 2 -> 3 (ReLU) -> 1 (Linear), trains it with SGD on four points,
then saves and reloads the weights through the plain-text format.
"""
from mlpnet import Model, DenseLayer, ReLU, Linear, MeanSquaredError, SGD, Matrix


def build_model():
    model = Model()
    model.add(DenseLayer(2, 3, ReLU()))
    model.add(DenseLayer(3, 1, Linear()))
    return model


def main():
    X = Matrix([[0.0, 0.0], [1.0, 0.0], [0.0, 1.0], [1.0, 1.0]])
    y = Matrix([[0.0], [1.0], [1.0], [2.0]])

    model = build_model()
    loss = MeanSquaredError()
    optimizer = SGD(model.get_layers(), lr=0.1)
    for epoch in range(1000):
        loss_val = model.train_step(X, y, loss, optimizer)
        if epoch % 100 == 0:
            print(f"Epoch {epoch}: loss={loss_val:.6f}")

    print("Predictions:")
    model.predict(X).print()

    model.save('toy_model.txt')
    loaded = build_model()
    loaded.load('toy_model.txt')
    print('Reloaded loss:', loss.calculate(loaded.predict(X), y))


if __name__ == '__main__':
    main()

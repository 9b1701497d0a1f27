"""
Function Fitting Experiments.

Trains small spline-edge KANs on 1D / 2D test functions with the
example-by-example training loop and reports train / test loss.
"""

import logging
import numpy as np
import sys
import os

sys.path.append(os.path.abspath(os.path.join(os.path.dirname(__file__), '..')))

from kan_engine import KANTrainer, create_kan, count_parameters, evaluate


# Test functions on [-1, 1]^n
TEST_FUNCTIONS = {
    "sin_pi_x": (1, lambda x: np.sin(np.pi * x[:, 0])),
    "x_squared": (1, lambda x: x[:, 0] ** 2),
    "exp_sin": (1, lambda x: np.exp(np.sin(np.pi * x[:, 0])) / np.e),
    "xy": (2, lambda x: x[:, 0] * x[:, 1]),
    "sum_squares": (2, lambda x: 0.5 * (x ** 2).sum(axis=1)),
}


def fit_function(func_name, n_samples=200, hidden=5, grid_size=5, degree=3,
                 epochs=100, learning_rate=0.1, batch_size=10, seed=0):
    """
    Fit a KAN [n_inputs, hidden, 1] to one test function.

    Returns:
        results: Dict with training history and final losses
    """
    n_inputs, func = TEST_FUNCTIONS[func_name]
    rng = np.random.default_rng(seed)

    x_train = rng.uniform(-1, 1, size=(n_samples, n_inputs))
    y_train = func(x_train)
    x_test = rng.uniform(-1, 1, size=(n_samples // 4, n_inputs))
    y_test = func(x_test)

    net = create_kan([n_inputs, hidden, 1], grid_size=grid_size, degree=degree, seed=seed)
    trainer = KANTrainer(net, learning_rate=learning_rate, batch_size=batch_size, seed=seed)

    print(f"\n=== {func_name} ===")
    print(f"KAN params: {count_parameters(net)}")

    history = trainer.train(x_train, y_train, x_val=x_test, y_val=y_test,
                            epochs=epochs, verbose=True, print_every=25)
    trainer.restore_best()
    test_loss = evaluate(net, x_test, y_test)

    print(f"KAN test loss: {test_loss:.6f}")

    return {
        "function": func_name,
        "train_loss": history["train_loss"],
        "val_loss": history["val_loss"],
        "test_loss": test_loss,
        "params": count_parameters(net),
    }


def run_all_experiments():
    """Run experiments on all test functions."""
    all_results = []
    for func_name in TEST_FUNCTIONS:
        all_results.append(fit_function(func_name))
    return all_results


if __name__ == "__main__":
    logging.basicConfig(level=logging.INFO, format="%(message)s")
    run_all_experiments()

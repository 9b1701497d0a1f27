"""
Training loop for KAN networks.

Each epoch shuffles the examples, splits them into batches and runs
train_step on every batch: forward/backward per example, one weight
update per batch.
"""

import logging
import numpy as np
from typing import Callable, Dict, List, Optional
from copy import deepcopy

from kan_utils.losses import Loss, SQUARE, get_loss
from .kan_functions import train_step, evaluate
from .kan_network import KANNetwork

logger = logging.getLogger(__name__)


class KANTrainer:
    """
    Mini-batch trainer for a KANNetwork.

    Args:
        network: Network to train (updated in place)
        learning_rate: Step size for control points and biases
        batch_size: Examples per weight update
        loss: Loss or registered loss name
        seed: Seed for the shuffling generator
    """

    def __init__(self, network: KANNetwork, learning_rate: float = 0.03,
                 batch_size: int = 10, loss=SQUARE, seed: Optional[int] = None):
        if batch_size < 1:
            raise ValueError(f"batch_size must be >= 1, got {batch_size}")
        self.network = network
        self.learning_rate = learning_rate
        self.batch_size = batch_size
        self.loss: Loss = get_loss(loss) if isinstance(loss, str) else loss
        self.rng = np.random.default_rng(seed)

        self.callbacks: List[Callable] = []
        self.history: Dict[str, List[float]] = {'train_loss': [], 'val_loss': []}
        self.best_loss = float('inf')
        self.best_state: Optional[KANNetwork] = None

    def add_callback(self, callback: Callable):
        """Add a callback(epoch, history, network) called after each epoch."""
        self.callbacks.append(callback)

    def train_epoch(self, x: np.ndarray, y: np.ndarray) -> float:
        """One pass over shuffled data. Returns the mean batch loss."""
        order = self.rng.permutation(len(x))
        batch_losses = []
        for start in range(0, len(order), self.batch_size):
            idx = order[start:start + self.batch_size]
            batch_losses.append(
                train_step(self.network, x[idx], y[idx], self.learning_rate, self.loss))
        return float(np.mean(batch_losses)) if batch_losses else 0.0

    def train(self, x_train, y_train, x_val=None, y_val=None,
              epochs: int = 100,
              early_stopping: int = 0,
              verbose: bool = True,
              print_every: int = 10) -> Dict[str, List[float]]:
        """
        Train the network.

        Args:
            x_train, y_train: Training examples and targets
            x_val, y_val: Optional validation data
            epochs: Number of epochs
            early_stopping: Stop after this many epochs without improvement (0=disabled)
            verbose: Log progress
            print_every: Log frequency in epochs
        Returns:
            Training history dict
        """
        if (x_val is None) != (y_val is None):
            raise ValueError("x_val and y_val must be given together")

        x_train = np.asarray(x_train, dtype=float)
        if x_train.ndim == 1:
            x_train = x_train.reshape(-1, 1)
        y_train = np.asarray(y_train, dtype=float).reshape(-1)
        no_improve = 0

        for epoch in range(epochs):
            self.train_epoch(x_train, y_train)

            train_loss = evaluate(self.network, x_train, y_train, self.loss)
            val_loss = 0.0
            if x_val is not None:
                val_loss = evaluate(self.network, x_val, y_val, self.loss)

            self.history['train_loss'].append(train_loss)
            self.history['val_loss'].append(val_loss)

            current_loss = val_loss if x_val is not None else train_loss
            if current_loss < self.best_loss:
                self.best_loss = current_loss
                self.best_state = deepcopy(self.network)
                no_improve = 0
            else:
                no_improve += 1

            if early_stopping and no_improve >= early_stopping:
                if verbose:
                    logger.info("Early stopping at epoch %d", epoch + 1)
                break

            for callback in self.callbacks:
                callback(epoch, self.history, self.network)

            if verbose and (epoch + 1) % print_every == 0:
                logger.info("Epoch %d/%d, Loss: %.6f, Val: %.6f",
                            epoch + 1, epochs, train_loss, val_loss)

        return self.history

    def restore_best(self):
        """Copy the best parameters seen so far back into the network."""
        if self.best_state is None:
            return
        for edge, best_edge in zip(self.network.edges, self.best_state.edges):
            edge.learnable_function.control_points = list(best_edge.learnable_function.control_points)
        for node, best_node in zip(self.network.nodes, self.best_state.nodes):
            node.bias = best_node.bias
        logger.info("Restored best model (loss: %.6f)", self.best_loss)

"""
KAN Functions Module
====================

Convenience functions on top of the network driver for creating,
training and inspecting a KAN.

Usage:
    from kan_engine.kan_functions import *

    # Create model
    net = create_kan([2, 5, 1], input_ids=["x1", "x2"], seed=0)

    # One batch
    loss = train_step(net, x_batch, y_batch, learning_rate=0.03)

    # Inference
    y_pred = predict(net, x)
"""

import numpy as np
from typing import Dict, List, Optional, Sequence, Tuple
from copy import deepcopy

from kan_utils.losses import Loss, SQUARE
from .kan_network import (
    KANNetwork, build_kan_network, forward_prop, backward_prop,
    update_weights, for_each_node,
)


__all__ = [
    # Creation
    'DEFAULT_CONFIG', 'create_kan', 'create_kan_from_config',
    # Training
    'train_step', 'evaluate',
    # Inference
    'predict',
    # Inspection
    'get_edge_functions', 'count_edges', 'count_parameters', 'summary',
    # Utilities
    'clone_kan',
]


DEFAULT_CONFIG = {
    'layers': [2, 4, 1],
    'input_ids': None,
    'grid_size': 5,
    'degree': 3,
    'use_bias': False,
    'input_range': (-1.0, 1.0),
    'seed': None,
}


# =============================================================================
# CREATION
# =============================================================================

def create_kan(layers: List[int],
               input_ids: Optional[Sequence[str]] = None,
               grid_size: int = 5,
               degree: int = 3,
               use_bias: bool = False,
               input_range: Tuple[float, float] = (-1.0, 1.0),
               seed: Optional[int] = None) -> KANNetwork:
    """
    Create a KAN with the specified architecture.

    Args:
        layers: Layer widths [input, hidden..., 1]
        input_ids: Input node names (default: x1, x2, ...)
        grid_size: B-spline grid intervals
        degree: Spline degree (default: 3 = cubic)
        use_bias: Learnable bias on non-input nodes
        input_range: Domain of every edge spline
        seed: Seed for parameter initialisation
    Returns:
        KANNetwork

    Example:
        >>> net = create_kan([2, 5, 1])
        >>> net = create_kan([1, 3, 1], grid_size=8, seed=42)
    """
    if input_ids is None:
        input_ids = [f"x{i + 1}" for i in range(layers[0])]
    return build_kan_network(
        layers, input_ids,
        grid_size=grid_size,
        degree=degree,
        use_bias=use_bias,
        input_range=input_range,
        seed=seed,
    )


def create_kan_from_config(config: Dict) -> KANNetwork:
    """
    Create a KAN from a configuration dict.

    Missing keys fall back to DEFAULT_CONFIG.
    """
    merged = {**DEFAULT_CONFIG, **config}
    return create_kan(
        layers=merged['layers'],
        input_ids=merged['input_ids'],
        grid_size=merged['grid_size'],
        degree=merged['degree'],
        use_bias=merged['use_bias'],
        input_range=tuple(merged['input_range']),
        seed=merged['seed'],
    )


# =============================================================================
# TRAINING
# =============================================================================

def _as_examples(x, y) -> Tuple[np.ndarray, np.ndarray]:
    x = np.asarray(x, dtype=float)
    if x.ndim == 1:
        x = x.reshape(-1, 1)
    y = np.asarray(y, dtype=float).reshape(-1)
    if len(x) != len(y):
        raise ValueError(f"Got {len(x)} inputs but {len(y)} targets")
    return x, y


def train_step(network: KANNetwork, x, y,
               learning_rate: float = 0.03,
               loss: Loss = SQUARE) -> float:
    """
    Train on one batch.

    Runs forward_prop + backward_prop per example, then a single
    update_weights.

    Args:
        network: KAN to train
        x: (n_examples, n_inputs); a 1-D x means one scalar feature per
           example, not a single multi-feature example
        y: (n_examples,) targets
        learning_rate: Step size
        loss: Loss whose der seeds backward_prop
    Returns:
        Mean loss of the batch (measured before the update)
    """
    x, y = _as_examples(x, y)
    total = 0.0
    for inputs, target in zip(x, y):
        output = forward_prop(network, inputs)
        total += loss.error(output, target)
        backward_prop(network, target, loss.der)
    update_weights(network, learning_rate)
    return total / max(len(y), 1)


def evaluate(network: KANNetwork, x, y, loss: Loss = SQUARE) -> float:
    """Mean loss over a dataset (no parameter changes)."""
    x, y = _as_examples(x, y)
    if len(y) == 0:
        return 0.0
    return sum(loss.error(forward_prop(network, inputs), target)
               for inputs, target in zip(x, y)) / len(y)


# =============================================================================
# INFERENCE
# =============================================================================

def predict(network: KANNetwork, x) -> np.ndarray:
    """
    Get predictions, one per example.

    x is (n_examples, n_inputs). A 1-D x is read as one scalar feature per
    example; wrap a single multi-feature example as [x].
    """
    x = np.asarray(x, dtype=float)
    if x.ndim == 1:
        x = x.reshape(-1, 1)
    return np.array([forward_prop(network, inputs) for inputs in x])


# =============================================================================
# INSPECTION
# =============================================================================

def get_edge_functions(network: KANNetwork, num_points: int = 50) -> Dict[str, Tuple[np.ndarray, np.ndarray]]:
    """
    Sample every edge's learnable function.

    Returns:
        Dict mapping edge id -> (xs, ys)
    """
    return {edge.id: edge.learnable_function.sample(num_points) for edge in network.edges}


def count_edges(network: KANNetwork) -> int:
    return network.num_edges


def count_parameters(network: KANNetwork) -> int:
    """Control points of all edges plus non-zero biases."""
    total = sum(edge.learnable_function.num_parameters for edge in network.edges)
    biases = []
    for_each_node(network, True, lambda node: biases.append(node.bias))
    return total + sum(1 for b in biases if b != 0)


def summary(network: KANNetwork) -> str:
    """Get model summary string."""
    lines = ["KAN Model Summary", "=" * 40]

    fn = network.edges[0].learnable_function if network.edges else None
    lines.append(f"Architecture: {network.layer_sizes}")
    if fn is not None:
        lines.append(f"Grid size: {fn.grid_size}")
        lines.append(f"Degree: {fn.degree}")
        lines.append(f"Input range: {fn.input_range}")
    lines.append(f"Edges: {count_edges(network)}")
    lines.append(f"Parameters: {count_parameters(network):,}")

    return "\n".join(lines)


# =============================================================================
# UTILITIES
# =============================================================================

def clone_kan(network: KANNetwork) -> KANNetwork:
    """Create a deep copy of a KAN (parameters, accumulators and generator)."""
    return deepcopy(network)

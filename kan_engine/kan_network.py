"""
KAN network driver.

Builds a fully-connected layered graph of KANNode / KANEdge and runs the
forward, backward and update passes over it. Nodes and edges live in two
arenas owned by KANNetwork and refer to each other by integer index.

Training loop contract (composed by the caller, see KANTrainer):

    for x, y in batch:
        forward_prop(net, x)
        backward_prop(net, y, loss_der)
    update_weights(net, lr)

Edge gradients are averaged over the batch; node biases only see the
output_der of the last backward_prop before update_weights.
"""

import logging
import numpy as np
from typing import Callable, List, Optional, Sequence, Tuple

from .errors import ConfigurationError, InputMismatchError
from .kan_edge import KANEdge
from .kan_node import KANNode

logger = logging.getLogger(__name__)

ErrorDerivative = Callable[[float, float], float]


class KANNetwork:
    """
    Arena of nodes and edges plus the layer structure.

    Attributes:
        nodes: All nodes, layer by layer
        edges: All edges
        layers: Node indices per layer; layers[0] is the input layer and
                layers[-1] holds the single output node
        rng: Generator used to initialise parameters
    """

    def __init__(self, rng: Optional[np.random.Generator] = None):
        self.nodes: List[KANNode] = []
        self.edges: List[KANEdge] = []
        self.layers: List[List[int]] = []
        self.rng = rng if rng is not None else np.random.default_rng()

    def add_node(self, node: KANNode) -> int:
        self.nodes.append(node)
        return len(self.nodes) - 1

    def connect(self, source: int, dest: int, grid_size: int, degree: int,
                input_range: Tuple[float, float]) -> int:
        """Create an edge source -> dest and register it on both nodes."""
        src_node, dst_node = self.nodes[source], self.nodes[dest]
        edge = KANEdge(f"{src_node.id}-{dst_node.id}", source, dest,
                       grid_size=grid_size, degree=degree,
                       input_range=input_range, rng=self.rng)
        self.edges.append(edge)
        index = len(self.edges) - 1
        src_node.output_edges.append(index)
        dst_node.input_edges.append(index)
        return index

    @property
    def num_layers(self) -> int:
        return len(self.layers)

    @property
    def layer_sizes(self) -> List[int]:
        return [len(layer) for layer in self.layers]

    @property
    def num_edges(self) -> int:
        return len(self.edges)

    def layer(self, index: int) -> List[KANNode]:
        return [self.nodes[i] for i in self.layers[index]]

    def node(self, layer: int, i: int) -> KANNode:
        return self.nodes[self.layers[layer][i]]

    def input_edges(self, node: KANNode) -> List[KANEdge]:
        return [self.edges[e] for e in node.input_edges]

    def output_edges(self, node: KANNode) -> List[KANEdge]:
        return [self.edges[e] for e in node.output_edges]

    def source(self, edge: KANEdge) -> KANNode:
        return self.nodes[edge.source]

    def dest(self, edge: KANEdge) -> KANNode:
        return self.nodes[edge.dest]

    def __repr__(self):
        return f"KANNetwork(layers={self.layer_sizes}, edges={self.num_edges})"


# =============================================================================
# BUILD
# =============================================================================

def build_kan_network(shape: Sequence[int],
                      input_ids: Sequence[str],
                      grid_size: int = 5,
                      degree: int = 3,
                      use_bias: bool = False,
                      input_range: Tuple[float, float] = (-1.0, 1.0),
                      seed: Optional[int] = None,
                      rng: Optional[np.random.Generator] = None) -> KANNetwork:
    """
    Build a fully-connected KAN.

    Args:
        shape: Layer sizes [n_inputs, hidden..., 1]
        input_ids: Names of the input nodes (len == shape[0])
        grid_size: Spline intervals per edge
        degree: Spline degree (capped at grid_size - 1)
        use_bias: Give non-input nodes a random bias
        input_range: Spline domain of every edge
        seed: Seed for a fresh generator (ignored if rng is given)
        rng: Explicit numpy Generator
    Returns:
        KANNetwork

    Example:
        >>> net = build_kan_network([2, 3, 1], ["x1", "x2"], seed=0)
        >>> net.layer_sizes
        [2, 3, 1]
    """
    shape = list(shape)
    if not shape:
        raise ConfigurationError("Network shape must contain at least one layer")
    if any(size < 1 for size in shape):
        raise ConfigurationError(f"Layer sizes must be positive, got {shape}")
    if shape[-1] != 1:
        raise ConfigurationError(f"Output layer must have exactly one node, got {shape[-1]}")
    if len(input_ids) != shape[0]:
        raise ConfigurationError(
            f"Number of input ids ({len(input_ids)}) must match input layer size ({shape[0]})")

    network = KANNetwork(rng if rng is not None else np.random.default_rng(seed))

    node_id = 1
    for layer_idx, num_nodes in enumerate(shape):
        is_input_layer = layer_idx == 0
        current_layer = []
        for i in range(num_nodes):
            if is_input_layer:
                name = input_ids[i]
            else:
                name = str(node_id)
                node_id += 1
            node = KANNode(name, use_bias and not is_input_layer, rng=network.rng)
            current_layer.append(network.add_node(node))
        network.layers.append(current_layer)

    for layer_idx in range(1, len(shape)):
        prev_layer = network.layers[layer_idx - 1]
        for dest in network.layers[layer_idx]:
            for source in prev_layer:
                network.connect(source, dest, grid_size, degree, input_range)

    logger.debug("Built KAN %s with %d edges (grid_size=%d, degree=%d, bias=%s)",
                 network.layer_sizes, network.num_edges, grid_size, degree, use_bias)
    return network


build = build_kan_network


# =============================================================================
# PROPAGATION
# =============================================================================

def forward_prop(network: KANNetwork, inputs: Sequence[float]) -> float:
    """Set the input layer, run every layer forward and return the output."""
    input_layer = network.layers[0]
    if len(inputs) != len(input_layer):
        raise InputMismatchError(
            f"Number of inputs ({len(inputs)}) must match input layer size ({len(input_layer)})")

    for i, node_index in enumerate(input_layer):
        network.nodes[node_index].output = float(inputs[i])

    for layer_idx in range(1, network.num_layers):
        for node_index in network.layers[layer_idx]:
            network.nodes[node_index].forward(network)

    return get_output_node(network).output


def backward_prop(network: KANNetwork, target: float,
                  error_derivative: ErrorDerivative) -> None:
    """
    Backpropagate dLoss/d output for one example.

    Seeds the output node with error_derivative(output, target), then walks
    layers top-down. Before a layer runs backward(), the output_der of the
    layer below is reset (input layer excluded), since each node's
    output_der is the sum over its output edges.
    """
    output_node = get_output_node(network)
    output_node.output_der = error_derivative(output_node.output, target)

    for layer_idx in range(network.num_layers - 1, 0, -1):
        if layer_idx > 1:
            for node_index in network.layers[layer_idx - 1]:
                network.nodes[node_index].output_der = 0.0

        for node_index in network.layers[layer_idx]:
            network.nodes[node_index].backward(network)


def update_weights(network: KANNetwork, learning_rate: float) -> None:
    """
    Step biases (by the current output_der) and edge splines (by the
    averaged accumulated gradient).
    """
    for layer_idx in range(1, network.num_layers):
        for node_index in network.layers[layer_idx]:
            node = network.nodes[node_index]
            if node.bias != 0:
                node.bias -= learning_rate * node.output_der

            for e in node.input_edges:
                network.edges[e].update_parameters(learning_rate)


# =============================================================================
# INSPECTION
# =============================================================================

def get_output_node(network: KANNetwork) -> KANNode:
    return network.nodes[network.layers[-1][0]]


def for_each_node(network: KANNetwork, ignore_input_layer: bool,
                  visitor: Callable[[KANNode], object]) -> None:
    """Visit nodes layer by layer (read-only traversal)."""
    start = 1 if ignore_input_layer else 0
    for layer_idx in range(start, network.num_layers):
        for node_index in network.layers[layer_idx]:
            visitor(network.nodes[node_index])

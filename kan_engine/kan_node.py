import numpy as np
from typing import List, Optional


class KANNode:
    """
    Node of a KAN: sums the outputs of its input edges plus an optional bias.

    Input and output edges are stored as indices into the network's edge
    arena; forward() and backward() take that network as `graph`.

    Args:
        id: Node id
        use_bias: Initialise a small random bias (otherwise bias stays 0)
        rng: numpy Generator used for the bias
    """

    def __init__(self, id: str, use_bias: bool = False,
                 rng: Optional[np.random.Generator] = None):
        self.id = id
        self.input_edges: List[int] = []
        self.output_edges: List[int] = []
        self.output = 0.0
        # dLoss/d output
        self.output_der = 0.0
        self.bias = 0.0
        if use_bias:
            rng = rng if rng is not None else np.random.default_rng()
            self.bias = (float(rng.random()) - 0.5) * 0.1

    def forward(self, graph) -> float:
        """output = bias + sum of phi_e(source output) over input edges."""
        self.output = self.bias
        for e in self.input_edges:
            edge = graph.edges[e]
            self.output += edge.forward(graph.nodes[edge.source].output)
        return self.output

    def backward(self, graph) -> None:
        """Push output_der through each input edge into its accumulator and source node."""
        for e in self.input_edges:
            edge = graph.edges[e]
            input_grad = self.output_der * edge.learnable_function.derivative(edge.last_input)
            edge.accumulate_gradients(self.output_der)
            graph.nodes[edge.source].output_der += input_grad

    def __repr__(self):
        return f"KANNode(id={self.id!r}, output={self.output:.4f}, bias={self.bias:.4f})"

import numpy as np
from typing import List, Optional, Tuple

from .learnable_function import LearnableFunction


class KANEdge:
    """
    Edge of a KAN carrying one learnable spline function.

    Source and destination are integer indices into the owning network's
    node arena. Gradients are accumulated per example and averaged on update.

    Args:
        id: Edge id, "<source_id>-<dest_id>"
        source: Index of the source node
        dest: Index of the destination node
        grid_size, degree, input_range, rng: Passed to LearnableFunction
    """

    def __init__(self, id: str, source: int, dest: int, grid_size: int = 5, degree: int = 3,
                 input_range: Tuple[float, float] = (-1.0, 1.0),
                 rng: Optional[np.random.Generator] = None):
        self.id = id
        self.source = source
        self.dest = dest
        self.learnable_function = LearnableFunction(id, grid_size, degree, input_range, rng)

        # Cached input value for backprop
        self.last_input = 0.0
        self.acc_gradients: List[float] = [0.0] * self.learnable_function.num_parameters
        self.num_accumulated_grads = 0

    def forward(self, input: float) -> float:
        self.last_input = input
        return self.learnable_function.evaluate(input)

    def accumulate_gradients(self, output_gradient: float) -> None:
        """Add output_gradient * d phi(last_input) / d cp into the accumulator."""
        gradients = self.learnable_function.get_control_point_gradients(self.last_input)
        for i, g in enumerate(gradients):
            self.acc_gradients[i] += output_gradient * g
        self.num_accumulated_grads += 1

    def update_parameters(self, learning_rate: float) -> None:
        """Apply the averaged accumulated gradient and reset the accumulator."""
        if self.num_accumulated_grads == 0:
            return

        avg_gradients = [g / self.num_accumulated_grads for g in self.acc_gradients]
        self.learnable_function.update_parameters(avg_gradients, learning_rate)

        self.acc_gradients = [0.0] * len(self.acc_gradients)
        self.num_accumulated_grads = 0

    def __repr__(self):
        return f"KANEdge(id={self.id!r}, source={self.source}, dest={self.dest})"

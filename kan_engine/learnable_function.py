import numpy as np
from typing import List, Optional, Sequence, Tuple

from kan_utils.spline_utils import clamp, make_knot_vector, find_span, de_boor, basis_functions
from .errors import ConfigurationError

# Step of the central difference used by derivative()
DERIVATIVE_STEP = 1e-6


class LearnableFunction:
    """
    A learnable univariate function phi(x) represented as a clamped B-spline.

    The spline has grid_size + 1 control points over a fixed input range.
    Inputs outside the range are clamped, so phi is flat beyond its edges.

    Args:
        id: Identifier (usually the owning edge's id)
        grid_size: Number of spline intervals
        degree: Spline degree p, capped at grid_size - 1
        input_range: (min, max) of the spline domain
        rng: numpy Generator used to initialise control points
    """

    def __init__(self, id: str, grid_size: int = 5, degree: int = 3,
                 input_range: Tuple[float, float] = (-1.0, 1.0),
                 rng: Optional[np.random.Generator] = None):
        if grid_size < 1:
            raise ConfigurationError(f"grid_size must be >= 1, got {grid_size}")
        if degree < 0:
            raise ConfigurationError(f"degree must be >= 0, got {degree}")
        if not input_range[0] < input_range[1]:
            raise ConfigurationError(f"input_range must satisfy min < max, got {input_range}")

        self.id = id
        self.grid_size = grid_size
        self.degree = min(degree, grid_size - 1)
        self.input_range = (float(input_range[0]), float(input_range[1]))
        self.knot_vector = make_knot_vector(grid_size, self.degree, self.input_range)

        rng = rng if rng is not None else np.random.default_rng()
        self.control_points: List[float] = [
            (float(rng.random()) - 0.5) * 0.3 for _ in range(grid_size + 1)
        ]

    @property
    def num_parameters(self) -> int:
        return len(self.control_points)

    def _span(self, x: float) -> int:
        return find_span(x, self.degree, self.knot_vector, len(self.control_points) - 1)

    def evaluate(self, x: float) -> float:
        """phi(x) via de Boor's algorithm on the clamped input."""
        x = clamp(x, self.input_range)
        span = self._span(x)
        return de_boor(x, span, self.degree, self.knot_vector, self.control_points)

    def derivative(self, x: float) -> float:
        """
        dphi/dx by central finite difference.

        Both probe points are clamped into the input range. Returns 0 when
        the clamped interval collapses (x at or past a range edge).
        """
        lo = clamp(x - DERIVATIVE_STEP, self.input_range)
        hi = clamp(x + DERIVATIVE_STEP, self.input_range)
        if hi <= lo:
            return 0.0
        return (self.evaluate(hi) - self.evaluate(lo)) / (hi - lo)

    def get_control_point_gradients(self, x: float) -> List[float]:
        """
        d phi(x) / d control_points.

        Zero except for the p + 1 control points of the active span, which
        hold the basis function values at x.
        """
        x = clamp(x, self.input_range)
        span = self._span(x)
        basis = basis_functions(x, span, self.degree, self.knot_vector)

        gradients = [0.0] * len(self.control_points)
        first = span - self.degree
        for j, value in enumerate(basis):
            gradients[first + j] = value
        return gradients

    def update_parameters(self, gradients: Sequence[float], learning_rate: float) -> None:
        """Gradient step: cp[i] -= lr * gradients[i] for each index present."""
        for i in range(min(len(self.control_points), len(gradients))):
            self.control_points[i] -= learning_rate * gradients[i]

    def sample(self, num_points: int = 50) -> Tuple[np.ndarray, np.ndarray]:
        """Sample the curve over its input range (for plotting)."""
        xs = np.linspace(self.input_range[0], self.input_range[1], num_points)
        ys = np.array([self.evaluate(float(x)) for x in xs])
        return xs, ys

    def __repr__(self):
        return (f"LearnableFunction(id={self.id!r}, grid_size={self.grid_size}, "
                f"degree={self.degree}, input_range={self.input_range})")

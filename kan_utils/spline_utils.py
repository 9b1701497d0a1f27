from typing import List, Sequence, Tuple


def clamp(x: float, input_range: Tuple[float, float]) -> float:
    """Clamp x into [min, max]."""
    return max(input_range[0], min(input_range[1], x))


def make_knot_vector(grid_size: int, degree: int,
                     input_range: Tuple[float, float]) -> List[float]:
    """
    Build a clamped, uniform knot vector.

    Args:
        grid_size: Number of spline intervals (control points = grid_size + 1)
        degree: Spline degree p (must be < grid_size)
        input_range: (min, max) of the spline domain
    Returns:
        knots: list of length grid_size + p + 2. The first and last p + 1
               entries equal min / max, the grid_size - p interior knots are
               uniformly spaced.
    """
    lo, hi = input_range
    n_interior = grid_size - degree
    step = (hi - lo) / (n_interior + 1)

    knots = [lo] * (degree + 1)
    knots += [lo + (j + 1) * step for j in range(n_interior)]
    knots += [hi] * (degree + 1)
    return knots


def find_span(x: float, degree: int, knots: Sequence[float], n: int) -> int:
    """
    Locate the knot span index k with knots[k] <= x < knots[k + 1].

    Args:
        x: Parameter value (already clamped)
        degree: Spline degree p
        knots: Knot vector
        n: Index of the last control point
    """
    if x >= knots[n + 1]:
        return n
    if x <= knots[degree]:
        return degree

    low = degree
    high = n + 1
    mid = (low + high) // 2
    while x < knots[mid] or x >= knots[mid + 1]:
        if x < knots[mid]:
            high = mid
        else:
            low = mid
        mid = (low + high) // 2
    return mid


def de_boor(x: float, span: int, degree: int, knots: Sequence[float],
            control_points: Sequence[float]) -> float:
    """
    Evaluate a B-spline with de Boor's algorithm.

    Repeated linear blending of the p + 1 control points
    control_points[span - p .. span].
    """
    d = [control_points[j + span - degree] for j in range(degree + 1)]

    for r in range(1, degree + 1):
        for j in range(degree, r - 1, -1):
            left = knots[j + span - degree]
            right = knots[j + 1 + span - r]
            alpha = (x - left) / (right - left)
            d[j] = (1.0 - alpha) * d[j - 1] + alpha * d[j]

    return d[degree]


def basis_functions(x: float, span: int, degree: int,
                    knots: Sequence[float]) -> List[float]:
    """
    Compute the p + 1 non-vanishing basis functions N_{span-p..span, p}(x).

    Triangular recurrence; the returned values sum to one.
    """
    N = [0.0] * (degree + 1)
    left = [0.0] * (degree + 1)
    right = [0.0] * (degree + 1)
    N[0] = 1.0

    for j in range(1, degree + 1):
        left[j] = x - knots[span + 1 - j]
        right[j] = knots[span + j] - x
        saved = 0.0
        for r in range(j):
            temp = N[r] / (right[r + 1] + left[j - r])
            N[r] = saved + right[r + 1] * temp
            saved = left[j - r] * temp
        N[j] = saved

    return N

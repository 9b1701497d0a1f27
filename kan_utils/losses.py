"""
Loss functions for training a KAN.

backward_prop only needs the derivative, a callable (predicted, target) -> float.
Each Loss pairs it with the error value used for reporting.
"""

from typing import Callable, Dict, NamedTuple


class Loss(NamedTuple):
    error: Callable[[float, float], float]
    der: Callable[[float, float], float]


def square_error(output: float, target: float) -> float:
    return 0.5 * (output - target) ** 2


def square_error_der(output: float, target: float) -> float:
    return output - target


SQUARE = Loss(error=square_error, der=square_error_der)

LOSSES: Dict[str, Loss] = {
    'square': SQUARE,
}


def get_loss(name: str) -> Loss:
    """Look up a loss by name."""
    try:
        return LOSSES[name]
    except KeyError:
        raise ValueError(f"Unknown loss {name!r}, expected one of {sorted(LOSSES)}") from None

from .spline_utils import clamp, make_knot_vector, find_span, de_boor, basis_functions
from .losses import Loss, SQUARE, LOSSES, get_loss, square_error, square_error_der

__all__ = [
    'clamp', 'make_knot_vector', 'find_span', 'de_boor', 'basis_functions',
    'Loss', 'SQUARE', 'LOSSES', 'get_loss', 'square_error', 'square_error_der'
]

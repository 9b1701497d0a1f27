"""Exceptions raised by the KAN engine."""


class KANError(Exception):
    """Base class for all engine errors."""


class ConfigurationError(KANError, ValueError):
    """Invalid network or spline configuration (bad shape, input ids, grid)."""


class InputMismatchError(KANError, ValueError):
    """Forward pass called with the wrong number of inputs."""

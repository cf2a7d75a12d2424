"""
errors.py
~~~~~~~~~

Exception types raised by the network core and the dataset loader.
"""


class NetworkError(Exception):
    """Base class for errors raised by :class:`NeuralNetwork`."""


class ShapeError(NetworkError, ValueError):
    """An input, target or weight array does not match the network's shape."""

    def __init__(self, name: str, expected, actual):
        self.name = name
        self.expected = expected
        self.actual = actual
        super().__init__(
            f"{name} must have shape {expected}, got {actual}"
        )


class NetworkReleasedError(NetworkError, RuntimeError):
    """The network was used after its weights were transferred away."""


class DatasetError(Exception):
    """MNIST data is missing or malformed."""

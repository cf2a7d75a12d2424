"""
mnist_benchmark package
~~~~~~~~~~~~~~~~~~~~~~~

Fixed-shape three-layer neural network trained by single-sample
backpropagation, with an MNIST loader and a timing benchmark around it.
"""

from mnist_benchmark.errors import (
    DatasetError,
    NetworkError,
    NetworkReleasedError,
    ShapeError
)
from mnist_benchmark.network import NeuralNetwork, query, sigmoid, train

__version__ = "1.0.0"

__all__ = [
    'NeuralNetwork',
    'query',
    'train',
    'sigmoid',
    'NetworkError',
    'ShapeError',
    'NetworkReleasedError',
    'DatasetError',
]

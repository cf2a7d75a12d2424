"""
network.py
~~~~~~~~~~

Fixed-shape, three-layer feed-forward neural network (input -> hidden ->
output) with sigmoid activations and no biases, trained one sample at a
time by backpropagation.

The shape of a network is fixed when it is constructed. Every call to
:meth:`NeuralNetwork.query` or :meth:`NeuralNetwork.train` checks the
vectors it receives against that shape before doing any arithmetic.

A network owns its weight matrices exclusively: it cannot be copied or
pickled, and ownership can only be handed on with
:meth:`NeuralNetwork.transfer`, which invalidates the original.
"""

import logging
from typing import Optional, Tuple

import numpy as np
from numpy.typing import ArrayLike

from mnist_benchmark.errors import NetworkReleasedError, ShapeError

# Configure module logger
logger = logging.getLogger(__name__)

# Process-wide random source, used when no generator is injected
_default_rng = np.random.default_rng()


def sigmoid(z: np.ndarray) -> np.ndarray:
    """The sigmoid function, ``1 / (1 + exp(-z))``."""
    return 1 / (1 + np.exp(-z))


class NeuralNetwork:
    """
    A three-layer sigmoid network with fixed dimensions.

    ``input_weights[h][i]`` is the weight from input node ``i`` to hidden
    node ``h``; ``output_weights[o][h]`` is the weight from hidden node
    ``h`` to output node ``o``.
    """

    def __init__(
        self,
        num_input_nodes: int,
        num_hidden_nodes: int,
        num_output_nodes: int,
        learning_rate: float,
        rng: Optional[np.random.Generator] = None,
        dtype=np.float32
    ):
        """
        Create a network with randomly initialised weights.

        Args:
            num_input_nodes: Length of every input vector
            num_hidden_nodes: Number of hidden nodes
            num_output_nodes: Length of every output and target vector
            learning_rate: Scale of every weight update. Not validated:
                zero or negative values are accepted.
            rng: Random generator for the initial weights. Defaults to
                the process-wide generator.
            dtype: Floating point type of the weights

        Raises:
            ValueError: If a dimension is not a positive integer
        """
        for name, value in (
            ('num_input_nodes', num_input_nodes),
            ('num_hidden_nodes', num_hidden_nodes),
            ('num_output_nodes', num_output_nodes)
        ):
            if isinstance(value, bool) or not isinstance(value, (int, np.integer)):
                raise ValueError(f"{name} must be an integer, got {value!r}")
            if value < 1:
                raise ValueError(f"{name} must be positive, got {value}")

        if rng is None:
            rng = _default_rng

        self._num_input_nodes = int(num_input_nodes)
        self._num_hidden_nodes = int(num_hidden_nodes)
        self._num_output_nodes = int(num_output_nodes)
        self._dtype = np.dtype(dtype)
        self.learning_rate = learning_rate
        self._released = False

        # Each row is filled independently; one vectorised draw per matrix
        self._input_weights = rng.normal(
            0.0,
            1 / np.sqrt(self._num_hidden_nodes),
            size=(self._num_hidden_nodes, self._num_input_nodes)
        ).astype(self._dtype)
        self._output_weights = rng.normal(
            0.0,
            1 / np.sqrt(self._num_output_nodes),
            size=(self._num_output_nodes, self._num_hidden_nodes)
        ).astype(self._dtype)

        logger.debug(
            f"Created network {self.shape} with learning rate {learning_rate}"
        )

    # ------------------------------------------------------------------
    # Ownership
    # ------------------------------------------------------------------

    def __copy__(self):
        raise TypeError("NeuralNetwork cannot be copied; use transfer()")

    def __deepcopy__(self, memo):
        raise TypeError("NeuralNetwork cannot be copied; use transfer()")

    def __reduce_ex__(self, protocol):
        raise TypeError("NeuralNetwork cannot be pickled")

    def _check_owned(self) -> None:
        if self._released:
            raise NetworkReleasedError(
                "This network's weights were transferred to another instance"
            )

    @property
    def released(self) -> bool:
        """True once :meth:`transfer` has been called on this instance."""
        return self._released

    def transfer(self) -> 'NeuralNetwork':
        """
        Move the weights into a new instance and invalidate this one.

        Returns:
            NeuralNetwork: The new owner of the weight matrices

        Raises:
            NetworkReleasedError: If this instance was already released
        """
        self._check_owned()

        other = object.__new__(type(self))
        other._num_input_nodes = self._num_input_nodes
        other._num_hidden_nodes = self._num_hidden_nodes
        other._num_output_nodes = self._num_output_nodes
        other._dtype = self._dtype
        other.learning_rate = self.learning_rate
        other._released = False
        other._input_weights = self._input_weights
        other._output_weights = self._output_weights

        self._input_weights = None
        self._output_weights = None
        self._released = True

        logger.debug(f"Transferred network {other.shape} to a new owner")
        return other

    # ------------------------------------------------------------------
    # Shape and weights
    # ------------------------------------------------------------------

    @property
    def num_input_nodes(self) -> int:
        return self._num_input_nodes

    @property
    def num_hidden_nodes(self) -> int:
        return self._num_hidden_nodes

    @property
    def num_output_nodes(self) -> int:
        return self._num_output_nodes

    @property
    def shape(self) -> Tuple[int, int, int]:
        """(input, hidden, output) node counts."""
        return (
            self._num_input_nodes,
            self._num_hidden_nodes,
            self._num_output_nodes
        )

    @property
    def input_weights(self) -> np.ndarray:
        """Read-only view of the (hidden, input) weight matrix."""
        self._check_owned()
        view = self._input_weights.view()
        view.flags.writeable = False
        return view

    @property
    def output_weights(self) -> np.ndarray:
        """Read-only view of the (output, hidden) weight matrix."""
        self._check_owned()
        view = self._output_weights.view()
        view.flags.writeable = False
        return view

    def set_weights(self, input_weights: ArrayLike, output_weights: ArrayLike) -> None:
        """
        Overwrite every weight value. The matrix shapes cannot change.

        Raises:
            ShapeError: If either matrix has the wrong shape. Nothing is
                written in that case.
        """
        self._check_owned()

        new_input = np.asarray(input_weights, dtype=self._dtype)
        new_output = np.asarray(output_weights, dtype=self._dtype)
        if new_input.shape != self._input_weights.shape:
            raise ShapeError(
                'input_weights', self._input_weights.shape, new_input.shape
            )
        if new_output.shape != self._output_weights.shape:
            raise ShapeError(
                'output_weights', self._output_weights.shape, new_output.shape
            )

        self._input_weights[...] = new_input
        self._output_weights[...] = new_output

    def _as_vector(self, name: str, values: ArrayLike, length: int) -> np.ndarray:
        vector = np.asarray(values, dtype=self._dtype)
        if vector.shape != (length,):
            raise ShapeError(name, (length,), vector.shape)
        return vector

    # ------------------------------------------------------------------
    # Inference and training
    # ------------------------------------------------------------------

    def _forward(self, inputs: np.ndarray) -> Tuple[np.ndarray, np.ndarray]:
        hidden = sigmoid(self._input_weights @ inputs)
        output = sigmoid(self._output_weights @ hidden)
        return hidden, output

    def query(self, inputs: ArrayLike) -> np.ndarray:
        """
        Run a forward pass without changing the network.

        Args:
            inputs: Vector of length ``num_input_nodes``

        Returns:
            np.ndarray: Vector of length ``num_output_nodes``. Values lie
            in (0, 1) for moderate input; in single precision they
            saturate to exactly 0 or 1 once a raw sum exceeds about 17
            in magnitude.

        Raises:
            ShapeError: If ``inputs`` has the wrong shape
        """
        self._check_owned()
        inputs = self._as_vector('input', inputs, self._num_input_nodes)
        _, output = self._forward(inputs)
        return output

    def train(self, inputs: ArrayLike, targets: ArrayLike) -> None:
        """
        Update the weights from a single (input, target) sample.

        The hidden error is computed from the output weights as they were
        before this call; output weights are then updated, then input
        weights. NaN and Inf values are propagated, not checked.

        Raises:
            ShapeError: If ``inputs`` or ``targets`` has the wrong shape.
                The weights are left untouched in that case.
        """
        self._check_owned()
        inputs = self._as_vector('input', inputs, self._num_input_nodes)
        targets = self._as_vector('target', targets, self._num_output_nodes)

        hidden, output = self._forward(inputs)

        output_errors = targets - output
        hidden_errors = self._output_weights.T @ output_errors

        self._output_weights += self.learning_rate * np.outer(
            output_errors * output * (1 - output), hidden
        )
        self._input_weights += self.learning_rate * np.outer(
            hidden_errors * hidden * (1 - hidden), inputs
        )

    def __repr__(self) -> str:
        if self._released:
            return 'NeuralNetwork(<released>)'
        return (
            f"NeuralNetwork({self._num_input_nodes}, {self._num_hidden_nodes}, "
            f"{self._num_output_nodes}, learning_rate={self.learning_rate})"
        )


def query(network: NeuralNetwork, inputs: ArrayLike) -> np.ndarray:
    """Forward pass; see :meth:`NeuralNetwork.query`."""
    return network.query(inputs)


def train(network: NeuralNetwork, inputs: ArrayLike, targets: ArrayLike) -> None:
    """Single-sample training step; see :meth:`NeuralNetwork.train`."""
    network.train(inputs, targets)

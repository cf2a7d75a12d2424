"""
benchmark.py
~~~~~~~~~~~~

Benchmark harness: trains a network one sample at a time, times every
epoch and measures test accuracy after each one.

Classification (arg-max over the network's output) happens here; the
network itself only produces output vectors.
"""

import time
import logging
from dataclasses import dataclass, field
from typing import Any, Callable, Dict, List, Optional, Sequence, Tuple

import numpy as np

from mnist_benchmark.network import NeuralNetwork

# Configure module logger
logger = logging.getLogger(__name__)

TrainingSample = Tuple[np.ndarray, np.ndarray]
TestSample = Tuple[np.ndarray, int]


@dataclass
class EpochResult:
    """Timing and accuracy for a single epoch."""

    epoch: int
    total_epochs: int
    train_seconds: float
    eval_seconds: float
    correct: int
    total: int

    @property
    def accuracy(self) -> float:
        return self.correct / self.total if self.total else 0.0


@dataclass
class BenchmarkResult:
    """Everything measured during :func:`run_benchmark`."""

    architecture: Tuple[int, int, int]
    learning_rate: float
    num_training_samples: int
    epochs: List[EpochResult] = field(default_factory=list)

    @property
    def total_train_seconds(self) -> float:
        return sum(epoch.train_seconds for epoch in self.epochs)

    @property
    def total_eval_seconds(self) -> float:
        return sum(epoch.eval_seconds for epoch in self.epochs)

    @property
    def final_accuracy(self) -> float:
        return self.epochs[-1].accuracy if self.epochs else 0.0

    @property
    def samples_per_second(self) -> float:
        """Training throughput over all epochs."""
        seconds = self.total_train_seconds
        if seconds <= 0:
            return 0.0
        return self.num_training_samples * len(self.epochs) / seconds


def evaluate(network: NeuralNetwork, test_data: Sequence[TestSample]) -> int:
    """
    Return the number of test inputs for which the network's most active
    output node matches the label.
    """
    return sum(
        int(np.argmax(network.query(x)) == y) for x, y in test_data
    )


def mean_squared_error(
    network: NeuralNetwork,
    samples: Sequence[TrainingSample]
) -> float:
    """Mean squared error between outputs and targets over ``samples``."""
    if not samples:
        return 0.0
    errors = [
        np.mean(np.square(np.asarray(y) - network.query(x)))
        for x, y in samples
    ]
    return float(np.mean(errors))


def run_benchmark(
    network: NeuralNetwork,
    training_data: Sequence[TrainingSample],
    test_data: Sequence[TestSample],
    epochs: int,
    shuffle_rng: Optional[np.random.Generator] = None,
    callback: Optional[Callable[[Dict[str, Any]], None]] = None
) -> BenchmarkResult:
    """
    Train ``network`` for ``epochs`` passes over ``training_data``.

    Each sample is presented once per epoch and the weights are updated
    after every sample. After each epoch the network is evaluated on
    ``test_data``.

    Args:
        network: The network to train (mutated in place)
        training_data: (input, target) pairs
        test_data: (input, label) pairs
        epochs: Number of passes over the training data
        shuffle_rng: If given, the training order is shuffled each epoch
        callback: Called after each epoch with a dict holding ``epoch``,
            ``total_epochs``, ``accuracy``, ``elapsed_time``, ``correct``
            and ``total``

    Returns:
        BenchmarkResult: Per-epoch timings and accuracies

    Raises:
        ValueError: If ``epochs`` is not a positive integer
    """
    if isinstance(epochs, bool) or not isinstance(epochs, int) or epochs < 1:
        raise ValueError(f"epochs must be a positive integer, got {epochs!r}")

    result = BenchmarkResult(
        architecture=network.shape,
        learning_rate=network.learning_rate,
        num_training_samples=len(training_data)
    )

    logger.info(
        f"Benchmarking network {network.shape}: {epochs} epoch(s), "
        f"{len(training_data)} training samples, {len(test_data)} test samples, "
        f"learning rate {network.learning_rate}"
    )

    order = np.arange(len(training_data))
    for epoch in range(1, epochs + 1):
        if shuffle_rng is not None:
            shuffle_rng.shuffle(order)

        start = time.perf_counter()
        for index in order:
            inputs, targets = training_data[index]
            network.train(inputs, targets)
        train_seconds = time.perf_counter() - start

        start = time.perf_counter()
        correct = evaluate(network, test_data)
        eval_seconds = time.perf_counter() - start

        epoch_result = EpochResult(
            epoch=epoch,
            total_epochs=epochs,
            train_seconds=train_seconds,
            eval_seconds=eval_seconds,
            correct=correct,
            total=len(test_data)
        )
        result.epochs.append(epoch_result)

        logger.info(
            f"Epoch {epoch}/{epochs}: trained in {train_seconds:.3f}s, "
            f"accuracy {correct}/{len(test_data)} ({epoch_result.accuracy:.2%})"
        )

        if callback is not None:
            callback({
                'epoch': epoch,
                'total_epochs': epochs,
                'accuracy': epoch_result.accuracy,
                'elapsed_time': train_seconds,
                'correct': correct,
                'total': len(test_data)
            })

    logger.info(
        f"Benchmark finished: {result.total_train_seconds:.3f}s training, "
        f"final accuracy {result.final_accuracy:.2%}"
    )
    return result


def format_report(result: BenchmarkResult) -> str:
    """Render a benchmark result as a plain-text report."""
    num_input, num_hidden, num_output = result.architecture
    lines = [
        "=" * 60,
        "MNIST Benchmark",
        "=" * 60,
        f"Architecture:     {num_input}-{num_hidden}-{num_output}",
        f"Learning rate:    {result.learning_rate}",
        f"Training samples: {result.num_training_samples}",
        "",
        f"{'Epoch':>5}  {'Train (s)':>10}  {'Eval (s)':>9}  {'Correct':>13}  {'Accuracy':>8}",
    ]
    for epoch in result.epochs:
        lines.append(
            f"{epoch.epoch:>5}  {epoch.train_seconds:>10.3f}  "
            f"{epoch.eval_seconds:>9.3f}  "
            f"{f'{epoch.correct}/{epoch.total}':>13}  {epoch.accuracy:>8.2%}"
        )
    lines.extend([
        "",
        f"Total training time: {result.total_train_seconds:.3f}s",
        f"Throughput:          {result.samples_per_second:.1f} samples/s",
        f"Final accuracy:      {result.final_accuracy:.2%}",
        "=" * 60,
    ])
    return "\n".join(lines)

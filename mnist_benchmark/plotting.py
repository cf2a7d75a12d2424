"""
plotting.py
~~~~~~~~~~~

Render a benchmark result as a PNG figure.
"""

import os
import logging

# Use non-GUI backend for matplotlib (works without a display)
import matplotlib
matplotlib.use('Agg')
import matplotlib.pyplot as plt

from mnist_benchmark.benchmark import BenchmarkResult

# Configure module logger
logger = logging.getLogger(__name__)


def plot_benchmark(result: BenchmarkResult, output_path: str) -> str:
    """
    Plot accuracy and training time per epoch.

    Args:
        result: The benchmark result to plot
        output_path: Where to write the PNG file

    Returns:
        str: ``output_path``
    """
    epochs = [epoch.epoch for epoch in result.epochs]
    accuracies = [epoch.accuracy * 100 for epoch in result.epochs]
    seconds = [epoch.train_seconds for epoch in result.epochs]

    fig, (acc_ax, time_ax) = plt.subplots(1, 2, figsize=(10, 4))
    num_input, num_hidden, num_output = result.architecture
    fig.suptitle(
        f"Network {num_input}-{num_hidden}-{num_output}, "
        f"learning rate {result.learning_rate}"
    )

    acc_ax.plot(epochs, accuracies, marker='o')
    acc_ax.set_xlabel('Epoch')
    acc_ax.set_ylabel('Test accuracy (%)')
    acc_ax.set_ylim(0, 100)
    acc_ax.grid(True, alpha=0.3)

    time_ax.bar(epochs, seconds)
    time_ax.set_xlabel('Epoch')
    time_ax.set_ylabel('Training time (s)')
    time_ax.grid(True, axis='y', alpha=0.3)

    directory = os.path.dirname(output_path)
    if directory and not os.path.exists(directory):
        os.makedirs(directory)

    try:
        fig.savefig(output_path, format='png', bbox_inches='tight')
    finally:
        plt.close(fig)

    logger.info(f"Saved benchmark plot to {output_path}")
    return output_path

"""
cli.py
~~~~~~

Command line entry point: load MNIST, train a 784-N-10 network one sample
at a time and report per-epoch timing and accuracy.

Every option can also be set through an environment variable (see
:mod:`mnist_benchmark.config`); options given on the command line win.
"""

import os
import sys
import argparse
import logging
from typing import List, Optional

import numpy as np

from mnist_benchmark import mnist_loader
from mnist_benchmark.benchmark import format_report, run_benchmark
from mnist_benchmark.config import (
    NUM_INPUT_NODES,
    NUM_OUTPUT_NODES,
    BenchmarkConfig
)
from mnist_benchmark.errors import DatasetError
from mnist_benchmark.network import NeuralNetwork

logger = logging.getLogger(__name__)


def configure_logging(level: Optional[str] = None) -> None:
    """
    Set up logging for a command line run.

    The level comes from ``level`` or the ``LOG_LEVEL`` environment
    variable; unknown names fall back to INFO.
    """
    log_level_str = (level or os.getenv('LOG_LEVEL', 'INFO')).upper()
    log_level = getattr(logging, log_level_str, logging.INFO)
    if not isinstance(log_level, int):
        log_level = logging.INFO

    logging.basicConfig(
        level=log_level,
        format='%(asctime)s - %(name)s - %(levelname)s - %(message)s'
    )

    # matplotlib logs font cache details at DEBUG
    logging.getLogger('matplotlib').setLevel(logging.WARNING)


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog='mnist-benchmark',
        description='Train a three-layer network on MNIST and time it.'
    )
    parser.add_argument('--data-dir', type=str, default=None,
                        help='Directory with mnist.npz or the raw IDX files')
    parser.add_argument('--hidden-nodes', type=int, default=None,
                        help='Number of hidden nodes')
    parser.add_argument('--learning-rate', type=float, default=None,
                        help='Learning rate for every weight update')
    parser.add_argument('--epochs', type=int, default=None,
                        help='Passes over the training data')
    parser.add_argument('--limit-train', type=int, default=None,
                        help='Use only the first N training samples')
    parser.add_argument('--limit-test', type=int, default=None,
                        help='Use only the first N test samples')
    parser.add_argument('--seed', type=int, default=None,
                        help='Seed for weight initialisation and shuffling')
    parser.add_argument('--plot', dest='plot_path', type=str, default=None,
                        help='Write a PNG summary to this path')
    parser.add_argument('--log-level', type=str, default=None,
                        help='Logging level (DEBUG, INFO, WARNING, ...)')
    return parser


def load_config(args: argparse.Namespace) -> BenchmarkConfig:
    """Environment config with command line overrides applied."""
    config = BenchmarkConfig.from_env()
    for name in (
        'data_dir', 'hidden_nodes', 'learning_rate', 'epochs',
        'limit_train', 'limit_test', 'seed', 'plot_path', 'log_level'
    ):
        value = getattr(args, name)
        if value is not None:
            setattr(config, name, value)
    config.validate()
    return config


def main(argv: Optional[List[str]] = None) -> int:
    """Run the benchmark. Returns the process exit code."""
    args = build_parser().parse_args(argv)

    try:
        config = load_config(args)
    except ValueError as e:
        configure_logging(args.log_level)
        logger.error(f"Invalid configuration: {e}")
        return 1

    configure_logging(config.log_level)

    try:
        training_data, test_data = mnist_loader.load_data_wrapper(
            config.data_dir,
            limit_train=config.limit_train,
            limit_test=config.limit_test
        )
    except DatasetError as e:
        logger.error(f"Could not load MNIST data: {e}")
        return 1

    rng = np.random.default_rng(config.seed) if config.seed is not None else None
    network = NeuralNetwork(
        NUM_INPUT_NODES,
        config.hidden_nodes,
        NUM_OUTPUT_NODES,
        config.learning_rate,
        rng=rng
    )

    result = run_benchmark(
        network,
        training_data,
        test_data,
        config.epochs,
        shuffle_rng=rng
    )
    print(format_report(result))

    if config.plot_path:
        # Imported lazily so runs without --plot never load matplotlib
        from mnist_benchmark.plotting import plot_benchmark
        try:
            plot_benchmark(result, config.plot_path)
        except OSError as e:
            logger.error(f"Could not write plot to {config.plot_path}: {e}")
            return 1

    return 0


if __name__ == '__main__':
    sys.exit(main())

"""
config.py
~~~~~~~~~

Benchmark configuration, read from environment variables and overridden
by command line options.
"""

import os
from dataclasses import dataclass
from typing import Callable, Mapping, Optional

# Fixed by the MNIST data: 28x28 pixels in, 10 digits out
NUM_INPUT_NODES = 784
NUM_OUTPUT_NODES = 10

ENV_VARS = {
    'data_dir': 'MNIST_DATA_DIR',
    'hidden_nodes': 'MNIST_HIDDEN_NODES',
    'learning_rate': 'MNIST_LEARNING_RATE',
    'epochs': 'MNIST_EPOCHS',
    'limit_train': 'MNIST_LIMIT_TRAIN',
    'limit_test': 'MNIST_LIMIT_TEST',
    'seed': 'MNIST_SEED',
    'plot_path': 'MNIST_PLOT_PATH',
    'log_level': 'LOG_LEVEL',
}


@dataclass
class BenchmarkConfig:
    """Settings for a benchmark run."""

    data_dir: str = 'data'
    hidden_nodes: int = 200
    learning_rate: float = 0.1
    epochs: int = 5
    limit_train: Optional[int] = None
    limit_test: Optional[int] = None
    seed: Optional[int] = None
    plot_path: Optional[str] = None
    log_level: str = 'INFO'

    @classmethod
    def from_env(cls, environ: Mapping[str, str] = os.environ) -> 'BenchmarkConfig':
        """
        Build a config from environment variables, using defaults for
        anything unset.

        Raises:
            ValueError: If a numeric variable cannot be parsed
        """
        def read(field_name: str, convert: Callable):
            name = ENV_VARS[field_name]
            raw = environ.get(name)
            if raw is None or raw == '':
                return getattr(cls, field_name)
            try:
                return convert(raw)
            except ValueError:
                raise ValueError(f"Invalid value for {name}: {raw!r}") from None

        return cls(
            data_dir=read('data_dir', str),
            hidden_nodes=read('hidden_nodes', int),
            learning_rate=read('learning_rate', float),
            epochs=read('epochs', int),
            limit_train=read('limit_train', int),
            limit_test=read('limit_test', int),
            seed=read('seed', int),
            plot_path=read('plot_path', str),
            log_level=read('log_level', str).upper()
        )

    def validate(self) -> None:
        """
        Check the settings. The learning rate is passed through unchecked.

        Raises:
            ValueError: If a count is out of range
        """
        if self.hidden_nodes < 1:
            raise ValueError(f"hidden_nodes must be positive, got {self.hidden_nodes}")
        if self.epochs < 1:
            raise ValueError(f"epochs must be positive, got {self.epochs}")
        for name in ('limit_train', 'limit_test'):
            value = getattr(self, name)
            if value is not None and value < 0:
                raise ValueError(f"{name} must not be negative, got {value}")

"""
test_config.py
~~~~~~~~~~~~~~

Unit tests for benchmark configuration.
"""

import os
import sys

import pytest

# Add project root to path
sys.path.insert(0, os.path.join(os.path.dirname(__file__), '..'))

from mnist_benchmark.config import BenchmarkConfig


@pytest.mark.unit
class TestBenchmarkConfig:
    """Test reading and validating settings."""

    def test_defaults(self):
        config = BenchmarkConfig.from_env({})

        assert config.data_dir == 'data'
        assert config.hidden_nodes == 200
        assert config.learning_rate == 0.1
        assert config.epochs == 5
        assert config.limit_train is None
        assert config.seed is None
        assert config.log_level == 'INFO'

    def test_from_env(self):
        config = BenchmarkConfig.from_env({
            'MNIST_DATA_DIR': '/tmp/mnist',
            'MNIST_HIDDEN_NODES': '50',
            'MNIST_LEARNING_RATE': '0.25',
            'MNIST_EPOCHS': '2',
            'MNIST_LIMIT_TRAIN': '1000',
            'MNIST_LIMIT_TEST': '100',
            'MNIST_SEED': '7',
            'MNIST_PLOT_PATH': 'out.png',
            'LOG_LEVEL': 'debug',
        })

        assert config.data_dir == '/tmp/mnist'
        assert config.hidden_nodes == 50
        assert config.learning_rate == 0.25
        assert config.epochs == 2
        assert config.limit_train == 1000
        assert config.limit_test == 100
        assert config.seed == 7
        assert config.plot_path == 'out.png'
        assert config.log_level == 'DEBUG'

    def test_empty_values_use_defaults(self):
        config = BenchmarkConfig.from_env({'MNIST_EPOCHS': ''})
        assert config.epochs == 5

    def test_invalid_number_names_variable(self):
        with pytest.raises(ValueError) as exc_info:
            BenchmarkConfig.from_env({'MNIST_HIDDEN_NODES': 'lots'})
        assert 'MNIST_HIDDEN_NODES' in str(exc_info.value)

    def test_reads_process_environment(self, monkeypatch):
        monkeypatch.setenv('MNIST_EPOCHS', '9')
        assert BenchmarkConfig.from_env(os.environ).epochs == 9

    @pytest.mark.parametrize('changes', [
        {'hidden_nodes': 0},
        {'epochs': 0},
        {'limit_train': -1},
        {'limit_test': -5},
    ])
    def test_validate_rejects(self, changes):
        config = BenchmarkConfig(**changes)
        with pytest.raises(ValueError):
            config.validate()

    def test_validate_allows_any_learning_rate(self):
        BenchmarkConfig(learning_rate=-0.5).validate()
        BenchmarkConfig(learning_rate=0.0, limit_train=0).validate()

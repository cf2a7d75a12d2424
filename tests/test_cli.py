"""
test_cli.py
~~~~~~~~~~~

Integration tests for the command line entry point.
"""

import logging
import os
import sys

import numpy as np
import pytest

# Add project root to path
sys.path.insert(0, os.path.join(os.path.dirname(__file__), '..'))

from mnist_benchmark import cli


@pytest.fixture
def data_dir(tmp_path):
    """Directory with a tiny mnist.npz."""
    rng = np.random.default_rng(11)
    np.savez_compressed(
        tmp_path / 'mnist.npz',
        train_images=rng.integers(0, 256, size=(30, 784), dtype=np.uint8),
        train_labels=rng.integers(0, 10, size=30, dtype=np.uint8),
        test_images=rng.integers(0, 256, size=(10, 784), dtype=np.uint8),
        test_labels=rng.integers(0, 10, size=10, dtype=np.uint8)
    )
    return str(tmp_path)


@pytest.fixture(autouse=True)
def clean_env(monkeypatch):
    """Keep MNIST_* variables from the outer environment out of the tests."""
    for name in list(os.environ):
        if name.startswith('MNIST_'):
            monkeypatch.delenv(name)


@pytest.mark.integration
class TestMain:
    """Test full benchmark runs from the command line."""

    def test_runs_and_prints_report(self, data_dir, capsys):
        exit_code = cli.main([
            '--data-dir', data_dir,
            '--hidden-nodes', '16',
            '--epochs', '2',
            '--seed', '3',
        ])

        assert exit_code == 0
        out = capsys.readouterr().out
        assert '784-16-10' in out
        assert 'Final accuracy' in out

    def test_limits_and_plot(self, data_dir, tmp_path, capsys):
        plot_path = str(tmp_path / 'plot.png')

        exit_code = cli.main([
            '--data-dir', data_dir,
            '--hidden-nodes', '8',
            '--epochs', '1',
            '--limit-train', '5',
            '--limit-test', '3',
            '--plot', plot_path,
        ])

        assert exit_code == 0
        assert 'Training samples: 5' in capsys.readouterr().out
        assert os.path.exists(plot_path)

    def test_environment_config(self, data_dir, monkeypatch, capsys):
        monkeypatch.setenv('MNIST_DATA_DIR', data_dir)
        monkeypatch.setenv('MNIST_HIDDEN_NODES', '12')
        monkeypatch.setenv('MNIST_EPOCHS', '1')

        assert cli.main([]) == 0
        assert '784-12-10' in capsys.readouterr().out

    def test_command_line_overrides_environment(self, data_dir, monkeypatch, capsys):
        monkeypatch.setenv('MNIST_HIDDEN_NODES', '12')

        assert cli.main(['--data-dir', data_dir, '--hidden-nodes', '6', '--epochs', '1']) == 0
        assert '784-6-10' in capsys.readouterr().out

    def test_missing_data(self, tmp_path):
        assert cli.main(['--data-dir', str(tmp_path / 'empty')]) == 1

    def test_truncated_archive(self, data_dir):
        """Test that a half-written mnist.npz ends the run with exit code 1."""
        path = os.path.join(data_dir, 'mnist.npz')
        with open(path, 'rb') as f:
            content = f.read()
        with open(path, 'wb') as f:
            f.write(content[:len(content) // 2])

        assert cli.main(['--data-dir', data_dir, '--epochs', '1']) == 1

    def test_unwritable_plot_path(self, data_dir, tmp_path, capsys):
        """Test that a plot write failure is reported with exit code 1."""
        blocker = tmp_path / 'not_a_dir'
        blocker.write_text('')
        plot_path = str(blocker / 'plot.png')

        exit_code = cli.main([
            '--data-dir', data_dir,
            '--hidden-nodes', '4',
            '--epochs', '1',
            '--limit-train', '2',
            '--limit-test', '2',
            '--plot', plot_path,
        ])

        assert exit_code == 1
        assert 'Final accuracy' in capsys.readouterr().out

    def test_log_level_from_config(self, data_dir, monkeypatch):
        """Test that logging is configured from the resolved config."""
        levels = []
        monkeypatch.setattr(cli, 'configure_logging', levels.append)
        monkeypatch.setenv('LOG_LEVEL', 'warning')
        args = ['--data-dir', data_dir, '--hidden-nodes', '4', '--epochs', '1',
                '--limit-train', '2', '--limit-test', '2']

        assert cli.main(args) == 0
        assert cli.main(args + ['--log-level', 'ERROR']) == 0

        assert levels == ['WARNING', 'ERROR']

    def test_invalid_config(self, data_dir):
        assert cli.main(['--data-dir', data_dir, '--epochs', '0']) == 1

    def test_invalid_environment_value(self, monkeypatch):
        monkeypatch.setenv('MNIST_EPOCHS', 'many')
        assert cli.main([]) == 1


@pytest.mark.unit
class TestConfigureLogging:
    """Test log level selection."""

    def test_unknown_level_falls_back_to_info(self, monkeypatch):
        calls = []
        monkeypatch.setattr(logging, 'basicConfig', lambda **kwargs: calls.append(kwargs))

        cli.configure_logging('NOT_A_LEVEL')

        assert calls[0]['level'] == logging.INFO

    def test_level_from_environment(self, monkeypatch):
        calls = []
        monkeypatch.setattr(logging, 'basicConfig', lambda **kwargs: calls.append(kwargs))
        monkeypatch.setenv('LOG_LEVEL', 'warning')

        cli.configure_logging()

        assert calls[0]['level'] == logging.WARNING

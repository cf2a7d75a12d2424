"""
mnist_loader.py
~~~~~~~~~~~~~~~

Load the MNIST handwritten digit data and encode it for the network.

Two on-disk formats are supported:

- the four raw IDX files distributed with MNIST (optionally gzipped)
- a compressed ``mnist.npz`` archive, as written by
  ``scripts/convert_mnist_to_npz.py``

Images are encoded as 784-element vectors scaled into [0.01, 1.0] and
labels as 10-element target vectors holding 0.01 everywhere except 0.99
at the label's position, which keeps every target inside the sigmoid's
output range.
"""

import gzip
import os
import struct
import zipfile
import zlib
import logging
from typing import List, Optional, Tuple

import numpy as np

from mnist_benchmark.errors import DatasetError

# Configure module logger
logger = logging.getLogger(__name__)

UNSIGNED_BYTE = 0x08

NUM_PIXELS = 28 * 28
NUM_CLASSES = 10

IDX_FILES = {
    'train_images': 'train-images-idx3-ubyte',
    'train_labels': 'train-labels-idx1-ubyte',
    'test_images': 't10k-images-idx3-ubyte',
    'test_labels': 't10k-labels-idx1-ubyte'
}

NPZ_FILENAME = 'mnist.npz'
NPZ_KEYS = ('train_images', 'train_labels', 'test_images', 'test_labels')

Dataset = Tuple[np.ndarray, np.ndarray, np.ndarray, np.ndarray]


def _open(path: str):
    if path.endswith('.gz'):
        return gzip.open(path, 'rb')
    return open(path, 'rb')


def read_idx(path: str) -> np.ndarray:
    """
    Read an IDX file into a numpy array.

    Only unsigned byte payloads (type code 0x08) are supported, which
    covers both MNIST image and label files.

    Args:
        path: Path to the file; a ``.gz`` suffix means gzip compressed

    Returns:
        np.ndarray: uint8 array with the dimensions given in the header

    Raises:
        DatasetError: If the file is missing, the header is invalid or
            the payload is shorter than the header says
    """
    try:
        with _open(path) as f:
            header = f.read(4)
            if len(header) != 4 or header[0] != 0 or header[1] != 0:
                raise DatasetError(f"{path}: not an IDX file")

            type_code, num_dims = header[2], header[3]
            if type_code != UNSIGNED_BYTE:
                raise DatasetError(
                    f"{path}: unsupported IDX type code 0x{type_code:02x}"
                )

            dims_bytes = f.read(4 * num_dims)
            if len(dims_bytes) != 4 * num_dims:
                raise DatasetError(f"{path}: truncated IDX header")
            dims = struct.unpack(f'>{num_dims}I', dims_bytes)

            expected = int(np.prod(dims, dtype=np.int64))
            payload = f.read()
    except OSError as e:
        raise DatasetError(f"Could not read {path}: {e}") from e

    if len(payload) < expected:
        raise DatasetError(
            f"{path}: expected {expected} bytes of data, found {len(payload)}"
        )

    return np.frombuffer(payload[:expected], dtype=np.uint8).reshape(dims)


def _find_idx_file(data_dir: str, name: str) -> Optional[str]:
    for candidate in (name, name + '.gz'):
        path = os.path.join(data_dir, candidate)
        if os.path.exists(path):
            return path
    return None


def _flatten_images(images: np.ndarray) -> np.ndarray:
    if images.ndim == 3:
        return images.reshape(images.shape[0], images.shape[1] * images.shape[2])
    return images


def _check_pair(images: np.ndarray, labels: np.ndarray, split: str) -> None:
    if images.ndim != 2 or images.shape[1] != NUM_PIXELS:
        raise DatasetError(
            f"{split} images must have {NUM_PIXELS} pixels each, "
            f"got shape {images.shape}"
        )
    if labels.ndim != 1 or len(labels) != len(images):
        raise DatasetError(
            f"{split} has {len(images)} images but labels of shape {labels.shape}"
        )


def load_idx_dataset(data_dir: str) -> Dataset:
    """
    Load the four raw MNIST IDX files from ``data_dir``.

    Returns:
        tuple: (train_images, train_labels, test_images, test_labels);
        images are flattened to (n, 784)

    Raises:
        DatasetError: If a file is missing or malformed
    """
    arrays = {}
    for key, name in IDX_FILES.items():
        path = _find_idx_file(data_dir, name)
        if path is None:
            raise DatasetError(f"Missing MNIST file {name} in {data_dir}")

        array = read_idx(path)
        if key.endswith('images'):
            if array.ndim != 3:
                raise DatasetError(f"{path}: image file must have 3 dimensions")
            array = _flatten_images(array)
        elif array.ndim != 1:
            raise DatasetError(f"{path}: label file must have 1 dimension")

        arrays[key] = array
        logger.debug(f"Read {path}: shape {array.shape}")

    _check_pair(arrays['train_images'], arrays['train_labels'], 'training')
    _check_pair(arrays['test_images'], arrays['test_labels'], 'test')
    return tuple(arrays[key] for key in NPZ_KEYS)


def load_npz_dataset(path: str) -> Dataset:
    """
    Load MNIST from an ``.npz`` archive.

    Raises:
        DatasetError: If the archive is missing, corrupt, or lacks a
            required key
    """
    try:
        with np.load(path) as data:
            missing = [key for key in NPZ_KEYS if key not in data.files]
            if missing:
                raise DatasetError(f"{path}: missing arrays {missing}")
            arrays = [np.asarray(data[key]) for key in NPZ_KEYS]
    except (OSError, ValueError, EOFError, zipfile.BadZipFile, zlib.error) as e:
        raise DatasetError(f"Could not read {path}: {e}") from e

    train_images, train_labels, test_images, test_labels = arrays
    train_images = _flatten_images(train_images)
    test_images = _flatten_images(test_images)

    _check_pair(train_images, train_labels, 'training')
    _check_pair(test_images, test_labels, 'test')
    return train_images, train_labels, test_images, test_labels


def load_data(data_dir: str = 'data') -> Dataset:
    """
    Load MNIST from ``data_dir``, preferring ``mnist.npz`` over IDX files.

    Raises:
        DatasetError: If neither format is available
    """
    npz_path = os.path.join(data_dir, NPZ_FILENAME)
    if os.path.exists(npz_path):
        logger.info(f"Loading MNIST data from {npz_path}")
        return load_npz_dataset(npz_path)

    if _find_idx_file(data_dir, IDX_FILES['train_images']) is None:
        raise DatasetError(
            f"No MNIST data in {data_dir}: expected {NPZ_FILENAME} "
            f"or the raw IDX files"
        )

    logger.info(f"Loading MNIST IDX files from {data_dir}")
    return load_idx_dataset(data_dir)


def encode_image(pixels: np.ndarray) -> np.ndarray:
    """Scale 0-255 pixel values into [0.01, 1.0]."""
    return np.asarray(pixels, dtype=np.float32) / 255.0 * 0.99 + 0.01


def encode_label(label: int, num_classes: int = NUM_CLASSES) -> np.ndarray:
    """Target vector of 0.01 with 0.99 at ``label``."""
    if not 0 <= label < num_classes:
        raise ValueError(f"label must be in [0, {num_classes}), got {label}")
    target = np.full(num_classes, 0.01, dtype=np.float32)
    target[label] = 0.99
    return target


def load_data_wrapper(
    data_dir: str = 'data',
    limit_train: Optional[int] = None,
    limit_test: Optional[int] = None
) -> Tuple[List[Tuple[np.ndarray, np.ndarray]], List[Tuple[np.ndarray, int]]]:
    """
    Load MNIST and encode it for training and evaluation.

    Args:
        data_dir: Directory holding ``mnist.npz`` or the IDX files
        limit_train: Keep only the first ``limit_train`` training samples
        limit_test: Keep only the first ``limit_test`` test samples

    Returns:
        tuple: (training_data, test_data). ``training_data`` is a list of
        (encoded image, target vector); ``test_data`` is a list of
        (encoded image, integer label).
    """
    train_images, train_labels, test_images, test_labels = load_data(data_dir)

    if limit_train is not None:
        train_images = train_images[:limit_train]
        train_labels = train_labels[:limit_train]
    if limit_test is not None:
        test_images = test_images[:limit_test]
        test_labels = test_labels[:limit_test]

    training_data = [
        (encode_image(image), encode_label(int(label)))
        for image, label in zip(train_images, train_labels)
    ]
    test_data = [
        (encode_image(image), int(label))
        for image, label in zip(test_images, test_labels)
    ]

    logger.info(
        f"Data loaded: {len(training_data)} training, {len(test_data)} test"
    )
    return training_data, test_data

#!/usr/bin/env python3
"""
Convert the raw MNIST IDX files to a single compressed NPZ archive.

Reading one ``mnist.npz`` is much faster than parsing the four IDX files
on every benchmark run.

Usage:
    python scripts/convert_mnist_to_npz.py [data_dir]

The script will:
1. Read the four IDX files (plain or .gz) from data_dir (default: data/)
2. Save them as data_dir/mnist.npz
3. Verify the archive matches the IDX data
"""

import os
import sys
from typing import Tuple

import numpy as np

from mnist_benchmark.errors import DatasetError
from mnist_benchmark.mnist_loader import (
    NPZ_FILENAME,
    load_idx_dataset,
    load_npz_dataset
)


def load_raw_mnist(data_dir: str) -> Tuple:
    """
    Load MNIST from the raw IDX files.

    Parameters:
    -----------
    data_dir : str
        Directory holding the four IDX files

    Returns:
    --------
    tuple
        (train_images, train_labels, test_images, test_labels)
    """
    print(f"📂 Loading MNIST IDX files from: {data_dir}")

    data = load_idx_dataset(data_dir)
    train_images, _, test_images, _ = data

    print(f"✅ Loaded successfully:")
    print(f"   - Training: {len(train_images)} images")
    print(f"   - Test: {len(test_images)} images")

    return data


def save_as_npz(data: Tuple, filepath: str) -> None:
    """
    Save MNIST data in NPZ format.

    Parameters:
    -----------
    data : tuple
        (train_images, train_labels, test_images, test_labels)
    filepath : str
        Output path for the .npz file
    """
    print(f"\n💾 Converting to NPZ format: {filepath}")

    train_images, train_labels, test_images, test_labels = data

    np.savez_compressed(
        filepath,
        train_images=train_images,
        train_labels=train_labels,
        test_images=test_images,
        test_labels=test_labels
    )

    npz_size = os.path.getsize(filepath) / (1024 * 1024)  # MB
    print(f"✅ Saved successfully (size: {npz_size:.2f} MB)")


def verify_conversion(npz_filepath: str, original_data: Tuple) -> bool:
    """
    Verify that the NPZ file contains the same data as the IDX files.

    Parameters:
    -----------
    npz_filepath : str
        Path to the .npz file
    original_data : tuple
        (train_images, train_labels, test_images, test_labels)

    Returns:
    --------
    bool
        True if every array matches
    """
    print(f"\n🔍 Verifying conversion...")

    names = ('Training images', 'Training labels', 'Test images', 'Test labels')
    converted = load_npz_dataset(npz_filepath)
    for name, expected, actual in zip(names, original_data, converted):
        if not np.array_equal(expected, actual):
            print(f"❌ {name} don't match!")
            return False

    print("✅ Verification passed! Data is identical.")
    return True


def main():
    """Main conversion function."""
    print("=" * 60)
    print("MNIST Data Format Converter")
    print("Raw IDX files → NPZ archive")
    print("=" * 60)

    if len(sys.argv) > 1:
        data_dir = sys.argv[1]
    else:
        script_dir = os.path.dirname(os.path.abspath(__file__))
        project_root = os.path.dirname(script_dir)
        data_dir = os.path.join(project_root, 'data')

    npz_path = os.path.join(data_dir, NPZ_FILENAME)

    if os.path.exists(npz_path):
        response = input(f"\n⚠️  {npz_path} already exists. Overwrite? (y/N): ")
        if response.lower() != 'y':
            print("❌ Conversion cancelled.")
            sys.exit(0)

    try:
        original_data = load_raw_mnist(data_dir)
        save_as_npz(original_data, npz_path)
        if not verify_conversion(npz_path, original_data):
            sys.exit(1)
    except DatasetError as e:
        print(f"\n❌ Error during conversion: {e}")
        sys.exit(1)

    print("\n" + "=" * 60)
    print("✅ CONVERSION COMPLETE!")
    print("=" * 60)
    print(f"\n📁 New NPZ file: {npz_path}")
    print(f"\n📝 Next step: python -m mnist_benchmark --data-dir {data_dir}")


if __name__ == '__main__':
    main()

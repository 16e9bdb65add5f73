"""Training samples: one-hot labels, synthetic images and the MNIST IDX files."""

from __future__ import annotations

import struct
from dataclasses import dataclass
from pathlib import Path

import numpy as np

INPUT_SIZE = 784
OUTPUT_CLASSES = 10
IMAGE_MAGIC = 2051
LABEL_MAGIC = 2049
NOISE_STEP = 0.2

_IMAGE_HEADER = struct.Struct(">iiii")
_LABEL_HEADER = struct.Struct(">ii")


class MnistFormatError(ValueError):
    """An MNIST file is malformed or the image and label files disagree."""


@dataclass
class Sample:
    """One image with its one-hot target vector."""

    image: np.ndarray
    target: np.ndarray

    @property
    def label(self) -> int:
        """Index of the first target entry equal to 1.0, or -1 if there is none."""
        hits = np.flatnonzero(np.asarray(self.target) == 1.0)
        return int(hits[0]) if hits.size else -1


def one_hot(label: int) -> np.ndarray:
    """One-hot vector of length ``OUTPUT_CLASSES`` for ``label``."""
    label = int(label)
    if not 0 <= label < OUTPUT_CLASSES:
        raise ValueError(f"label {label} is outside 0..{OUTPUT_CLASSES - 1}")
    target = np.zeros(OUTPUT_CLASSES)
    target[label] = 1.0
    return target


def add_noise(image, rng: np.random.Generator) -> np.ndarray:
    """Return a copy of ``image`` with 5-10% of random pixels nudged by ±0.2, kept in [0, 1]."""
    noisy = np.array(image, dtype=float).ravel()
    n = noisy.size
    if n == 0:
        return noisy
    count = n * (5 + int(rng.integers(6))) // 100
    indices = rng.integers(n, size=count)
    steps = np.where(rng.integers(2, size=count) == 0, NOISE_STEP, -NOISE_STEP)
    for index, step in zip(indices, steps):
        noisy[index] = min(max(noisy[index] + step, 0.0), 1.0)
    return noisy


def generate_synthetic(rng: np.random.Generator) -> Sample:
    """A random binary 28x28 image with noise and a random class label."""
    image = rng.integers(0, 2, size=INPUT_SIZE).astype(float)
    image = add_noise(image, rng)
    return Sample(image, one_hot(int(rng.integers(OUTPUT_CLASSES))))


def synthetic_dataset(count: int, rng: np.random.Generator) -> list[Sample]:
    """``count`` synthetic samples."""
    return [generate_synthetic(rng) for _ in range(count)]


def load_mnist_images(path: str | Path) -> np.ndarray:
    """Read an IDX3 image file as an ``(N, rows*cols)`` array scaled to [0, 1]."""
    data = Path(path).read_bytes()
    if len(data) < _IMAGE_HEADER.size:
        raise MnistFormatError(f"{path}: image file header is truncated")
    magic, count, rows, cols = _IMAGE_HEADER.unpack_from(data)
    if magic != IMAGE_MAGIC:
        raise MnistFormatError(f"{path}: not an MNIST image file (magic {magic})")
    if count < 0 or rows < 0 or cols < 0:
        raise MnistFormatError(f"{path}: negative dimensions in header")
    size = rows * cols
    needed = count * size
    if len(data) - _IMAGE_HEADER.size < needed:
        raise MnistFormatError(f"{path}: image data is truncated")
    pixels = np.frombuffer(data, dtype=np.uint8, count=needed, offset=_IMAGE_HEADER.size)
    return pixels.reshape(count, size) / 255.0


def load_mnist_labels(path: str | Path) -> np.ndarray:
    """Read an IDX1 label file as an array of ``uint8`` labels."""
    data = Path(path).read_bytes()
    if len(data) < _LABEL_HEADER.size:
        raise MnistFormatError(f"{path}: label file header is truncated")
    magic, count = _LABEL_HEADER.unpack_from(data)
    if magic != LABEL_MAGIC:
        raise MnistFormatError(f"{path}: not an MNIST label file (magic {magic})")
    if count < 0 or len(data) - _LABEL_HEADER.size < count:
        raise MnistFormatError(f"{path}: label data is truncated")
    return np.frombuffer(data, dtype=np.uint8, count=count, offset=_LABEL_HEADER.size).copy()


def load_mnist(image_path: str | Path, label_path: str | Path) -> list[Sample]:
    """Load matching MNIST image and label files as samples."""
    images = load_mnist_images(image_path)
    labels = load_mnist_labels(label_path)
    if len(images) != len(labels):
        raise MnistFormatError(
            f"image count {len(images)} does not match label count {len(labels)}"
        )
    if images.size and images.shape[1] < INPUT_SIZE:
        raise MnistFormatError(f"images have {images.shape[1]} pixels, need {INPUT_SIZE}")
    samples = []
    for image, label in zip(images, labels):
        if label >= OUTPUT_CLASSES:
            raise MnistFormatError(f"label {label} is outside 0..{OUTPUT_CLASSES - 1}")
        samples.append(Sample(image[:INPUT_SIZE].copy(), one_hot(int(label))))
    return samples
import struct

import numpy as np
import pytest

from digitnet.data import (
    INPUT_SIZE,
    OUTPUT_CLASSES,
    MnistFormatError,
    Sample,
    add_noise,
    generate_synthetic,
    load_mnist,
    load_mnist_images,
    load_mnist_labels,
    one_hot,
    synthetic_dataset,
)


def _write_images(path, pixels, count, rows=28, cols=28, magic=2051):
    path.write_bytes(struct.pack(">iiii", magic, count, rows, cols) + bytes(pixels))


def _write_labels(path, labels, magic=2049, count=None):
    count = len(labels) if count is None else count
    path.write_bytes(struct.pack(">ii", magic, count) + bytes(labels))


def test_one_hot_marks_single_class():
    vector = one_hot(3)
    assert vector.shape == (OUTPUT_CLASSES,)
    assert vector[3] == 1.0
    assert vector.sum() == 1.0


@pytest.mark.parametrize("label", [-1, OUTPUT_CLASSES])
def test_one_hot_rejects_out_of_range(label):
    with pytest.raises(ValueError):
        one_hot(label)


def test_sample_label_reads_target():
    assert Sample(np.zeros(4), one_hot(7)).label == 7
    assert Sample(np.zeros(4), np.zeros(OUTPUT_CLASSES)).label == -1


def test_add_noise_keeps_range_and_bounds_changes():
    rng = np.random.default_rng(1)
    image = rng.integers(0, 2, size=INPUT_SIZE).astype(float)
    original = image.copy()
    noisy = add_noise(image, rng)
    assert np.array_equal(image, original)
    assert noisy.min() >= 0.0 and noisy.max() <= 1.0
    changed = np.count_nonzero(~np.isclose(noisy, original))
    assert changed <= INPUT_SIZE * 10 // 100


def test_add_noise_changes_mid_grey_image():
    rng = np.random.default_rng(2)
    image = np.full(INPUT_SIZE, 0.5)
    noisy = add_noise(image, rng)
    assert np.count_nonzero(~np.isclose(noisy, 0.5)) > 0


def test_generate_synthetic_shape_and_target():
    sample = generate_synthetic(np.random.default_rng(3))
    assert sample.image.shape == (INPUT_SIZE,)
    assert sample.image.min() >= 0.0 and sample.image.max() <= 1.0
    assert sample.target.sum() == 1.0
    assert 0 <= sample.label < OUTPUT_CLASSES


def test_synthetic_dataset_is_reproducible():
    first = synthetic_dataset(5, np.random.default_rng(4))
    second = synthetic_dataset(5, np.random.default_rng(4))
    assert len(first) == 5
    for a, b in zip(first, second):
        assert np.array_equal(a.image, b.image)
        assert np.array_equal(a.target, b.target)


def test_load_images_scales_pixels(tmp_path):
    pixels = list(range(256)) * 3 + [255] * 16
    path = tmp_path / "images"
    _write_images(path, pixels, 1)
    images = load_mnist_images(path)
    assert images.shape == (1, INPUT_SIZE)
    assert images[0, 0] == 0.0
    assert images[0, -1] == 1.0
    assert np.allclose(images[0], np.array(pixels) / 255.0)


def test_load_images_bad_magic(tmp_path):
    path = tmp_path / "images"
    _write_images(path, [0] * INPUT_SIZE, 1, magic=2049)
    with pytest.raises(MnistFormatError):
        load_mnist_images(path)


def test_load_images_truncated(tmp_path):
    path = tmp_path / "images"
    _write_images(path, [0] * 100, 1)
    with pytest.raises(MnistFormatError):
        load_mnist_images(path)


def test_load_labels(tmp_path):
    path = tmp_path / "labels"
    _write_labels(path, [5, 0, 9])
    assert load_mnist_labels(path).tolist() == [5, 0, 9]


def test_load_labels_bad_magic(tmp_path):
    path = tmp_path / "labels"
    _write_labels(path, [1], magic=2051)
    with pytest.raises(MnistFormatError):
        load_mnist_labels(path)


def test_load_mnist_builds_samples(tmp_path):
    images, labels = tmp_path / "images", tmp_path / "labels"
    _write_images(images, [0] * INPUT_SIZE + [255] * INPUT_SIZE, 2)
    _write_labels(labels, [4, 8])
    samples = load_mnist(images, labels)
    assert [s.label for s in samples] == [4, 8]
    assert samples[0].image.max() == 0.0
    assert samples[1].image.min() == 1.0


def test_load_mnist_count_mismatch(tmp_path):
    images, labels = tmp_path / "images", tmp_path / "labels"
    _write_images(images, [0] * INPUT_SIZE, 1)
    _write_labels(labels, [1, 2])
    with pytest.raises(MnistFormatError):
        load_mnist(images, labels)


def test_load_mnist_missing_file(tmp_path):
    with pytest.raises(FileNotFoundError):
        load_mnist(tmp_path / "nope", tmp_path / "nada")
"""A fully connected feed-forward network with ReLU hidden layers and softmax output."""

from __future__ import annotations

import math
from dataclasses import dataclass
from pathlib import Path
from typing import Iterator, Sequence

import numpy as np

LOG_EPSILON = 1e-8


class WeightsError(ValueError):
    """A weights file does not match the network or is malformed."""


def relu(x):
    """Rectified linear unit, element-wise."""
    return np.maximum(x, 0.0)


def relu_derivative(x):
    """Derivative of :func:`relu`: 1 where ``x > 0``, else 0."""
    return np.where(np.asarray(x) > 0, 1.0, 0.0)


def softmax(z) -> np.ndarray:
    """Numerically stable softmax of a vector."""
    z = np.asarray(z, dtype=float)
    exps = np.exp(z - z.max())
    return exps / exps.sum()


def cross_entropy(output, target) -> float:
    """Cross-entropy of predicted probabilities against a target distribution."""
    output = np.asarray(output, dtype=float)
    target = np.asarray(target, dtype=float)
    return float(-np.sum(target * np.log(output + LOG_EPSILON)))


@dataclass
class Layer:
    """One layer: activations, pre-activations, local gradients and parameters."""

    size: int
    biases: np.ndarray
    weights: np.ndarray | None
    neurons: np.ndarray
    z: np.ndarray
    delta: np.ndarray

    @classmethod
    def create(cls, size: int, prev_size: int, rng: np.random.Generator) -> "Layer":
        """Layer with He-initialised weights; an input layer has none."""
        weights = None
        if prev_size > 0:
            weights = rng.normal(0.0, math.sqrt(2.0 / prev_size), size=(size, prev_size))
        return cls(
            size=size,
            biases=np.zeros(size),
            weights=weights,
            neurons=np.zeros(size),
            z=np.zeros(size),
            delta=np.zeros(size),
        )


class Network:
    """Feed-forward network trained with mini-batch gradient descent and L2 decay."""

    def __init__(
        self,
        layer_sizes: Sequence[int],
        learning_rate: float = 0.001,
        regularization: float = 0.001,
        rng: np.random.Generator | None = None,
    ) -> None:
        sizes = tuple(int(s) for s in layer_sizes)
        if not sizes:
            raise ValueError("a network needs at least one layer")
        if any(s <= 0 for s in sizes):
            raise ValueError(f"layer sizes must be positive: {sizes}")
        rng = rng if rng is not None else np.random.default_rng()
        self.layer_sizes = sizes
        self.learning_rate = float(learning_rate)
        self.regularization = float(regularization)
        self.layers = [
            Layer.create(size, sizes[i - 1] if i else 0, rng) for i, size in enumerate(sizes)
        ]

    @property
    def output(self) -> np.ndarray:
        """Activations of the last layer from the latest forward pass."""
        return self.layers[-1].neurons.copy()

    def forward(self, inputs) -> np.ndarray:
        """Propagate ``inputs`` through the network and return the output probabilities."""
        inputs = np.asarray(inputs, dtype=float).ravel()
        n_in = self.layer_sizes[0]
        if inputs.size < n_in:
            raise ValueError(f"expected at least {n_in} inputs, got {inputs.size}")
        self.layers[0].neurons = inputs[:n_in].copy()

        last = len(self.layers) - 1
        for index in range(1, len(self.layers)):
            prev, curr = self.layers[index - 1], self.layers[index]
            curr.z = curr.weights @ prev.neurons + curr.biases
            curr.neurons = softmax(curr.z) if index == last else relu(curr.z)
        return self.output

    def compute_deltas(self, target) -> None:
        """Compute local gradients of every layer after a forward pass."""
        target = np.asarray(target, dtype=float).ravel()
        out = self.layers[-1]
        if target.size != out.size:
            raise ValueError(f"target has {target.size} values, output layer has {out.size}")
        out.delta = out.neurons - target
        for index in range(len(self.layers) - 2, 0, -1):
            curr, nxt = self.layers[index], self.layers[index + 1]
            curr.delta = (nxt.weights.T @ nxt.delta) * relu_derivative(curr.z)

    def gradients(self) -> tuple[list[np.ndarray], list[np.ndarray]]:
        """Weight and bias gradients of the current sample, one entry per non-input layer."""
        grad_w = [np.outer(curr.delta, prev.neurons) for prev, curr in self._pairs()]
        grad_b = [curr.delta.copy() for _, curr in self._pairs()]
        return grad_w, grad_b

    def update(self, grad_w, grad_b, batch_size: int) -> None:
        """Apply one gradient step from gradients summed over ``batch_size`` samples."""
        if batch_size <= 0:
            raise ValueError("batch size must be positive")
        lr, reg = self.learning_rate, self.regularization
        for layer, gw, gb in zip(self.layers[1:], grad_w, grad_b):
            layer.weights -= lr * (np.asarray(gw) / batch_size + reg * layer.weights)
            layer.biases -= lr * (np.asarray(gb) / batch_size)

    def save(self, path: str | Path) -> None:
        """Write hyper-parameters, biases and weights as text."""
        lines = [
            str(len(self.layer_sizes)),
            "".join(f"{size} " for size in self.layer_sizes),
            f"{self.learning_rate:.6f} {self.regularization:.6f}",
        ]
        for layer in self.layers[1:]:
            lines.append(_format_row(layer.biases))
            lines.extend(_format_row(row) for row in layer.weights)
        Path(path).write_text("\n".join(lines) + "\n")

    def load(self, path: str | Path) -> None:
        """Read parameters written by :meth:`save`; sizes must match this network."""
        tokens = iter(Path(path).read_text().split())

        num_layers = _next_number(tokens, int)
        if num_layers != len(self.layer_sizes):
            raise WeightsError(
                f"layer count mismatch: file={num_layers}, network={len(self.layer_sizes)}"
            )
        for index, expected in enumerate(self.layer_sizes):
            size = _next_number(tokens, int)
            if size != expected:
                raise WeightsError(
                    f"size mismatch for layer {index}: file={size}, network={expected}"
                )
        learning_rate = _next_number(tokens, float)
        regularization = _next_number(tokens, float)

        params = []
        for prev, curr in self._pairs():
            biases = np.array([_next_number(tokens, float) for _ in range(curr.size)])
            weights = np.array(
                [_next_number(tokens, float) for _ in range(curr.size * prev.size)]
            ).reshape(curr.size, prev.size)
            params.append((biases, weights))

        self.learning_rate = learning_rate
        self.regularization = regularization
        for layer, (biases, weights) in zip(self.layers[1:], params):
            layer.biases = biases
            layer.weights = weights

    def _pairs(self) -> Iterator[tuple[Layer, Layer]]:
        return zip(self.layers, self.layers[1:])


def _format_row(values) -> str:
    return "".join(f"{value:.6f} " for value in values)


def _next_number(tokens: Iterator[str], kind):
    try:
        return kind(next(tokens))
    except StopIteration:
        raise WeightsError("weights file ended early") from None
    except ValueError as exc:
        raise WeightsError(f"malformed number in weights file: {exc}") from None
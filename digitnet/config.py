"""Reading the network description file (layer sizes and hyper-parameters)."""

from __future__ import annotations

import re
from dataclasses import dataclass
from pathlib import Path

DEFAULT_LEARNING_RATE = 0.001
DEFAULT_REGULARIZATION = 0.001

_INT_PREFIX = re.compile(r"\s*([+-]?\d+)")
_FLOAT_PREFIX = re.compile(
    r"\s*([+-]?(?:\d+\.?\d*(?:[eE][+-]?\d+)?|\.\d+(?:[eE][+-]?\d+)?|inf(?:inity)?|nan))",
    re.IGNORECASE,
)
_TOKEN_SPLIT = re.compile(r"[,\s]+")


def _leading_int(text: str) -> int:
    """Integer value of the numeric prefix of ``text``, 0 when there is none."""
    match = _INT_PREFIX.match(text)
    return int(match.group(1)) if match else 0


def _leading_float(text: str) -> float:
    """Float value of the numeric prefix of ``text``, 0.0 when there is none."""
    match = _FLOAT_PREFIX.match(text)
    return float(match.group(1)) if match else 0.0


@dataclass(frozen=True)
class NetworkConfig:
    """Layer sizes and training hyper-parameters of a network."""

    layer_sizes: tuple[int, ...]
    learning_rate: float = DEFAULT_LEARNING_RATE
    regularization: float = DEFAULT_REGULARIZATION


def parse_config(text: str) -> NetworkConfig:
    """Parse a configuration in the ``key: value`` line format.

    Recognised keys are ``neurons`` (comma separated layer sizes),
    ``learning_rate`` and ``regularization``. Keys must start a line.
    """
    layer_sizes: tuple[int, ...] | None = None
    learning_rate = DEFAULT_LEARNING_RATE
    regularization = DEFAULT_REGULARIZATION

    for line in text.splitlines():
        if line.startswith("neurons:"):
            tokens = (t for t in _TOKEN_SPLIT.split(line[len("neurons:"):]) if t)
            layer_sizes = tuple(_leading_int(token) for token in tokens)
        elif line.startswith("learning_rate:"):
            learning_rate = _leading_float(line[len("learning_rate:"):])
        elif line.startswith("regularization:"):
            regularization = _leading_float(line[len("regularization:"):])

    if not layer_sizes:
        raise ValueError("configuration defines no layers")
    return NetworkConfig(layer_sizes, learning_rate, regularization)


def read_config(path: str | Path) -> NetworkConfig:
    """Read and parse the configuration file at ``path``."""
    return parse_config(Path(path).read_text())
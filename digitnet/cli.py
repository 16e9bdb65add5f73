"""Command line entry point: train on MNIST or synthetic data, or test saved weights."""

from __future__ import annotations

import re
import signal
import sys
import threading
import time
from dataclasses import dataclass

import numpy as np

from .config import read_config
from .data import MnistFormatError, load_mnist, synthetic_dataset
from .network import Network, WeightsError
from .training import final_evaluation, train

SYNTHETIC_SAMPLES = 1000
SYNTHETIC_TEST_SAMPLES = 200
LOSS_HISTORY_FILE = "loss_history.txt"
EVALUATION_EXAMPLES = 5

_LEADING_INT = re.compile(r"\s*([+-]?\d+)")


@dataclass
class Options:
    """Settings chosen on the command line."""

    use_mnist: bool = True
    train_mode: bool = True
    weights_file: str = "weights.txt"
    epochs: int = 50
    config_file: str = "config.txt"
    image_file: str = "MNIST/raw/train-images-idx3-ubyte"
    label_file: str = "MNIST/raw/train-labels-idx1-ubyte"


def parse_args(argv) -> Options:
    """Parse ``--key=value`` arguments; unknown arguments are ignored."""
    options = Options()
    for arg in argv:
        if arg.startswith("--dataset="):
            if "synthetic" in arg:
                options.use_mnist = False
            elif "mnist" in arg:
                options.use_mnist = True
        elif arg.startswith("--mode="):
            if "train" in arg:
                options.train_mode = True
            elif "test" in arg:
                options.train_mode = False
        elif arg.startswith("--weights="):
            options.weights_file = arg[len("--weights="):]
        elif arg.startswith("--epochs="):
            match = _LEADING_INT.match(arg[len("--epochs="):])
            options.epochs = int(match.group(1)) if match else 0
        elif arg.startswith("--config="):
            options.config_file = arg[len("--config="):]
        elif arg.startswith("--images="):
            options.image_file = arg[len("--images="):]
        elif arg.startswith("--labels="):
            options.label_file = arg[len("--labels="):]
    return options


def _run(options: Options, stop: threading.Event) -> int:
    print(f"[{time.strftime('%H:%M:%S')}] Parameters:")
    print(f"    Dataset: {'MNIST' if options.use_mnist else 'Synthetic'}")
    print(f"    Mode: {'Train' if options.train_mode else 'Test'}")
    print(f"    Weights file: {options.weights_file}")
    print(f"    Epochs: {options.epochs}")

    rng = np.random.default_rng()
    try:
        config = read_config(options.config_file)
    except (OSError, ValueError) as exc:
        print(f"Failed to read config file: {exc}", file=sys.stderr)
        return 1
    print("Config: " + "".join(f"{size} " for size in config.layer_sizes))
    print(
        f"learning_rate: {config.learning_rate:.6f}, "
        f"regularization: {config.regularization:.6f}"
    )

    network = Network(config.layer_sizes, config.learning_rate, config.regularization, rng)

    if options.use_mnist:
        print("Loading MNIST data...")
        try:
            train_data = load_mnist(options.image_file, options.label_file)
        except (OSError, MnistFormatError) as exc:
            print(f"Failed to load MNIST data: {exc}", file=sys.stderr)
            return 1
        test_data = train_data
        print(f"Loaded examples: {len(train_data)}")
    else:
        train_data = synthetic_dataset(SYNTHETIC_SAMPLES, rng)
        test_data = synthetic_dataset(SYNTHETIC_TEST_SAMPLES, rng)
        print(
            f"Synthetic examples for training: {len(train_data)}, for test: {len(test_data)}"
        )

    if options.train_mode:
        train(network, train_data, test_data, options.epochs,
              options.weights_file, LOSS_HISTORY_FILE, stop)
    else:
        try:
            network.load(options.weights_file)
        except (OSError, WeightsError) as exc:
            print(f"Failed to load weights: {exc}", file=sys.stderr)
        else:
            print(f"Weights successfully loaded from {options.weights_file}")

    final_evaluation(network, test_data, EVALUATION_EXAMPLES)
    return 0


def main(argv=None) -> int:
    """Run the trainer; Ctrl-C ends training after the current epoch."""
    options = parse_args(sys.argv[1:] if argv is None else argv)
    stop = threading.Event()
    try:
        previous = signal.signal(signal.SIGINT, lambda signum, frame: stop.set())
        installed = True
    except ValueError:
        installed = False
    try:
        return _run(options, stop)
    finally:
        if installed:
            signal.signal(signal.SIGINT, previous)


if __name__ == "__main__":
    sys.exit(main())
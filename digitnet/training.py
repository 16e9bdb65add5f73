"""Mini-batch training with early stopping, evaluation metrics and example output."""

from __future__ import annotations

import threading
import time
from dataclasses import dataclass, field
from pathlib import Path
from typing import Sequence

import numpy as np

from .network import Network, cross_entropy

BATCH_SIZE = 32
EARLY_STOP_PATIENCE = 5
INITIAL_BEST_LOSS = 1e9


@dataclass(frozen=True)
class Metrics:
    """Mean loss, accuracy and macro-averaged precision and recall."""

    loss: float
    accuracy: float
    precision: float
    recall: float


@dataclass
class TrainingResult:
    """Outcome of :func:`train`."""

    best_epoch: int = 0
    best_loss: float = INITIAL_BEST_LOSS
    epochs_run: int = 0
    interrupted: bool = False
    early_stopped: bool = False
    history: list[tuple[int, float, Metrics]] = field(default_factory=list)


def _timestamp() -> str:
    return time.strftime("%H:%M:%S")


def evaluate(network: Network, data: Sequence) -> Metrics:
    """Evaluate ``network`` on samples having ``image`` and ``target`` attributes."""
    if not data:
        raise ValueError("cannot evaluate on an empty dataset")
    classes = network.layer_sizes[-1]
    tp = [0] * classes
    fp = [0] * classes
    fn = [0] * classes
    correct = 0
    total_loss = 0.0

    for sample in data:
        output = network.forward(sample.image)
        total_loss += cross_entropy(output, sample.target)
        predicted = int(np.argmax(output))
        hits = np.flatnonzero(np.asarray(sample.target) == 1.0)
        actual = int(hits[0]) if hits.size else -1
        if predicted == actual:
            correct += 1
            tp[actual] += 1
        else:
            fp[predicted] += 1
            if 0 <= actual < classes:
                fn[actual] += 1

    precision = sum(t / (t + f) if t + f else 0.0 for t, f in zip(tp, fp)) / classes
    recall = sum(t / (t + f) if t + f else 0.0 for t, f in zip(tp, fn)) / classes
    return Metrics(
        loss=total_loss / len(data),
        accuracy=correct / len(data),
        precision=precision,
        recall=recall,
    )


def _train_batch(network: Network, batch: Sequence) -> float:
    """Accumulate gradients over ``batch``, take one step, return the summed loss."""
    batch_loss = 0.0
    sum_w: list[np.ndarray] | None = None
    sum_b: list[np.ndarray] | None = None
    for sample in batch:
        output = network.forward(sample.image)
        batch_loss += cross_entropy(output, sample.target)
        network.compute_deltas(sample.target)
        grad_w, grad_b = network.gradients()
        if sum_w is None:
            sum_w, sum_b = grad_w, grad_b
        else:
            sum_w = [a + g for a, g in zip(sum_w, grad_w)]
            sum_b = [a + g for a, g in zip(sum_b, grad_b)]
    network.update(sum_w, sum_b, len(batch))
    return batch_loss


def train(
    network: Network,
    train_data: Sequence,
    val_data: Sequence,
    epochs: int,
    weights_file: str | Path,
    loss_history_file: str | Path,
    stop_event: threading.Event | None = None,
) -> TrainingResult:
    """Train with mini-batches, log each epoch and keep the best weights on disk.

    Samples past the last full batch are not trained on but still count in the
    epoch's mean loss. Training stops after ``EARLY_STOP_PATIENCE`` epochs without
    improvement, or when ``stop_event`` is set.
    """
    train_data = list(train_data)
    if not train_data:
        raise ValueError("training data is empty")
    result = TrainingResult()
    full = len(train_data) // BATCH_SIZE * BATCH_SIZE
    no_improve = 0

    with open(loss_history_file, "w") as log:
        for epoch in range(1, epochs + 1):
            if stop_event is not None and stop_event.is_set():
                print("Training interrupted by user signal.")
                result.interrupted = True
                break

            epoch_loss = sum(
                _train_batch(network, train_data[start:start + BATCH_SIZE])
                for start in range(0, full, BATCH_SIZE)
            )
            epoch_loss /= len(train_data)
            metrics = evaluate(network, val_data)
            result.epochs_run = epoch
            result.history.append((epoch, epoch_loss, metrics))

            print(
                f"[{_timestamp()}] Epoch {epoch}, Loss={epoch_loss:.6f}, "
                f"Accuracy={metrics.accuracy:.4f}, Precision={metrics.precision:.4f}, "
                f"Recall={metrics.recall:.4f}"
            )
            log.write(
                f"{epoch} {epoch_loss:.6f} {metrics.accuracy:.4f} "
                f"{metrics.precision:.4f} {metrics.recall:.4f}\n"
            )
            log.flush()

            if epoch_loss < result.best_loss:
                result.best_loss = epoch_loss
                result.best_epoch = epoch
                no_improve = 0
                network.save(weights_file)
                print(f"Weights successfully saved to {weights_file}")
            else:
                no_improve += 1
            if no_improve >= EARLY_STOP_PATIENCE:
                print(f"Early stopping: no improvement for {EARLY_STOP_PATIENCE} epochs.")
                result.early_stopped = True
                break

    print("Training completed.")
    print(f"Best result at epoch {result.best_epoch} with loss {result.best_loss:.6f}")
    return result


def final_evaluation(network: Network, data: Sequence, count: int) -> list[np.ndarray]:
    """Print and return the output probabilities for the first ``count`` samples."""
    print(f"Final evaluation on {count} examples:")
    outputs = []
    for number, sample in enumerate(list(data)[:max(count, 0)], start=1):
        output = network.forward(sample.image)
        outputs.append(output)
        print(f"Example {number}:")
        print("".join(f"class {j}: {p:.4f} " for j, p in enumerate(output)))
    return outputs
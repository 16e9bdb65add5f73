"""Fully connected neural network for digit classification, with a trainer command and a drawing window."""

__version__ = "0.1.0"
__all__ = ["config", "network", "data", "training", "cli", "gui"]
"""Activation and label-encoding utilities for digitnet."""

from __future__ import annotations

import numpy as np

from .types import Array


def sigmoid(x: Array) -> Array:
    """Return the logistic activation ``1 / (1 + exp(-x))``."""

    # exp overflows to inf for very negative sums; the limit is still 0.
    with np.errstate(over="ignore"):
        return 1.0 / (1.0 + np.exp(-np.asarray(x, dtype=np.float64)))


def sigmoid_prime(activation: Array) -> Array:
    """Sigmoid derivative expressed in terms of the activation value."""

    return activation * (1.0 - activation)


def one_hot(label: int, num_classes: int) -> Array:
    """Encode ``label`` as a length ``num_classes`` indicator vector."""

    encoded = np.zeros(num_classes, dtype=np.float64)
    encoded[label] = 1.0
    return encoded


def one_hot_batch(labels: Array, num_classes: int) -> Array:
    labels = np.asarray(labels, dtype=np.int64).reshape(-1)
    return np.eye(num_classes, dtype=np.float64)[labels]


def decode_prediction(output: Array) -> int:
    """Return the index of the largest activation.

    Ties resolve to the lowest index, matching a strict ``>`` scan.
    """

    return int(np.argmax(output))


def decode_batch(outputs: Array) -> Array:
    return np.argmax(outputs, axis=1)


__all__ = [
    "decode_batch",
    "decode_prediction",
    "one_hot",
    "one_hot_batch",
    "sigmoid",
    "sigmoid_prime",
]

"""Fully connected sigmoid network trained with full-batch backpropagation."""

from __future__ import annotations

from typing import Iterable, List, Mapping, Sequence, Tuple, Union

import numpy as np

from .activations import decode_batch, decode_prediction, one_hot_batch, sigmoid, sigmoid_prime
from .types import Array, Batch, Example, Gradients, InvalidInputError, Topology
from .weights import check_shapes, generate_random_weights

Examples = Union[Batch, Sequence[Example], Sequence[Tuple[int, Sequence[int]]]]

DEFAULT_LEARNING_RATE = 0.1
DEFAULT_REGULARIZATION_RATE = 0.3


def _append_bias(activations: Array) -> Array:
    ones = np.ones((activations.shape[0], 1), dtype=activations.dtype)
    return np.hstack([activations, ones])


def _check_features(inputs: Array) -> None:
    if not np.all(np.isfinite(inputs)):
        raise InvalidInputError("features must be finite")
    if not np.all(np.mod(inputs, 1) == 0):
        raise InvalidInputError("features must be integers")


class NeuralNetwork:
    """Multilayer perceptron with sigmoid units and L2 weight decay.

    Weight-layer ``k`` is a ``(current, previous)`` matrix. When the previous
    layer is a hidden layer its last column is the bias weight, applied against
    a constant ``1.0`` input; the raw input layer carries no bias.
    """

    def __init__(
        self,
        input_size: int,
        hidden_layer_sizes: Sequence[int],
        num_classes: int,
        *,
        learning_rate: float = DEFAULT_LEARNING_RATE,
        regularization_rate: float = DEFAULT_REGULARIZATION_RATE,
        seed: int | None = None,
    ) -> None:
        if learning_rate < 0:
            raise ValueError(f"learning_rate must be >= 0, got {learning_rate}")
        if regularization_rate < 0:
            raise ValueError(
                f"regularization_rate must be >= 0, got {regularization_rate}"
            )
        self.topology = Topology(
            input_size=int(input_size),
            hidden_layer_sizes=tuple(hidden_layer_sizes),
            num_classes=int(num_classes),
        )
        self.learning_rate = float(learning_rate)
        self.regularization_rate = float(regularization_rate)
        self.seed = seed
        self.weights: List[Array] = generate_random_weights(self.topology, seed=seed)

    def __repr__(self) -> str:
        return (
            f"NeuralNetwork(layers={self.topology.layer_sizes}, "
            f"learning_rate={self.learning_rate}, "
            f"regularization_rate={self.regularization_rate})"
        )

    # ------------------------------------------------------------------
    # Weight store

    def set_weights(self, weights: Sequence[Array]) -> None:
        """Replace the weight store, keeping the topology's shapes."""

        converted = [np.array(w, dtype=np.float64) for w in weights]
        check_shapes(self.topology, converted)
        self.weights = converted

    def flat_weights(self) -> List[Array]:
        """Row-major flat vector per weight-layer (``current * previous + j``)."""

        return [w.ravel().copy() for w in self.weights]

    def parameter_count(self) -> int:
        return self.topology.parameter_count()

    # ------------------------------------------------------------------
    # Forward pass

    def predict(self, features: Sequence[int]) -> List[Array]:
        """Return the activations of every non-input layer for one example."""

        vector = np.asarray(features, dtype=np.float64)
        if vector.ndim != 1:
            raise InvalidInputError(
                f"features must be one-dimensional, got shape {vector.shape}"
            )
        if vector.shape[0] != self.topology.input_size:
            raise InvalidInputError(
                f"expected {self.topology.input_size} features, got {vector.shape[0]}"
            )
        _check_features(vector)
        activations = self._forward(vector.reshape(1, -1))
        return [layer[0] for layer in activations]

    def classify(self, features: Sequence[int]) -> int:
        return decode_prediction(self.predict(features)[-1])

    def _forward(self, inputs: Array) -> List[Array]:
        activations: List[Array] = []
        previous = inputs
        for idx, weights in enumerate(self.weights):
            if idx > 0:
                previous = _append_bias(previous)
            current = sigmoid(previous @ weights.T)
            activations.append(current)
            previous = current
        return activations

    # ------------------------------------------------------------------
    # Backward pass

    def compute_gradients(self, examples: Examples) -> Gradients:
        """Sum of per-example gradients, one array per weight-layer."""

        batch = self.as_batch(examples)
        grads, _ = self._backpropagate(batch)
        return grads

    def train_one_iteration(self, examples: Examples) -> None:
        """Run one full-batch gradient descent step over ``examples``."""

        batch = self.as_batch(examples)
        grads, _ = self._backpropagate(batch)
        self._apply_gradients(grads, len(batch))

    def _backpropagate(self, batch: Batch) -> tuple[Gradients, List[Array]]:
        activations = self._forward(batch.inputs)
        targets = one_hot_batch(batch.labels, self.topology.num_classes)

        last = len(self.weights) - 1
        deltas: List[Array] = [np.empty(0)] * len(self.weights)
        deltas[last] = activations[last] - targets
        for layer in reversed(range(last)):
            nodes = self.topology.hidden_layer_sizes[layer]
            upstream = deltas[layer + 1] * sigmoid_prime(activations[layer + 1])
            # bias column has no node in this layer
            deltas[layer] = upstream @ self.weights[layer + 1][:, :nodes]

        grads: Gradients = []
        for layer, delta in enumerate(deltas):
            previous = batch.inputs if layer == 0 else _append_bias(activations[layer - 1])
            grads.append(delta.T @ previous)
        return grads, activations

    def _apply_gradients(self, grads: Gradients, batch_size: int) -> None:
        if batch_size <= 0:
            raise InvalidInputError("cannot apply gradients from an empty batch")
        decay = 1.0 - self.learning_rate * self.regularization_rate / batch_size
        for weights, grad in zip(self.weights, grads):
            weights *= decay
            weights -= (grad / batch_size) * self.learning_rate

    # ------------------------------------------------------------------
    # Training and evaluation

    def train(
        self,
        examples: Examples,
        iterations: int,
        callbacks: Iterable[object] | None = None,
    ) -> None:
        """Run ``iterations`` full-batch updates over the same examples.

        Progress is printed to stdout unless ``callbacks`` is given.
        """

        from ..reporting.metrics import ConsoleProgress
        from ..training.trainer import Trainer

        if callbacks is None:
            callbacks = [ConsoleProgress()]
        Trainer(self, callbacks=callbacks).run(examples, iterations)

    def accuracy(self, examples: Examples) -> float:
        """Fraction of ``examples`` whose arg-max output equals the label."""

        batch = self.as_batch(examples)
        outputs = self._forward(batch.inputs)[-1]
        correct = int(np.sum(decode_batch(outputs) == batch.labels))
        return correct / len(batch)

    def evaluate(self, examples: Examples) -> Mapping[str, float]:
        """Return the mean squared error and accuracy over ``examples``."""

        batch = self.as_batch(examples)
        outputs = self._forward(batch.inputs)[-1]
        targets = one_hot_batch(batch.labels, self.topology.num_classes)
        loss = 0.5 * np.sum((outputs - targets) ** 2, axis=1)
        correct = decode_batch(outputs) == batch.labels
        return {"loss": float(np.mean(loss)), "accuracy": float(np.mean(correct))}

    # ------------------------------------------------------------------
    # Input validation

    def as_batch(self, examples: Examples) -> Batch:
        """Convert and validate ``examples`` against the topology."""

        if isinstance(examples, Batch):
            batch = examples
        else:
            items = list(examples)
            batch = Batch.from_examples(
                [item if isinstance(item, Example) else Example(*item) for item in items]
            )
        inputs = np.asarray(batch.inputs, dtype=np.float64)
        labels = np.asarray(batch.labels).reshape(-1)
        if labels.shape[0] == 0:
            raise InvalidInputError("example batch is empty")
        if inputs.ndim != 2 or inputs.shape[0] != labels.shape[0]:
            raise InvalidInputError(
                f"inputs of shape {inputs.shape} do not match {labels.shape[0]} labels"
            )
        if inputs.shape[1] != self.topology.input_size:
            raise InvalidInputError(
                f"expected {self.topology.input_size} features, got {inputs.shape[1]}"
            )
        _check_features(inputs)
        if not np.issubdtype(labels.dtype, np.integer):
            if not np.all(np.mod(labels, 1) == 0):
                raise InvalidInputError("labels must be integers")
        labels = labels.astype(np.int64)
        bad = (labels < 0) | (labels >= self.topology.num_classes)
        if np.any(bad):
            raise InvalidInputError(
                f"labels must lie in [0, {self.topology.num_classes}), "
                f"got {sorted(set(labels[bad].tolist()))}"
            )
        return Batch(inputs=inputs, labels=labels)


__all__ = [
    "DEFAULT_LEARNING_RATE",
    "DEFAULT_REGULARIZATION_RATE",
    "Examples",
    "NeuralNetwork",
]

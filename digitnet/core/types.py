"""Core typing contracts for digitnet."""

from __future__ import annotations

from dataclasses import dataclass
from typing import List, Sequence, Tuple

import numpy as np

Array = np.ndarray
Gradients = List[Array]


class InvalidInputError(ValueError):
    """Raised when examples do not match the network they are fed to."""


@dataclass(frozen=True)
class Topology:
    """Layer sizes of a fully connected network.

    ``hidden_layer_sizes`` may be empty, in which case the input layer feeds the
    output layer directly. Every layer except the input layer contributes a
    bias unit to the layer after it.
    """

    input_size: int
    hidden_layer_sizes: Tuple[int, ...]
    num_classes: int

    def __post_init__(self) -> None:
        object.__setattr__(
            self, "hidden_layer_sizes", tuple(int(h) for h in self.hidden_layer_sizes)
        )
        if int(self.input_size) < 1:
            raise ValueError(f"input_size must be >= 1, got {self.input_size}")
        if int(self.num_classes) < 1:
            raise ValueError(f"num_classes must be >= 1, got {self.num_classes}")
        for size in self.hidden_layer_sizes:
            if size < 1:
                raise ValueError(f"hidden layer sizes must be >= 1, got {size}")

    @property
    def num_weight_layers(self) -> int:
        return len(self.hidden_layer_sizes) + 1

    @property
    def layer_sizes(self) -> List[int]:
        return [self.input_size, *self.hidden_layer_sizes, self.num_classes]

    def current_layer_size(self, layer: int) -> int:
        """Number of nodes fed by weight-layer ``layer``."""

        self._check_layer(layer)
        if layer == self.num_weight_layers - 1:
            return self.num_classes
        return self.hidden_layer_sizes[layer]

    def previous_layer_size(self, layer: int) -> int:
        """Number of inputs to weight-layer ``layer``, bias included."""

        self._check_layer(layer)
        if layer == 0:
            return self.input_size
        return self.hidden_layer_sizes[layer - 1] + 1

    def weight_shapes(self) -> List[Tuple[int, int]]:
        return [
            (self.current_layer_size(k), self.previous_layer_size(k))
            for k in range(self.num_weight_layers)
        ]

    def parameter_count(self) -> int:
        return int(sum(rows * cols for rows, cols in self.weight_shapes()))

    def _check_layer(self, layer: int) -> None:
        if not 0 <= layer < self.num_weight_layers:
            raise IndexError(
                f"weight layer {layer} out of range for {self.num_weight_layers} layers"
            )


@dataclass(frozen=True)
class Example:
    """A single labelled feature vector."""

    label: int
    features: Tuple[int, ...]

    def __post_init__(self) -> None:
        object.__setattr__(self, "label", _integral(self.label, "label"))
        object.__setattr__(
            self, "features", tuple(_integral(v, "feature") for v in self.features)
        )


def _integral(value: object, what: str) -> int:
    """Return ``value`` as an int, rejecting anything that would be truncated."""

    if isinstance(value, (int, np.integer)) and not isinstance(value, bool):
        return int(value)
    try:
        number = float(value)  # type: ignore[arg-type]
    except (TypeError, ValueError) as exc:
        raise InvalidInputError(f"{what} must be an integer, got {value!r}") from exc
    if not number.is_integer():
        raise InvalidInputError(f"{what} must be an integer, got {value!r}")
    return int(number)


@dataclass(frozen=True)
class Batch:
    """Array form of a sequence of examples."""

    inputs: Array
    labels: Array

    def __len__(self) -> int:
        return int(self.labels.shape[0])

    @classmethod
    def from_examples(cls, examples: Sequence[Example]) -> "Batch":
        if len(examples) == 0:
            return cls(
                inputs=np.zeros((0, 0), dtype=np.float64),
                labels=np.zeros((0,), dtype=np.int64),
            )
        widths = {len(example.features) for example in examples}
        if len(widths) != 1:
            raise InvalidInputError(
                f"examples have inconsistent feature lengths: {sorted(widths)}"
            )
        inputs = np.asarray([example.features for example in examples], dtype=np.float64)
        labels = np.asarray([example.label for example in examples], dtype=np.int64)
        return cls(inputs=inputs, labels=labels)

    def to_examples(self) -> List[Example]:
        return [
            Example(label=int(label), features=tuple(int(v) for v in row))
            for row, label in zip(self.inputs, self.labels)
        ]


@dataclass(frozen=True)
class RunResult:
    """Summary returned by :func:`digitnet.training.pipelines.run_pipeline`."""

    iterations: int
    metrics_path: str
    manifest_path: str
    summary_path: str = ""
    train_accuracy: float = 0.0
    test_accuracy: float | None = None


__all__ = [
    "Array",
    "Batch",
    "Example",
    "Gradients",
    "InvalidInputError",
    "RunResult",
    "Topology",
]

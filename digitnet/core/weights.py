"""Weight store construction."""

from __future__ import annotations

from typing import List

import numpy as np

from .types import Array, Topology

WEIGHT_MIN = -1.0
WEIGHT_MAX = 1.0


def generate_random_weights(
    topology: Topology,
    rng: np.random.Generator | None = None,
    *,
    seed: int | None = None,
) -> List[Array]:
    """Return one uniformly initialised matrix per weight-layer.

    Matrix ``k`` has shape ``(current_layer_size(k), previous_layer_size(k))``
    and is indexed ``[current_node, previous_node]``; for hidden previous
    layers the last column holds the bias weight.
    """

    if rng is None:
        rng = np.random.default_rng(seed)
    return [
        rng.uniform(WEIGHT_MIN, WEIGHT_MAX, size=shape)
        for shape in topology.weight_shapes()
    ]


def zero_weights(topology: Topology) -> List[Array]:
    return [np.zeros(shape, dtype=np.float64) for shape in topology.weight_shapes()]


def check_shapes(topology: Topology, weights: List[Array]) -> None:
    expected = topology.weight_shapes()
    if len(weights) != len(expected):
        raise ValueError(
            f"expected {len(expected)} weight layers, got {len(weights)}"
        )
    for idx, (weight, shape) in enumerate(zip(weights, expected)):
        if tuple(weight.shape) != shape:
            raise ValueError(
                f"weight layer {idx} has shape {tuple(weight.shape)}, expected {shape}"
            )


__all__ = ["WEIGHT_MAX", "WEIGHT_MIN", "check_shapes", "generate_random_weights", "zero_weights"]

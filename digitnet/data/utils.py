"""Utility helpers for dataset loaders."""

from __future__ import annotations

from dataclasses import dataclass
from typing import Any, Dict, Mapping

import numpy as np

from ..core.types import Batch
from .registry import DatasetSpec, subset


@dataclass(frozen=True)
class SplitIndices:
    """Indices for the train/test partitions."""

    train: np.ndarray
    test: np.ndarray

    @property
    def sizes(self) -> Mapping[str, int]:
        return {"train": int(self.train.size), "test": int(self.test.size)}


def deterministic_split(
    n_samples: int,
    *,
    test_split: float = 0.0,
    seed: int = 0,
    shuffle: bool = True,
) -> SplitIndices:
    """Return reproducible train/test indices for ``n_samples`` rows."""

    if not 0 <= test_split < 1:
        raise ValueError("test_split must be in [0, 1)")

    indices = np.arange(n_samples)
    if shuffle:
        rng = np.random.default_rng(seed)
        rng.shuffle(indices)

    test_size = int(round(n_samples * test_split))
    # Ensure at least one test sample when a split was requested
    if test_split > 0:
        test_size = max(test_size, 1)
    train_size = n_samples - test_size
    if train_size <= 0:
        raise ValueError("Not enough samples for the requested split")

    return SplitIndices(train=indices[:train_size], test=indices[train_size:])


def build_dataset(
    name: str,
    inputs: np.ndarray,
    labels: np.ndarray,
    *,
    num_classes: int | None = None,
    test_split: float = 0.0,
    seed: int = 0,
    shuffle: bool = True,
    provenance: Dict[str, Any] | None = None,
) -> DatasetSpec:
    """Split ``inputs``/``labels`` and wrap them in a :class:`DatasetSpec`."""

    inputs = np.asarray(inputs, dtype=np.float64)
    labels = np.asarray(labels, dtype=np.int64).reshape(-1)
    if num_classes is None:
        num_classes = int(labels.max()) + 1 if labels.size else 0
    everything = Batch(inputs=inputs, labels=labels)
    splits = deterministic_split(
        labels.shape[0], test_split=test_split, seed=seed, shuffle=shuffle
    )
    test = subset(everything, splits.test) if splits.test.size else None

    provenance = dict(provenance or {})
    provenance.update({"test_split": test_split, "seed": seed, "shuffle": shuffle})
    return DatasetSpec(
        name=name,
        train=subset(everything, splits.train),
        test=test,
        input_size=int(inputs.shape[1]),
        num_classes=int(num_classes),
        provenance=provenance,
    )


__all__ = ["SplitIndices", "build_dataset", "deterministic_split"]

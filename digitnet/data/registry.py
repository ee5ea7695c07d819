"""Dataset registry and metadata contracts."""

from __future__ import annotations

from dataclasses import dataclass, field
from pathlib import Path
from typing import Any, Callable, Dict, Iterable, MutableMapping

import numpy as np

from ..core.types import Batch


@dataclass(frozen=True)
class DatasetSpec:
    """A loaded dataset, already shuffled and split.

    Attributes
    ----------
    name:
        Registry identifier the dataset was built from.
    train:
        Training examples. The whole split is consumed as one batch per
        training iteration.
    test:
        Held-out examples, or ``None`` when no test split was requested.
    input_size:
        Length of every feature vector.
    num_classes:
        Number of distinct labels; labels lie in ``[0, num_classes)``.
    provenance:
        Options and source information recorded in the run manifest.
    """

    name: str
    train: Batch
    test: Batch | None
    input_size: int
    num_classes: int
    provenance: Dict[str, Any] = field(default_factory=dict)

    @property
    def splits(self) -> Dict[str, int]:
        return {
            "train": len(self.train),
            "test": len(self.test) if self.test is not None else 0,
        }


DatasetFactory = Callable[..., DatasetSpec]


_REGISTRY: MutableMapping[str, DatasetFactory] = {}


def register_dataset(name: str) -> Callable[[DatasetFactory], DatasetFactory]:
    """Register a dataset factory under ``name``::

        @register_dataset("digits_csv")
        def load_digits(**kwargs):
            ...
    """

    def _decorator(func: DatasetFactory) -> DatasetFactory:
        _REGISTRY[str(name)] = func
        return func

    return _decorator


def get_dataset(dataset: str, /, **options: Any) -> DatasetSpec:
    """Build the :class:`DatasetSpec` registered as ``dataset``."""

    if dataset not in _REGISTRY:
        available = ", ".join(available_datasets())
        raise KeyError(f"Unknown dataset {dataset!r}. Available datasets: {available}")
    spec = _REGISTRY[dataset](**options)
    _validate_spec(spec)
    return spec


def available_datasets() -> Iterable[str]:
    """Return the sorted list of available dataset identifiers."""

    return sorted(_REGISTRY)


def _validate_spec(spec: DatasetSpec) -> None:
    if spec.num_classes < 1:
        raise ValueError(f"Dataset {spec.name!r} must define at least one class")
    for split, batch in (("train", spec.train), ("test", spec.test)):
        if batch is None:
            continue
        if batch.inputs.ndim != 2 or batch.inputs.shape[1] != spec.input_size:
            raise ValueError(
                f"Split {split!r} of {spec.name!r} has inputs of shape "
                f"{batch.inputs.shape}, expected width {spec.input_size}"
            )
        if len(batch) and (batch.labels.min() < 0 or batch.labels.max() >= spec.num_classes):
            raise ValueError(
                f"Split {split!r} of {spec.name!r} has labels outside [0, {spec.num_classes})"
            )
    if len(spec.train) == 0:
        raise ValueError(f"Dataset {spec.name!r} has an empty training split")


def load_path(path: str | Path) -> Path:
    resolved = Path(path).expanduser()
    if not resolved.exists():
        raise FileNotFoundError(f"Dataset file not found: {resolved}")
    return resolved


def subset(batch: Batch, indices: np.ndarray) -> Batch:
    return Batch(inputs=batch.inputs[indices], labels=batch.labels[indices])


__all__ = [
    "DatasetSpec",
    "available_datasets",
    "get_dataset",
    "load_path",
    "register_dataset",
    "subset",
]

"""Deterministic in-memory digit-like fixture."""

from __future__ import annotations

import numpy as np

from .registry import DatasetSpec, register_dataset
from .utils import build_dataset


def _make_dataset(
    n_samples: int,
    input_size: int,
    num_classes: int,
    noise: float,
    seed: int,
) -> tuple[np.ndarray, np.ndarray]:
    rng = np.random.default_rng(seed)
    # One sparse binary "stroke" prototype per class, scaled to pixel intensities.
    prototypes = (rng.random((num_classes, input_size)) < 0.3).astype(np.float64) * 255.0
    labels = np.arange(n_samples, dtype=np.int64) % num_classes
    rng.shuffle(labels)
    jitter = noise * 255.0 * rng.standard_normal((n_samples, input_size))
    features = np.clip(np.rint(prototypes[labels] + jitter), 0, 255).astype(np.int64)
    return features, labels


@register_dataset("synthetic_digits")
def load_synthetic_digits(
    *,
    n_samples: int = 200,
    input_size: int = 16,
    num_classes: int = 10,
    noise: float = 0.1,
    test_split: float = 0.2,
    seed: int = 0,
    shuffle: bool = True,
    **_: object,
) -> DatasetSpec:
    """Build a small labelled dataset of noisy class prototypes."""

    if n_samples < 1:
        raise ValueError(f"n_samples must be >= 1, got {n_samples}")
    features, labels = _make_dataset(
        n_samples=n_samples,
        input_size=input_size,
        num_classes=num_classes,
        noise=noise,
        seed=seed,
    )
    provenance = {
        "source": "synthetic",
        "n_samples": n_samples,
        "input_size": input_size,
        "noise": noise,
    }
    return build_dataset(
        "synthetic_digits",
        features,
        labels,
        num_classes=num_classes,
        test_split=test_split,
        seed=seed,
        shuffle=shuffle,
        provenance=provenance,
    )


__all__ = ["load_synthetic_digits"]

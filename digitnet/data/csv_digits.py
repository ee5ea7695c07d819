"""Digit CSV loader: one header line, then ``label,pixel_1,...,pixel_n`` rows."""

from __future__ import annotations

from pathlib import Path

import numpy as np
import pandas as pd

from ..core.types import InvalidInputError
from .registry import DatasetSpec, load_path, register_dataset
from .utils import build_dataset

DEFAULT_CSV = "mnist_train.csv"


def read_digits_csv(path: str | Path, *, max_items: int | None = None) -> tuple[np.ndarray, np.ndarray]:
    """Parse ``path`` into ``(features, labels)`` integer arrays.

    The first line is a header and is skipped. The first column of each row is
    the label, the remaining columns are the features.
    """

    resolved = load_path(path)
    try:
        frame = pd.read_csv(resolved, header=0, nrows=max_items)
    except (pd.errors.ParserError, pd.errors.EmptyDataError) as exc:
        raise InvalidInputError(f"Malformed digit CSV {resolved}: {exc}") from exc
    if frame.shape[1] < 2:
        raise InvalidInputError(
            f"Digit CSV {resolved} needs a label column and at least one feature"
        )
    if frame.isnull().to_numpy().any():
        raise InvalidInputError(f"Digit CSV {resolved} has missing values")
    try:
        values = frame.to_numpy(dtype=np.float64)
    except ValueError as exc:
        raise InvalidInputError(f"Digit CSV {resolved} has non-numeric values") from exc
    if not np.all(np.mod(values, 1) == 0):
        raise InvalidInputError(f"Digit CSV {resolved} must contain only integers")
    values = values.astype(np.int64)
    labels = values[:, 0]
    features = values[:, 1:]
    if labels.size and labels.min() < 0:
        raise InvalidInputError(f"Digit CSV {resolved} has negative labels")
    return features, labels


@register_dataset("digits_csv")
def load_digits_csv(
    *,
    csv_path: str | Path = DEFAULT_CSV,
    num_classes: int | None = None,
    test_split: float = 0.0,
    seed: int = 0,
    shuffle: bool = False,
    max_items: int | None = None,
    **_: object,
) -> DatasetSpec:
    """Load a digit CSV file.

    ``num_classes`` defaults to the largest label plus one. With the default
    ``test_split=0`` every row is a training example, as the digit predictor
    evaluates on its own training set.
    """

    features, labels = read_digits_csv(csv_path, max_items=max_items)
    provenance = {
        "source": "csv",
        "path": str(Path(csv_path)),
        "rows": int(labels.shape[0]),
        "max_items": max_items,
    }
    return build_dataset(
        "digits_csv",
        features,
        labels,
        num_classes=num_classes,
        test_split=test_split,
        seed=seed,
        shuffle=shuffle,
        provenance=provenance,
    )


__all__ = ["load_digits_csv", "read_digits_csv"]

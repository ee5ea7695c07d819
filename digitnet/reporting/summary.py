"""Deterministic run summarisation."""

from __future__ import annotations

import json
from pathlib import Path
from typing import Iterable, Mapping

import numpy as np

_SKIP_KEYS = {"iteration", "seed"}


def _collect(records: Iterable[Mapping[str, object]]) -> Mapping[str, list[float]]:
    metrics: dict[str, list[float]] = {}
    for record in records:
        for key, value in record.items():
            if key in _SKIP_KEYS or isinstance(value, bool):
                continue
            if isinstance(value, (int, float)):
                metrics.setdefault(key, []).append(float(value))
    return metrics


def summarise(records: list[Mapping[str, object]]) -> Mapping[str, object]:
    """Return min/max/mean/last for every numeric metric in ``records``."""

    summary_metrics: dict[str, Mapping[str, float]] = {}
    for name, values in _collect(records).items():
        arr = np.asarray(values, dtype=np.float64)
        summary_metrics[name] = {
            "min": float(np.min(arr)),
            "max": float(np.max(arr)),
            "mean": float(np.mean(arr)),
            "last": float(arr[-1]),
        }
    last_iteration = int(records[-1].get("iteration", 0)) if records else 0
    return {
        "version": 1,
        "records": len(records),
        "last_iteration": last_iteration,
        "metrics": summary_metrics,
    }


def write_summary(metrics_jsonl: str | Path, out_summary_json: str | Path) -> str:
    """Summarise ``metrics_jsonl`` into ``out_summary_json``."""

    metrics_path = Path(metrics_jsonl)
    out_path = Path(out_summary_json)
    out_path.parent.mkdir(parents=True, exist_ok=True)

    records: list[Mapping[str, object]] = []
    if metrics_path.exists():
        for line in metrics_path.read_text().splitlines():
            line = line.strip()
            if line:
                records.append(json.loads(line))

    out_path.write_text(json.dumps(summarise(records), sort_keys=True, indent=2))
    return str(out_path)


__all__ = ["summarise", "write_summary"]

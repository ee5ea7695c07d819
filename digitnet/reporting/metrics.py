"""Metric sinks and progress output for training runs."""

from __future__ import annotations

import csv
import json
import subprocess
import sys
from pathlib import Path
from typing import Mapping, TextIO


def _git_sha() -> str:
    try:
        out = subprocess.check_output(["git", "rev-parse", "HEAD"], stderr=subprocess.DEVNULL)
        return out.decode().strip()
    except Exception:  # pragma: no cover - git may be unavailable in tests
        return "unknown"


def _numeric(metrics: Mapping[str, float]) -> dict[str, float]:
    return {k: float(v) for k, v in metrics.items() if isinstance(v, (int, float))}


class JsonlSink:
    """Append one JSON record per evaluated training iteration."""

    def __init__(
        self,
        path: str | Path,
        *,
        split: str = "train",
        seed: int | None = None,
        sha: str | None = None,
    ) -> None:
        self.path = Path(path)
        self.path.parent.mkdir(parents=True, exist_ok=True)
        self.path.write_text("")
        self.split = split
        self.seed = seed
        self.sha = sha or _git_sha()

    def on_iteration(self, iteration: int, total: int, metrics: Mapping[str, float]) -> None:
        if not metrics:
            return
        record = {
            "iteration": int(iteration),
            "split": self.split,
            "seed": self.seed,
            "sha": self.sha,
        }
        record.update(_numeric(metrics))
        with self.path.open("a", encoding="utf-8") as handle:
            handle.write(json.dumps(record) + "\n")

    __call__ = on_iteration


class CsvSink:
    """Write evaluated iterations to CSV with a stable column order."""

    def __init__(self, path: str | Path, *, split: str = "train") -> None:
        self.path = Path(path)
        self.path.parent.mkdir(parents=True, exist_ok=True)
        self.path.write_text("")
        self.split = split

    def on_iteration(self, iteration: int, total: int, metrics: Mapping[str, float]) -> None:
        if not metrics:
            return
        row = {"iteration": int(iteration), "split": self.split}
        row.update(_numeric(metrics))
        with self.path.open("a", encoding="utf-8", newline="") as handle:
            writer = csv.DictWriter(handle, fieldnames=sorted(row.keys()))
            if handle.tell() == 0:
                writer.writeheader()
            writer.writerow(row)

    __call__ = on_iteration


class ConsoleProgress:
    """Print ``Training iteration i of n`` for every iteration."""

    def __init__(self, stream: TextIO | None = None) -> None:
        self.stream = stream

    def on_iteration(self, iteration: int, total: int, metrics: Mapping[str, float]) -> None:
        line = f"Training iteration {iteration} of {total}"
        if metrics:
            extras = "  ".join(f"{k}={float(v):.4f}" for k, v in sorted(metrics.items()))
            line = f"{line}  {extras}"
        print(line, file=self.stream or sys.stdout)

    __call__ = on_iteration


__all__ = ["ConsoleProgress", "CsvSink", "JsonlSink"]

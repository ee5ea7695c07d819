"""Pipeline assembly: dataset -> network -> trainer -> run artifacts."""

from __future__ import annotations

import json
import time
from copy import deepcopy
from pathlib import Path
from typing import Dict, List, Mapping, Sequence

from ..core.network import DEFAULT_LEARNING_RATE, DEFAULT_REGULARIZATION_RATE, NeuralNetwork
from ..core.types import RunResult
from ..data import registry
from ..reporting.artifacts import write_manifest
from ..reporting.metrics import ConsoleProgress, CsvSink, JsonlSink
from ..reporting.plots import PlotAdapter
from ..reporting.summary import write_summary
from .trainer import Trainer

_PRESETS: Dict[str, Mapping[str, object]] = {
    "digits-csv": {
        "data": {
            "name": "digits_csv",
            "options": {"csv_path": "mnist_train.csv", "test_split": 0.0},
        },
        "model": {"hidden": [30]},
        "train": {
            "iterations": 500,
            "learning_rate": 0.1,
            "regularization_rate": 0.3,
            "seed": 0,
            "eval_every": 10,
            "run_dir": "runs/digits-csv",
            "enable_plots": False,
            "progress": True,
        },
    },
    "synthetic-digits": {
        "data": {
            "name": "synthetic_digits",
            "options": {"n_samples": 200, "input_size": 16, "num_classes": 10, "seed": 0},
        },
        "model": {"hidden": [30]},
        "train": {
            "iterations": 200,
            "learning_rate": 0.1,
            "regularization_rate": 0.3,
            "seed": 0,
            "eval_every": 10,
            "run_dir": "runs/synthetic-digits",
            "enable_plots": False,
            "progress": True,
        },
    },
    "synthetic-min": {
        "data": {
            "name": "synthetic_digits",
            "options": {"n_samples": 40, "input_size": 8, "num_classes": 4, "seed": 0},
        },
        "model": {"hidden": [6]},
        "train": {
            "iterations": 20,
            "learning_rate": 0.1,
            "regularization_rate": 0.3,
            "seed": 7,
            "eval_every": 5,
            "run_dir": "runs/synthetic-min",
            "enable_plots": False,
            "progress": False,
        },
    },
}

_REQUIRED_SECTIONS = {"data", "model", "train"}


def presets() -> Mapping[str, Mapping[str, object]]:
    return {name: deepcopy(cfg) for name, cfg in _PRESETS.items()}


def load_preset(name: str) -> Mapping[str, object]:
    try:
        return deepcopy(_PRESETS[name])
    except KeyError as exc:
        available = ", ".join(sorted(_PRESETS))
        raise KeyError(f"Unknown preset {name!r}. Available presets: {available}") from exc


def load_config_file(path: str | Path) -> Mapping[str, object]:
    """Read a JSON or YAML config mapping from ``path``."""

    path = Path(path)
    text = path.read_text()
    suffix = path.suffix.lower()
    if suffix in {".yaml", ".yml"}:
        try:
            import yaml  # type: ignore
        except ImportError as exc:  # pragma: no cover - optional dependency
            raise RuntimeError("PyYAML is required to load YAML configs") from exc
        data = yaml.safe_load(text) or {}
    elif suffix == ".json":
        data = json.loads(text or "{}")
    else:
        raise ValueError(f"Unsupported config file type: {path.suffix}")
    if not isinstance(data, Mapping):
        raise TypeError(f"Config {path.name} must decode to a mapping")
    return data


def merge_config(base: Mapping[str, object], override: Mapping[str, object]) -> dict:
    """Recursively merge ``override`` into a copy of ``base``."""

    merged = dict(deepcopy(base))
    for key, value in override.items():
        if isinstance(value, Mapping) and isinstance(merged.get(key), Mapping):
            merged[key] = merge_config(merged[key], value)  # type: ignore[arg-type]
        else:
            merged[key] = deepcopy(value)
    return merged


def run_pipeline(config: Mapping[str, object]) -> RunResult:
    missing = _REQUIRED_SECTIONS - set(config)
    if missing:
        raise KeyError(f"Config is missing required sections: {', '.join(sorted(missing))}")

    data_cfg = dict(config["data"])  # type: ignore[arg-type]
    model_cfg = dict(config["model"])  # type: ignore[arg-type]
    train_cfg = dict(config["train"])  # type: ignore[arg-type]

    dataset = registry.get_dataset(str(data_cfg["name"]), **dict(data_cfg.get("options", {})))

    input_size = int(model_cfg.get("input_size", dataset.input_size))
    num_classes = int(model_cfg.get("num_classes", dataset.num_classes))
    if input_size != dataset.input_size:
        raise ValueError(
            f"Configured input_size={input_size} but dataset has {dataset.input_size} features"
        )
    if num_classes < dataset.num_classes:
        raise ValueError(
            f"Configured num_classes={num_classes} but dataset has {dataset.num_classes} classes"
        )
    hidden = _build_hidden(model_cfg)

    iterations = int(train_cfg.get("iterations", 500))
    seed = train_cfg.get("seed")
    seed = int(seed) if seed is not None else None
    eval_every = int(train_cfg.get("eval_every", 1))

    network = NeuralNetwork(
        input_size,
        hidden,
        num_classes,
        learning_rate=float(train_cfg.get("learning_rate", DEFAULT_LEARNING_RATE)),
        regularization_rate=float(
            train_cfg.get("regularization_rate", DEFAULT_REGULARIZATION_RATE)
        ),
        seed=seed,
    )

    run_dir = _resolve_run_dir(train_cfg, dataset.name)
    run_dir.mkdir(parents=True, exist_ok=True)

    _print_startup_summary(
        dataset_name=dataset.name,
        splits=dataset.splits,
        layers=network.topology.layer_sizes,
        param_count=network.parameter_count(),
        iterations=iterations,
        learning_rate=network.learning_rate,
        regularization_rate=network.regularization_rate,
    )

    jsonl = JsonlSink(run_dir / "metrics.jsonl", split="train", seed=seed)
    csv_sink = CsvSink(run_dir / "metrics.csv", split="train")
    plots = PlotAdapter(run_dir, enable_plots=bool(train_cfg.get("enable_plots", False)))
    callbacks: List[object] = [jsonl, csv_sink, plots]
    if bool(train_cfg.get("progress", True)):
        callbacks.append(ConsoleProgress())

    trainer = Trainer(network, callbacks=callbacks, eval_every=eval_every)
    trainer.run(dataset.train, iterations)

    train_accuracy = network.accuracy(dataset.train)
    test_accuracy = network.accuracy(dataset.test) if dataset.test is not None else None
    final = {"train_accuracy": train_accuracy, "test_accuracy": test_accuracy}
    (run_dir / "metrics_final.json").write_text(json.dumps(final, indent=2))
    print(f"Accuracy: {train_accuracy}")
    if test_accuracy is not None:
        print(f"Test accuracy: {test_accuracy}")

    safe_config = _safe_config(config, hidden)
    manifest = write_manifest(
        run_dir / "manifest.json",
        config=safe_config,
        dataset_provenance=dataset.provenance,
        topology={
            "input_size": network.topology.input_size,
            "hidden_layer_sizes": list(network.topology.hidden_layer_sizes),
            "num_classes": network.topology.num_classes,
        },
    )
    summary_path = write_summary(jsonl.path, run_dir / "summary.json")
    (run_dir / "config.json").write_text(json.dumps(safe_config, indent=2))

    return RunResult(
        iterations=iterations,
        metrics_path=str(jsonl.path),
        manifest_path=manifest,
        summary_path=summary_path,
        train_accuracy=train_accuracy,
        test_accuracy=test_accuracy,
    )


def _build_hidden(model_cfg: Mapping[str, object]) -> List[int]:
    if "hidden" not in model_cfg:
        raise KeyError("model.hidden must list the hidden layer sizes")
    return [int(h) for h in model_cfg["hidden"]]  # type: ignore[union-attr]


def _resolve_run_dir(train_cfg: Mapping[str, object], dataset: str) -> Path:
    if train_cfg.get("run_dir"):
        return Path(str(train_cfg["run_dir"]))
    timestamp = time.strftime("%Y%m%d-%H%M%S")
    return Path("runs") / timestamp / dataset


def _safe_config(config: Mapping[str, object], hidden: Sequence[int]) -> Mapping[str, object]:
    copied = json.loads(json.dumps(config, default=str))
    copied.setdefault("model", {})["hidden"] = list(hidden)
    return copied


def _print_startup_summary(
    *,
    dataset_name: str,
    splits: Mapping[str, int],
    layers: Sequence[int],
    param_count: int,
    iterations: int,
    learning_rate: float,
    regularization_rate: float,
) -> None:
    print("=== digitnet run ===")
    print(f"Dataset        : {dataset_name} (train={splits['train']}, test={splits['test']})")
    print(f"Layers         : {list(layers)}")
    print(f"Parameters     : {param_count}")
    print(f"Iterations     : {iterations}")
    print(f"Learning rate  : {learning_rate}")
    print(f"Regularization : {regularization_rate}")
    print("====================")


__all__ = ["load_config_file", "load_preset", "merge_config", "presets", "run_pipeline"]

"""Command line entry point for digitnet training runs."""

from __future__ import annotations

import argparse
import json
from pathlib import Path
from typing import Iterable

from digitnet.training import pipelines


def _format_result(result) -> str:
    payload = {
        "iterations": result.iterations,
        "train_accuracy": result.train_accuracy,
        "test_accuracy": result.test_accuracy,
        "metrics": result.metrics_path,
        "manifest": result.manifest_path,
        "summary": result.summary_path,
    }
    return json.dumps(payload, sort_keys=True)


def _hidden_sizes(text: str) -> list[int]:
    text = text.strip()
    if not text:
        return []
    try:
        sizes = [int(part) for part in text.split(",") if part.strip()]
    except ValueError as exc:
        raise argparse.ArgumentTypeError(
            f"hidden sizes must be comma separated integers, got {text!r}"
        ) from exc
    if any(size < 1 for size in sizes):
        raise argparse.ArgumentTypeError("hidden sizes must be positive")
    return sizes


def parse_args(argv: Iterable[str] | None = None) -> argparse.Namespace:
    parser = argparse.ArgumentParser(description=__doc__)
    parser.add_argument(
        "--preset",
        choices=sorted(pipelines.presets().keys()),
        default="digits-csv",
        help="Preset configuration to execute",
    )
    parser.add_argument("--config", type=Path, help="Optional JSON/YAML config override")
    parser.add_argument("--csv-path", help="Digit CSV file (label first, header line)")
    parser.add_argument(
        "--hidden",
        type=_hidden_sizes,
        help="Comma separated hidden layer sizes, e.g. 30 or 64,32 ('' for none)",
    )
    parser.add_argument("--iterations", type=int, help="Number of training iterations")
    parser.add_argument("--learning-rate", type=float, help="Gradient descent step size")
    parser.add_argument(
        "--regularization-rate", type=float, help="L2 weight decay strength"
    )
    parser.add_argument("--test-split", type=float, help="Held-out test ratio")
    parser.add_argument("--seed", type=int, help="Seed for weights and dataset shuffling")
    parser.add_argument("--run-dir", help="Directory for run artifacts")
    parser.add_argument(
        "--enable-plots", action="store_true", help="Write loss.png to the run directory"
    )
    parser.add_argument(
        "--quiet", action="store_true", help="Suppress per-iteration progress output"
    )
    parser.add_argument(
        "--list-presets", action="store_true", help="List available presets and exit"
    )
    parser.add_argument(
        "--dump-config", type=Path, help="Dump the resolved config to a JSON file"
    )
    return parser.parse_args(argv)


def resolve_config(args: argparse.Namespace) -> dict:
    config = dict(pipelines.load_preset(args.preset))

    if args.config:
        override = pipelines.load_config_file(args.config)
        if {"data", "model", "train"} <= set(override.keys()):
            config = json.loads(json.dumps(override))
        else:
            config = pipelines.merge_config(config, override)

    data_opts = config.setdefault("data", {}).setdefault("options", {})
    model_cfg = config.setdefault("model", {})
    train_cfg = config.setdefault("train", {})

    if args.csv_path:
        config["data"]["name"] = "digits_csv"
        data_opts["csv_path"] = args.csv_path
    if args.test_split is not None:
        data_opts["test_split"] = float(args.test_split)
    if args.seed is not None:
        data_opts["seed"] = int(args.seed)
        train_cfg["seed"] = int(args.seed)
    if args.hidden is not None:
        model_cfg["hidden"] = list(args.hidden)
    if args.iterations is not None:
        train_cfg["iterations"] = int(args.iterations)
    if args.learning_rate is not None:
        train_cfg["learning_rate"] = float(args.learning_rate)
    if args.regularization_rate is not None:
        train_cfg["regularization_rate"] = float(args.regularization_rate)
    if args.run_dir:
        train_cfg["run_dir"] = args.run_dir
    if args.enable_plots:
        train_cfg["enable_plots"] = True
    if args.quiet:
        train_cfg["progress"] = False
    return config


def main(argv: Iterable[str] | None = None) -> None:
    args = parse_args(argv)

    if args.list_presets:
        for name in sorted(pipelines.presets().keys()):
            print(name)
        raise SystemExit(0)

    config = resolve_config(args)

    if args.dump_config:
        args.dump_config.parent.mkdir(parents=True, exist_ok=True)
        args.dump_config.write_text(json.dumps(config, indent=2))

    result = pipelines.run_pipeline(config)
    print(_format_result(result))


if __name__ == "__main__":
    main()

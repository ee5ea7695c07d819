"""Headless-safe plotting of training curves."""

from __future__ import annotations

from pathlib import Path
from typing import List, Mapping, Tuple


class PlotAdapter:
    """Collect evaluated iterations and write ``loss.png`` on train end."""

    def __init__(self, run_dir: str | Path, enable_plots: bool = False):
        self.enable_plots = enable_plots
        self.run_dir = Path(run_dir)
        self._history: List[Tuple[int, float, float]] = []
        if self.enable_plots:
            self.run_dir.mkdir(parents=True, exist_ok=True)

    @property
    def path(self) -> Path:
        return self.run_dir / "loss.png"

    def on_iteration(self, iteration: int, total: int, metrics: Mapping[str, float]) -> None:
        if not self.enable_plots or "loss" not in metrics:
            return
        self._history.append(
            (iteration, float(metrics["loss"]), float(metrics.get("accuracy", 0.0)))
        )

    def on_train_end(self, metrics: Mapping[str, float]) -> None:
        self.close()

    def close(self) -> None:
        if not self.enable_plots or not self._history:
            return
        import matplotlib

        matplotlib.use("Agg", force=True)
        import matplotlib.pyplot as plt  # imported lazily for headless safety

        iterations, losses, accuracies = zip(*self._history)
        fig, (loss_ax, acc_ax) = plt.subplots(2, 1, sharex=True)
        loss_ax.plot(iterations, losses)
        loss_ax.set_ylabel("Loss")
        loss_ax.set_title("Training Curve")
        acc_ax.plot(iterations, accuracies, color="tab:green")
        acc_ax.set_ylabel("Accuracy")
        acc_ax.set_xlabel("Iteration")
        acc_ax.set_ylim(0.0, 1.0)
        fig.savefig(self.path)
        plt.close(fig)


__all__ = ["PlotAdapter"]

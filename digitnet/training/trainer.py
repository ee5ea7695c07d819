"""Fixed-iteration training loop for digitnet networks."""

from __future__ import annotations

from typing import Iterable, Mapping, Sequence

from ..core.network import Examples, NeuralNetwork


class Trainer:
    """Drive full-batch backpropagation for a fixed number of iterations.

    Callbacks may implement ``on_iteration(iteration, total, metrics)``,
    ``on_train_begin(total)`` and ``on_train_end(metrics)``; plain callables
    are invoked like ``on_iteration``. ``metrics`` is empty on iterations that
    fall outside the ``eval_every`` cadence.
    """

    def __init__(
        self,
        network: NeuralNetwork,
        callbacks: Iterable[object] | None = None,
        *,
        eval_every: int = 0,
    ) -> None:
        if eval_every < 0:
            raise ValueError(f"eval_every must be >= 0, got {eval_every}")
        self.network = network
        self.callbacks = list(callbacks or [])
        self.eval_every = eval_every
        self.history: list[tuple[int, Mapping[str, float]]] = []

    def run(self, examples: Examples, iterations: int) -> Mapping[str, float]:
        """Train on ``examples`` ``iterations`` times and return the last metrics."""

        if iterations < 0:
            raise ValueError(f"iterations must be >= 0, got {iterations}")
        batch = self.network.as_batch(examples)
        self._emit("on_train_begin", iterations)

        last: Mapping[str, float] = {}
        for iteration in range(1, iterations + 1):
            self.network.train_one_iteration(batch)
            metrics: Mapping[str, float] = {}
            if self._should_eval(iteration, iterations):
                metrics = self.network.evaluate(batch)
                self.history.append((iteration, dict(metrics)))
                last = metrics
            self._emit_iteration(iteration, iterations, metrics)

        self._emit("on_train_end", last)
        return last

    # ------------------------------------------------------------------
    # Internal helpers

    def _should_eval(self, iteration: int, total: int) -> bool:
        if self.eval_every <= 0:
            return False
        return iteration % self.eval_every == 0 or iteration == total

    def _emit_iteration(
        self, iteration: int, total: int, metrics: Mapping[str, float]
    ) -> None:
        for callback in self.callbacks:
            if hasattr(callback, "on_iteration"):
                callback.on_iteration(iteration, total, metrics)  # type: ignore[attr-defined]
            elif callable(callback):
                callback(iteration, total, metrics)

    def _emit(self, hook: str, *args: object) -> None:
        for callback in self.callbacks:
            handler = getattr(callback, hook, None)
            if handler is not None:
                handler(*args)


def train(
    network: NeuralNetwork,
    examples: Examples,
    iterations: int,
    *,
    callbacks: Sequence[object] | None = None,
    eval_every: int = 0,
) -> Mapping[str, float]:
    """Functional wrapper around :class:`Trainer`."""

    trainer = Trainer(network, callbacks=callbacks, eval_every=eval_every)
    return trainer.run(examples, iterations)


__all__ = ["Trainer", "train"]

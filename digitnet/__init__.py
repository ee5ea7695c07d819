"""digitnet public API."""

from .core import activations  # noqa: F401
from .core import types  # noqa: F401
from .core.network import NeuralNetwork
from .core.types import Batch, Example, InvalidInputError, RunResult, Topology
from .core.weights import generate_random_weights
from .training.pipelines import load_preset, presets, run_pipeline
from .training.trainer import Trainer

__all__ = [
    "Batch",
    "Example",
    "InvalidInputError",
    "NeuralNetwork",
    "RunResult",
    "Topology",
    "Trainer",
    "activations",
    "generate_random_weights",
    "load_preset",
    "presets",
    "run_pipeline",
    "types",
]

"""Training loop and pipeline assembly."""

from .trainer import Trainer, train

__all__ = ["Trainer", "train"]

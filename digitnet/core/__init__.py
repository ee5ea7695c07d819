"""Core numerical primitives for digitnet."""

from . import activations, network, types, weights

__all__ = ["activations", "network", "types", "weights"]

from __future__ import annotations

import math

import numpy as np
import pytest

from digitnet.core.network import NeuralNetwork
from digitnet.core.types import Batch, Example, InvalidInputError, Topology


def _reference_forward(topology: Topology, flat, features):
    """Index-level forward pass over flat weights with trailing bias entries."""

    hidden = topology.hidden_layer_sizes
    layers = []
    for layer in range(len(hidden) + 1):
        on_output = layer == len(hidden)
        prev_size = topology.input_size if layer == 0 else hidden[layer - 1] + 1
        cur_size = topology.num_classes if on_output else hidden[layer]
        previous = features if layer == 0 else layers[layer - 1]
        acts = []
        for i in range(cur_size):
            total = 0.0
            for j in range(prev_size):
                total += flat[layer][i * prev_size + j] * previous[j]
            acts.append(1.0 / (1.0 + math.exp(-total)))
        if not on_output:
            acts.append(1.0)
        layers.append(acts)
    return layers


def _reference_iteration(topology: Topology, flat, examples, lr, reg):
    hidden = topology.hidden_layer_sizes
    n_layers = len(hidden) + 1
    num_classes = topology.num_classes
    grads = [[0.0] * len(w) for w in flat]

    for example in examples:
        acts = _reference_forward(topology, flat, example.features)
        deltas = [None] * n_layers
        deltas[-1] = [
            acts[-1][i] - (1.0 if i == example.label else 0.0) for i in range(num_classes)
        ]
        for layer in reversed(range(n_layers - 1)):
            cur = hidden[layer]
            next_size = num_classes if layer + 1 == n_layers - 1 else hidden[layer + 1]
            deltas[layer] = [
                sum(
                    flat[layer + 1][k * (cur + 1) + i]
                    * deltas[layer + 1][k]
                    * acts[layer + 1][k]
                    * (1.0 - acts[layer + 1][k])
                    for k in range(next_size)
                )
                for i in range(cur)
            ]
        for layer in range(n_layers):
            prev_size = topology.input_size if layer == 0 else hidden[layer - 1] + 1
            previous = example.features if layer == 0 else acts[layer - 1]
            for i, delta in enumerate(deltas[layer]):
                for j in range(prev_size):
                    grads[layer][i * prev_size + j] += delta * previous[j]

    n = len(examples)
    return [
        [w[idx] * (1 - lr * reg / n) - grads[layer][idx] / n * lr for idx in range(len(w))]
        for layer, w in enumerate(flat)
    ]


def _examples():
    return [
        Example(label=0, features=(0, 1, 2)),
        Example(label=2, features=(3, 0, 1)),
        Example(label=1, features=(1, 1, 1)),
        Example(label=2, features=(2, 3, 0)),
        Example(label=0, features=(0, 0, 3)),
    ]


@pytest.mark.parametrize("hidden", [[], [4], [4, 2]])
def test_iteration_matches_index_level_reference(hidden):
    network = NeuralNetwork(3, hidden, 3, learning_rate=0.1, regularization_rate=0.3, seed=4)
    examples = _examples()
    expected = _reference_iteration(
        network.topology, network.flat_weights(), examples, lr=0.1, reg=0.3
    )

    network.train_one_iteration(examples)

    for actual, reference in zip(network.flat_weights(), expected):
        np.testing.assert_allclose(actual, reference, rtol=1e-10, atol=1e-12)


def test_several_iterations_match_reference():
    network = NeuralNetwork(3, [3], 3, learning_rate=0.5, regularization_rate=0.1, seed=9)
    examples = _examples()
    flat = [list(w) for w in network.flat_weights()]
    for _ in range(3):
        flat = _reference_iteration(network.topology, flat, examples, lr=0.5, reg=0.1)
        network.train_one_iteration(examples)
    for actual, reference in zip(network.flat_weights(), flat):
        np.testing.assert_allclose(actual, reference, rtol=1e-9, atol=1e-12)


def test_gradients_are_invariant_to_example_order():
    network = NeuralNetwork(3, [5, 4], 3, seed=1)
    examples = _examples()
    forward = network.compute_gradients(examples)
    backward = network.compute_gradients(list(reversed(examples)))
    shuffled = network.compute_gradients([examples[i] for i in (2, 4, 0, 3, 1)])
    for a, b, c in zip(forward, backward, shuffled):
        np.testing.assert_allclose(a, b, rtol=1e-12, atol=1e-12)
        np.testing.assert_allclose(a, c, rtol=1e-12, atol=1e-12)


def test_gradients_are_sum_of_single_example_gradients():
    network = NeuralNetwork(3, [4], 3, seed=2)
    examples = _examples()
    total = network.compute_gradients(examples)
    parts = [network.compute_gradients([example]) for example in examples]
    for layer, grad in enumerate(total):
        np.testing.assert_allclose(grad, sum(part[layer] for part in parts), atol=1e-12)


def test_gradient_shapes_match_weights():
    network = NeuralNetwork(3, [4, 2], 3, seed=0)
    grads = network.compute_gradients(_examples())
    assert [g.shape for g in grads] == [w.shape for w in network.weights]


def test_zero_learning_rate_leaves_weights_unchanged():
    network = NeuralNetwork(3, [4], 3, learning_rate=0.0, regularization_rate=0.3, seed=6)
    before = [w.copy() for w in network.weights]
    network.train(_examples(), 5, callbacks=[])
    for a, b in zip(before, network.weights):
        np.testing.assert_array_equal(a, b)


def test_weight_decay_shrinks_weights_without_error_signal():
    # A single zero-hidden-layer example with zero features has zero gradient,
    # so only the decay term acts on the weights.
    network = NeuralNetwork(2, [], 2, learning_rate=0.1, regularization_rate=0.3, seed=3)
    before = network.weights[0].copy()
    network.train_one_iteration([Example(label=0, features=(0, 0))])
    np.testing.assert_allclose(network.weights[0], before * (1 - 0.1 * 0.3 / 1))


def test_shapes_never_change_during_training():
    network = NeuralNetwork(3, [4, 2], 3, seed=0)
    shapes = [w.shape for w in network.weights]
    network.train(_examples(), 4, callbacks=[])
    assert [w.shape for w in network.weights] == shapes


def test_accepts_batches_and_label_feature_tuples():
    a = NeuralNetwork(3, [4], 3, seed=8)
    b = NeuralNetwork(3, [4], 3, seed=8)
    examples = _examples()
    a.train_one_iteration(Batch.from_examples(examples))
    b.train_one_iteration([(e.label, e.features) for e in examples])
    for wa, wb in zip(a.weights, b.weights):
        np.testing.assert_array_equal(wa, wb)


@pytest.mark.parametrize(
    "examples",
    [
        [],
        [Example(label=0, features=(1, 2))],
        [Example(label=3, features=(1, 2, 3))],
        [Example(label=-1, features=(1, 2, 3))],
        [Example(label=0, features=(1, 2, 3)), Example(label=1, features=(1, 2))],
        [(1.5, (1, 2, 3))],
        [(1, (1, 0.9, 3))],
        Batch(inputs=np.array([[1.0, 0.9, 3.0]]), labels=np.array([1])),
    ],
)
def test_invalid_batches_are_rejected(examples):
    network = NeuralNetwork(3, [2], 3, seed=0)
    before = [w.copy() for w in network.weights]
    with pytest.raises(InvalidInputError):
        network.train_one_iteration(examples)
    for a, b in zip(before, network.weights):
        np.testing.assert_array_equal(a, b)


@pytest.mark.parametrize("label, features", [(1.5, (1, 2)), ("x", (1, 2)), (1, (0.9, 2))])
def test_examples_reject_non_integer_values(label, features):
    with pytest.raises(InvalidInputError):
        Example(label=label, features=features)


def test_integral_floats_are_accepted_as_examples():
    example = Example(label=1.0, features=(np.float64(2.0), np.int64(3)))
    assert example == Example(label=1, features=(2, 3))


def test_fractional_features_rejected_on_every_entry_point():
    network = NeuralNetwork(2, [], 2, seed=0)
    network.set_weights([np.array([[0.0, 0.0], [1.0, 0.0]])])
    with pytest.raises(InvalidInputError):
        network.accuracy([(1, (0.9, 0.2))])
    with pytest.raises(InvalidInputError):
        network.accuracy(Batch(inputs=np.array([[0.9, 0.2]]), labels=np.array([1])))


def test_negative_hyperparameters_rejected():
    with pytest.raises(ValueError):
        NeuralNetwork(2, [2], 2, learning_rate=-0.1)
    with pytest.raises(ValueError):
        NeuralNetwork(2, [2], 2, regularization_rate=-1.0)

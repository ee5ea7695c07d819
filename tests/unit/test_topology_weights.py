import numpy as np
import pytest

from digitnet.core.types import Topology
from digitnet.core.weights import check_shapes, generate_random_weights, zero_weights


def test_weight_shapes_fold_bias_into_hidden_layers():
    topology = Topology(input_size=784, hidden_layer_sizes=(30,), num_classes=10)
    assert topology.num_weight_layers == 2
    assert topology.weight_shapes() == [(30, 784), (10, 31)]
    assert topology.previous_layer_size(0) == 784
    assert topology.previous_layer_size(1) == 31
    assert topology.parameter_count() == 30 * 784 + 10 * 31


def test_deep_topology_layer_sizes():
    topology = Topology(input_size=4, hidden_layer_sizes=[5, 3], num_classes=2)
    assert topology.hidden_layer_sizes == (5, 3)
    assert topology.layer_sizes == [4, 5, 3, 2]
    assert topology.weight_shapes() == [(5, 4), (3, 6), (2, 4)]
    assert [topology.current_layer_size(k) for k in range(3)] == [5, 3, 2]


def test_zero_hidden_layers_gives_single_weight_layer():
    topology = Topology(input_size=6, hidden_layer_sizes=(), num_classes=3)
    weights = generate_random_weights(topology, seed=0)
    assert len(weights) == 1
    assert weights[0].shape == (3, 6)


@pytest.mark.parametrize(
    "kwargs",
    [
        {"input_size": 0, "hidden_layer_sizes": (3,), "num_classes": 2},
        {"input_size": 2, "hidden_layer_sizes": (3,), "num_classes": 0},
        {"input_size": 2, "hidden_layer_sizes": (3, 0), "num_classes": 2},
    ],
)
def test_invalid_topology_rejected(kwargs):
    with pytest.raises(ValueError):
        Topology(**kwargs)


def test_layer_index_out_of_range():
    topology = Topology(input_size=2, hidden_layer_sizes=(3,), num_classes=2)
    with pytest.raises(IndexError):
        topology.previous_layer_size(2)


def test_random_weights_are_uniform_in_unit_range():
    topology = Topology(input_size=50, hidden_layer_sizes=(40,), num_classes=10)
    weights = generate_random_weights(topology, seed=3)
    values = np.concatenate([w.ravel() for w in weights])
    assert values.min() >= -1.0
    assert values.max() <= 1.0
    # 2410 independent draws should cover most of the interval
    assert values.min() < -0.9
    assert values.max() > 0.9
    assert abs(float(values.mean())) < 0.1


def test_seeded_weights_are_reproducible():
    topology = Topology(input_size=5, hidden_layer_sizes=(4,), num_classes=3)
    first = generate_random_weights(topology, seed=11)
    second = generate_random_weights(topology, seed=11)
    other = generate_random_weights(topology, seed=12)
    for a, b in zip(first, second):
        np.testing.assert_array_equal(a, b)
    assert not np.array_equal(first[0], other[0])


def test_generator_can_be_injected():
    topology = Topology(input_size=3, hidden_layer_sizes=(2,), num_classes=2)
    a = generate_random_weights(topology, np.random.default_rng(5))
    b = generate_random_weights(topology, np.random.default_rng(5))
    np.testing.assert_array_equal(a[1], b[1])


def test_check_shapes_detects_mismatch():
    topology = Topology(input_size=3, hidden_layer_sizes=(2,), num_classes=2)
    check_shapes(topology, zero_weights(topology))
    with pytest.raises(ValueError):
        check_shapes(topology, [np.zeros((2, 3)), np.zeros((2, 2))])
    with pytest.raises(ValueError):
        check_shapes(topology, [np.zeros((2, 3))])

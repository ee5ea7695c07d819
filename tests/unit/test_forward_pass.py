import numpy as np
import pytest

from digitnet.core.activations import sigmoid
from digitnet.core.network import NeuralNetwork
from digitnet.core.types import InvalidInputError
from digitnet.core.weights import zero_weights


@pytest.mark.parametrize("hidden", [[], [3], [4, 2], [5, 5, 5]])
def test_zero_weights_give_half_activations(hidden):
    network = NeuralNetwork(6, hidden, 3, seed=0)
    network.set_weights(zero_weights(network.topology))
    activations = network.predict([0] * 6)
    assert len(activations) == len(hidden) + 1
    for layer, size in zip(activations, [*hidden, 3]):
        assert layer.shape == (size,)
        np.testing.assert_allclose(layer, 0.5)


def test_predict_matches_hand_computation():
    network = NeuralNetwork(2, [2], 1, seed=0)
    w0 = np.array([[0.5, -1.0], [0.25, 0.75]])
    w1 = np.array([[1.0, -2.0, 0.3]])  # last column is the hidden bias
    network.set_weights([w0, w1])
    x = np.array([1.0, 2.0])

    hidden, output = network.predict([1, 2])

    expected_hidden = sigmoid(w0 @ x)
    expected_output = sigmoid(w1[:, :2] @ expected_hidden + w1[:, 2])
    np.testing.assert_allclose(hidden, expected_hidden)
    np.testing.assert_allclose(output, expected_output)


def test_input_layer_has_no_bias_unit():
    network = NeuralNetwork(2, [], 2, seed=0)
    network.set_weights([np.array([[1.0, 1.0], [-1.0, -1.0]])])
    (output,) = network.predict([0, 0])
    np.testing.assert_allclose(output, [0.5, 0.5])


def test_flat_weights_are_row_major():
    network = NeuralNetwork(3, [4], 2, seed=1)
    for layer, (matrix, flat) in enumerate(zip(network.weights, network.flat_weights())):
        rows, cols = network.topology.weight_shapes()[layer]
        assert flat.shape == (rows * cols,)
        for i in range(rows):
            for j in range(cols):
                assert flat[i * cols + j] == matrix[i, j]


def test_activations_lie_in_open_unit_interval():
    network = NeuralNetwork(5, [7, 3], 4, seed=2)
    for layer in network.predict([0, 255, 3, 9, 1]):
        assert np.all(layer >= 0.0)
        assert np.all(layer <= 1.0)


def test_large_inputs_do_not_produce_nan():
    network = NeuralNetwork(2, [2], 2, seed=0)
    network.set_weights([np.full((2, 2), -1.0), np.ones((2, 3))])
    activations = network.predict([1000, 1000])
    assert all(np.all(np.isfinite(layer)) for layer in activations)


def test_classify_returns_output_argmax():
    network = NeuralNetwork(2, [], 3, seed=0)
    network.set_weights([np.array([[0.0, 0.0], [1.0, 0.0], [0.0, 1.0]])])
    assert network.classify([5, 0]) == 1
    assert network.classify([0, 5]) == 2


@pytest.mark.parametrize(
    "features",
    [[1, 2], [1, 2, 3, 4], [[1, 2, 3]], [float("nan"), 1, 2], [1, float("inf"), 2], [0.5, 1, 2]],
)
def test_malformed_features_are_rejected(features):
    network = NeuralNetwork(3, [2], 2, seed=0)
    with pytest.raises(InvalidInputError):
        network.predict(features)

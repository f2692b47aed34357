import unittest
from unittest import mock

import numpy as np

from t2net.builder.layer_builder import build_network
from t2net.core.distribution_unit import DistributionUnit
from t2net.core.exception import (
    ConfigurationError, DimensionMismatch, NumericInstability)
from t2net.core.structures import Connection, Layer, Node, NodeGroup
from t2net.functions.costs import mean_squared_error
from t2net.util.on_sample import collect_errors


def make_single_edge_network(weight=1.0, activation='linear', bias=0.0):
    source = Node('0-0')
    target = Node('1-0')
    source.connect(target, weight)

    return [
        NodeGroup([source], flags=['input']),
        NodeGroup([target], activation=activation, bias=bias,
                  flags=['output']),
    ]


def make_hidden_network(random_state):
    return build_network(
        [Layer(nodes=1),
         Layer(nodes=3, activation='sigmoid', bias=0.1),
         Layer(nodes=2, activation='ReLu', bias=0.0),
         Layer(nodes=1, activation='linear')],
        random_state=random_state, weight_scale=0.5)


def assert_symmetric(test_case, layers):
    for layer in layers:
        for node in layer.collection:
            for connection in node.connected_to:
                mirror = [c for c in connection.node.connected_by
                          if c.node.id == node.id]
                test_case.assertEqual(len(mirror), 1)
                test_case.assertEqual(mirror[0].weight, connection.weight)


class TestDistributionUnit(unittest.TestCase):

    def test_single_edge_zero_error(self):
        layers = make_single_edge_network(weight=1.0)

        unit = DistributionUnit(layers, 'meanSquaredError', batch_size=1,
                                learning_rate=1)
        unit.initialize_input_data([1, 2])
        unit.initialize_target_data([1, 2])

        n_samples = unit.iterate()

        self.assertEqual(n_samples, 2)
        self.assertEqual(unit.errors[0], mean_squared_error(1, 1))
        self.assertEqual(unit.errors, [0.0, 0.0])
        self.assertEqual(layers[-1].error, 0.0)
        self.assertEqual(layers[0].collection[0].connected_to[0].weight, 1.0)
        self.assertEqual(layers[1].collection[0].connected_by[0].weight, 1.0)
        self.assertEqual(unit.learning_rate, 1.0)

    def test_single_edge_weight_update(self):
        layers = make_single_edge_network(weight=0.5)

        unit = DistributionUnit(layers, 'meanSquaredError', batch_size=1,
                                learning_rate=0.1)
        unit.initialize_input_data([2.0])
        unit.initialize_target_data([3.0])
        unit.iterate()

        # output = 1.0, delta = 0.1 * (1 - 3) * 1 * 2 = -0.4
        self.assertAlmostEqual(unit.errors[0], 4.0)
        forward = layers[0].collection[0].connected_to[0]
        backward = layers[1].collection[0].connected_by[0]
        self.assertAlmostEqual(forward.weight, 0.9)
        self.assertEqual(forward.weight, backward.weight)

    def test_bias_and_weighted_sum(self):
        layers = make_single_edge_network(weight=2.0, bias=0.5)

        # Large batch size => no backpropagation in this run
        unit = DistributionUnit(layers, 'meanSquaredError', batch_size=10)
        unit.initialize_input_data([3.0])
        unit.initialize_target_data([0.0])
        unit.iterate()

        output = layers[1].collection[0]
        self.assertEqual(output.weighted_sum, 6.0)
        self.assertEqual(unit.errors[0], 6.5**2)
        self.assertEqual(layers[0].collection[0].connected_to[0].weight, 2.0)

    def test_mismatched_lengths(self):
        layers = make_single_edge_network(weight=0.3)

        unit = DistributionUnit(layers, 'meanSquaredError', batch_size=1)
        unit.initialize_input_data([1, 2, 3])
        unit.initialize_target_data([1, 2])

        with self.assertRaises(DimensionMismatch):
            unit.iterate()

        self.assertEqual(layers[0].collection[0].connected_to[0].weight, 0.3)
        self.assertIsNone(layers[-1].error)

    def test_batch_trigger(self):
        random_state = np.random.RandomState(1234)
        n_samples = 7

        for batch_size in range(1, 9):
            layers = make_hidden_network(random_state)
            unit = DistributionUnit(layers, 'meanSquaredError',
                                    batch_size=batch_size,
                                    learning_rate=0.01,
                                    random_state=random_state)
            unit.initialize_input_data(random_state.rand(n_samples))
            unit.initialize_target_data(random_state.rand(n_samples))

            called_at = []
            backpropagate = unit._backpropagate

            def spy(target):
                # `errors` is appended after backpropagation
                called_at.append(len(unit.errors))
                backpropagate(target)

            with mock.patch.object(unit, '_backpropagate', side_effect=spy):
                unit.iterate()

            expected = [i for i in range(n_samples)
                        if (i + 1) % batch_size == 0]
            self.assertEqual(called_at, expected)

    def test_backpropagation_uses_latest_target(self):
        layers = make_single_edge_network()
        unit = DistributionUnit(layers, 'meanSquaredError', batch_size=2)
        unit.initialize_input_data([1, 2, 3, 4])
        unit.initialize_target_data([10, 20, 30, 40])

        with mock.patch.object(unit, '_backpropagate') as backpropagate:
            unit.iterate()

        self.assertEqual(backpropagate.call_args_list,
                         [mock.call(20.0), mock.call(40.0)])

    def test_connection_symmetry(self):
        random_state = np.random.RandomState(42)
        layers = make_hidden_network(random_state)

        unit = DistributionUnit(layers, 'meanSquaredError', batch_size=2,
                                learning_rate=0.05,
                                random_state=random_state)
        unit.initialize_input_data(random_state.rand(20))
        unit.initialize_target_data(random_state.rand(20))

        assert_symmetric(self, layers)

        def check(i, error):
            assert_symmetric(self, layers)

        unit.iterate(on_sample=[check])
        assert_symmetric(self, layers)

    def test_scratch_reset(self):
        random_state = np.random.RandomState(7)

        for batch_size in (1, 3):
            layers = make_hidden_network(random_state)
            unit = DistributionUnit(layers, 'meanSquaredError',
                                    batch_size=batch_size,
                                    learning_rate=0.05,
                                    random_state=random_state)
            unit.initialize_input_data(random_state.rand(5))
            unit.initialize_target_data(random_state.rand(5))

            values = []

            def record(i, error):
                values.append([node.value for layer in layers
                               for node in layer.collection])

            unit.iterate(on_sample=[record])

            for sample_values in values:
                self.assertTrue(all(v == 0 for v in sample_values))

    def test_forward_determinism(self):
        random_state = np.random.RandomState(3)
        layers = make_hidden_network(random_state)

        unit = DistributionUnit(layers, 'meanSquaredError', batch_size=1)
        unit.initialize_input_data([0.7])
        unit.initialize_target_data([0.2])

        outputs = []
        for _ in range(2):
            unit._clear_values()
            unit._forward(0)
            outputs.append([node.value for node in layers[-1].collection])

        self.assertEqual(outputs[0], outputs[1])

    def test_training_reduces_error(self):
        random_state = np.random.RandomState(1234)
        layers = make_single_edge_network(weight=0.1)

        unit = DistributionUnit(layers, 'meanSquaredError', batch_size=1,
                                learning_rate=0.1,
                                random_state=random_state)

        x = np.linspace(0.1, 1.0, 10)
        unit.initialize_input_data(x)
        unit.initialize_target_data(2 * x)

        unit.iterate()
        first_epoch = sum(unit.errors)

        for _ in range(19):
            unit.iterate()

        self.assertLess(sum(unit.errors), first_epoch)
        weight = layers[0].collection[0].connected_to[0].weight
        self.assertLess(abs(weight - 2.0), 1e-2)

    def test_error_tracking_logs(self):
        layers = make_single_edge_network()
        unit = DistributionUnit(layers, 'meanSquaredError', batch_size=1,
                                error_tracking=True)
        unit.initialize_input_data([1, 2, 3])
        unit.initialize_target_data([1, 2, 3])

        with self.assertLogs('distribution_unit', level='INFO') as logs:
            unit.iterate()

        error_lines = [line for line in logs.output if 'error' in line]
        self.assertEqual(len(error_lines), 3)

    def test_on_sample_and_should_stop(self):
        layers = make_single_edge_network()
        unit = DistributionUnit(layers, 'meanSquaredError', batch_size=1)
        unit.initialize_input_data([1, 2, 3, 4])
        unit.initialize_target_data([2, 2, 2, 2])

        errors = []
        n_samples = unit.iterate(on_sample=[collect_errors(errors)],
                                 should_stop=lambda: len(errors) >= 2)

        self.assertEqual(n_samples, 2)
        self.assertEqual(len(errors), 2)
        self.assertEqual(errors, unit.errors)
        for layer in layers:
            for node in layer.collection:
                self.assertEqual(node.value, 0)

    def test_data_loading_replaces(self):
        layers = make_single_edge_network()
        unit = DistributionUnit(layers, 'meanSquaredError', batch_size=1)

        unit.initialize_input_data([1, 2, 3])
        unit.initialize_input_data(np.array([4, 5]))
        unit.initialize_target_data((6, 7))

        self.assertEqual(unit.input_data, [4.0, 5.0])
        self.assertEqual(unit.target_data, [6.0, 7.0])

        with self.assertRaises(TypeError):
            unit.initialize_input_data([1, 'a'])

        with self.assertRaises(TypeError):
            unit.initialize_target_data([None])

    def test_learning_rate_must_stay_positive(self):
        layers = make_single_edge_network()
        unit = DistributionUnit(layers, 'meanSquaredError', batch_size=1,
                                learning_rate=0.00005)

        # Next worsening error subtracts a jitter >= 0.0001
        unit.learning_rate_adapter.error_correction_increase = True

        with self.assertRaises(NumericInstability):
            unit._adapt_learning_rate(1.0, 2.0)

    def test_learning_rate_floor(self):
        layers = make_single_edge_network()
        unit = DistributionUnit(layers, 'meanSquaredError', batch_size=1,
                                learning_rate=0.00005,
                                min_learning_rate=0.00001)
        unit.learning_rate_adapter.error_correction_increase = True

        with self.assertLogs('distribution_unit', level='WARNING'):
            unit._adapt_learning_rate(1.0, 2.0)

        self.assertEqual(unit.learning_rate, 0.00001)

    def test_non_finite_activation(self):
        activations = {'explode': lambda x, param=None: float('inf')}
        derivatives = {'explode': lambda x, param=None: 1.0}
        layers = make_single_edge_network(activation='explode')

        unit = DistributionUnit(layers, 'meanSquaredError', batch_size=1,
                                activations=activations,
                                derivatives=derivatives)
        unit.initialize_input_data([1])
        unit.initialize_target_data([1])

        with self.assertRaises(NumericInstability):
            unit.iterate()


class TestDistributionUnitConfiguration(unittest.TestCase):

    def test_bad_batch_size(self):
        for batch_size in (0, -1, 1.5, True, '2'):
            with self.assertRaises(ConfigurationError):
                DistributionUnit(make_single_edge_network(),
                                 'meanSquaredError', batch_size=batch_size)

    def test_bad_learning_rate(self):
        for learning_rate in (0, -0.5, float('nan'), None):
            with self.assertRaises(ConfigurationError):
                DistributionUnit(make_single_edge_network(),
                                 'meanSquaredError', batch_size=1,
                                 learning_rate=learning_rate)

        with self.assertRaises(ConfigurationError):
            DistributionUnit(make_single_edge_network(), 'meanSquaredError',
                             batch_size=1, min_learning_rate=0)

    def test_unknown_function_keys(self):
        with self.assertRaises(ConfigurationError):
            DistributionUnit(make_single_edge_network(), 'crossEntropy',
                             batch_size=1)

        with self.assertRaises(ConfigurationError):
            DistributionUnit(make_single_edge_network(activation='tanh'),
                             'meanSquaredError', batch_size=1)

        # Activation present, derivative missing
        with self.assertRaises(ConfigurationError):
            DistributionUnit(make_single_edge_network(), 'meanSquaredError',
                             batch_size=1, derivatives={})

    def test_uninitialized_weight(self):
        layers = make_single_edge_network(weight=None)

        with self.assertRaises(ConfigurationError):
            DistributionUnit(layers, 'meanSquaredError', batch_size=1)

    def test_mismatched_mirror_weight(self):
        layers = make_single_edge_network(weight=1.0)
        layers[1].collection[0].connected_by[0].weight = 2.0

        with self.assertRaises(ConfigurationError):
            DistributionUnit(layers, 'meanSquaredError', batch_size=1)

    def test_bad_layer_flags(self):
        layers = make_single_edge_network()
        layers[1].flags = []
        with self.assertRaises(ConfigurationError):
            DistributionUnit(layers, 'meanSquaredError', batch_size=1)

        layers = make_single_edge_network()
        layers[1].flags = ['input', 'output']
        with self.assertRaises(ConfigurationError):
            DistributionUnit(layers, 'meanSquaredError', batch_size=1)

        layers = make_single_edge_network()
        with self.assertRaises(ConfigurationError):
            DistributionUnit(layers[::-1], 'meanSquaredError', batch_size=1)

        with self.assertRaises(ConfigurationError):
            DistributionUnit(layers[:1], 'meanSquaredError', batch_size=1)

    def test_upstream_view_without_forward_view(self):
        for weight in (1.0, None):
            layers = make_single_edge_network()
            hidden = Node('1-1')
            layers[1].collection.append(hidden)

            # Only the downstream node records the edge
            hidden.connected_by.append(
                Connection(node=layers[0].collection[0], weight=weight))

            with self.assertRaises(ConfigurationError):
                DistributionUnit(layers, 'meanSquaredError', batch_size=1)

    def test_duplicated_upstream_view(self):
        layers = make_single_edge_network(weight=1.0)
        source = layers[0].collection[0]
        layers[1].collection[0].connected_by.append(
            Connection(node=source, weight=1.0))

        with self.assertRaises(ConfigurationError):
            DistributionUnit(layers, 'meanSquaredError', batch_size=1)

    def test_non_numeric_min_learning_rate(self):
        for min_learning_rate in ('x', True, float('nan'), -1e-3):
            with self.assertRaises(ConfigurationError):
                DistributionUnit(make_single_edge_network(),
                                 'meanSquaredError', batch_size=1,
                                 min_learning_rate=min_learning_rate)

    def test_backward_connection(self):
        layers = make_single_edge_network()
        layers[1].collection[0].connect(layers[0].collection[0], 1.0)

        with self.assertRaises(ConfigurationError):
            DistributionUnit(layers, 'meanSquaredError', batch_size=1)


if __name__ == '__main__':
    unittest.main()

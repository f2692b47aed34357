import logging
import numbers
import threading

import numpy

from .exception import (
    ConfigurationError, DimensionMismatch, NumericInstability)
from .learning_rate import StochasticLearningRateAdapter
from t2net.functions import ACTIVATIONS, COSTS, DERIVATIVES
from t2net.scientific import delta_rule


_logger_name = __name__.rsplit('.', 1)[-1]
logger = logging.getLogger(_logger_name)


def _as_float_list(data, name):
    values = []
    for i, item in enumerate(data):
        if isinstance(item, bool) or not isinstance(item, numbers.Real):
            msg = "`{}[{}]` ({!r}) is not a real number"
            raise TypeError(msg.format(name, i, item))
        values.append(float(item))
    return values


class DistributionUnit:
    """ Distributes data across a layered network and trains its weights.

    Samples are pushed through the layers one at a time. The cost function
    is evaluated at the output layer, the learning rate is adapted to the
    trend of the output error, and every `batch_size` samples the weights
    are updated with the delta rule.

    The layer graph is borrowed, not copied: node values, connection
    weights and the output layer's error are mutated in place.
    """

    def __init__(self, layers, cost_function, batch_size, learning_rate=1.0,
                 error_tracking=False, activations=None, costs=None,
                 derivatives=None, random_state=None, min_learning_rate=None):
        """
        Parameters
        ----------
        layers: list(NodeGroup)
            The network, in forward order. The first layer must carry the
            'input' flag and the last the 'output' flag.

        cost_function: str
            Key of the cost function in `costs`.

        batch_size: int
            Number of samples between two backpropagation passes.

        learning_rate: float, default=1.0
            Initial learning rate coefficient; must be positive.

        error_tracking: bool, default=False
            If True, each sample's output error is logged at INFO level.

        activations, costs, derivatives: dict, default=None
            Function catalogs keyed by name. The defaults from
            :mod:`t2net.functions` are used when None.

        random_state: numpy.random.RandomState, default=None
            Seeds the learning rate jitter for reproducible results.

        min_learning_rate: float, default=None
            If given, the adapted learning rate is clamped to this floor.
            Otherwise a learning rate driven to zero or below raises
            :class:`NumericInstability`.
        """
        if (isinstance(batch_size, bool) or
                not isinstance(batch_size, numbers.Integral) or
                batch_size < 1):
            msg = "`batch_size` ({!r}) must be an integer >= 1"
            raise ConfigurationError(msg.format(batch_size))

        if (not isinstance(learning_rate, numbers.Real) or
                not numpy.isfinite(learning_rate) or learning_rate <= 0):
            msg = "`learning_rate` ({!r}) must be a positive number"
            raise ConfigurationError(msg.format(learning_rate))

        if min_learning_rate is not None and (
                isinstance(min_learning_rate, bool) or
                not isinstance(min_learning_rate, numbers.Real) or
                not numpy.isfinite(min_learning_rate) or
                min_learning_rate <= 0):
            msg = "`min_learning_rate` ({!r}) must be positive or None"
            raise ConfigurationError(msg.format(min_learning_rate))

        self.activations = ACTIVATIONS if activations is None else activations
        self.costs = COSTS if costs is None else costs
        self.derivatives = DERIVATIVES if derivatives is None else derivatives

        if cost_function not in self.costs:
            msg = "Unknown cost function `{}`; available: {}"
            raise ConfigurationError(
                msg.format(cost_function, sorted(self.costs)))

        self._validate_layers(layers)

        self.layers = layers
        self.cost_function = cost_function
        self.batch_size = int(batch_size)
        self.error_tracking = error_tracking
        self.min_learning_rate = min_learning_rate

        self.learning_rate_adapter = StochasticLearningRateAdapter(
            learning_rate=float(learning_rate), random_state=random_state)

        self.input_data = []
        self.target_data = []

        # Output errors of the most recent `iterate` call
        self.errors = []

        self._lock = threading.Lock()

    def __repr__(self):
        return ("<DistributionUnit layers={} cost_function={} "
                "batch_size={} learning_rate={:.7f}>").format(
                    len(self.layers), self.cost_function,
                    self.batch_size, self.learning_rate)

    @property
    def learning_rate(self):
        return self.learning_rate_adapter.learning_rate

    @learning_rate.setter
    def learning_rate(self, value):
        self.learning_rate_adapter.learning_rate = value

    def _validate_layers(self, layers):
        """ Check the layer ordering, the function keys and the connection
        records of the graph
        """
        if len(layers) < 2:
            msg = "At least two layers are required (got {})"
            raise ConfigurationError(msg.format(len(layers)))

        n_input = sum(layer.is_input for layer in layers)
        n_output = sum(layer.is_output for layer in layers)

        if n_input != 1 or not layers[0].is_input:
            msg = ("Exactly one layer, the first, must be flagged 'input' "
                   "(found {})")
            raise ConfigurationError(msg.format(n_input))

        if n_output != 1 or not layers[-1].is_output:
            msg = ("Exactly one layer, the last, must be flagged 'output' "
                   "(found {})")
            raise ConfigurationError(msg.format(n_output))

        layer_index = {}
        for ilayer, layer in enumerate(layers):
            if len(layer) == 0:
                msg = "Layer {} has no nodes"
                raise ConfigurationError(msg.format(ilayer))

            if not layer.is_input:
                for catalog, kind in ((self.activations, 'activation'),
                                      (self.derivatives, 'derivative')):
                    if layer.activation not in catalog:
                        msg = "Layer {}: unknown {} function `{}`"
                        raise ConfigurationError(
                            msg.format(ilayer, kind, layer.activation))

            for node in layer.collection:
                layer_index[node.id] = ilayer

        for ilayer, layer in enumerate(layers):
            for node in layer.collection:
                for connection in node.connected_to:
                    self._validate_connection(
                        node, connection, ilayer, layer_index)

                for connection in node.connected_by:
                    source_id = connection.node.id
                    if layer_index.get(source_id, ilayer) >= ilayer:
                        msg = ("Connection {} -> {} does not come from an "
                               "earlier layer")
                        raise ConfigurationError(
                            msg.format(source_id, node.id))

                    self._validate_mirror(node, connection)

    def _validate_mirror(self, node, connection):
        """ Check that an upstream view `connection` of `node` has exactly
        one matching downstream view with the same weight
        """
        source = connection.node

        if connection.weight is None:
            msg = "Connection {} -> {} has no weight"
            raise ConfigurationError(msg.format(source.id, node.id))

        mirror = [c for c in source.connected_to if c.node.id == node.id]
        if len(mirror) != 1:
            msg = "Connection {} -> {} has {} forward views (expected 1)"
            raise ConfigurationError(
                msg.format(source.id, node.id, len(mirror)))

        if mirror[0].weight != connection.weight:
            msg = "Connection {} -> {} weight differs from its mirror"
            raise ConfigurationError(msg.format(source.id, node.id))

    def _validate_connection(self, node, connection, ilayer, layer_index):
        target = connection.node

        if connection.weight is None:
            msg = "Connection {} -> {} has no weight"
            raise ConfigurationError(msg.format(node.id, target.id))

        if layer_index.get(target.id, -1) <= ilayer:
            msg = "Connection {} -> {} does not point to a later layer"
            raise ConfigurationError(msg.format(node.id, target.id))

        mirror = [c for c in target.connected_by if c.node.id == node.id]
        if len(mirror) != 1:
            msg = "Connection {} -> {} has {} mirror connections (expected 1)"
            raise ConfigurationError(
                msg.format(node.id, target.id, len(mirror)))

        if mirror[0].weight != connection.weight:
            msg = "Connection {} -> {} weight differs from its mirror"
            raise ConfigurationError(msg.format(node.id, target.id))

    def initialize_input_data(self, data):
        """ Replace the data that will enter the network
        """
        self.input_data = _as_float_list(data, 'input_data')

    def initialize_target_data(self, data):
        """ Replace the expected output data
        """
        self.target_data = _as_float_list(data, 'target_data')

    def iterate(self, on_sample=None, should_stop=None):
        """ Distribute the input data across the network, one sample at a
        time, and train the connection weights.

        Parameters
        ----------
        on_sample: list(callable), default=None
            Each is called as :code:`f(i, error)` after sample `i` has been
            processed (see :mod:`t2net.util.on_sample`).

        should_stop: callable, default=None
            Checked before each sample; if it returns True, the iteration
            stops and the remaining samples are skipped.

        Returns
        -------
        n_samples: int
            The number of samples processed.
        """
        if len(self.input_data) != len(self.target_data):
            msg = "Mismatch in number of samples: input ({}), target ({})"
            raise DimensionMismatch(
                msg.format(len(self.input_data), len(self.target_data)))

        if not self._lock.acquire(blocking=False):
            raise RuntimeError("This unit is already iterating")

        try:
            return self._iterate(list(on_sample or []), should_stop)
        finally:
            self._lock.release()

    def _iterate(self, on_sample, should_stop):
        n_samples = len(self.input_data)
        self.errors = []

        logger.debug("Iterating over {} samples".format(n_samples))

        self._clear_values()

        for i in range(n_samples):
            if should_stop is not None and should_stop():
                msg = "Stopped after {} / {} samples"
                logger.info(msg.format(i, n_samples))
                return i

            error = self._forward(i)

            if (i + 1) % self.batch_size == 0:
                self._backpropagate(self.target_data[i])
            else:
                self._clear_values()

            self.errors.append(error)

            for func in on_sample:
                func(i, error)

        msg = "Iteration finished, learning rate = {:.7f}"
        logger.debug(msg.format(self.learning_rate))

        return n_samples

    def _forward(self, i):
        """ Push sample `i` through the layers and return the output error
        """
        error = None

        for layer in self.layers:
            if layer.is_input:
                layer.collection[0].value = self.input_data[i]

            for node in layer.collection:
                if not layer.is_input:
                    activation = self.activations[layer.activation]
                    node.weighted_sum = node.value
                    node.value += layer.bias
                    node.value = activation(node.value)
                    self._check_finite(
                        node.value, "Activation of node {}".format(node.id))

                if layer.is_output:
                    error = self.costs[self.cost_function](
                        self.target_data[i], node.value)
                    self._check_finite(
                        error, "Error of node {}".format(node.id))

                    self._adapt_learning_rate(layer.error, error)
                    layer.error = error

                    if self.error_tracking:
                        logger.info("Sample {:d} error: {:.7f}".format(
                            i, error))

                # Add to the weighted sums of the downstream nodes
                for connection in node.connected_to:
                    connection.node.value += connection.weight * node.value

        return error

    def _backpropagate(self, target):
        """ Adjust the connection weights with the delta rule, walking the
        layers backwards, and reset the node values
        """
        for layer in reversed(self.layers):
            derivative = self.derivatives.get(layer.activation)

            for node in layer.collection:
                for connection in node.connected_by:
                    upstream = connection.node

                    delta = delta_rule(
                        target,
                        node.value,
                        derivative(node.weighted_sum),
                        upstream.value,
                        self.learning_rate,
                    )
                    connection.weight -= delta

                    self._check_finite(
                        connection.weight, "Weight {} -> {}".format(
                            upstream.id, node.id))

                    # Keep the upstream view of the edge in sync
                    mirror = upstream.find_connection_to(node.id)
                    mirror.weight = connection.weight

                node.value = 0.0

    def _adapt_learning_rate(self, old_error, new_error):
        learning_rate = self.learning_rate_adapter.adapt(old_error, new_error)

        if (self.min_learning_rate is not None and
                learning_rate < self.min_learning_rate):
            msg = "Learning rate {:.7f} below floor, clamping to {:.7f}"
            logger.warning(msg.format(learning_rate, self.min_learning_rate))
            self.learning_rate = self.min_learning_rate
        elif learning_rate <= 0:
            msg = "Learning rate was driven to {:.7f}"
            raise NumericInstability(msg.format(learning_rate))

    def _clear_values(self):
        for layer in self.layers:
            for node in layer.collection:
                node.value = 0.0

    @staticmethod
    def _check_finite(value, what):
        if not numpy.isfinite(value):
            msg = "{} is not finite ({})"
            raise NumericInstability(msg.format(what, value))

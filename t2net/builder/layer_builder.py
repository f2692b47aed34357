import logging

import numpy

from t2net.core.exception import ConfigurationError
from t2net.core.structures import (
    INPUT_FLAG, Layer, Node, NodeGroup, OUTPUT_FLAG)


_logger_name = __name__.rsplit('.', 1)[-1]
logger = logging.getLogger(_logger_name)

NODE_ID = "{:d}-{:d}"


def build_network(layers, random_state=None, weight_scale=1.0):
    """ Build a fully connected layer graph from layer descriptions

    Parameters
    ----------
    layers: list(Layer)
        Descriptions of the layers in forward order. The first becomes the
        input layer and the last the output layer.

    random_state: numpy.random.RandomState, default=None
        Supply for reproducible weights.

    weight_scale: float, default=1.0
        Initial weights are drawn uniformly from
        [-weight_scale, weight_scale).

    Returns
    -------
    network: list(NodeGroup)
        Consecutive layers are fully connected; both directional views of
        every edge carry the same initial weight.
    """
    if len(layers) < 2:
        msg = "At least two layers are required (got {})"
        raise ConfigurationError(msg.format(len(layers)))

    if random_state is None:
        random_state = numpy.random.RandomState()

    network = []
    last = len(layers) - 1

    for ilayer, layer in enumerate(layers):
        if not isinstance(layer, Layer):
            layer = Layer(**layer)

        if layer.nodes < 1:
            msg = "Layer {} must have at least one node (got {})"
            raise ConfigurationError(msg.format(ilayer, layer.nodes))

        flags = []
        if ilayer == 0:
            flags.append(INPUT_FLAG)
        if ilayer == last:
            flags.append(OUTPUT_FLAG)

        collection = [Node(NODE_ID.format(ilayer, inode))
                      for inode in range(layer.nodes)]

        network.append(NodeGroup(collection=collection,
                                 activation=layer.activation,
                                 bias=layer.bias, flags=flags))

    for source, target in zip(network[:-1], network[1:]):
        for source_node in source.collection:
            for target_node in target.collection:
                weight = random_state.uniform(-weight_scale, weight_scale)
                source_node.connect(target_node, float(weight))

    msg = "Built network with layer sizes {}"
    logger.debug(msg.format([len(layer) for layer in network]))

    return network

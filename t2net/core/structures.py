""" Data model of the layered network.

A network is an ordered list of :class:`NodeGroup` instances. Every logical
edge between two nodes is stored twice: once in the upstream node's
``connected_to`` list and once (the mirror) in the downstream node's
``connected_by`` list. Both copies carry the same weight.
"""
from collections import namedtuple

INPUT_FLAG = 'input'
OUTPUT_FLAG = 'output'
NODE_FLAGS = (INPUT_FLAG, OUTPUT_FLAG)


# Construction-time description of a NodeGroup
Layer = namedtuple(
    'Layer', ['nodes', 'activation', 'bias'], defaults=(None, 0.0))


class Connection:
    """ One directional view of an edge: the node on the other end and the
    weight of the edge
    """

    def __init__(self, node, weight=None):
        self.node = node
        self.weight = weight

    def __repr__(self):
        return "<Connection node={} weight={}>".format(
            self.node.id, self.weight)


class Node:

    def __init__(self, id):
        self.id = id

        # Per-sample scratch state, reset between samples
        self.value = 0.0
        self.weighted_sum = 0.0

        self.connected_to = []
        self.connected_by = []

    def __repr__(self):
        return "<Node id={} value={:.5f}>".format(self.id, self.value)

    def connect(self, other, weight):
        """ Create the edge `self -> other` in both directional views
        """
        self.connected_to.append(Connection(node=other, weight=weight))
        other.connected_by.append(Connection(node=self, weight=weight))

    def find_connection_to(self, node_id):
        """ Return the downstream connection whose node has id `node_id`
        """
        for connection in self.connected_to:
            if connection.node.id == node_id:
                return connection
        return None


class NodeGroup:
    """ A layer instance: nodes sharing an activation function and bias
    """

    def __init__(self, collection, activation=None, bias=0.0, flags=None):
        """
        Parameters
        ----------
        collection: list(Node)
            The nodes of the layer, in processing order.

        activation: str, default=None
            Key of the activation (and derivative) function. Unused for the
            input layer.

        bias: float, default=0.0
            Added to every node's weighted sum before activation.

        flags: list(str), default=None
            Zero or more of 'input', 'output'.
        """
        flags = list(flags or [])
        for flag in flags:
            if flag not in NODE_FLAGS:
                msg = "Unknown layer flag `{}`; should be one of {}"
                raise ValueError(msg.format(flag, NODE_FLAGS))

        self.collection = list(collection)
        self.activation = activation
        self.bias = bias
        self.flags = flags

        # Output error of the most recent sample (output layer only)
        self.error = None

    def __repr__(self):
        return "<NodeGroup nodes={} activation={} flags={}>".format(
            len(self.collection), self.activation, self.flags)

    def __len__(self):
        return len(self.collection)

    @property
    def is_input(self):
        return INPUT_FLAG in self.flags

    @property
    def is_output(self):
        return OUTPUT_FLAG in self.flags

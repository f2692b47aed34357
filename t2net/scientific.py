def delta_rule(target, output, derivative, upstream_value, learning_rate):
    """ Compute the weight adjustment of a single connection

    Parameters
    ----------
    target: float
        The expected output value.

    output: float
        The activation of the node the connection feeds into.

    derivative: float
        The derivative of that node's activation function evaluated at its
        weighted sum.

    upstream_value: float
        The activation of the node on the upstream end of the connection.

    learning_rate: float
        The learning rate coefficient.

    Returns
    -------
    delta: float
        The amount to *subtract* from the connection weight, i.e.,
        :code:`learning_rate * (output - target) * derivative * upstream`,
        which is a gradient descent step on the squared error.
    """
    return learning_rate * (output - target) * derivative * upstream_value

class T2NetError(Exception):
    """ Base class for errors raised while configuring or training a network
    """


class ConfigurationError(T2NetError, ValueError):
    """ Raised when the layer graph, the function catalogs or the training
    parameters are invalid (unknown function key, bad batch size, missing
    input or output layer, uninitialized weights, ...)
    """


class DimensionMismatch(T2NetError, ValueError):
    """ Raised when input and target data disagree in length
    """


class NumericInstability(T2NetError, ArithmeticError):
    """ Raised when training produces a non-finite value or the learning
    rate is driven to zero or below
    """

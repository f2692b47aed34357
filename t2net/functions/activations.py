import numpy


def relu(x, param=None):
    return float(numpy.maximum(x, 0.0))


def sigmoid(x, param=None):
    return float(1.0 / (1.0 + numpy.exp(-x)))


def linear(x, param=None):
    return float(x)


ACTIVATIONS = {
    'ReLu': relu,
    'sigmoid': sigmoid,
    'linear': linear,
}

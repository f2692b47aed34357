""" Derivatives of the activation functions, evaluated at the weighted sum
"""
from t2net.functions.activations import sigmoid


def relu_derivative(x, param=None):
    return 1.0 if x > 0 else 0.0


def sigmoid_derivative(x, param=None):
    s = sigmoid(x)
    return s * (1.0 - s)


def linear_derivative(x, param=None):
    return 1.0


DERIVATIVES = {
    'ReLu': relu_derivative,
    'sigmoid': sigmoid_derivative,
    'linear': linear_derivative,
}

# flake8: noqa

from .activations import ACTIVATIONS, linear, relu, sigmoid
from .costs import COSTS, mean_squared_error
from .derivatives import (
    DERIVATIVES,
    linear_derivative,
    relu_derivative,
    sigmoid_derivative,
)

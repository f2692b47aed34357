# flake8: noqa

from ._version import version as __version__

from .builder import build_network
from .core.distribution_unit import DistributionUnit
from .core.exception import (
    ConfigurationError,
    DimensionMismatch,
    NumericInstability,
    T2NetError,
)
from .core.structures import Connection, Layer, Node, NodeGroup

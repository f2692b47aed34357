# flake8: noqa

from .layer_builder import build_network

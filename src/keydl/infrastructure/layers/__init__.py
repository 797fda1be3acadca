"""
KeyDL layer implementations.

Importing this package registers every layer class with the architecture
configuration registry.
"""

from ._layer import Layer
from ._input import Input
from ._convolution import Conv2D, DepthwiseConv2D
from ._pooling import AvgPool2D, MaxPool2D, Pool2dMeta
from ._cropping import Cropping1D, Cropping2D, Cropping3D
from ._flatten import Flatten
from ._dense import Dense
from ._activation import ActivationLayer, ReLU, apply_activation

__all__ = [
    Layer.__name__,
    Input.__name__,
    Conv2D.__name__,
    DepthwiseConv2D.__name__,
    MaxPool2D.__name__,
    AvgPool2D.__name__,
    Pool2dMeta.__name__,
    Cropping1D.__name__,
    Cropping2D.__name__,
    Cropping3D.__name__,
    Flatten.__name__,
    Dense.__name__,
    ActivationLayer.__name__,
    ReLU.__name__,
    apply_activation.__name__,
]

"""
KeyDL: a Keras-style layer and sequential-model API over a tensor engine.

Example
-------
>>> from keydl import Sequential, Input, Conv2D, MaxPool2D, Flatten, Dense
>>> model = Sequential.of(Input(28, 28, 1), Conv2D(32, (5, 5)), MaxPool2D(),
...                       Flatten(), Dense(10, activation="softmax"))
>>> model.compile()
"""

from .domain import (
    Activations,
    ConfigurationError,
    ConvPadding,
    DoubleCompileError,
    DuplicateLayerNameError,
    LossFunctions,
    Metrics,
    ModelDisposedError,
    UNKNOWN_DIM,
    UninitializedModelError,
    UnsupportedFeatureError,
)
from .infrastructure.layers import (
    ActivationLayer,
    AvgPool2D,
    Conv2D,
    Cropping1D,
    Cropping2D,
    Cropping3D,
    Dense,
    DepthwiseConv2D,
    Flatten,
    Input,
    Layer,
    MaxPool2D,
    ReLU,
)
from .infrastructure.models import Sequential
from .infrastructure.optimizers import SGD, Adam, RMSProp
from .infrastructure.utils.weight_initializer import (
    Constant,
    GlorotNormal,
    GlorotUniform,
    HeNormal,
    HeUniform,
    Ones,
    RandomNormal,
    RandomUniform,
    WeightInitializer,
    Zeros,
)

__version__ = "0.1.0"

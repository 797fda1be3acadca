"""
Domain contracts for KeyDL: errors, enumerations, shapes and protocols.

Nothing in this package depends on NumPy or on the reference engine.
"""

from ._errors import (
    ConfigurationError,
    DoubleCompileError,
    DuplicateLayerNameError,
    ModelDisposedError,
    UninitializedModelError,
    UnsupportedFeatureError,
)
from ._activations import Activations
from ._losses import LossFunctions, Metrics
from ._padding import ConvPadding
from ._shape import Shape, UNKNOWN_DIM
from ._engine import IGraph, IOperand, ISession
from ._layer import ILayer
from ._optimizers import IOptimizer

"""
Weight initialization public API.

This module aggregates and exposes all supported weight initialization
strategies, including Glorot (Xavier), He (Kaiming), constant and plain
random initializers, and registers them into the global `WeightInitializer`
registry via import side effects.

Importing this module ensures that all built-in initializers are available
for lookup and dispatch through `WeightInitializer`.

Exports
-------
- WeightInitializer:
    The registry-backed initializer dispatcher.
- Zeros, Ones, Constant, HeNormal, HeUniform, GlorotNormal, GlorotUniform,
  RandomNormal, RandomUniform:
    Presets binding a registry name.
"""

from ._variance_scaling import *
from ._constants import *
from ._base import WeightInitializer
from ._presets import (
    Constant,
    GlorotNormal,
    GlorotUniform,
    HeNormal,
    HeUniform,
    Ones,
    RandomNormal,
    RandomUniform,
    Zeros,
)

__all__ = [
    WeightInitializer.__name__,
    Zeros.__name__,
    Ones.__name__,
    Constant.__name__,
    HeNormal.__name__,
    HeUniform.__name__,
    GlorotNormal.__name__,
    GlorotUniform.__name__,
    RandomNormal.__name__,
    RandomUniform.__name__,
]

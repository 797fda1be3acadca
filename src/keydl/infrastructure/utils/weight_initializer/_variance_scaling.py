"""
Variance-scaling initializers (He / Glorot).

Each registered name samples either a normal or a uniform distribution whose
variance is `2 / fan` for the He family and `2 / (fan_in + fan_out)` for the
Glorot family:

    name             fan                    distribution
    ---------------  ---------------------  -----------------------------------
    he_normal        fan_in                 N(0, sqrt(2 / fan))
    he_uniform       fan_in                 U(-sqrt(6 / fan), sqrt(6 / fan))
    glorot_normal    fan_in + fan_out       N(0, sqrt(2 / fan))
    glorot_uniform   fan_in + fan_out       U(-sqrt(6 / fan), sqrt(6 / fan))

Conv layers pass a stride-adjusted `fan_out`; see `Conv2D`.
"""

import math

import numpy as np

from ._base import WeightInitializer


def _sample(shape, fan: int, distribution: str, rng, dtype) -> np.ndarray:
    if fan <= 0:
        raise ValueError(f"fan must be positive, got {fan}")
    if distribution == "normal":
        values = rng.standard_normal(shape) * math.sqrt(2.0 / fan)
    else:
        limit = math.sqrt(6.0 / fan)
        values = rng.uniform(-limit, limit, size=shape)
    return values.astype(dtype, copy=False)


@WeightInitializer.register_initializer("he_normal")
def he_normal(shape, *, fan_in, fan_out, rng, dtype) -> np.ndarray:
    return _sample(shape, fan_in, "normal", rng, dtype)


@WeightInitializer.register_initializer("he_uniform")
def he_uniform(shape, *, fan_in, fan_out, rng, dtype) -> np.ndarray:
    return _sample(shape, fan_in, "uniform", rng, dtype)


@WeightInitializer.register_initializer("glorot_normal")
def glorot_normal(shape, *, fan_in, fan_out, rng, dtype) -> np.ndarray:
    return _sample(shape, fan_in + fan_out, "normal", rng, dtype)


@WeightInitializer.register_initializer("glorot_uniform")
def glorot_uniform(shape, *, fan_in, fan_out, rng, dtype) -> np.ndarray:
    """Default kernel initializer for Dense and Conv layers."""
    return _sample(shape, fan_in + fan_out, "uniform", rng, dtype)

"""
Constant and plain random weight initializers.

Provided initializers
---------------------
- ``zeros``:
    All elements set to zero.
- ``ones``:
    All elements set to one.
- ``constant``:
    All elements set to ``value``.
- ``random_normal``:
    Normal distribution with configurable ``mean`` and ``stddev``.
- ``random_uniform``:
    Uniform distribution on ``[minval, maxval)``.

These initializers are typically used for bias variables, testing, or
deterministic model setups.
"""

import numpy as np

from ._base import WeightInitializer


@WeightInitializer.register_initializer("zeros")
def zeros(shape, *, fan_in, fan_out, rng, dtype) -> np.ndarray:
    return np.zeros(shape, dtype=dtype)


@WeightInitializer.register_initializer("ones")
def ones(shape, *, fan_in, fan_out, rng, dtype) -> np.ndarray:
    return np.ones(shape, dtype=dtype)


@WeightInitializer.register_initializer("constant")
def constant(shape, *, fan_in, fan_out, rng, dtype, value: float = 0.0) -> np.ndarray:
    return np.full(shape, value, dtype=dtype)


@WeightInitializer.register_initializer("random_normal")
def random_normal(
    shape, *, fan_in, fan_out, rng, dtype, mean: float = 0.0, stddev: float = 0.05
) -> np.ndarray:
    return rng.normal(mean, stddev, size=shape).astype(dtype, copy=False)


@WeightInitializer.register_initializer("random_uniform")
def random_uniform(
    shape, *, fan_in, fan_out, rng, dtype, minval: float = -0.05, maxval: float = 0.05
) -> np.ndarray:
    return rng.uniform(minval, maxval, size=shape).astype(dtype, copy=False)

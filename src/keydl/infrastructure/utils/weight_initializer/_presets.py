"""
Named initializer presets.

Thin `WeightInitializer` subclasses that bind a registry name, so layers can
be configured as `Conv2D(..., kernel_initializer=HeNormal(seed=12),
bias_initializer=Zeros())`.
"""

from typing import Optional

from ._base import WeightInitializer


class Zeros(WeightInitializer):
    def __init__(self) -> None:
        super().__init__("zeros")


class Ones(WeightInitializer):
    def __init__(self) -> None:
        super().__init__("ones")


class Constant(WeightInitializer):
    def __init__(self, value: float) -> None:
        super().__init__("constant", value=float(value))


class HeNormal(WeightInitializer):
    def __init__(self, seed: Optional[int] = None) -> None:
        super().__init__("he_normal", seed=seed)


class HeUniform(WeightInitializer):
    def __init__(self, seed: Optional[int] = None) -> None:
        super().__init__("he_uniform", seed=seed)


class GlorotNormal(WeightInitializer):
    def __init__(self, seed: Optional[int] = None) -> None:
        super().__init__("glorot_normal", seed=seed)


class GlorotUniform(WeightInitializer):
    def __init__(self, seed: Optional[int] = None) -> None:
        super().__init__("glorot_uniform", seed=seed)


class RandomNormal(WeightInitializer):
    def __init__(self, mean: float = 0.0, stddev: float = 0.05, seed: Optional[int] = None) -> None:
        super().__init__("random_normal", seed=seed, mean=float(mean), stddev=float(stddev))


class RandomUniform(WeightInitializer):
    def __init__(
        self, minval: float = -0.05, maxval: float = 0.05, seed: Optional[int] = None
    ) -> None:
        super().__init__("random_uniform", seed=seed, minval=float(minval), maxval=float(maxval))

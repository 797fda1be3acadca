"""Configuration mixins shared by layer implementations."""

from ._pool2d_mixin import Pool2dConfigMixin
from ._stateless_mixin import StatelessConfigMixin

__all__ = [
    Pool2dConfigMixin.__name__,
    StatelessConfigMixin.__name__,
]

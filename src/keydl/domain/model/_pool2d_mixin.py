"""
Config hooks for the 2D pooling layers.

The host keeps its normalized hyperparameters in a `meta` record exposing
`pool_size`, `strides` and `padding`. Strides equal to the window are left out
of the exported config, since the constructor defaults them to `pool_size`.
"""

from typing import Any, Dict, Type, TypeVar

from .._padding import ConvPadding

T = TypeVar("T", bound="Pool2dConfigMixin")


class Pool2dConfigMixin:
    def get_config(self) -> Dict[str, Any]:
        meta = self.meta
        cfg: Dict[str, Any] = {
            "pool_size": [int(k) for k in meta.pool_size],
            "padding": meta.padding.value,
            "name": self.name,
        }
        if tuple(meta.strides) != tuple(meta.pool_size):
            cfg["strides"] = [int(s) for s in meta.strides]
        return cfg

    @classmethod
    def from_config(cls: Type[T], cfg: Dict[str, Any]) -> T:
        strides = cfg.get("strides")
        return cls(
            pool_size=tuple(cfg["pool_size"]),
            strides=None if strides is None else tuple(strides),
            padding=ConvPadding(cfg.get("padding", ConvPadding.VALID.value)),
            name=cfg.get("name", ""),
        )

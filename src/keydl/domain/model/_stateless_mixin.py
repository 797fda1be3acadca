"""
Config hooks for layers without hyperparameters (`Flatten`).

The exported config carries the layer name and the trainable flag, so a
frozen layer stays frozen after a `Sequential.from_config` round-trip.
"""

from typing import Any, Dict
from typing_extensions import Self


class StatelessConfigMixin:
    def get_config(self) -> Dict[str, Any]:
        cfg: Dict[str, Any] = {"name": self.name}
        if not self.is_trainable:
            cfg["trainable"] = False
        return cfg

    @classmethod
    def from_config(cls, cfg: Dict[str, Any]) -> Self:
        layer = cls(name=cfg.get("name", ""))
        layer.is_trainable = bool(cfg.get("trainable", True))
        return layer

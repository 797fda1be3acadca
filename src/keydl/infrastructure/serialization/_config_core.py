"""
Architecture configuration registry.

Layers register their class under a type name so that a model architecture
exported with `layer_to_config` can be rebuilt with `layer_from_config`.
Only hyperparameters travel through this path; variable values stay in the
engine session.

Node format
-----------
{
  "type": "Conv2D",
  "config": {...}
}
"""

from __future__ import annotations

from typing import Any, Callable, Optional, Type

from ...domain._errors import ConfigurationError

_LAYER_REGISTRY: dict[str, Type[Any]] = {}


def register_layer(name: Optional[str] = None) -> Callable[[Type[Any]], Type[Any]]:
    """
    Decorator to register a Layer class for configuration round-trips.
    """

    def deco(cls: Type[Any]) -> Type[Any]:
        key = name or cls.__name__
        _LAYER_REGISTRY[key] = cls
        return cls

    return deco


def registered_layer_types() -> tuple[str, ...]:
    """Return the registered type names (sorted)."""
    return tuple(sorted(_LAYER_REGISTRY))


def layer_to_config(layer: Any) -> dict[str, Any]:
    """
    Convert a layer into a JSON-serializable configuration node.
    """
    return {"type": layer.__class__.__name__, "config": layer.get_config()}


def layer_from_config(node: dict[str, Any]) -> Any:
    """
    Rebuild a layer from a configuration node.

    Raises
    ------
    ConfigurationError
        If the node's type is not registered.
    """
    type_name = str(node["type"])
    if type_name not in _LAYER_REGISTRY:
        raise ConfigurationError(
            f"Unknown layer type '{type_name}'. Register it via @register_layer."
        )

    cls = _LAYER_REGISTRY[type_name]
    cfg = node.get("config", {}) or {}
    return cls.from_config(cfg)

"""Architecture configuration registry."""

from ._config_core import (
    layer_from_config,
    layer_to_config,
    register_layer,
    registered_layer_types,
)

__all__ = [
    register_layer.__name__,
    registered_layer_types.__name__,
    layer_to_config.__name__,
    layer_from_config.__name__,
]

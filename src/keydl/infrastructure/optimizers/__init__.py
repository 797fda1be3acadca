"""
Optimizer descriptors bound by `Sequential.compile`.
"""

from typing import Any, Dict

from ...domain._errors import ConfigurationError
from ._adam import Adam, RMSProp
from ._sgd import SGD

_OPTIMIZERS = {"SGD": SGD, "Adam": Adam, "RMSProp": RMSProp}


def optimizer_from_config(cfg: Dict[str, Any]):
    """
    Rebuild an optimizer from `get_config()` output.

    Raises
    ------
    ConfigurationError
        If the optimizer type is unknown.
    """
    cfg = dict(cfg)
    type_name = cfg.pop("type", None)
    if type_name not in _OPTIMIZERS:
        raise ConfigurationError(f"Unknown optimizer type {type_name!r}.")
    if "betas" in cfg:
        cfg["betas"] = tuple(cfg["betas"])
    return _OPTIMIZERS[type_name](**cfg)


__all__ = [
    SGD.__name__,
    Adam.__name__,
    RMSProp.__name__,
    optimizer_from_config.__name__,
]

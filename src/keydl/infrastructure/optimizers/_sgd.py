"""
Stochastic gradient descent optimizer descriptor.

Parameter updates are performed by the engine's execution layer; this class
holds and validates the hyperparameters a model binds during `compile`.
"""

from __future__ import annotations

from dataclasses import asdict, dataclass
from typing import Any, Dict

from ...domain._errors import ConfigurationError


@dataclass(frozen=True)
class SGD:
    """
    SGD with optional classical momentum.

    Update rule
    -----------
        v <- momentum * v - lr * g
        p <- p + v

    Parameters
    ----------
    lr : float, optional
        Learning rate. Must be positive. Defaults to 1e-2.
    momentum : float, optional
        Momentum factor in [0, 1). Defaults to 0.0.
    nesterov : bool, optional
        Use Nesterov momentum. Requires `momentum > 0`.
    """

    lr: float = 1e-2
    momentum: float = 0.0
    nesterov: bool = False

    def validate(self) -> None:
        if not self.lr > 0:
            raise ConfigurationError(f"SGD learning rate should be positive, got {self.lr}.")
        if not 0.0 <= self.momentum < 1.0:
            raise ConfigurationError(
                f"SGD momentum should be in [0, 1), got {self.momentum}."
            )
        if self.nesterov and self.momentum == 0.0:
            raise ConfigurationError("Nesterov momentum requires momentum > 0.")

    def get_config(self) -> Dict[str, Any]:
        return {"type": "SGD", **asdict(self)}

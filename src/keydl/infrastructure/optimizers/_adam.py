"""
Adam and RMSProp optimizer descriptors.

Both optimizers keep per-variable running statistics when the engine applies
updates; at the model level they are validated hyperparameter bundles.
"""

from __future__ import annotations

from dataclasses import asdict, dataclass
from typing import Any, Dict, Tuple

from ...domain._errors import ConfigurationError


@dataclass(frozen=True)
class Adam:
    """
    Adam optimizer.

    Update rule
    -----------
    Let ``g_t`` be the gradient at step ``t``:

        m_t = beta1 * m_{t-1} + (1 - beta1) * g_t
        v_t = beta2 * v_{t-1} + (1 - beta2) * (g_t ** 2)

        m_hat = m_t / (1 - beta1^t)
        v_hat = v_t / (1 - beta2^t)

        p <- p - lr * m_hat / (sqrt(v_hat) + eps)

    Parameters
    ----------
    lr : float, optional
        Learning rate. Must be positive. Defaults to 1e-3.
    betas : tuple[float, float], optional
        Decay rates for the first and second moments, each in (0, 1).
        Defaults to (0.9, 0.999).
    eps : float, optional
        Numerical stability epsilon. Must be positive. Defaults to 1e-8.
    weight_decay : float, optional
        Classical L2 coefficient. Must be non-negative. Defaults to 0.0.
    """

    lr: float = 1e-3
    betas: Tuple[float, float] = (0.9, 0.999)
    eps: float = 1e-8
    weight_decay: float = 0.0

    def validate(self) -> None:
        if not self.lr > 0:
            raise ConfigurationError(f"Adam learning rate should be positive, got {self.lr}.")
        if len(self.betas) != 2:
            raise ConfigurationError(f"Adam betas should be a pair, got {self.betas}.")
        for beta in self.betas:
            if not 0.0 < beta < 1.0:
                raise ConfigurationError(f"Adam betas should be in (0, 1), got {self.betas}.")
        if not self.eps > 0:
            raise ConfigurationError(f"Adam eps should be positive, got {self.eps}.")
        if self.weight_decay < 0:
            raise ConfigurationError(
                f"Adam weight_decay should be non-negative, got {self.weight_decay}."
            )

    def get_config(self) -> Dict[str, Any]:
        cfg = asdict(self)
        cfg["betas"] = list(self.betas)
        return {"type": "Adam", **cfg}


@dataclass(frozen=True)
class RMSProp:
    """
    RMSProp optimizer.

        s <- rho * s + (1 - rho) * g^2
        p <- p - lr * g / (sqrt(s) + eps)
    """

    lr: float = 1e-3
    rho: float = 0.9
    eps: float = 1e-7

    def validate(self) -> None:
        if not self.lr > 0:
            raise ConfigurationError(f"RMSProp learning rate should be positive, got {self.lr}.")
        if not 0.0 < self.rho < 1.0:
            raise ConfigurationError(f"RMSProp rho should be in (0, 1), got {self.rho}.")
        if not self.eps > 0:
            raise ConfigurationError(f"RMSProp eps should be positive, got {self.eps}.")

    def get_config(self) -> Dict[str, Any]:
        return {"type": "RMSProp", **asdict(self)}

"""
Domain-level optimizer contracts for KeyDL.

This module defines the `IOptimizer` protocol, which specifies what a model
needs from an optimizer at compile time.

Notes
-----
- Domain contracts are backend-agnostic and must not depend on NumPy or
  infrastructure implementations.
- Gradient computation and parameter updates belong to the engine's
  execution layer; at the model level an optimizer is a validated bundle of
  hyperparameters that is bound during `compile`.
"""

from __future__ import annotations

from typing import Any, Dict, Protocol, runtime_checkable


@runtime_checkable
class IOptimizer(Protocol):
    """
    Optimizer interface contract.

    Required methods
    ----------------
    - `validate()` raises `ConfigurationError` for invalid hyperparameters.
    - `get_config()` returns the JSON-serializable hyperparameters.
    """

    def validate(self) -> None:
        """
        Check hyperparameters eagerly so that compile fails fast.
        """
        ...

    def get_config(self) -> Dict[str, Any]:
        """
        Return the optimizer's hyperparameters.
        """
        ...

"""
Weight initializer registry and dispatch utilities.

This module defines the concrete `WeightInitializer` used by trainable layers
to produce initial variable values (e.g. He, Glorot, constants).

Design
------
- Initializers are registered by string name via a decorator-based registry.
- Each registered initializer is a function
  `fn(shape, *, fan_in, fan_out, rng, dtype, **kwargs) -> np.ndarray`
  that returns a freshly allocated array.
- The dispatcher resolves an initializer by name at construction time, keeps
  its seed and extra keyword arguments, and invokes it via `__call__`.

Usage example
-------------
Registering an initializer:

    @WeightInitializer.register_initializer("he_normal")
    def he_normal(shape, *, fan_in, fan_out, rng, dtype): ...

Applying an initializer:

    init = WeightInitializer("he_normal", seed=12)
    value = init((5, 5, 1, 32), fan_in=25, fan_out=800)

Notes
-----
- A seeded dispatcher builds a fresh `numpy.random.Generator` on every call,
  so repeated calls with the same shape produce the same values.
- Registration keys must be unique unless explicitly overwritten.
"""

from __future__ import annotations

from typing import Any, Callable, ClassVar, Dict, Optional, Tuple, TypeVar

import numpy as np

from ....domain._errors import ConfigurationError
from ....domain.utils._weight_initialization import (
    _WeightInitializer,
    _calculate_fan_in_and_fan_out,
)

T = TypeVar("T", bound=Callable[..., np.ndarray])


class WeightInitializer(_WeightInitializer):
    """
    Registry-backed weight initializer dispatcher.

    Parameters
    ----------
    initializer_name : str
        Registry key of the initialization strategy.
    seed : Optional[int]
        Seed for the random generator. None draws fresh entropy per call.
    **kwargs
        Extra arguments forwarded to the registered function
        (e.g. `value` for "constant").

    Raises
    ------
    ConfigurationError
        If `initializer_name` is not registered.
    """

    INITIALIZERS: ClassVar[Dict[str, Callable[..., np.ndarray]]] = {}

    def __init__(self, initializer_name: str, seed: Optional[int] = None, **kwargs: Any) -> None:
        try:
            self._initializer: Callable[..., np.ndarray] = self.INITIALIZERS[
                initializer_name
            ]
        except KeyError as e:
            available = ", ".join(sorted(self.INITIALIZERS)) or "<none>"
            raise ConfigurationError(
                f"Unsupported initializer name: {initializer_name!r}. "
                f"Available: {available}"
            ) from e
        self.initializer_name = initializer_name
        self.seed = seed
        self.kwargs = dict(kwargs)

    @classmethod
    def register_initializer(
        cls, name: str, *, overwrite: bool = False
    ) -> Callable[[T], T]:
        """
        Decorator to register a weight initializer under `name`.

        Parameters
        ----------
        name:
            Registry key used to retrieve the initializer later.
        overwrite:
            If False (default), raises if `name` is already registered.
        """
        if not isinstance(name, str) or not name:
            raise ValueError("Initializer name must be a non-empty string")

        def decorator(func: T) -> T:
            if not overwrite and name in cls.INITIALIZERS:
                raise ValueError(f"Initializer already registered: {name!r}")
            cls.INITIALIZERS[name] = func
            return func

        return decorator

    @classmethod
    def available(cls) -> tuple[str, ...]:
        """Return registered initializer names (sorted)."""
        return tuple(sorted(cls.INITIALIZERS))

    def __call__(
        self,
        shape: Tuple[int, ...],
        *,
        fan_in: Optional[int] = None,
        fan_out: Optional[int] = None,
        dtype: Any = np.float32,
    ) -> np.ndarray:
        shape = tuple(int(d) for d in shape)
        default_in, default_out = _calculate_fan_in_and_fan_out(shape)
        fan_in = default_in if fan_in is None else fan_in
        fan_out = default_out if fan_out is None else fan_out

        value = self._initializer(
            shape,
            fan_in=max(1, int(fan_in)),
            fan_out=max(1, int(fan_out)),
            rng=np.random.default_rng(self.seed),
            dtype=np.dtype(dtype),
            **self.kwargs,
        )
        return np.asarray(value, dtype=dtype)

    def get_config(self) -> Dict[str, Any]:
        """
        Return a JSON-serializable description of this initializer.
        """
        return {"name": self.initializer_name, "seed": self.seed, **self.kwargs}

    @classmethod
    def from_config(cls, cfg: Dict[str, Any]) -> "WeightInitializer":
        """
        Rebuild an initializer from `get_config()` output.

        Presets are rebuilt as plain dispatchers bound to the same name.
        """
        cfg = dict(cfg)
        name = cfg.pop("name")
        seed = cfg.pop("seed", None)
        return WeightInitializer(name, seed=seed, **cfg)

    def __repr__(self) -> str:
        extra = "".join(f", {k}={v!r}" for k, v in self.kwargs.items())
        return f"{self.__class__.__name__}({self.initializer_name!r}, seed={self.seed!r}{extra})"

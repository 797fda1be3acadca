"""
Input layer: declares the model's feed placeholder.
"""

from __future__ import annotations

from typing import Any, Dict, Optional

from ...domain._engine import IGraph, IOperand
from ...domain._errors import ConfigurationError
from ...domain._shape import Shape, UNKNOWN_DIM
from ..serialization._config_core import register_layer
from ._layer import Layer


@register_layer()
class Input(Layer):
    """
    First layer of every sequential model.

    Parameters
    ----------
    *dims : int
        Per-sample extents, without the batch axis (e.g. `Input(28, 28, 1)`).
    name : str, optional
        Layer name; also used as the placeholder name.

    Notes
    -----
    The output shape is `(-1, *dims)`. The layer owns no variables.
    """

    KIND_TAG = "input"

    def __init__(self, *dims: int, name: str = "") -> None:
        super().__init__(name=name)
        if not dims:
            raise ConfigurationError("Input requires at least one dimension.")
        for d in dims:
            if not isinstance(d, int) or isinstance(d, bool) or d <= 0:
                raise ConfigurationError(
                    f"Input dimensions should be positive integers, got {dims}."
                )
        self.dims = tuple(int(d) for d in dims)
        self._placeholder: Optional[IOperand] = None

    @property
    def packed_shape(self) -> Shape:
        """Full placeholder shape including the batch sentinel."""
        return (UNKNOWN_DIM,) + self.dims

    def compute_output_shape(self, input_shape: Shape) -> Shape:
        return self.packed_shape

    def define_variables(self, graph: IGraph, input_shape: Shape) -> None:
        self._placeholder = graph.placeholder(self.name or "x", self.packed_shape, self.dtype)

    def transform_input(self, graph: IGraph, x: Optional[IOperand] = None) -> IOperand:
        """Return the placeholder; the incoming operand is ignored."""
        self._require_built("Placeholder")
        return self._placeholder

    @property
    def placeholder(self) -> IOperand:
        self._require_built("Placeholder")
        return self._placeholder

    def reset(self) -> None:
        super().reset()
        self._placeholder = None

    def get_config(self) -> Dict[str, Any]:
        return {"dims": list(self.dims), "name": self.name}

    @classmethod
    def from_config(cls, cfg: Dict[str, Any]) -> "Input":
        return cls(*cfg["dims"], name=cfg.get("name", ""))

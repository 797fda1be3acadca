"""
Cropping layers for 1D, 2D and 3D channels-last inputs.

A cropping layer removes `left` elements from the start and `right` elements
from the end of every spatial axis. The cropping specification is validated at
construction; the forward computation is a single static `slice` op.

Examples
--------
>>> Cropping1D((1, 2)).compute_output_shape((-1, 4, 3))
(-1, 1, 3)
>>> Cropping2D(((1, 1), (2, 2))).compute_output_shape((-1, 8, 8, 3))
(-1, 6, 4, 3)
"""

from __future__ import annotations

from typing import Any, ClassVar, Dict

from ...domain._engine import IGraph, IOperand
from ...domain._errors import ConfigurationError
from ...domain._shape import Shape, is_known
from ...domain._shape_contract import (
    CroppingSpec,
    cropping_output_shape,
    validate_cropping,
)
from ..serialization._config_core import register_layer
from ._layer import Layer


class _Cropping(Layer):
    SPATIAL_RANK: ClassVar[int] = 0

    def __init__(self, cropping, name: str = "") -> None:
        super().__init__(name=name)
        self.cropping: CroppingSpec = validate_cropping(cropping, self.SPATIAL_RANK)

    def compute_output_shape(self, input_shape: Shape) -> Shape:
        return cropping_output_shape(input_shape, self.cropping)

    def transform_input(self, graph: IGraph, x: IOperand) -> IOperand:
        out = self.output_shape
        if not all(is_known(d) for d in out[1:-1]):
            raise ConfigurationError(
                f"{self.kind} requires known spatial extents, got {self.input_shape}."
            )
        begin = (0,) + tuple(left for left, _ in self.cropping) + (0,)
        size = (-1,) + tuple(out[1:-1]) + (-1,)
        return graph.build_op("slice", x, shape=out, begin=begin, size=size)

    def get_config(self) -> Dict[str, Any]:
        return {"cropping": [list(p) for p in self.cropping], "name": self.name}

    @classmethod
    def from_config(cls, cfg: Dict[str, Any]):
        return cls(cropping=[tuple(p) for p in cfg["cropping"]], name=cfg.get("name", ""))


@register_layer()
class Cropping1D(_Cropping):
    """
    Crops the length axis of an (N, L, C) input.

    Parameters
    ----------
    cropping : tuple[int, int] or sequence of one pair, optional
        `(left, right)` elements removed. Defaults to (1, 1).
    name : str, optional
        Layer name.
    """

    KIND_TAG = "cropping1d"
    SPATIAL_RANK = 1

    def __init__(self, cropping=(1, 1), name: str = "") -> None:
        super().__init__(cropping, name=name)


@register_layer()
class Cropping2D(_Cropping):
    """
    Crops the height and width axes of an (N, H, W, C) input.
    """

    KIND_TAG = "cropping2d"
    SPATIAL_RANK = 2

    def __init__(self, cropping=((0, 0), (0, 0)), name: str = "") -> None:
        super().__init__(cropping, name=name)


@register_layer()
class Cropping3D(_Cropping):
    """
    Crops the depth, height and width axes of an (N, D, H, W, C) input.
    """

    KIND_TAG = "cropping3d"
    SPATIAL_RANK = 3

    def __init__(self, cropping=((1, 1), (1, 1), (1, 1)), name: str = "") -> None:
        super().__init__(cropping, name=name)

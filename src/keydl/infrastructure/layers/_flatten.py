"""
Flatten layer.

Collapses every non-batch axis into one. The recorded output shape drops the
batch sentinel (`(-1, 7, 7, 64) -> (3136,)`); at run time the engine keeps the
batch axis and produces `(N, 3136)`.
"""

from __future__ import annotations

from ...domain._engine import IGraph, IOperand
from ...domain._shape import Shape, UNKNOWN_DIM
from ...domain._shape_contract import flatten_output_shape
from ...domain.model._stateless_mixin import StatelessConfigMixin
from ..serialization._config_core import register_layer
from ._layer import Layer


@register_layer()
class Flatten(StatelessConfigMixin, Layer):
    KIND_TAG = "flatten"

    def __init__(self, name: str = "") -> None:
        super().__init__(name=name)

    def compute_output_shape(self, input_shape: Shape) -> Shape:
        return flatten_output_shape(input_shape)

    def transform_input(self, graph: IGraph, x: IOperand) -> IOperand:
        (features,) = self.output_shape
        runtime_shape = (UNKNOWN_DIM, features)
        return graph.build_op("reshape", x, shape=runtime_shape, new_shape=runtime_shape)

"""
Activation-only layers.

`ActivationLayer` applies one of the enumerated activations element-wise;
`ReLU` exposes the configurable rectifier (threshold and ceiling).
"""

from __future__ import annotations

import logging
from typing import Any, Dict, Optional

from ...domain._activations import Activations
from ...domain._engine import IGraph, IOperand
from ...domain._errors import ConfigurationError, UnsupportedFeatureError
from ...domain._shape import Shape, make_shape
from ..serialization._config_core import register_layer
from ._layer import Layer

logger = logging.getLogger(__name__)


def apply_activation(
    graph: IGraph,
    x: IOperand,
    activation: Activations,
    shape: Optional[Shape] = None,
) -> IOperand:
    """
    Append the op for `activation` to `x`. LINEAR adds no node.
    """
    if activation is Activations.LINEAR:
        return x
    return graph.build_op(activation.value, x, shape=shape)


@register_layer()
class ActivationLayer(Layer):
    """
    Stateless layer applying an activation function.

    Parameters
    ----------
    activation : Activations or str
        Activation to apply.
    name : str, optional
        Layer name.
    """

    KIND_TAG = "activation"

    def __init__(self, activation: Activations | str = Activations.RELU, name: str = "") -> None:
        super().__init__(name=name)
        self.activation = Activations.resolve(activation)

    def has_activation(self) -> bool:
        return True

    def compute_output_shape(self, input_shape: Shape) -> Shape:
        return make_shape(input_shape)

    def transform_input(self, graph: IGraph, x: IOperand) -> IOperand:
        return apply_activation(graph, x, self.activation, shape=x.shape)

    def get_config(self) -> Dict[str, Any]:
        return {"activation": self.activation.value, "name": self.name}


@register_layer()
class ReLU(ActivationLayer):
    """
    Rectified linear unit with optional threshold and ceiling.

    `f(x) = x if x >= threshold else 0`, then clipped at `max_value` when
    given.

    Raises
    ------
    UnsupportedFeatureError
        If `negative_slope` is non-zero (leaky variant).
    ConfigurationError
        If `max_value` is negative.
    """

    KIND_TAG = "relu"

    def __init__(
        self,
        max_value: Optional[float] = None,
        negative_slope: float = 0.0,
        threshold: float = 0.0,
        name: str = "",
    ) -> None:
        super().__init__(activation=Activations.RELU, name=name)
        if negative_slope != 0:
            raise UnsupportedFeatureError("LeakyReLU")
        if max_value is not None and max_value < 0:
            raise ConfigurationError(
                f"max_value of ReLU should be non-negative, got {max_value}."
            )
        self.max_value = None if max_value is None else float(max_value)
        self.negative_slope = 0.0
        self.threshold = float(threshold)

    def transform_input(self, graph: IGraph, x: IOperand) -> IOperand:
        return graph.build_op(
            "relu",
            x,
            shape=x.shape,
            max_value=self.max_value,
            threshold=self.threshold,
        )

    def get_config(self) -> Dict[str, Any]:
        return {
            "max_value": self.max_value,
            "negative_slope": self.negative_slope,
            "threshold": self.threshold,
            "name": self.name,
        }

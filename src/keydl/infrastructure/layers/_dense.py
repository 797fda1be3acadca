"""
Fully-connected (dense) layer.

`Dense` computes `activation(x @ kernel + bias)` with a kernel of shape
(in_features, units). The input's last axis is the feature axis; any leading
axes pass through.
"""

from __future__ import annotations

from typing import Any, Dict, Optional

from ...domain._activations import Activations
from ...domain._engine import IGraph, IOperand
from ...domain._errors import ConfigurationError
from ...domain._shape import Shape
from ...domain._shape_contract import dense_output_shape
from ..serialization._config_core import register_layer
from ..utils.weight_initializer import GlorotUniform, WeightInitializer, Zeros
from ._activation import apply_activation
from ._layer import Layer


@register_layer()
class Dense(Layer):
    """
    Fully-connected layer.

    Parameters
    ----------
    units : int
        Output features.
    activation : Activations or str, optional
        Defaults to RELU.
    use_bias : bool, optional
        Defaults to True.
    kernel_initializer, bias_initializer : WeightInitializer, optional
        Defaults to Glorot-uniform kernels and zero biases.
    name : str, optional
        Layer name.

    Notes
    -----
    Parameter count: `in_features * units + units`.
    """

    KIND_TAG = "dense"

    def __init__(
        self,
        units: int = 128,
        activation: Activations | str = Activations.RELU,
        use_bias: bool = True,
        kernel_initializer: Optional[WeightInitializer] = None,
        bias_initializer: Optional[WeightInitializer] = None,
        name: str = "",
    ) -> None:
        super().__init__(name=name)
        if not isinstance(units, int) or isinstance(units, bool) or units <= 0:
            raise ConfigurationError(f"units should be a positive integer, got {units!r}.")
        self.units = int(units)
        self.activation = Activations.resolve(activation)
        self.use_bias = bool(use_bias)
        self.kernel_initializer = kernel_initializer or GlorotUniform()
        self.bias_initializer = bias_initializer or Zeros()
        self._kernel: Optional[IOperand] = None
        self._bias: Optional[IOperand] = None

    def has_activation(self) -> bool:
        return True

    def compute_output_shape(self, input_shape: Shape) -> Shape:
        return dense_output_shape(input_shape, self.units)

    def define_variables(self, graph: IGraph, input_shape: Shape) -> None:
        in_features = input_shape[-1]
        self._kernel = self.add_weight(
            graph,
            "dense_kernel",
            (in_features, self.units),
            self.kernel_initializer,
            fan_in=in_features,
            fan_out=self.units,
        )
        if self.use_bias:
            self._bias = self.add_weight(graph, "dense_bias", (self.units,), self.bias_initializer)

    def reset(self) -> None:
        super().reset()
        self._kernel = None
        self._bias = None

    def transform_input(self, graph: IGraph, x: IOperand) -> IOperand:
        self._require_built("Kernel")
        shape = None if x.shape is None else tuple(x.shape[:-1]) + (self.units,)
        y = graph.build_op("matmul", x, self._kernel, shape=shape)
        if self._bias is not None:
            y = graph.build_op("bias_add", y, self._bias, shape=shape)
        return apply_activation(graph, y, self.activation, shape=shape)

    def get_config(self) -> Dict[str, Any]:
        return {
            "units": self.units,
            "activation": self.activation.value,
            "use_bias": self.use_bias,
            "kernel_initializer": self.kernel_initializer.get_config(),
            "bias_initializer": self.bias_initializer.get_config(),
            "name": self.name,
            **self._trainable_config(),
        }

    @classmethod
    def from_config(cls, cfg: Dict[str, Any]) -> "Dense":
        layer = cls(
            units=int(cfg["units"]),
            activation=cfg.get("activation", Activations.RELU.value),
            use_bias=bool(cfg.get("use_bias", True)),
            kernel_initializer=WeightInitializer.from_config(cfg["kernel_initializer"])
            if cfg.get("kernel_initializer")
            else None,
            bias_initializer=WeightInitializer.from_config(cfg["bias_initializer"])
            if cfg.get("bias_initializer")
            else None,
            name=cfg.get("name", ""),
        )
        return layer._restore_trainable(cfg)

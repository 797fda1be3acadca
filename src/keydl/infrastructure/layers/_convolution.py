"""
Convolution layers for KeyDL.

This module defines the two trainable 2D convolution layers over NHWC inputs:

- `Conv2D`: dense convolution with a kernel of shape
  (kernel_h, kernel_w, in_channels, filters)
- `DepthwiseConv2D`: per-channel convolution with a kernel of shape
  (kernel_h, kernel_w, in_channels, depth_multiplier); every input channel
  yields `depth_multiplier` output channels

Both layers own a kernel and an optional bias, apply a configurable
activation after the bias add, and delegate numerical work to the engine's
`conv2d` / `depthwise_conv2d` kernels.

Design overview
---------------
- Hyperparameters are validated and normalized in the constructor, so a bad
  kernel/stride specification or FULL padding fails at construction time.
- Shape arithmetic lives in `keydl.domain._shape_contract`; this module only
  wires it to the layer lifecycle.
- Variables are named `"{layer}_conv2d_kernel"` / `"{layer}_conv2d_bias"`
  (and `depthwise_conv2d_*` respectively).

Example
-------
>>> conv = Conv2D(filters=32, kernel_size=(5, 5), strides=(1, 1, 1, 1))
>>> conv.compute_output_shape((-1, 28, 28, 1))
(-1, 28, 28, 32)
"""

from __future__ import annotations

import warnings
from typing import Any, Dict, Optional, Tuple

from ...domain._activations import Activations
from ...domain._engine import IGraph, IOperand
from ...domain._errors import ConfigurationError
from ...domain._padding import ConvPadding
from ...domain._shape import Shape, is_known
from ...domain._shape_contract import (
    check_padding_supported,
    check_rank,
    conv2d_output_shape,
    depthwise_conv2d_output_shape,
    normalize_spatial,
)
from ..serialization._config_core import register_layer
from ..utils.weight_initializer import GlorotUniform, WeightInitializer, Zeros
from ._activation import apply_activation
from ._layer import Layer


def _positive_int(value: Any, name: str) -> int:
    if not isinstance(value, int) or isinstance(value, bool) or value <= 0:
        raise ConfigurationError(f"{name} should be a positive integer, got {value!r}.")
    return int(value)


def _conv_fan_out(channels_out: int, kernel_size: Tuple[int, int], strides: Tuple[int, int]) -> int:
    """
    Fan-out of a strided convolution: each input element reaches
    `channels_out * kh * kw / (sh * sw)` outputs on average.
    """
    k_h, k_w = kernel_size
    s_h, s_w = strides
    fan_out = round(channels_out * k_h * k_w / (s_h * s_w))
    if fan_out <= 0:
        warnings.warn(
            f"Convolution fan_out rounds to {fan_out}; clamping to 1.",
            RuntimeWarning,
            stacklevel=3,
        )
        fan_out = 1
    return fan_out


class _Conv2DBase(Layer):
    """
    Shared state of the 2D convolution layers.
    """

    def __init__(
        self,
        kernel_size,
        strides,
        padding: ConvPadding,
        activation,
        use_bias: bool,
        kernel_initializer: Optional[WeightInitializer],
        bias_initializer: Optional[WeightInitializer],
        name: str,
    ) -> None:
        super().__init__(name=name)
        self.kernel_size: Tuple[int, int] = normalize_spatial(kernel_size, 2, "kernel_size")
        self.strides: Tuple[int, int] = normalize_spatial(strides, 2, "strides")
        self.padding = check_padding_supported(padding)
        self.activation = Activations.resolve(activation)
        self.use_bias = bool(use_bias)
        self.kernel_initializer = kernel_initializer or GlorotUniform()
        self.bias_initializer = bias_initializer or Zeros()
        self._kernel: Optional[IOperand] = None
        self._bias: Optional[IOperand] = None

    def has_activation(self) -> bool:
        return True

    def reset(self) -> None:
        super().reset()
        self._kernel = None
        self._bias = None

    @staticmethod
    def _in_channels(input_shape: Shape, layer: str) -> int:
        shape = check_rank(input_shape, 4, layer)
        if not is_known(shape[3]):
            raise ConfigurationError(f"{layer} requires a known channel axis, got {shape}.")
        return shape[3]

    def _finish(self, graph: IGraph, y: IOperand) -> IOperand:
        if self._bias is not None:
            y = graph.build_op("bias_add", y, self._bias, shape=self._output_shape)
        return apply_activation(graph, y, self.activation, shape=self._output_shape)

    def _base_config(self) -> Dict[str, Any]:
        return {
            "kernel_size": list(self.kernel_size),
            "strides": list(self.strides),
            "padding": self.padding.value,
            "activation": self.activation.value,
            "use_bias": self.use_bias,
            "kernel_initializer": self.kernel_initializer.get_config(),
            "bias_initializer": self.bias_initializer.get_config(),
            "name": self.name,
            **self._trainable_config(),
        }

    @staticmethod
    def _base_kwargs(cfg: Dict[str, Any]) -> Dict[str, Any]:
        return {
            "kernel_size": tuple(cfg["kernel_size"]),
            "strides": tuple(cfg["strides"]),
            "padding": ConvPadding(cfg["padding"]),
            "activation": cfg.get("activation", Activations.RELU.value),
            "use_bias": bool(cfg.get("use_bias", True)),
            "kernel_initializer": WeightInitializer.from_config(cfg["kernel_initializer"])
            if cfg.get("kernel_initializer")
            else None,
            "bias_initializer": WeightInitializer.from_config(cfg["bias_initializer"])
            if cfg.get("bias_initializer")
            else None,
            "name": cfg.get("name", ""),
        }


@register_layer()
class Conv2D(_Conv2DBase):
    """
    Two-dimensional convolution layer (NHWC).

    Parameters
    ----------
    filters : int
        Number of output channels.
    kernel_size : int or tuple[int, int]
        Convolution window.
    strides : int, tuple[int, int] or tuple[int, int, int, int], optional
        Convolution stride. The 4-element form must be `(1, s_h, s_w, 1)`.
        Defaults to 1.
    padding : ConvPadding, optional
        SAME (default) or VALID. FULL raises `UnsupportedFeatureError`.
    activation : Activations or str, optional
        Activation applied after the bias add. Defaults to RELU.
    use_bias : bool, optional
        Whether to add a learnable bias. Defaults to True.
    kernel_initializer, bias_initializer : WeightInitializer, optional
        Defaults to Glorot-uniform kernels and zero biases.
    name : str, optional
        Layer name.

    Notes
    -----
    Parameter count: `kh * kw * in_channels * filters + filters`.
    """

    KIND_TAG = "conv2d"

    def __init__(
        self,
        filters: int = 32,
        kernel_size=(5, 5),
        strides=(1, 1),
        padding: ConvPadding = ConvPadding.SAME,
        activation: Activations | str = Activations.RELU,
        use_bias: bool = True,
        kernel_initializer: Optional[WeightInitializer] = None,
        bias_initializer: Optional[WeightInitializer] = None,
        name: str = "",
    ) -> None:
        super().__init__(
            kernel_size,
            strides,
            padding,
            activation,
            use_bias,
            kernel_initializer,
            bias_initializer,
            name,
        )
        self.filters = _positive_int(filters, "filters")

    def compute_output_shape(self, input_shape: Shape) -> Shape:
        return conv2d_output_shape(
            input_shape, self.kernel_size, self.strides, self.padding, self.filters
        )

    def define_variables(self, graph: IGraph, input_shape: Shape) -> None:
        in_channels = self._in_channels(input_shape, "Conv2D")
        k_h, k_w = self.kernel_size
        self._kernel = self.add_weight(
            graph,
            "conv2d_kernel",
            (k_h, k_w, in_channels, self.filters),
            self.kernel_initializer,
            fan_in=in_channels * k_h * k_w,
            fan_out=_conv_fan_out(self.filters, self.kernel_size, self.strides),
        )
        if self.use_bias:
            self._bias = self.add_weight(
                graph, "conv2d_bias", (self.filters,), self.bias_initializer
            )

    def transform_input(self, graph: IGraph, x: IOperand) -> IOperand:
        self._require_built("Kernel")
        y = graph.build_op(
            "conv2d",
            x,
            self._kernel,
            shape=self._output_shape,
            strides=self.strides,
            padding=self.padding,
        )
        return self._finish(graph, y)

    def get_config(self) -> Dict[str, Any]:
        return {"filters": self.filters, **self._base_config()}

    @classmethod
    def from_config(cls, cfg: Dict[str, Any]) -> "Conv2D":
        layer = cls(filters=int(cfg["filters"]), **cls._base_kwargs(cfg))
        return layer._restore_trainable(cfg)


@register_layer()
class DepthwiseConv2D(_Conv2DBase):
    """
    Depthwise two-dimensional convolution layer (NHWC).

    Each input channel is convolved with its own `depth_multiplier` filters,
    so the output has `in_channels * depth_multiplier` channels.

    Parameters
    ----------
    kernel_size : int or tuple[int, int]
        Convolution window.
    strides : int, tuple[int, int] or tuple[int, int, int, int], optional
        Convolution stride. Defaults to 1.
    depth_multiplier : int, optional
        Filters per input channel. Defaults to 1.
    padding : ConvPadding, optional
        SAME (default) or VALID.
    activation : Activations or str, optional
        Defaults to RELU.
    use_bias : bool, optional
        Defaults to True.
    depthwise_initializer, bias_initializer : WeightInitializer, optional
        Defaults to Glorot-uniform kernels and zero biases.
    name : str, optional
        Layer name.

    Notes
    -----
    Parameter count: `kh * kw * in_channels * m + in_channels * m`.
    """

    KIND_TAG = "depthwise_conv2d"

    def __init__(
        self,
        kernel_size=(3, 3),
        strides=(1, 1),
        depth_multiplier: int = 1,
        padding: ConvPadding = ConvPadding.SAME,
        activation: Activations | str = Activations.RELU,
        use_bias: bool = True,
        depthwise_initializer: Optional[WeightInitializer] = None,
        bias_initializer: Optional[WeightInitializer] = None,
        name: str = "",
    ) -> None:
        super().__init__(
            kernel_size,
            strides,
            padding,
            activation,
            use_bias,
            depthwise_initializer,
            bias_initializer,
            name,
        )
        self.depth_multiplier = _positive_int(depth_multiplier, "depth_multiplier")

    @property
    def depthwise_initializer(self) -> WeightInitializer:
        return self.kernel_initializer

    def compute_output_shape(self, input_shape: Shape) -> Shape:
        return depthwise_conv2d_output_shape(
            input_shape, self.kernel_size, self.strides, self.padding, self.depth_multiplier
        )

    def define_variables(self, graph: IGraph, input_shape: Shape) -> None:
        in_channels = self._in_channels(input_shape, "DepthwiseConv2D")
        k_h, k_w = self.kernel_size
        m = self.depth_multiplier
        self._kernel = self.add_weight(
            graph,
            "depthwise_conv2d_kernel",
            (k_h, k_w, in_channels, m),
            self.kernel_initializer,
            fan_in=k_h * k_w,
            fan_out=_conv_fan_out(m, self.kernel_size, self.strides),
        )
        if self.use_bias:
            self._bias = self.add_weight(
                graph, "depthwise_conv2d_bias", (in_channels * m,), self.bias_initializer
            )

    def transform_input(self, graph: IGraph, x: IOperand) -> IOperand:
        self._require_built("Kernel")
        y = graph.build_op(
            "depthwise_conv2d",
            x,
            self._kernel,
            shape=self._output_shape,
            strides=self.strides,
            padding=self.padding,
        )
        return self._finish(graph, y)

    def get_config(self) -> Dict[str, Any]:
        cfg = self._base_config()
        cfg["depthwise_initializer"] = cfg.pop("kernel_initializer")
        return {"depth_multiplier": self.depth_multiplier, **cfg}

    @classmethod
    def from_config(cls, cfg: Dict[str, Any]) -> "DepthwiseConv2D":
        cfg = dict(cfg)
        cfg["kernel_initializer"] = cfg.pop("depthwise_initializer", None)
        kwargs = cls._base_kwargs(cfg)
        kwargs["depthwise_initializer"] = kwargs.pop("kernel_initializer")
        layer = cls(depth_multiplier=int(cfg.get("depth_multiplier", 1)), **kwargs)
        return layer._restore_trainable(cfg)

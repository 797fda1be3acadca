"""
2D pooling layers (NHWC).

`MaxPool2D` and `AvgPool2D` are stateless: they own no variables and report
zero parameters. Window and stride specifications accept an int, a pair, or
the engine-style `(1, k_h, k_w, 1)` form.
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import ClassVar, Optional, Tuple

from ...domain._engine import IGraph, IOperand
from ...domain._padding import ConvPadding
from ...domain._shape import Shape
from ...domain._shape_contract import (
    check_padding_supported,
    normalize_spatial,
    pool2d_output_shape,
)
from ...domain.model._pool2d_mixin import Pool2dConfigMixin
from ..serialization._config_core import register_layer
from ._layer import Layer


@dataclass(frozen=True)
class Pool2dMeta:
    """Normalized pooling hyperparameters."""

    pool_size: Tuple[int, int]
    strides: Tuple[int, int]
    padding: ConvPadding


class _Pool2D(Pool2dConfigMixin, Layer):
    OP_KIND: ClassVar[str] = ""

    def __init__(
        self,
        pool_size=(2, 2),
        strides=None,
        padding: ConvPadding = ConvPadding.VALID,
        name: str = "",
    ) -> None:
        super().__init__(name=name)
        pool = normalize_spatial(pool_size, 2, "pool_size")
        self.meta = Pool2dMeta(
            pool_size=pool,
            strides=pool if strides is None else normalize_spatial(strides, 2, "strides"),
            padding=check_padding_supported(padding),
        )

    @property
    def pool_size(self) -> Tuple[int, int]:
        return self.meta.pool_size

    @property
    def strides(self) -> Tuple[int, int]:
        return self.meta.strides

    @property
    def padding(self) -> ConvPadding:
        return self.meta.padding

    def compute_output_shape(self, input_shape: Shape) -> Shape:
        return pool2d_output_shape(input_shape, self.pool_size, self.strides, self.padding)

    def transform_input(self, graph: IGraph, x: IOperand) -> IOperand:
        self._require_built("Output shape")
        return graph.build_op(
            self.OP_KIND,
            x,
            shape=self._output_shape,
            pool_size=self.pool_size,
            strides=self.strides,
            padding=self.padding,
        )


@register_layer()
class MaxPool2D(_Pool2D):
    """
    Max pooling over 2D windows.

    Parameters
    ----------
    pool_size : int or tuple, optional
        Window size. Defaults to (2, 2).
    strides : int or tuple, optional
        Window stride. Defaults to `pool_size`.
    padding : ConvPadding, optional
        VALID (default) or SAME. SAME pads with -inf.
    name : str, optional
        Layer name.
    """

    KIND_TAG = "maxpool2d"
    OP_KIND = "max_pool"


@register_layer()
class AvgPool2D(_Pool2D):
    """
    Average pooling over 2D windows. Padded cells are excluded from each
    window's mean.
    """

    KIND_TAG = "avgpool2d"
    OP_KIND = "avg_pool"

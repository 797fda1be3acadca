"""
Layer interface definitions.

This module defines the domain-level interface for KeyDL layers using
structural subtyping via `typing.Protocol`.

A layer is a named, composable unit with a shape contract. Models dispatch to
layers only through the capability set below; any object implementing it can
take part in sequential assembly and compilation.
"""

from __future__ import annotations

from typing import Protocol, runtime_checkable

from ._engine import IGraph, IOperand
from ._shape import Shape


@runtime_checkable
class ILayer(Protocol):
    """
    Domain-level layer interface.

    Lifecycle
    ---------
    1. Constructed with hyperparameters, before any shape is known.
    2. Defined during model compilation: the preceding layer's output shape is
       fed into `define_variables`, after which `get_params` is valid.
    3. Frozen: only variable values (owned by the engine session) change.

    Notes
    -----
    - `compute_output_shape` must be pure: calling it twice with the same input
      shape yields identical results and mutates nothing.
    - `get_params` must fail with `UninitializedModelError` when called before
      `define_variables` has run.
    """

    name: str

    @property
    def is_trainable(self) -> bool:
        """Whether the layer's variables take part in training."""
        ...

    def has_activation(self) -> bool:
        """Whether the layer applies an activation after its primary transform."""
        ...

    def compute_output_shape(self, input_shape: Shape) -> Shape:
        """Map an input shape to this layer's output shape."""
        ...

    def define_variables(self, graph: IGraph, input_shape: Shape) -> None:
        """Create and register the layer's trainable variables, if any."""
        ...

    def transform_input(self, graph: IGraph, x: IOperand) -> IOperand:
        """Build the forward computation for `x` and return its output operand."""
        ...

    def get_params(self) -> int:
        """Total scalar count across the layer's trainable variables."""
        ...

"""
Infrastructure layer base class.

This module provides a concrete `Layer` implementation that satisfies the
domain-level `ILayer` protocol. It implements the conveniences shared by all
layer kinds:

- the one-shot `build` step that runs the shape contract and variable
  definition and records the resulting shapes
- explicit `Optional` shape fields guarded by a built flag, so that early
  access raises `UninitializedModelError` instead of an attribute error
- named variable registration (`add_weight`) and parameter counting
- weight access through the owning model's session

Concrete layers override `compute_output_shape`, `transform_input` and, when
they own variables, `define_variables`.
"""

from __future__ import annotations

from typing import Any, ClassVar, Dict, List, Optional, Sequence

import numpy as np

from ...domain._engine import IGraph, IOperand
from ...domain._errors import (
    ConfigurationError,
    DoubleCompileError,
    UninitializedModelError,
)
from ...domain._layer import ILayer
from ...domain._shape import Shape, make_shape, num_elements


class Layer(ILayer):
    """
    Base class for KeyDL layers.

    Parameters
    ----------
    name : str, optional
        Explicit layer name. The empty string means "unnamed"; the model's
        name registry assigns `"{KIND_TAG}_{index}"` in that case.

    Attributes
    ----------
    KIND_TAG : ClassVar[str]
        Lowercase type tag used for generated names.
    name : str
        Layer name.
    is_trainable : bool
        Whether the layer's variables take part in training. Frozen layers
        are reported separately by model summaries.

    Notes
    -----
    - A layer belongs to at most one model (`_parent_model`).
    - `build` may run only once; a second call raises `DoubleCompileError`.
    """

    KIND_TAG: ClassVar[str] = "layer"
    dtype: ClassVar[Any] = np.float32

    def __init__(self, name: str = "") -> None:
        if not isinstance(name, str):
            raise ConfigurationError(f"Layer name should be a string, got {name!r}.")
        self.name = name
        self._trainable = True
        self._input_shape: Optional[Shape] = None
        self._output_shape: Optional[Shape] = None
        self._built = False
        self._weights: Dict[str, IOperand] = {}
        self._parent_model = None

    # ------------------------------------------------------------------
    # Static per-variant flags
    # ------------------------------------------------------------------
    @property
    def kind(self) -> str:
        """Class name shown in model summaries (e.g. "Conv2D")."""
        return self.__class__.__name__

    def has_activation(self) -> bool:
        return False

    @property
    def is_trainable(self) -> bool:
        return self._trainable

    @is_trainable.setter
    def is_trainable(self, value: bool) -> None:
        self._trainable = bool(value)

    # ------------------------------------------------------------------
    # Shape state
    # ------------------------------------------------------------------
    @property
    def is_built(self) -> bool:
        return self._built

    def _require_built(self, what: str) -> None:
        if not self._built:
            raise UninitializedModelError(
                f"{what} of layer {self.name or self.kind!r} is not available "
                "before the model is compiled."
            )

    @property
    def input_shape(self) -> Shape:
        self._require_built("Input shape")
        return self._input_shape

    @property
    def output_shape(self) -> Shape:
        self._require_built("Output shape")
        return self._output_shape

    # ------------------------------------------------------------------
    # Capability contract
    # ------------------------------------------------------------------
    def compute_output_shape(self, input_shape: Shape) -> Shape:
        raise NotImplementedError

    def define_variables(self, graph: IGraph, input_shape: Shape) -> None:
        """
        Create the layer's variables. Layers without trainable state keep
        this default no-op.
        """
        return None

    def transform_input(self, graph: IGraph, x: IOperand) -> IOperand:
        raise NotImplementedError

    def get_params(self) -> int:
        """
        Total scalar count across this layer's variables.

        Raises
        ------
        UninitializedModelError
            If queried before the layer has been built.
        """
        self._require_built("Parameter count")
        return sum(num_elements(w.shape) for w in self._weights.values())

    # ------------------------------------------------------------------
    # Lifecycle
    # ------------------------------------------------------------------
    def build(self, graph: IGraph, input_shape: Sequence[int]) -> Shape:
        """
        Run the shape contract, define variables and freeze the shapes.

        Parameters
        ----------
        graph : IGraph
            Graph in which variables are created.
        input_shape : Sequence[int]
            Output shape of the preceding layer.

        Returns
        -------
        Shape
            This layer's output shape.

        Raises
        ------
        DoubleCompileError
            If the layer has already been built.
        """
        if self._built:
            raise DoubleCompileError(
                f"Layer {self.name!r} has already been built; variables cannot "
                "be defined twice."
            )
        input_shape = make_shape(input_shape)
        output_shape = self.compute_output_shape(input_shape)
        self.define_variables(graph, input_shape)
        self._input_shape = input_shape
        self._output_shape = output_shape
        self._built = True
        return output_shape

    def reset(self) -> None:
        """
        Forget shapes and variable handles so the layer can be built again
        (used when a compile attempt fails half-way).
        """
        self._input_shape = None
        self._output_shape = None
        self._weights = {}
        self._built = False

    def add_weight(
        self,
        graph: IGraph,
        role: str,
        shape: Sequence[int],
        initializer,
        *,
        fan_in: Optional[int] = None,
        fan_out: Optional[int] = None,
    ) -> IOperand:
        """
        Create the variable `"{name}_{role}"` and register it on this layer.

        Parameters
        ----------
        graph : IGraph
            Graph in which the variable is created.
        role : str
            Variable role, e.g. "conv2d_kernel" or "dense_bias".
        shape : Sequence[int]
            Fully-known variable shape.
        initializer : WeightInitializer
            Produces the initial value.
        fan_in, fan_out : Optional[int]
            Fan values forwarded to the initializer.
        """
        shape = make_shape(shape)

        def _init(var_shape, *, dtype=None):
            return initializer(var_shape, fan_in=fan_in, fan_out=fan_out, dtype=dtype)

        var = graph.create_variable(f"{self.name}_{role}", shape, self.dtype, _init)
        self._weights[role] = var
        return var

    @property
    def variable_names(self) -> List[str]:
        """Engine names of this layer's variables, in creation order."""
        return [w.name for w in self._weights.values()]

    # ------------------------------------------------------------------
    # Weights access through the owning model
    # ------------------------------------------------------------------
    def _session(self):
        if self._parent_model is None:
            raise UninitializedModelError(
                f"Layer {self.name!r} is not attached to a model."
            )
        return self._parent_model._require_session()

    def get_weights(self) -> List[np.ndarray]:
        """
        Fetch the current values of this layer's variables.
        """
        self._require_built("Weights")
        session = self._session()
        if not self._weights:
            return []
        return session.run_fetch(self.variable_names)

    def set_weights(self, values: Sequence[Any]) -> None:
        """
        Assign new values to this layer's variables, in creation order.

        Raises
        ------
        ConfigurationError
            If the number of arrays differs from the number of variables.
        """
        self._require_built("Weights")
        values = list(values)
        session = self._session()
        names = self.variable_names
        if len(values) != len(names):
            raise ConfigurationError(
                f"Layer {self.name!r} expects {len(names)} weight arrays, got {len(values)}."
            )
        for var_name, value in zip(names, values):
            session.assign(var_name, value)

    # ------------------------------------------------------------------
    # Configuration hooks
    # ------------------------------------------------------------------
    def get_config(self) -> Dict[str, Any]:
        """
        Return a JSON-serializable configuration for this layer.

        Raises
        ------
        NotImplementedError
            If the layer does not support configuration export.
        """
        raise NotImplementedError(
            f"{self.__class__.__name__} does not implement get_config()."
        )

    @classmethod
    def from_config(cls, cfg: Dict[str, Any]) -> "Layer":
        return cls(**cfg)

    def _trainable_config(self) -> Dict[str, Any]:
        # only frozen layers record the flag
        return {} if self._trainable else {"trainable": False}

    def _restore_trainable(self, cfg: Dict[str, Any]) -> "Layer":
        self.is_trainable = cfg.get("trainable", True)
        return self

    def __repr__(self) -> str:
        return f"{self.kind}(name={self.name!r})"

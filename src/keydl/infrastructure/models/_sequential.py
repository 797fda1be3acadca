"""
Sequential model.

This module defines `Sequential`, an ordered pipeline of layers that starts
with an `Input` layer:

    y = L_n(...L_2(L_1(input)))

A model moves through three states:

    CREATED --compile()--> COMPILED --close()--> DISPOSED
       |                                            ^
       +------------------close()-------------------+

`compile` binds the optimizer, loss and metric, opens an engine session,
builds every layer in order (feeding each output shape into the next layer),
records the forward graph plus the loss and metric nodes, and initializes the
variables. If anything fails, the session is closed, every layer is reset and
the model stays in CREATED.

Notes
-----
- Layer names are resolved by the name registry when a layer is added, so
  `Sequential.of(a, b, c)` and `Sequential().add(a).add(b).add(c)` produce the
  same names and raise the same errors.
- A layer belongs to exactly one model.
- Every operation on a disposed model raises `ModelDisposedError`, except the
  `is_closed` / `is_compiled` flags and `close()` itself.
"""

from __future__ import annotations

import json
import logging
from enum import Enum
from typing import Any, Dict, Iterable, Iterator, List, Optional, Sequence, Tuple

import numpy as np

from ...domain._errors import (
    ConfigurationError,
    DoubleCompileError,
    ModelDisposedError,
    UninitializedModelError,
)
from ...domain._losses import LossFunctions, Metrics
from ...domain._optimizers import IOptimizer
from ...domain._shape import Shape, UNKNOWN_DIM, shape_to_str
from ..engine import Graph, Session
from ..layers import Input, Layer
from ..optimizers import SGD, optimizer_from_config
from ..serialization._config_core import layer_from_config, layer_to_config
from ._naming import resolve_names

logger = logging.getLogger(__name__)

SUMMARY_NAME_WIDTH = 29
SUMMARY_SHAPE_WIDTH = 26


class ModelState(Enum):
    CREATED = "created"
    COMPILED = "compiled"
    DISPOSED = "disposed"


class Sequential:
    """
    Ordered stack of layers compiled into an engine graph.

    Parameters
    ----------
    *layers : Layer
        Layers appended in order; the first must be an `Input`.

    Examples
    --------
    >>> model = Sequential.of(
    ...     Input(28, 28, 1),
    ...     Conv2D(32, (5, 5)),
    ...     MaxPool2D((2, 2)),
    ...     Flatten(),
    ...     Dense(10, activation="linear"),
    ... )
    >>> model.compile(SGD(lr=0.01), "softmax_cross_entropy_with_logits", "accuracy")
    >>> model.summary()[0]
    'conv2d_1(Conv2D)             [-1, 28, 28, 32]          832'
    """

    def __init__(self, *layers: Layer) -> None:
        self._all_layers: List[Layer] = []
        self._state = ModelState.CREATED
        self._graph: Optional[Graph] = None
        self._session: Optional[Session] = None
        self._output = None
        self._target = None
        self._loss_op = None
        self._metric_op = None
        self.optimizer: Optional[IOptimizer] = None
        self.loss: Optional[LossFunctions] = None
        self.metric: Optional[Metrics] = None
        self.compile_config: Optional[Dict[str, Any]] = None
        self._attach(layers)

    @classmethod
    def of(cls, *layers: Layer) -> "Sequential":
        """Build a model from a literal list of layers."""
        return cls(*layers)

    # ------------------------------------------------------------------
    # State
    # ------------------------------------------------------------------
    @property
    def is_compiled(self) -> bool:
        return self._state is ModelState.COMPILED

    @property
    def is_closed(self) -> bool:
        return self._state is ModelState.DISPOSED

    @property
    def state(self) -> ModelState:
        return self._state

    def _check_open(self) -> None:
        if self._state is ModelState.DISPOSED:
            raise ModelDisposedError("The model has been closed and can no longer be used.")

    def _require_compiled(self, what: str) -> None:
        self._check_open()
        if self._state is not ModelState.COMPILED:
            raise UninitializedModelError(f"{what} is not available before compile().")

    def _require_session(self) -> Session:
        self._require_compiled("The engine session")
        return self._session

    # ------------------------------------------------------------------
    # Assembly
    # ------------------------------------------------------------------
    def add(self, layer: Layer) -> "Sequential":
        """
        Append a layer and resolve its name.

        Returns
        -------
        Sequential
            This model, for chaining.

        Raises
        ------
        ConfigurationError
            If the model is compiled, the layer is not a `Layer`, the layer
            already belongs to a model, or the `Input` placement is wrong.
        DuplicateLayerNameError
            If the layer's (explicit or generated) name is already taken.
        """
        self._attach([layer])
        return self

    def _attach(self, new_layers: Sequence[Layer]) -> None:
        # Validate the whole batch before committing names or ownership.
        self._check_open()
        if self._state is ModelState.COMPILED:
            raise ConfigurationError("Layers cannot be added to a compiled model.")

        offset = len(self._all_layers)
        seen = set()
        for position, layer in enumerate(new_layers, start=offset):
            if not isinstance(layer, Layer):
                raise ConfigurationError(f"Sequential.add expects a Layer, got: {type(layer)}")
            if layer._parent_model is not None or id(layer) in seen:
                raise ConfigurationError(f"Layer {layer!r} already belongs to a model.")
            seen.add(id(layer))
            if position == 0 and not isinstance(layer, Input):
                raise ConfigurationError("The first layer of a Sequential model must be an Input.")
            if position > 0 and isinstance(layer, Input):
                raise ConfigurationError("Input is only allowed as the first layer.")

        names = resolve_names(self._all_layers + list(new_layers))
        for layer, name in zip(new_layers, names[offset:]):
            layer.name = name
            layer._parent_model = self
            self._all_layers.append(layer)

    @property
    def input_layer(self) -> Optional[Input]:
        self._check_open()
        return self._all_layers[0] if self._all_layers else None

    @property
    def layers(self) -> Tuple[Layer, ...]:
        """Layers after the input, in order."""
        self._check_open()
        return tuple(self._all_layers[1:])

    def get_layer(self, name: str) -> Layer:
        """
        Raises
        ------
        KeyError
            If no layer has this name.
        """
        self._check_open()
        for layer in self._all_layers:
            if layer.name == name:
                return layer
        raise KeyError(f"No layer named {name!r}.")

    def __len__(self) -> int:
        return len(self.layers)

    def __iter__(self) -> Iterator[Layer]:
        return iter(self.layers)

    def __getitem__(self, idx: int) -> Layer:
        return self.layers[idx]

    # ------------------------------------------------------------------
    # Compile
    # ------------------------------------------------------------------
    def compile(
        self,
        optimizer: Optional[IOptimizer] = None,
        loss: LossFunctions | str = LossFunctions.SOFT_MAX_CROSS_ENTROPY_WITH_LOGITS,
        metric: Metrics | str = Metrics.ACCURACY,
    ) -> "Sequential":
        """
        Bind training settings and build the engine graph.

        Parameters
        ----------
        optimizer : IOptimizer, optional
            Defaults to `SGD()`.
        loss : LossFunctions or str, optional
            Defaults to softmax cross-entropy with logits.
        metric : Metrics or str, optional
            Defaults to accuracy.

        Raises
        ------
        DoubleCompileError
            If the model is already compiled.
        ModelDisposedError
            If the model has been closed.
        ConfigurationError
            For invalid settings, a missing input layer, or any shape
            contract violation while building the layers.
        """
        self._check_open()
        if self._state is ModelState.COMPILED:
            raise DoubleCompileError("The model has already been compiled.")

        optimizer = SGD() if optimizer is None else optimizer
        if not isinstance(optimizer, IOptimizer):
            raise ConfigurationError(f"Unsupported optimizer: {optimizer!r}")
        optimizer.validate()
        loss = LossFunctions.resolve(loss)
        metric = Metrics.resolve(metric)

        if len(self._all_layers) < 2:
            raise ConfigurationError(
                "A Sequential model needs an Input layer followed by at least one layer."
            )

        graph = Graph()
        session = Session(graph)
        try:
            x = None
            shape: Shape = self._all_layers[0].packed_shape
            for layer in self._all_layers:
                shape = layer.build(graph, shape)
                x = layer.transform_input(graph, x)
                logger.debug(
                    "Built %s(%s) -> %s", layer.name, layer.kind, shape_to_str(shape)
                )

            target_shape = x.shape if x.shape is not None else (UNKNOWN_DIM,) + tuple(shape)
            target = graph.placeholder(None, target_shape)
            loss_op = graph.build_op(loss.value, x, target, shape=())
            metric_op = graph.build_op(metric.value, x, target, shape=())
            session.initialize_variables()
        except Exception:
            session.close()
            for layer in self._all_layers:
                layer.reset()
            logger.debug("Compile failed; released session and reset layers")
            raise

        self._graph = graph
        self._session = session
        self._output = x
        self._target = target
        self._loss_op = loss_op
        self._metric_op = metric_op
        self.optimizer = optimizer
        self.loss = loss
        self.metric = metric
        self._state = ModelState.COMPILED
        logger.info(
            "Compiled model with %d layers and %d parameters (loss=%s, metric=%s)",
            len(self._all_layers) - 1,
            self.count_params(),
            loss.value,
            metric.value,
        )
        return self

    # ------------------------------------------------------------------
    # Introspection
    # ------------------------------------------------------------------
    def count_params(self) -> int:
        self._require_compiled("Parameter count")
        return sum(layer.get_params() for layer in self._all_layers)

    def trainable_params(self) -> int:
        self._require_compiled("Parameter count")
        return sum(layer.get_params() for layer in self._all_layers if layer.is_trainable)

    def frozen_params(self) -> int:
        self._require_compiled("Parameter count")
        return sum(layer.get_params() for layer in self._all_layers if not layer.is_trainable)

    def summary_rows(self) -> List[Tuple[str, str, Shape, int]]:
        """
        Returns
        -------
        list[tuple[str, str, Shape, int]]
            `(name, kind, output_shape, params)` for every non-input layer.
        """
        self._require_compiled("Summary")
        return [
            (layer.name, layer.kind, layer.output_shape, layer.get_params())
            for layer in self.layers
        ]

    def summary(self) -> List[str]:
        """
        Format one row per non-input layer and log the full table.

        Returns
        -------
        list[str]
            Rows such as
            `"conv2d_1(Conv2D)             [-1, 28, 28, 32]          832"`.
        """
        rows = [
            f"{name + '(' + kind + ')':<{SUMMARY_NAME_WIDTH}}"
            f"{shape_to_str(shape):<{SUMMARY_SHAPE_WIDTH}}{params}"
            for name, kind, shape, params in self.summary_rows()
        ]
        rule = "=" * (SUMMARY_NAME_WIDTH + SUMMARY_SHAPE_WIDTH + 10)
        header = (
            f"{'Layer (type)':<{SUMMARY_NAME_WIDTH}}"
            f"{'Output Shape':<{SUMMARY_SHAPE_WIDTH}}Param #"
        )
        table = [rule, header, rule, *rows, rule]
        table.append(f"Total params: {self.count_params()}")
        table.append(f"Trainable params: {self.trainable_params()}")
        table.append(f"Non-trainable params: {self.frozen_params()}")
        logger.info("Model summary:\n%s", "\n".join(table))
        return rows

    # ------------------------------------------------------------------
    # Inference
    # ------------------------------------------------------------------
    def predict(self, x: Any, batch_size: Optional[int] = None) -> np.ndarray:
        """
        Run the forward graph on `x`.

        Parameters
        ----------
        x : array-like
            Batch of shape `(N, *input_dims)`.
        batch_size : int, optional
            If given, evaluate in chunks of this many samples.
        """
        session = self._require_session()
        x = np.asarray(x, dtype=np.float32)
        feed_key = self.input_layer.placeholder
        if batch_size is None:
            return session.run_fetch([self._output], {feed_key: x})[0]
        if not isinstance(batch_size, int) or batch_size <= 0:
            raise ConfigurationError(f"batch_size should be a positive integer, got {batch_size!r}.")
        if len(x) == 0:
            return session.run_fetch([self._output], {feed_key: x})[0]
        chunks = [
            session.run_fetch([self._output], {feed_key: x[i : i + batch_size]})[0]
            for i in range(0, len(x), batch_size)
        ]
        return np.concatenate(chunks, axis=0)

    def predict_classes(self, x: Any) -> np.ndarray:
        """Arg-max over the last axis of `predict(x)`."""
        return np.argmax(self.predict(x), axis=-1)

    def evaluate(self, x: Any, y: Any) -> Dict[str, float]:
        """
        Compute the bound loss and metric on `(x, y)`.

        Returns
        -------
        dict[str, float]
            `{"loss": ..., "<metric>": ...}`.
        """
        session = self._require_session()
        loss_value, metric_value = session.run_fetch(
            [self._loss_op, self._metric_op],
            {self.input_layer.placeholder: x, self._target: y},
        )
        return {"loss": float(loss_value), self.metric.value: float(metric_value)}

    # ------------------------------------------------------------------
    # Weights
    # ------------------------------------------------------------------
    def get_weights(self) -> List[np.ndarray]:
        """All variable values, layer by layer, in creation order."""
        self._require_compiled("Weights")
        weights: List[np.ndarray] = []
        for layer in self.layers:
            weights.extend(layer.get_weights())
        return weights

    def set_weights(self, values: Iterable[Any]) -> None:
        """
        Assign all variable values, in the order returned by `get_weights`.

        Raises
        ------
        ConfigurationError
            If `values` does not hold exactly one array per variable.
        """
        self._require_compiled("Weights")
        values = list(values)
        expected = sum(len(layer.variable_names) for layer in self.layers)
        if len(values) != expected:
            raise ConfigurationError(f"Expected {expected} weight arrays, got {len(values)}.")
        offset = 0
        for layer in self.layers:
            count = len(layer.variable_names)
            layer.set_weights(values[offset : offset + count])
            offset += count

    # ------------------------------------------------------------------
    # Architecture config
    # ------------------------------------------------------------------
    def get_config(self) -> Dict[str, Any]:
        self._check_open()
        cfg: Dict[str, Any] = {"layers": [layer_to_config(l) for l in self._all_layers]}
        if self.optimizer is not None:
            cfg["compile"] = {
                "optimizer": self.optimizer.get_config(),
                "loss": self.loss.value,
                "metric": self.metric.value,
            }
        return cfg

    @classmethod
    def from_config(cls, cfg: Dict[str, Any]) -> "Sequential":
        """
        Rebuild an uncompiled model from `get_config()` output. The compile
        settings, when present, are stored in `compile_config` for the caller
        to apply.
        """
        model = cls(*[layer_from_config(node) for node in cfg.get("layers", [])])
        compile_cfg = cfg.get("compile")
        if compile_cfg:
            model.compile_config = {
                "optimizer": optimizer_from_config(compile_cfg["optimizer"]),
                "loss": compile_cfg["loss"],
                "metric": compile_cfg["metric"],
            }
        return model

    def to_json(self, **kwargs: Any) -> str:
        return json.dumps(self.get_config(), **kwargs)

    @classmethod
    def from_json(cls, text: str) -> "Sequential":
        return cls.from_config(json.loads(text))

    # ------------------------------------------------------------------
    # Disposal
    # ------------------------------------------------------------------
    def close(self) -> None:
        """
        Release the engine session. Idempotent.
        """
        if self._state is ModelState.DISPOSED:
            return
        if self._session is not None:
            self._session.close()
        self._session = None
        self._state = ModelState.DISPOSED
        logger.info("Closed model")

    def __enter__(self) -> "Sequential":
        self._check_open()
        return self

    def __exit__(self, exc_type, exc, tb) -> None:
        self.close()

    def __repr__(self) -> str:
        names = ", ".join(layer.name for layer in self._all_layers)
        return f"Sequential([{names}], state={self._state.value})"

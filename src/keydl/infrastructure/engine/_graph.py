"""
Symbolic graph for the KeyDL reference engine.

A `Graph` records operands without computing anything:

- `Placeholder` : a value fed at run time
- `Variable`    : a named value owned by a `Session`, created with an initializer
- `Operand`     : the output of an op node (`kind`, inputs, static attributes)

Evaluation happens in `Session.run_fetch`, which walks the recorded nodes and
dispatches each op kind to its registered NumPy kernel.

Design notes
------------
- Node names are unique per graph. Explicit names that collide raise
  `ValueError`; generated names follow the `kind`, `kind_1`, `kind_2`, ...
  pattern.
- Op kinds are validated against `KernelRegistry` at build time so that
  unknown ops fail while the graph is being constructed, not when it runs.
"""

from __future__ import annotations

import logging
from typing import Any, Callable, Dict, List, Optional, Tuple

import numpy as np

from ...domain._shape import Shape, make_shape
from ._kernels import KernelRegistry

logger = logging.getLogger(__name__)


class Operand:
    """
    Output of an op node.

    Attributes
    ----------
    kind : str
        Op kind, resolved to a kernel at run time.
    inputs : tuple[Operand, ...]
        Input operands, in kernel order.
    attrs : dict[str, Any]
        Static keyword attributes passed to the kernel.
    """

    __slots__ = ("_name", "_shape", "kind", "inputs", "attrs", "graph")

    def __init__(
        self,
        graph: "Graph",
        name: str,
        kind: str,
        inputs: Tuple["Operand", ...] = (),
        attrs: Optional[Dict[str, Any]] = None,
        shape: Optional[Shape] = None,
    ) -> None:
        self.graph = graph
        self._name = name
        self.kind = kind
        self.inputs = tuple(inputs)
        self.attrs = dict(attrs or {})
        self._shape = None if shape is None else make_shape(shape)

    @property
    def name(self) -> str:
        return self._name

    @property
    def shape(self) -> Optional[Shape]:
        """Static shape if known at build time, otherwise None."""
        return self._shape

    def __repr__(self) -> str:
        return f"{self.__class__.__name__}(name={self._name!r}, kind={self.kind!r}, shape={self._shape})"


class Placeholder(Operand):
    """
    Operand whose value is supplied through `feed_dict` at run time.
    """

    __slots__ = ("dtype",)

    def __init__(self, graph: "Graph", name: str, shape: Shape, dtype: Any) -> None:
        super().__init__(graph, name, "placeholder", shape=shape)
        self.dtype = np.dtype(dtype)


class Variable(Operand):
    """
    Named operand whose value lives in a `Session`.

    Attributes
    ----------
    dtype : np.dtype
        Element type of the stored value.
    initializer : Optional[Callable]
        Called as `initializer(shape, dtype=dtype)` when the session
        initializes variables. Zeros are used when absent.
    """

    __slots__ = ("dtype", "initializer")

    def __init__(
        self,
        graph: "Graph",
        name: str,
        shape: Shape,
        dtype: Any,
        initializer: Optional[Callable[..., Any]] = None,
    ) -> None:
        super().__init__(graph, name, "variable", shape=shape)
        self.dtype = np.dtype(dtype)
        self.initializer = initializer

    def initial_value(self) -> np.ndarray:
        """
        Produce the variable's initial value.

        Raises
        ------
        ValueError
            If the initializer returns an array of the wrong shape.
        """
        if self.initializer is None:
            return np.zeros(self.shape, dtype=self.dtype)
        value = np.asarray(self.initializer(self.shape, dtype=self.dtype), dtype=self.dtype)
        if value.shape != self.shape:
            raise ValueError(
                f"Initializer for variable {self.name!r} returned shape {value.shape}, "
                f"expected {self.shape}"
            )
        return value


class Graph:
    """
    Container of named operands.

    Satisfies the `IGraph` capability interface consumed by layers.
    """

    def __init__(self) -> None:
        self._nodes: Dict[str, Operand] = {}
        self._variables: List[Variable] = []
        self._kind_counts: Dict[str, int] = {}

    def _unique_name(self, name: Optional[str], kind: str) -> str:
        if name is not None:
            if name in self._nodes:
                raise ValueError(f"Graph already contains a node named {name!r}")
            return name

        count = self._kind_counts.get(kind, 0)
        candidate = kind if count == 0 else f"{kind}_{count}"
        while candidate in self._nodes:
            count += 1
            candidate = f"{kind}_{count}"
        self._kind_counts[kind] = count + 1
        return candidate

    def _add(self, node: Operand) -> Operand:
        self._nodes[node.name] = node
        return node

    def placeholder(self, name: Optional[str], shape: Shape, dtype: Any = np.float32) -> Placeholder:
        """Declare a run-time fed value."""
        return self._add(Placeholder(self, self._unique_name(name, "placeholder"), shape, dtype))

    def create_variable(
        self,
        name: str,
        shape: Shape,
        dtype: Any = np.float32,
        initializer: Optional[Callable[..., Any]] = None,
    ) -> Variable:
        """
        Create a named variable.

        Raises
        ------
        ValueError
            If the name is taken or the shape is not fully known.
        """
        shape = make_shape(shape)
        if any(d < 0 for d in shape):
            raise ValueError(f"Variable {name!r} requires a fully-known shape, got {shape}")
        var = Variable(self, self._unique_name(name, "variable"), shape, dtype, initializer)
        self._variables.append(var)
        logger.debug("Created variable %s with shape %s", var.name, shape)
        return self._add(var)

    def build_op(
        self,
        kind: str,
        *operands: Operand,
        name: Optional[str] = None,
        shape: Optional[Shape] = None,
        **attrs: Any,
    ) -> Operand:
        """
        Add an op node.

        Raises
        ------
        KeyError
            If no kernel is registered for `kind`.
        ValueError
            If an operand belongs to a different graph.
        """
        KernelRegistry.get(kind)
        for op in operands:
            if not isinstance(op, Operand) or op.graph is not self:
                raise ValueError(f"Operand {op!r} does not belong to this graph")
        node = Operand(self, self._unique_name(name, kind), kind, operands, attrs, shape)
        return self._add(node)

    def get(self, name: str) -> Operand:
        """
        Look up a node by name.

        Raises
        ------
        KeyError
            If the graph has no such node.
        """
        try:
            return self._nodes[name]
        except KeyError as e:
            raise KeyError(f"Graph has no node named {name!r}") from e

    @property
    def variables(self) -> Tuple[Variable, ...]:
        """All variables, in creation order."""
        return tuple(self._variables)

    def __contains__(self, name: str) -> bool:
        return name in self._nodes

    def __len__(self) -> int:
        return len(self._nodes)

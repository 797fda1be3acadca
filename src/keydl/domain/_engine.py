"""
Tensor engine capability interfaces.

Layers and models never depend on engine internals. They interact with the
tensor-computation engine only through the narrow structural contracts
defined here:

- `IGraph`   : build operands (placeholders, named variables, ops)
- `ISession` : run fetches against a graph, assign variable values, close

Structural typing is used so that any engine implementing these methods can
back a model, independent of inheritance.
"""

from __future__ import annotations

from typing import Any, Callable, Mapping, Optional, Protocol, Sequence, Union, runtime_checkable

from ._shape import Shape

Initializer = Callable[..., Any]


@runtime_checkable
class IOperand(Protocol):
    """
    A symbolic value in an engine graph.

    Operands are produced by the graph and consumed by further ops or by
    session fetches. They carry a unique name and a static (possibly partially
    unknown) shape.
    """

    @property
    def name(self) -> str:
        """Unique name of the operand within its graph."""
        ...

    @property
    def shape(self) -> Optional[Shape]:
        """Static shape (unknown extents are `UNKNOWN_DIM`), or None if not inferred."""
        ...


@runtime_checkable
class IGraph(Protocol):
    """
    Graph-construction capability.

    A layer receives an `IGraph` when defining its variables and when
    building its forward transform.
    """

    def placeholder(self, name: str, shape: Shape, dtype: Any) -> IOperand:
        """
        Declare a value that is fed at run time.

        Parameters
        ----------
        name : str
            Unique operand name.
        shape : Shape
            Static shape; the batch axis is usually unknown.
        dtype : Any
            Element type of the fed values.
        """
        ...

    def create_variable(
        self,
        name: str,
        shape: Shape,
        dtype: Any,
        initializer: Optional[Initializer] = None,
    ) -> IOperand:
        """
        Create a named, session-owned variable.

        Parameters
        ----------
        name : str
            Unique variable name; used later to fetch or assign its value.
        shape : Shape
            Fully-known variable shape.
        dtype : Any
            Element type.
        initializer : Optional[Callable]
            Called by the session to produce the initial value.
        """
        ...

    def build_op(
        self,
        kind: str,
        *operands: IOperand,
        name: Optional[str] = None,
        shape: Optional[Shape] = None,
        **attrs: Any,
    ) -> IOperand:
        """
        Add an operation node to the graph.

        Parameters
        ----------
        kind : str
            Operation kind (e.g. "conv2d", "bias_add", "relu").
        *operands : IOperand
            Inputs of the op, in kernel order.
        name : Optional[str]
            Explicit node name; generated from `kind` when omitted.
        shape : Optional[Shape]
            Static output shape, when the caller knows it.
        **attrs
            Static op attributes (strides, padding, ...).
        """
        ...


@runtime_checkable
class ISession(Protocol):
    """
    Execution capability bound to a graph.

    Sessions own variable values and must be closed to release them.
    """

    def run_fetch(
        self,
        fetches: Sequence[Union[str, IOperand]],
        feed_dict: Optional[Mapping[Union[str, IOperand], Any]] = None,
    ) -> list:
        """
        Evaluate the requested operands (by name or handle) and return their
        values in order.
        """
        ...

    def assign(self, name: str, value: Any) -> None:
        """
        Overwrite the value of the variable called `name`.
        """
        ...

    def close(self) -> None:
        """
        Release every resource held by the session.
        """
        ...

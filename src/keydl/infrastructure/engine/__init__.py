"""
NumPy reference engine.

`Graph` and `Session` implement the `IGraph` / `ISession` capability
interfaces that layers and models consume.
"""

from ._kernels import KernelRegistry
from ._graph import Graph, Operand, Placeholder, Variable
from ._session import Session

__all__ = [
    Graph.__name__,
    Session.__name__,
    Operand.__name__,
    Placeholder.__name__,
    Variable.__name__,
    KernelRegistry.__name__,
]

"""
Execution session for the KeyDL reference engine.

A `Session` binds to a `Graph`, owns the values of the graph's variables and
evaluates operands on request. It is a scoped resource: use it as a context
manager, or call `close()` on every exit path.
"""

from __future__ import annotations

import logging
from typing import Any, Dict, Mapping, Optional, Sequence, Union

import numpy as np

from ._graph import Graph, Operand, Placeholder, Variable
from ._kernels import KernelRegistry

logger = logging.getLogger(__name__)

Fetch = Union[str, Operand]


class Session:
    """
    Evaluates graph operands with NumPy kernels.

    Parameters
    ----------
    graph : Graph
        Graph whose operands this session evaluates.

    Notes
    -----
    - Variable values are created lazily by `initialize_variables()`.
    - Each `run_fetch` call memoizes node values for that call only.
    - After `close()` every method raises `RuntimeError`.
    """

    def __init__(self, graph: Graph) -> None:
        self._graph = graph
        self._values: Dict[str, np.ndarray] = {}
        self._closed = False
        logger.debug("Opened session over graph with %d nodes", len(graph))

    @property
    def graph(self) -> Graph:
        return self._graph

    @property
    def closed(self) -> bool:
        return self._closed

    def _check_open(self) -> None:
        if self._closed:
            raise RuntimeError("Attempted to use a closed Session.")

    def _resolve(self, fetch: Fetch) -> Operand:
        if isinstance(fetch, Operand):
            if fetch.graph is not self._graph:
                raise ValueError(f"Operand {fetch.name!r} belongs to a different graph")
            return fetch
        return self._graph.get(fetch)

    def initialize_variables(self) -> None:
        """
        Run the initializer of every variable that has no value yet.
        """
        self._check_open()
        for var in self._graph.variables:
            if var.name not in self._values:
                self._values[var.name] = var.initial_value()

    def assign(self, name: str, value: Any) -> None:
        """
        Overwrite a variable's value.

        Raises
        ------
        KeyError
            If `name` is not a variable of the graph.
        ValueError
            If the value's shape differs from the variable's shape.
        """
        self._check_open()
        var = self._graph.get(name)
        if not isinstance(var, Variable):
            raise KeyError(f"Graph node {name!r} is not a variable")
        arr = np.asarray(value, dtype=var.dtype)
        if arr.shape != var.shape:
            raise ValueError(
                f"Cannot assign value of shape {arr.shape} to variable {name!r} "
                f"of shape {var.shape}"
            )
        self._values[name] = arr.copy()

    def run_fetch(
        self,
        fetches: Sequence[Fetch],
        feed_dict: Optional[Mapping[Fetch, Any]] = None,
    ) -> list:
        """
        Evaluate operands and return their values in the order requested.

        Parameters
        ----------
        fetches : Sequence[str | Operand]
            Operands to evaluate, by name or handle.
        feed_dict : Mapping[str | Operand, array-like], optional
            Values for placeholders.

        Returns
        -------
        list[np.ndarray]
            One array per fetch. Variable values are returned as copies.

        Raises
        ------
        ValueError
            If a required placeholder is not fed or a fed value does not
            match the placeholder's static shape.
        RuntimeError
            If a variable is read before initialization.
        """
        self._check_open()
        feeds: Dict[str, np.ndarray] = {}
        for key, value in (feed_dict or {}).items():
            node = self._resolve(key)
            if not isinstance(node, Placeholder):
                raise ValueError(f"Can only feed placeholders, got {node.name!r}")
            arr = np.asarray(value, dtype=node.dtype)
            self._check_feed_shape(node, arr)
            feeds[node.name] = arr

        cache: Dict[str, np.ndarray] = {}
        results = []
        for fetch in fetches:
            node = self._resolve(fetch)
            value = self._evaluate(node, feeds, cache)
            results.append(value.copy() if isinstance(node, Variable) else value)
        return results

    @staticmethod
    def _check_feed_shape(node: Placeholder, arr: np.ndarray) -> None:
        expected = node.shape
        if len(expected) != arr.ndim or any(
            e >= 0 and e != a for e, a in zip(expected, arr.shape)
        ):
            raise ValueError(
                f"Fed value of shape {arr.shape} is incompatible with placeholder "
                f"{node.name!r} of shape {expected}"
            )

    def _evaluate(
        self,
        node: Operand,
        feeds: Dict[str, np.ndarray],
        cache: Dict[str, np.ndarray],
    ) -> np.ndarray:
        if node.name in cache:
            return cache[node.name]

        if isinstance(node, Placeholder):
            if node.name not in feeds:
                raise ValueError(f"Placeholder {node.name!r} must be fed a value")
            value = feeds[node.name]
        elif isinstance(node, Variable):
            if node.name not in self._values:
                raise RuntimeError(f"Variable {node.name!r} has not been initialized")
            value = self._values[node.name]
        else:
            args = [self._evaluate(i, feeds, cache) for i in node.inputs]
            value = KernelRegistry.get(node.kind)(*args, **node.attrs)

        cache[node.name] = value
        return value

    def close(self) -> None:
        """
        Release variable values. Idempotent.
        """
        if self._closed:
            return
        self._values.clear()
        self._closed = True
        logger.debug("Closed session")

    def __enter__(self) -> "Session":
        self._check_open()
        return self

    def __exit__(self, exc_type, exc, tb) -> None:
        self.close()

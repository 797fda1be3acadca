"""
Weight initializer contract and fan computation.

Initializers receive a variable shape plus optional `fan_in` / `fan_out`
overrides from the owning layer and return a fresh array. Fans not supplied
by the layer are derived from a channels-last shape by
`_calculate_fan_in_and_fan_out`.
"""

from abc import ABC, abstractmethod
from typing import Any, Callable, Dict, Optional, Tuple


class _WeightInitializer(ABC):
    """Registry-backed initializer keyed by name."""

    INITIALIZERS: Dict[str, Callable] = {}

    @classmethod
    @abstractmethod
    def register_initializer(
        cls, name: str, *, overwrite: bool = False
    ) -> Callable[[Callable], Callable]: ...

    @classmethod
    @abstractmethod
    def available(cls) -> tuple[str, ...]: ...

    @abstractmethod
    def __call__(
        self,
        shape: Tuple[int, ...],
        *,
        fan_in: Optional[int] = None,
        fan_out: Optional[int] = None,
        dtype: Any = None,
    ) -> Any: ...


def _calculate_fan_in_and_fan_out(shape: Tuple[int, ...]) -> Tuple[int, int]:
    """
    Compute both fan-in and fan-out values for a channels-last weight shape.

    Fan-in represents the number of inputs to a single output unit, while
    fan-out represents the number of outputs influenced by a single input
    unit.

    Parameters
    ----------
    shape:
        Shape of the weight tensor. Dense kernels are (in, out); convolution
        kernels are (k1, ..., kn, in_channels, out_channels).

    Returns
    -------
    tuple[int, int]
        A tuple of (fan_in, fan_out).
    """
    if len(shape) == 0:
        return 1, 1
    if len(shape) == 1:
        # Bias or vector parameter
        return int(shape[0]), int(shape[0])
    if len(shape) == 2:
        return int(shape[0]), int(shape[1])

    receptive_field = 1
    for d in shape[:-2]:
        receptive_field *= int(d)
    return int(shape[-2]) * receptive_field, int(shape[-1]) * receptive_field

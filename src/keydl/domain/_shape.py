"""
Shape helpers shared by the domain and infrastructure layers.

A shape is a plain tuple of ints. The leading axis of layer shapes is the
batch axis, which is unknown at graph-construction time and represented by
the sentinel `UNKNOWN_DIM` (-1).
"""

from __future__ import annotations

from typing import Sequence, Tuple

Shape = Tuple[int, ...]

UNKNOWN_DIM: int = -1


def make_shape(dims: Sequence[int]) -> Shape:
    """Normalize a sequence of dimension sizes into a `Shape` tuple."""
    return tuple(int(d) for d in dims)


def is_known(dim: int) -> bool:
    """Return True if `dim` is a concrete (non-sentinel) extent."""
    return int(dim) != UNKNOWN_DIM


def num_elements(shape: Sequence[int]) -> int:
    """
    Return the number of scalar elements described by `shape`.

    Parameters
    ----------
    shape : Sequence[int]
        Fully-known shape (no `UNKNOWN_DIM` entries).

    Returns
    -------
    int
        Product of all extents (1 for the scalar shape `()`).

    Raises
    ------
    ValueError
        If any extent is unknown.
    """
    total = 1
    for d in shape:
        if not is_known(d):
            raise ValueError(f"Cannot count elements of partially-known shape {shape}")
        total *= int(d)
    return total


def shape_to_str(shape: Sequence[int]) -> str:
    """
    Format a shape the way model summaries print it, e.g. `[-1, 28, 28, 32]`.
    """
    return "[" + ", ".join(str(int(d)) for d in shape) + "]"

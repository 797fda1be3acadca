"""
Shape-manipulation and linear-algebra kernels (CPU, NumPy).

- `bias_add_cpu` : broadcast a vector over the last axis
- `matmul_cpu`   : (..., in) @ (in, out)
- `reshape_cpu`  : reshape with a -1 wildcard (used by Flatten)
- `slice_cpu`    : extract a sub-array from `begin` with extents `size`
                   (-1 meaning "through the end"), used by Cropping layers
"""

from __future__ import annotations

from typing import Sequence

import numpy as np


def bias_add_cpu(x: np.ndarray, b: np.ndarray) -> np.ndarray:
    """
    Add a bias vector along the last (channel / feature) axis.

    Raises
    ------
    ValueError
        If the bias length does not match the last axis of `x`.
    """
    if b.ndim != 1 or b.shape[0] != x.shape[-1]:
        raise ValueError(
            f"bias shape mismatch: expected ({x.shape[-1]},), got {b.shape}"
        )
    return (x + b).astype(x.dtype, copy=False)


def matmul_cpu(x: np.ndarray, w: np.ndarray) -> np.ndarray:
    if x.shape[-1] != w.shape[0]:
        raise ValueError(f"matmul shape mismatch: {x.shape} @ {w.shape}")
    return np.matmul(x, w).astype(x.dtype, copy=False)


def reshape_cpu(x: np.ndarray, *, new_shape: Sequence[int]) -> np.ndarray:
    return x.reshape(tuple(int(d) for d in new_shape))


def slice_cpu(x: np.ndarray, *, begin: Sequence[int], size: Sequence[int]) -> np.ndarray:
    """
    Slice `x` starting at `begin` with extents `size`.

    Parameters
    ----------
    x : np.ndarray
        Input array.
    begin : Sequence[int]
        Start offset per axis.
    size : Sequence[int]
        Extent per axis; -1 selects everything from `begin` to the end.

    Raises
    ------
    ValueError
        If `begin`/`size` lengths differ from `x.ndim` or the slice would run
        past the end of an axis.
    """
    if len(begin) != x.ndim or len(size) != x.ndim:
        raise ValueError(
            f"slice expects {x.ndim} begin/size entries, got {len(begin)}/{len(size)}"
        )
    index = []
    for axis, (b, s) in enumerate(zip(begin, size)):
        stop = x.shape[axis] if s == -1 else b + s
        if b < 0 or stop > x.shape[axis] or stop < b:
            raise ValueError(
                f"slice [{b}:{stop}] out of range for axis {axis} of extent {x.shape[axis]}"
            )
        index.append(slice(b, stop))
    return x[tuple(index)]

"""
CPU reference implementations for 2D pooling operations (NumPy backend).

This module provides NumPy-based implementations of windowed 2D pooling for
tensors in **NHWC** layout.

Design notes
------------
- Padding semantics are explicit and carefully chosen:
  - MaxPool uses `-inf` padding so padded values never win.
  - AvgPool averages only over the real (non-padded) cells of each window,
    matching the usual SAME-padding convention for average pooling.
"""

from __future__ import annotations

from typing import Tuple

import numpy as np

from ...domain._padding import ConvPadding
from .conv2d_cpu import extract_windows, pad_nhwc


def maxpool2d_forward_cpu(
    x: np.ndarray,
    *,
    pool_size: Tuple[int, int],
    strides: Tuple[int, int],
    padding: ConvPadding,
) -> np.ndarray:
    """
    MaxPool2D forward pass (CPU, NumPy) for NHWC tensors.

    Parameters
    ----------
    x : np.ndarray
        Input tensor of shape (N, H, W, C).
    pool_size : tuple[int, int]
        Pooling window size.
    strides : tuple[int, int]
        Pooling stride.
    padding : ConvPadding
        SAME or VALID.

    Returns
    -------
    np.ndarray
        Output tensor of shape (N, H_out, W_out, C).
    """
    x_pad = pad_nhwc(x, pool_size, strides, padding, fill=-np.inf)
    windows = extract_windows(x_pad, pool_size, strides)
    return windows.max(axis=(-2, -1)).astype(x.dtype, copy=False)


def avgpool2d_forward_cpu(
    x: np.ndarray,
    *,
    pool_size: Tuple[int, int],
    strides: Tuple[int, int],
    padding: ConvPadding,
) -> np.ndarray:
    """
    AvgPool2D forward pass (CPU, NumPy) for NHWC tensors.

    Returns
    -------
    np.ndarray
        Output tensor of shape (N, H_out, W_out, C).

    Notes
    -----
    Padded cells are excluded from each window's divisor.
    """
    x_pad = pad_nhwc(x, pool_size, strides, padding)
    ones = np.ones((1,) + x.shape[1:3] + (1,), dtype=x.dtype)
    count_pad = pad_nhwc(ones, pool_size, strides, padding)

    sums = extract_windows(x_pad, pool_size, strides).sum(axis=(-2, -1))
    counts = extract_windows(count_pad, pool_size, strides).sum(axis=(-2, -1))
    return (sums / counts).astype(x.dtype, copy=False)

"""
CPU-based Conv2D kernels for the KeyDL reference engine.

This module provides reference implementations of 2D convolution and
depthwise 2D convolution forward passes using NumPy on the CPU. The kernels
extract sliding windows with `sliding_window_view` and contract them against
the kernel with `einsum`, which keeps the code readable while avoiding
per-pixel Python loops.

Design goals
------------
- Serve as a correctness baseline for Conv2D / DepthwiseConv2D layers
- Follow the SAME / VALID padding semantics of the shape contracts exactly

Non-goals
---------
- Backward passes (training is out of scope)
- Dilation, groups, or asymmetric user-defined padding

Tensor layout
-------------
All tensors follow the NHWC layout:

- N: batch size
- H: height
- W: width
- C: channels

Kernels are laid out as (K_h, K_w, C_in, C_out) for standard convolutions and
(K_h, K_w, C_in, M) for depthwise convolutions, where M is the depth
multiplier.
"""

from __future__ import annotations

from typing import Tuple

import numpy as np
from numpy.lib.stride_tricks import sliding_window_view

from ...domain._padding import ConvPadding
from ...domain._shape_contract import check_padding_supported, same_padding_amounts


def pad_nhwc(
    x: np.ndarray,
    kernel_size: Tuple[int, int],
    strides: Tuple[int, int],
    padding: ConvPadding,
    *,
    fill: float = 0.0,
) -> np.ndarray:
    """
    Apply SAME padding to the spatial axes of an NHWC array.

    Parameters
    ----------
    x : np.ndarray
        Input of shape (N, H, W, C).
    kernel_size, strides : tuple[int, int]
        Window geometry.
    padding : ConvPadding
        SAME pads; VALID returns `x` unchanged.
    fill : float, optional
        Constant used for padded cells (`-inf` for max pooling).

    Returns
    -------
    np.ndarray
        The padded array.
    """
    check_padding_supported(padding)
    if padding is ConvPadding.VALID:
        return x

    _, H, W, _ = x.shape
    p_top, p_bottom = same_padding_amounts(H, kernel_size[0], strides[0])
    p_left, p_right = same_padding_amounts(W, kernel_size[1], strides[1])
    return np.pad(
        x,
        pad_width=((0, 0), (p_top, p_bottom), (p_left, p_right), (0, 0)),
        mode="constant",
        constant_values=fill,
    )


def extract_windows(
    x_pad: np.ndarray, kernel_size: Tuple[int, int], strides: Tuple[int, int]
) -> np.ndarray:
    """
    Return strided sliding windows over the spatial axes of a padded NHWC array.

    Returns
    -------
    np.ndarray
        Read-only view of shape (N, H_out, W_out, C, K_h, K_w).
    """
    k_h, k_w = kernel_size
    s_h, s_w = strides
    windows = sliding_window_view(x_pad, (k_h, k_w), axis=(1, 2))
    return windows[:, ::s_h, ::s_w]


def conv2d_forward_cpu(
    x: np.ndarray,
    w: np.ndarray,
    *,
    strides: Tuple[int, int],
    padding: ConvPadding,
) -> np.ndarray:
    """
    Compute the forward pass of a 2D convolution (CPU, NumPy).

    Parameters
    ----------
    x : np.ndarray
        Input tensor of shape (N, H, W, C_in).
    w : np.ndarray
        Kernel of shape (K_h, K_w, C_in, C_out).
    strides : tuple[int, int]
        Convolution stride (s_h, s_w).
    padding : ConvPadding
        SAME or VALID.

    Returns
    -------
    np.ndarray
        Output tensor of shape (N, H_out, W_out, C_out).

    Raises
    ------
    ValueError
        If the number of input channels in `x` does not match the kernel.
    """
    K_h, K_w, C_in, _ = w.shape
    if x.shape[3] != C_in:
        raise ValueError(
            f"in_channels mismatch: x has {x.shape[3]}, kernel has {C_in}"
        )

    x_pad = pad_nhwc(x, (K_h, K_w), strides, padding)
    windows = extract_windows(x_pad, (K_h, K_w), strides)
    y = np.einsum("nhwcij,ijcf->nhwf", windows, w, optimize=True)
    return y.astype(x.dtype, copy=False)


def depthwise_conv2d_forward_cpu(
    x: np.ndarray,
    w: np.ndarray,
    *,
    strides: Tuple[int, int],
    padding: ConvPadding,
) -> np.ndarray:
    """
    Compute the forward pass of a depthwise 2D convolution (CPU, NumPy).

    Each input channel is convolved with its own `M` filters; output channel
    `c * M + m` holds the response of input channel `c` to filter `m`.

    Parameters
    ----------
    x : np.ndarray
        Input tensor of shape (N, H, W, C).
    w : np.ndarray
        Kernel of shape (K_h, K_w, C, M).
    strides : tuple[int, int]
        Convolution stride (s_h, s_w).
    padding : ConvPadding
        SAME or VALID.

    Returns
    -------
    np.ndarray
        Output tensor of shape (N, H_out, W_out, C * M).
    """
    K_h, K_w, C, M = w.shape
    if x.shape[3] != C:
        raise ValueError(f"in_channels mismatch: x has {x.shape[3]}, kernel has {C}")

    x_pad = pad_nhwc(x, (K_h, K_w), strides, padding)
    windows = extract_windows(x_pad, (K_h, K_w), strides)
    y = np.einsum("nhwcij,ijcm->nhwcm", windows, w, optimize=True)
    N, H_out, W_out = y.shape[:3]
    return y.reshape(N, H_out, W_out, C * M).astype(x.dtype, copy=False)

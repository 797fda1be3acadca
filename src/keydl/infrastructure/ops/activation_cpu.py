"""
Elementwise activation kernels (CPU, NumPy).

Every function maps an array to an array of the same shape and dtype.
`softmax` normalizes over the last axis using the max-shift trick for
numerical stability.
"""

from __future__ import annotations

from typing import Optional

import numpy as np


def identity_cpu(x: np.ndarray) -> np.ndarray:
    return x


def relu_cpu(
    x: np.ndarray,
    *,
    max_value: Optional[float] = None,
    threshold: float = 0.0,
) -> np.ndarray:
    """
    Rectified linear unit with optional threshold and saturation.

        f(x) = x  if x >= threshold else 0
        f(x) = min(f(x), max_value)  when max_value is given
    """
    y = np.where(x >= threshold, x, np.zeros_like(x))
    if max_value is not None:
        y = np.minimum(y, np.asarray(max_value, dtype=x.dtype))
    return y.astype(x.dtype, copy=False)


def relu6_cpu(x: np.ndarray) -> np.ndarray:
    return relu_cpu(x, max_value=6.0)


def sigmoid_cpu(x: np.ndarray) -> np.ndarray:
    return (1.0 / (1.0 + np.exp(-x))).astype(x.dtype, copy=False)


def tanh_cpu(x: np.ndarray) -> np.ndarray:
    return np.tanh(x)


def softmax_cpu(x: np.ndarray) -> np.ndarray:
    """Softmax over the last axis."""
    shifted = x - np.max(x, axis=-1, keepdims=True)
    e = np.exp(shifted)
    return (e / np.sum(e, axis=-1, keepdims=True)).astype(x.dtype, copy=False)


def elu_cpu(x: np.ndarray) -> np.ndarray:
    return np.where(x > 0, x, np.expm1(np.minimum(x, 0))).astype(x.dtype, copy=False)


def softplus_cpu(x: np.ndarray) -> np.ndarray:
    return np.logaddexp(0.0, x).astype(x.dtype, copy=False)


def swish_cpu(x: np.ndarray) -> np.ndarray:
    return (x * sigmoid_cpu(x)).astype(x.dtype, copy=False)

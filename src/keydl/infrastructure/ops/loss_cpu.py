"""
Loss and metric kernels (CPU, NumPy).

Each kernel reduces a batch of predictions and targets of identical shape to
a scalar float32 array. Classification kernels expect one-hot targets.
"""

from __future__ import annotations

import numpy as np

_EPS = 1e-7


def _check_same_shape(pred: np.ndarray, target: np.ndarray, op: str) -> None:
    if pred.shape != target.shape:
        raise ValueError(
            f"{op}: prediction shape {pred.shape} does not match target shape {target.shape}"
        )


def softmax_cross_entropy_with_logits_cpu(logits: np.ndarray, labels: np.ndarray) -> np.ndarray:
    """
    Mean categorical cross-entropy of softmax(logits) against one-hot labels.

    Uses the log-sum-exp formulation so large logits do not overflow.
    """
    _check_same_shape(logits, labels, "softmax_cross_entropy_with_logits")
    shifted = logits - np.max(logits, axis=-1, keepdims=True)
    log_probs = shifted - np.log(np.sum(np.exp(shifted), axis=-1, keepdims=True))
    per_sample = -np.sum(labels * log_probs, axis=-1)
    return np.asarray(np.mean(per_sample), dtype=np.float32)


def binary_crossentropy_cpu(pred: np.ndarray, labels: np.ndarray) -> np.ndarray:
    """
    Mean binary cross-entropy for probability predictions in (0, 1).
    """
    _check_same_shape(pred, labels, "binary_crossentropy")
    p = np.clip(pred, _EPS, 1.0 - _EPS)
    loss = -(labels * np.log(p) + (1.0 - labels) * np.log(1.0 - p))
    return np.asarray(np.mean(loss), dtype=np.float32)


def mse_cpu(pred: np.ndarray, target: np.ndarray) -> np.ndarray:
    _check_same_shape(pred, target, "mse")
    return np.asarray(np.mean((pred - target) ** 2), dtype=np.float32)


def mae_cpu(pred: np.ndarray, target: np.ndarray) -> np.ndarray:
    _check_same_shape(pred, target, "mae")
    return np.asarray(np.mean(np.abs(pred - target)), dtype=np.float32)


def accuracy_cpu(pred: np.ndarray, labels: np.ndarray) -> np.ndarray:
    """
    Fraction of rows whose arg-max prediction equals the arg-max label.
    """
    _check_same_shape(pred, labels, "accuracy")
    hits = np.argmax(pred, axis=-1) == np.argmax(labels, axis=-1)
    return np.asarray(np.mean(hits), dtype=np.float32)

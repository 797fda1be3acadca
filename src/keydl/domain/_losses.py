"""
Loss functions and metrics bound to a model at compile time.

Both enumerations map onto engine ops that reduce a batch of predictions and
targets to a scalar. They are used by `Sequential.evaluate`; training loops
are out of scope.
"""

from __future__ import annotations

from enum import Enum

from ._errors import ConfigurationError


def _resolve(enum_cls, value, kind: str):
    if isinstance(value, enum_cls):
        return value
    if isinstance(value, str):
        try:
            return enum_cls(value.lower())
        except ValueError:
            pass
    available = ", ".join(m.value for m in enum_cls)
    raise ConfigurationError(f"Unsupported {kind}: {value!r}. Available: {available}")


class LossFunctions(Enum):
    """
    Supported loss functions.

    Attributes
    ----------
    SOFT_MAX_CROSS_ENTROPY_WITH_LOGITS
        Softmax over raw logits followed by categorical cross-entropy against
        one-hot targets, averaged over the batch.
    BINARY_CROSSENTROPY
        Cross-entropy between probabilities in (0, 1) and binary targets.
    MSE
        Mean squared error.
    MAE
        Mean absolute error.
    """

    SOFT_MAX_CROSS_ENTROPY_WITH_LOGITS = "softmax_cross_entropy_with_logits"
    BINARY_CROSSENTROPY = "binary_crossentropy"
    MSE = "mse"
    MAE = "mae"

    @classmethod
    def resolve(cls, value: "LossFunctions | str") -> "LossFunctions":
        """Accept a member or its string value."""
        return _resolve(cls, value, "loss function")


class Metrics(Enum):
    """
    Supported evaluation metrics.

    Attributes
    ----------
    ACCURACY
        Fraction of samples whose arg-max prediction matches the arg-max of
        the one-hot target.
    MSE
        Mean squared error.
    MAE
        Mean absolute error.
    """

    ACCURACY = "accuracy"
    MSE = "mse"
    MAE = "mae"

    @classmethod
    def resolve(cls, value: "Metrics | str") -> "Metrics":
        """Accept a member or its string value."""
        return _resolve(cls, value, "metric")

"""
Activation kinds available to layers.

Each member maps to an engine op of the same name. Layers that carry an
activation (Conv2D, DepthwiseConv2D, Dense, ActivationLayer) store one of
these members and apply it after their primary transform.
"""

from __future__ import annotations

from enum import Enum

from ._errors import ConfigurationError


class Activations(Enum):
    """
    Enumeration of supported activation functions.

    Attributes
    ----------
    LINEAR   : identity, f(x) = x
    RELU     : max(x, 0)
    RELU6    : min(max(x, 0), 6)
    SIGMOID  : 1 / (1 + exp(-x))
    TANH     : tanh(x)
    SOFTMAX  : exp(x) / sum(exp(x)) over the last axis
    ELU      : x if x > 0 else exp(x) - 1
    SOFTPLUS : log(1 + exp(x))
    SWISH    : x * sigmoid(x)
    """

    LINEAR = "linear"
    RELU = "relu"
    RELU6 = "relu6"
    SIGMOID = "sigmoid"
    TANH = "tanh"
    SOFTMAX = "softmax"
    ELU = "elu"
    SOFTPLUS = "softplus"
    SWISH = "swish"

    @classmethod
    def resolve(cls, value: "Activations | str") -> "Activations":
        """
        Accept a member or its string value ("relu", "Relu", ...).

        Raises
        ------
        ConfigurationError
            If the name does not match any member.
        """
        if isinstance(value, cls):
            return value
        if isinstance(value, str):
            try:
                return cls(value.lower())
            except ValueError:
                pass
        available = ", ".join(m.value for m in cls)
        raise ConfigurationError(
            f"Unsupported activation: {value!r}. Available: {available}"
        )

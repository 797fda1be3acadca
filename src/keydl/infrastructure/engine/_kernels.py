"""
Op-kind to kernel registry for the reference engine.

Kernels are registered by op kind through a decorator-based registry, in the
same way weight initializers are registered. A kernel receives the evaluated
input arrays positionally and the op's static attributes as keyword
arguments, and returns a NumPy array.

Usage example
-------------
Registering a kernel:

    @KernelRegistry.register_kernel("relu")
    def _relu(x, **attrs): ...

Resolving a kernel:

    fn = KernelRegistry.get("relu")
"""

from __future__ import annotations

from typing import Callable, ClassVar, Dict, TypeVar

import numpy as np

from ..ops.activation_cpu import (
    elu_cpu,
    identity_cpu,
    relu6_cpu,
    relu_cpu,
    sigmoid_cpu,
    softmax_cpu,
    softplus_cpu,
    swish_cpu,
    tanh_cpu,
)
from ..ops.array_cpu import bias_add_cpu, matmul_cpu, reshape_cpu, slice_cpu
from ..ops.conv2d_cpu import conv2d_forward_cpu, depthwise_conv2d_forward_cpu
from ..ops.loss_cpu import (
    accuracy_cpu,
    binary_crossentropy_cpu,
    mae_cpu,
    mse_cpu,
    softmax_cross_entropy_with_logits_cpu,
)
from ..ops.pool2d_cpu import avgpool2d_forward_cpu, maxpool2d_forward_cpu

T = TypeVar("T", bound=Callable[..., np.ndarray])


class KernelRegistry:
    """
    Class-level registry mapping op kinds to NumPy kernels.
    """

    KERNELS: ClassVar[Dict[str, Callable[..., np.ndarray]]] = {}

    @classmethod
    def register_kernel(cls, kind: str, *, overwrite: bool = False) -> Callable[[T], T]:
        """
        Decorator to register a kernel under `kind`.

        Parameters
        ----------
        kind:
            Op kind the kernel implements.
        overwrite:
            If False (default), raises if `kind` is already registered.
        """
        if not isinstance(kind, str) or not kind:
            raise ValueError("Kernel kind must be a non-empty string")

        def decorator(func: T) -> T:
            if not overwrite and kind in cls.KERNELS:
                raise ValueError(f"Kernel already registered: {kind!r}")
            cls.KERNELS[kind] = func
            return func

        return decorator

    @classmethod
    def available(cls) -> tuple[str, ...]:
        """Return registered op kinds (sorted)."""
        return tuple(sorted(cls.KERNELS))

    @classmethod
    def get(cls, kind: str) -> Callable[..., np.ndarray]:
        """
        Resolve the kernel for `kind`.

        Raises
        ------
        KeyError
            If no kernel is registered for `kind`.
        """
        try:
            return cls.KERNELS[kind]
        except KeyError as e:
            available = ", ".join(cls.available()) or "<none>"
            raise KeyError(f"Unknown op kind: {kind!r}. Available: {available}") from e


def _register_all() -> None:
    reg = KernelRegistry.register_kernel

    reg("conv2d")(lambda x, w, **a: conv2d_forward_cpu(x, w, **a))
    reg("depthwise_conv2d")(lambda x, w, **a: depthwise_conv2d_forward_cpu(x, w, **a))
    reg("max_pool")(lambda x, **a: maxpool2d_forward_cpu(x, **a))
    reg("avg_pool")(lambda x, **a: avgpool2d_forward_cpu(x, **a))

    reg("bias_add")(lambda x, b: bias_add_cpu(x, b))
    reg("matmul")(lambda x, w: matmul_cpu(x, w))
    reg("reshape")(lambda x, **a: reshape_cpu(x, **a))
    reg("slice")(lambda x, **a: slice_cpu(x, **a))

    reg("linear")(identity_cpu)
    reg("relu")(lambda x, **a: relu_cpu(x, **a))
    reg("relu6")(relu6_cpu)
    reg("sigmoid")(sigmoid_cpu)
    reg("tanh")(tanh_cpu)
    reg("softmax")(softmax_cpu)
    reg("elu")(elu_cpu)
    reg("softplus")(softplus_cpu)
    reg("swish")(swish_cpu)

    reg("softmax_cross_entropy_with_logits")(softmax_cross_entropy_with_logits_cpu)
    reg("binary_crossentropy")(binary_crossentropy_cpu)
    reg("mse")(mse_cpu)
    reg("mae")(mae_cpu)
    reg("accuracy")(accuracy_cpu)


_register_all()
